from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from django.db import transaction
from django.db.models import Avg, Count, Q, Sum
from django.utils import timezone

from apps.inventory.models import InventoryItem, StockMovement
from apps.inventory.services.stock_service import InventoryService
from core.doc_numbers import get_next_doc_no
from shared.context import RequestContext
from shared.exceptions import NotFound, ValidationFailed
from shared.transitions import TransitionTable

from ..models import Customer, CustomerOrder, CustomerOrderItem

logger = logging.getLogger(__name__)

S = CustomerOrder.Status

ORDER_FIELDS = (
    "order_date",
    "expected_delivery_date",
    "priority",
    "delivery_address",
    "special_instructions",
)
ITEM_FIELDS = (
    "item_name",
    "product_type",
    "description",
    "material_source",
    "quantity",
    "unit",
    "rate",
    "work_amount",
    "tax_rate",
)


class CustomerOrderService:
    """
    Lifecycle of customer orders: creation with totals, status changes and their stock effects.

    Own-stock lines are reserved on confirmation, released then issued on dispatch and
    released on cancellation from confirmed/in_production. Lines are handled one at a
    time; a failure on a later line leaves earlier lines changed, but the whole
    transition shares one transaction with the status write.
    """

    TRANSITIONS = TransitionTable(
        "customer order",
        {
            S.DRAFT: [S.CONFIRMED, S.CANCELLED],
            S.CONFIRMED: [S.IN_PRODUCTION, S.CANCELLED],
            S.IN_PRODUCTION: [S.QUALITY_CHECK, S.CANCELLED],
            S.QUALITY_CHECK: [S.READY_FOR_DISPATCH, S.IN_PRODUCTION],
            S.READY_FOR_DISPATCH: [S.DISPATCHED],
            S.DISPATCHED: [S.DELIVERED],
            S.DELIVERED: [],
            S.CANCELLED: [],
        },
    )

    STATUS_TIMESTAMPS = {
        S.CONFIRMED: "confirmed_at",
        S.IN_PRODUCTION: "production_started_at",
        S.DISPATCHED: "dispatched_at",
        S.DELIVERED: "completed_at",
        S.CANCELLED: "cancelled_at",
    }

    @staticmethod
    def get_order(ctx: RequestContext, order_id, *, lock: bool = False) -> CustomerOrder:
        queryset = ctx.scope(CustomerOrder.objects)
        if lock:
            queryset = queryset.select_for_update()
        order = queryset.filter(pk=order_id).first()
        if order is None:
            raise NotFound("Order not found")
        return order

    @staticmethod
    def _resolve_customer(ctx: RequestContext, customer) -> Customer:
        customer_id = getattr(customer, "pk", customer)
        if not customer_id:
            raise ValidationFailed("Customer is required")
        found = ctx.scope(Customer.objects).filter(pk=customer_id).first()
        if found is None:
            raise ValidationFailed("Customer not found")
        if not found.is_active:
            raise ValidationFailed("Customer is inactive")
        return found

    @staticmethod
    def _validate_items(ctx: RequestContext, items: Optional[Iterable[dict]]) -> List[dict]:
        items = list(items or [])
        if not items:
            raise ValidationFailed("Order must contain at least one item")
        cleaned = []
        for index, raw in enumerate(items, start=1):
            line = {key: raw[key] for key in ITEM_FIELDS if key in raw and raw[key] is not None}
            if not line.get("item_name"):
                raise ValidationFailed(f"Item {index}: item name is required")
            if not line.get("product_type"):
                raise ValidationFailed(f"Item {index}: product type is required")
            quantity = Decimal(str(line.get("quantity", 0)))
            rate = Decimal(str(line.get("rate", 0)))
            if quantity <= 0:
                raise ValidationFailed(f"Item {index}: quantity must be greater than zero")
            if rate < 0:
                raise ValidationFailed(f"Item {index}: rate cannot be negative")
            inventory_item = raw.get("inventory_item")
            if inventory_item is not None:
                item_id = getattr(inventory_item, "pk", inventory_item)
                inventory_item = ctx.scope(InventoryItem.objects).filter(pk=item_id).first()
                if inventory_item is None:
                    raise ValidationFailed(f"Item {index}: inventory item not found")
            line["inventory_item"] = inventory_item
            cleaned.append(line)
        return cleaned

    @staticmethod
    def _write_items(order: CustomerOrder, items: List[dict]) -> None:
        for line in items:
            CustomerOrderItem.objects.create(order=order, **line)
        order.recalculate_totals()

    @staticmethod
    @transaction.atomic
    def create_order(ctx: RequestContext, data: Dict) -> CustomerOrder:
        customer = CustomerOrderService._resolve_customer(ctx, data.get("customer"))
        items = CustomerOrderService._validate_items(ctx, data.get("items"))
        fields = {key: data[key] for key in ORDER_FIELDS if key in data}
        fields.setdefault("order_date", timezone.localdate())
        if not fields.get("delivery_address"):
            fields["delivery_address"] = customer.shipping_address or customer.billing_address
        order = CustomerOrder.objects.create(
            company=ctx.company,
            created_by=ctx.actor,
            customer=customer,
            order_number=get_next_doc_no(company=ctx.company, doc_type="CO"),
            status=S.DRAFT,
            **fields,
        )
        CustomerOrderService._write_items(order, items)
        logger.info("Customer order %s created for %s with %d item(s)", order.order_number, customer.code, len(items))
        return order

    @staticmethod
    @transaction.atomic
    def update_order(ctx: RequestContext, order_id, data: Dict) -> CustomerOrder:
        order = CustomerOrderService.get_order(ctx, order_id, lock=True)
        if order.status != S.DRAFT:
            raise ValidationFailed("Only draft orders can be updated")
        update_fields = ["updated_by", "updated_at"]
        if "customer" in data:
            order.customer = CustomerOrderService._resolve_customer(ctx, data["customer"])
            update_fields.append("customer")
        for key in ORDER_FIELDS:
            if key in data:
                setattr(order, key, data[key])
                update_fields.append(key)
        order.updated_by = ctx.actor
        order.save(update_fields=update_fields)
        if "items" in data:
            items = CustomerOrderService._validate_items(ctx, data["items"])
            order.items.all().delete()
            CustomerOrderService._write_items(order, items)
        logger.info("Customer order %s updated", order.order_number)
        return order

    @staticmethod
    def _apply_stock_effects(ctx: RequestContext, order: CustomerOrder, old_status: str, new_status: str) -> int:
        if old_status == S.DRAFT and new_status == S.CONFIRMED:
            operation = "reserve"
        elif new_status == S.DISPATCHED:
            operation = "deduct"
        elif new_status == S.CANCELLED and old_status in (S.CONFIRMED, S.IN_PRODUCTION):
            operation = "release"
        else:
            return 0

        handled = 0
        for line in order.items.select_related("inventory_item"):
            if not line.affects_stock:
                continue
            if operation == "reserve":
                InventoryService.reserve_stock(ctx, line.inventory_item_id, line.quantity, reference=order.order_number)
            elif operation == "release":
                InventoryService.release_reserved_stock(ctx, line.inventory_item_id, line.quantity, reference=order.order_number)
            else:
                InventoryService.release_reserved_stock(ctx, line.inventory_item_id, line.quantity, reference=order.order_number)
                InventoryService.update_stock(
                    ctx,
                    line.inventory_item_id,
                    line.quantity,
                    StockMovement.MovementType.OUT,
                    reference_type=StockMovement.ReferenceType.CUSTOMER_ORDER,
                    reference_id=order.pk,
                    reference_number=order.order_number,
                    notes=f"Dispatched against {order.order_number}",
                )
            handled += 1
        logger.info(
            "Stock %s for order %s (%s -> %s): %d item(s)",
            operation,
            order.order_number,
            old_status,
            new_status,
            handled,
        )
        return handled

    @staticmethod
    @transaction.atomic
    def update_status(ctx: RequestContext, order_id, new_status: str, *, reason: str = "") -> CustomerOrder:
        order = CustomerOrderService.get_order(ctx, order_id, lock=True)
        old_status = order.status
        CustomerOrderService.TRANSITIONS.ensure(old_status, new_status)
        CustomerOrderService._apply_stock_effects(ctx, order, old_status, new_status)

        order.status = new_status
        order.updated_by = ctx.actor
        update_fields = ["status", "updated_by", "updated_at"]
        stamp = CustomerOrderService.STATUS_TIMESTAMPS.get(new_status)
        if stamp:
            setattr(order, stamp, timezone.now())
            update_fields.append(stamp)
        if new_status == S.CANCELLED and reason:
            order.cancellation_reason = reason
            update_fields.append("cancellation_reason")
        order.save(update_fields=update_fields)
        logger.info("Customer order %s moved from %s to %s", order.order_number, old_status, new_status)
        return order

    @staticmethod
    @transaction.atomic
    def cancel_order(ctx: RequestContext, order_id, reason: str = "") -> CustomerOrder:
        order = CustomerOrderService.get_order(ctx, order_id, lock=True)
        if order.status == S.CANCELLED:
            raise ValidationFailed("Order is already cancelled")
        if order.status in (S.DISPATCHED, S.DELIVERED):
            raise ValidationFailed("Cannot cancel dispatched or delivered orders")
        return CustomerOrderService.update_status(ctx, order.pk, S.CANCELLED, reason=reason)

    @staticmethod
    def stock_impact_summary(ctx: RequestContext, order_id) -> Dict:
        order = CustomerOrderService.get_order(ctx, order_id)
        lines = list(order.items.select_related("inventory_item"))
        items = []
        for line in lines:
            item = line.inventory_item
            items.append(
                {
                    "item_name": line.item_name,
                    "material_source": line.material_source,
                    "quantity": line.quantity,
                    "inventory_item": item.pk if item else None,
                    "inventory_item_code": item.code if item else None,
                    "available_stock": item.available_stock if item else None,
                    "reserved_stock": item.reserved_stock if item else None,
                    "stock_impact": "Will affect inventory" if line.affects_stock else "No stock impact",
                }
            )
        return {
            "order_id": order.pk,
            "order_number": order.order_number,
            "order_status": order.status,
            "total_items": len(lines),
            "stock_affected_items": sum(1 for line in lines if line.affects_stock),
            "items": items,
        }

    @staticmethod
    def stats(ctx: RequestContext, start_date=None, end_date=None) -> Dict:
        orders = ctx.scope(CustomerOrder.objects)
        if start_date:
            orders = orders.filter(order_date__gte=start_date)
        if end_date:
            orders = orders.filter(order_date__lte=end_date)

        by_status = {value: 0 for value in S.values}
        for row in orders.values("status").annotate(count=Count("id")):
            by_status[row["status"]] = row["count"]

        revenue_orders = orders.filter(status__in=[S.DELIVERED])
        totals = orders.aggregate(average=Avg("total_amount"), total_value=Sum("total_amount"))
        top_customers = (
            orders.exclude(status=S.CANCELLED)
            .values("customer_id", "customer__code", "customer__name")
            .annotate(order_count=Count("id"), total_value=Sum("total_amount"))
            .order_by("-total_value")[:5]
        )
        return {
            "total_orders": sum(by_status.values()),
            "by_status": by_status,
            "total_value": totals["total_value"] or Decimal("0"),
            "total_revenue": revenue_orders.aggregate(total=Sum("total_amount"))["total"] or Decimal("0"),
            "average_order_value": Decimal(str(totals["average"] or 0)).quantize(Decimal("0.01")),
            "pending_orders": orders.filter(Q(status=S.DRAFT) | Q(status=S.CONFIRMED)).count(),
            "top_customers": [
                {
                    "customer_id": row["customer_id"],
                    "code": row["customer__code"],
                    "name": row["customer__name"],
                    "order_count": row["order_count"],
                    "total_value": row["total_value"] or Decimal("0"),
                }
                for row in top_customers
            ],
        }
