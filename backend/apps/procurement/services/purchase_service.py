from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List

from django.db import transaction
from django.db.models import Avg, Count, Sum
from django.utils import timezone

from apps.inventory.models import InventoryItem, StockMovement
from apps.inventory.services.stock_service import InventoryService
from core.doc_numbers import get_next_doc_no, next_free_code
from shared.context import RequestContext
from shared.exceptions import NotFound, ValidationFailed
from shared.transitions import TransitionTable

from ..models import PurchaseOrder, PurchaseOrderItem, Supplier

logger = logging.getLogger(__name__)

S = PurchaseOrder.Status

ORDER_FIELDS = ("order_date", "expected_delivery_date", "priority", "delivery_address", "terms", "notes")
ITEM_FIELDS = ("item_name", "description", "quantity", "unit", "rate", "tax_rate")
EDITABLE_STATUSES = (S.DRAFT, S.PENDING)
RECEIVABLE_STATUSES = (S.ORDERED, S.PARTIAL)


class SupplierService:
    @staticmethod
    @transaction.atomic
    def create_supplier(ctx: RequestContext, data: Dict) -> Supplier:
        data = dict(data)
        code = (data.get("code") or "").strip().upper()
        if code and ctx.scope(Supplier.objects).filter(code=code).exists():
            raise ValidationFailed("Supplier code already exists")
        data["code"] = code or next_free_code(company=ctx.company, model=Supplier, field="code", doc_type="SUP")
        supplier = Supplier.objects.create(company=ctx.company, created_by=ctx.actor, **data)
        logger.info("Supplier %s created in company %s", supplier.code, ctx.company_id)
        return supplier

    @staticmethod
    def update_rating(ctx: RequestContext, supplier: Supplier, rating) -> Supplier:
        try:
            value = Decimal(str(rating))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationFailed("Rating must be a number between 0 and 5")
        if not Decimal("0") <= value <= Decimal("5"):
            raise ValidationFailed("Rating must be between 0 and 5")
        supplier.rating = value
        supplier.save(update_fields=["rating", "updated_at"])
        return supplier

    @staticmethod
    def stats(ctx: RequestContext) -> Dict:
        suppliers = ctx.scope(Supplier.objects)
        active = suppliers.active()
        return {
            "total_suppliers": suppliers.count(),
            "active_suppliers": active.count(),
            "inactive_suppliers": suppliers.filter(is_active=False).count(),
            "by_category": {row["category"]: row["count"] for row in active.values("category").annotate(count=Count("id"))},
            "average_rating": Decimal(str(active.aggregate(avg=Avg("rating"))["avg"] or 0)).quantize(Decimal("0.1")),
        }


class PurchaseOrderService:
    TRANSITIONS = TransitionTable(
        "purchase order",
        {
            S.DRAFT: [S.PENDING, S.CANCELLED],
            S.PENDING: [S.APPROVED, S.CANCELLED],
            S.APPROVED: [S.ORDERED, S.CANCELLED],
            S.ORDERED: [S.PARTIAL, S.RECEIVED, S.CANCELLED],
            S.PARTIAL: [S.RECEIVED, S.CANCELLED],
            S.RECEIVED: [],
            S.CANCELLED: [],
        },
    )

    STATUS_STAMPS = {
        S.APPROVED: ("approved_at", "approved_by"),
        S.ORDERED: ("ordered_at", "ordered_by"),
        S.RECEIVED: ("received_at", "received_by"),
        S.CANCELLED: ("cancelled_at", "cancelled_by"),
    }

    @staticmethod
    def get_order(ctx: RequestContext, order_id, *, lock: bool = False) -> PurchaseOrder:
        queryset = ctx.scope(PurchaseOrder.objects)
        if lock:
            queryset = queryset.select_for_update()
        order = queryset.filter(pk=order_id).first()
        if order is None:
            raise NotFound("Purchase order not found")
        return order

    @staticmethod
    def _resolve_supplier(ctx: RequestContext, supplier) -> Supplier:
        supplier_id = getattr(supplier, "pk", supplier)
        if not supplier_id:
            raise ValidationFailed("Supplier is required")
        found = ctx.scope(Supplier.objects).filter(pk=supplier_id, is_active=True).first()
        if found is None:
            raise ValidationFailed("Supplier not found")
        return found

    @staticmethod
    def _validate_items(ctx: RequestContext, items: Iterable[dict]) -> List[dict]:
        items = list(items or [])
        if not items:
            raise ValidationFailed("Purchase order must contain at least one item")
        cleaned = []
        for index, raw in enumerate(items, start=1):
            line = {key: raw[key] for key in ITEM_FIELDS if key in raw and raw[key] is not None}
            if not line.get("item_name"):
                raise ValidationFailed(f"Item {index}: item name is required")
            if Decimal(str(line.get("quantity", 0))) <= 0:
                raise ValidationFailed(f"Item {index}: quantity must be greater than zero")
            if Decimal(str(line.get("rate", 0))) < 0:
                raise ValidationFailed(f"Item {index}: rate cannot be negative")
            inventory_item = raw.get("inventory_item")
            if inventory_item is not None:
                inventory_item = ctx.scope(InventoryItem.objects).filter(pk=getattr(inventory_item, "pk", inventory_item)).first()
                if inventory_item is None:
                    raise ValidationFailed(f"Item {index}: inventory item not found")
            line["inventory_item"] = inventory_item
            cleaned.append(line)
        return cleaned

    @staticmethod
    def _write_items(order: PurchaseOrder, items: List[dict]) -> None:
        for line in items:
            PurchaseOrderItem.objects.create(order=order, **line)
        order.refresh_totals()

    @staticmethod
    @transaction.atomic
    def create_order(ctx: RequestContext, data: Dict) -> PurchaseOrder:
        supplier = PurchaseOrderService._resolve_supplier(ctx, data.get("supplier"))
        items = PurchaseOrderService._validate_items(ctx, data.get("items"))
        order = PurchaseOrder.objects.create(
            company=ctx.company,
            created_by=ctx.actor,
            supplier=supplier,
            order_number=get_next_doc_no(company=ctx.company, doc_type="PO"),
            **{key: data[key] for key in ORDER_FIELDS if key in data},
        )
        PurchaseOrderService._write_items(order, items)
        logger.info("Purchase order %s created for supplier %s", order.order_number, supplier.code)
        return order

    @staticmethod
    @transaction.atomic
    def update_order(ctx: RequestContext, order_id, data: Dict) -> PurchaseOrder:
        order = PurchaseOrderService.get_order(ctx, order_id, lock=True)
        if order.status not in EDITABLE_STATUSES:
            raise ValidationFailed("Only draft or pending purchase orders can be updated")
        update_fields = ["updated_at"]
        if "supplier" in data:
            order.supplier = PurchaseOrderService._resolve_supplier(ctx, data["supplier"])
            update_fields.append("supplier")
        for key in ORDER_FIELDS:
            if key in data:
                setattr(order, key, data[key])
                update_fields.append(key)
        order.save(update_fields=update_fields)
        if "items" in data:
            items = PurchaseOrderService._validate_items(ctx, data["items"])
            order.items.all().delete()
            PurchaseOrderService._write_items(order, items)
        return order

    @staticmethod
    def _apply_status(ctx: RequestContext, order: PurchaseOrder, new_status: str, *, reason: str = "") -> None:
        PurchaseOrderService.TRANSITIONS.ensure(order.status, new_status)
        previous = order.status
        order.status = new_status
        update_fields = ["status", "updated_at"]
        stamps = PurchaseOrderService.STATUS_STAMPS.get(new_status)
        if stamps:
            at_field, by_field = stamps
            setattr(order, at_field, timezone.now())
            setattr(order, by_field, ctx.actor)
            update_fields += [at_field, by_field]
        if new_status == S.CANCELLED and reason:
            order.cancellation_reason = reason
            update_fields.append("cancellation_reason")
        order.save(update_fields=update_fields)
        logger.info("Purchase order %s moved from %s to %s", order.order_number, previous, new_status)

    @staticmethod
    @transaction.atomic
    def update_status(ctx: RequestContext, order_id, new_status: str, *, reason: str = "") -> PurchaseOrder:
        order = PurchaseOrderService.get_order(ctx, order_id, lock=True)
        PurchaseOrderService._apply_status(ctx, order, new_status, reason=reason)
        return order

    @staticmethod
    @transaction.atomic
    def receive_items(ctx: RequestContext, order_id, receipts: Iterable[dict], *, notes: str = "") -> PurchaseOrder:
        """
        Book goods received against order lines.

        Each receipt is ``{"item": <line id>, "quantity": <qty>}``. Lines linked to an
        inventory item produce an ``in`` stock movement referencing the order.
        """
        order = PurchaseOrderService.get_order(ctx, order_id, lock=True)
        if order.status not in RECEIVABLE_STATUSES:
            raise ValidationFailed("Items can only be received for ordered or partially received purchase orders")
        receipts = list(receipts or [])
        if not receipts:
            raise ValidationFailed("At least one item must be received")

        lines = {line.pk: line for line in order.items.select_for_update()}
        for receipt in receipts:
            line = lines.get(int(receipt.get("item") or 0))
            if line is None:
                raise ValidationFailed(f"Item {receipt.get('item')} does not belong to this purchase order")
            quantity = Decimal(str(receipt.get("quantity") or 0))
            if quantity <= 0:
                raise ValidationFailed(f"Received quantity for {line.item_name} must be greater than zero")
            if quantity > line.pending_quantity:
                raise ValidationFailed(
                    f"Received quantity for {line.item_name} exceeds pending quantity {line.pending_quantity}"
                )
            line.received_quantity += quantity
            line.save(update_fields=["received_quantity"])
            if line.inventory_item_id:
                InventoryService.update_stock(
                    ctx,
                    line.inventory_item_id,
                    quantity,
                    StockMovement.MovementType.IN,
                    reference_type=StockMovement.ReferenceType.PURCHASE_ORDER,
                    reference_id=order.pk,
                    reference_number=order.order_number,
                    notes=notes or f"Received against {order.order_number}",
                )

        fully_received = all(line.pending_quantity <= 0 for line in lines.values())
        target = S.RECEIVED if fully_received else S.PARTIAL
        if target != order.status:
            PurchaseOrderService._apply_status(ctx, order, target)
        return order

    @staticmethod
    def overdue_orders(ctx: RequestContext):
        return (
            ctx.scope(PurchaseOrder.objects)
            .filter(status__in=RECEIVABLE_STATUSES, expected_delivery_date__lt=timezone.localdate())
            .select_related("supplier")
            .order_by("expected_delivery_date")
        )

    @staticmethod
    def stats(ctx: RequestContext, start_date=None, end_date=None) -> Dict:
        orders = ctx.scope(PurchaseOrder.objects)
        if start_date:
            orders = orders.filter(order_date__gte=start_date)
        if end_date:
            orders = orders.filter(order_date__lte=end_date)
        by_status = {value: 0 for value in S.values}
        for row in orders.values("status").annotate(count=Count("id")):
            by_status[row["status"]] = row["count"]
        active = orders.exclude(status=S.CANCELLED)
        return {
            "total_orders": sum(by_status.values()),
            "by_status": by_status,
            "total_value": active.aggregate(total=Sum("total_amount"))["total"] or Decimal("0"),
            "received_value": orders.filter(status=S.RECEIVED).aggregate(total=Sum("total_amount"))["total"] or Decimal("0"),
            "overdue_orders": PurchaseOrderService.overdue_orders(ctx).count(),
            "top_suppliers": [
                {
                    "supplier_id": row["supplier_id"],
                    "code": row["supplier__code"],
                    "name": row["supplier__name"],
                    "order_count": row["order_count"],
                    "total_value": row["total_value"] or Decimal("0"),
                }
                for row in active.values("supplier_id", "supplier__code", "supplier__name")
                .annotate(order_count=Count("id"), total_value=Sum("total_amount"))
                .order_by("-total_value")[:5]
            ],
        }
