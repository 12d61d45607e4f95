from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Count, DecimalField, ExpressionWrapper, F, Q, Sum

from shared.context import RequestContext
from shared.exceptions import NotFound, ValidationFailed

from ..models import InventoryItem, StockMovement

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def to_quantity(value, *, field: str = "quantity", allow_zero: bool = False) -> Decimal:
    try:
        quantity = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationFailed(f"Invalid {field}.")
    if quantity < ZERO or (quantity == ZERO and not allow_zero):
        raise ValidationFailed(f"{field.capitalize()} must be greater than zero.")
    return quantity


class InventoryService:
    """
    Service layer for every change to item stock figures.

    Reservations move quantity between available and reserved stock without a ledger
    entry; in/out/adjustment/transfer calls append a ``StockMovement``.
    """

    @staticmethod
    def _lock_item(ctx: RequestContext, item_id) -> InventoryItem:
        item = (
            InventoryItem.objects.for_company(ctx.company)
            .select_for_update()
            .filter(pk=item_id)
            .first()
        )
        if item is None:
            raise NotFound("Inventory item not found")
        return item

    @staticmethod
    @transaction.atomic
    def reserve_stock(ctx: RequestContext, item_id, quantity, *, reference: str = "") -> InventoryItem:
        quantity = to_quantity(quantity)
        item = InventoryService._lock_item(ctx, item_id)
        if item.available_stock < quantity:
            raise ValidationFailed(
                f"Insufficient stock for {item.code}: available {item.available_stock}, requested {quantity}"
            )
        item.reserved_stock += quantity
        item.available_stock -= quantity
        item.save(update_fields=["reserved_stock", "available_stock", "updated_at"])
        logger.info("Reserved %s of item %s for %s", quantity, item.code, reference or "-")
        return item

    @staticmethod
    @transaction.atomic
    def release_reserved_stock(ctx: RequestContext, item_id, quantity, *, reference: str = "") -> InventoryItem:
        quantity = to_quantity(quantity)
        item = InventoryService._lock_item(ctx, item_id)
        if item.reserved_stock < quantity:
            raise ValidationFailed(
                f"Cannot release {quantity} of {item.code}: only {item.reserved_stock} reserved"
            )
        item.reserved_stock -= quantity
        item.available_stock += quantity
        item.save(update_fields=["reserved_stock", "available_stock", "updated_at"])
        logger.info("Released %s reserved units of item %s for %s", quantity, item.code, reference or "-")
        return item

    @staticmethod
    @transaction.atomic
    def update_stock(
        ctx: RequestContext,
        item_id,
        quantity,
        movement_type: str,
        *,
        reference_type: str = StockMovement.ReferenceType.ADJUSTMENT_NOTE,
        reference_id="",
        reference_number: str = "",
        notes: str = "",
        from_location: str = "",
        to_location: str = "",
    ) -> StockMovement:
        if movement_type not in StockMovement.MovementType.values:
            raise ValidationFailed(f"Invalid movement type: {movement_type}")
        quantity = to_quantity(quantity, allow_zero=movement_type == StockMovement.MovementType.ADJUSTMENT)
        item = InventoryService._lock_item(ctx, item_id)
        previous = item.current_stock

        if movement_type == StockMovement.MovementType.IN:
            item.current_stock += quantity
            item.available_stock += quantity
        elif movement_type == StockMovement.MovementType.OUT:
            if item.available_stock < quantity:
                raise ValidationFailed(
                    f"Insufficient stock available for {item.code}: available {item.available_stock}, requested {quantity}"
                )
            item.current_stock -= quantity
            item.available_stock -= quantity
        elif movement_type == StockMovement.MovementType.ADJUSTMENT:
            if quantity < item.reserved_stock:
                raise ValidationFailed(
                    f"Adjusted stock {quantity} is below the reserved quantity {item.reserved_stock} for {item.code}"
                )
            item.current_stock = quantity
            item.available_stock = quantity - item.reserved_stock
        elif not (from_location and to_location):
            raise ValidationFailed("Transfers require both from_location and to_location.")

        item.save(update_fields=["current_stock", "available_stock", "updated_at"])
        movement = StockMovement.objects.create(
            company=ctx.company,
            created_by=ctx.actor,
            item=item,
            movement_type=movement_type,
            quantity=quantity,
            unit=item.unit,
            previous_stock=previous,
            new_stock=item.current_stock,
            from_location=from_location,
            to_location=to_location,
            reference_type=reference_type,
            reference_id=str(reference_id or ""),
            reference_number=reference_number,
            notes=notes,
        )
        logger.info(
            "Stock %s of %s for item %s (%s -> %s) ref %s",
            movement_type,
            quantity,
            item.code,
            previous,
            item.current_stock,
            reference_number or "-",
        )
        return movement

    @staticmethod
    def low_stock_items(ctx: RequestContext):
        return ctx.scope(InventoryItem.objects).active().filter(current_stock__lt=F("reorder_level"))

    @staticmethod
    def stock_summary(ctx: RequestContext) -> dict:
        items = ctx.scope(InventoryItem.objects).active()
        totals = items.aggregate(
            total_items=Count("id"),
            total_value=Sum(ExpressionWrapper(F("current_stock") * F("unit_price"), output_field=DecimalField(max_digits=30, decimal_places=5))),
            total_reserved=Sum("reserved_stock"),
            low_stock_items=Count("id", filter=Q(current_stock__lt=F("reorder_level"))),
            out_of_stock_items=Count("id", filter=Q(current_stock__lte=0)),
        )
        return {
            "total_items": totals["total_items"] or 0,
            "total_value": (totals["total_value"] or ZERO).quantize(Decimal("0.01")),
            "total_reserved": totals["total_reserved"] or ZERO,
            "low_stock_items": totals["low_stock_items"] or 0,
            "out_of_stock_items": totals["out_of_stock_items"] or 0,
        }
