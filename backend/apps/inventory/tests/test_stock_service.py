from __future__ import annotations

from decimal import Decimal

from django.test import TestCase

from apps.inventory.models import InventoryItem, StockMovement
from apps.inventory.services.stock_service import InventoryService
from shared.exceptions import NotFound, ValidationFailed
from shared.testing import make_company, make_context, make_item, make_user

M = StockMovement.MovementType


class ReservationTests(TestCase):
    def setUp(self):
        self.company = make_company("INV")
        self.ctx = make_context(self.company, make_user(self.company, "store"))
        self.item = make_item(self.company, "GF-1", stock=Decimal("100"))

    def test_reserve_moves_quantity_out_of_available(self):
        item = InventoryService.reserve_stock(self.ctx, self.item.pk, Decimal("30"), reference="CO-1")
        self.assertEqual(item.current_stock, Decimal("100"))
        self.assertEqual(item.reserved_stock, Decimal("30"))
        self.assertEqual(item.available_stock, Decimal("70"))
        # reservations leave no ledger entry
        self.assertEqual(self.item.movements.count(), 1)

    def test_reserve_more_than_available_is_rejected(self):
        InventoryService.reserve_stock(self.ctx, self.item.pk, Decimal("80"))
        with self.assertRaisesMessage(ValidationFailed, "Insufficient stock for GF-1"):
            InventoryService.reserve_stock(self.ctx, self.item.pk, Decimal("30"))
        self.item.refresh_from_db()
        self.assertEqual(self.item.reserved_stock, Decimal("80"))

    def test_release_returns_quantity_to_available(self):
        InventoryService.reserve_stock(self.ctx, self.item.pk, Decimal("40"))
        item = InventoryService.release_reserved_stock(self.ctx, self.item.pk, Decimal("15"))
        self.assertEqual(item.reserved_stock, Decimal("25"))
        self.assertEqual(item.available_stock, Decimal("75"))

    def test_release_more_than_reserved_is_rejected(self):
        InventoryService.reserve_stock(self.ctx, self.item.pk, Decimal("5"))
        with self.assertRaisesMessage(ValidationFailed, "only 5"):
            InventoryService.release_reserved_stock(self.ctx, self.item.pk, Decimal("6"))

    def test_non_positive_quantities_are_rejected(self):
        with self.assertRaisesMessage(ValidationFailed, "Quantity must be greater than zero."):
            InventoryService.reserve_stock(self.ctx, self.item.pk, 0)
        with self.assertRaisesMessage(ValidationFailed, "Invalid quantity."):
            InventoryService.reserve_stock(self.ctx, self.item.pk, "lots")

    def test_item_of_another_company_is_not_found(self):
        other = make_company("OTH")
        foreign = make_item(other, "GF-1", stock=Decimal("10"))
        with self.assertRaisesMessage(NotFound, "Inventory item not found"):
            InventoryService.reserve_stock(self.ctx, foreign.pk, Decimal("1"))


class StockMovementTests(TestCase):
    def setUp(self):
        self.company = make_company("INV")
        self.ctx = make_context(self.company, make_user(self.company, "store"))
        self.item = make_item(self.company, "DY-1", stock=Decimal("50"))

    def test_outward_movement_records_previous_and_new_stock(self):
        movement = InventoryService.update_stock(
            self.ctx, self.item.pk, Decimal("20"), M.OUT, reference_number="ISS-1", notes="Issued to dyeing"
        )
        self.assertEqual(movement.previous_stock, Decimal("50"))
        self.assertEqual(movement.new_stock, Decimal("30"))
        self.assertTrue(movement.movement_number.startswith("SM"))
        self.assertEqual(movement.created_by, self.ctx.actor)
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, Decimal("30"))

    def test_outward_movement_cannot_touch_reserved_stock(self):
        InventoryService.reserve_stock(self.ctx, self.item.pk, Decimal("45"))
        with self.assertRaisesMessage(ValidationFailed, "Insufficient stock available"):
            InventoryService.update_stock(self.ctx, self.item.pk, Decimal("10"), M.OUT)

    def test_adjustment_sets_absolute_stock(self):
        InventoryService.reserve_stock(self.ctx, self.item.pk, Decimal("5"))
        InventoryService.update_stock(self.ctx, self.item.pk, Decimal("12"), M.ADJUSTMENT)
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, Decimal("12"))
        self.assertEqual(self.item.available_stock, Decimal("7"))

    def test_adjustment_below_reserved_is_rejected(self):
        InventoryService.reserve_stock(self.ctx, self.item.pk, Decimal("20"))
        with self.assertRaisesMessage(ValidationFailed, "below the reserved quantity"):
            InventoryService.update_stock(self.ctx, self.item.pk, Decimal("10"), M.ADJUSTMENT)

    def test_transfer_requires_both_locations(self):
        with self.assertRaisesMessage(ValidationFailed, "Transfers require both"):
            InventoryService.update_stock(self.ctx, self.item.pk, Decimal("5"), M.TRANSFER, from_location="Store A")
        movement = InventoryService.update_stock(
            self.ctx, self.item.pk, Decimal("5"), M.TRANSFER, from_location="Store A", to_location="Dye house"
        )
        self.assertEqual(movement.previous_stock, movement.new_stock)

    def test_unknown_movement_type_is_rejected(self):
        with self.assertRaisesMessage(ValidationFailed, "Invalid movement type: scrap"):
            InventoryService.update_stock(self.ctx, self.item.pk, Decimal("1"), "scrap")

    def test_movements_are_append_only(self):
        movement = self.item.movements.first()
        movement.notes = "edited"
        with self.assertRaises(ValueError):
            movement.save()
        with self.assertRaises(ValueError):
            movement.delete()


class StockReportingTests(TestCase):
    def setUp(self):
        self.company = make_company("INV")
        self.ctx = make_context(self.company)

    def test_low_stock_and_summary(self):
        make_item(self.company, "GF-1", stock=Decimal("20"), reorder_level=Decimal("50"))
        make_item(self.company, "DY-1", stock=Decimal("10"), unit_price=Decimal("500"))
        make_item(self.company, "CH-1", reorder_level=Decimal("5"))
        make_item(self.company, "OLD-1", stock=Decimal("99"), reorder_level=Decimal("500"), is_active=False)

        low = list(InventoryService.low_stock_items(self.ctx).values_list("code", flat=True))
        self.assertEqual(sorted(low), ["CH-1", "GF-1"])

        summary = InventoryService.stock_summary(self.ctx)
        self.assertEqual(summary["total_items"], 3)
        self.assertEqual(summary["total_value"], Decimal("5200.00"))
        self.assertEqual(summary["low_stock_items"], 2)
        self.assertEqual(summary["out_of_stock_items"], 1)

    def test_summary_of_empty_company(self):
        summary = InventoryService.stock_summary(self.ctx)
        self.assertEqual(summary["total_items"], 0)
        self.assertEqual(summary["total_value"], Decimal("0.00"))
        self.assertFalse(InventoryItem.objects.for_company(self.company).exists())
