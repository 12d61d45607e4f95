from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from apps.inventory.models import StockMovement
from apps.procurement.models import PurchaseOrder, Supplier
from apps.procurement.services.purchase_service import PurchaseOrderService, SupplierService
from shared.exceptions import ValidationFailed
from shared.testing import make_company, make_context, make_item, make_user

S = PurchaseOrder.Status


class PurchaseOrderServiceTests(TestCase):
    def setUp(self):
        self.company = make_company("TEX")
        self.user = make_user(self.company, "buyer")
        self.ctx = make_context(self.company, self.user)
        self.supplier = SupplierService.create_supplier(self.ctx, {"name": "Dye House"})
        self.dye = make_item(self.company, "DY-1")

    def _order(self, quantity="100"):
        return PurchaseOrderService.create_order(
            self.ctx,
            {
                "supplier": self.supplier.pk,
                "items": [
                    {"item_name": "Reactive Blue", "inventory_item": self.dye.pk, "quantity": Decimal(quantity), "rate": Decimal("2.50"), "tax_rate": Decimal("18")},
                ],
            },
        )

    def _advance(self, order, *statuses):
        for status in statuses:
            order = PurchaseOrderService.update_status(self.ctx, order.pk, status)
        return order

    def test_supplier_codes_are_sequential(self):
        second = SupplierService.create_supplier(self.ctx, {"name": "Yarn Mill"})
        self.assertEqual(self.supplier.code, "SUP000001")
        self.assertEqual(second.code, "SUP000002")

    def test_duplicate_supplier_code_is_rejected_per_company(self):
        SupplierService.create_supplier(self.ctx, {"name": "A", "code": "yarn01"})
        with self.assertRaisesMessage(ValidationFailed, "Supplier code already exists"):
            SupplierService.create_supplier(self.ctx, {"name": "B", "code": "YARN01"})
        other = make_context(make_company("OTH"))
        self.assertEqual(SupplierService.create_supplier(other, {"name": "C", "code": "YARN01"}).code, "YARN01")

    def test_rating_must_be_in_range(self):
        SupplierService.update_rating(self.ctx, self.supplier, "4.5")
        self.assertEqual(Supplier.objects.get(pk=self.supplier.pk).rating, Decimal("4.5"))
        with self.assertRaises(ValidationFailed):
            SupplierService.update_rating(self.ctx, self.supplier, 6)

    def test_totals_and_number(self):
        order = self._order()
        self.assertTrue(order.order_number.startswith("PO"))
        self.assertEqual(order.subtotal, Decimal("250.00"))
        self.assertEqual(order.tax_amount, Decimal("45.00"))
        self.assertEqual(order.total_amount, Decimal("295.00"))

    def test_status_stamps_dates_and_users(self):
        order = self._advance(self._order(), S.PENDING, S.APPROVED, S.ORDERED)
        self.assertEqual(order.approved_by, self.user)
        self.assertIsNotNone(order.approved_at)
        self.assertEqual(order.ordered_by, self.user)

    def test_invalid_transition_leaves_status(self):
        order = self._order()
        with self.assertRaisesMessage(ValidationFailed, "Invalid status transition from draft to received"):
            PurchaseOrderService.update_status(self.ctx, order.pk, S.RECEIVED)
        order.refresh_from_db()
        self.assertEqual(order.status, S.DRAFT)
        for source, target in PurchaseOrderService.TRANSITIONS.edges():
            self.assertIn(target, PurchaseOrderService.TRANSITIONS.allowed(source))
        self.assertTrue(PurchaseOrderService.TRANSITIONS.is_terminal(S.RECEIVED))

    def test_partial_then_full_receipt(self):
        order = self._advance(self._order(), S.PENDING, S.APPROVED, S.ORDERED)
        line = order.items.get()
        order = PurchaseOrderService.receive_items(self.ctx, order.pk, [{"item": line.pk, "quantity": Decimal("40")}])
        self.assertEqual(order.status, S.PARTIAL)
        self.dye.refresh_from_db()
        self.assertEqual(self.dye.current_stock, Decimal("40"))

        with self.assertRaises(ValidationFailed):
            PurchaseOrderService.receive_items(self.ctx, order.pk, [{"item": line.pk, "quantity": Decimal("61")}])

        order = PurchaseOrderService.receive_items(self.ctx, order.pk, [{"item": line.pk, "quantity": Decimal("60")}])
        self.assertEqual(order.status, S.RECEIVED)
        self.assertEqual(order.received_by, self.user)
        movements = StockMovement.objects.filter(reference_type=StockMovement.ReferenceType.PURCHASE_ORDER, reference_id=str(order.pk))
        self.assertEqual(movements.count(), 2)
        self.dye.refresh_from_db()
        self.assertEqual(self.dye.current_stock, Decimal("100"))
        self.assertEqual(self.dye.available_stock, Decimal("100"))

    def test_receipt_requires_ordered_status(self):
        order = self._order()
        line = order.items.get()
        with self.assertRaises(ValidationFailed):
            PurchaseOrderService.receive_items(self.ctx, order.pk, [{"item": line.pk, "quantity": Decimal("1")}])

    def test_update_only_while_draft_or_pending(self):
        order = self._advance(self._order(), S.PENDING)
        PurchaseOrderService.update_order(self.ctx, order.pk, {"notes": "Urgent"})
        self._advance(order, S.APPROVED)
        with self.assertRaises(ValidationFailed):
            PurchaseOrderService.update_order(self.ctx, order.pk, {"notes": "Later"})

    def test_overdue_list_and_stats(self):
        order = self._order()
        PurchaseOrder.objects.filter(pk=order.pk).update(expected_delivery_date=timezone.localdate() - timedelta(days=3))
        self._advance(order, S.PENDING, S.APPROVED, S.ORDERED)
        self.assertEqual(list(PurchaseOrderService.overdue_orders(self.ctx)), [PurchaseOrder.objects.get(pk=order.pk)])
        stats = PurchaseOrderService.stats(self.ctx)
        self.assertEqual(stats["by_status"][S.ORDERED], 1)
        self.assertEqual(stats["overdue_orders"], 1)
        self.assertEqual(stats["total_value"], Decimal("295.00"))
