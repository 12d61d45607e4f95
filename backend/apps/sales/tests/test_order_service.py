from __future__ import annotations

from decimal import Decimal

from django.test import TestCase

from apps.inventory.models import StockMovement
from apps.sales.models import Customer, CustomerOrder, CustomerOrderItem
from apps.sales.services.order_service import CustomerOrderService
from shared.exceptions import NotFound, ValidationFailed
from shared.testing import make_company, make_context, make_item, make_user

S = CustomerOrder.Status


class CustomerOrderServiceTests(TestCase):
    def setUp(self):
        self.company = make_company("TEX")
        self.user = make_user(self.company, "sales")
        self.ctx = make_context(self.company, self.user)
        self.customer = Customer.objects.create(company=self.company, code="CUST000001", name="Acme Garments")
        self.fabric = make_item(self.company, "GF-100", stock=Decimal("20"))
        self.dye = make_item(self.company, "DY-200", stock=Decimal("10"))

    def _order(self, lines=None):
        lines = lines or [
            {"item_name": "Cotton 60s", "product_type": "fabric", "inventory_item": self.fabric, "quantity": Decimal("5"), "rate": Decimal("100")},
            {"item_name": "Reactive Red", "product_type": "dye", "inventory_item": self.dye, "quantity": Decimal("3"), "rate": Decimal("50")},
        ]
        return CustomerOrderService.create_order(self.ctx, {"customer": self.customer.pk, "items": lines})

    def _walk_to(self, order, *statuses):
        for status in statuses:
            order = CustomerOrderService.update_status(self.ctx, order.pk, status)
        return order

    def test_create_computes_totals_and_number(self):
        order = CustomerOrderService.create_order(
            self.ctx,
            {
                "customer": self.customer.pk,
                "items": [
                    {
                        "item_name": "Job dyeing",
                        "product_type": "dyeing",
                        "material_source": CustomerOrderItem.MaterialSource.CUSTOMER_MATERIAL,
                        "quantity": Decimal("10"),
                        "rate": Decimal("12.50"),
                        "work_amount": Decimal("25"),
                        "tax_rate": Decimal("5"),
                    }
                ],
            },
        )
        self.assertEqual(order.status, S.DRAFT)
        self.assertTrue(order.order_number.startswith("CO"))
        self.assertEqual(len(order.order_number), len("CO") + 6 + 4)
        self.assertEqual(order.subtotal, Decimal("150.00"))
        self.assertEqual(order.tax_amount, Decimal("7.50"))
        self.assertEqual(order.total_amount, Decimal("157.50"))

    def test_create_requires_items_and_positive_quantity(self):
        with self.assertRaises(ValidationFailed):
            CustomerOrderService.create_order(self.ctx, {"customer": self.customer.pk, "items": []})
        with self.assertRaises(ValidationFailed):
            self._order([{"item_name": "Bad", "product_type": "fabric", "quantity": Decimal("0"), "rate": Decimal("1")}])
        with self.assertRaises(ValidationFailed):
            CustomerOrderService.create_order(self.ctx, {"items": [{"item_name": "X", "product_type": "y", "quantity": 1}]})

    def test_confirm_then_dispatch_moves_stock(self):
        order = self._order()
        self._walk_to(order, S.CONFIRMED)
        self.fabric.refresh_from_db()
        self.dye.refresh_from_db()
        self.assertEqual(self.fabric.reserved_stock, Decimal("5"))
        self.assertEqual(self.fabric.available_stock, Decimal("15"))
        self.assertEqual(self.dye.reserved_stock, Decimal("3"))

        order = self._walk_to(order, S.IN_PRODUCTION, S.QUALITY_CHECK, S.READY_FOR_DISPATCH, S.DISPATCHED)
        self.assertIsNotNone(order.dispatched_at)
        self.fabric.refresh_from_db()
        self.dye.refresh_from_db()
        self.assertEqual(self.fabric.reserved_stock, Decimal("0"))
        self.assertEqual(self.fabric.current_stock, Decimal("15"))
        self.assertEqual(self.dye.reserved_stock, Decimal("0"))
        self.assertEqual(self.dye.current_stock, Decimal("7"))

        outs = StockMovement.objects.filter(
            company=self.company,
            movement_type=StockMovement.MovementType.OUT,
            reference_type=StockMovement.ReferenceType.CUSTOMER_ORDER,
            reference_id=str(order.pk),
        )
        self.assertEqual(outs.count(), 2)
        self.assertEqual(sum(m.quantity for m in outs), Decimal("8"))

    def test_customer_material_has_no_stock_impact(self):
        order = self._order(
            [
                {
                    "item_name": "Customer grey",
                    "product_type": "fabric",
                    "material_source": CustomerOrderItem.MaterialSource.CUSTOMER_MATERIAL,
                    "inventory_item": self.fabric,
                    "quantity": Decimal("4"),
                    "rate": Decimal("10"),
                }
            ]
        )
        self._walk_to(order, S.CONFIRMED)
        self.fabric.refresh_from_db()
        self.assertEqual(self.fabric.reserved_stock, Decimal("0"))
        summary = CustomerOrderService.stock_impact_summary(self.ctx, order.pk)
        self.assertEqual(summary["stock_affected_items"], 0)
        self.assertEqual(summary["items"][0]["stock_impact"], "No stock impact")

    def test_cancel_releases_reservation(self):
        order = self._order()
        self._walk_to(order, S.CONFIRMED, S.IN_PRODUCTION)
        order = CustomerOrderService.cancel_order(self.ctx, order.pk, "Customer withdrew")
        self.assertEqual(order.status, S.CANCELLED)
        self.assertEqual(order.cancellation_reason, "Customer withdrew")
        self.assertIsNotNone(order.cancelled_at)
        self.fabric.refresh_from_db()
        self.assertEqual(self.fabric.reserved_stock, Decimal("0"))
        self.assertEqual(self.fabric.available_stock, Decimal("20"))

    def test_cancel_rejected_after_dispatch(self):
        order = self._order()
        self._walk_to(order, S.CONFIRMED, S.IN_PRODUCTION, S.QUALITY_CHECK, S.READY_FOR_DISPATCH, S.DISPATCHED)
        with self.assertRaisesMessage(ValidationFailed, "Cannot cancel dispatched or delivered orders"):
            CustomerOrderService.cancel_order(self.ctx, order.pk)

    def test_invalid_transition_leaves_status_unchanged(self):
        order = self._order()
        with self.assertRaisesMessage(ValidationFailed, "Invalid status transition from draft to dispatched"):
            CustomerOrderService.update_status(self.ctx, order.pk, S.DISPATCHED)
        order.refresh_from_db()
        self.assertEqual(order.status, S.DRAFT)
        self.fabric.refresh_from_db()
        self.assertEqual(self.fabric.reserved_stock, Decimal("0"))

    def test_every_edge_outside_table_is_rejected(self):
        table = CustomerOrderService.TRANSITIONS
        for source in table.statuses:
            for target in table.statuses:
                self.assertEqual(table.can_transition(source, target), (source, target) in set(table.edges()))
        self.assertTrue(table.is_terminal(S.DELIVERED))
        self.assertTrue(table.is_terminal(S.CANCELLED))
        self.assertFalse(table.can_transition(S.READY_FOR_DISPATCH, S.CANCELLED))

    def test_insufficient_stock_blocks_confirmation(self):
        order = self._order(
            [
                {"item_name": "Too much", "product_type": "fabric", "inventory_item": self.fabric, "quantity": Decimal("50"), "rate": Decimal("1")},
            ]
        )
        with self.assertRaises(ValidationFailed):
            CustomerOrderService.update_status(self.ctx, order.pk, S.CONFIRMED)
        order.refresh_from_db()
        self.assertEqual(order.status, S.DRAFT)

    def test_update_only_in_draft(self):
        order = self._order()
        updated = CustomerOrderService.update_order(self.ctx, order.pk, {"special_instructions": "Roll packing"})
        self.assertEqual(updated.special_instructions, "Roll packing")
        self._walk_to(order, S.CONFIRMED)
        with self.assertRaisesMessage(ValidationFailed, "Only draft orders can be updated"):
            CustomerOrderService.update_order(self.ctx, order.pk, {"special_instructions": "Late"})

    def test_other_company_order_is_not_found(self):
        order = self._order()
        other = make_company("OTH")
        with self.assertRaises(NotFound):
            CustomerOrderService.update_status(make_context(other), order.pk, S.CONFIRMED)

    def test_stats(self):
        delivered = self._order()
        self._walk_to(delivered, S.CONFIRMED, S.IN_PRODUCTION, S.QUALITY_CHECK, S.READY_FOR_DISPATCH, S.DISPATCHED, S.DELIVERED)
        self._order([{"item_name": "Job", "product_type": "printing", "quantity": Decimal("2"), "rate": Decimal("10")}])
        stats = CustomerOrderService.stats(self.ctx)
        self.assertEqual(stats["total_orders"], 2)
        self.assertEqual(stats["by_status"][S.DELIVERED], 1)
        self.assertEqual(stats["by_status"][S.DRAFT], 1)
        self.assertEqual(stats["total_revenue"], Decimal("650.00"))
        self.assertEqual(stats["top_customers"][0]["code"], "CUST000001")
