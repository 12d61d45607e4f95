from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase

from apps.finance.models import Invoice, InvoiceItem, InvoiceStatus
from apps.finance.services.invoice_service import InvoiceService
from apps.sales.models import Customer, CustomerOrder
from apps.sales.services.order_service import CustomerOrderService
from shared.exceptions import ValidationFailed
from shared.testing import make_company, make_context, make_user

S = InvoiceStatus


class InvoiceServiceTests(TestCase):
    def setUp(self):
        self.company = make_company("TEX")
        self.user = make_user(self.company, "accounts")
        self.ctx = make_context(self.company, self.user)
        self.customer = Customer.objects.create(company=self.company, code="C1", name="Acme", payment_terms=15)
        self.today = timezone.localdate()

    def _invoice(self, **overrides):
        data = {
            "customer": self.customer.pk,
            "due_date": self.today + timedelta(days=30),
            "items": [
                {
                    "description": "Printed cotton",
                    "quantity": Decimal("100"),
                    "rate": Decimal("10"),
                    "discount_type": InvoiceItem.DiscountType.PERCENTAGE,
                    "discount_value": Decimal("10"),
                    "tax_rate": Decimal("5"),
                },
                {
                    "description": "Packing",
                    "quantity": Decimal("1"),
                    "rate": Decimal("200"),
                    "discount_type": InvoiceItem.DiscountType.FIXED,
                    "discount_value": Decimal("50"),
                    "tax_rate": Decimal("12"),
                },
            ],
        }
        data.update(overrides)
        return InvoiceService.create_invoice(self.ctx, data)

    def test_totals_with_discounts_and_tax(self):
        invoice = self._invoice()
        self.assertTrue(invoice.invoice_number.startswith("INV"))
        self.assertEqual(invoice.subtotal, Decimal("1200.00"))
        self.assertEqual(invoice.discount_amount, Decimal("150.00"))
        self.assertEqual(invoice.taxable_amount, Decimal("1050.00"))
        self.assertEqual(invoice.tax_amount, Decimal("63.00"))
        self.assertEqual(invoice.total_amount, Decimal("1113.00"))
        self.assertEqual(invoice.outstanding_amount, Decimal("1113.00"))

    def test_due_date_required(self):
        with self.assertRaisesMessage(ValidationFailed, "Due date is required"):
            self._invoice(due_date=None)

    def test_payments_move_status(self):
        invoice = self._invoice()
        InvoiceService.update_status(self.ctx, invoice.pk, S.SENT)
        InvoiceService.record_payment(self.ctx, invoice.pk, Decimal("113"))
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, S.PARTIALLY_PAID)
        self.assertEqual(invoice.outstanding_amount, Decimal("1000.00"))

        with self.assertRaisesMessage(ValidationFailed, "Payment amount cannot exceed outstanding amount"):
            InvoiceService.record_payment(self.ctx, invoice.pk, Decimal("1000.01"))
        with self.assertRaises(ValidationFailed):
            InvoiceService.record_payment(self.ctx, invoice.pk, Decimal("0"))

        InvoiceService.record_payment(self.ctx, invoice.pk, Decimal("1000"))
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, S.PAID)
        self.assertEqual(invoice.outstanding_amount, Decimal("0.00"))
        self.assertIsNotNone(invoice.paid_at)
        self.assertEqual(invoice.payments.count(), 2)

    def test_draft_invoice_refuses_payment(self):
        invoice = self._invoice()
        with self.assertRaises(ValidationFailed):
            InvoiceService.record_payment(self.ctx, invoice.pk, Decimal("10"))

    def test_invalid_transition_leaves_status(self):
        invoice = self._invoice()
        with self.assertRaisesMessage(ValidationFailed, "Invalid status transition from draft to paid"):
            InvoiceService.update_status(self.ctx, invoice.pk, S.PAID)
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, S.DRAFT)
        self.assertEqual(set(InvoiceService.TRANSITIONS.allowed(S.OVERDUE)), {S.PAID, S.PARTIALLY_PAID, S.CANCELLED})

    def test_create_from_order(self):
        order = CustomerOrderService.create_order(
            self.ctx,
            {
                "customer": self.customer.pk,
                "items": [
                    {
                        "item_name": "Dyeing job",
                        "product_type": "dyeing",
                        "material_source": "customer_material",
                        "quantity": Decimal("50"),
                        "rate": Decimal("4"),
                        "work_amount": Decimal("100"),
                    }
                ],
            },
        )
        with self.assertRaises(ValidationFailed):
            InvoiceService.create_from_order(self.ctx, order.pk)
        CustomerOrderService.update_status(self.ctx, order.pk, CustomerOrder.Status.CONFIRMED)
        invoice = InvoiceService.create_from_order(self.ctx, order.pk)
        self.assertEqual(invoice.customer_order_id, order.pk)
        self.assertEqual(invoice.items.count(), 2)
        self.assertEqual(invoice.total_amount, Decimal("300.00"))
        self.assertEqual(invoice.due_date, self.today + timedelta(days=15))

    def test_overdue_and_stats(self):
        invoice = self._invoice()
        InvoiceService.update_status(self.ctx, invoice.pk, S.SENT)
        Invoice.objects.filter(pk=invoice.pk).update(due_date=self.today - timedelta(days=1))
        self.assertEqual(InvoiceService.overdue_invoices(self.ctx).count(), 1)
        stats = InvoiceService.stats(self.ctx)
        self.assertEqual(stats["total_invoices"], 1)
        self.assertEqual(stats["overdue_count"], 1)
        self.assertEqual(stats["by_status"][S.SENT]["count"], 1)
        self.assertEqual(stats["total_outstanding"], Decimal("1113.00"))


class InvoiceApiTests(APITestCase):
    def setUp(self):
        self.company = make_company("TEX")
        self.user = make_user(self.company, "accounts")
        self.client.force_authenticate(self.user)
        self.headers = {"HTTP_X_COMPANY_ID": str(self.company.pk)}
        self.customer = Customer.objects.create(company=self.company, code="C1", name="Acme")

    def test_create_send_and_pay(self):
        due = (timezone.localdate() + timedelta(days=10)).isoformat()
        response = self.client.post(
            "/api/v1/invoices/",
            {"customer": self.customer.pk, "due_date": due, "items": [{"description": "Fabric", "quantity": "10", "rate": "50"}]},
            format="json",
            **self.headers,
        )
        self.assertEqual(response.status_code, 201, response.data)
        invoice_id = response.data["data"]["id"]

        response = self.client.patch(f"/api/v1/invoices/{invoice_id}/status/", {"status": "sent"}, format="json", **self.headers)
        self.assertEqual(response.status_code, 200, response.data)

        response = self.client.post(f"/api/v1/invoices/{invoice_id}/payments/", {"amount": "500.00", "payment_method": "upi"}, format="json", **self.headers)
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["data"]["status"], "paid")
        self.assertEqual(len(response.data["data"]["payments"]), 1)
