from __future__ import annotations

import csv
import io
from datetime import timedelta
from decimal import Decimal

import openpyxl
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase

from apps.finance.models import InvoiceStatus
from apps.finance.services.invoice_service import InvoiceService
from apps.procurement.services.purchase_service import PurchaseOrderService, SupplierService
from apps.production.services.flow_service import ProductionFlowService
from apps.reports.services.export_service import ExportService
from apps.reports.services.report_service import ReportService
from apps.sales.models import Customer
from shared.exceptions import ValidationFailed
from shared.testing import make_company, make_context, make_item, make_user


class ReportDataMixin:
    def seed(self):
        self.company = make_company("REP", name="Report & Co Textiles")
        self.user = make_user(self.company, "analyst")
        self.ctx = make_context(self.company, self.user)
        self.today = timezone.localdate()

        customer = Customer.objects.create(company=self.company, code="C1", name="Acme Garments")
        invoice = InvoiceService.create_invoice(
            self.ctx,
            {
                "customer": customer.pk,
                "due_date": self.today + timedelta(days=30),
                "items": [{"description": "Dyed twill", "quantity": Decimal("100"), "rate": Decimal("10")}],
            },
        )
        InvoiceService.update_status(self.ctx, invoice.pk, InvoiceStatus.SENT)
        InvoiceService.record_payment(self.ctx, invoice.pk, Decimal("400"))
        InvoiceService.create_invoice(
            self.ctx,
            {
                "customer": customer.pk,
                "due_date": self.today + timedelta(days=30),
                "items": [{"description": "Draft only", "quantity": Decimal("1"), "rate": Decimal("999")}],
            },
        )

        self.fabric = make_item(self.company, "GF-1", stock=Decimal("50"), reorder_level=Decimal("100"))
        make_item(self.company, "DY-1", stock=Decimal("10"), unit_price=Decimal("500"))

        supplier = SupplierService.create_supplier(self.ctx, {"name": "Dye House"})
        PurchaseOrderService.create_order(
            self.ctx,
            {
                "supplier": supplier.pk,
                "items": [
                    {"item_name": "Reactive Blue", "inventory_item": self.fabric.pk, "quantity": Decimal("100"), "rate": Decimal("2.50"), "tax_rate": Decimal("18")}
                ],
            },
        )
        ProductionFlowService.create_order(self.ctx, {"product_name": "Navy twill", "planned_quantity": Decimal("200")})


class ReportServiceTests(ReportDataMixin, TestCase):
    def setUp(self):
        self.seed()

    def test_sales_report_ignores_draft_invoices(self):
        report = ReportService.build("sales", self.ctx)
        self.assertEqual(report.summary["total_invoices"], 1)
        self.assertEqual(report.summary["total_sales"], Decimal("1000.00"))
        self.assertEqual(report.summary["total_collected"], Decimal("400.00"))
        self.assertEqual(report.summary["total_outstanding"], Decimal("600.00"))
        self.assertEqual(report.sections["top_customers"][0]["customer_name"], "Acme Garments")
        self.assertEqual(report.start_date, self.today - timedelta(days=30))

    def test_inventory_report(self):
        report = ReportService.build("inventory", self.ctx)
        self.assertEqual(len(report.rows), 2)
        self.assertEqual([row["code"] for row in report.sections["low_stock_items"]], ["GF-1"])
        self.assertEqual(report.sections["high_value_items"][0]["code"], "DY-1")
        self.assertEqual(report.summary["total_value"], Decimal("5500.00"))

    def test_purchase_reports(self):
        summary = ReportService.build("purchase-summary", self.ctx)
        self.assertEqual(summary.summary["total_orders"], 1)
        self.assertEqual(summary.summary["total_amount"], Decimal("295.00"))

        supplier_wise = ReportService.build("supplier-wise-purchase", self.ctx)
        self.assertEqual(len(supplier_wise.rows), 1)
        self.assertEqual(supplier_wise.rows[0]["supplier_name"], "Dye House")
        self.assertEqual(supplier_wise.rows[0]["total_tax"], Decimal("45.00"))

        empty = ReportService.build("purchase-summary", self.ctx, filters={"status": "received"})
        self.assertEqual(empty.rows, [])

    def test_production_report(self):
        report = ReportService.build("production", self.ctx)
        self.assertEqual(report.summary["total_orders"], 1)
        self.assertEqual(report.summary["total_planned"], Decimal("200"))
        self.assertIn("dyeing", report.sections["process_summary"])

    def test_exports(self):
        report = ReportService.build("sales", self.ctx)

        content, content_type, filename = ExportService.export(report, "csv", self.company)
        self.assertEqual(content_type, "text/csv")
        self.assertRegex(filename, r"^sales-REP-\d{8}-\d{6}\.csv$")
        rows = list(csv.reader(io.StringIO(content.decode("utf-8"))))
        self.assertIn(["Invoice", "Date", "Customer", "Status", "Total", "Paid", "Outstanding"], rows)

        content, _, filename = ExportService.export(report, "xlsx", self.company)
        self.assertTrue(filename.endswith(".xlsx"))
        workbook = openpyxl.load_workbook(io.BytesIO(content))
        values = [cell.value for row in workbook.active.iter_rows() for cell in row]
        self.assertIn("Acme Garments", values)

        content, content_type, _ = ExportService.export(report, "pdf", self.company)
        self.assertEqual(content_type, "application/pdf")
        self.assertTrue(content.startswith(b"%PDF"))

        with self.assertRaises(ValidationFailed):
            ExportService.export(report, "docx", self.company)


class ReportApiTests(ReportDataMixin, APITestCase):
    def setUp(self):
        self.seed()
        self.client.force_authenticate(self.user)
        self.headers = {"HTTP_X_COMPANY_ID": str(self.company.pk)}

    def test_json_report(self):
        response = self.client.get("/api/v1/reports/inventory/", **self.headers)
        self.assertEqual(response.status_code, 200, response.data)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["data"]["report"], "inventory")

    def test_attachment_download(self):
        response = self.client.get("/api/v1/reports/purchase-summary/?format=xlsx", **self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
        self.assertRegex(response["Content-Disposition"], r'attachment; filename="purchase-summary-REP-\d{8}-\d{6}\.xlsx"')

    def test_invalid_range(self):
        response = self.client.get("/api/v1/reports/sales/?start_date=2024-05-01&end_date=2024-04-01", **self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data["success"])
