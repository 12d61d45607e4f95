from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.db.models import Avg, Count, DecimalField, ExpressionWrapper, F, Sum
from django.utils import timezone

from apps.finance.models import Invoice, InvoiceStatus
from apps.inventory.models import InventoryItem
from apps.inventory.services.stock_service import InventoryService
from apps.procurement.models import PurchaseOrder
from apps.production.models import ProductionOrder
from apps.production.services.process_service import (
    CuttingPackingService,
    DyeingService,
    FinishingService,
    PrintingService,
)
from apps.sales.models import CustomerOrderItem
from shared.context import RequestContext

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENTS = Decimal("0.01")
DEFAULT_RANGE_DAYS = 30
BILLED_EXCLUDED = (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED)


@dataclass
class Report:
    """
    A tabular report: ``columns`` are ``(key, label)`` pairs naming the keys of each
    row, ``summary`` holds the headline figures and ``sections`` any extra breakdowns.
    Exporters render ``summary`` and ``rows``; the JSON view returns everything.
    """

    name: str
    title: str
    columns: List[Tuple[str, str]]
    rows: List[Dict[str, Any]]
    summary: Dict[str, Any] = field(default_factory=dict)
    sections: Dict[str, Any] = field(default_factory=dict)
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
    generated_at: datetime.datetime = field(default_factory=timezone.now)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "report": self.name,
            "title": self.title,
            "date_range": {"start_date": self.start_date, "end_date": self.end_date},
            "summary": self.summary,
            "columns": [{"key": key, "label": label} for key, label in self.columns],
            "rows": self.rows,
            **self.sections,
            "generated_at": self.generated_at,
        }


def default_range(start: Optional[datetime.date], end: Optional[datetime.date]) -> Tuple[datetime.date, datetime.date]:
    end = end or timezone.localdate()
    start = start or end - datetime.timedelta(days=DEFAULT_RANGE_DAYS)
    return start, end


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS)


class ReportService:
    @staticmethod
    def sales_report(ctx: RequestContext, start=None, end=None) -> Report:
        start, end = default_range(start, end)
        invoices = (
            ctx.scope(Invoice.objects)
            .filter(invoice_date__range=(start, end))
            .exclude(status__in=BILLED_EXCLUDED)
            .select_related("customer")
            .order_by("-invoice_date", "-id")
        )
        totals = invoices.aggregate(
            count=Count("id"),
            invoiced=Sum("total_amount"),
            collected=Sum("paid_amount"),
            outstanding=Sum("outstanding_amount"),
            average=Avg("total_amount"),
        )
        top_customers = [
            {
                "customer_code": row["customer__code"],
                "customer_name": row["customer__name"],
                "invoice_count": row["count"],
                "total_sales": _money(row["total"]),
            }
            for row in invoices.values("customer__code", "customer__name")
            .annotate(count=Count("id"), total=Sum("total_amount"))
            .order_by("-total")[:10]
        ]
        line_value = ExpressionWrapper(F("quantity") * F("rate"), output_field=DecimalField(max_digits=30, decimal_places=5))
        by_product = [
            {"item_name": row["item_name"], "quantity": row["quantity"], "value": _money(row["value"])}
            for row in CustomerOrderItem.objects.filter(
                order__company=ctx.company,
                order__order_date__range=(start, end),
            )
            .exclude(order__status="cancelled")
            .values("item_name")
            .annotate(quantity=Sum("quantity"), value=Sum(line_value))
            .order_by("-value")[:20]
        ]
        rows = [
            {
                "invoice_number": invoice.invoice_number,
                "invoice_date": invoice.invoice_date,
                "customer": invoice.customer.name,
                "status": invoice.status,
                "total_amount": invoice.total_amount,
                "paid_amount": invoice.paid_amount,
                "outstanding_amount": invoice.outstanding_amount,
            }
            for invoice in invoices
        ]
        return Report(
            name="sales",
            title="Sales Report",
            columns=[
                ("invoice_number", "Invoice"),
                ("invoice_date", "Date"),
                ("customer", "Customer"),
                ("status", "Status"),
                ("total_amount", "Total"),
                ("paid_amount", "Paid"),
                ("outstanding_amount", "Outstanding"),
            ],
            rows=rows,
            summary={
                "total_invoices": totals["count"] or 0,
                "total_sales": _money(totals["invoiced"]),
                "total_collected": _money(totals["collected"]),
                "total_outstanding": _money(totals["outstanding"]),
                "average_invoice_value": _money(totals["average"]),
            },
            sections={"top_customers": top_customers, "sales_by_product": by_product},
            start_date=start,
            end_date=end,
        )

    @staticmethod
    def inventory_report(ctx: RequestContext, start=None, end=None) -> Report:
        items = ctx.scope(InventoryItem.objects).active().select_related("category").order_by("name")
        rows = [
            {
                "code": item.code,
                "name": item.name,
                "category": item.category.name if item.category else "",
                "unit": item.unit,
                "current_stock": item.current_stock,
                "reserved_stock": item.reserved_stock,
                "available_stock": item.available_stock,
                "reorder_level": item.reorder_level,
                "unit_price": item.unit_price,
                "stock_value": _money(item.stock_value),
                "low_stock": item.is_low_stock,
            }
            for item in items
        ]
        low_stock = [row for row in rows if row["low_stock"]]
        high_value = sorted(rows, key=lambda row: row["stock_value"], reverse=True)[:20]
        return Report(
            name="inventory",
            title="Inventory Report",
            columns=[
                ("code", "Code"),
                ("name", "Item"),
                ("category", "Category"),
                ("unit", "Unit"),
                ("current_stock", "On Hand"),
                ("reserved_stock", "Reserved"),
                ("available_stock", "Available"),
                ("reorder_level", "Reorder Level"),
                ("unit_price", "Unit Price"),
                ("stock_value", "Value"),
            ],
            rows=rows,
            summary=InventoryService.stock_summary(ctx),
            sections={"low_stock_items": low_stock, "high_value_items": high_value},
        )

    @staticmethod
    def production_report(ctx: RequestContext, start=None, end=None) -> Report:
        start, end = default_range(start, end)
        orders = ctx.scope(ProductionOrder.objects).filter(created_at__date__range=(start, end)).order_by("-created_at", "-id")
        totals = orders.aggregate(
            count=Count("id"),
            planned=Sum("planned_quantity"),
            completed=Sum("completed_quantity"),
            rejected=Sum("rejected_quantity"),
        )
        planned = totals["planned"] or ZERO
        completed = totals["completed"] or ZERO
        by_status = {row["status"]: row["count"] for row in orders.values("status").annotate(count=Count("id"))}
        rows = [
            {
                "order_number": order.order_number,
                "product_name": order.product_name,
                "status": order.status,
                "priority": order.priority,
                "planned_quantity": order.planned_quantity,
                "completed_quantity": order.completed_quantity,
                "rejected_quantity": order.rejected_quantity,
                "unit": order.unit,
            }
            for order in orders
        ]
        processes = {
            service.model._meta.model_name: service.analytics(ctx, start, end)
            for service in (DyeingService, PrintingService, FinishingService, CuttingPackingService)
        }
        return Report(
            name="production",
            title="Production Report",
            columns=[
                ("order_number", "Order"),
                ("product_name", "Product"),
                ("status", "Status"),
                ("priority", "Priority"),
                ("planned_quantity", "Planned"),
                ("completed_quantity", "Completed"),
                ("rejected_quantity", "Rejected"),
                ("unit", "Unit"),
            ],
            rows=rows,
            summary={
                "total_orders": totals["count"] or 0,
                "by_status": by_status,
                "total_planned": planned,
                "total_completed": completed,
                "total_rejected": totals["rejected"] or ZERO,
                "completion_rate": _money(completed / planned * 100) if planned else ZERO,
            },
            sections={"process_summary": processes},
            start_date=start,
            end_date=end,
        )

    @staticmethod
    def _purchase_orders(ctx: RequestContext, start, end, filters: Optional[Dict] = None):
        orders = ctx.scope(PurchaseOrder.objects).filter(order_date__range=(start, end))
        for name in ("supplier", "status"):
            value = (filters or {}).get(name)
            if value:
                orders = orders.filter(**{name: value})
        return orders

    @staticmethod
    def purchase_summary_report(ctx: RequestContext, start=None, end=None, filters: Optional[Dict] = None) -> Report:
        start, end = default_range(start, end)
        orders = ReportService._purchase_orders(ctx, start, end, filters).select_related("supplier").order_by("-order_date", "-id")
        totals = orders.exclude(status=PurchaseOrder.Status.CANCELLED).aggregate(
            count=Count("id"), amount=Sum("total_amount"), tax=Sum("tax_amount"), average=Avg("total_amount")
        )
        by_status = {row["status"]: row["count"] for row in orders.values("status").annotate(count=Count("id"))}
        rows = [
            {
                "order_number": order.order_number,
                "order_date": order.order_date,
                "supplier": order.supplier.name,
                "status": order.status,
                "expected_delivery_date": order.expected_delivery_date,
                "tax_amount": order.tax_amount,
                "total_amount": order.total_amount,
            }
            for order in orders
        ]
        return Report(
            name="purchase-summary",
            title="Purchase Summary Report",
            columns=[
                ("order_number", "PO Number"),
                ("order_date", "Date"),
                ("supplier", "Supplier"),
                ("status", "Status"),
                ("expected_delivery_date", "Expected Delivery"),
                ("tax_amount", "Tax"),
                ("total_amount", "Total"),
            ],
            rows=rows,
            summary={
                "total_orders": totals["count"] or 0,
                "total_amount": _money(totals["amount"]),
                "total_tax": _money(totals["tax"]),
                "average_order_value": _money(totals["average"]),
                "by_status": by_status,
            },
            start_date=start,
            end_date=end,
        )

    @staticmethod
    def supplier_wise_purchase_report(ctx: RequestContext, start=None, end=None, filters: Optional[Dict] = None) -> Report:
        start, end = default_range(start, end)
        grouped = (
            ReportService._purchase_orders(ctx, start, end, filters)
            .exclude(status=PurchaseOrder.Status.CANCELLED)
            .values("supplier__code", "supplier__name")
            .annotate(orders=Count("id"), amount=Sum("total_amount"), tax=Sum("tax_amount"), average=Avg("total_amount"))
            .order_by("-amount", "supplier__code")
        )
        rows = [
            {
                "supplier_code": row["supplier__code"],
                "supplier_name": row["supplier__name"],
                "total_orders": row["orders"],
                "total_amount": _money(row["amount"]),
                "total_tax": _money(row["tax"]),
                "average_order_value": _money(row["average"]),
            }
            for row in grouped
        ]
        return Report(
            name="supplier-wise-purchase",
            title="Supplier-wise Purchase Report",
            columns=[
                ("supplier_code", "Code"),
                ("supplier_name", "Supplier"),
                ("total_orders", "Orders"),
                ("total_amount", "Amount"),
                ("total_tax", "Tax"),
                ("average_order_value", "Average Order"),
            ],
            rows=rows,
            summary={
                "total_suppliers": len(rows),
                "total_orders": sum(row["total_orders"] for row in rows),
                "total_amount": sum((row["total_amount"] for row in rows), ZERO),
            },
            start_date=start,
            end_date=end,
        )

    REPORTS = {
        "sales": "sales_report",
        "inventory": "inventory_report",
        "production": "production_report",
        "purchase-summary": "purchase_summary_report",
        "supplier-wise-purchase": "supplier_wise_purchase_report",
    }

    @classmethod
    def build(cls, name: str, ctx: RequestContext, start=None, end=None, filters: Optional[Dict] = None) -> Report:
        method = getattr(cls, cls.REPORTS[name])
        if name in ("purchase-summary", "supplier-wise-purchase"):
            report = method(ctx, start, end, filters)
        else:
            report = method(ctx, start, end)
        logger.info("Built %s report for company %s with %d rows", name, ctx.company_id, len(report.rows))
        return report
