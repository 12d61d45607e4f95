from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Dict, Iterable, List

from django.db import transaction
from django.db.models import Avg, Count, Sum
from django.utils import timezone

from apps.sales.models import Customer, CustomerOrder
from core.doc_numbers import get_next_doc_no
from shared.context import RequestContext
from shared.exceptions import NotFound, ValidationFailed
from shared.transitions import TransitionTable

from ..models import Invoice, InvoiceItem, InvoicePayment, InvoiceStatus

logger = logging.getLogger(__name__)

S = InvoiceStatus

INVOICE_FIELDS = ("invoice_date", "due_date", "billing_address", "notes", "terms")
ITEM_FIELDS = ("description", "hsn_code", "quantity", "unit", "rate", "discount_type", "discount_value", "tax_rate")
PAYABLE_STATUSES = (S.SENT, S.PARTIALLY_PAID, S.OVERDUE)


class InvoiceService:
    """
    Invoice lifecycle: creation with discount/tax totals, status changes and payments.

    ``outstanding_amount`` is always ``total_amount - paid_amount``; payments never exceed it.
    """

    TRANSITIONS = TransitionTable(
        "invoice",
        {
            S.DRAFT: [S.SENT, S.CANCELLED],
            S.SENT: [S.PAID, S.PARTIALLY_PAID, S.OVERDUE, S.CANCELLED],
            S.PARTIALLY_PAID: [S.PAID, S.OVERDUE, S.CANCELLED],
            S.OVERDUE: [S.PAID, S.PARTIALLY_PAID, S.CANCELLED],
            S.PAID: [],
            S.CANCELLED: [],
        },
    )

    STATUS_TIMESTAMPS = {
        S.SENT: "sent_at",
        S.PAID: "paid_at",
        S.OVERDUE: "overdue_at",
        S.CANCELLED: "cancelled_at",
    }

    @staticmethod
    def get_invoice(ctx: RequestContext, invoice_id, *, lock: bool = False) -> Invoice:
        queryset = ctx.scope(Invoice.objects)
        if lock:
            queryset = queryset.select_for_update()
        invoice = queryset.filter(pk=invoice_id).first()
        if invoice is None:
            raise NotFound("Invoice not found")
        return invoice

    @staticmethod
    def _validate_items(items: Iterable[dict]) -> List[dict]:
        items = list(items or [])
        if not items:
            raise ValidationFailed("Invoice must have at least one item")
        cleaned = []
        for index, raw in enumerate(items, start=1):
            line = {key: raw[key] for key in ITEM_FIELDS if key in raw and raw[key] is not None}
            if not line.get("description"):
                raise ValidationFailed(f"Item {index}: Description or name is required")
            if Decimal(str(line.get("quantity", 0))) <= 0:
                raise ValidationFailed(f"Item {index}: Quantity must be greater than 0")
            if Decimal(str(line.get("rate", -1))) < 0:
                raise ValidationFailed(f"Item {index}: Rate must be non-negative")
            if Decimal(str(line.get("discount_value", 0))) < 0:
                raise ValidationFailed(f"Item {index}: Discount cannot be negative")
            cleaned.append(line)
        return cleaned

    @staticmethod
    @transaction.atomic
    def create_invoice(ctx: RequestContext, data: Dict, *, customer_order: CustomerOrder = None) -> Invoice:
        customer_id = getattr(data.get("customer"), "pk", data.get("customer"))
        if not customer_id:
            raise ValidationFailed("Customer ID is required")
        customer = ctx.scope(Customer.objects).filter(pk=customer_id).first()
        if customer is None:
            raise ValidationFailed("Customer not found")
        items = InvoiceService._validate_items(data.get("items"))
        fields = {key: data[key] for key in INVOICE_FIELDS if key in data and data[key] is not None}
        if not fields.get("due_date"):
            raise ValidationFailed("Due date is required")
        fields.setdefault("invoice_date", timezone.localdate())
        if fields["due_date"] < fields["invoice_date"]:
            raise ValidationFailed("Due date cannot be before the invoice date")
        if not fields.get("billing_address"):
            fields["billing_address"] = customer.billing_address

        invoice = Invoice.objects.create(
            company=ctx.company,
            created_by=ctx.actor,
            customer=customer,
            customer_order=customer_order,
            invoice_number=get_next_doc_no(company=ctx.company, doc_type="INV"),
            **fields,
        )
        for line in items:
            InvoiceItem.objects.create(invoice=invoice, **line)
        invoice.refresh_totals()
        logger.info("Invoice %s created for %s total %s", invoice.invoice_number, customer.code, invoice.total_amount)
        return invoice

    @staticmethod
    def create_from_order(ctx: RequestContext, order_id, *, due_date=None, notes: str = "") -> Invoice:
        order = ctx.scope(CustomerOrder.objects).select_related("customer").filter(pk=order_id).first()
        if order is None:
            raise NotFound("Order not found")
        if order.status in (CustomerOrder.Status.DRAFT, CustomerOrder.Status.CANCELLED):
            raise ValidationFailed("Invoices can only be raised for confirmed orders")
        items = []
        for line in order.items.all():
            items.append(
                {
                    "description": line.item_name,
                    "quantity": line.quantity,
                    "unit": line.unit,
                    "rate": line.rate,
                    "tax_rate": line.tax_rate,
                }
            )
            if line.work_amount:
                items.append(
                    {
                        "description": f"Work charges: {line.item_name}",
                        "quantity": Decimal("1"),
                        "unit": "job",
                        "rate": line.work_amount,
                        "tax_rate": line.tax_rate,
                    }
                )
        today = timezone.localdate()
        data = {
            "customer": order.customer_id,
            "invoice_date": today,
            "due_date": due_date or today + timedelta(days=order.customer.payment_terms or 0),
            "billing_address": order.customer.billing_address,
            "notes": notes or f"Against order {order.order_number}",
            "items": items,
        }
        return InvoiceService.create_invoice(ctx, data, customer_order=order)

    @staticmethod
    @transaction.atomic
    def update_invoice(ctx: RequestContext, invoice_id, data: Dict) -> Invoice:
        invoice = InvoiceService.get_invoice(ctx, invoice_id, lock=True)
        if invoice.status != S.DRAFT:
            raise ValidationFailed("Only draft invoices can be updated")
        update_fields = ["updated_at"]
        for key in INVOICE_FIELDS:
            if key in data:
                setattr(invoice, key, data[key])
                update_fields.append(key)
        invoice.save(update_fields=update_fields)
        if "items" in data:
            items = InvoiceService._validate_items(data["items"])
            invoice.items.all().delete()
            for line in items:
                InvoiceItem.objects.create(invoice=invoice, **line)
            invoice.refresh_totals()
        return invoice

    @staticmethod
    def _set_status(invoice: Invoice, new_status: str, update_fields: List[str]) -> None:
        InvoiceService.TRANSITIONS.ensure(invoice.status, new_status)
        invoice.status = new_status
        update_fields.append("status")
        stamp = InvoiceService.STATUS_TIMESTAMPS.get(new_status)
        if stamp:
            setattr(invoice, stamp, timezone.now())
            update_fields.append(stamp)

    @staticmethod
    @transaction.atomic
    def update_status(ctx: RequestContext, invoice_id, new_status: str) -> Invoice:
        invoice = InvoiceService.get_invoice(ctx, invoice_id, lock=True)
        previous = invoice.status
        update_fields = ["updated_at"]
        InvoiceService._set_status(invoice, new_status, update_fields)
        if new_status == S.PAID:
            invoice.paid_amount = invoice.total_amount
            invoice.outstanding_amount = Decimal("0")
            update_fields += ["paid_amount", "outstanding_amount"]
        invoice.save(update_fields=update_fields)
        logger.info("Invoice %s moved from %s to %s", invoice.invoice_number, previous, new_status)
        return invoice

    @staticmethod
    @transaction.atomic
    def record_payment(
        ctx: RequestContext,
        invoice_id,
        amount,
        *,
        payment_date=None,
        payment_method: str = "bank_transfer",
        reference: str = "",
        notes: str = "",
    ) -> InvoicePayment:
        invoice = InvoiceService.get_invoice(ctx, invoice_id, lock=True)
        amount = Decimal(str(amount))
        if amount <= 0:
            raise ValidationFailed("Payment amount must be greater than 0")
        if invoice.status not in PAYABLE_STATUSES:
            raise ValidationFailed(f"Payments cannot be recorded against a {invoice.status} invoice")
        if amount > invoice.outstanding_amount:
            raise ValidationFailed("Payment amount cannot exceed outstanding amount")

        payment = InvoicePayment.objects.create(
            invoice=invoice,
            amount=amount,
            payment_date=payment_date or timezone.localdate(),
            payment_method=payment_method,
            reference=reference,
            notes=notes,
            recorded_by=ctx.actor,
        )
        invoice.paid_amount += amount
        invoice.outstanding_amount = invoice.total_amount - invoice.paid_amount
        update_fields = ["paid_amount", "outstanding_amount", "updated_at"]
        target = S.PAID if invoice.outstanding_amount <= 0 else S.PARTIALLY_PAID
        if target != invoice.status:
            InvoiceService._set_status(invoice, target, update_fields)
        invoice.save(update_fields=update_fields)
        logger.info(
            "Payment of %s recorded on invoice %s, outstanding %s",
            amount,
            invoice.invoice_number,
            invoice.outstanding_amount,
        )
        return payment

    @staticmethod
    def overdue_invoices(ctx: RequestContext):
        return (
            ctx.scope(Invoice.objects)
            .filter(status__in=PAYABLE_STATUSES, due_date__lt=timezone.localdate(), outstanding_amount__gt=0)
            .select_related("customer")
            .order_by("due_date")
        )

    @staticmethod
    def stats(ctx: RequestContext, start_date=None, end_date=None) -> Dict:
        invoices = ctx.scope(Invoice.objects)
        if start_date:
            invoices = invoices.filter(invoice_date__gte=start_date)
        if end_date:
            invoices = invoices.filter(invoice_date__lte=end_date)
        by_status = {value: {"count": 0, "total_value": Decimal("0")} for value in S.values}
        for row in invoices.values("status").annotate(count=Count("id"), total_value=Sum("total_amount")):
            by_status[row["status"]] = {"count": row["count"], "total_value": row["total_value"] or Decimal("0")}
        live = invoices.exclude(status=S.CANCELLED)
        return {
            "total_invoices": invoices.count(),
            "by_status": by_status,
            "total_revenue": invoices.filter(status=S.PAID).aggregate(total=Sum("total_amount"))["total"] or Decimal("0"),
            "total_collected": live.aggregate(total=Sum("paid_amount"))["total"] or Decimal("0"),
            "total_outstanding": live.filter(outstanding_amount__gt=0).aggregate(total=Sum("outstanding_amount"))["total"] or Decimal("0"),
            "average_invoice_value": Decimal(str(invoices.aggregate(avg=Avg("total_amount"))["avg"] or 0)).quantize(Decimal("0.01")),
            "overdue_count": InvoiceService.overdue_invoices(ctx).count(),
        }
