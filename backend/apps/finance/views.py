from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action

from shared.exceptions import ValidationFailed
from shared.responses import success_response
from shared.views import CompanyScopedViewSet, parse_date_range

from .models import Invoice, InvoiceStatus
from .serializers import (
    InvoiceFromOrderSerializer,
    InvoicePaymentSerializer,
    InvoiceSerializer,
    InvoiceStatusSerializer,
    RecordPaymentSerializer,
)
from .services.invoice_service import InvoiceService


class InvoiceViewSet(CompanyScopedViewSet):
    serializer_class = InvoiceSerializer
    queryset = Invoice.objects.select_related("customer", "customer_order").prefetch_related("items", "payments")
    search_fields = ["invoice_number", "customer__name", "customer__code"]
    ordering_fields = ["invoice_number", "invoice_date", "due_date", "total_amount", "outstanding_amount"]
    filter_params = ("status", "customer", "customer_order")
    date_filter_lookup = "invoice_date"
    entity_label = "Invoice"

    def perform_create(self, serializer):
        invoice = InvoiceService.create_invoice(self.get_context(), serializer.validated_data)
        serializer.instance = invoice
        self.audit(invoice, "CREATE", f"Invoice {invoice.invoice_number} created.")

    def perform_update(self, serializer):
        invoice = InvoiceService.update_invoice(self.get_context(), serializer.instance.pk, serializer.validated_data)
        serializer.instance = invoice
        self.audit(invoice, "UPDATE", f"Invoice {invoice.invoice_number} updated.")

    def perform_destroy(self, instance):
        if instance.status != InvoiceStatus.DRAFT:
            raise ValidationFailed("Only draft invoices can be deleted")
        super().perform_destroy(instance)

    def _fresh(self, invoice):
        return self.get_queryset().get(pk=invoice.pk)

    @action(detail=False, methods=["post"], url_path="from-order")
    def from_order(self, request):
        serializer = InvoiceFromOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        invoice = InvoiceService.create_from_order(
            self.get_context(), data["customer_order"], due_date=data["due_date"], notes=data["notes"]
        )
        self.audit(invoice, "CREATE", f"Invoice {invoice.invoice_number} raised from order {invoice.customer_order}.")
        return self.respond(self._fresh(invoice), "Invoice created successfully", status_code=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch", "post"], url_path="status")
    def change_status(self, request, pk=None):
        invoice = self.get_object()
        serializer = InvoiceStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        previous = invoice.status
        invoice = InvoiceService.update_status(self.get_context(), invoice.pk, serializer.validated_data["status"])
        self.audit(
            invoice,
            "STATUS_CHANGE",
            f"Invoice {invoice.invoice_number} moved from {previous} to {invoice.status}.",
            before={"status": previous},
            after={"status": invoice.status},
        )
        return self.respond(self._fresh(invoice), "Invoice status updated successfully")

    @action(detail=True, methods=["get", "post"])
    def payments(self, request, pk=None):
        invoice = self.get_object()
        if request.method == "GET":
            return success_response(InvoicePaymentSerializer(invoice.payments.all(), many=True).data)
        serializer = RecordPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        payment = InvoiceService.record_payment(
            self.get_context(),
            invoice.pk,
            data["amount"],
            payment_date=data["payment_date"],
            payment_method=data["payment_method"],
            reference=data["reference"],
            notes=data["notes"],
        )
        self.audit(
            invoice,
            "PAYMENT",
            f"Payment of {payment.amount} recorded on invoice {invoice.invoice_number}.",
            after={"amount": str(payment.amount), "method": payment.payment_method},
        )
        return self.respond(self._fresh(invoice), "Payment recorded successfully")

    @action(detail=False, methods=["get"])
    def overdue(self, request):
        queryset = InvoiceService.overdue_invoices(self.get_context()).prefetch_related("items", "payments")
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(self.get_serializer(page, many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        start, end = parse_date_range(request.query_params)
        return success_response(InvoiceService.stats(self.get_context(), start, end))
