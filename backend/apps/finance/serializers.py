from __future__ import annotations

from rest_framework import serializers

from .models import Invoice, InvoiceItem, InvoicePayment, InvoiceStatus, PaymentMethod


class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = [
            "id",
            "description",
            "hsn_code",
            "quantity",
            "unit",
            "rate",
            "discount_type",
            "discount_value",
            "tax_rate",
            "gross_amount",
            "discount_amount",
            "taxable_amount",
            "tax_amount",
            "line_total",
        ]
        read_only_fields = ["gross_amount", "discount_amount", "taxable_amount", "tax_amount", "line_total"]


class InvoicePaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoicePayment
        fields = ["id", "payment_date", "amount", "payment_method", "reference", "notes", "recorded_by", "recorded_at"]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    order_number = serializers.CharField(source="customer_order.order_number", read_only=True, default=None)
    items = InvoiceItemSerializer(many=True)
    payments = InvoicePaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "customer",
            "customer_name",
            "customer_order",
            "order_number",
            "invoice_date",
            "due_date",
            "status",
            "billing_address",
            "notes",
            "terms",
            "items",
            "payments",
            "subtotal",
            "discount_amount",
            "taxable_amount",
            "tax_amount",
            "total_amount",
            "paid_amount",
            "outstanding_amount",
            "sent_at",
            "paid_at",
            "overdue_at",
            "cancelled_at",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "invoice_number",
            "customer_order",
            "status",
            "subtotal",
            "discount_amount",
            "taxable_amount",
            "tax_amount",
            "total_amount",
            "paid_amount",
            "outstanding_amount",
            "sent_at",
            "paid_at",
            "overdue_at",
            "cancelled_at",
            "created_by",
            "created_at",
            "updated_at",
        ]

    def validate_customer(self, customer):
        if customer.company_id != self.context["ctx"].company_id:
            raise serializers.ValidationError("Customer not found")
        return customer


class InvoiceStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=InvoiceStatus.choices)


class RecordPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=20, decimal_places=2)
    payment_date = serializers.DateField(required=False, allow_null=True, default=None)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.BANK_TRANSFER)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class InvoiceFromOrderSerializer(serializers.Serializer):
    customer_order = serializers.IntegerField()
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
