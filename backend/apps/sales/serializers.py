from __future__ import annotations

import re

from rest_framework import serializers

from apps.inventory.models import InventoryItem

from .models import Customer, CustomerOrder, CustomerOrderItem

PHONE_RE = re.compile(r'^\+?[0-9\s\-()]{7,20}$')


class CustomerSerializer(serializers.ModelSerializer):
    code = serializers.CharField(max_length=20, required=False, allow_blank=True)

    class Meta:
        model = Customer
        fields = [
            "id",
            "code",
            "name",
            "contact_person",
            "email",
            "phone",
            "mobile",
            "gstin",
            "billing_address",
            "shipping_address",
            "city",
            "state",
            "credit_limit",
            "credit_days",
            "payment_terms",
            "customer_type",
            "category",
            "rating",
            "notes",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["is_active", "created_at", "updated_at"]

    def _others(self):
        customers = Customer.objects.filter(company=self.context["ctx"].company)
        if self.instance is not None:
            customers = customers.exclude(pk=self.instance.pk)
        return customers

    def validate_code(self, value: str) -> str:
        code = (value or "").strip().upper()
        if code and self._others().filter(code=code).exists():
            raise serializers.ValidationError("Customer code already exists")
        return code

    def validate_email(self, value: str) -> str:
        email = (value or "").strip().lower()
        if email and self._others().filter(email=email).exists():
            raise serializers.ValidationError("Customer with this email already exists")
        return email

    def validate_phone(self, value: str) -> str:
        if value and not PHONE_RE.match(value):
            raise serializers.ValidationError("Invalid phone number")
        return value

    def validate_credit_limit(self, value):
        if value < 0:
            raise serializers.ValidationError("Credit limit cannot be negative")
        return value

    def validate_rating(self, value):
        if value is not None and not 1 <= value <= 5:
            raise serializers.ValidationError("Rating must be between 1 and 5")
        return value

    def update(self, instance, validated_data):
        if not validated_data.get("code", True):
            validated_data.pop("code")
        return super().update(instance, validated_data)


class CustomerOrderItemSerializer(serializers.ModelSerializer):
    inventory_item = serializers.PrimaryKeyRelatedField(queryset=InventoryItem.objects.all(), required=False, allow_null=True)
    inventory_item_code = serializers.CharField(source="inventory_item.code", read_only=True, default=None)

    class Meta:
        model = CustomerOrderItem
        fields = [
            "id",
            "item_name",
            "product_type",
            "description",
            "material_source",
            "inventory_item",
            "inventory_item_code",
            "quantity",
            "unit",
            "rate",
            "work_amount",
            "tax_rate",
            "line_total",
            "tax_amount",
            "total_amount",
        ]
        read_only_fields = ["line_total", "tax_amount", "total_amount"]

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than zero")
        return value

    def validate_rate(self, value):
        if value < 0:
            raise serializers.ValidationError("Rate cannot be negative")
        return value


class CustomerOrderSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    customer_code = serializers.CharField(source="customer.code", read_only=True)
    items = CustomerOrderItemSerializer(many=True)

    class Meta:
        model = CustomerOrder
        fields = [
            "id",
            "order_number",
            "customer",
            "customer_name",
            "customer_code",
            "order_date",
            "expected_delivery_date",
            "status",
            "priority",
            "payment_status",
            "delivery_address",
            "special_instructions",
            "items",
            "subtotal",
            "tax_amount",
            "total_amount",
            "confirmed_at",
            "production_started_at",
            "completed_at",
            "dispatched_at",
            "cancelled_at",
            "cancellation_reason",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "order_number",
            "status",
            "payment_status",
            "subtotal",
            "tax_amount",
            "total_amount",
            "confirmed_at",
            "production_started_at",
            "completed_at",
            "dispatched_at",
            "cancelled_at",
            "cancellation_reason",
            "created_by",
            "created_at",
            "updated_at",
        ]
        extra_kwargs = {"order_date": {"required": False}}

    def validate_customer(self, customer):
        if customer.company_id != self.context["ctx"].company_id:
            raise serializers.ValidationError("Customer not found")
        return customer

    def validate_items(self, items):
        if not items:
            raise serializers.ValidationError("Order must contain at least one item")
        return items


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CustomerOrder.Status.choices)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
