from __future__ import annotations

from rest_framework import serializers

from apps.inventory.models import InventoryItem

from .models import PurchaseOrder, PurchaseOrderItem, Supplier


class SupplierSerializer(serializers.ModelSerializer):
    code = serializers.CharField(max_length=20, required=False, allow_blank=True)

    class Meta:
        model = Supplier
        fields = [
            "id",
            "code",
            "name",
            "contact_person",
            "email",
            "phone",
            "gstin",
            "pan",
            "address",
            "city",
            "state",
            "supplier_type",
            "category",
            "payment_terms",
            "credit_limit",
            "rating",
            "notes",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["is_active", "created_at", "updated_at"]

    def validate_code(self, value: str) -> str:
        code = (value or "").strip().upper()
        if not code:
            return code
        duplicates = Supplier.objects.filter(company=self.context["ctx"].company, code=code)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("Supplier code already exists")
        return code

    def validate_rating(self, value):
        if value is not None and not 0 <= value <= 5:
            raise serializers.ValidationError("Rating must be between 0 and 5")
        return value

    def update(self, instance, validated_data):
        if not validated_data.get("code", True):
            validated_data.pop("code")
        return super().update(instance, validated_data)


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    inventory_item = serializers.PrimaryKeyRelatedField(queryset=InventoryItem.objects.all(), required=False, allow_null=True)
    pending_quantity = serializers.DecimalField(max_digits=15, decimal_places=3, read_only=True)

    class Meta:
        model = PurchaseOrderItem
        fields = [
            "id",
            "inventory_item",
            "item_name",
            "description",
            "quantity",
            "received_quantity",
            "pending_quantity",
            "unit",
            "rate",
            "tax_rate",
            "line_total",
            "tax_amount",
        ]
        read_only_fields = ["received_quantity", "line_total", "tax_amount"]


class PurchaseOrderSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    supplier_code = serializers.CharField(source="supplier.code", read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)
    items = PurchaseOrderItemSerializer(many=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            "id",
            "order_number",
            "supplier",
            "supplier_name",
            "supplier_code",
            "order_date",
            "expected_delivery_date",
            "status",
            "priority",
            "delivery_address",
            "terms",
            "notes",
            "items",
            "subtotal",
            "tax_amount",
            "total_amount",
            "is_overdue",
            "approved_at",
            "approved_by",
            "ordered_at",
            "ordered_by",
            "received_at",
            "received_by",
            "cancelled_at",
            "cancelled_by",
            "cancellation_reason",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "order_number",
            "status",
            "subtotal",
            "tax_amount",
            "total_amount",
            "approved_at",
            "approved_by",
            "ordered_at",
            "ordered_by",
            "received_at",
            "received_by",
            "cancelled_at",
            "cancelled_by",
            "cancellation_reason",
            "created_by",
            "created_at",
            "updated_at",
        ]

    def validate_supplier(self, supplier):
        if supplier.company_id != self.context["ctx"].company_id:
            raise serializers.ValidationError("Supplier not found")
        return supplier


class PurchaseStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PurchaseOrder.Status.choices)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class ReceiptLineSerializer(serializers.Serializer):
    item = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=15, decimal_places=3)


class ReceiveItemsSerializer(serializers.Serializer):
    items = ReceiptLineSerializer(many=True, allow_empty=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class RatingSerializer(serializers.Serializer):
    rating = serializers.DecimalField(max_digits=3, decimal_places=1)
