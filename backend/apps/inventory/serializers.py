from __future__ import annotations

from rest_framework import serializers

from .models import Category, InventoryItem, StockMovement


class CategorySerializer(serializers.ModelSerializer):
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ["id", "name", "description", "icon", "color", "is_active", "item_count", "created_at", "updated_at"]
        read_only_fields = ["is_active", "created_at", "updated_at"]

    def get_item_count(self, obj: Category) -> int:
        return obj.items.filter(is_active=True).count()

    def validate_name(self, value: str) -> str:
        name = (value or "").strip()
        if not name:
            raise serializers.ValidationError("Category name is required")
        ctx = self.context["ctx"]
        duplicates = Category.objects.filter(company=ctx.company, name__iexact=name)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("Category with this name already exists in the company")
        return name


class InventoryItemSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    stock_value = serializers.DecimalField(max_digits=30, decimal_places=2, read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = InventoryItem
        fields = [
            "id",
            "code",
            "name",
            "description",
            "category",
            "category_name",
            "item_type",
            "unit",
            "unit_price",
            "reorder_level",
            "current_stock",
            "reserved_stock",
            "available_stock",
            "stock_value",
            "is_low_stock",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["current_stock", "reserved_stock", "available_stock", "is_active", "created_at", "updated_at"]

    def validate_code(self, value: str) -> str:
        code = (value or "").strip().upper()
        ctx = self.context["ctx"]
        duplicates = InventoryItem.objects.filter(company=ctx.company, code=code)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("Item code already exists")
        return code

    def validate_category(self, category):
        if category is not None and category.company_id != self.context["ctx"].company_id:
            raise serializers.ValidationError("Category not found")
        return category

    def validate_unit_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Unit price cannot be negative")
        return value


class OpeningStockSerializer(InventoryItemSerializer):
    opening_stock = serializers.DecimalField(max_digits=15, decimal_places=3, min_value=0, required=False, write_only=True)

    class Meta(InventoryItemSerializer.Meta):
        fields = InventoryItemSerializer.Meta.fields + ["opening_stock"]


class StockMovementSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.code", read_only=True)
    item_name = serializers.CharField(source="item.name", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "movement_number",
            "item",
            "item_code",
            "item_name",
            "movement_type",
            "quantity",
            "unit",
            "previous_stock",
            "new_stock",
            "from_location",
            "to_location",
            "reference_type",
            "reference_id",
            "reference_number",
            "notes",
            "movement_date",
            "created_by",
        ]
        read_only_fields = fields


class StockUpdateSerializer(serializers.Serializer):
    movement_type = serializers.ChoiceField(choices=StockMovement.MovementType.choices)
    quantity = serializers.DecimalField(max_digits=15, decimal_places=3, min_value=0)
    reference_number = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    from_location = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    to_location = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
