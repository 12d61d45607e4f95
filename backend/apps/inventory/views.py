from __future__ import annotations

from django.db import transaction
from rest_framework.decorators import action

from shared.exceptions import ValidationFailed
from shared.responses import success_response
from shared.views import CompanyScopedMixin, CompanyScopedViewSet, EnvelopeReadOnlyModelViewSet

from .models import Category, InventoryItem, StockMovement
from .serializers import (
    CategorySerializer,
    InventoryItemSerializer,
    OpeningStockSerializer,
    StockMovementSerializer,
    StockUpdateSerializer,
)
from .services.stock_service import InventoryService


class CategoryViewSet(CompanyScopedViewSet):
    serializer_class = CategorySerializer
    queryset = Category.objects.all()
    search_fields = ["name", "description"]
    ordering_fields = ["name", "created_at"]
    entity_label = "Category"
    soft_delete = True

    def get_queryset(self):  # type: ignore[override]
        queryset = super().get_queryset()
        if self.action == "list" and self.request.query_params.get("include_inactive") not in {"1", "true"}:
            queryset = queryset.active()
        return queryset

    def perform_destroy(self, instance):
        in_use = instance.items.count()
        if in_use:
            raise ValidationFailed(f"Cannot delete category. It is being used by {in_use} inventory item(s)")
        super().perform_destroy(instance)


class InventoryItemViewSet(CompanyScopedViewSet):
    serializer_class = InventoryItemSerializer
    queryset = InventoryItem.objects.select_related("category")
    search_fields = ["code", "name", "description"]
    ordering_fields = ["code", "name", "current_stock", "created_at"]
    filter_params = ("category", "item_type")
    entity_label = "Inventory item"
    soft_delete = True

    def get_serializer_class(self):
        if self.action == "create":
            return OpeningStockSerializer
        if self.action == "stock":
            return StockUpdateSerializer
        return InventoryItemSerializer

    @transaction.atomic
    def perform_create(self, serializer):
        opening_stock = serializer.validated_data.pop("opening_stock", None)
        super().perform_create(serializer)
        if opening_stock:
            InventoryService.update_stock(
                self.get_context(),
                serializer.instance.pk,
                opening_stock,
                StockMovement.MovementType.IN,
                notes="Opening stock",
            )
            serializer.instance.refresh_from_db()

    @action(detail=True, methods=["post"])
    def stock(self, request, pk=None):
        """Manual stock in/out/adjustment/transfer for a single item."""
        item = self.get_object()
        serializer = StockUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        movement = InventoryService.update_stock(
            self.get_context(),
            item.pk,
            data["quantity"],
            data["movement_type"],
            reference_number=data["reference_number"],
            notes=data["notes"],
            from_location=data["from_location"],
            to_location=data["to_location"],
        )
        item.refresh_from_db()
        self.audit(item, "STOCK_CHANGE", f"Stock {movement.movement_type} of {movement.quantity} ({movement.movement_number}).")
        return success_response(
            {
                "item": InventoryItemSerializer(item, context=self.get_serializer_context()).data,
                "movement": StockMovementSerializer(movement).data,
            },
            "Stock updated successfully",
        )

    @action(detail=True, methods=["get"])
    def movements(self, request, pk=None):
        item = self.get_object()
        queryset = item.movements.order_by("-movement_date", "-id")
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(StockMovementSerializer(page, many=True).data)

    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        items = InventoryService.low_stock_items(self.get_context()).select_related("category")
        return success_response(InventoryItemSerializer(items, many=True, context=self.get_serializer_context()).data)

    @action(detail=False, methods=["get"])
    def summary(self, request):
        return success_response(InventoryService.stock_summary(self.get_context()))


class StockMovementViewSet(CompanyScopedMixin, EnvelopeReadOnlyModelViewSet):
    """Read-only stock ledger; movements are written by stock operations only."""

    serializer_class = StockMovementSerializer
    queryset = StockMovement.objects.select_related("item")

    def get_queryset(self):  # type: ignore[override]
        queryset = super().get_queryset()
        params = self.request.query_params
        for name in ("item", "movement_type", "reference_type", "reference_id"):
            value = params.get(name)
            if value:
                if name == "item" and not value.isdigit():
                    raise ValidationFailed("Invalid value for item.")
                queryset = queryset.filter(**{name: value})
        return queryset
