from __future__ import annotations

from rest_framework.decorators import action

from shared.exceptions import ValidationFailed
from shared.responses import success_response
from shared.views import CompanyScopedViewSet, parse_date_range

from .models import PurchaseOrder, Supplier
from .serializers import (
    PurchaseOrderSerializer,
    PurchaseStatusSerializer,
    RatingSerializer,
    ReceiveItemsSerializer,
    SupplierSerializer,
)
from .services.purchase_service import PurchaseOrderService, SupplierService


class SupplierViewSet(CompanyScopedViewSet):
    serializer_class = SupplierSerializer
    queryset = Supplier.objects.all()
    search_fields = ["code", "name", "contact_person", "email", "phone", "city"]
    ordering_fields = ["code", "name", "rating", "created_at"]
    filter_params = ("category", "supplier_type", "city", "state")
    entity_label = "Supplier"
    soft_delete = True

    def get_queryset(self):  # type: ignore[override]
        queryset = super().get_queryset()
        if self.action == "list" and self.request.query_params.get("include_inactive") not in {"1", "true"}:
            queryset = queryset.active()
        return queryset

    def perform_create(self, serializer):
        serializer.instance = SupplierService.create_supplier(self.get_context(), serializer.validated_data)
        self.audit(serializer.instance, "CREATE", f"Supplier {serializer.instance.code} created.")

    @action(detail=True, methods=["patch"])
    def rating(self, request, pk=None):
        supplier = self.get_object()
        serializer = RatingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        before = {"rating": str(supplier.rating)}
        supplier = SupplierService.update_rating(self.get_context(), supplier, serializer.validated_data["rating"])
        self.audit(supplier, "UPDATE", f"Supplier {supplier.code} rated {supplier.rating}.", before=before, after={"rating": str(supplier.rating)})
        return self.respond(supplier, "Supplier rating updated successfully")

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return success_response(SupplierService.stats(self.get_context()))

    @action(detail=True, methods=["get"])
    def orders(self, request, pk=None):
        supplier = self.get_object()
        queryset = supplier.purchase_orders.select_related("supplier").prefetch_related("items").order_by("-order_date", "-id")
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(PurchaseOrderSerializer(page, many=True, context=self.get_serializer_context()).data)


class PurchaseOrderViewSet(CompanyScopedViewSet):
    serializer_class = PurchaseOrderSerializer
    queryset = PurchaseOrder.objects.select_related("supplier").prefetch_related("items")
    search_fields = ["order_number", "supplier__name", "supplier__code"]
    ordering_fields = ["order_number", "order_date", "expected_delivery_date", "total_amount", "created_at"]
    filter_params = ("status", "priority", "supplier")
    date_filter_lookup = "order_date"
    entity_label = "Purchase order"

    def perform_create(self, serializer):
        order = PurchaseOrderService.create_order(self.get_context(), serializer.validated_data)
        serializer.instance = order
        self.audit(order, "CREATE", f"Purchase order {order.order_number} created.")

    def perform_update(self, serializer):
        order = PurchaseOrderService.update_order(self.get_context(), serializer.instance.pk, serializer.validated_data)
        serializer.instance = order
        self.audit(order, "UPDATE", f"Purchase order {order.order_number} updated.")

    def perform_destroy(self, instance):
        if instance.status != PurchaseOrder.Status.DRAFT:
            raise ValidationFailed("Only draft purchase orders can be deleted")
        super().perform_destroy(instance)

    @action(detail=True, methods=["patch", "post"])
    def status(self, request, pk=None):
        order = self.get_object()
        serializer = PurchaseStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        previous = order.status
        order = PurchaseOrderService.update_status(
            self.get_context(), order.pk, serializer.validated_data["status"], reason=serializer.validated_data["reason"]
        )
        self.audit(
            order,
            "STATUS_CHANGE",
            f"Purchase order {order.order_number} moved from {previous} to {order.status}.",
            before={"status": previous},
            after={"status": order.status},
        )
        return self.respond(self.get_queryset().get(pk=order.pk), "Purchase order status updated successfully")

    @action(detail=True, methods=["post"])
    def receive(self, request, pk=None):
        order = self.get_object()
        serializer = ReceiveItemsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        previous = order.status
        order = PurchaseOrderService.receive_items(
            self.get_context(), order.pk, serializer.validated_data["items"], notes=serializer.validated_data["notes"]
        )
        self.audit(
            order,
            "STOCK_CHANGE",
            f"Goods received against {order.order_number}.",
            before={"status": previous},
            after={"status": order.status},
        )
        return self.respond(self.get_queryset().get(pk=order.pk), "Items received successfully")

    @action(detail=False, methods=["get"])
    def overdue(self, request):
        queryset = PurchaseOrderService.overdue_orders(self.get_context()).prefetch_related("items")
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(self.get_serializer(page, many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        start, end = parse_date_range(request.query_params)
        return success_response(PurchaseOrderService.stats(self.get_context(), start, end))
