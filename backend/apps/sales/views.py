from __future__ import annotations

from rest_framework.decorators import action

from shared.exceptions import ValidationFailed
from shared.responses import success_response
from shared.views import CompanyScopedViewSet, parse_date_range

from .models import Customer, CustomerOrder
from .serializers import CancelOrderSerializer, CustomerOrderSerializer, CustomerSerializer, OrderStatusSerializer
from .services.customer_service import CustomerService
from .services.order_service import CustomerOrderService


class CustomerViewSet(CompanyScopedViewSet):
    serializer_class = CustomerSerializer
    queryset = Customer.objects.all()
    search_fields = ["code", "name", "email", "phone", "contact_person"]
    ordering_fields = ["code", "name", "credit_limit", "created_at"]
    filter_params = ("category", "customer_type", "city", "state")
    entity_label = "Customer"
    soft_delete = True

    def get_queryset(self):  # type: ignore[override]
        queryset = super().get_queryset()
        if self.action == "list" and self.request.query_params.get("include_inactive") not in {"1", "true"}:
            queryset = queryset.active()
        return queryset

    def perform_create(self, serializer):
        serializer.instance = CustomerService.create_customer(self.get_context(), serializer.validated_data)
        self.audit(serializer.instance, "CREATE", f"Customer {serializer.instance.code} created.")

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return success_response(CustomerService.stats(self.get_context()))

    @action(detail=True, methods=["get"])
    def orders(self, request, pk=None):
        customer = self.get_object()
        queryset = CustomerService.order_history(self.get_context(), customer)
        page = self.paginate_queryset(queryset)
        data = CustomerOrderSerializer(page, many=True, context=self.get_serializer_context()).data
        return self.get_paginated_response(data)


class CustomerOrderViewSet(CompanyScopedViewSet):
    serializer_class = CustomerOrderSerializer
    queryset = CustomerOrder.objects.select_related("customer").prefetch_related("items__inventory_item")
    search_fields = ["order_number", "customer__name", "customer__code"]
    ordering_fields = ["order_number", "order_date", "expected_delivery_date", "total_amount", "created_at"]
    filter_params = ("status", "priority", "customer", "payment_status")
    date_filter_lookup = "order_date"
    entity_label = "Customer order"

    def perform_create(self, serializer):
        order = CustomerOrderService.create_order(self.get_context(), serializer.validated_data)
        serializer.instance = order
        self.audit(order, "CREATE", f"Customer order {order.order_number} created.")

    def perform_update(self, serializer):
        order = CustomerOrderService.update_order(self.get_context(), serializer.instance.pk, serializer.validated_data)
        serializer.instance = order
        self.audit(order, "UPDATE", f"Customer order {order.order_number} updated.")

    def perform_destroy(self, instance):
        if instance.status != CustomerOrder.Status.DRAFT:
            raise ValidationFailed("Only draft orders can be deleted")
        super().perform_destroy(instance)

    @action(detail=True, methods=["patch", "post"])
    def status(self, request, pk=None):
        order = self.get_object()
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        previous = order.status
        order = CustomerOrderService.update_status(
            self.get_context(), order.pk, serializer.validated_data["status"], reason=serializer.validated_data["reason"]
        )
        self.audit(
            order,
            "STATUS_CHANGE",
            f"Customer order {order.order_number} moved from {previous} to {order.status}.",
            before={"status": previous},
            after={"status": order.status},
        )
        return self.respond(self.get_queryset().get(pk=order.pk), "Order status updated successfully")

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        order = self.get_object()
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        previous = order.status
        order = CustomerOrderService.cancel_order(self.get_context(), order.pk, serializer.validated_data["reason"])
        self.audit(
            order,
            "STATUS_CHANGE",
            f"Customer order {order.order_number} cancelled.",
            before={"status": previous},
            after={"status": order.status, "reason": order.cancellation_reason},
        )
        return self.respond(self.get_queryset().get(pk=order.pk), "Order cancelled successfully")

    @action(detail=True, methods=["get"], url_path="stock-impact")
    def stock_impact(self, request, pk=None):
        order = self.get_object()
        return success_response(CustomerOrderService.stock_impact_summary(self.get_context(), order.pk))

    @action(detail=False, methods=["get"])
    def stats(self, request):
        start, end = parse_date_range(request.query_params)
        return success_response(CustomerOrderService.stats(self.get_context(), start, end))
