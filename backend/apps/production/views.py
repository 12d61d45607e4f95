from __future__ import annotations

from rest_framework.decorators import action

from shared.exceptions import ValidationFailed
from shared.responses import success_response
from shared.views import CompanyScopedViewSet, parse_date_range

from .models import CuttingPacking, Dyeing, Finishing, Printing, ProductionOrder, ProductionOrderStatus
from .serializers import (
    CuttingPackingSerializer,
    DyeingSerializer,
    FinishingSerializer,
    PrintingSerializer,
    ProcessCompleteSerializer,
    ProductionOrderListSerializer,
    ProductionOrderSerializer,
    ProductionStageSerializer,
    ProductionStatusSerializer,
    QualityCheckSerializer,
    StageCompleteSerializer,
    StageHoldSerializer,
)
from .services.flow_service import ProductionFlowService
from .services.process_service import (
    CuttingPackingService,
    DyeingService,
    FinishingService,
    PrintingService,
    ProcessStageService,
)

STAGE_PATH = r"stages/(?P<stage_number>\d+)"


class ProductionOrderViewSet(CompanyScopedViewSet):
    serializer_class = ProductionOrderSerializer
    queryset = ProductionOrder.objects.select_related("customer_order").prefetch_related("stages")
    search_fields = ["order_number", "product_name", "fabric_type", "color", "design"]
    ordering_fields = ["order_number", "planned_start_date", "planned_end_date", "priority", "created_at"]
    filter_params = ("status", "priority", "customer_order")
    entity_label = "Production order"

    def get_serializer_class(self):
        if self.action == "list":
            return ProductionOrderListSerializer
        return ProductionOrderSerializer

    def perform_create(self, serializer):
        order = ProductionFlowService.create_order(self.get_context(), serializer.validated_data)
        serializer.instance = order
        self.audit(order, "CREATE", f"Production order {order.order_number} created.")

    def perform_update(self, serializer):
        if serializer.instance.status in (ProductionOrderStatus.COMPLETED, ProductionOrderStatus.CANCELLED):
            raise ValidationFailed(f"Production order is {serializer.instance.status}")
        super().perform_update(serializer)

    def perform_destroy(self, instance):
        if instance.status != ProductionOrderStatus.DRAFT:
            raise ValidationFailed("Only draft production orders can be deleted")
        super().perform_destroy(instance)

    def _stage_response(self, stage, message):
        return success_response(ProductionStageSerializer(stage).data, message)

    @action(detail=True, methods=["post"])
    def initialize(self, request, pk=None):
        order = self.get_object()
        order = ProductionFlowService.initialize_flow(self.get_context(), order.pk)
        self.audit(order, "UPDATE", f"Production flow initialized for {order.order_number}.")
        return self.respond(self.get_queryset().get(pk=order.pk), "Production flow initialized successfully")

    @action(detail=True, methods=["get"])
    def stages(self, request, pk=None):
        order = self.get_object()
        return success_response(ProductionStageSerializer(order.stages.all(), many=True).data)

    @action(detail=True, methods=["post"], url_path=f"{STAGE_PATH}/start")
    def start_stage(self, request, pk=None, stage_number=None):
        order = self.get_object()
        stage = ProductionFlowService.start_stage(self.get_context(), order.pk, int(stage_number))
        self.audit(order, "STATUS_CHANGE", f"Stage {stage.stage_number} of {order.order_number} started.", after={"stage": stage.stage_number, "status": stage.status})
        return self._stage_response(stage, "Stage started successfully")

    @action(detail=True, methods=["post"], url_path=f"{STAGE_PATH}/complete")
    def complete_stage(self, request, pk=None, stage_number=None):
        order = self.get_object()
        serializer = StageCompleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        stage = ProductionFlowService.complete_stage(self.get_context(), order.pk, int(stage_number), **serializer.validated_data)
        self.audit(
            order,
            "STATUS_CHANGE",
            f"Stage {stage.stage_number} of {order.order_number} completed.",
            after={
                "stage": stage.stage_number,
                "produced_quantity": str(stage.produced_quantity),
                "defect_quantity": str(stage.defect_quantity),
            },
        )
        return self._stage_response(stage, "Stage completed successfully")

    @action(detail=True, methods=["post"], url_path=f"{STAGE_PATH}/hold")
    def hold_stage(self, request, pk=None, stage_number=None):
        order = self.get_object()
        serializer = StageHoldSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        stage = ProductionFlowService.hold_stage(self.get_context(), order.pk, int(stage_number), serializer.validated_data["reason"])
        self.audit(order, "STATUS_CHANGE", f"Stage {stage.stage_number} of {order.order_number} put on hold.", after={"reason": stage.hold_reason})
        return self._stage_response(stage, "Stage put on hold")

    @action(detail=True, methods=["post"], url_path=f"{STAGE_PATH}/resume")
    def resume_stage(self, request, pk=None, stage_number=None):
        order = self.get_object()
        stage = ProductionFlowService.resume_stage(self.get_context(), order.pk, int(stage_number))
        self.audit(order, "STATUS_CHANGE", f"Stage {stage.stage_number} of {order.order_number} resumed.")
        return self._stage_response(stage, "Stage resumed successfully")

    @action(detail=True, methods=["get"], url_path="flow-status")
    def flow_status(self, request, pk=None):
        order = self.get_object()
        payload = ProductionFlowService.flow_status(self.get_context(), order.pk)
        for key in ("current_stage", "next_stage"):
            if payload[key] is not None:
                payload[key] = ProductionStageSerializer(payload[key]).data
        return success_response(payload)

    @action(detail=True, methods=["patch", "post"])
    def status(self, request, pk=None):
        order = self.get_object()
        serializer = ProductionStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        previous = order.status
        order = ProductionFlowService.update_status(self.get_context(), order.pk, serializer.validated_data["status"])
        self.audit(
            order,
            "STATUS_CHANGE",
            f"Production order {order.order_number} moved from {previous} to {order.status}.",
            before={"status": previous},
            after={"status": order.status},
        )
        return self.respond(self.get_queryset().get(pk=order.pk), "Production order status updated successfully")

    @action(detail=False, methods=["get"])
    def dashboard(self, request):
        payload = ProductionFlowService.dashboard(self.get_context())
        payload["recent_orders"] = ProductionOrderListSerializer(
            payload["recent_orders"], many=True, context=self.get_serializer_context()
        ).data
        return success_response(payload)


class ProcessStageViewSet(CompanyScopedViewSet):
    """Batch records for one wet-processing or make-up step, backed by ``service_class``."""

    service_class = ProcessStageService
    search_fields = ["batch_number", "machine_id", "production_order__order_number"]
    ordering_fields = ["batch_number", "start_time", "end_time", "efficiency", "created_at"]
    filter_params = ("status", "production_order", "machine_id")

    def perform_create(self, serializer):
        record = self.service_class.create(self.get_context(), serializer.validated_data)
        serializer.instance = record
        self.audit(record, "CREATE", f"{self.entity_label} {record.batch_number} created.")

    def perform_update(self, serializer):
        record = self.service_class.update(self.get_context(), serializer.instance.pk, serializer.validated_data)
        serializer.instance = record
        self.audit(record, "UPDATE", f"{self.entity_label} {record.batch_number} updated.")

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        record = self.service_class.start(self.get_context(), self.get_object().pk)
        self.audit(record, "STATUS_CHANGE", f"{self.entity_label} {record.batch_number} started.", after={"status": record.status})
        return self.respond(record, f"{self.entity_label} started successfully")

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        serializer = ProcessCompleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = self.service_class.complete(self.get_context(), self.get_object().pk, **serializer.validated_data)
        self.audit(
            record,
            "STATUS_CHANGE",
            f"{self.entity_label} {record.batch_number} completed.",
            after={"status": record.status, "efficiency": str(record.efficiency)},
        )
        return self.respond(record, f"{self.entity_label} completed successfully")

    @action(detail=True, methods=["post"], url_path="quality-check")
    def quality_check(self, request, pk=None):
        serializer = QualityCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = self.service_class.add_quality_check(self.get_context(), self.get_object().pk, serializer.validated_data)
        self.audit(record, "UPDATE", f"Quality check recorded on {record.batch_number}.")
        return self.respond(record, "Quality check added successfully")

    @action(detail=False, methods=["get"])
    def analytics(self, request):
        start, end = parse_date_range(request.query_params)
        return success_response(self.service_class.analytics(self.get_context(), start, end))


class DyeingViewSet(ProcessStageViewSet):
    serializer_class = DyeingSerializer
    queryset = Dyeing.objects.select_related("production_order")
    service_class = DyeingService
    filter_params = ProcessStageViewSet.filter_params + ("dyeing_type", "machine_type")
    entity_label = "Dyeing record"


class PrintingViewSet(ProcessStageViewSet):
    serializer_class = PrintingSerializer
    queryset = Printing.objects.select_related("production_order")
    service_class = PrintingService
    filter_params = ProcessStageViewSet.filter_params + ("printing_type", "machine_type")
    entity_label = "Printing record"


class FinishingViewSet(ProcessStageViewSet):
    serializer_class = FinishingSerializer
    queryset = Finishing.objects.select_related("production_order")
    service_class = FinishingService
    filter_params = ProcessStageViewSet.filter_params + ("finishing_type", "machine_type")
    entity_label = "Finishing record"


class CuttingPackingViewSet(ProcessStageViewSet):
    serializer_class = CuttingPackingSerializer
    queryset = CuttingPacking.objects.select_related("production_order")
    service_class = CuttingPackingService
    filter_params = ProcessStageViewSet.filter_params + ("cutting_type", "packing_type")
    entity_label = "Cutting & packing record"
