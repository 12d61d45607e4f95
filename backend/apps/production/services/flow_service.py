from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Optional

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from apps.sales.models import CustomerOrder
from core.doc_numbers import get_next_doc_no
from shared.context import RequestContext
from shared.exceptions import NotFound, ValidationFailed
from shared.transitions import TransitionTable

from ..models import STAGE_BLUEPRINT, ProductionOrder, ProductionOrderStatus, ProductionStage, StageStatus

logger = logging.getLogger(__name__)

P = ProductionOrderStatus

ORDER_FIELDS = (
    "product_name",
    "product_type",
    "fabric_type",
    "color",
    "design",
    "planned_quantity",
    "unit",
    "priority",
    "planned_start_date",
    "planned_end_date",
    "notes",
)
CLOSED_STATUSES = (P.COMPLETED, P.CANCELLED)


class ProductionFlowService:
    """
    Ten-stage textile production flow attached to a production order.

    Stages run strictly in order: stage N may start only once stage N-1 is completed.
    Completing a stage rolls its produced/defect quantities up into the order, and
    completing the last one closes the order, all in one transaction.
    """

    TRANSITIONS = TransitionTable(
        "production order",
        {
            P.DRAFT: [P.APPROVED, P.CANCELLED],
            P.APPROVED: [P.IN_PROGRESS, P.ON_HOLD, P.CANCELLED],
            P.IN_PROGRESS: [P.ON_HOLD, P.COMPLETED, P.CANCELLED],
            P.ON_HOLD: [P.APPROVED, P.IN_PROGRESS, P.CANCELLED],
            P.COMPLETED: [],
            P.CANCELLED: [],
        },
    )

    @staticmethod
    def get_order(ctx: RequestContext, order_id, *, lock: bool = False) -> ProductionOrder:
        queryset = ctx.scope(ProductionOrder.objects)
        if lock:
            queryset = queryset.select_for_update()
        order = queryset.filter(pk=order_id).first()
        if order is None:
            raise NotFound("Production order not found")
        return order

    @staticmethod
    def _get_stage(order: ProductionOrder, stage_number: int, *, lock: bool = True) -> ProductionStage:
        stages = order.stages.all()
        if lock:
            stages = stages.select_for_update()
        stage = stages.filter(stage_number=stage_number).first()
        if stage is None:
            raise NotFound("Production stage not found")
        return stage

    @staticmethod
    def _ensure_open(order: ProductionOrder) -> None:
        if order.status in CLOSED_STATUSES:
            raise ValidationFailed(f"Production order is {order.status}")

    @staticmethod
    def _ensure_running(order: ProductionOrder) -> None:
        ProductionFlowService._ensure_open(order)
        if order.status == P.ON_HOLD:
            raise ValidationFailed("Production order is on hold")

    @staticmethod
    @transaction.atomic
    def create_order(ctx: RequestContext, data: Dict) -> ProductionOrder:
        fields = {key: data[key] for key in ORDER_FIELDS if key in data and data[key] is not None}
        if not fields.get("product_name"):
            raise ValidationFailed("Product name is required")
        if Decimal(str(fields.get("planned_quantity") or 0)) <= 0:
            raise ValidationFailed("Planned quantity must be greater than zero")
        start, end = fields.get("planned_start_date"), fields.get("planned_end_date")
        if start and end and end < start:
            raise ValidationFailed("Planned end date cannot be before the planned start date")
        customer_order = data.get("customer_order")
        if customer_order is not None:
            customer_order = ctx.scope(CustomerOrder.objects).filter(pk=getattr(customer_order, "pk", customer_order)).first()
            if customer_order is None:
                raise ValidationFailed("Customer order not found")
        order = ProductionOrder.objects.create(
            company=ctx.company,
            created_by=ctx.actor,
            customer_order=customer_order,
            order_number=get_next_doc_no(company=ctx.company, doc_type="PRO"),
            **fields,
        )
        logger.info("Production order %s created for %s", order.order_number, order.product_name)
        return order

    @staticmethod
    @transaction.atomic
    def initialize_flow(ctx: RequestContext, order_id) -> ProductionOrder:
        order = ProductionFlowService.get_order(ctx, order_id, lock=True)
        if order.stages.exists():
            raise ValidationFailed("Production flow already initialized")
        ProductionFlowService._ensure_open(order)
        ProductionStage.objects.bulk_create(
            [
                ProductionStage(
                    production_order=order,
                    stage_number=number,
                    stage_name=name,
                    process_type=process_type,
                    planned_duration_minutes=minutes,
                )
                for number, name, process_type, minutes in STAGE_BLUEPRINT
            ]
        )
        order.status = P.APPROVED
        order.save(update_fields=["status", "updated_at"])
        logger.info("Production flow initialized for %s with %d stages", order.order_number, len(STAGE_BLUEPRINT))
        return order

    @staticmethod
    @transaction.atomic
    def start_stage(ctx: RequestContext, order_id, stage_number: int) -> ProductionStage:
        order = ProductionFlowService.get_order(ctx, order_id, lock=True)
        ProductionFlowService._ensure_running(order)
        stage = ProductionFlowService._get_stage(order, stage_number)
        if stage.status != StageStatus.PENDING:
            raise ValidationFailed("Stage is not in pending status")
        if stage.stage_number > 1:
            previous = order.stages.filter(stage_number=stage.stage_number - 1).first()
            if previous is not None and previous.status != StageStatus.COMPLETED:
                raise ValidationFailed("Previous stage must be completed before starting this stage")

        now = timezone.now()
        stage.status = StageStatus.IN_PROGRESS
        stage.actual_start_time = now
        stage.started_by = ctx.actor
        stage.save(update_fields=["status", "actual_start_time", "started_by"])

        if order.status in (P.DRAFT, P.APPROVED):
            order.status = P.IN_PROGRESS
            order.actual_start_date = order.actual_start_date or now
            order.save(update_fields=["status", "actual_start_date", "updated_at"])
        logger.info("Stage %s (%s) of %s started", stage.stage_number, stage.stage_name, order.order_number)
        return stage

    @staticmethod
    @transaction.atomic
    def complete_stage(
        ctx: RequestContext,
        order_id,
        stage_number: int,
        *,
        produced_quantity=None,
        defect_quantity=None,
        quality_grade: str = "",
        quality_notes: str = "",
        images=None,
        notes: str = "",
    ) -> ProductionStage:
        order = ProductionFlowService.get_order(ctx, order_id, lock=True)
        ProductionFlowService._ensure_running(order)
        stage = ProductionFlowService._get_stage(order, stage_number)
        if stage.status != StageStatus.IN_PROGRESS:
            raise ValidationFailed("Stage is not in progress")

        produced = Decimal(str(produced_quantity or 0))
        defects = Decimal(str(defect_quantity or 0))
        if produced < 0 or defects < 0:
            raise ValidationFailed("Quantities cannot be negative")

        now = timezone.now()
        stage.status = StageStatus.COMPLETED
        stage.actual_end_time = now
        stage.completed_by = ctx.actor
        stage.produced_quantity = produced
        stage.defect_quantity = defects
        if quality_grade:
            stage.quality_grade = quality_grade
        if quality_notes:
            stage.quality_notes = quality_notes
        if images:
            stage.output_images = list(images)
        if notes:
            stage.notes = notes
        if stage.actual_start_time:
            stage.actual_duration_minutes = round((now - stage.actual_start_time).total_seconds() / 60)
        stage.save()

        order.completed_quantity += produced
        order.rejected_quantity += defects
        update_fields = ["completed_quantity", "rejected_quantity", "updated_at"]
        if not order.stages.exclude(status=StageStatus.COMPLETED).exists():
            order.status = P.COMPLETED
            order.actual_end_date = now
            update_fields += ["status", "actual_end_date"]
        order.save(update_fields=update_fields)
        logger.info(
            "Stage %s of %s completed: produced %s, defects %s",
            stage.stage_number,
            order.order_number,
            produced,
            defects,
        )
        return stage

    @staticmethod
    @transaction.atomic
    def hold_stage(ctx: RequestContext, order_id, stage_number: int, reason: str) -> ProductionStage:
        if not (reason or "").strip():
            raise ValidationFailed("Hold reason is required")
        order = ProductionFlowService.get_order(ctx, order_id, lock=True)
        ProductionFlowService._ensure_open(order)
        stage = ProductionFlowService._get_stage(order, stage_number)
        if stage.status != StageStatus.IN_PROGRESS:
            raise ValidationFailed("Stage is not in progress")
        stage.status = StageStatus.ON_HOLD
        stage.hold_reason = reason.strip()
        stage.held_at = timezone.now()
        stage.save(update_fields=["status", "hold_reason", "held_at"])
        logger.info("Stage %s of %s put on hold: %s", stage.stage_number, order.order_number, stage.hold_reason)
        return stage

    @staticmethod
    @transaction.atomic
    def resume_stage(ctx: RequestContext, order_id, stage_number: int) -> ProductionStage:
        order = ProductionFlowService.get_order(ctx, order_id, lock=True)
        ProductionFlowService._ensure_running(order)
        stage = ProductionFlowService._get_stage(order, stage_number)
        if stage.status != StageStatus.ON_HOLD:
            raise ValidationFailed("Stage is not on hold")
        stage.status = StageStatus.IN_PROGRESS
        stage.save(update_fields=["status"])
        logger.info("Stage %s of %s resumed", stage.stage_number, order.order_number)
        return stage

    @staticmethod
    @transaction.atomic
    def update_status(ctx: RequestContext, order_id, new_status: str) -> ProductionOrder:
        order = ProductionFlowService.get_order(ctx, order_id, lock=True)
        ProductionFlowService.TRANSITIONS.ensure(order.status, new_status)
        if new_status == P.COMPLETED and order.stages.exclude(status=StageStatus.COMPLETED).exists():
            raise ValidationFailed("All stages must be completed before the order can be completed")
        previous = order.status
        order.status = new_status
        update_fields = ["status", "updated_at"]
        if new_status == P.COMPLETED:
            order.actual_end_date = timezone.now()
            update_fields.append("actual_end_date")
        order.save(update_fields=update_fields)
        logger.info("Production order %s moved from %s to %s", order.order_number, previous, new_status)
        return order

    @staticmethod
    def flow_status(ctx: RequestContext, order_id) -> Dict:
        order = ProductionFlowService.get_order(ctx, order_id)
        stages = list(order.stages.all())
        total = len(stages)
        completed = sum(1 for stage in stages if stage.status == StageStatus.COMPLETED)
        current: Optional[ProductionStage] = next((s for s in stages if s.status == StageStatus.IN_PROGRESS), None)
        upcoming: Optional[ProductionStage] = next((s for s in stages if s.status == StageStatus.PENDING), None)
        return {
            "order_id": order.pk,
            "order_number": order.order_number,
            "order_status": order.status,
            "current_stage": current,
            "next_stage": upcoming,
            "completed_stages": completed,
            "total_stages": total,
            "progress_percentage": round(completed / total * 100) if total else 0,
        }

    @staticmethod
    def dashboard(ctx: RequestContext) -> Dict:
        orders = ctx.scope(ProductionOrder.objects)
        now = timezone.now()
        by_process = {
            row["process_type"]: row["count"]
            for row in ProductionStage.objects.filter(production_order__company=ctx.company, status=StageStatus.IN_PROGRESS)
            .values("process_type")
            .annotate(count=Count("id"))
        }
        return {
            "total_orders": orders.count(),
            "in_progress_orders": orders.filter(status=P.IN_PROGRESS).count(),
            "completed_orders": orders.filter(status=P.COMPLETED).count(),
            "delayed_orders": orders.filter(planned_end_date__lt=now).exclude(Q(status=P.COMPLETED) | Q(status=P.CANCELLED)).count(),
            "stage_wise_count": by_process,
            "recent_orders": list(orders.order_by("-created_at", "-id")[:10]),
        }
