from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Type

from django.db import transaction
from django.db.models import Avg, Count, Q, Sum
from django.utils import timezone

from shared.context import RequestContext
from shared.exceptions import NotFound, ValidationFailed

from ..models import (
    CuttingPacking,
    Dyeing,
    Finishing,
    Printing,
    ProcessRecordStatus,
    ProcessStageRecord,
    ProductionOrder,
    ProductionOrderStatus,
)

logger = logging.getLogger(__name__)

R = ProcessRecordStatus

STARTABLE_STATUSES = (R.PENDING, R.ON_HOLD, R.REWORK)
QUALITY_CHECK_STATUSES = ("pass", "fail", "rework")


class ProcessStageService:
    """
    Generic operations over per-batch process records.

    Subclasses only bind ``model`` and ``label``; every process shares the same
    create/start/complete/quality-check/analytics behaviour.
    """

    model: Type[ProcessStageRecord] = ProcessStageRecord
    label = "Process record"

    @classmethod
    def get_record(cls, ctx: RequestContext, record_id, *, lock: bool = False) -> ProcessStageRecord:
        queryset = ctx.scope(cls.model.objects)
        if lock:
            queryset = queryset.select_for_update()
        record = queryset.filter(pk=record_id).first()
        if record is None:
            raise NotFound(f"{cls.label} not found")
        return record

    @classmethod
    @transaction.atomic
    def create(cls, ctx: RequestContext, data: Dict) -> ProcessStageRecord:
        data = dict(data)
        order = data.pop("production_order", None)
        order_id = getattr(order, "pk", order)
        production_order = ctx.scope(ProductionOrder.objects).filter(pk=order_id).first() if order_id else None
        if production_order is None:
            raise ValidationFailed("Production order not found")
        if production_order.status in (ProductionOrderStatus.COMPLETED, ProductionOrderStatus.CANCELLED):
            raise ValidationFailed(f"Production order is {production_order.status}")
        batch_number = (data.get("batch_number") or "").strip()
        if batch_number and ctx.scope(cls.model.objects).filter(batch_number=batch_number).exists():
            raise ValidationFailed("Batch number already exists")
        record = cls.model.objects.create(
            company=ctx.company,
            created_by=ctx.actor,
            production_order=production_order,
            **data,
        )
        logger.info("%s %s created for %s", cls.label, record.batch_number, production_order.order_number)
        return record

    @classmethod
    @transaction.atomic
    def update(cls, ctx: RequestContext, record_id, data: Dict) -> ProcessStageRecord:
        record = cls.get_record(ctx, record_id, lock=True)
        if record.status == R.COMPLETED:
            raise ValidationFailed(f"Completed {cls.label.lower()}s cannot be modified")
        data = dict(data)
        data.pop("production_order", None)
        batch_number = (data.get("batch_number") or "").strip()
        if batch_number and ctx.scope(cls.model.objects).filter(batch_number=batch_number).exclude(pk=record.pk).exists():
            raise ValidationFailed("Batch number already exists")
        for key, value in data.items():
            setattr(record, key, value)
        record.updated_by = ctx.actor
        record.save()
        return record

    @classmethod
    @transaction.atomic
    def start(cls, ctx: RequestContext, record_id) -> ProcessStageRecord:
        record = cls.get_record(ctx, record_id, lock=True)
        if record.status not in STARTABLE_STATUSES:
            raise ValidationFailed(f"{cls.label} cannot be started from {record.status} status")
        record.status = R.IN_PROGRESS
        record.start_time = timezone.now()
        record.updated_by = ctx.actor
        record.save(update_fields=["status", "start_time", "updated_by", "updated_at"])
        logger.info("%s %s started", cls.label, record.batch_number)
        return record

    @classmethod
    @transaction.atomic
    def complete(
        cls,
        ctx: RequestContext,
        record_id,
        *,
        output_quantity=None,
        waste_quantity=None,
        cost_breakdown=None,
        notes: str = "",
    ) -> ProcessStageRecord:
        record = cls.get_record(ctx, record_id, lock=True)
        if record.status != R.IN_PROGRESS:
            raise ValidationFailed(f"{cls.label} is not in progress")
        if cost_breakdown is not None and not isinstance(cost_breakdown, dict):
            raise ValidationFailed("Cost breakdown must be an object of amounts")
        output = Decimal(str(output_quantity if output_quantity is not None else record.output_quantity))
        waste = Decimal(str(waste_quantity if waste_quantity is not None else record.waste_quantity))
        if output < 0 or waste < 0:
            raise ValidationFailed("Quantities cannot be negative")

        record.status = R.COMPLETED
        record.end_time = timezone.now()
        record.completed_by = ctx.actor
        record.output_quantity = output
        record.waste_quantity = waste
        if record.input_quantity > 0:
            record.efficiency = (output / record.input_quantity * Decimal("100")).quantize(Decimal("0.01"))
        if cost_breakdown:
            record.cost_breakdown = {**(record.cost_breakdown or {}), **cost_breakdown}
        if notes:
            record.notes = notes
        record.updated_by = ctx.actor
        record.save()
        logger.info("%s %s completed with efficiency %s%%", cls.label, record.batch_number, record.efficiency)
        return record

    @classmethod
    @transaction.atomic
    def add_quality_check(cls, ctx: RequestContext, record_id, check: Dict) -> ProcessStageRecord:
        record = cls.get_record(ctx, record_id, lock=True)
        if not check.get("parameter"):
            raise ValidationFailed("Quality check parameter is required")
        if check.get("status") not in QUALITY_CHECK_STATUSES:
            raise ValidationFailed("Quality check status must be pass, fail or rework")
        entry = {
            "parameter": check["parameter"],
            "expected_value": str(check.get("expected_value", "")),
            "actual_value": str(check.get("actual_value", "")),
            "status": check["status"],
            "checked_by": getattr(ctx.actor, "pk", None),
            "checked_at": timezone.now().isoformat(),
            "remarks": check.get("remarks", ""),
        }
        record.quality_checks = list(record.quality_checks or []) + [entry]
        record.updated_by = ctx.actor
        record.save(update_fields=["quality_checks", "updated_by", "updated_at"])
        logger.info("Quality check %s=%s recorded on %s %s", entry["parameter"], entry["status"], cls.label, record.batch_number)
        return record

    @classmethod
    def analytics(cls, ctx: RequestContext, start_date=None, end_date=None) -> Dict:
        records = ctx.scope(cls.model.objects)
        if start_date:
            records = records.filter(created_at__date__gte=start_date)
        if end_date:
            records = records.filter(created_at__date__lte=end_date)
        totals = records.aggregate(
            total=Count("id"),
            completed=Count("id", filter=Q(status=R.COMPLETED)),
            in_progress=Count("id", filter=Q(status=R.IN_PROGRESS)),
            average_efficiency=Avg("efficiency", filter=Q(status=R.COMPLETED)),
            total_cost=Sum("total_cost"),
        )
        cycle_hours = [
            (end - start).total_seconds() / 3600
            for start, end in records.filter(status=R.COMPLETED, start_time__isnull=False, end_time__isnull=False).values_list(
                "start_time", "end_time"
            )
        ]
        return {
            "total_batches": totals["total"] or 0,
            "completed_batches": totals["completed"] or 0,
            "in_progress_batches": totals["in_progress"] or 0,
            "average_efficiency": Decimal(str(totals["average_efficiency"] or 0)).quantize(Decimal("0.01")),
            "total_cost": totals["total_cost"] or Decimal("0"),
            "average_cycle_time_hours": round(sum(cycle_hours) / len(cycle_hours), 2) if cycle_hours else 0,
        }


class DyeingService(ProcessStageService):
    model = Dyeing
    label = "Dyeing record"


class PrintingService(ProcessStageService):
    model = Printing
    label = "Printing record"


class FinishingService(ProcessStageService):
    model = Finishing
    label = "Finishing record"


class CuttingPackingService(ProcessStageService):
    model = CuttingPacking
    label = "Cutting & packing record"
