from __future__ import annotations

import datetime
import logging
from typing import Dict, Optional

from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from core.doc_numbers import get_next_doc_no
from shared.context import RequestContext
from shared.exceptions import NotFound, ValidationFailed

from ..models import GatePass, Vehicle, VehicleMaintenance, VisitPurpose, normalize_vehicle_number

logger = logging.getLogger(__name__)

REQUIRED_VISIT_FIELDS = (
    ("vehicle_number", "Vehicle number is required"),
    ("driver_name", "Driver name is required"),
    ("driver_phone", "Driver phone is required"),
    ("purpose", "Purpose is required"),
    ("reason", "Reason is required"),
)


def _require_visit_fields(data: Dict) -> None:
    for field, message in REQUIRED_VISIT_FIELDS:
        if not str(data.get(field) or "").strip():
            raise ValidationFailed(message)
    if data["purpose"] not in VisitPurpose.values:
        raise ValidationFailed(f"Invalid purpose: {data['purpose']}")


def _bounded(queryset, field: str, start: Optional[datetime.date], end: Optional[datetime.date]):
    if start:
        queryset = queryset.filter(**{f"{field}__date__gte": start})
    if end:
        queryset = queryset.filter(**{f"{field}__date__lte": end})
    return queryset


class GatePassService:
    """Gate passes: at most one active pass per vehicle number within a company."""

    @staticmethod
    def get_pass(ctx: RequestContext, pass_id, *, lock: bool = False) -> GatePass:
        queryset = ctx.scope(GatePass.objects)
        if lock:
            queryset = queryset.select_for_update()
        gate_pass = queryset.filter(pk=pass_id).first()
        if gate_pass is None:
            raise NotFound("Gate pass not found")
        return gate_pass

    @staticmethod
    @transaction.atomic
    def create_pass(ctx: RequestContext, data: Dict) -> GatePass:
        data = dict(data)
        vehicle = data.pop("vehicle", None)
        if vehicle is not None:
            vehicle = ctx.scope(Vehicle.objects).filter(pk=getattr(vehicle, "pk", vehicle)).first()
            if vehicle is None:
                raise ValidationFailed("Vehicle not found")
            data.setdefault("vehicle_number", vehicle.vehicle_number)
            data.setdefault("driver_name", vehicle.driver_name)
            data.setdefault("driver_phone", vehicle.driver_phone)
        _require_visit_fields(data)
        data["vehicle_number"] = normalize_vehicle_number(data["vehicle_number"])

        if ctx.scope(GatePass.objects).filter(vehicle_number=data["vehicle_number"], status=GatePass.Status.ACTIVE).exists():
            raise ValidationFailed("Vehicle already has an active gate pass")

        gate_pass = GatePass.objects.create(
            company=ctx.company,
            created_by=ctx.actor,
            vehicle=vehicle,
            gate_pass_number=get_next_doc_no(company=ctx.company, doc_type="GP"),
            status=GatePass.Status.ACTIVE,
            time_in=timezone.now(),
            **data,
        )
        logger.info("Gate pass %s issued for %s (%s)", gate_pass.gate_pass_number, gate_pass.vehicle_number, gate_pass.purpose)
        return gate_pass

    @staticmethod
    def _close(ctx: RequestContext, pass_id, status: str, **changes) -> GatePass:
        gate_pass = GatePassService.get_pass(ctx, pass_id, lock=True)
        if gate_pass.status != GatePass.Status.ACTIVE:
            raise ValidationFailed("Gate pass is not active")
        gate_pass.status = status
        gate_pass.approved_by = ctx.actor
        gate_pass.approved_at = timezone.now()
        for field, value in changes.items():
            setattr(gate_pass, field, value)
        gate_pass.save()
        logger.info("Gate pass %s %s", gate_pass.gate_pass_number, status)
        return gate_pass

    @staticmethod
    @transaction.atomic
    def complete_pass(ctx: RequestContext, pass_id) -> GatePass:
        return GatePassService._close(ctx, pass_id, GatePass.Status.COMPLETED, time_out=timezone.now())

    @staticmethod
    @transaction.atomic
    def cancel_pass(ctx: RequestContext, pass_id, reason: str = "") -> GatePass:
        return GatePassService._close(ctx, pass_id, GatePass.Status.CANCELLED, cancellation_reason=reason or "")

    @staticmethod
    @transaction.atomic
    def print_pass(ctx: RequestContext, pass_id) -> GatePass:
        gate_pass = GatePassService.get_pass(ctx, pass_id, lock=True)
        gate_pass.printed_at = timezone.now()
        gate_pass.printed_by = ctx.actor
        gate_pass.save(update_fields=["printed_at", "printed_by", "updated_at"])
        logger.info("Gate pass %s printed", gate_pass.gate_pass_number)
        return gate_pass

    @staticmethod
    def active_passes(ctx: RequestContext):
        return ctx.scope(GatePass.objects).filter(status=GatePass.Status.ACTIVE).order_by("-time_in", "-id")

    @staticmethod
    def vehicle_history(ctx: RequestContext, vehicle_number: str):
        return ctx.scope(GatePass.objects).filter(vehicle_number=normalize_vehicle_number(vehicle_number)).order_by("-time_in", "-id")

    @staticmethod
    def stats(ctx: RequestContext, start: Optional[datetime.date] = None, end: Optional[datetime.date] = None) -> Dict:
        passes = _bounded(ctx.scope(GatePass.objects), "time_in", start, end)
        by_status = {row["status"]: row["count"] for row in passes.values("status").annotate(count=Count("id"))}
        by_purpose = {value: 0 for value in VisitPurpose.values}
        by_purpose.update({row["purpose"]: row["count"] for row in passes.values("purpose").annotate(count=Count("id"))})
        durations = [
            (time_out - time_in).total_seconds() / 60
            for time_in, time_out in passes.filter(status=GatePass.Status.COMPLETED, time_out__isnull=False).values_list(
                "time_in", "time_out"
            )
        ]
        return {
            "total_gate_passes": sum(by_status.values()),
            "active_gate_passes": by_status.get(GatePass.Status.ACTIVE, 0),
            "completed_gate_passes": by_status.get(GatePass.Status.COMPLETED, 0),
            "expired_gate_passes": by_status.get(GatePass.Status.EXPIRED, 0),
            "cancelled_gate_passes": by_status.get(GatePass.Status.CANCELLED, 0),
            "today_gate_passes": passes.filter(time_in__date=timezone.localdate()).count(),
            "average_duration_minutes": round(sum(durations) / len(durations), 2) if durations else 0,
            "purpose_breakdown": by_purpose,
        }


class VehicleService:
    @staticmethod
    def get_vehicle(ctx: RequestContext, vehicle_id, *, lock: bool = False) -> Vehicle:
        queryset = ctx.scope(Vehicle.objects)
        if lock:
            queryset = queryset.select_for_update()
        vehicle = queryset.filter(pk=vehicle_id).first()
        if vehicle is None:
            raise NotFound("Vehicle not found")
        return vehicle

    @staticmethod
    @transaction.atomic
    def check_in(ctx: RequestContext, data: Dict) -> Vehicle:
        data = dict(data)
        _require_visit_fields(data)
        data["vehicle_number"] = normalize_vehicle_number(data["vehicle_number"])
        if ctx.scope(Vehicle.objects).filter(vehicle_number=data["vehicle_number"]).exists():
            raise ValidationFailed("Vehicle number already exists")
        data.pop("status", None)
        vehicle = Vehicle.objects.create(
            company=ctx.company,
            created_by=ctx.actor,
            status=Vehicle.Status.IN,
            time_in=timezone.now(),
            **data,
        )
        logger.info("Vehicle %s checked in for %s", vehicle.vehicle_number, vehicle.purpose)
        return vehicle

    @staticmethod
    @transaction.atomic
    def checkout(ctx: RequestContext, vehicle_id) -> Vehicle:
        vehicle = VehicleService.get_vehicle(ctx, vehicle_id, lock=True)
        if vehicle.status == Vehicle.Status.OUT:
            raise ValidationFailed("Vehicle is already checked out")
        vehicle.status = Vehicle.Status.OUT
        vehicle.time_out = timezone.now()
        vehicle.save(update_fields=["status", "time_out", "updated_at"])
        logger.info("Vehicle %s checked out", vehicle.vehicle_number)
        return vehicle

    @staticmethod
    @transaction.atomic
    def add_maintenance(ctx: RequestContext, vehicle_id, data: Dict) -> VehicleMaintenance:
        vehicle = VehicleService.get_vehicle(ctx, vehicle_id, lock=True)
        if not str(data.get("maintenance_type") or "").strip():
            raise ValidationFailed("Maintenance type is required")
        record = VehicleMaintenance.objects.create(vehicle=vehicle, recorded_by=ctx.actor, **data)
        vehicle.last_maintenance_date = record.maintenance_date
        update_fields = ["last_maintenance_date", "updated_at"]
        if record.next_due_date:
            vehicle.next_maintenance_date = record.next_due_date
            update_fields.append("next_maintenance_date")
        vehicle.save(update_fields=update_fields)
        logger.info("Maintenance %s recorded for vehicle %s", record.maintenance_type, vehicle.vehicle_number)
        return record

    @staticmethod
    def stats(ctx: RequestContext) -> Dict:
        vehicles = ctx.scope(Vehicle.objects)
        by_status = {row["status"]: row["count"] for row in vehicles.values("status").annotate(count=Count("id"))}
        by_purpose = {row["purpose"]: row["count"] for row in vehicles.values("purpose").annotate(count=Count("id"))}
        return {
            "total_vehicles": sum(by_status.values()),
            "vehicles_in": by_status.get(Vehicle.Status.IN, 0),
            "vehicles_out": by_status.get(Vehicle.Status.OUT, 0),
            "by_status": by_status,
            "by_purpose": by_purpose,
            "maintenance_due": vehicles.filter(next_maintenance_date__lte=timezone.localdate()).count(),
            "today_check_ins": vehicles.filter(time_in__date=timezone.localdate()).count(),
        }
