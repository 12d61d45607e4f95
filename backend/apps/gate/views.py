from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action

from shared.exceptions import ValidationFailed
from shared.responses import success_response
from shared.views import CompanyScopedViewSet, parse_date_range

from .models import GatePass, Vehicle
from .serializers import GatePassCancelSerializer, GatePassSerializer, VehicleMaintenanceSerializer, VehicleSerializer
from .services.gate_service import GatePassService, VehicleService


class GatePassViewSet(CompanyScopedViewSet):
    serializer_class = GatePassSerializer
    queryset = GatePass.objects.select_related("vehicle")
    search_fields = ["gate_pass_number", "vehicle_number", "driver_name", "reason", "person_to_meet"]
    ordering_fields = ["gate_pass_number", "time_in", "time_out", "created_at"]
    filter_params = ("status", "purpose", "vehicle")
    date_filter_lookup = "time_in__date"
    entity_label = "Gate pass"

    def perform_create(self, serializer):
        gate_pass = GatePassService.create_pass(self.get_context(), serializer.validated_data)
        serializer.instance = gate_pass
        self.audit(gate_pass, "CREATE", f"Gate pass {gate_pass.gate_pass_number} issued for {gate_pass.vehicle_number}.")

    def perform_update(self, serializer):
        if serializer.instance.status != GatePass.Status.ACTIVE:
            raise ValidationFailed("Only active gate passes can be updated")
        super().perform_update(serializer)

    def _transition(self, gate_pass, previous, message):
        self.audit(
            gate_pass,
            "STATUS_CHANGE",
            f"Gate pass {gate_pass.gate_pass_number} {gate_pass.status}.",
            before={"status": previous},
            after={"status": gate_pass.status},
        )
        return self.respond(gate_pass, message)

    @action(detail=True, methods=["post", "patch"])
    def complete(self, request, pk=None):
        gate_pass = self.get_object()
        previous = gate_pass.status
        return self._transition(GatePassService.complete_pass(self.get_context(), gate_pass.pk), previous, "Gate pass completed successfully")

    @action(detail=True, methods=["post", "patch"])
    def cancel(self, request, pk=None):
        gate_pass = self.get_object()
        serializer = GatePassCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        previous = gate_pass.status
        gate_pass = GatePassService.cancel_pass(self.get_context(), gate_pass.pk, serializer.validated_data["reason"])
        return self._transition(gate_pass, previous, "Gate pass cancelled successfully")

    @action(detail=True, methods=["post", "patch"], url_path="print")
    def print_pass(self, request, pk=None):
        gate_pass = GatePassService.print_pass(self.get_context(), self.get_object().pk)
        self.audit(gate_pass, "UPDATE", f"Gate pass {gate_pass.gate_pass_number} printed.")
        return self.respond(gate_pass, "Gate pass printed successfully")

    @action(detail=False, methods=["get"])
    def active(self, request):
        passes = GatePassService.active_passes(self.get_context())
        return success_response(GatePassSerializer(passes, many=True, context=self.get_serializer_context()).data)

    @action(detail=False, methods=["get"], url_path=r"vehicle/(?P<vehicle_number>[^/]+)/history")
    def vehicle_history(self, request, vehicle_number=None):
        queryset = GatePassService.vehicle_history(self.get_context(), vehicle_number)
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(GatePassSerializer(page, many=True, context=self.get_serializer_context()).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        start, end = parse_date_range(request.query_params)
        return success_response(GatePassService.stats(self.get_context(), start, end))


class VehicleViewSet(CompanyScopedViewSet):
    serializer_class = VehicleSerializer
    queryset = Vehicle.objects.all()
    search_fields = ["vehicle_number", "driver_name", "driver_phone"]
    ordering_fields = ["vehicle_number", "time_in", "time_out", "created_at"]
    filter_params = ("status", "purpose", "vehicle_type")
    date_filter_lookup = "time_in__date"
    entity_label = "Vehicle"

    def perform_create(self, serializer):
        vehicle = VehicleService.check_in(self.get_context(), serializer.validated_data)
        serializer.instance = vehicle
        self.audit(vehicle, "CREATE", f"Vehicle {vehicle.vehicle_number} checked in.")

    @action(detail=True, methods=["post", "patch"])
    def checkout(self, request, pk=None):
        vehicle = self.get_object()
        previous = vehicle.status
        vehicle = VehicleService.checkout(self.get_context(), vehicle.pk)
        self.audit(
            vehicle,
            "STATUS_CHANGE",
            f"Vehicle {vehicle.vehicle_number} checked out.",
            before={"status": previous},
            after={"status": vehicle.status},
        )
        return self.respond(vehicle, "Vehicle checked out successfully")

    @action(detail=True, methods=["get", "post"])
    def maintenance(self, request, pk=None):
        vehicle = self.get_object()
        if request.method == "GET":
            return success_response(VehicleMaintenanceSerializer(vehicle.maintenance_records.all(), many=True).data)
        serializer = VehicleMaintenanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = VehicleService.add_maintenance(self.get_context(), vehicle.pk, serializer.validated_data)
        self.audit(vehicle, "UPDATE", f"Maintenance {record.maintenance_type} recorded for {vehicle.vehicle_number}.")
        return success_response(
            VehicleMaintenanceSerializer(record).data,
            "Maintenance record added successfully",
            status_code=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return success_response(VehicleService.stats(self.get_context()))
