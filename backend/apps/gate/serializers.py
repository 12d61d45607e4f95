from __future__ import annotations

from rest_framework import serializers

from .models import GatePass, Vehicle, VehicleMaintenance


class VehicleMaintenanceSerializer(serializers.ModelSerializer):
    class Meta:
        model = VehicleMaintenance
        fields = [
            "id",
            "maintenance_type",
            "maintenance_date",
            "description",
            "cost",
            "performed_by",
            "next_due_date",
            "recorded_by",
            "recorded_at",
        ]
        read_only_fields = ["recorded_by", "recorded_at"]

    def validate_cost(self, value):
        if value < 0:
            raise serializers.ValidationError("Cost cannot be negative")
        return value


class VehicleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vehicle
        fields = [
            "id",
            "vehicle_number",
            "vehicle_type",
            "driver_name",
            "driver_phone",
            "purpose",
            "reason",
            "status",
            "time_in",
            "time_out",
            "last_maintenance_date",
            "next_maintenance_date",
            "notes",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["status", "time_in", "time_out", "last_maintenance_date", "created_by", "created_at", "updated_at"]

    def validate_vehicle_number(self, value: str) -> str:
        number = " ".join((value or "").split()).upper()
        vehicles = Vehicle.objects.filter(company=self.context["ctx"].company, vehicle_number=number)
        if self.instance is not None:
            vehicles = vehicles.exclude(pk=self.instance.pk)
        if vehicles.exists():
            raise serializers.ValidationError("Vehicle number already exists")
        return number


class GatePassSerializer(serializers.ModelSerializer):
    vehicle_number = serializers.CharField(max_length=30, required=False)
    driver_name = serializers.CharField(max_length=120, required=False)
    driver_phone = serializers.CharField(max_length=20, required=False)
    duration_minutes = serializers.IntegerField(read_only=True)

    class Meta:
        model = GatePass
        fields = [
            "id",
            "gate_pass_number",
            "vehicle",
            "vehicle_number",
            "driver_name",
            "driver_phone",
            "driver_id_number",
            "driver_license_number",
            "purpose",
            "reason",
            "person_to_meet",
            "department",
            "security_notes",
            "items",
            "images",
            "status",
            "time_in",
            "time_out",
            "duration_minutes",
            "printed_at",
            "printed_by",
            "approved_by",
            "approved_at",
            "cancellation_reason",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "gate_pass_number",
            "status",
            "time_in",
            "time_out",
            "printed_at",
            "printed_by",
            "approved_by",
            "approved_at",
            "cancellation_reason",
            "created_by",
            "created_at",
            "updated_at",
        ]

    def validate_vehicle(self, vehicle):
        if vehicle is not None and vehicle.company_id != self.context["ctx"].company_id:
            raise serializers.ValidationError("Vehicle not found")
        return vehicle

    def validate_images(self, value):
        if not isinstance(value, list) or not all(isinstance(url, str) for url in value):
            raise serializers.ValidationError("Images must be a list of URLs")
        return value


class GatePassCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
