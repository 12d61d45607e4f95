from django.contrib import admin

from .models import GatePass, Vehicle, VehicleMaintenance


class VehicleMaintenanceInline(admin.TabularInline):
    model = VehicleMaintenance
    extra = 0


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ("vehicle_number", "driver_name", "purpose", "status", "time_in", "time_out", "company")
    list_filter = ("company", "status", "purpose")
    search_fields = ("vehicle_number", "driver_name", "driver_phone")
    inlines = [VehicleMaintenanceInline]


@admin.register(GatePass)
class GatePassAdmin(admin.ModelAdmin):
    list_display = ("gate_pass_number", "vehicle_number", "driver_name", "purpose", "status", "time_in", "time_out", "company")
    list_filter = ("company", "status", "purpose")
    search_fields = ("gate_pass_number", "vehicle_number", "driver_name")
    date_hierarchy = "time_in"
    readonly_fields = ("gate_pass_number", "printed_at", "printed_by", "approved_at", "approved_by")
