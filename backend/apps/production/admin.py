from django.contrib import admin

from .models import CuttingPacking, Dyeing, Finishing, Printing, ProductionOrder, ProductionStage


class ProductionStageInline(admin.TabularInline):
    model = ProductionStage
    extra = 0
    readonly_fields = ("stage_number", "stage_name", "process_type", "actual_start_time", "actual_end_time")


@admin.register(ProductionOrder)
class ProductionOrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "product_name", "planned_quantity", "completed_quantity", "status", "priority", "company")
    list_filter = ("status", "priority", "company")
    search_fields = ("order_number", "product_name", "fabric_type")
    date_hierarchy = "created_at"
    inlines = [ProductionStageInline]


class ProcessRecordAdmin(admin.ModelAdmin):
    list_display = ("batch_number", "production_order", "machine_id", "status", "efficiency", "total_cost", "company")
    list_filter = ("status", "company")
    search_fields = ("batch_number", "machine_id", "production_order__order_number")
    readonly_fields = ("efficiency", "total_cost")


admin.site.register(Dyeing, ProcessRecordAdmin)
admin.site.register(Printing, ProcessRecordAdmin)
admin.site.register(Finishing, ProcessRecordAdmin)
admin.site.register(CuttingPacking, ProcessRecordAdmin)
