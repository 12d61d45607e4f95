from django.contrib import admin

from .models import PurchaseOrder, PurchaseOrderItem, Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "company", "category", "rating", "is_active")
    list_filter = ("company", "category", "supplier_type", "is_active")
    search_fields = ("code", "name", "email")


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    readonly_fields = ("received_quantity", "line_total", "tax_amount")


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "supplier", "company", "order_date", "expected_delivery_date", "status", "total_amount")
    list_filter = ("company", "status", "priority")
    search_fields = ("order_number", "supplier__name")
    readonly_fields = ("order_number", "status", "subtotal", "tax_amount", "total_amount")
    inlines = [PurchaseOrderItemInline]
