from django.contrib import admin

from .models import Category, InventoryItem, StockMovement


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "company", "is_active", "created_at")
    list_filter = ("company", "is_active")
    search_fields = ("name",)


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "company", "item_type", "current_stock", "reserved_stock", "available_stock", "is_active")
    list_filter = ("company", "item_type", "is_active")
    search_fields = ("code", "name")
    readonly_fields = ("current_stock", "reserved_stock", "available_stock")


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("movement_number", "item", "movement_type", "quantity", "previous_stock", "new_stock", "reference_number", "movement_date")
    list_filter = ("company", "movement_type", "reference_type")
    search_fields = ("movement_number", "reference_number", "item__code")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
