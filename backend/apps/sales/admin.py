from django.contrib import admin

from .models import Customer, CustomerOrder, CustomerOrderItem


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "company", "email", "phone", "category", "credit_limit", "is_active")
    list_filter = ("company", "category", "customer_type", "is_active")
    search_fields = ("code", "name", "email", "phone")


class CustomerOrderItemInline(admin.TabularInline):
    model = CustomerOrderItem
    extra = 0
    readonly_fields = ("line_total", "tax_amount", "total_amount")


@admin.register(CustomerOrder)
class CustomerOrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "customer", "company", "order_date", "status", "priority", "total_amount")
    list_filter = ("company", "status", "priority", "payment_status")
    search_fields = ("order_number", "customer__name", "customer__code")
    readonly_fields = ("order_number", "status", "subtotal", "tax_amount", "total_amount")
    inlines = [CustomerOrderItemInline]
