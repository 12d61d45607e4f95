from django.contrib import admin

from .models import Invoice, InvoiceItem, InvoicePayment


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = ("gross_amount", "discount_amount", "taxable_amount", "tax_amount", "line_total")


class InvoicePaymentInline(admin.TabularInline):
    model = InvoicePayment
    extra = 0
    readonly_fields = ("recorded_by", "recorded_at")


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "customer", "company", "invoice_date", "due_date", "status", "total_amount", "outstanding_amount")
    list_filter = ("company", "status")
    search_fields = ("invoice_number", "customer__name")
    readonly_fields = ("invoice_number", "subtotal", "discount_amount", "tax_amount", "total_amount", "paid_amount", "outstanding_amount")
    inlines = [InvoiceItemInline, InvoicePaymentInline]
