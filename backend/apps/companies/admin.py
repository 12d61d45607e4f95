from django.contrib import admin

from .models import Company, CompanyBankAccount, DocumentSequence


class CompanyBankAccountInline(admin.TabularInline):
    model = CompanyBankAccount
    extra = 0


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'gstin', 'city', 'status', 'is_active', 'created_at')
    list_filter = ('status', 'is_active', 'state')
    search_fields = ('code', 'name', 'legal_name', 'gstin', 'pan')
    readonly_fields = ('created_at', 'updated_at', 'created_by')
    inlines = [CompanyBankAccountInline]


@admin.register(DocumentSequence)
class DocumentSequenceAdmin(admin.ModelAdmin):
    list_display = ('company', 'doc_type', 'period', 'current_value')
    list_filter = ('doc_type',)
