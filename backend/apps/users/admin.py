from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import CompanyMembership, User


class CompanyMembershipInline(admin.TabularInline):
    model = CompanyMembership
    extra = 0


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    fieldsets = DjangoUserAdmin.fieldsets + (
        ("Company access", {"fields": ("phone", "default_company", "is_system_admin")}),
    )
    list_display = ("username", "email", "first_name", "last_name", "default_company", "is_system_admin", "is_active")
    list_filter = ("is_system_admin", "is_staff", "is_active")
    inlines = [CompanyMembershipInline]
