from __future__ import annotations

from rest_framework import filters
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from apps.audit.utils import log_audit_event
from shared.exceptions import PermissionDenied
from shared.responses import success_response
from shared.views import EnvelopeModelViewSet

from .models import Company
from .serializers import CompanyBankAccountSerializer, CompanyListSerializer, CompanySerializer


class CompanyViewSet(EnvelopeModelViewSet):
    """
    Companies visible to the caller. Platform admins create and deactivate companies;
    company admins edit their own company and its bank accounts.
    """

    permission_classes = [IsAuthenticated]
    filter_backends = [filters.SearchFilter]
    search_fields = ['code', 'name', 'legal_name', 'gstin']
    entity_label = 'Company'

    def get_queryset(self):
        queryset = Company.objects.prefetch_related('bank_accounts')
        user = self.request.user
        if getattr(self, 'swagger_fake_view', False):
            return queryset.none()
        if user.is_platform_admin:
            return queryset
        return queryset.filter(pk__in=user.accessible_company_ids(), is_active=True)

    def get_serializer_class(self):
        if self.action == 'list':
            return CompanyListSerializer
        if self.action == 'bank_accounts' and self.request.method == 'POST':
            return CompanyBankAccountSerializer
        return CompanySerializer

    def _log(self, company, action, description):
        log_audit_event(
            user=self.request.user,
            company=company,
            action=action,
            entity_type='Company',
            entity_id=company.pk,
            description=description,
        )

    def _ensure_company_admin(self, company):
        if not self.request.user.is_admin_for(company):
            raise PermissionDenied("Company admin access is required.")

    def perform_create(self, serializer):
        if not self.request.user.is_platform_admin:
            raise PermissionDenied("Only system administrators can create companies.")
        company = serializer.save(created_by=self.request.user)
        self._log(company, 'CREATE', f"Company {company.code} created.")

    def perform_update(self, serializer):
        self._ensure_company_admin(serializer.instance)
        company = serializer.save()
        self._log(company, 'UPDATE', f"Company {company.code} updated.")

    def perform_destroy(self, instance):
        if not self.request.user.is_platform_admin:
            raise PermissionDenied("Only system administrators can deactivate companies.")
        instance.is_active = False
        instance.status = Company.Status.INACTIVE
        instance.save(update_fields=['is_active', 'status', 'updated_at'])
        self._log(instance, 'DELETE', f"Company {instance.code} deactivated.")

    @action(detail=True, methods=['get', 'post'], url_path='bank-accounts')
    def bank_accounts(self, request, pk=None):
        company = self.get_object()
        if request.method == 'GET':
            accounts = company.bank_accounts.filter(is_active=True)
            return success_response(CompanyBankAccountSerializer(accounts, many=True).data)
        self._ensure_company_admin(company)
        serializer = CompanyBankAccountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        account = serializer.save(company=company)
        self._log(company, 'UPDATE', f"Bank account {account} added.")
        return success_response(CompanyBankAccountSerializer(account).data, "Bank account added successfully", status_code=201)
