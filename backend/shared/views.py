from __future__ import annotations

import datetime
import platform
from typing import Dict, Optional, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import connections
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import filters, mixins, status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.audit.utils import log_audit_event

from .context import RequestContext
from .exceptions import NotFound, PermissionDenied, ValidationFailed
from .responses import EnvelopePagination, success_response

START_TIME = timezone.now()


class HealthCheckView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        db_payload = self._database_status()
        now = timezone.now()
        payload = {
            "status": "ok" if db_payload["ok"] else "degraded",
            "uptime_seconds": int((now - START_TIME).total_seconds()),
            "timestamp": now.isoformat(),
            "application": {
                "python": platform.python_version(),
                "platform": platform.platform(),
            },
            "database": db_payload,
        }
        http_status = status.HTTP_200_OK if db_payload["ok"] else status.HTTP_503_SERVICE_UNAVAILABLE
        return Response(payload, status=http_status)

    def _database_status(self) -> Dict:
        payload = {"ok": True, "details": {}}
        for alias in connections:
            try:
                with connections[alias].cursor() as cursor:
                    cursor.execute("SELECT 1")
                    cursor.fetchone()
                payload["details"][alias] = "connected"
            except Exception as exc:
                payload["ok"] = False
                payload["details"][alias] = f"error: {exc}"
        return payload


def parse_date_range(params) -> Tuple[Optional[datetime.date], Optional[datetime.date]]:
    """Read ``start_date``/``end_date`` query parameters (YYYY-MM-DD)."""
    bounds = []
    for name in ("start_date", "end_date"):
        raw = params.get(name)
        if not raw:
            bounds.append(None)
            continue
        value = parse_date(raw[:10])
        if value is None:
            raise ValidationFailed(f"Invalid {name}; expected YYYY-MM-DD.")
        bounds.append(value)
    start, end = bounds
    if start and end and start > end:
        raise ValidationFailed("start_date must be on or before end_date.")
    return start, end


class CompanyScopedMixin:
    permission_classes = [IsAuthenticated]

    def get_company(self, *, required: bool = False):
        company = getattr(self.request, "company", None)
        if company is None:
            company_id = self.request.META.get("HTTP_X_COMPANY_ID") or getattr(self.request.user, "default_company_id", None)
            if company_id:
                company = self._resolve_company(company_id)
                setattr(self.request, "company", company)
        if required and company is None:
            raise PermissionDenied("Active company context is required.")
        return company

    def _resolve_company(self, company_id):
        from apps.companies.models import Company

        try:
            pk = int(company_id)
        except (TypeError, ValueError):
            raise ValidationFailed("Invalid company id.")
        company = Company.objects.filter(pk=pk, is_active=True).first()
        if company is None:
            raise NotFound("Company not found.")
        has_access = getattr(self.request.user, "has_company_access", None)
        if not callable(has_access) or not has_access(company):
            raise PermissionDenied("You do not have access to this company.")
        return company

    def get_context(self) -> RequestContext:
        ctx = getattr(self, "_request_context", None)
        if ctx is None:
            ctx = RequestContext.for_user(self.request.user, self.get_company(required=True))
            self._request_context = ctx
        return ctx

    def require_admin(self) -> RequestContext:
        ctx = self.get_context()
        if not ctx.is_admin:
            raise PermissionDenied("Company admin access is required.")
        return ctx

    def get_queryset(self):  # type: ignore[override]
        queryset = super().get_queryset()
        if getattr(self, "swagger_fake_view", False):
            return queryset.none()
        return queryset.filter(company=self.get_context().company)

    def get_serializer_context(self):  # type: ignore[override]
        context = super().get_serializer_context()
        context.setdefault("request", self.request)
        if not getattr(self, "swagger_fake_view", False) and self.request is not None:
            context["ctx"] = self.get_context()
        return context

    def audit(self, instance, action: str, description: str = "", *, before=None, after=None, entity_id=None):
        ctx = self.get_context()
        return log_audit_event(
            user=ctx.actor,
            company=ctx.company,
            action=action,
            entity_type=instance.__class__.__name__,
            entity_id=entity_id if entity_id is not None else instance.pk,
            description=description,
            before=before,
            after=after,
        )


class EnvelopeMixin:
    """Shared helpers for viewsets answering with the ``{success, message, data}`` envelope."""

    pagination_class = EnvelopePagination
    entity_label = "Record"

    def respond(self, instance, message: str = "", *, status_code: int = status.HTTP_200_OK):
        return success_response(self.get_serializer(instance).data, message, status_code=status_code)


class EnvelopeListModelMixin(EnvelopeMixin, mixins.ListModelMixin):
    def list(self, request, *args, **kwargs):  # type: ignore[override]
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)


class EnvelopeRetrieveModelMixin(EnvelopeMixin, mixins.RetrieveModelMixin):
    def retrieve(self, request, *args, **kwargs):  # type: ignore[override]
        return self.respond(self.get_object())


class EnvelopeCreateModelMixin(EnvelopeMixin, mixins.CreateModelMixin):
    def create(self, request, *args, **kwargs):  # type: ignore[override]
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return self.respond(serializer.instance, f"{self.entity_label} created successfully", status_code=status.HTTP_201_CREATED)


class EnvelopeUpdateModelMixin(EnvelopeMixin, mixins.UpdateModelMixin):
    def update(self, request, *args, **kwargs):  # type: ignore[override]
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return self.respond(serializer.instance, f"{self.entity_label} updated successfully")


class EnvelopeDestroyModelMixin(EnvelopeMixin, mixins.DestroyModelMixin):
    def destroy(self, request, *args, **kwargs):  # type: ignore[override]
        instance = self.get_object()
        self.perform_destroy(instance)
        return success_response(None, f"{self.entity_label} deleted successfully")


class EnvelopeReadOnlyModelViewSet(EnvelopeListModelMixin, EnvelopeRetrieveModelMixin, viewsets.GenericViewSet):
    pass


class EnvelopeModelViewSet(
    EnvelopeListModelMixin,
    EnvelopeRetrieveModelMixin,
    EnvelopeCreateModelMixin,
    EnvelopeUpdateModelMixin,
    EnvelopeDestroyModelMixin,
    viewsets.GenericViewSet,
):
    pass


class CompanyScopedViewSet(CompanyScopedMixin, EnvelopeModelViewSet):
    """
    Model viewset for tenant-scoped resources.

    Lists are paginated with ``page``/``limit``, ``filter_params`` names exact-match
    query filters and ``start_date``/``end_date`` bound ``date_filter_lookup``.
    """

    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    filter_params: Tuple[str, ...] = ()
    date_filter_lookup: Optional[str] = "created_at__date"
    soft_delete = False

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        if self.action != "list":
            return queryset
        params = self.request.query_params
        for name in self.filter_params:
            value = params.get(name)
            if value in (None, "", "all", "ALL"):
                continue
            try:
                queryset = queryset.filter(**{name: value})
            except (ValueError, DjangoValidationError):
                raise ValidationFailed(f"Invalid value for {name}.")
        if self.date_filter_lookup:
            start, end = parse_date_range(params)
            if start:
                queryset = queryset.filter(**{f"{self.date_filter_lookup}__gte": start})
            if end:
                queryset = queryset.filter(**{f"{self.date_filter_lookup}__lte": end})
        return queryset

    def perform_create(self, serializer):
        ctx = self.get_context()
        extra = {"company": ctx.company}
        if any(field.name == "created_by" for field in serializer.Meta.model._meta.get_fields()):
            extra["created_by"] = ctx.actor
        instance = serializer.save(**extra)
        self.audit(instance, "CREATE", f"{self.entity_label} {instance} created.")

    def perform_update(self, serializer):
        instance = serializer.save()
        self.audit(instance, "UPDATE", f"{self.entity_label} {instance} updated.")

    def perform_destroy(self, instance):
        entity_id = instance.pk
        if self.soft_delete:
            instance.is_active = False
            instance.save(update_fields=["is_active", "updated_at"])
        else:
            instance.delete()
        self.audit(instance, "DELETE", f"{self.entity_label} {instance} deleted.", entity_id=entity_id)
