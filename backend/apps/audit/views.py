from __future__ import annotations

from rest_framework import filters

from shared.views import CompanyScopedMixin, EnvelopeReadOnlyModelViewSet

from .models import AuditLog
from .serializers import AuditLogSerializer


class AuditLogViewSet(CompanyScopedMixin, EnvelopeReadOnlyModelViewSet):
    """Company audit trail, visible to company admins only."""

    serializer_class = AuditLogSerializer
    queryset = AuditLog.objects.select_related("user")
    filter_backends = [filters.SearchFilter]
    search_fields = ["entity_type", "entity_id", "description"]

    def get_queryset(self):  # type: ignore[override]
        queryset = super().get_queryset()
        if getattr(self, "swagger_fake_view", False):
            return queryset
        self.require_admin()
        params = self.request.query_params
        for name in ("entity_type", "entity_id", "action"):
            if params.get(name):
                queryset = queryset.filter(**{name: params[name]})
        return queryset
