from __future__ import annotations

from django.http import HttpResponse
from rest_framework import viewsets
from rest_framework.decorators import action

from apps.audit.utils import log_audit_event
from shared.responses import success_response
from shared.views import CompanyScopedMixin, parse_date_range

from .services.export_service import ExportService
from .services.report_service import ReportService


class ReportViewSet(CompanyScopedMixin, viewsets.ViewSet):
    """
    Business reports over a ``start_date``/``end_date`` range (default: the last 30 days).

    ``?format=xlsx|csv|pdf`` returns the report as a file attachment instead of JSON.
    """

    def list(self, request):
        return success_response(
            [{"report": name, "path": f"{name}/"} for name in ReportService.REPORTS],
            "Available reports",
        )

    def _render(self, request, name: str):
        ctx = self.get_context()
        start, end = parse_date_range(request.query_params)
        filters = {key: request.query_params.get(key) for key in ("supplier", "status") if request.query_params.get(key)}
        report = ReportService.build(name, ctx, start, end, filters)
        fmt = request.query_params.get("format")
        if not fmt or fmt == "json":
            return success_response(report.as_dict())
        content, content_type, filename = ExportService.export(report, fmt, ctx.company)
        log_audit_event(
            user=ctx.actor,
            company=ctx.company,
            action="EXPORT",
            entity_type="Report",
            entity_id=name,
            description=f"{report.title} exported as {fmt}.",
        )
        response = HttpResponse(content, content_type=content_type)
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response

    @action(detail=False, methods=["get"])
    def sales(self, request):
        return self._render(request, "sales")

    @action(detail=False, methods=["get"])
    def inventory(self, request):
        return self._render(request, "inventory")

    @action(detail=False, methods=["get"])
    def production(self, request):
        return self._render(request, "production")

    @action(detail=False, methods=["get"], url_path="purchase-summary")
    def purchase_summary(self, request):
        return self._render(request, "purchase-summary")

    @action(detail=False, methods=["get"], url_path="supplier-wise-purchase")
    def supplier_wise_purchase(self, request):
        return self._render(request, "supplier-wise-purchase")
