from __future__ import annotations

import math
from typing import Any

from django.conf import settings
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


def success_response(data: Any = None, message: str = "", *, status_code: int = status.HTTP_200_OK, **extra) -> Response:
    payload = {"success": True, "message": message, "data": data}
    payload.update(extra)
    return Response(payload, status=status_code)


class EnvelopePagination(PageNumberPagination):
    """Page-number pagination driven by ``page`` and ``limit`` query parameters."""

    page_size_query_param = "limit"
    max_page_size = 100

    def __init__(self):
        self.page_size = getattr(settings, "API_PAGE_SIZE", 20)

    def get_paginated_response(self, data):
        total = self.page.paginator.count
        limit = self.page.paginator.per_page
        return success_response(
            data,
            "",
            pagination={
                "page": self.page.number,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "message": {"type": "string"},
                "data": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "total": {"type": "integer"},
                        "pages": {"type": "integer"},
                    },
                },
            },
        }
