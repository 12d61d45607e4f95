from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class RequestContext:
    """Tenant and caller identity handed explicitly to every service call."""

    company: Any
    user: Any = None
    is_admin: bool = False

    @property
    def company_id(self) -> int:
        return self.company.pk

    @property
    def actor(self) -> Optional[Any]:
        """The calling user when authenticated, usable for ``created_by`` style foreign keys."""
        if self.user is not None and getattr(self.user, "is_authenticated", False):
            return self.user
        return None

    def scope(self, queryset):
        return queryset.filter(company=self.company)

    @classmethod
    def for_user(cls, user, company) -> "RequestContext":
        checker = getattr(user, "is_admin_for", None)
        if callable(checker):
            is_admin = bool(checker(company))
        else:
            is_admin = bool(getattr(user, "is_superuser", False))
        return cls(company=company, user=user, is_admin=is_admin)
