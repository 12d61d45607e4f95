from __future__ import annotations

from typing import Any, Dict, Optional

from .models import AuditLog


def log_audit_event(
    *,
    user,
    company,
    action: str,
    entity_type: str,
    entity_id,
    description: str = "",
    before: Optional[Dict[str, Any]] = None,
    after: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
) -> AuditLog:
    """Persist an audit log entry while handling optional context gracefully."""
    if user is not None and not getattr(user, "is_authenticated", False):
        user = None
    return AuditLog.objects.create(
        user=user,
        company=company,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        description=description,
        before_value=before,
        after_value=after,
        ip_address=ip_address,
    )
