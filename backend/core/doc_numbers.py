from __future__ import annotations

from django.db import transaction
from django.utils import timezone


def _period_value(fmt: str = "YYYYMM") -> str:
    now = timezone.now()
    fmt = (fmt or "").upper()
    if not fmt:
        return ""
    if fmt == "YY":
        return f"{now:%y}"
    if fmt == "YYYY":
        return f"{now:%Y}"
    return f"{now:%Y%m}"


@transaction.atomic
def get_next_doc_no(*, company, doc_type: str, prefix: str | None = None, period_format: str = "YYYYMM", width: int = 4) -> str:
    """
    Get the next sequential document number for a company and doc type.

    The format is: {prefix or doc_type}{PERIOD}{SEQUENCE}
    Example: CO2025070001 (period YYYYMM), CUST000001 (no period, width 6)
    """
    from apps.companies.models import DocumentSequence

    period = _period_value(period_format)
    seq, _ = (
        DocumentSequence.objects.select_for_update().get_or_create(
            company=company,
            doc_type=doc_type,
            period=period,
            defaults={"current_value": 0},
        )
    )
    seq.current_value += 1
    seq.save(update_fields=["current_value"])
    pre = prefix or doc_type
    return f"{pre}{period}{seq.current_value:0{width}d}"


def next_free_code(*, company, model, field: str, doc_type: str, width: int = 6) -> str:
    """Generate a sequential code, skipping values already taken by manual entries."""
    while True:
        candidate = get_next_doc_no(company=company, doc_type=doc_type, period_format="", width=width)
        if not model.objects.filter(company=company, **{field: candidate}).exists():
            return candidate
