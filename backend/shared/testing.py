from __future__ import annotations

from decimal import Decimal

from apps.companies.models import Company
from apps.users.models import CompanyMembership, User

from .context import RequestContext


def make_company(code: str = "TST", **extra) -> Company:
    extra.setdefault("name", f"{code} Textiles")
    return Company.objects.create(code=code, **extra)


def make_user(company: Company, username: str = "operator", *, role: str = CompanyMembership.Role.ADMIN, **extra) -> User:
    user = User.objects.create_user(username=username, password="pass12345", default_company=company, **extra)
    CompanyMembership.objects.create(user=user, company=company, role=role)
    return user


def make_context(company: Company, user: User = None) -> RequestContext:
    return RequestContext.for_user(user, company) if user is not None else RequestContext(company=company)


def make_item(company: Company, code: str = "GF-001", *, stock=None, **extra):
    from apps.inventory.models import InventoryItem, StockMovement
    from apps.inventory.services.stock_service import InventoryService

    extra.setdefault("name", f"Item {code}")
    extra.setdefault("unit_price", Decimal("10"))
    item = InventoryItem.objects.create(company=company, code=code, **extra)
    if stock:
        InventoryService.update_stock(RequestContext(company=company), item.pk, stock, StockMovement.MovementType.IN)
        item.refresh_from_db()
    return item
