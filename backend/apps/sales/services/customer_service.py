from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict

from django.db import transaction
from django.db.models import Count, Sum

from core.doc_numbers import next_free_code
from shared.context import RequestContext
from shared.exceptions import ValidationFailed

from ..models import Customer, CustomerOrder

logger = logging.getLogger(__name__)


class CustomerService:
    @staticmethod
    def check_unique(ctx: RequestContext, *, code: str = "", email: str = "", exclude_pk=None) -> None:
        customers = ctx.scope(Customer.objects)
        if exclude_pk is not None:
            customers = customers.exclude(pk=exclude_pk)
        if code and customers.filter(code=code.strip().upper()).exists():
            raise ValidationFailed("Customer code already exists")
        if email and customers.filter(email=email.strip().lower()).exists():
            raise ValidationFailed("Customer with this email already exists")

    @staticmethod
    @transaction.atomic
    def create_customer(ctx: RequestContext, data: Dict) -> Customer:
        data = dict(data)
        CustomerService.check_unique(ctx, code=data.get("code", ""), email=data.get("email", ""))
        if not data.get("code"):
            data["code"] = next_free_code(company=ctx.company, model=Customer, field="code", doc_type="CUST")
        customer = Customer.objects.create(company=ctx.company, created_by=ctx.actor, **data)
        logger.info("Customer %s created in company %s", customer.code, ctx.company_id)
        return customer

    @staticmethod
    def stats(ctx: RequestContext) -> Dict:
        customers = ctx.scope(Customer.objects)
        by_category = {
            row["category"]: row["count"]
            for row in customers.active().values("category").annotate(count=Count("id"))
        }
        return {
            "total_customers": customers.count(),
            "active_customers": customers.active().count(),
            "inactive_customers": customers.filter(is_active=False).count(),
            "by_category": by_category,
            "total_credit_limit": customers.active().aggregate(total=Sum("credit_limit"))["total"] or Decimal("0"),
        }

    @staticmethod
    def order_history(ctx: RequestContext, customer: Customer):
        return (
            ctx.scope(CustomerOrder.objects)
            .filter(customer=customer)
            .select_related("customer")
            .prefetch_related("items")
            .order_by("-order_date", "-id")
        )
