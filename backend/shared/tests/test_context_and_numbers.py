from __future__ import annotations

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase

from apps.inventory.models import InventoryItem
from apps.users.models import CompanyMembership
from core.doc_numbers import get_next_doc_no, next_free_code
from shared.context import RequestContext
from shared.testing import make_company, make_item, make_user


class RequestContextTests(TestCase):
    def setUp(self):
        self.company = make_company("TEX")

    def test_admin_flag_follows_membership_role(self):
        admin = make_user(self.company, "owner")
        viewer = make_user(self.company, "viewer", role=CompanyMembership.Role.VIEWER)
        self.assertTrue(RequestContext.for_user(admin, self.company).is_admin)
        self.assertFalse(RequestContext.for_user(viewer, self.company).is_admin)

    def test_anonymous_caller_has_no_actor(self):
        ctx = RequestContext(company=self.company, user=AnonymousUser())
        self.assertIsNone(ctx.actor)
        self.assertEqual(ctx.company_id, self.company.pk)

    def test_scope_filters_by_company(self):
        other = make_company("OTH")
        make_item(self.company, "GF-1")
        make_item(other, "GF-1")
        ctx = RequestContext(company=self.company)
        self.assertEqual(ctx.scope(InventoryItem.objects).count(), 1)


class DocumentNumberTests(TestCase):
    def setUp(self):
        self.company = make_company("TEX")

    def test_numbers_run_per_company_and_type(self):
        period = timezone.now().strftime("%Y%m")
        self.assertEqual(get_next_doc_no(company=self.company, doc_type="GP"), f"GP{period}0001")
        self.assertEqual(get_next_doc_no(company=self.company, doc_type="GP"), f"GP{period}0002")
        self.assertEqual(get_next_doc_no(company=self.company, doc_type="INV"), f"INV{period}0001")
        other = make_company("OTH")
        self.assertEqual(get_next_doc_no(company=other, doc_type="GP"), f"GP{period}0001")

    def test_prefix_and_no_period(self):
        self.assertEqual(get_next_doc_no(company=self.company, doc_type="CUST", period_format="", width=6), "CUST000001")
        self.assertEqual(get_next_doc_no(company=self.company, doc_type="DY", prefix="DYE-", period_format=""), "DYE-0001")

    def test_next_free_code_skips_manual_codes(self):
        make_item(self.company, "ITM000001")
        code = next_free_code(company=self.company, model=InventoryItem, field="code", doc_type="ITM")
        self.assertEqual(code, "ITM000002")


class HealthCheckTests(APITestCase):
    def test_health_is_public(self):
        response = self.client.get("/health/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "ok")
        self.assertEqual(response.data["database"]["details"]["default"], "connected")
