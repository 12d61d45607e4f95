from __future__ import annotations

from rest_framework.test import APITestCase

from apps.audit.models import AuditLog
from apps.users.models import CompanyMembership
from shared.testing import make_company, make_user


class AuditLogApiTests(APITestCase):
    def setUp(self):
        self.company = make_company("TEX")
        self.admin = make_user(self.company, "owner")
        self.headers = {"HTTP_X_COMPANY_ID": str(self.company.pk)}

    def test_writes_are_recorded_and_listed_for_admins(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post("/api/v1/categories/", {"name": "Dyes"}, format="json", **self.headers)
        self.assertEqual(response.status_code, 201, response.data)
        entry = AuditLog.objects.get(entity_type="Category")
        self.assertEqual(entry.action, "CREATE")
        self.assertEqual(entry.user, self.admin)
        self.assertEqual(entry.company, self.company)

        response = self.client.get("/api/v1/audit-logs/?entity_type=Category", **self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["data"][0]["user_name"], "owner")

    def test_logs_of_other_companies_are_hidden(self):
        other = make_company("OTH")
        AuditLog.objects.create(company=other, entity_type="GatePass", entity_id="1", action="CREATE")
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/v1/audit-logs/", **self.headers)
        self.assertEqual(response.data["pagination"]["total"], 0)

    def test_non_admins_are_refused(self):
        viewer = make_user(self.company, "viewer", role=CompanyMembership.Role.VIEWER)
        self.client.force_authenticate(viewer)
        response = self.client.get("/api/v1/audit-logs/", **self.headers)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["message"], "Company admin access is required.")
