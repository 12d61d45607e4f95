from __future__ import annotations

from rest_framework.test import APITestCase

from apps.audit.models import AuditLog
from apps.companies.models import Company, CompanyBankAccount
from apps.users.models import CompanyMembership
from shared.testing import make_company, make_user


class CompanyApiTests(APITestCase):
    def setUp(self):
        self.company = make_company("TEX")
        self.admin = make_user(self.company, "owner")
        self.operator = make_user(self.company, "operator", role=CompanyMembership.Role.OPERATOR)
        self.platform_admin = make_user(self.company, "root", is_system_admin=True)

    def test_only_platform_admins_create_companies(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post("/api/v1/companies/", {"code": "NEW01", "name": "New Mills"}, format="json")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["message"], "Only system administrators can create companies.")

        self.client.force_authenticate(self.platform_admin)
        response = self.client.post(
            "/api/v1/companies/", {"code": "new01", "name": "New Mills", "pan": "abcde1234f"}, format="json"
        )
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["data"]["code"], "NEW01")
        self.assertEqual(response.data["data"]["pan"], "ABCDE1234F")
        self.assertTrue(AuditLog.objects.filter(entity_type="Company", action="CREATE").exists())

    def test_registration_numbers_are_validated(self):
        self.client.force_authenticate(self.platform_admin)
        response = self.client.post(
            "/api/v1/companies/", {"code": "BAD01", "name": "Bad", "gstin": "27ABCDE1234F1Z"}, format="json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid GSTIN format.", response.data["message"])

        response = self.client.post("/api/v1/companies/", {"code": "X", "name": "Short"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("Company code must be 3-20", response.data["message"])

    def test_list_is_limited_to_member_companies(self):
        make_company("OTH")
        self.client.force_authenticate(self.operator)
        response = self.client.get("/api/v1/companies/")
        self.assertEqual([row["code"] for row in response.data["data"]], ["TEX"])

        self.client.force_authenticate(self.platform_admin)
        response = self.client.get("/api/v1/companies/")
        self.assertEqual(response.data["pagination"]["total"], 2)

    def test_company_admin_edits_own_company_only(self):
        self.client.force_authenticate(self.operator)
        response = self.client.patch(f"/api/v1/companies/{self.company.pk}/", {"city": "Surat"}, format="json")
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.patch(f"/api/v1/companies/{self.company.pk}/", {"city": "Surat"}, format="json")
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["data"]["city"], "Surat")

    def test_delete_deactivates_company(self):
        self.client.force_authenticate(self.platform_admin)
        other = make_company("OTH")
        response = self.client.delete(f"/api/v1/companies/{other.pk}/")
        self.assertEqual(response.status_code, 200)
        other.refresh_from_db()
        self.assertFalse(other.is_active)
        self.assertEqual(other.status, Company.Status.INACTIVE)


class BankAccountApiTests(APITestCase):
    def setUp(self):
        self.company = make_company("TEX")
        self.admin = make_user(self.company, "owner")
        self.client.force_authenticate(self.admin)
        self.url = f"/api/v1/companies/{self.company.pk}/bank-accounts/"

    def account_payload(self, number: str, **extra):
        payload = {
            "bank_name": "State Bank",
            "account_number": number,
            "ifsc_code": "sbin0001234",
            "account_holder_name": "TEX Textiles",
        }
        payload.update(extra)
        return payload

    def test_add_and_list_bank_accounts(self):
        response = self.client.post(self.url, self.account_payload("000111222333"), format="json")
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["data"]["ifsc_code"], "SBIN0001234")

        response = self.client.get(self.url)
        self.assertEqual(len(response.data["data"]), 1)

    def test_invalid_ifsc_rejected(self):
        response = self.client.post(self.url, self.account_payload("000111222333", ifsc_code="SBIN01"), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("IFSC code must be 11 characters.", response.data["message"])

    def test_single_primary_account(self):
        self.client.post(self.url, self.account_payload("1001", is_primary=True), format="json")
        self.client.post(self.url, self.account_payload("1002", is_primary=True), format="json")
        primaries = CompanyBankAccount.objects.filter(company=self.company, is_primary=True)
        self.assertEqual(list(primaries.values_list("account_number", flat=True)), ["1002"])

    def test_operator_cannot_add_accounts(self):
        operator = make_user(self.company, "operator", role=CompanyMembership.Role.OPERATOR)
        self.client.force_authenticate(operator)
        response = self.client.post(self.url, self.account_payload("1001"), format="json")
        self.assertEqual(response.status_code, 403)
