from __future__ import annotations

from rest_framework.test import APITestCase

from apps.users.models import CompanyMembership, User
from shared.testing import make_company, make_user


class CurrentUserApiTests(APITestCase):
    def setUp(self):
        self.company = make_company("TEX")
        self.user = make_user(self.company, "weaver")
        self.client.force_authenticate(self.user)

    def test_me_returns_profile_with_memberships(self):
        response = self.client.get("/api/v1/users/me/")
        self.assertEqual(response.status_code, 200)
        data = response.data["data"]
        self.assertEqual(data["username"], "weaver")
        self.assertEqual(data["default_company"], self.company.pk)
        self.assertEqual(data["memberships"][0]["company_code"], "TEX")

    def test_me_update_rejects_foreign_default_company(self):
        other = make_company("OTH")
        response = self.client.patch("/api/v1/users/me/", {"default_company": other.pk}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("You do not have access to this company.", response.data["message"])

        response = self.client.patch("/api/v1/users/me/", {"first_name": "Asha"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["data"]["first_name"], "Asha")

    def test_change_password(self):
        response = self.client.post(
            "/api/v1/users/change-password/", {"old_password": "wrong", "new_password": "longenough"}, format="json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["message"], "Current password is incorrect.")

        response = self.client.post(
            "/api/v1/users/change-password/", {"old_password": "pass12345", "new_password": "short"}, format="json"
        )
        self.assertEqual(response.status_code, 400)

        response = self.client.post(
            "/api/v1/users/change-password/", {"old_password": "pass12345", "new_password": "longenough"}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("longenough"))

    def test_anonymous_request_gets_envelope(self):
        self.client.force_authenticate(None)
        response = self.client.get("/api/v1/users/me/")
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["error"], "AuthenticationError")


class TokenApiTests(APITestCase):
    def test_obtain_token_and_use_it(self):
        company = make_company("TEX")
        make_user(company, "weaver")
        response = self.client.post("/api/v1/auth/token/", {"username": "weaver", "password": "pass12345"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        response = self.client.get("/api/v1/users/me/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["data"]["username"], "weaver")


class CompanyUserApiTests(APITestCase):
    def setUp(self):
        self.company = make_company("TEX")
        self.admin = make_user(self.company, "owner")
        self.client.force_authenticate(self.admin)
        self.headers = {"HTTP_X_COMPANY_ID": str(self.company.pk)}

    def test_admin_adds_user_to_company(self):
        payload = {"username": "dyer", "password": "dyehouse99", "email": "dyer@tex.test", "role": "operator"}
        response = self.client.post("/api/v1/users/", payload, format="json", **self.headers)
        self.assertEqual(response.status_code, 201, response.data)
        user = User.objects.get(username="dyer")
        self.assertEqual(user.default_company, self.company)
        self.assertEqual(user.memberships.get().role, CompanyMembership.Role.OPERATOR)

        response = self.client.get("/api/v1/users/", **self.headers)
        self.assertEqual(response.data["pagination"]["total"], 2)

    def test_non_admin_cannot_add_users(self):
        operator = make_user(self.company, "operator", role=CompanyMembership.Role.OPERATOR)
        self.client.force_authenticate(operator)
        payload = {"username": "dyer", "password": "dyehouse99"}
        response = self.client.post("/api/v1/users/", payload, format="json", **self.headers)
        self.assertEqual(response.status_code, 403)
        self.assertFalse(User.objects.filter(username="dyer").exists())

    def test_deactivate_removes_membership(self):
        operator = make_user(self.company, "operator", role=CompanyMembership.Role.OPERATOR)
        response = self.client.post(f"/api/v1/users/{operator.pk}/deactivate/", **self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(operator.memberships.get().is_active)
        response = self.client.get("/api/v1/users/", **self.headers)
        self.assertEqual(response.data["pagination"]["total"], 1)
