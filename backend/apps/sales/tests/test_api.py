from __future__ import annotations

from decimal import Decimal

from rest_framework.test import APITestCase

from apps.sales.models import Customer, CustomerOrder
from shared.testing import make_company, make_item, make_user


class SalesApiTests(APITestCase):
    def setUp(self):
        self.company = make_company("TEX")
        self.user = make_user(self.company, "sales")
        self.client.force_authenticate(self.user)
        self.headers = {"HTTP_X_COMPANY_ID": str(self.company.pk)}

    def test_customer_code_is_generated(self):
        response = self.client.post("/api/v1/customers/", {"name": "Acme", "email": "buyer@acme.test"}, format="json", **self.headers)
        self.assertEqual(response.status_code, 201, response.data)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["data"]["code"], "CUST000001")

    def test_duplicate_code_and_email_rejected_within_company(self):
        Customer.objects.create(company=self.company, code="ACME01", name="Acme", email="buyer@acme.test")
        response = self.client.post("/api/v1/customers/", {"code": "acme01", "name": "Other"}, format="json", **self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data["success"])
        self.assertIn("Customer code already exists", response.data["message"])

        response = self.client.post("/api/v1/customers/", {"name": "Other", "email": "BUYER@acme.test"}, format="json", **self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertIn("Customer with this email already exists", response.data["message"])

    def test_same_code_allowed_in_another_company(self):
        other = make_company("OTH")
        Customer.objects.create(company=other, code="ACME01", name="Acme elsewhere")
        response = self.client.post("/api/v1/customers/", {"code": "ACME01", "name": "Acme"}, format="json", **self.headers)
        self.assertEqual(response.status_code, 201, response.data)

    def test_order_lifecycle_over_http(self):
        customer = Customer.objects.create(company=self.company, code="CUST000001", name="Acme")
        fabric = make_item(self.company, "GF-1", stock=Decimal("10"))
        payload = {
            "customer": customer.pk,
            "items": [
                {"item_name": "Grey", "product_type": "fabric", "inventory_item": fabric.pk, "quantity": "4", "rate": "25"},
            ],
        }
        response = self.client.post("/api/v1/customer-orders/", payload, format="json", **self.headers)
        self.assertEqual(response.status_code, 201, response.data)
        order_id = response.data["data"]["id"]
        self.assertEqual(response.data["data"]["status"], "draft")
        self.assertEqual(Decimal(response.data["data"]["total_amount"]), Decimal("100.00"))

        response = self.client.patch(f"/api/v1/customer-orders/{order_id}/status/", {"status": "confirmed"}, format="json", **self.headers)
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["data"]["status"], "confirmed")
        fabric.refresh_from_db()
        self.assertEqual(fabric.reserved_stock, Decimal("4"))

        response = self.client.patch(f"/api/v1/customer-orders/{order_id}/status/", {"status": "delivered"}, format="json", **self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["message"], "Invalid status transition from confirmed to delivered")
        self.assertEqual(CustomerOrder.objects.get(pk=order_id).status, "confirmed")

        response = self.client.get(f"/api/v1/customer-orders/{order_id}/stock-impact/", **self.headers)
        self.assertEqual(response.data["data"]["stock_affected_items"], 1)

    def test_list_is_paginated_and_scoped(self):
        Customer.objects.create(company=self.company, code="C1", name="Mine")
        Customer.objects.create(company=make_company("OTH"), code="C2", name="Theirs")
        response = self.client.get("/api/v1/customers/?limit=10", **self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["pagination"]["total"], 1)
        self.assertEqual(response.data["data"][0]["name"], "Mine")

    def test_foreign_company_header_is_forbidden(self):
        other = make_company("OTH")
        response = self.client.get("/api/v1/customers/", HTTP_X_COMPANY_ID=str(other.pk))
        self.assertEqual(response.status_code, 403)
        self.assertFalse(response.data["success"])
