from __future__ import annotations

from decimal import Decimal

from rest_framework.test import APITestCase

from apps.procurement.models import Supplier
from shared.testing import make_company, make_item, make_user


class ProcurementApiTests(APITestCase):
    def setUp(self):
        self.company = make_company("TEX")
        self.user = make_user(self.company, "buyer")
        self.client.force_authenticate(self.user)
        self.headers = {"HTTP_X_COMPANY_ID": str(self.company.pk)}

    def test_create_supplier_and_order_then_receive(self):
        response = self.client.post("/api/v1/suppliers/", {"name": "Grey Mills", "rating": "4.0"}, format="json", **self.headers)
        self.assertEqual(response.status_code, 201, response.data)
        supplier_id = response.data["data"]["id"]
        self.assertEqual(response.data["data"]["code"], "SUP000001")

        fabric = make_item(self.company, "GF-9")
        response = self.client.post(
            "/api/v1/purchase-orders/",
            {"supplier": supplier_id, "items": [{"item_name": "Grey 40s", "inventory_item": fabric.pk, "quantity": "50", "rate": "30"}]},
            format="json",
            **self.headers,
        )
        self.assertEqual(response.status_code, 201, response.data)
        order_id = response.data["data"]["id"]
        line_id = response.data["data"]["items"][0]["id"]

        for status in ("pending", "approved", "ordered"):
            response = self.client.patch(f"/api/v1/purchase-orders/{order_id}/status/", {"status": status}, format="json", **self.headers)
            self.assertEqual(response.status_code, 200, response.data)

        response = self.client.post(
            f"/api/v1/purchase-orders/{order_id}/receive/",
            {"items": [{"item": line_id, "quantity": "50"}]},
            format="json",
            **self.headers,
        )
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["data"]["status"], "received")
        fabric.refresh_from_db()
        self.assertEqual(fabric.current_stock, Decimal("50"))

    def test_supplier_rating_out_of_range(self):
        supplier = Supplier.objects.create(company=self.company, code="SUP1", name="S")
        response = self.client.patch(f"/api/v1/suppliers/{supplier.pk}/rating/", {"rating": "7"}, format="json", **self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data["success"])

    def test_supplier_soft_delete(self):
        supplier = Supplier.objects.create(company=self.company, code="SUP1", name="S")
        response = self.client.delete(f"/api/v1/suppliers/{supplier.pk}/", **self.headers)
        self.assertEqual(response.status_code, 200)
        supplier.refresh_from_db()
        self.assertFalse(supplier.is_active)
        response = self.client.get("/api/v1/suppliers/", **self.headers)
        self.assertEqual(response.data["pagination"]["total"], 0)
