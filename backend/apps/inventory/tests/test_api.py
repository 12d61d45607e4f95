from __future__ import annotations

from decimal import Decimal

from rest_framework.test import APITestCase

from apps.inventory.models import Category, InventoryItem
from apps.users.models import CompanyMembership
from shared.testing import make_company, make_item, make_user


class InventoryApiTests(APITestCase):
    def setUp(self):
        self.company = make_company("TEX")
        self.user = make_user(self.company, "store")
        self.client.force_authenticate(self.user)
        self.headers = {"HTTP_X_COMPANY_ID": str(self.company.pk)}

    def test_item_created_with_opening_stock(self):
        payload = {"code": "gf-100", "name": "Grey cotton 60s", "item_type": "grey_fabric", "unit_price": "42.50", "opening_stock": "25"}
        response = self.client.post("/api/v1/inventory-items/", payload, format="json", **self.headers)
        self.assertEqual(response.status_code, 201, response.data)
        data = response.data["data"]
        self.assertEqual(data["code"], "GF-100")
        self.assertEqual(Decimal(data["current_stock"]), Decimal("25"))
        self.assertEqual(Decimal(data["available_stock"]), Decimal("25"))
        item = InventoryItem.objects.get(pk=data["id"])
        self.assertEqual(item.movements.get().notes, "Opening stock")

    def test_duplicate_item_code_rejected(self):
        make_item(self.company, "GF-100")
        response = self.client.post("/api/v1/inventory-items/", {"code": "GF-100", "name": "Again"}, format="json", **self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data["success"])
        self.assertIn("Item code already exists", response.data["message"])

    def test_stock_action_and_ledger(self):
        item = make_item(self.company, "DY-1", stock=Decimal("10"))
        response = self.client.post(
            f"/api/v1/inventory-items/{item.pk}/stock/",
            {"movement_type": "out", "quantity": "4", "reference_number": "ISS-9"},
            format="json",
            **self.headers,
        )
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(Decimal(response.data["data"]["item"]["current_stock"]), Decimal("6"))
        self.assertEqual(response.data["data"]["movement"]["reference_number"], "ISS-9")

        response = self.client.post(
            f"/api/v1/inventory-items/{item.pk}/stock/", {"movement_type": "out", "quantity": "40"}, format="json", **self.headers
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Insufficient stock available", response.data["message"])

        response = self.client.get(f"/api/v1/stock-movements/?item={item.pk}", **self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["pagination"]["total"], 2)

    def test_low_stock_and_summary_endpoints(self):
        make_item(self.company, "GF-1", stock=Decimal("5"), reorder_level=Decimal("10"))
        make_item(self.company, "GF-2", stock=Decimal("50"), reorder_level=Decimal("10"))
        response = self.client.get("/api/v1/inventory-items/low-stock/", **self.headers)
        self.assertEqual([row["code"] for row in response.data["data"]], ["GF-1"])
        response = self.client.get("/api/v1/inventory-items/summary/", **self.headers)
        self.assertEqual(response.data["data"]["total_items"], 2)

    def test_items_are_isolated_per_company(self):
        other = make_company("OTH")
        foreign = make_item(other, "GF-1")
        response = self.client.get(f"/api/v1/inventory-items/{foreign.pk}/", **self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.data["success"])

    def test_company_header_without_membership_is_forbidden(self):
        other = make_company("OTH")
        response = self.client.get("/api/v1/inventory-items/", HTTP_X_COMPANY_ID=str(other.pk))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["error"], "AuthorizationError")

    def test_category_in_use_cannot_be_deleted(self):
        category = Category.objects.create(company=self.company, name="Dyes")
        make_item(self.company, "DY-1", category=category)
        response = self.client.delete(f"/api/v1/categories/{category.pk}/", **self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertIn("It is being used by 1 inventory item(s)", response.data["message"])

    def test_deleted_category_is_hidden_from_list(self):
        category = Category.objects.create(company=self.company, name="Chemicals")
        response = self.client.delete(f"/api/v1/categories/{category.pk}/", **self.headers)
        self.assertEqual(response.status_code, 200)
        category.refresh_from_db()
        self.assertFalse(category.is_active)
        response = self.client.get("/api/v1/categories/", **self.headers)
        self.assertEqual(response.data["data"], [])

    def test_viewer_sees_items(self):
        viewer = make_user(self.company, "viewer", role=CompanyMembership.Role.VIEWER)
        self.client.force_authenticate(viewer)
        make_item(self.company, "GF-1")
        response = self.client.get("/api/v1/inventory-items/", **self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["pagination"]["total"], 1)
