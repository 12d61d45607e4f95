from __future__ import annotations

from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APITestCase

from apps.production.models import Dyeing, ProcessRecordStatus, ProductionOrderStatus
from apps.production.services.flow_service import ProductionFlowService
from apps.production.services.process_service import DyeingService, FinishingService
from shared.exceptions import ValidationFailed
from shared.testing import make_company, make_context, make_user


class ProcessRecordServiceTests(TestCase):
    def setUp(self):
        self.company = make_company("PRC")
        self.ctx = make_context(self.company, make_user(self.company, "dyer"))
        self.order = ProductionFlowService.create_order(self.ctx, {"product_name": "Navy twill", "planned_quantity": Decimal("1000")})

    def _dyeing(self, **extra):
        data = {
            "production_order": self.order,
            "dyeing_type": "reactive",
            "dyeing_method": "exhaust",
            "machine_type": "jet",
            "input_quantity": Decimal("1000"),
        }
        data.update(extra)
        return DyeingService.create(self.ctx, data)

    def test_batch_number_generated_with_prefix(self):
        record = self._dyeing()
        self.assertTrue(record.batch_number.startswith("DYE"))
        self.assertEqual(record.stage_number, 3)
        self.assertEqual(record.status, ProcessRecordStatus.PENDING)

        with self.assertRaisesMessage(ValidationFailed, "Batch number already exists"):
            self._dyeing(batch_number=record.batch_number)

    def test_complete_computes_efficiency_and_cost(self):
        record = self._dyeing(cost_breakdown={"chemical_cost": "1200", "labor_cost": "300"})
        self.assertEqual(record.total_cost, Decimal("1500.00"))

        with self.assertRaisesMessage(ValidationFailed, "Dyeing record is not in progress"):
            DyeingService.complete(self.ctx, record.pk, output_quantity=Decimal("950"))

        DyeingService.start(self.ctx, record.pk)
        record = DyeingService.complete(
            self.ctx, record.pk, output_quantity=Decimal("950"), waste_quantity=Decimal("50"), cost_breakdown={"utility_cost": "100"}
        )
        self.assertEqual(record.status, ProcessRecordStatus.COMPLETED)
        self.assertEqual(record.efficiency, Decimal("95.00"))
        self.assertEqual(record.total_cost, Decimal("1600.00"))
        self.assertIsNotNone(record.end_time)

        with self.assertRaises(ValidationFailed):
            DyeingService.update(self.ctx, record.pk, {"machine_id": "JET-2"})

    def test_quality_checks_append(self):
        record = self._dyeing()
        DyeingService.add_quality_check(self.ctx, record.pk, {"parameter": "shade", "expected_value": "Navy", "actual_value": "Navy", "status": "pass"})
        record = DyeingService.add_quality_check(self.ctx, record.pk, {"parameter": "fastness", "status": "fail"})
        self.assertEqual([check["status"] for check in record.quality_checks], ["pass", "fail"])
        with self.assertRaises(ValidationFailed):
            DyeingService.add_quality_check(self.ctx, record.pk, {"parameter": "gsm", "status": "maybe"})

    def test_analytics(self):
        done = self._dyeing()
        DyeingService.start(self.ctx, done.pk)
        DyeingService.complete(self.ctx, done.pk, output_quantity=Decimal("900"))
        running = self._dyeing()
        DyeingService.start(self.ctx, running.pk)
        self._dyeing()

        analytics = DyeingService.analytics(self.ctx)
        self.assertEqual(analytics["total_batches"], 3)
        self.assertEqual(analytics["completed_batches"], 1)
        self.assertEqual(analytics["in_progress_batches"], 1)
        self.assertEqual(analytics["average_efficiency"], Decimal("90.00"))
        self.assertEqual(FinishingService.analytics(self.ctx)["total_batches"], 0)

    def test_non_numeric_cost_is_rejected(self):
        record = self._dyeing()
        DyeingService.start(self.ctx, record.pk)
        with self.assertRaisesMessage(ValidationFailed, "Invalid cost value for labor_cost"):
            DyeingService.complete(self.ctx, record.pk, output_quantity=Decimal("9"), cost_breakdown={"labor_cost": "abc"})
        record.refresh_from_db()
        self.assertEqual(record.status, ProcessRecordStatus.IN_PROGRESS)
        self.assertEqual(record.cost_breakdown, {})

        with self.assertRaisesMessage(ValidationFailed, "Invalid cost value for chemical_cost"):
            self._dyeing(cost_breakdown={"chemical_cost": "-5"})
        with self.assertRaisesMessage(ValidationFailed, "Cost breakdown must be an object of amounts"):
            DyeingService.complete(self.ctx, record.pk, cost_breakdown=["100"])

    def test_closed_production_order_rejects_new_records(self):
        ProductionFlowService.update_status(self.ctx, self.order.pk, ProductionOrderStatus.CANCELLED)
        with self.assertRaisesMessage(ValidationFailed, "Production order is cancelled"):
            self._dyeing()
        self.assertFalse(Dyeing.objects.filter(production_order=self.order).exists())

    def test_production_order_must_belong_to_company(self):
        other_ctx = make_context(make_company("OTH"))
        with self.assertRaisesMessage(ValidationFailed, "Production order not found"):
            DyeingService.create(other_ctx, {"production_order": self.order.pk, "dyeing_type": "acid", "dyeing_method": "exhaust", "machine_type": "jet"})


class ProcessRecordApiTests(APITestCase):
    def setUp(self):
        self.company = make_company("PRX")
        self.user = make_user(self.company, "finisher")
        self.client.force_authenticate(self.user)
        self.headers = {"HTTP_X_COMPANY_ID": str(self.company.pk)}
        self.order = ProductionFlowService.create_order(make_context(self.company, self.user), {"product_name": "Canvas", "planned_quantity": Decimal("100")})

    def test_dyeing_record_lifecycle(self):
        response = self.client.post(
            "/api/v1/production/dyeing/",
            {
                "production_order": self.order.pk,
                "dyeing_type": "reactive",
                "dyeing_method": "continuous",
                "machine_type": "jigger",
                "input_quantity": "100",
                "chemicals": [{"name": "Reactive Red", "quantity": 2, "unit": "kg"}],
            },
            format="json",
            **self.headers,
        )
        self.assertEqual(response.status_code, 201, response.data)
        record_id = response.data["data"]["id"]
        self.assertTrue(response.data["data"]["batch_number"].startswith("DYE"))

        response = self.client.post(f"/api/v1/production/dyeing/{record_id}/start/", format="json", **self.headers)
        self.assertEqual(response.status_code, 200, response.data)

        response = self.client.post(
            f"/api/v1/production/dyeing/{record_id}/complete/", {"output_quantity": "80"}, format="json", **self.headers
        )
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(Decimal(response.data["data"]["efficiency"]), Decimal("80.00"))

        response = self.client.post(
            f"/api/v1/production/dyeing/{record_id}/quality-check/",
            {"parameter": "shade", "status": "pass"},
            format="json",
            **self.headers,
        )
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(len(response.data["data"]["quality_checks"]), 1)

        response = self.client.get("/api/v1/production/dyeing/analytics/", **self.headers)
        self.assertEqual(response.data["data"]["completed_batches"], 1)
        self.assertEqual(Dyeing.objects.filter(company=self.company).count(), 1)

    def test_complete_with_bad_cost_returns_400(self):
        ctx = make_context(self.company, self.user)
        record = DyeingService.create(
            ctx, {"production_order": self.order, "dyeing_type": "reactive", "dyeing_method": "exhaust", "machine_type": "jet"}
        )
        DyeingService.start(ctx, record.pk)
        response = self.client.post(
            f"/api/v1/production/dyeing/{record.pk}/complete/",
            {"output_quantity": "9", "cost_breakdown": {"labor_cost": "abc"}},
            format="json",
            **self.headers,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["message"], "Invalid cost value for labor_cost")
