from __future__ import annotations

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase

from apps.gate.models import GatePass, Vehicle
from apps.gate.services.gate_service import GatePassService, VehicleService
from shared.exceptions import NotFound, ValidationFailed
from shared.testing import make_company, make_context, make_user


def visit(**extra):
    data = {
        "vehicle_number": "mh 12 ab 1234",
        "driver_name": "Ramesh",
        "driver_phone": "9876543210",
        "purpose": "delivery",
        "reason": "Grey fabric delivery",
    }
    data.update(extra)
    return data


class GatePassServiceTests(TestCase):
    def setUp(self):
        self.company = make_company("GAT")
        self.ctx = make_context(self.company, make_user(self.company, "guard"))

    def test_create_normalizes_number_and_assigns_pass_number(self):
        gate_pass = GatePassService.create_pass(self.ctx, visit())
        self.assertEqual(gate_pass.vehicle_number, "MH 12 AB 1234")
        self.assertTrue(gate_pass.gate_pass_number.startswith("GP"))
        self.assertEqual(gate_pass.status, GatePass.Status.ACTIVE)
        self.assertIsNotNone(gate_pass.time_in)

    def test_required_fields(self):
        for field, message in (("driver_name", "Driver name is required"), ("reason", "Reason is required")):
            with self.subTest(field=field):
                with self.assertRaisesMessage(ValidationFailed, message):
                    GatePassService.create_pass(self.ctx, visit(**{field: ""}))

    def test_one_active_pass_per_vehicle(self):
        first = GatePassService.create_pass(self.ctx, visit())
        with self.assertRaisesMessage(ValidationFailed, "Vehicle already has an active gate pass"):
            GatePassService.create_pass(self.ctx, visit(vehicle_number=" MH 12  AB 1234 "))

        GatePassService.complete_pass(self.ctx, first.pk)
        second = GatePassService.create_pass(self.ctx, visit())
        self.assertNotEqual(first.gate_pass_number, second.gate_pass_number)

        other_ctx = make_context(make_company("OTH"))
        GatePassService.create_pass(other_ctx, visit())

    def test_complete_and_cancel_only_active(self):
        gate_pass = GatePassService.create_pass(self.ctx, visit())
        gate_pass = GatePassService.complete_pass(self.ctx, gate_pass.pk)
        self.assertEqual(gate_pass.status, GatePass.Status.COMPLETED)
        self.assertIsNotNone(gate_pass.time_out)
        self.assertIsNotNone(gate_pass.approved_at)
        with self.assertRaisesMessage(ValidationFailed, "Gate pass is not active"):
            GatePassService.cancel_pass(self.ctx, gate_pass.pk, "Duplicate")

    def test_print_records_printer(self):
        gate_pass = GatePassService.create_pass(self.ctx, visit())
        gate_pass = GatePassService.print_pass(self.ctx, gate_pass.pk)
        self.assertIsNotNone(gate_pass.printed_at)
        self.assertEqual(gate_pass.printed_by, self.ctx.user)

    def test_history_active_and_stats(self):
        first = GatePassService.create_pass(self.ctx, visit())
        GatePass.objects.filter(pk=first.pk).update(time_in=timezone.now() - timedelta(minutes=90))
        GatePassService.complete_pass(self.ctx, first.pk)
        GatePassService.create_pass(self.ctx, visit())
        GatePassService.create_pass(self.ctx, visit(vehicle_number="GJ 01 XY 9", purpose="pickup"))

        self.assertEqual(GatePassService.vehicle_history(self.ctx, "mh 12 ab 1234").count(), 2)
        self.assertEqual(GatePassService.active_passes(self.ctx).count(), 2)

        stats = GatePassService.stats(self.ctx)
        self.assertEqual(stats["total_gate_passes"], 3)
        self.assertEqual(stats["active_gate_passes"], 2)
        self.assertEqual(stats["completed_gate_passes"], 1)
        self.assertEqual(stats["purpose_breakdown"]["delivery"], 2)
        self.assertEqual(stats["purpose_breakdown"]["pickup"], 1)
        self.assertEqual(stats["purpose_breakdown"]["maintenance"], 0)
        self.assertGreaterEqual(stats["average_duration_minutes"], 89)

    def test_pass_from_another_company_is_not_found(self):
        gate_pass = GatePassService.create_pass(self.ctx, visit())
        with self.assertRaises(NotFound):
            GatePassService.complete_pass(make_context(make_company("OTH")), gate_pass.pk)


class VehicleServiceTests(TestCase):
    def setUp(self):
        self.company = make_company("VEH")
        self.ctx = make_context(self.company, make_user(self.company, "guard"))

    def test_check_in_and_checkout(self):
        vehicle = VehicleService.check_in(self.ctx, visit(vehicle_number="ka01ab12"))
        self.assertEqual(vehicle.vehicle_number, "KA01AB12")
        self.assertEqual(vehicle.status, Vehicle.Status.IN)

        with self.assertRaisesMessage(ValidationFailed, "Vehicle number already exists"):
            VehicleService.check_in(self.ctx, visit(vehicle_number="KA01AB12"))

        vehicle = VehicleService.checkout(self.ctx, vehicle.pk)
        self.assertEqual(vehicle.status, Vehicle.Status.OUT)
        self.assertIsNotNone(vehicle.time_out)
        with self.assertRaisesMessage(ValidationFailed, "Vehicle is already checked out"):
            VehicleService.checkout(self.ctx, vehicle.pk)

    def test_maintenance_updates_vehicle_dates(self):
        vehicle = VehicleService.check_in(self.ctx, visit())
        today = timezone.localdate()
        VehicleService.add_maintenance(
            self.ctx,
            vehicle.pk,
            {"maintenance_type": "Oil change", "maintenance_date": today, "next_due_date": today},
        )
        vehicle.refresh_from_db()
        self.assertEqual(vehicle.last_maintenance_date, today)
        self.assertEqual(vehicle.next_maintenance_date, today)
        self.assertEqual(vehicle.maintenance_records.count(), 1)

        stats = VehicleService.stats(self.ctx)
        self.assertEqual(stats["total_vehicles"], 1)
        self.assertEqual(stats["vehicles_in"], 1)
        self.assertEqual(stats["maintenance_due"], 1)


class GateApiTests(APITestCase):
    def setUp(self):
        self.company = make_company("GAP")
        self.user = make_user(self.company, "security")
        self.client.force_authenticate(self.user)
        self.headers = {"HTTP_X_COMPANY_ID": str(self.company.pk)}

    def test_gate_pass_flow(self):
        response = self.client.post("/api/v1/gate-passes/", visit(vehicle_number="mh12ab1234"), format="json", **self.headers)
        self.assertEqual(response.status_code, 201, response.data)
        pass_id = response.data["data"]["id"]

        response = self.client.post("/api/v1/gate-passes/", visit(vehicle_number="MH12AB1234"), format="json", **self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["message"], "Vehicle already has an active gate pass")

        response = self.client.post(f"/api/v1/gate-passes/{pass_id}/print/", format="json", **self.headers)
        self.assertEqual(response.status_code, 200, response.data)
        self.assertIsNotNone(response.data["data"]["printed_at"])

        response = self.client.post(f"/api/v1/gate-passes/{pass_id}/complete/", format="json", **self.headers)
        self.assertEqual(response.data["data"]["status"], "completed")

        response = self.client.get("/api/v1/gate-passes/vehicle/mh12ab1234/history/", **self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["pagination"]["total"], 1)

    def test_vehicle_duplicate_number(self):
        response = self.client.post("/api/v1/vehicles/", visit(), format="json", **self.headers)
        self.assertEqual(response.status_code, 201, response.data)
        response = self.client.post("/api/v1/vehicles/", visit(vehicle_number="MH 12 AB 1234"), format="json", **self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertIn("Vehicle number already exists", response.data["message"])
