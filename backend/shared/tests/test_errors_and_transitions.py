from __future__ import annotations

from django.http import Http404
from django.test import SimpleTestCase
from rest_framework import serializers

from shared.exceptions import NotFound, PermissionDenied, ValidationFailed, envelope_exception_handler
from shared.transitions import TransitionTable


class EnvelopeExceptionHandlerTests(SimpleTestCase):
    def test_application_errors_keep_their_status(self):
        response = envelope_exception_handler(NotFound("Gate pass not found"), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.data, {"success": False, "message": "Gate pass not found", "error": "NotFoundError"}
        )
        response = envelope_exception_handler(PermissionDenied(), {})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["message"], "You do not have permission to perform this action.")

    def test_serializer_errors_name_the_first_field(self):
        exc = serializers.ValidationError({"quantity": ["Quantity must be greater than zero"], "rate": ["Required"]})
        response = envelope_exception_handler(exc, {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["message"], "quantity: Quantity must be greater than zero")
        self.assertEqual(response.data["error"], "ValidationError")
        self.assertIn("rate", response.data["details"])

    def test_non_field_errors_are_unprefixed(self):
        exc = serializers.ValidationError({"non_field_errors": ["Dates overlap"]})
        response = envelope_exception_handler(exc, {})
        self.assertEqual(response.data["message"], "Dates overlap")

    def test_django_404_is_wrapped(self):
        response = envelope_exception_handler(Http404("missing"), {})
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.data["success"])

    def test_unexpected_errors_become_internal_error(self):
        with self.assertLogs("shared.exceptions", level="ERROR"):
            response = envelope_exception_handler(RuntimeError("boom"), {})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data["message"], "Internal server error.")
        self.assertEqual(response.data["error"], "InternalError")


class TransitionTableTests(SimpleTestCase):
    def setUp(self):
        self.table = TransitionTable(
            "gate pass",
            {"active": ["completed", "cancelled"], "completed": [], "cancelled": []},
        )

    def test_allowed_and_terminal(self):
        self.assertTrue(self.table.can_transition("active", "completed"))
        self.assertFalse(self.table.can_transition("completed", "active"))
        self.assertTrue(self.table.is_terminal("cancelled"))
        self.assertEqual(self.table.statuses, ("active", "completed", "cancelled"))
        self.assertEqual(list(self.table.edges()), [("active", "cancelled"), ("active", "completed")])

    def test_ensure_messages(self):
        with self.assertRaisesMessage(ValidationFailed, "Unknown gate pass status: parked"):
            self.table.ensure("active", "parked")
        with self.assertRaisesMessage(ValidationFailed, "Invalid status transition from completed to active"):
            self.table.ensure("completed", "active")
        self.table.ensure("active", "cancelled")
