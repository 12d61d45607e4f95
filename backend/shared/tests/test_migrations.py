from __future__ import annotations

from io import StringIO

from django.core.management import call_command
from django.db import connection
from django.db.migrations.loader import MigrationLoader
from django.test import TestCase

PROJECT_APPS = ("companies", "users", "audit", "inventory", "sales", "procurement", "finance", "production", "gate")


class MigrationStateTests(TestCase):
    def test_every_app_ships_an_initial_migration(self):
        loader = MigrationLoader(connection)
        for app_label in PROJECT_APPS:
            self.assertIn((app_label, "0001_initial"), loader.disk_migrations, app_label)

    def test_models_match_migrations(self):
        out = StringIO()
        try:
            call_command("makemigrations", *PROJECT_APPS, check=True, dry_run=True, stdout=out)
        except SystemExit:
            self.fail(f"Models have changes without migrations:\n{out.getvalue()}")
