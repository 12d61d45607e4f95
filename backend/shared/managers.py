from django.db import models


class CompanyQuerySet(models.QuerySet):
    def for_company(self, company):
        """Rows owned by a single tenant company."""
        return self.filter(company=company)

    def active(self):
        """Rows not soft-deleted through ``is_active``."""
        return self.filter(is_active=True)


class CompanyManager(models.Manager.from_queryset(CompanyQuerySet)):
    pass
