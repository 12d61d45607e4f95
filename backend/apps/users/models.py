from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Extended user model with multi-company support
    """
    companies = models.ManyToManyField(
        'companies.Company',
        through='CompanyMembership',
        related_name='users',
        blank=True
    )
    default_company = models.ForeignKey(
        'companies.Company',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='default_users'
    )
    phone = models.CharField(max_length=20, blank=True)
    is_system_admin = models.BooleanField(default=False)

    class Meta:
        db_table = 'users'

    @property
    def is_platform_admin(self) -> bool:
        return bool(self.is_superuser or self.is_system_admin)

    def accessible_company_ids(self):
        ids = set(
            self.memberships.filter(is_active=True).values_list('company_id', flat=True)
        )
        if self.default_company_id:
            ids.add(self.default_company_id)
        return ids

    def has_company_access(self, company):
        """Check if user has access to company"""
        if self.is_platform_admin:
            return True
        return company.pk in self.accessible_company_ids()

    def is_admin_for(self, company) -> bool:
        if self.is_platform_admin:
            return True
        return self.memberships.filter(
            company=company,
            is_active=True,
            role=CompanyMembership.Role.ADMIN,
        ).exists()


class CompanyMembership(models.Model):
    """
    Many-to-many relationship between users and companies
    with role assignment
    """

    class Role(models.TextChoices):
        ADMIN = 'admin', 'Admin'
        MANAGER = 'manager', 'Manager'
        OPERATOR = 'operator', 'Operator'
        VIEWER = 'viewer', 'Viewer'

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='memberships')
    company = models.ForeignKey('companies.Company', on_delete=models.CASCADE, related_name='memberships')
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.OPERATOR)
    is_active = models.BooleanField(default=True)
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [['user', 'company']]
        db_table = 'user_company_memberships'

    def __str__(self):
        return f"{self.user} @ {self.company} ({self.role})"
