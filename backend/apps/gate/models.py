from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from shared.models import CompanyAwareModel


class VisitPurpose(models.TextChoices):
    DELIVERY = 'delivery', 'Delivery'
    PICKUP = 'pickup', 'Pickup'
    MAINTENANCE = 'maintenance', 'Maintenance'
    OTHER = 'other', 'Other'


def normalize_vehicle_number(value: str) -> str:
    return ' '.join((value or '').split()).upper()


class Vehicle(CompanyAwareModel):
    """A vehicle logged at the factory gate; ``status`` tracks whether it is inside."""

    class Status(models.TextChoices):
        IN = 'in', 'In'
        OUT = 'out', 'Out'
        MAINTENANCE = 'maintenance', 'Maintenance'

    vehicle_number = models.CharField(max_length=30)
    vehicle_type = models.CharField(max_length=50, blank=True)
    driver_name = models.CharField(max_length=120)
    driver_phone = models.CharField(max_length=20)
    purpose = models.CharField(max_length=20, choices=VisitPurpose.choices)
    reason = models.CharField(max_length=255)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.IN)
    time_in = models.DateTimeField(default=timezone.now)
    time_out = models.DateTimeField(null=True, blank=True)
    last_maintenance_date = models.DateField(null=True, blank=True)
    next_maintenance_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ['-time_in', '-id']
        unique_together = ('company', 'vehicle_number')
        indexes = [
            models.Index(fields=['company', 'status']),
        ]

    def __str__(self):
        return self.vehicle_number

    def save(self, *args, **kwargs):
        self.vehicle_number = normalize_vehicle_number(self.vehicle_number)
        super().save(*args, **kwargs)


class VehicleMaintenance(models.Model):
    vehicle = models.ForeignKey(Vehicle, on_delete=models.CASCADE, related_name='maintenance_records')
    maintenance_type = models.CharField(max_length=100)
    maintenance_date = models.DateField(default=timezone.localdate)
    description = models.TextField(blank=True)
    cost = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0'))
    performed_by = models.CharField(max_length=120, blank=True)
    next_due_date = models.DateField(null=True, blank=True)
    recorded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    recorded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-maintenance_date', '-id']

    def __str__(self):
        return f"{self.vehicle} {self.maintenance_type} {self.maintenance_date}"


class GatePass(CompanyAwareModel):
    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        COMPLETED = 'completed', 'Completed'
        EXPIRED = 'expired', 'Expired'
        CANCELLED = 'cancelled', 'Cancelled'

    gate_pass_number = models.CharField(max_length=32, blank=True)
    vehicle = models.ForeignKey(Vehicle, on_delete=models.SET_NULL, null=True, blank=True, related_name='gate_passes')
    vehicle_number = models.CharField(max_length=30)
    driver_name = models.CharField(max_length=120)
    driver_phone = models.CharField(max_length=20)
    driver_id_number = models.CharField(max_length=50, blank=True)
    driver_license_number = models.CharField(max_length=50, blank=True)
    purpose = models.CharField(max_length=20, choices=VisitPurpose.choices)
    reason = models.CharField(max_length=255)
    person_to_meet = models.CharField(max_length=120, blank=True)
    department = models.CharField(max_length=120, blank=True)
    security_notes = models.TextField(blank=True)
    items = models.JSONField(default=list, blank=True)
    images = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    time_in = models.DateTimeField(default=timezone.now)
    time_out = models.DateTimeField(null=True, blank=True)
    printed_at = models.DateTimeField(null=True, blank=True)
    printed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    approved_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True)

    class Meta:
        ordering = ['-time_in', '-id']
        unique_together = ('company', 'gate_pass_number')
        indexes = [
            models.Index(fields=['company', 'vehicle_number', 'status']),
            models.Index(fields=['company', 'time_in']),
        ]

    def __str__(self):
        return self.gate_pass_number or f"GP-{self.pk}"

    @property
    def duration_minutes(self):
        if not self.time_out:
            return None
        return round((self.time_out - self.time_in).total_seconds() / 60)

    def save(self, *args, **kwargs):
        self.vehicle_number = normalize_vehicle_number(self.vehicle_number)
        super().save(*args, **kwargs)
