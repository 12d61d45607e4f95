from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    ACTION_CHOICES = [
        ('CREATE', 'Create'),
        ('UPDATE', 'Update'),
        ('DELETE', 'Delete'),
        ('STATUS_CHANGE', 'Status Change'),
        ('STOCK_CHANGE', 'Stock Change'),
        ('PAYMENT', 'Payment'),
        ('EXPORT', 'Export'),
        ('OTHER', 'Other'),
    ]

    timestamp = models.DateTimeField(auto_now_add=True)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    company = models.ForeignKey('companies.Company', on_delete=models.CASCADE, null=True, blank=True, related_name='audit_logs')
    entity_type = models.CharField(max_length=255, help_text="Type of entity affected (e.g., 'CustomerOrder', 'GatePass')")
    entity_id = models.CharField(max_length=255, help_text="ID of the entity affected")
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    description = models.TextField(blank=True, help_text="A brief description of the action")
    before_value = models.JSONField(null=True, blank=True, help_text="JSON representation of the object before the change")
    after_value = models.JSONField(null=True, blank=True, help_text="JSON representation of the object after the change")
    ip_address = models.GenericIPAddressField(null=True, blank=True)

    class Meta:
        ordering = ['-timestamp']
        verbose_name = "Audit Log"
        verbose_name_plural = "Audit Logs"
        indexes = [
            models.Index(fields=['company', 'entity_type', 'entity_id']),
        ]

    def __str__(self):
        return f"{self.timestamp}: {self.user} {self.action} {self.entity_type}:{self.entity_id}"
