from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from shared.models import CompanyAwareModel


class Supplier(CompanyAwareModel):
    class SupplierType(models.TextChoices):
        LOCAL = "local", "Local"
        FOREIGN = "foreign", "Foreign"
        MANUFACTURER = "manufacturer", "Manufacturer"
        DISTRIBUTOR = "distributor", "Distributor"
        SERVICE = "service", "Service Provider"

    class Category(models.TextChoices):
        FABRIC = "fabric", "Fabric"
        YARN = "yarn", "Yarn"
        DYES = "dyes", "Dyes"
        CHEMICALS = "chemicals", "Chemicals"
        PACKING = "packing", "Packing Material"
        MACHINERY = "machinery", "Machinery"
        SERVICES = "services", "Services"
        OTHER = "other", "Other"

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    gstin = models.CharField(max_length=15, blank=True)
    pan = models.CharField(max_length=10, blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    supplier_type = models.CharField(max_length=20, choices=SupplierType.choices, default=SupplierType.LOCAL)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.OTHER)
    payment_terms = models.PositiveIntegerField(default=30, help_text="Payment terms in days")
    credit_limit = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(0)])
    rating = models.DecimalField(
        max_digits=3,
        decimal_places=1,
        default=Decimal("0"),
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]
        unique_together = ("company", "code")
        indexes = [
            models.Index(fields=["company", "is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)


class PurchaseOrder(CompanyAwareModel):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        PENDING = "pending", "Pending Approval"
        APPROVED = "approved", "Approved"
        ORDERED = "ordered", "Ordered"
        PARTIAL = "partial", "Partially Received"
        RECEIVED = "received", "Received"
        CANCELLED = "cancelled", "Cancelled"

    class Priority(models.TextChoices):
        LOW = "low", "Low"
        MEDIUM = "medium", "Medium"
        HIGH = "high", "High"
        URGENT = "urgent", "Urgent"

    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="purchase_orders")
    order_number = models.CharField(max_length=32, blank=True)
    order_date = models.DateField(default=timezone.localdate)
    expected_delivery_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    delivery_address = models.TextField(blank=True)
    terms = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    subtotal = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    tax_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    total_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))

    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    ordered_at = models.DateTimeField(null=True, blank=True)
    ordered_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    received_at = models.DateTimeField(null=True, blank=True)
    received_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    cancellation_reason = models.TextField(blank=True)

    class Meta:
        unique_together = ("company", "order_number")
        ordering = ["-order_date", "-created_at"]
        indexes = [
            models.Index(fields=["company", "status"]),
            models.Index(fields=["company", "supplier"]),
        ]

    def __str__(self) -> str:
        number = self.order_number or f"PO-{self.pk}"
        return f"{number} ({self.get_status_display()})"

    @property
    def is_overdue(self) -> bool:
        return bool(
            self.expected_delivery_date
            and self.expected_delivery_date < timezone.localdate()
            and self.status in (self.Status.ORDERED, self.Status.PARTIAL)
        )

    def refresh_totals(self, commit: bool = True) -> tuple[Decimal, Decimal, Decimal]:
        totals = self.items.aggregate(subtotal=models.Sum("line_total"), tax=models.Sum("tax_amount"))
        subtotal = totals.get("subtotal") or Decimal("0")
        tax = totals.get("tax") or Decimal("0")
        self.subtotal = subtotal
        self.tax_amount = tax
        self.total_amount = subtotal + tax
        if commit:
            self.save(update_fields=["subtotal", "tax_amount", "total_amount", "updated_at"])
        return subtotal, tax, self.total_amount


class PurchaseOrderItem(models.Model):
    order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name="items")
    inventory_item = models.ForeignKey(
        "inventory.InventoryItem",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchase_order_lines",
    )
    item_name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    received_quantity = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0"))
    unit = models.CharField(max_length=20, default="meters")
    rate = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0"))
    line_total = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    tax_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.item_name} x {self.quantity}"

    @property
    def pending_quantity(self) -> Decimal:
        return max(self.quantity - (self.received_quantity or Decimal("0")), Decimal("0"))

    def save(self, *args, **kwargs):
        self.line_total = (self.quantity * self.rate).quantize(Decimal("0.01"))
        self.tax_amount = (self.line_total * self.tax_rate / Decimal("100")).quantize(Decimal("0.01"))
        super().save(*args, **kwargs)
