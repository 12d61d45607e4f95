from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from shared.models import CompanyAwareModel

TWO_PLACES = Decimal("0.01")


class InvoiceStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    SENT = "sent", "Sent"
    PARTIALLY_PAID = "partially_paid", "Partially Paid"
    PAID = "paid", "Paid"
    OVERDUE = "overdue", "Overdue"
    CANCELLED = "cancelled", "Cancelled"


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Cash"
    CHEQUE = "cheque", "Cheque"
    BANK_TRANSFER = "bank_transfer", "Bank Transfer"
    UPI = "upi", "UPI"
    CARD = "card", "Card"
    OTHER = "other", "Other"


class Invoice(CompanyAwareModel):
    """Sales invoice raised against a customer, optionally derived from a customer order."""

    invoice_number = models.CharField(max_length=32, blank=True)
    customer = models.ForeignKey("sales.Customer", on_delete=models.PROTECT, related_name="invoices")
    customer_order = models.ForeignKey(
        "sales.CustomerOrder",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices",
    )
    invoice_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField()
    status = models.CharField(max_length=20, choices=InvoiceStatus.choices, default=InvoiceStatus.DRAFT)
    billing_address = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    terms = models.TextField(blank=True)

    subtotal = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    discount_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    taxable_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    tax_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    total_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    paid_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    outstanding_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))

    sent_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    overdue_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-invoice_date", "-id"]
        unique_together = ("company", "invoice_number")
        indexes = [
            models.Index(fields=["company", "status"]),
            models.Index(fields=["company", "due_date"]),
        ]

    def __str__(self) -> str:
        return self.invoice_number or f"Invoice #{self.pk}"

    def refresh_totals(self, commit: bool = True) -> None:
        totals = self.items.aggregate(
            subtotal=models.Sum("gross_amount"),
            discount=models.Sum("discount_amount"),
            taxable=models.Sum("taxable_amount"),
            tax=models.Sum("tax_amount"),
        )
        self.subtotal = totals["subtotal"] or Decimal("0")
        self.discount_amount = totals["discount"] or Decimal("0")
        self.taxable_amount = totals["taxable"] or Decimal("0")
        self.tax_amount = totals["tax"] or Decimal("0")
        self.total_amount = self.taxable_amount + self.tax_amount
        self.outstanding_amount = self.total_amount - self.paid_amount
        if commit:
            self.save(
                update_fields=[
                    "subtotal",
                    "discount_amount",
                    "taxable_amount",
                    "tax_amount",
                    "total_amount",
                    "outstanding_amount",
                    "updated_at",
                ]
            )


class InvoiceItem(models.Model):
    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", "Percentage"
        FIXED = "fixed", "Fixed Amount"

    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="items")
    description = models.CharField(max_length=255)
    hsn_code = models.CharField(max_length=16, blank=True)
    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    unit = models.CharField(max_length=20, default="meters")
    rate = models.DecimalField(max_digits=20, decimal_places=2)
    discount_type = models.CharField(max_length=10, choices=DiscountType.choices, default=DiscountType.PERCENTAGE)
    discount_value = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0"))
    gross_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    discount_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    taxable_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    tax_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    line_total = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.description} x {self.quantity}"

    def save(self, *args, **kwargs):
        self.gross_amount = (self.quantity * self.rate).quantize(TWO_PLACES)
        if self.discount_type == self.DiscountType.PERCENTAGE:
            discount = self.gross_amount * self.discount_value / Decimal("100")
        else:
            discount = self.discount_value
        self.discount_amount = min(discount, self.gross_amount).quantize(TWO_PLACES)
        self.taxable_amount = self.gross_amount - self.discount_amount
        self.tax_amount = (self.taxable_amount * self.tax_rate / Decimal("100")).quantize(TWO_PLACES)
        self.line_total = self.taxable_amount + self.tax_amount
        super().save(*args, **kwargs)


class InvoicePayment(models.Model):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="payments")
    payment_date = models.DateField(default=timezone.localdate)
    amount = models.DecimalField(max_digits=20, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.BANK_TRANSFER)
    reference = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    recorded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    recorded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-payment_date", "-id"]

    def __str__(self) -> str:
        return f"{self.invoice} {self.amount}"
