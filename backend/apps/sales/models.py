from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from shared.models import CompanyAwareModel


class Customer(CompanyAwareModel):
    class CustomerType(models.TextChoices):
        LOCAL = 'local', 'Local'
        EXPORT = 'export', 'Export'
        INTERCOMPANY = 'intercompany', 'Intercompany'

    class Category(models.TextChoices):
        RETAIL = 'retail', 'Retail'
        WHOLESALE = 'wholesale', 'Wholesale'
        DISTRIBUTOR = 'distributor', 'Distributor'
        MANUFACTURER = 'manufacturer', 'Manufacturer'
        EXPORTER = 'exporter', 'Exporter'
        OTHER = 'other', 'Other'

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    mobile = models.CharField(max_length=20, blank=True)
    gstin = models.CharField(max_length=15, blank=True)
    billing_address = models.TextField(blank=True)
    shipping_address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    credit_limit = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal('0'), validators=[MinValueValidator(0)])
    credit_days = models.PositiveIntegerField(default=0)
    payment_terms = models.PositiveIntegerField(default=30, help_text="Payment terms in days")
    customer_type = models.CharField(max_length=20, choices=CustomerType.choices, default=CustomerType.LOCAL)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.RETAIL)
    rating = models.PositiveSmallIntegerField(null=True, blank=True)
    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']
        unique_together = ('company', 'code')
        indexes = [
            models.Index(fields=['company', 'is_active']),
            models.Index(fields=['company', 'email']),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        self.code = (self.code or '').strip().upper()
        self.email = (self.email or '').strip().lower()
        super().save(*args, **kwargs)


class CustomerOrder(CompanyAwareModel):
    """
    Sales order placed by a customer for processing or supply of fabric.

    ``status`` only moves along ``CustomerOrderService.TRANSITIONS``; own-stock line items
    reserve inventory on confirmation and leave it on dispatch.
    """

    class Status(models.TextChoices):
        DRAFT = 'draft', 'Draft'
        CONFIRMED = 'confirmed', 'Confirmed'
        IN_PRODUCTION = 'in_production', 'In Production'
        QUALITY_CHECK = 'quality_check', 'Quality Check'
        READY_FOR_DISPATCH = 'ready_for_dispatch', 'Ready for Dispatch'
        DISPATCHED = 'dispatched', 'Dispatched'
        DELIVERED = 'delivered', 'Delivered'
        CANCELLED = 'cancelled', 'Cancelled'

    class Priority(models.TextChoices):
        LOW = 'low', 'Low'
        MEDIUM = 'medium', 'Medium'
        HIGH = 'high', 'High'
        URGENT = 'urgent', 'Urgent'

    class PaymentStatus(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PARTIAL = 'partial', 'Partial'
        PAID = 'paid', 'Paid'

    order_number = models.CharField(max_length=32, blank=True)
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='orders')
    order_date = models.DateField()
    expected_delivery_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    payment_status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    delivery_address = models.TextField(blank=True)
    special_instructions = models.TextField(blank=True)

    subtotal = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal('0'))
    tax_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal('0'))
    total_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal('0'))

    confirmed_at = models.DateTimeField(null=True, blank=True)
    production_started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    dispatched_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True)
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')

    class Meta:
        ordering = ['-order_date', '-id']
        unique_together = ('company', 'order_number')
        indexes = [
            models.Index(fields=['company', 'status']),
            models.Index(fields=['company', 'customer']),
        ]

    def __str__(self):
        return self.order_number or f"Order #{self.pk}"

    def recalculate_totals(self, save: bool = True):
        subtotal = Decimal('0')
        tax = Decimal('0')
        for line in self.items.all():
            subtotal += line.line_total
            tax += line.tax_amount
        self.subtotal = subtotal
        self.tax_amount = tax
        self.total_amount = subtotal + tax
        if save:
            self.save(update_fields=['subtotal', 'tax_amount', 'total_amount', 'updated_at'])


class CustomerOrderItem(models.Model):
    class MaterialSource(models.TextChoices):
        OWN_STOCK = 'own_stock', 'Own Stock'
        CUSTOMER_MATERIAL = 'customer_material', 'Customer Material'

    order = models.ForeignKey(CustomerOrder, on_delete=models.CASCADE, related_name='items')
    item_name = models.CharField(max_length=255)
    product_type = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    material_source = models.CharField(max_length=20, choices=MaterialSource.choices, default=MaterialSource.OWN_STOCK)
    inventory_item = models.ForeignKey(
        'inventory.InventoryItem',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='customer_order_lines',
    )
    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    unit = models.CharField(max_length=20, default='meters')
    rate = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal('0'))
    work_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal('0'))
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0'))
    line_total = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal('0'))
    tax_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal('0'))
    total_amount = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal('0'))

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.item_name} x {self.quantity}"

    @property
    def affects_stock(self) -> bool:
        return self.material_source == self.MaterialSource.OWN_STOCK and self.inventory_item_id is not None

    def save(self, *args, **kwargs):
        self.line_total = (self.quantity * self.rate + self.work_amount).quantize(Decimal('0.01'))
        self.tax_amount = (self.line_total * self.tax_rate / Decimal('100')).quantize(Decimal('0.01'))
        self.total_amount = self.line_total + self.tax_amount
        super().save(*args, **kwargs)
