from decimal import Decimal

from django.db import models
from django.db.models.functions import Lower

from shared.models import CompanyAwareModel


class Category(CompanyAwareModel):
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True)
    icon = models.CharField(max_length=16, default='📦', blank=True)
    color = models.CharField(max_length=7, default='#6b7280', blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'Categories'
        constraints = [
            models.UniqueConstraint(Lower('name'), 'company', name='uniq_category_name_per_company'),
        ]

    def __str__(self):
        return self.name


class InventoryItem(CompanyAwareModel):
    """
    Stocked material: grey fabric, dyes, chemicals, packing material, finished goods.

    ``available_stock`` is always ``current_stock - reserved_stock`` and is only changed
    through ``InventoryService``.
    """

    class ItemType(models.TextChoices):
        GREY_FABRIC = 'grey_fabric', 'Grey Fabric'
        RAW_MATERIAL = 'raw_material', 'Raw Material'
        DYE = 'dye', 'Dye'
        CHEMICAL = 'chemical', 'Chemical'
        FINISHED_FABRIC = 'finished_fabric', 'Finished Fabric'
        FINISHED_GOODS = 'finished_goods', 'Finished Goods'
        PACKING_MATERIAL = 'packing_material', 'Packing Material'
        CONSUMABLE = 'consumable', 'Consumable'

    code = models.CharField(max_length=50)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.ForeignKey(Category, on_delete=models.PROTECT, null=True, blank=True, related_name='items')
    item_type = models.CharField(max_length=20, choices=ItemType.choices, default=ItemType.RAW_MATERIAL)
    unit = models.CharField(max_length=20, default='meters')
    unit_price = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal('0'))
    reorder_level = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal('0'))
    current_stock = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal('0'))
    reserved_stock = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal('0'))
    available_stock = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal('0'))
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']
        unique_together = ('company', 'code')
        indexes = [
            models.Index(fields=['company', 'category']),
            models.Index(fields=['company', 'is_active']),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def stock_value(self) -> Decimal:
        return (self.current_stock or Decimal('0')) * (self.unit_price or Decimal('0'))

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock < self.reorder_level

    def save(self, *args, **kwargs):
        self.code = (self.code or '').strip().upper()
        super().save(*args, **kwargs)


class StockMovement(CompanyAwareModel):
    """Append-only ledger of stock changes, each tied to the document that caused it."""

    class MovementType(models.TextChoices):
        IN = 'in', 'Inward'
        OUT = 'out', 'Outward'
        TRANSFER = 'transfer', 'Transfer'
        ADJUSTMENT = 'adjustment', 'Adjustment'

    class ReferenceType(models.TextChoices):
        PURCHASE_ORDER = 'purchase_order', 'Purchase Order'
        CUSTOMER_ORDER = 'customer_order', 'Customer Order'
        PRODUCTION_ORDER = 'production_order', 'Production Order'
        TRANSFER_NOTE = 'transfer_note', 'Transfer Note'
        ADJUSTMENT_NOTE = 'adjustment_note', 'Adjustment Note'
        RETURN_NOTE = 'return_note', 'Return Note'

    movement_number = models.CharField(max_length=32, blank=True)
    item = models.ForeignKey(InventoryItem, on_delete=models.PROTECT, related_name='movements')
    movement_type = models.CharField(max_length=20, choices=MovementType.choices)
    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    unit = models.CharField(max_length=20, blank=True)
    previous_stock = models.DecimalField(max_digits=15, decimal_places=3)
    new_stock = models.DecimalField(max_digits=15, decimal_places=3)
    from_location = models.CharField(max_length=120, blank=True)
    to_location = models.CharField(max_length=120, blank=True)
    reference_type = models.CharField(max_length=20, choices=ReferenceType.choices, default=ReferenceType.ADJUSTMENT_NOTE)
    reference_id = models.CharField(max_length=64, blank=True)
    reference_number = models.CharField(max_length=64, blank=True)
    notes = models.TextField(blank=True)
    movement_date = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-movement_date', '-id']
        unique_together = ('company', 'movement_number')
        indexes = [
            models.Index(fields=['company', 'item', 'movement_date']),
            models.Index(fields=['company', 'reference_type', 'reference_id']),
        ]

    def __str__(self):
        return f"{self.movement_number} {self.movement_type} {self.quantity}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Stock movements are append-only and cannot be modified.")
        if not self.movement_number:
            from core.doc_numbers import get_next_doc_no
            self.movement_number = get_next_doc_no(company=self.company, doc_type="SM", width=5)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Stock movements are append-only and cannot be deleted.")
