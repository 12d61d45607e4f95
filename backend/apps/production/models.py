from __future__ import annotations

from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import models

from shared.exceptions import ValidationFailed
from shared.models import CompanyAwareModel


def cost_amount(value, field: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationFailed(f"Invalid cost value for {field}")
    if not amount.is_finite() or amount < 0:
        raise ValidationFailed(f"Invalid cost value for {field}")
    return amount


class ProductionOrderStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    APPROVED = "approved", "Approved"
    IN_PROGRESS = "in_progress", "In Progress"
    ON_HOLD = "on_hold", "On Hold"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class StageStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"
    ON_HOLD = "on_hold", "On Hold"


class QualityGrade(models.TextChoices):
    A_PLUS = "A+", "A+"
    A = "A", "A"
    B_PLUS = "B+", "B+"
    B = "B", "B"
    C = "C", "C"
    REJECT = "Reject", "Reject"


class ProcessType(models.TextChoices):
    GREY_FABRIC_INWARD = "grey_fabric_inward", "Grey Fabric Inward"
    PRE_PROCESSING = "pre_processing", "Pre-Processing"
    DYEING = "dyeing", "Dyeing"
    PRINTING = "printing", "Printing"
    WASHING = "washing", "Washing"
    FIXING = "fixing", "Color Fixing"
    FINISHING = "finishing", "Finishing"
    QUALITY_CONTROL = "quality_control", "Quality Control"
    CUTTING_PACKING = "cutting_packing", "Cutting & Packing"
    DISPATCH_INVOICE = "dispatch_invoice", "Dispatch & Invoice"


# (stage_number, stage_name, process_type, planned_duration_minutes)
STAGE_BLUEPRINT = (
    (1, "Grey Fabric Inward (GRN Entry)", ProcessType.GREY_FABRIC_INWARD, 60),
    (2, "Pre-Processing (Desizing/Bleaching)", ProcessType.PRE_PROCESSING, 240),
    (3, "Dyeing Process", ProcessType.DYEING, 480),
    (4, "Printing Process", ProcessType.PRINTING, 360),
    (5, "Washing Process", ProcessType.WASHING, 180),
    (6, "Color Fixing", ProcessType.FIXING, 120),
    (7, "Finishing Process (Stenter, Coating)", ProcessType.FINISHING, 300),
    (8, "Quality Control (Pass/Hold/Reject)", ProcessType.QUALITY_CONTROL, 60),
    (9, "Cutting & Packing (Labels & Cartons)", ProcessType.CUTTING_PACKING, 120),
    (10, "Dispatch & Invoice (Stock Deduction)", ProcessType.DISPATCH_INVOICE, 30),
)


class ProductionOrder(CompanyAwareModel):
    class Priority(models.TextChoices):
        LOW = "low", "Low"
        MEDIUM = "medium", "Medium"
        HIGH = "high", "High"
        URGENT = "urgent", "Urgent"

    order_number = models.CharField(max_length=32, blank=True)
    customer_order = models.ForeignKey(
        "sales.CustomerOrder",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="production_orders",
    )
    product_name = models.CharField(max_length=255)
    product_type = models.CharField(max_length=100, blank=True)
    fabric_type = models.CharField(max_length=100, blank=True)
    color = models.CharField(max_length=100, blank=True)
    design = models.CharField(max_length=255, blank=True)
    planned_quantity = models.DecimalField(max_digits=15, decimal_places=3)
    completed_quantity = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0"))
    rejected_quantity = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0"))
    unit = models.CharField(max_length=20, default="meters")
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    status = models.CharField(max_length=20, choices=ProductionOrderStatus.choices, default=ProductionOrderStatus.DRAFT)
    planned_start_date = models.DateTimeField(null=True, blank=True)
    planned_end_date = models.DateTimeField(null=True, blank=True)
    actual_start_date = models.DateTimeField(null=True, blank=True)
    actual_end_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        unique_together = ("company", "order_number")
        indexes = [
            models.Index(fields=["company", "status"]),
        ]

    def __str__(self) -> str:
        return self.order_number or f"PRO-{self.pk}"


class ProductionStage(models.Model):
    production_order = models.ForeignKey(ProductionOrder, on_delete=models.CASCADE, related_name="stages")
    stage_number = models.PositiveSmallIntegerField()
    stage_name = models.CharField(max_length=120)
    process_type = models.CharField(max_length=30, choices=ProcessType.choices)
    status = models.CharField(max_length=20, choices=StageStatus.choices, default=StageStatus.PENDING)
    planned_duration_minutes = models.PositiveIntegerField(default=0)
    actual_start_time = models.DateTimeField(null=True, blank=True)
    actual_end_time = models.DateTimeField(null=True, blank=True)
    actual_duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    produced_quantity = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0"))
    defect_quantity = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0"))
    quality_grade = models.CharField(max_length=8, choices=QualityGrade.choices, blank=True)
    quality_notes = models.TextField(blank=True)
    output_images = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True)
    hold_reason = models.TextField(blank=True)
    held_at = models.DateTimeField(null=True, blank=True)
    started_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    completed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")

    class Meta:
        ordering = ["production_order", "stage_number"]
        unique_together = ("production_order", "stage_number")

    def __str__(self) -> str:
        return f"{self.production_order} #{self.stage_number} {self.stage_name}"


class ProcessRecordStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"
    ON_HOLD = "on_hold", "On Hold"
    REJECTED = "rejected", "Rejected"
    REWORK = "rework", "Rework"


class ProcessStageRecord(CompanyAwareModel):
    """
    Per-batch record of one wet-processing or make-up step.

    Free-form process data (parameters, chemicals, quality checks, issues, rework and
    cost breakdown) is kept as JSON; ``total_cost`` mirrors ``cost_breakdown`` for
    aggregation.
    """

    batch_prefix = "BAT"
    default_stage_number = 0
    cost_components = ("material_cost", "labor_cost", "machine_cost", "utility_cost")

    production_order = models.ForeignKey(ProductionOrder, on_delete=models.PROTECT, related_name="%(class)s_records")
    batch_number = models.CharField(max_length=40, blank=True)
    stage_number = models.PositiveSmallIntegerField(default=0)
    machine_id = models.CharField(max_length=60, blank=True)
    status = models.CharField(max_length=20, choices=ProcessRecordStatus.choices, default=ProcessRecordStatus.PENDING)
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    input_quantity = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0"))
    output_quantity = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0"))
    waste_quantity = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0"))
    efficiency = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0"))
    process_parameters = models.JSONField(default=dict, blank=True)
    quality_checks = models.JSONField(default=list, blank=True)
    issues = models.JSONField(default=list, blank=True)
    rework_details = models.JSONField(default=dict, blank=True)
    cost_breakdown = models.JSONField(default=dict, blank=True)
    total_cost = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    process_images = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True)
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")

    class Meta:
        abstract = True
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return self.batch_number or f"{self.batch_prefix}-{self.pk}"

    def _total_cost(self) -> Decimal:
        breakdown = self.cost_breakdown or {}
        if not isinstance(breakdown, dict):
            raise ValidationFailed("Cost breakdown must be an object of amounts")
        if breakdown.get("total_cost") not in (None, ""):
            return cost_amount(breakdown["total_cost"], "total_cost")
        return sum((cost_amount(breakdown.get(key) or 0, key) for key in self.cost_components), Decimal("0"))

    def save(self, *args, **kwargs):
        if not self.stage_number:
            self.stage_number = self.default_stage_number
        if not self.batch_number:
            from core.doc_numbers import get_next_doc_no

            self.batch_number = get_next_doc_no(company=self.company, doc_type=self.batch_prefix)
        self.total_cost = self._total_cost().quantize(Decimal("0.01"))
        super().save(*args, **kwargs)


class Dyeing(ProcessStageRecord):
    batch_prefix = "DYE"
    default_stage_number = 3
    cost_components = ("chemical_cost", "labor_cost", "machine_cost", "utility_cost")

    class DyeingType(models.TextChoices):
        REACTIVE = "reactive", "Reactive"
        DISPERSE = "disperse", "Disperse"
        ACID = "acid", "Acid"
        BASIC = "basic", "Basic"
        DIRECT = "direct", "Direct"
        VAT = "vat", "Vat"
        SULFUR = "sulfur", "Sulfur"

    class Method(models.TextChoices):
        EXHAUST = "exhaust", "Exhaust"
        CONTINUOUS = "continuous", "Continuous"
        SEMI_CONTINUOUS = "semi-continuous", "Semi-continuous"

    class MachineType(models.TextChoices):
        JIGGER = "jigger", "Jigger"
        WINCH = "winch", "Winch"
        JET = "jet", "Jet"
        OVERFLOW = "overflow", "Overflow"
        CONTINUOUS_RANGE = "continuous_range", "Continuous Range"

    dyeing_type = models.CharField(max_length=20, choices=DyeingType.choices)
    dyeing_method = models.CharField(max_length=20, choices=Method.choices)
    machine_type = models.CharField(max_length=20, choices=MachineType.choices)
    liquor_ratio = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    chemicals = models.JSONField(default=list, blank=True)
    color_fastness = models.JSONField(default=dict, blank=True)
    shade = models.JSONField(default=dict, blank=True)
    water_usage = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0"))
    energy_consumption = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0"))

    class Meta(ProcessStageRecord.Meta):
        unique_together = ("company", "batch_number")
        verbose_name_plural = "Dyeing records"


class Printing(ProcessStageRecord):
    batch_prefix = "PRT"
    default_stage_number = 4
    cost_components = ("ink_cost", "labor_cost", "machine_cost", "utility_cost")

    class PrintingType(models.TextChoices):
        SCREEN = "screen", "Screen"
        DIGITAL = "digital", "Digital"
        ROTARY = "rotary", "Rotary"
        FLATBED = "flatbed", "Flatbed"
        ROLLER = "roller", "Roller"
        HEAT_TRANSFER = "heat_transfer", "Heat Transfer"
        SUBLIMATION = "sublimation", "Sublimation"

    class Method(models.TextChoices):
        DIRECT = "direct", "Direct"
        DISCHARGE = "discharge", "Discharge"
        RESIST = "resist", "Resist"
        PIGMENT = "pigment", "Pigment"
        REACTIVE = "reactive", "Reactive"
        ACID = "acid", "Acid"

    class MachineType(models.TextChoices):
        MANUAL = "manual", "Manual"
        AUTOMATIC = "automatic", "Automatic"
        SEMI_AUTOMATIC = "semi_automatic", "Semi-automatic"

    printing_type = models.CharField(max_length=20, choices=PrintingType.choices)
    printing_method = models.CharField(max_length=20, choices=Method.choices)
    machine_type = models.CharField(max_length=20, choices=MachineType.choices)
    design = models.JSONField(default=dict, blank=True)
    inks = models.JSONField(default=list, blank=True)
    color_accuracy = models.JSONField(default=dict, blank=True)
    registration = models.JSONField(default=dict, blank=True)

    class Meta(ProcessStageRecord.Meta):
        unique_together = ("company", "batch_number")
        verbose_name_plural = "Printing records"


class Finishing(ProcessStageRecord):
    batch_prefix = "FIN"
    default_stage_number = 7
    cost_components = ("chemical_cost", "labor_cost", "machine_cost", "utility_cost")

    class FinishingType(models.TextChoices):
        STENTER = "stenter", "Stenter"
        COATING = "coating", "Coating"
        CALENDERING = "calendering", "Calendering"
        COMPACTING = "compacting", "Compacting"
        SANFORIZING = "sanforizing", "Sanforizing"
        MERCERIZING = "mercerizing", "Mercerizing"
        SOFTENING = "softening", "Softening"

    class MachineType(models.TextChoices):
        STENTER_FRAME = "stenter_frame", "Stenter Frame"
        COATING_MACHINE = "coating_machine", "Coating Machine"
        CALENDAR_MACHINE = "calendar_machine", "Calendar Machine"
        COMPACTOR = "compactor", "Compactor"
        SANFORIZER = "sanforizer", "Sanforizer"
        MERCERIZER = "mercerizer", "Mercerizer"

    finishing_type = models.CharField(max_length=20, choices=FinishingType.choices)
    machine_type = models.CharField(max_length=20, choices=MachineType.choices)
    stenter_settings = models.JSONField(default=dict, blank=True)
    coating_settings = models.JSONField(default=dict, blank=True)
    chemicals = models.JSONField(default=list, blank=True)
    dimensional_stability = models.JSONField(default=dict, blank=True)
    hand_feel = models.JSONField(default=dict, blank=True)
    appearance = models.JSONField(default=dict, blank=True)

    class Meta(ProcessStageRecord.Meta):
        unique_together = ("company", "batch_number")
        verbose_name_plural = "Finishing records"


class CuttingPacking(ProcessStageRecord):
    batch_prefix = "CP"
    default_stage_number = 9
    cost_components = ("material_cost", "packing_cost", "labor_cost", "machine_cost")

    class CuttingType(models.TextChoices):
        MANUAL = "manual", "Manual"
        AUTOMATIC = "automatic", "Automatic"
        LASER = "laser", "Laser"
        WATER_JET = "water_jet", "Water Jet"
        DIE_CUTTING = "die_cutting", "Die Cutting"

    class CuttingMethod(models.TextChoices):
        STRAIGHT = "straight", "Straight"
        PATTERN = "pattern", "Pattern"
        CONTOUR = "contour", "Contour"
        LAYERED = "layered", "Layered"

    class MachineType(models.TextChoices):
        STRAIGHT_KNIFE = "straight_knife", "Straight Knife"
        ROUND_KNIFE = "round_knife", "Round Knife"
        BAND_KNIFE = "band_knife", "Band Knife"
        LASER_CUTTER = "laser_cutter", "Laser Cutter"
        WATER_JET = "water_jet", "Water Jet"
        DIE_CUTTER = "die_cutter", "Die Cutter"

    class PackingType(models.TextChoices):
        CARTON = "carton", "Carton"
        POLY_BAG = "poly_bag", "Poly Bag"
        SHRINK_WRAP = "shrink_wrap", "Shrink Wrap"
        VACUUM_PACK = "vacuum_pack", "Vacuum Pack"
        ROLL_PACK = "roll_pack", "Roll Pack"

    class PackingMethod(models.TextChoices):
        MANUAL = "manual", "Manual"
        SEMI_AUTOMATIC = "semi_automatic", "Semi-automatic"
        AUTOMATIC = "automatic", "Automatic"

    cutting_type = models.CharField(max_length=20, choices=CuttingType.choices)
    cutting_method = models.CharField(max_length=20, choices=CuttingMethod.choices)
    machine_type = models.CharField(max_length=20, choices=MachineType.choices)
    packing_type = models.CharField(max_length=20, choices=PackingType.choices)
    packing_method = models.CharField(max_length=20, choices=PackingMethod.choices, default=PackingMethod.MANUAL)
    cutting_settings = models.JSONField(default=dict, blank=True)
    pattern = models.JSONField(default=dict, blank=True)
    packing_specs = models.JSONField(default=dict, blank=True)
    pieces = models.JSONField(default=list, blank=True)
    cutting_accuracy = models.JSONField(default=dict, blank=True)
    packing_quality = models.JSONField(default=dict, blank=True)

    class Meta(ProcessStageRecord.Meta):
        unique_together = ("company", "batch_number")
        verbose_name_plural = "Cutting & packing records"
