from __future__ import annotations

from rest_framework import serializers

from .models import (
    CuttingPacking,
    Dyeing,
    Finishing,
    Printing,
    ProductionOrder,
    ProductionOrderStatus,
    ProductionStage,
    QualityGrade,
)


class ProductionStageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductionStage
        fields = [
            "id",
            "stage_number",
            "stage_name",
            "process_type",
            "status",
            "planned_duration_minutes",
            "actual_start_time",
            "actual_end_time",
            "actual_duration_minutes",
            "produced_quantity",
            "defect_quantity",
            "quality_grade",
            "quality_notes",
            "output_images",
            "notes",
            "hold_reason",
            "held_at",
            "started_by",
            "completed_by",
        ]
        read_only_fields = fields


class ProductionOrderSerializer(serializers.ModelSerializer):
    stages = ProductionStageSerializer(many=True, read_only=True)
    customer_order_number = serializers.CharField(source="customer_order.order_number", read_only=True, default=None)

    class Meta:
        model = ProductionOrder
        fields = [
            "id",
            "order_number",
            "customer_order",
            "customer_order_number",
            "product_name",
            "product_type",
            "fabric_type",
            "color",
            "design",
            "planned_quantity",
            "completed_quantity",
            "rejected_quantity",
            "unit",
            "priority",
            "status",
            "planned_start_date",
            "planned_end_date",
            "actual_start_date",
            "actual_end_date",
            "notes",
            "stages",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "order_number",
            "completed_quantity",
            "rejected_quantity",
            "status",
            "actual_start_date",
            "actual_end_date",
            "created_by",
            "created_at",
            "updated_at",
        ]

    def validate_planned_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Planned quantity must be greater than zero")
        return value

    def validate_customer_order(self, order):
        if order is not None and order.company_id != self.context["ctx"].company_id:
            raise serializers.ValidationError("Customer order not found")
        return order


class ProductionOrderListSerializer(ProductionOrderSerializer):
    class Meta(ProductionOrderSerializer.Meta):
        fields = [name for name in ProductionOrderSerializer.Meta.fields if name != "stages"]


class ProductionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ProductionOrderStatus.choices)


class StageCompleteSerializer(serializers.Serializer):
    produced_quantity = serializers.DecimalField(max_digits=15, decimal_places=3, min_value=0, required=False, default=0)
    defect_quantity = serializers.DecimalField(max_digits=15, decimal_places=3, min_value=0, required=False, default=0)
    quality_grade = serializers.ChoiceField(choices=QualityGrade.choices, required=False, allow_blank=True, default="")
    quality_notes = serializers.CharField(required=False, allow_blank=True, default="")
    images = serializers.ListField(child=serializers.URLField(), required=False, default=list)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class StageHoldSerializer(serializers.Serializer):
    reason = serializers.CharField()


class ProcessRecordSerializer(serializers.ModelSerializer):
    """Fields shared by every process record; concrete serializers append their own."""

    production_order_number = serializers.CharField(source="production_order.order_number", read_only=True)
    batch_number = serializers.CharField(max_length=40, required=False, allow_blank=True)

    common_fields = [
        "id",
        "production_order",
        "production_order_number",
        "batch_number",
        "stage_number",
        "machine_id",
        "status",
        "start_time",
        "end_time",
        "completed_by",
        "input_quantity",
        "output_quantity",
        "waste_quantity",
        "efficiency",
        "process_parameters",
        "quality_checks",
        "issues",
        "rework_details",
        "cost_breakdown",
        "total_cost",
        "process_images",
        "notes",
        "created_by",
        "created_at",
        "updated_at",
    ]
    common_read_only = [
        "status",
        "start_time",
        "end_time",
        "completed_by",
        "efficiency",
        "quality_checks",
        "total_cost",
        "created_by",
        "created_at",
        "updated_at",
    ]

    def validate_production_order(self, order):
        if order.company_id != self.context["ctx"].company_id:
            raise serializers.ValidationError("Production order not found")
        return order

    def validate_input_quantity(self, value):
        if value < 0:
            raise serializers.ValidationError("Input quantity cannot be negative")
        return value


class DyeingSerializer(ProcessRecordSerializer):
    class Meta:
        model = Dyeing
        fields = ProcessRecordSerializer.common_fields + [
            "dyeing_type",
            "dyeing_method",
            "machine_type",
            "liquor_ratio",
            "chemicals",
            "color_fastness",
            "shade",
            "water_usage",
            "energy_consumption",
        ]
        read_only_fields = ProcessRecordSerializer.common_read_only


class PrintingSerializer(ProcessRecordSerializer):
    class Meta:
        model = Printing
        fields = ProcessRecordSerializer.common_fields + [
            "printing_type",
            "printing_method",
            "machine_type",
            "design",
            "inks",
            "color_accuracy",
            "registration",
        ]
        read_only_fields = ProcessRecordSerializer.common_read_only


class FinishingSerializer(ProcessRecordSerializer):
    class Meta:
        model = Finishing
        fields = ProcessRecordSerializer.common_fields + [
            "finishing_type",
            "machine_type",
            "stenter_settings",
            "coating_settings",
            "chemicals",
            "dimensional_stability",
            "hand_feel",
            "appearance",
        ]
        read_only_fields = ProcessRecordSerializer.common_read_only


class CuttingPackingSerializer(ProcessRecordSerializer):
    class Meta:
        model = CuttingPacking
        fields = ProcessRecordSerializer.common_fields + [
            "cutting_type",
            "cutting_method",
            "machine_type",
            "packing_type",
            "packing_method",
            "cutting_settings",
            "pattern",
            "packing_specs",
            "pieces",
            "cutting_accuracy",
            "packing_quality",
        ]
        read_only_fields = ProcessRecordSerializer.common_read_only


class ProcessCompleteSerializer(serializers.Serializer):
    output_quantity = serializers.DecimalField(max_digits=15, decimal_places=3, min_value=0, required=False, allow_null=True, default=None)
    waste_quantity = serializers.DecimalField(max_digits=15, decimal_places=3, min_value=0, required=False, allow_null=True, default=None)
    cost_breakdown = serializers.DictField(required=False, default=dict)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class QualityCheckSerializer(serializers.Serializer):
    parameter = serializers.CharField(max_length=120)
    expected_value = serializers.CharField(required=False, allow_blank=True, default="")
    actual_value = serializers.CharField(required=False, allow_blank=True, default="")
    status = serializers.ChoiceField(choices=[("pass", "Pass"), ("fail", "Fail"), ("rework", "Rework")])
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
