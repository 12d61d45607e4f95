from rest_framework import serializers

from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source="user.username", read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "timestamp",
            "user",
            "user_name",
            "entity_type",
            "entity_id",
            "action",
            "description",
            "before_value",
            "after_value",
        ]
        read_only_fields = fields
