from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = [
            "id",
            "kind",
            "title",
            "message",
            "squad",
            "game",
            "sender",
            "custom_data",
            "priority",
            "status",
            "is_read",
            "read_at",
            "actions",
            "created_at",
        ]
        read_only_fields = fields


class ActionSerializer(serializers.Serializer):
    action = serializers.CharField(max_length=30)
