from rest_framework import serializers

from .models import User, validate_positions


class PlayerSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name", "avatar"]
        read_only_fields = fields


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "name",
            "avatar",
            "bio",
            "city",
            "preferred_positions",
            "games_played",
            "goals",
            "assists",
            "yellow_cards",
            "red_cards",
            "win_rate",
            "is_verified",
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.ModelSerializer):
    preferred_positions = serializers.JSONField(required=False, validators=[validate_positions])

    class Meta:
        model = User
        fields = [
            "name",
            "bio",
            "city",
            "avatar",
            "preferred_positions",
            "availability",
            "notify_game_reminders",
            "notify_chat_messages",
            "notify_promotions",
        ]

    def validate_availability(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Availability must be a list.")
        for item in value:
            day = item.get("day_of_week") if isinstance(item, dict) else None
            if not isinstance(day, int) or not 0 <= day <= 6:
                raise serializers.ValidationError("day_of_week must be between 0 and 6.")
        return value
