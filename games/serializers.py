from rest_framework import serializers

from players.serializers import PlayerSummarySerializer
from squads.models import Squad
from venues.models import PitchSizeName, Venue

from .models import AdditionalCost, Attendance, Game, Payment


class AttendanceSerializer(serializers.ModelSerializer):
    user = PlayerSummarySerializer(read_only=True)

    class Meta:
        model = Attendance
        fields = ["user", "status", "team", "position", "is_paid", "responded_at"]
        read_only_fields = fields


class AdditionalCostSerializer(serializers.ModelSerializer):
    class Meta:
        model = AdditionalCost
        fields = ["id", "description", "amount"]


class GameSerializer(serializers.ModelSerializer):
    group = serializers.PrimaryKeyRelatedField(source="squad", read_only=True)
    field = serializers.PrimaryKeyRelatedField(source="venue", read_only=True)
    field_name = serializers.CharField(source="venue.name", read_only=True, default=None)
    ends_at = serializers.DateTimeField(read_only=True)
    confirmed_count = serializers.IntegerField(read_only=True)
    available_spots = serializers.IntegerField(read_only=True)
    is_full = serializers.BooleanField(read_only=True)
    total_cost = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    attendances = AttendanceSerializer(many=True, read_only=True)
    additional_costs = AdditionalCostSerializer(many=True, read_only=True)

    class Meta:
        model = Game
        fields = [
            "id",
            "group",
            "field",
            "field_name",
            "pitch_size",
            "starts_at",
            "ends_at",
            "duration_minutes",
            "status",
            "min_players",
            "max_players",
            "confirmed_count",
            "available_spots",
            "is_full",
            "team_a_name",
            "team_a_colour",
            "team_b_name",
            "team_b_colour",
            "field_price",
            "per_player_cost",
            "total_cost",
            "currency",
            "promotion_title",
            "is_recurring",
            "parent_game",
            "score_a",
            "score_b",
            "mvp",
            "cancel_reason",
            "notes",
            "attendances",
            "additional_costs",
        ]
        read_only_fields = fields


class GameCreateSerializer(serializers.Serializer):
    group = serializers.PrimaryKeyRelatedField(queryset=Squad.objects.active())
    field = serializers.PrimaryKeyRelatedField(queryset=Venue.objects.active(), required=False, allow_null=True)
    starts_at = serializers.DateTimeField()
    duration = serializers.IntegerField(required=False, min_value=30, max_value=180)
    min_players = serializers.IntegerField(required=False, min_value=4)
    max_players = serializers.IntegerField(required=False, max_value=30)
    pitch_size = serializers.ChoiceField(choices=PitchSizeName.choices, required=False)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    frequency = serializers.ChoiceField(choices=Game.Frequency.choices, required=False)
    recurrence_end = serializers.DateField(required=False)

    def validate(self, attrs):
        if attrs.get("frequency") and not attrs.get("recurrence_end"):
            raise serializers.ValidationError("recurrence_end is required for recurring games.")
        return attrs


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")


class CardSerializer(serializers.Serializer):
    player = serializers.IntegerField()
    kind = serializers.ChoiceField(choices=["yellow", "red"])
    minute = serializers.IntegerField(required=False, min_value=0, allow_null=True)


class ResultSerializer(serializers.Serializer):
    score_a = serializers.IntegerField(min_value=0)
    score_b = serializers.IntegerField(min_value=0)
    scorers = serializers.DictField(child=serializers.IntegerField(min_value=0), required=False)
    assists = serializers.DictField(child=serializers.IntegerField(min_value=0), required=False)
    cards = CardSerializer(many=True, required=False)
    mvp = serializers.IntegerField(required=False, allow_null=True)


class PaymentSerializer(serializers.ModelSerializer):
    user = serializers.IntegerField(source="user_id", required=False)

    class Meta:
        model = Payment
        fields = ["id", "user", "amount", "method", "paid_at"]
        read_only_fields = ["id", "paid_at"]
