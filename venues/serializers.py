from rest_framework import serializers

from players.serializers import PlayerSummarySerializer

from .models import (
    BlockedSlot,
    Holiday,
    OpeningHours,
    PitchSize,
    PricePeriod,
    PriceTable,
    Promotion,
    Review,
    Venue,
)


class PitchSizeSerializer(serializers.ModelSerializer):
    class Meta:
        model = PitchSize
        fields = ["name", "quantity", "length_m", "width_m"]


class PricePeriodSerializer(serializers.ModelSerializer):
    class Meta:
        model = PricePeriod
        fields = ["name", "hourly_rate", "minimum_hours"]


class PriceTableSerializer(serializers.ModelSerializer):
    periods = PricePeriodSerializer(many=True, read_only=True)

    class Meta:
        model = PriceTable
        fields = ["size", "currency", "periods"]


class OpeningHoursSerializer(serializers.ModelSerializer):
    class Meta:
        model = OpeningHours
        fields = ["day_of_week", "open_time", "close_time", "break_start", "break_end"]


class HolidaySerializer(serializers.ModelSerializer):
    class Meta:
        model = Holiday
        fields = ["date", "name", "is_closed", "price_multiplier"]


class PromotionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Promotion
        fields = [
            "id",
            "title",
            "description",
            "code",
            "kind",
            "discount_type",
            "discount_value",
            "valid_from",
            "valid_until",
        ]


class VenueListSerializer(serializers.ModelSerializer):
    country = serializers.CharField(source="country.code", read_only=True)
    sizes = serializers.SlugRelatedField(source="pitch_sizes", many=True, read_only=True, slug_field="name")
    has_promotions = serializers.BooleanField(read_only=True)

    class Meta:
        model = Venue
        fields = [
            "id",
            "name",
            "slug",
            "city",
            "district",
            "country",
            "surface",
            "rating_average",
            "rating_count",
            "is_verified",
            "is_featured",
            "sizes",
            "has_promotions",
        ]


class VenueDetailSerializer(VenueListSerializer):
    pitch_sizes = PitchSizeSerializer(many=True, read_only=True)
    price_tables = PriceTableSerializer(many=True, read_only=True)
    opening_hours = OpeningHoursSerializer(many=True, read_only=True)

    class Meta(VenueListSerializer.Meta):
        fields = VenueListSerializer.Meta.fields + [
            "description",
            "address",
            "postal_code",
            "latitude",
            "longitude",
            "phone",
            "email",
            "website",
            "quality",
            "has_lighting",
            "has_parking",
            "has_changing_rooms",
            "has_showers",
            "provides_balls",
            "provides_bibs",
            "min_advance_hours",
            "max_advance_hours",
            "cancellation_deadline_hours",
            "refund_policy",
            "requires_deposit",
            "deposit_percentage",
            "rating_distribution",
            "rating_aspects",
            "total_bookings",
            "temporarily_closed",
            "under_maintenance",
            "pitch_sizes",
            "price_tables",
            "opening_hours",
        ]


class AvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    duration = serializers.IntegerField(min_value=30, max_value=180, default=90)
    size = serializers.CharField(default="7v7")


class QuoteQuerySerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    duration = serializers.IntegerField(min_value=30, max_value=180, default=90)
    size = serializers.CharField(default="7v7")


class BlockedSlotSerializer(serializers.ModelSerializer):
    class Meta:
        model = BlockedSlot
        fields = ["id", "starts_at", "ends_at", "reason", "recurrence", "recurrence_until"]


class ReviewSerializer(serializers.ModelSerializer):
    user = PlayerSummarySerializer(read_only=True)

    class Meta:
        model = Review
        fields = [
            "id",
            "user",
            "game",
            "overall",
            "field_quality",
            "facilities",
            "accessibility",
            "value_for_money",
            "staff",
            "title",
            "comment",
            "verified_booking",
            "response_text",
            "responded_at",
            "created_at",
        ]
        read_only_fields = ["verified_booking", "response_text", "responded_at", "created_at"]
        # Uniqueness is checked by add_review with a friendlier message.
        validators = []


class ReviewResponseSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=1000)
