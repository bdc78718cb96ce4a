"""Football venues, their pitches, prices and opening rules.

Day-of-week fields follow ``date.weekday()``: 0 is Monday and 6 is Sunday.
"""

from __future__ import annotations

import re

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import (
    MaxValueValidator,
    MinValueValidator,
    RegexValidator,
)
from django.db import models
from django.utils import timezone
from django.utils.text import slugify
from django_countries.fields import CountryField


User = settings.AUTH_USER_MODEL

WEEKDAY_VALIDATORS = [MinValueValidator(0), MaxValueValidator(6)]


class PitchSizeName(models.TextChoices):
    THREE = "3v3", "3v3"
    FIVE = "5v5", "5v5"
    SIX = "6v6", "6v6"
    SEVEN = "7v7", "7v7"
    EIGHT = "8v8", "8v8"
    NINE = "9v9", "9v9"
    ELEVEN = "11v11", "11v11"
    FUTSAL = "futsal", "Futsal"


class VenueQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def in_city(self, city: str | None):
        if not city:
            return self
        return self.filter(city__iexact=city)

    def popular(self, limit: int = 10, city: str | None = None):
        return (
            self.active()
            .filter(is_verified=True, rating_count__gte=5)
            .in_city(city)
            .order_by("-rating_average", "-total_bookings")[:limit]
        )

    def with_promotions(self, city: str | None = None):
        now = timezone.now()
        return (
            self.active()
            .in_city(city)
            .filter(
                promotions__is_active=True,
                promotions__valid_from__lte=now,
                promotions__valid_until__gte=now,
            )
            .distinct()
        )

    def featured(self, limit: int = 6):
        return (
            self.active()
            .filter(is_featured=True, is_verified=True)
            .order_by("-rating_average")[:limit]
        )


class Venue(models.Model):
    class Surface(models.TextChoices):
        NATURAL_GRASS = "natural_grass", "Natural grass"
        SYNTHETIC = "synthetic", "Synthetic"
        HYBRID = "hybrid", "Hybrid"
        INDOOR = "indoor", "Indoor"
        BEACH = "beach", "Beach"
        FUTSAL = "futsal", "Futsal"

    class Quality(models.TextChoices):
        EXCELLENT = "excellent", "Excellent"
        GOOD = "good", "Good"
        FAIR = "fair", "Fair"
        POOR = "poor", "Poor"

    class RefundPolicy(models.TextChoices):
        FULL = "full", "Full"
        PARTIAL = "partial", "Partial"
        NONE = "none", "None"

    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=160, unique=True, blank=True)
    description = models.TextField(max_length=1000, blank=True)

    address = models.CharField(max_length=200)
    city = models.CharField(max_length=80)
    district = models.CharField(max_length=80, blank=True)
    postal_code = models.CharField(
        max_length=8,
        blank=True,
        validators=[RegexValidator(r"^\d{4}-\d{3}$", "Postal code must look like 1000-001.")],
    )
    country = CountryField(default="PT")
    latitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        validators=[MinValueValidator(-90), MaxValueValidator(90)],
    )
    longitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        validators=[MinValueValidator(-180), MaxValueValidator(180)],
    )

    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    website = models.URLField(blank=True)

    surface = models.CharField(max_length=20, choices=Surface.choices, default=Surface.SYNTHETIC)
    quality = models.CharField(max_length=10, choices=Quality.choices, default=Quality.GOOD)

    has_lighting = models.BooleanField(default=False)
    has_parking = models.BooleanField(default=False)
    has_changing_rooms = models.BooleanField(default=False)
    has_showers = models.BooleanField(default=False)
    provides_balls = models.BooleanField(default=False)
    provides_bibs = models.BooleanField(default=False)

    min_advance_hours = models.PositiveIntegerField(default=2)
    max_advance_hours = models.PositiveIntegerField(default=720)
    cancellation_deadline_hours = models.PositiveIntegerField(default=24)
    refund_policy = models.CharField(
        max_length=10, choices=RefundPolicy.choices, default=RefundPolicy.PARTIAL
    )
    requires_deposit = models.BooleanField(default=False)
    deposit_percentage = models.PositiveIntegerField(default=50, validators=[MaxValueValidator(100)])
    allow_waitlist = models.BooleanField(default=True)

    is_active = models.BooleanField(default=True)
    is_verified = models.BooleanField(default=False)
    is_featured = models.BooleanField(default=False)
    temporarily_closed = models.BooleanField(default=False)
    under_maintenance = models.BooleanField(default=False)

    manager = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="managed_venues"
    )

    rating_average = models.DecimalField(max_digits=3, decimal_places=1, default=0)
    rating_count = models.PositiveIntegerField(default=0)
    rating_distribution = models.JSONField(default=dict, blank=True)
    rating_aspects = models.JSONField(default=dict, blank=True)
    rating_calculated_at = models.DateTimeField(null=True, blank=True)

    total_bookings = models.PositiveIntegerField(default=0)
    current_month_bookings = models.PositiveIntegerField(default=0)
    cancellation_rate = models.DecimalField(max_digits=5, decimal_places=1, default=0)

    deactivated_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = VenueQuerySet.as_manager()

    class Meta:
        ordering = ("name",)

    def __str__(self) -> str:
        return f"{self.name} ({self.city})"

    def build_slug(self) -> str:
        return f"{slugify(self.name)}-{slugify(self.city)}"

    def _unique_slug(self, base: str) -> str:
        slug, suffix = base, 2
        while Venue.objects.exclude(pk=self.pk).filter(slug=slug).exists():
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    def save(self, *args, **kwargs):
        base = self.build_slug()
        if not re.fullmatch(rf"{re.escape(base)}(-\d+)?", self.slug or ""):
            self.slug = self._unique_slug(base)
            update_fields = kwargs.get("update_fields")
            if update_fields is not None and "slug" not in update_fields:
                kwargs["update_fields"] = [*update_fields, "slug"]
        if not self.is_active and self.deactivated_at is None:
            self.deactivated_at = timezone.now()
        super().save(*args, **kwargs)

    @property
    def has_promotions(self) -> bool:
        now = timezone.now()
        return self.promotions.filter(
            is_active=True, valid_from__lte=now, valid_until__gte=now
        ).exists()

    def moderator_for(self, user) -> "VenueModerator | None":
        if user is None or not getattr(user, "pk", None):
            return None
        return self.moderators.filter(user_id=user.pk).first()

    def can_edit(self, user) -> bool:
        if user is None or not getattr(user, "pk", None):
            return False
        return self.manager_id == user.pk or self.moderators.filter(user_id=user.pk).exists()

    def has_permission(self, user, permission: str) -> bool:
        """Managers hold every permission; moderators only those granted."""

        if user is None or not getattr(user, "pk", None):
            return False
        if self.manager_id == user.pk:
            return True
        moderator = self.moderator_for(user)
        return moderator is not None and permission in moderator.permissions

    def offers_size(self, size: str) -> bool:
        return self.pitch_sizes.filter(name=size).exists()


class VenueModerator(models.Model):
    MANAGE_AVAILABILITY = "manage_availability"
    RESPOND_REVIEWS = "respond_reviews"

    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="moderators")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="moderated_venues")
    permissions = models.JSONField(default=list, blank=True)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("venue", "user")


class PitchSize(models.Model):
    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="pitch_sizes")
    name = models.CharField(max_length=10, choices=PitchSizeName.choices)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    length_m = models.PositiveIntegerField(null=True, blank=True)
    width_m = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        unique_together = ("venue", "name")
        ordering = ("name",)

    def __str__(self) -> str:
        return f"{self.venue.name} {self.name} x{self.quantity}"


class PriceTable(models.Model):
    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="price_tables")
    size = models.CharField(max_length=10, choices=PitchSizeName.choices)
    currency = models.CharField(max_length=3, default="EUR")

    class Meta:
        unique_together = ("venue", "size")

    def __str__(self) -> str:
        return f"{self.venue.name} {self.size} ({self.currency})"


class PricePeriod(models.Model):
    table = models.ForeignKey(PriceTable, on_delete=models.CASCADE, related_name="periods")
    name = models.CharField(max_length=50)
    hourly_rate = models.DecimalField(
        max_digits=8, decimal_places=2, validators=[MinValueValidator(0)]
    )
    minimum_hours = models.DecimalField(max_digits=4, decimal_places=1, default=1)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ("order", "pk")

    def __str__(self) -> str:
        return f"{self.name} @ {self.hourly_rate}/h"


class PeriodTimeSlot(models.Model):
    period = models.ForeignKey(PricePeriod, on_delete=models.CASCADE, related_name="time_slots")
    days_of_week = models.JSONField(default=list)
    start_time = models.TimeField()
    end_time = models.TimeField()

    def covers(self, weekday: int, at) -> bool:
        return weekday in self.days_of_week and self.start_time <= at <= self.end_time


class PeriodSpecialDate(models.Model):
    period = models.ForeignKey(PricePeriod, on_delete=models.CASCADE, related_name="special_dates")
    date = models.DateField()
    multiplier = models.DecimalField(max_digits=4, decimal_places=2, default=1)


class OpeningHours(models.Model):
    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="opening_hours")
    day_of_week = models.PositiveSmallIntegerField(validators=WEEKDAY_VALIDATORS)
    open_time = models.TimeField()
    close_time = models.TimeField()
    break_start = models.TimeField(null=True, blank=True)
    break_end = models.TimeField(null=True, blank=True)

    class Meta:
        unique_together = ("venue", "day_of_week")
        ordering = ("day_of_week",)
        verbose_name_plural = "opening hours"

    def __str__(self) -> str:
        return f"{self.venue.name} day={self.day_of_week} {self.open_time:%H:%M}-{self.close_time:%H:%M}"


class Holiday(models.Model):
    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="holidays")
    date = models.DateField()
    name = models.CharField(max_length=100)
    is_closed = models.BooleanField(default=True)
    special_open_time = models.TimeField(null=True, blank=True)
    special_close_time = models.TimeField(null=True, blank=True)
    price_multiplier = models.DecimalField(max_digits=4, decimal_places=2, default=1)

    class Meta:
        ordering = ("date",)


class BlockedSlot(models.Model):
    class Recurrence(models.TextChoices):
        NONE = "none", "None"
        DAILY = "daily", "Daily"
        WEEKLY = "weekly", "Weekly"
        MONTHLY = "monthly", "Monthly"

    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="blocked_slots")
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField()
    reason = models.CharField(max_length=200, blank=True)
    recurrence = models.CharField(
        max_length=10, choices=Recurrence.choices, default=Recurrence.NONE
    )
    recurrence_until = models.DateField(null=True, blank=True)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("starts_at",)

    def clean(self):
        if self.starts_at and self.ends_at and self.ends_at <= self.starts_at:
            raise ValidationError("End time must be after start time.")


class MaintenanceWindow(models.Model):
    class Kind(models.TextChoices):
        CLEANING = "cleaning", "Cleaning"
        REPAIR = "repair", "Repair"
        RENOVATION = "renovation", "Renovation"
        OTHER = "other", "Other"

    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="maintenance_windows")
    day_of_week = models.PositiveSmallIntegerField(validators=WEEKDAY_VALIDATORS)
    start_time = models.TimeField()
    end_time = models.TimeField()
    kind = models.CharField(max_length=12, choices=Kind.choices, default=Kind.CLEANING)


class Promotion(models.Model):
    class Kind(models.TextChoices):
        DISCOUNT = "discount", "Discount"
        PACKAGE = "package", "Package"
        FREEBIE = "freebie", "Freebie"
        EARLY_BIRD = "early_bird", "Early bird"
        LAST_MINUTE = "last_minute", "Last minute"

    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", "Percentage"
        FIXED = "fixed", "Fixed"
        BOGO = "bogo", "Buy one get one"

    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="promotions")
    title = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True)
    code = models.CharField(max_length=30, blank=True)
    kind = models.CharField(max_length=12, choices=Kind.choices, default=Kind.DISCOUNT)
    discount_type = models.CharField(max_length=10, choices=DiscountType.choices, blank=True)
    discount_value = models.DecimalField(
        max_digits=8, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )

    min_booking_hours = models.DecimalField(max_digits=4, decimal_places=1, null=True, blank=True)
    min_players = models.PositiveIntegerField(null=True, blank=True)
    sizes = models.JSONField(default=list, blank=True)
    days = models.JSONField(default=list, blank=True)
    # [{"start": "09:00", "end": "12:00"}]
    time_slots = models.JSONField(default=list, blank=True)
    first_time_only = models.BooleanField(default=False)
    member_only = models.BooleanField(default=False)
    max_uses = models.PositiveIntegerField(null=True, blank=True)
    max_uses_per_user = models.PositiveIntegerField(null=True, blank=True)

    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()
    usage_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("valid_from", "pk")

    def __str__(self) -> str:
        return self.title

    def clean(self):
        if self.kind == self.Kind.DISCOUNT and (not self.discount_type or self.discount_value is None):
            raise ValidationError("Discount promotions need a discount type and value.")
        if self.valid_from and self.valid_until and self.valid_until < self.valid_from:
            raise ValidationError("Promotion ends before it starts.")

    def save(self, *args, **kwargs):
        self.code = (self.code or "").upper()
        super().save(*args, **kwargs)


class PromotionRedemption(models.Model):
    promotion = models.ForeignKey(Promotion, on_delete=models.CASCADE, related_name="redemptions")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="promotion_redemptions")
    game = models.ForeignKey(
        "games.Game", null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    used_at = models.DateTimeField(default=timezone.now)


class Review(models.Model):
    RATING_VALIDATORS = [MinValueValidator(1), MaxValueValidator(5)]
    ASPECTS = ("field_quality", "facilities", "accessibility", "value_for_money", "staff")

    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="reviews")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="venue_reviews")
    game = models.ForeignKey("games.Game", on_delete=models.CASCADE, related_name="reviews")

    overall = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    field_quality = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)
    facilities = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)
    accessibility = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)
    value_for_money = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)
    staff = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)

    title = models.CharField(max_length=100, blank=True)
    comment = models.TextField(max_length=1000, blank=True)
    verified_booking = models.BooleanField(default=False)
    is_visible = models.BooleanField(default=True)

    response_text = models.TextField(max_length=1000, blank=True)
    responded_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    responded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)
        constraints = [
            models.UniqueConstraint(fields=["venue", "user", "game"], name="unique_review_per_game"),
        ]

    def __str__(self) -> str:
        return f"{self.venue.name}: {self.overall}/5 by {self.user}"
