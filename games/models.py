"""Games, attendance and match records."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Sum
from django.utils import timezone

from venues.models import PitchSizeName


User = settings.AUTH_USER_MODEL


def default_duration() -> int:
    return getattr(settings, "GAME_DEFAULT_DURATION", 90)


def default_min_players() -> int:
    return getattr(settings, "GAME_DEFAULT_MIN_PLAYERS", 10)


def default_max_players() -> int:
    return getattr(settings, "GAME_DEFAULT_MAX_PLAYERS", 14)


def default_pitch_size() -> str:
    return getattr(settings, "GAME_DEFAULT_PITCH_SIZE", PitchSizeName.SEVEN)


class GameQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status__in=[Game.Status.SCHEDULED, Game.Status.CONFIRMED])

    def upcoming(self, now=None):
        return self.active().filter(starts_at__gte=now or timezone.now()).order_by("starts_at")

    def for_user(self, user):
        return self.filter(squad__memberships__user=user)


class Game(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        SCHEDULED = "scheduled", "Scheduled"
        CONFIRMED = "confirmed", "Confirmed"
        PLAYING = "playing", "Playing"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    class Frequency(models.TextChoices):
        WEEKLY = "weekly", "Weekly"
        BIWEEKLY = "biweekly", "Every two weeks"
        MONTHLY = "monthly", "Monthly"

    squad = models.ForeignKey("squads.Squad", on_delete=models.CASCADE, related_name="games")
    venue = models.ForeignKey(
        "venues.Venue", null=True, blank=True, on_delete=models.SET_NULL, related_name="games"
    )
    pitch_size = models.CharField(max_length=10, choices=PitchSizeName.choices, default=default_pitch_size)
    starts_at = models.DateTimeField(db_index=True)
    duration_minutes = models.PositiveIntegerField(
        default=default_duration, validators=[MinValueValidator(30), MaxValueValidator(180)]
    )
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.SCHEDULED)

    min_players = models.PositiveIntegerField(default=default_min_players, validators=[MinValueValidator(4)])
    max_players = models.PositiveIntegerField(default=default_max_players, validators=[MaxValueValidator(30)])

    team_a_name = models.CharField(max_length=30, default="Team A")
    team_a_colour = models.CharField(max_length=20, default="white")
    team_b_name = models.CharField(max_length=30, default="Team B")
    team_b_colour = models.CharField(max_length=20, default="black")
    auto_generate_teams = models.BooleanField(default=False)

    field_price = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    per_player_cost = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    currency = models.CharField(max_length=3, default="EUR")
    promotion_title = models.CharField(max_length=100, blank=True)

    is_recurring = models.BooleanField(default=False)
    parent_game = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.SET_NULL, related_name="recurrences"
    )
    recurrence_frequency = models.CharField(max_length=10, choices=Frequency.choices, blank=True)
    recurrence_end = models.DateField(null=True, blank=True)

    score_a = models.PositiveIntegerField(null=True, blank=True)
    score_b = models.PositiveIntegerField(null=True, blank=True)
    mvp = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")

    cancel_reason = models.CharField(max_length=200, blank=True)
    cancelled_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)

    remind_day_before = models.BooleanField(default=True)
    remind_hour_before = models.BooleanField(default=True)

    # {"temperature": 18, "condition": "clear", "fetched_at": "..."}
    weather = models.JSONField(default=dict, blank=True)
    notes = models.CharField(max_length=500, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name="created_games")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = GameQuerySet.as_manager()

    class Meta:
        ordering = ("starts_at", "pk")

    def __str__(self) -> str:
        return f"{self.squad} @ {timezone.localtime(self.starts_at):%Y-%m-%d %H:%M}"

    def clean(self):
        if self.min_players and self.max_players and self.min_players > self.max_players:
            raise ValidationError("Minimum players cannot exceed maximum players.")

    @property
    def ends_at(self):
        return self.starts_at + timedelta(minutes=self.duration_minutes)

    @property
    def confirmed_count(self) -> int:
        return self.attendances.filter(status=Attendance.Status.CONFIRMED).count()

    @property
    def available_spots(self) -> int:
        return max(self.max_players - self.confirmed_count, 0)

    @property
    def is_full(self) -> bool:
        return self.confirmed_count >= self.max_players

    @property
    def total_cost(self) -> Decimal:
        extra = self.additional_costs.aggregate(total=Sum("amount"))["total"] or Decimal("0")
        return Decimal(self.field_price) + extra

    def players_with(self, status: str):
        return [
            attendance.user
            for attendance in self.attendances.filter(status=status).select_related("user")
        ]

    @property
    def confirmed_players(self):
        return self.players_with(Attendance.Status.CONFIRMED)

    @property
    def waitlist(self) -> models.QuerySet["Attendance"]:
        return self.attendances.filter(status=Attendance.Status.WAITLISTED).order_by(
            "responded_at", "pk"
        )


class Attendance(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        WAITLISTED = "waitlisted", "Waitlisted"
        DECLINED = "declined", "Declined"

    class Team(models.TextChoices):
        A = "A", "Team A"
        B = "B", "Team B"

    game = models.ForeignKey(Game, on_delete=models.CASCADE, related_name="attendances")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="attendances")
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    team = models.CharField(max_length=1, choices=Team.choices, null=True, blank=True)
    position = models.CharField(max_length=3, blank=True)
    is_paid = models.BooleanField(default=False)
    decline_reason = models.CharField(max_length=200, blank=True)
    responded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("game", "user")
        ordering = ("responded_at", "pk")

    def __str__(self) -> str:  # pragma: no cover - admin display
        return f"{self.user} {self.status} for {self.game_id}"


class AdditionalCost(models.Model):
    game = models.ForeignKey(Game, on_delete=models.CASCADE, related_name="additional_costs")
    description = models.CharField(max_length=100)
    amount = models.DecimalField(max_digits=8, decimal_places=2, validators=[MinValueValidator(0)])


class Payment(models.Model):
    class Method(models.TextChoices):
        CASH = "cash", "Cash"
        MBWAY = "mbway", "MB WAY"
        TRANSFER = "transfer", "Bank transfer"
        APP = "app", "In app"

    game = models.ForeignKey(Game, on_delete=models.CASCADE, related_name="payments")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="game_payments")
    amount = models.DecimalField(max_digits=8, decimal_places=2, validators=[MinValueValidator(0)])
    method = models.CharField(max_length=10, choices=Method.choices, default=Method.CASH)
    paid_at = models.DateTimeField(default=timezone.now)


class GoalRecord(models.Model):
    game = models.ForeignKey(Game, on_delete=models.CASCADE, related_name="goals")
    player = models.ForeignKey(User, on_delete=models.CASCADE, related_name="+")
    goals = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    team = models.CharField(max_length=1, choices=Attendance.Team.choices, blank=True)


class AssistRecord(models.Model):
    game = models.ForeignKey(Game, on_delete=models.CASCADE, related_name="assists")
    player = models.ForeignKey(User, on_delete=models.CASCADE, related_name="+")
    assists = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])


class CardRecord(models.Model):
    class Kind(models.TextChoices):
        YELLOW = "yellow", "Yellow"
        RED = "red", "Red"

    game = models.ForeignKey(Game, on_delete=models.CASCADE, related_name="cards")
    player = models.ForeignKey(User, on_delete=models.CASCADE, related_name="+")
    kind = models.CharField(max_length=6, choices=Kind.choices)
    minute = models.PositiveIntegerField(null=True, blank=True)


class ReminderLog(models.Model):
    class Kind(models.TextChoices):
        DAY_BEFORE = "day_before", "Day before"
        HOUR_BEFORE = "hour_before", "Hour before"
        CUSTOM = "custom", "Custom"

    game = models.ForeignKey(Game, on_delete=models.CASCADE, related_name="reminders")
    kind = models.CharField(max_length=12, choices=Kind.choices)
    sent_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["game", "kind"],
                condition=~models.Q(kind="custom"),
                name="unique_automatic_reminder",
            ),
        ]
