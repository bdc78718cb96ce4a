"""Friend groups that organise games together."""

from __future__ import annotations

import random
import string

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone


User = settings.AUTH_USER_MODEL


class SquadQuerySet(models.QuerySet):
    def for_user(self, user):
        return self.filter(memberships__user=user)

    def active(self):
        return self.filter(is_active=True)


class Squad(models.Model):
    """A group of friends playing recurring games."""

    name = models.CharField(max_length=50)
    avatar = models.URLField(blank=True)
    description = models.CharField(max_length=500, blank=True)

    max_members = models.PositiveIntegerField(
        default=30, validators=[MinValueValidator(10), MaxValueValidator(50)]
    )
    is_private = models.BooleanField(default=False)
    require_approval = models.BooleanField(default=True)
    allow_guest_players = models.BooleanField(default=False)
    default_venue = models.ForeignKey(
        "venues.Venue",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    default_game_duration = models.PositiveIntegerField(default=90)
    require_advance_payment = models.BooleanField(default=False)
    refund_deadline_hours = models.PositiveIntegerField(default=24)

    total_games = models.PositiveIntegerField(default=0)
    total_goals = models.PositiveIntegerField(default=0)
    average_attendance = models.DecimalField(max_digits=5, decimal_places=1, default=0)

    invite_code = models.CharField(max_length=12, unique=True, null=True, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name="created_squads")
    last_activity = models.DateTimeField(default=timezone.now)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = SquadQuerySet.as_manager()

    class Meta:
        ordering = ("-last_activity",)

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):
        self.last_activity = timezone.now()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "last_activity" not in update_fields:
            kwargs["update_fields"] = [*update_fields, "last_activity"]
        super().save(*args, **kwargs)

    @property
    def member_count(self) -> int:
        return self.memberships.count()

    @property
    def admins(self) -> models.QuerySet["Membership"]:
        return self.memberships.filter(role=Membership.Role.ADMIN)

    def membership_for(self, user) -> "Membership | None":
        if user is None or not getattr(user, "pk", None):
            return None
        return self.memberships.filter(user_id=user.pk).first()

    def is_member(self, user) -> bool:
        return self.membership_for(user) is not None

    def is_admin(self, user) -> bool:
        membership = self.membership_for(user)
        return membership is not None and membership.role == Membership.Role.ADMIN

    def generate_invite_code(self) -> str:
        """Assign a fresh invite code that no other squad uses."""

        length = getattr(settings, "SQUAD_INVITE_CODE_LENGTH", 6)
        alphabet = string.ascii_uppercase + string.digits
        while True:
            code = "".join(random.choices(alphabet, k=length))
            if not Squad.objects.exclude(pk=self.pk).filter(invite_code=code).exists():
                self.invite_code = code
                return code


class Membership(models.Model):
    class Role(models.TextChoices):
        ADMIN = "admin", "Admin"
        MODERATOR = "moderator", "Moderator"
        MEMBER = "member", "Member"

    squad = models.ForeignKey(Squad, on_delete=models.CASCADE, related_name="memberships")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="squad_memberships")
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.MEMBER)
    joined_at = models.DateTimeField(auto_now_add=True)
    is_paying = models.BooleanField(default=True)

    class Meta:
        unique_together = ("squad", "user")
        ordering = ("joined_at", "pk")

    def __str__(self) -> str:  # pragma: no cover - admin display
        return f"{self.user} in {self.squad} ({self.role})"


class RecurringSlot(models.Model):
    """Weekly game template for a squad (0 = Monday)."""

    squad = models.ForeignKey(Squad, on_delete=models.CASCADE, related_name="recurring_slots")
    day_of_week = models.PositiveSmallIntegerField(validators=[MaxValueValidator(6)])
    kickoff = models.TimeField()
    venue = models.ForeignKey(
        "venues.Venue", null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    duration_minutes = models.PositiveIntegerField(default=90)
    auto_create = models.BooleanField(default=True)

    class Meta:
        ordering = ("day_of_week", "kickoff")

    def __str__(self) -> str:  # pragma: no cover - admin display
        return f"{self.squad} day={self.day_of_week} {self.kickoff:%H:%M}"
