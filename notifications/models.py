"""In-app notifications for players."""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


class NotificationQuerySet(models.QuerySet):
    def unread_for(self, user):
        now = timezone.now()
        return (
            self.filter(recipient=user, is_read=False)
            .exclude(status=Notification.Status.FAILED)
            .filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))
            .order_by("-created_at", "-pk")
        )


class Notification(models.Model):
    class Kind(models.TextChoices):
        GAME_INVITATION = "game_invitation", "Game invitation"
        GAME_REMINDER = "game_reminder", "Game reminder"
        GAME_CANCELLED = "game_cancelled", "Game cancelled"
        GAME_CONFIRMED = "game_confirmed", "Game confirmed"
        GAME_TEAMS_SET = "game_teams_set", "Teams set"
        GROUP_INVITATION = "group_invitation", "Group invitation"
        GROUP_JOINED = "group_joined", "Group joined"
        MESSAGE_MENTION = "message_mention", "Mention"
        PAYMENT_REMINDER = "payment_reminder", "Payment reminder"

    class Priority(models.TextChoices):
        LOW = "low", "Low"
        NORMAL = "normal", "Normal"
        HIGH = "high", "High"
        URGENT = "urgent", "Urgent"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        SENT = "sent", "Sent"
        DELIVERED = "delivered", "Delivered"
        READ = "read", "Read"
        FAILED = "failed", "Failed"

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications"
    )
    kind = models.CharField(max_length=20, choices=Kind.choices)
    title = models.CharField(max_length=100)
    message = models.CharField(max_length=500)

    squad = models.ForeignKey(
        "squads.Squad", null=True, blank=True, on_delete=models.CASCADE, related_name="+"
    )
    game = models.ForeignKey(
        "games.Game", null=True, blank=True, on_delete=models.CASCADE, related_name="notifications"
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    custom_data = models.JSONField(default=dict, blank=True)

    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.NORMAL)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    # [{"type": "confirm", "label": "Confirm", "taken": false, "taken_at": null}]
    actions = models.JSONField(default=list, blank=True)

    scheduled_for = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        ordering = ("-created_at", "-pk")
        indexes = [models.Index(fields=["recipient", "is_read"], name="notif_recipient_read_idx")]

    def __str__(self) -> str:  # pragma: no cover - admin display
        return f"{self.kind} -> {self.recipient}"
