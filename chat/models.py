"""Squad chat messages, polls, reactions and read receipts."""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone


User = settings.AUTH_USER_MODEL

DELETED_PLACEHOLDER = "[Message deleted]"


class MessageQuerySet(models.QuerySet):
    def visible(self):
        return self.filter(is_deleted=False)


class Message(models.Model):
    class Kind(models.TextChoices):
        TEXT = "text", "Text"
        IMAGE = "image", "Image"
        VIDEO = "video", "Video"
        AUDIO = "audio", "Audio"
        FILE = "file", "File"
        GAME_INVITE = "game_invite", "Game invite"
        POLL = "poll", "Poll"
        LOCATION = "location", "Location"
        SYSTEM = "system", "System"

    class DeleteType(models.TextChoices):
        SOFT = "soft", "Soft"
        HARD = "hard", "Hard"

    squad = models.ForeignKey("squads.Squad", on_delete=models.CASCADE, related_name="messages")
    sender = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="chat_messages"
    )
    reply_to = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.SET_NULL, related_name="replies"
    )
    kind = models.CharField(max_length=12, choices=Kind.choices, default=Kind.TEXT)
    text = models.TextField(max_length=1000, blank=True)

    media_url = models.URLField(blank=True)
    media_thumbnail = models.URLField(blank=True)
    media_filename = models.CharField(max_length=200, blank=True)
    media_size = models.PositiveIntegerField(null=True, blank=True)
    media_mime_type = models.CharField(max_length=100, blank=True)

    game = models.ForeignKey(
        "games.Game", null=True, blank=True, on_delete=models.SET_NULL, related_name="invites"
    )

    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    location_name = models.CharField(max_length=200, blank=True)

    system_action = models.CharField(max_length=30, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    is_edited = models.BooleanField(default=False)
    edited_at = models.DateTimeField(null=True, blank=True)
    # [{"text": "...", "edited_at": "..."}]
    edit_history = models.JSONField(default=list, blank=True)

    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)
    deleted_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    delete_type = models.CharField(max_length=4, choices=DeleteType.choices, blank=True)

    is_pinned = models.BooleanField(default=False)
    pinned_at = models.DateTimeField(null=True, blank=True)
    pinned_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )

    poll_question = models.CharField(max_length=200, blank=True)
    poll_allow_multiple = models.BooleanField(default=False)
    poll_expires_at = models.DateTimeField(null=True, blank=True)
    poll_is_anonymous = models.BooleanField(default=False)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    objects = MessageQuerySet.as_manager()

    class Meta:
        ordering = ("-created_at", "-pk")
        indexes = [models.Index(fields=["squad", "-created_at"], name="chat_message_squad_time_idx")]

    def __str__(self) -> str:  # pragma: no cover - admin display
        return f"{self.kind} in {self.squad_id} by {self.sender_id}"

    @property
    def poll_is_open(self) -> bool:
        return self.poll_expires_at is None or self.poll_expires_at > timezone.now()


class PollOption(models.Model):
    message = models.ForeignKey(Message, on_delete=models.CASCADE, related_name="poll_options")
    text = models.CharField(max_length=100)

    class Meta:
        ordering = ("pk",)


class PollVote(models.Model):
    option = models.ForeignKey(PollOption, on_delete=models.CASCADE, related_name="votes")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="+")
    voted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = ("option", "user")


class Reaction(models.Model):
    message = models.ForeignKey(Message, on_delete=models.CASCADE, related_name="reactions")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="+")
    emoji = models.CharField(max_length=16)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("message", "user", "emoji")


class Receipt(models.Model):
    message = models.ForeignKey(Message, on_delete=models.CASCADE, related_name="receipts")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="+")
    delivered_at = models.DateTimeField(null=True, blank=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = ("message", "user")
