"""Creating and updating player notifications."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable

from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)

__all__ = [
    "create_game_notifications",
    "unread_for",
    "mark_read",
    "mark_all_read",
    "count_unread",
    "take_action",
    "prune_expired",
]

GAME_TITLES = {
    Notification.Kind.GAME_INVITATION: "New game",
    Notification.Kind.GAME_REMINDER: "Game reminder",
    Notification.Kind.GAME_CANCELLED: "Game cancelled",
    Notification.Kind.GAME_CONFIRMED: "You're in",
    Notification.Kind.GAME_TEAMS_SET: "Teams are set",
    Notification.Kind.PAYMENT_REMINDER: "Payment due",
}

DEFAULT_ACTIONS = {
    Notification.Kind.GAME_INVITATION: [("confirm", "Confirm"), ("decline", "Decline")],
    Notification.Kind.GAME_REMINDER: [("view", "View game")],
    Notification.Kind.PAYMENT_REMINDER: [("pay", "Mark as paid")],
}


def _game_message(kind: str, game) -> str:
    kickoff = timezone.localtime(game.starts_at).strftime("%a %d %b %H:%M")
    venue = game.venue.name if game.venue_id else "TBD"
    if kind == Notification.Kind.GAME_CANCELLED:
        reason = f": {game.cancel_reason}" if game.cancel_reason else ""
        return f"The game on {kickoff} at {venue} was cancelled{reason}"
    if kind == Notification.Kind.GAME_CONFIRMED:
        return f"A spot opened up. You're confirmed for {kickoff} at {venue}"
    if kind == Notification.Kind.GAME_TEAMS_SET:
        return f"Teams for {kickoff} at {venue} are ready"
    if kind == Notification.Kind.PAYMENT_REMINDER:
        return f"Your share for {kickoff} is {game.per_player_cost} {game.currency}"
    return f"{game.squad.name}: {kickoff} at {venue}"


def _actions_for(kind: str) -> list[dict]:
    return [
        {"type": action, "label": label, "taken": False, "taken_at": None}
        for action, label in DEFAULT_ACTIONS.get(kind, [])
    ]


def create_game_notifications(
    kind: str,
    game,
    recipients: Iterable,
    custom_data: dict | None = None,
    *,
    sender=None,
) -> list[Notification]:
    recipients = list(recipients)
    if not recipients:
        return []

    title = GAME_TITLES.get(kind, "FootyChat")
    message = _game_message(kind, game)
    priority = (
        Notification.Priority.HIGH
        if kind == Notification.Kind.GAME_CANCELLED
        else Notification.Priority.NORMAL
    )
    notifications = Notification.objects.bulk_create(
        [
            Notification(
                recipient=user,
                kind=kind,
                title=title,
                message=message[:500],
                squad_id=game.squad_id,
                game=game,
                sender=sender,
                custom_data=custom_data or {},
                priority=priority,
                actions=_actions_for(kind),
            )
            for user in recipients
        ]
    )
    logger.info("Created %s %s notifications for game %s", len(notifications), kind, game.pk)
    return notifications


def unread_for(user):
    return Notification.objects.unread_for(user)


def count_unread(user) -> int:
    return unread_for(user).count()


def mark_read(notification: Notification) -> Notification:
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = timezone.now()
        notification.status = Notification.Status.READ
        notification.save(update_fields=["is_read", "read_at", "status"])
    return notification


def mark_all_read(user) -> int:
    return Notification.objects.filter(recipient=user, is_read=False).update(
        is_read=True, read_at=timezone.now(), status=Notification.Status.READ
    )


def take_action(notification: Notification, action_type: str) -> Notification:
    action = next((item for item in notification.actions if item.get("type") == action_type), None)
    if action is None:
        raise ValidationError("Action not found.")
    if action.get("taken"):
        raise ValidationError("Action already taken.")

    action["taken"] = True
    action["taken_at"] = timezone.now().isoformat()
    notification.save(update_fields=["actions"])
    return mark_read(notification)


def prune_expired(now: datetime | None = None) -> int:
    now = now or timezone.now()
    days = getattr(settings, "NOTIFICATION_RETENTION_DAYS", 30)
    deleted, _ = Notification.objects.filter(created_at__lt=now - timedelta(days=days)).delete()
    if deleted:
        logger.info("Pruned %s notifications older than %s days", deleted, days)
    return deleted
