"""Periodic jobs run by the django-q cluster or the management commands."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from footychat.exceptions import SlotUnavailable
from notifications.models import Notification
from notifications.services import create_game_notifications
from squads.models import Membership, RecurringSlot

from .models import Attendance, Game, ReminderLog
from .services.scheduling import create_game, refresh_status

logger = logging.getLogger(__name__)

REMINDER_TOGGLES = {
    ReminderLog.Kind.DAY_BEFORE: "remind_day_before",
    ReminderLog.Kind.HOUR_BEFORE: "remind_hour_before",
}


def send_due_reminders(now: datetime | None = None) -> int:
    """Notify confirmed players about games entering a reminder window."""

    now = now or timezone.now()
    windows = getattr(settings, "REMINDER_WINDOWS", {"day_before": 24 * 60, "hour_before": 60})
    sent = 0

    for kind, minutes in windows.items():
        toggle = REMINDER_TOGGLES.get(kind)
        if toggle is None:
            continue
        games = (
            Game.objects.active()
            .filter(**{toggle: True}, starts_at__gt=now, starts_at__lte=now + timedelta(minutes=minutes))
            .exclude(reminders__kind=kind)
            .select_related("squad", "venue")
        )
        for game in games:
            recipients = [
                attendance.user
                for attendance in game.attendances.filter(
                    status=Attendance.Status.CONFIRMED, user__notify_game_reminders=True
                ).select_related("user")
            ]
            try:
                with transaction.atomic():
                    ReminderLog.objects.create(game=game, kind=kind, sent_at=now)
                    created = create_game_notifications(
                        Notification.Kind.GAME_REMINDER, game, recipients, {"reminder": kind}
                    )
            except IntegrityError:
                logger.info("Reminder %s for game %s already sent", kind, game.pk)
                continue
            sent += len(created)
            logger.info("Sent %s %s reminders for game %s", len(created), kind, game.pk)
    return sent


def complete_past_games(now: datetime | None = None) -> int:
    now = now or timezone.now()
    finished = 0
    for game in Game.objects.filter(status=Game.Status.SCHEDULED, starts_at__lt=now):
        refresh_status(game, now)
        finished += 1
    if finished:
        logger.info("Marked %s past games as completed", finished)
    return finished


def _slot_start(slot: RecurringSlot, today: date) -> datetime:
    days_ahead = (slot.day_of_week - today.weekday()) % 7
    return timezone.make_aware(datetime.combine(today + timedelta(days=days_ahead), slot.kickoff))


def _slot_creator(slot: RecurringSlot):
    squad = slot.squad
    if squad.is_admin(squad.created_by):
        return squad.created_by
    admin = squad.memberships.filter(role=Membership.Role.ADMIN).select_related("user").first()
    return admin.user if admin else None


def auto_create_weekly_games(today: date | None = None) -> int:
    """Create the coming week's game for every auto-create recurring slot."""

    now = timezone.now()
    today = today or timezone.localdate()
    created = 0
    slots = RecurringSlot.objects.filter(
        auto_create=True, venue__isnull=False, squad__is_active=True
    ).select_related("squad", "squad__created_by", "venue")

    for slot in slots:
        starts_at = _slot_start(slot, today)
        if starts_at <= now:
            starts_at = _slot_start(slot, today + timedelta(days=7))
        if starts_at <= now:
            logger.info("Weekly game for squad %s at %s is in the past", slot.squad_id, starts_at.isoformat())
            continue
        if Game.objects.filter(squad=slot.squad, starts_at=starts_at).exclude(
            status=Game.Status.CANCELLED
        ).exists():
            continue
        creator = _slot_creator(slot)
        if creator is None:
            logger.warning("Squad %s has no admin to create its weekly game", slot.squad_id)
            continue
        try:
            create_game(
                slot.squad,
                slot.venue,
                creator,
                starts_at,
                duration_minutes=slot.duration_minutes,
                is_recurring=True,
                recurrence_frequency=Game.Frequency.WEEKLY,
            )
        except SlotUnavailable as exc:
            logger.warning(
                "Weekly game for squad %s at %s skipped: %s", slot.squad_id, starts_at.isoformat(), exc.reason
            )
            continue
        created += 1
    return created
