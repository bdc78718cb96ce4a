"""Booking availability for venues.

Intervals are half-open: ``[start, end)`` overlaps ``[other_start, other_end)``
when ``start < other_end and other_start < end``.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional

from django.apps import apps
from django.conf import settings
from django.core.exceptions import PermissionDenied, ValidationError
from django.db.models import Q
from django.utils import timezone

from .models import BlockedSlot, OpeningHours, Venue, VenueModerator
from .pricing import calculate_price

logger = logging.getLogger(__name__)

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
ACTIVE_GAME_STATUSES = ("scheduled", "confirmed")
# Longest game a squad can book; bounds the overlap query.
MAX_GAME_MINUTES = 180

__all__ = [
    "Availability",
    "check_availability",
    "available_slots",
    "add_blocked_slot",
    "is_open",
    "weekly_schedule",
]


@dataclass(frozen=True)
class Availability:
    available: bool
    reason: Optional[str] = None

    def as_dict(self) -> dict:
        return {"available": self.available, "reason": self.reason}


def _overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    return start < other_end and other_start < end


def add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year, month = day.year + month_index // 12, month_index % 12 + 1
    return day.replace(year=year, month=month, day=min(day.day, calendar.monthrange(year, month)[1]))


def _occurrences(block: BlockedSlot, window_start: datetime, window_end: datetime) -> Iterator[tuple]:
    """Yield ``(start, end)`` pairs of ``block`` that could touch the window."""

    if block.recurrence == BlockedSlot.Recurrence.NONE:
        yield block.starts_at, block.ends_at
        return

    length = block.ends_at - block.starts_at
    first = timezone.localtime(block.starts_at)
    local_start = timezone.localtime(window_start)
    # Any occurrence overlapping the window starts at most ``length`` before it.
    day = (local_start - length).date()
    last_day = timezone.localtime(window_end).date()

    while day <= last_day:
        if day >= first.date() and (block.recurrence_until is None or day <= block.recurrence_until):
            if block.recurrence == BlockedSlot.Recurrence.DAILY:
                matches = True
            elif block.recurrence == BlockedSlot.Recurrence.WEEKLY:
                matches = (day - first.date()).days % 7 == 0
            else:
                months = (day.year - first.year) * 12 + day.month - first.month
                matches = add_months(first.date(), months) == day
            if matches:
                start = timezone.make_aware(datetime.combine(day, first.time()))
                yield start, start + length
        day += timedelta(days=1)


def _blocking_slot(venue: Venue, start: datetime, end: datetime) -> BlockedSlot | None:
    candidates = venue.blocked_slots.filter(starts_at__lt=end).filter(
        ~Q(recurrence=BlockedSlot.Recurrence.NONE) | Q(ends_at__gt=start)
    )
    for block in candidates:
        for block_start, block_end in _occurrences(block, start, end):
            if _overlaps(start, end, block_start, block_end):
                return block
    return None


def _overlapping_games(venue: Venue, start: datetime, end: datetime, exclude_game=None):
    Game = apps.get_model("games", "Game")
    candidates = Game.objects.filter(
        venue=venue,
        status__in=ACTIVE_GAME_STATUSES,
        starts_at__lt=end,
        starts_at__gte=start - timedelta(minutes=MAX_GAME_MINUTES),
    )
    if exclude_game is not None:
        candidates = candidates.exclude(pk=exclude_game.pk)
    return [game for game in candidates if game.ends_at > start]


def check_availability(
    venue: Venue,
    starts_at: datetime,
    duration_minutes: int,
    size: str,
    *,
    exclude_game=None,
) -> Availability:
    """Decide whether ``size`` can be booked at ``starts_at``."""

    pitch = venue.pitch_sizes.filter(name=size).first()
    if pitch is None:
        return Availability(False, "Pitch size not available")

    start = timezone.localtime(starts_at)
    end = start + timedelta(minutes=duration_minutes)

    hours = venue.opening_hours.filter(day_of_week=start.weekday()).first()
    if hours is None:
        return Availability(False, "Closed on this day")

    if end.date() != start.date():
        return Availability(False, "Outside opening hours")
    if start.time() < hours.open_time or end.time() > hours.close_time:
        return Availability(False, "Outside opening hours")
    if hours.break_start and hours.break_end:
        if start.time() < hours.break_end and hours.break_start < end.time():
            return Availability(False, "Outside opening hours")

    holiday = venue.holidays.filter(date=start.date(), is_closed=True).first()
    if holiday is not None:
        return Availability(False, f"Closed: {holiday.name}")

    block = _blocking_slot(venue, start, end)
    if block is not None:
        return Availability(False, block.reason or "Time slot blocked")

    for window in venue.maintenance_windows.filter(day_of_week=start.weekday()):
        window_start = timezone.make_aware(datetime.combine(start.date(), window.start_time))
        window_end = timezone.make_aware(datetime.combine(start.date(), window.end_time))
        if _overlaps(start, end, window_start, window_end):
            return Availability(False, f"Maintenance: {window.get_kind_display()}")

    booked = _overlapping_games(venue, start, end, exclude_game=exclude_game)
    if len(booked) >= pitch.quantity:
        return Availability(False, "All pitches of this size are booked")

    return Availability(True)


def available_slots(venue: Venue, day: date, duration_minutes: int = 90, size: str = "7v7") -> list[dict]:
    """List bookable starts on ``day`` at the configured step."""

    hours = venue.opening_hours.filter(day_of_week=day.weekday()).first()
    if hours is None:
        return []

    step = getattr(settings, "AVAILABILITY_SLOT_STEP_MINUTES", 30)
    open_minutes = hours.open_time.hour * 60 + hours.open_time.minute
    close_minutes = hours.close_time.hour * 60 + hours.close_time.minute

    slots = []
    start_minutes = open_minutes
    while start_minutes + duration_minutes <= close_minutes:
        starts_at = timezone.make_aware(
            datetime.combine(day, time(start_minutes // 60, start_minutes % 60))
        )
        if check_availability(venue, starts_at, duration_minutes, size).available:
            quote = calculate_price(venue, size, starts_at, duration_minutes)
            ends_at = starts_at + timedelta(minutes=duration_minutes)
            slots.append(
                {
                    "start_time": starts_at.strftime("%H:%M"),
                    "end_time": ends_at.strftime("%H:%M"),
                    "available": True,
                    "price": str(quote.final_price),
                    "promotion": quote.promotion.title if quote.promotion else None,
                }
            )
        start_minutes += step
    return slots


def add_blocked_slot(
    venue: Venue,
    starts_at: datetime,
    ends_at: datetime,
    reason: str = "",
    user=None,
    *,
    recurrence: str = BlockedSlot.Recurrence.NONE,
    recurrence_until: date | None = None,
) -> BlockedSlot:
    if not venue.has_permission(user, VenueModerator.MANAGE_AVAILABILITY):
        raise PermissionDenied("You cannot manage this venue's availability.")
    if ends_at <= starts_at:
        raise ValidationError("End time must be after start time.")

    Game = apps.get_model("games", "Game")
    conflicts = Game.objects.filter(
        venue=venue,
        status__in=ACTIVE_GAME_STATUSES,
        starts_at__gte=starts_at,
        starts_at__lt=ends_at,
    ).count()
    if conflicts:
        raise ValidationError(f"{conflicts} games scheduled in this period.")

    block = BlockedSlot.objects.create(
        venue=venue,
        starts_at=starts_at,
        ends_at=ends_at,
        reason=reason,
        recurrence=recurrence,
        recurrence_until=recurrence_until,
        created_by=user,
    )
    logger.info("Venue %s blocked %s - %s (%s)", venue.pk, starts_at, ends_at, reason or "no reason")
    return block


def is_open(venue: Venue, at: datetime | None = None) -> bool:
    if venue.temporarily_closed or venue.under_maintenance:
        return False
    local = timezone.localtime(at or timezone.now())
    hours: OpeningHours | None = venue.opening_hours.filter(day_of_week=local.weekday()).first()
    if hours is None:
        return False
    clock = local.time()
    if not hours.open_time <= clock < hours.close_time:
        return False
    if hours.break_start and hours.break_end and hours.break_start <= clock < hours.break_end:
        return False
    return True


def weekly_schedule(venue: Venue) -> list[dict]:
    by_day = {hours.day_of_week: hours for hours in venue.opening_hours.all()}
    schedule = []
    for day, name in enumerate(DAY_NAMES):
        hours = by_day.get(day)
        if hours is None:
            schedule.append({"day": day, "name": name, "status": "closed", "hours": None, "break": None})
            continue
        entry = {
            "day": day,
            "name": name,
            "status": "open",
            "hours": f"{hours.open_time:%H:%M} - {hours.close_time:%H:%M}",
            "break": None,
        }
        if hours.break_start and hours.break_end:
            entry["break"] = f"{hours.break_start:%H:%M} - {hours.break_end:%H:%M}"
        schedule.append(entry)
    return schedule
