"""Shared builders for test cases across the FootyChat apps."""

from __future__ import annotations

import itertools
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from django.utils import timezone

from players.models import User
from squads import services as squad_services
from venues.models import (
    OpeningHours,
    PeriodTimeSlot,
    PitchSize,
    PricePeriod,
    PriceTable,
    Venue,
)

_phones = itertools.count(100)


def make_user(username: str, **extra) -> User:
    extra.setdefault("name", username.title())
    extra.setdefault("phone_number", f"912345{next(_phones):03d}")
    return User.objects.create_user(username=username, password="pass1234", **extra)


def make_squad(owner: User, *members: User, name: str = "Tuesday Five"):
    squad = squad_services.create_squad(owner, name, "")
    for member in members:
        squad_services.add_member(squad, member)
    return squad


def make_venue(
    name: str = "Campo Central",
    city: str = "Lisboa",
    *,
    quantity: int = 1,
    open_time: time = time(9, 0),
    close_time: time = time(23, 0),
    normal_rate: str = "60.00",
    peak_rate: str = "80.00",
    **extra,
) -> Venue:
    """A venue open every day with one 7v7 pitch and weekday evening peak prices."""

    venue = Venue.objects.create(name=name, city=city, address="Rua do Campo 1", **extra)
    PitchSize.objects.create(venue=venue, name="7v7", quantity=quantity)
    for day in range(7):
        OpeningHours.objects.create(
            venue=venue, day_of_week=day, open_time=open_time, close_time=close_time
        )
    table = PriceTable.objects.create(venue=venue, size="7v7")
    PricePeriod.objects.create(table=table, name="Normal", hourly_rate=Decimal(normal_rate), order=0)
    peak = PricePeriod.objects.create(table=table, name="Peak", hourly_rate=Decimal(peak_rate), order=1)
    PeriodTimeSlot.objects.create(
        period=peak, days_of_week=[0, 1, 2, 3, 4], start_time=time(18, 0), end_time=time(23, 0)
    )
    return venue


def next_weekday(weekday: int, weeks_ahead: int = 1) -> date:
    """The date of ``weekday`` at least a week from today."""

    today = timezone.localdate()
    return today + timedelta(days=(weekday - today.weekday()) % 7 + 7 * weeks_ahead)


def local_dt(day: date, hour: int, minute: int = 0) -> datetime:
    return timezone.make_aware(datetime.combine(day, time(hour, minute)))
