from __future__ import annotations

from datetime import datetime, time, timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from games.models import Game
from games.services.scheduling import create_game
from players.models import User
from squads.models import Membership, RecurringSlot, Squad
from venues.models import (
    OpeningHours,
    PeriodTimeSlot,
    PitchSize,
    PricePeriod,
    PriceTable,
    Venue,
)

PLAYERS = [
    ("rui", "Rui Costa", "912000001"),
    ("ana", "Ana Marques", "912000002"),
    ("tiago", "Tiago Lopes", "912000003"),
    ("ines", "Inês Pereira", "912000004"),
    ("miguel", "Miguel Santos", "912000005"),
    ("joana", "Joana Dias", "912000006"),
]

WEEKDAYS = [0, 1, 2, 3, 4]
WEEKEND = [5, 6]


def _seed_venue() -> Venue:
    venue, _ = Venue.objects.get_or_create(
        name="Campo do Alto",
        city="Lisboa",
        defaults={
            "address": "Rua do Alto 12",
            "postal_code": "1000-001",
            "surface": Venue.Surface.SYNTHETIC,
            "has_lighting": True,
            "has_changing_rooms": True,
            "is_verified": True,
        },
    )
    PitchSize.objects.get_or_create(venue=venue, name="5v5", defaults={"quantity": 2})
    PitchSize.objects.get_or_create(venue=venue, name="7v7", defaults={"quantity": 1})
    for day in range(7):
        OpeningHours.objects.get_or_create(
            venue=venue, day_of_week=day, defaults={"open_time": time(9), "close_time": time(23)}
        )

    for size, normal, peak in (("5v5", "40.00", "55.00"), ("7v7", "60.00", "80.00")):
        table, created = PriceTable.objects.get_or_create(venue=venue, size=size)
        if not created:
            continue
        PricePeriod.objects.create(table=table, name="Normal", hourly_rate=Decimal(normal), order=0)
        peak_period = PricePeriod.objects.create(table=table, name="Peak", hourly_rate=Decimal(peak), order=1)
        PeriodTimeSlot.objects.create(
            period=peak_period, days_of_week=WEEKDAYS, start_time=time(18), end_time=time(23)
        )
        PeriodTimeSlot.objects.create(
            period=peak_period, days_of_week=WEEKEND, start_time=time(9), end_time=time(23)
        )
    return venue


def _seed_players() -> list[User]:
    players = []
    for username, name, phone in PLAYERS:
        user, created = User.objects.get_or_create(
            username=username, defaults={"name": name, "phone_number": phone, "city": "Lisboa"}
        )
        if created:
            user.set_password("footychat")
            user.save(update_fields=["password"])
        players.append(user)
    return players


class Command(BaseCommand):
    help = "Seed a demo venue, players, squad and upcoming games"

    def add_arguments(self, parser):
        parser.add_argument("--games", type=int, default=2, help="Number of weekly games to schedule")

    @transaction.atomic
    def handle(self, *args, **options):
        venue = _seed_venue()
        players = _seed_players()
        owner = players[0]

        squad, created = Squad.objects.get_or_create(
            name="Terças no Alto", created_by=owner, defaults={"default_venue": venue}
        )
        for user in players:
            Membership.objects.get_or_create(
                squad=squad,
                user=user,
                defaults={"role": Membership.Role.ADMIN if user == owner else Membership.Role.MEMBER},
            )
        RecurringSlot.objects.get_or_create(
            squad=squad, day_of_week=1, kickoff=time(20), defaults={"venue": venue}
        )

        today = timezone.localdate()
        next_tuesday = today + timedelta(days=(1 - today.weekday()) % 7 or 7)
        scheduled = 0
        for week in range(options["games"]):
            starts_at = timezone.make_aware(datetime.combine(next_tuesday + timedelta(weeks=week), time(20)))
            if Game.objects.filter(squad=squad, starts_at=starts_at).exists():
                continue
            create_game(squad, venue, owner, starts_at, pitch_size="7v7")
            scheduled += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Seeded {venue.name}, {len(players)} players, squad '{squad.name}' and {scheduled} games."
            )
        )
