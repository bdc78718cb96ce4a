"""Random team split for confirmed players."""

from __future__ import annotations

import logging
import math
import random
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from ..models import Attendance, Game

logger = logging.getLogger(__name__)


@transaction.atomic
def generate_teams(game: Game, rng: Optional[random.Random] = None) -> tuple[list, list]:
    """Shuffle confirmed players into team A (the larger half) and team B."""

    rng = rng or random.Random()
    attendances = list(
        game.attendances.filter(status=Attendance.Status.CONFIRMED)
        .select_related("user")
        .order_by("pk")
    )
    if len(attendances) < 2:
        raise ValidationError("At least two confirmed players are needed to pick teams.")

    rng.shuffle(attendances)
    split = math.ceil(len(attendances) / 2)
    team_a, team_b = attendances[:split], attendances[split:]

    for attendance in team_a:
        attendance.team = Attendance.Team.A
    for attendance in team_b:
        attendance.team = Attendance.Team.B
    Attendance.objects.bulk_update(attendances, ["team"])

    logger.info("Game %s: teams of %s and %s", game.pk, len(team_a), len(team_b))
    return [a.user for a in team_a], [a.user for a in team_b]
