"""User accounts for players."""

from __future__ import annotations

import re

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models


PHONE_PATTERN = re.compile(r"^(\+351)?9[1236]\d{7}$")

POSITION_CHOICES = [
    ("GK", "Goalkeeper"),
    ("DEF", "Defender"),
    ("MID", "Midfielder"),
    ("FWD", "Forward"),
]
POSITIONS = {code for code, _ in POSITION_CHOICES}


def normalise_phone_number(value: str | None) -> str:
    """Strip whitespace from a phone number."""

    return re.sub(r"\s", "", value or "")


def validate_phone_number(value: str) -> None:
    if not PHONE_PATTERN.match(normalise_phone_number(value)):
        raise ValidationError("Invalid mobile phone number.")


def validate_positions(value) -> None:
    if not isinstance(value, list) or any(item not in POSITIONS for item in value):
        raise ValidationError("Positions must be a list of GK, DEF, MID or FWD.")


class User(AbstractUser):
    phone_number = models.CharField(
        max_length=20, unique=True, validators=[validate_phone_number]
    )
    name = models.CharField(max_length=50, validators=[MinLengthValidator(2)])
    email = models.EmailField(blank=True)
    avatar = models.URLField(blank=True)
    bio = models.CharField(max_length=200, blank=True)
    city = models.CharField(max_length=80, blank=True)

    preferred_positions = models.JSONField(default=list, blank=True, validators=[validate_positions])
    # [{"day_of_week": 0, "time_slots": ["19:00-21:00"]}]
    availability = models.JSONField(default=list, blank=True)

    notify_game_reminders = models.BooleanField(default=True)
    notify_chat_messages = models.BooleanField(default=True)
    notify_promotions = models.BooleanField(default=False)

    games_played = models.PositiveIntegerField(default=0)
    goals = models.PositiveIntegerField(default=0)
    assists = models.PositiveIntegerField(default=0)
    yellow_cards = models.PositiveIntegerField(default=0)
    red_cards = models.PositiveIntegerField(default=0)
    wins = models.PositiveIntegerField(default=0)
    win_rate = models.DecimalField(max_digits=5, decimal_places=1, default=0)

    is_verified = models.BooleanField(default=False)

    def save(self, *args, **kwargs):
        self.phone_number = normalise_phone_number(self.phone_number)
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        return self.name or self.username

    def __str__(self):
        return self.display_name
