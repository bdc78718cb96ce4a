"""Price resolution for venue bookings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .models import PricePeriod, Promotion, PromotionRedemption, Venue

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

__all__ = [
    "PriceQuote",
    "calculate_price",
    "active_promotion",
    "apply_promotion",
    "redeem_promotion",
]


@dataclass(frozen=True)
class PriceQuote:
    base_price: Decimal
    final_price: Decimal
    period: str
    promotion: Optional[Promotion]
    currency: str

    def as_dict(self) -> dict:
        return {
            "base_price": str(self.base_price),
            "final_price": str(self.final_price),
            "period": self.period,
            "promotion": self.promotion.title if self.promotion else None,
            "currency": self.currency,
        }


def _local(at: datetime) -> datetime:
    if timezone.is_naive(at):
        at = timezone.make_aware(at)
    return timezone.localtime(at).replace(second=0, microsecond=0)


def _matching_period(periods: list[PricePeriod], weekday: int, at_time) -> PricePeriod:
    for period in periods:
        for slot in period.time_slots.all():
            if slot.covers(weekday, at_time):
                return period
    return periods[0]


def _in_time_slots(slots: list[dict], clock: str) -> bool:
    return any(slot.get("start", "00:00") <= clock <= slot.get("end", "23:59") for slot in slots)


def active_promotion(
    venue: Venue,
    at: datetime,
    size: str,
    duration_minutes: int,
    *,
    user=None,
) -> Promotion | None:
    """Return the first promotion whose every condition holds for this booking."""

    local = _local(at)
    weekday = local.weekday()
    clock = local.strftime("%H:%M")

    candidates = venue.promotions.filter(
        is_active=True, valid_from__lte=at, valid_until__gte=at
    ).order_by("valid_from", "pk")

    for promotion in candidates:
        if promotion.min_booking_hours and duration_minutes < promotion.min_booking_hours * 60:
            continue
        if promotion.sizes and size not in promotion.sizes:
            continue
        if promotion.days and weekday not in promotion.days:
            continue
        if promotion.time_slots and not _in_time_slots(promotion.time_slots, clock):
            continue
        if promotion.max_uses and promotion.usage_count >= promotion.max_uses:
            continue
        if user is not None and getattr(user, "pk", None):
            redemptions = promotion.redemptions.filter(user_id=user.pk)
            if promotion.max_uses_per_user and redemptions.count() >= promotion.max_uses_per_user:
                continue
            if (
                promotion.first_time_only
                and PromotionRedemption.objects.filter(
                    user_id=user.pk, promotion__venue=venue
                ).exists()
            ):
                continue
        return promotion
    return None


def apply_promotion(price: Decimal, promotion: Promotion | None) -> Decimal:
    if promotion is None or promotion.discount_value is None:
        return price
    value = Decimal(promotion.discount_value)
    if promotion.discount_type == Promotion.DiscountType.PERCENTAGE:
        return price * (1 - value / 100)
    if promotion.discount_type == Promotion.DiscountType.FIXED:
        return max(Decimal("0"), price - value)
    # Buy-one-get-one only matters across several bookings.
    return price


def calculate_price(
    venue: Venue,
    size: str,
    starts_at: datetime,
    duration_minutes: int,
    *,
    user=None,
) -> PriceQuote:
    """Quote a booking of ``size`` at ``starts_at`` for ``duration_minutes``.

    The first period with a time slot covering the local kickoff applies,
    falling back to the first period of the table. Special-date and holiday
    multipliers are applied before the first eligible promotion.
    """

    table = venue.price_tables.filter(size=size).first()
    if table is None:
        raise ValidationError(f"Size {size} is not available at this venue.")
    periods = list(table.periods.prefetch_related("time_slots", "special_dates"))
    if not periods:
        raise ValidationError(f"No prices configured for size {size}.")

    local = _local(starts_at)
    period = _matching_period(periods, local.weekday(), local.time())

    base = Decimal(period.hourly_rate) * Decimal(duration_minutes) / Decimal(60)
    price = base

    for special in period.special_dates.all():
        if special.date == local.date():
            price *= Decimal(special.multiplier)
            break

    holiday = venue.holidays.filter(date=local.date()).first()
    if holiday is not None and holiday.price_multiplier:
        price *= Decimal(holiday.price_multiplier)

    promotion = active_promotion(venue, starts_at, size, duration_minutes, user=user)
    price = apply_promotion(price, promotion)

    return PriceQuote(
        base_price=base,
        final_price=price.quantize(CENT, rounding=ROUND_HALF_UP),
        period=period.name,
        promotion=promotion,
        currency=table.currency or "EUR",
    )


@transaction.atomic
def redeem_promotion(promotion: Promotion, user, game=None) -> PromotionRedemption:
    redemption = PromotionRedemption.objects.create(promotion=promotion, user=user, game=game)
    Promotion.objects.filter(pk=promotion.pk).update(usage_count=F("usage_count") + 1)
    promotion.refresh_from_db(fields=["usage_count"])
    logger.info("Promotion %s redeemed by user %s", promotion.pk, user.pk)
    return redemption
