from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from footychat.testing import local_dt, make_user, make_venue, next_weekday
from venues.models import Holiday, PeriodSpecialDate, PricePeriod, Promotion
from venues.pricing import calculate_price, redeem_promotion


class CalculatePriceTests(TestCase):
    def setUp(self) -> None:
        self.venue = make_venue()
        self.monday = next_weekday(0)

    def promotion(self, **extra) -> Promotion:
        now = timezone.now()
        defaults = {
            "title": "Morning deal",
            "discount_type": Promotion.DiscountType.PERCENTAGE,
            "discount_value": Decimal("10"),
            "valid_from": now - timedelta(days=1),
            "valid_until": now + timedelta(days=60),
        }
        defaults.update(extra)
        return Promotion.objects.create(venue=self.venue, **defaults)

    def test_normal_period_is_charged_pro_rata(self):
        quote = calculate_price(self.venue, "7v7", local_dt(self.monday, 10), 90)
        self.assertEqual(quote.period, "Normal")
        self.assertEqual(quote.base_price, Decimal("90"))
        self.assertEqual(quote.final_price, Decimal("90.00"))
        self.assertEqual(quote.currency, "EUR")
        self.assertIsNone(quote.promotion)

    def test_peak_period_matches_weekday_evenings(self):
        quote = calculate_price(self.venue, "7v7", local_dt(self.monday, 19), 60)
        self.assertEqual(quote.period, "Peak")
        self.assertEqual(quote.final_price, Decimal("80.00"))

    def test_weekend_evening_falls_back_to_first_period(self):
        sunday = self.monday + timedelta(days=6)
        quote = calculate_price(self.venue, "7v7", local_dt(sunday, 19), 60)
        self.assertEqual(quote.period, "Normal")
        self.assertEqual(quote.final_price, Decimal("60.00"))

    def test_special_date_multiplier(self):
        peak = PricePeriod.objects.get(table__venue=self.venue, name="Peak")
        PeriodSpecialDate.objects.create(period=peak, date=self.monday, multiplier=Decimal("1.5"))
        quote = calculate_price(self.venue, "7v7", local_dt(self.monday, 19), 60)
        self.assertEqual(quote.base_price, Decimal("80"))
        self.assertEqual(quote.final_price, Decimal("120.00"))

    def test_holiday_multiplier(self):
        Holiday.objects.create(
            venue=self.venue, date=self.monday, name="Santo Antonio", is_closed=False,
            price_multiplier=Decimal("2"),
        )
        quote = calculate_price(self.venue, "7v7", local_dt(self.monday, 10), 60)
        self.assertEqual(quote.final_price, Decimal("120.00"))

    def test_rounds_half_up_to_cents(self):
        normal = PricePeriod.objects.get(table__venue=self.venue, name="Normal")
        normal.hourly_rate = Decimal("33.33")
        normal.save()
        quote = calculate_price(self.venue, "7v7", local_dt(self.monday, 10), 50)
        self.assertEqual(quote.final_price, Decimal("27.78"))

    def test_unknown_size_is_rejected(self):
        with self.assertRaises(ValidationError):
            calculate_price(self.venue, "5v5", local_dt(self.monday, 10), 60)

    def test_percentage_promotion_applies(self):
        promo = self.promotion()
        quote = calculate_price(self.venue, "7v7", local_dt(self.monday, 10), 90)
        self.assertEqual(quote.promotion, promo)
        self.assertEqual(quote.base_price, Decimal("90"))
        self.assertEqual(quote.final_price, Decimal("81.00"))
        self.assertEqual(quote.as_dict()["promotion"], "Morning deal")

    def test_fixed_promotion_never_goes_below_zero(self):
        self.promotion(discount_type=Promotion.DiscountType.FIXED, discount_value=Decimal("100"))
        quote = calculate_price(self.venue, "7v7", local_dt(self.monday, 10), 60)
        self.assertEqual(quote.final_price, Decimal("0.00"))

    def test_promotion_conditions_must_all_hold(self):
        self.promotion(sizes=["5v5"])
        self.promotion(days=[5, 6])
        self.promotion(time_slots=[{"start": "06:00", "end": "09:00"}])
        self.promotion(min_booking_hours=Decimal("2"))
        self.promotion(max_uses=3, usage_count=3)
        quote = calculate_price(self.venue, "7v7", local_dt(self.monday, 10), 90)
        self.assertIsNone(quote.promotion)
        self.assertEqual(quote.final_price, Decimal("90.00"))

    def test_expired_promotion_is_ignored(self):
        now = timezone.now()
        self.promotion(valid_from=now - timedelta(days=30), valid_until=now - timedelta(days=1))
        quote = calculate_price(self.venue, "7v7", local_dt(self.monday, 10), 60)
        self.assertIsNone(quote.promotion)

    def test_first_time_only_promotion_skips_returning_users(self):
        user = make_user("ana")
        welcome = self.promotion(first_time_only=True)
        starts_at = local_dt(self.monday, 10)

        self.assertEqual(calculate_price(self.venue, "7v7", starts_at, 60, user=user).promotion, welcome)
        redeem_promotion(welcome, user)
        self.assertIsNone(calculate_price(self.venue, "7v7", starts_at, 60, user=user).promotion)

    def test_redeem_promotion_counts_usage(self):
        user = make_user("rui")
        promo = self.promotion(max_uses_per_user=1)
        redeem_promotion(promo, user)
        self.assertEqual(promo.usage_count, 1)
        quote = calculate_price(self.venue, "7v7", local_dt(self.monday, 10), 60, user=user)
        self.assertIsNone(quote.promotion)

    def test_promotion_code_is_upper_cased(self):
        promo = self.promotion(code="summer10")
        self.assertEqual(promo.code, "SUMMER10")
