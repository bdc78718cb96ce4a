from __future__ import annotations

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from footychat.testing import local_dt, make_squad, make_user, make_venue, next_weekday
from games.models import Attendance, Game
from venues.models import BlockedSlot, PitchSize, Promotion, Review


class VenueAPITests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        self.manager = make_user("manager")
        self.venue = make_venue(manager=self.manager, is_verified=True)
        self.porto = make_venue("Arena Norte", "Porto", surface="indoor")
        PitchSize.objects.create(venue=self.porto, name="5v5", quantity=2)
        self.monday = next_weekday(0)

    def test_list_is_public_and_filterable(self):
        response = self.client.get("/api/fields/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 2)

        response = self.client.get("/api/fields/", {"city": "porto"})
        self.assertEqual([venue["name"] for venue in response.json()], ["Arena Norte"])

        response = self.client.get("/api/fields/", {"size": "5v5"})
        self.assertEqual([venue["id"] for venue in response.json()], [self.porto.pk])

    def test_inactive_venues_are_hidden(self):
        self.porto.is_active = False
        self.porto.save()
        response = self.client.get("/api/fields/")
        self.assertEqual([venue["id"] for venue in response.json()], [self.venue.pk])
        self.assertEqual(self.client.get(f"/api/fields/{self.porto.pk}/").status_code, 404)

    def test_detail_and_slug_lookup(self):
        self.assertEqual(self.venue.slug, "campo-central-lisboa")
        response = self.client.get(f"/api/fields/{self.venue.pk}/")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["country"], "PT")
        self.assertEqual(len(data["opening_hours"]), 7)
        self.assertEqual(data["price_tables"][0]["periods"][0]["name"], "Normal")

        response = self.client.get("/api/fields/slug/campo-central-lisboa/")
        self.assertEqual(response.json()["id"], self.venue.pk)

    def test_duplicate_names_get_suffixed_slugs(self):
        twin = make_venue()
        self.assertEqual(twin.slug, "campo-central-lisboa-2")

    def test_promotions_listing(self):
        now = timezone.now()
        Promotion.objects.create(
            venue=self.porto,
            title="Happy hour",
            discount_type=Promotion.DiscountType.PERCENTAGE,
            discount_value=15,
            valid_from=now - timedelta(days=1),
            valid_until=now + timedelta(days=1),
        )
        response = self.client.get("/api/fields/promotions/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 1)
        self.assertEqual(response.json()[0]["promotions"][0]["title"], "Happy hour")
        self.assertTrue(response.json()[0]["has_promotions"])

    def test_popular_needs_verified_and_five_ratings(self):
        self.assertEqual(self.client.get("/api/fields/popular/").json(), [])

        self.venue.rating_count = 5
        self.venue.rating_average = "4.2"
        self.venue.save()
        self.porto.rating_count = 12
        self.porto.save()
        response = self.client.get("/api/fields/popular/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([venue["id"] for venue in response.json()], [self.venue.pk])
        self.assertEqual(self.client.get("/api/fields/popular/", {"city": "Porto"}).json(), [])

    def test_featured_needs_verification(self):
        self.venue.is_featured = True
        self.venue.save()
        self.porto.is_featured = True
        self.porto.save()
        response = self.client.get("/api/fields/featured/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([venue["id"] for venue in response.json()], [self.venue.pk])

    def test_availability_endpoint(self):
        response = self.client.get(
            f"/api/fields/{self.venue.pk}/availability/",
            {"date": self.monday.isoformat(), "duration": 60},
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["size"], "7v7")
        self.assertEqual(data["slots"][0]["start_time"], "09:00")

    def test_availability_requires_date(self):
        response = self.client.get(f"/api/fields/{self.venue.pk}/availability/")
        self.assertEqual(response.status_code, 400)

    def test_quote_endpoint(self):
        response = self.client.get(
            f"/api/fields/{self.venue.pk}/quote/",
            {"start": local_dt(self.monday, 19).isoformat(), "duration": 60},
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["final_price"], "80.00")
        self.assertEqual(data["period"], "Peak")
        self.assertTrue(data["available"])

    def test_quote_for_unknown_size(self):
        response = self.client.get(
            f"/api/fields/{self.venue.pk}/quote/",
            {"start": local_dt(self.monday, 19).isoformat(), "size": "11v11"},
        )
        self.assertEqual(response.status_code, 400)

    def test_schedule_endpoint(self):
        response = self.client.get(f"/api/fields/{self.venue.pk}/schedule/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["days"]), 7)
        self.assertIn("is_open", response.json())

    def test_blocking_requires_manager(self):
        payload = {
            "starts_at": local_dt(self.monday, 10).isoformat(),
            "ends_at": local_dt(self.monday, 12).isoformat(),
            "reason": "Tournament",
        }
        url = f"/api/fields/{self.venue.pk}/blocked-slots/"
        self.assertEqual(self.client.post(url, payload, format="json").status_code, 403)

        self.client.force_authenticate(make_user("stranger"))
        self.assertEqual(self.client.post(url, payload, format="json").status_code, 403)

        self.client.force_authenticate(self.manager)
        response = self.client.post(url, payload, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertTrue(BlockedSlot.objects.filter(venue=self.venue, reason="Tournament").exists())

    def test_review_flow(self):
        player = make_user("player")
        squad = make_squad(player)
        game = Game.objects.create(
            squad=squad,
            venue=self.venue,
            created_by=player,
            starts_at=timezone.now() - timedelta(days=1),
            status=Game.Status.COMPLETED,
        )
        Attendance.objects.create(game=game, user=player, status=Attendance.Status.CONFIRMED)

        url = f"/api/fields/{self.venue.pk}/reviews/"
        self.assertEqual(self.client.post(url, {"game": game.pk, "overall": 4}).status_code, 403)

        self.client.force_authenticate(player)
        response = self.client.post(url, {"game": game.pk, "overall": 4, "comment": "Great"}, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()["verified_booking"])

        response = self.client.post(url, {"game": game.pk, "overall": 2}, format="json")
        self.assertEqual(response.status_code, 400)

        self.client.force_authenticate(None)
        listing = self.client.get(url)
        self.assertEqual(listing.status_code, 200)
        self.assertEqual(listing.json()[0]["comment"], "Great")

        review = Review.objects.get()
        respond_url = f"/api/fields/{self.venue.pk}/reviews/{review.pk}/respond/"
        self.client.force_authenticate(player)
        self.assertEqual(self.client.post(respond_url, {"text": "Me too"}, format="json").status_code, 403)
        self.client.force_authenticate(self.manager)
        response = self.client.post(respond_url, {"text": "Thank you!"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["response_text"], "Thank you!")
