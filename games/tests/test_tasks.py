from __future__ import annotations

from datetime import time, timedelta
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from django_q.models import Schedule

from footychat.testing import local_dt, make_squad, make_user, make_venue, next_weekday
from games import tasks
from games.models import Attendance, Game, ReminderLog
from notifications.models import Notification
from squads.models import RecurringSlot
from venues.models import BlockedSlot


class ReminderTaskTests(TestCase):
    def setUp(self) -> None:
        self.now = timezone.now()
        self.player = make_user("player")
        self.quiet = make_user("quiet", notify_game_reminders=False)
        self.pending = make_user("pending")
        self.squad = make_squad(self.player, self.quiet, self.pending)

    def game(self, delta: timedelta, **extra) -> Game:
        game = Game.objects.create(
            squad=self.squad, created_by=self.player, starts_at=self.now + delta, **extra
        )
        for user in (self.player, self.quiet):
            Attendance.objects.create(game=game, user=user, status=Attendance.Status.CONFIRMED)
        Attendance.objects.create(game=game, user=self.pending)
        return game

    def test_day_before_reminder_sent_once(self):
        game = self.game(timedelta(hours=20))

        self.assertEqual(tasks.send_due_reminders(self.now), 1)
        reminder = Notification.objects.get(kind=Notification.Kind.GAME_REMINDER)
        self.assertEqual(reminder.recipient, self.player)
        self.assertEqual(reminder.custom_data, {"reminder": "day_before"})
        self.assertTrue(ReminderLog.objects.filter(game=game, kind="day_before").exists())

        self.assertEqual(tasks.send_due_reminders(self.now + timedelta(minutes=15)), 0)

    def test_hour_before_window(self):
        game = self.game(timedelta(minutes=45))
        self.assertEqual(tasks.send_due_reminders(self.now), 2)
        self.assertEqual(
            set(ReminderLog.objects.filter(game=game).values_list("kind", flat=True)),
            {"day_before", "hour_before"},
        )

    def test_disabled_or_distant_games_are_skipped(self):
        self.game(timedelta(hours=30))
        self.game(timedelta(hours=5), remind_day_before=False)
        self.game(timedelta(minutes=30), status=Game.Status.CANCELLED)
        self.assertEqual(tasks.send_due_reminders(self.now), 0)
        self.assertFalse(ReminderLog.objects.exists())

    def test_complete_past_games(self):
        past = self.game(timedelta(hours=-3))
        self.game(timedelta(hours=3))
        self.game(timedelta(hours=-4), status=Game.Status.CANCELLED)
        self.assertEqual(tasks.complete_past_games(self.now), 1)
        past.refresh_from_db()
        self.assertEqual(past.status, Game.Status.COMPLETED)


class AutoCreateWeeklyGamesTests(TestCase):
    def setUp(self) -> None:
        self.admin = make_user("admin")
        self.member = make_user("member")
        self.squad = make_squad(self.admin, self.member)
        self.venue = make_venue()
        self.monday = next_weekday(0)
        self.slot = RecurringSlot.objects.create(
            squad=self.squad, day_of_week=0, kickoff=time(20, 0), venue=self.venue, duration_minutes=60
        )

    def test_creates_next_occurrence_once(self):
        self.assertEqual(tasks.auto_create_weekly_games(self.monday), 1)
        game = Game.objects.get()
        self.assertEqual(game.starts_at, local_dt(self.monday, 20))
        self.assertEqual(game.duration_minutes, 60)
        self.assertEqual(game.created_by, self.admin)
        self.assertTrue(game.is_recurring)

        self.assertEqual(tasks.auto_create_weekly_games(self.monday), 0)

    def test_given_day_sets_the_week(self):
        later = self.monday + timedelta(days=14)
        self.assertEqual(tasks.auto_create_weekly_games(later), 1)
        self.assertEqual(Game.objects.get().starts_at, local_dt(later, 20))

    def test_past_day_never_books_a_past_kickoff(self):
        self.assertEqual(tasks.auto_create_weekly_games(self.monday - timedelta(days=35)), 0)
        self.assertFalse(Game.objects.exists())

    def test_slots_without_venue_or_auto_create_are_ignored(self):
        self.slot.auto_create = False
        self.slot.save()
        RecurringSlot.objects.create(squad=self.squad, day_of_week=2, kickoff=time(20, 0))
        self.assertEqual(tasks.auto_create_weekly_games(self.monday), 0)

    def test_unavailable_slot_is_skipped(self):
        BlockedSlot.objects.create(
            venue=self.venue, starts_at=local_dt(self.monday, 19), ends_at=local_dt(self.monday, 22)
        )
        self.assertEqual(tasks.auto_create_weekly_games(self.monday), 0)
        self.assertFalse(Game.objects.exists())


class ManagementCommandTests(TestCase):
    def test_schedule_housekeeping_is_idempotent(self):
        out = StringIO()
        call_command("schedule_housekeeping", stdout=out)
        call_command("schedule_housekeeping", stdout=out)
        self.assertEqual(Schedule.objects.count(), 4)
        self.assertIn("already scheduled", out.getvalue())

    def test_send_game_reminders_command(self):
        out = StringIO()
        call_command("send_game_reminders", stdout=out)
        self.assertIn("Sent 0 reminders.", out.getvalue())

    def test_seed_demo_data_can_run_twice(self):
        out = StringIO()
        call_command("seed_demo_data", stdout=out)
        call_command("seed_demo_data", stdout=out)
        self.assertEqual(Game.objects.count(), 2)
        self.assertEqual(Game.objects.first().attendances.count(), 6)
        self.assertIn("and 0 games", out.getvalue())
