from django.core.management.base import BaseCommand
from django_q.models import Schedule
from django_q.tasks import schedule


JOBS = [
    ("games.tasks.send_due_reminders", Schedule.MINUTES, 15),
    ("games.tasks.complete_past_games", Schedule.HOURLY, None),
    ("games.tasks.auto_create_weekly_games", Schedule.DAILY, None),
    ("notifications.services.prune_expired", Schedule.DAILY, None),
]


class Command(BaseCommand):
    help = "Register the periodic django-q jobs (safe to run repeatedly)"

    def handle(self, *args, **options):
        for func, schedule_type, minutes in JOBS:
            if Schedule.objects.filter(func=func).exists():
                self.stdout.write(f"{func} already scheduled")
                continue
            kwargs = {"name": func.rsplit(".", 1)[-1], "schedule_type": schedule_type}
            if minutes:
                kwargs["minutes"] = minutes
            schedule(func, **kwargs)
            self.stdout.write(f"Scheduled {func}")
        self.stdout.write(self.style.SUCCESS("Housekeeping jobs registered."))
