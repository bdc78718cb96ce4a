from django.core.management.base import BaseCommand

from games.tasks import send_due_reminders


class Command(BaseCommand):
    help = "Send day-before and hour-before reminders for upcoming games"

    def handle(self, *args, **options):
        sent = send_due_reminders()
        self.stdout.write(self.style.SUCCESS(f"Sent {sent} reminders."))
