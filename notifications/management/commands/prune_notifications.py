from django.core.management.base import BaseCommand

from notifications.services import prune_expired


class Command(BaseCommand):
    help = "Delete notifications older than NOTIFICATION_RETENTION_DAYS"

    def handle(self, *args, **options):
        deleted = prune_expired()
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} notifications."))
