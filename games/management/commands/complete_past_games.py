from django.core.management.base import BaseCommand

from games.tasks import complete_past_games


class Command(BaseCommand):
    help = "Mark scheduled games whose kickoff has passed as completed"

    def handle(self, *args, **options):
        finished = complete_past_games()
        self.stdout.write(self.style.SUCCESS(f"Completed {finished} games."))
