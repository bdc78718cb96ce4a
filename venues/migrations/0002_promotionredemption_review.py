import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


def rating_validators():
    return [django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)]


class Migration(migrations.Migration):

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("games", "0001_initial"),
        ("venues", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PromotionRedemption",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("used_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "game",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="games.game",
                    ),
                ),
                (
                    "promotion",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="redemptions", to="venues.promotion"
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="promotion_redemptions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Review",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("overall", models.PositiveSmallIntegerField(validators=rating_validators())),
                ("field_quality", models.PositiveSmallIntegerField(blank=True, null=True, validators=rating_validators())),
                ("facilities", models.PositiveSmallIntegerField(blank=True, null=True, validators=rating_validators())),
                ("accessibility", models.PositiveSmallIntegerField(blank=True, null=True, validators=rating_validators())),
                ("value_for_money", models.PositiveSmallIntegerField(blank=True, null=True, validators=rating_validators())),
                ("staff", models.PositiveSmallIntegerField(blank=True, null=True, validators=rating_validators())),
                ("title", models.CharField(blank=True, max_length=100)),
                ("comment", models.TextField(blank=True, max_length=1000)),
                ("verified_booking", models.BooleanField(default=False)),
                ("is_visible", models.BooleanField(default=True)),
                ("response_text", models.TextField(blank=True, max_length=1000)),
                ("responded_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "game",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="reviews", to="games.game"
                    ),
                ),
                (
                    "responded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="venue_reviews",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="reviews", to="venues.venue"
                    ),
                ),
            ],
            options={
                "ordering": ("-created_at",),
                "constraints": [
                    models.UniqueConstraint(fields=("venue", "user", "game"), name="unique_review_per_game")
                ],
            },
        ),
    ]
