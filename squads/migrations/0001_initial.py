import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("venues", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Squad",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50)),
                ("avatar", models.URLField(blank=True)),
                ("description", models.CharField(blank=True, max_length=500)),
                (
                    "max_members",
                    models.PositiveIntegerField(
                        default=30,
                        validators=[
                            django.core.validators.MinValueValidator(10),
                            django.core.validators.MaxValueValidator(50),
                        ],
                    ),
                ),
                ("is_private", models.BooleanField(default=False)),
                ("require_approval", models.BooleanField(default=True)),
                ("allow_guest_players", models.BooleanField(default=False)),
                ("default_game_duration", models.PositiveIntegerField(default=90)),
                ("require_advance_payment", models.BooleanField(default=False)),
                ("refund_deadline_hours", models.PositiveIntegerField(default=24)),
                ("total_games", models.PositiveIntegerField(default=0)),
                ("total_goals", models.PositiveIntegerField(default=0)),
                ("average_attendance", models.DecimalField(decimal_places=1, default=0, max_digits=5)),
                ("invite_code", models.CharField(blank=True, max_length=12, null=True, unique=True)),
                ("last_activity", models.DateTimeField(default=django.utils.timezone.now)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="created_squads",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "default_venue",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="venues.venue",
                    ),
                ),
            ],
            options={"ordering": ("-last_activity",)},
        ),
        migrations.CreateModel(
            name="Membership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "role",
                    models.CharField(
                        choices=[("admin", "Admin"), ("moderator", "Moderator"), ("member", "Member")],
                        default="member",
                        max_length=10,
                    ),
                ),
                ("joined_at", models.DateTimeField(auto_now_add=True)),
                ("is_paying", models.BooleanField(default=True)),
                (
                    "squad",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to="squads.squad"
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="squad_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"ordering": ("joined_at", "pk"), "unique_together": {("squad", "user")}},
        ),
        migrations.CreateModel(
            name="RecurringSlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "day_of_week",
                    models.PositiveSmallIntegerField(validators=[django.core.validators.MaxValueValidator(6)]),
                ),
                ("kickoff", models.TimeField()),
                ("duration_minutes", models.PositiveIntegerField(default=90)),
                ("auto_create", models.BooleanField(default=True)),
                (
                    "squad",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="recurring_slots", to="squads.squad"
                    ),
                ),
                (
                    "venue",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="venues.venue",
                    ),
                ),
            ],
            options={"ordering": ("day_of_week", "kickoff")},
        ),
    ]
