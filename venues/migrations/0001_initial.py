import django.core.validators
import django.db.models.deletion
import django_countries.fields
from django.conf import settings
from django.db import migrations, models


PITCH_SIZES = [
    ("3v3", "3v3"),
    ("5v5", "5v5"),
    ("6v6", "6v6"),
    ("7v7", "7v7"),
    ("8v8", "8v8"),
    ("9v9", "9v9"),
    ("11v11", "11v11"),
    ("futsal", "Futsal"),
]
WEEKDAY_VALIDATORS = [
    django.core.validators.MinValueValidator(0),
    django.core.validators.MaxValueValidator(6),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Venue",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("slug", models.SlugField(blank=True, max_length=160, unique=True)),
                ("description", models.TextField(blank=True, max_length=1000)),
                ("address", models.CharField(max_length=200)),
                ("city", models.CharField(max_length=80)),
                ("district", models.CharField(blank=True, max_length=80)),
                (
                    "postal_code",
                    models.CharField(
                        blank=True,
                        max_length=8,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^\\d{4}-\\d{3}$", "Postal code must look like 1000-001."
                            )
                        ],
                    ),
                ),
                ("country", django_countries.fields.CountryField(default="PT", max_length=2)),
                (
                    "latitude",
                    models.DecimalField(
                        blank=True,
                        decimal_places=6,
                        max_digits=9,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(-90),
                            django.core.validators.MaxValueValidator(90),
                        ],
                    ),
                ),
                (
                    "longitude",
                    models.DecimalField(
                        blank=True,
                        decimal_places=6,
                        max_digits=9,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(-180),
                            django.core.validators.MaxValueValidator(180),
                        ],
                    ),
                ),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("website", models.URLField(blank=True)),
                (
                    "surface",
                    models.CharField(
                        choices=[
                            ("natural_grass", "Natural grass"),
                            ("synthetic", "Synthetic"),
                            ("hybrid", "Hybrid"),
                            ("indoor", "Indoor"),
                            ("beach", "Beach"),
                            ("futsal", "Futsal"),
                        ],
                        default="synthetic",
                        max_length=20,
                    ),
                ),
                (
                    "quality",
                    models.CharField(
                        choices=[("excellent", "Excellent"), ("good", "Good"), ("fair", "Fair"), ("poor", "Poor")],
                        default="good",
                        max_length=10,
                    ),
                ),
                ("has_lighting", models.BooleanField(default=False)),
                ("has_parking", models.BooleanField(default=False)),
                ("has_changing_rooms", models.BooleanField(default=False)),
                ("has_showers", models.BooleanField(default=False)),
                ("provides_balls", models.BooleanField(default=False)),
                ("provides_bibs", models.BooleanField(default=False)),
                ("min_advance_hours", models.PositiveIntegerField(default=2)),
                ("max_advance_hours", models.PositiveIntegerField(default=720)),
                ("cancellation_deadline_hours", models.PositiveIntegerField(default=24)),
                (
                    "refund_policy",
                    models.CharField(
                        choices=[("full", "Full"), ("partial", "Partial"), ("none", "None")],
                        default="partial",
                        max_length=10,
                    ),
                ),
                ("requires_deposit", models.BooleanField(default=False)),
                (
                    "deposit_percentage",
                    models.PositiveIntegerField(default=50, validators=[django.core.validators.MaxValueValidator(100)]),
                ),
                ("allow_waitlist", models.BooleanField(default=True)),
                ("is_active", models.BooleanField(default=True)),
                ("is_verified", models.BooleanField(default=False)),
                ("is_featured", models.BooleanField(default=False)),
                ("temporarily_closed", models.BooleanField(default=False)),
                ("under_maintenance", models.BooleanField(default=False)),
                ("rating_average", models.DecimalField(decimal_places=1, default=0, max_digits=3)),
                ("rating_count", models.PositiveIntegerField(default=0)),
                ("rating_distribution", models.JSONField(blank=True, default=dict)),
                ("rating_aspects", models.JSONField(blank=True, default=dict)),
                ("rating_calculated_at", models.DateTimeField(blank=True, null=True)),
                ("total_bookings", models.PositiveIntegerField(default=0)),
                ("current_month_bookings", models.PositiveIntegerField(default=0)),
                ("cancellation_rate", models.DecimalField(decimal_places=1, default=0, max_digits=5)),
                ("deactivated_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "manager",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="managed_venues",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"ordering": ("name",)},
        ),
        migrations.CreateModel(
            name="VenueModerator",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("permissions", models.JSONField(blank=True, default=list)),
                ("added_at", models.DateTimeField(auto_now_add=True)),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="moderators", to="venues.venue"
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="moderated_venues",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"unique_together": {("venue", "user")}},
        ),
        migrations.CreateModel(
            name="PitchSize",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(choices=PITCH_SIZES, max_length=10)),
                (
                    "quantity",
                    models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("length_m", models.PositiveIntegerField(blank=True, null=True)),
                ("width_m", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="pitch_sizes", to="venues.venue"
                    ),
                ),
            ],
            options={"ordering": ("name",), "unique_together": {("venue", "name")}},
        ),
        migrations.CreateModel(
            name="PriceTable",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("size", models.CharField(choices=PITCH_SIZES, max_length=10)),
                ("currency", models.CharField(default="EUR", max_length=3)),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="price_tables", to="venues.venue"
                    ),
                ),
            ],
            options={"unique_together": {("venue", "size")}},
        ),
        migrations.CreateModel(
            name="PricePeriod",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50)),
                (
                    "hourly_rate",
                    models.DecimalField(
                        decimal_places=2, max_digits=8, validators=[django.core.validators.MinValueValidator(0)]
                    ),
                ),
                ("minimum_hours", models.DecimalField(decimal_places=1, default=1, max_digits=4)),
                ("order", models.PositiveIntegerField(default=0)),
                (
                    "table",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="periods", to="venues.pricetable"
                    ),
                ),
            ],
            options={"ordering": ("order", "pk")},
        ),
        migrations.CreateModel(
            name="PeriodTimeSlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("days_of_week", models.JSONField(default=list)),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                (
                    "period",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="time_slots", to="venues.priceperiod"
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="PeriodSpecialDate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("multiplier", models.DecimalField(decimal_places=2, default=1, max_digits=4)),
                (
                    "period",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="special_dates",
                        to="venues.priceperiod",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="OpeningHours",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("day_of_week", models.PositiveSmallIntegerField(validators=WEEKDAY_VALIDATORS)),
                ("open_time", models.TimeField()),
                ("close_time", models.TimeField()),
                ("break_start", models.TimeField(blank=True, null=True)),
                ("break_end", models.TimeField(blank=True, null=True)),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="opening_hours", to="venues.venue"
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "opening hours",
                "ordering": ("day_of_week",),
                "unique_together": {("venue", "day_of_week")},
            },
        ),
        migrations.CreateModel(
            name="Holiday",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("name", models.CharField(max_length=100)),
                ("is_closed", models.BooleanField(default=True)),
                ("special_open_time", models.TimeField(blank=True, null=True)),
                ("special_close_time", models.TimeField(blank=True, null=True)),
                ("price_multiplier", models.DecimalField(decimal_places=2, default=1, max_digits=4)),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="holidays", to="venues.venue"
                    ),
                ),
            ],
            options={"ordering": ("date",)},
        ),
        migrations.CreateModel(
            name="BlockedSlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("starts_at", models.DateTimeField()),
                ("ends_at", models.DateTimeField()),
                ("reason", models.CharField(blank=True, max_length=200)),
                (
                    "recurrence",
                    models.CharField(
                        choices=[("none", "None"), ("daily", "Daily"), ("weekly", "Weekly"), ("monthly", "Monthly")],
                        default="none",
                        max_length=10,
                    ),
                ),
                ("recurrence_until", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="blocked_slots", to="venues.venue"
                    ),
                ),
            ],
            options={"ordering": ("starts_at",)},
        ),
        migrations.CreateModel(
            name="MaintenanceWindow",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("day_of_week", models.PositiveSmallIntegerField(validators=WEEKDAY_VALIDATORS)),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("cleaning", "Cleaning"),
                            ("repair", "Repair"),
                            ("renovation", "Renovation"),
                            ("other", "Other"),
                        ],
                        default="cleaning",
                        max_length=12,
                    ),
                ),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="maintenance_windows",
                        to="venues.venue",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Promotion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=100)),
                ("description", models.CharField(blank=True, max_length=500)),
                ("code", models.CharField(blank=True, max_length=30)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("discount", "Discount"),
                            ("package", "Package"),
                            ("freebie", "Freebie"),
                            ("early_bird", "Early bird"),
                            ("last_minute", "Last minute"),
                        ],
                        default="discount",
                        max_length=12,
                    ),
                ),
                (
                    "discount_type",
                    models.CharField(
                        blank=True,
                        choices=[("percentage", "Percentage"), ("fixed", "Fixed"), ("bogo", "Buy one get one")],
                        max_length=10,
                    ),
                ),
                (
                    "discount_value",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=8,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("min_booking_hours", models.DecimalField(blank=True, decimal_places=1, max_digits=4, null=True)),
                ("min_players", models.PositiveIntegerField(blank=True, null=True)),
                ("sizes", models.JSONField(blank=True, default=list)),
                ("days", models.JSONField(blank=True, default=list)),
                ("time_slots", models.JSONField(blank=True, default=list)),
                ("first_time_only", models.BooleanField(default=False)),
                ("member_only", models.BooleanField(default=False)),
                ("max_uses", models.PositiveIntegerField(blank=True, null=True)),
                ("max_uses_per_user", models.PositiveIntegerField(blank=True, null=True)),
                ("valid_from", models.DateTimeField()),
                ("valid_until", models.DateTimeField()),
                ("usage_count", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="promotions", to="venues.venue"
                    ),
                ),
            ],
            options={"ordering": ("valid_from", "pk")},
        ),
    ]
