from decimal import Decimal

import django.core.validators
import django.utils.timezone
from django.db import migrations, models


def price_field(help_text=""):
    return models.DecimalField(
        decimal_places=0,
        default=Decimal("0"),
        help_text=help_text,
        max_digits=10,
        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
    )


def effective_fields():
    return [
        ("effective_from", models.DateField(default=django.utils.timezone.localdate)),
        ("effective_to", models.DateField(blank=True, null=True)),
        ("is_active", models.BooleanField(default=True)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


SEASON_CHOICES = [("off", "Off-season"), ("on", "On-season")]

MONTH_DAY = django.core.validators.RegexValidator(
    message="Use the MM-DD format.",
    regex="^(0[1-9]|1[0-2])-(0[1-9]|[12]\\d|3[01])$",
)


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="RateMatrixEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *effective_fields(),
                (
                    "age_group",
                    models.CharField(
                        choices=[
                            ("adult", "Adult"),
                            ("student", "Student"),
                            ("child", "Child"),
                            ("infant", "Infant"),
                            ("baby", "Baby"),
                        ],
                        max_length=10,
                    ),
                ),
                (
                    "usage_type",
                    models.CharField(choices=[("shared", "Shared room"), ("private", "Private room")], max_length=10),
                ),
                (
                    "day_type",
                    models.CharField(choices=[("weekday", "Weekday"), ("weekend", "Weekend")], max_length=10),
                ),
                ("season_type", models.CharField(choices=SEASON_CHOICES, max_length=5)),
                ("is_leader", models.BooleanField(default=False)),
                ("price", price_field()),
            ],
            options={
                "verbose_name": "Guest rate",
                "verbose_name_plural": "Guest rate matrix",
                "ordering": ["usage_type", "age_group", "-is_leader", "day_type", "season_type"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("age_group", "usage_type", "day_type", "season_type", "is_leader", "effective_from"),
                        name="unique_guest_rate_cell",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="RoomRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *effective_fields(),
                ("room_type", models.CharField(max_length=20)),
                ("name", models.CharField(blank=True, max_length=100)),
                ("base_rate", price_field()),
            ],
            options={
                "verbose_name": "Room rate",
                "verbose_name_plural": "Room rates",
                "ordering": ["room_type", "-effective_from"],
            },
        ),
        migrations.CreateModel(
            name="AddonRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *effective_fields(),
                ("addon_id", models.SlugField()),
                ("name", models.CharField(max_length=100)),
                (
                    "category",
                    models.CharField(
                        choices=[("meal", "Meal"), ("facility", "Facility"), ("equipment", "Equipment")],
                        max_length=10,
                    ),
                ),
                ("adult_fee", price_field()),
                ("student_fee", price_field()),
                ("child_fee", price_field()),
                ("infant_fee", price_field()),
                ("personal_fee_short", price_field("Per person, under 5 hours.")),
                ("personal_fee_medium", price_field("Per person, 5 to 10 hours.")),
                ("personal_fee_long", price_field("Per person, over 10 hours.")),
                ("room_fee_weekday_guest", price_field()),
                ("room_fee_weekend_guest", price_field()),
                ("room_fee_weekday_other", price_field()),
                ("room_fee_weekend_other", price_field()),
                ("surcharge_per_hour", price_field("Air conditioning, per hour.")),
                ("unit_price", price_field()),
            ],
            options={
                "verbose_name": "Add-on rate",
                "verbose_name_plural": "Add-on rates",
                "ordering": ["category", "addon_id"],
            },
        ),
        migrations.CreateModel(
            name="SeasonPeriod",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("season_type", models.CharField(choices=SEASON_CHOICES, default="on", max_length=5)),
                ("start", models.CharField(max_length=5, validators=[MONTH_DAY])),
                ("end", models.CharField(max_length=5, validators=[MONTH_DAY])),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Season period",
                "verbose_name_plural": "Season periods",
                "ordering": ["start"],
            },
        ),
    ]
