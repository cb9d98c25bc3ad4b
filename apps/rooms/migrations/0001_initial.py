from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Room",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("room_id", models.CharField(max_length=32, unique=True)),
                ("name", models.CharField(max_length=100)),
                (
                    "room_type",
                    models.CharField(
                        choices=[
                            ("large", "Large room"),
                            ("medium_a", "Medium room A"),
                            ("medium_b", "Medium room B"),
                            ("small_a", "Private room A"),
                            ("small_b", "Private room B"),
                            ("small_c", "Private room C"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "capacity",
                    models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                (
                    "base_rate",
                    models.DecimalField(
                        decimal_places=0,
                        default=Decimal("0"),
                        help_text="Room's own nightly rate, used when the rate table has no entry for its type.",
                        max_digits=10,
                    ),
                ),
                ("floor", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("amenities", models.JSONField(blank=True, default=list)),
                ("description", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Room",
                "verbose_name_plural": "Rooms",
                "ordering": ["room_id"],
                "indexes": [models.Index(fields=["is_active", "room_type"], name="room_active_type_idx")],
            },
        ),
    ]
