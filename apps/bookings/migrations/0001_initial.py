from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def amount_field():
    return models.DecimalField(decimal_places=0, default=Decimal("0"), max_digits=12)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("rooms", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("booking_code", models.CharField(editable=False, max_length=12, unique=True)),
                ("guest_name", models.CharField(max_length=150)),
                ("guest_email", models.EmailField(blank=True, max_length=254)),
                ("guest_phone", models.CharField(blank=True, max_length=32)),
                ("organization", models.CharField(blank=True, max_length=150)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("cancelled", "Cancelled")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("adult_count", models.PositiveSmallIntegerField(default=0)),
                ("student_count", models.PositiveSmallIntegerField(default=0)),
                ("child_count", models.PositiveSmallIntegerField(default=0)),
                ("infant_count", models.PositiveSmallIntegerField(default=0)),
                ("baby_count", models.PositiveSmallIntegerField(default=0)),
                ("leader_count", models.PositiveSmallIntegerField(default=0)),
                ("addons", models.JSONField(blank=True, default=list)),
                ("room_amount", amount_field()),
                ("guest_amount", amount_field()),
                ("addon_amount", amount_field()),
                ("total_price", amount_field()),
                ("currency", models.CharField(default="JPY", max_length=3)),
                ("rate_config_version", models.CharField(blank=True, max_length=40)),
                ("price_breakdown", models.JSONField(blank=True, default=dict)),
                ("session_id", models.CharField(blank=True, max_length=64)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["start_date", "end_date"], name="booking_dates_idx"),
                    models.Index(fields=["status"], name="booking_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gt", models.F("start_date"))),
                        name="booking_valid_stay",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingRoom",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("assigned_guests", models.PositiveSmallIntegerField(default=0)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="booking_rooms",
                        to="bookings.booking",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="booking_rooms",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booked room",
                "verbose_name_plural": "Booked rooms",
                "constraints": [
                    models.UniqueConstraint(fields=("booking", "room"), name="unique_room_per_booking")
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationLock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("session_id", models.CharField(db_index=True, max_length=64)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "kind",
                    models.CharField(choices=[("hold", "Hold"), ("probe", "Probe")], default="hold", max_length=8),
                ),
                ("acquired_at", models.DateTimeField()),
                ("expires_at", models.DateTimeField(db_index=True)),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservation_locks",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation lock",
                "verbose_name_plural": "Reservation locks",
                "ordering": ["expires_at"],
                "indexes": [models.Index(fields=["room", "start_date", "end_date"], name="lock_room_dates_idx")],
            },
        ),
    ]
