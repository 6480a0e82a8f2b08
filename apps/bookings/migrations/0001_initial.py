import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [
    ("pending", "Pending"),
    ("approved", "Approved"),
    ("confirmed", "Confirmed"),
    ("cancelled", "Cancelled"),
]

PAYMENT_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("completed", "Completed"),
    ("paid", "Paid"),
    ("refunded", "Refunded"),
    ("failed", "Failed"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("tours", "0001_initial"),
        ("experiences", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "product_type",
                    models.CharField(choices=[("tour", "Tour"), ("experience", "Experience")], max_length=20),
                ),
                ("booking_reference", models.CharField(blank=True, db_index=True, max_length=32)),
                ("full_name", models.CharField(blank=True, max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("travel_date", models.DateField()),
                ("number_of_travelers", models.PositiveSmallIntegerField(default=1)),
                (
                    "total_price",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Effective unit price times party size, fixed at creation.",
                        max_digits=12,
                    ),
                ),
                ("currency", models.CharField(default="USD", max_length=3)),
                (
                    "payment_method",
                    models.CharField(
                        blank=True,
                        choices=[("online", "Online"), ("whatsapp", "WhatsApp"), ("cash", "Cash"), ("mpesa", "M-Pesa")],
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(choices=PAYMENT_STATUS_CHOICES, default="pending", max_length=20),
                ),
                ("status", models.CharField(choices=STATUS_CHOICES, default="pending", max_length=20)),
                ("special_requests", models.TextField(blank=True)),
                ("admin_notes", models.TextField(blank=True)),
                ("whatsapp_number", models.CharField(blank=True, max_length=20)),
                ("whatsapp_url", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "experience",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="experiences.experience",
                    ),
                ),
                (
                    "tour",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="tours.tour",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        help_text="Empty for guest experience bookings.",
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
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["product_type", "status"], name="booking_product_status_idx"),
                    models.Index(fields=["travel_date"], name="booking_travel_date_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("experience__isnull", True), ("product_type", "tour"), ("tour__isnull", False)),
                            models.Q(
                                ("experience__isnull", False), ("product_type", "experience"), ("tour__isnull", True)
                            ),
                            _connector="OR",
                        ),
                        name="booking_single_product",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("number_of_travelers__gte", 1)),
                        name="booking_positive_party_size",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingStatusLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_logs",
                        to="bookings.booking",
                    ),
                ),
                (
                    "changed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="booking_status_changes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Status log entry",
                "verbose_name_plural": "Status log",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="BookingPayment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("payment_method", models.CharField(max_length=20)),
                ("status", models.CharField(choices=PAYMENT_STATUS_CHOICES, max_length=20)),
                ("transaction_reference", models.CharField(blank=True, max_length=100)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                        to="bookings.booking",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking payment",
                "verbose_name_plural": "Booking payments",
                "ordering": ["created_at", "id"],
            },
        ),
    ]
