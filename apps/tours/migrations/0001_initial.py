import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Service",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150, unique=True)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Tour",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("slug", models.SlugField(max_length=255, unique=True)),
                (
                    "duration",
                    models.PositiveSmallIntegerField(
                        default=1, help_text="Duration in days for tours, in hours for experiences."
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "discount_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("summary", models.CharField(blank=True, max_length=500)),
                ("description", models.TextField(blank=True)),
                ("max_group_size", models.PositiveSmallIntegerField(default=10)),
                (
                    "difficulty",
                    models.CharField(
                        choices=[("easy", "Easy"), ("medium", "Medium"), ("difficult", "Difficult")],
                        default="medium",
                        max_length=20,
                    ),
                ),
                ("featured", models.BooleanField(default=False)),
            ],
            options={
                "verbose_name": "Tour",
                "verbose_name_plural": "Tours",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="TourItinerary",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("day", models.PositiveSmallIntegerField()),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "tour",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="itinerary", to="tours.tour"
                    ),
                ),
            ],
            options={
                "verbose_name": "Itinerary day",
                "verbose_name_plural": "Itinerary",
                "ordering": ["tour", "day"],
            },
        ),
        migrations.AddConstraint(
            model_name="touritinerary",
            constraint=models.UniqueConstraint(fields=("tour", "day"), name="tour_itinerary_unique_day"),
        ),
        migrations.CreateModel(
            name="TourIncludedService",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("details", models.CharField(blank=True, max_length=255)),
                (
                    "service",
                    models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tours.service"),
                ),
                (
                    "tour",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="included_service_links",
                        to="tours.tour",
                    ),
                ),
            ],
        ),
        migrations.AddConstraint(
            model_name="tourincludedservice",
            constraint=models.UniqueConstraint(fields=("tour", "service"), name="tour_included_service_unique"),
        ),
        migrations.CreateModel(
            name="TourExcludedService",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("details", models.CharField(blank=True, max_length=255)),
                (
                    "service",
                    models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tours.service"),
                ),
                (
                    "tour",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="excluded_service_links",
                        to="tours.tour",
                    ),
                ),
            ],
        ),
        migrations.AddConstraint(
            model_name="tourexcludedservice",
            constraint=models.UniqueConstraint(fields=("tour", "service"), name="tour_excluded_service_unique"),
        ),
        migrations.AddField(
            model_name="tour",
            name="included_services",
            field=models.ManyToManyField(
                blank=True,
                related_name="included_in_tours",
                through="tours.TourIncludedService",
                to="tours.service",
            ),
        ),
        migrations.AddField(
            model_name="tour",
            name="excluded_services",
            field=models.ManyToManyField(
                blank=True,
                related_name="excluded_from_tours",
                through="tours.TourExcludedService",
                to="tours.service",
            ),
        ),
    ]
