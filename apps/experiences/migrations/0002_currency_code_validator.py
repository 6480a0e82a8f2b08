import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("experiences", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="experience",
            name="currency",
            field=models.CharField(
                default="USD",
                max_length=3,
                validators=[
                    django.core.validators.RegexValidator(
                        message="Use a three-letter ISO 4217 code in capitals, e.g. USD.",
                        regex="^[A-Z]{3}$",
                    )
                ],
            ),
        ),
    ]
