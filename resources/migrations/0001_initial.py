from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Resource",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=100)),
                ("department", models.CharField(db_index=True, max_length=20)),
                (
                    "type",
                    models.CharField(
                        choices=[("LAB", "Lab"), ("SEMINAR_HALL", "Seminar Hall")],
                        max_length=20,
                    ),
                ),
                ("capacity", models.PositiveIntegerField()),
                ("features", models.CharField(blank=True, max_length=255)),
                ("description", models.TextField(blank=True)),
            ],
            options={
                "ordering": ["department", "name"],
            },
        ),
    ]
