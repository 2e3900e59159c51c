from django.db import models


class Resource(models.Model):
    class Type(models.TextChoices):
        LAB = "LAB", "Lab"
        SEMINAR_HALL = "SEMINAR_HALL", "Seminar Hall"

    name = models.CharField(max_length=100)
    # owning department, reservations are scoped by it
    department = models.CharField(max_length=20, db_index=True)
    type = models.CharField(max_length=20, choices=Type.choices)
    capacity = models.PositiveIntegerField()
    features = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ["department", "name"]

    def __str__(self):
        return f"{self.name} ({self.department})"
