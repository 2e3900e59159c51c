from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    class Role(models.TextChoices):
        STUDENT = "STUDENT", "Student"
        FACULTY = "FACULTY", "Faculty"
        HOD = "HOD", "Department Head"
        CARETAKER = "CARETAKER", "Venue Caretaker"

    role = models.CharField(max_length=20, choices=Role.choices, default=Role.STUDENT)
    department = models.CharField(max_length=20, blank=True)

    # Caretakers only: the one venue they manage
    assigned_resource = models.ForeignKey(
        "resources.Resource",
        on_delete=models.SET_NULL,
        related_name="caretakers",
        null=True,
        blank=True,
    )

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"
