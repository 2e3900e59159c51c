from datetime import date

from django.contrib.auth import get_user_model

from resources.models import Resource

User = get_user_model()

DAY = date(2024, 3, 20)


def make_resource(name="CSE Lab 101", department="CSE", type_=Resource.Type.LAB):
    return Resource.objects.create(
        name=name,
        department=department,
        type=type_,
        capacity=40,
    )


def make_user(username, role=User.Role.FACULTY, department="CSE", assigned_resource=None):
    return User.objects.create_user(
        username=username,
        password="1234",
        role=role,
        department=department,
        assigned_resource=assigned_resource,
    )
