from django.core.management.base import BaseCommand

from resources.models import Resource

VENUES = [
    ("CSE Lab 101", "CSE", Resource.Type.LAB, 40, "Main computer lab for CSE department"),
    ("CSE Seminar Hall", "CSE", Resource.Type.SEMINAR_HALL, 100, "Main seminar hall for CSE department"),
    ("ISE Lab 201", "ISE", Resource.Type.LAB, 35, "Main computer lab for ISE department"),
    ("ISE Seminar Hall", "ISE", Resource.Type.SEMINAR_HALL, 80, "Main seminar hall for ISE department"),
    ("AIML Lab 301", "AIML", Resource.Type.LAB, 45, "Main computer lab for AIML department"),
    ("AIML Seminar Hall", "AIML", Resource.Type.SEMINAR_HALL, 90, "Main seminar hall for AIML department"),
]


class Command(BaseCommand):
    help = "Create the demo labs and seminar halls"

    def handle(self, *args, **kwargs):
        created = 0
        for name, department, type_, capacity, description in VENUES:
            _, was_created = Resource.objects.get_or_create(
                name=name,
                department=department,
                defaults={
                    "type": type_,
                    "capacity": capacity,
                    "description": description,
                },
            )
            created += was_created
        self.stdout.write(f"Created {created} venues")
