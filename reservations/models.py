from django.conf import settings
from django.db import models
from django.db.models import Q


class Reservation(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        REJECTED = "REJECTED", "Rejected"

    class Kind(models.TextChoices):
        REQUEST = "REQUEST", "Request"
        BLOCK = "BLOCK", "Block"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reservations",
    )
    resource = models.ForeignKey(
        "resources.Resource",
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    # Copied from the resource at creation time, never from the requester
    department = models.CharField(max_length=20, db_index=True)

    date = models.DateField()
    # Catalog slot labels, in catalog order
    slots = models.JSONField()

    purpose = models.TextField(blank=True)
    attendees = models.PositiveIntegerField(null=True, blank=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    kind = models.CharField(
        max_length=20,
        choices=Kind.choices,
        default=Kind.REQUEST,
    )

    block_reason = models.TextField(blank=True)
    outcome_summary = models.TextField(blank=True)
    # duration, year_of_students, usage_purpose, subject_or_type, description
    event_details = models.JSONField(default=dict, blank=True)
    withdrawn = models.BooleanField(default=False)

    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="decisions",
        null=True,
        blank=True,
    )
    decided_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    @staticmethod
    def binding_filter():
        """
        Approved requests and caretaker blocks occupy their slots.
        Pending and rejected requests never do.
        """
        return Q(status=Reservation.Status.APPROVED) | Q(kind=Reservation.Kind.BLOCK)

    @staticmethod
    def binding_for(resource, date):
        return Reservation.objects.filter(
            Reservation.binding_filter(),
            resource=resource,
            date=date,
        )

    @property
    def is_binding(self):
        return self.kind == self.Kind.BLOCK or self.status == self.Status.APPROVED

    @property
    def is_block(self):
        return self.kind == self.Kind.BLOCK

    class Meta:
        indexes = [
            models.Index(fields=["resource", "date"], name="reservation_resource_date_idx"),
        ]
        ordering = ["date", "created_at"]

    def __str__(self):
        return f"{self.resource} | {self.date} {', '.join(self.slots)} [{self.status}]"


class SlotClaim(models.Model):
    """
    One row per slot held by a binding reservation. The unique constraint
    is what makes two concurrent approvals or blocks of the same slot
    impossible: the second insert fails inside its transaction.
    """

    reservation = models.ForeignKey(
        Reservation,
        on_delete=models.CASCADE,
        related_name="claims",
    )
    resource = models.ForeignKey(
        "resources.Resource",
        on_delete=models.CASCADE,
        related_name="slot_claims",
    )
    date = models.DateField()
    slot = models.CharField(max_length=32)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["resource", "date", "slot"],
                name="unique_claimed_slot",
            ),
        ]

    def __str__(self):
        return f"{self.resource_id} | {self.date} {self.slot}"
