import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from reservations.exceptions import (
    Forbidden,
    InvalidInput,
    InvalidStatus,
    InvalidTransition,
    ReservationNotFound,
    SlotUnavailable,
)
from reservations.models import Reservation, SlotClaim
from reservations.policy import Action, authorize, can
from reservations.requests import clean_slots, parse_date
from reservations.services.availability import has_conflict
from resources.directory import get_resource

logger = logging.getLogger(__name__)

DECISIONS = (Reservation.Status.APPROVED, Reservation.Status.REJECTED)


def _resolve_resource(resource_id):
    resource = get_resource(resource_id)
    if resource is None:
        raise InvalidInput("Resource not found")
    return resource


def _lock_binding(resource, date):
    """
    Locks the day's binding reservations for the rest of the transaction
    and returns them.
    """
    return list(
        Reservation.binding_for(resource, date).select_for_update().order_by("pk")
    )


def _get_for_update(reservation_id):
    try:
        return (
            Reservation.objects.select_for_update()
            .select_related("resource")
            .get(pk=reservation_id)
        )
    except (Reservation.DoesNotExist, ValueError, TypeError):
        raise ReservationNotFound("Reservation not found")


def _ensure_free(resource, date, slots):
    binding = _lock_binding(resource, date)
    if has_conflict(resource.pk, date, slots, binding):
        logger.warning(
            "Slot conflict on resource %s for %s: %s", resource.pk, date, ", ".join(slots)
        )
        raise SlotUnavailable("Some slots are already booked or blocked")


def _claim_slots(reservation):
    claims = [
        SlotClaim(
            reservation=reservation,
            resource=reservation.resource,
            date=reservation.date,
            slot=slot,
        )
        for slot in reservation.slots
    ]

    # A concurrent binding write on the same slot makes this insert fail
    try:
        with transaction.atomic():
            SlotClaim.objects.bulk_create(claims)
    except IntegrityError:
        logger.warning(
            "Lost slot race on resource %s for %s", reservation.resource_id, reservation.date
        )
        raise SlotUnavailable("Some slots are already booked or blocked")


############
# Requests #
############


@transaction.atomic
def request_reservation(*, requester, request):
    """
    Files a pending request for a venue. The whole slot set is accepted or
    the request fails; the department is the venue's, not the requester's.
    """
    authorize(requester, Action.REQUEST)

    resource = _resolve_resource(request.resource_id)

    _ensure_free(resource, request.date, request.slots)

    reservation = Reservation.objects.create(
        user=requester,
        resource=resource,
        department=resource.department,
        date=request.date,
        slots=list(request.slots),
        purpose=request.purpose,
        attendees=request.attendees,
        status=Reservation.Status.PENDING,
        kind=Reservation.Kind.REQUEST,
    )

    logger.info(
        "Reservation %s requested by %s on resource %s for %s",
        reservation.pk,
        requester.pk,
        resource.pk,
        request.date,
    )
    return reservation


@transaction.atomic
def decide_reservation(*, approver, reservation_id, decision):

    if decision not in DECISIONS:
        raise InvalidStatus("Decision must be APPROVED or REJECTED")
    decision = Reservation.Status(decision)

    authorize(approver, Action.DECIDE)

    reservation = _get_for_update(reservation_id)

    authorize(approver, Action.DECIDE, reservation=reservation)

    if reservation.status != Reservation.Status.PENDING:
        raise InvalidTransition("Only pending reservations can be decided")

    if decision == Reservation.Status.APPROVED:
        _ensure_free(reservation.resource, reservation.date, reservation.slots)
        _claim_slots(reservation)

    reservation.status = decision
    reservation.decided_by = approver
    reservation.decided_at = timezone.now()
    reservation.save(update_fields=["status", "decided_by", "decided_at"])

    logger.info("Reservation %s %s by %s", reservation.pk, decision.label.lower(), approver.pk)
    return reservation


@transaction.atomic
def withdraw_reservation(*, requester, reservation_id):

    authorize(requester, Action.WITHDRAW)

    reservation = _get_for_update(reservation_id)

    if not can(requester, Action.WITHDRAW, reservation=reservation):
        # other people's requests are not visible to a requester
        raise ReservationNotFound("Reservation not found")

    if reservation.status != Reservation.Status.PENDING:
        raise InvalidTransition("Only pending reservations can be withdrawn")

    reservation.status = Reservation.Status.REJECTED
    reservation.withdrawn = True
    reservation.decided_by = requester
    reservation.decided_at = timezone.now()
    reservation.save(update_fields=["status", "withdrawn", "decided_by", "decided_at"])

    logger.info("Reservation %s withdrawn by %s", reservation.pk, requester.pk)
    return reservation


@transaction.atomic
def record_outcome(*, caretaker, reservation_id, summary):

    if not isinstance(summary, str) or not summary.strip():
        raise InvalidInput("Outcome summary required")

    authorize(caretaker, Action.RECORD_OUTCOME)

    reservation = _get_for_update(reservation_id)

    authorize(caretaker, Action.RECORD_OUTCOME, reservation=reservation)

    if reservation.is_block or reservation.status != Reservation.Status.APPROVED:
        raise InvalidTransition("Outcomes are recorded on approved requests only")

    reservation.outcome_summary = summary.strip()
    reservation.save(update_fields=["outcome_summary"])

    logger.info("Outcome recorded on reservation %s by %s", reservation.pk, caretaker.pk)
    return reservation


@transaction.atomic
def record_event_details(*, caretaker, reservation_id, details):
    """
    Attaches the event description (duration, audience years, purpose,
    subject) to an approved request on the caretaker's venue. Replaces
    whatever was recorded before.
    """
    authorize(caretaker, Action.RECORD_EVENT_DETAILS)

    reservation = _get_for_update(reservation_id)

    authorize(caretaker, Action.RECORD_EVENT_DETAILS, reservation=reservation)

    if reservation.is_block or reservation.status != Reservation.Status.APPROVED:
        raise InvalidTransition("Event details are recorded on approved requests only")

    reservation.event_details = details.as_dict()
    reservation.save(update_fields=["event_details"])

    logger.info("Event details recorded on reservation %s by %s", reservation.pk, caretaker.pk)
    return reservation


##########
# Blocks #
##########


@transaction.atomic
def block_slots(*, caretaker, request):
    """
    Takes slots out of availability for the caretaker's venue. Blocks are
    binding from the start and skip the approval step.
    """
    authorize(caretaker, Action.BLOCK)

    resource = _resolve_resource(request.resource_id)

    authorize(caretaker, Action.BLOCK, resource=resource)

    _ensure_free(resource, request.date, request.slots)

    reservation = Reservation.objects.create(
        user=caretaker,
        resource=resource,
        department=resource.department,
        date=request.date,
        slots=list(request.slots),
        purpose=request.reason,
        block_reason=request.reason,
        status=Reservation.Status.APPROVED,
        kind=Reservation.Kind.BLOCK,
    )
    _claim_slots(reservation)

    logger.info(
        "Block %s created by %s on resource %s for %s",
        reservation.pk,
        caretaker.pk,
        resource.pk,
        request.date,
    )
    return reservation


@transaction.atomic
def unblock(*, caretaker, reservation_id):

    authorize(caretaker, Action.UNBLOCK)

    reservation = _get_for_update(reservation_id)

    if not reservation.is_block:
        raise Forbidden("Only blocks can be removed")

    authorize(caretaker, Action.UNBLOCK, reservation=reservation)

    pk = reservation.pk
    reservation.delete()

    logger.info("Block %s removed by %s", pk, caretaker.pk)


@transaction.atomic
def unblock_slots(*, caretaker, resource_id, date, slots):
    """
    Removes every block on the caretaker's venue for that day that covers
    any of the given slots. Returns how many blocks were removed.
    """
    slots = set(clean_slots(slots))
    date = parse_date(date)

    authorize(caretaker, Action.UNBLOCK)

    resource = _resolve_resource(resource_id)

    authorize(caretaker, Action.UNBLOCK, resource=resource)

    blocks = Reservation.objects.select_for_update().filter(
        resource=resource,
        date=date,
        kind=Reservation.Kind.BLOCK,
    )
    doomed = [block.pk for block in blocks if slots.intersection(block.slots)]

    Reservation.objects.filter(pk__in=doomed).delete()

    logger.info(
        "%s block(s) removed by %s on resource %s for %s",
        len(doomed),
        caretaker.pk,
        resource.pk,
        date,
    )
    return len(doomed)
