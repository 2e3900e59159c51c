from reservations.exceptions import Forbidden, InvalidInput, ReservationNotFound
from reservations.models import Reservation
from reservations.policy import Action, authorize, visible_reservations
from reservations.requests import parse_date
from resources.directory import get_resource


def list_mine(*, user):
    return (
        Reservation.objects.filter(user=user, kind=Reservation.Kind.REQUEST)
        .select_related("resource")
        .order_by("-created_at")
    )


def list_for_department(*, actor, department=None):
    """
    Every reservation on the department's venues, newest first.
    Department heads only, and only for their own department.
    """
    authorize(actor, Action.VIEW_DEPARTMENT)

    if not actor.department:
        return Reservation.objects.none()

    department = department or actor.department
    if department != actor.department:
        raise Forbidden("Not allowed to view another department")

    return (
        Reservation.objects.filter(department=department)
        .select_related("resource", "user")
        .order_by("-created_at")
    )


def list_for_resource(*, actor, resource_id, start=None, end=None):

    authorize(actor, Action.VIEW_RESOURCE)

    resource = get_resource(resource_id)
    if resource is None:
        raise InvalidInput("Resource not found")

    authorize(actor, Action.VIEW_RESOURCE, resource=resource)

    reservations = Reservation.objects.filter(resource=resource)

    if start is not None:
        reservations = reservations.filter(date__gte=parse_date(start))
    if end is not None:
        reservations = reservations.filter(date__lte=parse_date(end))

    return reservations.select_related("user").order_by("date", "created_at")


def get_reservation(*, actor, reservation_id):
    try:
        return (
            Reservation.objects.filter(visible_reservations(actor))
            .select_related("resource")
            .get(pk=reservation_id)
        )
    except (Reservation.DoesNotExist, ValueError, TypeError):
        raise ReservationNotFound("Reservation not found")
