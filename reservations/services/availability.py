from reservations import slots as catalog
from reservations.models import Reservation


###########################
# Occupancy & conflicts   #
###########################


def occupied_slots(resource_id, date, reservations):
    """
    Union of the slots held by binding reservations on that venue and day.
    Anything else in ``reservations`` is ignored.
    """
    occupied = set()
    for reservation in reservations:
        if (
            reservation.resource_id == resource_id
            and reservation.date == date
            and reservation.is_binding
        ):
            occupied.update(reservation.slots)
    return occupied


def available_slots(resource_id, date, reservations):
    """
    Catalog slots still free on that venue and day, in catalog order.
    """
    occupied = occupied_slots(resource_id, date, reservations)
    return [slot for slot in catalog.all_slots() if slot not in occupied]


def has_conflict(resource_id, date, requested_slots, reservations):
    return not occupied_slots(resource_id, date, reservations).isdisjoint(requested_slots)


###########################
# Store-backed queries    #
###########################


def binding_reservations(*, resource, date):
    return Reservation.binding_for(resource, date).order_by("created_at")


def get_available_slots(*, resource, date):
    return available_slots(
        resource.pk, date, binding_reservations(resource=resource, date=date)
    )


def venue_schedule(*, resource, date):
    """
    Binding reservations for one venue and day, for the schedule board.
    """
    return binding_reservations(resource=resource, date=date).select_related("user")
