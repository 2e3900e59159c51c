from django.conf import settings


def all_slots():
    """
    Returns the ordered slot catalog shared by every venue.
    """
    return tuple(settings.VENUE_BOOKING_SLOTS)


def is_valid(slot):
    return isinstance(slot, str) and slot in all_slots()


def in_catalog_order(slots):
    wanted = set(slots)
    return [slot for slot in all_slots() if slot in wanted]
