from reservations.services.availability import (
    available_slots,
    binding_reservations,
    get_available_slots,
    has_conflict,
    occupied_slots,
    venue_schedule,
)
from reservations.services.lifecycle import (
    block_slots,
    decide_reservation,
    record_event_details,
    record_outcome,
    request_reservation,
    unblock,
    unblock_slots,
    withdraw_reservation,
)
from reservations.services.queries import (
    get_reservation,
    list_for_department,
    list_for_resource,
    list_mine,
)
