from django.urls import path
from .views import (
    availability_view,
    block_view,
    create_reservation_view,
    decide_reservation_view,
    department_reservations_view,
    list_reservations_view,
    record_event_details_view,
    record_outcome_view,
    release_blocks_view,
    reservation_detail_view,
    resource_reservations_view,
    schedule_view,
    unblock_view,
    withdraw_reservation_view,
)

urlpatterns = [
    path("availability/", availability_view),
    path("schedule/", schedule_view),
    path("reservations/", create_reservation_view),
    path("reservations/<int:reservation_id>/", reservation_detail_view),
    path("reservations/<int:reservation_id>/decision/", decide_reservation_view),
    path("reservations/<int:reservation_id>/withdraw/", withdraw_reservation_view),
    path("reservations/<int:reservation_id>/outcome/", record_outcome_view),
    path("reservations/<int:reservation_id>/event-details/", record_event_details_view),
    path("my-reservations/", list_reservations_view),
    path("department-reservations/", department_reservations_view),
    path("resources/<int:resource_id>/reservations/", resource_reservations_view),
    path("blocks/", block_view),
    path("blocks/release/", release_blocks_view),
    path("blocks/<int:reservation_id>/", unblock_view),
]
