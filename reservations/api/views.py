import json
from functools import wraps

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from reservations.exceptions import (
    Forbidden,
    InvalidInput,
    InvalidTransition,
    ReservationNotFound,
    SlotUnavailable,
)
from reservations.requests import BlockRequest, EventDetails, ReservationRequest, parse_date
from reservations.services import (
    block_slots,
    decide_reservation,
    get_available_slots,
    get_reservation,
    list_for_department,
    list_for_resource,
    list_mine,
    record_event_details,
    record_outcome,
    request_reservation,
    unblock,
    unblock_slots,
    venue_schedule,
    withdraw_reservation,
)
from resources.directory import get_resource

ERROR_STATUS = (
    (InvalidInput, 400),
    (SlotUnavailable, 409),
    (Forbidden, 403),
    (InvalidTransition, 409),
    (ReservationNotFound, 404),
)


def error_response(message, status_code):
    return JsonResponse({"error": message}, status=status_code)


def reservation_endpoint(view):
    """
    Rejects anonymous callers and turns service errors into JSON responses.
    """

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return error_response("Authentication required", 401)

        try:
            return view(request, *args, **kwargs)
        except tuple(error for error, _ in ERROR_STATUS) as e:
            status_code = next(code for error, code in ERROR_STATUS if isinstance(e, error))
            return error_response(str(e), status_code)

    return wrapper


def read_json(request):
    try:
        return json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidInput("Invalid JSON")


def serialize_reservation(r):
    return {
        "id": r.id,
        "user_id": r.user_id,
        "resource_id": r.resource_id,
        "department": r.department,
        "date": r.date.isoformat(),
        "slots": list(r.slots),
        "purpose": r.purpose,
        "attendees": r.attendees,
        "status": r.status,
        "kind": r.kind,
        "block_reason": r.block_reason,
        "outcome_summary": r.outcome_summary,
        "event_details": r.event_details,
        "withdrawn": r.withdrawn,
        "created_at": r.created_at.isoformat(),
    }


def _resource_and_date(request):
    resource_id = request.GET.get("resource_id")
    date_str = request.GET.get("date")

    if not resource_id or not date_str:
        raise InvalidInput("resource_id and date are required")

    date = parse_date(date_str)

    resource = get_resource(resource_id)
    if resource is None:
        raise InvalidInput("Resource not found")

    return resource, date


@require_GET
@reservation_endpoint
def availability_view(request):

    resource, date = _resource_and_date(request)

    slots = get_available_slots(resource=resource, date=date)

    return JsonResponse(
        {
            "resource_id": resource.id,
            "name": resource.name,
            "date": date.isoformat(),
            "slots": slots,
        }
    )


@require_GET
@reservation_endpoint
def schedule_view(request):

    resource, date = _resource_and_date(request)

    entries = [
        {
            "id": r.id,
            "slots": list(r.slots),
            "kind": r.kind,
            "purpose": r.purpose,
            "booked_by": r.user.get_username(),
        }
        for r in venue_schedule(resource=resource, date=date)
    ]

    return JsonResponse(
        {"resource_id": resource.id, "date": date.isoformat(), "schedule": entries}
    )


@csrf_exempt
@require_POST
@reservation_endpoint
def create_reservation_view(request):

    reservation_request = ReservationRequest.from_payload(read_json(request))

    reservation = request_reservation(
        requester=request.user,
        request=reservation_request,
    )

    return JsonResponse(serialize_reservation(reservation), status=201)


@require_GET
@reservation_endpoint
def reservation_detail_view(request, reservation_id):

    reservation = get_reservation(actor=request.user, reservation_id=reservation_id)

    return JsonResponse(serialize_reservation(reservation))


@csrf_exempt
@require_POST
@reservation_endpoint
def decide_reservation_view(request, reservation_id):

    data = read_json(request)
    if not isinstance(data, dict) or set(data) != {"decision"}:
        raise InvalidInput("Body must contain exactly: decision")

    reservation = decide_reservation(
        approver=request.user,
        reservation_id=reservation_id,
        decision=data["decision"],
    )

    return JsonResponse({"id": reservation.id, "status": reservation.status})


@csrf_exempt
@require_POST
@reservation_endpoint
def withdraw_reservation_view(request, reservation_id):

    reservation = withdraw_reservation(
        requester=request.user,
        reservation_id=reservation_id,
    )

    return JsonResponse({"id": reservation.id, "status": reservation.status})


@csrf_exempt
@require_POST
@reservation_endpoint
def record_outcome_view(request, reservation_id):

    data = read_json(request)
    if not isinstance(data, dict) or set(data) != {"summary"}:
        raise InvalidInput("Body must contain exactly: summary")

    reservation = record_outcome(
        caretaker=request.user,
        reservation_id=reservation_id,
        summary=data["summary"],
    )

    return JsonResponse(serialize_reservation(reservation))


@csrf_exempt
@require_POST
@reservation_endpoint
def record_event_details_view(request, reservation_id):

    details = EventDetails.from_payload(read_json(request))

    reservation = record_event_details(
        caretaker=request.user,
        reservation_id=reservation_id,
        details=details,
    )

    return JsonResponse(serialize_reservation(reservation))


@require_GET
@reservation_endpoint
def list_reservations_view(request):

    data = [serialize_reservation(r) for r in list_mine(user=request.user)]

    return JsonResponse({"reservations": data})


@require_GET
@reservation_endpoint
def department_reservations_view(request):

    reservations = list_for_department(
        actor=request.user,
        department=request.GET.get("department"),
    )

    return JsonResponse({"reservations": [serialize_reservation(r) for r in reservations]})


@require_GET
@reservation_endpoint
def resource_reservations_view(request, resource_id):

    reservations = list_for_resource(
        actor=request.user,
        resource_id=resource_id,
        start=request.GET.get("start"),
        end=request.GET.get("end"),
    )

    return JsonResponse({"reservations": [serialize_reservation(r) for r in reservations]})


@csrf_exempt
@require_POST
@reservation_endpoint
def block_view(request):

    block_request = BlockRequest.from_payload(read_json(request))

    reservation = block_slots(caretaker=request.user, request=block_request)

    return JsonResponse(serialize_reservation(reservation), status=201)


@csrf_exempt
@require_http_methods(["DELETE"])
@reservation_endpoint
def unblock_view(request, reservation_id):

    unblock(caretaker=request.user, reservation_id=reservation_id)

    return JsonResponse({"message": "Block removed"}, status=200)


@csrf_exempt
@require_POST
@reservation_endpoint
def release_blocks_view(request):

    data = read_json(request)
    if not isinstance(data, dict) or set(data) != {"resource_id", "date", "slots"}:
        raise InvalidInput("Body must contain exactly: resource_id, date, slots")

    count = unblock_slots(
        caretaker=request.user,
        resource_id=data["resource_id"],
        date=data["date"],
        slots=data["slots"],
    )

    return JsonResponse({"message": f"Removed {count} block(s)", "removed": count})
