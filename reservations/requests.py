"""
Typed request bodies for the mutating operations.

Each request is validated once, on construction, so the service layer
never sees an empty slot set, a slot outside the catalog or a malformed
date.
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import date as date_type
from typing import Optional

from reservations import slots as catalog
from reservations.exceptions import InvalidInput


def parse_date(value):
    if isinstance(value, date_type):
        return value
    if not isinstance(value, str):
        raise InvalidInput("Invalid date format (YYYY-MM-DD)")
    try:
        return date_type.fromisoformat(value)
    except ValueError:
        raise InvalidInput("Invalid date format (YYYY-MM-DD)")


def _parse_resource_id(value):
    if isinstance(value, bool):
        raise InvalidInput("Invalid resource_id")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput("Invalid resource_id")


def clean_slots(value):
    if not isinstance(value, (list, tuple)):
        raise InvalidInput("slots must be a list")

    if not value:
        raise InvalidInput("At least one slot is required")

    invalid = [slot for slot in value if not catalog.is_valid(slot)]
    if invalid:
        raise InvalidInput(f"Invalid slot: {invalid[0]!r}")

    if len(set(value)) != len(value):
        raise InvalidInput("Duplicate slots are not allowed")

    return tuple(catalog.in_catalog_order(value))


def _check_fields(cls, data, required):
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be an object")

    allowed = {f.name for f in fields(cls)}

    unknown = set(data) - allowed
    if unknown:
        raise InvalidInput(f"Unknown fields: {', '.join(sorted(unknown))}")

    missing = set(required) - set(data)
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(sorted(missing))}")


@dataclass
class ReservationRequest:
    resource_id: int
    date: date_type
    slots: tuple
    purpose: str = ""
    attendees: Optional[int] = None

    def __post_init__(self):
        self.resource_id = _parse_resource_id(self.resource_id)
        self.date = parse_date(self.date)
        self.slots = clean_slots(self.slots)

        if self.purpose is None:
            self.purpose = ""
        if not isinstance(self.purpose, str):
            raise InvalidInput("purpose must be text")

        if self.attendees is not None:
            if isinstance(self.attendees, bool) or not isinstance(self.attendees, int):
                raise InvalidInput("attendees must be an integer")
            if self.attendees < 1:
                raise InvalidInput("attendees must be positive")

    @classmethod
    def from_payload(cls, data):
        _check_fields(cls, data, required={"resource_id", "date", "slots"})
        return cls(**data)


@dataclass
class BlockRequest:
    resource_id: int
    date: date_type
    slots: tuple
    reason: str = field(default="")

    def __post_init__(self):
        self.resource_id = _parse_resource_id(self.resource_id)
        self.date = parse_date(self.date)
        self.slots = clean_slots(self.slots)

        if not isinstance(self.reason, str) or not self.reason.strip():
            raise InvalidInput("A reason is required to block slots")

    @classmethod
    def from_payload(cls, data):
        _check_fields(cls, data, required={"resource_id", "date", "slots", "reason"})
        return cls(**data)


def _optional_text(value, name):
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidInput(f"{name} must be text")
    return value.strip()


@dataclass
class EventDetails:
    duration: str = ""
    year_of_students: list = field(default_factory=list)
    usage_purpose: str = ""
    subject_or_type: str = ""
    description: str = ""

    def __post_init__(self):
        self.duration = _optional_text(self.duration, "duration")
        self.usage_purpose = _optional_text(self.usage_purpose, "usage_purpose")
        self.subject_or_type = _optional_text(self.subject_or_type, "subject_or_type")
        self.description = _optional_text(self.description, "description")

        if self.year_of_students is None:
            self.year_of_students = []
        if not isinstance(self.year_of_students, list) or any(
            isinstance(year, bool) or not isinstance(year, int) or year < 1
            for year in self.year_of_students
        ):
            raise InvalidInput("year_of_students must be a list of positive integers")
        self.year_of_students = sorted(set(self.year_of_students))

        if not any(asdict(self).values()):
            raise InvalidInput("Event details required")

    @classmethod
    def from_payload(cls, data):
        _check_fields(cls, data, required=set())
        return cls(**data)

    def as_dict(self):
        return asdict(self)
