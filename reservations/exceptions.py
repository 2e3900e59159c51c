from django.core.exceptions import PermissionDenied


class ReservationError(Exception):
    pass


class InvalidInput(ReservationError, ValueError):
    pass


class InvalidStatus(InvalidInput):
    pass


class SlotUnavailable(ReservationError):
    pass


class Forbidden(ReservationError, PermissionDenied):
    pass


class InvalidTransition(ReservationError):
    pass


class ReservationNotFound(ReservationError):
    pass
