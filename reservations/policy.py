"""
Authorization gate.

Every role's capabilities live in one table; every service consults
``authorize`` before touching the store, and read paths narrow their
querysets with ``visible_reservations``.
"""

import enum

from django.db.models import Q

from accounts.models import User
from reservations.exceptions import Forbidden

Role = User.Role


class Action(enum.Enum):
    REQUEST = "request"
    WITHDRAW = "withdraw"
    DECIDE = "decide"
    BLOCK = "block"
    UNBLOCK = "unblock"
    RECORD_OUTCOME = "record_outcome"
    RECORD_EVENT_DETAILS = "record_event_details"
    VIEW_DEPARTMENT = "view_department"
    VIEW_RESOURCE = "view_resource"


CAPABILITIES = {
    Role.STUDENT: {Action.REQUEST, Action.WITHDRAW},
    Role.FACULTY: {Action.REQUEST, Action.WITHDRAW},
    Role.HOD: {Action.DECIDE, Action.VIEW_DEPARTMENT, Action.VIEW_RESOURCE},
    Role.CARETAKER: {
        Action.BLOCK,
        Action.UNBLOCK,
        Action.RECORD_OUTCOME,
        Action.RECORD_EVENT_DETAILS,
        Action.VIEW_RESOURCE,
    },
}


def _in_scope(actor, resource):
    # Department heads act on their department's venues, caretakers on their one venue
    if actor.role == Role.HOD:
        return bool(actor.department) and resource.department == actor.department
    if actor.role == Role.CARETAKER:
        return (
            actor.assigned_resource_id is not None
            and resource.pk == actor.assigned_resource_id
        )
    # requesters may book any department's venue
    return True


def can(actor, action, *, resource=None, reservation=None):
    if actor is None or not getattr(actor, "is_authenticated", False):
        return False

    if action not in CAPABILITIES.get(actor.role, set()):
        return False

    if reservation is not None:
        if action == Action.WITHDRAW:
            return reservation.user_id == actor.pk
        if action == Action.DECIDE:
            return bool(actor.department) and reservation.department == actor.department
        resource = reservation.resource

    if resource is not None:
        return _in_scope(actor, resource)

    return True


def authorize(actor, action, *, resource=None, reservation=None):
    if not can(actor, action, resource=resource, reservation=reservation):
        raise Forbidden(f"Not allowed to {action.value}")


def visible_reservations(actor):
    """
    Q filter for the reservations the actor may read: requesters see their
    own, department heads their department, caretakers their venue.
    """
    if actor.role == Role.HOD:
        return Q(department=actor.department) if actor.department else Q(pk__in=[])
    if actor.role == Role.CARETAKER:
        if actor.assigned_resource_id is None:
            return Q(pk__in=[])
        return Q(resource_id=actor.assigned_resource_id)
    return Q(user=actor)
