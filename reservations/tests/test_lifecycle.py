from datetime import date

from django.test import TestCase

from reservations.exceptions import (
    Forbidden,
    InvalidInput,
    InvalidStatus,
    InvalidTransition,
    ReservationNotFound,
    SlotUnavailable,
)
from reservations.models import Reservation, SlotClaim
from reservations.requests import BlockRequest, EventDetails, ReservationRequest
from reservations.services import (
    block_slots,
    decide_reservation,
    get_available_slots,
    record_event_details,
    record_outcome,
    request_reservation,
    unblock,
    unblock_slots,
    withdraw_reservation,
)
from reservations.tests.helpers import DAY, User, make_resource, make_user


class LifecycleTestCase(TestCase):
    def setUp(self):
        self.lab = make_resource("CSE Lab 101", "CSE")
        self.hall = make_resource("ISE Seminar Hall", "ISE")

        self.faculty = make_user("faculty", User.Role.FACULTY, "ISE")
        self.student = make_user("student", User.Role.STUDENT, "CSE")
        self.hod = make_user("hod", User.Role.HOD, "CSE")
        self.other_hod = make_user("ise_hod", User.Role.HOD, "ISE")
        self.caretaker = make_user(
            "caretaker", User.Role.CARETAKER, "CSE", assigned_resource=self.lab
        )

    def request(self, slots, user=None, resource=None, day=DAY, **extra):
        return request_reservation(
            requester=user or self.faculty,
            request=ReservationRequest(
                resource_id=(resource or self.lab).id,
                date=day,
                slots=slots,
                **extra,
            ),
        )

    def block(self, slots, caretaker=None, resource=None, reason="maintenance"):
        return block_slots(
            caretaker=caretaker or self.caretaker,
            request=BlockRequest(
                resource_id=(resource or self.lab).id,
                date=DAY,
                slots=slots,
                reason=reason,
            ),
        )


class RequestReservationTest(LifecycleTestCase):

    def test_request_is_pending_with_resource_department(self):
        reservation = self.request(["09:00-10:00"], purpose="Hackathon", attendees=40)

        self.assertEqual(reservation.status, Reservation.Status.PENDING)
        self.assertEqual(reservation.kind, Reservation.Kind.REQUEST)
        # requester is from ISE, the lab belongs to CSE
        self.assertEqual(reservation.department, "CSE")
        self.assertEqual(reservation.attendees, 40)
        self.assertIsNotNone(reservation.created_at)

    def test_pending_request_does_not_bind(self):
        self.request(["09:00-10:00"])

        self.assertIn("09:00-10:00", get_available_slots(resource=self.lab, date=DAY))
        self.assertEqual(SlotClaim.objects.count(), 0)

    def test_missing_resource_is_invalid_input(self):
        with self.assertRaises(InvalidInput):
            request_reservation(
                requester=self.faculty,
                request=ReservationRequest(resource_id=9999, date=DAY, slots=["09:00-10:00"]),
            )

    def test_partial_conflict_rejects_whole_request(self):
        self.block(["10:00-11:00"])

        with self.assertRaises(SlotUnavailable):
            self.request(["09:00-10:00", "10:00-11:00"])

        self.assertEqual(
            Reservation.objects.filter(kind=Reservation.Kind.REQUEST).count(), 0
        )

    def test_department_head_cannot_request(self):
        with self.assertRaises(Forbidden):
            self.request(["09:00-10:00"], user=self.hod)

    def test_caretaker_cannot_request(self):
        with self.assertRaises(Forbidden):
            self.request(["09:00-10:00"], user=self.caretaker)


class ScenarioTest(LifecycleTestCase):

    def test_pending_does_not_block_but_approval_does(self):
        first = self.request(["09:00-10:00", "10:00-11:00"])
        self.assertEqual(first.status, Reservation.Status.PENDING)

        # Pending requests are not binding, so an overlapping request still goes through
        second = self.request(["10:00-11:00"], user=self.student)
        self.assertEqual(second.status, Reservation.Status.PENDING)

        decide_reservation(
            approver=self.hod,
            reservation_id=first.id,
            decision=Reservation.Status.APPROVED,
        )

        with self.assertRaises(SlotUnavailable):
            self.request(["10:00-11:00"])

    def test_block_and_unblock_round_trip(self):
        block = self.block(["13:00-14:00"])

        self.assertEqual(block.kind, Reservation.Kind.BLOCK)
        self.assertEqual(block.block_reason, "maintenance")
        self.assertNotIn("13:00-14:00", get_available_slots(resource=self.lab, date=DAY))

        unblock(caretaker=self.caretaker, reservation_id=block.id)

        self.assertIn("13:00-14:00", get_available_slots(resource=self.lab, date=DAY))
        self.assertFalse(Reservation.objects.filter(id=block.id).exists())
        self.assertEqual(SlotClaim.objects.count(), 0)

    def test_head_of_other_department_cannot_decide(self):
        reservation = self.request(["09:00-10:00"])

        with self.assertRaises(Forbidden):
            decide_reservation(
                approver=self.other_hod,
                reservation_id=reservation.id,
                decision=Reservation.Status.APPROVED,
            )

        reservation.refresh_from_db()
        self.assertEqual(reservation.status, Reservation.Status.PENDING)


class DecideReservationTest(LifecycleTestCase):

    def test_second_decision_is_an_invalid_transition(self):
        for offset, (first, second) in enumerate((
            (Reservation.Status.APPROVED, Reservation.Status.REJECTED),
            (Reservation.Status.APPROVED, Reservation.Status.APPROVED),
            (Reservation.Status.REJECTED, Reservation.Status.APPROVED),
            (Reservation.Status.REJECTED, Reservation.Status.REJECTED),
        )):
            # a fresh day per pair so approvals never collide
            reservation = self.request(["11:00-12:00"], day=date(2024, 4, 1 + offset))

            decide_reservation(approver=self.hod, reservation_id=reservation.id, decision=first)

            with self.assertRaises(InvalidTransition):
                decide_reservation(
                    approver=self.hod, reservation_id=reservation.id, decision=second
                )

            reservation.refresh_from_db()
            self.assertEqual(reservation.status, first)

    def test_unknown_decision_is_invalid_status(self):
        reservation = self.request(["09:00-10:00"])

        for decision in ("PENDING", "Maybe", None):
            with self.assertRaises(InvalidStatus):
                decide_reservation(
                    approver=self.hod, reservation_id=reservation.id, decision=decision
                )

    def test_requester_cannot_decide(self):
        reservation = self.request(["09:00-10:00"])

        with self.assertRaises(Forbidden):
            decide_reservation(
                approver=self.student,
                reservation_id=reservation.id,
                decision=Reservation.Status.APPROVED,
            )

    def test_missing_reservation_is_not_found(self):
        with self.assertRaises(ReservationNotFound):
            decide_reservation(
                approver=self.hod,
                reservation_id=424242,
                decision=Reservation.Status.APPROVED,
            )

    def test_approving_over_a_bound_slot_fails(self):
        first = self.request(["10:00-11:00"])
        second = self.request(["10:00-11:00", "11:00-12:00"], user=self.student)

        decide_reservation(
            approver=self.hod, reservation_id=first.id, decision=Reservation.Status.APPROVED
        )

        with self.assertRaises(SlotUnavailable):
            decide_reservation(
                approver=self.hod,
                reservation_id=second.id,
                decision=Reservation.Status.APPROVED,
            )

        second.refresh_from_db()
        self.assertEqual(second.status, Reservation.Status.PENDING)

        # rejecting it is still allowed
        decide_reservation(
            approver=self.hod, reservation_id=second.id, decision=Reservation.Status.REJECTED
        )

    def test_approval_claims_slots(self):
        reservation = self.request(["09:00-10:00", "10:00-11:00"])

        decide_reservation(
            approver=self.hod,
            reservation_id=reservation.id,
            decision=Reservation.Status.APPROVED,
        )

        self.assertEqual(
            sorted(SlotClaim.objects.values_list("slot", flat=True)),
            ["09:00-10:00", "10:00-11:00"],
        )
        reservation.refresh_from_db()
        self.assertEqual(reservation.decided_by, self.hod)
        self.assertIsNotNone(reservation.decided_at)

    def test_blocks_cannot_be_decided(self):
        block = self.block(["09:00-10:00"])

        with self.assertRaises(InvalidTransition):
            decide_reservation(
                approver=self.hod, reservation_id=block.id, decision=Reservation.Status.REJECTED
            )


class WithdrawReservationTest(LifecycleTestCase):

    def test_requester_withdraws_pending_request(self):
        reservation = self.request(["09:00-10:00"])

        withdraw_reservation(requester=self.faculty, reservation_id=reservation.id)

        reservation.refresh_from_db()
        self.assertEqual(reservation.status, Reservation.Status.REJECTED)
        self.assertTrue(reservation.withdrawn)

    def test_cannot_withdraw_decided_request(self):
        reservation = self.request(["09:00-10:00"])
        decide_reservation(
            approver=self.hod, reservation_id=reservation.id, decision=Reservation.Status.APPROVED
        )

        with self.assertRaises(InvalidTransition):
            withdraw_reservation(requester=self.faculty, reservation_id=reservation.id)

    def test_cannot_withdraw_someone_elses_request(self):
        reservation = self.request(["09:00-10:00"])

        with self.assertRaises(ReservationNotFound):
            withdraw_reservation(requester=self.student, reservation_id=reservation.id)


class BlockTest(LifecycleTestCase):

    def test_block_is_binding_immediately(self):
        block = self.block(["13:00-14:00"])

        self.assertEqual(block.status, Reservation.Status.APPROVED)
        self.assertTrue(block.is_binding)
        self.assertEqual(block.department, "CSE")

        with self.assertRaises(SlotUnavailable):
            self.request(["13:00-14:00"])

    def test_block_conflicts_with_approved_request(self):
        reservation = self.request(["13:00-14:00"])
        decide_reservation(
            approver=self.hod, reservation_id=reservation.id, decision=Reservation.Status.APPROVED
        )

        with self.assertRaises(SlotUnavailable):
            self.block(["13:00-14:00", "14:00-15:00"])

    def test_block_ignores_pending_requests(self):
        self.request(["13:00-14:00"])

        block = self.block(["13:00-14:00"])

        self.assertEqual(block.kind, Reservation.Kind.BLOCK)

    def test_caretaker_blocks_only_assigned_venue(self):
        with self.assertRaises(Forbidden):
            self.block(["09:00-10:00"], resource=self.hall)

    def test_requester_cannot_block(self):
        with self.assertRaises(Forbidden):
            self.block(["09:00-10:00"], caretaker=self.faculty)

    def test_unblock_other_venue_is_forbidden(self):
        hall_caretaker = make_user(
            "hall_caretaker", User.Role.CARETAKER, "ISE", assigned_resource=self.hall
        )
        block = self.block(["09:00-10:00"], caretaker=hall_caretaker, resource=self.hall)

        with self.assertRaises(Forbidden):
            unblock(caretaker=self.caretaker, reservation_id=block.id)

        self.assertTrue(Reservation.objects.filter(id=block.id).exists())

    def test_unblock_of_normal_request_is_forbidden(self):
        reservation = self.request(["09:00-10:00"])

        with self.assertRaises(Forbidden):
            unblock(caretaker=self.caretaker, reservation_id=reservation.id)

    def test_unblock_missing_is_not_found(self):
        with self.assertRaises(ReservationNotFound):
            unblock(caretaker=self.caretaker, reservation_id=31337)

    def test_unblock_slots_removes_overlapping_blocks(self):
        self.block(["09:00-10:00", "10:00-11:00"])
        self.block(["13:00-14:00"])
        self.block(["15:00-16:00"])

        removed = unblock_slots(
            caretaker=self.caretaker,
            resource_id=self.lab.id,
            date="2024-03-20",
            slots=["10:00-11:00", "13:00-14:00"],
        )

        self.assertEqual(removed, 2)
        self.assertEqual(
            get_available_slots(resource=self.lab, date=DAY),
            [
                "09:00-10:00",
                "10:00-11:00",
                "11:00-12:00",
                "12:00-13:00",
                "13:00-14:00",
                "14:00-15:00",
            ],
        )


class RecordOutcomeTest(LifecycleTestCase):

    def test_caretaker_records_outcome_on_approved_request(self):
        reservation = self.request(["09:00-10:00"])
        decide_reservation(
            approver=self.hod, reservation_id=reservation.id, decision=Reservation.Status.APPROVED
        )

        record_outcome(
            caretaker=self.caretaker,
            reservation_id=reservation.id,
            summary="  Ran smoothly, 38 attended ",
        )

        reservation.refresh_from_db()
        self.assertEqual(reservation.outcome_summary, "Ran smoothly, 38 attended")

    def test_outcome_requires_approved_request(self):
        reservation = self.request(["09:00-10:00"])

        with self.assertRaises(InvalidTransition):
            record_outcome(
                caretaker=self.caretaker, reservation_id=reservation.id, summary="Done"
            )

    def test_outcome_requires_text(self):
        with self.assertRaises(InvalidInput):
            record_outcome(caretaker=self.caretaker, reservation_id=1, summary=" ")


class RecordEventDetailsTest(LifecycleTestCase):

    def approved(self):
        reservation = self.request(["09:00-10:00"])
        decide_reservation(
            approver=self.hod, reservation_id=reservation.id, decision=Reservation.Status.APPROVED
        )
        return reservation

    def test_caretaker_records_event_details(self):
        reservation = self.approved()

        record_event_details(
            caretaker=self.caretaker,
            reservation_id=reservation.id,
            details=EventDetails(duration="2 hours", year_of_students=[3], usage_purpose="Workshop"),
        )

        reservation.refresh_from_db()
        self.assertEqual(reservation.event_details["duration"], "2 hours")
        self.assertEqual(reservation.event_details["year_of_students"], [3])

    def test_event_details_need_an_approved_request(self):
        reservation = self.request(["09:00-10:00"])

        with self.assertRaises(InvalidTransition):
            record_event_details(
                caretaker=self.caretaker,
                reservation_id=reservation.id,
                details=EventDetails(description="Guest lecture"),
            )

    def test_only_the_venue_caretaker_records_event_details(self):
        reservation = self.approved()
        hall_caretaker = make_user(
            "hall_caretaker", User.Role.CARETAKER, "ISE", assigned_resource=self.hall
        )

        for actor in (hall_caretaker, self.hod, self.faculty):
            with self.assertRaises(Forbidden):
                record_event_details(
                    caretaker=actor,
                    reservation_id=reservation.id,
                    details=EventDetails(description="Guest lecture"),
                )
