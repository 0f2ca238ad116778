from dataclasses import replace

import pytest

from clinic_scheduler.application.ports.records_repo import Appointment, Doctor
from clinic_scheduler.exceptions import (
    ConflictError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)

from .conftest import MONDAY, NOW, TUESDAY, SlowRecordStore, race


def test_book_success(appointments_service, records):
    out = appointments_service.create("P001", "D001", MONDAY, "09:00", "checkup")
    assert out.id == "C001"
    assert out.status == "scheduled"
    assert out.appointment_time == "09:00"
    assert out.created_at == NOW
    assert [a.id for a in records.appointments.load_all()] == ["C001"]


def test_book_normalizes_date_and_time(appointments_service):
    out = appointments_service.create("P001", "D001", "2/6/2025", "11:30 AM")
    assert (out.appointment_date, out.appointment_time) == (MONDAY, "11:30")


def test_second_booking_of_same_slot_conflicts(appointments_service):
    appointments_service.create("P001", "D001", MONDAY, "09:00")
    with pytest.raises(ConflictError) as exc:
        appointments_service.create("P002", "D001", MONDAY, "9:00 AM")
    assert exc.value.reason == "slot already taken"


def test_booking_outside_hours(appointments_service):
    with pytest.raises(InvalidInputError) as exc:
        appointments_service.create("P001", "D001", MONDAY, "13:00")
    assert exc.value.reason == "outside working hours"


def test_booking_on_wrong_weekday(appointments_service):
    with pytest.raises(InvalidInputError) as exc:
        appointments_service.create("P001", "D001", TUESDAY, "09:00")
    assert exc.value.reason == "doctor does not work that weekday"


def test_booking_in_the_past_is_rejected(appointments_service, records, cardiologist):
    records.doctors.save_all([replace(cardiologist, available_days=["Sunday"], end_time="18:00")])
    # NOW is Sunday 2025-06-01 10:00
    with pytest.raises(InvalidInputError) as exc:
        appointments_service.create("P001", "D001", "2025-06-01", "10:00")
    assert exc.value.reason == "appointment must be in the future"
    assert appointments_service.create("P001", "D001", "2025-06-01", "10:01").status == "scheduled"


def test_existence_checks_win_over_format_errors(appointments_service):
    with pytest.raises(NotFoundError, match="Patient"):
        appointments_service.create("P999", "D001", "not a date", "nope")
    with pytest.raises(NotFoundError, match="Doctor"):
        appointments_service.create("P001", "D999", "not a date", "nope")


def test_format_errors_win_over_availability(appointments_service):
    with pytest.raises(InvalidInputError, match="date"):
        appointments_service.create("P001", "D001", "2025-13-40", "13:00")
    with pytest.raises(InvalidInputError, match="time"):
        appointments_service.create("P001", "D001", TUESDAY, "25:00")


def test_cancel_twice(appointments_service):
    appt = appointments_service.create("P001", "D001", MONDAY, "10:00")
    cancelled = appointments_service.cancel(appt.id)
    assert cancelled.status == "cancelled"
    assert appointments_service.get(appt.id).status == "cancelled"
    with pytest.raises(InvalidStateError):
        appointments_service.cancel(appt.id)


def test_cancel_unknown(appointments_service):
    with pytest.raises(NotFoundError):
        appointments_service.cancel("C404")


def test_cancelled_slot_can_be_booked_again(appointments_service):
    first = appointments_service.create("P001", "D001", MONDAY, "10:00")
    appointments_service.cancel(first.id)
    second = appointments_service.create("P002", "D001", MONDAY, "10:00")
    assert second.id == "C002"
    statuses = [a.status for a in appointments_service.list_all(raw_date=MONDAY)]
    assert statuses == ["cancelled", "scheduled"]


def test_delete_erases_history_and_ids_are_not_reused(appointments_service):
    appointments_service.create("P001", "D001", MONDAY, "09:00")
    second = appointments_service.create("P001", "D001", MONDAY, "09:30")
    appointments_service.delete(second.id)
    with pytest.raises(NotFoundError):
        appointments_service.get(second.id)
    with pytest.raises(NotFoundError):
        appointments_service.delete(second.id)
    third = appointments_service.create("P001", "D001", MONDAY, "10:00")
    assert third.id == "C003"


def test_cascade_cancel_leaves_cancelled_untouched(appointments_service):
    a = appointments_service.create("P001", "D001", MONDAY, "09:00")
    b = appointments_service.create("P002", "D001", MONDAY, "10:00")
    appointments_service.cancel(a.id)
    assert appointments_service.cascade_cancel(doctor_id="D001") == 1
    assert [x.status for x in appointments_service.list_all()] == ["cancelled", "cancelled"]
    assert appointments_service.cascade_cancel(patient_id="P002") == 0
    assert appointments_service.get(b.id).status == "cancelled"


def test_list_filters(appointments_service):
    a = appointments_service.create("P001", "D001", MONDAY, "09:00")
    appointments_service.create("P001", "D001", MONDAY, "10:00")
    appointments_service.cancel(a.id)
    assert [x.id for x in appointments_service.list_all(status="scheduled")] == ["C002"]
    assert [x.id for x in appointments_service.list_all(raw_date="02/06/2025", status="cancelled")] == ["C001"]
    assert appointments_service.list_all(raw_date=TUESDAY) == []
    with pytest.raises(InvalidInputError):
        appointments_service.list_all(status="done")


def test_doctor_agenda_is_sorted_and_scheduled_only(appointments_service):
    appointments_service.create("P001", "D001", "2025-06-09", "09:00")
    late = appointments_service.create("P001", "D001", MONDAY, "11:00")
    early = appointments_service.create("P002", "D001", MONDAY, "09:00")
    cancelled = appointments_service.create("P002", "D001", MONDAY, "10:00")
    appointments_service.cancel(cancelled.id)
    agenda = appointments_service.doctor_agenda("D001")
    assert [a.id for a in agenda] == [early.id, late.id, "C001"]
    with pytest.raises(NotFoundError):
        appointments_service.doctor_agenda("D404")


def test_find_available_doctors(appointments_service, records, cardiologist):
    other = Doctor("D002", "Jose Perez", "Dermatology", "08:00", "17:00", ["Monday", "Tuesday"])
    records.doctors.save_all([cardiologist, other])
    appointments_service.create("P001", "D001", MONDAY, "09:00")
    assert [d.id for d in appointments_service.find_available_doctors(MONDAY, "9:00 AM")] == ["D002"]
    assert [d.id for d in appointments_service.find_available_doctors(MONDAY, "10:00")] == ["D001", "D002"]
    with pytest.raises(InvalidInputError):
        appointments_service.find_available_doctors("2025-05-31", "10:00")
    with pytest.raises(InvalidInputError):
        appointments_service.find_available_doctors(MONDAY, "later")


def test_audit_logger_receives_lifecycle_events(appointments_service):
    events = []

    class FakeAudit:
        def log(self, action, entity_id, success=True, details=None):
            events.append((action, entity_id))

    appointments_service.audit = FakeAudit()
    appt = appointments_service.create("P001", "D001", MONDAY, "09:00")
    appointments_service.cancel(appt.id)
    appointments_service.delete(appt.id)
    assert events == [
        ("appointment.create", "C001"),
        ("appointment.cancel", "C001"),
        ("appointment.delete", "C001"),
    ]


def test_racing_bookings_for_one_slot_leave_one_scheduled(appointments_service, records):
    records.appointments = SlowRecordStore()
    out = race(lambda i: appointments_service.create(("P001", "P002")[i % 2], "D001", MONDAY, "10:00"), 5)
    booked = [o for o in out if isinstance(o, Appointment)]
    conflicts = [o for o in out if isinstance(o, ConflictError)]
    assert len(booked) == 1
    assert len(conflicts) == 4
    assert [a.status for a in records.appointments.load_all()] == ["scheduled"]
