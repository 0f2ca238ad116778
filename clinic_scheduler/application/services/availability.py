"""Decides whether a doctor can take an appointment at a given slot."""
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..ports.records_repo import Appointment, Doctor, SCHEDULED
from .temporal import weekday_of


WRONG_WEEKDAY = "doctor does not work that weekday"
OUTSIDE_HOURS = "outside working hours"
SLOT_TAKEN = "slot already taken"


@dataclass(frozen=True)
class AvailabilityResult:
    bookable: bool
    reason: Optional[str] = None
    # "invalid_input" for weekday/hours failures, "conflict" for a taken slot
    kind: Optional[str] = None


BOOKABLE = AvailabilityResult(bookable=True)


def slot_is_taken(doctor_id: str, iso_date: str, canonical_time: str, appointments: Iterable[Appointment]) -> bool:
    return any(
        a.doctor_id == doctor_id
        and a.appointment_date == iso_date
        and a.appointment_time == canonical_time
        and a.status == SCHEDULED
        for a in appointments
    )


def check_availability(doctor: Doctor, iso_date: str, canonical_time: str, appointments: Iterable[Appointment]) -> AvailabilityResult:
    """Run the weekday, working-hours and conflict checks in that order.

    The first failing check decides the reason. Hours are compared as
    zero-padded "HH:MM" strings, inclusive at both ends.
    """
    days = doctor.available_days or []
    if not days or weekday_of(iso_date) not in days:
        return AvailabilityResult(False, WRONG_WEEKDAY, "invalid_input")

    start, end = doctor.start_time, doctor.end_time
    if not start or not end or not (start <= canonical_time <= end):
        return AvailabilityResult(False, OUTSIDE_HOURS, "invalid_input")

    if slot_is_taken(doctor.id, iso_date, canonical_time, appointments):
        return AvailabilityResult(False, SLOT_TAKEN, "conflict")

    return BOOKABLE


def list_available_doctors(doctors: Iterable[Doctor], iso_date: str, canonical_time: str, appointments: Iterable[Appointment]) -> List[Doctor]:
    appointments = list(appointments)
    return [
        d for d in doctors
        if check_availability(d, iso_date, canonical_time, appointments).bookable
    ]
