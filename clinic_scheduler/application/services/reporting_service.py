from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Callable, Dict, Iterable, List, Optional
import logging

from ...exceptions import InvalidInputError
from ..ports.records_repo import Appointment, ClinicRecords, Doctor, SCHEDULED
from .temporal import compose_instant, normalize_time, now_in

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


@dataclass
class DoctorWorkload:
    doctor: Optional[Doctor]
    count: int


@dataclass
class HistoryEntry:
    appointment: Appointment
    doctor_name: str
    doctor_specialty: str


def top_doctor_by_appointment_count(doctors: Iterable[Doctor], appointments: Iterable[Appointment]) -> DoctorWorkload:
    """Doctor with the most appointments of any status.

    On a tie the doctor id seen first while counting wins.
    """
    counts: Dict[str, int] = {}
    for a in appointments:
        counts[a.doctor_id] = counts.get(a.doctor_id, 0) + 1
    if not counts:
        return DoctorWorkload(doctor=None, count=0)

    best_id, best_count = None, -1
    for doctor_id, count in counts.items():
        if count > best_count:
            best_id, best_count = doctor_id, count
    doctor = next((d for d in doctors if d.id == best_id), None)
    return DoctorWorkload(doctor=doctor, count=best_count)


def specialty_demand(doctors: Iterable[Doctor], appointments: Iterable[Appointment]) -> Dict[str, int]:
    specialty_by_doctor = {d.id: d.specialty for d in doctors}
    demand: Dict[str, int] = {}
    for a in appointments:
        specialty = specialty_by_doctor.get(a.doctor_id)
        if specialty is None:
            continue
        demand[specialty] = demand.get(specialty, 0) + 1
    return demand


def upcoming_within_window(appointments: Iterable[Appointment], window_hours: float, now: datetime, tz: tzinfo) -> List[Appointment]:
    limit = now + timedelta(hours=window_hours)
    upcoming = []
    for a in appointments:
        if a.status != SCHEDULED:
            continue
        canonical_time = normalize_time(a.appointment_time)
        if canonical_time is None:
            logger.warning(f"Skipping appointment {a.id} with unreadable time {a.appointment_time!r}")
            continue
        try:
            instant = compose_instant(a.appointment_date, canonical_time, tz)
        except ValueError:
            logger.warning(f"Skipping appointment {a.id} with unreadable date {a.appointment_date!r}")
            continue
        if now <= instant <= limit:
            upcoming.append(a)
    return upcoming


def patient_history(patient_id: str, appointments: Iterable[Appointment], doctors: Iterable[Doctor]) -> List[HistoryEntry]:
    doctors_by_id = {d.id: d for d in doctors}
    history = []
    for a in appointments:
        if a.patient_id != patient_id:
            continue
        doctor = doctors_by_id.get(a.doctor_id)
        history.append(HistoryEntry(
            appointment=a,
            doctor_name=doctor.name if doctor else NOT_AVAILABLE,
            doctor_specialty=doctor.specialty if doctor else NOT_AVAILABLE,
        ))
    return history


@dataclass
class ReportingService:
    records: ClinicRecords
    tz: tzinfo
    clock: Callable[[tzinfo], datetime] = field(default=now_in)

    def top_doctor(self) -> DoctorWorkload:
        return top_doctor_by_appointment_count(self.records.doctors.load_all(), self.records.appointments.load_all())

    def specialty_demand(self) -> Dict[str, int]:
        return specialty_demand(self.records.doctors.load_all(), self.records.appointments.load_all())

    def upcoming(self, window_hours: float = 24) -> List[Appointment]:
        if window_hours < 0:
            raise InvalidInputError("Window hours cannot be negative")
        return upcoming_within_window(self.records.appointments.load_all(), window_hours, self.clock(self.tz), self.tz)
