from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional
import logging
import threading

from ...exceptions import ConflictError, InvalidInputError, NotFoundError
from ..ports.audit_logger import AuditLogger
from ..ports.records_repo import ClinicRecords, Doctor
from .appointments_service import AppointmentsService
from .identity import DOCTOR_PREFIX, IdentityAllocator, default_allocator
from .temporal import WEEKDAYS, normalize_time

logger = logging.getLogger(__name__)

# Held for every load-check-save of the doctor roster.
_roster_lock = threading.RLock()


def _canonical_hour(raw, label: str) -> str:
    canonical = normalize_time(raw)
    if canonical is None:
        raise InvalidInputError(f"Invalid {label} format (HH:MM)")
    return canonical


def _validate_days(days: Iterable[str]) -> List[str]:
    if isinstance(days, str) or not days:
        raise InvalidInputError("available_days must be a non-empty list of weekdays")
    cleaned = []
    for day in days:
        name = str(day).strip().capitalize()
        if name not in WEEKDAYS:
            raise InvalidInputError(f"Unknown weekday: {day}")
        if name not in cleaned:
            cleaned.append(name)
    return cleaned


def _validate_hours(start: str, end: str) -> None:
    if start >= end:
        raise InvalidInputError("start_time must be earlier than end_time")


@dataclass
class DoctorsService:
    records: ClinicRecords
    appointments: AppointmentsService
    allocator: IdentityAllocator = field(default=default_allocator)
    audit: Optional[AuditLogger] = None

    def _index(self, doctors: List[Doctor], doctor_id: str) -> int:
        for index, d in enumerate(doctors):
            if d.id == doctor_id:
                return index
        raise NotFoundError("Doctor not found")

    def list(self) -> List[Doctor]:
        return self.records.doctors.load_all()

    def get(self, doctor_id: str) -> Doctor:
        doctors = self.records.doctors.load_all()
        return doctors[self._index(doctors, doctor_id)]

    def by_specialty(self, specialty: str) -> List[Doctor]:
        wanted = specialty.strip().lower()
        return [d for d in self.records.doctors.load_all() if d.specialty.lower() == wanted]

    def register(self, name: str, specialty: str, start_time: str, end_time: str, available_days: List[str]) -> Doctor:
        if not name or not specialty or not start_time or not end_time or available_days is None:
            raise InvalidInputError("Missing required fields: name, specialty, start_time, end_time, available_days")
        start = _canonical_hour(start_time, "start_time")
        end = _canonical_hour(end_time, "end_time")
        _validate_hours(start, end)
        days = _validate_days(available_days)

        with _roster_lock:
            doctors = self.records.doctors.load_all()
            if any(d.name == name and d.specialty == specialty for d in doctors):
                raise ConflictError("A doctor with that name and specialty already exists")

            doctor = Doctor(
                id=self.allocator.next_id(DOCTOR_PREFIX, doctors),
                name=name,
                specialty=specialty,
                start_time=start,
                end_time=end,
                available_days=days,
            )
            doctors.append(doctor)
            self.records.doctors.save_all(doctors)
        logger.info(f"Registered doctor {doctor.id} ({doctor.specialty})")
        return doctor

    def update(self, doctor_id: str, name: Optional[str] = None, specialty: Optional[str] = None,
               start_time: Optional[str] = None, end_time: Optional[str] = None,
               available_days: Optional[List[str]] = None) -> Doctor:
        with _roster_lock:
            doctors = self.records.doctors.load_all()
            index = self._index(doctors, doctor_id)
            changes = {}
            if name:
                changes["name"] = name
            if specialty:
                changes["specialty"] = specialty
            if start_time:
                changes["start_time"] = _canonical_hour(start_time, "start_time")
            if end_time:
                changes["end_time"] = _canonical_hour(end_time, "end_time")
            if available_days is not None:
                changes["available_days"] = _validate_days(available_days)

            updated = replace(doctors[index], **changes)
            _validate_hours(updated.start_time, updated.end_time)
            if any(d.name == updated.name and d.specialty == updated.specialty
                   for i, d in enumerate(doctors) if i != index):
                raise ConflictError("A doctor with that name and specialty already exists")

            doctors[index] = updated
            self.records.doctors.save_all(doctors)
        return updated

    def delete(self, doctor_id: str) -> int:
        """Remove the doctor, then cancel their scheduled appointments.

        Appointment history is kept; only the status of scheduled ones
        changes. Returns the number of appointments cancelled.
        """
        with _roster_lock:
            doctors = self.records.doctors.load_all()
            del doctors[self._index(doctors, doctor_id)]
            self.records.doctors.save_all(doctors)
            self.allocator.retire(DOCTOR_PREFIX, doctor_id)
        cancelled = self.appointments.cascade_cancel(doctor_id=doctor_id)
        if self.audit is not None:
            self.audit.log("doctor.delete", doctor_id, details={"cancelled_appointments": cancelled})
        return cancelled
