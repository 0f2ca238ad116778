from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional
from datetime import datetime, tzinfo
import logging
import threading

from ...exceptions import ConflictError, InvalidInputError, InvalidStateError, NotFoundError
from ..ports.audit_logger import AuditLogger
from ..ports.records_repo import (
    Appointment,
    APPOINTMENT_STATUSES,
    CANCELLED,
    ClinicRecords,
    Doctor,
    SCHEDULED,
)
from .availability import check_availability, list_available_doctors
from .identity import APPOINTMENT_PREFIX, IdentityAllocator, default_allocator
from .temporal import (
    is_future_instant,
    is_pure_date_future,
    normalize_date,
    normalize_time,
    now_in,
)

logger = logging.getLogger(__name__)

# Every read-check-write of the appointment ledger runs under this lock so two
# bookings for the same slot cannot both pass the conflict check.
_ledger_lock = threading.RLock()


@dataclass
class AppointmentsService:
    records: ClinicRecords
    tz: tzinfo
    clock: Callable[[tzinfo], datetime] = field(default=now_in)
    allocator: IdentityAllocator = field(default=default_allocator)
    audit: Optional[AuditLogger] = None

    def _audit(self, action: str, entity_id: str, success: bool = True, **details) -> None:
        if self.audit is not None:
            self.audit.log(action, entity_id, success=success, details=details)

    def _find(self, appointments: List[Appointment], appointment_id: str) -> int:
        for index, a in enumerate(appointments):
            if a.id == appointment_id:
                return index
        raise NotFoundError("Appointment not found")

    def create(self, patient_id: str, doctor_id: str, raw_date: str, raw_time: str, reason: str = "") -> Appointment:
        """Book an appointment.

        Checks run in a fixed order so that input with several problems always
        reports the same one: unknown patient/doctor, then unreadable or past
        date/time, then doctor availability.
        """
        with _ledger_lock:
            if not any(p.id == patient_id for p in self.records.patients.load_all()):
                raise NotFoundError("Patient not found")
            doctor = next((d for d in self.records.doctors.load_all() if d.id == doctor_id), None)
            if doctor is None:
                raise NotFoundError("Doctor not found")

            iso_date = normalize_date(raw_date)
            if iso_date is None:
                raise InvalidInputError("Invalid date format. Use YYYY-MM-DD or DD/MM/YYYY")
            canonical_time = normalize_time(raw_time)
            if canonical_time is None:
                raise InvalidInputError("Invalid time format. Use HH:MM or HH:MM AM/PM")

            now = self.clock(self.tz)
            if not is_future_instant(iso_date, canonical_time, self.tz, now):
                raise InvalidInputError("appointment must be in the future")

            appointments = self.records.appointments.load_all()
            result = check_availability(doctor, iso_date, canonical_time, appointments)
            if not result.bookable:
                logger.info(f"Rejected booking for doctor {doctor_id} at {iso_date} {canonical_time}: {result.reason}")
                if result.kind == "conflict":
                    raise ConflictError(result.reason)
                raise InvalidInputError(result.reason)

            appointment = Appointment(
                id=self.allocator.next_id(APPOINTMENT_PREFIX, appointments),
                patient_id=patient_id,
                doctor_id=doctor_id,
                appointment_date=iso_date,
                appointment_time=canonical_time,
                reason=reason or "",
                status=SCHEDULED,
                created_at=now,
            )
            appointments.append(appointment)
            self.records.appointments.save_all(appointments)

        self._audit("appointment.create", appointment.id, doctor_id=doctor_id, patient_id=patient_id,
                    slot=f"{iso_date} {canonical_time}")
        return appointment

    def cancel(self, appointment_id: str) -> Appointment:
        with _ledger_lock:
            appointments = self.records.appointments.load_all()
            index = self._find(appointments, appointment_id)
            if appointments[index].status != SCHEDULED:
                raise InvalidStateError("Only scheduled appointments can be cancelled")
            appointments[index] = replace(appointments[index], status=CANCELLED)
            self.records.appointments.save_all(appointments)
        self._audit("appointment.cancel", appointment_id)
        return appointments[index]

    def delete(self, appointment_id: str) -> None:
        with _ledger_lock:
            appointments = self.records.appointments.load_all()
            index = self._find(appointments, appointment_id)
            del appointments[index]
            self.records.appointments.save_all(appointments)
            self.allocator.retire(APPOINTMENT_PREFIX, appointment_id)
        self._audit("appointment.delete", appointment_id)

    def cascade_cancel(self, doctor_id: Optional[str] = None, patient_id: Optional[str] = None) -> int:
        """Cancel the scheduled appointments of a removed doctor or patient.

        Cancelled appointments are left as they are. Returns how many were
        cancelled.
        """
        if doctor_id is None and patient_id is None:
            return 0
        with _ledger_lock:
            appointments = self.records.appointments.load_all()
            cancelled = 0
            for index, a in enumerate(appointments):
                if a.status != SCHEDULED:
                    continue
                if (doctor_id is not None and a.doctor_id == doctor_id) or (
                    patient_id is not None and a.patient_id == patient_id
                ):
                    appointments[index] = replace(a, status=CANCELLED)
                    cancelled += 1
            if cancelled:
                self.records.appointments.save_all(appointments)
        if cancelled:
            logger.info(f"Cascade cancelled {cancelled} appointment(s) for doctor={doctor_id} patient={patient_id}")
        return cancelled

    def get(self, appointment_id: str) -> Appointment:
        appointments = self.records.appointments.load_all()
        return appointments[self._find(appointments, appointment_id)]

    def list_all(self, raw_date: Optional[str] = None, status: Optional[str] = None) -> List[Appointment]:
        appointments = self.records.appointments.load_all()
        if raw_date:
            iso_date = normalize_date(raw_date)
            if iso_date is None:
                raise InvalidInputError("Invalid date format. Use YYYY-MM-DD or DD/MM/YYYY")
            appointments = [a for a in appointments if a.appointment_date == iso_date]
        if status:
            if status not in APPOINTMENT_STATUSES:
                raise InvalidInputError(f"Invalid status. Must be one of: {list(APPOINTMENT_STATUSES)}")
            appointments = [a for a in appointments if a.status == status]
        return appointments

    def doctor_agenda(self, doctor_id: str) -> List[Appointment]:
        if not any(d.id == doctor_id for d in self.records.doctors.load_all()):
            raise NotFoundError("Doctor not found")
        agenda = [
            a for a in self.records.appointments.load_all()
            if a.doctor_id == doctor_id and a.status == SCHEDULED
        ]
        return sorted(agenda, key=lambda a: (a.appointment_date, a.appointment_time))

    def find_available_doctors(self, raw_date: str, raw_time: str) -> List[Doctor]:
        iso_date = normalize_date(raw_date)
        if iso_date is None:
            raise InvalidInputError("Invalid date format. Use YYYY-MM-DD or DD/MM/YYYY")
        canonical_time = normalize_time(raw_time)
        if canonical_time is None:
            raise InvalidInputError("Invalid time format. Use HH:MM or HH:MM AM/PM")
        if not is_pure_date_future(iso_date, self.tz, self.clock(self.tz)):
            raise InvalidInputError("Date must be today or later")
        return list_available_doctors(
            self.records.doctors.load_all(), iso_date, canonical_time, self.records.appointments.load_all()
        )
