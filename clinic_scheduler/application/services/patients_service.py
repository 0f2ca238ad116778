from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional
from datetime import datetime, tzinfo
import logging
import re
import threading

from ...exceptions import ConflictError, InvalidInputError, NotFoundError
from ..ports.audit_logger import AuditLogger
from ..ports.records_repo import ClinicRecords, Patient
from .appointments_service import AppointmentsService
from .identity import PATIENT_PREFIX, IdentityAllocator, default_allocator
from .reporting_service import HistoryEntry, patient_history
from .temporal import now_in

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PHONE_DIGITS = 10

# Held for every load-check-save of the patient collection; save_all replaces
# the whole collection.
_registry_lock = threading.RLock()


def _validate_age(age) -> int:
    try:
        value = int(age)
    except (TypeError, ValueError):
        raise InvalidInputError("Age must be a whole number")
    if value <= 0:
        raise InvalidInputError("Age must be greater than 0")
    return value


def _validate_phone(phone: str) -> str:
    if len(re.sub(r"\D", "", phone or "")) < MIN_PHONE_DIGITS:
        raise InvalidInputError(f"Phone must contain at least {MIN_PHONE_DIGITS} digits")
    return phone


def _validate_email(email: str) -> str:
    if not EMAIL_RE.match(email or ""):
        raise InvalidInputError("Invalid email address")
    return email


@dataclass
class PatientsService:
    records: ClinicRecords
    appointments: AppointmentsService
    tz: tzinfo
    clock: Callable[[tzinfo], datetime] = field(default=now_in)
    allocator: IdentityAllocator = field(default=default_allocator)
    audit: Optional[AuditLogger] = None

    def _index(self, patients: List[Patient], patient_id: str) -> int:
        for index, p in enumerate(patients):
            if p.id == patient_id:
                return index
        raise NotFoundError("Patient not found")

    def list(self) -> List[Patient]:
        return self.records.patients.load_all()

    def get(self, patient_id: str) -> Patient:
        patients = self.records.patients.load_all()
        return patients[self._index(patients, patient_id)]

    def register(self, name: str, age, phone: str, email: str) -> Patient:
        if not name or not phone or not email or age is None:
            raise InvalidInputError("Missing required fields: name, age, phone, email")
        age = _validate_age(age)
        _validate_phone(phone)
        _validate_email(email)

        with _registry_lock:
            patients = self.records.patients.load_all()
            if any(p.email == email for p in patients):
                raise ConflictError("Email is already registered")

            patient = Patient(
                id=self.allocator.next_id(PATIENT_PREFIX, patients),
                name=name,
                age=age,
                phone=phone,
                email=email,
                registered_on=self.clock(self.tz).date().isoformat(),
            )
            patients.append(patient)
            self.records.patients.save_all(patients)
        logger.info(f"Registered patient {patient.id}")
        return patient

    def update(self, patient_id: str, name: Optional[str] = None, age=None, phone: Optional[str] = None,
               email: Optional[str] = None) -> Patient:
        with _registry_lock:
            patients = self.records.patients.load_all()
            index = self._index(patients, patient_id)
            changes = {}
            if name:
                changes["name"] = name
            if age is not None:
                changes["age"] = _validate_age(age)
            if phone:
                changes["phone"] = _validate_phone(phone)
            if email:
                _validate_email(email)
                if any(p.email == email for i, p in enumerate(patients) if i != index):
                    raise ConflictError("Email is already registered")
                changes["email"] = email

            patients[index] = replace(patients[index], **changes)
            self.records.patients.save_all(patients)
        return patients[index]

    def delete(self, patient_id: str) -> int:
        """Remove the patient, then cancel their scheduled appointments.

        The two collections are written one after the other; returns the
        number of appointments cancelled by the second step.
        """
        with _registry_lock:
            patients = self.records.patients.load_all()
            del patients[self._index(patients, patient_id)]
            self.records.patients.save_all(patients)
            self.allocator.retire(PATIENT_PREFIX, patient_id)
        cancelled = self.appointments.cascade_cancel(patient_id=patient_id)
        if self.audit is not None:
            self.audit.log("patient.delete", patient_id, details={"cancelled_appointments": cancelled})
        return cancelled

    def history(self, patient_id: str) -> List[HistoryEntry]:
        self.get(patient_id)
        return patient_history(patient_id, self.records.appointments.load_all(), self.records.doctors.load_all())
