from dataclasses import dataclass, field
from typing import Any, List, Protocol
from datetime import datetime


SCHEDULED = "scheduled"
CANCELLED = "cancelled"
APPOINTMENT_STATUSES = (SCHEDULED, CANCELLED)


@dataclass
class Patient:
    id: str
    name: str
    age: int
    phone: str
    email: str
    registered_on: str


@dataclass
class Doctor:
    id: str
    name: str
    specialty: str
    start_time: str
    end_time: str
    available_days: List[str] = field(default_factory=list)


@dataclass
class Appointment:
    id: str
    patient_id: str
    doctor_id: str
    appointment_date: str
    appointment_time: str
    reason: str
    status: str
    created_at: datetime


class RecordStore(Protocol):
    """One collection of records, read and written as a whole.

    ``load_all`` returns the records in creation order and ``save_all``
    replaces the collection with the given ordered sequence.
    """

    def load_all(self) -> List[Any]:
        ...

    def save_all(self, records: List[Any]) -> None:
        ...


@dataclass
class ClinicRecords:
    patients: RecordStore
    doctors: RecordStore
    appointments: RecordStore
