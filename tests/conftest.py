"""Shared test fixtures."""
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from clinic_scheduler.application.ports.records_repo import Doctor, Patient
from clinic_scheduler.application.services.appointments_service import AppointmentsService
from clinic_scheduler.application.services.doctors_service import DoctorsService
from clinic_scheduler.application.services.identity import IdentityAllocator
from clinic_scheduler.application.services.patients_service import PatientsService
from clinic_scheduler.application.services.reporting_service import ReportingService
from clinic_scheduler.exceptions import SchedulingError
from clinic_scheduler.infrastructure.persistence.memory.records_repository_memory import (
    InMemoryRecordStore,
    memory_clinic_records,
)

# Fixed UTC-5 offset; 2025-06-01 is a Sunday
TZ = timezone(timedelta(hours=-5))
NOW = datetime(2025, 6, 1, 10, 0, tzinfo=TZ)
MONDAY = "2025-06-02"
TUESDAY = "2025-06-03"


def fixed_clock(tz):
    return NOW.astimezone(tz)


class SlowRecordStore(InMemoryRecordStore):
    """Store whose reads take a while, so racing writers overlap."""

    def __init__(self, records=None, delay: float = 0.05):
        super().__init__(records)
        self.delay = delay

    def load_all(self):
        time.sleep(self.delay)
        return super().load_all()


def race(call, n: int):
    """Run call(0..n-1) on n threads at once; scheduling errors are returned, not raised."""
    def attempt(i):
        try:
            return call(i)
        except SchedulingError as exc:
            return exc

    with ThreadPoolExecutor(max_workers=n) as pool:
        return list(pool.map(attempt, range(n)))


@pytest.fixture
def tz():
    return TZ


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def cardiologist() -> Doctor:
    return Doctor(
        id="D001",
        name="Ana Ruiz",
        specialty="Cardiology",
        start_time="09:00",
        end_time="12:00",
        available_days=["Monday"],
    )


@pytest.fixture
def records(cardiologist):
    return memory_clinic_records(
        patients=[
            Patient("P001", "Luis Gomez", 40, "555-123-4567", "luis@example.com", "2025-05-01"),
            Patient("P002", "Maria Diaz", 33, "(555) 987 6543", "maria@example.com", "2025-05-02"),
        ],
        doctors=[cardiologist],
    )


@pytest.fixture
def allocator():
    return IdentityAllocator()


@pytest.fixture
def appointments_service(records, allocator):
    return AppointmentsService(records=records, tz=TZ, clock=fixed_clock, allocator=allocator)


@pytest.fixture
def patients_service(records, appointments_service, allocator):
    return PatientsService(records=records, appointments=appointments_service, tz=TZ,
                           clock=fixed_clock, allocator=allocator)


@pytest.fixture
def doctors_service(records, appointments_service, allocator):
    return DoctorsService(records=records, appointments=appointments_service, allocator=allocator)


@pytest.fixture
def reporting_service(records):
    return ReportingService(records=records, tz=TZ, clock=fixed_clock)
