from datetime import datetime, timedelta

import pytest

from clinic_scheduler.application.ports.records_repo import Appointment, Doctor
from clinic_scheduler.application.services.reporting_service import (
    patient_history,
    specialty_demand,
    top_doctor_by_appointment_count,
    upcoming_within_window,
)
from clinic_scheduler.exceptions import InvalidInputError

from .conftest import NOW, TZ

D1 = Doctor("D001", "Ana Ruiz", "Cardiology", "09:00", "12:00", ["Monday"])
D2 = Doctor("D002", "Jose Perez", "Dermatology", "08:00", "17:00", ["Monday"])
D3 = Doctor("D003", "Eva Leon", "Cardiology", "08:00", "17:00", ["Monday"])


def _appt(id, doctor_id="D001", patient_id="P001", date="2025-06-02", time="09:00", status="scheduled"):
    return Appointment(id, patient_id, doctor_id, date, time, "", status, datetime(2025, 5, 1, tzinfo=TZ))


def test_top_doctor_counts_every_status():
    appts = [_appt("C001"), _appt("C002", status="cancelled"), _appt("C003", doctor_id="D002")]
    workload = top_doctor_by_appointment_count([D1, D2], appts)
    assert workload.doctor == D1
    assert workload.count == 2


def test_top_doctor_tie_goes_to_first_counted():
    appts = [_appt("C001", doctor_id="D002"), _appt("C002", doctor_id="D001"),
             _appt("C003", doctor_id="D001"), _appt("C004", doctor_id="D002")]
    workload = top_doctor_by_appointment_count([D1, D2], appts)
    assert (workload.doctor.id, workload.count) == ("D002", 2)


def test_top_doctor_without_appointments():
    workload = top_doctor_by_appointment_count([D1], [])
    assert (workload.doctor, workload.count) == (None, 0)


def test_top_doctor_that_was_deleted():
    workload = top_doctor_by_appointment_count([D2], [_appt("C001"), _appt("C002")])
    assert (workload.doctor, workload.count) == (None, 2)


def test_specialty_demand_skips_deleted_doctors():
    appts = [_appt("C001"), _appt("C002", doctor_id="D003", status="cancelled"),
             _appt("C003", doctor_id="D002"), _appt("C004", doctor_id="D999")]
    assert specialty_demand([D1, D2, D3], appts) == {"Cardiology": 2, "Dermatology": 1}


def test_upcoming_window_is_inclusive():
    appts = [
        _appt("C001", date="2025-06-01", time="10:00"),               # exactly now
        _appt("C002", date="2025-06-02", time="10:00"),               # exactly now + 24h
        _appt("C003", date="2025-06-02", time="10:01"),               # just outside
        _appt("C004", date="2025-06-01", time="09:59"),               # already past
        _appt("C005", date="2025-06-01", time="15:00", status="cancelled"),
        _appt("C006", date="2025-06-01", time="15:00"),
    ]
    upcoming = upcoming_within_window(appts, 24, NOW, TZ)
    assert [a.id for a in upcoming] == ["C001", "C002", "C006"]


def test_upcoming_skips_malformed_rows():
    appts = [_appt("C001", date="garbage"), _appt("C002", time="??"), _appt("C003", date="2025-06-01", time="11:00")]
    assert [a.id for a in upcoming_within_window(appts, 2, NOW, TZ)] == ["C003"]


def test_patient_history_includes_all_statuses():
    appts = [_appt("C001"), _appt("C002", patient_id="P002"),
             _appt("C003", doctor_id="D009", status="cancelled")]
    history = patient_history("P001", appts, [D1])
    assert [(h.appointment.id, h.doctor_name, h.doctor_specialty) for h in history] == [
        ("C001", "Ana Ruiz", "Cardiology"),
        ("C003", "N/A", "N/A"),
    ]


def test_reporting_service_reads_stores(reporting_service, appointments_service):
    appointments_service.create("P001", "D001", "2025-06-02", "09:00")
    appointments_service.create("P002", "D001", "2025-06-09", "09:00")
    assert reporting_service.top_doctor().count == 2
    assert reporting_service.specialty_demand() == {"Cardiology": 2}
    assert [a.id for a in reporting_service.upcoming(24)] == ["C001"]
    assert [a.id for a in reporting_service.upcoming(24 * 8)] == ["C001", "C002"]
    with pytest.raises(InvalidInputError):
        reporting_service.upcoming(-1)
