import json
import logging
from datetime import datetime
from typing import Any, Callable, List, Type

from sqlmodel import Session, SQLModel, select

from .....db.models import AppointmentRow, DoctorRow, PatientRow
from .....application.ports.records_repo import (
    Appointment,
    ClinicRecords,
    Doctor,
    Patient,
    RecordStore,
)

logger = logging.getLogger(__name__)


class SqlRecordStore(RecordStore):
    """A record collection kept in one table.

    ``position`` holds each record's place in the collection so ``load_all``
    gives records back in the order they were saved.
    """

    def __init__(self, session: Session, row_model: Type[SQLModel],
                 to_dto: Callable[[Any], Any], to_row: Callable[[Any, int], Any]):
        self.session = session
        self.row_model = row_model
        self._to_dto = to_dto
        self._to_row = to_row

    def load_all(self) -> List[Any]:
        rows = self.session.exec(select(self.row_model).order_by(self.row_model.position)).all()
        return [self._to_dto(r) for r in rows]

    def save_all(self, records: List[Any]) -> None:
        try:
            keep = {r.id for r in records}
            for row in self.session.exec(select(self.row_model)).all():
                if row.id not in keep:
                    self.session.delete(row)
            for position, record in enumerate(records):
                self.session.merge(self._to_row(record, position))
            self.session.commit()
        except Exception:
            logger.exception(f"Failed to save {self.row_model.__tablename__}")
            self.session.rollback()
            raise


def _patient_to_dto(p: PatientRow) -> Patient:
    return Patient(
        id=p.id,
        name=p.name,
        age=p.age,
        phone=p.phone,
        email=p.email,
        registered_on=p.registered_on,
    )


def _patient_to_row(p: Patient, position: int) -> PatientRow:
    return PatientRow(
        id=p.id,
        position=position,
        name=p.name,
        age=p.age,
        phone=p.phone,
        email=p.email,
        registered_on=p.registered_on,
    )


def _doctor_to_dto(d: DoctorRow) -> Doctor:
    return Doctor(
        id=d.id,
        name=d.name,
        specialty=d.specialty,
        start_time=d.start_time,
        end_time=d.end_time,
        available_days=json.loads(d.available_days or "[]"),
    )


def _doctor_to_row(d: Doctor, position: int) -> DoctorRow:
    return DoctorRow(
        id=d.id,
        position=position,
        name=d.name,
        specialty=d.specialty,
        start_time=d.start_time,
        end_time=d.end_time,
        available_days=json.dumps(list(d.available_days)),
    )


def _appt_to_dto(a: AppointmentRow) -> Appointment:
    return Appointment(
        id=a.id,
        patient_id=a.patient_id,
        doctor_id=a.doctor_id,
        appointment_date=a.appointment_date,
        appointment_time=a.appointment_time,
        reason=a.reason,
        status=a.status,
        created_at=datetime.fromisoformat(a.created_at),
    )


def _appt_to_row(a: Appointment, position: int) -> AppointmentRow:
    return AppointmentRow(
        id=a.id,
        position=position,
        patient_id=a.patient_id,
        doctor_id=a.doctor_id,
        appointment_date=a.appointment_date,
        appointment_time=a.appointment_time,
        reason=a.reason,
        status=a.status,
        created_at=a.created_at.isoformat(),
    )


def sql_clinic_records(session: Session) -> ClinicRecords:
    return ClinicRecords(
        patients=SqlRecordStore(session, PatientRow, _patient_to_dto, _patient_to_row),
        doctors=SqlRecordStore(session, DoctorRow, _doctor_to_dto, _doctor_to_row),
        appointments=SqlRecordStore(session, AppointmentRow, _appt_to_dto, _appt_to_row),
    )
