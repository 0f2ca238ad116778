from datetime import tzinfo
from functools import lru_cache

from fastapi import Depends
from sqlmodel import Session

from .application.ports.records_repo import ClinicRecords
from .application.services.appointments_service import AppointmentsService
from .application.services.doctors_service import DoctorsService
from .application.services.patients_service import PatientsService
from .application.services.reporting_service import ReportingService
from .application.services.temporal import resolve_timezone
from .config import settings
from .database import get_session
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.persistence.sqlalchemy.repositories.records_repository_sql import sql_clinic_records

audit_logger = StdAuditLogger()


@lru_cache()
def get_timezone() -> tzinfo:
    return resolve_timezone(settings.TIMEZONE)


def get_records(session: Session = Depends(get_session)) -> ClinicRecords:
    return sql_clinic_records(session)


def get_appointments_service(
    records: ClinicRecords = Depends(get_records),
    tz: tzinfo = Depends(get_timezone),
) -> AppointmentsService:
    return AppointmentsService(records=records, tz=tz, audit=audit_logger)


def get_patients_service(
    records: ClinicRecords = Depends(get_records),
    tz: tzinfo = Depends(get_timezone),
    appointments: AppointmentsService = Depends(get_appointments_service),
) -> PatientsService:
    return PatientsService(records=records, appointments=appointments, tz=tz, audit=audit_logger)


def get_doctors_service(
    records: ClinicRecords = Depends(get_records),
    appointments: AppointmentsService = Depends(get_appointments_service),
) -> DoctorsService:
    return DoctorsService(records=records, appointments=appointments, audit=audit_logger)


def get_reporting_service(
    records: ClinicRecords = Depends(get_records),
    tz: tzinfo = Depends(get_timezone),
) -> ReportingService:
    return ReportingService(records=records, tz=tz)
