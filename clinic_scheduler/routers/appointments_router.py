from dataclasses import asdict
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..application.services.appointments_service import AppointmentsService
from ..application.services.reporting_service import ReportingService
from ..config import settings
from ..dependencies import get_appointments_service, get_reporting_service
from ..exceptions import SchedulingError, create_success_response
from ..schemas.appointments.appointment import AppointmentCreate, AppointmentResponse
from ..schemas.common.common import DeleteResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def _response(a) -> AppointmentResponse:
    return AppointmentResponse(**asdict(a))


@router.get("/")
def list_appointments(
    date: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    appointments: AppointmentsService = Depends(get_appointments_service),
):
    return create_success_response([_response(a) for a in appointments.list_all(date, status)])


@router.get("/upcoming")
def upcoming_appointments(
    hours: Optional[float] = Query(None, ge=0),
    reporting: ReportingService = Depends(get_reporting_service),
):
    window = hours if hours is not None else settings.UPCOMING_WINDOW_HOURS
    return create_success_response([_response(a) for a in reporting.upcoming(window)])


@router.get("/doctor/{doctor_id}")
def doctor_agenda(doctor_id: str, appointments: AppointmentsService = Depends(get_appointments_service)):
    return create_success_response([_response(a) for a in appointments.doctor_agenda(doctor_id)])


@router.get("/{appointment_id}")
def get_appointment(appointment_id: str, appointments: AppointmentsService = Depends(get_appointments_service)):
    return create_success_response(_response(appointments.get(appointment_id)))


@router.post("/", status_code=201)
def book_appointment(data: AppointmentCreate, appointments: AppointmentsService = Depends(get_appointments_service)):
    try:
        appt = appointments.create(
            data.patient_id, data.doctor_id, data.appointment_date, data.appointment_time, data.reason
        )
        return create_success_response(_response(appt))
    except SchedulingError:
        raise
    except Exception as e:
        logger.error(f"Error booking appointment: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to book appointment")


@router.put("/{appointment_id}/cancel")
def cancel_appointment(appointment_id: str, appointments: AppointmentsService = Depends(get_appointments_service)):
    try:
        return create_success_response(_response(appointments.cancel(appointment_id)))
    except SchedulingError:
        raise
    except Exception as e:
        logger.error(f"Error cancelling appointment {appointment_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to cancel appointment")


@router.delete("/{appointment_id}")
def delete_appointment(appointment_id: str, appointments: AppointmentsService = Depends(get_appointments_service)):
    try:
        appointments.delete(appointment_id)
        return create_success_response(DeleteResponse(id=appointment_id))
    except SchedulingError:
        raise
    except Exception as e:
        logger.error(f"Error deleting appointment {appointment_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete appointment")
