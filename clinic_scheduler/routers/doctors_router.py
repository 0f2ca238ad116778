from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..application.services.appointments_service import AppointmentsService
from ..application.services.doctors_service import DoctorsService
from ..dependencies import get_appointments_service, get_doctors_service
from ..exceptions import SchedulingError, create_success_response
from ..schemas.common.common import DeleteResponse
from ..schemas.doctors.doctor import DoctorCreate, DoctorResponse, DoctorUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctors", tags=["Doctors"])


@router.get("/")
def list_doctors(doctors: DoctorsService = Depends(get_doctors_service)):
    return create_success_response([DoctorResponse(**asdict(d)) for d in doctors.list()])


@router.get("/available")
def available_doctors(
    date: str = Query(..., description="YYYY-MM-DD or DD/MM/YYYY"),
    time: str = Query(..., description="HH:MM or H:MM AM/PM"),
    appointments: AppointmentsService = Depends(get_appointments_service),
):
    found = appointments.find_available_doctors(date, time)
    return create_success_response([DoctorResponse(**asdict(d)) for d in found])


@router.get("/specialty/{specialty}")
def doctors_by_specialty(specialty: str, doctors: DoctorsService = Depends(get_doctors_service)):
    return create_success_response([DoctorResponse(**asdict(d)) for d in doctors.by_specialty(specialty)])


@router.get("/{doctor_id}")
def get_doctor(doctor_id: str, doctors: DoctorsService = Depends(get_doctors_service)):
    return create_success_response(DoctorResponse(**asdict(doctors.get(doctor_id))))


@router.post("/", status_code=201)
def register_doctor(data: DoctorCreate, doctors: DoctorsService = Depends(get_doctors_service)):
    try:
        d = doctors.register(data.name, data.specialty, data.start_time, data.end_time, data.available_days)
        return create_success_response(DoctorResponse(**asdict(d)))
    except SchedulingError:
        raise
    except Exception as e:
        logger.error(f"Error registering doctor: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to register doctor")


@router.put("/{doctor_id}")
def update_doctor(doctor_id: str, data: DoctorUpdate, doctors: DoctorsService = Depends(get_doctors_service)):
    try:
        d = doctors.update(doctor_id, **data.model_dump(exclude_unset=True))
        return create_success_response(DoctorResponse(**asdict(d)))
    except SchedulingError:
        raise
    except Exception as e:
        logger.error(f"Error updating doctor {doctor_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update doctor")


@router.delete("/{doctor_id}")
def delete_doctor(doctor_id: str, doctors: DoctorsService = Depends(get_doctors_service)):
    try:
        cancelled = doctors.delete(doctor_id)
        return create_success_response(DeleteResponse(id=doctor_id, cancelled_appointments=cancelled))
    except SchedulingError:
        raise
    except Exception as e:
        logger.error(f"Error deleting doctor {doctor_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete doctor")
