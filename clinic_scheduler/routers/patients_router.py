from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException
import logging

from ..application.services.patients_service import PatientsService
from ..dependencies import get_patients_service
from ..exceptions import SchedulingError, create_success_response
from ..schemas.appointments.appointment import HistoryEntryResponse
from ..schemas.common.common import DeleteResponse
from ..schemas.patients.patient import PatientCreate, PatientResponse, PatientUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patients", tags=["Patients"])


@router.get("/")
def list_patients(patients: PatientsService = Depends(get_patients_service)):
    return create_success_response([PatientResponse(**asdict(p)) for p in patients.list()])


@router.get("/{patient_id}")
def get_patient(patient_id: str, patients: PatientsService = Depends(get_patients_service)):
    return create_success_response(PatientResponse(**asdict(patients.get(patient_id))))


@router.post("/", status_code=201)
def register_patient(data: PatientCreate, patients: PatientsService = Depends(get_patients_service)):
    try:
        p = patients.register(data.name, data.age, data.phone, data.email)
        return create_success_response(PatientResponse(**asdict(p)))
    except SchedulingError:
        raise
    except Exception as e:
        logger.error(f"Error registering patient: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to register patient")


@router.put("/{patient_id}")
def update_patient(patient_id: str, data: PatientUpdate, patients: PatientsService = Depends(get_patients_service)):
    try:
        p = patients.update(patient_id, **data.model_dump(exclude_unset=True))
        return create_success_response(PatientResponse(**asdict(p)))
    except SchedulingError:
        raise
    except Exception as e:
        logger.error(f"Error updating patient {patient_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update patient")


@router.delete("/{patient_id}")
def delete_patient(patient_id: str, patients: PatientsService = Depends(get_patients_service)):
    try:
        cancelled = patients.delete(patient_id)
        return create_success_response(DeleteResponse(id=patient_id, cancelled_appointments=cancelled))
    except SchedulingError:
        raise
    except Exception as e:
        logger.error(f"Error deleting patient {patient_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete patient")


@router.get("/{patient_id}/history")
def patient_history(patient_id: str, patients: PatientsService = Depends(get_patients_service)):
    return create_success_response([
        HistoryEntryResponse(
            **asdict(entry.appointment),
            doctor_name=entry.doctor_name,
            doctor_specialty=entry.doctor_specialty,
        )
        for entry in patients.history(patient_id)
    ])
