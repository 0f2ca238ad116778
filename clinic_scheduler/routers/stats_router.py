from dataclasses import asdict
from fastapi import APIRouter, Depends

from ..application.services.reporting_service import ReportingService
from ..dependencies import get_reporting_service
from ..exceptions import create_success_response
from ..schemas.doctors.doctor import DoctorResponse
from ..schemas.stats.stats import DoctorWorkloadResponse

router = APIRouter(prefix="/stats", tags=["Statistics"])


@router.get("/doctors")
def top_doctor(reporting: ReportingService = Depends(get_reporting_service)):
    workload = reporting.top_doctor()
    doctor = DoctorResponse(**asdict(workload.doctor)) if workload.doctor else None
    return create_success_response(DoctorWorkloadResponse(doctor=doctor, count=workload.count))


@router.get("/specialties")
def specialty_demand(reporting: ReportingService = Depends(get_reporting_service)):
    return create_success_response(reporting.specialty_demand())
