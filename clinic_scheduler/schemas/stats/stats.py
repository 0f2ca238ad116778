# clinic_scheduler/schemas/stats/stats.py
from pydantic import BaseModel
from typing import Optional

from ..doctors.doctor import DoctorResponse

class DoctorWorkloadResponse(BaseModel):
    doctor: Optional[DoctorResponse] = None
    count: int
