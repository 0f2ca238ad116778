# clinic_scheduler/schemas/doctors/doctor.py
from pydantic import BaseModel, Field
from typing import List, Optional

class DoctorCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    specialty: str = Field(min_length=1, max_length=100)
    start_time: str  # HH:MM or H:MM AM/PM
    end_time: str
    available_days: List[str]

class DoctorUpdate(BaseModel):
    name: Optional[str] = None
    specialty: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    available_days: Optional[List[str]] = None

class DoctorResponse(BaseModel):
    id: str
    name: str
    specialty: str
    start_time: str
    end_time: str
    available_days: List[str] = []
