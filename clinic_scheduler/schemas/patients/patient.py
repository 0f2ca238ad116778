# clinic_scheduler/schemas/patients/patient.py
from pydantic import BaseModel, Field
from typing import Optional

class PatientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    age: int
    phone: str
    email: str

class PatientUpdate(BaseModel):
    name: Optional[str] = None
    age: Optional[int] = None
    phone: Optional[str] = None
    email: Optional[str] = None

class PatientResponse(BaseModel):
    id: str
    name: str
    age: int
    phone: str
    email: str
    registered_on: str
