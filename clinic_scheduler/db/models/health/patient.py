# clinic_scheduler/db/models/health/patient.py
from sqlmodel import SQLModel, Field

class PatientRow(SQLModel, table=True):
    __tablename__ = "patients"
    id: str = Field(primary_key=True, max_length=20)
    position: int = Field(default=0, index=True)
    name: str = Field(max_length=100)
    age: int
    phone: str = Field(max_length=30)
    email: str = Field(max_length=100, index=True)
    registered_on: str = Field(max_length=10)
