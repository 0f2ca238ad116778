# clinic_scheduler/db/models/health/doctor.py
from sqlmodel import SQLModel, Field

class DoctorRow(SQLModel, table=True):
    __tablename__ = "doctors"
    id: str = Field(primary_key=True, max_length=20)
    position: int = Field(default=0, index=True)
    name: str = Field(max_length=100)
    specialty: str = Field(max_length=100)
    start_time: str = Field(max_length=5)
    end_time: str = Field(max_length=5)
    # JSON list of weekday names
    available_days: str = Field(default="[]")
