# clinic_scheduler/db/models/health/appointment.py
from sqlmodel import SQLModel, Field

class AppointmentRow(SQLModel, table=True):
    __tablename__ = "appointments"
    id: str = Field(primary_key=True, max_length=20)
    position: int = Field(default=0, index=True)
    # No foreign keys: appointments outlive the doctor or patient they reference
    patient_id: str = Field(max_length=20, index=True)
    doctor_id: str = Field(max_length=20, index=True)
    appointment_date: str = Field(max_length=10)
    appointment_time: str = Field(max_length=5)
    reason: str = Field(default="")
    status: str = Field(default="scheduled")
    # ISO 8601 with UTC offset
    created_at: str
