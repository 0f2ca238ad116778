# clinic_scheduler/schemas/appointments/appointment.py
from pydantic import BaseModel, Field
from datetime import datetime

class AppointmentCreate(BaseModel):
    patient_id: str
    doctor_id: str
    appointment_date: str  # YYYY-MM-DD or DD/MM/YYYY
    appointment_time: str  # HH:MM or H:MM AM/PM
    reason: str = Field(default="", max_length=200)

class AppointmentResponse(BaseModel):
    id: str
    patient_id: str
    doctor_id: str
    appointment_date: str
    appointment_time: str
    reason: str
    status: str
    created_at: datetime

class HistoryEntryResponse(AppointmentResponse):
    doctor_name: str
    doctor_specialty: str
