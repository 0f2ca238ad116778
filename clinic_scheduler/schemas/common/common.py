# clinic_scheduler/schemas/common/common.py
from pydantic import BaseModel

class DeleteResponse(BaseModel):
    id: str
    cancelled_appointments: int = 0
