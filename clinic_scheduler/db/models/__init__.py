# Models package (re-export feature modules for stable imports)
from .health.patient import PatientRow
from .health.doctor import DoctorRow
from .health.appointment import AppointmentRow

__all__ = [
    "PatientRow",
    "DoctorRow",
    "AppointmentRow",
]
