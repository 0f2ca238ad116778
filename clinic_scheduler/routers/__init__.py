# Routers package
from . import patients_router
from . import doctors_router
from . import appointments_router
from . import stats_router

__all__ = [
    "patients_router",
    "doctors_router",
    "appointments_router",
    "stats_router",
]
