"""Attendance service routers."""

from services.attendance_service.routers.checkin_codes import router as checkin_codes_router
from services.attendance_service.routers.geofence import router as geofence_router
from services.attendance_service.routers.time_entries import router as time_entries_router

__all__ = [
    "checkin_codes_router",
    "geofence_router",
    "time_entries_router",
]
