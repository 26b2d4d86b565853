"""API v1 router configuration."""

from fastapi import APIRouter

from doctrizer.api.v1.endpoints import (
    appointments,
    auth,
    availability,
    bookings,
    doctor_workspace,
    doctors,
    health,
    users,
)

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(doctors.router, prefix="/doctors", tags=["Doctors"])
api_router.include_router(availability.router, prefix="/availability", tags=["Availability"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
api_router.include_router(doctor_workspace.router, tags=["Doctor Workspace"])
