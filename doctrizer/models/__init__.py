"""Database models."""

from doctrizer.models.appointments import appointments
from doctrizer.models.appointments import metadata as appointments_metadata
from doctrizer.models.doctor_availability import doctor_availability
from doctrizer.models.doctor_availability import metadata as availability_metadata
from doctrizer.models.doctors import doctors
from doctrizer.models.doctors import metadata as doctors_metadata
from doctrizer.models.profiles import metadata as profiles_metadata
from doctrizer.models.profiles import profiles
from doctrizer.models.users import metadata as users_metadata
from doctrizer.models.users import users

# Creation order: referenced tables first
ALL_METADATA = [
    users_metadata,
    profiles_metadata,
    doctors_metadata,
    availability_metadata,
    appointments_metadata,
]

__all__ = [
    "ALL_METADATA",
    "appointments",
    "doctor_availability",
    "doctors",
    "profiles",
    "users",
]
