from .availability import AvailabilityRepository
from .bookings import BookingRepository
from .interviewers import InterviewerRepository
from .students import StudentRepository, normalize_phone

__all__ = [
    "AvailabilityRepository",
    "BookingRepository",
    "InterviewerRepository",
    "StudentRepository",
    "normalize_phone",
]
