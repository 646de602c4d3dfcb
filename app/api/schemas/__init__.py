from app.api.schemas.availability import (
    AvailabilityEntry,
    DeclareAvailabilityRequest,
    DeclareAvailabilityResponse,
    ReplaceDaysRequest,
    ReplaceDaysResponse,
    DeleteAvailabilityRequest,
    DeleteAvailabilityResponse,
    DayAvailabilityResponse,
)
from app.api.schemas.booking import (
    BookingRequest,
    BookingResponse,
    PublicSlotResponse,
    StudentCheckRequest,
    StudentCheckResponse,
)

__all__ = [
    "AvailabilityEntry",
    "DeclareAvailabilityRequest",
    "DeclareAvailabilityResponse",
    "ReplaceDaysRequest",
    "ReplaceDaysResponse",
    "DeleteAvailabilityRequest",
    "DeleteAvailabilityResponse",
    "DayAvailabilityResponse",
    "BookingRequest",
    "BookingResponse",
    "PublicSlotResponse",
    "StudentCheckRequest",
    "StudentCheckResponse",
]
