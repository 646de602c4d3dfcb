"""
Схемы для бронирования и проверки студента.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PHONE_PATTERN = r"^\+?[\d\s\-()]{7,20}$"


class BookingRequest(BaseModel):
    """Запись на собеседование"""
    start_time: datetime = Field(description="Начало слота (ISO 8601)")
    student_name: str = Field(min_length=1, max_length=200)
    student_email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    student_phone: str = Field(pattern=PHONE_PATTERN)


class BookingResponse(BaseModel):
    id: int
    status: str = Field(description="created | created_degraded")
    start_time: datetime
    end_time: datetime
    interviewer_name: str
    interviewer_email: str
    meeting_link: Optional[str] = None
    notification_error: Optional[str] = None


class PublicSlotResponse(BaseModel):
    start_time: datetime
    end_time: datetime
    open_interviewers: int = Field(description="Сколько проверяющих свободны в это время")


class StudentCheckRequest(BaseModel):
    phone: str = Field(pattern=PHONE_PATTERN)


class StudentCheckResponse(BaseModel):
    authorized: bool
