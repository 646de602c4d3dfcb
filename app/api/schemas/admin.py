"""
Схемы админ-панели.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class InterviewerResponse(BaseModel):
    id: int
    name: str
    email: str
    department: Optional[str] = None
    calendar_connected: bool
    is_admin: bool = False


class InterviewerStats(BaseModel):
    id: int
    name: str
    email: str
    department: Optional[str] = None
    calendar_connected: bool
    total_slots: int
    booked_slots: int


class IntervieweeResponse(BaseModel):
    """Запись студента"""
    booking_id: int
    student_name: str
    student_email: str
    student_phone: Optional[str] = None
    start_time: datetime
    end_time: datetime
    interviewer_name: str
    interviewer_email: str
    meeting_link: Optional[str] = None


class BookedInterviewResponse(BaseModel):
    """Запись студента из списка с номером заявки"""
    application_id: str
    student_name: str
    phone: str
    interviewer_name: str
    start_time: datetime
    meeting_link: Optional[str] = None


class BookingStatusResponse(BaseModel):
    """Кто из списка записался, а кто нет"""
    total_students: int
    booked: int
    not_booked: int
    booked_phones: list[str]
    not_booked_phones: list[str]


class DailyStats(BaseModel):
    """Статистика за день"""
    date: str
    total_slots: int
    booked_slots: int
    open_slots: int
    booking_rate: int = Field(description="Доля занятых слотов, %")


class DashboardResponse(BaseModel):
    interviewers_total: int
    interviewers_with_slots: int
    students_total: int
    bookings_total: int
    booking_rate: int = Field(description="Доля занятых слотов за три дня, %")
    days: list[DailyStats] = Field(description="Сегодня и два следующих дня")
