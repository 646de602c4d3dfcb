"""
API бронирования для студентов.

Эндпоинты:
- GET /bookings/availability — свободное время (по направлению студента)
- POST /bookings — записаться на собеседование
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.api.deps import get_availability_service, get_booking_service
from app.api.schemas.booking import BookingRequest, BookingResponse, PublicSlotResponse
from app.services.availability_service import AvailabilityService
from app.services.booking_service import BookingService, BookingStatus

router = APIRouter(prefix="/bookings")


@router.get("/availability", response_model=dict[str, list[PublicSlotResponse]])
async def get_public_availability(
    phone: Optional[str] = Query(default=None),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Свободное время на ближайшие дни, сгруппированное по датам"""
    grouped = await service.get_public_availability(phone)
    return {
        day: [
            PublicSlotResponse(start_time=s.start, end_time=s.end, open_interviewers=s.open_interviewers)
            for s in slots
        ]
        for day, slots in grouped.items()
    }


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingRequest,
    response: Response,
    service: BookingService = Depends(get_booking_service),
):
    """
    Записаться на собеседование.

    201: запись создана и приглашение отправлено.
    207: запись создана, но календарь не ответил (выдана запасная ссылка).
    """
    result = await service.book(
        data.start_time,
        data.student_name,
        data.student_email,
        data.student_phone,
    )
    if result.status == BookingStatus.CREATED_DEGRADED:
        response.status_code = status.HTTP_207_MULTI_STATUS

    booking = result.booking
    return BookingResponse(
        id=booking.id,
        status=result.status.value,
        start_time=booking.start_time,
        end_time=booking.end_time,
        interviewer_name=result.interviewer.name,
        interviewer_email=result.interviewer.email,
        meeting_link=booking.meeting_link,
        notification_error=result.notification_error,
    )
