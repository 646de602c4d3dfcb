"""
Ошибки бронирования и управления доступностью.

Каждая ошибка знает свой код (для клиента) и HTTP статус;
обработчики в app/core/error_handlers.py превращают их в JSON ответ.
"""
from typing import Any


class BookingError(Exception):
    """Базовая ошибка предметной области"""

    code: str = "booking_error"
    status_code: int = 400

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "detail": self.message, **self.extra}


class ValidationError(BookingError):
    """Некорректные или отсутствующие входные данные, время в прошлом"""

    code = "validation_error"
    status_code = 400


class NotAuthorized(BookingError):
    """Студента нет в загруженном списке"""

    code = "not_authorized"
    status_code = 403


class NoInterviewersAvailable(BookingError):
    """Для направления студента нет ни одного проверяющего"""

    code = "no_interviewers"
    status_code = 409


class AlreadyBooked(BookingError):
    """У студента уже есть запись; в ответ добавляется существующая запись"""

    code = "already_booked"
    status_code = 409

    def __init__(self, message: str, booking: Any = None):
        self.booking = booking
        extra = {}
        if booking is not None:
            extra["booking"] = {
                "id": booking.id,
                "start_time": booking.start_time.isoformat(),
                "end_time": booking.end_time.isoformat(),
                "meeting_link": booking.meeting_link,
            }
        super().__init__(message, **extra)


class SlotUnavailable(BookingError):
    """Свободного слота на это время нет (занят или проигран в гонке)"""

    code = "slot_unavailable"
    status_code = 409


class AvailabilityNotFound(BookingError):
    """В указанном диапазоне нет свободных слотов для удаления"""

    code = "not_found"
    status_code = 404


class InterviewerNotFound(BookingError):
    """Проверяющий не определён"""

    code = "not_authenticated"
    status_code = 401


class AdminRequired(BookingError):
    code = "forbidden"
    status_code = 403


class CalendarError(Exception):
    """Ошибка создания события в календаре (не ломает бронирование)"""
