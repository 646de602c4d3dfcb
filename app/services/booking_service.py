"""
Бронирование слота студентом.

Порядок проверок:
1. входные данные и время (не в прошлом)
2. студент есть в списке, для его направления есть проверяющие
3. у студента ещё нет записи (ни по email из списка, ни по введённому)
4. на это время есть свободный слот у проверяющих из пула

Затем случайный выбор слота и атомарный захват в одной транзакции:
слот перечитывается с блокировкой, проверки 3-4 повторяются теми же
функциями, слот помечается занятым, создаётся запись.

После коммита (best-effort): событие в календаре и строка в журнале.
Их ошибки не откатывают запись.
"""
import asyncio
import logging
import random
import re
from datetime import datetime
from enum import Enum
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config import settings
from app.core.exceptions import ValidationError, AlreadyBooked, SlotUnavailable
from app.services.calendar_service import CalendarNotifier
from app.services.eligibility_service import EligibilityService
from app.services.google_sheets_service import GoogleSheetsService, BookingRow
from app.services.slot_generator import localize
from db.models import Availability, Booking, Interviewer, Student
from db.repositories import (
    AvailabilityRepository, BookingRepository, InterviewerRepository, normalize_phone
)

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class BookingStatus(str, Enum):
    """Итог бронирования"""
    CREATED = "created"                    # Запись создана, событие в календаре создано
    CREATED_DEGRADED = "created_degraded"  # Запись создана, календарь не ответил


class BookingResult(NamedTuple):
    booking: Booking
    interviewer: Interviewer
    status: BookingStatus
    notification_error: str | None = None


def fallback_meeting_link(interviewer_name: str, student_name: str, base_url: str | None = None) -> str:
    """Запасная ссылка на встречу, если календарь недоступен"""
    base_url = (base_url or settings.fallback_meeting_base_url).rstrip("/")

    def slug(value: str) -> str:
        return re.sub(r"\s+", "-", value.strip().lower())

    return f"{base_url}/{slug(interviewer_name)}-{slug(student_name)}"


def validate_booking_input(student_name: str, student_email: str, student_phone: str) -> None:
    if not student_name or not student_name.strip():
        raise ValidationError("Имя студента обязательно")
    if not student_email or not EMAIL_RE.match(student_email.strip()):
        raise ValidationError("Некорректный email")
    if not student_phone or not 7 <= len(normalize_phone(student_phone).lstrip("+")) <= 15:
        raise ValidationError("Некорректный номер телефона")


async def ensure_not_booked(bookings: BookingRepository, *emails: str) -> None:
    """Ни на один из email не должно быть записи, ни прошлой, ни будущей"""
    for email in dict.fromkeys(e.strip().lower() for e in emails):
        existing = await bookings.get_by_email(email)
        if existing:
            raise AlreadyBooked("Вы уже записаны на собеседование", booking=existing)


def ensure_slot_open(slot: Optional[Availability]) -> Availability:
    if slot is None or slot.is_booked:
        raise SlotUnavailable("Это время уже занято. Пожалуйста, выберите другое.")
    return slot


class BookingService:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        notifier: CalendarNotifier,
        sheets: GoogleSheetsService | None = None,
        sheet_url: str | None = None,
        tz: ZoneInfo | None = None,
        department_matching: bool | None = None,
        rng: random.Random | None = None,
    ):
        self.session_maker = session_maker
        self.notifier = notifier
        self.sheets = sheets
        self.sheet_url = sheet_url
        self.tz = tz or settings.tz
        self.department_matching = department_matching
        self.rng = rng or random.Random()

    async def book(
        self,
        start_time: datetime,
        student_name: str,
        student_email: str,
        student_phone: str,
        now: datetime | None = None,
    ) -> BookingResult:
        """Записать студента на время start_time к случайному свободному проверяющему"""
        validate_booking_input(student_name, student_email, student_phone)
        start_time = localize(start_time, self.tz)
        now = localize(now, self.tz) if now else datetime.now(self.tz)
        if start_time < now:
            raise ValidationError("Нельзя записаться на время в прошлом")

        # Быстрые проверки до транзакции
        async with self.session_maker() as session:
            eligibility = EligibilityService(session, department_matching=self.department_matching)
            student = await eligibility.resolve_student(student_phone)
            # Запись хранится под email из списка, введённый тоже не должен быть занят
            email = student.email.strip().lower()
            emails = (email, student_email)
            pool = await eligibility.eligible_interviewer_ids(student)
            await ensure_not_booked(BookingRepository(session), *emails)
            candidates = await AvailabilityRepository(session).find_open_at(start_time, pool)

        if not candidates:
            raise SlotUnavailable("Это время уже занято. Пожалуйста, выберите другое.")

        # Равномерно по проверяющим, без перебора при проигрыше гонки
        chosen = self.rng.choice(candidates)
        booking, interviewer = await self._claim(chosen.id, student_name.strip(), emails, student.phone)
        logger.info(
            f"Бронирование {booking.id}: {email} -> проверяющий {interviewer.id}, "
            f"{booking.start_time.isoformat()} (кандидатов {len(candidates)})"
        )

        result = await self._notify(booking, interviewer)
        await self._log_to_sheet(result, student)
        return result

    async def _claim(
        self,
        slot_id: int,
        student_name: str,
        emails: tuple[str, str],
        phone: str,
    ) -> tuple[Booking, Interviewer]:
        """Атомарный захват слота и создание записи под emails[0]"""
        email = emails[0]
        try:
            async with self.session_maker.begin() as session:
                availability = AvailabilityRepository(session)
                bookings = BookingRepository(session)

                slot = ensure_slot_open(await availability.get_for_update(slot_id))
                await ensure_not_booked(bookings, *emails)
                if not await availability.mark_booked(slot.id):
                    raise SlotUnavailable("Это время только что заняли. Пожалуйста, выберите другое.")

                booking = await bookings.create_for_slot(slot, student_name, email, phone)
                interviewer = await InterviewerRepository(session).get_by_id(slot.interviewer_id)
        except IntegrityError:
            # Параллельный запрос успел раньше: разбираемся, кто именно
            logger.info(f"Конфликт уникальности при бронировании слота {slot_id} для {email}")
            async with self.session_maker() as session:
                await ensure_not_booked(BookingRepository(session), *emails)
            raise SlotUnavailable("Это время только что заняли. Пожалуйста, выберите другое.") from None

        return booking, interviewer

    async def _notify(self, booking: Booking, interviewer: Interviewer) -> BookingResult:
        """Создать событие в календаре; при ошибке запасная ссылка"""
        status = BookingStatus.CREATED
        error = None
        event_id = None
        try:
            event = await self.notifier.create_event(booking, interviewer)
            event_id = event.event_id
            link = event.meeting_link or fallback_meeting_link(interviewer.name, booking.student_name)
        except Exception as e:
            logger.exception(f"Не удалось создать событие для бронирования {booking.id}: {e}")
            status = BookingStatus.CREATED_DEGRADED
            error = str(e) or e.__class__.__name__
            link = fallback_meeting_link(interviewer.name, booking.student_name)

        booking.meeting_link = link
        booking.google_event_id = event_id
        try:
            async with self.session_maker.begin() as session:
                await BookingRepository(session).attach_meeting(booking.id, link, event_id)
        except SQLAlchemyError as e:
            logger.error(f"Не удалось сохранить ссылку для бронирования {booking.id}: {e}")

        return BookingResult(booking=booking, interviewer=interviewer, status=status, notification_error=error)

    async def _log_to_sheet(self, result: BookingResult, student: Student) -> None:
        if not self.sheets or not self.sheet_url:
            return

        booking = result.booking
        row = BookingRow(
            application_id=student.application_id,
            student_name=booking.student_name,
            student_email=booking.student_email,
            student_phone=booking.student_phone,
            department=student.department,
            start_time=booking.start_time,
            end_time=booking.end_time,
            interviewer_name=result.interviewer.name,
            interviewer_email=result.interviewer.email,
            meeting_link=booking.meeting_link or "",
        )
        try:
            await asyncio.to_thread(self.sheets.append_booking, self.sheet_url, row)
        except Exception as e:
            logger.error(f"Не удалось записать бронирование {booking.id} в таблицу: {e}")
