"""
Общие зависимости роутеров: проверяющий, админ, сервисы.
"""
from typing import Annotated

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config import settings
from app.core.exceptions import InterviewerNotFound, AdminRequired
from app.services.availability_service import AvailabilityService
from app.services.booking_service import BookingService
from app.services.calendar_service import calendar_service
from app.services.google_sheets_service import google_sheets_service
from db.models import Interviewer
from db.repositories import InterviewerRepository
from db.session import get_db, get_session_maker


def get_interviewer_id(
    interviewer_id: int | None = Query(default=None)
) -> int:
    """Получить interviewer_id из query параметров (в dev тестовый проверяющий)"""
    if interviewer_id is not None:
        return interviewer_id
    if settings.is_dev:
        return settings.dev_interviewer_id
    raise InterviewerNotFound("interviewer_id обязателен")


InterviewerId = Annotated[int, Depends(get_interviewer_id)]


async def get_current_interviewer(
    interviewer_id: InterviewerId,
    db: AsyncSession = Depends(get_db),
) -> Interviewer:
    interviewer = await InterviewerRepository(db).get_by_id(interviewer_id)
    if not interviewer:
        raise InterviewerNotFound("Проверяющий не найден")
    return interviewer


CurrentInterviewer = Annotated[Interviewer, Depends(get_current_interviewer)]


async def require_admin(interviewer: CurrentInterviewer) -> Interviewer:
    """Админ: проверяющий, чей email указан в ADMIN_EMAILS"""
    if not settings.is_admin(interviewer.email):
        raise AdminRequired("Нет доступа к админ-панели")
    return interviewer


AdminInterviewer = Annotated[Interviewer, Depends(require_admin)]


def get_availability_service(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_session_maker),
) -> AvailabilityService:
    return AvailabilityService(session_maker)


def get_booking_service(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_session_maker),
) -> BookingService:
    return BookingService(
        session_maker,
        notifier=calendar_service,
        sheets=google_sheets_service,
        sheet_url=settings.google_sheet_id or None,
    )
