"""
API доступности проверяющего.

Эндпоинты:
- POST /availability/future — добавить слоты на ближайшие дни
- POST /availability/today — добавить слоты на сегодня
- PUT /availability/days — пересоздать свободные слоты выбранных дней
- DELETE /availability — удалить свободные слоты в диапазоне
- GET /availability — мои свободные слоты по дням
"""
from typing import Literal

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import CurrentInterviewer, get_availability_service
from app.api.schemas.availability import (
    DeclareAvailabilityRequest, DeclareAvailabilityResponse,
    ReplaceDaysRequest, ReplaceDaysResponse,
    DeleteAvailabilityRequest, DeleteAvailabilityResponse,
    DayAvailabilityResponse, RangeResponse,
)
from app.services.availability_service import AvailabilityService

router = APIRouter(prefix="/availability")


async def _declare(
    mode: Literal["future", "today"],
    data: DeclareAvailabilityRequest,
    interviewer: CurrentInterviewer,
    response: Response,
    service: AvailabilityService,
) -> DeclareAvailabilityResponse:
    entries = [(e.date, e.start_time, e.end_time) for e in data.availabilities]
    result = await service.declare_availability(interviewer.id, entries, mode=mode)
    # Ничего не создано (всё в прошлом или дубликаты): не ошибка
    response.status_code = status.HTTP_201_CREATED if result.slots_created else status.HTTP_200_OK
    return DeclareAvailabilityResponse(
        slots_created=result.slots_created,
        skipped_ranges=result.skipped_ranges,
    )


@router.post("/future", response_model=DeclareAvailabilityResponse, status_code=status.HTTP_201_CREATED)
async def declare_future_availability(
    data: DeclareAvailabilityRequest,
    interviewer: CurrentInterviewer,
    response: Response,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Добавить доступность на сегодня и ближайшие дни (даты вне окна пропускаются)"""
    return await _declare("future", data, interviewer, response, service)


@router.post("/today", response_model=DeclareAvailabilityResponse, status_code=status.HTTP_201_CREATED)
async def declare_today_availability(
    data: DeclareAvailabilityRequest,
    interviewer: CurrentInterviewer,
    response: Response,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Добавить доступность только на сегодня"""
    return await _declare("today", data, interviewer, response, service)


@router.put("/days", response_model=ReplaceDaysResponse)
async def replace_availability_for_days(
    data: ReplaceDaysRequest,
    interviewer: CurrentInterviewer,
    service: AvailabilityService = Depends(get_availability_service),
):
    """
    Заменить доступность на выбранные дни.

    Свободные слоты этих дней удаляются, забронированные остаются.
    """
    days = [
        (day.date, [(r.start_time, r.end_time) for r in day.ranges])
        for day in data.days
    ]
    result = await service.replace_availability_for_days(interviewer.id, days)
    return ReplaceDaysResponse(slots_created=result.slots_created, slots_removed=result.slots_removed)


@router.delete("", response_model=DeleteAvailabilityResponse)
async def delete_availability(
    data: DeleteAvailabilityRequest,
    interviewer: CurrentInterviewer,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Удалить свободные слоты, целиком лежащие в диапазоне"""
    deleted = await service.delete_availability(interviewer.id, data.start_time, data.end_time)
    return DeleteAvailabilityResponse(deleted_count=deleted)


@router.get("", response_model=list[DayAvailabilityResponse])
async def list_my_availability(
    interviewer: CurrentInterviewer,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Мои будущие свободные слоты, склеенные в диапазоны"""
    days = await service.list_availability(interviewer.id)
    return [
        DayAvailabilityResponse(
            date=day.date,
            ranges=[RangeResponse(start_time=r.start, end_time=r.end) for r in day.ranges],
        )
        for day in days
    ]
