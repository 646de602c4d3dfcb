"""
Схемы для управления доступностью проверяющих.
"""
from datetime import date, datetime

from pydantic import BaseModel, Field

CLOCK_PATTERN = r"^\d{2}:\d{2}(:\d{2})?$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


# === Запросы ===

class AvailabilityEntry(BaseModel):
    """Диапазон времени в конкретный день (время в часовом поясе сервиса)"""
    date: str | None = Field(default=None, description="Дата YYYY-MM-DD")
    start_time: str | None = Field(default=None, description="Начало HH:MM")
    end_time: str | None = Field(default=None, description="Конец HH:MM")


class DeclareAvailabilityRequest(BaseModel):
    availabilities: list[AvailabilityEntry] = Field(min_length=1)


class TimeRange(BaseModel):
    start_time: str = Field(pattern=CLOCK_PATTERN)
    end_time: str = Field(pattern=CLOCK_PATTERN)


class DayRanges(BaseModel):
    """Новый набор диапазонов на день (пустой список очищает день)"""
    date: str = Field(pattern=DATE_PATTERN)
    ranges: list[TimeRange] = Field(default_factory=list)


class ReplaceDaysRequest(BaseModel):
    days: list[DayRanges] = Field(min_length=1)


class DeleteAvailabilityRequest(BaseModel):
    """Без часового пояса время считается в часовом поясе сервиса"""
    start_time: datetime
    end_time: datetime


# === Ответы API ===

class DeclareAvailabilityResponse(BaseModel):
    slots_created: int
    skipped_ranges: int = Field(default=0, description="Диапазонов вне допустимого окна")


class ReplaceDaysResponse(BaseModel):
    slots_created: int
    slots_removed: int


class DeleteAvailabilityResponse(BaseModel):
    deleted_count: int


class RangeResponse(BaseModel):
    start_time: datetime
    end_time: datetime


class DayAvailabilityResponse(BaseModel):
    date: date
    ranges: list[RangeResponse]
