"""
Нарезка заявленного проверяющим диапазона на слоты фиксированной длины.

Чистые функции: никакого I/O и обращения к часам, текущий момент
передаётся параметром.
"""
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import NamedTuple
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

SLOT_DURATION = timedelta(minutes=30)


class SlotRange(NamedTuple):
    start: datetime
    end: datetime


def parse_date(value: str | date) -> date | None:
    """YYYY-MM-DD -> date, None если не разобрать"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def parse_clock(value: str | time) -> time | None:
    """HH:MM или HH:MM:SS -> time, None если не разобрать"""
    if isinstance(value, time):
        return value
    raw = str(value).strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(raw, fmt).time()
        except ValueError:
            continue
    return None


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Начало дня и начало следующего дня в часовом поясе tz"""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def generate_slots(
    day: str | date,
    start_clock: str | time,
    end_clock: str | time,
    now: datetime,
    tz: ZoneInfo,
    duration: timedelta = SLOT_DURATION,
) -> list[SlotRange]:
    """
    Разбить [start_clock, end_clock) дня day на слоты длиной duration.

    Неполный хвост отбрасывается, слоты с началом <= now тоже.
    Некорректный ввод или start >= end: пустой список.
    now без часового пояса считается временем в tz.
    """
    now = localize(now, tz)
    parsed_day = parse_date(day)
    start_t = parse_clock(start_clock)
    end_t = parse_clock(end_clock)
    if parsed_day is None or start_t is None or end_t is None:
        logger.debug(f"Некорректный диапазон: {day} {start_clock}-{end_clock}")
        return []

    range_start = datetime.combine(parsed_day, start_t, tzinfo=tz).astimezone(timezone.utc)
    range_end = datetime.combine(parsed_day, end_t, tzinfo=tz).astimezone(timezone.utc)
    if range_start >= range_end:
        return []

    # Шагаем в UTC, чтобы переход на летнее время не давал пересечений
    slots = []
    slot_start = range_start
    while slot_start + duration <= range_end:
        slot_end = slot_start + duration
        if slot_start > now:
            slots.append(SlotRange(slot_start.astimezone(tz), slot_end.astimezone(tz)))
        slot_start = slot_end

    return slots


def consolidate(slots: list[SlotRange]) -> list[SlotRange]:
    """Склеить соседние слоты (конец == начало следующего) в один диапазон"""
    merged: list[SlotRange] = []
    for slot in sorted(slots):
        if merged and merged[-1].end == slot.start:
            merged[-1] = SlotRange(merged[-1].start, slot.end)
        else:
            merged.append(slot)
    return merged


def localize(value: datetime, tz: ZoneInfo) -> datetime:
    """Время без часового пояса считаем временем в tz"""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value
