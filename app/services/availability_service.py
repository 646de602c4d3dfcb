"""
Управление доступностью проверяющих.

Операции:
- declare_availability — добавить слоты (идемпотентно, дубликаты пропускаются)
- replace_availability_for_days — пересоздать свободные слоты выбранных дней
- delete_availability — удалить свободные слоты в диапазоне
- list_availability — мои свободные слоты, склеенные в диапазоны по дням
- get_public_availability — свободное время для студентов
"""
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Literal, NamedTuple, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config import settings
from app.core.exceptions import ValidationError, AvailabilityNotFound, NoInterviewersAvailable
from app.services.eligibility_service import EligibilityService
from app.services.slot_generator import (
    SlotRange, generate_slots, consolidate, parse_date, day_bounds, localize
)
from db.repositories import AvailabilityRepository

logger = logging.getLogger(__name__)


class DeclareResult(NamedTuple):
    slots_created: int
    skipped_ranges: int


class ReplaceResult(NamedTuple):
    slots_created: int
    slots_removed: int


class DayAvailability(NamedTuple):
    date: date
    ranges: list[SlotRange]


class PublicSlot(NamedTuple):
    start: datetime
    end: datetime
    open_interviewers: int


# (дата, начало, конец) в виде строк "YYYY-MM-DD", "HH:MM", "HH:MM"
RangeInput = tuple[str, str, str]


class AvailabilityService:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        tz: ZoneInfo | None = None,
        horizon_days: int | None = None,
    ):
        self.session_maker = session_maker
        self.tz = tz or settings.tz
        self.horizon_days = horizon_days if horizon_days is not None else settings.booking_horizon_days

    def _now(self, now: datetime | None) -> datetime:
        return localize(now, self.tz) if now else datetime.now(self.tz)

    def _check_entry(self, entry: RangeInput) -> None:
        day, start, end = entry
        if not day or not start or not end:
            raise ValidationError(f"В записи не хватает полей (date, start_time, end_time): {list(entry)}")

    def _in_horizon(self, day: date, now: datetime) -> bool:
        today = now.astimezone(self.tz).date()
        return today <= day <= today + timedelta(days=self.horizon_days)

    async def declare_availability(
        self,
        interviewer_id: int,
        entries: Iterable[RangeInput],
        mode: Literal["future", "today"] = "future",
        now: datetime | None = None,
    ) -> DeclareResult:
        """
        Добавить слоты по заявленным диапазонам.

        future: даты вне [сегодня, сегодня + горизонт] пропускаются.
        today: принимается только сегодняшняя дата.
        """
        now = self._now(now)
        today = now.astimezone(self.tz).date()
        slots: list[SlotRange] = []
        skipped = 0

        for entry in entries:
            self._check_entry(entry)
            day_raw, start, end = entry
            day = parse_date(day_raw)
            if day is None:
                raise ValidationError(f"Некорректная дата: {day_raw}")

            if mode == "today":
                if day != today:
                    raise ValidationError(
                        f"Можно указать доступность только на сегодня: {today.isoformat()}"
                    )
            elif not self._in_horizon(day, now):
                logger.debug(f"Пропущен диапазон вне горизонта: {entry}")
                skipped += 1
                continue

            slots.extend(generate_slots(day, start, end, now, self.tz))

        if not slots:
            return DeclareResult(slots_created=0, skipped_ranges=skipped)

        async with self.session_maker.begin() as session:
            created = await AvailabilityRepository(session).bulk_insert(interviewer_id, slots)

        logger.info(f"Проверяющий {interviewer_id}: создано {created} слотов ({mode})")
        return DeclareResult(slots_created=created, skipped_ranges=skipped)

    async def replace_availability_for_days(
        self,
        interviewer_id: int,
        days: Iterable[tuple[str, Iterable[tuple[str, str]]]],
        now: datetime | None = None,
    ) -> ReplaceResult:
        """
        Заменить доступность на указанные дни одной транзакцией.

        Сначала удаляются свободные слоты дня, затем создаются новые.
        Забронированные слоты не трогаются.
        """
        now = self._now(now)
        plan: dict[date, list[SlotRange]] = {}

        for day_raw, ranges in days:
            day = parse_date(day_raw) if day_raw else None
            if day is None:
                raise ValidationError(f"Некорректная дата: {day_raw}")
            if not self._in_horizon(day, now):
                raise ValidationError(
                    f"Дата {day.isoformat()} вне допустимого окна ({self.horizon_days} дней)"
                )
            day_slots = plan.setdefault(day, [])
            for start, end in ranges:
                self._check_entry((day_raw, start, end))
                day_slots.extend(generate_slots(day, start, end, now, self.tz))

        if not plan:
            raise ValidationError("Не указано ни одного дня")

        removed = 0
        created = 0
        async with self.session_maker.begin() as session:
            repo = AvailabilityRepository(session)
            for day, day_slots in plan.items():
                window_start, window_end = day_bounds(day, self.tz)
                removed += await repo.delete_unbooked_starting_in(interviewer_id, window_start, window_end)
                created += await repo.bulk_insert(interviewer_id, day_slots)

        logger.info(
            f"Проверяющий {interviewer_id}: дни {sorted(d.isoformat() for d in plan)} "
            f"пересозданы, удалено {removed}, создано {created}"
        )
        return ReplaceResult(slots_created=created, slots_removed=removed)

    async def delete_availability(self, interviewer_id: int, start: datetime, end: datetime) -> int:
        """Удалить свободные слоты проверяющего, целиком лежащие в [start, end]"""
        start = localize(start, self.tz)
        end = localize(end, self.tz)
        if start >= end:
            raise ValidationError("Время начала должно быть раньше времени окончания")

        async with self.session_maker.begin() as session:
            deleted = await AvailabilityRepository(session).delete_unbooked_within(interviewer_id, start, end)

        if deleted == 0:
            raise AvailabilityNotFound("В указанном диапазоне нет свободных слотов для удаления")

        logger.info(f"Проверяющий {interviewer_id}: удалено {deleted} слотов")
        return deleted

    async def list_availability(self, interviewer_id: int, now: datetime | None = None) -> list[DayAvailability]:
        """Будущие свободные слоты, сгруппированные по дням и склеенные в диапазоны"""
        now = self._now(now)
        async with self.session_maker() as session:
            rows = await AvailabilityRepository(session).list_open_for_interviewer(interviewer_id, now)

        by_day: dict[date, list[SlotRange]] = {}
        for row in rows:
            start = row.start_time.astimezone(self.tz)
            by_day.setdefault(start.date(), []).append(SlotRange(start, row.end_time.astimezone(self.tz)))

        return [DayAvailability(day, consolidate(slots)) for day, slots in sorted(by_day.items())]

    async def get_public_availability(
        self,
        phone: Optional[str] = None,
        now: datetime | None = None,
        department_matching: bool | None = None,
    ) -> dict[str, list[PublicSlot]]:
        """
        Свободное время для студентов на ближайшие дни.

        С учётом направления телефон обязателен: показываем только слоты
        проверяющих направления студента.
        """
        now = self._now(now)
        until = now + timedelta(days=self.horizon_days)

        async with self.session_maker() as session:
            eligibility = EligibilityService(session, department_matching=department_matching)
            interviewer_ids = None
            if eligibility.department_matching:
                if not phone:
                    raise ValidationError("Укажите номер телефона")
                student = await eligibility.resolve_student(phone)
                try:
                    interviewer_ids = await eligibility.eligible_interviewer_ids(student)
                except NoInterviewersAvailable:
                    return {}
            rows = await AvailabilityRepository(session).list_open_between(now, until, interviewer_ids)

        counts: dict[tuple[datetime, datetime], int] = {}
        for row in rows:
            key = (row.start_time, row.end_time)
            counts[key] = counts.get(key, 0) + 1

        grouped: dict[str, list[PublicSlot]] = {}
        for (start, end), count in sorted(counts.items()):
            local_start = start.astimezone(self.tz)
            grouped.setdefault(local_start.date().isoformat(), []).append(
                PublicSlot(local_start, end.astimezone(self.tz), count)
            )
        return grouped
