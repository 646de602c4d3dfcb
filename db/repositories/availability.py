from datetime import datetime
from typing import Optional, List, Iterable

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, update, func
from sqlalchemy.dialects import postgresql, sqlite

from db.models import Availability


class AvailabilityRepository:
    """
    Хранилище слотов доступности.

    Репозиторий не коммитит: транзакциями управляет сервис.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(Availability)
        if dialect == "sqlite":
            return sqlite.insert(Availability)
        raise RuntimeError(f"Диалект {dialect} не поддерживает ON CONFLICT DO NOTHING")

    async def bulk_insert(self, interviewer_id: int, slots: Iterable[tuple[datetime, datetime]]) -> int:
        """
        Вставить слоты, пропуская уже существующие (interviewer, start, end).
        Возвращает количество реально созданных.
        """
        rows = [
            {"interviewer_id": interviewer_id, "start_time": start, "end_time": end, "is_booked": False}
            for start, end in dict.fromkeys(slots)
        ]
        if not rows:
            return 0

        stmt = (
            self._insert()
            .values(rows)
            .on_conflict_do_nothing(index_elements=["interviewer_id", "start_time", "end_time"])
            .returning(Availability.id)
        )
        res = await self.db.execute(stmt)
        return len(res.scalars().all())

    async def delete_unbooked_within(self, interviewer_id: int, start: datetime, end: datetime) -> int:
        """Удалить свободные слоты, целиком лежащие в [start, end]"""
        stmt = delete(Availability).where(
            Availability.interviewer_id == interviewer_id,
            Availability.is_booked == False,
            Availability.start_time >= start,
            Availability.end_time <= end,
        )
        res = await self.db.execute(stmt)
        return res.rowcount or 0

    async def delete_unbooked_starting_in(self, interviewer_id: int, start: datetime, end: datetime) -> int:
        """Удалить свободные слоты, начинающиеся в [start, end) (окно дня)"""
        stmt = delete(Availability).where(
            Availability.interviewer_id == interviewer_id,
            Availability.is_booked == False,
            Availability.start_time >= start,
            Availability.start_time < end,
        )
        res = await self.db.execute(stmt)
        return res.rowcount or 0

    async def list_open_for_interviewer(self, interviewer_id: int, since: datetime) -> List[Availability]:
        q = (
            select(Availability)
            .where(
                Availability.interviewer_id == interviewer_id,
                Availability.is_booked == False,
                Availability.start_time >= since,
            )
            .order_by(Availability.start_time)
        )
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def list_open_between(
        self,
        since: datetime,
        until: datetime,
        interviewer_ids: Optional[List[int]] = None,
    ) -> List[Availability]:
        """Свободные слоты всех (или указанных) проверяющих в [since, until]"""
        q = select(Availability).where(
            Availability.is_booked == False,
            Availability.start_time >= since,
            Availability.start_time <= until,
        )
        if interviewer_ids is not None:
            q = q.where(Availability.interviewer_id.in_(interviewer_ids))
        res = await self.db.execute(q.order_by(Availability.start_time, Availability.id))
        return list(res.scalars().all())

    async def find_open_at(self, start: datetime, interviewer_ids: List[int]) -> List[Availability]:
        """Кандидаты на бронирование: свободные слоты с началом ровно в start"""
        q = select(Availability).where(
            Availability.start_time == start,
            Availability.is_booked == False,
            Availability.interviewer_id.in_(interviewer_ids),
        )
        res = await self.db.execute(q.order_by(Availability.id))
        return list(res.scalars().all())

    async def get_for_update(self, availability_id: int) -> Optional[Availability]:
        """Перечитать слот с блокировкой строки до конца транзакции"""
        q = (
            select(Availability)
            .where(Availability.id == availability_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        res = await self.db.execute(q)
        return res.scalars().first()

    async def mark_booked(self, availability_id: int) -> bool:
        """Занять слот, только если он ещё свободен. True если удалось."""
        stmt = (
            update(Availability)
            .where(Availability.id == availability_id, Availability.is_booked == False)
            .values(is_booked=True)
            .execution_options(synchronize_session=False)
        )
        res = await self.db.execute(stmt)
        return res.rowcount == 1

    async def count_between(self, since: datetime, until: datetime, booked: Optional[bool] = None) -> int:
        q = select(func.count(Availability.id)).where(
            Availability.start_time >= since,
            Availability.start_time < until,
        )
        if booked is not None:
            q = q.where(Availability.is_booked == booked)
        res = await self.db.execute(q)
        return res.scalar() or 0

    async def slot_counts_by_interviewer(self) -> dict[int, tuple[int, int]]:
        """interviewer_id -> (всего слотов, занято)"""
        q = select(
            Availability.interviewer_id,
            func.count(Availability.id),
            func.count(Availability.id).filter(Availability.is_booked == True),
        ).group_by(Availability.interviewer_id)
        res = await self.db.execute(q)
        return {row[0]: (row[1], row[2]) for row in res.all()}

    async def count_interviewers_with_slots(self) -> int:
        res = await self.db.execute(select(func.count(func.distinct(Availability.interviewer_id))))
        return res.scalar() or 0
