from datetime import datetime
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, or_

from db.models import Booking, Availability, Student


class BookingRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, booking_id: int) -> Optional[Booking]:
        q = select(Booking).where(Booking.id == booking_id)
        res = await self.db.execute(q)
        return res.scalars().first()

    async def get_by_email(self, email: str) -> Optional[Booking]:
        q = select(Booking).where(Booking.student_email == email.strip().lower())
        res = await self.db.execute(q)
        return res.scalars().first()

    async def create_for_slot(
        self,
        slot: Availability,
        student_name: str,
        student_email: str,
        student_phone: str | None,
    ) -> Booking:
        """Создать запись на слот, копируя его время"""
        booking = Booking(
            availability_id=slot.id,
            interviewer_id=slot.interviewer_id,
            start_time=slot.start_time,
            end_time=slot.end_time,
            student_name=student_name,
            student_email=student_email.strip().lower(),
            student_phone=student_phone,
        )
        self.db.add(booking)
        await self.db.flush()
        return booking

    async def attach_meeting(self, booking_id: int, meeting_link: str, google_event_id: str | None = None) -> None:
        await self.db.execute(
            update(Booking)
            .where(Booking.id == booking_id)
            .values(meeting_link=meeting_link, google_event_id=google_event_id)
        )

    async def count(self) -> int:
        res = await self.db.execute(select(func.count(Booking.id)))
        return res.scalar() or 0

    async def list_all(self) -> List[Booking]:
        res = await self.db.execute(select(Booking).order_by(Booking.start_time))
        return list(res.scalars().all())

    async def list_between(self, since: datetime, until: datetime) -> List[Booking]:
        q = (
            select(Booking)
            .where(Booking.start_time >= since, Booking.start_time < until)
            .order_by(Booking.start_time)
        )
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def list_phones(self) -> List[str]:
        res = await self.db.execute(select(Booking.student_phone).where(Booking.student_phone.is_not(None)))
        return list(res.scalars().all())

    async def list_with_students(self) -> List[tuple[Student, Booking]]:
        """Записи студентов из списка (по email или телефону), по времени"""
        q = (
            select(Student, Booking)
            .join(
                Booking,
                or_(Booking.student_email == Student.email, Booking.student_phone == Student.phone),
            )
            .order_by(Booking.start_time)
        )
        res = await self.db.execute(q)
        return [(student, booking) for student, booking in res.all()]
