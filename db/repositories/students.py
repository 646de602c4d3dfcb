import re
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from db.models import Student


def normalize_phone(phone: str) -> str:
    """Оставить только цифры (и ведущий +): '+91 98765-43210' -> '+919876543210'"""
    raw = str(phone).strip()
    digits = re.sub(r"\D", "", raw)
    return f"+{digits}" if raw.startswith("+") else digits


class StudentRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_phone(self, phone: str) -> Optional[Student]:
        q = select(Student).where(Student.phone == normalize_phone(phone))
        res = await self.db.execute(q)
        return res.scalars().first()

    async def get_by_email(self, email: str) -> Optional[Student]:
        q = select(Student).where(Student.email == email.strip().lower())
        res = await self.db.execute(q)
        return res.scalars().first()

    async def count(self) -> int:
        res = await self.db.execute(select(func.count(Student.id)))
        return res.scalar() or 0

    async def list_phones(self) -> list[str]:
        res = await self.db.execute(select(Student.phone))
        return list(res.scalars().all())

    async def upsert(
        self,
        application_id: str,
        name: str,
        email: str,
        phone: str,
        department: str | None = None,
    ) -> tuple[Student, bool]:
        """Создать или обновить студента по email. Возвращает (студент, создан ли)"""
        email = email.strip().lower()
        student = await self.get_by_email(email)
        created = student is None
        if created:
            student = Student(email=email)
            self.db.add(student)
        student.application_id = application_id
        student.name = name
        student.phone = normalize_phone(phone)
        student.department = department or None
        await self.db.flush()
        return student, created
