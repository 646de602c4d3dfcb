from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from db.models import Interviewer


class InterviewerRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, interviewer_id: int) -> Optional[Interviewer]:
        q = select(Interviewer).where(Interviewer.id == interviewer_id)
        res = await self.db.execute(q)
        return res.scalars().first()

    async def get_by_email(self, email: str) -> Optional[Interviewer]:
        q = select(Interviewer).where(Interviewer.email == email.strip().lower())
        res = await self.db.execute(q)
        return res.scalars().first()

    async def list_all(self) -> List[Interviewer]:
        res = await self.db.execute(select(Interviewer).order_by(Interviewer.name))
        return list(res.scalars().all())

    async def list_ids(self, department: str | None = None) -> List[int]:
        """ID проверяющих (всех или только одного направления)"""
        q = select(Interviewer.id)
        if department is not None:
            q = q.where(Interviewer.department == department)
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def create(self, **kwargs) -> Interviewer:
        interviewer = Interviewer(**kwargs)
        self.db.add(interviewer)
        await self.db.flush()
        return interviewer
