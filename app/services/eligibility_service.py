"""
Проверка права студента на запись и выбор пула проверяющих.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from app.core.exceptions import NotAuthorized, NoInterviewersAvailable
from db.models import Student
from db.repositories import StudentRepository, InterviewerRepository

logger = logging.getLogger(__name__)


class EligibilityService:
    """Студент должен быть в загруженном списке; пул проверяющих зависит от направления"""

    def __init__(self, db: AsyncSession, department_matching: bool | None = None):
        self.students = StudentRepository(db)
        self.interviewers = InterviewerRepository(db)
        if department_matching is None:
            department_matching = settings.department_matching
        self.department_matching = department_matching

    async def is_authorized(self, phone: str) -> bool:
        return await self.students.get_by_phone(phone) is not None

    async def resolve_student(self, phone: str) -> Student:
        student = await self.students.get_by_phone(phone)
        if not student:
            raise NotAuthorized("Студент с таким номером телефона не найден в списке")
        return student

    async def resolve_department(self, phone: str) -> str | None:
        student = await self.resolve_student(phone)
        return student.department

    async def eligible_interviewer_ids(self, student: Student) -> list[int]:
        """
        Пул проверяющих для студента.

        С включённым DEPARTMENT_MATCHING и заданным направлением
        только проверяющие этого направления, иначе все.
        """
        if self.department_matching and student.department:
            ids = await self.interviewers.list_ids(department=student.department)
            if not ids:
                logger.info(f"Нет проверяющих для направления {student.department!r}")
                raise NoInterviewersAvailable(
                    f"Для направления «{student.department}» пока нет проверяющих"
                )
            return ids

        ids = await self.interviewers.list_ids()
        if not ids:
            raise NoInterviewersAvailable("Пока нет ни одного проверяющего")
        return ids
