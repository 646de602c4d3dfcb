"""
Проверка студента перед записью.

Эндпоинты:
- POST /students/check — есть ли телефон в списке
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_db
from app.api.schemas.booking import StudentCheckRequest, StudentCheckResponse
from app.services.eligibility_service import EligibilityService

router = APIRouter(prefix="/students")


@router.post("/check", response_model=StudentCheckResponse)
async def check_student(
    data: StudentCheckRequest,
    db: AsyncSession = Depends(get_db),
):
    authorized = await EligibilityService(db).is_authorized(data.phone)
    return StudentCheckResponse(authorized=authorized)
