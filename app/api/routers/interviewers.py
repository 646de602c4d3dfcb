"""
Эндпоинты:
- GET /interviewers/me — текущий проверяющий
"""
from fastapi import APIRouter

from config import settings
from app.api.deps import CurrentInterviewer
from app.api.schemas.admin import InterviewerResponse

router = APIRouter(prefix="/interviewers")


@router.get("/me", response_model=InterviewerResponse)
async def get_me(interviewer: CurrentInterviewer):
    return InterviewerResponse(
        id=interviewer.id,
        name=interviewer.name,
        email=interviewer.email,
        department=interviewer.department,
        calendar_connected=interviewer.calendar_connected,
        is_admin=settings.is_admin(interviewer.email),
    )
