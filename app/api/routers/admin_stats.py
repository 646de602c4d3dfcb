"""
API для админов: проверяющие, записи, статистика.

Эндпоинты:
- GET /admin/interviewers — проверяющие и их слоты
- GET /admin/interviewees — все записи студентов
- GET /admin/booking-status — кто из списка записался
- GET /admin/booked-interviews — записи студентов из списка с номером заявки
- GET /admin/dashboard — сводка на сегодня и два следующих дня
- GET /admin/export/bookings — экспорт записей в CSV
"""
from datetime import datetime, timedelta
import csv
import io

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from db.session import get_db
from db.repositories import (
    AvailabilityRepository, BookingRepository, InterviewerRepository, StudentRepository
)
from app.api.deps import AdminInterviewer
from app.api.schemas.admin import (
    InterviewerStats, IntervieweeResponse, BookedInterviewResponse, BookingStatusResponse,
    DailyStats, DashboardResponse,
)
from app.services.slot_generator import day_bounds

router = APIRouter(prefix="/admin")

DASHBOARD_DAYS = 3


def booking_rate(booked: int, total: int) -> int:
    """Доля занятых слотов в процентах, 0 если слотов нет"""
    if not total:
        return 0
    return int(booked * 100 / total + 0.5)


@router.get("/interviewers", response_model=list[InterviewerStats])
async def list_interviewers(
    admin: AdminInterviewer,
    db: AsyncSession = Depends(get_db),
):
    """Все проверяющие с количеством слотов"""
    interviewers = await InterviewerRepository(db).list_all()
    counts = await AvailabilityRepository(db).slot_counts_by_interviewer()

    return [
        InterviewerStats(
            id=i.id,
            name=i.name,
            email=i.email,
            department=i.department,
            calendar_connected=i.calendar_connected,
            total_slots=counts.get(i.id, (0, 0))[0],
            booked_slots=counts.get(i.id, (0, 0))[1],
        )
        for i in interviewers
    ]


@router.get("/interviewees", response_model=list[IntervieweeResponse])
async def list_interviewees(
    admin: AdminInterviewer,
    db: AsyncSession = Depends(get_db),
):
    """Все записи, по времени собеседования"""
    bookings = await BookingRepository(db).list_all()
    return [
        IntervieweeResponse(
            booking_id=b.id,
            student_name=b.student_name,
            student_email=b.student_email,
            student_phone=b.student_phone,
            start_time=b.start_time.astimezone(settings.tz),
            end_time=b.end_time.astimezone(settings.tz),
            interviewer_name=b.interviewer.name,
            interviewer_email=b.interviewer.email,
            meeting_link=b.meeting_link,
        )
        for b in bookings
    ]


@router.get("/booking-status", response_model=BookingStatusResponse)
async def get_booking_status(
    admin: AdminInterviewer,
    db: AsyncSession = Depends(get_db),
):
    """Сопоставление списка студентов с записями (по телефону)"""
    roster = await StudentRepository(db).list_phones()
    booked = set(await BookingRepository(db).list_phones())

    booked_phones = sorted(p for p in roster if p in booked)
    not_booked_phones = sorted(p for p in roster if p not in booked)
    return BookingStatusResponse(
        total_students=len(roster),
        booked=len(booked_phones),
        not_booked=len(not_booked_phones),
        booked_phones=booked_phones,
        not_booked_phones=not_booked_phones,
    )


@router.get("/booked-interviews", response_model=list[BookedInterviewResponse])
async def list_booked_interviews(
    admin: AdminInterviewer,
    db: AsyncSession = Depends(get_db),
):
    """Кто из списка записан: номер заявки, проверяющий, время и ссылка"""
    rows = await BookingRepository(db).list_with_students()
    return [
        BookedInterviewResponse(
            application_id=student.application_id,
            student_name=student.name,
            phone=student.phone,
            interviewer_name=booking.interviewer.name,
            start_time=booking.start_time.astimezone(settings.tz),
            meeting_link=booking.meeting_link,
        )
        for student, booking in rows
    ]


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    admin: AdminInterviewer,
    db: AsyncSession = Depends(get_db),
):
    """Сводка: слоты по дням на сегодня и два следующих дня"""
    availability = AvailabilityRepository(db)
    today = datetime.now(settings.tz).date()

    days = []
    for offset in range(DASHBOARD_DAYS):
        day = today + timedelta(days=offset)
        start, end = day_bounds(day, settings.tz)
        total = await availability.count_between(start, end)
        booked = await availability.count_between(start, end, booked=True)
        days.append(DailyStats(
            date=day.isoformat(),
            total_slots=total,
            booked_slots=booked,
            open_slots=total - booked,
            booking_rate=booking_rate(booked, total),
        ))

    return DashboardResponse(
        interviewers_total=len(await InterviewerRepository(db).list_ids()),
        interviewers_with_slots=await availability.count_interviewers_with_slots(),
        students_total=await StudentRepository(db).count(),
        bookings_total=await BookingRepository(db).count(),
        booking_rate=booking_rate(
            sum(d.booked_slots for d in days), sum(d.total_slots for d in days)
        ),
        days=days,
    )


@router.get("/export/bookings")
async def export_bookings_csv(
    admin: AdminInterviewer,
    db: AsyncSession = Depends(get_db),
):
    """
    Экспорт записей в CSV.
    """
    bookings = await BookingRepository(db).list_all()

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([
        'ID', 'Студент', 'Email', 'Телефон', 'Начало', 'Конец',
        'Проверяющий', 'Email проверяющего', 'Ссылка',
    ])

    for b in bookings:
        writer.writerow([
            b.id,
            b.student_name,
            b.student_email,
            b.student_phone or '',
            b.start_time.astimezone(settings.tz).strftime('%d.%m.%Y %H:%M'),
            b.end_time.astimezone(settings.tz).strftime('%d.%m.%Y %H:%M'),
            b.interviewer.name,
            b.interviewer.email,
            b.meeting_link or '',
        ])

    output.seek(0)

    filename = f"bookings_{datetime.now(settings.tz).strftime('%Y%m%d')}.csv"

    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={filename}"
        }
    )
