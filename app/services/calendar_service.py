"""
Создание события в Google Calendar проверяющего (с Google Meet).

Работает напрямую с REST API через aiohttp: refresh token проверяющего
обменивается на access token, затем создаётся событие в его основном календаре.
"""
import asyncio
import logging
import uuid
from typing import NamedTuple, Protocol

import aiohttp

from config import settings
from app.core.exceptions import CalendarError
from app.core.security import decrypt_token
from db.models import Booking, Interviewer

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/primary/events"


class CalendarEvent(NamedTuple):
    event_id: str
    meeting_link: str | None


class CalendarNotifier(Protocol):
    async def create_event(self, booking: Booking, interviewer: Interviewer) -> CalendarEvent: ...


class GoogleCalendarService:
    """Создание встреч в календаре проверяющего"""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        timezone: str | None = None,
        timeout: float = 15,
    ):
        self.client_id = client_id if client_id is not None else settings.google_client_id
        self.client_secret = client_secret if client_secret is not None else settings.google_client_secret
        self.timezone = timezone or settings.timezone
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    def _refresh_token(self, interviewer: Interviewer) -> str:
        if not interviewer.refresh_token:
            raise CalendarError(
                f"Проверяющий {interviewer.id} не подключил календарь (нет refresh token)"
            )
        try:
            return decrypt_token(interviewer.refresh_token)
        except (ValueError, RuntimeError) as e:
            raise CalendarError(f"Не удалось прочитать refresh token проверяющего {interviewer.id}: {e}") from e

    async def _get_access_token(self, session: aiohttp.ClientSession, interviewer: Interviewer) -> str:
        """Обменять refresh token на access token"""
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": self._refresh_token(interviewer),
            "grant_type": "refresh_token",
        }
        async with session.post(TOKEN_URL, data=data) as response:
            if response.status != 200:
                error = await response.text()
                raise CalendarError(f"Авторизация Google отклонена ({response.status}): {error}")
            payload = await response.json()

        token = payload.get("access_token")
        if not token:
            raise CalendarError("Google не вернул access_token")
        return token

    def build_event(self, booking: Booking, interviewer: Interviewer) -> dict:
        """Тело события для Calendar API"""
        description = (
            "30-minute interview session.\n"
            f"Interviewer: {interviewer.name} ({interviewer.email})\n"
            f"Student: {booking.student_name} ({booking.student_email})\n"
            f"Student Phone: {booking.student_phone or 'Not provided'}"
        )
        return {
            "summary": f"Interview: {interviewer.name} and {booking.student_name}",
            "description": description,
            "start": {"dateTime": booking.start_time.isoformat(), "timeZone": self.timezone},
            "end": {"dateTime": booking.end_time.isoformat(), "timeZone": self.timezone},
            "attendees": [
                {"email": interviewer.email},
                {"email": booking.student_email},
            ],
            "reminders": {
                "useDefault": False,
                "overrides": [{"method": "email", "minutes": 10}],
            },
            "conferenceData": {
                "createRequest": {
                    "requestId": f"meet-{booking.id}-{uuid.uuid4().hex[:8]}",
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                }
            },
        }

    @staticmethod
    def extract_meeting_link(event: dict) -> str | None:
        if event.get("hangoutLink"):
            return event["hangoutLink"]
        for entry in (event.get("conferenceData") or {}).get("entryPoints", []):
            if entry.get("entryPointType") == "video" and entry.get("uri"):
                return entry["uri"]
        return None

    async def create_event(self, booking: Booking, interviewer: Interviewer) -> CalendarEvent:
        """
        Создать событие с Google Meet и разослать приглашения.

        Любая ошибка (нет токена, токен отозван, ошибка API, сеть)
        поднимается как CalendarError.
        """
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                access_token = await self._get_access_token(session, interviewer)
                async with session.post(
                    EVENTS_URL,
                    params={"conferenceDataVersion": "1", "sendUpdates": "all"},
                    headers={"Authorization": f"Bearer {access_token}"},
                    json=self.build_event(booking, interviewer),
                ) as response:
                    if response.status not in (200, 201):
                        error = await response.text()
                        raise CalendarError(f"Ошибка Calendar API ({response.status}): {error}")
                    event = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise CalendarError(f"Google Calendar недоступен: {e}") from e

        if not event.get("id"):
            raise CalendarError("Calendar API не вернул id события")

        logger.info(f"Событие создано: booking={booking.id} event={event['id']}")
        return CalendarEvent(event_id=event["id"], meeting_link=self.extract_meeting_link(event))


# Singleton
calendar_service = GoogleCalendarService()
