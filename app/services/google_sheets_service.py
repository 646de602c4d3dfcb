"""
Сервис для работы с Google Sheets API.

- Журнал бронирований: каждая запись добавляется строкой в таблицу.
- Импорт списка студентов из таблицы (scripts/import_students.py).
"""
import re
import logging
from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional
from pathlib import Path
from zoneinfo import ZoneInfo

import gspread
from google.oauth2.service_account import Credentials

from config import settings

logger = logging.getLogger(__name__)


class BookingRow(NamedTuple):
    application_id: str
    student_name: str
    student_email: str
    student_phone: str | None
    department: str | None
    start_time: datetime
    end_time: datetime
    interviewer_name: str
    interviewer_email: str
    meeting_link: str


class GoogleSheetsService:
    """Сервис для работы с Google Sheets"""

    BOOKINGS_SHEET_NAME = "Bookings"
    BOOKING_HEADERS = [
        "Application ID",
        "Student Name",
        "Student Email",
        "Student Phone",
        "Department",
        "Start",
        "End",
        "Timezone",
        "Interviewer Name",
        "Interviewer Email",
        "Meeting Link",
    ]
    STUDENT_COLUMNS = ("applicationId", "name", "email", "phone", "department")

    def __init__(self, credentials_path: str | None = None, timezone: str | None = None):
        """
        Инициализация сервиса.

        Args:
            credentials_path: Путь к файлу с credentials сервисного аккаунта Google
            timezone: Часовой пояс для времени в таблице
        """
        self.credentials_path = Path(credentials_path or settings.google_credentials_path)
        self.timezone = timezone or settings.timezone
        self._client: Optional[gspread.Client] = None

    def _get_client(self) -> gspread.Client:
        """Получить клиент Google Sheets (создаёт при первом обращении)"""
        if self._client is None:
            if not self.credentials_path.exists():
                raise FileNotFoundError(
                    f"Файл credentials.json не найден по пути: {self.credentials_path.absolute()}"
                )

            creds = Credentials.from_service_account_file(
                str(self.credentials_path),
                scopes=[
                    'https://www.googleapis.com/auth/spreadsheets',
                    'https://www.googleapis.com/auth/drive'
                ]
            )

            self._client = gspread.authorize(creds)
            logger.info("Google Sheets клиент инициализирован")

        return self._client

    def _extract_spreadsheet_id(self, url: str) -> str:
        """
        Извлечь ID таблицы из URL.

        Args:
            url: URL Google таблицы или сам ID

        Returns:
            ID таблицы
        """
        if not url:
            raise ValueError("Пустой URL Google таблицы")

        url = url.strip()

        # Опубликованная ссылка /spreadsheets/d/e/... не является spreadsheetId
        if re.search(r"/spreadsheets/d/e/", url):
            raise ValueError(
                "Похоже, вы указали опубликованную ссылку Google Sheets (/spreadsheets/d/e/...). "
                "Нужна обычная ссылка вида https://docs.google.com/spreadsheets/d/<SPREADSHEET_ID>/edit"
            )

        match = re.search(r"/spreadsheets/d/([a-zA-Z0-9-_]+)", url)
        if match:
            return match.group(1)

        match = re.search(r"(?:\?|&|^)id=([a-zA-Z0-9-_]+)", url)
        if match:
            return match.group(1)

        # "Чистый" spreadsheetId: длинный и из [A-Za-z0-9_-]
        if re.fullmatch(r"[a-zA-Z0-9-_]{25,}", url):
            return url

        raise ValueError(f"Не удалось извлечь spreadsheetId из строки: {url}")

    def _get_or_create_bookings_sheet(self, spreadsheet: gspread.Spreadsheet) -> gspread.Worksheet:
        """Получить или создать лист журнала бронирований (с заголовками)"""
        try:
            worksheet = spreadsheet.worksheet(self.BOOKINGS_SHEET_NAME)
        except gspread.WorksheetNotFound:
            worksheet = spreadsheet.add_worksheet(
                title=self.BOOKINGS_SHEET_NAME,
                rows=1000,
                cols=len(self.BOOKING_HEADERS)
            )
            worksheet.append_row(self.BOOKING_HEADERS)
            logger.info(f"Создан лист '{self.BOOKINGS_SHEET_NAME}'")
        return worksheet

    def format_booking_row(self, row: BookingRow) -> List[Any]:
        tz = ZoneInfo(self.timezone)
        return [
            row.application_id,
            row.student_name,
            row.student_email,
            row.student_phone or '',
            row.department or '',
            row.start_time.astimezone(tz).strftime('%d %b %Y, %H:%M'),
            row.end_time.astimezone(tz).strftime('%d %b %Y, %H:%M'),
            self.timezone,
            row.interviewer_name,
            row.interviewer_email,
            row.meeting_link,
        ]

    def append_booking(self, sheet_url: str, row: BookingRow) -> None:
        """
        Добавить бронирование строкой в журнал.

        Синхронный вызов (gspread), из async кода запускать через asyncio.to_thread.
        Ошибки пробрасываются вызывающему.
        """
        client = self._get_client()
        spreadsheet = client.open_by_key(self._extract_spreadsheet_id(sheet_url))
        worksheet = self._get_or_create_bookings_sheet(spreadsheet)
        worksheet.append_row(self.format_booking_row(row), value_input_option="RAW")
        logger.info(f"Бронирование {row.student_email} добавлено в таблицу")

    def read_students(self, sheet_url: str, worksheet_name: str | None = None) -> List[Dict[str, str]]:
        """
        Прочитать список студентов.

        Ожидаемые колонки: applicationId, name, email, phone, department.
        Строки без email или телефона пропускаются.
        """
        client = self._get_client()
        spreadsheet = client.open_by_key(self._extract_spreadsheet_id(sheet_url))
        worksheet = spreadsheet.worksheet(worksheet_name) if worksheet_name else spreadsheet.sheet1

        students = []
        for record in worksheet.get_all_records(default_blank=""):
            row = {col: str(record.get(col, "")).strip() for col in self.STUDENT_COLUMNS}
            if not row["email"] or not row["phone"]:
                logger.warning(f"Пропущена строка без email/телефона: {record}")
                continue
            students.append(row)

        logger.info(f"Прочитано {len(students)} студентов из таблицы")
        return students


# Singleton
google_sheets_service = GoogleSheetsService()
