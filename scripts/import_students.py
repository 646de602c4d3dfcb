#!/usr/bin/env python3
"""
Импорт списка студентов из Google таблицы.

Ожидаемые колонки: applicationId, name, email, phone, department.
Студенты обновляются по email, новые добавляются.

Использование:
  python -m scripts.import_students <URL или ID таблицы> [--worksheet Лист1]
"""
import sys
import os
import asyncio
import argparse

# Добавляем корень проекта в путь
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from db.engine import database
from db.repositories import StudentRepository
from app.services.google_sheets_service import google_sheets_service


async def import_students(sheet_url: str, worksheet: str | None = None) -> tuple[int, int]:
    """Загрузить студентов. Возвращает (создано, обновлено)"""
    rows = await asyncio.to_thread(google_sheets_service.read_students, sheet_url, worksheet)

    created = updated = 0
    database.connect()
    try:
        async with database.session_maker.begin() as db:
            repo = StudentRepository(db)
            for row in rows:
                _, is_new = await repo.upsert(
                    application_id=row["applicationId"],
                    name=row["name"],
                    email=row["email"],
                    phone=row["phone"],
                    department=row["department"],
                )
                if is_new:
                    created += 1
                else:
                    updated += 1
    finally:
        await database.disconnect()

    return created, updated


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import students from Google Sheets")
    parser.add_argument("sheet", help="URL или ID Google таблицы")
    parser.add_argument("--worksheet", default=None, help="Имя листа (по умолчанию первый)")
    args = parser.parse_args()

    print("🚀 Импорт студентов...")
    created, updated = asyncio.run(import_students(args.sheet, args.worksheet))
    print(f"✅ Готово! Добавлено: {created}, обновлено: {updated}")
