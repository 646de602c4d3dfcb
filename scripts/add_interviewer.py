#!/usr/bin/env python3
"""
Добавить проверяющего (или показать список).

Использование:
  python -m scripts.add_interviewer list
  python -m scripts.add_interviewer add "Имя" email@example.com --department CS --refresh-token <token>
"""
import sys
import os
import asyncio
import argparse

# Добавляем корень проекта в путь
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from db.engine import database
from db.repositories import InterviewerRepository
from app.core.security import encrypt_token


async def list_interviewers():
    """Показать список всех проверяющих"""
    async with database.session_maker() as db:
        interviewers = await InterviewerRepository(db).list_all()

    if not interviewers:
        print("Проверяющие не найдены")
        return

    print("\n📋 Список проверяющих:\n")
    print("ID | Email | Направление | Календарь")
    print("---|" + "-" * 60)
    for i in interviewers:
        calendar = "✅" if i.calendar_connected else "—"
        print(f"{i.id:2} | {i.email} | {i.department or '—'} | {calendar}")
    print()


async def add_interviewer(name: str, email: str, department: str | None, refresh_token: str | None) -> bool:
    """Создать проверяющего; refresh token сохраняется зашифрованным"""
    async with database.session_maker.begin() as db:
        repo = InterviewerRepository(db)
        if await repo.get_by_email(email):
            print(f"❌ Проверяющий {email} уже существует!")
            return False

        interviewer = await repo.create(
            name=name,
            email=email.strip().lower(),
            department=department,
            refresh_token=encrypt_token(refresh_token) if refresh_token else None,
        )

    print("✅ Проверяющий добавлен!")
    print(f"   ID: {interviewer.id}")
    print(f"   Email: {interviewer.email}")
    return True


async def main(args):
    database.connect()
    try:
        if args.command == "list":
            await list_interviewers()
        else:
            await add_interviewer(args.name, args.email, args.department, args.refresh_token)
    finally:
        await database.disconnect()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Manage interviewers")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="Показать проверяющих")
    add = sub.add_parser("add", help="Добавить проверяющего")
    add.add_argument("name")
    add.add_argument("email")
    add.add_argument("--department", default=None)
    add.add_argument("--refresh-token", default=None, help="Google OAuth refresh token")

    asyncio.run(main(parser.parse_args()))
