"""
Pytest configuration and shared fixtures.

Storage is a real SQLite file (aiosqlite). Every transaction starts with
BEGIN IMMEDIATE so concurrent writers queue on the database lock instead
of failing on lock upgrade.
"""

import os
from datetime import datetime
from zoneinfo import ZoneInfo

from cryptography.fernet import Fernet

os.environ.setdefault("ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("TOKEN_ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ.setdefault("GOOGLE_SHEET_ID", "")

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from db.engine import Base
from db.models import Interviewer, Student
from db.repositories import normalize_phone

IST = ZoneInfo("Asia/Kolkata")

# Fixed "now" for service tests: Sunday morning, slots are declared for Monday
NOW = datetime(2030, 1, 6, 8, 0, tzinfo=IST)
DAY = "2030-01-07"


@pytest.fixture
async def engine(tmp_path):
    """SQLite engine with the schema created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'booking.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def make_interviewer(session_maker):
    """Factory: insert an interviewer and return it."""
    counter = {"n": 0}

    async def _make(name=None, email=None, department="CS", refresh_token=None):
        counter["n"] += 1
        n = counter["n"]
        async with session_maker.begin() as db:
            interviewer = Interviewer(
                name=name or f"Interviewer {n}",
                email=email or f"interviewer{n}@example.com",
                department=department,
                refresh_token=refresh_token,
            )
            db.add(interviewer)
        return interviewer

    return _make


@pytest.fixture
def make_student(session_maker):
    """Factory: insert a roster student and return it."""
    counter = {"n": 0}

    async def _make(phone=None, email=None, name=None, department="CS"):
        counter["n"] += 1
        n = counter["n"]
        async with session_maker.begin() as db:
            student = Student(
                application_id=f"APP-{n:03d}",
                name=name or f"Student {n}",
                email=email or f"student{n}@example.com",
                phone=normalize_phone(phone or f"+9198765{n:05d}"),
                department=department,
            )
            db.add(student)
        return student

    return _make
