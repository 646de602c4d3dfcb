from datetime import datetime, timezone

from sqlalchemy import (
    Integer,
    String,
    ForeignKey,
    Boolean,
    DateTime,
    Text,
    UniqueConstraint,
    CheckConstraint,
    Index,
    func,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from db.engine import Base


class UTCDateTime(TypeDecorator):
    """
    Момент времени, всегда хранится и читается в UTC.

    SQLite не хранит смещение, поэтому при записи приводим к UTC,
    а при чтении добавляем tzinfo обратно.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Interviewer(Base):
    """
    Проверяющий, проводит собеседования.

    Личность приходит из OAuth (вне этого сервиса). Здесь храним только то,
    что нужно для бронирования: направление и refresh token календаря.
    """
    __tablename__ = "interviewers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), unique=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    # Зашифрован Fernet (app/core/security.py)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now())

    availabilities = relationship("Availability", back_populates="interviewer", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="interviewer")

    @property
    def calendar_connected(self) -> bool:
        return bool(self.refresh_token)


class Student(Base):
    """Студент из загруженного списка (только они могут бронировать)"""
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[str] = mapped_column(String(100))
    name: Mapped[str] = mapped_column(String(200))
    email: Mapped[str] = mapped_column(String(255), unique=True)
    phone: Mapped[str] = mapped_column(String(32), unique=True)  # нормализованный
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now())


class Availability(Base):
    """
    Слот доступности проверяющего (фиксированная длительность).

    is_booked меняется только false -> true внутри атомарного захвата.
    Забронированные слоты не удаляются.
    """
    __tablename__ = "availabilities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    interviewer_id: Mapped[int] = mapped_column(ForeignKey("interviewers.id", ondelete="CASCADE"))
    start_time: Mapped[datetime] = mapped_column(UTCDateTime)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime)
    is_booked: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now())

    interviewer = relationship("Interviewer", back_populates="availabilities")
    booking = relationship("Booking", back_populates="availability", uselist=False)

    __table_args__ = (
        UniqueConstraint('interviewer_id', 'start_time', 'end_time', name='uq_interviewer_slot'),
        CheckConstraint('start_time < end_time', name='ck_slot_start_before_end'),
        Index('ix_availability_start_open', 'start_time', 'is_booked'),
    )


class Booking(Base):
    """
    Запись студента на собеседование.

    start_time/end_time копируются из слота в момент бронирования.
    Один студент (email), одна запись за всё время.
    """
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    availability_id: Mapped[int] = mapped_column(
        ForeignKey("availabilities.id", ondelete="RESTRICT"), unique=True
    )
    interviewer_id: Mapped[int] = mapped_column(ForeignKey("interviewers.id", ondelete="RESTRICT"))
    start_time: Mapped[datetime] = mapped_column(UTCDateTime)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime)
    student_name: Mapped[str] = mapped_column(String(200))
    student_email: Mapped[str] = mapped_column(String(255), unique=True)
    student_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    google_event_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meeting_link: Mapped[str | None] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now())

    availability = relationship("Availability", back_populates="booking")
    interviewer = relationship("Interviewer", back_populates="bookings", lazy="joined")
