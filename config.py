from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Literal
from zoneinfo import ZoneInfo


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Игнорировать лишние переменные из .env
        case_sensitive=False,  # Читать ENV и env как одно и то же
        populate_by_name=True  # Разрешить использовать и alias, и имя поля
    )

    env: Literal["prod", "dev", "test"] = Field(default="dev", alias="ENV")
    debug: bool = Field(default=True, alias="DEBUG")

    # PostgreSQL (можно задать напрямую через DB_URL или через отдельные переменные)
    db_url: str | None = Field(default=None, alias="DB_URL")
    postgres_host: str = Field(default="localhost", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, alias="POSTGRES_PORT")
    postgres_user: str = Field(default="postgres", alias="POSTGRES_USER")
    postgres_password: str = Field(default="", alias="POSTGRES_PASSWORD")
    postgres_db: str = Field(default="postgres", alias="POSTGRES_DB")

    # Расписание
    timezone: str = Field(default="Asia/Kolkata", alias="TIMEZONE")
    booking_horizon_days: int = Field(default=15, alias="BOOKING_HORIZON_DAYS")
    # Студент видит и бронирует только слоты проверяющих своего направления
    department_matching: bool = Field(default=True, alias="DEPARTMENT_MATCHING")

    # Google Calendar (OAuth клиент, refresh token хранится у проверяющего)
    google_client_id: str = Field(default="", alias="GOOGLE_CLIENT_ID")
    google_client_secret: str = Field(default="", alias="GOOGLE_CLIENT_SECRET")
    token_encryption_key: str = Field(default="", alias="TOKEN_ENCRYPTION_KEY")
    fallback_meeting_base_url: str = Field(
        default="https://meet.example.com", alias="FALLBACK_MEETING_BASE_URL"
    )

    # Google Sheets (журнал бронирований и импорт списка студентов)
    google_credentials_path: str = Field(default="credentials.json", alias="GOOGLE_CREDENTIALS_PATH")
    google_sheet_id: str = Field(default="", alias="GOOGLE_SHEET_ID")

    # Админы (email проверяющих через запятую)
    admin_emails: str = Field(default="", alias="ADMIN_EMAILS")
    cors_origins: str = Field(default="", alias="CORS_ORIGINS")

    # === Тестовые данные для разработки (без авторизации) ===
    dev_interviewer_id: int = 1  # Тестовый проверяющий

    @property
    def database_url(self) -> str:
        """Возвращает URL для подключения к БД"""
        if self.db_url:
            return self.db_url
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def is_dev(self) -> bool:
        return self.env == "dev"

    @property
    def admins(self) -> list[str]:
        """Список email админов"""
        if not self.admin_emails:
            return []
        return [x.strip().lower() for x in self.admin_emails.split(",") if x.strip()]

    @property
    def allowed_origins(self) -> list[str]:
        if not self.cors_origins:
            return []
        return [x.strip() for x in self.cors_origins.split(",") if x.strip()]

    def is_admin(self, email: str) -> bool:
        """Проверка, является ли проверяющий админом"""
        if self.is_dev:
            return True
        return email.lower() in self.admins


settings = Settings()
