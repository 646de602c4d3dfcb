from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from db.engine import database
from app.core.error_handlers import register_exception_handlers
from app.api.routers import availability, booking, students, interviewers, admin_stats
from config import settings

# Логирование
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle: подключение/отключение БД"""
    logger.info(f"Starting app in {settings.env} mode...")
    database.connect(pool_pre_ping=True)
    logger.info("Database connected")
    yield
    await database.disconnect()
    logger.info("Database disconnected")


app = FastAPI(
    title="Interview Booking Backend",
    description="API для записи студентов на собеседования",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.is_dev else None,  # Swagger только в dev
    redoc_url="/api/redoc" if settings.is_dev else None,
)

# CORS для фронтенда
allowed_origins = ["*"] if settings.is_dev else settings.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Роутеры
app.include_router(availability.router, prefix="/api/v1", tags=["Availability"])
app.include_router(interviewers.router, prefix="/api/v1", tags=["Interviewers"])
app.include_router(booking.router, prefix="/api/v1", tags=["Bookings"])
app.include_router(students.router, prefix="/api/v1", tags=["Students"])
app.include_router(admin_stats.router, prefix="/api/v1", tags=["Admin"])


@app.get("/healthz")
async def health():
    """Health check для мониторинга"""
    return {"status": "ok", "env": settings.env}
