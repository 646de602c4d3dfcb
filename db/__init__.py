from .engine import database, Database, Base
from .session import get_db, get_session_maker

__all__ = ["database", "Database", "Base", "get_db", "get_session_maker"]
