from .config import settings
from .database import AsyncSessionLocal, engine, get_db, init_db
from .locks import category_locks
from .logging import logger, setup_logging

__all__ = [
    "AsyncSessionLocal",
    "category_locks",
    "engine",
    "get_db",
    "init_db",
    "logger",
    "settings",
    "setup_logging",
]
