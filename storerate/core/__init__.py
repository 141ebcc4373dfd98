"""Core app configuration, database and errors."""

from storerate.core.config import get_settings
from storerate.core.database import Database, get_db

__all__ = ["Database", "get_settings", "get_db"]
