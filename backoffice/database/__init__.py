"""Database models and connection lifecycle."""

from backoffice.database.connection import (
    close_database,
    get_session_factory,
    init_database,
)
from backoffice.database.models import Base

__all__ = [
    "Base",
    "close_database",
    "get_session_factory",
    "init_database",
]
