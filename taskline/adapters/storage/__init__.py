"""Persistence adapters."""

from taskline.adapters.storage.database import Base, init_db, make_engine, make_session_factory
from taskline.adapters.storage.repositories import (
    SqlMessageRepository,
    SqlTaskRepository,
    SqlUserDirectory,
)

__all__ = [
    "Base",
    "init_db",
    "make_engine",
    "make_session_factory",
    "SqlMessageRepository",
    "SqlTaskRepository",
    "SqlUserDirectory",
]
