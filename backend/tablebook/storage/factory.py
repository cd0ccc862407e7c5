"""
Storage backend factory.
Configures which storage implementation the API uses.
"""

from typing import AsyncGenerator, Optional

from tablebook.core.config import get_settings
from tablebook.db.session import get_sessionmaker
from tablebook.storage.interfaces.storage import Storage
from tablebook.storage.memory import MemoryStorage
from tablebook.storage.sql import SqlStorage

BACKENDS = ("memory", "sql")

_memory_storage: Optional[MemoryStorage] = None


def get_backend_name() -> str:
    """
    Configured backend, selected once at startup via STORAGE_BACKEND.
    - memory: process-local, for development and tests
    - sql: SQLAlchemy over DATABASE_URL
    """
    backend = get_settings().STORAGE_BACKEND.lower()
    if backend not in BACKENDS:
        raise ValueError(f"Unknown STORAGE_BACKEND '{backend}', expected one of {BACKENDS}")
    return backend


def get_memory_storage() -> MemoryStorage:
    """Memory storage singleton."""
    global _memory_storage
    if _memory_storage is None:
        _memory_storage = MemoryStorage()
    return _memory_storage


async def get_storage() -> AsyncGenerator[Storage, None]:
    """FastAPI dependency yielding the storage for one request."""
    if get_backend_name() == "sql":
        async with get_sessionmaker()() as session:
            storage = SqlStorage(session)
            try:
                yield storage
            finally:
                await storage.close()
    else:
        yield get_memory_storage()
