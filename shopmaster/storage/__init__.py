"""
Storage backends and the per-request storage dependency
"""
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from loguru import logger

from shopmaster.config import Settings
from shopmaster.storage.base import Storage
from shopmaster.storage.memory import MemoryStorage
from shopmaster.storage.sql import SqlStorage
from shopmaster.utils.database import create_tables, make_engine, make_session_factory

__all__ = ["Storage", "SqlStorage", "MemoryStorage", "StorageProvider", "get_storage"]


class StorageProvider:
    """Builds the configured backend and hands out one storage per request"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.backend = settings.storage_backend
        self.engine = None
        self.session_factory = None
        self._memory = None
        if self.backend == "memory":
            self._memory = MemoryStorage()
        else:
            self.engine = make_engine(settings.database_url)
            self.session_factory = make_session_factory(self.engine)

    def initialize(self):
        """Create tables and seed demo data when the store is empty"""
        from shopmaster.seed import seed_demo_data

        if self.engine is not None:
            create_tables(self.engine)
        logger.info(f"Storage ready (backend={self.backend})")
        if self.settings.seed_demo_data:
            with self.open() as storage:
                seed_demo_data(storage, self.settings)

    @contextmanager
    def open(self) -> Iterator[Storage]:
        if self._memory is not None:
            yield self._memory
            return
        db = self.session_factory()
        try:
            yield SqlStorage(db)
        finally:
            db.close()

    def dispose(self):
        if self.engine is not None:
            self.engine.dispose()


def get_storage(request: Request) -> Iterator[Storage]:
    """FastAPI dependency yielding the storage for the current request"""
    with request.app.state.storage_provider.open() as storage:
        yield storage
