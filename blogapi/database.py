# blogapi/database.py
import logging
from typing import Optional

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from blogapi.config import DEFAULT_DB_NAME, config
from blogapi.models.documents import DOCUMENT_MODELS

logger = logging.getLogger(__name__)


class BlogDatabase:
    """Connection to the MongoDB database holding users and blog posts."""

    def __init__(self, url: str, timeout_ms: Optional[int] = None):
        self.url = url
        self.timeout_ms = timeout_ms if timeout_ms is not None else config.database.timeout_ms
        self.client: Optional[AsyncIOMotorClient] = None
        self._initialized = False

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self.client is None:
            raise RuntimeError("Database is not connected")
        return self.client.get_default_database(DEFAULT_DB_NAME)

    async def initialize(self):
        """Connect, verify the server answers and register the document models.

        Registering the models also creates their indexes, including the
        unique index on ``users.username``.
        """
        if self._initialized:
            return

        self.client = AsyncIOMotorClient(
            self.url,
            serverSelectionTimeoutMS=self.timeout_ms,
            tz_aware=True,
        )
        try:
            await self.client.admin.command("ping")
            await init_beanie(database=self.database, document_models=DOCUMENT_MODELS)
        except Exception as e:
            logger.error(f"MongoDB initialization failed: {e}", exc_info=True)
            self.client.close()
            self.client = None
            raise
        logger.info(f"MongoDB connected: database '{self.database.name}'")
        self._initialized = True

    async def health_check(self) -> bool:
        """Check database connection health."""
        if self.client is None:
            return False
        try:
            await self.client.admin.command("ping")
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def clear(self):
        """Remove every document but keep collections and indexes."""
        for model in DOCUMENT_MODELS:
            await model.delete_all()
        logger.warning(f"Cleared all collections of '{self.database.name}'")

    async def close(self):
        """Close the client connection."""
        if self.client is not None:
            # Motor's close() is not a coroutine
            self.client.close()
            self.client = None
            self._initialized = False
            logger.info("MongoDB connection closed")
