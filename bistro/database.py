"""
Database Connection Module
Handles the MongoDB connection using the motor async driver.

One client is created at application startup and shared by every request;
handlers reach the collections through the injected ``DocumentStore``.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession

from bistro.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Per-collection accessors over a single MongoDB database.

    Attributes:
        users, menu, reviews, carts, payments: motor collections
    """

    def __init__(
        self,
        database,
        client: Optional[AsyncIOMotorClient] = None,
        settings: Optional[Settings] = None,
    ):
        self._database = database
        self._client = client
        self._settings = settings or get_settings()

    @property
    def users(self):
        return self._database[self._settings.users_collection]

    @property
    def menu(self):
        return self._database[self._settings.menu_collection]

    @property
    def reviews(self):
        return self._database[self._settings.reviews_collection]

    @property
    def carts(self):
        return self._database[self._settings.carts_collection]

    @property
    def payments(self):
        return self._database[self._settings.payments_collection]

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Optional[AsyncIOMotorClientSession]]:
        """
        Yield a session bound to a multi-document transaction.

        Yields None when transactions are disabled (or there is no client),
        in which case every write commits on its own.
        """
        if not (self._settings.use_transactions and self._client is not None):
            yield None
            return

        async with await self._client.start_session() as session:
            async with session.start_transaction():
                yield session

    async def ping(self) -> bool:
        """Round-trip to the server; used by the health endpoint."""
        if self._client is None:
            return True
        await self._client.admin.command("ping")
        return True

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


def connect(settings: Optional[Settings] = None) -> DocumentStore:
    """
    Create the process-wide client and wrap it in a DocumentStore.
    Called once at application startup.
    """
    settings = settings or get_settings()
    client = AsyncIOMotorClient(settings.mongo_url)
    logger.info(f"MongoDB client created for database '{settings.mongo_db_name}'")
    return DocumentStore(client[settings.mongo_db_name], client=client, settings=settings)


def get_store(request: Request) -> DocumentStore:
    """
    Dependency injection for FastAPI routes.
    Returns the store created in the application lifespan.
    """
    return request.app.state.store
