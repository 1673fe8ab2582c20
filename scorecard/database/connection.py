"""
MongoDB connection management.

Reports are only persisted when MONGODB_URI is configured. The async (motor)
client is created lazily and shared by everything built from the same
settings.
"""
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from scorecard.config.settings import Settings


_async_client: Optional[AsyncIOMotorClient] = None


def get_async_client(settings: Settings) -> AsyncIOMotorClient:
    """Get or create the asynchronous MongoDB client."""
    global _async_client
    if not settings.MONGODB_URI:
        raise ValueError("MONGODB_URI is not configured")
    if _async_client is None:
        _async_client = AsyncIOMotorClient(settings.MONGODB_URI)
    return _async_client


def get_async_database(settings: Settings) -> AsyncIOMotorDatabase:
    """Get the asynchronous database instance."""
    client = get_async_client(settings)
    return client[settings.MONGODB_DATABASE]


async def close_async_client() -> None:
    """Close the asynchronous client connection."""
    global _async_client
    if _async_client is not None:
        _async_client.close()
        _async_client = None
