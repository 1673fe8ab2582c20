"""Database module - normalization helpers and connection management."""

from scorecard.database.connection import (
    get_async_client,
    get_async_database,
    close_async_client,
)

__all__ = [
    "get_async_client",
    "get_async_database",
    "close_async_client",
]
