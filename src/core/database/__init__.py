"""Database connection module."""

from src.core.database.async_cassandra import (
    AsyncCassandraConnection,
    init_async_cassandra,
    shutdown_async_cassandra,
)
from src.core.database.sequences import IdAllocator


__all__ = [
    "AsyncCassandraConnection",
    "IdAllocator",
    "init_async_cassandra",
    "shutdown_async_cassandra",
]
