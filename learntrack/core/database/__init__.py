"""Cassandra connection and schema bootstrap."""

from learntrack.core.database.async_cassandra import (
    CassandraConnection,
    build_cluster,
    init_async_cassandra,
    shutdown_async_cassandra,
)


__all__ = [
    "CassandraConnection",
    "build_cluster",
    "init_async_cassandra",
    "shutdown_async_cassandra",
]
