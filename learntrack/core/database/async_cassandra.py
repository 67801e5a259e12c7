"""Cassandra session bootstrap on top of cassandra-asyncio-driver.

The API and the migration scripts share `build_cluster`; the API also owns
one process-wide session and creates the keyspace and learntrack tables
on startup.
"""

import structlog
from cassandra.auth import PlainTextAuthProvider
from cassandra.policies import DCAwareRoundRobinPolicy, TokenAwarePolicy
from cassandra_asyncio.cluster import Cluster

from learntrack.catalog.models import CATALOG_TABLES_CQL
from learntrack.config.settings import Settings, get_settings
from learntrack.progress.models import PROGRESS_TABLES_CQL
from learntrack.quiz.models import QUIZ_TABLES_CQL


logger = structlog.get_logger(__name__)

SCHEMA_GROUPS: dict[str, list[str]] = {
    "catalog": CATALOG_TABLES_CQL,
    "progress": PROGRESS_TABLES_CQL,
    "quiz": QUIZ_TABLES_CQL,
}


def build_cluster(settings: Settings) -> Cluster:
    auth_provider = None
    if settings.cassandra_username and settings.cassandra_password:
        auth_provider = PlainTextAuthProvider(
            username=settings.cassandra_username,
            password=settings.cassandra_password,
        )
    return Cluster(
        contact_points=settings.cassandra_hosts,
        port=settings.cassandra_port,
        auth_provider=auth_provider,
        protocol_version=settings.cassandra_protocol_version,
        load_balancing_policy=TokenAwarePolicy(DCAwareRoundRobinPolicy()),
        connect_timeout=settings.cassandra_connect_timeout,
    )


def replication_options(settings: Settings) -> str:
    """Replication map for CREATE KEYSPACE.

    Production keyspaces are pinned to the configured datacenter; everywhere
    else a single-node SimpleStrategy is enough.
    """
    if settings.is_production:
        return (
            "{'class': 'NetworkTopologyStrategy', "
            f"'{settings.cassandra_datacenter}': {settings.cassandra_replication_factor}}}"
        )
    return "{'class': 'SimpleStrategy', 'replication_factor': 1}"


class CassandraConnection:
    """Owns a cluster and its session for the lifetime of the process."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._cluster: Cluster | None = None
        self._session = None

    @property
    def is_open(self) -> bool:
        return self._session is not None and not self._session.is_shutdown

    def open(self):
        """Connect once and return the session (supports aexecute()).

        Raises:
            ConnectionError: If no contact point accepts the connection
        """
        if self._session is not None:
            return self._session

        self._cluster = build_cluster(self.settings)
        try:
            self._session = self._cluster.connect()
        except Exception as e:
            logger.error(
                "cassandra_connect_failed",
                hosts=self.settings.cassandra_hosts,
                error=str(e),
            )
            self._cluster.shutdown()
            self._cluster = None
            raise ConnectionError(f"Failed to connect to Cassandra: {e}") from e

        logger.info(
            "cassandra_connected",
            hosts=self.settings.cassandra_hosts,
            port=self.settings.cassandra_port,
        )
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.shutdown()
            self._session = None
        if self._cluster is not None:
            self._cluster.shutdown()
            self._cluster = None
            logger.info("cassandra_closed")

    async def ensure_schema(self, session) -> None:
        """Create the keyspace and every learntrack table if missing."""
        keyspace = self.settings.cassandra_keyspace
        await session.aexecute(
            f"CREATE KEYSPACE IF NOT EXISTS {keyspace} "
            f"WITH replication = {replication_options(self.settings)} "
            "AND durable_writes = true"
        )
        session.set_keyspace(keyspace)

        for group, statements in SCHEMA_GROUPS.items():
            for cql in statements:
                await session.aexecute(cql.format(keyspace=keyspace))
            logger.debug("cassandra_tables_ready", group=group, keyspace=keyspace)


_connection: CassandraConnection | None = None


async def init_async_cassandra():
    """Open the process-wide session and make sure the schema exists."""
    global _connection
    if _connection is None:
        _connection = CassandraConnection(get_settings())

    session = _connection.open()
    await _connection.ensure_schema(session)
    logger.info("cassandra_schema_ready", keyspace=_connection.settings.cassandra_keyspace)
    return session


async def shutdown_async_cassandra() -> None:
    global _connection
    if _connection is not None:
        _connection.close()
        _connection = None
