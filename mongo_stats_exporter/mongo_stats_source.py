# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""MongoDB statistics source implementation."""

import logging
from typing import TYPE_CHECKING

from bson.errors import BSONError
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from .exceptions import EnumerationError, QueryError
from .models import (
    CollectionStats,
    DatabaseStats,
    ShardedDatabaseStats,
    decode_database_stats,
)
from .stats_source import StatsSource

if TYPE_CHECKING:
    from .config import ExporterConfig

logger = logging.getLogger(__name__)

# Stats are reported unscaled, in bytes.
SCALE = 1


class MongoStatsSource(StatsSource):
    """Statistics source backed by a pymongo client.

    The client is owned by the caller unless the source was built with
    from_config(), in which case close() also closes the client.
    """

    @classmethod
    def from_config(cls, config: "ExporterConfig") -> "MongoStatsSource":
        """Create a MongoStatsSource and its client from exporter configuration.

        The client's server selection and socket timeouts are bounded by the
        configured query timeout so an unreachable cluster cannot stall a
        scrape indefinitely.

        Args:
            config: ExporterConfig with mongo_uri and query_timeout_ms

        Returns:
            Configured MongoStatsSource instance
        """
        client = MongoClient(
            config.mongo_uri,
            serverSelectionTimeoutMS=config.query_timeout_ms,
            connectTimeoutMS=config.query_timeout_ms,
            socketTimeoutMS=config.query_timeout_ms,
        )
        source = cls(client, query_timeout_ms=config.query_timeout_ms)
        source._owns_client = True
        return source

    def __init__(self, client: MongoClient, query_timeout_ms: int | None = None):
        """Initialize MongoDB statistics source.

        Args:
            client: Connected (or lazily connecting) MongoClient
            query_timeout_ms: Server-side time limit applied to stats commands
        """
        self.client = client
        self.query_timeout_ms = query_timeout_ms
        self._owns_client = False

    def _command_options(self) -> dict[str, int]:
        if self.query_timeout_ms:
            return {"maxTimeMS": self.query_timeout_ms}
        return {}

    def list_databases(self) -> list[str]:
        try:
            return list(self.client.list_database_names())
        except PyMongoError as e:
            logger.error("MongoStatsSource: listing databases failed - %s", e)
            raise EnumerationError("Failed to list databases") from e

    def list_collections(self, db_name: str) -> list[str]:
        try:
            return list(self.client[db_name].list_collection_names(**self._command_options()))
        except PyMongoError as e:
            logger.error("MongoStatsSource: listing collections of %s failed - %s", db_name, e)
            raise EnumerationError(f"Failed to list collections of {db_name}") from e

    def fetch_database_stats(self, db_name: str) -> DatabaseStats | ShardedDatabaseStats:
        try:
            reply = self.client[db_name].command("dbStats", scale=SCALE, **self._command_options())
            return decode_database_stats(reply, db_name)
        except (PyMongoError, BSONError) as e:
            logger.error("MongoStatsSource: dbStats on %s failed - %s", db_name, e)
            raise QueryError(f"dbStats failed for {db_name}") from e

    def fetch_collection_stats(self, db_name: str, coll_name: str) -> CollectionStats:
        try:
            reply = self.client[db_name].command(
                "collStats", coll_name, scale=SCALE, **self._command_options()
            )
            return CollectionStats.from_reply(reply)
        except (PyMongoError, BSONError) as e:
            logger.error("MongoStatsSource: collStats on %s.%s failed - %s", db_name, coll_name, e)
            raise QueryError(f"collStats failed for {db_name}.{coll_name}") from e

    def close(self) -> None:
        """Close the client if this source created it."""
        if self._owns_client and self.client is not None:
            self.client.close()
            logger.info("MongoStatsSource: disconnected")
