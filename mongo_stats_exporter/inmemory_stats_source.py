# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""In-memory statistics source for testing and local development."""

import copy
import logging
from typing import Any

from .exceptions import EnumerationError, QueryError
from .models import (
    CollectionStats,
    DatabaseStats,
    ShardedDatabaseStats,
    decode_database_stats,
)
from .stats_source import StatsSource

logger = logging.getLogger(__name__)


class InMemoryStatsSource(StatsSource):
    """Statistics source serving canned dbStats/collStats replies.

    Replies are stored as raw documents and decoded exactly like replies
    from a real server. Individual listings and queries can be marked as
    failing to exercise error handling.
    """

    def __init__(self):
        """Initialize an empty in-memory source."""
        self.database_replies: dict[str, dict[str, Any]] = {}
        self.collection_replies: dict[str, dict[str, dict[str, Any]]] = {}
        self.fail_database_listing = False
        self.failing_collection_listings: set[str] = set()
        self.failing_databases: set[str] = set()
        self.failing_collections: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, ...]] = []

    def add_database(self, db_name: str, reply: dict[str, Any] | None = None) -> None:
        """Add a database with an optional dbStats reply.

        Args:
            db_name: Name of the database
            reply: dbStats reply document (defaults to an empty flat reply)
        """
        self.database_replies[db_name] = copy.deepcopy(reply) if reply else {"db": db_name}
        self.collection_replies.setdefault(db_name, {})

    def add_collection(self, db_name: str, coll_name: str, reply: dict[str, Any] | None = None) -> None:
        """Add a collection with an optional collStats reply.

        The owning database is created if it does not exist yet.
        """
        if db_name not in self.database_replies:
            self.add_database(db_name)
        self.collection_replies[db_name][coll_name] = copy.deepcopy(reply) if reply else {}

    def drop_collection(self, db_name: str, coll_name: str) -> None:
        self.collection_replies.get(db_name, {}).pop(coll_name, None)

    def drop_database(self, db_name: str) -> None:
        self.database_replies.pop(db_name, None)
        self.collection_replies.pop(db_name, None)

    def list_databases(self) -> list[str]:
        self.calls.append(("list_databases",))
        if self.fail_database_listing:
            raise EnumerationError("Failed to list databases")
        return list(self.database_replies)

    def list_collections(self, db_name: str) -> list[str]:
        self.calls.append(("list_collections", db_name))
        if db_name in self.failing_collection_listings:
            raise EnumerationError(f"Failed to list collections of {db_name}")
        return list(self.collection_replies.get(db_name, {}))

    def fetch_database_stats(self, db_name: str) -> DatabaseStats | ShardedDatabaseStats:
        self.calls.append(("fetch_database_stats", db_name))
        if db_name in self.failing_databases or db_name not in self.database_replies:
            raise QueryError(f"dbStats failed for {db_name}")
        return decode_database_stats(self.database_replies[db_name], db_name)

    def fetch_collection_stats(self, db_name: str, coll_name: str) -> CollectionStats:
        self.calls.append(("fetch_collection_stats", db_name, coll_name))
        collections = self.collection_replies.get(db_name, {})
        if (db_name, coll_name) in self.failing_collections or coll_name not in collections:
            raise QueryError(f"collStats failed for {db_name}.{coll_name}")
        return CollectionStats.from_reply(collections[coll_name])
