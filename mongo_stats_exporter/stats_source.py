# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Abstract statistics source interface."""

from abc import ABC, abstractmethod

from .models import CollectionStats, DatabaseStats, ShardedDatabaseStats


class StatsSource(ABC):
    """Abstract base class for database statistics backends.

    Implementations are stateless request/response wrappers: every call is a
    single round-trip with no retries.
    """

    @abstractmethod
    def list_databases(self) -> list[str]:
        """List database names.

        Raises:
            EnumerationError: If the listing fails
        """
        pass

    @abstractmethod
    def list_collections(self, db_name: str) -> list[str]:
        """List collection names in a database.

        Args:
            db_name: Name of the database

        Raises:
            EnumerationError: If the listing fails
        """
        pass

    @abstractmethod
    def fetch_database_stats(self, db_name: str) -> DatabaseStats | ShardedDatabaseStats:
        """Run dbStats against a database.

        Args:
            db_name: Name of the database

        Returns:
            Flat stats, or sharded stats when the reply came from a router

        Raises:
            QueryError: If the command fails or the reply cannot be decoded
        """
        pass

    @abstractmethod
    def fetch_collection_stats(self, db_name: str, coll_name: str) -> CollectionStats:
        """Run collStats against a collection.

        Args:
            db_name: Name of the database
            coll_name: Name of the collection

        Raises:
            QueryError: If the command fails or the reply cannot be decoded
        """
        pass

    def close(self) -> None:
        """Release any underlying connection."""
        pass
