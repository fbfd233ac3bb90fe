# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Tests for MongoStatsSource."""

from unittest.mock import MagicMock, patch

import pytest
from bson.errors import InvalidBSON
from pymongo.errors import ExecutionTimeout, OperationFailure, ServerSelectionTimeoutError

from mongo_stats_exporter import (
    CollectionStats,
    DatabaseStats,
    EnumerationError,
    ExporterConfig,
    MongoStatsSource,
    QueryError,
    ShardedDatabaseStats,
)
from tests.fixtures import coll_stats_reply, db_stats_reply, sharded_db_stats_reply


@pytest.fixture
def client():
    """A MagicMock standing in for pymongo.MongoClient."""
    return MagicMock()


class TestMongoStatsSource:
    """Tests for MongoStatsSource against a mocked client."""

    def test_list_databases(self, client):
        """Test that database names come from list_database_names."""
        client.list_database_names.return_value = ["admin", "shop"]

        assert MongoStatsSource(client).list_databases() == ["admin", "shop"]

    def test_list_databases_failure(self, client):
        """Test that a driver error becomes EnumerationError."""
        client.list_database_names.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(EnumerationError, match="list databases"):
            MongoStatsSource(client).list_databases()

    def test_list_collections_passes_time_limit(self, client):
        """Test that collection listing carries the server-side time limit."""
        client["shop"].list_collection_names.return_value = ["orders"]

        names = MongoStatsSource(client, query_timeout_ms=250).list_collections("shop")

        assert names == ["orders"]
        client["shop"].list_collection_names.assert_called_once_with(maxTimeMS=250)

    def test_list_collections_failure(self, client):
        """Test that a listing error becomes EnumerationError."""
        client["shop"].list_collection_names.side_effect = OperationFailure("not authorized")

        with pytest.raises(EnumerationError, match="shop"):
            MongoStatsSource(client).list_collections("shop")

    def test_fetch_database_stats(self, client):
        """Test that dbStats runs unscaled and decodes a flat reply."""
        client["shop"].command.return_value = db_stats_reply("shop")

        stats = MongoStatsSource(client, query_timeout_ms=1000).fetch_database_stats("shop")

        assert isinstance(stats, DatabaseStats)
        assert stats.data_size_bytes == 1000
        client["shop"].command.assert_called_once_with("dbStats", scale=1, maxTimeMS=1000)

    def test_fetch_database_stats_without_timeout(self, client):
        """Test that no time limit is sent when none is configured."""
        client["shop"].command.return_value = db_stats_reply("shop")

        MongoStatsSource(client).fetch_database_stats("shop")

        client["shop"].command.assert_called_once_with("dbStats", scale=1)

    def test_fetch_database_stats_sharded(self, client):
        """Test that a router reply decodes as sharded stats."""
        client["shop"].command.return_value = sharded_db_stats_reply("shop", {
            "shard01/a:27017": db_stats_reply("shop"),
        })

        stats = MongoStatsSource(client).fetch_database_stats("shop")

        assert isinstance(stats, ShardedDatabaseStats)
        assert list(stats.shards) == ["shard01/a:27017"]

    def test_fetch_database_stats_timeout(self, client):
        """Test that an exceeded time limit becomes QueryError."""
        client["shop"].command.side_effect = ExecutionTimeout("operation exceeded time limit")

        with pytest.raises(QueryError, match="dbStats failed for shop"):
            MongoStatsSource(client).fetch_database_stats("shop")

    def test_fetch_collection_stats(self, client):
        """Test that collStats runs against the named collection."""
        client["shop"].command.return_value = coll_stats_reply(count=7)

        stats = MongoStatsSource(client, query_timeout_ms=500).fetch_collection_stats("shop", "orders")

        assert stats == CollectionStats(
            size_bytes=500,
            object_count=7,
            avg_object_size_bytes=100,
            storage_size_bytes=8192,
            index_count=2,
            total_index_size_bytes=2048,
        )
        client["shop"].command.assert_called_once_with("collStats", "orders", scale=1, maxTimeMS=500)

    def test_fetch_collection_stats_failure(self, client):
        """Test that a failed collStats becomes QueryError."""
        client["shop"].command.side_effect = OperationFailure("ns not found")

        with pytest.raises(QueryError, match="shop.orders"):
            MongoStatsSource(client).fetch_collection_stats("shop", "orders")

    def test_fetch_collection_stats_invalid_bson(self, client):
        """Test that a reply that cannot be decoded from BSON becomes QueryError."""
        client["shop"].command.side_effect = InvalidBSON("bad document")

        with pytest.raises(QueryError, match="shop.orders"):
            MongoStatsSource(client).fetch_collection_stats("shop", "orders")

    def test_fetch_database_stats_non_finite_value(self, client):
        """Test that a NaN in a dbStats reply surfaces as QueryError."""
        client["shop"].command.return_value = db_stats_reply("shop", data_size=float("nan"))

        with pytest.raises(QueryError):
            MongoStatsSource(client).fetch_database_stats("shop")

    def test_close_does_not_close_borrowed_client(self, client):
        """Test that a caller-owned client is left open."""
        MongoStatsSource(client).close()

        client.close.assert_not_called()

    def test_from_config_bounds_client_timeouts(self):
        """Test that from_config builds a client bounded by the query timeout."""
        config = ExporterConfig(mongo_uri="mongodb://db:27017", query_timeout_ms=1500)

        with patch("mongo_stats_exporter.mongo_stats_source.MongoClient") as mongo_client:
            source = MongoStatsSource.from_config(config)
            source.close()

        mongo_client.assert_called_once_with(
            "mongodb://db:27017",
            serverSelectionTimeoutMS=1500,
            connectTimeoutMS=1500,
            socketTimeoutMS=1500,
        )
        assert source.query_timeout_ms == 1500
        mongo_client.return_value.close.assert_called_once()
