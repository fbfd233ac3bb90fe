# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Shared fixtures for exporter tests."""

import pytest

from mongo_stats_exporter import InMemoryStatsSource
from tests.fixtures import coll_stats_reply, db_stats_reply, sharded_db_stats_reply


@pytest.fixture
def mongod_source():
    """A standalone node with one user database and the system databases."""
    source = InMemoryStatsSource()
    source.add_database("shop", db_stats_reply("shop"))
    source.add_collection("shop", "orders", coll_stats_reply(count=5))
    source.add_collection("shop", "customers", coll_stats_reply(count=3))
    source.add_database("admin", db_stats_reply("admin"))
    source.add_collection("admin", "system.version", coll_stats_reply())
    source.add_database("local", db_stats_reply("local"))
    source.add_collection("local", "startup_log", coll_stats_reply())
    source.add_database("test", db_stats_reply("test"))
    return source


@pytest.fixture
def mongos_source():
    """A router in front of two shards."""
    source = InMemoryStatsSource()
    source.add_database("shop", sharded_db_stats_reply("shop", {
        "shard01/host-a:27017,host-b:27017": db_stats_reply("shop", data_size=1000, objects=10),
        "shard02/host-c:27017,host-d:27017": db_stats_reply("shop", data_size=2000, objects=20),
    }))
    source.add_collection("shop", "orders", coll_stats_reply())
    source.add_database("local", sharded_db_stats_reply("local", {
        "shard01/host-a:27017,host-b:27017": db_stats_reply("local"),
    }))
    source.add_collection("local", "startup_log", coll_stats_reply())
    source.add_database("admin", db_stats_reply("admin"))
    return source
