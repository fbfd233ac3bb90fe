# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Shared test fixtures for building server replies.

Usage:
    from tests.fixtures import db_stats_reply, coll_stats_reply

    reply = db_stats_reply("shop", data_size=1000)
"""

from .reply_fixtures import coll_stats_reply, db_stats_reply, sharded_db_stats_reply  # noqa: F401

__all__ = [
    "db_stats_reply",
    "sharded_db_stats_reply",
    "coll_stats_reply",
]
