# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Statistics records decoded from dbStats/collStats replies."""

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from .exceptions import QueryError


def _int_field(reply: Mapping[str, Any], key: str) -> int:
    """Read an integer field from a command reply.

    Missing or null fields decode as 0. Anything that is not a finite
    number (bools included) is rejected.
    """
    value = reply.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise QueryError(f"Field '{key}' is not numeric: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise QueryError(f"Field '{key}' is not finite: {value!r}")
    return int(value)


@dataclass(frozen=True)
class DatabaseStats:
    """Flat dbStats record for one database (or one shard of it).

    Attributes:
        name: Database name
        index_size_bytes: Total size of all indexes
        data_size_bytes: Uncompressed size of the data
        collection_count: Number of collections
        object_count: Number of documents across all collections
        index_count: Number of indexes across all collections
    """
    name: str
    index_size_bytes: int = 0
    data_size_bytes: int = 0
    collection_count: int = 0
    object_count: int = 0
    index_count: int = 0

    @classmethod
    def from_reply(cls, reply: Mapping[str, Any], default_name: str) -> "DatabaseStats":
        name = reply.get("db") or default_name
        return cls(
            name=str(name),
            index_size_bytes=_int_field(reply, "indexSize"),
            data_size_bytes=_int_field(reply, "dataSize"),
            collection_count=_int_field(reply, "collections"),
            object_count=_int_field(reply, "objects"),
            index_count=_int_field(reply, "indexes"),
        )


@dataclass(frozen=True)
class ShardedDatabaseStats:
    """dbStats record returned by a mongos router.

    Attributes:
        totals: Aggregate stats across all shards
        shards: Per-shard stats keyed by the raw shard descriptor
    """
    totals: DatabaseStats
    shards: dict[str, DatabaseStats] = field(default_factory=dict)


@dataclass(frozen=True)
class CollectionStats:
    """collStats record for one collection."""
    size_bytes: int = 0
    object_count: int = 0
    avg_object_size_bytes: int = 0
    storage_size_bytes: int = 0
    index_count: int = 0
    total_index_size_bytes: int = 0

    @classmethod
    def from_reply(cls, reply: Mapping[str, Any]) -> "CollectionStats":
        if "nindexes" in reply:
            index_count = _int_field(reply, "nindexes")
        else:
            index_sizes = reply.get("indexSizes") or {}
            if not isinstance(index_sizes, Mapping):
                raise QueryError(f"Field 'indexSizes' is not a mapping: {index_sizes!r}")
            index_count = len(index_sizes)

        return cls(
            size_bytes=_int_field(reply, "size"),
            object_count=_int_field(reply, "count"),
            avg_object_size_bytes=_int_field(reply, "avgObjSize"),
            storage_size_bytes=_int_field(reply, "storageSize"),
            index_count=index_count,
            total_index_size_bytes=_int_field(reply, "totalIndexSize"),
        )


@dataclass(frozen=True)
class MetricSample:
    """A single gauge value addressed by metric name and label values."""
    name: str
    labels: tuple[str, ...]
    value: float


def decode_database_stats(
    reply: Mapping[str, Any], db_name: str
) -> DatabaseStats | ShardedDatabaseStats:
    """Decode a dbStats reply into the flat or sharded variant.

    A reply carrying a non-empty ``raw`` mapping came from a router and is
    decoded as ShardedDatabaseStats; anything else is a flat record.

    Args:
        reply: dbStats command reply
        db_name: Name of the database the command ran against

    Returns:
        DatabaseStats or ShardedDatabaseStats

    Raises:
        QueryError: If the reply contains undecodable fields
    """
    if not isinstance(reply, Mapping):
        raise QueryError(f"dbStats reply for '{db_name}' is not a document")

    totals = DatabaseStats.from_reply(reply, db_name)
    raw = reply.get("raw")
    if not raw:
        return totals
    if not isinstance(raw, Mapping):
        raise QueryError(f"Field 'raw' is not a mapping: {raw!r}")

    shards = {}
    for descriptor, shard_reply in raw.items():
        if not isinstance(shard_reply, Mapping):
            raise QueryError(f"Shard entry '{descriptor}' is not a document")
        shards[str(descriptor)] = DatabaseStats.from_reply(shard_reply, totals.name)
    return ShardedDatabaseStats(totals=totals, shards=shards)
