# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""MongoDB statistics exporter for Prometheus.

Periodically inspects a MongoDB node (mongod or mongos) and exposes
database- and collection-level storage gauges.
"""

__version__ = "0.1.0"

from .config import DEFAULT_EXCLUDED_DATABASES, EnvConfigProvider, ExporterConfig, ExporterMode
from .exceptions import EnumerationError, QueryError, StatsSourceError
from .inmemory_stats_source import InMemoryStatsSource
from .models import (
    CollectionStats,
    DatabaseStats,
    MetricSample,
    ShardedDatabaseStats,
    decode_database_stats,
)
from .mongo_stats_source import MongoStatsSource
from .registry import GaugeSpec, MetricRegistry, build_catalogue
from .scrape import Result, ScrapeFailure, ScrapeOrchestrator, ScrapeReport
from .stats_source import StatsSource
from .topology import normalize_shards, shard_id

__all__ = [
    # Version
    "__version__",
    # Configuration
    "ExporterConfig",
    "ExporterMode",
    "EnvConfigProvider",
    "DEFAULT_EXCLUDED_DATABASES",
    # Sources
    "StatsSource",
    "MongoStatsSource",
    "InMemoryStatsSource",
    # Records
    "DatabaseStats",
    "ShardedDatabaseStats",
    "CollectionStats",
    "MetricSample",
    "decode_database_stats",
    # Topology
    "shard_id",
    "normalize_shards",
    # Registry
    "GaugeSpec",
    "MetricRegistry",
    "build_catalogue",
    # Scrape
    "ScrapeOrchestrator",
    "ScrapeReport",
    "ScrapeFailure",
    "Result",
    # Exceptions
    "StatsSourceError",
    "EnumerationError",
    "QueryError",
]
