# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Scrape cycle: enumerate, fetch, normalize, publish, emit and reset."""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, TypeVar

from prometheus_client.core import GaugeMetricFamily

from .config import DEFAULT_EXCLUDED_DATABASES, ExporterConfig, ExporterMode
from .exceptions import EnumerationError, StatsSourceError
from .models import CollectionStats, DatabaseStats, ShardedDatabaseStats
from .registry import DEFAULT_NAMESPACE, MetricRegistry, MetricSink, build_catalogue
from .stats_source import StatsSource
from .topology import normalize_shards

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one call against the statistics source."""
    value: T | None = None
    error: StatsSourceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def attempt(func: Callable[..., T], *args: Any) -> Result[T]:
    """Call func and capture a StatsSourceError as a failed Result."""
    try:
        return Result(value=func(*args))
    except StatsSourceError as e:
        return Result(error=e)


@dataclass(frozen=True)
class ScrapeFailure:
    """An entity skipped during a scrape.

    Attributes:
        kind: "enumeration" or "query"
        entity: Database name, "db.collection", or "*" for the database listing
        reason: Error message
    """
    kind: str
    entity: str
    reason: str

    @classmethod
    def from_error(cls, entity: str, error: StatsSourceError) -> "ScrapeFailure":
        kind = "enumeration" if isinstance(error, EnumerationError) else "query"
        return cls(kind=kind, entity=entity, reason=str(error))


@dataclass
class ScrapeReport:
    """Summary of one scrape."""
    databases: int = 0
    collections: int = 0
    failures: list[ScrapeFailure] = field(default_factory=list)
    enumeration_failed: bool = False
    duration_seconds: float = 0.0

    @property
    def skipped(self) -> int:
        return len(self.failures)

    @property
    def partial(self) -> bool:
        """True when some entities were skipped but the databases could be listed."""
        return bool(self.failures) and not self.enumeration_failed

    def record(self, entity: str, error: StatsSourceError) -> None:
        self.failures.append(ScrapeFailure.from_error(entity, error))


_DATABASE_FIELDS = (
    ("db_index_size_bytes", "index_size_bytes"),
    ("db_data_size_bytes", "data_size_bytes"),
    ("db_collections_total", "collection_count"),
    ("db_indexes_total", "index_count"),
    ("db_objects_total", "object_count"),
)

_COLLECTION_FIELDS = (
    ("db_coll_size", "size_bytes"),
    ("db_coll_count", "object_count"),
    ("db_coll_avgobjsize", "avg_object_size_bytes"),
    ("db_coll_storage_size", "storage_size_bytes"),
    ("db_coll_indexes", "index_count"),
    ("db_coll_indexes_size", "total_index_size_bytes"),
)


class ScrapeOrchestrator:
    """Drives scrapes against a StatsSource and exposes the results.

    Each scrape populates a private registry which is then published to the
    shared one in a single swap. Scrapes are serialized, and a cycle of
    scrape, emit and reset runs under one lock so overlapping exposition
    requests cannot interleave.

    The orchestrator implements the prometheus_client custom collector
    protocol (collect/describe) and can be registered with a
    CollectorRegistry directly.
    """

    def __init__(
        self,
        source: StatsSource,
        registry: MetricRegistry | None = None,
        mode: ExporterMode = ExporterMode.MONGOD,
        excluded_databases: Iterable[str] | None = None,
        namespace: str = DEFAULT_NAMESPACE,
    ):
        """Initialize the orchestrator.

        Args:
            source: Statistics source to query
            registry: Shared registry (built from the mode's catalogue if None)
            mode: Topology of the scraped node
            excluded_databases: Databases to skip on top of the mode defaults
            namespace: Metric name prefix used when building the registry
        """
        self.source = source
        self.mode = ExporterMode(mode)
        self.registry = registry or MetricRegistry(build_catalogue(self.mode.sharded), namespace=namespace)
        self.excluded_databases = DEFAULT_EXCLUDED_DATABASES[self.mode] | frozenset(excluded_databases or ())
        self.last_report: ScrapeReport | None = None
        self._cycle_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: ExporterConfig, source: StatsSource) -> "ScrapeOrchestrator":
        return cls(
            source,
            mode=config.mode,
            excluded_databases=config.excluded_databases,
            namespace=config.namespace,
        )

    def scrape(self) -> ScrapeReport:
        """Run one scrape and publish its values to the shared registry.

        Never raises for source failures; they are logged and recorded in
        the returned report.
        """
        with self._cycle_lock:
            return self._scrape()

    def run_cycle(self, sink: MetricSink) -> ScrapeReport:
        """Scrape, emit every value to sink, then reset the shared registry."""
        with self._cycle_lock:
            report = self._scrape()
            self.registry.emit(sink)
            self.registry.reset()
            return report

    def collect(self) -> list[GaugeMetricFamily]:
        families: list[GaugeMetricFamily] = []
        self.run_cycle(families.append)
        return families

    def describe(self) -> list[GaugeMetricFamily]:
        families: list[GaugeMetricFamily] = []
        self.registry.describe(families.append)
        return families

    def _scrape(self) -> ScrapeReport:
        started = time.monotonic()
        local = self.registry.spawn()
        report = ScrapeReport()

        listing = attempt(self.source.list_databases)
        if listing.ok:
            for db_name in listing.value:
                if db_name in self.excluded_databases:
                    logger.debug("ScrapeOrchestrator: skipping excluded database %s", db_name)
                    continue
                self._scrape_database(local, db_name, report)
        else:
            report.enumeration_failed = True
            report.record("*", listing.error)
            logger.error("ScrapeOrchestrator: cannot list databases - %s", listing.error)

        report.duration_seconds = time.monotonic() - started
        local.set("exporter_last_scrape_success", (), 0 if report.enumeration_failed else 1)
        local.set("exporter_last_scrape_skipped", (), report.skipped)
        local.set("exporter_last_scrape_duration_seconds", (), report.duration_seconds)

        self.registry.publish(local)
        self.last_report = report

        if report.partial:
            logger.warning(
                "ScrapeOrchestrator: partial scrape, %d entities skipped", report.skipped,
                extra={"failures": [f.entity for f in report.failures]},
            )
        logger.debug(
            "ScrapeOrchestrator: scraped %d databases and %d collections in %.3fs",
            report.databases, report.collections, report.duration_seconds,
        )
        return report

    def _scrape_database(self, registry: MetricRegistry, db_name: str, report: ScrapeReport) -> None:
        stats = attempt(self.source.fetch_database_stats, db_name)
        if stats.ok:
            self._export_database(registry, db_name, stats.value)
            report.databases += 1
        else:
            report.record(db_name, stats.error)
            logger.warning("ScrapeOrchestrator: skipping stats of database %s - %s", db_name, stats.error)

        collections = attempt(self.source.list_collections, db_name)
        if not collections.ok:
            report.record(db_name, collections.error)
            logger.warning("ScrapeOrchestrator: skipping collections of %s - %s", db_name, collections.error)
            return

        for coll_name in collections.value:
            coll_stats = attempt(self.source.fetch_collection_stats, db_name, coll_name)
            if not coll_stats.ok:
                report.record(f"{db_name}.{coll_name}", coll_stats.error)
                logger.warning(
                    "ScrapeOrchestrator: skipping collection %s.%s - %s", db_name, coll_name, coll_stats.error
                )
                continue
            self._export_collection(registry, db_name, coll_name, coll_stats.value)
            report.collections += 1

    def _export_database(
        self, registry: MetricRegistry, db_name: str, stats: DatabaseStats | ShardedDatabaseStats
    ) -> None:
        if not self.mode.sharded:
            flat = stats.totals if isinstance(stats, ShardedDatabaseStats) else stats
            _set_fields(registry, _DATABASE_FIELDS, (db_name,), flat)
            return

        if not isinstance(stats, ShardedDatabaseStats):
            logger.debug("ScrapeOrchestrator: no per-shard stats for %s", db_name)
            return
        for shard, shard_stats in normalize_shards(stats.shards):
            _set_fields(registry, _DATABASE_FIELDS, (db_name, shard), shard_stats)

    def _export_collection(
        self, registry: MetricRegistry, db_name: str, coll_name: str, stats: CollectionStats
    ) -> None:
        _set_fields(registry, _COLLECTION_FIELDS, (db_name, coll_name), stats)


def _set_fields(
    registry: MetricRegistry,
    fields: tuple[tuple[str, str], ...],
    labels: tuple[str, ...],
    stats: DatabaseStats | CollectionStats,
) -> None:
    for key, attr in fields:
        registry.set(key, labels, getattr(stats, attr))
