# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Gauge registry holding the values of one scrape."""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable

from prometheus_client.core import GaugeMetricFamily

from .models import MetricSample

logger = logging.getLogger(__name__)

MetricSink = Callable[[GaugeMetricFamily], None]

DEFAULT_NAMESPACE = "mongodb"


@dataclass(frozen=True)
class GaugeSpec:
    """Static declaration of a gauge.

    Attributes:
        subsystem: Subsystem part of the metric name (e.g. "db", "db_coll")
        name: Final part of the metric name
        help: Human-readable description
        labelnames: Ordered label names
    """
    subsystem: str
    name: str
    help: str
    labelnames: tuple[str, ...]

    @property
    def key(self) -> str:
        """Metric name without the namespace prefix."""
        return f"{self.subsystem}_{self.name}"

    def full_name(self, namespace: str) -> str:
        return f"{namespace}_{self.key}" if namespace else self.key


def database_gauges(sharded: bool = False) -> list[GaugeSpec]:
    """Declare the database-level gauges.

    Args:
        sharded: If True, gauges are labelled by (db, shard) instead of (db)
    """
    labels = ("db", "shard") if sharded else ("db",)
    return [
        GaugeSpec("db", "index_size_bytes",
                  "The total size in bytes of all indexes created on this database", labels),
        GaugeSpec("db", "data_size_bytes",
                  "The total size in bytes of the uncompressed data held in this database", labels),
        GaugeSpec("db", "collections_total",
                  "Contains a count of the number of collections in that database", labels),
        GaugeSpec("db", "indexes_total",
                  "Contains a count of the total number of indexes across all collections in the database",
                  labels),
        GaugeSpec("db", "objects_total",
                  "Contains a count of the number of objects (i.e. documents) in the database across all "
                  "collections", labels),
    ]


def collection_gauges() -> list[GaugeSpec]:
    """Declare the collection-level gauges, labelled by (db, coll)."""
    labels = ("db", "coll")
    return [
        GaugeSpec("db_coll", "size", "The total size in memory of all records in a collection", labels),
        GaugeSpec("db_coll", "count", "The number of objects or documents in this collection", labels),
        GaugeSpec("db_coll", "avgobjsize",
                  "The average size of an object in the collection (plus any padding)", labels),
        GaugeSpec("db_coll", "storage_size",
                  "The total amount of storage allocated to this collection for document storage", labels),
        GaugeSpec("db_coll", "indexes", "The number of indexes on the collection", labels),
        GaugeSpec("db_coll", "indexes_size", "The total size of all indexes", labels),
    ]


def exporter_gauges() -> list[GaugeSpec]:
    """Declare the exporter's own health gauges."""
    return [
        GaugeSpec("exporter", "last_scrape_success",
                  "Whether the last scrape could enumerate databases (1 for yes)", ()),
        GaugeSpec("exporter", "last_scrape_skipped",
                  "Number of databases and collections skipped in the last scrape", ()),
        GaugeSpec("exporter", "last_scrape_duration_seconds",
                  "Duration of the last scrape in seconds", ()),
    ]


def build_catalogue(sharded: bool = False) -> list[GaugeSpec]:
    """Declare every gauge exported in the given topology."""
    return database_gauges(sharded) + collection_gauges() + exporter_gauges()


class MetricRegistry:
    """Named gauges with fixed label schemas and their current values.

    Each label tuple holds at most one value per gauge; setting it again
    overwrites. All operations are guarded by a lock so a registry can be
    shared between the scrape loop and the exposition endpoint.
    """

    def __init__(self, specs: Iterable[GaugeSpec], namespace: str = DEFAULT_NAMESPACE):
        """Initialize the registry.

        Args:
            specs: Gauge declarations; keys must be unique
            namespace: Prefix for every metric name

        Raises:
            ValueError: If two declarations share the same key
        """
        self.namespace = namespace
        self._specs: dict[str, GaugeSpec] = {}
        for spec in specs:
            if spec.key in self._specs:
                raise ValueError(f"Duplicate gauge declaration: {spec.key}")
            self._specs[spec.key] = spec
        self._values: dict[str, dict[tuple[str, ...], float]] = {key: {} for key in self._specs}
        self._lock = threading.Lock()

    @property
    def specs(self) -> list[GaugeSpec]:
        return list(self._specs.values())

    def spawn(self) -> "MetricRegistry":
        """Create an empty registry with the same declarations."""
        return MetricRegistry(self._specs.values(), namespace=self.namespace)

    def set(self, key: str, label_values: Iterable[str], value: float) -> None:
        """Set a gauge value for a label tuple.

        Args:
            key: Gauge key without namespace (e.g. "db_data_size_bytes")
            label_values: Values in the order of the gauge's label names
            value: Gauge value

        Raises:
            ValueError: If the gauge is unknown or the label arity is wrong
        """
        spec = self._specs.get(key)
        if spec is None:
            raise ValueError(f"Unknown gauge: {key}")
        labels = tuple(str(v) for v in label_values)
        if len(labels) != len(spec.labelnames):
            raise ValueError(
                f"Gauge {key} expects labels {spec.labelnames}, got {len(labels)} values"
            )
        with self._lock:
            self._values[key][labels] = float(value)

    def samples(self) -> list[MetricSample]:
        """Return every currently-set value."""
        with self._lock:
            return [
                MetricSample(self._specs[key].full_name(self.namespace), labels, value)
                for key, values in self._values.items()
                for labels, value in values.items()
            ]

    def _family(self, spec: GaugeSpec) -> GaugeMetricFamily:
        return GaugeMetricFamily(
            spec.full_name(self.namespace), spec.help, labels=list(spec.labelnames)
        )

    def emit(self, sink: MetricSink) -> None:
        """Write one metric family per gauge, with its current samples, to sink."""
        with self._lock:
            families = []
            for key, spec in self._specs.items():
                family = self._family(spec)
                for labels, value in self._values[key].items():
                    family.add_metric(list(labels), value)
                families.append(family)
        for family in families:
            sink(family)

    def describe(self, sink: MetricSink) -> None:
        """Write one metric family per gauge, without samples, to sink."""
        for spec in self._specs.values():
            sink(self._family(spec))

    def reset(self) -> None:
        """Clear every gauge's values."""
        with self._lock:
            for values in self._values.values():
                values.clear()

    def publish(self, local: "MetricRegistry") -> None:
        """Replace this registry's values with those of a scrape-local registry.

        The swap happens under the lock, so readers see either the previous
        snapshot or the new one, never a mix. The local registry is left empty.

        Raises:
            ValueError: If the registries declare different gauges
        """
        if local is self:
            return
        if list(local._specs) != list(self._specs) or local.namespace != self.namespace:
            raise ValueError("Cannot publish a registry with a different catalogue")
        with local._lock:
            values = local._values
            local._values = {key: {} for key in local._specs}
        with self._lock:
            self._values = values
        logger.debug("MetricRegistry: published %d samples", sum(len(v) for v in values.values()))
