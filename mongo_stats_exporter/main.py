# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Exporter entry point.

Serves the metrics endpoint with prometheus_client; every request to
/metrics runs one scrape against the configured MongoDB node.
"""

import logging
import threading

from prometheus_client import CollectorRegistry, start_http_server

from .config import ExporterConfig
from .logging_config import configure_logging
from .mongo_stats_source import MongoStatsSource
from .scrape import ScrapeOrchestrator
from .stats_source import StatsSource

logger = logging.getLogger(__name__)


def create_exporter(
    config: ExporterConfig,
    source: StatsSource,
    registry: CollectorRegistry | None = None,
) -> tuple[ScrapeOrchestrator, CollectorRegistry]:
    """Wire an orchestrator for the given source and register it.

    A dedicated CollectorRegistry is used by default so the endpoint only
    exposes MongoDB statistics and not the default process metrics.

    Args:
        config: Exporter configuration
        source: Statistics source to scrape
        registry: Prometheus registry to register with (a new one if None)

    Returns:
        The orchestrator and the registry it is registered with
    """
    registry = registry if registry is not None else CollectorRegistry()
    orchestrator = ScrapeOrchestrator.from_config(config, source)
    registry.register(orchestrator)
    return orchestrator, registry


def main(stop_event: threading.Event | None = None) -> None:
    """Run the exporter until interrupted."""
    config = ExporterConfig.from_env()
    configure_logging(config.log_level, config.log_type)

    source = MongoStatsSource.from_config(config)
    _, registry = create_exporter(config, source)

    stop_event = stop_event or threading.Event()
    try:
        start_http_server(config.port, registry=registry)
        logger.info(
            "Exporter started",
            extra={
                "port": config.port,
                "mode": config.mode.value,
                "excluded_databases": sorted(config.excluded_databases),
            },
        )
        stop_event.wait()
    except KeyboardInterrupt:
        logger.info("Exporter interrupted, shutting down")
    finally:
        source.close()
