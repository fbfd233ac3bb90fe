# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Exporter configuration loaded from environment variables.

Environment Variables:
    MONGO_URI: MongoDB connection URI (default: mongodb://localhost:27017)
    EXPORTER_MODE: "mongod" for standalone/replica-set members, "mongos" for routers (default: mongod)
    METRICS_NAMESPACE: Prefix for all metric names (default: mongodb)
    PORT: Exporter HTTP port (default: 9001)
    QUERY_TIMEOUT_MS: Upper bound for each listing/stats call (default: 5000)
    EXCLUDED_DATABASES: Comma-separated database names to skip in addition to the mode defaults
    LOG_LEVEL: DEBUG, INFO, WARNING or ERROR (default: INFO)
    LOG_TYPE: "stdout" for JSON lines, "text" for plain text (default: stdout)
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from .registry import DEFAULT_NAMESPACE


class ExporterMode(str, Enum):
    """Topology of the node the exporter talks to."""
    MONGOD = "mongod"
    MONGOS = "mongos"

    @property
    def sharded(self) -> bool:
        return self is ExporterMode.MONGOS


# mongos does not skip "local"; kept as-is rather than unified.
DEFAULT_EXCLUDED_DATABASES: dict[ExporterMode, frozenset[str]] = {
    ExporterMode.MONGOD: frozenset({"admin", "test", "local"}),
    ExporterMode.MONGOS: frozenset({"admin", "test"}),
}


class EnvConfigProvider:
    """Configuration provider that reads from environment variables."""

    def __init__(self, environ: Mapping[str, str] | None = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str, default: Any = None) -> Any:
        return self._environ.get(key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._environ.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def get_list(self, key: str, default: list[str] | None = None) -> list[str] | None:
        """Get a comma-separated list, dropping empty items."""
        value = self._environ.get(key)
        if value is None:
            return default
        return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class ExporterConfig:
    """Exporter settings.

    Attributes:
        mongo_uri: MongoDB connection URI
        mode: Topology of the node being scraped
        namespace: Prefix for all metric names
        port: HTTP port for the metrics endpoint
        query_timeout_ms: Upper bound for each listing/stats call
        excluded_databases: Databases never exported; always includes the mode defaults
        log_level: Logging level name
        log_type: "stdout" (JSON lines) or "text"
    """
    mongo_uri: str = "mongodb://localhost:27017"
    mode: ExporterMode = ExporterMode.MONGOD
    namespace: str = DEFAULT_NAMESPACE
    port: int = 9001
    query_timeout_ms: int = 5000
    excluded_databases: frozenset[str] | None = None
    log_level: str = "INFO"
    log_type: str = "stdout"

    def __post_init__(self) -> None:
        self.mode = ExporterMode(self.mode)
        if self.query_timeout_ms <= 0:
            raise ValueError(f"query_timeout_ms must be positive, got {self.query_timeout_ms}")
        if not 0 < self.port < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")
        # User exclusions add to the system databases, never replace them.
        self.excluded_databases = DEFAULT_EXCLUDED_DATABASES[self.mode] | frozenset(self.excluded_databases or ())

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExporterConfig":
        """Build configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            ExporterConfig instance

        Raises:
            ValueError: If the mode is unknown or a numeric setting is out of range
        """
        env = EnvConfigProvider(environ)
        mode_name = str(env.get("EXPORTER_MODE", ExporterMode.MONGOD.value)).lower()
        try:
            mode = ExporterMode(mode_name)
        except ValueError:
            raise ValueError(
                f"Unknown EXPORTER_MODE: {mode_name}. Must be one of: mongod, mongos"
            ) from None

        excluded = env.get_list("EXCLUDED_DATABASES")
        return cls(
            mongo_uri=env.get("MONGO_URI", cls.mongo_uri),
            mode=mode,
            namespace=env.get("METRICS_NAMESPACE", DEFAULT_NAMESPACE),
            port=env.get_int("PORT", cls.port),
            query_timeout_ms=env.get_int("QUERY_TIMEOUT_MS", cls.query_timeout_ms),
            excluded_databases=frozenset(excluded) if excluded is not None else None,
            log_level=str(env.get("LOG_LEVEL", cls.log_level)).upper(),
            log_type=str(env.get("LOG_TYPE", cls.log_type)).lower(),
        )
