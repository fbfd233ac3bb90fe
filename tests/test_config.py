# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Tests for exporter configuration."""

import pytest

from mongo_stats_exporter import DEFAULT_EXCLUDED_DATABASES, EnvConfigProvider, ExporterConfig, ExporterMode


class TestEnvConfigProvider:
    """Tests for EnvConfigProvider."""

    def test_get_int_invalid_returns_default(self):
        """Test that a non-integer value falls back to the default."""
        env = EnvConfigProvider({"PORT": "abc"})

        assert env.get_int("PORT", 9001) == 9001

    def test_get_list(self):
        """Test that comma-separated values are split and trimmed."""
        env = EnvConfigProvider({"EXCLUDED_DATABASES": " admin, ,config "})

        assert env.get_list("EXCLUDED_DATABASES") == ["admin", "config"]

    def test_get_list_missing(self):
        """Test that a missing list returns the default."""
        assert EnvConfigProvider({}).get_list("EXCLUDED_DATABASES") is None


class TestExporterConfig:
    """Tests for ExporterConfig."""

    def test_defaults(self):
        """Test default configuration."""
        config = ExporterConfig.from_env({})

        assert config.mongo_uri == "mongodb://localhost:27017"
        assert config.mode is ExporterMode.MONGOD
        assert config.namespace == "mongodb"
        assert config.port == 9001
        assert config.query_timeout_ms == 5000
        assert config.log_level == "INFO"
        assert config.log_type == "stdout"

    def test_mode_specific_exclusions(self):
        """Test that only mongod mode excludes the local database."""
        assert DEFAULT_EXCLUDED_DATABASES[ExporterMode.MONGOD] == {"admin", "test", "local"}
        assert DEFAULT_EXCLUDED_DATABASES[ExporterMode.MONGOS] == {"admin", "test"}
        assert ExporterConfig.from_env({"EXPORTER_MODE": "mongos"}).excluded_databases == {"admin", "test"}
        assert "local" in ExporterConfig.from_env({}).excluded_databases

    def test_from_env(self):
        """Test reading every setting from the environment."""
        config = ExporterConfig.from_env({
            "MONGO_URI": "mongodb://router:27017",
            "EXPORTER_MODE": "MONGOS",
            "METRICS_NAMESPACE": "mongo",
            "PORT": "9216",
            "QUERY_TIMEOUT_MS": "2000",
            "EXCLUDED_DATABASES": "admin,config",
            "LOG_LEVEL": "debug",
            "LOG_TYPE": "TEXT",
        })

        assert config.mongo_uri == "mongodb://router:27017"
        assert config.mode is ExporterMode.MONGOS
        assert config.namespace == "mongo"
        assert config.port == 9216
        assert config.query_timeout_ms == 2000
        assert config.excluded_databases == frozenset({"admin", "test", "config"})
        assert config.log_level == "DEBUG"
        assert config.log_type == "text"

    def test_empty_exclusion_list(self):
        """Test that an empty EXCLUDED_DATABASES keeps the mode default."""
        config = ExporterConfig.from_env({"EXCLUDED_DATABASES": ""})

        assert config.excluded_databases == DEFAULT_EXCLUDED_DATABASES[ExporterMode.MONGOD]

    def test_exclusion_list_adds_to_mode_default(self):
        """Test that EXCLUDED_DATABASES cannot re-enable the system databases."""
        config = ExporterConfig.from_env({"EXCLUDED_DATABASES": "staging"})

        assert config.excluded_databases == frozenset({"admin", "test", "local", "staging"})
        assert ExporterConfig(mode="mongos", excluded_databases=frozenset()).excluded_databases == {"admin", "test"}

    def test_unknown_mode(self):
        """Test that an unknown mode raises ValueError."""
        with pytest.raises(ValueError, match="Unknown EXPORTER_MODE"):
            ExporterConfig.from_env({"EXPORTER_MODE": "cluster"})

    def test_non_positive_timeout(self):
        """Test that a zero timeout is rejected."""
        with pytest.raises(ValueError, match="query_timeout_ms"):
            ExporterConfig.from_env({"QUERY_TIMEOUT_MS": "0"})

    def test_port_out_of_range(self):
        """Test that an invalid port is rejected."""
        with pytest.raises(ValueError, match="port"):
            ExporterConfig(port=70000)

    def test_mode_from_string(self):
        """Test that the mode may be given as a plain string."""
        assert ExporterConfig(mode="mongos").mode is ExporterMode.MONGOS
        assert ExporterMode.MONGOS.sharded
        assert not ExporterMode.MONGOD.sharded
