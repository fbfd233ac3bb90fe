# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Exceptions raised while gathering statistics."""


class StatsSourceError(Exception):
    """Base exception for statistics source errors."""
    pass


class EnumerationError(StatsSourceError):
    """Raised when listing databases or collections fails."""
    pass


class QueryError(StatsSourceError):
    """Raised when a stats command fails or returns undecodable data."""
    pass
