# SPDX-License-Identifier: MIT
# Copyright (c) 2025 mongo-stats-exporter contributors

"""Shard descriptor normalization for router (mongos) replies."""

from typing import Mapping

from .models import DatabaseStats


def shard_id(descriptor: str) -> str:
    """Extract the shard identity from a shard descriptor.

    Descriptors look like ``shard01/host-a:27017,host-b:27017``; only the
    part before the first ``/`` identifies the shard.

    Args:
        descriptor: Raw shard descriptor from a dbStats ``raw`` mapping

    Returns:
        Shard identity (the whole descriptor when it has no ``/``)
    """
    return descriptor.split("/", 1)[0]


def normalize_shards(shards: Mapping[str, DatabaseStats]) -> list[tuple[str, DatabaseStats]]:
    """Convert a per-shard stats mapping into (shard identity, stats) pairs.

    One pair is returned per descriptor. Descriptors that normalize to the
    same identity are not merged; both pairs are returned.
    """
    return [(shard_id(descriptor), stats) for descriptor, stats in shards.items()]
