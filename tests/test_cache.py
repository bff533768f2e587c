# Copyright 2025 topo-reconcile contributors
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.
"""Tests for the caller-owned cache."""

from topo_reconcile.cache import BlobCache, TopologyCache


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_store_fetch_returns_copy() -> None:
    cache = BlobCache()
    value = {"links": [1, 2]}

    assert cache.store("snapshot", value)
    fetched = cache.fetch("snapshot")
    fetched["links"].append(3)

    assert cache.fetch("snapshot") == {"links": [1, 2]}
    assert "snapshot" in cache


def test_fetch_missing_returns_none() -> None:
    assert BlobCache().fetch("missing") is None


def test_entries_expire() -> None:
    clock = _Clock()
    cache = BlobCache(default_ttl=60, clock=clock)
    cache.store("default", "a")
    cache.store("short", "b", ttl=5)

    clock.now += 10

    assert cache.fetch("short") is None
    assert cache.fetch("default") == "a"
    clock.now += 60
    assert cache.fetch("default") is None


def test_store_rejects_large_and_unserializable_values() -> None:
    cache = BlobCache(max_entry_bytes=16)

    assert not cache.store("big", "x" * 64)
    assert not cache.store("set", {1, 2})
    assert cache.fetch("big") is None


def test_invalidate_and_clear() -> None:
    cache = BlobCache()
    cache.store("a", 1)
    cache.store("b", 2)

    cache.invalidate("a")
    assert cache.fetch("a") is None
    assert cache.fetch("b") == 2

    cache.clear()
    assert cache.fetch("b") is None


def test_topology_cache_invalidates_processed_on_source_change() -> None:
    cache = TopologyCache()
    cache.cache_snapshot({"links": []})
    cache.cache_isis({"vrfs": {}})
    cache.cache_processed("digest-1", {"summary": {"total_links": 0}})

    assert cache.cached_processed("digest-1") == {"summary": {"total_links": 0}}
    assert cache.cached_processed("digest-2") is None

    cache.cache_isis({"vrfs": {"default": {}}})
    assert cache.cached_processed("digest-1") is None
    assert cache.cached_isis() == {"vrfs": {"default": {}}}

    cache.cache_processed("digest-1", {"summary": {}})
    cache.clear_snapshot()
    assert cache.cached_snapshot() is None
    assert cache.cached_processed("digest-1") is None
