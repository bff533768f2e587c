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
"""Caller-owned cache for source documents and processed results."""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

_LOGGER = logging.getLogger(__name__)

CACHE_VERSION = "v2"
DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_MAX_ENTRY_BYTES = 5 * 1024 * 1024

SNAPSHOT_CACHE_KEY = f"dztopo:snapshot:{CACHE_VERSION}"
ISIS_CACHE_KEY = f"dztopo:isis:{CACHE_VERSION}"
PROCESSED_CACHE_KEY = f"dztopo:processed:{CACHE_VERSION}"


@dataclass(frozen=True)
class _Entry:
    payload: str
    expires_at: float


class BlobCache:
    """In-memory JSON blob cache with per-entry expiry.

    Values are stored serialized, so callers always get an independent copy
    back from ``fetch``.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        max_entry_bytes: int = DEFAULT_MAX_ENTRY_BYTES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._default_ttl = default_ttl
        self._max_entry_bytes = max_entry_bytes
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def store(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """Store a JSON-serializable value; return False if it was not cached."""

        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as exc:
            _LOGGER.warning("Value for %s is not serializable - not cached: %s", key, exc)
            return False
        size = len(payload.encode("utf-8"))
        if size > self._max_entry_bytes:
            _LOGGER.warning(
                "Value for %s too large to cache (%.1fMB > %.1fMB limit)",
                key,
                size / (1024 * 1024),
                self._max_entry_bytes / (1024 * 1024),
            )
            return False
        expires_at = self._clock() + (self._default_ttl if ttl is None else ttl)
        with self._lock:
            self._entries[key] = _Entry(payload=payload, expires_at=expires_at)
        return True

    def fetch(self, key: str) -> Any | None:
        """Return a copy of the cached value, or None when absent or stale."""

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                _LOGGER.warning("Cache entry %s expired - invalidating", key)
                del self._entries[key]
                return None
        return json.loads(entry.payload)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.fetch(key) is not None


class TopologyCache:
    """Snapshot, ISIS and processed-result slots on top of a blob cache.

    Replacing or clearing either source invalidates the processed result.
    """

    def __init__(self, blob_cache: BlobCache | None = None) -> None:
        self.blobs = blob_cache or BlobCache()

    def cache_snapshot(self, snapshot: dict[str, Any]) -> bool:
        self.blobs.invalidate(PROCESSED_CACHE_KEY)
        return self.blobs.store(SNAPSHOT_CACHE_KEY, snapshot)

    def cached_snapshot(self) -> dict[str, Any] | None:
        return self.blobs.fetch(SNAPSHOT_CACHE_KEY)

    def clear_snapshot(self) -> None:
        self.blobs.invalidate(SNAPSHOT_CACHE_KEY)
        self.blobs.invalidate(PROCESSED_CACHE_KEY)

    def cache_isis(self, isis: dict[str, Any]) -> bool:
        self.blobs.invalidate(PROCESSED_CACHE_KEY)
        return self.blobs.store(ISIS_CACHE_KEY, isis)

    def cached_isis(self) -> dict[str, Any] | None:
        return self.blobs.fetch(ISIS_CACHE_KEY)

    def clear_isis(self) -> None:
        self.blobs.invalidate(ISIS_CACHE_KEY)
        self.blobs.invalidate(PROCESSED_CACHE_KEY)

    def cache_processed(self, fingerprint: str, processed: dict[str, Any]) -> bool:
        return self.blobs.store(
            PROCESSED_CACHE_KEY, {"fingerprint": fingerprint, "processed": processed}
        )

    def cached_processed(self, fingerprint: str) -> dict[str, Any] | None:
        """Return the processed result if it was computed for ``fingerprint``."""

        cached = self.blobs.fetch(PROCESSED_CACHE_KEY)
        if not cached or cached.get("fingerprint") != fingerprint:
            return None
        return cached.get("processed")

    def clear_all(self) -> None:
        self.blobs.clear()
