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
"""Source document handling and cached topology processing."""

from __future__ import annotations

import hashlib
import json
import logging
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from topo_reconcile.cache import TopologyCache
from topo_reconcile.config import ReconcileConfig
from topo_reconcile.identifiers import IdentifierMap
from topo_reconcile.models import MalformedDocumentError
from topo_reconcile.output import result_to_dict
from topo_reconcile.pipeline import reconcile_topology

_LOGGER = logging.getLogger(__name__)

SOURCE_S3 = "s3"
SOURCE_UPLOAD = "upload"

KIND_SNAPSHOT = "snapshot"
KIND_ISIS = "ISIS"

MAX_SNAPSHOT_BYTES = 100 * 1024 * 1024
MAX_ISIS_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class SourceDocument:
    """A parsed source document plus where it came from."""

    data: Any
    source: str
    filename: str = ""
    epoch: int | None = None
    size: int = 0
    timestamp: float = 0.0

    def metadata(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "filename": self.filename,
            "epoch": self.epoch,
            "size": self.size,
        }


@dataclass(frozen=True)
class ProcessedTopology:
    """Serialized reconciliation result with processing metadata."""

    topology: list[dict[str, Any]]
    locations: list[dict[str, Any]]
    summary: dict[str, int]
    diagnostics: dict[str, Any]
    processed_at: str
    sources: dict[str, dict[str, Any]]
    cached: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("cached")
        return data


def minimal_isis_document(
    vrf: str = "default", instance: str = "1", level: str = "2"
) -> dict[str, Any]:
    """Return an empty ISIS database, used when no ISIS data is available."""

    return {"vrfs": {vrf: {"isisInstances": {instance: {"level": {level: {"lsps": {}}}}}}}}


def source_document_from_envelope(envelope: Any, kind: str) -> SourceDocument:
    """Validate a ``{data, source, ...}`` envelope and wrap it."""

    if not isinstance(envelope, Mapping):
        raise MalformedDocumentError(f"Invalid {kind} data structure")
    if envelope.get("data") is None or not envelope.get("source"):
        raise MalformedDocumentError(f"Invalid {kind} data structure")
    source = str(envelope["source"])
    if source not in (SOURCE_S3, SOURCE_UPLOAD):
        raise MalformedDocumentError(f"Invalid {kind} source: {source}")
    epoch = envelope.get("epoch")
    return SourceDocument(
        data=envelope["data"],
        source=source,
        filename=str(envelope.get("filename") or ""),
        epoch=int(epoch) if isinstance(epoch, int) and not isinstance(epoch, bool) else None,
        size=int(envelope.get("size") or 0),
        timestamp=float(envelope.get("timestamp") or 0.0),
    )


def load_source_document(path: str | Path, kind: str) -> SourceDocument:
    """Load a snapshot or ISIS JSON file as an uploaded source document."""

    file_path = Path(path)
    if file_path.suffix.lower() != ".json":
        raise MalformedDocumentError(f"{kind} file must be a JSON file: {file_path.name}")
    max_bytes = MAX_SNAPSHOT_BYTES if kind == KIND_SNAPSHOT else MAX_ISIS_BYTES
    size = file_path.stat().st_size
    if size > max_bytes:
        raise MalformedDocumentError(
            f"{kind} file too large. Max size: {max_bytes // (1024 * 1024)}MB"
        )

    _LOGGER.info("Loading %s from %s (%s bytes)", kind, file_path, size)
    try:
        with file_path.open(encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise MalformedDocumentError(f"{kind} file is not valid JSON: {exc}") from exc

    epoch = data.get("epoch") if isinstance(data, Mapping) else None
    return SourceDocument(
        data=data,
        source=SOURCE_UPLOAD,
        filename=file_path.name,
        epoch=epoch if isinstance(epoch, int) and not isinstance(epoch, bool) else None,
        size=size,
        timestamp=time.time(),
    )


def process_topology(
    snapshot: SourceDocument,
    isis: SourceDocument,
    config: ReconcileConfig | None = None,
    identifier_map: IdentifierMap | None = None,
    cache: TopologyCache | None = None,
) -> ProcessedTopology:
    """Reconcile two source documents, reusing a cached result when possible."""

    config = config or ReconcileConfig()
    start = time.monotonic()
    sources = {"snapshot": snapshot.metadata(), "isis": isis.metadata()}
    _LOGGER.info(
        "Processing topology: snapshot source=%s epoch=%s, isis source=%s file=%s",
        snapshot.source,
        snapshot.epoch,
        isis.source,
        isis.filename,
    )

    fingerprint = ""
    if cache is not None:
        fingerprint = _fingerprint(snapshot.data, isis.data, config, identifier_map)
        cached = cache.cached_processed(fingerprint)
        if cached is not None:
            _LOGGER.info("Serving processed topology from cache")
            # processed_at stays the time of the run that did the work
            cached["sources"] = sources
            return ProcessedTopology(**cached, cached=True)

    result = reconcile_topology(snapshot.data, isis.data, config, identifier_map)
    payload = result_to_dict(result)
    processed = ProcessedTopology(
        topology=payload["topology"],
        locations=payload["locations"],
        summary=payload["summary"],
        diagnostics=payload["diagnostics"],
        processed_at=datetime.now(timezone.utc).isoformat(),
        sources=sources,
    )
    if cache is not None:
        cache.cache_processed(fingerprint, processed.to_dict())

    _LOGGER.info(
        "Topology processing complete: total_links=%s processing_time_ms=%.1f",
        processed.summary["total_links"],
        (time.monotonic() - start) * 1000,
    )
    return processed


def _fingerprint(
    snapshot: Any,
    isis: Any,
    config: ReconcileConfig,
    identifier_map: IdentifierMap | None,
) -> str:
    digest = hashlib.sha256()
    for part in (snapshot, isis, asdict(config)):
        digest.update(json.dumps(part, sort_keys=True, default=str).encode("utf-8"))
    if identifier_map is not None:
        digest.update(repr(sorted(identifier_map.devices.items())).encode("utf-8"))
        digest.update(repr(sorted(identifier_map.interfaces.items())).encode("utf-8"))
        digest.update(repr(sorted(identifier_map.locations.items())).encode("utf-8"))
    return digest.hexdigest()
