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
"""Tests for source documents and cached processing."""

import json
from pathlib import Path

import pytest

from topo_reconcile.cache import TopologyCache
from topo_reconcile.config import ReconcileConfig
from topo_reconcile.models import MalformedDocumentError
from topo_reconcile.service import (
    KIND_ISIS,
    KIND_SNAPSHOT,
    SourceDocument,
    load_source_document,
    minimal_isis_document,
    process_topology,
    source_document_from_envelope,
)

_SNAPSHOT = {
    "epoch": 12,
    "devices": {
        "pk-nyc": {"code": "nyc-dz01", "location": "nyc"},
        "pk-chi": {"code": "chi-dz01", "location": "chi"},
    },
    "links": [{"side_a": "pk-nyc", "side_z": "pk-chi", "latency_ms": 10.0}],
}


def test_minimal_isis_document_is_empty_database() -> None:
    document = minimal_isis_document()

    assert document["vrfs"]["default"]["isisInstances"]["1"]["level"]["2"]["lsps"] == {}


def test_source_document_from_envelope() -> None:
    document = source_document_from_envelope(
        {"data": _SNAPSHOT, "source": "s3", "epoch": 12, "filename": "snap.json"},
        KIND_SNAPSHOT,
    )

    assert document.source == "s3"
    assert document.epoch == 12
    assert document.filename == "snap.json"


@pytest.mark.parametrize(
    "envelope",
    [None, {"source": "upload"}, {"data": {}}, {"data": {}, "source": "ftp"}],
)
def test_source_document_from_envelope_rejects_invalid(envelope: object) -> None:
    with pytest.raises(MalformedDocumentError, match="Invalid ISIS"):
        source_document_from_envelope(envelope, KIND_ISIS)


def test_load_source_document(tmp_path: Path) -> None:
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(_SNAPSHOT), encoding="utf-8")

    document = load_source_document(path, KIND_SNAPSHOT)

    assert document.data == _SNAPSHOT
    assert document.source == "upload"
    assert document.epoch == 12
    assert document.filename == "snapshot.json"
    assert document.size == path.stat().st_size


def test_load_source_document_requires_json_suffix(tmp_path: Path) -> None:
    path = tmp_path / "isis.txt"
    path.write_text("{}", encoding="utf-8")

    with pytest.raises(MalformedDocumentError, match="must be a JSON file"):
        load_source_document(path, KIND_ISIS)


def test_load_source_document_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "isis.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(MalformedDocumentError, match="not valid JSON"):
        load_source_document(path, KIND_ISIS)


def test_load_source_document_enforces_size_limit(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "isis.json"
    path.write_text("{}", encoding="utf-8")
    monkeypatch.setattr("topo_reconcile.service.MAX_ISIS_BYTES", 1)

    with pytest.raises(MalformedDocumentError, match="too large"):
        load_source_document(path, KIND_ISIS)


def test_process_topology_reports_sources() -> None:
    snapshot = SourceDocument(data=_SNAPSHOT, source="s3", epoch=12)
    isis = SourceDocument(data=minimal_isis_document(), source="upload", filename="isis.json")

    processed = process_topology(snapshot, isis)

    assert processed.summary == {
        "total_links": 1,
        "healthy": 0,
        "drift_high": 0,
        "missing_isis": 1,
        "missing_telemetry": 0,
    }
    assert processed.sources["snapshot"]["epoch"] == 12
    assert processed.sources["isis"]["filename"] == "isis.json"
    assert processed.locations[0]["location"] == "chi"
    assert processed.processed_at.endswith("+00:00")
    assert not processed.cached


def test_process_topology_uses_cache() -> None:
    cache = TopologyCache()
    snapshot = SourceDocument(data=_SNAPSHOT, source="upload")
    isis = SourceDocument(data=minimal_isis_document(), source="upload")

    first = process_topology(snapshot, isis, cache=cache)
    second = process_topology(snapshot, isis, cache=cache)
    third = process_topology(snapshot, isis, ReconcileConfig(drift_threshold_ms=3.0), cache=cache)

    assert not first.cached
    assert second.cached
    assert second.to_dict() == first.to_dict()
    assert not third.cached


def test_process_topology_cache_hit_reports_current_sources() -> None:
    cache = TopologyCache()
    isis = SourceDocument(data=minimal_isis_document(), source="upload")
    first = process_topology(
        SourceDocument(data=_SNAPSHOT, source="s3", filename="a.json", epoch=12), isis, cache=cache
    )

    second = process_topology(
        SourceDocument(data=_SNAPSHOT, source="upload", filename="b.json", epoch=13),
        isis,
        cache=cache,
    )

    assert second.cached
    assert second.sources["snapshot"] == {
        "source": "upload",
        "filename": "b.json",
        "epoch": 13,
        "size": 0,
    }
    assert second.processed_at == first.processed_at
    assert second.topology == first.topology
