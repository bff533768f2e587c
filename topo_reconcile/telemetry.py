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
"""Telemetry snapshot link extraction."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from topo_reconcile.identifiers import IdentifierMap, identifier_map_from_snapshot
from topo_reconcile.models import (
    Diagnostics,
    Endpoint,
    LinkKey,
    MalformedDocumentError,
    MeasuredLink,
)
from topo_reconcile.normalize import normalize_interface_name, normalize_link_key

_LOGGER = logging.getLogger(__name__)

DEFAULT_VRF = "default"


def extract_measured_links(
    snapshot: Any,
    identifier_map: IdentifierMap | None = None,
    diagnostics: Diagnostics | None = None,
    default_vrf: str = DEFAULT_VRF,
) -> dict[LinkKey, MeasuredLink]:
    """Extract measured links from a telemetry snapshot.

    Every distinct interface pairing yields its own key, so parallel links
    between the same two devices stay separate.
    """

    if not isinstance(snapshot, Mapping):
        raise MalformedDocumentError("snapshot document must be a JSON object")
    links = snapshot.get("links")
    if isinstance(links, Mapping):
        entries = [(str(link_id), record) for link_id, record in links.items()]
    elif isinstance(links, list):
        entries = [(str(index), record) for index, record in enumerate(links)]
    else:
        raise MalformedDocumentError("snapshot document is missing required field: links")

    if identifier_map is None:
        identifier_map = identifier_map_from_snapshot(snapshot)
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    snapshot_epoch = _parse_epoch(snapshot.get("epoch"))

    measured: dict[LinkKey, MeasuredLink] = {}
    for link_id, record in entries:
        link = _build_link(
            link_id, record, identifier_map, diagnostics, default_vrf, snapshot_epoch
        )
        if link is None:
            continue
        if link.key in measured:
            _skip(diagnostics, f"link {link_id}: duplicate of {link.key.label}")
            continue
        measured[link.key] = link

    _LOGGER.debug("Extracted %s measured links", len(measured))
    return measured


def _build_link(
    link_id: str,
    record: Any,
    identifier_map: IdentifierMap,
    diagnostics: Diagnostics,
    default_vrf: str,
    snapshot_epoch: int | None,
) -> MeasuredLink | None:
    """Convert one snapshot link record, or return None when it is unusable."""

    if not isinstance(record, Mapping):
        _skip(diagnostics, f"link {link_id}: not an object")
        return None
    side_a = record.get("side_a")
    side_z = record.get("side_z")
    if not side_a or not side_z:
        _skip(diagnostics, f"link {link_id}: missing side_a/side_z device")
        return None
    latency_ms = _parse_latency(record)
    if latency_ms is None:
        _skip(diagnostics, f"link {link_id}: missing latency")
        return None

    device_a = identifier_map.resolve_device(str(side_a))
    device_z = identifier_map.resolve_device(str(side_z))
    endpoint_a = Endpoint(device_a, normalize_interface_name(str(record.get("side_a_iface") or "")))
    endpoint_z = Endpoint(device_z, normalize_interface_name(str(record.get("side_z_iface") or "")))
    key = normalize_link_key(endpoint_a, endpoint_z, str(record.get("vrf") or default_vrf))
    link_epoch = _parse_epoch(record.get("epoch"))
    return MeasuredLink(
        key=key,
        latency_ms=latency_ms,
        loss_pct=_parse_float(record.get("loss_pct")),
        utilization_pct=_parse_float(record.get("utilization_pct")),
        location_a=identifier_map.location_for(key.endpoint_a.device),
        location_b=identifier_map.location_for(key.endpoint_b.device),
        epoch=snapshot_epoch if link_epoch is None else link_epoch,
        code=str(record["code"]) if record.get("code") else None,
    )


def _parse_latency(record: Mapping[str, Any]) -> float | None:
    latency_ms = _parse_float(record.get("latency_ms"))
    if latency_ms is not None:
        return latency_ms if latency_ms >= 0 else None
    latency_us = _parse_float(record.get("latency_us"))
    if latency_us is not None and latency_us >= 0:
        return latency_us / 1000.0
    return None


def _parse_float(raw_value: Any) -> float | None:
    if raw_value is None or isinstance(raw_value, bool):
        return None
    try:
        value = float(raw_value)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _parse_epoch(raw_epoch: Any) -> int | None:
    if raw_epoch is None or isinstance(raw_epoch, bool):
        return None
    try:
        return int(raw_epoch)
    except (TypeError, ValueError, OverflowError):
        return None


def _skip(diagnostics: Diagnostics, message: str) -> None:
    _LOGGER.warning("Skipping snapshot record: %s", message)
    diagnostics.skipped_links += 1
    diagnostics.messages.append(message)
