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
"""IS-IS link-state database adjacency extraction."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Mapping

from topo_reconcile.identifiers import IdentifierMap
from topo_reconcile.models import (
    AdvertisedLink,
    Diagnostics,
    LinkKey,
    MalformedDocumentError,
)
from topo_reconcile.normalize import lsp_pseudonode, normalize_link_key

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Adjacency:
    """Directional adjacency taken from a single LSP neighbor entry."""

    key: LinkKey
    metric: int
    level: int
    instance: str
    vrf: str
    source: str


def extract_advertised_links(
    isis: Any,
    identifier_map: IdentifierMap | None = None,
    diagnostics: Diagnostics | None = None,
) -> dict[LinkKey, AdvertisedLink]:
    """Extract point-to-point adjacencies from an IS-IS database document.

    Adjacencies advertised from both directions, or at more than one level,
    collapse into a single entry keyed by the canonical link key; the lowest
    metric is preferred and every source LSP reference is kept.

    Raises:
        MalformedDocumentError: if the document is not an object or has no
            ``vrfs`` mapping.
    """

    if not isinstance(isis, Mapping):
        raise MalformedDocumentError("ISIS document must be a JSON object")
    vrfs = isis.get("vrfs")
    if not isinstance(vrfs, Mapping):
        raise MalformedDocumentError("ISIS document is missing required field: vrfs")

    identifier_map = identifier_map or IdentifierMap()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    grouped: dict[LinkKey, list[_Adjacency]] = defaultdict(list)
    for vrf_name, vrf in vrfs.items():
        instances = vrf.get("isisInstances") if isinstance(vrf, Mapping) else None
        if not isinstance(instances, Mapping):
            _skip_section(diagnostics, f"vrf {vrf_name}: missing isisInstances")
            continue
        for instance_id, instance in instances.items():
            levels = instance.get("level") if isinstance(instance, Mapping) else None
            if not isinstance(levels, Mapping):
                _skip_section(diagnostics, f"vrf {vrf_name} instance {instance_id}: missing level")
                continue
            for level_id, level in levels.items():
                context = f"vrf {vrf_name} instance {instance_id} level {level_id}"
                level_num = _parse_level(level_id)
                if level_num is None:
                    _skip_section(diagnostics, f"{context}: invalid level number")
                    continue
                lsps = level.get("lsps") if isinstance(level, Mapping) else None
                if not isinstance(lsps, Mapping):
                    _skip_section(diagnostics, f"{context}: missing lsps")
                    continue
                for lsp_id, lsp in lsps.items():
                    for adjacency in _lsp_adjacencies(
                        str(lsp_id),
                        lsp,
                        vrf=str(vrf_name),
                        instance=str(instance_id),
                        level=level_num,
                        identifier_map=identifier_map,
                        diagnostics=diagnostics,
                    ):
                        grouped[adjacency.key].append(adjacency)

    advertised = {
        key: _merge_adjacencies(key, adjacencies, identifier_map)
        for key, adjacencies in grouped.items()
    }
    _LOGGER.debug("Extracted %s advertised links", len(advertised))
    return advertised


def _lsp_adjacencies(
    lsp_id: str,
    lsp: Any,
    vrf: str,
    instance: str,
    level: int,
    identifier_map: IdentifierMap,
    diagnostics: Diagnostics,
) -> list[_Adjacency]:
    """Build directional adjacencies for one LSP."""

    source = f"{vrf}/{instance}/L{level}/{lsp_id}"
    if not isinstance(lsp, Mapping):
        diagnostics.skipped_lsps += 1
        _record(diagnostics, f"{source}: LSP is not an object")
        return []

    pseudonode = lsp_pseudonode(lsp_id)
    if pseudonode not in (None, "00"):
        _LOGGER.debug("Ignoring pseudonode LSP %s", source)
        return []

    neighbors = lsp.get("neighbors")
    if neighbors is None:
        return []
    if not isinstance(neighbors, list):
        diagnostics.skipped_lsps += 1
        _record(diagnostics, f"{source}: neighbors is not a list")
        return []

    local_device = identifier_map.resolve_device(_lsp_hostname(lsp) or lsp_id)
    adjacencies: list[_Adjacency] = []
    for neighbor in neighbors:
        if not isinstance(neighbor, Mapping) or not neighbor.get("systemId"):
            diagnostics.skipped_neighbors += 1
            _record(diagnostics, f"{source}: neighbor without systemId")
            continue
        metric = _parse_metric(neighbor.get("metric"))
        if metric is None:
            diagnostics.skipped_neighbors += 1
            _record(diagnostics, f"{source}: neighbor {neighbor['systemId']} has invalid metric")
            continue
        addresses = neighbor.get("adjInterfaceAddresses")
        if addresses is not None and not isinstance(addresses, list):
            diagnostics.skipped_neighbors += 1
            _record(
                diagnostics,
                f"{source}: neighbor {neighbor['systemId']} adjInterfaceAddresses is not a list",
            )
            continue
        remote_device = identifier_map.resolve_device(str(neighbor["systemId"]))
        local = identifier_map.resolve_endpoint(local_device, _local_address(addresses))
        remote_address = neighbor.get("neighborAddr")
        remote = identifier_map.resolve_endpoint(
            remote_device, str(remote_address) if remote_address else None
        )
        adjacencies.append(
            _Adjacency(
                key=normalize_link_key(local, remote, vrf),
                metric=metric,
                level=level,
                instance=instance,
                vrf=vrf,
                source=source,
            )
        )
    return adjacencies


def _merge_adjacencies(
    key: LinkKey,
    adjacencies: list[_Adjacency],
    identifier_map: IdentifierMap,
) -> AdvertisedLink:
    """Merge directional adjacencies into one advertised link."""

    preferred = min(adjacencies, key=lambda adj: (adj.metric, adj.level, adj.instance, adj.source))
    metrics = tuple(sorted(adj.metric for adj in adjacencies))
    if len(set(metrics)) > 1:
        _LOGGER.debug("Conflicting metrics for %s: %s", key.label, metrics)
    return AdvertisedLink(
        key=key,
        metric=preferred.metric,
        metrics=metrics,
        level=preferred.level,
        instance=preferred.instance,
        vrf=preferred.vrf,
        sources=tuple(sorted({adj.source for adj in adjacencies})),
        location_a=identifier_map.location_for(key.endpoint_a.device),
        location_b=identifier_map.location_for(key.endpoint_b.device),
    )


def _lsp_hostname(lsp: Mapping[str, Any]) -> str | None:
    hostname = lsp.get("hostname")
    if isinstance(hostname, Mapping):
        name = hostname.get("name")
        return str(name) if name else None
    if isinstance(hostname, str) and hostname:
        return hostname
    return None


def _local_address(addresses: list[Any] | None) -> str | None:
    for entry in addresses or ():
        if isinstance(entry, Mapping) and entry.get("adjInterfaceAddress"):
            return str(entry["adjInterfaceAddress"])
    return None


def _parse_level(raw_level: Any) -> int | None:
    try:
        level = int(raw_level)
    except (TypeError, ValueError):
        return None
    return level if level in (1, 2) else None


def _parse_metric(raw_metric: Any) -> int | None:
    if isinstance(raw_metric, bool):
        return None
    if isinstance(raw_metric, int):
        return raw_metric if raw_metric >= 0 else None
    if isinstance(raw_metric, float) and raw_metric.is_integer():
        return int(raw_metric) if raw_metric >= 0 else None
    if isinstance(raw_metric, str) and raw_metric.strip().isdigit():
        return int(raw_metric.strip())
    return None


def _skip_section(diagnostics: Diagnostics, message: str) -> None:
    diagnostics.skipped_sections += 1
    _record(diagnostics, message)


def _record(diagnostics: Diagnostics, message: str) -> None:
    _LOGGER.warning("Skipping ISIS record: %s", message)
    diagnostics.messages.append(message)
