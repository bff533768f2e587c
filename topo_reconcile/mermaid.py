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
"""Mermaid diagram generation for reconciled topology."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from topo_reconcile.models import (
    STATUS_DRIFT_HIGH,
    STATUS_HEALTHY,
    STATUS_MISSING_ISIS,
    STATUS_MISSING_TELEMETRY,
    ReconciledLink,
)

_LOGGER = logging.getLogger(__name__)

_STATUS_COLORS = {
    STATUS_HEALTHY: "#2e7d32",
    STATUS_DRIFT_HIGH: "#f9a825",
    STATUS_MISSING_ISIS: "#c62828",
    STATUS_MISSING_TELEMETRY: "#6a1b9a",
}


def generate_mermaid_diagram(links: Sequence[ReconciledLink], max_nodes: int = 50) -> str:
    """Generate a Mermaid graph of reconciled links.

    Args:
        links: Reconciled links to visualize
        max_nodes: Maximum number of devices to include (default: 50)

    Returns:
        Mermaid diagram as a string
    """

    devices = set()
    for link in links:
        devices.add(link.key.endpoint_a.device)
        devices.add(link.key.endpoint_b.device)

    if len(devices) > max_nodes:
        _LOGGER.warning(
            "Too many devices (%d) for Mermaid diagram (max: %d). "
            "Truncating to first %d devices alphabetically. "
            "Consider using --filter-location or --filter-status.",
            len(devices),
            max_nodes,
            max_nodes,
        )
        devices = set(sorted(devices)[:max_nodes])

    lines = ["graph LR"]
    styles: list[str] = []
    dropped = 0
    edge_index = 0
    for link in links:
        device_a = link.key.endpoint_a.device
        device_b = link.key.endpoint_b.device
        if device_a not in devices or device_b not in devices:
            dropped += 1
            continue

        ports = f"{link.key.endpoint_a.interface} -- {link.key.endpoint_b.interface}"
        label = f"{ports}<br/>{link.status}"
        lines.append(
            f'    {_sanitize_id(device_a)}["{device_a}"] ---|{label}| '
            f'{_sanitize_id(device_b)}["{device_b}"]'
        )
        styles.append(f"    linkStyle {edge_index} stroke:{_STATUS_COLORS[link.status]}")
        edge_index += 1

    if dropped:
        _LOGGER.warning("Mermaid diagram omits %d links outside the device limit", dropped)

    if styles:
        lines.append("")
        lines.append("    %% Link health")
        lines.extend(styles)

    return "\n".join(lines)


def _sanitize_id(device_name: str) -> str:
    """Sanitize device name for use as Mermaid node ID."""
    return device_name.replace("-", "_").replace(".", "_").replace("/", "_").replace(":", "_")


def write_mermaid_diagram(
    path: str | Path,
    links: Sequence[ReconciledLink],
    max_nodes: int = 50,
) -> None:
    """Write Mermaid diagram to a file."""

    diagram = generate_mermaid_diagram(links, max_nodes)

    with Path(path).open("w", encoding="utf-8") as handle:
        handle.write(diagram)
        handle.write("\n")

    _LOGGER.info("Mermaid diagram written to %s", path)
