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
"""Output rendering for reconciliation results."""

from __future__ import annotations

import csv
import json
import math
from pathlib import Path
from typing import Any, Sequence

from topo_reconcile.models import (
    AdvertisedLink,
    Diagnostics,
    LocationRollup,
    MeasuredLink,
    ReconciledLink,
    ReconcileResult,
    Summary,
)


def link_to_dict(link: ReconciledLink) -> dict[str, Any]:
    """Serialize one reconciled link."""

    return {
        "key": link.key.label,
        "device_a": link.key.endpoint_a.device,
        "interface_a": link.key.endpoint_a.interface,
        "device_b": link.key.endpoint_b.device,
        "interface_b": link.key.endpoint_b.interface,
        "vrf": link.key.discriminator,
        "status": link.status,
        "drift": _json_float(link.drift),
        "location": link.location,
        "advertised": _advertised_to_dict(link.advertised),
        "measured": _measured_to_dict(link.measured),
    }


def rollup_to_dict(rollup: LocationRollup) -> dict[str, Any]:
    return {
        "location": rollup.location,
        "total_links": rollup.total,
        "healthy": rollup.healthy,
        "drift_high": rollup.drift_high,
        "missing_isis": rollup.missing_isis,
        "missing_telemetry": rollup.missing_telemetry,
    }


def summary_to_dict(summary: Summary) -> dict[str, int]:
    return {
        "total_links": summary.total_links,
        "healthy": summary.healthy,
        "drift_high": summary.drift_high,
        "missing_isis": summary.missing_isis,
        "missing_telemetry": summary.missing_telemetry,
    }


def diagnostics_to_dict(diagnostics: Diagnostics) -> dict[str, Any]:
    return {
        "degraded": diagnostics.degraded,
        "skipped_sections": diagnostics.skipped_sections,
        "skipped_lsps": diagnostics.skipped_lsps,
        "skipped_neighbors": diagnostics.skipped_neighbors,
        "skipped_links": diagnostics.skipped_links,
        "messages": list(diagnostics.messages),
    }


def result_to_dict(result: ReconcileResult) -> dict[str, Any]:
    """Serialize a result as ``{topology, locations, summary, diagnostics}``."""

    return {
        "topology": [link_to_dict(link) for link in result.topology],
        "locations": [rollup_to_dict(rollup) for rollup in result.locations],
        "summary": summary_to_dict(result.summary),
        "diagnostics": diagnostics_to_dict(result.diagnostics),
    }


def write_topology_json(path: str | Path, links: Sequence[ReconciledLink]) -> None:
    """Write reconciled topology JSON."""

    _write_json(path, [link_to_dict(link) for link in sorted(links, key=lambda item: item.key)])


def write_topology_csv(path: str | Path, links: Sequence[ReconciledLink]) -> None:
    """Write reconciled topology CSV."""

    with Path(path).open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(
            [
                "device_a",
                "interface_a",
                "device_b",
                "interface_b",
                "vrf",
                "status",
                "drift",
                "isis_metric",
                "latency_ms",
                "location",
            ]
        )
        for link in sorted(links, key=lambda item: item.key):
            writer.writerow(
                [
                    link.key.endpoint_a.device,
                    link.key.endpoint_a.interface,
                    link.key.endpoint_b.device,
                    link.key.endpoint_b.interface,
                    link.key.discriminator,
                    link.status,
                    "" if link.drift is None else f"{link.drift:.3f}",
                    "" if link.advertised is None else link.advertised.metric,
                    "" if link.measured is None else f"{link.measured.latency_ms:.3f}",
                    link.location,
                ]
            )


def write_locations_json(path: str | Path, rollups: Sequence[LocationRollup]) -> None:
    """Write location rollup JSON."""

    _write_json(path, [rollup_to_dict(rollup) for rollup in rollups])


def write_locations_csv(path: str | Path, rollups: Sequence[LocationRollup]) -> None:
    """Write location rollup CSV."""

    with Path(path).open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(
            [
                "location",
                "total_links",
                "healthy",
                "drift_high",
                "missing_isis",
                "missing_telemetry",
            ]
        )
        for rollup in sorted(rollups, key=lambda item: item.location):
            writer.writerow(
                [
                    rollup.location,
                    rollup.total,
                    rollup.healthy,
                    rollup.drift_high,
                    rollup.missing_isis,
                    rollup.missing_telemetry,
                ]
            )


def write_summary(path: str | Path, summary: Summary, diagnostics: Diagnostics) -> None:
    """Write summary report."""

    with Path(path).open("w", encoding="utf-8") as handle:
        for name, value in summary_to_dict(summary).items():
            handle.write(f"{name}: {value}\n")
        handle.write(f"degraded: {'yes' if diagnostics.degraded else 'no'}\n")
        handle.write(f"skipped_records: {_skipped_total(diagnostics)}\n")


def write_summary_json(path: str | Path, summary: Summary, diagnostics: Diagnostics) -> None:
    """Write summary report JSON."""

    data: dict[str, Any] = dict(summary_to_dict(summary))
    data["diagnostics"] = diagnostics_to_dict(diagnostics)
    _write_json(path, data)


def _advertised_to_dict(link: AdvertisedLink | None) -> dict[str, Any] | None:
    if link is None:
        return None
    return {
        "metric": link.metric,
        "metrics": list(link.metrics),
        "level": link.level,
        "instance": link.instance,
        "vrf": link.vrf,
        "sources": list(link.sources),
    }


def _measured_to_dict(link: MeasuredLink | None) -> dict[str, Any] | None:
    if link is None:
        return None
    return {
        "latency_ms": link.latency_ms,
        "loss_pct": link.loss_pct,
        "utilization_pct": link.utilization_pct,
        "epoch": link.epoch,
        "code": link.code,
    }


def _json_float(value: float | None) -> float | str | None:
    if value is None:
        return None
    if math.isinf(value):
        return "inf"
    return round(value, 6)


def _skipped_total(diagnostics: Diagnostics) -> int:
    return (
        diagnostics.skipped_sections
        + diagnostics.skipped_lsps
        + diagnostics.skipped_neighbors
        + diagnostics.skipped_links
    )


def _write_json(path: str | Path, data: Any) -> None:
    with Path(path).open("w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=2, ensure_ascii=False)
        handle.write("\n")
