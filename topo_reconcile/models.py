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
"""Data models for topo-reconcile."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

UNKNOWN_VALUE = "unknown"

STATUS_HEALTHY = "healthy"
STATUS_DRIFT_HIGH = "drift_high"
STATUS_MISSING_ISIS = "missing_isis"
STATUS_MISSING_TELEMETRY = "missing_telemetry"

STATUSES: tuple[str, ...] = (
    STATUS_HEALTHY,
    STATUS_DRIFT_HIGH,
    STATUS_MISSING_ISIS,
    STATUS_MISSING_TELEMETRY,
)


class MalformedDocumentError(ValueError):
    """Raised when a source document cannot be interpreted as a whole."""


class IncompleteJoinError(RuntimeError):
    """Raised when one extraction task failed and the join was not performed."""


@dataclass(frozen=True, order=True)
class Endpoint:
    """One side of a link: device plus interface."""

    device: str
    interface: str

    @property
    def label(self) -> str:
        return f"{self.device}:{self.interface}"


@dataclass(frozen=True, order=True)
class LinkKey:
    """Direction-independent link identity.

    Always built through ``normalize_link_key`` so that ``endpoint_a`` sorts
    before ``endpoint_b``.
    """

    endpoint_a: Endpoint
    endpoint_b: Endpoint
    discriminator: str = ""

    @property
    def label(self) -> str:
        base = f"{self.endpoint_a.label}|{self.endpoint_b.label}"
        if self.discriminator:
            return f"{base}@{self.discriminator}"
        return base


@dataclass(frozen=True)
class AdvertisedLink:
    """Adjacency advertised in the IS-IS link-state database."""

    key: LinkKey
    metric: int
    metrics: tuple[int, ...]
    level: int
    instance: str
    vrf: str
    sources: tuple[str, ...]
    location_a: str | None = None
    location_b: str | None = None


@dataclass(frozen=True)
class MeasuredLink:
    """Link measured in the data-plane telemetry snapshot."""

    key: LinkKey
    latency_ms: float
    loss_pct: float | None = None
    utilization_pct: float | None = None
    location_a: str | None = None
    location_b: str | None = None
    epoch: int | None = None
    code: str | None = None


@dataclass(frozen=True)
class ReconciledLink:
    """One link after the outer join, with its health status."""

    key: LinkKey
    advertised: AdvertisedLink | None
    measured: MeasuredLink | None
    drift: float | None
    status: str
    location: str


@dataclass(frozen=True)
class LocationRollup:
    """Per-location status counts."""

    location: str
    healthy: int = 0
    drift_high: int = 0
    missing_isis: int = 0
    missing_telemetry: int = 0

    @property
    def total(self) -> int:
        return self.healthy + self.drift_high + self.missing_isis + self.missing_telemetry


@dataclass(frozen=True)
class Summary:
    """Global status counts."""

    total_links: int = 0
    healthy: int = 0
    drift_high: int = 0
    missing_isis: int = 0
    missing_telemetry: int = 0


@dataclass
class Diagnostics:
    """Records skipped by the extractors during a single run."""

    skipped_sections: int = 0
    skipped_lsps: int = 0
    skipped_neighbors: int = 0
    skipped_links: int = 0
    messages: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(
            self.skipped_sections
            or self.skipped_lsps
            or self.skipped_neighbors
            or self.skipped_links
        )

    def merge(self, other: Diagnostics) -> Diagnostics:
        """Combine two diagnostics into a new one."""

        return Diagnostics(
            skipped_sections=self.skipped_sections + other.skipped_sections,
            skipped_lsps=self.skipped_lsps + other.skipped_lsps,
            skipped_neighbors=self.skipped_neighbors + other.skipped_neighbors,
            skipped_links=self.skipped_links + other.skipped_links,
            messages=[*self.messages, *other.messages],
        )


@dataclass(frozen=True)
class ReconcileResult:
    """Health-annotated topology produced by one reconciliation run."""

    topology: Sequence[ReconciledLink]
    locations: Sequence[LocationRollup]
    summary: Summary
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
