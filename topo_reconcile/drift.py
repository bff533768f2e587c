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
"""Drift measurement strategies and link health classification."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

from topo_reconcile.models import (
    STATUS_DRIFT_HIGH,
    STATUS_HEALTHY,
    STATUS_MISSING_ISIS,
    STATUS_MISSING_TELEMETRY,
    AdvertisedLink,
    MeasuredLink,
)

DEFAULT_DRIFT_THRESHOLD_MS = 1.0
DEFAULT_DRIFT_THRESHOLD_PCT = 20.0
# IS-IS metrics are provisioned from link delay in microseconds.
DEFAULT_METRIC_UNIT_MS = 0.001


class DriftStrategy(Protocol):
    """Compares an advertised link against its measurement."""

    name: str
    threshold: float

    def measure(self, advertised: AdvertisedLink, measured: MeasuredLink) -> float:
        ...


@dataclass(frozen=True)
class AbsoluteLatencyDrift:
    """Absolute difference between measured and advertised latency, in ms."""

    threshold: float = DEFAULT_DRIFT_THRESHOLD_MS
    metric_unit_ms: float = DEFAULT_METRIC_UNIT_MS
    name: str = "absolute"

    def measure(self, advertised: AdvertisedLink, measured: MeasuredLink) -> float:
        return abs(measured.latency_ms - advertised.metric * self.metric_unit_ms)


@dataclass(frozen=True)
class RelativeLatencyDrift:
    """Difference between measured and advertised latency as a percentage."""

    threshold: float = DEFAULT_DRIFT_THRESHOLD_PCT
    metric_unit_ms: float = DEFAULT_METRIC_UNIT_MS
    name: str = "relative"

    def measure(self, advertised: AdvertisedLink, measured: MeasuredLink) -> float:
        advertised_ms = advertised.metric * self.metric_unit_ms
        if advertised_ms == 0:
            return 0.0 if measured.latency_ms == 0 else math.inf
        return abs(measured.latency_ms - advertised_ms) / advertised_ms * 100.0


def classify(
    advertised: AdvertisedLink | None,
    measured: MeasuredLink | None,
    strategy: DriftStrategy,
) -> tuple[str, float | None]:
    """Return the health status and drift for one link.

    Raises:
        ValueError: if neither side is present.
    """

    if advertised is not None and measured is not None:
        drift = strategy.measure(advertised, measured)
        if drift <= strategy.threshold:
            return STATUS_HEALTHY, drift
        return STATUS_DRIFT_HIGH, drift
    if measured is not None:
        return STATUS_MISSING_ISIS, None
    if advertised is not None:
        return STATUS_MISSING_TELEMETRY, None
    raise ValueError("cannot classify a link with neither advertisement nor measurement")
