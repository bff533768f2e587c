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
"""Reconciliation configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from topo_reconcile.drift import (
    DEFAULT_DRIFT_THRESHOLD_MS,
    DEFAULT_DRIFT_THRESHOLD_PCT,
    DEFAULT_METRIC_UNIT_MS,
    AbsoluteLatencyDrift,
    DriftStrategy,
    RelativeLatencyDrift,
)
from topo_reconcile.telemetry import DEFAULT_VRF

DRIFT_MODES = ("absolute", "relative")

_OPTION_FIELDS = {
    "driftThresholdMs": "drift_threshold_ms",
    "driftMode": "drift_mode",
    "driftThresholdPct": "drift_threshold_pct",
    "metricUnitMs": "metric_unit_ms",
    "defaultVrf": "default_vrf",
    "parallelExtraction": "parallel_extraction",
}


@dataclass(frozen=True)
class ReconcileConfig:
    """Read-only settings shared by reconciliation runs.

    ``drift_threshold_ms`` applies in ``absolute`` mode and
    ``drift_threshold_pct`` in ``relative`` mode. ``metric_unit_ms`` converts
    an IS-IS metric into milliseconds.
    """

    drift_threshold_ms: float = DEFAULT_DRIFT_THRESHOLD_MS
    drift_mode: str = "absolute"
    drift_threshold_pct: float = DEFAULT_DRIFT_THRESHOLD_PCT
    metric_unit_ms: float = DEFAULT_METRIC_UNIT_MS
    default_vrf: str = DEFAULT_VRF
    parallel_extraction: bool = False

    def __post_init__(self) -> None:
        if self.drift_mode not in DRIFT_MODES:
            raise ValueError(
                f"drift_mode must be one of {', '.join(DRIFT_MODES)}: {self.drift_mode}"
            )
        if self.drift_threshold_ms < 0:
            raise ValueError("drift_threshold_ms must not be negative")
        if self.drift_threshold_pct < 0:
            raise ValueError("drift_threshold_pct must not be negative")
        if self.metric_unit_ms <= 0:
            raise ValueError("metric_unit_ms must be positive")
        if not self.default_vrf:
            raise ValueError("default_vrf must not be empty")

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> ReconcileConfig:
        """Build a config from caller options in camelCase or snake_case."""

        known = set(_OPTION_FIELDS.values())
        values: dict[str, Any] = {}
        for name, value in options.items():
            field_name = _OPTION_FIELDS.get(name, name)
            if field_name not in known:
                raise ValueError(f"unknown option: {name}")
            values[field_name] = _coerce(field_name, value)
        return cls(**values)

    def drift_strategy(self) -> DriftStrategy:
        """Build the drift strategy for the configured mode."""

        if self.drift_mode == "relative":
            return RelativeLatencyDrift(
                threshold=self.drift_threshold_pct,
                metric_unit_ms=self.metric_unit_ms,
            )
        return AbsoluteLatencyDrift(
            threshold=self.drift_threshold_ms,
            metric_unit_ms=self.metric_unit_ms,
        )


def _coerce(field_name: str, value: Any) -> Any:
    if field_name == "parallel_extraction":
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise ValueError(f"{field_name} must be a boolean: {value!r}")
    if field_name in ("drift_mode", "default_vrf"):
        return str(value)
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be a number: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be a number: {value!r}") from exc
