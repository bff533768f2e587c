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
"""Location rollups and summary counts."""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import Sequence

from topo_reconcile.models import (
    STATUS_DRIFT_HIGH,
    STATUS_HEALTHY,
    STATUS_MISSING_ISIS,
    STATUS_MISSING_TELEMETRY,
    LocationRollup,
    ReconciledLink,
    Summary,
)


def aggregate_locations(links: Sequence[ReconciledLink]) -> list[LocationRollup]:
    """Count link statuses per location."""

    grouped: dict[str, Counter[str]] = defaultdict(Counter)
    for link in links:
        grouped[link.location][link.status] += 1

    return [
        LocationRollup(
            location=location,
            healthy=counts[STATUS_HEALTHY],
            drift_high=counts[STATUS_DRIFT_HIGH],
            missing_isis=counts[STATUS_MISSING_ISIS],
            missing_telemetry=counts[STATUS_MISSING_TELEMETRY],
        )
        for location, counts in sorted(grouped.items())
    ]


def summarize(links: Sequence[ReconciledLink]) -> Summary:
    """Count link statuses across the whole topology."""

    counts = Counter(link.status for link in links)
    return Summary(
        total_links=len(links),
        healthy=counts[STATUS_HEALTHY],
        drift_high=counts[STATUS_DRIFT_HIGH],
        missing_isis=counts[STATUS_MISSING_ISIS],
        missing_telemetry=counts[STATUS_MISSING_TELEMETRY],
    )
