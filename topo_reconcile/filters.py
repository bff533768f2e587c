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
"""Filtering utilities for reconciled links."""

from __future__ import annotations

import re
from typing import Sequence

from topo_reconcile.models import ReconciledLink


def filter_topology(
    links: Sequence[ReconciledLink],
    device_filter: Sequence[str] | None = None,
    device_regex: str | None = None,
    status_filter: Sequence[str] | None = None,
    location_filter: Sequence[str] | None = None,
) -> list[ReconciledLink]:
    """Filter reconciled links by device, status and/or location.

    Args:
        links: Reconciled links to filter
        device_filter: Exact device names; a link matches if either end is listed
        device_regex: Regular expression matched against either device name
        status_filter: Status values to include (e.g., ["drift_high", "missing_isis"])
        location_filter: Locations to include

    Returns:
        Filtered list of links
    """

    if not device_filter and not device_regex and not status_filter and not location_filter:
        return list(links)

    filtered: list[ReconciledLink] = []
    pattern = re.compile(device_regex) if device_regex else None

    for link in links:
        if status_filter and link.status not in status_filter:
            continue
        if location_filter and link.location not in location_filter:
            continue

        if device_filter or pattern:
            devices = (link.key.endpoint_a.device, link.key.endpoint_b.device)
            device_match = bool(device_filter) and any(
                device in device_filter for device in devices
            )
            if pattern and not device_match:
                device_match = any(pattern.search(device) for device in devices)
            if not device_match:
                continue

        filtered.append(link)

    return filtered
