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
"""Advertised vs measured link reconciliation."""

from __future__ import annotations

from typing import Mapping

from topo_reconcile.drift import AbsoluteLatencyDrift, DriftStrategy, classify
from topo_reconcile.models import (
    UNKNOWN_VALUE,
    AdvertisedLink,
    LinkKey,
    MeasuredLink,
    ReconciledLink,
)


def reconcile_links(
    advertised: Mapping[LinkKey, AdvertisedLink],
    measured: Mapping[LinkKey, MeasuredLink],
    strategy: DriftStrategy | None = None,
) -> list[ReconciledLink]:
    """Outer-join advertised and measured links on their canonical key.

    Emits exactly one record per key present on either side, sorted by key.
    """

    strategy = strategy or AbsoluteLatencyDrift()
    reconciled: list[ReconciledLink] = []
    for key in sorted(advertised.keys() | measured.keys()):
        adv = advertised.get(key)
        meas = measured.get(key)
        status, drift = classify(adv, meas, strategy)
        reconciled.append(
            ReconciledLink(
                key=key,
                advertised=adv,
                measured=meas,
                drift=drift,
                status=status,
                location=_link_location(adv, meas),
            )
        )
    return reconciled


def _link_location(advertised: AdvertisedLink | None, measured: MeasuredLink | None) -> str:
    """Pick the location a link is attributed to; measurements win."""

    for link in (measured, advertised):
        if link is None:
            continue
        for location in (link.location_a, link.location_b):
            if location:
                return location
    return UNKNOWN_VALUE
