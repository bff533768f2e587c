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
"""Normalization utilities and link key construction."""

from __future__ import annotations

import re

from topo_reconcile.models import UNKNOWN_VALUE, Endpoint, LinkKey

_PREFIX_MAP: tuple[tuple[str, str], ...] = (
    (r"^ethernet", "Eth"),
    (r"^eth", "Eth"),
    (r"^gigabitethernet", "Eth"),
    (r"^gigabit", "Eth"),
    (r"^gi", "Eth"),
    (r"^tengigabitethernet", "Eth"),
    (r"^tengigabit", "Eth"),
    (r"^te", "Eth"),
    (r"^port-channel", "Po"),
    (r"^po", "Po"),
)

# 0000.0000.0001.00-00 -> system id, pseudonode byte, fragment
_LSP_SUFFIX_RE = re.compile(
    r"^(?P<system>.+)\.(?P<pseudo>[0-9a-f]{2})(?:-(?P<frag>[0-9a-f]{2}))?$"
)
_SYSTEM_ID_RE = re.compile(r"^[0-9a-f]{4}\.[0-9a-f]{4}\.[0-9a-f]{4}$")


def normalize_interface_name(raw_name: str) -> str:
    """Normalize interface names to a canonical form."""

    if not raw_name:
        return UNKNOWN_VALUE

    cleaned = re.sub(r"\s+", "", raw_name.strip())
    if not cleaned:
        return UNKNOWN_VALUE

    normalized = cleaned.replace("-", "/")
    lowered = normalized.lower()
    for pattern, prefix in _PREFIX_MAP:
        match = re.match(pattern, lowered)
        if match:
            suffix = normalized[match.end() :]
            return f"{prefix}{suffix}"

    return normalized


def normalize_device_name(raw_name: str) -> str:
    """Normalize device hostnames for case-insensitive matching."""

    if not raw_name:
        return UNKNOWN_VALUE
    cleaned = raw_name.strip().lower()
    return cleaned or UNKNOWN_VALUE


def normalize_system_id(raw_id: str) -> str:
    """Strip pseudonode and fragment suffixes from an IS-IS identifier."""

    cleaned = normalize_device_name(raw_id)
    if cleaned == UNKNOWN_VALUE:
        return cleaned
    return _split_lsp_id(cleaned)[0]


def lsp_pseudonode(lsp_id: str) -> str | None:
    """Return the pseudonode byte of an LSP identifier, if present."""

    return _split_lsp_id(lsp_id.strip().lower())[1]


def _split_lsp_id(cleaned: str) -> tuple[str, str | None]:
    """Split ``cleaned`` into system part and pseudonode byte.

    A trailing ``.xx`` is only a pseudonode byte when a fragment follows it,
    when the rest is a dotted system id, or when it is ``00``; otherwise it
    belongs to the hostname (``r1.ab``).
    """

    match = _LSP_SUFFIX_RE.match(cleaned)
    if not match:
        return cleaned, None
    system = match.group("system")
    pseudo = match.group("pseudo")
    if match.group("frag") or _SYSTEM_ID_RE.match(system) or pseudo == "00":
        return system, pseudo
    return cleaned, None


def normalize_link_key(
    endpoint_a: Endpoint,
    endpoint_b: Endpoint,
    discriminator: str = "",
) -> LinkKey:
    """Build a canonical, direction-independent link key."""

    left = _clean_endpoint(endpoint_a)
    right = _clean_endpoint(endpoint_b)
    if right < left:
        left, right = right, left
    return LinkKey(endpoint_a=left, endpoint_b=right, discriminator=(discriminator or "").strip())


def _clean_endpoint(endpoint: Endpoint) -> Endpoint:
    device = (endpoint.device or "").strip() or UNKNOWN_VALUE
    interface = (endpoint.interface or "").strip() or UNKNOWN_VALUE
    return Endpoint(device=device, interface=interface)
