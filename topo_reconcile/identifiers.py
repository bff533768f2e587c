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
"""Identifier mapping between IS-IS and telemetry namespaces."""

from __future__ import annotations

import csv
import ipaddress
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

from topo_reconcile.models import UNKNOWN_VALUE, Endpoint
from topo_reconcile.normalize import (
    normalize_device_name,
    normalize_interface_name,
    normalize_system_id,
)

_MAP_REQUIRED_COLUMNS = ("identifier", "device")


@dataclass(frozen=True)
class IdentifierMap:
    """Lookup tables resolving source identifiers to canonical endpoints.

    ``devices`` maps normalized aliases (hostnames, system IDs, record keys) to
    canonical device names, ``interfaces`` maps interface addresses to
    endpoints, and ``locations`` maps canonical device names to locations.
    """

    devices: Mapping[str, str] = field(default_factory=dict)
    interfaces: Mapping[str, Endpoint] = field(default_factory=dict)
    locations: Mapping[str, str] = field(default_factory=dict)

    def resolve_device(self, token: str) -> str:
        """Resolve any known alias to its canonical device name."""

        name = normalize_device_name(token)
        if name in self.devices:
            return self.devices[name]
        system = normalize_system_id(name)
        return self.devices.get(system, system)

    def resolve_endpoint(self, device: str, address: str | None) -> Endpoint:
        """Resolve an interface address on ``device`` to an endpoint."""

        if not address:
            return Endpoint(device=device, interface=UNKNOWN_VALUE)
        normalized = normalize_address(address)
        endpoint = self.interfaces.get(normalized)
        if endpoint is not None and endpoint.device == device:
            return endpoint
        return Endpoint(device=device, interface=normalized)

    def location_for(self, device: str) -> str | None:
        return self.locations.get(device)

    def merged(self, other: IdentifierMap) -> IdentifierMap:
        """Return a new map where entries of ``other`` take precedence."""

        return IdentifierMap(
            devices={**self.devices, **other.devices},
            interfaces={**self.interfaces, **other.interfaces},
            locations={**self.locations, **other.locations},
        )


def normalize_address(raw_address: str) -> str:
    """Normalize an interface address, dropping any prefix length."""

    cleaned = raw_address.strip()
    try:
        return str(ipaddress.ip_interface(cleaned).ip)
    except ValueError:
        return cleaned.lower()


def identifier_map_from_snapshot(snapshot: Any) -> IdentifierMap:
    """Derive device aliases, interface addresses and locations from a snapshot."""

    if not isinstance(snapshot, Mapping):
        return IdentifierMap()

    devices_raw = snapshot.get("devices")
    locations_raw = snapshot.get("locations")
    devices_section = devices_raw if isinstance(devices_raw, Mapping) else {}
    locations_section = locations_raw if isinstance(locations_raw, Mapping) else {}

    aliases: dict[str, str] = {}
    interfaces: dict[str, Endpoint] = {}
    locations: dict[str, str] = {}

    for device_id, record in devices_section.items():
        if not isinstance(record, Mapping):
            continue
        canonical = normalize_device_name(str(record.get("code") or device_id))
        aliases[normalize_device_name(str(device_id))] = canonical
        aliases[canonical] = canonical
        for alias_field in ("hostname", "isis_system_id"):
            alias = record.get(alias_field)
            if alias:
                aliases[normalize_system_id(str(alias))] = canonical
        location = resolve_location(record.get("location"), locations_section)
        if location:
            locations[canonical] = location
        interface_records = record.get("interfaces")
        if not isinstance(interface_records, list):
            interface_records = []
        for iface in interface_records:
            if not isinstance(iface, Mapping) or not iface.get("ip"):
                continue
            interfaces[normalize_address(str(iface["ip"]))] = Endpoint(
                device=canonical,
                interface=normalize_interface_name(str(iface.get("name") or "")),
            )

    for record in _iter_links(snapshot.get("links")):
        for side in ("side_a", "side_z"):
            device_id = record.get(side)
            address = record.get(f"{side}_ip")
            if not device_id or not address:
                continue
            canonical = aliases.get(
                normalize_device_name(str(device_id)), normalize_device_name(str(device_id))
            )
            interfaces.setdefault(
                normalize_address(str(address)),
                Endpoint(
                    device=canonical,
                    interface=normalize_interface_name(str(record.get(f"{side}_iface") or "")),
                ),
            )

    return IdentifierMap(devices=aliases, interfaces=interfaces, locations=locations)


def resolve_location(raw_location: Any, locations_section: Mapping[str, Any]) -> str | None:
    """Resolve a device location reference to a location code."""

    if not raw_location:
        return None
    key = str(raw_location)
    record = locations_section.get(key)
    if isinstance(record, Mapping):
        return str(record.get("code") or record.get("name") or key)
    return key


def load_identifier_map(path: str | Path) -> IdentifierMap:
    """Load an identifier mapping CSV."""

    aliases: dict[str, str] = {}
    interfaces: dict[str, Endpoint] = {}
    locations: dict[str, str] = {}
    with Path(path).open(encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        _validate_headers(path, reader.fieldnames, _MAP_REQUIRED_COLUMNS)
        for row in reader:
            _validate_row(path, row, _MAP_REQUIRED_COLUMNS)
            identifier = (row.get("identifier") or "").strip()
            device = normalize_device_name(row.get("device") or "")
            interface = (row.get("interface") or "").strip()
            location = (row.get("location") or "").strip()
            if interface:
                interfaces[normalize_address(identifier)] = Endpoint(
                    device=device,
                    interface=normalize_interface_name(interface),
                )
            else:
                aliases[normalize_system_id(identifier)] = device
            aliases.setdefault(device, device)
            if location:
                locations[device] = location
    return IdentifierMap(devices=aliases, interfaces=interfaces, locations=locations)


def _iter_links(links: Any) -> list[Mapping[str, Any]]:
    if isinstance(links, Mapping):
        values: Sequence[Any] = list(links.values())
    elif isinstance(links, list):
        values = links
    else:
        return []
    return [record for record in values if isinstance(record, Mapping)]


def _validate_headers(
    path: str | Path,
    fieldnames: Sequence[str] | None,
    required: tuple[str, ...],
) -> None:
    """Ensure required headers are present."""

    if fieldnames is None:
        raise ValueError(f"{path} is missing header row")
    missing = [name for name in required if name not in fieldnames]
    if missing:
        raise ValueError(f"{path} is missing required columns: {', '.join(missing)}")


def _validate_row(path: str | Path, row: dict[str, str], required: tuple[str, ...]) -> None:
    """Ensure required row fields are populated."""

    missing = [name for name in required if not (row.get(name) or "").strip()]
    if missing:
        raise ValueError(f"{path} has empty required fields: {', '.join(missing)}")
