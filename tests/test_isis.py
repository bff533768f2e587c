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
"""Tests for IS-IS adjacency extraction."""

from typing import Any

import pytest

from topo_reconcile.identifiers import IdentifierMap
from topo_reconcile.isis import extract_advertised_links
from topo_reconcile.models import Diagnostics, Endpoint, MalformedDocumentError
from topo_reconcile.normalize import normalize_link_key


def _neighbor(system_id: str, metric: Any, local_ip: str, remote_ip: str) -> dict:
    return {
        "systemId": system_id,
        "metric": metric,
        "neighborAddr": remote_ip,
        "adjInterfaceAddresses": [{"adjInterfaceAddress": local_ip}],
    }


def _database(levels: dict, vrf: str = "default") -> dict:
    return {"vrfs": {vrf: {"isisInstances": {"1": {"level": levels}}}}}


def _address_map() -> IdentifierMap:
    return IdentifierMap(
        interfaces={
            "172.16.0.0": Endpoint("nyc-dz01", "Eth1"),
            "172.16.0.1": Endpoint("chi-dz01", "Eth1"),
        }
    )


def test_extract_merges_symmetric_advertisements() -> None:
    lsps = {
        "nyc-dz01.00-00": {
            "hostname": {"name": "nyc-dz01"},
            "neighbors": [_neighbor("chi-dz01.00", 1200, "172.16.0.0", "172.16.0.1")],
        },
        "chi-dz01.00-00": {
            "hostname": {"name": "chi-dz01"},
            "neighbors": [_neighbor("nyc-dz01.00", 1000, "172.16.0.1", "172.16.0.0")],
        },
    }

    advertised = extract_advertised_links(_database({"2": {"lsps": lsps}}), _address_map())

    assert len(advertised) == 1
    link = next(iter(advertised.values()))
    assert link.key == normalize_link_key(
        Endpoint("nyc-dz01", "Eth1"), Endpoint("chi-dz01", "Eth1"), "default"
    )
    assert link.metric == 1000
    assert link.metrics == (1000, 1200)
    assert link.sources == (
        "default/1/L2/chi-dz01.00-00",
        "default/1/L2/nyc-dz01.00-00",
    )


def test_extract_merges_levels_and_keeps_preferred_level() -> None:
    level_1 = {
        "nyc-dz01.00-00": {
            "hostname": {"name": "nyc-dz01"},
            "neighbors": [_neighbor("chi-dz01.00", 900, "172.16.0.0", "172.16.0.1")],
        }
    }
    level_2 = {
        "nyc-dz01.00-00": {
            "hostname": {"name": "nyc-dz01"},
            "neighbors": [_neighbor("chi-dz01.00", 1000, "172.16.0.0", "172.16.0.1")],
        }
    }

    advertised = extract_advertised_links(
        _database({"1": {"lsps": level_1}, "2": {"lsps": level_2}}), _address_map()
    )

    assert len(advertised) == 1
    link = next(iter(advertised.values()))
    assert link.metric == 900
    assert link.level == 1


def test_extract_keeps_parallel_adjacencies_apart() -> None:
    lsps = {
        "nyc-dz01.00-00": {
            "neighbors": [
                _neighbor("chi-dz01.00", 1000, "172.16.0.0", "172.16.0.1"),
                _neighbor("chi-dz01.00", 1000, "172.16.0.2", "172.16.0.3"),
            ]
        }
    }

    advertised = extract_advertised_links(_database({"2": {"lsps": lsps}}))

    assert len(advertised) == 2


def test_extract_uses_lsp_id_without_hostname() -> None:
    identifier_map = IdentifierMap(devices={"0000.0000.0001": "nyc-dz01"})
    lsps = {
        "0000.0000.0001.00-00": {
            "neighbors": [{"systemId": "0000.0000.0002.00", "metric": 10}],
        }
    }

    advertised = extract_advertised_links(_database({"2": {"lsps": lsps}}), identifier_map)

    key = next(iter(advertised))
    assert {key.endpoint_a.device, key.endpoint_b.device} == {"nyc-dz01", "0000.0000.0002"}
    assert key.endpoint_a.interface == "unknown"


def test_extract_empty_lsps_is_valid() -> None:
    diagnostics = Diagnostics()

    advertised = extract_advertised_links(_database({"2": {"lsps": {}}}), diagnostics=diagnostics)

    assert advertised == {}
    assert not diagnostics.degraded


def test_extract_requires_object_with_vrfs() -> None:
    with pytest.raises(MalformedDocumentError, match="JSON object"):
        extract_advertised_links([])
    with pytest.raises(MalformedDocumentError, match="vrfs"):
        extract_advertised_links({"isisInstances": {}})


def test_extract_skips_malformed_sections() -> None:
    isis = {
        "vrfs": {
            "broken": {},
            "default": {
                "isisInstances": {
                    "1": {"level": {"3": {"lsps": {}}, "2": {}}},
                    "2": {"levels": {}},
                }
            },
        }
    }
    diagnostics = Diagnostics()

    advertised = extract_advertised_links(isis, diagnostics=diagnostics)

    assert advertised == {}
    assert diagnostics.skipped_sections == 4
    assert diagnostics.degraded


def test_extract_skips_malformed_records() -> None:
    lsps = {
        "bad.00-00": "not-an-object",
        "nyc-dz01.00-00": {
            "hostname": {"name": "nyc-dz01"},
            "neighbors": [
                {"metric": 10},
                {"systemId": "chi-dz01.00", "metric": "fast"},
                {"systemId": "chi-dz01.00", "metric": -1},
                {"systemId": "chi-dz01.00", "metric": 10},
            ],
        },
        "lax-dz01.00-00": {"neighbors": {"systemId": "x"}},
    }
    diagnostics = Diagnostics()

    advertised = extract_advertised_links(_database({"2": {"lsps": lsps}}), diagnostics=diagnostics)

    assert len(advertised) == 1
    assert diagnostics.skipped_lsps == 2
    assert diagnostics.skipped_neighbors == 3
    assert len(diagnostics.messages) == 5


def test_extract_skips_neighbor_with_non_list_addresses() -> None:
    bad = _neighbor("chi-dz01.00", 10, "172.16.0.0", "172.16.0.1")
    bad["adjInterfaceAddresses"] = 7
    lsps = {
        "nyc-dz01.00-00": {
            "hostname": {"name": "nyc-dz01"},
            "neighbors": [bad, _neighbor("lax-dz01.00", 20, "172.16.2.0", "172.16.2.1")],
        }
    }
    diagnostics = Diagnostics()

    advertised = extract_advertised_links(_database({"2": {"lsps": lsps}}), diagnostics=diagnostics)

    assert len(advertised) == 1
    assert diagnostics.skipped_neighbors == 1
    assert "adjInterfaceAddresses" in diagnostics.messages[0]


def test_extract_keeps_hex_looking_hostname_lsp() -> None:
    lsps = {"r1.ab": {"neighbors": [{"systemId": "r2.00", "metric": 5}]}}

    advertised = extract_advertised_links(_database({"2": {"lsps": lsps}}))

    assert len(advertised) == 1
    link = next(iter(advertised.values()))
    assert {link.key.endpoint_a.device, link.key.endpoint_b.device} == {"r1.ab", "r2"}


def test_extract_ignores_pseudonode_lsps() -> None:
    lsps = {
        "nyc-dz01.01-00": {"neighbors": [{"systemId": "chi-dz01.00", "metric": 0}]},
    }

    assert extract_advertised_links(_database({"2": {"lsps": lsps}})) == {}


def test_extract_attaches_locations() -> None:
    identifier_map = IdentifierMap(locations={"nyc-dz01": "nyc"})
    lsps = {"nyc-dz01.00-00": {"neighbors": [{"systemId": "chi-dz01.00", "metric": 5}]}}

    advertised = extract_advertised_links(_database({"2": {"lsps": lsps}}), identifier_map)

    link = next(iter(advertised.values()))
    assert link.location_a is None
    assert link.location_b == "nyc"
