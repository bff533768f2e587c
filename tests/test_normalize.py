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
"""Tests for normalization and link keys."""

from topo_reconcile.models import Endpoint
from topo_reconcile.normalize import (
    lsp_pseudonode,
    normalize_device_name,
    normalize_interface_name,
    normalize_link_key,
    normalize_system_id,
)


def test_normalize_interface_name_maps_prefixes() -> None:
    assert normalize_interface_name("Eth1/1") == "Eth1/1"
    assert normalize_interface_name("ethernet1/2") == "Eth1/2"
    assert normalize_interface_name("Gi1/3") == "Eth1/3"
    assert normalize_interface_name("GigabitEthernet1/4") == "Eth1/4"
    assert normalize_interface_name("Te1-1") == "Eth1/1"
    assert normalize_interface_name("Port-Channel10") == "Po10"


def test_normalize_interface_name_handles_empty() -> None:
    assert normalize_interface_name("") == "unknown"
    assert normalize_interface_name("   ") == "unknown"


def test_normalize_device_name() -> None:
    assert normalize_device_name(" NYC-DZ01 ") == "nyc-dz01"
    assert normalize_device_name("") == "unknown"


def test_normalize_system_id_strips_suffixes() -> None:
    assert normalize_system_id("0000.0000.0001.00-00") == "0000.0000.0001"
    assert normalize_system_id("0000.0000.0001") == "0000.0000.0001"
    assert normalize_system_id("chi-dz01.00") == "chi-dz01"
    assert normalize_system_id("NYC-DZ01.00-01") == "nyc-dz01"
    assert normalize_system_id("leaf-01") == "leaf-01"


def test_lsp_pseudonode() -> None:
    assert lsp_pseudonode("nyc-dz01.00-00") == "00"
    assert lsp_pseudonode("nyc-dz01.02-00") == "02"
    assert lsp_pseudonode("nyc-dz01") is None
    assert lsp_pseudonode("0000.0000.0001.03") == "03"


def test_hex_looking_hostname_label_is_not_a_pseudonode() -> None:
    assert lsp_pseudonode("r1.ab") is None
    assert normalize_system_id("r1.ab") == "r1.ab"
    assert lsp_pseudonode("r1.ab.00-00") == "00"
    assert normalize_system_id("r1.ab.00-00") == "r1.ab"


def test_normalize_link_key_is_commutative() -> None:
    pairs = [
        (Endpoint("nyc-dz01", "Eth1/1"), Endpoint("chi-dz01", "Eth1/2")),
        (Endpoint("a", "x"), Endpoint("a", "y")),
        (Endpoint("same", "Eth1"), Endpoint("same", "Eth1")),
        (Endpoint("", ""), Endpoint("b", "Eth2")),
    ]
    for left, right in pairs:
        assert normalize_link_key(left, right, "default") == normalize_link_key(
            right, left, "default"
        )


def test_normalize_link_key_orders_endpoints() -> None:
    key = normalize_link_key(Endpoint("nyc-dz01", "Eth1/1"), Endpoint("chi-dz01", "Eth1/2"))

    assert key.endpoint_a == Endpoint("chi-dz01", "Eth1/2")
    assert key.endpoint_b == Endpoint("nyc-dz01", "Eth1/1")
    assert key.label == "chi-dz01:Eth1/2|nyc-dz01:Eth1/1"


def test_normalize_link_key_fills_unknown() -> None:
    key = normalize_link_key(Endpoint("", " "), Endpoint("b", "Eth2"), " default ")

    assert key.endpoint_b == Endpoint("unknown", "unknown")
    assert key.discriminator == "default"


def test_normalize_link_key_keeps_parallel_links_apart() -> None:
    first = normalize_link_key(Endpoint("a", "Eth1"), Endpoint("b", "Eth1"))
    second = normalize_link_key(Endpoint("a", "Eth2"), Endpoint("b", "Eth2"))
    other_vrf = normalize_link_key(Endpoint("a", "Eth1"), Endpoint("b", "Eth1"), "mgmt")

    assert len({first, second, other_vrf}) == 3
