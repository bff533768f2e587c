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
"""CLI entrypoint."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from topo_reconcile.config import DRIFT_MODES, ReconcileConfig
from topo_reconcile.drift import (
    DEFAULT_DRIFT_THRESHOLD_MS,
    DEFAULT_DRIFT_THRESHOLD_PCT,
    DEFAULT_METRIC_UNIT_MS,
)
from topo_reconcile.filters import filter_topology
from topo_reconcile.identifiers import load_identifier_map
from topo_reconcile.mermaid import write_mermaid_diagram
from topo_reconcile.models import STATUSES, IncompleteJoinError
from topo_reconcile.output import (
    write_locations_csv,
    write_locations_json,
    write_summary,
    write_summary_json,
    write_topology_csv,
    write_topology_json,
)
from topo_reconcile.pipeline import reconcile_topology
from topo_reconcile.service import (
    KIND_ISIS,
    KIND_SNAPSHOT,
    SourceDocument,
    load_source_document,
    minimal_isis_document,
)

_LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser."""

    parser = argparse.ArgumentParser(description="topo-reconcile")
    parser.add_argument("--snapshot", required=True, help="path to telemetry snapshot JSON")
    parser.add_argument(
        "--isis",
        help="path to IS-IS database JSON (default: empty database)",
    )
    parser.add_argument(
        "--identifier-map",
        help="path to identifier mapping CSV (identifier,device[,interface,location])",
    )
    parser.add_argument("--out-dir", required=True, help="output directory")
    parser.add_argument(
        "--drift-threshold-ms",
        type=float,
        default=DEFAULT_DRIFT_THRESHOLD_MS,
        help=f"absolute drift threshold in ms (default: {DEFAULT_DRIFT_THRESHOLD_MS})",
    )
    parser.add_argument(
        "--drift-mode",
        default="absolute",
        choices=list(DRIFT_MODES),
        help="drift comparison mode (default: absolute)",
    )
    parser.add_argument(
        "--drift-threshold-pct",
        type=float,
        default=DEFAULT_DRIFT_THRESHOLD_PCT,
        help=f"relative drift threshold in percent (default: {DEFAULT_DRIFT_THRESHOLD_PCT})",
    )
    parser.add_argument(
        "--metric-unit-ms",
        type=float,
        default=DEFAULT_METRIC_UNIT_MS,
        help=f"milliseconds per IS-IS metric unit (default: {DEFAULT_METRIC_UNIT_MS})",
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="extract both sources concurrently",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["INFO", "DEBUG", "WARN"],
        help="log level",
    )
    parser.add_argument(
        "--output-format",
        default="csv",
        choices=["csv", "json", "both"],
        help="output format (default: csv)",
    )
    parser.add_argument(
        "--mermaid",
        action="store_true",
        help="also write topology.mmd",
    )
    parser.add_argument(
        "--filter-status",
        nargs="+",
        choices=list(STATUSES),
        help="only report links with these statuses",
    )
    parser.add_argument(
        "--filter-location",
        nargs="+",
        help="only report links attributed to these locations",
    )
    return parser


def configure_logging(level: str) -> None:
    """Configure logging."""

    logging.basicConfig(level=getattr(logging, level), format="%(levelname)s %(message)s")


def main(argv: Sequence[str] | None = None) -> int:
    """Run topo-reconcile."""

    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    try:
        config = ReconcileConfig(
            drift_threshold_ms=args.drift_threshold_ms,
            drift_mode=args.drift_mode,
            drift_threshold_pct=args.drift_threshold_pct,
            metric_unit_ms=args.metric_unit_ms,
            parallel_extraction=args.parallel,
        )
        snapshot = load_source_document(args.snapshot, KIND_SNAPSHOT)
        if args.isis:
            isis = load_source_document(args.isis, KIND_ISIS)
        else:
            _LOGGER.info("No ISIS database given; using an empty database")
            isis = SourceDocument(data=minimal_isis_document(), source="upload")
        identifier_map = load_identifier_map(args.identifier_map) if args.identifier_map else None
        result = reconcile_topology(snapshot.data, isis.data, config, identifier_map)
    except (ValueError, OSError) as exc:
        _LOGGER.error("Invalid input: %s", exc)
        return 3
    except IncompleteJoinError as exc:
        _LOGGER.error("Reconciliation incomplete: %s", exc)
        return 3

    topology = filter_topology(
        result.topology,
        status_filter=args.filter_status,
        location_filter=args.filter_location,
    )
    locations = result.locations
    if args.filter_location:
        locations = [rollup for rollup in locations if rollup.location in args.filter_location]

    if args.output_format in ("csv", "both"):
        write_topology_csv(out_dir / "topology.csv", topology)
        write_locations_csv(out_dir / "locations.csv", locations)
        write_summary(out_dir / "summary.txt", result.summary, result.diagnostics)

    if args.output_format in ("json", "both"):
        write_topology_json(out_dir / "topology.json", topology)
        write_locations_json(out_dir / "locations.json", locations)
        write_summary_json(out_dir / "summary.json", result.summary, result.diagnostics)

    if args.mermaid:
        write_mermaid_diagram(out_dir / "topology.mmd", topology)

    if result.diagnostics.degraded:
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
