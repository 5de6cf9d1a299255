#!/usr/bin/env python3
"""
Rank Extraction Models Against Ground Truth

Scores every model in an evaluation snapshot field by field, then
aggregates the per-field metrics into a ranked leaderboard.

Usage:
    # Leaderboard in the terminal
    python -m extractbench.scripts.evaluate snapshots/contracts.yaml

    # Only some models, with fields switched off
    python -m extractbench.scripts.evaluate snapshots/contracts.yaml \\
        --models gpt-4 claude-3 \\
        --field-settings snapshots/field_settings.yaml

    # Output to JSON
    python -m extractbench.scripts.evaluate snapshots/contracts.yaml \\
        --output leaderboard.json
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from extractbench.config import EvaluationConfig, load_config, load_field_settings
from extractbench.dataset import evaluate_snapshot, load_snapshot
from extractbench.exceptions import ExtractBenchError
from extractbench.reports import generate_cli_report, save_json_report

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="Rank extraction models against ground truth",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "snapshot",
        type=Path,
        help="Path to evaluation snapshot YAML file",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to evaluation config YAML",
    )
    parser.add_argument(
        "--field-settings",
        type=Path,
        help="Path to field inclusion settings YAML (overrides the snapshot's)",
    )
    parser.add_argument(
        "--models",
        nargs="+",
        help="Models to evaluate (default: every model in the snapshot)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output path for the JSON report",
    )
    parser.add_argument(
        "--format",
        choices=["cli", "json"],
        default="cli",
        help="Output format (default: cli)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log confusion counts for every field and model",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Validate inputs
    if not args.snapshot.exists():
        print(f"Error: Snapshot file not found: {args.snapshot}")
        sys.exit(1)

    try:
        config = load_config(args.config) if args.config else EvaluationConfig()
        snapshot = load_snapshot(args.snapshot)
        if args.field_settings:
            snapshot.field_settings = load_field_settings(args.field_settings)
        summaries = evaluate_snapshot(snapshot, models=args.models, config=config)
    except (ExtractBenchError, FileNotFoundError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    logger.debug("Ranked %d models over %d fields", len(summaries), len(snapshot.fields))

    # Generate output
    if args.format == "json" or args.output:
        output_path = args.output or Path("leaderboard.json")
        save_json_report(
            summaries,
            output_path,
            snapshot_path=str(args.snapshot),
            config=dataclasses.asdict(config),
        )
        print(f"Results saved to: {output_path}")
    else:
        print(generate_cli_report(summaries))

    sys.exit(0)


if __name__ == "__main__":
    main()
