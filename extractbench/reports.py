"""Render leaderboards for the terminal and as JSON.

This module provides:
1. generate_cli_report() - Leaderboard and per-field winners tables
2. generate_json_report() - Machine-readable report
3. save_json_report() - Write the JSON report to disk
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from tabulate import tabulate

from extractbench import __version__
from extractbench.ranking import ModelSummary


def _winners_rows(summaries: list[ModelSummary]) -> list[list[str]]:
    """One row per field: name, winning model(s), best accuracy."""
    if not summaries:
        return []

    rows = []
    for reference in summaries[0].field_performance:
        winners = []
        best = 0.0
        for summary in summaries:
            performance = summary.performance_for(reference.field_key)
            if performance is None or not performance.is_winner:
                continue
            best = performance.accuracy
            marker = "*" if performance.is_shared_victory else ""
            winners.append(f"{summary.model_name}{marker}")

        field_label = reference.field_name
        if not reference.is_included_in_metrics:
            field_label += " (excluded)"
        rows.append([field_label, ", ".join(winners) or "-", f"{best:.3f}"])
    return rows


def generate_cli_report(
    summaries: list[ModelSummary],
    title: str = "Model Accuracy Leaderboard",
) -> str:
    """Generate a CLI-friendly report with tables.

    Args:
        summaries: Ranked model summaries
        title: Report title

    Returns:
        Formatted string for terminal output
    """
    lines = []
    lines.append("=" * 60)
    lines.append(title)
    lines.append("=" * 60)
    lines.append("")

    if not summaries:
        lines.append("No models to report.")
        lines.append("")
        return "\n".join(lines)

    total_fields = summaries[0].total_fields
    included = summaries[0].included_fields
    lines.append(f"Models: {len(summaries)}")
    lines.append(f"Fields: {total_fields} ({included} included in overall metrics)")
    lines.append("")

    headers = ["Rank", "Model", "Accuracy", "Precision", "Recall", "F1", "Fields Won"]
    rows = []
    for s in summaries:
        rows.append(
            [
                s.rank,
                s.model_name,
                f"{s.overall_accuracy:.3f}",
                f"{s.overall_precision:.3f}",
                f"{s.overall_recall:.3f}",
                f"{s.overall_f1:.3f}",
                f"{s.fields_won:g}",
            ]
        )
    lines.append(tabulate(rows, headers=headers, tablefmt="simple"))
    lines.append("")

    lines.append("-" * 40)
    lines.append("Field Winners:")
    lines.append(
        tabulate(_winners_rows(summaries), headers=["Field", "Winner", "Accuracy"], tablefmt="simple")
    )
    if any(fp.is_shared_victory for s in summaries for fp in s.field_performance):
        lines.append("* shared victory")

    lines.append("")
    return "\n".join(lines)


def generate_json_report(
    summaries: list[ModelSummary],
    snapshot_path: str | None = None,
    config: dict | None = None,
) -> dict[str, Any]:
    """Generate a JSON-serializable report.

    Args:
        summaries: Ranked model summaries
        snapshot_path: Optional path to the evaluated snapshot
        config: Optional evaluation configuration used

    Returns:
        Dictionary suitable for JSON serialization
    """
    return {
        "version": __version__,
        "timestamp": datetime.now().isoformat(),
        "source": {"snapshot": snapshot_path},
        "config": config,
        "leaderboard": [s.to_dict() for s in summaries],
    }


def save_json_report(
    summaries: list[ModelSummary],
    output_path: Path,
    snapshot_path: str | None = None,
    config: dict | None = None,
) -> None:
    """Save JSON report to file."""
    report = generate_json_report(summaries, snapshot_path=snapshot_path, config=config)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)
