"""JSON results output."""

from __future__ import annotations

import json
from pathlib import Path

from snapdiff.models.snapshot import DiffResult


def generate_json_report(result: DiffResult, output_path: Path) -> None:
    """Write the machine-readable results summary plus per-snapshot details."""
    report = result.to_results()
    report["snapshots"] = [
        o.model_dump(mode="json", exclude_none=True) for o in result.outcomes
    ]

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2, default=str)
