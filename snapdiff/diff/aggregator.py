"""Result aggregation — partitions per-snapshot outcomes into the final diff result."""

from __future__ import annotations

from collections.abc import Iterable

from snapdiff.models.snapshot import ComparisonOutcome, DiffResult


def aggregate(outcomes: Iterable[ComparisonOutcome]) -> DiffResult:
    """Partition outcomes into changed / missing / added / unchanged sets.

    ``base_files_length`` counts the snapshots that took part in an image
    comparison, i.e. every changed or unchanged outcome (failed comparisons
    included).
    """
    ordered = sorted(outcomes, key=lambda o: o.name)
    result = DiffResult(outcomes=ordered)
    for outcome in ordered:
        match outcome.status:
            case "added":
                result.new_snapshots.add(outcome.name)
            case "missing":
                result.missing_snapshots.add(outcome.name)
            case "unchanged":
                result.unchanged_snapshots.add(outcome.name)
                result.base_files_length += 1
            case "changed":
                result.changed_snapshots.add(outcome.name)
                result.base_files_length += 1
                if outcome.comparison_failed:
                    result.failed_snapshots[outcome.name] = outcome.error or "comparison failed"
    return result
