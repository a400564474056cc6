"""Plain-text summary of a diff result, suitable for a CI check-run body."""

from __future__ import annotations

from snapdiff.models.snapshot import DiffResult

MAX_LISTED = 20


def _listing(title: str, names: list[str]) -> list[str]:
    if not names:
        return []
    lines = [f"{title}:"]
    lines.extend(f"  - {n}" for n in names[:MAX_LISTED])
    if len(names) > MAX_LISTED:
        lines.append(f"  ... and {len(names) - MAX_LISTED} more")
    return lines


def build_title(result: DiffResult) -> str:
    changed = len(result.changed_snapshots)
    if changed:
        return f"{changed} snapshot{'s' if changed != 1 else ''} changed"
    return "No snapshots changed"


def build_summary(result: DiffResult) -> str:
    """Human-readable summary: unchanged ratio, counts, and the affected filenames."""
    lines = [
        build_title(result),
        f"  Unchanged: {result.unchanged_count}/{result.base_files_length}",
        f"  Changed: {len(result.changed_snapshots)}",
        f"  Added: {len(result.new_snapshots)}",
        f"  Missing: {len(result.missing_snapshots)}",
    ]
    if result.failed_snapshots:
        lines.append(f"  Indeterminate (comparison failed): {len(result.failed_snapshots)}")

    failed = sorted(result.failed_snapshots)
    lines += _listing("Changed", sorted(result.changed_snapshots - set(failed)))
    lines += _listing("Indeterminate", [f"{n} ({result.failed_snapshots[n]})" for n in failed])
    lines += _listing("Added", sorted(result.new_snapshots))
    lines += _listing("Missing", sorted(result.missing_snapshots))
    return "\n".join(lines)
