"""Snapshot set and comparison result data structures."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

OutcomeStatus = Literal["added", "missing", "unchanged", "changed"]


class SnapshotSet(BaseModel):
    root: Optional[Path] = None
    files: dict[str, Path] = Field(default_factory=dict)  # relative name -> absolute path

    def __contains__(self, name: str) -> bool:
        return name in self.files

    def __getitem__(self, name: str) -> Path:
        return self.files[name]

    def __len__(self) -> int:
        return len(self.files)

    def names(self) -> list[str]:
        return sorted(self.files)


class ComparisonOutcome(BaseModel):
    """Decision for a single snapshot filename."""
    name: str
    status: OutcomeStatus
    current_width: Optional[int] = None
    current_height: Optional[int] = None
    base_width: Optional[int] = None
    base_height: Optional[int] = None
    mismatch_count: Optional[int] = None
    total_pixels: Optional[int] = None
    compared_against: Optional[Literal["base", "merge_base"]] = None
    diff_path: Optional[Path] = None  # overlay written under the output directory
    comparison_failed: bool = False
    error: Optional[str] = None


class DiffResult(BaseModel):
    base_files_length: int = 0
    changed_snapshots: set[str] = Field(default_factory=set)
    missing_snapshots: set[str] = Field(default_factory=set)
    new_snapshots: set[str] = Field(default_factory=set)
    unchanged_snapshots: set[str] = Field(default_factory=set)
    failed_snapshots: dict[str, str] = Field(default_factory=dict)  # name -> error message
    outcomes: list[ComparisonOutcome] = Field(default_factory=list)

    @property
    def unchanged_count(self) -> int:
        return len(self.unchanged_snapshots)

    def to_results(self) -> dict:
        """Summary in the shape consumed by the gallery and check-run steps."""
        return {
            "baseFilesLength": self.base_files_length,
            "changed": sorted(self.changed_snapshots),
            "missing": sorted(self.missing_snapshots),
            "added": sorted(self.new_snapshots),
            "unchanged": sorted(self.unchanged_snapshots),
            "failed": dict(sorted(self.failed_snapshots.items())),
        }
