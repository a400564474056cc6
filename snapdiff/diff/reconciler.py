"""Snapshot reconciliation — decides per filename whether a snapshot was added,
removed, changed or left unchanged, and writes diff overlays for changes."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import NamedTuple, Optional

from PIL import Image

from snapdiff.diff.aggregator import aggregate
from snapdiff.diff.antialias import AntialiasDetector, get_detector
from snapdiff.diff.pixelmatch import PixelDiff, compare_files
from snapdiff.models.config import PixelmatchOptions
from snapdiff.models.snapshot import ComparisonOutcome, DiffResult, SnapshotSet

logger = logging.getLogger(__name__)


class _Attempt(NamedTuple):
    against: str
    diff: Optional[PixelDiff]
    current_size: Optional[tuple[int, int]]
    other_size: Optional[tuple[int, int]]
    error: Optional[str]

    @property
    def differs(self) -> bool:
        return self.diff is None or self.diff.mismatch_count > 0


def write_overlay(overlay: Image.Image, output_path: Path, name: str) -> Path:
    """Atomically write an overlay PNG to ``output_path / name``."""
    dest = output_path / name
    dest.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            overlay.save(f, format="PNG")
        os.replace(tmp, dest)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp)
        raise
    return dest


class Reconciler:
    """Reconciles the current snapshot set against base and merge-base baselines."""

    def __init__(
        self,
        output_path: str | Path,
        options: PixelmatchOptions | None = None,
        max_workers: int = 4,
        detector: AntialiasDetector | None = None,
    ):
        self.output_path = Path(output_path)
        self.options = options or PixelmatchOptions()
        self.max_workers = max_workers
        self.detector = detector or get_detector(self.options.antialias_detector)

    def reconcile(
        self,
        current: SnapshotSet,
        base: SnapshotSet | None = None,
        merge_base: SnapshotSet | None = None,
    ) -> DiffResult:
        return asyncio.run(self.reconcile_async(current, base, merge_base))

    async def reconcile_async(
        self,
        current: SnapshotSet,
        base: SnapshotSet | None = None,
        merge_base: SnapshotSet | None = None,
    ) -> DiffResult:
        if current is None:
            raise ValueError("Current snapshot set is required")
        base = base or SnapshotSet()
        merge_base = merge_base or SnapshotSet()

        names = sorted(set(current.files) | set(base.files))
        logger.info(
            "Reconciling %d snapshots (current=%d, base=%d, merge_base=%d)",
            len(names), len(current), len(base), len(merge_base),
        )
        start = time.time()

        # Each unit holds two decoded rasters
        semaphore = asyncio.Semaphore(self.max_workers)

        async def _run_one(name: str) -> ComparisonOutcome:
            if name not in base:
                logger.debug("[ADDED] %s", name)
                outcome = ComparisonOutcome(name=name, status="added")
            elif name not in current:
                logger.debug("[MISSING] %s", name)
                outcome = ComparisonOutcome(name=name, status="missing")
            else:
                async with semaphore:
                    outcome = await asyncio.to_thread(self._compare_one, name, current, base, merge_base)
            if outcome.diff_path is None:
                sources = [s.files[name] for s in (current, base, merge_base) if name in s]
                self._discard_stale_overlay(name, sources)
            return outcome

        results = await asyncio.gather(*(_run_one(name) for name in names), return_exceptions=True)

        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            logger.error("Reconciliation failed: %d snapshot(s) could not be written", len(errors))
            raise errors[0]

        result = aggregate(results)
        logger.info(
            "Reconciliation complete: %d changed, %d unchanged, %d added, %d missing, %d failed (%.1fs)",
            len(result.changed_snapshots), len(result.unchanged_snapshots),
            len(result.new_snapshots), len(result.missing_snapshots),
            len(result.failed_snapshots), time.time() - start,
        )
        return result

    def _discard_stale_overlay(self, name: str, sources: list[Path]) -> None:
        """Remove an overlay left in the output directory by an earlier run."""
        stale = self.output_path / name
        if not stale.is_file():
            return
        # Never touch a snapshot when the output directory overlaps an input directory
        if any(stale.resolve() == src.resolve() for src in sources):
            return
        logger.info("Removing stale overlay from a previous run: %s", stale)
        with contextlib.suppress(FileNotFoundError):
            stale.unlink()

    def _compare_one(
        self,
        name: str,
        current: SnapshotSet,
        base: SnapshotSet,
        merge_base: SnapshotSet,
    ) -> ComparisonOutcome:
        attempt = self._attempt(name, current[name], base[name], "base")

        # Merge-base result replaces the base result outright
        if attempt.differs and name in merge_base:
            logger.debug("%s differs from base, re-comparing against merge base", name)
            if attempt.diff is not None:
                attempt.diff.overlay.close()
            attempt = self._attempt(name, current[name], merge_base[name], "merge_base")

        outcome = ComparisonOutcome(
            name=name,
            status="changed",
            compared_against=attempt.against,
        )
        if attempt.current_size:
            outcome.current_width, outcome.current_height = attempt.current_size
        if attempt.other_size:
            outcome.base_width, outcome.base_height = attempt.other_size

        if attempt.diff is None:
            outcome.comparison_failed = True
            outcome.error = attempt.error
            return outcome

        diff = attempt.diff
        outcome.mismatch_count = diff.mismatch_count
        outcome.total_pixels = diff.total_pixels
        try:
            if diff.mismatch_count == 0:
                outcome.status = "unchanged"
                logger.debug("[UNCHANGED] %s", name)
                return outcome
            outcome.diff_path = write_overlay(diff.overlay, self.output_path, name)
            logger.debug("[CHANGED] %s: %d/%d pixels differ (vs %s)",
                         name, diff.mismatch_count, diff.total_pixels, attempt.against)
            return outcome
        finally:
            diff.overlay.close()

    def _attempt(self, name: str, current_file: Path, other_file: Path, against: str) -> _Attempt:
        try:
            diff, current_size, other_size = compare_files(
                current_file, other_file, self.options, self.detector
            )
        except Exception as e:
            logger.warning("Failed to compare %s against %s: %s", name, against, e)
            return _Attempt(against, None, None, None, f"{type(e).__name__}: {e}")
        return _Attempt(against, diff, current_size, other_size, None)


def reconcile(
    current: SnapshotSet,
    base: SnapshotSet | None,
    merge_base: SnapshotSet | None,
    output_path: str | Path,
    options: PixelmatchOptions | None = None,
    max_workers: int = 4,
) -> DiffResult:
    """Reconcile snapshot sets and write overlays for changed snapshots into ``output_path``."""
    return Reconciler(output_path, options, max_workers).reconcile(current, base, merge_base)
