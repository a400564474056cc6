"""Directory-level entry point: scan the three snapshot directories and reconcile them."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from snapdiff.diff.reconciler import Reconciler
from snapdiff.models.config import PixelmatchOptions
from snapdiff.models.snapshot import DiffResult
from snapdiff.snapshots.scanner import DEFAULT_EXTENSIONS, scan_directory

logger = logging.getLogger(__name__)


async def diff_snapshots_async(
    current_path: str | Path,
    base_path: str | Path | None,
    merge_base_path: str | Path | None,
    output_path: str | Path,
    options: PixelmatchOptions | None = None,
    max_workers: int = 4,
    extensions: list[str] | tuple[str, ...] = DEFAULT_EXTENSIONS,
) -> DiffResult:
    current_dir = Path(current_path)
    if not current_dir.is_dir():
        raise FileNotFoundError(f"Current snapshot directory not found: {current_dir}")

    current, base, merge_base = await asyncio.gather(
        asyncio.to_thread(scan_directory, current_dir, extensions),
        asyncio.to_thread(scan_directory, base_path, extensions),
        asyncio.to_thread(scan_directory, merge_base_path, extensions),
    )
    if not base:
        # All snapshots will be reported as new
        logger.warning("No base snapshots found at %s", base_path)
    if not merge_base:
        logger.debug("No merge base snapshots found at %s", merge_base_path)

    reconciler = Reconciler(output_path, options, max_workers)
    return await reconciler.reconcile_async(current, base, merge_base)


def diff_snapshots(
    current_path: str | Path,
    base_path: str | Path | None,
    merge_base_path: str | Path | None,
    output_path: str | Path,
    options: PixelmatchOptions | None = None,
    max_workers: int = 4,
    extensions: list[str] | tuple[str, ...] = DEFAULT_EXTENSIONS,
) -> DiffResult:
    """Compare the snapshots in ``current_path`` against the base and merge-base directories.

    Missing base or merge-base directories are treated as empty; a missing
    current directory raises ``FileNotFoundError``.
    """
    return asyncio.run(diff_snapshots_async(
        current_path, base_path, merge_base_path, output_path,
        options=options, max_workers=max_workers, extensions=extensions,
    ))
