"""Directory scanner — builds a snapshot set from the image files under a directory."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from snapdiff.models.snapshot import SnapshotSet

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".png",)


def scan_directory(
    directory: str | Path | None,
    extensions: list[str] | tuple[str, ...] = DEFAULT_EXTENSIONS,
) -> SnapshotSet:
    """List snapshot images under ``directory`` keyed by their POSIX relative path.

    Directory symlinks are not followed. A missing directory yields an empty set.
    """
    if directory is None:
        return SnapshotSet()

    root = Path(directory).resolve()
    if not root.is_dir():
        logger.debug("Snapshot directory not found: %s", root)
        return SnapshotSet(root=root)

    wanted = tuple(ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions)
    found: dict[str, Path] = {}
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames.sort()
        for filename in sorted(filenames):
            if not filename.lower().endswith(wanted):
                continue
            abs_path = Path(dirpath) / filename
            if not abs_path.is_file():
                continue
            rel_name = abs_path.relative_to(root).as_posix()
            found[rel_name] = abs_path

    files = {name: found[name] for name in sorted(found)}
    logger.debug("Found %d snapshots in %s", len(files), root)
    return SnapshotSet(root=root, files=files)
