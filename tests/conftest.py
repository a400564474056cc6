"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Callable, Optional

import pytest
from PIL import Image, ImageDraw

from snapdiff.models.config import DiffConfig, PixelmatchOptions
from snapdiff.models.snapshot import ComparisonOutcome

GRAY = (100, 100, 100, 255)
RED = (255, 0, 0, 255)


# ============================================================================
# Image Fixtures
# ============================================================================


@pytest.fixture
def make_png() -> Callable[..., Path]:
    """Factory writing a solid PNG, optionally with a filled rectangle."""

    def _make(
        path: Path,
        size: tuple[int, int] = (20, 20),
        color: tuple[int, int, int, int] = GRAY,
        rect: Optional[tuple[int, int, int, int]] = None,
        rect_color: tuple[int, int, int, int] = RED,
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        img = Image.new("RGBA", size, color)
        if rect:
            ImageDraw.Draw(img).rectangle(rect, fill=rect_color)
        img.save(path, "PNG")
        return path

    return _make


@pytest.fixture
def snapshot_dirs(tmp_path: Path) -> dict[str, Path]:
    """Current / base / merge-base / output directory layout (baselines not created)."""
    return {
        "current": tmp_path / "current",
        "base": tmp_path / "base",
        "merge_base": tmp_path / "merge-base",
        "output": tmp_path / "results",
    }


@pytest.fixture
def edge_images() -> tuple[Image.Image, Image.Image]:
    """Black/white split where the second image softens the edge with a gray column."""
    before = Image.new("RGBA", (10, 10), (255, 255, 255, 255))
    ImageDraw.Draw(before).rectangle((0, 0, 4, 9), fill=(0, 0, 0, 255))
    after = before.copy()
    ImageDraw.Draw(after).rectangle((5, 0, 5, 9), fill=(128, 128, 128, 255))
    return before, after


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def pixelmatch_options() -> PixelmatchOptions:
    """Default comparison options."""
    return PixelmatchOptions()


@pytest.fixture
def diff_config(snapshot_dirs: dict[str, Path]) -> DiffConfig:
    """Config pointing at the snapshot_dirs layout."""
    return DiffConfig(
        current_path=str(snapshot_dirs["current"]),
        base_path=str(snapshot_dirs["base"]),
        merge_base_path=str(snapshot_dirs["merge_base"]),
        output_path=str(snapshot_dirs["output"]),
        max_workers=2,
    )


# ============================================================================
# Outcome Fixtures
# ============================================================================


@pytest.fixture
def sample_outcomes(tmp_path: Path) -> list[ComparisonOutcome]:
    """One outcome of every kind, including a failed comparison."""
    return [
        ComparisonOutcome(name="added.png", status="added"),
        ComparisonOutcome(name="missing.png", status="missing"),
        ComparisonOutcome(
            name="same.png", status="unchanged", mismatch_count=0, total_pixels=400,
            compared_against="base",
        ),
        ComparisonOutcome(
            name="pages/changed.png", status="changed", mismatch_count=25, total_pixels=400,
            compared_against="merge_base", current_width=20, current_height=20,
            base_width=20, base_height=20, diff_path=tmp_path / "pages" / "changed.png",
        ),
        ComparisonOutcome(
            name="broken.png", status="changed", comparison_failed=True,
            error="UnidentifiedImageError: cannot identify image file", compared_against="base",
        ),
    ]
