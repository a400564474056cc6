"""Configuration models for snapshot diffing."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

Color = tuple[int, int, int]


def _parse_color(v):
    if isinstance(v, str):
        value = v.strip().lstrip("#")
        if len(value) != 6:
            raise ValueError(f"Invalid hex color: '{v}'")
        try:
            return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))
        except ValueError as e:
            raise ValueError(f"Invalid hex color: '{v}'") from e
    return v


class PixelmatchOptions(BaseModel):
    threshold: float = Field(default=0.1, ge=0.0, le=1.0)
    include_aa: bool = False  # count anti-aliased pixels as mismatches
    alpha: float = Field(default=0.1, ge=0.0, le=1.0)
    diff_color: Color = (255, 0, 0)
    aa_color: Color = (255, 255, 0)
    diff_color_alt: Optional[Color] = None  # used for pixels that got darker
    diff_mask: bool = False  # draw the diff over a transparent background
    antialias_detector: str = "pixelmatch"

    @field_validator("diff_color", "aa_color", "diff_color_alt", mode="before")
    @classmethod
    def parse_hex_color(cls, v):
        return _parse_color(v)

    @field_validator("diff_color", "aa_color", "diff_color_alt")
    @classmethod
    def check_channel_range(cls, v: Color | None) -> Color | None:
        if v is not None and any(c < 0 or c > 255 for c in v):
            raise ValueError(f"Color channels must be in 0..255, got {v}")
        return v


class DiffConfig(BaseModel):
    # Snapshot directories
    current_path: str = ""
    base_path: Optional[str] = None
    merge_base_path: Optional[str] = None
    output_path: str = "./visual-snapshots-results"

    # Comparison
    pixelmatch: PixelmatchOptions = Field(default_factory=PixelmatchOptions)
    max_workers: int = Field(default=4, ge=1)
    extensions: list[str] = Field(default_factory=lambda: [".png"])

    # Reporting
    report_formats: list[str] = Field(default_factory=lambda: ["html", "json"])
    fail_on_comparison_errors: bool = False

    @field_validator("current_path", "base_path", "merge_base_path", "output_path", mode="before")
    @classmethod
    def resolve_env_path(cls, v):
        if isinstance(v, str) and v.startswith("env:"):
            env_var = v[4:]
            resolved = os.environ.get(env_var)
            if resolved is None:
                raise ValueError(f"Environment variable '{env_var}' not set")
            return resolved
        return v

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]

    @classmethod
    def load(cls, path: str | Path) -> "DiffConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
