"""Anti-aliasing detection strategies used to suppress rendering noise in pixel diffs."""

from __future__ import annotations

from typing import Protocol

import numpy as np

# Neighbor visiting order matters for tie-breaking: x outer, y inner.
NEIGHBOR_OFFSETS = [(dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)]


class AntialiasDetector(Protocol):
    name: str

    def detect(self, img1: np.ndarray, img2: np.ndarray, candidates: np.ndarray) -> np.ndarray:
        """Return a boolean mask of the ``candidates`` pixels that look anti-aliased.

        ``img1`` and ``img2`` are uint8 RGBA arrays of identical shape.
        """
        ...


def rgb2y(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.29889531 + rgb[..., 1] * 0.58662247 + rgb[..., 2] * 0.11448223


def rgb2i(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.59597799 - rgb[..., 1] * 0.27417610 - rgb[..., 2] * 0.32180189


def rgb2q(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.21147017 - rgb[..., 1] * 0.52261711 + rgb[..., 2] * 0.31114694


def blend_with_white(rgba: np.ndarray) -> np.ndarray:
    """Composite RGBA pixels over a white background, returning float RGB."""
    rgb = rgba[..., :3].astype(np.float64)
    alpha = rgba[..., 3:4].astype(np.float64) / 255.0
    return 255.0 + (rgb - 255.0) * alpha


def shifted(arr: np.ndarray, dx: int, dy: int) -> np.ndarray:
    """View where ``out[y, x] == arr[y + dy, x + dx]``; out-of-bounds reads repeat the edge."""
    pad = [(1, 1), (1, 1)] + [(0, 0)] * (arr.ndim - 2)
    padded = np.pad(arr, pad, mode="edge")
    h, w = arr.shape[:2]
    return padded[1 + dy:1 + dy + h, 1 + dx:1 + dx + w]


def neighbor_valid(shape: tuple[int, int], dx: int, dy: int) -> np.ndarray:
    h, w = shape
    valid = np.zeros((h, w), dtype=bool)
    valid[max(0, -dy):h - max(0, dy), max(0, -dx):w - max(0, dx)] = True
    return valid


def edge_mask(shape: tuple[int, int]) -> np.ndarray:
    h, w = shape
    edge = np.zeros((h, w), dtype=bool)
    edge[0, :] = edge[-1, :] = True
    edge[:, 0] = edge[:, -1] = True
    return edge


def has_many_siblings(rgba: np.ndarray) -> np.ndarray:
    """Pixels with more than two identical neighbors (border pixels start with one)."""
    shape = rgba.shape[:2]
    zeroes = edge_mask(shape).astype(np.int16)
    for dx, dy in NEIGHBOR_OFFSETS:
        same = np.all(shifted(rgba, dx, dy) == rgba, axis=-1)
        zeroes += same & neighbor_valid(shape, dx, dy)
    return zeroes > 2


class PixelmatchAntialiasDetector:
    """Brightness-gradient heuristic from pixelmatch ("Anti-aliased Pixel and
    Intensity Slope Detector", V. Vysniauskas, 2009).

    A pixel is anti-aliased when its 3x3 neighborhood holds both a darker and a
    brighter neighbor, at most two equal-brightness neighbors, and the darkest
    or brightest neighbor sits inside a flat region in both images.
    """

    name = "pixelmatch"

    def detect(self, img1: np.ndarray, img2: np.ndarray, candidates: np.ndarray) -> np.ndarray:
        if not candidates.any():
            return np.zeros(candidates.shape, dtype=bool)
        siblings = has_many_siblings(img1) & has_many_siblings(img2)
        stacked = np.stack([shifted(siblings, dx, dy) for dx, dy in NEIGHBOR_OFFSETS])
        aa = self._antialiased(img1, stacked) | self._antialiased(img2, stacked)
        return aa & candidates

    @staticmethod
    def _antialiased(rgba: np.ndarray, sibling_stack: np.ndarray) -> np.ndarray:
        shape = rgba.shape[:2]
        y = rgb2y(blend_with_white(rgba))
        zeroes = edge_mask(shape).astype(np.int16)
        min_delta = np.zeros(shape)
        max_delta = np.zeros(shape)
        min_idx = np.full(shape, -1, dtype=np.int8)
        max_idx = np.full(shape, -1, dtype=np.int8)

        for k, (dx, dy) in enumerate(NEIGHBOR_OFFSETS):
            valid = neighbor_valid(shape, dx, dy)
            delta = y - shifted(y, dx, dy)
            zeroes += valid & (delta == 0)
            darker = valid & (delta < min_delta)
            min_delta[darker] = delta[darker]
            min_idx[darker] = k
            brighter = valid & (delta > max_delta)
            max_delta[brighter] = delta[brighter]
            max_idx[brighter] = k

        has_slope = (zeroes <= 2) & (min_idx >= 0) & (max_idx >= 0)
        at_min = np.take_along_axis(sibling_stack, np.clip(min_idx, 0, None)[None].astype(np.intp), axis=0)[0]
        at_max = np.take_along_axis(sibling_stack, np.clip(max_idx, 0, None)[None].astype(np.intp), axis=0)[0]
        return has_slope & (at_min | at_max)


class NoAntialiasDetector:
    """Treats every differing pixel as a real difference."""

    name = "none"

    def detect(self, img1: np.ndarray, img2: np.ndarray, candidates: np.ndarray) -> np.ndarray:
        return np.zeros(candidates.shape, dtype=bool)


DETECTORS: dict[str, AntialiasDetector] = {
    PixelmatchAntialiasDetector.name: PixelmatchAntialiasDetector(),
    NoAntialiasDetector.name: NoAntialiasDetector(),
}


def get_detector(name: str) -> AntialiasDetector:
    try:
        return DETECTORS[name]
    except KeyError:
        raise ValueError(
            f"Unknown anti-aliasing detector '{name}'. Available: {', '.join(sorted(DETECTORS))}"
        ) from None
