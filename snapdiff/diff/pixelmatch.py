"""Per-pixel perceptual image comparison producing a mismatch count and an overlay image."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image

from snapdiff.diff.antialias import (
    AntialiasDetector,
    blend_with_white,
    get_detector,
    rgb2i,
    rgb2q,
    rgb2y,
)
from snapdiff.models.config import PixelmatchOptions

logger = logging.getLogger(__name__)

# Largest possible YIQ delta between two colors (black vs white).
MAX_YIQ_DELTA = 35215


@dataclass
class PixelDiff:
    mismatch_count: int
    width: int
    height: int
    overlay: Image.Image

    @property
    def total_pixels(self) -> int:
        return self.width * self.height


def load_image(path: str | Path) -> Image.Image:
    """Fully decode an image file into RGBA. Raises if the file is not a readable raster."""
    with Image.open(path) as img:
        img.load()
        return img.convert("RGBA")


def _as_rgba_array(image: Image.Image) -> np.ndarray:
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return np.asarray(image, dtype=np.uint8)


def color_delta(rgba1: np.ndarray, rgba2: np.ndarray) -> np.ndarray:
    """Signed squared YIQ distance per pixel; negative where the first image is brighter."""
    b1 = blend_with_white(rgba1)
    b2 = blend_with_white(rgba2)
    y1, y2 = rgb2y(b1), rgb2y(b2)
    y = y1 - y2
    i = rgb2i(b1) - rgb2i(b2)
    q = rgb2q(b1) - rgb2q(b2)
    delta = 0.5053 * y * y + 0.299 * i * i + 0.1957 * q * q
    return np.where(y1 > y2, -delta, delta)


def _gray_pixels(rgba: np.ndarray, alpha: float) -> np.ndarray:
    rgb = rgba[..., :3].astype(np.float64)
    a = alpha * rgba[..., 3].astype(np.float64) / 255.0
    return 255.0 + (rgb2y(rgb) - 255.0) * a


def compare_images(
    image_a: Image.Image,
    image_b: Image.Image,
    options: PixelmatchOptions | None = None,
    detector: AntialiasDetector | None = None,
) -> PixelDiff:
    """Compare ``image_a`` against ``image_b`` pixel by pixel.

    Pixel (x, y) of one image is only ever compared with (x, y) of the other.
    When sizes differ, both are placed on a canvas of the larger width and
    height and every pixel outside the overlapping region counts as a
    mismatch. The overlay shows unchanged pixels as a faded grayscale copy of
    ``image_a``, mismatches in ``diff_color`` and suppressed anti-aliasing
    pixels in ``aa_color``.
    """
    options = options or PixelmatchOptions()
    detector = detector or get_detector(options.antialias_detector)

    a = _as_rgba_array(image_a)
    b = _as_rgba_array(image_b)
    ha, wa = a.shape[:2]
    hb, wb = b.shape[:2]
    width, height = max(wa, wb), max(ha, hb)
    ow, oh = min(wa, wb), min(ha, hb)

    a_ov = a[:oh, :ow]
    b_ov = b[:oh, :ow]
    identical = np.all(a_ov == b_ov, axis=-1)
    delta = color_delta(a_ov, b_ov)
    max_delta = MAX_YIQ_DELTA * options.threshold * options.threshold
    candidates = (np.abs(delta) > max_delta) & ~identical

    if options.include_aa:
        antialiased = np.zeros(candidates.shape, dtype=bool)
    else:
        antialiased = detector.detect(a_ov, b_ov, candidates)
    diff = candidates & ~antialiased

    outside = np.ones((height, width), dtype=bool)
    outside[:oh, :ow] = False
    mismatch_count = int(np.count_nonzero(diff)) + int(np.count_nonzero(outside))

    if options.diff_mask:
        out = np.zeros((height, width, 4), dtype=np.uint8)
    else:
        out = np.full((height, width, 4), 255, dtype=np.uint8)
        gray = np.clip(np.rint(_gray_pixels(a, options.alpha)), 0, 255).astype(np.uint8)
        out[:ha, :wa, 0] = gray
        out[:ha, :wa, 1] = gray
        out[:ha, :wa, 2] = gray
        out[:ha, :wa, 3] = 255
        region = out[:oh, :ow]
        region[antialiased] = (*options.aa_color, 255)

    region = out[:oh, :ow]
    region[diff] = (*options.diff_color, 255)
    if options.diff_color_alt is not None:
        region[diff & (delta < 0)] = (*options.diff_color_alt, 255)
    out[outside] = (*options.diff_color, 255)

    if (wa, ha) != (wb, hb):
        logger.debug("Dimension mismatch %dx%d vs %dx%d", wa, ha, wb, hb)

    return PixelDiff(
        mismatch_count=mismatch_count,
        width=width,
        height=height,
        overlay=Image.fromarray(out),
    )


def compare_files(
    path_a: str | Path,
    path_b: str | Path,
    options: PixelmatchOptions | None = None,
    detector: AntialiasDetector | None = None,
) -> tuple[PixelDiff, tuple[int, int], tuple[int, int]]:
    """Decode two image files and compare them. Returns the diff and both (width, height) sizes."""
    image_a = load_image(path_a)
    image_b = load_image(path_b)
    try:
        diff = compare_images(image_a, image_b, options, detector)
        return diff, image_a.size, image_b.size
    finally:
        image_a.close()
        image_b.close()
