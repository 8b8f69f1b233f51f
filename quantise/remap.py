# quantise/remap.py
from __future__ import annotations

"""
Remapper: apply a luminance palette to every pixel.

Each pixel's luminance is replaced by the palette entry with the smallest
absolute difference; ties go to the earliest entry in palette order. Because
luminance is 8-bit, the choice is precomputed once as a 256-entry lookup table
and the remap is a single gather.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence, Tuple

import numpy as np

from .constants import DEFAULT_STRATEGY, LEVEL_COUNT, MAX_ITERATIONS, PARALLEL_MIN_ROWS
from .core_types import ImageLike, U8Grey, coerce_level
from .errors import InvalidArgument
from .luminance import luminance_image
from .palette import palette as build_palette
from .utils import split_rows_into_parts


def nearest_lookup(palette: Sequence[int]) -> np.ndarray:
    """
    uint8 [256] table: luminance -> nearest palette value.

    np.argmin returns the first minimum, which gives first-occurrence ties.
    """
    if len(palette) == 0:
        raise InvalidArgument("palette must contain at least one level")
    levels = np.array(
        [coerce_level(p, "palette level") for p in palette], dtype=np.int16
    )
    lum = np.arange(LEVEL_COUNT, dtype=np.int16)
    dist = np.abs(lum[:, None] - levels[None, :])
    idx = np.argmin(dist, axis=1)
    return levels[idx].astype(np.uint8)


def remap(image: ImageLike, palette: Sequence[int], workers: int = 1) -> U8Grey:
    """
    Quantise an image to a given palette.

    Args:
      image  : uint8 [H,W], [H,W,3], [H,W,4] or a Pillow image
      palette: ordered luminance levels (any non-empty sequence in [0,255])
      workers: threads for row-chunked luminance and lookup
    Returns:
      uint8 [H,W] greyscale image whose values all come from the palette.
    """
    lut = nearest_lookup(palette)
    lum = luminance_image(image, workers=workers)
    height = int(lum.shape[0])
    if workers <= 1 or height < PARALLEL_MIN_ROWS:
        return lut[lum]

    out = np.empty_like(lum)

    def _rows(span: Tuple[int, int]) -> None:
        s, e = span
        out[s:e] = lut[lum[s:e]]

    with ThreadPoolExecutor(max_workers=workers) as ex:
        list(ex.map(_rows, split_rows_into_parts(height, workers)))
    return out


def quantise(
    image: ImageLike,
    levels: int,
    strategy: str = DEFAULT_STRATEGY,
    workers: int = 1,
    *,
    max_iterations: int = MAX_ITERATIONS,
    debug: bool = False,
) -> U8Grey:
    """Discover an M-level palette for image and remap every pixel to it."""
    pal = build_palette(
        image,
        levels,
        strategy=strategy,
        workers=workers,
        max_iterations=max_iterations,
        debug=debug,
    )
    return remap(image, pal, workers=workers)


def level_usage(grey: U8Grey, palette: Sequence[int]) -> List[Tuple[int, int]]:
    """
    Pixel count per palette entry, in palette order.

    Duplicate palette values report the shared count once, on their first entry.
    """
    counts = np.bincount(
        np.asarray(grey, dtype=np.uint8).reshape(-1), minlength=LEVEL_COUNT
    )
    seen = set()
    report: List[Tuple[int, int]] = []
    for p in palette:
        v = coerce_level(p, "palette level")
        report.append((v, 0 if v in seen else int(counts[v])))
        seen.add(v)
    return report


__all__ = ["nearest_lookup", "remap", "quantise", "level_usage"]
