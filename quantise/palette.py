# quantise/palette.py
from __future__ import annotations

"""
Palette builder.

palette(image, m, strategy="dense")     -> [M luminance levels], segment order
palette_from_histogram(histogram, m)    -> same, from a prebuilt histogram
"""

import time
from typing import Dict, Type

from .constants import DEFAULT_STRATEGY, MAX_ITERATIONS
from .core_types import ImageLike, PaletteLevels
from .histogram import HISTOGRAMS, Histogram, build_histogram, histogram_class
from .solver import solve, validate_levels
from .utils import debug_log, format_seconds_compact, key_value_pairs_to_string

# Strategy name -> histogram representation. Both give identical palettes.
STRATEGIES: Dict[str, Type[Histogram]] = HISTOGRAMS


def palette_from_histogram(
    histogram: Histogram,
    levels: int,
    max_iterations: int = MAX_ITERATIONS,
    *,
    debug: bool = False,
) -> PaletteLevels:
    """Solve thresholds for a histogram and return the segment averages 1..M."""
    return solve(histogram, levels, max_iterations, debug=debug).palette


def palette(
    image: ImageLike,
    levels: int,
    strategy: str = DEFAULT_STRATEGY,
    workers: int = 1,
    *,
    max_iterations: int = MAX_ITERATIONS,
    debug: bool = False,
) -> PaletteLevels:
    """
    Discover an M-level luminance palette for an image.

    Args:
      image         : uint8 [H,W], [H,W,3], [H,W,4] or a Pillow image
      levels        : M >= 1
      strategy      : "dense" (fixed array) or "sparse" (dict) histogram
      workers       : threads for histogram construction
      max_iterations: solver safety cap
      debug         : print histogram and solver details
    Returns:
      List of exactly M ints in [0,255], segment 1 first. A zero-area image
      gives M zeros.

    Raises:
      InvalidArgument for a bad level count or strategy,
      NonConvergence if the solver hits max_iterations.
    """
    levels = validate_levels(levels)
    histogram_class(strategy)

    t0 = time.perf_counter()
    histogram = build_histogram(image, strategy=strategy, workers=workers)
    t1 = time.perf_counter()
    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Strategy", strategy),
                    ("Pixels", histogram.total()),
                    ("Distinct", histogram.distinct()),
                    ("Histogram", format_seconds_compact(t1 - t0)),
                ]
            )
        )
    levels_out = palette_from_histogram(
        histogram, levels, max_iterations, debug=debug
    )
    if debug:
        debug_log(
            f"palette M={levels}: {levels_out} "
            f"({format_seconds_compact(time.perf_counter() - t1)})"
        )
    return levels_out


__all__ = ["STRATEGIES", "palette", "palette_from_histogram"]
