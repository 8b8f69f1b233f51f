# quantise/__init__.py
"""
quantise package.

Purpose:
  Reduce an image to M greyscale luminance levels found by iterative
  histogram partitioning, then remap every pixel to its nearest level.
  See quantise_image.py for the CLI.

Public API:
  palette        : discover the M-level luminance palette of an image.
  quantise       : palette + remap in one call, returns uint8 [H,W].
  remap          : apply an existing palette to an image.
  solve          : run the threshold solver on a prebuilt histogram.
  build_histogram: luminance histogram, "dense" (array) or "sparse" (dict).
  greyscale      : luminance of one pixel; luminance_image for a whole image.
  errors         : QuantiseError, InvalidArgument, NonConvergence.

Quick start:
  from quantise import palette, quantise
  levels = palette(rgba, 4)            # 4 ints, darkest segment first
  grey = quantise(rgba, 4, strategy="sparse")
"""

__version__ = "0.2.0"

from . import constants
from . import core_types
from . import utils

from .errors import InvalidArgument, NonConvergence, QuantiseError
from .luminance import greyscale, luminance_image
from .histogram import (
    DenseHistogram,
    Histogram,
    SparseHistogram,
    build_histogram,
)
from .solver import initial_thresholds, iter_solve, solve
from .palette import STRATEGIES, palette, palette_from_histogram
from .remap import level_usage, nearest_lookup, quantise, remap

__all__ = [
    "__version__",
    "constants",
    "core_types",
    "utils",
    # errors
    "QuantiseError",
    "InvalidArgument",
    "NonConvergence",
    # luminance / histogram
    "greyscale",
    "luminance_image",
    "Histogram",
    "SparseHistogram",
    "DenseHistogram",
    "build_histogram",
    # solver / palette
    "initial_thresholds",
    "iter_solve",
    "solve",
    "STRATEGIES",
    "palette",
    "palette_from_histogram",
    # remap
    "nearest_lookup",
    "remap",
    "quantise",
    "level_usage",
]
