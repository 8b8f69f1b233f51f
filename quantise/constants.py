"""
Global constants and tunables used across the project.

- Luminance weights and the representable luminance range
- Threshold solver limits
- Threading and CLI defaults
"""
from __future__ import annotations

from typing import FrozenSet, Tuple

# =========================
# Luminance
# =========================
# Rec. 601 luma weights, evaluated in float32 and truncated to u8.
LUMA_WEIGHTS: Tuple[float, float, float] = (0.299, 0.587, 0.114)

# Number of representable luminance values (0..255).
LEVEL_COUNT: int = 256

# Upper outer bound of the threshold vector (max luminance + 1).
THRESHOLD_CEILING: int = LEVEL_COUNT

# =========================
# Threshold solver
# =========================
# The midpoint update has no convergence proof for adversarial histograms.
MAX_ITERATIONS: int = 500

# Largest palette that still gives every segment a distinct luminance.
MAX_LEVELS: int = LEVEL_COUNT

# =========================
# Strategies / threading
# =========================
DEFAULT_STRATEGY: str = "dense"

# Below this many rows a thread pool costs more than it saves.
PARALLEL_MIN_ROWS: int = 256

# =========================
# CLI
# =========================
IMAGE_EXTENSIONS: FrozenSet[str] = frozenset(
    {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif"}
)
OUTPUT_SUFFIX_FMT: str = "_q{levels}"

__all__ = [
    "LUMA_WEIGHTS",
    "LEVEL_COUNT",
    "THRESHOLD_CEILING",
    "MAX_ITERATIONS",
    "MAX_LEVELS",
    "DEFAULT_STRATEGY",
    "PARALLEL_MIN_ROWS",
    "IMAGE_EXTENSIONS",
    "OUTPUT_SUFFIX_FMT",
]
