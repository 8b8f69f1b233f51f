# quantise/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Union

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from .errors import InvalidArgument

# Basic aliases

U8Image = NDArray[np.uint8]  # (H, W, 3|4) RGB(A), or (H, W) already greyscale
U8Grey = NDArray[np.uint8]  # (H, W) luminance / quantised output
PixelLike = Union[int, Tuple[int, ...], List[int], NDArray[np.uint8]]
ImageLike = Union[U8Image, Image.Image]

Thresholds = List[int]  # t[0..M], t[0] = 0, t[M] = 256
Averages = List[int]  # segment means for segments 1..M
PaletteLevels = List[int]  # ordered luminance palette, segment 1 first

# Value objects


@dataclass(frozen=True)
class SolverState:
    """Snapshot taken after one solver iteration."""

    iteration: int
    thresholds: Tuple[int, ...]
    averages: Tuple[int, ...]  # segments 1..M
    converged: bool = False


@dataclass(frozen=True)
class SolveResult:
    """Fixed point reached by the threshold solver."""

    thresholds: Tuple[int, ...]
    averages: Tuple[int, ...]  # segments 1..M
    iterations: int
    history: Tuple[Tuple[int, ...], ...] = field(default=(), repr=False)

    @property
    def levels(self) -> int:
        return len(self.averages)

    @property
    def palette(self) -> PaletteLevels:
        return list(self.averages)


# Small helpers


def assert_u8_image(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W), (H,W,3) or (H,W,4) image and return it typed as U8Image."""
    if image.dtype != np.uint8:
        raise TypeError(f"expected uint8 image, got {image.dtype}")
    if image.ndim == 2:
        return image  # type: ignore[return-value]
    if image.ndim != 3 or image.shape[-1] not in (3, 4):
        raise TypeError("expected uint8 (H,W), (H,W,3) or (H,W,4) image")
    return image  # type: ignore[return-value]


def as_image_array(image: ImageLike) -> U8Image:
    """
    Coerce a Pillow image or NumPy array into a validated uint8 array.

    Greyscale Pillow modes ("L", "LA") stay single channel so their values are
    used as luminance directly. Everything else is converted to RGBA.
    """
    if isinstance(image, Image.Image):
        if image.mode in ("L", "LA"):
            arr = np.array(image.getchannel(0), dtype=np.uint8)
        else:
            arr = np.array(image.convert("RGBA"), dtype=np.uint8)
        return assert_u8_image(arr)
    return assert_u8_image(np.asarray(image))


def image_size(image: U8Image) -> Tuple[int, int]:
    """(height, width) of a validated image array."""
    return int(image.shape[0]), int(image.shape[1])


def coerce_level(value: int, what: str = "luminance") -> int:
    """Return value as a plain int, rejecting anything outside [0, 255]."""
    v = int(value)
    if v < 0 or v > 255:
        raise InvalidArgument(f"{what} {v} outside [0, 255]")
    return v


__all__ = [
    # aliases / types
    "U8Image",
    "U8Grey",
    "PixelLike",
    "ImageLike",
    "Thresholds",
    "Averages",
    "PaletteLevels",
    # value objects
    "SolverState",
    "SolveResult",
    # helpers
    "assert_u8_image",
    "as_image_array",
    "image_size",
    "coerce_level",
]
