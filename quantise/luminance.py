# quantise/luminance.py
from __future__ import annotations

"""
Luminance extraction.

greyscale(pixel)        : one RGB(A) pixel -> u8 luminance
luminance_image(image)  : whole image -> uint8 [H,W] luminance plane

Both evaluate trunc(0.299 R + 0.587 G + 0.114 B) in float32 so the scalar and
vectorised paths agree bit for bit. Alpha is ignored. Single channel images
are already luminance and pass through unchanged.
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .constants import LUMA_WEIGHTS, PARALLEL_MIN_ROWS
from .core_types import ImageLike, PixelLike, U8Grey, U8Image, as_image_array
from .errors import InvalidArgument
from .utils import split_rows_into_parts

_W = np.array(LUMA_WEIGHTS, dtype=np.float32)


def _luma_f32(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> np.ndarray:
    lum = _W[0] * r.astype(np.float32) + _W[1] * g.astype(np.float32)
    lum = lum + _W[2] * b.astype(np.float32)
    return np.clip(lum, 0.0, 255.0).astype(np.uint8)


def greyscale(pixel: PixelLike) -> int:
    """Luminance of a single pixel: an int (already grey) or an RGB/RGBA sequence."""
    if isinstance(pixel, (int, np.integer)):
        v = int(pixel)
        if v < 0 or v > 255:
            raise InvalidArgument(f"grey value {v} outside [0, 255]")
        return v
    px = np.asarray(pixel, dtype=np.uint8).reshape(-1)
    if px.size < 3:
        raise InvalidArgument("pixel needs at least 3 channels")
    return int(_luma_f32(px[0:1], px[1:2], px[2:3])[0])


def _luminance_rows(rgb: U8Image) -> U8Grey:
    return _luma_f32(rgb[..., 0], rgb[..., 1], rgb[..., 2])


def luminance_image(image: ImageLike, workers: int = 1) -> U8Grey:
    """
    Luminance plane of an image.

    Args:
      image  : uint8 [H,W], [H,W,3], [H,W,4] or a Pillow image
      workers: threads for row-chunked conversion of large images
    Returns:
      uint8 [H,W]
    """
    arr = as_image_array(image)
    if arr.ndim == 2:
        return arr
    H = int(arr.shape[0])
    if workers <= 1 or H < PARALLEL_MIN_ROWS:
        return _luminance_rows(arr)
    out = np.empty(arr.shape[:2], dtype=np.uint8)
    with ThreadPoolExecutor(max_workers=workers) as ex:
        futs = {
            (s, e): ex.submit(_luminance_rows, arr[s:e])
            for s, e in split_rows_into_parts(H, workers)
        }
        for (s, e), fu in futs.items():
            out[s:e] = fu.result()
    return out


__all__ = ["greyscale", "luminance_image"]
