# quantise/image_io.py
from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

"""
Image I/O helpers: load as RGBA in sRGB (or single-channel grey), save grey.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except ImportError:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]

from .core_types import U8Grey, U8Image, as_image_array

_GREY_MODES = ("1", "L", "LA", "I", "I;16", "F")


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is None:
                return im.convert("RGBA")
            return im2
        except (ImageCms.PyCMSError, OSError, ValueError):
            return im.convert("RGBA")

    return im.convert("RGBA")


def load_image(path: Path) -> U8Image:
    """
    Decode an image file.

    Greyscale files load as uint8 [H,W] so their values are used directly as
    luminance. Everything else loads as uint8 [H,W,4] RGBA in sRGB.
    Pillow errors propagate unchanged.
    """
    with Image.open(path) as im0:
        im = ImageOps.exif_transpose(im0)
        if im.mode in _GREY_MODES:
            im = im.convert("L")
        else:
            im = _convert_to_srgb_rgba(im)
    return as_image_array(np.array(im, dtype=np.uint8))


def save_image_grey(path: Path, grey: U8Grey) -> Path:
    """Write a uint8 [H,W] image as single-channel "L". PNG when no suffix is given."""
    if path.suffix == "":
        path = path.with_suffix(".png")
    arr = np.ascontiguousarray(grey, dtype=np.uint8)
    if arr.ndim != 2:
        raise TypeError("expected uint8 (H,W) greyscale image")
    Image.fromarray(arr).save(path)
    return path


def is_image_file(path: Path) -> bool:
    try:
        with Image.open(path) as im:
            im.seek(0)
            im.load()
        return True
    except (UnidentifiedImageError, OSError):
        return False


__all__ = ["load_image", "save_image_grey", "is_image_file"]
