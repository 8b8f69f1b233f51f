#!/usr/bin/env python3
"""
bench_palette.py
Time palette discovery for both histogram strategies over M = 2..16.

Usage:
  python benchmarks/bench_palette.py [IMAGE] [--min-levels 2] [--max-levels 16] [--repeat 5]

Without IMAGE a 512x512 synthetic RGBA gradient with mild noise is used.
Run from an installed checkout (pip install -e .) so the package imports.
"""

from __future__ import annotations

import argparse
import time
from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np

from quantise.histogram import HISTOGRAMS
from quantise.image_io import load_image
from quantise.palette import palette
from quantise.utils import format_seconds_compact, log, print_banner, warn


def synthetic_image(height: int = 512, width: int = 512, seed: int = 7) -> np.ndarray:
    """Horizontal RGB gradient plus uniform noise, fully opaque."""
    rng = np.random.default_rng(seed)
    ramp = np.linspace(0, 255, width, dtype=np.float32)[None, :, None]
    base = np.broadcast_to(ramp, (height, width, 3))
    noise = rng.uniform(-12.0, 12.0, size=(height, width, 3)).astype(np.float32)
    rgb = np.clip(base + noise, 0, 255).astype(np.uint8)
    alpha = np.full((height, width, 1), 255, dtype=np.uint8)
    return np.concatenate([rgb, alpha], axis=-1)


def _best_of(fn, repeat: int) -> float:
    best = float("inf")
    for _ in range(repeat):
        t0 = time.perf_counter()
        fn()
        best = min(best, time.perf_counter() - t0)
    return best


def run(image: np.ndarray, levels: range, repeat: int) -> List[Tuple[int, Dict[str, float]]]:
    rows: List[Tuple[int, Dict[str, float]]] = []
    for m in levels:
        timings: Dict[str, float] = {}
        results = {}
        for name in sorted(HISTOGRAMS):
            results[name] = palette(image, m, strategy=name)
            timings[name] = _best_of(lambda: palette(image, m, strategy=name), repeat)
        if len({tuple(v) for v in results.values()}) != 1:
            warn(f"M={m}: strategies disagree: {results}")
        rows.append((m, timings))
    return rows


def main() -> None:
    parser = argparse.ArgumentParser(prog="bench_palette")
    parser.add_argument("image", type=Path, nargs="?", default=None)
    parser.add_argument("--min-levels", type=int, default=2)
    parser.add_argument("--max-levels", type=int, default=16)
    parser.add_argument("--repeat", type=int, default=5)
    args = parser.parse_args()

    image = load_image(args.image) if args.image else synthetic_image()
    print_banner(
        f"Palette  {image.shape[1]}x{image.shape[0]}  best of {args.repeat}"
    )
    names = sorted(HISTOGRAMS)
    log("   M  " + "  ".join(f"{n:>10}" for n in names))
    for m, timings in run(image, range(args.min_levels, args.max_levels + 1), args.repeat):
        cells = "  ".join(f"{format_seconds_compact(timings[n]):>10}" for n in names)
        log(f"  {m:2d}  {cells}")


if __name__ == "__main__":
    main()
