#!/usr/bin/env python3
"""
quantise_image.py
Quantise images to M greyscale levels found by iterative histogram partitioning.

Usage:
  python quantise_image.py INPUT -c M [-o OUTPUT] [--outdir DIR] [--strategy dense|sparse]
                           [--workers N] [--jobs N] [--print-palette] [--debug]
  python quantise_image.py -i INPUT -o OUTPUT -c M

Strategies:
  dense  : 256-slot array histogram (default).
  sparse : dict histogram holding only the luminance values present.
  Both produce identical palettes; they differ only in speed and memory.

Input:
  Any Pillow-readable image, or a folder of them. Greyscale files are used as
  luminance directly; colour files are reduced with fixed Rec. 601 weights.

Output:
  Single-channel image. If OUTPUT is omitted, writes <stem>_q<M>.png next to
  INPUT (or into --outdir).
"""

from __future__ import annotations

import argparse
import io
import os
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import redirect_stdout
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from quantise.constants import DEFAULT_STRATEGY, IMAGE_EXTENSIONS, OUTPUT_SUFFIX_FMT
from quantise.core_types import image_size
from quantise.errors import QuantiseError
from quantise.histogram import HISTOGRAMS
from quantise.image_io import is_image_file, load_image, save_image_grey
from quantise.palette import palette
from quantise.remap import level_usage, remap
from quantise.utils import (
    # formatting
    format_percentage,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    # threading
    default_workers,
    # pretty logging
    debug_log,
    enable_line_buffered_stdout,
    error,
    log,
    print_banner,
    print_config_line,
    warn,
)

# CLI args & small helpers


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quantise_image",
        description="Quantise image(s) to M greyscale luminance levels.",
    )
    parser.add_argument("src", type=Path, nargs="?", help="Input image or folder")
    parser.add_argument(
        "-i", "--input", type=Path, default=None, help="Input filepath (alias of SRC)"
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=None, help="Output filepath (single file)"
    )
    parser.add_argument(
        "--outdir", type=Path, default=None, help="Output directory (optional)"
    )
    parser.add_argument(
        "-c",
        "--colours",
        type=int,
        required=True,
        help="How many discrete greyscale levels to quantise into",
    )
    parser.add_argument(
        "--strategy",
        choices=sorted(HISTOGRAMS),
        default=DEFAULT_STRATEGY,
        help="Histogram representation.",
    )
    parser.add_argument(
        "--jobs", type=int, default=2, help="Files processed in parallel"
    )
    parser.add_argument(
        "--workers", type=int, default=default_workers(), help="Internal workers"
    )
    parser.add_argument(
        "--print-palette", action="store_true", help="Print the palette and exit"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose solver details")
    return parser


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        src: Path to image or folder (from SRC or --input)
        output: optional Path for a single-file output
        outdir: optional Path for outputs
        colours: int level count M
        strategy: "dense" | "sparse"
        jobs: parallel file workers
        workers: internal threads for histogram and remap
        print_palette: bool, skip writing the image
        debug: bool for verbose solver details
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.src is not None and args.input is not None:
        parser.error("give the input either as SRC or with --input, not both")
    args.src = args.src if args.src is not None else args.input
    if args.src is None:
        parser.error("an input image or folder is required")
    if args.colours < 1:
        parser.error(f"--colours must be >= 1, got {args.colours}")
    return args


def default_output_path(src_path: Path, levels: int, outdir: Optional[Path]) -> Path:
    name = f"{src_path.stem}{OUTPUT_SUFFIX_FMT.format(levels=levels)}.png"
    return (outdir / name) if outdir else src_path.with_name(name)


def _is_output_artifact(path: Path) -> bool:
    stem = path.stem
    head, sep, tail = stem.rpartition("_q")
    return bool(head) and sep == "_q" and tail.isdigit()


# Per-file processing


def _process_single_image(
    src_path: Path,
    out_path: Optional[Path],
    levels: int,
    strategy: str,
    workers: int,
    print_only: bool,
    debug: bool,
) -> None:
    """
    Process a single image path end-to-end:
      load -> palette -> remap -> save -> report.
    """
    t_start = time.perf_counter()
    print_banner(src_path.name)

    image = load_image(src_path)
    height, width = image_size(image)
    t_loaded = time.perf_counter()
    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Loaded", f"{width}x{height}"),
                    ("Channels", 1 if image.ndim == 2 else int(image.shape[-1])),
                    ("Load", format_seconds_compact(t_loaded - t_start)),
                ]
            )
        )

    levels_out = palette(image, levels, strategy=strategy, workers=workers, debug=debug)
    t_palette = time.perf_counter()
    log(f"Palette ({strategy}, M={levels}): {levels_out}")
    if print_only:
        return

    grey = remap(image, levels_out, workers=workers)
    t_remap = time.perf_counter()

    if out_path is None:
        out_path = default_output_path(src_path, levels, None)
    written = save_image_grey(out_path, grey)
    t_saved = time.perf_counter()

    log(f"Wrote {written.name} | size={width}x{height} | levels={levels}")
    total_pixels = width * height
    log("Levels used:")
    for value, count in level_usage(grey, levels_out):
        share = count / total_pixels if total_pixels else 0.0
        log(f"  {value:3d}: {count:,}  ({format_percentage(share)})")

    if debug:
        debug_log(
            f"Total {format_total_duration_compact(t_saved - t_start)}  "
            f"(load={format_seconds_compact(t_loaded - t_start)}, "
            f"palette={format_seconds_compact(t_palette - t_loaded)}, "
            f"remap={format_seconds_compact(t_remap - t_palette)}, "
            f"save={format_seconds_compact(t_saved - t_remap)})"
        )
    else:
        log(f"Total time {format_total_duration_compact(t_saved - t_start)}")


def _process_one(
    path: Path,
    out_path: Optional[Path],
    args: argparse.Namespace,
) -> bool:
    """Process one file, reporting core and I/O errors instead of raising."""
    try:
        _process_single_image(
            path,
            out_path,
            args.colours,
            args.strategy,
            args.workers,
            args.print_palette,
            args.debug,
        )
    except (QuantiseError, OSError) as e:
        error(f"{path.name}: {e}")
        return False
    return True


def _process_one_captured(path: Path, args: argparse.Namespace) -> Tuple[str, bool]:
    """
    Process a single file with stdout capture.

    Useful for concurrent execution where output should be printed in order.
    """
    buf = io.StringIO()
    with redirect_stdout(buf):
        ok = _process_one(
            path, default_output_path(path, args.colours, args.outdir), args
        )
    return buf.getvalue(), ok


def _list_folder_images(folder: Path) -> List[Path]:
    """Decodable images in folder, skipping earlier outputs and unreadable files."""
    candidates = [
        p
        for p in folder.iterdir()
        if p.is_file()
        and p.suffix.lower() in IMAGE_EXTENSIONS
        and not _is_output_artifact(p)
    ]
    files: List[Path] = []
    for p in candidates:
        if is_image_file(p):
            files.append(p)
        else:
            warn(f"skipping unreadable image {p.name}")
    files.sort(key=lambda p: p.name.lower())
    return files


# Entry point


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    CLI entry point.

    Handles single file or folder. In folder mode supports --jobs parallelism
    while preserving readable output ordering. Returns the process exit code.
    """
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)

    print_config_line(
        "run",
        [
            ("CPU cores", os.cpu_count() or 1),
            ("Workers", args.workers),
            ("Jobs", args.jobs),
            ("Strategy", args.strategy),
            ("Levels", args.colours),
        ],
        debug=False,
    )

    src: Path = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2

    if args.outdir is not None:
        args.outdir.mkdir(parents=True, exist_ok=True)

    if not src.is_dir():
        out_path = args.output
        if out_path is None:
            out_path = default_output_path(src, args.colours, args.outdir)
        return 0 if _process_one(src, out_path, args) else 1

    if args.output is not None:
        error("--output names a single file; use --outdir with a folder")
        return 2

    files = _list_folder_images(src)
    if args.debug:
        debug_log(
            key_value_pairs_to_string([("Images", len(files)), ("Jobs", args.jobs)])
        )

    if args.jobs <= 1:
        results = [
            _process_one(p, default_output_path(p, args.colours, args.outdir), args)
            for p in files
        ]
    else:
        with ThreadPoolExecutor(max_workers=args.jobs) as ex:
            futures = [ex.submit(_process_one_captured, p, args) for p in files]
            outcomes = [f.result() for f in futures]
        print("".join(text for text, _ok in outcomes), end="", flush=True)
        results = [ok for _text, ok in outcomes]

    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
