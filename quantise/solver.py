# quantise/solver.py
from __future__ import annotations

"""
Threshold solver.

Finds M luminance levels by iterating three steps over a histogram until the
threshold vector stops changing:

  1) assign every bucket to the segment (t[i-1], t[i]] holding it;
     luminance 0 always goes to segment 1
  2) average each segment (floored weighted mean, 0 when empty)
  3) move each inner threshold to the midpoint of its neighbouring averages

t[0] = 0 and t[M] = 256 never move. Segments are rebuilt from scratch every
pass. The loop is capped at max_iterations and raises NonConvergence beyond.
"""

import operator
from bisect import bisect_left
from typing import Iterator, List, Sequence

from .constants import MAX_ITERATIONS, MAX_LEVELS, THRESHOLD_CEILING
from .core_types import Averages, SolveResult, SolverState, Thresholds
from .errors import InvalidArgument, NonConvergence
from .histogram import Histogram
from .utils import debug_log


def validate_levels(levels: int) -> int:
    """Return levels as an int in [1, 256] or raise InvalidArgument."""
    if isinstance(levels, bool):
        raise InvalidArgument("level count must be an integer, got bool")
    try:
        m = operator.index(levels)
    except TypeError:
        raise InvalidArgument(
            f"level count must be an integer, got {type(levels).__name__}"
        ) from None
    if m < 1:
        raise InvalidArgument(f"level count must be >= 1, got {m}")
    if m > MAX_LEVELS:
        raise InvalidArgument(f"level count must be <= {MAX_LEVELS}, got {m}")
    return m


def initial_thresholds(levels: int) -> Thresholds:
    """Uniform partition: t[i] = floor(i * 256 / M) for i in 0..=M."""
    m = validate_levels(levels)
    return [(i * THRESHOLD_CEILING) // m for i in range(m + 1)]


def segment_index(thresholds: Sequence[int], value: int) -> int:
    """
    Segment i (1..M) whose range (t[i-1], t[i]] contains value.

    Luminance 0 cannot satisfy t[0] < 0 and is pinned to segment 1.
    Requires a non-decreasing threshold vector.
    """
    if value == 0:
        return 1
    return bisect_left(thresholds, value, 1, len(thresholds) - 1)


def assign_segments(
    histogram: Histogram, thresholds: Sequence[int]
) -> List[Histogram]:
    """
    Split histogram buckets into fresh per-segment histograms.

    Index 0 is unused so segment i lives at position i.
    """
    levels = len(thresholds) - 1
    segments = [histogram.empty() for _ in range(levels + 1)]
    for k, v in histogram.items():
        segments[segment_index(thresholds, k)].increment(k, v)
    return segments


def rethreshold(thresholds: Sequence[int], averages: Sequence[int]) -> Thresholds:
    """
    Midpoints between adjacent segment averages.

    averages[j] is the mean of segment j + 1. An empty segment averages 0,
    which can put a midpoint below its left neighbour; such midpoints are
    raised to the neighbour so the vector stays non-decreasing.
    """
    levels = len(thresholds) - 1
    t = list(thresholds)
    for i in range(1, levels):
        t[i] = max((averages[i - 1] + averages[i]) // 2, t[i - 1])
    return t


def iter_solve(
    histogram: Histogram,
    levels: int,
    max_iterations: int = MAX_ITERATIONS,
) -> Iterator[SolverState]:
    """
    Yield the solver state after each iteration; the last one has converged=True.

    Raises NonConvergence if no fixed point is reached in max_iterations.
    """
    t = initial_thresholds(levels)
    if max_iterations < 1:
        raise InvalidArgument(f"max_iterations must be >= 1, got {max_iterations}")

    for iteration in range(1, max_iterations + 1):
        segments = assign_segments(histogram, t)
        averages: Averages = [seg.mean() for seg in segments[1:]]
        new_t = rethreshold(t, averages)
        converged = new_t == t
        t = new_t
        yield SolverState(
            iteration=iteration,
            thresholds=tuple(t),
            averages=tuple(averages),
            converged=converged,
        )
        if converged:
            return

    raise NonConvergence(max_iterations, t)


def solve(
    histogram: Histogram,
    levels: int,
    max_iterations: int = MAX_ITERATIONS,
    *,
    debug: bool = False,
) -> SolveResult:
    """
    Run the threshold solver to its fixed point.

    Args:
      histogram     : any Histogram representation
      levels        : M, number of palette levels (1..256)
      max_iterations: safety cap on solver passes
      debug         : print one line per iteration and a summary
    Returns:
      SolveResult with the final thresholds t[0..M] and averages for
      segments 1..M, plus the threshold history.
    """
    states: List[SolverState] = []
    for state in iter_solve(histogram, levels, max_iterations):
        if debug:
            debug_log(
                f"solver iter {state.iteration}: t={list(state.thresholds)} "
                f"avg={list(state.averages)}"
            )
        states.append(state)
    last = states[-1]
    if debug:
        debug_log(
            f"solver converged in {last.iteration} iteration(s) "
            f"[{histogram.strategy}, M={levels}]"
        )
    return SolveResult(
        thresholds=last.thresholds,
        averages=last.averages,
        iterations=last.iteration,
        history=tuple(s.thresholds for s in states),
    )


__all__ = [
    "validate_levels",
    "initial_thresholds",
    "segment_index",
    "assign_segments",
    "rethreshold",
    "iter_solve",
    "solve",
]
