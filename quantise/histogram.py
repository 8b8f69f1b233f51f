# quantise/histogram.py
from __future__ import annotations

"""
Luminance histograms.

Two interchangeable representations behind one contract:

  SparseHistogram : dict-backed, only observed luminance values are stored
  DenseHistogram  : fixed 256-slot int64 buffer, index == luminance value

Both support increment / items / count / total / mean / merge and produce
identical results for the same pixels. The threshold solver only talks to the
Histogram interface, so either can be plugged in.
"""

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterator, Mapping, Optional, Tuple, Type, TypeVar

import numpy as np

from .constants import DEFAULT_STRATEGY, LEVEL_COUNT, PARALLEL_MIN_ROWS
from .core_types import ImageLike, U8Grey, coerce_level
from .errors import InvalidArgument
from .luminance import luminance_image
from .utils import split_rows_into_parts

H = TypeVar("H", bound="Histogram")


class Histogram(ABC):
    """Total mapping luminance (0..255) -> pixel count; absent values count 0."""

    strategy: str = ""

    @classmethod
    def empty(cls: Type[H]) -> H:
        return cls()

    @classmethod
    @abstractmethod
    def from_luminance(cls: Type[H], lum: U8Grey) -> H:
        """Count every value of a uint8 luminance plane."""

    @abstractmethod
    def increment(self, value: int, count: int = 1) -> None:
        """Add count occurrences of luminance value."""

    @abstractmethod
    def count(self, value: int) -> int:
        """Occurrences of luminance value (0 when never seen)."""

    @abstractmethod
    def items(self) -> Iterator[Tuple[int, int]]:
        """Yield (luminance, count) for every bucket with count > 0."""

    def total(self) -> int:
        return sum(v for _k, v in self.items())

    def distinct(self) -> int:
        """Number of luminance values with a non-zero count."""
        return sum(1 for _ in self.items())

    def mean(self) -> int:
        """
        Occurrence-weighted mean luminance, floored.

        Returns 0 for an empty histogram. Unpopulated segments are normal when
        the level count exceeds the number of distinct luminance values.
        """
        weighted = 0
        total = 0
        for k, v in self.items():
            weighted += k * v
            total += v
        if total == 0:
            return 0
        return weighted // total

    def merge(self: H, other: "Histogram") -> H:
        """Add another histogram's counts into this one (order independent)."""
        for k, v in other.items():
            self.increment(k, v)
        return self

    def as_dict(self) -> Dict[int, int]:
        return dict(sorted(self.items()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Histogram):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(distinct={self.distinct()}, total={self.total()})"
        )


def _check_count(count: int) -> int:
    c = int(count)
    if c < 0:
        raise InvalidArgument(f"histogram count must be >= 0, got {c}")
    return c


class SparseHistogram(Histogram):
    """Dict-backed histogram; only non-zero buckets are materialised."""

    strategy = "sparse"

    def __init__(self, counts: Optional[Mapping[int, int]] = None) -> None:
        self._counts: Dict[int, int] = {}
        if counts:
            for k, v in counts.items():
                self.increment(k, v)

    @classmethod
    def from_luminance(cls, lum: U8Grey) -> "SparseHistogram":
        values, counts = np.unique(np.asarray(lum, dtype=np.uint8), return_counts=True)
        hist = cls()
        hist._counts = {int(k): int(v) for k, v in zip(values.tolist(), counts.tolist())}
        return hist

    def increment(self, value: int, count: int = 1) -> None:
        k = coerce_level(value)
        c = _check_count(count)
        if c == 0:
            return
        self._counts[k] = self._counts.get(k, 0) + c

    def count(self, value: int) -> int:
        return self._counts.get(coerce_level(value), 0)

    def items(self) -> Iterator[Tuple[int, int]]:
        return iter(list(self._counts.items()))

    def total(self) -> int:
        return sum(self._counts.values())

    def distinct(self) -> int:
        return len(self._counts)


class DenseHistogram(Histogram):
    """Fixed-size histogram: slot k holds the count for luminance k."""

    strategy = "dense"

    def __init__(self, counts: Optional[np.ndarray] = None) -> None:
        if counts is None:
            self._counts = np.zeros(LEVEL_COUNT, dtype=np.int64)
        else:
            arr = np.asarray(counts, dtype=np.int64).reshape(-1)
            if arr.shape[0] != LEVEL_COUNT:
                raise InvalidArgument(
                    f"dense histogram needs {LEVEL_COUNT} slots, got {arr.shape[0]}"
                )
            if np.any(arr < 0):
                raise InvalidArgument("histogram counts must be >= 0")
            self._counts = arr.copy()

    @classmethod
    def from_luminance(cls, lum: U8Grey) -> "DenseHistogram":
        flat = np.asarray(lum, dtype=np.uint8).reshape(-1)
        return cls(np.bincount(flat, minlength=LEVEL_COUNT))

    def increment(self, value: int, count: int = 1) -> None:
        self._counts[coerce_level(value)] += _check_count(count)

    def count(self, value: int) -> int:
        return int(self._counts[coerce_level(value)])

    def items(self) -> Iterator[Tuple[int, int]]:
        for k in np.flatnonzero(self._counts).tolist():
            yield k, int(self._counts[k])

    def total(self) -> int:
        return int(self._counts.sum())

    def distinct(self) -> int:
        return int(np.count_nonzero(self._counts))

    def mean(self) -> int:
        total = self.total()
        if total == 0:
            return 0
        weighted = int(np.dot(np.arange(LEVEL_COUNT, dtype=np.int64), self._counts))
        return weighted // total

    def merge(self, other: Histogram) -> "DenseHistogram":
        if isinstance(other, DenseHistogram):
            self._counts += other._counts
            return self
        return super().merge(other)

    def as_array(self) -> np.ndarray:
        return self._counts.copy()


HISTOGRAMS: Dict[str, Type[Histogram]] = {
    SparseHistogram.strategy: SparseHistogram,
    DenseHistogram.strategy: DenseHistogram,
}


def histogram_class(strategy: str) -> Type[Histogram]:
    """Look up a histogram representation by strategy name."""
    try:
        return HISTOGRAMS[strategy]
    except KeyError:
        known = ", ".join(sorted(HISTOGRAMS))
        raise InvalidArgument(
            f"unknown histogram strategy {strategy!r} (expected one of: {known})"
        ) from None


def build_histogram(
    image: ImageLike, strategy: str = DEFAULT_STRATEGY, workers: int = 1
) -> Histogram:
    """
    Count the luminance of every pixel.

    Args:
      image   : uint8 [H,W], [H,W,3], [H,W,4] or a Pillow image
      strategy: "sparse" or "dense"
      workers : threads for row-partitioned counting; partial histograms are
                merged additively, so the result does not depend on it
    Returns:
      Histogram whose counts sum to H*W. A zero-area image gives all zeros.
    """
    cls = histogram_class(strategy)
    lum = luminance_image(image, workers=workers)
    height = int(lum.shape[0])
    if workers <= 1 or height < PARALLEL_MIN_ROWS:
        return cls.from_luminance(lum)

    hist = cls.empty()
    with ThreadPoolExecutor(max_workers=workers) as ex:
        futs = [
            ex.submit(cls.from_luminance, lum[s:e])
            for s, e in split_rows_into_parts(height, workers)
        ]
        for fu in futs:
            hist.merge(fu.result())
    return hist


__all__ = [
    "Histogram",
    "SparseHistogram",
    "DenseHistogram",
    "HISTOGRAMS",
    "histogram_class",
    "build_histogram",
]
