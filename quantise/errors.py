# quantise/errors.py
"""
Error types raised by the quantiser.

QuantiseError is the common base so callers (the CLI in particular) can catch
every core failure in one place. Image decode/encode errors from Pillow are
never wrapped.
"""

from __future__ import annotations

from typing import Optional, Sequence


class QuantiseError(Exception):
    """Base class for all quantiser errors."""


class InvalidArgument(QuantiseError, ValueError):
    """Bad level count, unknown strategy, empty palette, or out-of-range value."""


class NonConvergence(QuantiseError, RuntimeError):
    """The threshold solver hit its iteration cap without reaching a fixed point."""

    def __init__(
        self, iterations: int, thresholds: Optional[Sequence[int]] = None
    ) -> None:
        self.iterations = int(iterations)
        self.thresholds = list(thresholds) if thresholds is not None else []
        super().__init__(
            f"threshold solver did not converge after {self.iterations} iterations"
        )


__all__ = ["QuantiseError", "InvalidArgument", "NonConvergence"]
