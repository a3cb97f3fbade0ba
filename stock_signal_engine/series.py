"""Rolling-window primitives shared by every indicator.

A ``Series`` keeps the defined values apart from the count of leading
undefined positions (``warmup``) instead of storing NaN placeholders, so
arithmetic on two series only ever touches defined values:

    len(series) == series.warmup + len(series.values)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

@dataclass(frozen=True, eq=False)
class Series:
    values: np.ndarray
    warmup: int = 0

    def __post_init__(self) -> None:
        arr = np.array(self.values, dtype=float)
        arr.setflags(write=False)
        object.__setattr__(self, "values", arr)
        if self.warmup < 0:
            raise ValueError("warmup must be >= 0")

    @classmethod
    def undefined(cls, length: int) -> "Series":
        return cls(np.empty(0), int(length))

    def __len__(self) -> int:
        return self.warmup + len(self.values)

    @property
    def is_defined(self) -> bool:
        return len(self.values) > 0

    def to_array(self) -> np.ndarray:
        """Full-length array with NaN in the warm-up prefix."""
        return np.concatenate((np.full(self.warmup, np.nan), self.values))

    def at(self, i: int) -> Optional[float]:
        n = len(self)
        if i < 0:
            i += n
        if i < 0 or i >= n:
            raise IndexError(i)
        if i < self.warmup:
            return None
        return float(self.values[i - self.warmup])

    def last(self, offset: int = 1) -> Optional[float]:
        """Value at ``len - offset``; ``last()`` is the latest bar."""
        return self.at(-offset)

    def shift(self, count: int) -> "Series":
        """Rebase onto a parent that is ``count`` positions longer."""
        return Series(self.values, self.warmup + int(count))

    def map(self, fn: Callable[[np.ndarray], np.ndarray]) -> "Series":
        return Series(fn(self.values), self.warmup)

    def over_defined(self, fn: Callable[[np.ndarray], "Series"]) -> "Series":
        """Run a series function on the defined values only and re-align the result."""
        return fn(self.values).shift(self.warmup)

    def _combine(self, other: "Series", op: Callable[[np.ndarray, np.ndarray], np.ndarray]) -> "Series":
        if len(self) != len(other):
            raise ValueError(f"series length mismatch: {len(self)} != {len(other)}")
        w = max(self.warmup, other.warmup)
        a = self.values[w - self.warmup :]
        b = other.values[w - other.warmup :]
        return Series(op(a, b), w)

    def __sub__(self, other: "Series") -> "Series":
        return self._combine(other, np.subtract)

    def __add__(self, other: "Series") -> "Series":
        return self._combine(other, np.add)

    def __repr__(self) -> str:
        return f"Series(len={len(self)}, warmup={self.warmup})"

def _check_period(period: int) -> int:
    p = int(period)
    if p <= 0:
        raise ValueError(f"period must be positive, got {period}")
    return p

def rolling_sma(values: Sequence[float], period: int) -> Series:
    """Simple moving average aligned to each index (undefined until enough bars).

    Each window is averaged as offsets from its first value, so a window of
    equal prices averages to exactly that price.
    """
    period = _check_period(period)
    arr = np.asarray(values, dtype=float)
    n = len(arr)
    if n < period:
        return Series.undefined(n)
    windows = sliding_window_view(arr, period)
    base = windows[:, 0]
    out = base + (windows - base[:, None]).sum(axis=1) / period
    return Series(out, period - 1)

def ema(values: Sequence[float], period: int) -> Series:
    """Exponential moving average seeded with the plain mean of the first `period` values.

    The seed sits at index period-1 and is not itself a recursive EMA step.
    """
    period = _check_period(period)
    arr = np.asarray(values, dtype=float)
    n = len(arr)
    if n < period:
        return Series.undefined(n)

    k = 2.0 / (period + 1)
    out = np.empty(n - period + 1)
    out[0] = float(np.sum(arr[:period])) / period
    for j in range(1, len(out)):
        out[j] = (arr[period - 1 + j] - out[j - 1]) * k + out[j - 1]
    return Series(out, period - 1)
