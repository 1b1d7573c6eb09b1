"""
Line Length Distributions

Turns accepted line lengths into a frequency-by-length histogram over
1..n and derives the diagonal-line RQA measures from it.

References:
    Marwan, N., et al. (2007). "Recurrence plots for the analysis
    of complex systems"
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np
import polars as pl


def line_length_histogram(lengths: Iterable[int], n: int) -> np.ndarray:
    """
    Count accepted lines per length.

    Parameters
    ----------
    lengths : iterable of int
        Accepted line lengths
    n : int
        Size of the recurrence plot

    Returns
    -------
    counts : array, shape (n,)
        counts[l - 1] is the number of lines of length l

    Examples
    --------
    >>> line_length_histogram([3, 1, 1], 4)
    array([2, 0, 1, 0])
    """
    lengths = np.asarray(list(lengths), dtype=np.int64)
    if n < 1:
        raise ValueError(f"RP size must be positive, got {n}")
    if lengths.size and (lengths.min() < 1 or lengths.max() > n):
        raise ValueError(f"Line lengths must lie in [1, {n}], got {lengths.min()}..{lengths.max()}")

    return np.bincount(lengths, minlength=n + 1)[1:]


def _check_l_min(l_min: int) -> int:
    if l_min < 1:
        raise ValueError(f"l_min must be at least 1, got {l_min}")
    return l_min


@dataclass
class LineLengthDistribution:
    """Histogram of accepted diagonal line lengths for one (RP, policy) pair."""
    counts: np.ndarray
    policy: str = ''
    border_mode: str = ''

    @classmethod
    def from_lengths(cls, lengths, n: int, policy: str = '', border_mode: str = ''):
        return cls(line_length_histogram(lengths, n), policy, border_mode)

    @property
    def n(self) -> int:
        return len(self.counts)

    @property
    def lengths(self) -> np.ndarray:
        return np.arange(1, self.n + 1)

    @property
    def total_lines(self) -> int:
        return int(self.counts.sum())

    @property
    def total_points(self) -> int:
        """Recurrence points covered by the accepted lines."""
        return int((self.lengths * self.counts).sum())

    @property
    def mean_length(self) -> float:
        """Mean accepted line length (NaN without lines)."""
        if self.total_lines == 0:
            return float('nan')
        return self.total_points / self.total_lines

    @property
    def max_length(self) -> int:
        nonzero = np.flatnonzero(self.counts)
        return int(nonzero[-1] + 1) if nonzero.size else 0

    def entropy(self, l_min: int = 2) -> float:
        """Shannon entropy of the distribution of lines with length >= l_min."""
        counts = self.counts[_check_l_min(l_min) - 1:]
        total = counts.sum()
        if total == 0:
            return 0.0
        p = counts[counts > 0] / total
        return float(-np.sum(p * np.log(p)))

    def determinism(self, n_recurrences: int, l_min: int = 2) -> float:
        """
        Fraction of recurrence points that form lines of length >= l_min.

        n_recurrences is the number of recurrence points of the plot, line
        of identity excluded. Extrapolated border lines (censi) carry points
        that lie outside the plot, so their total can exceed n_recurrences;
        the ratio is capped at 1 where that happens.
        """
        start = _check_l_min(l_min) - 1
        if n_recurrences <= 0:
            return 0.0
        points = (self.lengths[start:] * self.counts[start:]).sum()
        return float(min(1.0, points / n_recurrences))

    def summary(self, n_recurrences: Optional[int] = None, l_min: int = 2) -> dict:
        result = {
            'policy': self.policy,
            'border_mode': self.border_mode,
            'n_lines': self.total_lines,
            'mean_length': self.mean_length,
            'max_length': self.max_length,
            'entropy': self.entropy(l_min),
        }
        if n_recurrences is not None:
            result['determinism'] = self.determinism(n_recurrences, l_min)
        return result

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame({
            'length': self.lengths,
            'count': self.counts.astype(np.int64),
        })
