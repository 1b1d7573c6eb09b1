"""
Run Extraction

Finds maximal runs of recurrence points along a diagonal. Each run is a
diagonal line; its start/end positions (0-based, inclusive) are kept
together with the diagonal length so the border classifier can tell
whether the line was cut by the edge of the plot.
"""

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .diagonal import diagonal


@dataclass(frozen=True)
class Line:
    """A maximal run of recurrence points on diagonal `offset`."""
    offset: int
    start: int
    end: int
    diagonal_length: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def size(self) -> int:
        """Size n of the recurrence plot the line was read from."""
        return self.diagonal_length + abs(self.offset)

    @property
    def first_cell(self) -> Tuple[int, int]:
        return self._cell(self.start)

    @property
    def last_cell(self) -> Tuple[int, int]:
        return self._cell(self.end)

    def mirrored(self) -> 'Line':
        """The same line reflected across the line of identity."""
        return Line(-self.offset, self.start, self.end, self.diagonal_length)

    def _cell(self, position: int) -> Tuple[int, int]:
        if self.offset >= 0:
            return position, position + self.offset
        return position - self.offset, position


def find_runs(seq) -> List[Tuple[int, int]]:
    """
    Find all maximal runs of True in a 1-D boolean sequence.

    The sequence is padded with False on both sides, so runs touching
    either boundary (or spanning the whole sequence) are found as well.

    Parameters
    ----------
    seq : array-like of bool, shape (L,)

    Returns
    -------
    runs : list of (start, end)
        0-based inclusive positions, in order of occurrence

    Examples
    --------
    >>> find_runs([0, 1, 1, 0, 1, 1, 1, 0])
    [(1, 2), (4, 6)]
    """
    d = np.asarray(seq, dtype=bool)
    if d.ndim != 1:
        raise ValueError(f"Expected a 1-D sequence, got shape {d.shape}")

    padded = np.concatenate(([0], d.astype(np.int8), [0]))
    edges = np.diff(padded)

    starts = np.flatnonzero(edges == 1)
    ends = np.flatnonzero(edges == -1) - 1

    return [(int(s), int(e)) for s, e in zip(starts, ends)]


def lines_on_diagonal(R: np.ndarray, k: int) -> List[Line]:
    """All lines on the diagonal at offset k. Empty if the diagonal is all False."""
    d = diagonal(R, k)
    if not d.any():
        return []
    return [Line(k, s, e, len(d)) for s, e in find_runs(d)]


def line_lengths(lines: List[Line]) -> List[int]:
    """Raw lengths of the given lines."""
    return [line.length for line in lines]
