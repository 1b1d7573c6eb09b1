"""
Diagonal Traversal

Reads single diagonals out of a recurrence plot. Offsets follow the numpy
convention: k > 0 reads R[i, i+k] (upper triangle), k < 0 reads R[i-k, i]
(lower triangle), k = 0 is the line of identity.
"""

from typing import List

import numpy as np

from borderline.errors import MalformedRecurrencePlotError


def validate_recurrence_plot(R) -> np.ndarray:
    """
    Check that R is a square binary matrix and return it as a boolean array.

    Integer or float matrices are accepted as long as every entry is 0 or 1
    (recurrence matrices are often stored as int8).

    Raises
    ------
    MalformedRecurrencePlotError
        If R is not 2-D, not square, empty, or holds non-binary values.
    """
    R = np.asarray(R)

    if R.ndim != 2:
        raise MalformedRecurrencePlotError(
            f"Recurrence plot must be 2-D, got {R.ndim} dimension(s)"
        )
    if R.shape[0] != R.shape[1]:
        raise MalformedRecurrencePlotError(
            f"Recurrence plot must be square, got shape {R.shape}"
        )
    if R.size == 0:
        raise MalformedRecurrencePlotError("Recurrence plot is empty")

    if R.dtype == bool:
        return R

    if not (np.issubdtype(R.dtype, np.integer) or np.issubdtype(R.dtype, np.floating)):
        raise MalformedRecurrencePlotError(
            f"Recurrence plot must be boolean, got dtype {R.dtype}"
        )

    binary = (R == 0) | (R == 1)
    if not binary.all():
        bad = R[~binary][0]
        raise MalformedRecurrencePlotError(
            f"Recurrence plot must only contain 0/1 values, found {bad!r}"
        )

    return R.astype(bool)


def is_symmetric(R: np.ndarray) -> bool:
    """True if R equals its transpose."""
    return bool(np.array_equal(R, R.T))


def diagonal(R: np.ndarray, k: int) -> np.ndarray:
    """
    Return the diagonal of R at offset k (length n - |k|).

    Uses direct fancy indexing rather than np.diag so the result is a
    fresh array for every offset.
    """
    n = R.shape[0]
    if abs(k) > n - 1:
        raise ValueError(f"Offset {k} outside [-{n - 1}, {n - 1}] for n={n}")

    i = np.arange(n - abs(k))
    if k >= 0:
        return R[i, i + k]
    return R[i - k, i]


def diagonal_offsets(n: int, symmetric: bool) -> List[int]:
    """
    Offsets to traverse for line extraction, line of identity excluded.

    A symmetric RP needs only the lower triangle; its lines are mirrored.
    """
    if symmetric:
        return list(range(-(n - 1), 0))
    return [k for k in range(-(n - 1), n) if k != 0]
