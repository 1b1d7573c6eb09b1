"""
Recurrence Plot Construction

Builds the binary recurrence matrix R[i,j] = 1 if ||x(i) - x(j)|| < e
from a phase space trajectory.

Threshold selection:
    fix: e is the distance threshold
    var: e is a global recurrence rate; the threshold is the e-quantile
         of all pairwise distances
    fan: fixed amount of nearest neighbours; every state keeps its
         round(e*N) nearest states (R is generally not symmetric)

Norms:
    euc: Euclidean distance
    max: maximum (Chebyshev) distance

References:
    Marwan, N., et al. (2007). "Recurrence plots for the analysis
    of complex systems"
    Kraemer, K. H., et al. (2018). "Recurrence threshold selection for
    obtaining robust recurrence characteristics in different embedding
    dimensions"
"""

from typing import Tuple, Union

import numpy as np
from scipy.spatial.distance import cdist

from .reconstruction import as_trajectory

NORMS = {
    'euc': 'euclidean',
    'max': 'chebyshev',
}

METHODS = ('fix', 'var', 'fan')

Threshold = Union[float, np.ndarray]


def distance_matrix(Y, norm: str = 'euc') -> np.ndarray:
    """Pairwise distances between the states of a trajectory."""
    if norm not in NORMS:
        raise ValueError(f"Unknown norm {norm!r}. Available: {', '.join(NORMS)}")
    Y = as_trajectory(Y)
    return cdist(Y, Y, metric=NORMS[norm])


def select_threshold(D: np.ndarray, e: float, method: str = 'fix') -> Threshold:
    """
    Realize the recurrence threshold for a distance matrix.

    Returns a scalar for 'fix' and 'var', and a per-row radius array for
    'fan'.
    """
    if method not in METHODS:
        raise ValueError(f"Unknown threshold method {method!r}. Available: {', '.join(METHODS)}")
    if e is None:
        raise ValueError("A recurrence threshold must be given")

    N = len(D)

    if method == 'fix':
        if e <= 0:
            raise ValueError(f"Fixed threshold must be positive, got {e}")
        return float(e)

    if method == 'var':
        if not 0 < e < 1:
            raise ValueError(f"Recurrence rate must lie in (0, 1), got {e}")
        off_diagonal = D[~np.eye(N, dtype=bool)]
        if off_diagonal.size == 0:
            return 0.0
        return float(np.quantile(off_diagonal, e))

    if not 0 < e <= 1:
        raise ValueError(f"Neighbour fraction must lie in (0, 1], got {e}")
    k = min(N - 1, max(1, int(round(e * N))))
    return np.sort(D, axis=1)[:, k]


def recurrence_plot(
    Y,
    e: float,
    method: str = 'fix',
    norm: str = 'euc',
) -> Tuple[np.ndarray, Threshold]:
    """
    Compute the recurrence plot of a trajectory.

    Parameters
    ----------
    Y : array, shape (N, m) or (N,)
        Phase space trajectory
    e : float
        Threshold, recurrence rate or neighbour fraction (see method)
    method : str
        Threshold selection: 'fix', 'var' or 'fan'
    norm : str
        'euc' or 'max'

    Returns
    -------
    R : array, shape (N, N), bool
        Recurrence plot
    threshold : float or array
        Realized threshold (per-row radii for 'fan')

    Notes
    -----
    Memory usage is O(N^2).

    Examples
    --------
    >>> x = np.sin(np.linspace(0, 4*np.pi, 200))
    >>> R, eps = recurrence_plot(x, 0.1)
    >>> R.shape
    (200, 200)
    """
    D = distance_matrix(Y, norm)
    threshold = select_threshold(D, e, method)
    return _below(D, threshold), threshold


def recurrence_count(R: np.ndarray) -> int:
    """Number of recurrence points, line of identity excluded."""
    R = np.asarray(R, dtype=bool)
    return int(R.sum() - np.trace(R))


def _below(D: np.ndarray, threshold: Threshold) -> np.ndarray:
    if np.ndim(threshold) == 0:
        return D < threshold
    return D < np.asarray(threshold)[:, np.newaxis]
