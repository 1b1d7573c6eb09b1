"""
Tangential Motion Correction

Slowly moving or tangentially drifting trajectories produce recurrence
points between states that are merely consecutive, not recurrent. These
thicken the diagonal lines and inflate their counts. Both correctors
rebuild the recurrence plot from the trajectory and keep only a subset of
its recurrence points:

    rp_perp: perpendicular RP - keep (i, j) only if x(j) - x(i) is close
             to perpendicular to the flow direction at x(i)
    rp_iso:  isodirectional RP - keep (i, j) only if the trajectory moves
             in the same direction at i and j over tau_iso steps

References:
    Choi, J. M., et al. (1999). "Enhanced detection of the
    reentrant/recurrent motion"
    Horai, S., et al. (2002). "Isodirectional recurrence plots"
    Kraemer, K. H., & Marwan, N. (2019). "Border effect corrections for
    diagonal line based recurrence quantification analysis measures"
"""

import logging
from typing import Optional, Tuple

import numpy as np
from scipy.spatial.distance import cdist

from borderline.errors import MissingParameterError
from .reconstruction import as_trajectory
from .recurrence import NORMS, Threshold, _below, recurrence_plot, select_threshold

logger = logging.getLogger(__name__)

CORRECTIONS = ('none', 'perp', 'iso')


def flow_directions(Y: np.ndarray) -> np.ndarray:
    """Local flow direction per state: forward difference, backward at the end."""
    Y = as_trajectory(Y)
    if len(Y) < 2:
        raise ValueError("At least two states are needed to estimate flow directions")
    T = np.empty_like(Y)
    T[:-1] = Y[1:] - Y[:-1]
    T[-1] = Y[-1] - Y[-2]
    return T


def direction_vectors(Y: np.ndarray, tau_iso: int) -> np.ndarray:
    """Displacement over tau_iso steps: forward, backward for the last tau_iso states."""
    Y = as_trajectory(Y)
    N = len(Y)
    D = np.empty_like(Y)
    D[:N - tau_iso] = Y[tau_iso:] - Y[:N - tau_iso]

    tail = np.arange(N - tau_iso, N)
    D[tail] = Y[tail] - Y[np.maximum(tail - tau_iso, 0)]
    return D


def rp_perp(
    Y,
    e: float,
    method: str = 'fix',
    w: Optional[float] = None,
    norm: str = 'euc',
) -> Tuple[np.ndarray, Threshold]:
    """
    Perpendicular recurrence plot.

    Parameters
    ----------
    Y : array, shape (N, m)
        Phase space trajectory
    e : float
        Primary recurrence threshold (see recurrence_plot)
    method : str
        Threshold selection: 'fix', 'var' or 'fan'
    w : float
        Cosine threshold in (0, 1]. A recurrence point survives if the
        cosine between x(j) - x(i) and the flow direction at x(i) stays
        below w (w = 0.258 corresponds to an angle of about 75 degrees)
    norm : str
        'euc' or 'max' for the primary recurrence test

    Returns
    -------
    R : array, shape (N, N), bool
        Corrected recurrence plot (generally not symmetric)
    threshold : float or array
        Realized primary threshold

    Raises
    ------
    MissingParameterError
        If w is not given
    """
    if w is None:
        raise MissingParameterError("rp_perp requires the angle threshold 'w'")
    if not 0 < w <= 1:
        raise ValueError(f"w must lie in (0, 1], got {w}")

    Y = as_trajectory(Y)
    T = flow_directions(Y)
    R, threshold = recurrence_plot(Y, e, method, norm)

    # projection[i, j] = t_i . (y_j - y_i)
    projection = T @ Y.T - np.sum(T * Y, axis=1)[:, np.newaxis]
    denominator = cdist(Y, Y) * np.linalg.norm(T, axis=1)[:, np.newaxis]

    cosine = np.zeros_like(projection)
    np.divide(np.abs(projection), denominator, out=cosine, where=denominator > 0)

    corrected = R & (cosine < w)
    logger.debug(
        f"rp_perp: kept {int(corrected.sum())} of {int(R.sum())} recurrence points (w={w})"
    )
    return corrected, threshold


def rp_iso(
    Y,
    e: float,
    e2: Optional[float] = None,
    method: str = 'fix',
    tau_iso: Optional[int] = None,
    norm: str = 'euc',
) -> Tuple[np.ndarray, Threshold]:
    """
    Recurrence plot restricted to isodirectional neighbours.

    Parameters
    ----------
    Y : array, shape (N, m)
        Phase space trajectory
    e : float
        Primary recurrence threshold (see recurrence_plot)
    e2 : float
        Threshold on ||d(i) - d(j)|| where d(i) = x(i + tau_iso) - x(i);
        selected with the same method as e
    method : str
        Threshold selection: 'fix', 'var' or 'fan'
    tau_iso : int
        Number of steps over which directions are compared
    norm : str
        'euc' or 'max'

    Returns
    -------
    R : array, shape (N, N), bool
        Corrected recurrence plot
    threshold : float or array
        Realized primary threshold

    Raises
    ------
    MissingParameterError
        If e2 or tau_iso is not given
    """
    missing = [name for name, value in (('e2', e2), ('tau_iso', tau_iso)) if value is None]
    if missing:
        raise MissingParameterError(f"rp_iso requires {', '.join(missing)}")
    if isinstance(tau_iso, bool) or not isinstance(tau_iso, (int, np.integer)) or tau_iso < 1:
        raise ValueError(f"tau_iso must be a positive integer, got {tau_iso!r}")

    Y = as_trajectory(Y)
    if tau_iso >= len(Y):
        raise ValueError(f"tau_iso={tau_iso} must be smaller than the trajectory length {len(Y)}")

    R, threshold = recurrence_plot(Y, e, method, norm)

    directions = direction_vectors(Y, int(tau_iso))
    D2 = cdist(directions, directions, metric=NORMS[norm])
    iso = _below(D2, select_threshold(D2, e2, method))

    corrected = R & iso
    logger.debug(
        f"rp_iso: kept {int(corrected.sum())} of {int(R.sum())} recurrence points "
        f"(e2={e2}, tau_iso={tau_iso})"
    )
    return corrected, threshold


def corrected_recurrence_plot(
    Y,
    e: float,
    method: str = 'fix',
    norm: str = 'euc',
    correction: str = 'none',
    w: Optional[float] = None,
    e2: Optional[float] = None,
    tau_iso: Optional[int] = None,
) -> Tuple[np.ndarray, Threshold]:
    """Recurrence plot with the selected tangential correction applied."""
    if correction == 'none':
        return recurrence_plot(Y, e, method, norm)
    if correction == 'perp':
        return rp_perp(Y, e, method, w=w, norm=norm)
    if correction == 'iso':
        return rp_iso(Y, e, e2, method, tau_iso=tau_iso, norm=norm)
    raise ValueError(f"Unknown tangential correction {correction!r}. Available: {', '.join(CORRECTIONS)}")
