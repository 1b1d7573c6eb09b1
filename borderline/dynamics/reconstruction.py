"""
Phase Space Reconstruction

Takens delay embedding and trajectory normalisation for recurrence
analysis.

References:
    Takens, F. (1981). "Detecting strange attractors in turbulence"
"""

import numpy as np


def embed_time_series(x: np.ndarray, tau: int, dim: int) -> np.ndarray:
    """
    Takens' embedding theorem: reconstruct attractor from scalar time series.

    Parameters
    ----------
    x : array, shape (n_samples,)
        Scalar time series
    tau : int
        Time delay (in samples)
    dim : int
        Embedding dimension

    Returns
    -------
    embedded : array, shape (n_samples - (dim-1)*tau, dim)
        Embedded trajectory in reconstructed phase space

    Examples
    --------
    >>> x = np.sin(np.linspace(0, 10*np.pi, 1000))
    >>> embedded = embed_time_series(x, tau=10, dim=3)
    >>> embedded.shape
    (980, 3)
    """
    x = np.asarray(x, dtype=float).flatten()
    if tau < 1 or dim < 1:
        raise ValueError(f"tau and dim must be positive, got tau={tau}, dim={dim}")

    n = len(x) - (dim - 1) * tau
    if n <= 0:
        raise ValueError(f"Time series too short for tau={tau}, dim={dim}")

    return np.column_stack([x[i * tau : i * tau + n] for i in range(dim)])


def as_trajectory(Y) -> np.ndarray:
    """
    Coerce input into a (N, m) float array of phase space vectors.

    A 1-D series is treated as a one-dimensional trajectory.
    """
    Y = np.asarray(Y, dtype=float)
    if Y.ndim == 1:
        Y = Y[:, np.newaxis]
    if Y.ndim != 2 or len(Y) == 0:
        raise ValueError(f"Trajectory must be a non-empty (N, m) array, got shape {Y.shape}")
    if not np.all(np.isfinite(Y)):
        raise ValueError("Trajectory contains NaN or infinite values")
    return Y
