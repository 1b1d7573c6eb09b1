"""
Border Correction Policies
==========================

One traversal engine, five interchangeable policies. Every policy sees the
same list of lines for a recurrence plot and returns the accepted line
lengths, sorted descending (duplicates kept, zero lengths removed).

Policies:
    conventional:   every line at its raw length (uncorrected baseline)
    dibo:           DIscard all BOrder lines
    censi:          border lines are kept, each extrapolated past the diagonal
                    ends it touches (clipped to n)
    kelo:           KEep only the LOngest border line, discard the others
    window_masking: only lines lying fully inside the plot shrunk by a band
                    of `mask_width` cells on every edge are extracted

References:
    Kraemer, K. H., & Marwan, N. (2019). "Border effect corrections for
    diagonal line based recurrence quantification analysis measures"
    Censi, F., et al. (2004). "Proposed corrections for the quantification
    of coupling patterns by recurrence plots"

Usage:
    from borderline.lines.policies import apply_policy

    lengths = apply_policy(R, 'dibo', border_mode='semi')
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type

import numpy as np

from .border import BorderMode, is_border_line, resolve_border_mode
from .diagonal import diagonal_offsets, is_symmetric, validate_recurrence_plot
from .runs import Line, lines_on_diagonal

logger = logging.getLogger(__name__)


# =============================================================================
# TRAVERSAL ENGINE
# =============================================================================

def extract_lines(R, symmetric_shortcut: bool = True) -> List[Line]:
    """
    Extract every diagonal line of a recurrence plot, line of identity excluded.

    For a symmetric plot only the lower triangle is traversed and its lines
    are mirrored into the upper triangle; the resulting multiset is the same
    as traversing both triangles.

    Parameters
    ----------
    R : array, shape (n, n)
        Binary recurrence plot
    symmetric_shortcut : bool
        Mirror the lower triangle when R is symmetric (default: True)

    Returns
    -------
    lines : list of Line
    """
    R = validate_recurrence_plot(R)
    n = R.shape[0]

    mirror = symmetric_shortcut and is_symmetric(R)

    lines = []
    for k in diagonal_offsets(n, symmetric=mirror):
        lines.extend(lines_on_diagonal(R, k))

    if mirror:
        lines.extend(line.mirrored() for line in list(lines))

    logger.debug(f"Extracted {len(lines)} lines from {n}x{n} RP (mirrored={mirror})")
    return lines


# =============================================================================
# POLICIES
# =============================================================================

class Policy(ABC):
    """
    Base class for border correction policies.

    Subclasses implement select(): given all lines of a plot, return the
    lengths to report. The base class takes care of ordering and of dropping
    zero-length entries.
    """

    name: str = ''

    def accepted_lengths(self, lines: List[Line], mode: BorderMode, n: int) -> List[int]:
        lengths = [length for length in self.select(lines, mode, n) if length > 0]
        lengths.sort(reverse=True)
        logger.debug(f"{self.name}: accepted {len(lengths)} of {len(lines)} lines")
        return lengths

    @abstractmethod
    def select(self, lines: List[Line], mode: BorderMode, n: int) -> List[int]:
        ...

    def params(self) -> Dict[str, object]:
        return {}

    def __repr__(self):
        args = ', '.join(f"{k}={v!r}" for k, v in self.params().items())
        return f"{type(self).__name__}({args})"


def _split_border(lines: List[Line], mode: BorderMode):
    interior, border = [], []
    for line in lines:
        (border if is_border_line(line, mode) else interior).append(line)
    return interior, border


class ConventionalPolicy(Policy):
    """No correction: every line at its raw length."""

    name = 'conventional'

    def select(self, lines, mode, n):
        return [line.length for line in lines]


class DiscardBorderPolicy(Policy):
    """Drop every border line; its true length is unknown."""

    name = 'dibo'

    def select(self, lines, mode, n):
        interior, _ = _split_border(lines, mode)
        return [line.length for line in interior]


class CensiPolicy(Policy):
    """
    Keep border lines, extrapolating each beyond the edges that cut it.

    The observed part of a border line is taken as the visible piece of a
    longer line: for every end of its diagonal the line touches, a hidden
    piece as long as the observed one is added. A line cut at one end is
    doubled, a line spanning its whole diagonal is tripled. The result is
    clipped to n, the longest line the plot can hold. Line count is kept.
    """

    name = 'censi'

    def select(self, lines, mode, n):
        interior, border = _split_border(lines, mode)
        lengths = [line.length for line in interior]
        lengths.extend(extrapolated_length(line, n) for line in border)
        return lengths


def extrapolated_length(line: Line, n: int) -> int:
    """Length of a border line continued past each diagonal end it touches."""
    cut_ends = int(line.start == 0) + int(line.end == line.diagonal_length - 1)
    return min(n, line.length * (1 + cut_ends))


class KeepLongestPolicy(Policy):
    """Keep only the longest border line, discard all other border lines."""

    name = 'kelo'

    def select(self, lines, mode, n):
        interior, border = _split_border(lines, mode)
        lengths = [line.length for line in interior]
        if border:
            lengths.append(max(line.length for line in border))
        return lengths


class WindowMaskingPolicy(Policy):
    """
    Extract lines only inside the window [w, n-w) x [w, n-w).

    Lines that reach into the masked band of width `mask_width` are not
    counted, so no accepted line can touch the border of the plot and the
    border mode plays no role.
    """

    name = 'window_masking'

    def __init__(self, mask_width: int = 1):
        if isinstance(mask_width, bool) or not isinstance(mask_width, (int, np.integer)):
            raise ValueError(f"mask_width must be an integer, got {mask_width!r}")
        if mask_width < 0:
            raise ValueError(f"mask_width must be non-negative, got {mask_width}")
        self.mask_width = int(mask_width)

    def params(self):
        return {'mask_width': self.mask_width}

    def select(self, lines, mode, n):
        w = self.mask_width
        if 2 * w >= n:
            logger.warning(f"mask_width={w} leaves no window inside a {n}x{n} RP")
            return []

        lo, hi = w, n - 1 - w
        return [
            line.length for line in lines
            if min(line.first_cell) >= lo and max(line.last_cell) <= hi
        ]


POLICIES: Dict[str, Type[Policy]] = {
    cls.name: cls
    for cls in (
        ConventionalPolicy,
        DiscardBorderPolicy,
        CensiPolicy,
        KeepLongestPolicy,
        WindowMaskingPolicy,
    )
}


def get_policy(name, mask_width: Optional[int] = None) -> Policy:
    """
    Instantiate a policy by name ('window-masking' is accepted as well).

    Raises
    ------
    KeyError
        If the name is not a known policy.
    """
    if isinstance(name, Policy):
        return name

    key = str(name).lower().replace('-', '_')
    if key not in POLICIES:
        raise KeyError(f"Unknown policy {name!r}. Available: {', '.join(POLICIES)}")

    if key == WindowMaskingPolicy.name and mask_width is not None:
        return WindowMaskingPolicy(mask_width)
    return POLICIES[key]()


def apply_policy(
    R,
    policy='conventional',
    border_mode='normal',
    symmetric_shortcut: bool = True,
    mask_width: Optional[int] = None,
) -> List[int]:
    """
    Accepted diagonal line lengths of a recurrence plot under a policy.

    Parameters
    ----------
    R : array, shape (n, n)
        Binary recurrence plot
    policy : str or Policy
        One of 'conventional', 'dibo', 'censi', 'kelo', 'window_masking'
    border_mode : str
        'normal' or 'semi'; anything else warns and falls back to 'normal'
    symmetric_shortcut : bool
        Traverse one triangle only when R is symmetric
    mask_width : int, optional
        Band width for window masking

    Returns
    -------
    lengths : list of int
        Sorted descending

    Examples
    --------
    >>> R = np.ones((5, 5), dtype=bool)
    >>> apply_policy(R, 'dibo')
    []
    """
    mode = resolve_border_mode(border_mode)
    policy = get_policy(policy, mask_width=mask_width)
    R = validate_recurrence_plot(R)

    lines = extract_lines(R, symmetric_shortcut=symmetric_shortcut)
    return policy.accepted_lengths(lines, mode, R.shape[0])
