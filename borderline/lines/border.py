"""
Border Classifier

Decides whether a diagonal line touches the triangular border of the
recurrence plot, i.e. starts at the first or ends at the last position of
its diagonal. Such lines may continue beyond the observation window, so
their length is unknown.

Border-counting modes:
    normal: only lines touching BOTH ends of the diagonal are border lines
    semi:   lines touching AT LEAST ONE end are border lines
"""

import logging
import warnings
from enum import Enum

from .runs import Line

logger = logging.getLogger(__name__)


class BorderClass(Enum):
    INTERIOR = 'interior'
    LEFT = 'left-border'
    RIGHT = 'right-border'
    BOTH = 'both-border'


class BorderMode(str, Enum):
    NORMAL = 'normal'
    SEMI = 'semi'


DEFAULT_BORDER_MODE = BorderMode.NORMAL


def classify(start: int, end: int, diagonal_length: int) -> BorderClass:
    """Classify a run (0-based, inclusive) on a diagonal of the given length."""
    at_start = start == 0
    at_end = end == diagonal_length - 1

    if at_start and at_end:
        return BorderClass.BOTH
    if at_start:
        return BorderClass.LEFT
    if at_end:
        return BorderClass.RIGHT
    return BorderClass.INTERIOR


def resolve_border_mode(mode) -> BorderMode:
    """
    Turn a user supplied mode into a BorderMode.

    An unrecognized mode is a configuration slip, not a fatal error: it is
    reported and the analysis continues in 'normal' mode.
    """
    if isinstance(mode, BorderMode):
        return mode
    if isinstance(mode, str) and mode.lower() in BorderMode._value2member_map_:
        return BorderMode(mode.lower())

    allowed = ', '.join(repr(m.value) for m in BorderMode)
    message = (
        f"Unknown border mode {mode!r}; expected one of {allowed}. "
        f"Falling back to {DEFAULT_BORDER_MODE.value!r}."
    )
    warnings.warn(message, UserWarning, stacklevel=2)
    logger.warning(message)
    return DEFAULT_BORDER_MODE


def is_border_line(line: Line, mode: BorderMode) -> bool:
    """True if the line counts as a border line under the given mode."""
    cls = classify(line.start, line.end, line.diagonal_length)
    if mode == BorderMode.SEMI:
        return cls is not BorderClass.INTERIOR
    return cls is BorderClass.BOTH
