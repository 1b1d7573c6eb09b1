"""
Diagonal line extraction and border effect correction.

Traverses the diagonals of a recurrence plot, segments them into lines,
classifies lines touching the plot border and applies one of five
correction policies before building the length distribution.
"""

from .diagonal import (
    validate_recurrence_plot,
    is_symmetric,
    diagonal,
    diagonal_offsets,
)
from .runs import (
    Line,
    find_runs,
    lines_on_diagonal,
    line_lengths,
)
from .border import (
    BorderClass,
    BorderMode,
    classify,
    resolve_border_mode,
    is_border_line,
)
from .policies import (
    Policy,
    ConventionalPolicy,
    DiscardBorderPolicy,
    CensiPolicy,
    KeepLongestPolicy,
    WindowMaskingPolicy,
    POLICIES,
    get_policy,
    extract_lines,
    extrapolated_length,
    apply_policy,
)
from .histogram import (
    LineLengthDistribution,
    line_length_histogram,
)

__all__ = [
    # Traversal
    'validate_recurrence_plot',
    'is_symmetric',
    'diagonal',
    'diagonal_offsets',
    # Runs
    'Line',
    'find_runs',
    'lines_on_diagonal',
    'line_lengths',
    # Border
    'BorderClass',
    'BorderMode',
    'classify',
    'resolve_border_mode',
    'is_border_line',
    # Policies
    'Policy',
    'ConventionalPolicy',
    'DiscardBorderPolicy',
    'CensiPolicy',
    'KeepLongestPolicy',
    'WindowMaskingPolicy',
    'POLICIES',
    'get_policy',
    'extract_lines',
    'extrapolated_length',
    'apply_policy',
    # Histogram
    'LineLengthDistribution',
    'line_length_histogram',
]
