"""
Borderline Dynamics

Phase space side of the analysis:
- Delay embedding
- Recurrence plot construction (fixed, rate-derived, neighbour thresholds)
- Tangential motion correction (perpendicular and isodirectional RPs)
"""

from .reconstruction import (
    embed_time_series,
    as_trajectory,
)
from .recurrence import (
    distance_matrix,
    select_threshold,
    recurrence_plot,
    recurrence_count,
)
from .tangential import (
    flow_directions,
    direction_vectors,
    rp_perp,
    rp_iso,
    corrected_recurrence_plot,
)

__all__ = [
    # Reconstruction
    'embed_time_series',
    'as_trajectory',
    # Recurrence
    'distance_matrix',
    'select_threshold',
    'recurrence_plot',
    'recurrence_count',
    # Tangential
    'flow_directions',
    'direction_vectors',
    'rp_perp',
    'rp_iso',
    'corrected_recurrence_plot',
]
