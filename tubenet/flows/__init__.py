"""Flow (required volume) and aliquot calculation."""

from tubenet.flows.calculator import (
    apply_aliquots,
    busiest_city,
    calculate_arc_quantities,
    compute_aliquots,
    recompute,
    refresh_tube_cities,
    required_volume_by_tube,
    total_freezes,
)

__all__ = [
    "apply_aliquots",
    "busiest_city",
    "calculate_arc_quantities",
    "compute_aliquots",
    "recompute",
    "refresh_tube_cities",
    "required_volume_by_tube",
    "total_freezes",
]
