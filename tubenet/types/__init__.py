"""Shared typing constructs for tubenet.

Type aliases, enums and immutable DTOs used across the package. Contains no
graph logic.
"""

from tubenet.types.base import (
    ArcID,
    CityID,
    CohortID,
    DrawRule,
    TubeID,
    TypeID,
    ValidationRule,
    Volume,
)
from tubenet.types.dto import AliquotSummary, ArcChange, ValidationResult

__all__ = [
    # Enums
    "DrawRule",
    "ValidationRule",
    # Type aliases
    "Volume",
    "CityID",
    "CohortID",
    "TypeID",
    "TubeID",
    "ArcID",
    # DTOs
    "ArcChange",
    "AliquotSummary",
    "ValidationResult",
]
