"""Immutable result containers exchanged between tubenet components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from tubenet.types.base import ArcID, CityID, TubeID, ValidationRule


@dataclass(frozen=True)
class ArcChange:
    """Notification payload emitted after one arc-set mutation.

    Attributes:
        operation: Name of the mutating operation (e.g. ``"add_arc"``).
        arc_id: Arc affected by the operation, None for bulk replacements.
        tube_id: Tube owning that arc, None for bulk replacements.
        working_set: Snapshot of the working set after the mutation.
    """

    operation: str
    arc_id: Optional[ArcID]
    tube_id: Optional[TubeID]
    working_set: Tuple[ArcID, ...]


@dataclass(frozen=True)
class AliquotSummary:
    """Aliquot counts derived from one pass over the arc graph.

    Attributes:
        per_tube: Tube id -> aliquots caused by that tube's fan-outs.
        per_city: City id -> aliquots performed at that city.
        total: Solution-wide aliquot count.
    """

    per_tube: Dict[TubeID, int] = field(default_factory=dict)
    per_city: Dict[CityID, int] = field(default_factory=dict)
    total: int = 0


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a feasibility check.

    Truthy when the solution is valid. On failure, ``rule`` names the first
    violated rule and ``message`` carries the diagnostic for the user.
    """

    valid: bool
    rule: Optional[ValidationRule] = None
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def failure(cls, rule: ValidationRule, message: str) -> "ValidationResult":
        return cls(valid=False, rule=rule, message=message)
