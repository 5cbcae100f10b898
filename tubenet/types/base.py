"""Base aliases and enums shared across tubenet."""

from __future__ import annotations

from decimal import Decimal
from enum import IntEnum
from typing import Union

#: Sample volume. Integral values stay ``int``; fractional ones are ``Decimal``
#: so repeated recomputation never drifts.
Volume = Union[int, Decimal]

#: Stable integer identifiers of arena entities.
CityID = int
CohortID = int
TypeID = int
TubeID = int
ArcID = int


class DrawRule(IntEnum):
    """How many tubes of one (cohort, type) pair may be drawn by the cohort."""

    #: Zero or one drawn tube per type.
    AT_MOST_ONE = 1
    #: Exactly one drawn tube per type; a type nobody draws is rejected.
    EXACTLY_ONE = 2

    @classmethod
    def from_string(cls, value: str) -> "DrawRule":
        """Parse a string into a DrawRule enum value.

        Args:
            value: Case-insensitive name (e.g., "at_most_one", "EXACTLY_ONE").

        Returns:
            The corresponding DrawRule member.

        Raises:
            ValueError: If the string doesn't match any member.
        """
        try:
            return cls[value.upper()]
        except KeyError:
            valid = ", ".join(e.name for e in cls)
            raise ValueError(
                f"Invalid draw_rule '{value}'. Valid values are: {valid}"
            ) from None


class ValidationRule(IntEnum):
    """Feasibility rules, valued in evaluation order."""

    UNIQUE_INCOMING_TYPE = 1
    SELF_LOOP = 2
    COHORT_TARGET = 3
    ACYCLIC = 4
    CAPACITY = 5
    SINGLE_DRAW = 6
    FREEZE_LIMIT = 7
    DEMAND_SERVED = 8
