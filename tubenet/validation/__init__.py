"""Solution feasibility validation."""

from tubenet.validation.rules import DEFAULT_RULES
from tubenet.validation.validator import SolutionValidator, check_solution

__all__ = ["DEFAULT_RULES", "SolutionValidator", "check_solution"]
