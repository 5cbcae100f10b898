"""Ordered, fail-fast feasibility check of a solution."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from tubenet.config import VALIDATION_CONFIG, ValidationConfig
from tubenet.logging import get_logger
from tubenet.model.instance import Instance
from tubenet.routing.paths import RoutingCycleError
from tubenet.types.base import ValidationRule
from tubenet.types.dto import ValidationResult
from tubenet.validation.rules import DEFAULT_RULES, RuleCheck

LOGGER = get_logger(__name__)


class SolutionValidator:
    """Decide whether the current arc graph is an exportable solution.

    Rules run one after the other over the whole instance; the first rule
    that reports a violation ends the run. The validator keeps no state
    between calls.

    Attributes:
        config: Validation settings (draw rule, cycle check).
        rules: ``(rule, check)`` pairs in evaluation order.
    """

    def __init__(
        self,
        config: Optional[ValidationConfig] = None,
        rules: Sequence[Tuple[ValidationRule, RuleCheck]] = DEFAULT_RULES,
    ) -> None:
        self.config = config if config is not None else VALIDATION_CONFIG
        self.rules = tuple(rules)

    def validate(self, instance: Instance) -> ValidationResult:
        """Check ``instance`` and return the first violation, if any.

        A cycle met while evaluating a recursive rule is reported as an
        ``ACYCLIC`` failure.
        """
        for rule, check in self.rules:
            try:
                message = check(instance, self.config)
            except RoutingCycleError as exc:
                tube = instance.tube(exc.tube_id)
                chain = " -> ".join(instance.city(c).display_name for c in exc.cycle)
                rule = ValidationRule.ACYCLIC
                message = f"The arcs of {instance.describe_tube(tube)} form a cycle: {chain}."
            if message is not None:
                LOGGER.debug("Rule %s failed: %s", rule.name, message)
                return ValidationResult.failure(rule, message)
        LOGGER.debug("All %d rules passed", len(self.rules))
        return ValidationResult.ok()


def check_solution(
    instance: Instance, config: Optional[ValidationConfig] = None
) -> ValidationResult:
    """Validate ``instance`` with the default rule set."""
    return SolutionValidator(config).validate(instance)
