"""Configuration classes for tubenet components."""

from dataclasses import dataclass

from tubenet.types.base import DrawRule


@dataclass
class ValidationConfig:
    """Settings for solution feasibility checks."""

    # Whether a (cohort, type) pair may have no drawn tube at all
    draw_rule: DrawRule = DrawRule.AT_MOST_ONE

    # Reject tubes whose arcs contain a directed cycle before any recursion
    check_acyclic: bool = True


@dataclass
class ExportConfig:
    """Settings for solution export."""

    # Default file name when saving without an explicit path
    file_name: str = "solution.txt"


# Global configuration instances
VALIDATION_CONFIG = ValidationConfig()
EXPORT_CONFIG = ExportConfig()
