"""tubenet: routing graphs for biological specimen tubes.

A cohort draws samples into tubes; each tube is routed to a set of cities
through a tree of arcs, and every city receives the aliquots it demands.
tubenet loads instances and solutions, keeps the arc graph consistent while
it is edited, recomputes flows and aliquots, validates feasibility, and
exports the solution file.

Primary API:
    load_workspace() - Load a workspace manifest and its files
    EditingSession - Select, add, reroute and delete arcs; validate; save
    ArcGraphService - Mutation primitives and path queries
    check_solution() - Feasibility check for an instance

Example:
    from tubenet import EditingSession, load_workspace

    session = EditingSession.from_workspace(load_workspace("lyon.yaml"))
    session.select_tube(0)
    session.add_arc(origin_id=3, destination_id=7)
    if session.save():
        print("saved")
"""

from __future__ import annotations

from tubenet import cli, logging
from tubenet._version import __version__
from tubenet.config import ExportConfig, ValidationConfig
from tubenet.flows.calculator import (
    compute_aliquots,
    recompute,
    required_volume_by_tube,
)
from tubenet.io.export import format_solution, write_solution
from tubenet.io.parser import InstanceFormatError, load_instance, parse_instance
from tubenet.loader import Workspace, load_workspace
from tubenet.model.instance import Arc, City, Cohort, Instance, SampleType, Tube
from tubenet.routing.arc_service import ArcGraphService
from tubenet.routing.paths import ArcPath, RoutingCycleError, find_path, path_exists
from tubenet.session import EditingSession, SaveResult
from tubenet.types.base import DrawRule, ValidationRule
from tubenet.types.dto import AliquotSummary, ArcChange, ValidationResult
from tubenet.validation.validator import SolutionValidator, check_solution

__all__ = [
    # Version
    "__version__",
    # Model
    "Instance",
    "City",
    "Cohort",
    "SampleType",
    "Tube",
    "Arc",
    # Routing
    "ArcGraphService",
    "ArcPath",
    "RoutingCycleError",
    "find_path",
    "path_exists",
    # Flows
    "required_volume_by_tube",
    "compute_aliquots",
    "recompute",
    # Validation
    "SolutionValidator",
    "check_solution",
    # Types
    "DrawRule",
    "ValidationRule",
    "ArcChange",
    "AliquotSummary",
    "ValidationResult",
    # Config
    "ValidationConfig",
    "ExportConfig",
    # IO
    "InstanceFormatError",
    "parse_instance",
    "load_instance",
    "format_solution",
    "write_solution",
    "Workspace",
    "load_workspace",
    # Session
    "EditingSession",
    "SaveResult",
    # Utilities
    "cli",
    "logging",
]
