"""Arc graph mutation and per-tube path search."""

from tubenet.routing.arc_service import ArcGraphService
from tubenet.routing.paths import ArcPath, RoutingCycleError, find_path, path_exists

__all__ = [
    "ArcGraphService",
    "ArcPath",
    "RoutingCycleError",
    "find_path",
    "path_exists",
]
