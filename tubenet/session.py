"""Interactive editing session over one instance.

``EditingSession`` is the surface a front end drives: select a cohort, type
or tube, add, reroute and delete arcs, toggle which tube a cohort draws, and
save. Every arc mutation goes through ``ArcGraphService``; the session
subscribes to it and refreshes flows, aliquots and visited cities before the
mutating call returns. Saving validates first and only exports a feasible
solution.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from tubenet.config import EXPORT_CONFIG, ExportConfig, ValidationConfig
from tubenet.flows.calculator import (
    busiest_city,
    recompute,
    refresh_tube_cities,
    required_volume_by_tube,
    total_freezes,
)
from tubenet.io.export import write_solution
from tubenet.loader import Workspace
from tubenet.logging import get_logger
from tubenet.model.instance import Arc, City, Instance, Tube
from tubenet.routing.arc_service import ArcGraphService
from tubenet.routing.paths import RoutingCycleError
from tubenet.types.base import ArcID, CityID, CohortID, TubeID, TypeID, Volume
from tubenet.types.dto import AliquotSummary, ArcChange, ValidationResult
from tubenet.validation.validator import SolutionValidator

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class SaveResult:
    """Outcome of ``EditingSession.save``.

    Attributes:
        validation: Result of the feasibility check.
        path: File written, None when validation failed.
    """

    validation: ValidationResult
    path: Optional[Path] = None

    def __bool__(self) -> bool:
        return self.path is not None


class EditingSession:
    """Editing state for one instance: selection, working set and derived values.

    Attributes:
        instance: Instance being edited.
        service: Arc graph service performing all mutations.
        validator: Validator run on save.
        export_config: Export settings used on save.
        summary: Latest aliquot summary.
    """

    def __init__(
        self,
        instance: Instance,
        validation: Optional[ValidationConfig] = None,
        export: Optional[ExportConfig] = None,
        service: Optional[ArcGraphService] = None,
    ) -> None:
        self.instance = instance
        self.service = service if service is not None else ArcGraphService(instance)
        self.validator = SolutionValidator(validation)
        self.export_config = export if export is not None else EXPORT_CONFIG
        self.cohort_id: Optional[CohortID] = None
        self.type_id: Optional[TypeID] = None
        self.tube_id: Optional[TubeID] = None
        self.summary: AliquotSummary = recompute(instance)
        self._unsubscribe = self.service.subscribe(self._on_arcs_changed)

    @classmethod
    def from_workspace(cls, workspace: Workspace) -> "EditingSession":
        return cls(workspace.instance, workspace.validation, workspace.export)

    def close(self) -> None:
        """Stop listening to arc changes."""
        self._unsubscribe()

    #
    # Selection
    #
    @property
    def selected_tube(self) -> Optional[Tube]:
        return self.instance.tubes.get(self.tube_id) if self.tube_id is not None else None

    def select_cohort(self, cohort_id: CohortID) -> None:
        """Select a cohort and edit the arcs of all its tubes."""
        cohort = self.instance.cohort(cohort_id)
        self.cohort_id, self.type_id, self.tube_id = cohort.id, None, None
        arc_ids: List[ArcID] = []
        for type_id in cohort.type_ids:
            arc_ids.extend(self._type_arcs(type_id))
        self.service.set_working_set(arc_ids)

    def select_type(self, type_id: TypeID) -> None:
        """Select a type (and its cohort) and edit the arcs of all its tubes."""
        sample_type = self.instance.type(type_id)
        self.cohort_id, self.type_id, self.tube_id = sample_type.cohort_id, type_id, None
        self.service.set_working_set(self._type_arcs(type_id))

    def select_tube(self, tube_id: TubeID) -> None:
        """Select a tube (with its type and cohort) and edit its arcs."""
        tube = self.instance.tube(tube_id)
        sample_type = self.instance.type_of(tube)
        self.cohort_id, self.type_id, self.tube_id = sample_type.cohort_id, sample_type.id, tube.id
        self.service.set_working_set(tube.arc_ids)

    def _type_arcs(self, type_id: TypeID) -> List[ArcID]:
        return [
            arc_id
            for tube_id in self.instance.type(type_id).tube_ids
            for arc_id in self.instance.tubes[tube_id].arc_ids
        ]

    #
    # Editing
    #
    def add_arc(
        self, origin_id: CityID, destination_id: CityID, tube_id: Optional[TubeID] = None
    ) -> Arc:
        """Create an arc for ``tube_id`` (default: the selected tube) and add it.

        Raises:
            ValueError: If no tube is given or selected.
            KeyError: If a city or the tube does not exist.
        """
        if tube_id is None:
            tube_id = self.tube_id
        if tube_id is None:
            raise ValueError("No tube selected: select a tube before adding arcs.")
        instance = self.instance
        arc = self.service.create_arc(
            instance.city(origin_id), instance.city(destination_id), instance.tube(tube_id)
        )
        self.service.add_arc(arc)
        LOGGER.info(
            "Added arc %d: %s -> %s",
            arc.id,
            instance.city(origin_id).display_name,
            instance.city(destination_id).display_name,
        )
        return arc

    def reroute_arc(
        self,
        arc_id: ArcID,
        origin_id: Optional[CityID] = None,
        destination_id: Optional[CityID] = None,
    ) -> Arc:
        """Move one or both endpoints of an arc."""
        instance = self.instance
        arc = instance.arc(arc_id)
        origin: Optional[City] = instance.city(origin_id) if origin_id is not None else None
        destination: Optional[City] = (
            instance.city(destination_id) if destination_id is not None else None
        )
        self.service.reroute_arc(arc, origin, destination)
        return arc

    def delete_arc(self, arc_id: ArcID) -> None:
        self.service.delete_arc(self.instance.arc(arc_id))

    def set_tube_drawn(self, tube_id: TubeID, drawn: bool = True) -> None:
        """Mark whether the cohort draws ``tube_id`` itself, then refresh values."""
        tube = self.instance.tube(tube_id)
        tube.used_by_cohort = drawn
        self._refresh([tube])

    #
    # Derived values
    #
    def required_volume(self, tube_id: TubeID) -> Optional[Volume]:
        """Return the volume a tube must carry from its cohort, None on a cycle."""
        tube = self.instance.tube(tube_id)
        try:
            return required_volume_by_tube(self.instance, self.instance.cohort_city(tube), tube)
        except RoutingCycleError as exc:
            LOGGER.warning("Required volume undefined: %s", exc)
            return None

    def busiest_city(self) -> Optional[City]:
        return busiest_city(self.instance, self.summary)

    def total_freezes(self) -> int:
        return total_freezes(self.instance)

    def _on_arcs_changed(self, change: ArcChange) -> None:
        tubes: List[Tube] = []
        if change.tube_id is not None:
            tubes.append(self.instance.tube(change.tube_id))
        self._refresh(tubes, change.working_set)

    def _refresh(self, tubes: Iterable[Tube], working_set: Iterable[ArcID] = ()) -> None:
        arc_ids = set(working_set)
        for tube in tubes:
            refresh_tube_cities(self.instance, tube)
            arc_ids.update(tube.arc_ids)
        self.summary = recompute(self.instance, sorted(arc_ids))

    #
    # Saving
    #
    def validate(self) -> ValidationResult:
        return self.validator.validate(self.instance)

    def save(self, path: Union[str, Path, None] = None) -> SaveResult:
        """Validate, then export the solution if it is feasible.

        Args:
            path: Target file; the export config's file name when None.

        Returns:
            A ``SaveResult``; falsy when validation failed and nothing was written.
        """
        result = self.validate()
        if not result:
            LOGGER.error("Solution is not feasible, export aborted: %s", result.message)
            return SaveResult(result)
        written = write_solution(self.instance, path, self.export_config)
        return SaveResult(result, written)
