"""Arc graph mutation service.

``ArcGraphService`` is the only component that mutates the arc graph of an
``Instance``. It keeps the outgoing/incoming mirror lists of cities and the
arc lists of tubes consistent, tracks the working set of arcs currently being
edited, and broadcasts one ``ArcChange`` per logical operation to its
subscribers. Subscribers run synchronously before the mutating call returns.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple

from tubenet.logging import get_logger
from tubenet.model.instance import Arc, City, Instance, Tube
from tubenet.routing.paths import ArcPath, find_path, path_exists
from tubenet.types.base import ArcID
from tubenet.types.dto import ArcChange

LOGGER = get_logger(__name__)

Subscriber = Callable[[ArcChange], None]


def _remove_if_in(arc_id: ArcID, arc_ids: List[ArcID]) -> None:
    if arc_id in arc_ids:
        arc_ids.remove(arc_id)


class ArcGraphService:
    """Mutation primitives and path queries over an instance's arc graph.

    Attributes:
        instance: Instance whose arcs are edited.
    """

    def __init__(self, instance: Instance) -> None:
        self.instance = instance
        self._working_set: List[ArcID] = []
        self._subscribers: List[Subscriber] = []

    #
    # Observers
    #
    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback invoked after every mutation.

        Args:
            callback: Receives the ``ArcChange`` describing the mutation.

        Returns:
            A function removing the subscription when called.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _emit(self, operation: str, arc: Optional[Arc]) -> None:
        arc_id = arc.id if arc is not None else None
        tube_id = arc.tube_id if arc is not None else None
        change = ArcChange(operation, arc_id, tube_id, tuple(self._working_set))
        LOGGER.debug("Arc set changed: %s (arc=%s)", operation, arc_id)
        for callback in list(self._subscribers):
            callback(change)

    #
    # Working set
    #
    @property
    def working_set(self) -> Tuple[ArcID, ...]:
        """Ids of the arcs currently selected for editing."""
        return tuple(self._working_set)

    def working_arcs(self) -> List[Arc]:
        return [self.instance.arcs[a] for a in self._working_set]

    def set_working_set(self, arc_ids: Iterable[ArcID]) -> None:
        """Replace the working set (e.g. on cohort/type/tube selection)."""
        arc_ids = list(arc_ids)
        for arc_id in arc_ids:
            self.instance.arc(arc_id)
        self._working_set = arc_ids
        self._emit("set_working_set", None)

    #
    # Mutation
    #
    def create_arc(self, origin: City, destination: City, tube: Tube) -> Arc:
        """Build an arc and register it in the arena, both endpoints and the tube.

        No feasibility check is made: self-loops and arcs into the cohort city
        are accepted here and rejected by the validator.
        """
        arc = Arc(
            id=self.instance.new_arc_id(),
            origin_id=origin.id,
            destination_id=destination.id,
            tube_id=tube.id,
        )
        self.instance.arcs[arc.id] = arc
        origin.outgoing_arcs.append(arc.id)
        destination.incoming_arcs.append(arc.id)
        tube.arc_ids.append(arc.id)
        return arc

    def add_arc(self, arc: Arc) -> None:
        """Append an arc to the working set and its tube, then notify."""
        tube = self.instance.tube(arc.tube_id)
        if arc.id not in tube.arc_ids:
            tube.arc_ids.append(arc.id)
        if arc.id not in self._working_set:
            self._working_set.append(arc.id)
        self._emit("add_arc", arc)

    def set_arc_origin(self, arc: Arc, new_origin: City) -> None:
        """Move ``arc`` to start at ``new_origin``, then notify."""
        self._move_origin(arc, new_origin)
        self._emit("set_arc_origin", arc)

    def set_arc_destination(self, arc: Arc, new_destination: City) -> None:
        """Move ``arc`` to end at ``new_destination``, then notify."""
        self._move_destination(arc, new_destination)
        self._emit("set_arc_destination", arc)

    def reroute_arc(
        self,
        arc: Arc,
        origin: Optional[City] = None,
        destination: Optional[City] = None,
    ) -> None:
        """Change either or both endpoints as one operation with one notification."""
        if origin is not None:
            self._move_origin(arc, origin)
        if destination is not None:
            self._move_destination(arc, destination)
        self._emit("reroute_arc", arc)

    def delete_arc(self, arc: Arc) -> None:
        """Unregister ``arc`` everywhere and drop it from the arena, then notify."""
        instance = self.instance
        _remove_if_in(arc.id, instance.city(arc.origin_id).outgoing_arcs)
        _remove_if_in(arc.id, instance.city(arc.destination_id).incoming_arcs)
        _remove_if_in(arc.id, self._working_set)
        _remove_if_in(arc.id, instance.tube(arc.tube_id).arc_ids)
        instance.arcs.pop(arc.id, None)
        self._emit("delete_arc", arc)

    def _move_origin(self, arc: Arc, new_origin: City) -> None:
        if new_origin.id == arc.origin_id:
            return
        old_origin = self.instance.city(arc.origin_id)
        _remove_if_in(arc.id, old_origin.outgoing_arcs)
        new_origin.outgoing_arcs.append(arc.id)
        arc.origin_id = new_origin.id

    def _move_destination(self, arc: Arc, new_destination: City) -> None:
        if new_destination.id == arc.destination_id:
            return
        old_destination = self.instance.city(arc.destination_id)
        _remove_if_in(arc.id, old_destination.incoming_arcs)
        new_destination.incoming_arcs.append(arc.id)
        arc.destination_id = new_destination.id

    #
    # Queries
    #
    def path_exists(self, a: City, b: City, tube: Tube) -> bool:
        return path_exists(self.instance, a, b, tube)

    def find_path(self, a: City, b: City, tube: Tube) -> ArcPath:
        return find_path(self.instance, a, b, tube)
