"""Per-tube path search over the arc graph.

The search is a depth-first walk over a city's outgoing arcs restricted to one
tube. It returns the first chain found in arc-list order, not the shortest.
Each tube's arcs are expected to form a forest or DAG; a directed cycle is
reported with ``RoutingCycleError`` instead of recursing forever.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Iterator, List, Optional, Sequence, Tuple

from tubenet.types.base import ArcID, CityID, TubeID

if TYPE_CHECKING:
    from tubenet.model.instance import Arc, City, Instance, Tube


class RoutingCycleError(ValueError):
    """Raised when a recursion over one tube's arcs revisits a city on its stack.

    Attributes:
        tube_id: Tube whose arcs contain the cycle.
        cycle: City ids along the cycle, first city repeated at the end.
    """

    def __init__(self, tube_id: TubeID, cycle: Sequence[CityID]) -> None:
        self.tube_id = tube_id
        self.cycle = tuple(cycle)
        chain = " -> ".join(str(c) for c in self.cycle)
        super().__init__(f"Arcs of tube id {tube_id} form a cycle: {chain}")


def cycle_from_stack(stack: Sequence[CityID], repeated: CityID) -> List[CityID]:
    """Return the cycle closed by revisiting ``repeated`` on a DFS stack."""
    start = list(stack).index(repeated)
    return list(stack[start:]) + [repeated]


@dataclass(frozen=True)
class ArcPath:
    """A chain of arcs of one tube, from ``cities[0]`` to ``cities[-1]``.

    Truthiness tells whether a path was found. A trivial path (origin equals
    target) is found but has no arcs; an unreachable target yields
    ``ArcPath.not_found()`` with no cities at all.

    Attributes:
        arcs: Arc ids in travel order.
        cities: City ids visited, one more than ``arcs`` when found.
    """

    arcs: Tuple[ArcID, ...] = ()
    cities: Tuple[CityID, ...] = ()

    @classmethod
    def not_found(cls) -> "ArcPath":
        return cls()

    @property
    def found(self) -> bool:
        return bool(self.cities)

    def __bool__(self) -> bool:
        return self.found

    def __len__(self) -> int:
        """Return the number of arcs (hops) in the path."""
        return len(self.arcs)

    def __iter__(self) -> Iterator[ArcID]:
        return iter(self.arcs)

    @property
    def hop_count(self) -> int:
        return len(self.arcs)

    @property
    def src_city(self) -> Optional[CityID]:
        return self.cities[0] if self.cities else None

    @property
    def dst_city(self) -> Optional[CityID]:
        return self.cities[-1] if self.cities else None

    @cached_property
    def legs(self) -> Tuple[Tuple[CityID, CityID], ...]:
        """Return (origin, destination) pairs along the path."""
        return tuple(zip(self.cities[:-1], self.cities[1:]))


def find_path(instance: "Instance", a: "City", b: "City", tube: "Tube") -> ArcPath:
    """Return the first chain of ``tube``'s arcs leading from ``a`` to ``b``.

    Args:
        instance: Instance owning the cities and arcs.
        a: Start city.
        b: Target city.
        tube: Only arcs owned by this tube are followed.

    Returns:
        The first path discovered in outgoing-arc order, a trivial path when
        ``a`` is ``b``, or ``ArcPath.not_found()``.

    Raises:
        RoutingCycleError: If the search runs into a directed cycle.
    """
    chain = _search(instance, a.id, b.id, tube, [])
    if chain is None:
        return ArcPath.not_found()
    cities = (a.id,) + tuple(arc.destination_id for arc in chain)
    return ArcPath(arcs=tuple(arc.id for arc in chain), cities=cities)


def path_exists(instance: "Instance", a: "City", b: "City", tube: "Tube") -> bool:
    """Return True if ``b`` is ``a`` or reachable from it along ``tube``'s arcs."""
    return find_path(instance, a, b, tube).found


def _search(
    instance: "Instance",
    current: CityID,
    target: CityID,
    tube: "Tube",
    stack: List[CityID],
) -> Optional[List["Arc"]]:
    if current == target:
        return []
    if current in stack:
        raise RoutingCycleError(tube.id, cycle_from_stack(stack, current))

    stack.append(current)
    try:
        for arc in instance.outgoing(instance.city(current), tube):
            rest = _search(instance, arc.destination_id, target, tube, stack)
            if rest is not None:
                return [arc] + rest
        return None
    finally:
        stack.pop()
