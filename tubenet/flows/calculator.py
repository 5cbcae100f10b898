"""Flow and aliquot computation over the arc graph.

The volume carried by an arc is everything its destination and the cities
downstream of it need from the same tube. Aliquots count physical re-splits:
a tube leaving a city along ``n > 1`` arcs is split ``n - 1`` times, once per
patient of its cohort.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from tubenet.logging import get_logger
from tubenet.model.instance import City, Instance, Tube
from tubenet.routing.paths import RoutingCycleError, cycle_from_stack
from tubenet.types.base import ArcID, CityID, TubeID, Volume
from tubenet.types.dto import AliquotSummary

LOGGER = get_logger(__name__)


def required_volume_by_tube(instance: Instance, city: City, tube: Tube) -> Volume:
    """Return the volume ``city`` and its successors need from ``tube``.

    The city's own demand for the tube's type counts, except at the tube's
    cohort city when the cohort does not draw that tube. Every destination
    reached by an outgoing arc of ``tube`` adds its own requirement.

    Args:
        instance: Instance owning the graph.
        city: City at the root of the sub-tree.
        tube: Tube whose arcs are followed.

    Returns:
        The summed requirement.

    Raises:
        RoutingCycleError: If the tube's arcs below ``city`` contain a cycle.
    """
    return _required_volume(instance, city, tube, [])


def _required_volume(
    instance: Instance, city: City, tube: Tube, stack: List[CityID]
) -> Volume:
    if city.id in stack:
        raise RoutingCycleError(tube.id, cycle_from_stack(stack, city.id))

    volume = city.demand(instance.type_of(tube).name)
    if not tube.used_by_cohort and instance.cohort_city(tube).id == city.id:
        volume = 0

    stack.append(city.id)
    try:
        for arc in instance.outgoing(city, tube):
            destination = instance.city(arc.destination_id)
            volume += _required_volume(instance, destination, tube, stack)
    finally:
        stack.pop()
    return volume


def calculate_arc_quantities(
    instance: Instance, arc_ids: Optional[Iterable[ArcID]] = None
) -> List[ArcID]:
    """Set ``arc.quantity`` to the requirement of its destination sub-tree.

    Args:
        instance: Instance owning the arcs.
        arc_ids: Arcs to update; all arcs when None.

    Returns:
        Ids of arcs lying on a cyclic route. Their quantity is set to None
        since no finite requirement exists for them.
    """
    if arc_ids is None:
        arc_ids = list(instance.arcs)

    cyclic: List[ArcID] = []
    for arc_id in arc_ids:
        arc = instance.arc(arc_id)
        tube = instance.tube(arc.tube_id)
        try:
            arc.quantity = required_volume_by_tube(
                instance, instance.city(arc.destination_id), tube
            )
        except RoutingCycleError as exc:
            LOGGER.warning("Flow of arc %d is undefined: %s", arc_id, exc)
            arc.quantity = None  # type: ignore[assignment]
            cyclic.append(arc_id)
    return cyclic


def compute_aliquots(instance: Instance) -> AliquotSummary:
    """Count aliquots per tube, per city and in total.

    For every city, outgoing arcs are grouped by tube. Each arc beyond the
    first of a group is one aliquot per patient of the tube's cohort.

    Args:
        instance: Instance to scan. Not modified.

    Returns:
        A fresh ``AliquotSummary``.
    """
    per_tube: Dict[TubeID, int] = defaultdict(int)
    per_city: Dict[CityID, int] = defaultdict(int)

    for city in instance.cities.values():
        fan_out: Dict[TubeID, int] = defaultdict(int)
        for arc_id in city.outgoing_arcs:
            fan_out[instance.arcs[arc_id].tube_id] += 1

        for tube_id, count in fan_out.items():
            if count <= 1:
                continue
            tube = instance.tubes[tube_id]
            aliquots = (count - 1) * instance.cohort_of(tube).patient_count
            per_tube[tube_id] += aliquots
            per_city[city.id] += aliquots

    return AliquotSummary(
        per_tube=dict(per_tube),
        per_city=dict(per_city),
        total=sum(per_tube.values()),
    )


def apply_aliquots(instance: Instance, summary: AliquotSummary) -> None:
    """Reset every cached aliquot counter, then store ``summary`` in the entities."""
    for tube in instance.tubes.values():
        tube.aliquots = summary.per_tube.get(tube.id, 0)
    for city in instance.cities.values():
        city.aliquots = summary.per_city.get(city.id, 0)
    instance.solution.aliquots = summary.total


def recompute(
    instance: Instance, arc_ids: Optional[Iterable[ArcID]] = None
) -> AliquotSummary:
    """Refresh arc quantities and aliquot caches after a graph change.

    Args:
        instance: Instance to refresh.
        arc_ids: Arcs whose quantity is refreshed; all arcs when None.

    Returns:
        The aliquot summary now cached in the entities.
    """
    calculate_arc_quantities(instance, arc_ids)
    summary = compute_aliquots(instance)
    apply_aliquots(instance, summary)
    LOGGER.debug("Recomputed flows: %d aliquot(s) in total", summary.total)
    return summary


def busiest_city(instance: Instance, summary: AliquotSummary) -> Optional[City]:
    """Return the city performing the most aliquots, or None if there are none.

    Ties go to the city listed first in the instance.
    """
    best: Optional[City] = None
    for city in instance.cities.values():
        count = summary.per_city.get(city.id, 0)
        if count > 0 and (best is None or count > summary.per_city[best.id]):
            best = city
    return best


def total_freezes(instance: Instance) -> int:
    """Return the number of arcs over all tubes (one freeze per shipment leg)."""
    return sum(len(tube.arc_ids) for tube in instance.tubes.values())


def refresh_tube_cities(instance: Instance, tube: Tube) -> List[CityID]:
    """Rebuild ``tube.city_ids`` from the endpoints of its arcs.

    Cities are listed once, in arc order. The cohort city is listed first when
    the cohort draws the tube and omitted otherwise; the solution format
    records the draw flag this way.

    Returns:
        The new list of visited city ids.
    """
    cohort_city_id = instance.cohort_city(tube).id
    visited: List[CityID] = [cohort_city_id] if tube.used_by_cohort else []
    for arc_id in tube.arc_ids:
        arc = instance.arcs[arc_id]
        for city_id in (arc.origin_id, arc.destination_id):
            if city_id in visited:
                continue
            if city_id == cohort_city_id and not tube.used_by_cohort:
                continue
            visited.append(city_id)
    tube.city_ids = visited
    return visited
