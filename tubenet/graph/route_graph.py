"""networkx view of an instance's arcs.

Nodes are city ids and edge keys are arc ids, so parallel arcs of different
tubes stay distinct.
"""

from __future__ import annotations

from typing import List, Optional

import networkx as nx

from tubenet.model.instance import Instance, Tube
from tubenet.types.base import CityID


def build_route_graph(instance: Instance, tube: Optional[Tube] = None) -> nx.MultiDiGraph:
    """Build a ``networkx.MultiDiGraph`` from an instance.

    Args:
        instance: Source instance.
        tube: Restrict edges to this tube's arcs; all arcs when None.

    Returns:
        A graph holding every city as a node (with ``name`` and
        ``is_cohort`` attributes) and one edge per arc, keyed by arc id (with
        ``tube`` and ``quantity`` attributes).
    """
    graph = nx.MultiDiGraph()
    for city in instance.cities.values():
        graph.add_node(city.id, name=city.name, is_cohort=city.is_cohort)

    arc_ids = tube.arc_ids if tube is not None else list(instance.arcs)
    for arc_id in arc_ids:
        arc = instance.arcs[arc_id]
        graph.add_edge(
            arc.origin_id,
            arc.destination_id,
            key=arc.id,
            tube=arc.tube_id,
            quantity=arc.quantity,
        )
    return graph


def find_tube_cycle(instance: Instance, tube: Tube) -> Optional[List[CityID]]:
    """Return the cities of a directed cycle among ``tube``'s arcs, or None.

    The first city is repeated at the end of the returned list.
    """
    graph = build_route_graph(instance, tube)
    try:
        edges = nx.find_cycle(graph, orientation="original")
    except nx.NetworkXNoCycle:
        return None
    cycle = [edge[0] for edge in edges]
    return cycle + [cycle[0]]
