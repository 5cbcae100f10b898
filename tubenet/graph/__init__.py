"""networkx views of the arc graph."""

from tubenet.graph.route_graph import build_route_graph, find_tube_cycle

__all__ = ["build_route_graph", "find_tube_cycle"]
