"""Tabular views of an instance as pandas DataFrames.

Each table has one row per entity and only plain columns, so it can be
printed, filtered or written to CSV directly.
"""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from tubenet.flows.calculator import required_volume_by_tube
from tubenet.model.instance import Instance
from tubenet.routing.paths import RoutingCycleError


def arcs_frame(instance: Instance) -> pd.DataFrame:
    """Return one row per arc with its tube, endpoints and last computed quantity."""
    rows: List[Dict[str, Any]] = []
    for cohort, sample_type, tube in instance.iter_tubes():
        for arc_id in tube.arc_ids:
            arc = instance.arcs[arc_id]
            rows.append(
                {
                    "arc": arc.id,
                    "cohort": instance.city(cohort.city_id).display_name,
                    "type": sample_type.name,
                    "tube": tube.number,
                    "origin": instance.city(arc.origin_id).display_name,
                    "destination": instance.city(arc.destination_id).display_name,
                    "quantity": arc.quantity,
                }
            )
    columns = ["arc", "cohort", "type", "tube", "origin", "destination", "quantity"]
    return pd.DataFrame(rows, columns=columns)


def tubes_frame(instance: Instance) -> pd.DataFrame:
    """Return one row per tube with capacity, requirement and aliquots.

    ``required`` is missing (NaN) for a tube whose arcs form a cycle.
    """
    rows: List[Dict[str, Any]] = []
    for cohort, sample_type, tube in instance.iter_tubes():
        cohort_city = instance.city(cohort.city_id)
        try:
            required = required_volume_by_tube(instance, cohort_city, tube)
        except RoutingCycleError:
            required = None
        rows.append(
            {
                "tube_id": tube.id,
                "cohort": cohort_city.display_name,
                "type": sample_type.name,
                "tube": tube.number,
                "volume": tube.volume,
                "required": required,
                "drawn": tube.used_by_cohort,
                "arcs": len(tube.arc_ids),
                "aliquots": tube.aliquots,
            }
        )
    columns = [
        "tube_id",
        "cohort",
        "type",
        "tube",
        "volume",
        "required",
        "drawn",
        "arcs",
        "aliquots",
    ]
    return pd.DataFrame(rows, columns=columns)


def cities_frame(instance: Instance) -> pd.DataFrame:
    """Return one row per city with its demand per type and aliquot count."""
    rows: List[Dict[str, Any]] = []
    for city in instance.cities.values():
        row: Dict[str, Any] = {
            "city_id": city.id,
            "name": city.name,
            "cohort": city.is_cohort,
            "incoming": len(city.incoming_arcs),
            "outgoing": len(city.outgoing_arcs),
            "aliquots": city.aliquots,
        }
        for type_name in instance.type_names:
            row[f"demand_{type_name}"] = city.demand(type_name)
        rows.append(row)
    frame = pd.DataFrame(rows)
    if not frame.empty:
        frame = frame.set_index("city_id", drop=False)
    return frame
