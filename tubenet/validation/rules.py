"""Feasibility rules for an edited solution.

Each rule inspects the whole instance and returns the diagnostic of its first
violation, or None when the instance satisfies it. Rules are pure; they never
modify the instance.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from tubenet.config import ValidationConfig
from tubenet.flows.calculator import required_volume_by_tube
from tubenet.graph.route_graph import find_tube_cycle
from tubenet.model.instance import Instance
from tubenet.routing.paths import find_path, path_exists
from tubenet.types.base import DrawRule, TypeID, ValidationRule

RuleCheck = Callable[[Instance, ValidationConfig], Optional[str]]


def check_unique_incoming_type(
    instance: Instance, config: ValidationConfig
) -> Optional[str]:
    """A city must not receive two arcs of the same type of the same cohort."""
    for city in instance.cities.values():
        if len(city.incoming_arcs) <= 1:
            continue
        seen: List[TypeID] = []
        for arc in instance.incoming(city):
            tube = instance.tube(arc.tube_id)
            if tube.type_id in seen:
                sample_type = instance.type_of(tube)
                return (
                    f"{city.display_name} is the destination of several shipments "
                    f"of the same type ({sample_type.name}) from cohort "
                    f"{instance.cohort_city(tube).display_name}."
                )
            seen.append(tube.type_id)
    return None


def check_self_loops(instance: Instance, config: ValidationConfig) -> Optional[str]:
    """No arc may start and end at the same city."""
    for _, _, tube in instance.iter_tubes():
        for arc_id in tube.arc_ids:
            arc = instance.arcs[arc_id]
            if arc.is_self_loop:
                city = instance.city(arc.origin_id)
                return (
                    f"An arc of {instance.describe_tube(tube)} has the same origin "
                    f"and destination ({city.display_name})."
                )
    return None


def check_cohort_targets(
    instance: Instance, config: ValidationConfig
) -> Optional[str]:
    """No arc may deliver a tube back to its own cohort city."""
    for cohort, _, tube in instance.iter_tubes():
        cohort_city = instance.city(cohort.city_id)
        for arc_id in tube.arc_ids:
            if instance.arcs[arc_id].destination_id == cohort_city.id:
                return (
                    f"An arc of {instance.describe_tube(tube)} has destination "
                    f"{cohort_city.display_name}, the cohort city the tube "
                    f"originates from."
                )
    return None


def check_acyclic(instance: Instance, config: ValidationConfig) -> Optional[str]:
    """Each tube's arcs must not contain a directed cycle."""
    if not config.check_acyclic:
        return None
    for _, _, tube in instance.iter_tubes():
        cycle = find_tube_cycle(instance, tube)
        if cycle is not None:
            chain = " -> ".join(instance.city(c).display_name for c in cycle)
            return f"The arcs of {instance.describe_tube(tube)} form a cycle: {chain}."
    return None


def check_capacity(instance: Instance, config: ValidationConfig) -> Optional[str]:
    """A tube must hold the volume its whole delivery tree requires."""
    for cohort, _, tube in instance.iter_tubes():
        required = required_volume_by_tube(instance, instance.city(cohort.city_id), tube)
        if required > tube.volume:
            return (
                f"The {instance.describe_tube(tube)} cannot hold the required volume.\n"
                f"Tube volume: {tube.volume}\n"
                f"Required volume: {required}"
            )
    return None


def check_single_draw(instance: Instance, config: ValidationConfig) -> Optional[str]:
    """At most one tube per (cohort, type) is drawn by the cohort.

    With ``DrawRule.EXACTLY_ONE``, a type with no drawn tube also fails.
    """
    for cohort in instance.cohorts.values():
        cohort_city = instance.city(cohort.city_id)
        for type_id in cohort.type_ids:
            sample_type = instance.types[type_id]
            drawn = [
                instance.tubes[t]
                for t in sample_type.tube_ids
                if instance.tubes[t].used_by_cohort
            ]
            if len(drawn) > 1:
                numbers = ", ".join(f"n°{t.number}" for t in drawn)
                return (
                    f"Several tubes of type {sample_type.name} ({numbers}) are "
                    f"drawn by cohort {cohort_city.display_name}. Choose only one."
                )
            if not drawn and config.draw_rule is DrawRule.EXACTLY_ONE:
                return (
                    f"Cohort {cohort_city.display_name} draws no tube of type "
                    f"{sample_type.name}. Choose one."
                )
    return None


def check_freeze_limit(instance: Instance, config: ValidationConfig) -> Optional[str]:
    """No city may sit more than ``max_freezes`` hops away along a tube."""
    for cohort, _, tube in instance.iter_tubes():
        cohort_city = instance.city(cohort.city_id)
        for city in instance.cities.values():
            path = find_path(instance, cohort_city, city, tube)
            if path and path.hop_count > instance.max_freezes:
                return (
                    f"{city.display_name} is reached by {instance.describe_tube(tube)} "
                    f"after {path.hop_count} freezes, more than the maximum of "
                    f"{instance.max_freezes}."
                )
    return None


def check_demands_served(
    instance: Instance, config: ValidationConfig
) -> Optional[str]:
    """Every city with demand of a type is reached by some tube of that type."""
    for cohort in instance.cohorts.values():
        cohort_city = instance.city(cohort.city_id)
        for type_id in cohort.type_ids:
            sample_type = instance.types[type_id]
            tubes = [instance.tubes[t] for t in sample_type.tube_ids]
            for city in instance.cities.values():
                if city.demand(sample_type.name) == 0:
                    continue
                if not any(path_exists(instance, cohort_city, city, t) for t in tubes):
                    return (
                        f"{city.display_name} is not served by cohort "
                        f"{cohort_city.display_name} with type {sample_type.name}."
                    )
    return None


#: Rules in evaluation order. The validator stops at the first failure.
DEFAULT_RULES: Tuple[Tuple[ValidationRule, RuleCheck], ...] = (
    (ValidationRule.UNIQUE_INCOMING_TYPE, check_unique_incoming_type),
    (ValidationRule.SELF_LOOP, check_self_loops),
    (ValidationRule.COHORT_TARGET, check_cohort_targets),
    (ValidationRule.ACYCLIC, check_acyclic),
    (ValidationRule.CAPACITY, check_capacity),
    (ValidationRule.SINGLE_DRAW, check_single_draw),
    (ValidationRule.FREEZE_LIMIT, check_freeze_limit),
    (ValidationRule.DEMAND_SERVED, check_demands_served),
)
