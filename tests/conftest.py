"""Shared fixtures.

``instance`` is a small hand-built instance: cities A, B, C, D (ids 0-3), one
cohort at A with 2 patients, types T1 and T2 with two tubes of volume 10
each (tube ids 0, 1 for T1 and 2, 3 for T2), no demands and no arcs.

``sample_instance`` is loaded from ``tests/sample_data``: cities Lyon, Paris,
Marseille, Lille, Nantes (ids 0-4), one cohort at Lyon with 10 patients,
types Serum (tubes 0, 1) and Plasma (tubes 2, 3). Its solution is feasible:

- Serum tube 0 (drawn): arcs 0 Lyon->Paris, 1 Paris->Marseille, 2 Lyon->Nantes
- Plasma tube 2: arcs 3 Lyon->Marseille, 4 Marseille->Lille
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tubenet.io.parser import load_instance
from tubenet.model.instance import City, Instance
from tubenet.routing.arc_service import ArcGraphService

SAMPLE_DIR = Path(__file__).parent / "sample_data"


def make_instance(
    names=("A", "B", "C", "D"),
    patients: int = 2,
    type_names=("T1", "T2"),
    tubes_per_type: int = 2,
    volume: int = 10,
    max_freezes: int = 3,
) -> Instance:
    instance = Instance(type_names=list(type_names), max_freezes=max_freezes)
    for city_id, name in enumerate(names):
        instance.add_city(City(id=city_id, name=name))
    cohort = instance.add_cohort(0, patients)
    for type_name in type_names:
        sample_type = instance.add_type(cohort.id, type_name)
        for _ in range(tubes_per_type):
            instance.add_tube(sample_type.id, volume)
    return instance


@pytest.fixture
def instance() -> Instance:
    return make_instance()


@pytest.fixture
def service(instance: Instance) -> ArcGraphService:
    return ArcGraphService(instance)


@pytest.fixture
def sample_dir() -> Path:
    return SAMPLE_DIR


@pytest.fixture
def sample_instance() -> Instance:
    return load_instance(
        SAMPLE_DIR / "instance.txt",
        solution_path=SAMPLE_DIR / "solution.txt",
        types_path=SAMPLE_DIR / "types.txt",
        map_path=SAMPLE_DIR / "map.geojson",
    )


@pytest.fixture
def sample_service(sample_instance: Instance) -> ArcGraphService:
    return ArcGraphService(sample_instance)


def assert_mirrors_consistent(instance: Instance) -> None:
    """Every arc is listed exactly once by its origin, destination and tube."""
    for arc in instance.arcs.values():
        assert instance.city(arc.origin_id).outgoing_arcs.count(arc.id) == 1
        assert instance.city(arc.destination_id).incoming_arcs.count(arc.id) == 1
        assert instance.tube(arc.tube_id).arc_ids.count(arc.id) == 1
    for city in instance.cities.values():
        for arc_id in city.outgoing_arcs:
            assert instance.arcs[arc_id].origin_id == city.id
        for arc_id in city.incoming_arcs:
            assert instance.arcs[arc_id].destination_id == city.id
    for tube in instance.tubes.values():
        for arc_id in tube.arc_ids:
            assert instance.arcs[arc_id].tube_id == tube.id


@pytest.fixture
def check_mirrors():
    return assert_mirrors_consistent


@pytest.fixture
def instance_factory():
    return make_instance
