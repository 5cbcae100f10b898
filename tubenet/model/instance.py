"""Tube logistics domain model: City, Cohort, SampleType, Tube, Arc, Instance.

Entities live in flat, id-keyed collections owned by ``Instance`` and refer to
each other by integer id. Resolve references through the instance, e.g.
``instance.cohort_city(tube)`` rather than following object pointers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from tubenet.logging import get_logger
from tubenet.types.base import ArcID, CityID, CohortID, TubeID, TypeID, Volume

LOGGER = get_logger(__name__)


@dataclass
class City:
    """A city of the redistribution network.

    Attributes:
        id (int): Unique, stable identifier (as used in instance files).
        name (str): Human-readable name.
        position (Optional[Tuple[float, float]]): Latitude/longitude, if known.
        is_cohort (bool): Whether a cohort originates in this city.
        demands (Dict[str, Volume]): Type name -> required volume.
        outgoing_arcs (List[int]): Ids of arcs leaving this city, in insertion order.
        incoming_arcs (List[int]): Ids of arcs entering this city, in insertion order.
        aliquots (int): Last computed number of aliquots performed here.
    """

    id: CityID
    name: str = ""
    position: Optional[Tuple[float, float]] = None
    is_cohort: bool = False
    demands: Dict[str, Volume] = field(default_factory=dict)
    outgoing_arcs: List[ArcID] = field(default_factory=list)
    incoming_arcs: List[ArcID] = field(default_factory=list)
    aliquots: int = 0

    @property
    def display_name(self) -> str:
        """Name decorated with the id, e.g. ``"Lyon [3]"``."""
        return f"{self.name} [{self.id}]"

    def demand(self, type_name: str) -> Volume:
        """Return the demand for ``type_name`` (0 when the type is not listed)."""
        return self.demands.get(type_name, 0)


@dataclass
class Cohort:
    """A group of patients whose samples originate at one city.

    Attributes:
        id (int): Position of the cohort in the instance (0-based).
        city_id (int): Origin city.
        patient_count (int): Number of patients; scales aliquot counts.
        type_ids (List[int]): Sample types served, in instance order.
    """

    id: CohortID
    city_id: CityID
    patient_count: int = 0
    type_ids: List[TypeID] = field(default_factory=list)


@dataclass
class SampleType:
    """A sample category served by one cohort.

    Attributes:
        id (int): Unique identifier within the instance.
        name (str): Type name from the global vocabulary.
        cohort_id (int): Owning cohort.
        tube_ids (List[int]): Tubes of this type, ordered by tube number.
    """

    id: TypeID
    name: str
    cohort_id: CohortID
    tube_ids: List[TubeID] = field(default_factory=list)


@dataclass
class Tube:
    """A physical container of fixed capacity routed along arcs.

    Attributes:
        id (int): Unique identifier within the instance.
        number (int): 1-based number within its type.
        volume (Volume): Capacity.
        type_id (int): Owning sample type.
        used_by_cohort (bool): Whether the cohort draws this tube itself.
        city_ids (List[int]): Cities visited, in visitation order (informational).
        arc_ids (List[int]): Arcs owned by this tube.
        aliquots (int): Last computed aliquot count for this tube.
    """

    id: TubeID
    number: int
    volume: Volume
    type_id: TypeID
    used_by_cohort: bool = False
    city_ids: List[CityID] = field(default_factory=list)
    arc_ids: List[ArcID] = field(default_factory=list)
    aliquots: int = 0


@dataclass
class Arc:
    """One directed shipment leg owned by exactly one tube.

    Attributes:
        id (int): Unique identifier within the instance.
        origin_id (int): Origin city.
        destination_id (int): Destination city.
        tube_id (int): Owning tube.
        quantity (Volume): Derived flow, i.e. everything downstream needs.
        handle (Any): Opaque slot for a renderer; never read by tubenet.
    """

    id: ArcID
    origin_id: CityID
    destination_id: CityID
    tube_id: TubeID
    quantity: Volume = 0
    handle: Any = field(default=None, repr=False, compare=False)

    @property
    def is_self_loop(self) -> bool:
        return self.origin_id == self.destination_id


@dataclass
class Solution:
    """Solution-wide derived values.

    Attributes:
        aliquots (int): Last computed total aliquot count.
    """

    aliquots: int = 0


@dataclass
class Instance:
    """Aggregate root owning every entity of one planning session.

    Attributes:
        cities (Dict[int, City]): City id -> City, in file order.
        type_names (List[str]): Global type vocabulary.
        cohorts (Dict[int, Cohort]): Cohort id -> Cohort.
        types (Dict[int, SampleType]): Type id -> SampleType.
        tubes (Dict[int, Tube]): Tube id -> Tube.
        arcs (Dict[int, Arc]): Arc id -> Arc.
        max_freezes (int): Maximum hop count allowed along any delivery chain.
        solution (Solution): Derived solution totals.
    """

    cities: Dict[CityID, City] = field(default_factory=dict)
    type_names: List[str] = field(default_factory=list)
    cohorts: Dict[CohortID, Cohort] = field(default_factory=dict)
    types: Dict[TypeID, SampleType] = field(default_factory=dict)
    tubes: Dict[TubeID, Tube] = field(default_factory=dict)
    arcs: Dict[ArcID, Arc] = field(default_factory=dict)
    max_freezes: int = 0
    solution: Solution = field(default_factory=Solution)
    _next_arc_id: int = field(default=0, init=False, repr=False)

    #
    # Construction
    #
    def add_city(self, city: City) -> City:
        """Add a city keyed by its id.

        Raises:
            ValueError: If a city with the same id already exists.
        """
        if city.id in self.cities:
            raise ValueError(f"City with id {city.id} already exists.")
        self.cities[city.id] = city
        return city

    def add_cohort(self, city_id: CityID, patient_count: int) -> Cohort:
        """Create a cohort originating at ``city_id`` and flag the city.

        Raises:
            KeyError: If the city does not exist.
            ValueError: If the city already hosts a cohort.
        """
        city = self.city(city_id)
        if any(c.city_id == city_id for c in self.cohorts.values()):
            raise ValueError(f"City {city.display_name} already hosts a cohort.")
        cohort = Cohort(id=len(self.cohorts), city_id=city_id, patient_count=patient_count)
        self.cohorts[cohort.id] = cohort
        city.is_cohort = True
        return cohort

    def add_type(self, cohort_id: CohortID, name: str) -> SampleType:
        """Create a sample type for a cohort.

        Raises:
            ValueError: If the cohort already has a type with this name.
        """
        cohort = self.cohort(cohort_id)
        if any(self.types[t].name == name for t in cohort.type_ids):
            raise ValueError(
                f"Cohort {self.city(cohort.city_id).display_name} already has type '{name}'."
            )
        sample_type = SampleType(id=len(self.types), name=name, cohort_id=cohort_id)
        self.types[sample_type.id] = sample_type
        cohort.type_ids.append(sample_type.id)
        return sample_type

    def add_tube(self, type_id: TypeID, volume: Volume) -> Tube:
        """Create the next numbered tube of a type."""
        sample_type = self.type(type_id)
        tube = Tube(
            id=len(self.tubes),
            number=len(sample_type.tube_ids) + 1,
            volume=volume,
            type_id=type_id,
        )
        self.tubes[tube.id] = tube
        sample_type.tube_ids.append(tube.id)
        return tube

    def new_arc_id(self) -> ArcID:
        """Return a fresh arc id. Ids of deleted arcs are never reused."""
        arc_id = self._next_arc_id
        self._next_arc_id += 1
        return arc_id

    #
    # Lookups
    #
    def find_city(self, city_id: CityID) -> Optional[City]:
        """Return the city with this id, or None."""
        return self.cities.get(city_id)

    def find_city_by_name(self, name: str) -> Optional[City]:
        """Return the first city whose name or display name matches, or None."""
        for city in self.cities.values():
            if name in (city.name, city.display_name):
                return city
        return None

    def city(self, city_id: CityID) -> City:
        try:
            return self.cities[city_id]
        except KeyError:
            raise KeyError(f"City with id {city_id} not found.") from None

    def cohort(self, cohort_id: CohortID) -> Cohort:
        try:
            return self.cohorts[cohort_id]
        except KeyError:
            raise KeyError(f"Cohort with id {cohort_id} not found.") from None

    def type(self, type_id: TypeID) -> SampleType:
        try:
            return self.types[type_id]
        except KeyError:
            raise KeyError(f"Type with id {type_id} not found.") from None

    def tube(self, tube_id: TubeID) -> Tube:
        try:
            return self.tubes[tube_id]
        except KeyError:
            raise KeyError(f"Tube with id {tube_id} not found.") from None

    def arc(self, arc_id: ArcID) -> Arc:
        try:
            return self.arcs[arc_id]
        except KeyError:
            raise KeyError(f"Arc with id {arc_id} not found.") from None

    def type_of(self, tube: Tube) -> SampleType:
        return self.type(tube.type_id)

    def cohort_of(self, tube: Tube) -> Cohort:
        return self.cohort(self.type(tube.type_id).cohort_id)

    def cohort_city(self, tube: Tube) -> City:
        """Return the origin city of the cohort owning ``tube``."""
        return self.city(self.cohort_of(tube).city_id)

    def cohort_at(self, city_id: CityID) -> Optional[Cohort]:
        """Return the cohort originating at ``city_id``, or None."""
        for cohort in self.cohorts.values():
            if cohort.city_id == city_id:
                return cohort
        return None

    def find_type(self, cohort_id: CohortID, name: str) -> Optional[SampleType]:
        for type_id in self.cohort(cohort_id).type_ids:
            if self.types[type_id].name == name:
                return self.types[type_id]
        return None

    def find_tube(
        self, cohort_id: CohortID, type_name: str, number: int
    ) -> Optional[Tube]:
        """Return tube ``number`` of ``type_name`` in a cohort, or None."""
        sample_type = self.find_type(cohort_id, type_name)
        if sample_type is None:
            return None
        for tube_id in sample_type.tube_ids:
            if self.tubes[tube_id].number == number:
                return self.tubes[tube_id]
        return None

    def outgoing(self, city: City, tube: Optional[Tube] = None) -> List[Arc]:
        """Return the outgoing arcs of ``city`` in list order, optionally of one tube."""
        arcs = [self.arcs[a] for a in city.outgoing_arcs]
        if tube is not None:
            arcs = [arc for arc in arcs if arc.tube_id == tube.id]
        return arcs

    def incoming(self, city: City) -> List[Arc]:
        return [self.arcs[a] for a in city.incoming_arcs]

    #
    # Iteration
    #
    def iter_tubes(self) -> Iterator[Tuple[Cohort, SampleType, Tube]]:
        """Yield (cohort, type, tube) in cohort/type/tube order.

        This is the order of both blocks of the solution text format.
        """
        for cohort in self.cohorts.values():
            for type_id in cohort.type_ids:
                sample_type = self.types[type_id]
                for tube_id in sample_type.tube_ids:
                    yield cohort, sample_type, self.tubes[tube_id]

    def arc_triples(self) -> List[Tuple[TubeID, CityID, CityID]]:
        """Return (tube id, origin id, destination id) for every arc.

        Independent of object identity; used to compare graphs.
        """
        return [
            (tube.id, self.arcs[a].origin_id, self.arcs[a].destination_id)
            for _, _, tube in self.iter_tubes()
            for a in tube.arc_ids
        ]

    def describe_tube(self, tube: Tube) -> str:
        """Return ``"tube n°<n> of type <name> of cohort <city [id]>"``."""
        sample_type = self.type_of(tube)
        return (
            f"tube n°{tube.number} of type {sample_type.name} of cohort "
            f"{self.cohort_city(tube).display_name}"
        )
