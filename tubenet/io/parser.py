"""Parsers for the flat text files describing an instance and its solution.

Four sources feed an ``Instance``:

- types file: one type name per line;
- map file: GeoJSON ``FeatureCollection`` of cities (id, name, coordinates);
- instance file: counts, cohorts, tube volumes, demand table, max freezes;
- solution file: visited cities per tube, then the arcs of each tube.

Numeric lines are whitespace-separated (tabs in practice). Blank lines are
ignored. Any reference to an unknown city raises ``InstanceFormatError``.
"""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from tubenet.logging import get_logger
from tubenet.model.instance import City, Instance
from tubenet.routing.arc_service import ArcGraphService
from tubenet.types.base import Volume

LOGGER = get_logger(__name__)

PathLike = Union[str, Path]


class InstanceFormatError(ValueError):
    """Raised when an input file does not follow its expected layout.

    Attributes:
        kind: Which file was being parsed ("instance", "solution", ...).
        line: 1-based line number of the offending content, when known.
    """

    def __init__(self, kind: str, message: str, line: Optional[int] = None) -> None:
        self.kind = kind
        self.line = line
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"Invalid {kind} file{where}: {message}")


class _Lines:
    """Non-blank lines of a text file, remembering original line numbers."""

    def __init__(self, kind: str, text: str) -> None:
        self.kind = kind
        self._lines = [
            (number, line)
            for number, line in enumerate(text.splitlines(), start=1)
            if line.strip()
        ]
        self._pos = 0

    def __len__(self) -> int:
        return len(self._lines) - self._pos

    def next(self, what: str) -> tuple[int, List[str]]:
        if self._pos >= len(self._lines):
            raise InstanceFormatError(self.kind, f"unexpected end of file, expected {what}")
        number, line = self._lines[self._pos]
        self._pos += 1
        return number, line.split()

    def next_int(self, what: str) -> int:
        number, tokens = self.next(what)
        return _to_int(self.kind, tokens[0], number, what)


def _to_int(kind: str, token: str, line: int, what: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise InstanceFormatError(
            kind, f"expected an integer for {what}, got '{token}'", line
        ) from None


def parse_volume(token: str, kind: str = "instance", line: Optional[int] = None) -> Volume:
    """Parse a non-negative volume exactly.

    Returns:
        ``int`` for integral values, ``Decimal`` otherwise.

    Raises:
        InstanceFormatError: If the token is not a non-negative number.
    """
    try:
        value = Decimal(token)
    except InvalidOperation:
        raise InstanceFormatError(kind, f"invalid volume '{token}'", line) from None
    if not value.is_finite() or value < 0:
        raise InstanceFormatError(kind, f"invalid volume '{token}'", line)
    if value == value.to_integral_value():
        return int(value)
    return value


def _row(
    kind: str, tokens: Sequence[str], size: int, line: int, what: str
) -> List[str]:
    if len(tokens) < size:
        raise InstanceFormatError(
            kind, f"expected {size} value(s) for {what}, got {len(tokens)}", line
        )
    return list(tokens[:size])


#
# Types and map
#
def parse_type_names(text: str) -> List[str]:
    """Return the type names listed one per line."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def parse_map(data: Dict[str, Any]) -> List[City]:
    """Build cities from a GeoJSON feature collection.

    Each feature provides ``id``, ``properties.name`` and
    ``geometry.coordinates`` (first two values are kept as the position).
    """
    features = data.get("features")
    if not isinstance(features, list):
        raise InstanceFormatError("map", "expected a 'features' list")

    cities: List[City] = []
    for index, feature in enumerate(features):
        try:
            city_id = int(feature["id"])
            name = str(feature["properties"]["name"])
            coordinates = feature["geometry"]["coordinates"]
            position = (float(coordinates[0]), float(coordinates[1]))
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise InstanceFormatError(
                "map", f"feature #{index} is missing id, name or coordinates ({exc})"
            ) from None
        cities.append(City(id=city_id, name=name, position=position))
    return cities


#
# Instance
#
def parse_instance(
    text: str,
    type_names: Optional[Sequence[str]] = None,
    cities: Optional[Sequence[City]] = None,
) -> Instance:
    """Build an ``Instance`` (without arcs) from instance-file text.

    Layout, one item per line: city count; cohort count; cohort city ids;
    cohort patient counts; type count; tube count; ``cohorts * types`` lines
    of tube volumes (cohort-major); one demand line per city (one column per
    type); max freezes.

    Args:
        text: Instance file content.
        type_names: Type vocabulary; only the first ``type count`` names are
            used. Defaults to ``T1``, ``T2``, ...
        cities: Known cities (e.g. from the map); only the first ``city
            count`` are used. Defaults to cities named after their id.

    Returns:
        The populated instance.

    Raises:
        InstanceFormatError: On malformed content or unknown city ids.
    """
    kind = "instance"
    lines = _Lines(kind, text)
    instance = Instance()

    city_count = lines.next_int("city count")
    if cities is None:
        cities = [City(id=i, name=str(i)) for i in range(city_count)]
    elif len(cities) < city_count:
        raise InstanceFormatError(
            kind, f"{city_count} cities required but only {len(cities)} known"
        )
    for city in cities[:city_count]:
        instance.add_city(city)

    cohort_count = lines.next_int("cohort count")
    number, tokens = lines.next("cohort cities")
    cohort_cities = _row(kind, tokens, cohort_count, number, "cohort cities")
    number, tokens = lines.next("cohort patient counts")
    patient_counts = _row(kind, tokens, cohort_count, number, "cohort patient counts")
    for city_token, patients_token in zip(cohort_cities, patient_counts):
        city_id = _to_int(kind, city_token, number, "cohort city")
        if instance.find_city(city_id) is None:
            raise InstanceFormatError(kind, f"unknown cohort city id {city_id}", number)
        instance.add_cohort(city_id, _to_int(kind, patients_token, number, "patient count"))

    type_count = lines.next_int("type count")
    if type_names is None:
        type_names = [f"T{j + 1}" for j in range(type_count)]
    elif len(type_names) < type_count:
        raise InstanceFormatError(
            kind, f"{type_count} types required but only {len(type_names)} named"
        )
    instance.type_names = list(type_names[:type_count])
    tube_count = lines.next_int("tube count")

    for cohort in list(instance.cohorts.values()):
        for type_name in instance.type_names:
            sample_type = instance.add_type(cohort.id, type_name)
            number, tokens = lines.next(f"tube volumes of type {type_name}")
            for token in _row(kind, tokens, tube_count, number, "tube volumes"):
                instance.add_tube(sample_type.id, parse_volume(token, kind, number))

    for city in instance.cities.values():
        number, tokens = lines.next(f"demands of city {city.id}")
        row = _row(kind, tokens, type_count, number, "demands")
        for type_name, token in zip(instance.type_names, row):
            city.demands[type_name] = parse_volume(token, kind, number)

    instance.max_freezes = lines.next_int("max freezes")
    LOGGER.debug(
        "Parsed instance: %d cities, %d cohorts, %d types, %d tubes per type",
        city_count,
        cohort_count,
        type_count,
        tube_count,
    )
    return instance


#
# Solution
#
def parse_solution(
    text: str, instance: Instance, service: Optional[ArcGraphService] = None
) -> ArcGraphService:
    """Attach the visited cities and arcs of a solution file to ``instance``.

    Block 1 has one line per tube in cohort/type/tube order:
    ``cohort type tube count city_id...``. A tube whose visited cities include
    its cohort city is drawn by the cohort. Block 2 lists, per tube in the same
    order, the arc count then one ``origin destination`` line per arc.

    Args:
        text: Solution file content.
        instance: Instance built by ``parse_instance``.
        service: Arc service used to create arcs; a new one when None.

    Returns:
        The arc service that created the arcs.

    Raises:
        InstanceFormatError: On malformed content or unknown city ids.
    """
    kind = "solution"
    service = service if service is not None else ArcGraphService(instance)
    lines = _Lines(kind, text)

    def city_at(token: str, number: int) -> City:
        city = instance.find_city(_to_int(kind, token, number, "city id"))
        if city is None:
            raise InstanceFormatError(kind, f"unknown city id {token}", number)
        return city

    tubes = list(instance.iter_tubes())
    for cohort, _, tube in tubes:
        number, tokens = lines.next(f"visited cities of tube id {tube.id}")
        if len(tokens) < 4:
            raise InstanceFormatError(kind, "expected 'cohort type tube count ...'", number)
        visited = [city_at(token, number).id for token in tokens[4:]]
        declared = _to_int(kind, tokens[3], number, "visited city count")
        if declared != len(visited):
            LOGGER.warning(
                "Solution line %d declares %d cities but lists %d",
                number,
                declared,
                len(visited),
            )
        tube.city_ids = visited
        tube.used_by_cohort = cohort.city_id in visited

    arc_count = 0
    for _, _, tube in tubes:
        count = lines.next_int(f"arc count of tube id {tube.id}")
        for _ in range(count):
            number, tokens = lines.next(f"arc of tube id {tube.id}")
            origin, destination = _row(kind, tokens, 2, number, "arc")
            service.create_arc(city_at(origin, number), city_at(destination, number), tube)
        arc_count += count

    if len(lines):
        LOGGER.warning("Ignoring %d trailing line(s) in solution file", len(lines))
    LOGGER.debug("Parsed solution: %d tubes, %d arcs", len(tubes), arc_count)
    return service


#
# Files
#
def load_instance(
    instance_path: PathLike,
    solution_path: Optional[PathLike] = None,
    types_path: Optional[PathLike] = None,
    map_path: Optional[PathLike] = None,
    type_names: Optional[Sequence[str]] = None,
) -> Instance:
    """Read and parse the instance files, then the solution if given.

    Args:
        instance_path: Instance file.
        solution_path: Solution file, optional.
        types_path: Types file, optional; ignored when ``type_names`` is given.
        map_path: GeoJSON map, optional.
        type_names: Explicit type vocabulary.

    Returns:
        The fully built instance.
    """
    if type_names is None and types_path is not None:
        type_names = parse_type_names(Path(types_path).read_text(encoding="utf-8"))

    cities = None
    if map_path is not None:
        with open(map_path, "r", encoding="utf-8") as f:
            cities = parse_map(json.load(f))

    instance = parse_instance(
        Path(instance_path).read_text(encoding="utf-8"), type_names, cities
    )
    if solution_path is not None:
        parse_solution(Path(solution_path).read_text(encoding="utf-8"), instance)
    LOGGER.info(
        "Loaded instance %s (%d cities, %d tubes, %d arcs)",
        instance_path,
        len(instance.cities),
        len(instance.tubes),
        len(instance.arcs),
    )
    return instance
