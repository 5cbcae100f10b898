"""Solution export in the two-block text format read by ``parse_solution``."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from tubenet.config import EXPORT_CONFIG, ExportConfig
from tubenet.logging import get_logger
from tubenet.model.instance import Instance

LOGGER = get_logger(__name__)

FIELD_SEPARATOR = "\t"
RECORD_SEPARATOR = "\n"


def format_solution(instance: Instance) -> str:
    """Serialize the visited cities and arcs of every tube.

    Block 1 has one record per tube: cohort index, type index, tube index
    (all 0-based), visited city count, then the visited city ids. Block 2 has,
    per tube, its arc count followed by one ``origin destination`` record per
    arc. Tubes appear in cohort/type/tube order in both blocks. Fields are
    tab-separated and every record ends with a newline.
    """
    records: List[str] = []

    for i, cohort in enumerate(instance.cohorts.values()):
        for j, type_id in enumerate(cohort.type_ids):
            for k, tube_id in enumerate(instance.types[type_id].tube_ids):
                city_ids = instance.tubes[tube_id].city_ids
                fields = [i, j, k, len(city_ids), *city_ids]
                records.append(FIELD_SEPARATOR.join(str(f) for f in fields))

    for _, _, tube in instance.iter_tubes():
        records.append(str(len(tube.arc_ids)))
        for arc_id in tube.arc_ids:
            arc = instance.arcs[arc_id]
            records.append(f"{arc.origin_id}{FIELD_SEPARATOR}{arc.destination_id}")

    return "".join(record + RECORD_SEPARATOR for record in records)


def write_solution(
    instance: Instance,
    path: Union[str, Path, None] = None,
    config: Optional[ExportConfig] = None,
) -> Path:
    """Write ``format_solution`` output to ``path``.

    Args:
        instance: Instance to export.
        path: Target file; ``config.file_name`` in the working directory when None.
        config: Export settings.

    Returns:
        The path written.
    """
    config = config if config is not None else EXPORT_CONFIG
    target = Path(path) if path is not None else Path(config.file_name)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(format_solution(instance), encoding="utf-8")
    LOGGER.info("Solution written to %s", target)
    return target
