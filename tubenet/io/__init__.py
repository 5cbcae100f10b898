"""Text-file import and export of instances and solutions."""

from tubenet.io.export import format_solution, write_solution
from tubenet.io.parser import (
    InstanceFormatError,
    load_instance,
    parse_instance,
    parse_map,
    parse_solution,
    parse_type_names,
    parse_volume,
)

__all__ = [
    "InstanceFormatError",
    "format_solution",
    "load_instance",
    "parse_instance",
    "parse_map",
    "parse_solution",
    "parse_type_names",
    "parse_volume",
    "write_solution",
]
