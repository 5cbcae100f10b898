"""YAML loader + schema validation for workspace manifests.

A workspace manifest names the files of one planning session and its
settings::

    name: lyon-20
    instance: I_20_4_4_4_3_00.txt
    solution: sol_20_4_4_4_3_00.txt
    types: types.txt
    map: map.geojson
    validation:
      draw_rule: exactly_one
    export:
      file_name: solution.txt

Relative paths resolve against the manifest's directory.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
import yaml

from tubenet.config import ExportConfig, ValidationConfig
from tubenet.io.parser import load_instance
from tubenet.logging import get_logger
from tubenet.model.instance import Instance
from tubenet.types.base import DrawRule

LOGGER = get_logger(__name__)


def _workspace_schema() -> Dict[str, Any]:
    schema_file = resources.files("tubenet.schemas").joinpath("workspace.json")
    with schema_file.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_workspace_yaml(yaml_str: str) -> Dict[str, Any]:
    """Load and validate a workspace manifest string.

    Returns:
        The manifest as a dictionary with its shape enforced by the packaged
        JSON schema.

    Raises:
        ValueError: If the YAML does not map to a dictionary.
        jsonschema.ValidationError: If the manifest violates the schema.
    """
    data = yaml.safe_load(yaml_str)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("The provided YAML must map to a dictionary at top-level.")

    if "types" in data and "type_names" in data:
        raise ValueError("Use either 'types' (a file) or 'type_names' (a list), not both.")

    jsonschema.validate(data, _workspace_schema())
    return data


@dataclass
class Workspace:
    """A loaded planning session: the instance plus its settings.

    Attributes:
        name: Workspace name (manifest ``name`` or the manifest file stem).
        instance: Fully parsed instance, with the solution arcs if given.
        validation: Validation settings.
        export: Export settings.
        base_dir: Directory relative paths were resolved against.
        sources: Resolved input files by role (``instance``, ``solution``, ...).
    """

    name: str
    instance: Instance
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    base_dir: Path = field(default_factory=Path.cwd)
    sources: Dict[str, Path] = field(default_factory=dict)

    @property
    def export_path(self) -> Path:
        return self.base_dir / self.export.file_name


def _validation_config(section: Dict[str, Any]) -> ValidationConfig:
    config = ValidationConfig()
    if "draw_rule" in section:
        config.draw_rule = DrawRule.from_string(section["draw_rule"])
    if "check_acyclic" in section:
        config.check_acyclic = bool(section["check_acyclic"])
    return config


def _export_config(section: Dict[str, Any]) -> ExportConfig:
    config = ExportConfig()
    if "file_name" in section:
        config.file_name = section["file_name"]
    return config


def load_workspace(path: Path | str) -> Workspace:
    """Read a manifest file, then parse every file it names.

    Args:
        path: Manifest YAML file.

    Returns:
        The loaded workspace. It is only returned once all files are parsed.

    Raises:
        FileNotFoundError: If the manifest or a referenced file is missing.
    """
    manifest_path = Path(path)
    data = load_workspace_yaml(manifest_path.read_text(encoding="utf-8"))
    base_dir = manifest_path.resolve().parent

    sources: Dict[str, Path] = {}
    for role in ("instance", "solution", "types", "map"):
        if role in data:
            source = base_dir / data[role]
            if not source.is_file():
                raise FileNotFoundError(f"{role} file not found: {source}")
            sources[role] = source

    type_names: Optional[List[str]] = data.get("type_names")
    instance = load_instance(
        sources["instance"],
        solution_path=sources.get("solution"),
        types_path=sources.get("types"),
        map_path=sources.get("map"),
        type_names=type_names,
    )

    workspace = Workspace(
        name=data.get("name", manifest_path.stem),
        instance=instance,
        validation=_validation_config(data.get("validation", {})),
        export=_export_config(data.get("export", {})),
        base_dir=base_dir,
        sources=sources,
    )
    LOGGER.info("Workspace '%s' loaded from %s", workspace.name, manifest_path)
    return workspace
