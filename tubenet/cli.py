"""Command-line interface for tubenet."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, List, Optional

import jsonschema
import pandas as pd
import yaml

from tubenet.flows.calculator import busiest_city, compute_aliquots, total_freezes
from tubenet.loader import Workspace, load_workspace
from tubenet.logging import get_logger, level_for_flags, set_global_log_level
from tubenet.report import tubes_frame
from tubenet.session import EditingSession
from tubenet.types.base import DrawRule

logger = get_logger(__name__)


def _format_table(
    headers: List[str],
    rows: List[List[Any]],
    min_width: int = 6,
    max_col_width: Optional[int] = None,
) -> str:
    """Format data as a simple ASCII table.

    Args:
        headers: Column headers.
        rows: Data rows.
        min_width: Minimum column width.
        max_col_width: Clip cells longer than this, when given.

    Returns:
        Formatted table string, empty when there are no rows.
    """
    if not rows:
        return ""

    def clip(val: Any) -> str:
        s = "-" if pd.isna(val) else str(val)
        if max_col_width is not None and len(s) > max_col_width:
            return s[: max_col_width - 3] + "..."
        return s

    all_rows = [[clip(h) for h in headers]] + [[clip(v) for v in row] for row in rows]
    col_widths = [
        max(min_width, max(len(row[i]) for row in all_rows))
        for i in range(len(headers))
    ]

    def format_row(row_data: List[str]) -> str:
        return "   " + " | ".join(
            f"{item:<{col_widths[i]}}" for i, item in enumerate(row_data)
        )

    lines = [format_row(all_rows[0])]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    lines.extend(format_row(row) for row in all_rows[1:])
    return "\n".join(lines)


def _plural(n: int, singular: str, plural: Optional[str] = None) -> str:
    if n == 1:
        return singular
    return plural or (singular + "s")


def _load(path: Path, draw_rule: Optional[str]) -> Workspace:
    try:
        workspace = load_workspace(path)
    except FileNotFoundError as exc:
        print(f"❌ {exc}")
        sys.exit(1)
    except jsonschema.ValidationError as exc:
        print(f"❌ Invalid workspace {path}: {exc.message}")
        sys.exit(1)
    except (ValueError, yaml.YAMLError) as exc:
        print(f"❌ Failed to load workspace {path}: {exc}")
        sys.exit(1)
    if draw_rule is not None:
        workspace.validation.draw_rule = DrawRule.from_string(draw_rule)
    return workspace


def _inspect_workspace(path: Path, detail: bool = False) -> None:
    """Print a summary of the workspace's instance and solution."""
    workspace = _load(path, None)
    instance = workspace.instance
    summary = compute_aliquots(instance)

    print(f"Workspace: {workspace.name}")
    print(f"  Cities:       {len(instance.cities)}")
    print(f"  Cohorts:      {len(instance.cohorts)}")
    print(f"  Types:        {', '.join(instance.type_names)}")
    print(
        f"  Tubes:        {len(instance.tubes)} "
        f"({_plural(len(instance.arcs), 'arc')}: {len(instance.arcs)})"
    )
    print(f"  Max freezes:  {instance.max_freezes}")
    print(f"  Freezes:      {total_freezes(instance)}")
    print(f"  Aliquots:     {summary.total}")
    city = busiest_city(instance, summary)
    if city is not None:
        print(f"  Most aliquots at {city.display_name} ({summary.per_city[city.id]})")

    frame = tubes_frame(instance)
    if detail:
        frame_rows = frame.values.tolist()
    else:
        frame_rows = frame[frame["arcs"] > 0].values.tolist()
    table = _format_table(list(frame.columns), frame_rows, max_col_width=32)
    if table:
        print("\nTubes:")
        print(table)


def _validate_workspace(path: Path, draw_rule: Optional[str]) -> None:
    """Validate the workspace's solution; exit with status 1 when infeasible."""
    workspace = _load(path, draw_rule)
    session = EditingSession.from_workspace(workspace)
    result = session.validate()
    if result:
        print("✅ Solution is feasible.")
        return
    rule_name = result.rule.name if result.rule is not None else "validation"
    print(f"❌ Rule {rule_name} failed:\n{result.message}")
    sys.exit(1)


def _export_workspace(path: Path, output: Optional[Path], draw_rule: Optional[str]) -> None:
    """Validate, then write the solution file; exit with status 1 when infeasible."""
    workspace = _load(path, draw_rule)
    session = EditingSession.from_workspace(workspace)
    saved = session.save(output if output is not None else workspace.export_path)
    if not saved:
        print(f"❌ Export aborted:\n{saved.validation.message}")
        sys.exit(1)
    print(f"✅ Solution written to {saved.path}")


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``tubenet`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="tubenet",
        description="Inspect, validate and export tube routing solutions.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{inspect,validate,export}",
        help="Available commands",
    )

    inspect_parser = subparsers.add_parser("inspect", help="Summarize a workspace")
    inspect_parser.add_argument("workspace", type=Path, help="Path to workspace YAML")
    inspect_parser.add_argument(
        "--detail",
        "-d",
        action="store_true",
        help="List every tube, including tubes without arcs",
    )

    validate_parser = subparsers.add_parser(
        "validate", help="Check that the solution is feasible"
    )
    validate_parser.add_argument("workspace", type=Path, help="Path to workspace YAML")

    export_parser = subparsers.add_parser(
        "export", help="Validate, then write the solution file"
    )
    export_parser.add_argument("workspace", type=Path, help="Path to workspace YAML")
    export_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Solution file to write (default: export.file_name next to the workspace)",
    )

    for p in (validate_parser, export_parser):
        p.add_argument(
            "--draw-rule",
            choices=[rule.name.lower() for rule in DrawRule],
            default=None,
            help="Override the workspace's draw rule",
        )

    effective_args = sys.argv[1:] if argv is None else argv
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    set_global_log_level(level_for_flags(args.verbose, args.quiet))
    logger.debug("Debug logging enabled")

    if args.command == "inspect":
        _inspect_workspace(args.workspace, args.detail)
    elif args.command == "validate":
        _validate_workspace(args.workspace, args.draw_rule)
    elif args.command == "export":
        _export_workspace(args.workspace, args.output, args.draw_rule)


if __name__ == "__main__":
    main()
