"""CLI for layout files: export, import and inspect."""

from __future__ import annotations

import argparse
import json
import sys
from itertools import combinations
from pathlib import Path
from typing import Any, Sequence

from loguru import logger

from roomplan.exceptions import ConfigurationError, LayoutImportError
from roomplan.geometry.contract import DEFAULT_CELL_SIZE, DEFAULT_INCHES_PER_CELL
from roomplan.geometry.furniture import check_furniture_collision
from roomplan.geometry.grid import calculate_line_length
from roomplan.geometry.lines import do_lines_intersect
from roomplan.logging_config import setup_logging
from roomplan.persistence import LayoutStore, coerce_grid_scale, coerce_models, parse_layout
from roomplan.schema import FurnitureInstance, FurnitureTemplate, Line
from roomplan.storage import LocalStorage


def inspect_layout(
    data: dict[str, Any],
    *,
    cell_size: float = DEFAULT_CELL_SIZE,
    inches_per_cell: float | None = None,
) -> dict[str, Any]:
    """Build a QA report for a parsed layout document."""
    lines = coerce_models(Line, data.get("lines") or [], "line")
    furniture = coerce_models(FurnitureInstance, data.get("furniture") or [], "furniture")
    templates = {t.id: t for t in coerce_models(FurnitureTemplate, data.get("templates") or [], "template")}
    if inches_per_cell is None:
        stored = data.get("gridScale")
        inches_per_cell = (coerce_grid_scale(stored) if stored is not None else None) or DEFAULT_INCHES_PER_CELL

    intersections = [
        [a.id, b.id] for a, b in combinations(lines, 2) if do_lines_intersect(a, b)
    ]
    resolved = [(item, templates[item.templateId]) for item in furniture if item.templateId in templates]
    collisions = [
        [f1.id, f2.id]
        for (f1, t1), (f2, t2) in combinations(resolved, 2)
        if check_furniture_collision(f1, t1, f2, t2, inches_per_cell)
    ]
    dangling = [item.id for item in furniture if item.templateId not in templates]

    return {
        "gridScale": inches_per_cell,
        "lines": [
            {
                "id": line.id,
                "type": line.type,
                "lengthInches": round(calculate_line_length(line.start, line.end, cell_size, inches_per_cell), 2),
            }
            for line in lines
        ],
        "intersections": intersections,
        "collisions": collisions,
        "danglingFurniture": dangling,
        "summary": {
            "line_count": len(lines),
            "furniture_count": len(furniture),
            "template_count": len(templates),
            "total_issues": len(collisions) + len(dangling),
        },
    }


def _cmd_export(args: argparse.Namespace) -> int:
    store = LayoutStore(LocalStorage(args.storage_dir))
    payload = store.export_layout()
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(payload, encoding="utf-8")
        logger.info(f"Exported layout to {args.output}")
    else:
        sys.stdout.write(payload + "\n")
    return 0


def _cmd_import(args: argparse.Namespace) -> int:
    store = LayoutStore(LocalStorage(args.storage_dir))
    text = args.file.read_text(encoding="utf-8")
    if not store.import_layout(text):
        logger.error(f"Failed to import {args.file}: not valid JSON")
        return 1
    logger.info(f"Imported {args.file} into {args.storage_dir}")
    return 0


def _cmd_inspect(args: argparse.Namespace) -> int:
    try:
        data = parse_layout(args.file.read_text(encoding="utf-8"))
    except LayoutImportError as exc:
        logger.error(f"Cannot inspect {args.file}: {exc.message}")
        return 1
    report = inspect_layout(data, cell_size=args.cell_size, inches_per_cell=args.inches_per_cell)
    sys.stdout.write(json.dumps(report, indent=2) + "\n")
    if report["summary"]["total_issues"] > 0:
        logger.warning(f"Found {report['summary']['total_issues']} layout issues")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="roomplan", description="Room layout import/export and inspection")
    parser.add_argument("--log-level", default="INFO", help="Log level (default: INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    export = sub.add_parser("export", help="Write the stored layout as JSON")
    export.add_argument("--storage-dir", type=Path, required=True, help="Layout storage directory")
    export.add_argument("--output", type=Path, help="Output file (default: stdout)")
    export.set_defaults(func=_cmd_export)

    imp = sub.add_parser("import", help="Merge a layout JSON file into storage")
    imp.add_argument("file", type=Path, help="Layout JSON file")
    imp.add_argument("--storage-dir", type=Path, required=True, help="Layout storage directory")
    imp.set_defaults(func=_cmd_import)

    inspect = sub.add_parser("inspect", help="Report lengths, intersections and collisions of a layout file")
    inspect.add_argument("file", type=Path, help="Layout JSON file")
    inspect.add_argument("--cell-size", type=float, default=DEFAULT_CELL_SIZE, help="Pixels per grid cell")
    inspect.add_argument("--inches-per-cell", type=float, help="Scale override (default: file gridScale or 12)")
    inspect.set_defaults(func=_cmd_inspect)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        setup_logging(level=args.log_level)
    except ConfigurationError as exc:
        sys.stderr.write(f"roomplan: {exc.message}\n")
        return 2
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
