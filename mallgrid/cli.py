"""Command line entry point: export, validate, import-instances, schema."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Sequence

from loguru import logger

from mallgrid.exceptions import ConfigurationError, MallGridError, MalformedDocumentError
from mallgrid.export.scene3d import build_scene3d, document_to_json
from mallgrid.geometry.contract import INSTANCE_CELL_SIZE
from mallgrid.grid.scene_io import layout_from_instances, layout_from_scene, layout_to_scene
from mallgrid.logging_config import setup_logging
from mallgrid.settings import Settings
from mallgrid.spatial.bounds import make_bounds
from mallgrid.templates.loader import load_template
from mallgrid.validate.scene_rules import evaluate_rules
from mallgrid.validate.schema_check import scene3d_json_schema, validate_document
from mallgrid.validate.switchboard import RulesSwitchboard

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BLOCKED = 2


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise MalformedDocumentError(f"{path} is not valid JSON: {exc}", {"path": str(path)}) from exc


def _write(text: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(text + "\n")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    logger.info(f"Wrote {output}")


def _load_settings(path: Path | None) -> Settings:
    if path is None and not os.getenv("MALLGRID_CONFIG"):
        return Settings()
    try:
        return Settings.load(path)
    except (FileNotFoundError, ValueError) as exc:
        raise ConfigurationError(str(exc)) from exc


def cmd_export(args: argparse.Namespace, settings: Settings) -> int:
    scene = layout_from_scene(_read_json(args.scene))
    bounds = make_bounds(load_template(_read_json(args.template))) if args.template else None

    switchboard = RulesSwitchboard(settings.rules)
    blocked = []
    for rule_id, warnings in evaluate_rules(scene.layout, bounds, switchboard).items():
        for message in warnings:
            logger.warning(f"[RULES] {rule_id}: {message}")
        if warnings and switchboard.mode(rule_id) == "block":
            blocked.append(rule_id)
    if blocked:
        logger.error(f"Export blocked by rule(s): {', '.join(blocked)}")
        return EXIT_BLOCKED

    document = build_scene3d(
        scene.layout,
        cell_size=args.cell_size or scene.cell_size,
        name=args.name or scene.name,
        settings=settings.export,
        created=args.created,
        max_examples=settings.rules.max_examples,
    )
    _write(document_to_json(document), args.output)
    return EXIT_OK


def cmd_validate(args: argparse.Namespace, settings: Settings) -> int:
    issues = validate_document(_read_json(args.document))
    for issue in issues:
        sys.stdout.write(f"{issue}\n")
    if issues:
        logger.error(f"{args.document}: {len(issues)} issue(s)")
        return EXIT_ERROR
    logger.info(f"{args.document}: valid")
    return EXIT_OK


def cmd_import_instances(args: argparse.Namespace, settings: Settings) -> int:
    payload = _read_json(args.instances)
    instances = payload.get("instances") if isinstance(payload, dict) else payload
    if not isinstance(instances, list):
        raise MalformedDocumentError(f"{args.instances} has no instance list", {"path": str(args.instances)})
    layout = layout_from_instances(
        instances,
        width=args.width or settings.grid.width,
        height=args.height or settings.grid.height,
        cell=args.cell,
    )
    scene = layout_to_scene(layout, cell_size=settings.grid.cell_size_px, created=args.created)
    _write(json.dumps(scene, indent=2), args.output)
    return EXIT_OK


def cmd_schema(args: argparse.Namespace, settings: Settings) -> int:
    _write(json.dumps(scene3d_json_schema(), indent=2), args.output)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mallgrid", description="Mall floor layout tools")
    parser.add_argument("--config", type=Path, help="Settings YAML (default: $MALLGRID_CONFIG or built-in defaults)")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    parser.add_argument("--log-json", action="store_true", help="Emit JSON log lines")
    sub = parser.add_subparsers(dest="command", required=True)

    export = sub.add_parser("export", help="Export a scene.v1 document as scene.3d.v1")
    export.add_argument("scene", type=Path, help="scene.v1 JSON")
    export.add_argument("--template", type=Path, help="Mall/unit/room template used as containment")
    export.add_argument("--cell-size", type=float, help="Cell size in px (default: the scene's grid.cellSize)")
    export.add_argument("--name", help="Scene name written to meta.name")
    export.add_argument("--created", help="Pin meta.created (ISO timestamp)")
    export.add_argument("--output", "-o", type=Path, help="Output file (default: stdout)")
    export.set_defaults(func=cmd_export)

    validate = sub.add_parser("validate", help="Validate a scene.3d.v1 document")
    validate.add_argument("document", type=Path)
    validate.set_defaults(func=cmd_validate)

    instances = sub.add_parser("import-instances", help="Convert a legacy instance list to scene.v1")
    instances.add_argument("instances", type=Path)
    instances.add_argument("--width", type=int, help="Grid width in tiles")
    instances.add_argument("--height", type=int, help="Grid height in tiles")
    instances.add_argument("--cell", type=float, default=INSTANCE_CELL_SIZE, help="World units per grid cell")
    instances.add_argument("--created", help="Pin meta.created (ISO timestamp)")
    instances.add_argument("--output", "-o", type=Path)
    instances.set_defaults(func=cmd_import_instances)

    schema = sub.add_parser("schema", help="Print the scene.3d.v1 JSON Schema")
    schema.add_argument("--output", "-o", type=Path)
    schema.set_defaults(func=cmd_schema)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = _load_settings(args.config)
        setup_logging(
            level=(args.log_level or settings.logging.level).upper(),
            json_format=args.log_json or settings.logging.json_format,
            log_file=settings.logging.log_file,
        )
        return args.func(args, settings)
    except MallGridError as exc:
        logger.error(f"{type(exc).__name__}: {exc.message}")
        if exc.details:
            logger.debug(f"Details: {exc.details}")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
