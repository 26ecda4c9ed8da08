"""Validate JSON-like documents against the export schema.

Schema violations come back as a list of :class:`SchemaIssue`; an empty
list means the document is valid. Nothing here raises for bad input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Type

from loguru import logger
from pydantic import BaseModel, ValidationError

from mallgrid.export.scene3d import compute_digest, compute_parity
from mallgrid.export.schema import Scene3DDocument


@dataclass(frozen=True)
class SchemaIssue:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


def format_path(loc: Sequence[int | str]) -> str:
    """``("tiles", "floor", 0, 1)`` -> ``"tiles.floor[0][1]"``; empty -> ``"root"``."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path or "root"


def _row_major(coord: tuple[int, int]) -> tuple[int, int]:
    return coord[1], coord[0]


def _integrity_issues(document: Scene3DDocument) -> list[SchemaIssue]:
    """Cross-field checks: ordering, parity and digest against the content."""
    issues: list[SchemaIssue] = []
    tiles = list(document.tiles.floor)
    horizontal = list(document.edges.horizontal)
    vertical = list(document.edges.vertical)

    if tiles != sorted(set(tiles), key=_row_major):
        issues.append(SchemaIssue("tiles.floor", "must be unique and sorted by (y, x)"))
    if horizontal != sorted(set(horizontal), key=_row_major):
        issues.append(SchemaIssue("edges.horizontal", "must be unique and sorted by (y, x)"))
    if vertical != sorted(set(vertical)):
        issues.append(SchemaIssue("edges.vertical", "must be unique and sorted by (x, y)"))

    expected = compute_parity(tiles, horizontal, vertical)
    for name, value in expected.model_dump().items():
        actual = getattr(document.meta.parity, name)
        if actual != value:
            issues.append(SchemaIssue(f"meta.parity.{name}", f"is {actual}, content has {value}"))

    digest = compute_digest(tiles, horizontal, vertical)
    if document.meta.digest != digest:
        issues.append(SchemaIssue("meta.digest", f"is {document.meta.digest}, content hashes to {digest}"))
    return issues


def validate_document(obj: Any, schema: Type[BaseModel] = Scene3DDocument) -> list[SchemaIssue]:
    """Validate ``obj`` against ``schema`` and return every issue found.

    For export documents the parity counts, digest and list ordering are
    also checked against the content once the structure is valid.
    """
    try:
        model = schema.model_validate(obj)
    except ValidationError as exc:
        issues = [SchemaIssue(format_path(error["loc"]), error["msg"]) for error in exc.errors()]
        logger.debug(f"{schema.__name__} validation failed with {len(issues)} issue(s)")
        return issues

    if isinstance(model, Scene3DDocument):
        return _integrity_issues(model)
    return []


def scene3d_json_schema() -> dict[str, Any]:
    """JSON Schema for scene.3d.v1, as published alongside the editor."""
    schema = Scene3DDocument.model_json_schema(by_alias=True)
    schema["$id"] = "scene.3d.v1"
    schema.setdefault("title", "Scene3DDocument")
    return schema
