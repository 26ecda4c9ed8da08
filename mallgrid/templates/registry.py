"""Schema detection for editor documents.

Maps a raw JSON document to its template kind and version, applying the
alias table for deprecated schema names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mallgrid.templates.nodes import TemplateKind

# Deprecated or alternative schema names → canonical ones
SCHEMA_ALIASES: dict[str, str] = {
    "gallery-template.v1": "unit-template.v1",
    "gallery-template": "unit-template",
    "gallery.v1": "unit-template.v1",
}

_SCHEMA_FIELDS = ("schema", "$schema", "type")

_KIND_PREFIXES: tuple[tuple[str, TemplateKind], ...] = (
    ("mall", TemplateKind.MALL),
    ("unit", TemplateKind.UNIT),
    ("room", TemplateKind.ROOM),
    ("scene", TemplateKind.SCENE),
)


@dataclass(frozen=True)
class DetectedSchema:
    kind: TemplateKind | None  # None = unknown
    version: str
    schema: str = ""

    @property
    def known(self) -> bool:
        return self.kind is not None


def _schema_string(document: dict[str, Any]) -> str | None:
    meta = document.get("meta")
    if isinstance(meta, dict) and meta.get("schema"):
        return str(meta["schema"])
    for key in _SCHEMA_FIELDS:
        if document.get(key):
            return str(document[key])
    return None


def normalise_kind(schema: str | None) -> str:
    """Lower-case a schema string and resolve aliases."""
    if not schema or not isinstance(schema, str):
        return ""
    lowered = schema.lower()
    return SCHEMA_ALIASES.get(lowered, lowered)


def detect_schema(document: Any) -> DetectedSchema:
    """Detect template kind and version of a raw document."""
    if not isinstance(document, dict):
        return DetectedSchema(kind=None, version="")

    raw = _schema_string(document)
    if raw is None:
        # bare legacy scenes only carry an instance list
        if isinstance(document.get("instances"), list):
            return DetectedSchema(kind=TemplateKind.SCENE, version="v1", schema="scene")
        # scene.v1 without meta still has the grid/tiles/edges triple
        if all(key in document for key in ("grid", "tiles", "edges")):
            return DetectedSchema(kind=TemplateKind.SCENE, version="v1", schema="scene.v1")
        return DetectedSchema(kind=None, version="")

    schema = normalise_kind(raw)
    version = "v1" if ".v1" in schema else ""
    for prefix, kind in _KIND_PREFIXES:
        if schema.startswith(prefix):
            return DetectedSchema(kind=kind, version=version, schema=schema)
    return DetectedSchema(kind=None, version=version, schema=schema)


def schema_aliases() -> dict[str, str]:
    return dict(SCHEMA_ALIASES)
