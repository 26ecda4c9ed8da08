"""mallgrid: tile/edge floor layouts, template containment and scene.3d.v1 export."""

from mallgrid.exceptions import (
    ContentLimitError,
    ContractViolationError,
    CoordinateError,
    ExportError,
    MallGridError,
    SchemaError,
)
from mallgrid.export.scene3d import build_scene3d, canonicalize_document
from mallgrid.export.schema import Scene3DDocument
from mallgrid.grid.edges import SolidRule, extract_edges, rasterize_edges
from mallgrid.grid.model import Edge, Layout, TileKind
from mallgrid.spatial.bounds import Containment, edge_is_inside, make_bounds
from mallgrid.templates.loader import load_template
from mallgrid.validate.scene_rules import collect_warnings
from mallgrid.validate.schema_check import SchemaIssue, validate_document
from mallgrid.validate.switchboard import RulesSwitchboard

__version__ = "0.1.0"

__all__ = [
    "ContentLimitError",
    "ContractViolationError",
    "CoordinateError",
    "Containment",
    "Edge",
    "ExportError",
    "Layout",
    "MallGridError",
    "RulesSwitchboard",
    "Scene3DDocument",
    "SchemaError",
    "SchemaIssue",
    "SolidRule",
    "TileKind",
    "build_scene3d",
    "canonicalize_document",
    "collect_warnings",
    "edge_is_inside",
    "extract_edges",
    "load_template",
    "make_bounds",
    "rasterize_edges",
    "validate_document",
]
