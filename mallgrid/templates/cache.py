"""Template cache and parent/child hierarchy resolution.

The cache is an ordinary object owned by the caller; nothing in the
extraction, export or containment code reads from it.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from loguru import logger

from mallgrid.templates.loader import load_template
from mallgrid.templates.nodes import TemplateNode


@dataclass(frozen=True)
class CachedTemplate:
    id: str
    node: TemplateNode
    document: dict[str, Any] = field(default_factory=dict)
    loaded_at: str = ""


class TemplateCache:
    """Loaded templates keyed by id."""

    def __init__(self) -> None:
        self._entries: dict[str, CachedTemplate] = {}

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def put(self, node: TemplateNode, document: dict[str, Any] | None = None) -> CachedTemplate:
        entry = CachedTemplate(
            id=node.id,
            node=node,
            document=copy.deepcopy(document) if document else {},
            loaded_at=datetime.now(timezone.utc).isoformat(),
        )
        if node.id in self._entries:
            logger.debug(f"Replacing cached template '{node.id}'")
        self._entries[node.id] = entry
        return entry

    def load(self, document: dict[str, Any]) -> CachedTemplate:
        """Normalize a raw document and cache it."""
        return self.put(load_template(document), document)

    def get(self, template_id: str) -> CachedTemplate | None:
        return self._entries.get(template_id)

    def all(self) -> list[CachedTemplate]:
        return list(self._entries.values())

    def remove(self, template_id: str) -> None:
        self._entries.pop(template_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def resolve_hierarchy(self, node: TemplateNode) -> list[TemplateNode]:
        """Chain of templates from the root down to ``node``.

        Parents missing from the cache end the chain there; the chain is
        returned as far as it could be resolved.
        """
        chain: list[TemplateNode] = [node]
        seen = {node.id}
        current = node
        while current.parent_id:
            parent = self._entries.get(current.parent_id)
            if parent is None:
                logger.warning(
                    f"Parent template '{current.parent_id}' of '{current.id}' not cached; "
                    f"available: {sorted(self._entries)}"
                )
                break
            if parent.id in seen:
                logger.warning(f"Template parent cycle at '{parent.id}'")
                break
            seen.add(parent.id)
            chain.append(parent.node)
            current = parent.node
        chain.reverse()
        return chain
