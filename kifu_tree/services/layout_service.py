from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from ..config import Settings, get_settings
from ..core.context import LayoutContext, build_context
from ..core.elements import Element, elements_to_wire, iter_moves
from ..core.gametree import Node, node_at_path, tree_from_dict, validate_tree
from ..core.linearize import linearize
from ..core.transcript import render_transcript


logger = logging.getLogger(__name__)


def _opt_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass
class LayoutResult:
    root: Node
    context: LayoutContext
    elements: list[Element]

    def to_wire(self) -> dict:
        return {
            "current_path": self.context.current_path,
            "notation": self.context.notation.name.lower(),
            "with_color": self.context.with_color,
            "move_count": sum(1 for _ in iter_moves(self.elements)),
            "elements": elements_to_wire(self.elements),
        }

    def transcript(self) -> str:
        return render_transcript(self.elements)


class LayoutService:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def context_from(self, data: dict[str, Any]) -> LayoutContext:
        return build_context(
            self.settings,
            current_path=data.get("current_path"),
            show_comments=_opt_bool(data.get("show_comments")),
            show_glyphs=_opt_bool(data.get("show_glyphs")),
            show_computer=_opt_bool(data.get("show_computer")),
            notation=data.get("notation"),
            ply_offset=data.get("ply_offset"),
        )

    def layout(self, data: dict[str, Any]) -> LayoutResult:
        """Build the tree and context from a request body and lay the tree out.

        Raises TreeStructureError for malformed trees and ValueError for bad options.
        """
        root = tree_from_dict(data.get("tree"), initial_sfen=data.get("initial_sfen"))
        ctx = self.context_from(data)
        if ctx.current_path:
            self.check_path(root, ctx.current_path)
        elements = linearize(root, ctx)
        logger.info("layout: %d top-level elements, current path %r", len(elements), ctx.current_path)
        return LayoutResult(root=root, context=ctx, elements=elements)

    def check_path(self, root: Node, path: str) -> None:
        id_size = validate_tree(root)
        if not id_size or len(path) % id_size:
            raise ValueError(f"current_path {path!r} does not match the tree ids")
        try:
            node_at_path(root, path, id_size)
        except KeyError as exc:
            raise ValueError(f"current_path {path!r} is not in the tree") from exc

    def status_wire(self) -> dict:
        return self.settings.to_wire()
