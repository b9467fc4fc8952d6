"""Lay out a move tree as nested display elements.

The mainline runs flat. At a fork the first child continues the mainline and
the other children are boxed into lines behind an ``Interrupt``. A fork of
exactly two whose second branch is short and straight is kept compact: the
second branch becomes an ``InlineBranch`` right after the first child's move.
Off-path computer lines are cut after a few plies with a ``Truncated`` marker.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence, Union

from .comments import comments_after, comments_before, root_comments
from .context import LayoutContext
from .elements import Element, InlineBranch, Interrupt, LineBlock, MoveElement, Truncated
from .gametree import Node, TreeStructureError, has_branching, validate_tree
from .notation import format_move
from .sfen_ops import DEFAULT_START_SFEN
from .tree_path import child_path, is_ancestor_or_self


logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "?"
# Each nested variation costs a few stack frames while laying out.
MAX_NESTING = 150


@dataclass(frozen=True)
class _RetroLine:
    element: Element


@dataclass(frozen=True)
class _TreeLine:
    node: Node
    truncate: int | None


LineSource = Union[_RetroLine, _TreeLine]


class _Layout:
    def __init__(self, ctx: LayoutContext):
        self.ctx = ctx
        self.formatter = ctx.formatter or format_move
        self.nesting = 0

    def move_text(self, node: Node, parent: Node, parent_path: str) -> tuple[str, str | None]:
        if node.notation is not None:
            return node.notation, None
        try:
            if not node.usi:
                raise ValueError("node has no move")
            sfen = parent.sfen
            if sfen is None:
                if parent_path:
                    raise ValueError("position before the move is unknown")
                sfen = DEFAULT_START_SFEN
            return self.formatter(sfen, node.usi, self.ctx.notation, parent.usi), None
        except ValueError as exc:
            logger.warning("cannot format move %s at %r: %s", node.usi, parent_path + node.id, exc)
            return PLACEHOLDER_TEXT, str(exc)

    def render_move(self, node: Node, parent: Node, parent_path: str) -> MoveElement:
        path = child_path(parent_path, node)
        text, error = self.move_text(node, parent, parent_path)
        return MoveElement(
            path=path,
            text=text,
            ply=node.ply,
            move_number=node.ply - self.ctx.ply_offset,
            glyphs=node.glyphs if self.ctx.show_glyphs else (),
            is_active=path == self.ctx.current_path,
            is_computer=node.comp,
            error=error,
        )

    def render_move_with_comments(self, node: Node, parent: Node, parent_path: str) -> list[Element]:
        path = child_path(parent_path, node)
        return [
            *comments_before(self.ctx, node, path),
            self.render_move(node, parent, parent_path),
            *comments_after(self.ctx, node, path),
        ]

    def render_children(
        self,
        node: Node,
        path: str,
        is_mainline: bool,
        truncate: int | None = None,
    ) -> list[Element]:
        """Elements for everything below ``node``, which sits at ``path``.

        First children are followed in a loop, forks included. Only boxed
        lines and inline branches nest calls.
        """
        out: list[Element] = []
        while True:
            cs = node.children
            if not cs:
                return out
            main = cs[0]
            inline: Node | None = None
            boxed: Sequence[Node] = ()
            if len(cs) == 1 and not (is_mainline and main.force_variation):
                pass
            elif self.can_inline(cs):
                inline = cs[1]
            elif not is_mainline:
                out.extend(self.render_lines(cs, node, path))
                return out
            elif main.force_variation:
                out.append(Interrupt(tuple(self.render_lines(cs, node, path))))
                return out
            else:
                boxed = cs[1:]
            main_path = child_path(path, main)
            if truncate == 0:
                out.append(Truncated(main_path))
                return out
            out.extend(self.render_move_with_comments(main, node, path))
            if inline is not None:
                out.append(InlineBranch(tuple(self.render_move_and_children(inline, node, path, None))))
            if boxed:
                out.append(Interrupt(tuple(self.render_lines(boxed, node, path))))
            node, path = main, main_path
            truncate = truncate - 1 if truncate else None

    def can_inline(self, cs: Sequence[Node]) -> bool:
        if len(cs) != 2 or cs[0].force_variation:
            return False
        return not has_branching(cs[1], self.ctx.inline_depth)

    def resolve_line(self, node: Node, parent_path: str) -> LineSource:
        path = child_path(parent_path, node)
        if self.ctx.retro_line is not None:
            replacement = self.ctx.retro_line(node, path)
            if replacement is not None:
                return _RetroLine(replacement)
        truncate = None
        if node.comp and not is_ancestor_or_self(self.ctx.current_path, path):
            truncate = self.ctx.truncate_depth
        return _TreeLine(node, truncate)

    def render_lines(self, nodes: Sequence[Node], parent: Node, parent_path: str) -> list[Element]:
        out: list[Element] = []
        for n in nodes:
            source = self.resolve_line(n, parent_path)
            if isinstance(source, _RetroLine):
                out.append(source.element)
                continue
            out.append(LineBlock(tuple(self.render_move_and_children(source.node, parent, parent_path, source.truncate))))
        return out

    def render_move_and_children(
        self,
        node: Node,
        parent: Node,
        parent_path: str,
        truncate: int | None,
    ) -> list[Element]:
        """A variation: ``node``'s move followed by its descendants."""
        path = child_path(parent_path, node)
        if truncate == 0:
            return [Truncated(path)]
        if self.nesting >= MAX_NESTING:
            raise TreeStructureError(f"variations nested deeper than {MAX_NESTING} at {path!r}")
        self.nesting += 1
        try:
            out = self.render_move_with_comments(node, parent, parent_path)
            out.extend(self.render_children(node, path, False, truncate - 1 if truncate else None))
        finally:
            self.nesting -= 1
        return out


def linearize(root: Node, context: LayoutContext) -> list[Element]:
    """Display elements for the whole tree below ``root``.

    Raises TreeStructureError for trees with duplicate sibling ids, mixed id
    widths or cycles, and for variations nested deeper than MAX_NESTING;
    nothing is laid out for such a tree.
    """
    validate_tree(root)
    layout = _Layout(context)
    out: list[Element] = list(root_comments(context, root))
    out.extend(layout.render_children(root, "", True))
    logger.debug("laid out tree at %r into %d top-level elements", context.current_path, len(out))
    return out
