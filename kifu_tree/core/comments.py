from __future__ import annotations

import re

from .context import LayoutContext
from .elements import CommentElement
from .gametree import Node


_WS_RE = re.compile(r"\s+")


def _visible(ctx: LayoutContext, node: Node, side: str | None) -> list:
    if not ctx.show_comments:
        return []
    out = []
    for c in node.comments:
        if side is not None and c.side != side:
            continue
        if c.is_computer and not ctx.show_computer:
            continue
        if not c.text.strip():
            continue
        out.append(c)
    return out


def _to_elements(comments: list, path: str) -> list[CommentElement]:
    return [
        CommentElement(path=path, text=_WS_RE.sub(" ", c.text).strip(), side=c.side, by=c.by)
        for c in comments
    ]


def comments_before(ctx: LayoutContext, node: Node, path: str) -> list[CommentElement]:
    return _to_elements(_visible(ctx, node, "before"), path)


def comments_after(ctx: LayoutContext, node: Node, path: str) -> list[CommentElement]:
    return _to_elements(_visible(ctx, node, "after"), path)


def root_comments(ctx: LayoutContext, root: Node) -> list[CommentElement]:
    """The root has no move to sit beside, so all its comments lead the layout."""
    return _to_elements(_visible(ctx, root, None), "")
