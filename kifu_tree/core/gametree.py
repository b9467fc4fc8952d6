from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from .sfen_ops import SfenError, normalize_sfen, replay_position


logger = logging.getLogger(__name__)

COMMENT_SIDES = ("before", "after")
# Deepest tree accepted from JSON; building it recurses once per ply.
MAX_DEPTH = 600


class TreeStructureError(ValueError):
    pass


@dataclass(frozen=True)
class Glyph:
    symbol: str
    name: str = ""

    def to_dict(self) -> dict:
        return {"symbol": self.symbol, "name": self.name}


@dataclass(frozen=True)
class Comment:
    text: str
    side: str = "after"
    by: str | None = None

    @property
    def is_computer(self) -> bool:
        return self.by == "computer"


@dataclass(frozen=True)
class Node:
    id: str
    ply: int
    children: tuple[Node, ...] = ()
    usi: str | None = None
    sfen: str | None = None
    notation: str | None = None
    force_variation: bool = False
    comp: bool = False
    glyphs: tuple[Glyph, ...] = ()
    comments: tuple[Comment, ...] = ()

    @property
    def main_child(self) -> Node | None:
        return self.children[0] if self.children else None


def has_branching(node: Node, max_depth: int) -> bool:
    """True if the line from ``node`` forks, or keeps going, within ``max_depth`` plies.

    Exhausting the depth counts as branching: only short, straight lines pass.
    """
    cur: Node | None = node
    depth = max_depth
    while cur is not None:
        if depth <= 0 or len(cur.children) > 1:
            return True
        cur = cur.main_child
        depth -= 1
    return False


def node_at_path(root: Node, path: str, id_size: int) -> Node:
    node = root
    for i in range(0, len(path), id_size):
        wanted = path[i : i + id_size]
        for child in node.children:
            if child.id == wanted:
                node = child
                break
        else:
            raise KeyError(f"node not found: {path!r}")
    return node


def validate_tree(root: Node) -> int:
    """Reject trees whose paths would be ambiguous or whose walk would not end.

    Returns the id width shared by all non-root nodes (0 for a bare root).
    """
    id_size = 0
    on_stack: set[int] = set()
    # (node, path, expanded) frames; the second visit pops the node off the current chain.
    frames: list[tuple[Node, str, bool]] = [(root, "", False)]
    while frames:
        node, path, expanded = frames.pop()
        if expanded:
            on_stack.discard(id(node))
            continue
        key = id(node)
        if key in on_stack:
            raise TreeStructureError(f"cycle detected at {path!r}")
        on_stack.add(key)
        frames.append((node, path, True))
        sibling_ids: set[str] = set()
        for child in node.children:
            if not isinstance(child, Node):
                raise TreeStructureError(f"child of {path!r} is not a node")
            if not child.id:
                raise TreeStructureError(f"empty node id below {path!r}")
            if id_size == 0:
                id_size = len(child.id)
            elif len(child.id) != id_size:
                raise TreeStructureError(
                    f"node id {child.id!r} below {path!r} does not have width {id_size}"
                )
            if child.id in sibling_ids:
                raise TreeStructureError(f"duplicate sibling id {child.id!r} below {path!r}")
            sibling_ids.add(child.id)
        for child in reversed(node.children):
            frames.append((child, path + child.id, False))
    return id_size


def _glyphs_from(raw: Any) -> tuple[Glyph, ...]:
    out: list[Glyph] = []
    for g in raw or []:
        if isinstance(g, str):
            out.append(Glyph(symbol=g))
        elif isinstance(g, dict) and g.get("symbol"):
            out.append(Glyph(symbol=str(g["symbol"]), name=str(g.get("name") or "")))
        else:
            raise TreeStructureError(f"invalid glyph: {g!r}")
    return tuple(out)


def _comments_from(raw: Any) -> tuple[Comment, ...]:
    if isinstance(raw, str):
        raw = [{"text": raw}]
    out: list[Comment] = []
    for c in raw or []:
        if isinstance(c, str):
            c = {"text": c}
        if not isinstance(c, dict):
            raise TreeStructureError(f"invalid comment: {c!r}")
        side = str(c.get("side") or "after")
        if side not in COMMENT_SIDES:
            raise TreeStructureError(f"comment side must be before/after, got {side!r}")
        out.append(Comment(text=str(c.get("text") or ""), side=side, by=c.get("by")))
    return tuple(out)


def _node_from(data: Any, *, parent_sfen: str | None, parent_ply: int | None, depth: int) -> Node:
    if not isinstance(data, dict):
        raise TreeStructureError("node must be an object")
    if depth > MAX_DEPTH:
        raise TreeStructureError("tree too deep")
    usi = data.get("usi")
    ply = data.get("ply")
    if ply is None:
        ply = 0 if parent_ply is None else parent_ply + 1
    sfen = data.get("sfen")
    if sfen is None and usi and parent_sfen is not None:
        try:
            sfen = replay_position(parent_sfen, usi)
        except SfenError as exc:
            # Left unset; formatting of the node and its descendants reports the problem.
            logger.debug("could not replay %s: %s", usi, exc)
    elif sfen is not None:
        try:
            sfen = normalize_sfen(sfen)
        except SfenError as exc:
            raise TreeStructureError(f"invalid sfen on node {data.get('id')!r}: {exc}") from exc
    children_raw = data.get("children") or []
    if not isinstance(children_raw, list):
        raise TreeStructureError("children must be a list")
    children: list[Node] = []
    for c in children_raw:
        children.append(_node_from(c, parent_sfen=sfen, parent_ply=int(ply), depth=depth + 1))
    return Node(
        id=str(data.get("id") or ""),
        ply=int(ply),
        children=tuple(children),
        usi=usi,
        sfen=sfen,
        notation=data.get("notation"),
        force_variation=bool(data.get("forceVariation", data.get("force_variation", False))),
        comp=bool(data.get("comp", False)),
        glyphs=_glyphs_from(data.get("glyphs")),
        comments=_comments_from(data.get("comments")),
    )


def tree_from_dict(data: Any, initial_sfen: str | None = None) -> Node:
    """Build a node tree from its JSON form.

    Missing ``sfen`` fields are filled by replaying ``usi`` moves from the
    parent position; the root falls back to ``initial_sfen`` or the standard
    start position.
    """
    if not isinstance(data, dict):
        raise TreeStructureError("tree must be an object")
    root_sfen = data.get("sfen") or initial_sfen
    try:
        root_sfen = normalize_sfen(root_sfen)
    except SfenError as exc:
        raise TreeStructureError(f"invalid root sfen: {exc}") from exc
    root = _node_from({**data, "sfen": root_sfen, "id": ""}, parent_sfen=None, parent_ply=None, depth=0)
    validate_tree(root)
    return root
