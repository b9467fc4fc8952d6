"""String addresses of nodes in a move tree.

A path is the concatenation of node ids from the root down; the root itself
is the empty path. Ids have a fixed width within one tree, so a path can be
split back into ids and prefix tests line up with ancestry.
"""

from __future__ import annotations

ROOT = ""


def child_path(parent_path: str, node) -> str:
    """Path of ``node`` (a Node or a bare id) below ``parent_path``."""
    node_id = node if isinstance(node, str) else node.id
    return parent_path + node_id


def is_ancestor_or_self(path: str, ancestor: str) -> bool:
    return path.startswith(ancestor)


def _check_width(path: str, id_size: int) -> None:
    if id_size <= 0:
        raise ValueError("id_size must be positive")
    if len(path) % id_size:
        raise ValueError(f"path {path!r} is not a multiple of id size {id_size}")


def path_ids(path: str, id_size: int) -> list[str]:
    _check_width(path, id_size)
    return [path[i : i + id_size] for i in range(0, len(path), id_size)]


def parent_path(path: str, id_size: int) -> str:
    _check_width(path, id_size)
    return path[:-id_size] if path else ROOT


def last_id(path: str, id_size: int) -> str:
    _check_width(path, id_size)
    return path[-id_size:] if path else ROOT


def common_prefix(a: str, b: str, id_size: int) -> str:
    """Longest path that is an ancestor-or-self of both ``a`` and ``b``."""
    out: list[str] = []
    for x, y in zip(path_ids(a, id_size), path_ids(b, id_size)):
        if x != y:
            break
        out.append(x)
    return "".join(out)
