"""Display elements produced by the tree layout.

Elements are immutable and hold their children in tuples, so two layouts of
the same input compare equal with ``==``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Union

from .gametree import Glyph


@dataclass(frozen=True)
class MoveElement:
    path: str
    text: str
    ply: int
    move_number: int
    glyphs: tuple[Glyph, ...] = ()
    is_active: bool = False
    is_computer: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "type": "move",
            "path": self.path,
            "text": self.text,
            "ply": self.ply,
            "move_number": self.move_number,
            "glyphs": [g.to_dict() for g in self.glyphs],
            "is_active": self.is_active,
            "is_computer": self.is_computer,
            "error": self.error,
        }


@dataclass(frozen=True)
class CommentElement:
    path: str
    text: str
    side: str = "after"
    by: str | None = None

    def to_dict(self) -> dict:
        return {"type": "comment", "path": self.path, "text": self.text, "side": self.side, "by": self.by}


@dataclass(frozen=True)
class Truncated:
    path: str

    def to_dict(self) -> dict:
        return {"type": "truncated", "path": self.path}


@dataclass(frozen=True)
class LineBlock:
    children: tuple[Element, ...] = ()

    def to_dict(self) -> dict:
        return {"type": "line", "children": elements_to_wire(self.children)}


@dataclass(frozen=True)
class InlineBranch:
    children: tuple[Element, ...] = ()

    def to_dict(self) -> dict:
        return {"type": "inline", "children": elements_to_wire(self.children)}


@dataclass(frozen=True)
class Interrupt:
    children: tuple[Element, ...] = ()

    def to_dict(self) -> dict:
        return {"type": "interrupt", "children": elements_to_wire(self.children)}


Element = Union[MoveElement, CommentElement, Truncated, LineBlock, InlineBranch, Interrupt]
CONTAINERS = (LineBlock, InlineBranch, Interrupt)


def elements_to_wire(elements: Iterable[Element]) -> list[dict]:
    return [el.to_dict() for el in elements]


def iter_elements(elements: Iterable[Element]) -> Iterator[Element]:
    """Depth-first, document order; containers come before their children."""
    for el in elements:
        yield el
        if isinstance(el, CONTAINERS):
            yield from iter_elements(el.children)


def iter_moves(elements: Iterable[Element]) -> Iterator[MoveElement]:
    for el in iter_elements(elements):
        if isinstance(el, MoveElement):
            yield el
