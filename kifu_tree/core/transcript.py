from __future__ import annotations

import re
from typing import Iterable

from .elements import CommentElement, Element, InlineBranch, Interrupt, LineBlock, MoveElement, Truncated


TRUNCATED_MARK = "[...]"

_MOVE_RE = re.compile(r"^(-?\d+)\.(.*?)(<[^<>]*>)?$")


def _move_token(el: MoveElement) -> str:
    glyphs = "".join(g.symbol for g in el.glyphs)
    return f"{el.move_number}.{el.text}" + (f"<{glyphs}>" if glyphs else "")


def _render(elements: Iterable[Element]) -> list[str]:
    parts: list[str] = []
    for el in elements:
        if isinstance(el, MoveElement):
            parts.append(_move_token(el))
        elif isinstance(el, CommentElement):
            parts.append("{" + el.text.replace("}", ")") + "}")
        elif isinstance(el, Truncated):
            parts.append(TRUNCATED_MARK)
        elif isinstance(el, Interrupt):
            parts.extend(_render(el.children))
        elif isinstance(el, (LineBlock, InlineBranch)):
            parts.append("(" + " ".join(_render(el.children)) + ")")
        else:
            raise TypeError(f"unknown element: {el!r}")
    return parts


def render_transcript(elements: Iterable[Element]) -> str:
    """One-line text form, e.g. ``1.P-7f 2.P-3d (2.P-8d {sharp}) 3.P-2f``."""
    return " ".join(_render(elements))


def _tokens(text: str) -> list[str]:
    out: list[str] = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch == " ":
            i += 1
        elif ch in "()":
            out.append(ch)
            i += 1
        elif ch == "{":
            end = text.find("}", i)
            if end < 0:
                raise ValueError("unterminated comment in transcript")
            out.append(text[i : end + 1])
            i = end + 1
        else:
            j = i
            while j < n and text[j] not in " (){":
                j += 1
            out.append(text[i:j])
            i = j
    return out


def transcript_moves(text: str) -> list[str]:
    """Move texts of a transcript in reading order, without numbers or glyphs."""
    moves: list[str] = []
    depth = 0
    for tok in _tokens(text):
        if tok == "(":
            depth += 1
        elif tok == ")":
            depth -= 1
            if depth < 0:
                raise ValueError("unbalanced ')' in transcript")
        elif tok.startswith("{") or tok == TRUNCATED_MARK:
            continue
        else:
            m = _MOVE_RE.match(tok)
            if not m:
                raise ValueError(f"not a move token: {tok!r}")
            moves.append(m.group(2))
    if depth:
        raise ValueError("unbalanced '(' in transcript")
    return moves
