from __future__ import annotations

from .sfen_ops import Position, owner_of, role_of


# Step and slide directions for sente; rows are flipped for gote.
_GOLD = [(-1, 0), (-1, -1), (-1, 1), (0, -1), (0, 1), (1, 0)]
_KING = [(-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1)]
_DIAGONAL = [(-1, -1), (-1, 1), (1, -1), (1, 1)]
_ORTHOGONAL = [(-1, 0), (1, 0), (0, -1), (0, 1)]

STEPS: dict[str, list[tuple[int, int]]] = {
    "P": [(-1, 0)],
    "N": [(-2, -1), (-2, 1)],
    "S": [(-1, 0), (-1, -1), (-1, 1), (1, -1), (1, 1)],
    "G": _GOLD,
    "+P": _GOLD,
    "+L": _GOLD,
    "+N": _GOLD,
    "+S": _GOLD,
    "K": _KING,
    "+B": _ORTHOGONAL,
    "+R": _DIAGONAL,
}

SLIDES: dict[str, list[tuple[int, int]]] = {
    "L": [(-1, 0)],
    "B": _DIAGONAL,
    "+B": _DIAGONAL,
    "R": _ORTHOGONAL,
    "+R": _ORTHOGONAL,
}


def _in_bounds(r: int, c: int) -> bool:
    return 0 <= r <= 8 and 0 <= c <= 8


def _reaches(pos: Position, role: str, side: str, from_sq: tuple[int, int], to_sq: tuple[int, int]) -> bool:
    flip = 1 if side == "b" else -1
    fr, fc = from_sq
    for dr, dc in STEPS.get(role, []):
        if (fr + dr * flip, fc + dc) == to_sq:
            return True
    for dr, dc in SLIDES.get(role, []):
        r, c = fr + dr * flip, fc + dc
        while _in_bounds(r, c):
            if (r, c) == to_sq:
                return True
            if pos.board[r][c] is not None:
                break
            r += dr * flip
            c += dc
    return False


def attackers(pos: Position, role: str, side: str, to_sq: tuple[int, int]) -> list[tuple[int, int]]:
    """Squares holding a ``side`` piece of ``role`` that could move to ``to_sq``.

    Pseudo-legal: pins and checks are ignored. Used for notation disambiguation.
    """
    out: list[tuple[int, int]] = []
    for r in range(9):
        for c in range(9):
            token = pos.board[r][c]
            if token is None or owner_of(token) != side or role_of(token) != role:
                continue
            if _reaches(pos, role, side, (r, c), to_sq):
                out.append((r, c))
    return out
