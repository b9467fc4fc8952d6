from __future__ import annotations

from typing import Iterable

from .context import NotationStyle
from .movegen import attackers
from .sfen_ops import PROMOTABLE, Position, SfenError, UsiMove, owner_of, rc_to_square, role_of


class NotationError(ValueError):
    pass


FILE_ZENKAKU = {1: "１", 2: "２", 3: "３", 4: "４", 5: "５", 6: "６", 7: "７", 8: "８", 9: "９"}
RANK_KANJI = {1: "一", 2: "二", 3: "三", 4: "四", 5: "五", 6: "六", 7: "七", 8: "八", 9: "九"}

PIECE_JA = {
    "P": "歩",
    "L": "香",
    "N": "桂",
    "S": "銀",
    "G": "金",
    "B": "角",
    "R": "飛",
    "K": "玉",
    "+P": "と",
    "+L": "成香",
    "+N": "成桂",
    "+S": "成銀",
    "+B": "馬",
    "+R": "龍",
}

# Pieces that use 直 rather than 上 when moving straight forward.
_STRAIGHT_MOVERS = {"G", "S", "+P", "+L", "+N", "+S"}


def side_mark(side: str) -> str:
    return "☗" if side == "b" else "☖"


def _file_rank(sq: tuple[int, int]) -> tuple[int, int]:
    return 9 - sq[1], sq[0] + 1


def _numeric_square(sq: tuple[int, int]) -> str:
    file_, rank = _file_rank(sq)
    return f"{file_}{rank}"


def _ja_square(sq: tuple[int, int]) -> str:
    file_, rank = _file_rank(sq)
    return f"{FILE_ZENKAKU[file_]}{RANK_KANJI[rank]}"


def _in_zone(side: str, sq: tuple[int, int]) -> bool:
    return sq[0] <= 2 if side == "b" else sq[0] >= 6


def _could_promote(role: str, side: str, mv: UsiMove) -> bool:
    if role not in PROMOTABLE or mv.from_sq is None:
        return False
    return _in_zone(side, mv.from_sq) or _in_zone(side, mv.to_sq)


def _last_destination(previous_usi: str | None) -> tuple[int, int] | None:
    if not previous_usi:
        return None
    try:
        return UsiMove.parse(previous_usi).to_sq
    except SfenError:
        return None


def _moving_role(pos: Position, mv: UsiMove) -> str:
    if mv.is_drop:
        if pos.hands[pos.side].get(mv.drop_piece or "", 0) <= 0:
            raise NotationError(f"piece not in hand: {mv.drop_piece}")
        return mv.drop_piece or "?"
    assert mv.from_sq is not None
    token = pos.piece_at(mv.from_sq)
    if token is None:
        raise NotationError(f"no piece on {rc_to_square(*mv.from_sq)}")
    if owner_of(token) != pos.side:
        raise NotationError(f"piece on {rc_to_square(*mv.from_sq)} belongs to the opponent")
    return role_of(token)


def _promotion_suffix(role: str, side: str, mv: UsiMove, *, yes: str, no: str) -> str:
    if mv.promote:
        return yes
    if _could_promote(role, side, mv):
        return no
    return ""


def _western(pos: Position, mv: UsiMove, role: str, *, numeric: bool) -> str:
    square = _numeric_square if numeric else (lambda sq: rc_to_square(*sq))
    if mv.is_drop:
        return f"{role}*{square(mv.to_sq)}"
    assert mv.from_sq is not None
    origin = ""
    if len(attackers(pos, role, pos.side, mv.to_sq)) > 1:
        origin = square(mv.from_sq)
    sep = "x" if pos.piece_at(mv.to_sq) is not None else "-"
    suffix = _promotion_suffix(role, pos.side, mv, yes="+", no="=")
    return f"{role}{origin}{sep}{square(mv.to_sq)}{suffix}"


def _japanese_disambiguation(pos: Position, mv: UsiMove, role: str) -> str:
    assert mv.from_sq is not None
    others = [sq for sq in attackers(pos, role, pos.side, mv.to_sq) if sq != mv.from_sq]
    if not others:
        return ""
    forward = -1 if pos.side == "b" else 1

    def motion(sq: tuple[int, int]) -> str:
        dr = (mv.to_sq[0] - sq[0]) * forward
        if dr > 0:
            return "上"
        if dr < 0:
            return "引"
        return "寄"

    mine = motion(mv.from_sq)
    same_motion = [sq for sq in others if motion(sq) == mine]
    if not same_motion:
        return mine
    if mine == "上" and role in _STRAIGHT_MOVERS and mv.from_sq[1] == mv.to_sq[1]:
        return "直"
    # Seen from the mover, "right" is the higher column for sente and the lower for gote.
    cols = [sq[1] for sq in same_motion]
    if pos.side == "b":
        rightmost, leftmost = mv.from_sq[1] > max(cols), mv.from_sq[1] < min(cols)
    else:
        rightmost, leftmost = mv.from_sq[1] < min(cols), mv.from_sq[1] > max(cols)
    if rightmost:
        return "右"
    if leftmost:
        return "左"
    return mine


def _japanese(pos: Position, mv: UsiMove, role: str, previous_usi: str | None) -> str:
    mark = side_mark(pos.side)
    dest = "同　" if _last_destination(previous_usi) == mv.to_sq else _ja_square(mv.to_sq)
    piece = PIECE_JA.get(role, role)
    if mv.is_drop:
        return f"{mark}{dest}{piece}打"
    suffix = _promotion_suffix(role, pos.side, mv, yes="成", no="不成")
    return f"{mark}{dest}{piece}{_japanese_disambiguation(pos, mv, role)}{suffix}"


def format_move(
    sfen: str | None,
    usi: str,
    style: NotationStyle = NotationStyle.WESTERN,
    previous_usi: str | None = None,
) -> str:
    """Move text for ``usi`` played from ``sfen`` in the given notation style.

    Raises NotationError when the move cannot be read against the position.
    """
    try:
        pos = Position.from_sfen(sfen)
        mv = UsiMove.parse(usi)
    except SfenError as exc:
        raise NotationError(str(exc)) from exc
    if style is NotationStyle.WESTERN_ENGINE:
        return usi.strip()
    role = _moving_role(pos, mv)
    if mv.promote and role not in PROMOTABLE:
        raise NotationError(f"{role} cannot promote")
    if style is NotationStyle.JAPANESE:
        return _japanese(pos, mv, role, previous_usi)
    if style is NotationStyle.KAWASAKI:
        return side_mark(pos.side) + _western(pos, mv, role, numeric=True)
    return _western(pos, mv, role, numeric=False)


def format_line(
    sfen: str | None,
    usis: Iterable[str],
    style: NotationStyle = NotationStyle.WESTERN,
    previous_usi: str | None = None,
) -> list[str]:
    """Format consecutive moves, replaying each one before the next."""
    try:
        pos = Position.from_sfen(sfen)
    except SfenError as exc:
        raise NotationError(str(exc)) from exc
    out: list[str] = []
    for usi in usis:
        out.append(format_move(pos.to_sfen(), usi, style, previous_usi))
        try:
            pos.play(UsiMove.parse(usi))
        except SfenError as exc:
            raise NotationError(str(exc)) from exc
        previous_usi = usi
    return out
