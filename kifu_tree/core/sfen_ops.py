from __future__ import annotations

from dataclasses import dataclass, field


DEFAULT_START_SFEN = (
    "lnsgkgsnl/1r5b1/ppppppppp/9/9/9/PPPPPPPPP/1B5R1/LNSGKGSNL b - 1"
)

PIECE_LETTERS = {"P", "L", "N", "S", "G", "B", "R", "K"}
PROMOTABLE = {"P", "L", "N", "S", "B", "R"}
HAND_ORDER = ["R", "B", "G", "S", "N", "L", "P"]


class SfenError(ValueError):
    pass


@dataclass(frozen=True)
class UsiMove:
    """A parsed USI move. Squares are (row, col) with row 0 = rank 'a', col 0 = file 9."""

    to_sq: tuple[int, int]
    from_sq: tuple[int, int] | None = None
    promote: bool = False
    drop_piece: str | None = None

    @property
    def is_drop(self) -> bool:
        return self.drop_piece is not None

    @classmethod
    def parse(cls, usi: str | None) -> "UsiMove":
        s = (usi or "").strip()
        if not s:
            raise SfenError("empty USI move")
        if len(s) == 4 and s[1] == "*":
            piece = s[0].upper()
            if piece not in HAND_ORDER:
                raise SfenError(f"invalid drop piece: {s[0]}")
            return cls(to_sq=square_to_rc(s[2:4]), drop_piece=piece)
        if len(s) not in (4, 5):
            raise SfenError(f"invalid USI move length: {s}")
        if len(s) == 5 and not s.endswith("+"):
            raise SfenError(f"invalid promotion suffix: {s}")
        return cls(
            to_sq=square_to_rc(s[2:4]),
            from_sq=square_to_rc(s[0:2]),
            promote=len(s) == 5,
        )


def normalize_sfen(sfen: str | None) -> str:
    s = (sfen or "").strip()
    if not s or s == "startpos":
        return DEFAULT_START_SFEN
    parts = s.split()
    if len(parts) < 3:
        raise SfenError("SFEN must have board, side and hands")
    if len(parts) == 3:
        parts.append("1")
    return " ".join(parts[:4])


def square_to_rc(square: str) -> tuple[int, int]:
    if len(square) != 2:
        raise SfenError(f"invalid USI square: {square}")
    file_ch, rank_ch = square[0], square[1]
    if not ("1" <= file_ch <= "9"):
        raise SfenError(f"invalid file: {square}")
    if not ("a" <= rank_ch <= "i"):
        raise SfenError(f"invalid rank: {square}")
    return ord(rank_ch) - ord("a"), 9 - int(file_ch)


def rc_to_square(row: int, col: int) -> str:
    if not (0 <= row <= 8 and 0 <= col <= 8):
        raise SfenError("row/col out of range")
    return f"{9 - col}{chr(ord('a') + row)}"


def owner_of(token: str) -> str:
    return "b" if token[-1].isupper() else "w"


def role_of(token: str) -> str:
    """Board token ('p', '+R', ...) to an owner-independent role ('P', '+R', ...)."""
    if token.startswith("+"):
        return "+" + token[-1].upper()
    return token[-1].upper()


def _promote_token(token: str) -> str:
    if token.startswith("+") or token[-1].upper() not in PROMOTABLE:
        return token
    return "+" + token[-1]


@dataclass
class Position:
    board: list[list[str | None]]
    side: str = "b"
    hands: dict[str, dict[str, int]] = field(
        default_factory=lambda: {s: {k: 0 for k in HAND_ORDER} for s in ("b", "w")}
    )
    ply: int = 1

    @classmethod
    def from_sfen(cls, sfen: str | None) -> "Position":
        board_part, side_part, hands_part, ply_part = normalize_sfen(sfen).split()
        if side_part not in {"b", "w"}:
            raise SfenError("side must be b/w")
        try:
            ply = int(ply_part)
        except ValueError as exc:
            raise SfenError("ply must be int") from exc
        return cls(
            board=_parse_board(board_part),
            side=side_part,
            hands=_parse_hands(hands_part),
            ply=max(1, ply),
        )

    def to_sfen(self) -> str:
        return f"{_serialize_board(self.board)} {self.side} {_serialize_hands(self.hands)} {self.ply}"

    def piece_at(self, sq: tuple[int, int]) -> str | None:
        return self.board[sq[0]][sq[1]]

    def play(self, mv: UsiMove) -> None:
        side = self.side
        if mv.is_drop:
            if self.piece_at(mv.to_sq) is not None:
                raise SfenError("drop destination occupied")
            if self.hands[side].get(mv.drop_piece or "", 0) <= 0:
                raise SfenError(f"piece not in hand: {mv.drop_piece}")
            self.hands[side][mv.drop_piece] -= 1  # type: ignore[index]
            token = mv.drop_piece if side == "b" else (mv.drop_piece or "").lower()
            self.board[mv.to_sq[0]][mv.to_sq[1]] = token
        else:
            assert mv.from_sq is not None
            piece = self.piece_at(mv.from_sq)
            if piece is None:
                raise SfenError("source square empty")
            if owner_of(piece) != side:
                raise SfenError("moving opponent piece")
            captured = self.piece_at(mv.to_sq)
            if captured is not None:
                if owner_of(captured) == side:
                    raise SfenError("destination occupied by own piece")
                base = captured[-1].upper()
                if base != "K":
                    self.hands[side][base] = self.hands[side].get(base, 0) + 1
            self.board[mv.from_sq[0]][mv.from_sq[1]] = None
            self.board[mv.to_sq[0]][mv.to_sq[1]] = _promote_token(piece) if mv.promote else piece
        self.side = "w" if side == "b" else "b"
        self.ply += 1


def _parse_board(board_part: str) -> list[list[str | None]]:
    ranks = board_part.split("/")
    if len(ranks) != 9:
        raise SfenError("board ranks must be 9")
    board: list[list[str | None]] = []
    for rank in ranks:
        row: list[str | None] = []
        pending = ""
        for ch in rank:
            if ch.isdigit():
                if pending:
                    raise SfenError("dangling '+' in board")
                row.extend([None] * int(ch))
                continue
            if ch == "+":
                pending = "+"
                continue
            if ch.upper() not in PIECE_LETTERS:
                raise SfenError(f"invalid piece token: {pending}{ch}")
            row.append(pending + ch)
            pending = ""
        if pending:
            raise SfenError("dangling '+' in board")
        if len(row) != 9:
            raise SfenError("board rank width mismatch")
        board.append(row)
    return board


def _parse_hands(hands_part: str) -> dict[str, dict[str, int]]:
    hands = {"b": {k: 0 for k in HAND_ORDER}, "w": {k: 0 for k in HAND_ORDER}}
    if not hands_part or hands_part == "-":
        return hands
    num_buf = ""
    for ch in hands_part:
        if ch.isdigit():
            num_buf += ch
            continue
        if ch.upper() not in HAND_ORDER:
            raise SfenError(f"invalid hand piece: {ch}")
        hands["b" if ch.isupper() else "w"][ch.upper()] += int(num_buf) if num_buf else 1
        num_buf = ""
    if num_buf:
        raise SfenError("dangling number in hands")
    return hands


def _serialize_board(board: list[list[str | None]]) -> str:
    ranks: list[str] = []
    for row in board:
        empties = 0
        parts: list[str] = []
        for cell in row:
            if not cell:
                empties += 1
                continue
            if empties:
                parts.append(str(empties))
                empties = 0
            parts.append(cell)
        if empties:
            parts.append(str(empties))
        ranks.append("".join(parts))
    return "/".join(ranks)


def _serialize_hands(hands: dict[str, dict[str, int]]) -> str:
    parts: list[str] = []
    for side in ("b", "w"):
        for piece in HAND_ORDER:
            count = int(hands.get(side, {}).get(piece, 0))
            if count <= 0:
                continue
            if count > 1:
                parts.append(str(count))
            parts.append(piece if side == "b" else piece.lower())
    return "".join(parts) or "-"


def replay_position(sfen: str | None, usi: str) -> str:
    """Return the SFEN reached by playing ``usi`` from ``sfen``."""
    pos = Position.from_sfen(sfen)
    pos.play(UsiMove.parse(usi))
    return pos.to_sfen()
