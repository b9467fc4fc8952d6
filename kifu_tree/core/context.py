from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from ..config import Settings, get_settings


class NotationStyle(Enum):
    WESTERN = 0
    KAWASAKI = 1
    JAPANESE = 2
    WESTERN_ENGINE = 3

    @classmethod
    def parse(cls, value: Any) -> "NotationStyle":
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        key = str(value or "").strip().upper().replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"unknown notation: {value!r}") from None


# Styles the presentation shows with a side indicator (☗/☖ icon keyed by ply parity).
NOTATIONS_WITH_COLOR = frozenset({NotationStyle.KAWASAKI, NotationStyle.JAPANESE})


# (position sfen, usi, style, previous usi) -> move text
Formatter = Callable[[str | None, str, NotationStyle, str | None], str]


@dataclass(frozen=True)
class LayoutContext:
    current_path: str = ""
    show_comments: bool = True
    show_glyphs: bool = True
    show_computer: bool = True
    notation: NotationStyle = NotationStyle.WESTERN
    ply_offset: int = 0
    inline_depth: int = 6
    truncate_depth: int = 3
    formatter: Formatter | None = None
    # (node, path) -> pre-rendered line element, or None to render normally
    retro_line: Callable[[Any, str], Any] | None = None

    @property
    def with_color(self) -> bool:
        return self.notation in NOTATIONS_WITH_COLOR


def build_context(settings: Settings | None = None, **overrides: Any) -> LayoutContext:
    """LayoutContext with defaults taken from ``settings`` (the process settings
    when omitted); ``None`` overrides are ignored."""
    settings = settings or get_settings()
    values: dict[str, Any] = {
        "show_comments": settings.show_comments,
        "show_glyphs": settings.show_glyphs,
        "notation": settings.notation,
        "inline_depth": settings.inline_depth,
        "truncate_depth": settings.truncate_depth,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    values["notation"] = NotationStyle.parse(values["notation"])
    values["current_path"] = str(values.get("current_path") or "")
    values["ply_offset"] = int(values.get("ply_offset") or 0)
    return LayoutContext(**values)
