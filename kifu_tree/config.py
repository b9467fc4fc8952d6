from __future__ import annotations

from dataclasses import dataclass
import os


def _int_env(name: str, default: int, *, min_value: int, max_value: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(min_value, min(max_value, value))


def _bool_env(name: str, default: bool) -> bool:
    raw = (os.environ.get(name) or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _str_env(name: str, default: str) -> str:
    return (os.environ.get(name) or "").strip() or default


@dataclass(frozen=True)
class Settings:
    inline_depth: int = 6
    truncate_depth: int = 3
    notation: str = "western"
    show_comments: bool = True
    show_glyphs: bool = True
    log_level: str = "INFO"

    def to_wire(self) -> dict:
        return {
            "inline_depth": self.inline_depth,
            "truncate_depth": self.truncate_depth,
            "notation": self.notation,
            "show_comments": self.show_comments,
            "show_glyphs": self.show_glyphs,
        }


def load_settings() -> Settings:
    return Settings(
        inline_depth=_int_env("KIFU_TREE_INLINE_DEPTH", 6, min_value=1, max_value=64),
        truncate_depth=_int_env("KIFU_TREE_TRUNCATE_DEPTH", 3, min_value=1, max_value=64),
        notation=_str_env("KIFU_TREE_NOTATION", "western"),
        show_comments=_bool_env("KIFU_TREE_SHOW_COMMENTS", True),
        show_glyphs=_bool_env("KIFU_TREE_SHOW_GLYPHS", True),
        log_level=_str_env("KIFU_TREE_LOG_LEVEL", "INFO").upper(),
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
