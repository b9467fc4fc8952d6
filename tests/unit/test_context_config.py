import pytest

from kifu_tree.config import Settings, get_settings, load_settings, reset_settings
from kifu_tree.core.context import LayoutContext, NotationStyle, build_context


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()


class TestSettings:
    def test_defaults(self, monkeypatch):
        for key in ("KIFU_TREE_INLINE_DEPTH", "KIFU_TREE_TRUNCATE_DEPTH", "KIFU_TREE_NOTATION"):
            monkeypatch.delenv(key, raising=False)
        s = load_settings()
        assert (s.inline_depth, s.truncate_depth, s.notation) == (6, 3, "western")

    def test_env_overrides_are_clamped(self, monkeypatch):
        monkeypatch.setenv("KIFU_TREE_INLINE_DEPTH", "1000")
        monkeypatch.setenv("KIFU_TREE_TRUNCATE_DEPTH", "nope")
        monkeypatch.setenv("KIFU_TREE_SHOW_COMMENTS", "off")
        s = load_settings()
        assert s.inline_depth == 64
        assert s.truncate_depth == 3
        assert s.show_comments is False

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()


class TestNotationStyle:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("western", NotationStyle.WESTERN),
            ("Japanese", NotationStyle.JAPANESE),
            ("western-engine", NotationStyle.WESTERN_ENGINE),
            (1, NotationStyle.KAWASAKI),
            (NotationStyle.JAPANESE, NotationStyle.JAPANESE),
        ],
    )
    def test_parse(self, value, expected):
        assert NotationStyle.parse(value) is expected

    def test_unknown_notation(self):
        with pytest.raises(ValueError):
            NotationStyle.parse("klingon")


class TestBuildContext:
    def test_settings_fill_defaults(self, monkeypatch):
        monkeypatch.setenv("KIFU_TREE_NOTATION", "japanese")
        monkeypatch.setenv("KIFU_TREE_TRUNCATE_DEPTH", "5")
        ctx = build_context(current_path="ab")
        assert ctx.notation is NotationStyle.JAPANESE
        assert ctx.truncate_depth == 5
        assert ctx.current_path == "ab"
        assert ctx.with_color

    def test_explicit_settings_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("KIFU_TREE_NOTATION", "kawasaki")
        ctx = build_context(Settings(notation="japanese", show_glyphs=False), show_comments=False)
        assert ctx.notation is NotationStyle.JAPANESE
        assert ctx.show_glyphs is False
        assert ctx.show_comments is False

    def test_none_overrides_are_ignored(self):
        ctx = build_context(show_comments=None, notation=None, ply_offset=None)
        assert ctx.show_comments is True
        assert ctx.notation is NotationStyle.WESTERN
        assert ctx.ply_offset == 0

    def test_context_is_frozen(self):
        ctx = LayoutContext()
        with pytest.raises(AttributeError):
            ctx.current_path = "x"
