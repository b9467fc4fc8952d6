import pytest

from kifu_tree.core.context import NotationStyle
from kifu_tree.core.notation import NotationError, format_line, format_move
from kifu_tree.core.sfen_ops import DEFAULT_START_SFEN, SfenError, replay_position


OPENING = ["7g7f", "3c3d", "8h2b+", "3a2b", "B*5e"]


class TestWestern:
    def test_opening_line(self):
        assert format_line(DEFAULT_START_SFEN, OPENING, NotationStyle.WESTERN) == [
            "P-7f", "P-3d", "Bx2b+", "Sx2b", "B*5e",
        ]

    def test_ambiguous_origin_is_spelled_out(self):
        assert format_move(DEFAULT_START_SFEN, "6i5h", NotationStyle.WESTERN) == "G6i-5h"

    def test_declined_promotion(self):
        line = ["7g7f", "3c3d", "8h2b"]
        assert format_line(DEFAULT_START_SFEN, line, NotationStyle.WESTERN)[-1] == "Bx2b="


class TestOtherStyles:
    def test_kawasaki(self):
        assert format_line(DEFAULT_START_SFEN, OPENING[:3], NotationStyle.KAWASAKI) == [
            "☗P-76", "☖P-34", "☗Bx22+",
        ]

    def test_japanese_uses_same_square_mark(self):
        assert format_line(DEFAULT_START_SFEN, OPENING, NotationStyle.JAPANESE) == [
            "☗７六歩", "☖３四歩", "☗２二角成", "☖同　銀", "☗５五角打",
        ]

    def test_japanese_disambiguation(self):
        assert format_move(DEFAULT_START_SFEN, "6i5h", NotationStyle.JAPANESE) == "☗５八金左"
        assert format_move(DEFAULT_START_SFEN, "4i5h", NotationStyle.JAPANESE) == "☗５八金右"

    def test_engine_style_is_usi(self):
        assert format_move(DEFAULT_START_SFEN, "7g7f", NotationStyle.WESTERN_ENGINE) == "7g7f"


class TestFailures:
    def test_empty_source_square(self):
        with pytest.raises(NotationError):
            format_move(DEFAULT_START_SFEN, "5e5d")

    def test_opponent_piece(self):
        with pytest.raises(NotationError):
            format_move(DEFAULT_START_SFEN, "3c3d")

    def test_drop_without_hand(self):
        with pytest.raises(NotationError):
            format_move(DEFAULT_START_SFEN, "P*5e")

    def test_malformed_usi(self):
        with pytest.raises(NotationError):
            format_move(DEFAULT_START_SFEN, "zz")

    def test_king_cannot_promote(self):
        with pytest.raises(NotationError):
            format_move(DEFAULT_START_SFEN, "5i5h+")


class TestReplay:
    def test_capture_goes_to_hand(self):
        sfen = DEFAULT_START_SFEN
        for usi in ["7g7f", "3c3d", "8h2b+"]:
            sfen = replay_position(sfen, usi)
        assert sfen == "lnsgkgsnl/1r5+B1/pppppp1pp/6p2/9/2P6/PP1PPPPPP/7R1/LNSGKGSNL w B 4"

    def test_illegal_replay_raises(self):
        with pytest.raises(SfenError):
            replay_position(DEFAULT_START_SFEN, "5e5d")
