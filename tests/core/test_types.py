"""Tests for enums and square helpers."""

import pytest

from gambit.core.enums import GameResult, LogTag, PieceKind, Side
from gambit.core.types import (
    col_of,
    in_range,
    make_square,
    parse_coords,
    parse_square,
    row_of,
    square_name,
)


class TestSide:
    def test_other_swaps_players(self) -> None:
        assert Side.WHITE.other() is Side.BLACK
        assert Side.BLACK.other() is Side.WHITE

    def test_other_keeps_neutral(self) -> None:
        assert Side.NEUTRAL.other() is Side.NEUTRAL

    def test_direction(self) -> None:
        assert Side.WHITE.direction == -1
        assert Side.BLACK.direction == 1

    def test_key_ordinal(self) -> None:
        assert Side.WHITE.key_ordinal == 1
        assert Side.BLACK.key_ordinal == 0

    def test_labels(self) -> None:
        assert Side.WHITE.label == "White"
        assert Side.NEUTRAL.label == ""
        assert str(Side.BLACK) == "black"


class TestPieceKind:
    @pytest.mark.parametrize(
        ("kind", "mg", "eg"),
        [
            (PieceKind.PAWN, 124, 206),
            (PieceKind.KNIGHT, 781, 854),
            (PieceKind.BISHOP, 825, 915),
            (PieceKind.ROOK, 1276, 1380),
            (PieceKind.QUEEN, 2538, 2682),
            (PieceKind.KING, 0, 0),
            (PieceKind.NONE, 0, 0),
        ],
    )
    def test_values(self, kind: PieceKind, mg: int, eg: int) -> None:
        assert kind.value_mg == mg
        assert kind.value_eg == eg

    def test_label(self) -> None:
        assert PieceKind.KNIGHT.label == "knight"
        assert PieceKind.NONE.label == ""


class TestOtherEnums:
    def test_log_tags(self) -> None:
        assert LogTag.NO_CASTLE != LogTag.CASTLE

    def test_result_default_is_in_progress(self) -> None:
        assert GameResult(0) is GameResult.IN_PROGRESS


class TestSquares:
    def test_layout(self) -> None:
        assert make_square(0, 0) == 0
        assert make_square(7, 7) == 63
        assert row_of(60) == 7
        assert col_of(60) == 4

    def test_names(self) -> None:
        assert square_name(0) == "a8"
        assert square_name(60) == "e1"
        assert square_name(63) == "h1"

    def test_parse(self) -> None:
        assert parse_square("e1") == 60
        assert parse_square("a8") == 0
        assert parse_coords("e2") == (6, 4)

    @pytest.mark.parametrize("text", ["", "e", "i1", "a9", "e10"])
    def test_parse_rejects_bad_names(self, text: str) -> None:
        with pytest.raises(ValueError):
            parse_square(text)

    def test_in_range(self) -> None:
        assert in_range(0)
        assert in_range(7)
        assert not in_range(-1)
        assert not in_range(8)
