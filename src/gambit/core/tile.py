"""Grid cell and piece-square bonus tables."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from gambit.core.enums import PieceKind, Side
from gambit.core.piece import Piece
from gambit.core.types import Square, make_square, square_name

BonusTable = Mapping[tuple[PieceKind, Side], int]

# Rows are listed from White's point of view (row 0 = eighth rank).
_PAWN_BONUS = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (50, 50, 50, 50, 50, 50, 50, 50),
    (10, 10, 20, 30, 30, 20, 10, 10),
    (5, 5, 10, 25, 25, 10, 5, 5),
    (0, 0, 0, 20, 20, 0, 0, 0),
    (5, -5, -10, 0, 0, -10, -5, 5),
    (5, 10, 10, -20, -20, 10, 10, 5),
    (0, 0, 0, 0, 0, 0, 0, 0),
)
_KNIGHT_BONUS = (
    (-50, -40, -30, -30, -30, -30, -40, -50),
    (-40, -20, 0, 0, 0, 0, -20, -40),
    (-30, 0, 10, 15, 15, 10, 0, -30),
    (-30, 5, 15, 20, 20, 15, 5, -30),
    (-30, 0, 15, 20, 20, 15, 0, -30),
    (-30, 5, 10, 15, 15, 10, 5, -30),
    (-40, -20, 0, 5, 5, 0, -20, -40),
    (-50, -40, -30, -30, -30, -30, -40, -50),
)
_BISHOP_BONUS = (
    (-20, -10, -10, -10, -10, -10, -10, -20),
    (-10, 0, 0, 0, 0, 0, 0, -10),
    (-10, 0, 5, 10, 10, 5, 0, -10),
    (-10, 5, 5, 10, 10, 5, 5, -10),
    (-10, 0, 10, 10, 10, 10, 0, -10),
    (-10, 10, 10, 10, 10, 10, 10, -10),
    (-10, 5, 0, 0, 0, 0, 5, -10),
    (-20, -10, -10, -10, -10, -10, -10, -20),
)
_ROOK_BONUS = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (5, 10, 10, 10, 10, 10, 10, 5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (0, 0, 0, 5, 5, 0, 0, 0),
)
_QUEEN_BONUS = (
    (-20, -10, -10, -5, -5, -10, -10, -20),
    (-10, 0, 0, 0, 0, 0, 0, -10),
    (-10, 0, 5, 5, 5, 5, 0, -10),
    (-5, 0, 5, 5, 5, 5, 0, -5),
    (0, 0, 5, 5, 5, 5, 0, -5),
    (-10, 5, 5, 5, 5, 5, 0, -10),
    (-10, 0, 5, 0, 0, 0, 0, -10),
    (-20, -10, -10, -5, -5, -10, -10, -20),
)
_KING_BONUS = (
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-20, -30, -30, -40, -40, -30, -30, -20),
    (-10, -20, -20, -20, -20, -20, -20, -10),
    (20, 20, 0, 0, 0, 0, 20, 20),
    (20, 30, 10, 0, 0, 10, 30, 20),
)

_BONUS_ROWS: dict[PieceKind, tuple[tuple[int, ...], ...]] = {
    PieceKind.PAWN: _PAWN_BONUS,
    PieceKind.KNIGHT: _KNIGHT_BONUS,
    PieceKind.BISHOP: _BISHOP_BONUS,
    PieceKind.ROOK: _ROOK_BONUS,
    PieceKind.QUEEN: _QUEEN_BONUS,
    PieceKind.KING: _KING_BONUS,
}


def _build_bonus_tables() -> tuple[BonusTable, ...]:
    tables: list[dict[tuple[PieceKind, Side], int]] = [{} for _ in range(64)]
    for kind, rows in _BONUS_ROWS.items():
        for row, values in enumerate(rows):
            for col, value in enumerate(values):
                tables[make_square(row, col)][(kind, Side.WHITE)] = value
                # Black reads the same table mirrored top to bottom.
                tables[make_square(7 - row, col)][(kind, Side.BLACK)] = value
    return tuple(MappingProxyType(table) for table in tables)


BONUS_TABLES: tuple[BonusTable, ...] = _build_bonus_tables()


@dataclass(slots=True, eq=False)
class Tile:
    """One of the 64 cells; holds at most one piece.

    Tiles compare by coordinate only, so a snapshot taken for a move equals
    the live tile it was copied from.
    """

    row: int
    col: int
    piece: Piece | None = None
    bonuses: BonusTable | None = field(default=None, repr=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tile):
            return NotImplemented
        return self.row == other.row and self.col == other.col

    def __hash__(self) -> int:
        return hash((self.row, self.col))

    def __repr__(self) -> str:
        if self.piece is not None:
            return f"({self.row}, {self.col}, {self.piece.kind.label})"
        return f"({self.row}, {self.col})"

    @property
    def square(self) -> Square:
        return make_square(self.row, self.col)

    @property
    def name(self) -> str:
        return square_name(self.square)

    # -- Occupancy predicates -------------------------------------------------

    def has_piece(self) -> bool:
        return self.piece is not None

    def is_empty(self) -> bool:
        return self.piece is None

    def has_side(self, side: Side) -> bool:
        return self.piece is not None and self.piece.side is side

    def has_rival(self, side: Side) -> bool:
        return self.piece is not None and self.piece.side is not side

    def is_empty_or_rival(self, side: Side) -> bool:
        return self.piece is None or self.piece.side is not side

    def bonus(self, kind: PieceKind, side: Side) -> int:
        """Positional bonus for *kind* of *side* standing on this tile."""
        if self.bonuses is None:
            return 0
        return self.bonuses.get((kind, side), 0)

    def snapshot(self) -> Tile:
        """Coordinate snapshot that remembers the current occupant."""
        return Tile(self.row, self.col, self.piece, self.bonuses)
