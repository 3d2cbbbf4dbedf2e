"""Core enumerations for the chess domain."""

from __future__ import annotations

from enum import IntEnum


class Side(IntEnum):
    """Owning side of a piece.

    ``NEUTRAL`` is the "no side" sentinel used for an undecided winner.
    """

    WHITE = 0
    BLACK = 1
    NEUTRAL = 2

    def other(self) -> Side:
        if self is Side.WHITE:
            return Side.BLACK
        if self is Side.BLACK:
            return Side.WHITE
        return Side.NEUTRAL

    @property
    def direction(self) -> int:
        """Row step of a forward pawn move (white moves toward row 0)."""
        return -1 if self is Side.WHITE else 1

    @property
    def key_ordinal(self) -> int:
        """Side component of the position-key index (white = 1, black = 0)."""
        return 1 if self is Side.WHITE else 0

    @property
    def label(self) -> str:
        if self is Side.NEUTRAL:
            return ""
        return self.name.capitalize()

    def __str__(self) -> str:
        return self.name.lower()


class PieceKind(IntEnum):
    """Piece kinds ordered by conventional value."""

    NONE = 0
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6

    @property
    def value_mg(self) -> int:
        """Midgame material value."""
        return _VALUES_MG[self]

    @property
    def value_eg(self) -> int:
        """Endgame material value."""
        return _VALUES_EG[self]

    @property
    def label(self) -> str:
        if self is PieceKind.NONE:
            return ""
        return self.name.lower()


_VALUES_MG: dict[PieceKind, int] = {
    PieceKind.NONE: 0,
    PieceKind.PAWN: 124,
    PieceKind.KNIGHT: 781,
    PieceKind.BISHOP: 825,
    PieceKind.ROOK: 1276,
    PieceKind.QUEEN: 2538,
    PieceKind.KING: 0,
}

_VALUES_EG: dict[PieceKind, int] = {
    PieceKind.NONE: 0,
    PieceKind.PAWN: 206,
    PieceKind.KNIGHT: 854,
    PieceKind.BISHOP: 915,
    PieceKind.ROOK: 1380,
    PieceKind.QUEEN: 2682,
    PieceKind.KING: 0,
}


class LogTag(IntEnum):
    """Move-log entry marker; a CASTLE entry is paired with the rook entry below it."""

    NO_CASTLE = 0
    CASTLE = 1


class GameResult(IntEnum):
    """Outcome of a game."""

    IN_PROGRESS = 0
    WHITE_WINS = 1
    BLACK_WINS = 2
    DRAW = 3
