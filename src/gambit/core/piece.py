"""Piece entity."""

from __future__ import annotations

from dataclasses import dataclass, field

from gambit.core.enums import PieceKind, Side

_FEN_CHARS: dict[PieceKind, str] = {
    PieceKind.PAWN: "p",
    PieceKind.KNIGHT: "n",
    PieceKind.BISHOP: "b",
    PieceKind.ROOK: "r",
    PieceKind.QUEEN: "q",
    PieceKind.KING: "k",
}
_CHAR_KINDS: dict[str, PieceKind] = {v: k for k, v in _FEN_CHARS.items()}


@dataclass(slots=True, eq=False)
class Piece:
    """A movable unit identified by ``uid``.

    Two pieces of the same kind and side are still distinct: equality and
    hashing use the uid only, so a piece keeps its identity while its flags
    and cached coordinates change.
    """

    kind: PieceKind
    side: Side
    uid: int
    row: int = 0
    col: int = 0
    has_moved: bool = False
    en_passant: bool = False
    direction: int = field(init=False)

    def __post_init__(self) -> None:
        self.direction = self.side.direction

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return self.uid == other.uid

    def __hash__(self) -> int:
        return hash(self.uid)

    def __str__(self) -> str:
        """FEN character (uppercase = white, lowercase = black)."""
        char = _FEN_CHARS[self.kind]
        return char.upper() if self.side is Side.WHITE else char

    @classmethod
    def from_char(cls, char: str, uid: int, row: int = 0, col: int = 0) -> Piece:
        """Create piece from FEN character, e.g. 'N' → white knight."""
        kind = _CHAR_KINDS.get(char.lower())
        if kind is None:
            raise ValueError(f"Invalid piece character: {char!r}")
        side = Side.WHITE if char.isupper() else Side.BLACK
        return cls(kind, side, uid, row, col)

    @property
    def value_mg(self) -> int:
        return self.kind.value_mg

    @property
    def value_eg(self) -> int:
        return self.kind.value_eg

    def make_moved(self) -> None:
        self.has_moved = True

    def copy(self) -> Piece:
        return Piece(
            self.kind,
            self.side,
            self.uid,
            self.row,
            self.col,
            self.has_moved,
            self.en_passant,
        )
