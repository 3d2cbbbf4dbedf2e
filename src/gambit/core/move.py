"""Move value object (origin / destination tile snapshots)."""

from __future__ import annotations

from dataclasses import dataclass

from gambit.core.piece import Piece
from gambit.core.tile import Tile
from gambit.core.types import Square, make_square, parse_coords


@dataclass(frozen=True, slots=True, eq=False)
class Move:
    """A pair of tile snapshots taken when the move was generated.

    The destination snapshot keeps whatever piece occupied it at that time
    (for en passant: the pawn that gets taken). Equality looks at the two
    coordinate pairs only.
    """

    origin: Tile
    destination: Tile

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Move):
            return NotImplemented
        return self.origin == other.origin and self.destination == other.destination

    def __hash__(self) -> int:
        return hash((self.origin.row, self.origin.col, self.destination.row, self.destination.col))

    # ── Display ──────────────────────────────────────────────────────────

    def __str__(self) -> str:
        return f"{self.origin.name}{self.destination.name}"

    def __repr__(self) -> str:
        return f"{self.origin!r} -> {self.destination!r}"

    # ── Construction helpers ─────────────────────────────────────────────

    @classmethod
    def between(
        cls,
        from_row: int,
        from_col: int,
        to_row: int,
        to_col: int,
        captured: Piece | None = None,
    ) -> Move:
        return cls(Tile(from_row, from_col), Tile(to_row, to_col, captured))

    @classmethod
    def parse(cls, text: str) -> Move:
        """Parse coordinate notation, e.g. 'e2e4'."""
        if len(text) != 4:
            raise ValueError(f"Invalid move text: {text!r}")
        from_row, from_col = parse_coords(text[:2])
        to_row, to_col = parse_coords(text[2:])
        return cls.between(from_row, from_col, to_row, to_col)

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def from_sq(self) -> Square:
        return make_square(self.origin.row, self.origin.col)

    @property
    def to_sq(self) -> Square:
        return make_square(self.destination.row, self.destination.col)

    @property
    def captured(self) -> Piece | None:
        """Piece recorded on the destination when the move was generated."""
        return self.destination.piece
