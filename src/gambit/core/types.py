"""Square type alias and grid coordinate helpers.

Grid layout (row 0 is the eighth rank, as seen from White):
    a8=0, b8=1, ..., h8=7
    a7=8, ...
    ...
    a1=56, b1=57, ..., h1=63
"""

from __future__ import annotations

from typing import TypeAlias

Square: TypeAlias = int  # 0–63, row * 8 + col
Direction: TypeAlias = tuple[int, int]  # (row step, col step)

ROWS = 8
COLS = 8


def in_range(index: int) -> bool:
    """Whether a row or column index lies on the board."""
    return 0 <= index < 8


def make_square(row: int, col: int) -> Square:
    return row * COLS + col


def row_of(sq: Square) -> int:
    return sq // COLS


def col_of(sq: Square) -> int:
    return sq % COLS


def square_name(sq: Square) -> str:
    """Human-readable name, e.g. 0 → 'a8', 60 → 'e1'."""
    return chr(ord("a") + col_of(sq)) + str(ROWS - row_of(sq))


def parse_square(name: str) -> Square:
    """Parse square name, e.g. 'e1' → 60."""
    if len(name) != 2 or name[0] not in "abcdefgh" or name[1] not in "12345678":
        raise ValueError(f"Invalid square name: {name!r}")
    return make_square(ROWS - int(name[1]), ord(name[0]) - ord("a"))


def parse_coords(name: str) -> tuple[int, int]:
    """Parse square name into ``(row, col)``, e.g. 'e1' → (7, 4)."""
    sq = parse_square(name)
    return row_of(sq), col_of(sq)
