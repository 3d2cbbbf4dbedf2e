"""Board setup from the placement field of a FEN string, and back."""

from __future__ import annotations

from gambit.core.board import Board
from gambit.core.enums import PieceKind, Side
from gambit.core.piece import Piece
from gambit.core.types import COLS, ROWS, parse_coords
from gambit.core.zobrist import ZobristKeys

STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

_HOME_ROWS: dict[Side, tuple[int, int]] = {Side.WHITE: (7, 6), Side.BLACK: (0, 1)}
_HOME_KINDS: tuple[PieceKind, ...] = (
    PieceKind.ROOK,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.QUEEN,
    PieceKind.KING,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
    PieceKind.ROOK,
)
# Castling letter -> (side, rook column)
_CASTLE_LETTERS: dict[str, tuple[Side, int]] = {
    "K": (Side.WHITE, 7),
    "Q": (Side.WHITE, 0),
    "k": (Side.BLACK, 7),
    "q": (Side.BLACK, 0),
}


def _on_home_square(kind: PieceKind, side: Side, row: int, col: int) -> bool:
    back_row, pawn_row = _HOME_ROWS[side]
    if kind is PieceKind.PAWN:
        return row == pawn_row
    return row == back_row and _HOME_KINDS[col] is kind


def board_from_placement(text: str, keys: ZobristKeys | None = None) -> Board:
    """Build a board from ``text``.

    ``text`` is a FEN placement field, optionally followed by the other FEN
    fields. Pieces on their starting squares count as unmoved. When a
    castling field is present, kings and rooks without a matching right are
    marked as moved; an en passant field flags the pawn that just advanced.
    """
    fields = text.split()
    if not fields:
        raise ValueError("Empty placement")
    rows = fields[0].split("/")
    if len(rows) != ROWS:
        raise ValueError(f"Invalid placement (must contain 8 rows): {fields[0]!r}")

    board = Board.empty(keys)
    for row, row_text in enumerate(rows):
        col = 0
        for ch in row_text:
            if ch.isdigit():
                step = int(ch)
                if not (1 <= step <= COLS):
                    raise ValueError(f"Invalid placement digit {ch!r}: {fields[0]!r}")
                col += step
            else:
                if col >= COLS:
                    raise ValueError(f"Invalid placement row width: {fields[0]!r}")
                probe = Piece.from_char(ch, -1)
                board.place(
                    probe.kind,
                    probe.side,
                    row,
                    col,
                    has_moved=not _on_home_square(probe.kind, probe.side, row, col),
                )
                col += 1
        if col != COLS:
            raise ValueError(f"Invalid placement row width: {fields[0]!r}")

    for side in (Side.WHITE, Side.BLACK):
        board.king_tile(side)

    if len(fields) >= 3:
        _apply_castling(board, fields[2])
    if len(fields) >= 4 and fields[3] != "-":
        _apply_en_passant(board, fields[3])
    return board


def _apply_castling(board: Board, castling: str) -> None:
    kept: set[tuple[Side, int]] = set()
    if castling != "-":
        for ch in castling:
            right = _CASTLE_LETTERS.get(ch)
            if right is None:
                raise ValueError(f"Invalid castling field: {castling!r}")
            kept.add(right)
    for side in (Side.WHITE, Side.BLACK):
        back_row = _HOME_ROWS[side][0]
        rights = 0
        for rook_col in (0, 7):
            rook = board.piece_at(back_row, rook_col)
            if rook is None or rook.kind is not PieceKind.ROOK or rook.side is not side:
                continue
            if (side, rook_col) in kept:
                rights += 1
            else:
                rook.has_moved = True
        if rights == 0:
            board.king_tile(side).piece.has_moved = True


def _apply_en_passant(board: Board, target: str) -> None:
    row, col = parse_coords(target)
    if row not in (2, 5):
        raise ValueError(f"Invalid en passant square: {target!r}")
    # The pawn stands one row beyond the skipped square.
    pawn_row = 3 if row == 2 else 4
    pawn = board.piece_at(pawn_row, col)
    if pawn is None or pawn.kind is not PieceKind.PAWN:
        raise ValueError(f"No pawn behind en passant square {target!r}")
    pawn.en_passant = True


def placement_of(board: Board) -> str:
    """FEN placement field of *board*."""
    rows: list[str] = []
    for row in range(ROWS):
        text = ""
        gap = 0
        for col in range(COLS):
            piece = board.piece_at(row, col)
            if piece is None:
                gap += 1
                continue
            if gap:
                text += str(gap)
                gap = 0
            text += str(piece)
        if gap:
            text += str(gap)
        rows.append(text)
    return "/".join(rows)
