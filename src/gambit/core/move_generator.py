"""Pin/check analysis and per-piece legal move generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from gambit.core.enums import PieceKind, Side
from gambit.core.move import Move
from gambit.core.piece import Piece
from gambit.core.tile import Tile
from gambit.core.types import Direction, Square, in_range, make_square

if TYPE_CHECKING:
    from gambit.core.board import Board


Pin: TypeAlias = tuple[Square, Direction]  # pinned square, ray from the king
Check: TypeAlias = tuple[Square, Direction]  # attacker square, ray or knight offset

KNIGHT_OFFSETS: tuple[Direction, ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)

ROOK_DIRS: tuple[Direction, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
BISHOP_DIRS: tuple[Direction, ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
QUEEN_DIRS: tuple[Direction, ...] = ROOK_DIRS + BISHOP_DIRS
KING_OFFSETS = QUEEN_DIRS

_SLIDER_DIRS: dict[PieceKind, tuple[Direction, ...]] = {
    PieceKind.BISHOP: BISHOP_DIRS,
    PieceKind.ROOK: ROOK_DIRS,
    PieceKind.QUEEN: QUEEN_DIRS,
}

# Row a pawn must stand on to take en passant.
_EN_PASSANT_ROW: dict[Side, int] = {Side.WHITE: 3, Side.BLACK: 4}


@dataclass(frozen=True, slots=True)
class CastleOption:
    """A legal castle: the king's two-column step and its rook partner."""

    king_move: Move
    rook_square: Square
    rook_move: Move

    @property
    def queenside(self) -> bool:
        return self.king_move.destination.col < self.king_move.origin.col


def _colinear(step: Direction, ray: Direction) -> bool:
    """Whether *step* runs along *ray* in either sense."""
    return step[0] * ray[1] == step[1] * ray[0]


def _attacks_along(piece: Piece, distance: int, ray: Direction) -> bool:
    """Can *piece*, seen from the king along *ray* at *distance*, hit the king?"""
    orthogonal = ray[0] == 0 or ray[1] == 0
    kind = piece.kind
    if kind is PieceKind.QUEEN:
        return True
    if kind is PieceKind.ROOK:
        return orthogonal
    if kind is PieceKind.BISHOP:
        return not orthogonal
    if distance != 1:
        return False
    if kind is PieceKind.KING:
        return True
    if kind is PieceKind.PAWN:
        # The pawn's forward step must lead back toward the king.
        return not orthogonal and ray[0] == -piece.direction
    return False


class MoveGenerator:
    """Derives legality for one :class:`Board`.

    Stateless apart from the board reference; the board stores the results.
    King steps and castling transits are verified on scratch copies, every
    other piece is restricted through the pin list.
    """

    __slots__ = ("_board",)

    def __init__(self, board: Board) -> None:
        self._board = board

    # -- Pin / check analysis ----------------------------------------------

    def get_pins_and_checks(self, side: Side) -> tuple[bool, list[Pin], list[Check]]:
        """Scan outward from *side*'s king.

        Returns ``(in_check, pins, checks)``.
        """
        board = self._board
        king = board.king_tile(side)
        pins: list[Pin] = []
        checks: list[Check] = []

        for ray in QUEEN_DIRS:
            candidate: Pin | None = None
            for distance in range(1, 8):
                row = king.row + ray[0] * distance
                col = king.col + ray[1] * distance
                if not (in_range(row) and in_range(col)):
                    break
                piece = board.piece_at(row, col)
                if piece is None:
                    continue
                if piece.side is side:
                    if candidate is not None:
                        break
                    candidate = (make_square(row, col), ray)
                    continue
                if _attacks_along(piece, distance, ray):
                    if candidate is None:
                        checks.append((make_square(row, col), ray))
                    else:
                        pins.append(candidate)
                break

        for offset in KNIGHT_OFFSETS:
            row = king.row + offset[0]
            col = king.col + offset[1]
            if not (in_range(row) and in_range(col)):
                continue
            piece = board.piece_at(row, col)
            if piece is not None and piece.side is not side and piece.kind is PieceKind.KNIGHT:
                checks.append((make_square(row, col), offset))

        return bool(checks), pins, checks

    def is_in_check(self, side: Side) -> bool:
        return self.get_pins_and_checks(side)[0]

    def block_squares(self, king: Tile, check: Check) -> set[Square]:
        """Squares where a non-king piece can answer a single *check*."""
        attacker_sq, ray = check
        attacker = self._board[attacker_sq]
        if attacker is None or attacker.kind not in _SLIDER_DIRS:
            return {attacker_sq}
        squares: set[Square] = set()
        row, col = king.row, king.col
        while True:
            row += ray[0]
            col += ray[1]
            sq = make_square(row, col)
            squares.add(sq)
            if sq == attacker_sq:
                return squares

    # -- Per-piece generation ------------------------------------------------

    def piece_moves(
        self,
        piece: Piece,
        row: int,
        col: int,
        pin: Direction | None = None,
    ) -> list[Move]:
        """Legal moves for *piece* on ``(row, col)``, castling excluded."""
        kind = piece.kind
        if kind is PieceKind.PAWN:
            return self._pawn_moves(piece, row, col, pin)
        if kind is PieceKind.KNIGHT:
            if pin is not None:
                return []
            return self._step_moves(piece, row, col, KNIGHT_OFFSETS)
        if kind is PieceKind.KING:
            return self._king_moves(piece, row, col)
        dirs = _SLIDER_DIRS.get(kind, ())
        if pin is not None:
            dirs = tuple(d for d in dirs if _colinear(d, pin))
        return self._slide_moves(piece, row, col, dirs)

    def _move(self, row: int, col: int, to_row: int, to_col: int) -> Move:
        board = self._board
        return Move(board.tile(row, col).snapshot(), board.tile(to_row, to_col).snapshot())

    def _pawn_moves(
        self, piece: Piece, row: int, col: int, pin: Direction | None
    ) -> list[Move]:
        board = self._board
        side = piece.side
        forward = piece.direction
        moves: list[Move] = []

        ahead = row + forward
        if not in_range(ahead):
            return moves

        if pin is None or _colinear((forward, 0), pin):
            if board.tile(ahead, col).is_empty():
                moves.append(self._move(row, col, ahead, col))
                double = ahead + forward
                if (
                    not piece.has_moved
                    and in_range(double)
                    and board.tile(double, col).is_empty()
                ):
                    moves.append(self._move(row, col, double, col))

        for side_step in (-1, 1):
            target_col = col + side_step
            if not in_range(target_col):
                continue
            if pin is not None and not _colinear((forward, side_step), pin):
                continue
            target = board.tile(ahead, target_col)
            if target.has_rival(side):
                moves.append(self._move(row, col, ahead, target_col))
                continue
            if target.has_piece() or row != _EN_PASSANT_ROW[side]:
                continue
            passed = board.piece_at(row, target_col)
            if (
                passed is not None
                and passed.side is not side
                and passed.kind is PieceKind.PAWN
                and passed.en_passant
            ):
                move = Move(board.tile(row, col).snapshot(), Tile(ahead, target_col, passed, target.bonuses))
                if self._en_passant_is_safe(piece, move):
                    moves.append(move)
        return moves

    def _en_passant_is_safe(self, piece: Piece, move: Move) -> bool:
        # Both pawns leave the same row, which the pin scan cannot see.
        scratch = self._board.scratch_copy()
        scratch.tile(move.origin.row, move.destination.col).piece = None
        scratch.simulate_move(piece, move)
        return not MoveGenerator(scratch).is_in_check(piece.side)

    def _step_moves(
        self,
        piece: Piece,
        row: int,
        col: int,
        offsets: tuple[Direction, ...],
    ) -> list[Move]:
        board = self._board
        moves: list[Move] = []
        for dr, dc in offsets:
            to_row, to_col = row + dr, col + dc
            if in_range(to_row) and in_range(to_col):
                if board.tile(to_row, to_col).is_empty_or_rival(piece.side):
                    moves.append(self._move(row, col, to_row, to_col))
        return moves

    def _slide_moves(
        self,
        piece: Piece,
        row: int,
        col: int,
        dirs: tuple[Direction, ...],
    ) -> list[Move]:
        board = self._board
        moves: list[Move] = []
        for dr, dc in dirs:
            to_row, to_col = row + dr, col + dc
            while in_range(to_row) and in_range(to_col):
                target = board.tile(to_row, to_col)
                if target.has_side(piece.side):
                    break
                moves.append(self._move(row, col, to_row, to_col))
                if target.has_piece():
                    break
                to_row += dr
                to_col += dc
        return moves

    def _king_moves(self, piece: Piece, row: int, col: int) -> list[Move]:
        return [
            move
            for move in self._step_moves(piece, row, col, KING_OFFSETS)
            if self._king_safe_after(piece, move)
        ]

    def _king_safe_after(self, king: Piece, move: Move) -> bool:
        scratch = self._board.scratch_copy()
        scratch.simulate_move(king, move)
        return not MoveGenerator(scratch).is_in_check(king.side)

    # -- Castling -----------------------------------------------------------

    def castle_options(self, king: Piece, row: int, col: int) -> list[CastleOption]:
        """Castles available to *king* on ``(row, col)``.

        Needs an unmoved king on its home column that is not in check, an
        unmoved rook of the same side in the corner, empty squares between
        them and no attack on the king's transit or destination square.
        """
        if king.has_moved or col != 4 or self.is_in_check(king.side):
            return []
        options: list[CastleOption] = []
        for rook_col, step in ((0, -1), (7, 1)):
            rook = self._board.piece_at(row, rook_col)
            if (
                rook is None
                or rook.kind is not PieceKind.ROOK
                or rook.side is not king.side
                or rook.has_moved
            ):
                continue
            between = range(min(col, rook_col) + 1, max(col, rook_col))
            if any(self._board.tile(row, c).has_piece() for c in between):
                continue
            transit = col + step
            destination = col + 2 * step
            if not (
                self._king_safe_after(king, self._move(row, col, row, transit))
                and self._king_safe_after(king, self._move(row, col, row, destination))
            ):
                continue
            options.append(
                CastleOption(
                    self._move(row, col, row, destination),
                    make_square(row, rook_col),
                    self._move(row, rook_col, row, transit),
                )
            )
        return options
