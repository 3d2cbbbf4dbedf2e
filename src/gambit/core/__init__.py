"""Core domain layer: board state, legality and move execution.

Quick start::

    from gambit.core import Board, Side

    board = Board()
    board.calc_team_valid_moves(Side.WHITE)
    for piece, move in board.team_moves(Side.WHITE):
        print(piece.kind.label, move)
"""

from gambit.core.board import Board, LogEntry
from gambit.core.enums import GameResult, LogTag, PieceKind, Side
from gambit.core.move import Move
from gambit.core.move_generator import CastleOption, MoveGenerator
from gambit.core.piece import Piece
from gambit.core.placement import STARTING_PLACEMENT, board_from_placement, placement_of
from gambit.core.rules import Rules
from gambit.core.tile import Tile
from gambit.core.types import (
    Square,
    col_of,
    make_square,
    parse_square,
    row_of,
    square_name,
)
from gambit.core.zobrist import KeyFileError, ZobristKeys, default_keys

__all__ = [
    # Enums
    "GameResult",
    "LogTag",
    "PieceKind",
    "Side",
    # Types / helpers
    "Square",
    "col_of",
    "make_square",
    "parse_square",
    "row_of",
    "square_name",
    # Domain objects
    "Board",
    "CastleOption",
    "LogEntry",
    "Move",
    "MoveGenerator",
    "Piece",
    "Rules",
    "Tile",
    # Position keys
    "KeyFileError",
    "ZobristKeys",
    "default_keys",
    # Setup
    "STARTING_PLACEMENT",
    "board_from_placement",
    "placement_of",
]
