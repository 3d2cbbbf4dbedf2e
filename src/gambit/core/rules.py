"""High-level rule checks: check, checkmate, stalemate, game result."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gambit.core.enums import GameResult, Side

if TYPE_CHECKING:
    from gambit.core.board import Board


class Rules:
    """Static rule-checker that operates on a :class:`Board`.

    Terminal checks recompute *side*'s legal-move table, so they are safe
    to call right after a move was executed.
    """

    @staticmethod
    def is_in_check(board: Board, side: Side) -> bool:
        return board.is_in_check(side)

    @staticmethod
    def is_checkmate(board: Board, side: Side) -> bool:
        board.calc_team_valid_moves(side)
        return board.is_checkmate(side)

    @staticmethod
    def is_stalemate(board: Board, side: Side) -> bool:
        board.calc_team_valid_moves(side)
        return board.is_stalemate(side)

    @staticmethod
    def game_result(board: Board, side_to_move: Side) -> GameResult:
        """Outcome with *side_to_move* to play."""
        board.calc_team_valid_moves(side_to_move)
        if not board.in_checkmate(side_to_move):
            return GameResult.IN_PROGRESS
        if board.is_in_check(side_to_move):
            return (
                GameResult.BLACK_WINS
                if side_to_move is Side.WHITE
                else GameResult.WHITE_WINS
            )
        return GameResult.DRAW  # stalemate

    @staticmethod
    def winner(result: GameResult) -> Side:
        """Winning side of *result*, ``Side.NEUTRAL`` when there is none."""
        if result is GameResult.WHITE_WINS:
            return Side.WHITE
        if result is GameResult.BLACK_WINS:
            return Side.BLACK
        return Side.NEUTRAL
