"""GameSession - turn order, move submission, AI replies and undo.

Emits events via simple callbacks so a UI or tests can subscribe.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum, auto

from gambit.core.board import Board
from gambit.core.enums import GameResult, Side
from gambit.core.move import Move
from gambit.core.piece import Piece
from gambit.core.rules import Rules
from gambit.engine.alphabeta import SearchEngine
from gambit.engine.search import SearchLimits, SearchResult


class GamePhase(IntEnum):
    """Finite-state-machine states for a game."""

    NOT_STARTED = auto()
    AWAITING_MOVE = auto()
    THINKING = auto()  # AI is computing
    GAME_OVER = auto()


# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[Piece, Move, Side], None]  # piece, move, mover
GameOverCallback = Callable[[GameResult], None]
PhaseCallback = Callable[[GamePhase], None]


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)


# ── Session ──────────────────────────────────────────────────────────────────


class GameSession:
    """One game between a human and either another human or the engine.

    White moves first. With ``use_ai`` the session enters ``THINKING``
    whenever ``ai_side`` is to move; the reply comes from
    :meth:`compute_ai_move` or from an external worker via
    :meth:`play_move`.
    """

    __slots__ = (
        "_board",
        "_side_to_move",
        "_ai_side",
        "_use_ai",
        "_limits",
        "_phase",
        "_result",
        "_history",
        "events",
    )

    def __init__(
        self,
        *,
        ai_side: Side = Side.BLACK,
        use_ai: bool = False,
        depth: int = 4,
        threads: int | None = None,
        board: Board | None = None,
    ) -> None:
        if depth <= 0:
            raise ValueError("Search depth must be >= 1")
        self._board = board if board is not None else Board()
        self._side_to_move = Side.WHITE
        self._ai_side = ai_side
        self._use_ai = use_ai
        self._limits = SearchLimits(max_depth=depth, threads=threads)
        self._phase = GamePhase.NOT_STARTED
        self._result = GameResult.IN_PROGRESS
        self._history: list[tuple[Piece, Move]] = []
        self.events = GameEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def board(self) -> Board:
        return self._board

    @property
    def side_to_move(self) -> Side:
        return self._side_to_move

    @property
    def ai_side(self) -> Side:
        return self._ai_side

    @property
    def use_ai(self) -> bool:
        return self._use_ai

    @use_ai.setter
    def use_ai(self, value: bool) -> None:
        self._use_ai = value

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def result(self) -> GameResult:
        return self._result

    @property
    def winner(self) -> Side:
        return Rules.winner(self._result)

    @property
    def is_game_over(self) -> bool:
        return self._result is not GameResult.IN_PROGRESS

    @property
    def is_stalemate(self) -> bool:
        return self._result is GameResult.DRAW

    @property
    def history(self) -> tuple[tuple[Piece, Move], ...]:
        return tuple(self._history)

    def is_ai_turn(self) -> bool:
        return self._use_ai and self._side_to_move is self._ai_side

    # ── Flow ─────────────────────────────────────────────────────────────

    def start(self, side_to_move: Side = Side.WHITE) -> None:
        """Begin play on the current board with *side_to_move* first."""
        self._side_to_move = side_to_move
        self._history = []
        self._refresh()

    def reset(self) -> None:
        """Fresh starting position, White to move."""
        self._board.reset()
        self.start(Side.WHITE)

    def legal_moves(self, row: int, col: int) -> list[Move]:
        """Legal moves of the side to move's piece on ``(row, col)``."""
        piece = self._board.piece_at(row, col)
        if piece is None or piece.side is not self._side_to_move or self.is_game_over:
            return []
        return self._board.valid_moves_at(row, col)

    def play_move(self, move: Move) -> bool:
        """Play *move* for the side to move; False when it is not legal."""
        if self.is_game_over or self._phase is GamePhase.NOT_STARTED:
            return False
        piece = self._board.piece_at(move.origin.row, move.origin.col)
        if piece is None or piece.side is not self._side_to_move:
            return False
        if not self._board.is_valid(piece, move):
            return False
        self._apply(piece, move)
        return True

    def compute_ai_move(self) -> SearchResult | None:
        """Search and play the engine's reply; None when it is not its turn."""
        if not self.is_ai_turn() or self.is_game_over:
            return None
        engine = SearchEngine(self._ai_side)
        result = engine.search(self._board.copy(), self._limits)
        if result.best_move is None:
            return result
        piece = self._board.piece_at(result.best_move.origin.row, result.best_move.origin.col)
        if piece is None:
            raise ValueError(f"Engine move {result.best_move} starts on an empty square")
        self._apply(piece, result.best_move)
        return result

    def undo_move(self) -> bool:
        """Take back the last ply; False when there is nothing to undo."""
        if not self._history or not self._board.undo_last_move():
            return False
        self._history.pop()
        self._side_to_move = self._side_to_move.other()
        self._refresh()
        return True

    # ── Internal helpers ─────────────────────────────────────────────────

    def _apply(self, piece: Piece, move: Move) -> None:
        mover = self._side_to_move
        self._board.execute_move(piece, move)
        self._board.set_en_passant(piece, move)
        self._history.append((piece, move))
        self._side_to_move = mover.other()
        for cb in self.events.on_move:
            cb(piece, move, mover)
        self._refresh()

    def _refresh(self) -> None:
        self._result = Rules.game_result(self._board, self._side_to_move)
        if self.is_game_over:
            self._set_phase(GamePhase.GAME_OVER)
            for cb in self.events.on_game_over:
                cb(self._result)
        elif self.is_ai_turn():
            self._set_phase(GamePhase.THINKING)
        else:
            self._set_phase(GamePhase.AWAITING_MOVE)

    def _set_phase(self, phase: GamePhase) -> None:
        self._phase = phase
        for cb in self.events.on_phase_changed:
            cb(phase)
