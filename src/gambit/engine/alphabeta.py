"""Negamax alpha-beta search with a threaded root split."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field

from gambit.core.board import Board
from gambit.core.enums import PieceKind, Side
from gambit.core.move import Move
from gambit.core.piece import Piece
from gambit.core.types import ROWS, Square
from gambit.engine.search import IEngine, SearchLimits, SearchResult

_LOGGER = logging.getLogger(__name__)

INF_SCORE = 1_000_000
_HANGING_PENALTY = 100
_TT_EXACT = 0
_TT_LOWER = 1
_TT_UPPER = 2

BestPair = tuple[Piece, Move]


@dataclass(slots=True)
class _TTEntry:
    depth: int
    score: int
    bound: int
    best: BestPair | None


@dataclass(slots=True)
class _LaneContext:
    """Counters and transposition table owned by one search lane."""

    use_transpositions: bool = False
    positional: bool = False
    evaluated: int = 0
    pruned: int = 0
    transpositions: int = 0
    table: dict[tuple, _TTEntry] = field(default_factory=dict)


class SearchEngine(IEngine):
    """Searches on behalf of one side (the *primary* side).

    Scores are material from the primary side's point of view, negated for
    the opponent's turns (``sign`` of -1).
    """

    __slots__ = (
        "side",
        "opponent",
        "positional_eval",
        "evaluated_states",
        "pruned_states",
        "transpositions",
    )

    def __init__(self, side: Side, *, positional_eval: bool = False) -> None:
        if side is Side.NEUTRAL:
            raise ValueError("Search needs WHITE or BLACK as primary side")
        self.side = side
        self.opponent = side.other()
        self.positional_eval = positional_eval
        self.evaluated_states = 0
        self.pruned_states = 0
        self.transpositions = 0

    # -- Move lists -----------------------------------------------------------

    def get_valid_moves(self, board: Board, side: Side) -> list[BestPair]:
        if not board.has_valid_moves_table(side):
            board.calc_team_valid_moves(side)
        return board.team_moves(side)

    def get_ordered_valid_moves(self, board: Board, side: Side) -> list[BestPair]:
        """Legal moves of *side*, most promising first (stable on ties)."""
        moves = self.get_valid_moves(board, side)
        # First opposing piece able to reach each square.
        attackers: dict[Square, Piece] = {}
        for opp_piece, opp_move in self.get_valid_moves(board, side.other()):
            attackers.setdefault(opp_move.to_sq, opp_piece)

        def score(pair: BestPair) -> int:
            piece, move = pair
            value = 0
            target = move.destination.piece
            if target is not None and target.side is not piece.side:
                value += 10 * target.value_mg - piece.value_mg
            if piece.kind is PieceKind.PAWN and move.destination.row in (0, ROWS - 1):
                value += PieceKind.QUEEN.value_mg
            attacker = attackers.get(move.to_sq)
            if attacker is not None:
                value -= max(_HANGING_PENALTY, piece.value_mg - attacker.value_mg)
            return value

        return sorted(moves, key=score, reverse=True)

    # -- Alpha-beta -------------------------------------------------------------

    def alphabeta(
        self,
        board: Board,
        depth: int,
        sign: int,
        alpha: int = -INF_SCORE,
        beta: int = INF_SCORE,
    ) -> tuple[int, BestPair | None]:
        """Negamax search of *board* to *depth* plies.

        ``sign`` is +1 when the primary side moves, -1 for the opponent.
        Returns the score from the mover's point of view and the best
        ``(piece, move)``, or ``None`` at a leaf or terminal position.
        """
        context = _LaneContext(positional=self.positional_eval)
        try:
            return self._alphabeta(context, board, depth, sign, alpha, beta)
        finally:
            self._merge(context)

    def _alphabeta(
        self,
        ctx: _LaneContext,
        board: Board,
        depth: int,
        sign: int,
        alpha: int,
        beta: int,
    ) -> tuple[int, BestPair | None]:
        board.calc_team_valid_moves(self.side)
        board.calc_team_valid_moves(self.opponent)
        if depth <= 0 or board.is_terminal():
            ctx.evaluated += 1
            return sign * board.evaluate(self.side, ctx.positional), None

        key = None
        if ctx.use_transpositions:
            key = (board.position_key(), sign)
            entry = ctx.table.get(key)
            if entry is not None and entry.depth == depth:
                if (
                    entry.bound == _TT_EXACT
                    or (entry.bound == _TT_LOWER and entry.score >= beta)
                    or (entry.bound == _TT_UPPER and entry.score <= alpha)
                ):
                    ctx.transpositions += 1
                    return entry.score, entry.best

        alpha_orig = alpha
        mover = self.side if sign > 0 else self.opponent
        best_score = -INF_SCORE
        best: BestPair | None = None
        for piece, move in self.get_ordered_valid_moves(board, mover):
            child = board.copy()
            child.execute_move(piece, move)
            child.set_en_passant(piece, move)
            child_score, _ = self._alphabeta(ctx, child, depth - 1, -sign, -beta, -alpha)
            score = -child_score
            if best is None or score > best_score:
                best_score = score
                best = (piece, move)
            if score > alpha:
                alpha = score
            if alpha >= beta:
                ctx.pruned += 1
                break

        if key is not None:
            if best_score <= alpha_orig:
                bound = _TT_UPPER
            elif best_score >= beta:
                bound = _TT_LOWER
            else:
                bound = _TT_EXACT
            ctx.table[key] = _TTEntry(depth, best_score, bound, best)
        return best_score, best

    def _merge(self, ctx: _LaneContext) -> None:
        self.evaluated_states += ctx.evaluated
        self.pruned_states += ctx.pruned
        self.transpositions += ctx.transpositions

    # -- Root split -------------------------------------------------------------

    def search(self, board: Board, limits: SearchLimits) -> SearchResult:
        return self.search_multi(board, limits.max_depth, limits)

    def search_multi(
        self,
        board: Board,
        depth: int,
        limits: SearchLimits | None = None,
    ) -> SearchResult:
        """Full *depth*-ply search with root moves striped across lanes.

        Each lane owns private board copies, counters and transposition
        table; only the result list is shared. The best score wins, ties go
        to the move that was ordered first.
        """
        if depth <= 0:
            raise ValueError("Search depth must be >= 1")
        limits = limits or SearchLimits(max_depth=depth, positional_eval=self.positional_eval)

        root = board.copy()
        root.calc_team_valid_moves(self.side)
        root.calc_team_valid_moves(self.opponent)
        ordered = self.get_ordered_valid_moves(root, self.side)
        if not ordered:
            return SearchResult(
                None, None, root.evaluate(self.side, limits.positional_eval), depth, 0
            )

        requested = limits.threads or os.cpu_count() or 1
        lane_count = max(1, min(requested, len(ordered)))
        results: list[tuple[int, int, Piece, Move]] = []
        errors: list[Exception] = []
        lock = threading.Lock()
        contexts = [
            _LaneContext(limits.use_transpositions, limits.positional_eval)
            for _ in range(lane_count)
        ]
        threads = [
            threading.Thread(
                target=self._run_lane,
                args=(
                    root,
                    depth,
                    [(idx, pair) for idx, pair in enumerate(ordered) if idx % lane_count == lane],
                    contexts[lane],
                    results,
                    errors,
                    lock,
                ),
                name=f"gambit-lane-{lane}",
                daemon=True,
            )
            for lane in range(lane_count)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        if errors:
            raise errors[0]

        for ctx in contexts:
            self._merge(ctx)
        # max score, then earliest root index
        _, score, piece, move = min(results, key=lambda r: (-r[1], r[0]))
        nodes = sum(ctx.evaluated for ctx in contexts)
        pruned = sum(ctx.pruned for ctx in contexts)
        hits = sum(ctx.transpositions for ctx in contexts)
        _LOGGER.debug(
            "search depth=%d lanes=%d best=%s score=%d nodes=%d pruned=%d tt=%d",
            depth,
            lane_count,
            move,
            score,
            nodes,
            pruned,
            hits,
        )
        return SearchResult(piece, move, score, depth, nodes, pruned, hits)

    def _run_lane(
        self,
        root: Board,
        depth: int,
        assigned: list[tuple[int, BestPair]],
        ctx: _LaneContext,
        results: list[tuple[int, int, Piece, Move]],
        errors: list[Exception],
        lock: threading.Lock,
    ) -> None:
        board = root.copy()
        alpha = -INF_SCORE
        best: tuple[int, int, Piece, Move] | None = None
        try:
            for idx, (piece, move) in assigned:
                child = board.copy()
                child.execute_move(piece, move)
                child.set_en_passant(piece, move)
                child_score, _ = self._alphabeta(ctx, child, depth - 1, -1, -INF_SCORE, -alpha)
                score = -child_score
                if best is None or score > best[1]:
                    best = (idx, score, piece, move)
                if score > alpha:
                    alpha = score
        except Exception as exc:
            _LOGGER.exception("Search lane failed")
            with lock:
                errors.append(exc)
            return
        if best is not None:
            with lock:
                results.append(best)
