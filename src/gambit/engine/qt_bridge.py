"""Qt bridge to run engine search in a worker thread."""

from __future__ import annotations

import logging
import threading

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from gambit.core.board import Board
from gambit.core.enums import Side
from gambit.engine.alphabeta import SearchEngine
from gambit.engine.search import IEngine, SearchLimits

_LOGGER = logging.getLogger(__name__)


class EngineWorker(QObject):
    """Thread-affine worker that computes moves for one side on demand.

    The search itself cannot be interrupted; :meth:`cancel` only makes the
    worker drop the result of the search in flight.
    """

    best_move_ready = pyqtSignal(int, object, object, int, int)  # id, piece, move, score, nodes
    search_cancelled = pyqtSignal(int)
    search_no_move = pyqtSignal(int, int, int)  # id, score, nodes
    search_error = pyqtSignal(int, str)

    __slots__ = ("_cancel_event", "_engine", "_limits")

    def __init__(
        self,
        side: Side = Side.BLACK,
        *,
        max_depth: int = 4,
        threads: int | None = None,
    ) -> None:
        super().__init__()
        self._engine: IEngine = SearchEngine(side)
        self._limits = SearchLimits(max_depth=max_depth, threads=threads)
        self._cancel_event = threading.Event()

    @property
    def limits(self) -> SearchLimits:
        return self._limits

    @pyqtSlot(object, int)
    def request_move(self, board_obj: object, request_id: int) -> None:
        """Search for the best move on *board_obj* and emit the result."""
        if not isinstance(board_obj, Board):
            self.search_error.emit(request_id, "Engine received invalid board")
            return

        self._cancel_event.clear()
        try:
            result = self._engine.search(board_obj.copy(), self._limits)
        except Exception as exc:
            _LOGGER.exception("Engine search %d failed", request_id)
            self.search_error.emit(request_id, str(exc))
            return

        if self._cancel_event.is_set():
            self.search_cancelled.emit(request_id)
            return

        if result.best_move is None:
            self.search_no_move.emit(request_id, result.score, result.nodes)
            return

        self.best_move_ready.emit(
            request_id,
            result.piece,
            result.best_move,
            result.score,
            result.nodes,
        )

    @pyqtSlot()
    def cancel(self) -> None:
        """Discard the result of the current search."""
        self._cancel_event.set()

    @pyqtSlot(int, int)
    def set_limits(self, max_depth: int, threads: int) -> None:
        """Update search limits (takes effect on the next search).

        ``threads <= 0`` means one lane per logical CPU.
        """
        self._limits = SearchLimits(
            max_depth=max_depth,
            threads=threads if threads > 0 else None,
            use_transpositions=self._limits.use_transpositions,
            positional_eval=self._limits.positional_eval,
        )

    @pyqtSlot(int)
    def set_side(self, side: int) -> None:
        self._engine = SearchEngine(Side(side))
