"""Shared engine search models and protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from gambit.core.board import Board
    from gambit.core.move import Move
    from gambit.core.piece import Piece


@dataclass(slots=True, frozen=True)
class SearchLimits:
    """Search constraints for a single move computation.

    ``threads=None`` uses one lane per logical CPU.
    """

    max_depth: int = 4
    threads: int | None = None
    use_transpositions: bool = False
    positional_eval: bool = False


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Result produced by the engine search."""

    piece: Piece | None
    best_move: Move | None
    score: int
    depth: int
    nodes: int
    pruned: int = 0
    transpositions: int = 0


class IEngine(Protocol):
    """Protocol for engines used by the game layer."""

    def search(self, board: Board, limits: SearchLimits) -> SearchResult: ...
