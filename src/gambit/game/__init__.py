"""Game management layer: turn order, AI replies, undo."""

from gambit.game.session import GameEvents, GamePhase, GameSession

__all__ = [
    "GameEvents",
    "GamePhase",
    "GameSession",
]
