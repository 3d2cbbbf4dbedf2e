"""Search engine package: alpha-beta search and Qt worker bridge."""

from gambit.engine.alphabeta import SearchEngine
from gambit.engine.qt_bridge import EngineWorker
from gambit.engine.search import IEngine, SearchLimits, SearchResult

__all__ = [
    "EngineWorker",
    "IEngine",
    "SearchEngine",
    "SearchLimits",
    "SearchResult",
]
