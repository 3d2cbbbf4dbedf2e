"""gambit - chess rules engine with a threaded alpha-beta opponent."""

__version__ = "0.1.0"
