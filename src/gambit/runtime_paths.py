"""Helpers for locating runtime data files."""

from __future__ import annotations

import os
from pathlib import Path

ZOBRIST_FILE_ENV = "GAMBIT_ZOBRIST_FILE"

_REPO_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_ZOBRIST_FILE = Path("internal") / "zobrist.bin"


def zobrist_key_file() -> Path:
    """Location of the persisted position-key table.

    ``GAMBIT_ZOBRIST_FILE`` overrides the default ``internal/zobrist.bin``.
    """
    override = os.environ.get(ZOBRIST_FILE_ENV)
    if override:
        return Path(override)
    return _REPO_ROOT / _DEFAULT_ZOBRIST_FILE
