"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator

import pytest

from gambit.core.zobrist import reset_default_keys
from gambit.runtime_paths import ZOBRIST_FILE_ENV

# Linux CI runners are often headless. Force an offscreen backend only there.
if (
    sys.platform.startswith("linux")
    and "QT_QPA_PLATFORM" not in os.environ
    and "DISPLAY" not in os.environ
    and "WAYLAND_DISPLAY" not in os.environ
):
    os.environ["QT_QPA_PLATFORM"] = "offscreen"


@pytest.fixture(scope="session", autouse=True)
def _isolated_key_file(tmp_path_factory: pytest.TempPathFactory) -> Iterator[None]:
    """Keep the position-key table out of the source tree during tests."""
    previous = os.environ.get(ZOBRIST_FILE_ENV)
    os.environ[ZOBRIST_FILE_ENV] = str(tmp_path_factory.mktemp("keys") / "zobrist.bin")
    reset_default_keys()
    yield
    reset_default_keys()
    if previous is None:
        os.environ.pop(ZOBRIST_FILE_ENV, None)
    else:
        os.environ[ZOBRIST_FILE_ENV] = previous


@pytest.fixture(scope="session")
def qapp() -> Iterator[object]:
    """Provide a singleton QCoreApplication for signal tests."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app
