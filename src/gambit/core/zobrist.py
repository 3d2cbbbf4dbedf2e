"""Position keys: a 64 × 12 table of random 64-bit integers.

The table is created once per process and persisted so that later runs hash
positions with identical keys. File layout (little-endian): a u64 record
count followed by 64 records of 12 u64 values, square index ``row * 8 + col``
and piece index ``kind + side_ordinal * 6 - 1``.
"""

from __future__ import annotations

import logging
import random
import struct
import threading
from pathlib import Path
from typing import Final

from gambit.core.enums import PieceKind, Side
from gambit.core.types import Square
from gambit.runtime_paths import zobrist_key_file

_LOGGER = logging.getLogger(__name__)

SQUARE_COUNT: Final = 64
PIECE_INDEX_COUNT: Final = 12
_HEADER = struct.Struct("<Q")
_RECORD = struct.Struct(f"<{PIECE_INDEX_COUNT}Q")
_FILE_SIZE: Final = _HEADER.size + SQUARE_COUNT * _RECORD.size

KeyTable = tuple[tuple[int, ...], ...]


class KeyFileError(ValueError):
    """Raised when a key file does not match the expected layout."""


def piece_index(kind: PieceKind, side: Side) -> int:
    """Column of the key table for a piece of *kind* owned by *side*."""
    return int(kind) + side.key_ordinal * 6 - 1


class ZobristKeys:
    """Read-only table of position keys."""

    __slots__ = ("_table",)

    def __init__(self, table: KeyTable) -> None:
        if len(table) != SQUARE_COUNT or any(
            len(record) != PIECE_INDEX_COUNT for record in table
        ):
            raise KeyFileError("Key table must be 64 records of 12 keys")
        self._table = table

    @classmethod
    def generate(cls, rng: random.Random | None = None) -> ZobristKeys:
        rng = rng or random.Random()
        return cls(
            tuple(
                tuple(rng.getrandbits(64) for _ in range(PIECE_INDEX_COUNT))
                for _ in range(SQUARE_COUNT)
            )
        )

    # -- Serialisation --------------------------------------------------------

    def to_bytes(self) -> bytes:
        chunks = [_HEADER.pack(SQUARE_COUNT)]
        chunks.extend(_RECORD.pack(*record) for record in self._table)
        return b"".join(chunks)

    @classmethod
    def from_bytes(cls, data: bytes) -> ZobristKeys:
        if len(data) != _FILE_SIZE:
            raise KeyFileError(
                f"Key file has {len(data)} bytes, expected {_FILE_SIZE}"
            )
        (count,) = _HEADER.unpack_from(data, 0)
        if count != SQUARE_COUNT:
            raise KeyFileError(f"Key file declares {count} records, expected 64")
        return cls(
            tuple(
                _RECORD.unpack_from(data, _HEADER.size + idx * _RECORD.size)
                for idx in range(SQUARE_COUNT)
            )
        )

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_bytes())

    @classmethod
    def load_or_create(cls, path: Path) -> ZobristKeys:
        """Load keys from *path*, generating (and saving) a fresh table if absent.

        A corrupt file is replaced with a new table instead of aborting.
        """
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            keys = cls.generate()
            keys.save(path)
            _LOGGER.info("Generated position keys at %s", path)
            return keys

        try:
            keys = cls.from_bytes(data)
        except KeyFileError as exc:
            _LOGGER.warning("Regenerating position keys, %s is unusable: %s", path, exc)
            keys = cls.generate()
            keys.save(path)
            return keys

        _LOGGER.info("Loaded position keys from %s", path)
        return keys

    # -- Lookup ---------------------------------------------------------------

    def key(self, sq: Square, kind: PieceKind, side: Side) -> int:
        return self._table[sq][piece_index(kind, side)]

    def record(self, sq: Square) -> tuple[int, ...]:
        return self._table[sq]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ZobristKeys):
            return NotImplemented
        return self._table == other._table

    def __hash__(self) -> int:
        return hash(self._table)


_default_keys: ZobristKeys | None = None
_default_lock = threading.Lock()


def default_keys() -> ZobristKeys:
    """Process-wide key table, loaded or created on first use."""
    global _default_keys
    with _default_lock:
        if _default_keys is None:
            _default_keys = ZobristKeys.load_or_create(zobrist_key_file())
        return _default_keys


def reset_default_keys() -> None:
    """Forget the process-wide table so the next call reloads it."""
    global _default_keys
    with _default_lock:
        _default_keys = None
