"""Board - tile grid, move log, legal-move tables and state mutation."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from gambit.core.enums import LogTag, PieceKind, Side
from gambit.core.move import Move
from gambit.core.move_generator import Check, MoveGenerator, Pin
from gambit.core.piece import Piece
from gambit.core.tile import BONUS_TABLES, Tile
from gambit.core.types import COLS, ROWS, Direction, Square, col_of, make_square, row_of
from gambit.core.zobrist import ZobristKeys, default_keys

_BACK_RANK: tuple[PieceKind, ...] = (
    PieceKind.ROOK,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.QUEEN,
    PieceKind.KING,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
    PieceKind.ROOK,
)
# uid offset per column: knights, bishops, rooks, queen, king.
_BACK_RANK_UID_ORDER: tuple[int, ...] = (4, 0, 2, 6, 7, 3, 1, 5)

MoveTable = list[list[Move] | None]


@dataclass(slots=True)
class LogEntry:
    """One relocated piece, enough to put everything back."""

    move: Move
    piece: Piece
    captured: Piece | None
    captured_at: tuple[int, int] | None
    had_moved: bool
    tag: LogTag = LogTag.NO_CASTLE
    # pawns flagged en passant before this ply; None until set_en_passant runs
    passable_before: tuple[Square, ...] | None = None


def _clone(piece: Piece | None, memo: dict[int, Piece]) -> Piece | None:
    if piece is None:
        return None
    clone = memo.get(piece.uid)
    if clone is None:
        clone = piece.copy()
        memo[piece.uid] = clone
    return clone


def _takes_en_passant(move: Move, attacker: Piece | None) -> bool:
    """Whether *move* removes *attacker* from beside the moving pawn."""
    captured = move.destination.piece
    return (
        attacker is not None
        and captured == attacker
        and move.to_sq != make_square(attacker.row, attacker.col)
    )


def _empty_grid() -> list[list[Tile]]:
    return [
        [Tile(row, col, None, BONUS_TABLES[make_square(row, col)]) for col in range(COLS)]
        for row in range(ROWS)
    ]


class Board:
    """8x8 game state: owns all mutation and all legality analysis.

    Legal moves are kept per side in a table indexed by square. A table is
    only valid for the next ply: every :meth:`execute_move` and
    :meth:`undo_last_move` drops all tables.
    """

    __slots__ = (
        "_tiles",
        "_keys",
        "_log",
        "_valid_moves",
        "_castle_rooks",
        "_castle_moves",
        "_next_uid",
    )

    def __init__(self, keys: ZobristKeys | None = None, *, populate: bool = True) -> None:
        self._keys = keys if keys is not None else default_keys()
        self._tiles: list[list[Tile]] = []
        self._log: list[LogEntry] = []
        self._valid_moves: dict[Side, MoveTable] = {}
        # king square -> (queenside rook square, kingside rook square)
        self._castle_rooks: dict[Square, tuple[Square | None, Square | None]] = {}
        # rook square -> the rook's half of a legal castle
        self._castle_moves: dict[Square, Move] = {}
        self._next_uid = 0
        self.reset(populate=populate)

    @classmethod
    def empty(cls, keys: ZobristKeys | None = None) -> Board:
        """Board without pieces, for custom setups."""
        return cls(keys, populate=False)

    def reset(self, *, populate: bool = True) -> None:
        """Back to the starting arrangement; piece uids restart at zero."""
        self._tiles = _empty_grid()
        self._log = []
        self._valid_moves = {}
        self._castle_rooks = {}
        self._castle_moves = {}
        self._next_uid = 0
        if populate:
            self._add_pieces(Side.WHITE)
            self._add_pieces(Side.BLACK)

    def _add_pieces(self, side: Side) -> None:
        pawn_row, back_row = (6, 7) if side is Side.WHITE else (1, 0)
        for col in range(COLS):
            self.place(PieceKind.PAWN, side, pawn_row, col)
        base_uid = self._next_uid
        for col, kind in enumerate(_BACK_RANK):
            piece = Piece(kind, side, base_uid + _BACK_RANK_UID_ORDER[col], back_row, col)
            self._tiles[back_row][col].piece = piece
        self._next_uid = base_uid + len(_BACK_RANK)

    def _allocate_uid(self) -> int:
        uid = self._next_uid
        self._next_uid += 1
        return uid

    def place(
        self,
        kind: PieceKind,
        side: Side,
        row: int,
        col: int,
        has_moved: bool = False,
    ) -> Piece:
        """Put a new piece on ``(row, col)``, replacing any occupant."""
        piece = Piece(kind, side, self._allocate_uid(), row, col, has_moved)
        self._tiles[row][col].piece = piece
        self.clear_moves()
        return piece

    # -- Element access -----------------------------------------------------

    @property
    def keys(self) -> ZobristKeys:
        return self._keys

    @property
    def move_log(self) -> tuple[LogEntry, ...]:
        return tuple(self._log)

    def tile(self, row: int, col: int) -> Tile:
        return self._tiles[row][col]

    def piece_at(self, row: int, col: int) -> Piece | None:
        return self._tiles[row][col].piece

    def __getitem__(self, sq: Square) -> Piece | None:
        return self._tiles[row_of(sq)][col_of(sq)].piece

    def iter_tiles(self) -> Iterator[Tile]:
        for row in self._tiles:
            yield from row

    def pieces(self, side: Side) -> list[Piece]:
        """Pieces of *side* in square order."""
        return [
            tile.piece
            for tile in self.iter_tiles()
            if tile.piece is not None and tile.piece.side is side
        ]

    def king_tile(self, side: Side) -> Tile:
        """Return the tile holding *side*'s king."""
        for tile in self.iter_tiles():
            piece = tile.piece
            if piece is not None and piece.kind is PieceKind.KING and piece.side is side:
                return tile
        raise ValueError(f"No {side.name} king on board")

    # -- Legality -----------------------------------------------------------

    def get_pins_and_checks(self, side: Side) -> tuple[bool, list[Pin], list[Check]]:
        return MoveGenerator(self).get_pins_and_checks(side)

    def calc_valid_moves(self, piece: Piece, row: int, col: int, pins: list[Pin]) -> list[Pin]:
        """Store the legal moves of *piece* on ``(row, col)``.

        The pin for that square is taken out of *pins*; the remaining pins
        are returned for the next piece.
        """
        sq = make_square(row, col)
        pin: Direction | None = None
        remaining: list[Pin] = []
        for entry in pins:
            if pin is None and entry[0] == sq:
                pin = entry[1]
            else:
                remaining.append(entry)

        generator = MoveGenerator(self)
        moves = generator.piece_moves(piece, row, col, pin)
        if piece.kind is PieceKind.KING:
            queenside: Square | None = None
            kingside: Square | None = None
            for option in generator.castle_options(piece, row, col):
                moves.append(option.king_move)
                self._castle_moves[option.rook_square] = option.rook_move
                if option.queenside:
                    queenside = option.rook_square
                else:
                    kingside = option.rook_square
            self._castle_rooks[sq] = (queenside, kingside)

        table = self._valid_moves.get(piece.side)
        if table is None:
            table = [None] * 64
            self._valid_moves[piece.side] = table
        table[sq] = moves
        return remaining

    def calc_team_valid_moves(self, side: Side) -> None:
        """Rebuild *side*'s legal-move table from scratch."""
        generator = MoveGenerator(self)
        _, pins, checks = generator.get_pins_and_checks(side)
        king = self.king_tile(side)
        table: MoveTable = [None] * 64
        self._valid_moves[side] = table

        if len(checks) > 1:
            table[king.square] = generator.piece_moves(king.piece, king.row, king.col)
            return

        for tile in self.iter_tiles():
            if tile.piece is not None and tile.piece.side is side:
                pins = self.calc_valid_moves(tile.piece, tile.row, tile.col, pins)

        if not checks:
            return
        attacker = self[checks[0][0]]
        allowed = generator.block_squares(king, checks[0])
        for sq, entry in enumerate(table):
            if not entry or sq == king.square:
                continue
            table[sq] = [
                move
                for move in entry
                if move.to_sq in allowed or _takes_en_passant(move, attacker)
            ]

    def has_valid_moves_table(self, side: Side) -> bool:
        return side in self._valid_moves

    def clear_moves(self) -> None:
        self._valid_moves.clear()

    def valid_moves_at(self, row: int, col: int) -> list[Move]:
        """Current legal moves of the piece on ``(row, col)`` (empty if none)."""
        piece = self._tiles[row][col].piece
        if piece is None:
            return []
        table = self._valid_moves.get(piece.side)
        if table is None:
            return []
        entry = table[make_square(row, col)]
        return list(entry) if entry else []

    def team_moves(self, side: Side) -> list[tuple[Piece, Move]]:
        """All ``(piece, move)`` pairs in *side*'s current table, square order."""
        table = self._valid_moves.get(side)
        if table is None:
            return []
        pairs: list[tuple[Piece, Move]] = []
        for sq, entry in enumerate(table):
            if not entry:
                continue
            piece = self[sq]
            if piece is None:
                continue
            pairs.extend((piece, move) for move in entry)
        return pairs

    def is_valid(self, piece: Piece, move: Move) -> bool:
        """Whether *move* is in the current legal-move entry of *piece*."""
        origin = move.origin
        if self._tiles[origin.row][origin.col].piece != piece:
            return False
        table = self._valid_moves.get(piece.side)
        if table is None:
            return False
        entry = table[make_square(origin.row, origin.col)]
        return entry is not None and move in entry

    def in_checkmate(self, side: Side) -> bool:
        """True when no piece of *side* has a legal move.

        Covers both checkmate and stalemate; see :meth:`is_checkmate` and
        :meth:`is_stalemate` for the split.
        """
        table = self._valid_moves.get(side)
        if table is None:
            self.calc_team_valid_moves(side)
            table = self._valid_moves[side]
        count = 0
        immobile = 0
        for tile in self.iter_tiles():
            if tile.has_side(side):
                count += 1
                if not table[tile.square]:
                    immobile += 1
        return count == immobile

    def is_in_check(self, side: Side) -> bool:
        return self.get_pins_and_checks(side)[0]

    def is_checkmate(self, side: Side) -> bool:
        return self.in_checkmate(side) and self.is_in_check(side)

    def is_stalemate(self, side: Side) -> bool:
        return self.in_checkmate(side) and not self.is_in_check(side)

    def is_terminal(self) -> bool:
        return self.in_checkmate(Side.BLACK) or self.in_checkmate(Side.WHITE)

    # -- Mutation -----------------------------------------------------------

    def simulate_move(self, piece: Piece, move: Move) -> None:
        """Relocate *piece* without logging or touching its flags."""
        self._tiles[move.origin.row][move.origin.col].piece = None
        self._tiles[move.destination.row][move.destination.col].piece = piece

    def undo_simulate_move(self, piece: Piece, move: Move) -> None:
        self._tiles[move.destination.row][move.destination.col].piece = None
        self._tiles[move.origin.row][move.origin.col].piece = piece

    def execute_move(
        self,
        piece: Piece,
        move: Move,
        simulation: bool = False,
        ignore_castle: bool = False,
    ) -> None:
        """Apply *move* for *piece* and log it for :meth:`undo_last_move`.

        A king's two-column step also moves the partner rook unless
        *simulation* or *ignore_castle* is set; the rook entry is logged
        first and the king entry on top of it is tagged ``CASTLE``.
        """
        origin = move.origin
        mover = self._tiles[origin.row][origin.col].piece
        if mover is None or mover != piece:
            raise ValueError(f"{piece.kind.label} {piece.uid} is not on {origin.name}")

        entry = self._relocate(mover, move)
        if (
            mover.kind is PieceKind.KING
            and abs(move.destination.col - origin.col) == 2
            and not simulation
            and not ignore_castle
        ):
            rook_move = self._castle_partner(move)
            rook = self._tiles[rook_move.origin.row][rook_move.origin.col].piece
            if rook is None:
                raise ValueError(f"No rook on {rook_move.origin.name} to castle with")
            self._log.append(self._relocate(rook, rook_move))
            entry.tag = LogTag.CASTLE
        self._log.append(entry)
        self.clear_moves()

    def _relocate(self, piece: Piece, move: Move) -> LogEntry:
        start, end = move.origin, move.destination
        target = self._tiles[end.row][end.col]
        captured = target.piece
        captured_at = (end.row, end.col) if captured is not None else None
        had_moved = piece.has_moved

        self._tiles[start.row][start.col].piece = None
        target.piece = piece
        placed = piece

        if piece.kind is PieceKind.PAWN:
            col_diff = end.col - start.col
            if col_diff and captured is None:
                beside = self._tiles[start.row][start.col + col_diff]
                passed = beside.piece
                if passed is not None and passed.kind is PieceKind.PAWN and passed.en_passant:
                    captured = passed
                    captured_at = (start.row, start.col + col_diff)
                    beside.piece = None
            if end.row in (0, ROWS - 1):
                placed = Piece(PieceKind.QUEEN, piece.side, self._allocate_uid())
                target.piece = placed

        placed.make_moved()
        placed.row = end.row
        placed.col = end.col
        return LogEntry(move, piece, captured, captured_at, had_moved)

    def _castle_partner(self, king_move: Move) -> Move:
        start, end = king_move.origin, king_move.destination
        queenside = end.col < start.col
        rooks = self._castle_rooks.get(make_square(start.row, start.col))
        if rooks is not None:
            rook_sq = rooks[0] if queenside else rooks[1]
            if rook_sq is not None and rook_sq in self._castle_moves:
                return self._castle_moves[rook_sq]
        if queenside:
            return Move.between(start.row, 0, start.row, 3)
        return Move.between(start.row, COLS - 1, start.row, 5)

    def undo_last_move(self) -> bool:
        """Revert the newest log entry (both halves of a castle)."""
        if not self._log:
            return False
        entry = self._log.pop()
        self._restore(entry)
        if entry.tag is LogTag.CASTLE and self._log:
            self._restore(self._log.pop())
        if entry.passable_before is not None:
            self.clear_en_passant()
            for sq in entry.passable_before:
                pawn = self[sq]
                if pawn is not None and pawn.kind is PieceKind.PAWN:
                    pawn.en_passant = True
        self.clear_moves()
        return True

    def _restore(self, entry: LogEntry) -> None:
        start, end = entry.move.origin, entry.move.destination
        piece = entry.piece
        self._tiles[end.row][end.col].piece = None
        piece.has_moved = entry.had_moved
        piece.row = start.row
        piece.col = start.col
        self._tiles[start.row][start.col].piece = piece
        if entry.captured_at is not None:
            row, col = entry.captured_at
            self._tiles[row][col].piece = entry.captured

    def set_en_passant(self, piece: Piece, move: Move) -> None:
        """Reset en passant eligibility after *move* was played by *piece*.

        Must run once per ply, before the other side's legality pass. The
        previous eligibility is kept on the newest log entry so that
        :meth:`undo_last_move` can bring it back.
        """
        if self._log:
            newest = self._log[-1]
            passable = [
                tile.square
                for tile in self.iter_tiles()
                if tile.piece is not None
                and tile.piece.kind is PieceKind.PAWN
                and tile.piece.en_passant
            ]
            # a pawn just taken en passant is off the board but was eligible
            taken = newest.captured
            if taken is not None and taken.en_passant and newest.captured_at is not None:
                passable.append(make_square(*newest.captured_at))
            newest.passable_before = tuple(passable)
        self.clear_en_passant()
        if piece.kind is PieceKind.PAWN and abs(move.origin.row - move.destination.row) == 2:
            moved = self._tiles[move.destination.row][move.destination.col].piece
            if moved is not None:
                moved.en_passant = True

    def clear_en_passant(self) -> None:
        for tile in self.iter_tiles():
            if tile.piece is not None and tile.piece.kind is PieceKind.PAWN:
                tile.piece.en_passant = False

    # -- Evaluation / hashing ----------------------------------------------

    def accumulate_material(self, side: Side) -> int:
        return sum(piece.value_mg for piece in self.pieces(side))

    def accumulate_bonuses(self, side: Side) -> int:
        total = 0
        for tile in self.iter_tiles():
            piece = tile.piece
            if piece is not None and piece.side is side:
                total += tile.bonus(piece.kind, side)
        return total

    def evaluate(self, perspective: Side, positional: bool = False) -> int:
        """Material of *perspective*'s own pieces (not a differential).

        With *positional* the own-side tile bonuses are added as well.
        """
        score = self.accumulate_material(perspective)
        if positional:
            score += self.accumulate_bonuses(perspective)
        return score

    def zobrist_hash(self) -> int:
        key = 0
        for tile in self.iter_tiles():
            piece = tile.piece
            if piece is not None:
                key ^= self._keys.key(tile.square, piece.kind, piece.side)
        return key

    def position_key(self) -> tuple[int, tuple[Square, ...], tuple[Square, ...]]:
        """Hash plus the flag state that changes which moves are legal."""
        unmoved: list[Square] = []
        passable: list[Square] = []
        for tile in self.iter_tiles():
            piece = tile.piece
            if piece is None:
                continue
            if piece.kind in (PieceKind.KING, PieceKind.ROOK) and not piece.has_moved:
                unmoved.append(tile.square)
            elif piece.kind is PieceKind.PAWN and piece.en_passant:
                passable.append(tile.square)
        return self.zobrist_hash(), tuple(unmoved), tuple(passable)

    # -- Copying ------------------------------------------------------------

    def copy(self) -> Board:
        """Deep copy: pieces, log, move tables and castle bookkeeping."""
        board = Board.__new__(Board)
        memo: dict[int, Piece] = {}
        board._keys = self._keys
        board._tiles = [
            [Tile(t.row, t.col, _clone(t.piece, memo), t.bonuses) for t in row]
            for row in self._tiles
        ]
        board._log = [
            LogEntry(
                e.move,
                _clone(e.piece, memo),
                _clone(e.captured, memo),
                e.captured_at,
                e.had_moved,
                e.tag,
                e.passable_before,
            )
            for e in self._log
        ]
        board._valid_moves = {
            side: [list(entry) if entry is not None else None for entry in table]
            for side, table in self._valid_moves.items()
        }
        board._castle_rooks = dict(self._castle_rooks)
        board._castle_moves = dict(self._castle_moves)
        board._next_uid = self._next_uid
        return board

    def scratch_copy(self) -> Board:
        """Grid-only copy sharing piece objects, for :meth:`simulate_move` probes."""
        board = Board.__new__(Board)
        board._keys = self._keys
        board._tiles = [
            [Tile(t.row, t.col, t.piece, t.bonuses) for t in row] for row in self._tiles
        ]
        board._log = []
        board._valid_moves = {}
        board._castle_rooks = {}
        board._castle_moves = {}
        board._next_uid = self._next_uid
        return board

    # -- Dunder helpers -----------------------------------------------------

    def __repr__(self) -> str:
        rows: list[str] = []
        for row in range(ROWS):
            cells = [str(t.piece) if t.piece else "." for t in self._tiles[row]]
            rows.append(f"{ROWS - row} {' '.join(cells)}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
