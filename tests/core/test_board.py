"""Tests for Board state, execution and undo."""

import pytest

from gambit.core.board import Board
from gambit.core.enums import LogTag, PieceKind, Side
from gambit.core.move import Move
from gambit.core.placement import board_from_placement


def _flags(board: Board) -> list[tuple[int, bool, bool]]:
    return [
        (tile.square, tile.piece.has_moved, tile.piece.en_passant)
        for tile in board.iter_tiles()
        if tile.piece is not None
    ]


def _play(board: Board, side: Side, text: str) -> None:
    """Compute legality for *side* and execute *text* like a game turn."""
    board.calc_team_valid_moves(side)
    move = Move.parse(text)
    piece = board.piece_at(move.origin.row, move.origin.col)
    assert piece is not None and board.is_valid(piece, move)
    board.execute_move(piece, move)
    board.set_en_passant(piece, move)


class TestSetup:
    def test_piece_counts(self) -> None:
        board = Board()
        assert len(board.pieces(Side.WHITE)) == 16
        assert len(board.pieces(Side.BLACK)) == 16

    def test_kings(self) -> None:
        board = Board()
        assert (board.king_tile(Side.WHITE).row, board.king_tile(Side.WHITE).col) == (7, 4)
        assert (board.king_tile(Side.BLACK).row, board.king_tile(Side.BLACK).col) == (0, 4)

    def test_uid_order(self) -> None:
        board = Board()
        assert [board.piece_at(6, col).uid for col in range(8)] == list(range(8))
        assert [board.piece_at(7, col).uid for col in range(8)] == [12, 8, 10, 14, 15, 11, 9, 13]
        assert board.piece_at(1, 0).uid == 16
        assert board.piece_at(0, 4).uid == 31

    def test_all_pieces_unmoved(self) -> None:
        assert all(not moved and not ep for _, moved, ep in _flags(Board()))

    def test_missing_king_raises(self) -> None:
        with pytest.raises(ValueError, match="No WHITE king"):
            Board.empty().king_tile(Side.WHITE)

    def test_reset_restores_start(self) -> None:
        board = Board()
        start = board.zobrist_hash()
        _play(board, Side.WHITE, "e2e4")
        board.reset()
        assert board.zobrist_hash() == start
        assert board.move_log == ()
        assert board.piece_at(0, 4).uid == 31

    def test_repr_shows_grid(self) -> None:
        text = repr(Board())
        assert text.splitlines()[0] == "8 r n b q k b n r"
        assert text.endswith("a b c d e f g h")


class TestEvaluation:
    def test_start_material(self) -> None:
        board = Board()
        assert board.evaluate(Side.WHITE) == 9294
        assert board.evaluate(Side.BLACK) == 9294
        assert board.accumulate_material(Side.WHITE) == 9294

    def test_one_sided(self) -> None:
        board = board_from_placement("4k3/8/8/8/8/8/8/R3K3")
        assert board.evaluate(Side.WHITE) == 1276
        assert board.evaluate(Side.BLACK) == 0

    def test_positional_bonus(self) -> None:
        board = Board()
        assert board.accumulate_bonuses(Side.WHITE) == -95
        assert board.evaluate(Side.WHITE, positional=True) == 9294 - 95
        assert board.evaluate(Side.BLACK, positional=True) == 9294 - 95


class TestHash:
    def test_empty_board_hashes_to_zero(self) -> None:
        assert Board.empty().zobrist_hash() == 0

    def test_same_placement_same_hash(self) -> None:
        assert Board().zobrist_hash() == Board().zobrist_hash()

    def test_move_changes_hash(self) -> None:
        board = Board()
        start = board.zobrist_hash()
        _play(board, Side.WHITE, "g1f3")
        assert board.zobrist_hash() != start


class TestLegalMoveTables:
    def test_no_table_means_no_moves(self) -> None:
        board = Board()
        assert board.valid_moves_at(6, 4) == []
        assert not board.is_valid(board.piece_at(6, 4), Move.parse("e2e4"))

    def test_is_valid(self) -> None:
        board = Board()
        board.calc_team_valid_moves(Side.WHITE)
        pawn = board.piece_at(6, 4)
        assert board.is_valid(pawn, Move.parse("e2e4"))
        assert not board.is_valid(pawn, Move.parse("e2e5"))
        assert not board.is_valid(board.piece_at(6, 3), Move.parse("e2e4"))

    def test_tables_cleared_after_execute(self) -> None:
        board = Board()
        _play(board, Side.WHITE, "e2e4")
        assert not board.has_valid_moves_table(Side.WHITE)
        assert board.team_moves(Side.WHITE) == []

    def test_execute_rejects_wrong_piece(self) -> None:
        board = Board()
        with pytest.raises(ValueError, match="is not on e2"):
            board.execute_move(board.piece_at(6, 3), Move.parse("e2e4"))


class TestExecuteUndo:
    @pytest.mark.parametrize("text", ["e2e4", "g1f3", "b1c3", "d2d3"])
    def test_round_trip(self, text: str) -> None:
        board = Board()
        before_hash = board.zobrist_hash()
        before_flags = _flags(board)
        _play(board, Side.WHITE, text)
        assert board.undo_last_move()
        assert board.zobrist_hash() == before_hash
        assert _flags(board) == before_flags

    def test_round_trip_with_capture(self) -> None:
        board = Board()
        for side, text in ((Side.WHITE, "e2e4"), (Side.BLACK, "d7d5")):
            _play(board, side, text)
        before_hash = board.zobrist_hash()
        before_flags = _flags(board)
        board.calc_team_valid_moves(Side.WHITE)
        pawn = board.piece_at(4, 4)
        board.execute_move(pawn, Move.parse("e4d5"))
        assert len(board.pieces(Side.BLACK)) == 15
        assert board.undo_last_move()
        assert board.zobrist_hash() == before_hash
        assert _flags(board) == before_flags

    def test_undo_restores_en_passant_window(self) -> None:
        board = board_from_placement("4k3/8/8/8/3p4/8/4P3/4K3 w - -")
        _play(board, Side.WHITE, "e2e4")
        board.calc_team_valid_moves(Side.BLACK)
        assert {str(m) for m in board.valid_moves_at(4, 3)} == {"d4d3", "d4e3"}

        _play(board, Side.BLACK, "e8d8")
        assert not board.piece_at(4, 4).en_passant
        assert board.undo_last_move()
        assert board.piece_at(4, 4).en_passant
        board.calc_team_valid_moves(Side.BLACK)
        assert {str(m) for m in board.valid_moves_at(4, 3)} == {"d4d3", "d4e3"}

    def test_undo_double_step_clears_its_flag(self) -> None:
        board = board_from_placement("4k3/8/8/8/3p4/8/4P3/4K3 w - -")
        before_flags = _flags(board)
        _play(board, Side.WHITE, "e2e4")
        assert board.undo_last_move()
        assert _flags(board) == before_flags
        board.calc_team_valid_moves(Side.BLACK)
        assert {str(m) for m in board.valid_moves_at(4, 3)} == {"d4d3"}

    def test_undo_castle_restores_en_passant_window(self) -> None:
        board = board_from_placement("4k3/3p4/8/4P3/8/8/8/R3K3 b Q -")
        _play(board, Side.BLACK, "d7d5")
        before_flags = _flags(board)
        _play(board, Side.WHITE, "e1c1")
        assert board.move_log[-1].tag is LogTag.CASTLE
        assert not board.piece_at(3, 3).en_passant
        assert board.undo_last_move()
        assert _flags(board) == before_flags
        assert board.piece_at(3, 3).en_passant

    def test_sets_moved_flag_and_coordinates(self) -> None:
        board = Board()
        _play(board, Side.WHITE, "g1f3")
        knight = board.piece_at(5, 5)
        assert knight.has_moved
        assert (knight.row, knight.col) == (5, 5)

    def test_undo_empty_log(self) -> None:
        assert not Board().undo_last_move()

    def test_log_entry(self) -> None:
        board = Board()
        _play(board, Side.WHITE, "e2e4")
        (entry,) = board.move_log
        assert entry.piece.uid == 4
        assert entry.captured is None
        assert entry.tag is LogTag.NO_CASTLE
        assert not entry.had_moved


class TestCastling:
    PLACEMENT = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq -"

    def test_kingside(self) -> None:
        board = board_from_placement(self.PLACEMENT)
        before_hash = board.zobrist_hash()
        _play(board, Side.WHITE, "e1g1")
        assert board.piece_at(7, 6).kind is PieceKind.KING
        assert board.piece_at(7, 5).kind is PieceKind.ROOK
        assert board.piece_at(7, 7) is None
        rook_entry, king_entry = board.move_log
        assert rook_entry.tag is LogTag.NO_CASTLE
        assert rook_entry.piece.kind is PieceKind.ROOK
        assert king_entry.tag is LogTag.CASTLE

        assert board.undo_last_move()
        assert board.move_log == ()
        assert board.zobrist_hash() == before_hash
        assert not board.piece_at(7, 4).has_moved
        assert not board.piece_at(7, 7).has_moved

    def test_queenside(self) -> None:
        board = board_from_placement(self.PLACEMENT)
        _play(board, Side.BLACK, "e8c8")
        assert board.piece_at(0, 2).kind is PieceKind.KING
        assert board.piece_at(0, 3).kind is PieceKind.ROOK
        assert board.piece_at(0, 0) is None

    def test_ignore_castle_moves_king_only(self) -> None:
        board = board_from_placement(self.PLACEMENT)
        board.calc_team_valid_moves(Side.WHITE)
        king = board.piece_at(7, 4)
        board.execute_move(king, Move.parse("e1g1"), ignore_castle=True)
        assert board.piece_at(7, 7).kind is PieceKind.ROOK
        assert len(board.move_log) == 1


class TestPromotion:
    def test_pawn_becomes_new_queen(self) -> None:
        board = board_from_placement("7k/P7/8/8/8/8/8/K7")
        pawn = board.piece_at(1, 0)
        _play(board, Side.WHITE, "a7a8")
        queen = board.piece_at(0, 0)
        assert queen.kind is PieceKind.QUEEN
        assert queen.side is Side.WHITE
        assert queen != pawn
        assert board.evaluate(Side.WHITE) == 2538

        assert board.undo_last_move()
        assert board.piece_at(0, 0) is None
        assert board.piece_at(1, 0) is pawn


class TestEnPassant:
    def test_capture_and_undo(self) -> None:
        board = board_from_placement("4k3/8/8/3pP3/8/8/8/4K3 w - d6")
        before_hash = board.zobrist_hash()
        _play(board, Side.WHITE, "e5d6")
        assert board.piece_at(3, 3) is None
        assert board.piece_at(2, 3).side is Side.WHITE
        (entry,) = board.move_log
        assert entry.captured_at == (3, 3)

        assert board.undo_last_move()
        assert board.zobrist_hash() == before_hash
        assert board.piece_at(3, 3).en_passant

    def test_flag_set_only_for_double_step(self) -> None:
        board = Board()
        _play(board, Side.WHITE, "e2e4")
        assert board.piece_at(4, 4).en_passant
        _play(board, Side.BLACK, "d7d6")
        assert not board.piece_at(4, 4).en_passant
        assert not board.piece_at(2, 3).en_passant


class TestCopy:
    def test_copy_is_independent(self) -> None:
        board = Board()
        board.calc_team_valid_moves(Side.WHITE)
        clone = board.copy()
        pawn = clone.piece_at(6, 4)
        clone.execute_move(pawn, Move.parse("e2e4"))
        assert board.piece_at(6, 4) is not None
        assert not board.piece_at(6, 4).has_moved
        assert board.zobrist_hash() != clone.zobrist_hash()

    def test_copy_keeps_tables_and_log(self) -> None:
        board = Board()
        _play(board, Side.WHITE, "e2e4")
        board.calc_team_valid_moves(Side.BLACK)
        clone = board.copy()
        assert clone.team_moves(Side.BLACK) == board.team_moves(Side.BLACK)
        assert clone.undo_last_move()
        assert clone.piece_at(6, 4) is not None
        assert board.piece_at(4, 4) is not None

    def test_copy_shares_keys(self) -> None:
        board = Board()
        assert board.copy().keys is board.keys


class TestSimulation:
    def test_simulate_and_undo(self) -> None:
        board = Board()
        before_hash = board.zobrist_hash()
        knight = board.piece_at(7, 6)
        move = Move.parse("g1f3")
        board.simulate_move(knight, move)
        assert board.piece_at(5, 5) is knight
        assert not knight.has_moved
        assert board.move_log == ()
        board.undo_simulate_move(knight, move)
        assert board.zobrist_hash() == before_hash
