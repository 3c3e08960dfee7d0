from __future__ import annotations

import pytest

from chessrules.engine.game import STARTPOS_FEN, GameState
from chessrules.engine.move import parse_square as sq
from chessrules.engine.piece import PieceKind, Side


def test_startpos_round_trip() -> None:
    g = GameState.from_fen(STARTPOS_FEN)
    assert g.to_fen() == STARTPOS_FEN
    assert g == GameState.new()


@pytest.mark.parametrize(
    "fen",
    [
        # Mixed pieces and empty squares, some castling rights
        "r1bqkbnr/pppp1ppp/2n5/4p3/3P4/5N2/PPP1PPPP/RNBQKB1R b KQ - 0 3",
        # No castling rights, ep target present on rank 3 or 6
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b - e3 0 1",
        "rnbqkbnr/ppp1pppp/8/3pP3/8/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 2",
        # All castling rights
        "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1",
    ],
)
def test_round_trip_various_positions(fen: str) -> None:
    assert GameState.from_fen(fen).to_fen() == fen


def test_half_move_clock_is_accepted_but_not_tracked() -> None:
    g = GameState.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 37 60")
    assert g.to_fen() == "4k3/8/8/8/8/8/8/4K3 w - - 0 60"


def test_four_field_fen_defaults_counters() -> None:
    g = GameState.from_fen("4k3/8/8/8/8/8/8/4K3 b - -")
    assert g.to_fen() == "4k3/8/8/8/8/8/8/4K3 b - - 0 1"


def test_ep_target_marks_the_pawn_that_just_advanced() -> None:
    g = GameState.from_fen("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1")
    pawn = g.board[sq("e4")]
    assert pawn.matches(Side.WHITE, PieceKind.PAWN)
    assert pawn.moved_two_last_ply
    assert pawn.has_moved


def test_pieces_off_home_squares_count_as_moved() -> None:
    g = GameState.from_fen("4k3/8/8/8/8/4P3/3P4/R3K2R w KQ - 0 1")
    assert g.board[sq("e3")].has_moved
    assert not g.board[sq("d2")].has_moved
    assert not g.board[sq("a1")].has_moved
    assert not g.board[sq("e1")].has_moved


@pytest.mark.parametrize(
    "fen",
    [
        "",  # empty
        "4k3/8/8/8/8/8/4K3 w - - 0 1",  # not enough ranks
        "4k3/8/8/8/8/8/8/4K3 w -",  # missing fields
        "4k3/8/8/8/8/8/8/4K3 x - - 0 1",  # bad side to move
        "4k3/8/8/8/8/8/8/4K3 w A - 0 1",  # bad castling
        "4k3/8/8/8/8/8/8/4K3 w KK - 0 1",  # repeated castling letter
        "4k3/8/8/8/8/8/8/4K3 w - z9 0 1",  # bad ep square
        "4k3/8/8/8/8/8/8/4K3 w - e6 0 1",  # ep square without a pawn in front
        "4k3/8/8/8/4P3/8/8/4K3 w - e3 0 1",  # ep square on the mover's own side
        "4k3/8/4n3/3Pp3/8/8/8/4K3 w - e6 0 1",  # ep square occupied
        "4k3/4b3/8/3Pp3/8/8/8/4K3 w - e6 0 1",  # pawn could not have come from e7
        "4k2P/8/8/8/8/8/8/4K3 w - - 0 1",  # unpromoted pawn on the last rank
        "4k3/8/8/8/8/8/8/P3K3 w - - 0 1",  # pawn on the first rank
        "4k3/8/8/8/8/8/8/4K3 w - - -1 1",  # bad halfmove
        "4k3/8/8/8/8/8/8/4K3 w - - 0 0",  # bad fullmove
        "4k3/8/8/8/8/8/8/4K3 w - - x 1",  # non-numeric counter
        "9/8/8/8/8/8/8/4K3 w - - 0 1",  # too many squares
        "4k3/8/8/8/8/8/8/4K2 w - - 0 1",  # rank too short
        "4k3/8/8/8/8/8/8/4X3 w - - 0 1",  # unknown piece
        "8/8/8/8/8/8/8/4K3 w - - 0 1",  # no black king
        "4k3/8/8/8/8/8/8/3KK3 w - - 0 1",  # two white kings
        "4k3/8/8/8/8/8/8/4RK2 w - - 0 1",  # side not to move is in check
    ],
)
def test_invalid_fens_raise(fen: str) -> None:
    with pytest.raises(ValueError):
        GameState.from_fen(fen)
