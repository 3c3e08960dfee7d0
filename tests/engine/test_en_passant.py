from __future__ import annotations

import pytest

from chessrules.engine.errors import IllegalMove
from chessrules.engine.game import GameState
from chessrules.engine.move import MoveKind, parse_square as sq
from chessrules.engine.piece import EMPTY, PieceKind, Side


def play(g: GameState, *moves: str) -> None:
    for text in moves:
        g.attempt_move(sq(text[:2]), sq(text[2:]))


def kinds_from(g: GameState, origin: str) -> dict[str, MoveKind]:
    return {m.to_coordinates()[2:]: m.kind for m in g.legal_moves.get(sq(origin), [])}


def test_white_en_passant_capture_removes_passed_pawn() -> None:
    g = GameState.new()
    play(g, "e2e4", "a7a6", "e4e5", "d7d5")
    assert kinds_from(g, "e5")["d6"] is MoveKind.EN_PASSANT

    record = g.attempt_move(sq("e5"), sq("d6"))
    assert record.captured is not None
    assert record.captured.matches(Side.BLACK, PieceKind.PAWN)
    assert g.board[sq("d5")] == EMPTY
    assert g.board[sq("e5")] == EMPTY
    assert g.board[sq("d6")].matches(Side.WHITE, PieceKind.PAWN)


def test_black_en_passant_from_fen_target() -> None:
    g = GameState.from_fen("4k3/8/8/8/3pP3/8/8/4K3 b - e3 0 1")
    assert kinds_from(g, "d4")["e3"] is MoveKind.EN_PASSANT
    play(g, "d4e3")
    assert g.board[sq("e4")] == EMPTY
    assert g.board[sq("e3")].matches(Side.BLACK, PieceKind.PAWN)


def test_right_lapses_after_one_ply() -> None:
    g = GameState.new()
    play(g, "e2e4", "a7a6", "e4e5", "d7d5", "a2a3", "a6a5")
    assert "d6" not in kinds_from(g, "e5")
    with pytest.raises(IllegalMove):
        g.attempt_move(sq("e5"), sq("d6"))


def test_two_square_flag_lives_for_exactly_one_reply() -> None:
    g = GameState.new()
    play(g, "e2e4")
    assert g.board[sq("e4")].moved_two_last_ply
    assert g.to_fen().split()[3] == "e3"
    play(g, "g8f6")
    assert not g.board[sq("e4")].moved_two_last_ply
    assert g.to_fen().split()[3] == "-"


def test_single_steps_never_enable_en_passant() -> None:
    g = GameState.new()
    play(g, "e2e4", "d7d6", "e4e5", "d6d5")
    assert "d6" not in kinds_from(g, "e5")


def test_en_passant_exposing_king_along_rank_is_illegal() -> None:
    # Removing both pawns from rank 5 would open the rook's line to the king
    g = GameState.from_fen("8/8/8/K2pP2r/8/8/8/7k w - d6 0 1")
    assert "d6" not in kinds_from(g, "e5")
    assert kinds_from(g, "e5") == {"e6": MoveKind.PLAIN}
