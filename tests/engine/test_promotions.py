from __future__ import annotations

import pytest

from chessrules.engine.errors import (
    GameAlreadyEnded,
    InvalidPromotionTarget,
    NoPromotionPending,
    PromotionPending,
)
from chessrules.engine.game import GamePhase, GameState, Outcome
from chessrules.engine.move import parse_square as sq
from chessrules.engine.piece import PieceKind, Side


PROMO_FEN = "k7/4P3/8/8/8/8/8/4K3 w - - 0 1"


def test_reaching_last_rank_waits_for_promotion_choice() -> None:
    g = GameState.from_fen(PROMO_FEN)
    record = g.attempt_move(sq("e7"), sq("e8"))
    assert record.promotion_pending
    assert g.phase is GamePhase.AWAITING_PROMOTION
    assert g.promotion_pending == sq("e8")
    # Turn has not passed yet
    assert g.side_to_move is Side.WHITE
    assert g.board[sq("e8")].matches(Side.WHITE, PieceKind.PAWN)


def test_pending_promotion_offers_no_moves() -> None:
    g = GameState.from_fen(PROMO_FEN)
    g.attempt_move(sq("e7"), sq("e8"))
    assert g.legal_moves == {}
    assert g.legal_move_list() == []
    assert g.legal_destinations(sq("e1")) == []
    assert not g.is_ended()
    g.resolve_promotion(PieceKind.QUEEN)
    assert g.legal_move_list()


def test_moves_are_refused_while_promotion_pending() -> None:
    g = GameState.from_fen(PROMO_FEN)
    g.attempt_move(sq("e7"), sq("e8"))
    before = g.copy()
    with pytest.raises(PromotionPending):
        g.attempt_move(sq("e1"), sq("e2"))
    with pytest.raises(PromotionPending):
        g.attempt_move(sq("a8"), sq("a7"))
    assert g == before


def test_resolving_to_queen_finishes_the_move() -> None:
    g = GameState.from_fen(PROMO_FEN)
    g.attempt_move(sq("e7"), sq("e8"))
    g.resolve_promotion(PieceKind.QUEEN)
    assert g.board[sq("e8")].matches(Side.WHITE, PieceKind.QUEEN)
    assert g.side_to_move is Side.BLACK
    assert g.phase is GamePhase.IN_PLAY
    assert g.promotion_pending is None
    assert g.in_check()
    assert g.to_fen() == "k3Q3/8/8/8/8/8/8/4K3 b - - 0 1"


@pytest.mark.parametrize("kind", [PieceKind.KING, PieceKind.PAWN, PieceKind.NONE])
def test_invalid_promotion_targets_are_rejected(kind: PieceKind) -> None:
    g = GameState.from_fen(PROMO_FEN)
    g.attempt_move(sq("e7"), sq("e8"))
    before = g.copy()
    with pytest.raises(InvalidPromotionTarget):
        g.resolve_promotion(kind)
    assert g == before
    assert g.phase is GamePhase.AWAITING_PROMOTION


def test_resolve_without_pending_promotion() -> None:
    g = GameState.new()
    with pytest.raises(NoPromotionPending):
        g.resolve_promotion(PieceKind.QUEEN)


def test_black_under_promotion_with_capture() -> None:
    g = GameState.from_fen("4k3/8/8/8/8/8/3p4/K1N5 b - - 0 1")
    g.attempt_move(sq("d2"), sq("c1"))
    g.resolve_promotion(PieceKind.KNIGHT)
    assert g.board[sq("c1")].matches(Side.BLACK, PieceKind.KNIGHT)
    assert g.side_to_move is Side.WHITE
    assert g.fullmove_number == 2


def test_promotion_that_mates_ends_the_game() -> None:
    g = GameState.from_fen("k7/4P3/1K6/8/8/8/8/8 w - - 0 1")
    g.attempt_move(sq("e7"), sq("e8"))
    assert not g.is_ended()
    g.resolve_promotion(PieceKind.ROOK)
    assert g.is_ended()
    assert g.outcome is Outcome.CHECKMATE
    assert g.legal_moves == {}
    with pytest.raises(GameAlreadyEnded):
        g.resolve_promotion(PieceKind.QUEEN)
