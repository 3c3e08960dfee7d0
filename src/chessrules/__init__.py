"""Chess rules engine: board state, legal moves and game-state transitions.

Quick start::

    import chessrules

    state = chessrules.new_game()
    chessrules.attempt_move(state, chessrules.parse_square("e2"), chessrules.parse_square("e4"))
    assert chessrules.active_side(state) is chessrules.Side.BLACK
"""

from __future__ import annotations

from typing import Tuple

from .engine.board import Board, CastlingRights, UndoToken
from .engine.errors import (
    EmptyOrigin,
    GameAlreadyEnded,
    IllegalMove,
    InvalidCoordinate,
    InvalidPromotionTarget,
    InvariantViolation,
    MoveRejected,
    NoPromotionPending,
    PromotionPending,
    WrongSide,
)
from .engine.game import STARTPOS_FEN, GamePhase, GameState, MoveRecord, Outcome
from .engine.move import Move, MoveKind, Wing, parse_coordinate_move, parse_square, square_to_str
from .engine.piece import Piece, PieceKind, Side, parse_promotion_kind

__all__ = [
    "Board",
    "CastlingRights",
    "EmptyOrigin",
    "GameAlreadyEnded",
    "GamePhase",
    "GameState",
    "IllegalMove",
    "InvalidCoordinate",
    "InvalidPromotionTarget",
    "InvariantViolation",
    "Move",
    "MoveKind",
    "MoveRecord",
    "MoveRejected",
    "NoPromotionPending",
    "Outcome",
    "Piece",
    "PieceKind",
    "PromotionPending",
    "STARTPOS_FEN",
    "Side",
    "UndoToken",
    "Wing",
    "WrongSide",
    "active_side",
    "attempt_move",
    "is_ended",
    "new_game",
    "parse_coordinate_move",
    "parse_promotion_kind",
    "parse_square",
    "reset",
    "resolve_promotion",
    "snapshot",
    "square_to_str",
]


def new_game() -> GameState:
    """Standard starting position, White to move, all castling rights."""
    return GameState.new()


def reset(state: GameState) -> None:
    state.reset()


def attempt_move(state: GameState, from_sq: int, to_sq: int) -> MoveRecord:
    """Commit a move or raise a :class:`MoveRejected` leaving ``state`` as it was."""
    return state.attempt_move(from_sq, to_sq)


def resolve_promotion(state: GameState, kind: PieceKind) -> None:
    state.resolve_promotion(kind)


def is_ended(state: GameState) -> bool:
    return state.is_ended()


def active_side(state: GameState) -> Side:
    return state.active_side()


def snapshot(state: GameState) -> Tuple[Tuple[PieceKind, Side], ...]:
    """Flat 64-entry ``(kind, side)`` view, a1 first, for rendering."""
    return state.snapshot()
