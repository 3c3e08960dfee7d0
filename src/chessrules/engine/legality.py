"""King-safety filtering of pseudo-legal moves.

Every candidate is played on the real board, the opponent's replies are
generated, and the board is restored from the move's :class:`UndoToken`
whatever the verdict.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .board import Board, CastlingRights, make_square
from .move import CASTLE_KING_FILES, Move, MoveKind
from .movegen import generate, pseudo_moves
from .piece import Side


def is_square_attacked(board: Board, sq: int, by_side: Side) -> bool:
    """Return True if some pseudo-move of ``by_side`` lands on ``sq``.

    Pawns only "attack" occupied squares here, since a diagonal pawn step
    onto an empty square is not a pseudo-move; callers test occupied squares
    (a King) or place the King first (see :func:`_castle_path_safe`).
    """
    for origin in list(board.occupied_by(by_side)):
        for m in generate(board, origin):
            if m.to_sq == sq:
                return True
    return False


def in_check(board: Board, side: Side) -> bool:
    return is_square_attacked(board, board.king_square(side), side.opponent())


def leaves_king_exposed(board: Board, move: Move) -> bool:
    """Play ``move`` hypothetically and report whether its King is capturable.

    The board is bit-for-bit identical on return.
    """
    side = board[move.from_sq].side
    token = board.apply(move)
    try:
        return in_check(board, side)
    finally:
        board.revert(token)


def _castle_path_safe(board: Board, move: Move) -> bool:
    # King may not castle out of check or across an attacked square; the
    # destination itself is covered by leaves_king_exposed.
    side = board[move.from_sq].side
    if in_check(board, side):
        return False
    wing = move.kind.wing
    transit = make_square(CASTLE_KING_FILES[wing][0], move.from_sq // 8)
    return not leaves_king_exposed(board, Move(move.from_sq, transit, MoveKind.PLAIN))


def is_legal(board: Board, move: Move) -> bool:
    if move.kind.is_castle and not _castle_path_safe(board, move):
        return False
    return not leaves_king_exposed(board, move)


def filter_legal(
    board: Board, side: Side, castling: Optional[CastlingRights] = None
) -> Dict[int, List[Move]]:
    """Legal moves of ``side`` keyed by origin.

    Origins left without a legal destination are omitted, so an empty result
    means ``side`` has no legal move at all.
    """
    out: Dict[int, List[Move]] = {}
    for origin, moves in pseudo_moves(board, side, castling).items():
        legal = [m for m in moves if is_legal(board, m)]
        if legal:
            out[origin] = legal
    return out
