"""Pseudo-legal move generation.

Moves produced here respect piece geometry, blockers and castling rights but
ignore whether they leave the mover's own King capturable; see
:mod:`chessrules.engine.legality` for that.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .board import (
    PAWN_DIRECTION,
    Board,
    CastlingRights,
    castle_home_squares,
    make_square,
)
from .move import CASTLE_KING_FILES, Move, MoveKind, Wing
from .piece import PieceKind, Side


KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, 2),
    (1, 2),
    (-2, 1),
    (2, 1),
    (-2, -1),
    (2, -1),
    (-1, -2),
    (1, -2),
)
KING_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)
BISHOP_DIRS: Tuple[Tuple[int, int], ...] = ((-1, -1), (1, -1), (-1, 1), (1, 1))
ROOK_DIRS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS: Tuple[Tuple[int, int], ...] = BISHOP_DIRS + ROOK_DIRS

_CASTLE_KINDS = {Wing.KINGSIDE: MoveKind.KINGSIDE_CASTLE, Wing.QUEENSIDE: MoveKind.QUEENSIDE_CASTLE}


def generate(board: Board, origin: int, castling: Optional[CastlingRights] = None) -> List[Move]:
    """Return the pseudo-legal moves of the piece on ``origin``.

    Args:
        board (Board): Position to read; never mutated.
        origin (int): Square of the moving piece. An empty square yields no
            moves.
        castling (Optional[CastlingRights]): Rights gating castling moves;
            ``None`` generates no castles.

    Returns:
        List[Move]: Destinations in a fixed per-kind order, each tagged with
            its move kind.
    """
    piece = board[origin]
    if piece.is_empty:
        return []
    kind = piece.kind
    if kind is PieceKind.PAWN:
        return _pawn_moves(board, origin, piece.side)
    if kind is PieceKind.KNIGHT:
        return _step_moves(board, origin, piece.side, KNIGHT_OFFSETS)
    if kind is PieceKind.BISHOP:
        return _slide_moves(board, origin, piece.side, BISHOP_DIRS)
    if kind is PieceKind.ROOK:
        return _slide_moves(board, origin, piece.side, ROOK_DIRS)
    if kind is PieceKind.QUEEN:
        return _slide_moves(board, origin, piece.side, QUEEN_DIRS)
    moves = _step_moves(board, origin, piece.side, KING_OFFSETS)
    if castling is not None:
        moves.extend(_castle_moves(board, origin, piece.side, castling))
    return moves


def pseudo_moves(
    board: Board, side: Side, castling: Optional[CastlingRights] = None
) -> Dict[int, List[Move]]:
    """Pseudo-legal moves of every piece of ``side``, keyed by origin."""
    out: Dict[int, List[Move]] = {}
    for origin in board.occupied_by(side):
        moves = generate(board, origin, castling)
        if moves:
            out[origin] = moves
    return out


def _target(origin: int, df: int, dr: int) -> Optional[int]:
    tf = origin % 8 + df
    tr = origin // 8 + dr
    if 0 <= tf < 8 and 0 <= tr < 8:
        return make_square(tf, tr)
    return None


def _pawn_moves(board: Board, origin: int, side: Side) -> List[Move]:
    moves: List[Move] = []
    dr = PAWN_DIRECTION[side]
    pawn = board[origin]

    one = _target(origin, 0, dr)
    if one is not None and board[one].is_empty:
        moves.append(Move(origin, one))
        two = _target(origin, 0, 2 * dr)
        if not pawn.has_moved and two is not None and board[two].is_empty:
            moves.append(Move(origin, two, MoveKind.TWO_SQUARE_ADVANCE))

    for df in (-1, 1):
        diag = _target(origin, df, dr)
        if diag is None:
            continue
        occupant = board[diag]
        if not occupant.is_empty:
            if occupant.side is not side:
                moves.append(Move(origin, diag, MoveKind.CAPTURE))
            continue
        # The pawn to take en passant sits beside us, directly behind ``diag``.
        beside = board[_target(origin, df, 0)]  # type: ignore[index]
        if (
            beside.kind is PieceKind.PAWN
            and beside.side is side.opponent()
            and beside.moved_two_last_ply
        ):
            moves.append(Move(origin, diag, MoveKind.EN_PASSANT))
    return moves


def _step_moves(
    board: Board, origin: int, side: Side, offsets: Tuple[Tuple[int, int], ...]
) -> List[Move]:
    moves: List[Move] = []
    for df, dr in offsets:
        to_sq = _target(origin, df, dr)
        if to_sq is None:
            continue
        occupant = board[to_sq]
        if occupant.is_empty:
            moves.append(Move(origin, to_sq))
        elif occupant.side is not side:
            moves.append(Move(origin, to_sq, MoveKind.CAPTURE))
    return moves


def _slide_moves(
    board: Board, origin: int, side: Side, dirs: Tuple[Tuple[int, int], ...]
) -> List[Move]:
    moves: List[Move] = []
    for df, dr in dirs:
        tf, tr = origin % 8, origin // 8
        while True:
            tf += df
            tr += dr
            if not (0 <= tf < 8 and 0 <= tr < 8):
                break
            to_sq = make_square(tf, tr)
            occupant = board[to_sq]
            if occupant.is_empty:
                moves.append(Move(origin, to_sq))
                continue
            if occupant.side is not side:
                moves.append(Move(origin, to_sq, MoveKind.CAPTURE))
            break
    return moves


def _castle_moves(board: Board, origin: int, side: Side, castling: CastlingRights) -> List[Move]:
    moves: List[Move] = []
    for wing in (Wing.KINGSIDE, Wing.QUEENSIDE):
        if not castling.allows(side, wing):
            continue
        king_home, rook_home = castle_home_squares(side, wing)
        if origin != king_home or not board[rook_home].matches(side, PieceKind.ROOK):
            continue
        lo, hi = sorted((king_home, rook_home))
        if any(not board[sq].is_empty for sq in range(lo + 1, hi)):
            continue
        dest = make_square(CASTLE_KING_FILES[wing][1], king_home // 8)
        moves.append(Move(origin, dest, _CASTLE_KINDS[wing]))
    return moves
