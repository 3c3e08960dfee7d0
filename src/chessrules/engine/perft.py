from __future__ import annotations

from .board import PROMOTION_RANK
from .game import GameState
from .piece import PROMOTION_KINDS, PieceKind


def perft(state: GameState, depth: int) -> int:
    """Compute perft node count for ``state`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    A move that reaches the last rank with a pawn counts once per promotion
    piece, matching the usual reference numbers. Children are played on
    copies, so ``state`` is left untouched.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    if state.game_ended:
        return 0

    nodes = 0
    for origin, moves in state.legal_moves.items():
        promotes = state.board[origin].kind is PieceKind.PAWN
        for m in moves:
            is_promotion = promotes and m.to_sq // 8 == PROMOTION_RANK[state.side_to_move]
            if depth == 1:
                nodes += len(PROMOTION_KINDS) if is_promotion else 1
                continue
            child = state.copy()
            child.attempt_move(m.from_sq, m.to_sq)
            if not is_promotion:
                nodes += perft(child, depth - 1)
                continue
            for kind in PROMOTION_KINDS:
                grandchild = child.copy()
                grandchild.resolve_promotion(kind)
                nodes += perft(grandchild, depth - 1)
    return nodes
