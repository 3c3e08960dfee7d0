from __future__ import annotations


class MoveRejected(ValueError):
    """Base class for caller-facing rejections.

    A rejected request never mutates the game it was addressed to.

    Attributes:
        code (str): Stable machine-readable identifier of the rejection.
    """

    code = "rejected"


class InvalidCoordinate(MoveRejected):
    code = "invalid_coordinate"


class WrongSide(MoveRejected):
    code = "wrong_side"


class EmptyOrigin(MoveRejected):
    code = "empty_origin"


class IllegalMove(MoveRejected):
    code = "illegal_move"


class PromotionPending(MoveRejected):
    code = "promotion_pending"


class NoPromotionPending(MoveRejected):
    code = "no_promotion_pending"


class InvalidPromotionTarget(MoveRejected):
    code = "invalid_promotion_target"


class GameAlreadyEnded(MoveRejected):
    code = "game_already_ended"


class InvariantViolation(RuntimeError):
    """The board is in a state the engine cannot reason about (e.g. no King)."""
