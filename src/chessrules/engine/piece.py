from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .errors import InvalidPromotionTarget


class PieceKind(IntEnum):
    NONE = 0
    PAWN = 1
    ROOK = 2
    KNIGHT = 3
    BISHOP = 4
    QUEEN = 5
    KING = 6


class Side(IntEnum):
    NONE = 0
    WHITE = 1
    BLACK = 2

    def opponent(self) -> "Side":
        if self is Side.WHITE:
            return Side.BLACK
        if self is Side.BLACK:
            return Side.WHITE
        raise ValueError("empty side has no opponent")


PROMOTION_KINDS = (PieceKind.QUEEN, PieceKind.ROOK, PieceKind.BISHOP, PieceKind.KNIGHT)

KIND_TO_CHAR = {
    PieceKind.PAWN: "p",
    PieceKind.ROOK: "r",
    PieceKind.KNIGHT: "n",
    PieceKind.BISHOP: "b",
    PieceKind.QUEEN: "q",
    PieceKind.KING: "k",
}
CHAR_TO_KIND = {v: k for k, v in KIND_TO_CHAR.items()}


@dataclass(frozen=True)
class Piece:
    """Occupant of a single square.

    The empty square is ``Piece()``: kind and side are both ``NONE``.
    ``has_moved`` matters for Kings, Rooks and Pawns; ``moved_two_last_ply`` is
    set only on a Pawn that has just made its two-square advance.
    """

    kind: PieceKind = PieceKind.NONE
    side: Side = Side.NONE
    has_moved: bool = False
    moved_two_last_ply: bool = False

    def __post_init__(self) -> None:
        if (self.kind is PieceKind.NONE) != (self.side is Side.NONE):
            raise ValueError(f"inconsistent piece: {self.kind.name} / {self.side.name}")

    @property
    def is_empty(self) -> bool:
        return self.kind is PieceKind.NONE

    def matches(self, side: Side, kind: PieceKind) -> bool:
        return self.side is side and self.kind is kind

    def to_char(self) -> str:
        """FEN letter, uppercase for White; ``"."`` for an empty square."""
        if self.is_empty:
            return "."
        ch = KIND_TO_CHAR[self.kind]
        return ch.upper() if self.side is Side.WHITE else ch

    @classmethod
    def from_char(cls, ch: str) -> "Piece":
        kind = CHAR_TO_KIND.get(ch.lower())
        if kind is None:
            raise ValueError(f"invalid piece character: {ch!r}")
        return cls(kind, Side.WHITE if ch.isupper() else Side.BLACK)


EMPTY = Piece()


_PROMOTION_NAMES = {
    "q": PieceKind.QUEEN,
    "queen": PieceKind.QUEEN,
    "r": PieceKind.ROOK,
    "rook": PieceKind.ROOK,
    "b": PieceKind.BISHOP,
    "bishop": PieceKind.BISHOP,
    "n": PieceKind.KNIGHT,
    "knight": PieceKind.KNIGHT,
}


def parse_promotion_kind(text: str) -> PieceKind:
    """Map ``"q"``, ``"Queen"``, ``"n"`` ... to a promotion piece kind.

    Raises:
        InvalidPromotionTarget: For anything else, including kings and pawns.
    """
    kind = _PROMOTION_NAMES.get(text.strip().lower()) if isinstance(text, str) else None
    if kind is None:
        raise InvalidPromotionTarget(f"invalid promotion piece: {text!r}")
    return kind
