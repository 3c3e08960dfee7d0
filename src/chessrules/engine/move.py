from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .errors import InvalidCoordinate


class Wing(Enum):
    KINGSIDE = "kingside"
    QUEENSIDE = "queenside"


class MoveKind(Enum):
    """Closed set of move kinds.

    Each kind declares its board side effects here so that generation and
    application read them from one place:

    - ``captures``: an enemy piece is removed.
    - ``off_square_capture``: the captured piece is not on the destination.
    - ``wing``: the castling wing whose Rook travels with the King.
    """

    PLAIN = ("plain", False, False, None)
    TWO_SQUARE_ADVANCE = ("two_square_advance", False, False, None)
    EN_PASSANT = ("en_passant", True, True, None)
    CAPTURE = ("capture", True, False, None)
    KINGSIDE_CASTLE = ("kingside_castle", False, False, Wing.KINGSIDE)
    QUEENSIDE_CASTLE = ("queenside_castle", False, False, Wing.QUEENSIDE)

    def __init__(
        self, label: str, captures: bool, off_square_capture: bool, wing: Optional[Wing]
    ) -> None:
        self.label = label
        self.captures = captures
        self.off_square_capture = off_square_capture
        self.wing = wing

    @property
    def is_castle(self) -> bool:
        return self.wing is not None


# Rook files per wing: (home file, file after castling)
CASTLE_ROOK_FILES = {Wing.KINGSIDE: (7, 5), Wing.QUEENSIDE: (0, 3)}
# King files per wing: (transit file, destination file)
CASTLE_KING_FILES = {Wing.KINGSIDE: (5, 6), Wing.QUEENSIDE: (3, 2)}
KING_HOME_FILE = 4


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    Attributes:
        from_sq (int): Origin square index (0-based, a1=0 .. h8=63).
        to_sq (int): Destination square index.
        kind (MoveKind): Move kind carrying the move's side effects.
    """

    from_sq: int
    to_sq: int
    kind: MoveKind = MoveKind.PLAIN

    @property
    def captured_sq(self) -> Optional[int]:
        """Square whose occupant this move removes, if it captures.

        For en passant this is the square beside the origin on the
        destination's file, i.e. directly behind the destination.
        """
        if not self.kind.captures:
            return None
        if self.kind.off_square_capture:
            return (self.from_sq // 8) * 8 + self.to_sq % 8
        return self.to_sq

    @property
    def rook_squares(self) -> Optional[Tuple[int, int]]:
        """(from, to) of the Rook relocated by a castle, else ``None``."""
        if self.kind.wing is None:
            return None
        home_file, castled_file = CASTLE_ROOK_FILES[self.kind.wing]
        base = (self.from_sq // 8) * 8
        return base + home_file, base + castled_file

    def to_coordinates(self) -> str:
        """Serialize as a coordinate pair like ``"e2e4"``."""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq)


def parse_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Args:
        s (str): Square name such as ``"e4"``; the file letter is
            case-insensitive.

    Returns:
        int: Zero-based square index (``rank * 8 + file``).

    Raises:
        InvalidCoordinate: If ``s`` is not a valid square.
    """
    if not isinstance(s, str) or len(s) != 2:
        raise InvalidCoordinate(f"invalid square: {s!r}")
    f = s[0].lower()
    r = s[1]
    if f < "a" or f > "h" or r < "1" or r > "8":
        raise InvalidCoordinate(f"invalid square: {s!r}")
    return (ord(r) - ord("1")) * 8 + (ord(f) - ord("a"))


def square_to_str(idx: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Raises:
        InvalidCoordinate: If ``idx`` is outside 0..63.
    """
    if not is_square(idx):
        raise InvalidCoordinate(f"invalid square index: {idx!r}")
    return chr(ord("a") + idx % 8) + str(idx // 8 + 1)


def is_square(idx: object) -> bool:
    return isinstance(idx, int) and not isinstance(idx, bool) and 0 <= idx < 64


def parse_coordinate_move(text: str) -> Tuple[int, int]:
    """Parse ``"e2e4"`` (or ``"e2-e4"`` / ``"e2 e4"``) into square indices.

    Raises:
        InvalidCoordinate: If either square is malformed.
    """
    if not isinstance(text, str):
        raise InvalidCoordinate(f"invalid move: {text!r}")
    compact = text.strip().replace("-", "").replace(" ", "")
    if len(compact) != 4:
        raise InvalidCoordinate(f"invalid move: {text!r}")
    return parse_square(compact[0:2]), parse_square(compact[2:4])
