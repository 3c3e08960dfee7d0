from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Tuple

from .errors import InvariantViolation
from .move import CASTLE_ROOK_FILES, KING_HOME_FILE, Move, MoveKind, Wing
from .piece import EMPTY, Piece, PieceKind, Side


STARTPOS_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

HOME_RANK = {Side.WHITE: 0, Side.BLACK: 7}
PAWN_HOME_RANK = {Side.WHITE: 1, Side.BLACK: 6}
PAWN_DIRECTION = {Side.WHITE: 1, Side.BLACK: -1}
PROMOTION_RANK = {Side.WHITE: 7, Side.BLACK: 0}


def make_square(file: int, rank: int) -> int:
    return rank * 8 + file


@dataclass(frozen=True)
class CastlingRights:
    """Four independent castling permissions.

    Rights are only ever removed (``without``); nothing grants them back.
    """

    white_kingside: bool = True
    white_queenside: bool = True
    black_kingside: bool = True
    black_queenside: bool = True

    @classmethod
    def none(cls) -> "CastlingRights":
        return cls(False, False, False, False)

    def allows(self, side: Side, wing: Wing) -> bool:
        return getattr(self, _rights_field(side, wing))

    def without(self, side: Side, wing: Wing) -> "CastlingRights":
        return replace(self, **{_rights_field(side, wing): False})

    def to_fen(self) -> str:
        s = ""
        s += "K" if self.white_kingside else ""
        s += "Q" if self.white_queenside else ""
        s += "k" if self.black_kingside else ""
        s += "q" if self.black_queenside else ""
        return s or "-"

    @classmethod
    def from_fen(cls, text: str) -> "CastlingRights":
        if text == "-":
            return cls.none()
        if not text or any(ch not in "KQkq" for ch in text) or len(set(text)) != len(text):
            raise ValueError("invalid castling rights")
        return cls("K" in text, "Q" in text, "k" in text, "q" in text)


def _rights_field(side: Side, wing: Wing) -> str:
    if side is Side.NONE:
        raise ValueError("castling rights need a side")
    return f"{side.name.lower()}_{wing.value}"


@dataclass(frozen=True)
class UndoToken:
    """Prior contents of exactly the squares a move touched."""

    saved: Tuple[Tuple[int, Piece], ...]

    @property
    def squares(self) -> Tuple[int, ...]:
        return tuple(sq for sq, _ in self.saved)


@dataclass
class Board:
    """8x8 grid of pieces.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), ``rank * 8 + file`` from White's side.
    - The board owns its piece values; ``copy`` never shares the grid.
    """

    squares: List[Piece] = field(default_factory=lambda: [EMPTY] * 64)

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board holding the standard starting position."""
        return cls.from_placement(STARTPOS_PLACEMENT)

    @classmethod
    def from_placement(cls, placement: str) -> "Board":
        """Create a board from the piece-placement field of a FEN string.

        Args:
            placement (str): Ranks 8 to 1 separated by ``/``.

        Returns:
            Board: Board with pieces placed. Pawns away from their home rank,
                and Kings or Rooks away from their home squares, are marked
                as having moved.

        Raises:
            ValueError: If the field does not describe exactly 64 squares or
                contains an unknown piece letter.
        """
        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        board = cls()
        for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
            file_idx = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    file_idx += n
                else:
                    if file_idx >= 8:
                        raise ValueError("too many squares in FEN rank")
                    piece = Piece.from_char(ch)
                    sq = make_square(file_idx, rank_idx)
                    board.squares[sq] = replace(
                        piece, has_moved=not _on_home_square(piece, sq)
                    )
                    file_idx += 1
            if file_idx != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")
        return board

    def to_placement(self) -> str:
        ranks: List[str] = []
        for rank_idx in range(7, -1, -1):
            run = 0
            row = []
            for file_idx in range(8):
                piece = self.squares[make_square(file_idx, rank_idx)]
                if piece.is_empty:
                    run += 1
                    continue
                if run:
                    row.append(str(run))
                    run = 0
                row.append(piece.to_char())
            if run:
                row.append(str(run))
            ranks.append("".join(row))
        return "/".join(ranks)

    def __getitem__(self, sq: int) -> Piece:
        return self.squares[sq]

    def __setitem__(self, sq: int, piece: Piece) -> None:
        self.squares[sq] = piece

    def copy(self) -> "Board":
        return Board(list(self.squares))

    def occupied_by(self, side: Side) -> Iterator[int]:
        """Yield the squares holding a piece of ``side``, a1 first."""
        for sq, piece in enumerate(self.squares):
            if piece.side is side and not piece.is_empty:
                yield sq

    def king_square(self, side: Side) -> int:
        """Return the square of ``side``'s King.

        Raises:
            InvariantViolation: If ``side`` has no King or more than one.
        """
        found = [sq for sq in self.occupied_by(side) if self.squares[sq].kind is PieceKind.KING]
        if len(found) != 1:
            raise InvariantViolation(f"{side.name} has {len(found)} kings")
        return found[0]

    def count(self, side: Side, kind: PieceKind) -> int:
        return sum(1 for p in self.squares if p.matches(side, kind))

    # --- Apply / revert ---
    def apply(self, move: Move) -> UndoToken:
        """Play ``move``'s board effects in place and return how to undo them.

        Removes a captured piece (on or off the destination), relocates the
        castling Rook, and moves the mover onto the destination with its
        ``has_moved`` / ``moved_two_last_ply`` flags updated. Turn order,
        castling rights and promotion are not this method's concern.
        """
        touched: Dict[int, Piece] = {}
        for sq in (move.from_sq, move.to_sq):
            touched.setdefault(sq, self.squares[sq])
        cap = move.captured_sq
        if cap is not None:
            touched.setdefault(cap, self.squares[cap])
        rook = move.rook_squares
        if rook is not None:
            for sq in rook:
                touched.setdefault(sq, self.squares[sq])
        token = UndoToken(tuple(touched.items()))

        mover = self.squares[move.from_sq]
        if cap is not None:
            self.squares[cap] = EMPTY
        if rook is not None:
            rook_from, rook_to = rook
            self.squares[rook_to] = replace(self.squares[rook_from], has_moved=True)
            self.squares[rook_from] = EMPTY
        self.squares[move.from_sq] = EMPTY
        self.squares[move.to_sq] = replace(
            mover,
            has_moved=True,
            moved_two_last_ply=move.kind is MoveKind.TWO_SQUARE_ADVANCE,
        )
        return token

    def revert(self, token: UndoToken) -> None:
        """Restore every square recorded in ``token`` to its saved piece."""
        for sq, piece in token.saved:
            self.squares[sq] = piece

    def expire_two_square_flags(self) -> None:
        """Clear ``moved_two_last_ply`` on every pawn that still carries it."""
        for sq, piece in enumerate(self.squares):
            if piece.moved_two_last_ply:
                self.squares[sq] = replace(piece, moved_two_last_ply=False)

    def snapshot(self) -> Tuple[Tuple[PieceKind, Side], ...]:
        return tuple((p.kind, p.side) for p in self.squares)


def _on_home_square(piece: Piece, sq: int) -> bool:
    if piece.kind is PieceKind.PAWN:
        return sq // 8 == PAWN_HOME_RANK[piece.side]
    if piece.kind is PieceKind.KING:
        return sq == make_square(KING_HOME_FILE, HOME_RANK[piece.side])
    if piece.kind is PieceKind.ROOK:
        return sq in rook_home_squares(piece.side)
    return True


def rook_home_squares(side: Side) -> Tuple[int, ...]:
    rank = HOME_RANK[side]
    return tuple(make_square(files[0], rank) for files in CASTLE_ROOK_FILES.values())


def castle_home_squares(side: Side, wing: Wing) -> Tuple[int, int]:
    """(King home, Rook home) for ``side`` castling on ``wing``."""
    rank = HOME_RANK[side]
    return make_square(KING_HOME_FILE, rank), make_square(CASTLE_ROOK_FILES[wing][0], rank)
