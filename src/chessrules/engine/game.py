from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .board import (
    PROMOTION_RANK,
    STARTPOS_PLACEMENT,
    Board,
    CastlingRights,
    castle_home_squares,
)
from .errors import (
    EmptyOrigin,
    GameAlreadyEnded,
    IllegalMove,
    InvalidCoordinate,
    InvalidPromotionTarget,
    NoPromotionPending,
    PromotionPending,
    WrongSide,
)
from .legality import filter_legal, in_check
from .move import Move, Wing, is_square, parse_square, square_to_str
from .piece import PROMOTION_KINDS, Piece, PieceKind, Side


logger = logging.getLogger(__name__)

STARTPOS_FEN = f"{STARTPOS_PLACEMENT} w KQkq - 0 1"


class GamePhase(Enum):
    IDLE = "idle"
    IN_PLAY = "in_play"
    AWAITING_PROMOTION = "awaiting_promotion"
    ENDED = "ended"


class Outcome(Enum):
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


@dataclass(frozen=True)
class MoveRecord:
    """What a committed move did.

    Attributes:
        move (Move): The legal move that was played.
        piece (Piece): The mover as it stood before the move.
        captured (Optional[Piece]): Piece removed by the move, if any.
        promotion_pending (bool): The move put a pawn on its last rank and the
            game now waits for :meth:`GameState.resolve_promotion`.
        ended (bool): The side now to move has no legal move.
    """

    move: Move
    piece: Piece
    captured: Optional[Piece]
    promotion_pending: bool
    ended: bool


@dataclass
class GameState:
    """Authoritative game state: board, turn, rights and the legal-move index.

    Responsibility: validate and commit moves, resolve promotions, and keep
    ``legal_moves`` in step with the position after every commit.

    The index maps each origin square to the legal moves of the side to move
    and is rebuilt wholesale by every commit and promotion resolution. It is
    empty while a promotion is pending.
    """

    board: Board
    side_to_move: Side = Side.WHITE
    castling: CastlingRights = field(default_factory=CastlingRights)
    promotion_pending: Optional[int] = None
    game_ended: bool = False
    started: bool = False
    outcome: Optional[Outcome] = None
    fullmove_number: int = 1
    last_move: Optional[Move] = None
    legal_moves: Dict[int, List[Move]] = field(default_factory=dict)

    @classmethod
    def new(cls) -> "GameState":
        state = cls(board=Board.startpos())
        state._rebuild_index()
        return state

    @classmethod
    def from_fen(cls, fen: str) -> "GameState":
        """Create a game from a Forsyth-Edwards Notation (FEN) string.

        Args:
            fen (str): Four to six space-separated fields. The half-move clock
                is accepted but not tracked.

        Returns:
            GameState: Game with the position loaded and its legal-move index
                built. A position whose side to move has no legal move is
                already ended; one with Black to move counts as started.

        Raises:
            ValueError: If ``fen`` is malformed, either side does not have
                exactly one King, a pawn stands on the first or last
                rank, the en-passant target has no pawn that just advanced
                two squares in front of it (or its path is occupied), or the
                side not to move is in check.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) not in (4, 5, 6):
            raise ValueError("FEN must have 4 to 6 fields")
        placement, stm, castling_text, ep = parts[:4]

        board = Board.from_placement(placement)
        for side in (Side.WHITE, Side.BLACK):
            if board.count(side, PieceKind.KING) != 1:
                raise ValueError(f"FEN must have exactly one {side.name.lower()} king")
        if any(
            p.kind is PieceKind.PAWN and sq // 8 in (0, 7) for sq, p in enumerate(board.squares)
        ):
            raise ValueError("pawn on first or last rank")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")
        side_to_move = Side.WHITE if stm == "w" else Side.BLACK

        castling = CastlingRights.from_fen(castling_text)
        # Rights without the pieces in place can never be exercised.
        for side in (Side.WHITE, Side.BLACK):
            for wing in (Wing.KINGSIDE, Wing.QUEENSIDE):
                king_home, rook_home = castle_home_squares(side, wing)
                if not (
                    board[king_home].matches(side, PieceKind.KING)
                    and board[rook_home].matches(side, PieceKind.ROOK)
                ):
                    castling = castling.without(side, wing)

        if ep != "-":
            try:
                target = parse_square(ep)
            except InvalidCoordinate as e:
                raise ValueError("invalid en passant square") from e
            mover = side_to_move.opponent()
            expected_rank = 2 if mover is Side.WHITE else 5
            if target // 8 != expected_rank:
                raise ValueError("invalid en passant square rank")
            pawn_sq = target + (8 if mover is Side.WHITE else -8)
            origin_sq = target - (8 if mover is Side.WHITE else -8)
            if not (board[target].is_empty and board[origin_sq].is_empty):
                raise ValueError("en passant square or the square behind it is occupied")
            pawn = board[pawn_sq]
            if not pawn.matches(mover, PieceKind.PAWN):
                raise ValueError("en passant square has no pawn in front of it")
            board[pawn_sq] = replace(pawn, moved_two_last_ply=True)

        fullmove_number = 1
        if len(parts) == 6:
            try:
                halfmove, fullmove_number = int(parts[4]), int(parts[5])
            except ValueError as e:
                raise ValueError("invalid move counters in FEN") from e
            if halfmove < 0 or fullmove_number <= 0:
                raise ValueError("invalid move counters in FEN")

        if in_check(board, side_to_move.opponent()):
            raise ValueError("side not to move is in check")

        state = cls(
            board=board,
            side_to_move=side_to_move,
            castling=castling,
            started=side_to_move is Side.BLACK,
            fullmove_number=fullmove_number,
        )
        state._rebuild_index()
        return state

    def to_fen(self) -> str:
        """Serialize the position; the half-move field is always ``0``."""
        stm = "w" if self.side_to_move is Side.WHITE else "b"
        ep = "-"
        for sq, piece in enumerate(self.board.squares):
            if piece.moved_two_last_ply:
                ep = square_to_str(sq - 8 if piece.side is Side.WHITE else sq + 8)
        return (
            f"{self.board.to_placement()} {stm} {self.castling.to_fen()} {ep} "
            f"0 {self.fullmove_number}"
        )

    def reset(self) -> None:
        """Reinitialize in place to the standard starting position."""
        fresh = GameState.new()
        self.__dict__.update(fresh.__dict__)

    def copy(self) -> "GameState":
        return replace(self, board=self.board.copy(), legal_moves=dict(self.legal_moves))

    # --- Queries ---
    @property
    def phase(self) -> GamePhase:
        if self.game_ended:
            return GamePhase.ENDED
        if self.promotion_pending is not None:
            return GamePhase.AWAITING_PROMOTION
        if not self.started:
            return GamePhase.IDLE
        return GamePhase.IN_PLAY

    def is_ended(self) -> bool:
        return self.game_ended

    def active_side(self) -> Side:
        return self.side_to_move

    def snapshot(self) -> Tuple[Tuple[PieceKind, Side], ...]:
        return self.board.snapshot()

    def in_check(self) -> bool:
        return in_check(self.board, self.side_to_move)

    def legal_move_list(self) -> List[Move]:
        return [m for moves in self.legal_moves.values() for m in moves]

    def legal_destinations(self, origin: int) -> List[int]:
        return [m.to_sq for m in self.legal_moves.get(origin, [])]

    # --- Commands ---
    def attempt_move(self, from_sq: int, to_sq: int) -> MoveRecord:
        """Validate and commit a move for the side to move.

        Args:
            from_sq (int): Origin square index.
            to_sq (int): Destination square index.

        Returns:
            MoveRecord: Description of the committed move.

        Raises:
            GameAlreadyEnded: The game is over.
            PromotionPending: A promotion must be resolved first.
            InvalidCoordinate: A square index is outside 0..63.
            EmptyOrigin: Nothing stands on ``from_sq``.
            WrongSide: The piece on ``from_sq`` belongs to the other side.
            IllegalMove: The move is not in the legal-move index.
        """
        move = self._validate(from_sq, to_sq)
        return self._commit(move)

    def resolve_promotion(self, kind: PieceKind) -> None:
        """Replace the pending pawn with ``kind`` and finish its move.

        Raises:
            GameAlreadyEnded: The game is over.
            NoPromotionPending: No pawn is waiting to promote.
            InvalidPromotionTarget: ``kind`` is not Queen, Rook, Bishop or
                Knight.
        """
        if self.game_ended:
            raise GameAlreadyEnded("game has ended")
        if self.promotion_pending is None:
            raise NoPromotionPending("no promotion is pending")
        if kind not in PROMOTION_KINDS:
            raise InvalidPromotionTarget(f"cannot promote to {getattr(kind, 'name', kind)!r}")
        sq = self.promotion_pending
        self.board[sq] = replace(self.board[sq], kind=PieceKind(kind))
        self.promotion_pending = None
        logger.debug("promoted on %s to %s", square_to_str(sq), PieceKind(kind).name)
        self._finish_turn()

    # --- Internals ---
    def _reject(self, exc: Exception) -> Exception:
        logger.debug("move rejected: %s", exc)
        return exc

    def _validate(self, from_sq: int, to_sq: int) -> Move:
        if self.game_ended:
            raise self._reject(GameAlreadyEnded("game has ended"))
        if self.promotion_pending is not None:
            raise self._reject(PromotionPending("resolve the pending promotion first"))
        if not is_square(from_sq) or not is_square(to_sq):
            raise self._reject(InvalidCoordinate(f"square out of range: {from_sq!r}, {to_sq!r}"))
        piece = self.board[from_sq]
        if piece.is_empty:
            raise self._reject(EmptyOrigin(f"no piece on {square_to_str(from_sq)}"))
        if piece.side is not self.side_to_move:
            raise self._reject(
                WrongSide(f"{self.side_to_move.name.lower()} is to move")
            )
        for move in self.legal_moves.get(from_sq, []):
            if move.to_sq == to_sq:
                return move
        raise self._reject(
            IllegalMove(f"illegal move: {square_to_str(from_sq)}{square_to_str(to_sq)}")
        )

    def _commit(self, move: Move) -> MoveRecord:
        piece = self.board[move.from_sq]
        cap = move.captured_sq
        captured = self.board[cap] if cap is not None else None

        self.board.expire_two_square_flags()
        self.board.apply(move)
        self._revoke_castling_rights()
        self.started = True
        self.last_move = move
        logger.debug(
            "%s played %s (%s)", piece.side.name.lower(), move.to_coordinates(), move.kind.label
        )

        if piece.kind is PieceKind.PAWN and move.to_sq // 8 == PROMOTION_RANK[piece.side]:
            self.promotion_pending = move.to_sq
            # Nothing may move until the pawn is resolved.
            self.legal_moves = {}
            return MoveRecord(move, piece, captured, promotion_pending=True, ended=False)

        self._finish_turn()
        return MoveRecord(move, piece, captured, promotion_pending=False, ended=self.game_ended)

    def _revoke_castling_rights(self) -> None:
        # A right survives only while its King and Rook still stand at home.
        for side in (Side.WHITE, Side.BLACK):
            for wing in (Wing.KINGSIDE, Wing.QUEENSIDE):
                if not self.castling.allows(side, wing):
                    continue
                king_home, rook_home = castle_home_squares(side, wing)
                if not (
                    self.board[king_home].matches(side, PieceKind.KING)
                    and self.board[rook_home].matches(side, PieceKind.ROOK)
                ):
                    self.castling = self.castling.without(side, wing)

    def _finish_turn(self) -> None:
        if self.side_to_move is Side.BLACK:
            self.fullmove_number += 1
        self.side_to_move = self.side_to_move.opponent()
        self._rebuild_index()

    def _rebuild_index(self) -> None:
        self.legal_moves = filter_legal(self.board, self.side_to_move, self.castling)
        if self.legal_moves:
            return
        self.game_ended = True
        self.outcome = Outcome.CHECKMATE if self.in_check() else Outcome.STALEMATE
        logger.info(
            "game ended by %s, %s to move", self.outcome.value, self.side_to_move.name.lower()
        )
