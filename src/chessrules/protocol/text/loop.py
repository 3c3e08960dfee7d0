from __future__ import annotations

import logging
import sys
from typing import Callable, List, Optional, TextIO

from ...engine.errors import MoveRejected
from ...engine.game import GamePhase, GameState
from ...engine.move import parse_coordinate_move, parse_square, square_to_str
from ...engine.piece import parse_promotion_kind
from .render import render_board


logger = logging.getLogger(__name__)

Writer = Callable[[str], None]


class TextSession:
    """Line-oriented terminal adapter around one game.

    Notes:
    - Core remains pure; I/O is isolated here.
    - Commands: new, move, promote, moves, show, fen, position, quit. A bare
      coordinate pair such as ``e2e4`` is read as a move.
    """

    def __init__(self) -> None:
        self.game: GameState = GameState.new()

    # ---- Command handlers ----
    def cmd_new(self, write: Writer) -> None:
        self.game.reset()
        write("new game, white to move")

    def cmd_move(self, args: List[str], write: Writer) -> None:
        try:
            if len(args) == 2:
                from_sq, to_sq = parse_square(args[0]), parse_square(args[1])
            else:
                from_sq, to_sq = parse_coordinate_move("".join(args))
            record = self.game.attempt_move(from_sq, to_sq)
        except MoveRejected as e:
            write(f"rejected {e.code}: {e}")
            return
        write(f"ok {record.move.to_coordinates()}")
        self._report_status(write)

    def cmd_promote(self, args: List[str], write: Writer) -> None:
        if len(args) != 1:
            write("usage: promote <q|r|b|n>")
            return
        try:
            self.game.resolve_promotion(parse_promotion_kind(args[0]))
        except MoveRejected as e:
            write(f"rejected {e.code}: {e}")
            return
        write("ok promoted")
        self._report_status(write)

    def cmd_moves(self, write: Writer) -> None:
        moves = sorted(m.to_coordinates() for m in self.game.legal_move_list())
        write("moves " + " ".join(moves) if moves else "moves (none)")

    def cmd_show(self, write: Writer) -> None:
        write(render_board(self.game.snapshot()))
        write(f"{self.game.side_to_move.name.lower()} to move ({self.game.phase.value})")

    def cmd_fen(self, write: Writer) -> None:
        write(self.game.to_fen())

    def cmd_position(self, args: List[str], write: Writer) -> None:
        # position startpos | position <FEN fields...>
        if args == ["startpos"]:
            self.game = GameState.new()
            write("ok position")
            return
        try:
            self.game = GameState.from_fen(" ".join(args))
        except ValueError as e:
            write(f"rejected invalid_position: {e}")
            return
        write("ok position")
        self._report_status(write)

    def dispatch(self, line: str, write: Writer) -> bool:
        """Run one command line; returns False once the session should stop."""
        parts = line.split()
        if not parts:
            return True
        cmd, args = parts[0].lower(), parts[1:]

        if cmd == "quit":
            return False
        if cmd == "new":
            self.cmd_new(write)
        elif cmd == "move":
            self.cmd_move(args, write)
        elif cmd == "promote":
            self.cmd_promote(args, write)
        elif cmd == "moves":
            self.cmd_moves(write)
        elif cmd == "show":
            self.cmd_show(write)
        elif cmd == "fen":
            self.cmd_fen(write)
        elif cmd == "position":
            self.cmd_position(args, write)
        elif len(parts) == 1 and len(cmd) in (4, 5):
            self.cmd_move([cmd], write)
        else:
            write(f"unknown command: {parts[0]}")
        return True

    def _report_status(self, write: Writer) -> None:
        phase = self.game.phase
        if phase is GamePhase.AWAITING_PROMOTION:
            sq = self.game.promotion_pending
            write(f"promote on {square_to_str(sq)}: promote <q|r|b|n>")  # type: ignore[arg-type]
        elif phase is GamePhase.ENDED:
            outcome = self.game.outcome.value if self.game.outcome else "ended"
            write(f"game over: {outcome}")
        elif self.game.in_check():
            write("check")


def _default_writer(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def run_text_loop(stream: Optional[TextIO] = None, write: Writer = _default_writer) -> None:
    session = TextSession()
    session.cmd_show(write)
    for raw in stream if stream is not None else sys.stdin:
        if not session.dispatch(raw.strip(), write):
            break
    logger.debug("text session closed")
