from __future__ import annotations

from chessrules.engine.board import Board
from chessrules.engine.game import GameState
from chessrules.engine.move import MoveKind, parse_square, square_to_str
from chessrules.engine.movegen import generate


def dests(board: Board, origin: str) -> dict[str, MoveKind]:
    return {square_to_str(m.to_sq): m.kind for m in generate(board, parse_square(origin))}


def test_rook_on_open_board_reaches_fourteen_squares() -> None:
    b = GameState.from_fen("4k3/8/8/8/3R4/8/8/4K3 w - - 0 1").board
    got = dests(b, "d4")
    assert len(got) == 14
    assert set(got) >= {"d1", "d8", "a4", "h4"}
    assert all(kind is MoveKind.PLAIN for kind in got.values())


def test_bishop_boxed_in_at_start() -> None:
    b = Board.startpos()
    assert dests(b, "c1") == {}
    assert dests(b, "f8") == {}


def test_bishop_ray_stops_at_first_capture() -> None:
    b = GameState.from_fen("4k3/8/8/8/8/8/1p6/2B1K3 w - - 0 1").board
    got = dests(b, "c1")
    assert got["b2"] is MoveKind.CAPTURE
    assert "a3" not in got
    assert set(got) == {"b2", "d2", "e3", "f4", "g5", "h6"}


def test_queen_combines_rook_and_bishop_rays() -> None:
    b = GameState.from_fen("4k3/8/8/8/8/8/8/3QK3 w - - 0 1").board
    got = dests(b, "d1")
    assert len(got) == 17
    assert "e1" not in got
    assert got["d8"] is MoveKind.PLAIN


def test_pinned_rook_may_only_slide_along_the_pin() -> None:
    g = GameState.from_fen("4r1k1/8/8/8/8/8/4R3/4K3 w - - 0 1")
    e2 = parse_square("e2")
    assert len(generate(g.board, e2)) == 13
    legal = {square_to_str(sq) for sq in g.legal_destinations(e2)}
    assert legal == {"e3", "e4", "e5", "e6", "e7", "e8"}
