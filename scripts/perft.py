#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys
import time

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo's src/ to sys.path.
SRC_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from chessrules.engine.game import STARTPOS_FEN, GameState
from chessrules.engine.perft import perft
from chessrules.engine.piece import parse_promotion_kind


def main() -> None:
    parser = argparse.ArgumentParser(description="Run perft on a given FEN and depth")
    parser.add_argument(
        "--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)"
    )
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    parser.add_argument(
        "--divide", action="store_true", help="Print the node count below each root move"
    )
    args = parser.parse_args()

    state = GameState.from_fen(args.fen)
    start = time.perf_counter()
    if args.divide and args.depth > 0:
        nodes = 0
        for m in state.legal_move_list():
            child = state.copy()
            child.attempt_move(m.from_sq, m.to_sq)
            if child.promotion_pending is not None:
                # Count each promotion choice under one line, like perft itself.
                sub = sum(
                    perft(_promoted(child, k), args.depth - 1) for k in ("q", "r", "b", "n")
                )
            else:
                sub = perft(child, args.depth - 1)
            print(f"{m.to_coordinates()}: {sub}")
            nodes += sub
    else:
        nodes = perft(state, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


def _promoted(state: GameState, letter: str) -> GameState:
    child = state.copy()
    child.resolve_promotion(parse_promotion_kind(letter))
    return child


if __name__ == "__main__":
    main()
