from __future__ import annotations

from typing import List, Sequence, Tuple

from ...engine.piece import KIND_TO_CHAR, PieceKind, Side

FILES = "abcdefgh"
BORDER = "  +-----------------+"


def render_board(snapshot: Sequence[Tuple[PieceKind, Side]]) -> str:
    """Draw a 64-entry snapshot as text: rank 8 on top, White in uppercase,
    empty squares as ``.``."""
    lines: List[str] = [BORDER]
    for rank in range(7, -1, -1):
        cells = []
        for file in range(8):
            kind, side = snapshot[rank * 8 + file]
            ch = "." if kind is PieceKind.NONE else KIND_TO_CHAR[kind]
            cells.append(ch.upper() if side is Side.WHITE else ch)
        lines.append(f"{rank + 1} | {' '.join(cells)} |")
    lines.append(BORDER)
    lines.append("    " + " ".join(FILES))
    return "\n".join(lines)
