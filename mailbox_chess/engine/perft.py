from __future__ import annotations

from typing import Dict

from .board import Board


def perft(board: Board, depth: int) -> int:
    """Compute perft node count for `board` at `depth`.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Legality comes from make/takeback, so the board is restored on return.
    Counts differ from standard tables once castling or en passant would
    become available, since neither is generated.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    nodes = 0
    for m in board.generate_moves():
        if not board.make_move(m):
            continue
        nodes += perft(board, depth - 1)
        board.takeback()
    return nodes


def divide(board: Board, depth: int) -> Dict[str, int]:
    """Per-root-move perft counts, keyed by coordinate move."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for m in board.generate_moves():
        if not board.make_move(m):
            continue
        out[m.to_coordinate()] = perft(board, depth - 1)
        board.takeback()
    return out
