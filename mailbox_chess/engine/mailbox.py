"""Padded "mailbox" board used for offset arithmetic.

The 8x8 board is embedded in a larger grid whose outer ring is marked
off-board. Adding a direction offset to a padded position and looking the
result up yields either a real square or ``OFF_BOARD``; no file or rank range
checks are needed while walking rays, and knight jumps cannot wrap across the
a/h files.

With the default padding (two sentinel rows above and below, one sentinel
column on each side) the grid is 12x10 and the offsets are the classic
``-21, -19, ... 21`` knight set and ``-11, -10, -9, -1, 1, 9, 10, 11`` for kings.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .errors import OutOfBounds
from .pieces import PieceKind


OFF_BOARD = -1

# Knight jumps reach two rows away, so two sentinel rows are needed. One
# sentinel column suffices because the left and right borders are adjacent in
# the flattened grid.
BORDER_ROWS = 2
BORDER_COLS = 1
PADDED_WIDTH = 8 + 2 * BORDER_COLS
PADDED_HEIGHT = 8 + 2 * BORDER_ROWS


def _build_boundary_board() -> Tuple[List[int], List[int]]:
    boundary = [OFF_BOARD] * (PADDED_WIDTH * PADDED_HEIGHT)
    upscale = [0] * 64
    for sq in range(64):
        row, col = divmod(sq, 8)
        padded = (row + BORDER_ROWS) * PADDED_WIDTH + col + BORDER_COLS
        boundary[padded] = sq
        upscale[sq] = padded
    return boundary, upscale


BOUNDARY_BOARD, UPSCALE_BOARD = _build_boundary_board()


def step_offset(d_row: int, d_col: int) -> int:
    # Rows grow toward White's side of the board (a8 is row 0).
    return d_row * PADDED_WIDTH + d_col


_KNIGHT_STEPS = ((-2, -1), (-2, 1), (-1, -2), (-1, 2), (1, -2), (1, 2), (2, -1), (2, 1))
_DIAGONAL_STEPS = ((-1, -1), (-1, 1), (1, -1), (1, 1))
_ORTHOGONAL_STEPS = ((-1, 0), (0, -1), (0, 1), (1, 0))
_ALL_STEPS = tuple(sorted(_DIAGONAL_STEPS + _ORTHOGONAL_STEPS))

# Pawns move and capture asymmetrically and are handled case by case.
MOVE_OFFSETS: Dict[PieceKind, Tuple[int, ...]] = {
    PieceKind.PAWN: (),
    PieceKind.KNIGHT: tuple(step_offset(r, c) for r, c in _KNIGHT_STEPS),
    PieceKind.BISHOP: tuple(step_offset(r, c) for r, c in _DIAGONAL_STEPS),
    PieceKind.ROOK: tuple(step_offset(r, c) for r, c in _ORTHOGONAL_STEPS),
    PieceKind.QUEEN: tuple(step_offset(r, c) for r, c in _ALL_STEPS),
    PieceKind.KING: tuple(step_offset(r, c) for r, c in _ALL_STEPS),
}

# Sliding means repeating one offset during a single move; a knight's L is a
# single step.
CAN_SLIDE: Dict[PieceKind, bool] = {
    PieceKind.PAWN: False,
    PieceKind.KNIGHT: False,
    PieceKind.BISHOP: True,
    PieceKind.ROOK: True,
    PieceKind.QUEEN: True,
    PieceKind.KING: False,
}


def try_destination(sq: int, offset: int) -> Optional[int]:
    """Square reached from ``sq`` by one padded-board ``offset``, or None if off-board."""
    dest = BOUNDARY_BOARD[UPSCALE_BOARD[sq] + offset]
    if dest == OFF_BOARD:
        return None
    return dest


def destination(sq: int, offset: int) -> int:
    """Square reached from ``sq`` by one padded-board ``offset``.

    Raises:
        OutOfBounds: If the step leaves the board.
    """
    dest = try_destination(sq, offset)
    if dest is None:
        raise OutOfBounds(f"offset {offset} from square {sq} leaves the board")
    return dest
