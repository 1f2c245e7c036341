from __future__ import annotations

import pytest

from mailbox_chess.engine.board import Board, STARTPOS_FEN
from mailbox_chess.engine.perft import divide, perft


def test_perft_startpos_depths_0_2() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    assert perft(b, 0) == 1
    assert perft(b, 1) == 20
    assert perft(b, 2) == 400
    # Board is restored afterwards
    assert b.to_fen() == STARTPOS_FEN
    assert b.history_idx == 0


def test_perft_counts_only_legal_moves() -> None:
    # The e2 rook is pinned: only its six e-file moves plus four king moves.
    b = Board.from_fen("4r2k/8/8/8/8/8/4R3/4K3 w - - 0 1")
    assert perft(b, 1) == 10


def test_divide_sums_to_perft() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    counts = divide(b, 2)
    assert len(counts) == 20
    assert all(n == 20 for n in counts.values())
    assert sum(counts.values()) == 400


def test_perft_rejects_negative_depth() -> None:
    with pytest.raises(ValueError):
        perft(Board.startpos(), -1)
