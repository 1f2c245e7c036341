from __future__ import annotations

import pytest

from mailbox_chess.engine.board import Board, STARTPOS_FEN
from mailbox_chess.engine.errors import ParseError


def test_startpos_round_trip() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    assert b.to_fen() == STARTPOS_FEN


@pytest.mark.parametrize(
    "fen",
    [
        "r1bqkbnr/pppp1ppp/2n5/4p3/3P4/5N2/PPP1PPPP/RNBQKB1R b - - 0 3",
        "r3k2r/8/8/8/8/8/8/R3K2R w - - 0 1",
        "8/8/8/8/8/8/8/8 w - - 0 12",
    ],
)
def test_round_trip_various_positions(fen: str) -> None:
    b = Board.from_fen(fen)
    assert b.to_fen() == fen


def test_untracked_fields_are_normalized() -> None:
    b = Board.from_fen("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 5 1")
    assert b.to_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b - - 0 1"


@pytest.mark.parametrize(
    "fen",
    [
        "",  # empty
        "8/8/8/8/8/8/8 w - - 0 1",  # not enough ranks
        "8/8/8/8/8/8/8/8 w - - 0",  # missing fields
        "8/8/8/8/8/8/8/8 x - - 0 1",  # bad side to move
        "8/8/8/8/8/8/8/8 w A - 0 1",  # bad castling
        "8/8/8/8/8/8/8/8 w - z9 0 1",  # bad ep square
        "8/8/8/8/8/8/8/8 w - e4 0 1",  # ep square on wrong rank
        "8/8/8/8/8/8/8/8 w - - -1 1",  # bad halfmove
        "8/8/8/8/8/8/8/8 w - - 0 0",  # bad fullmove
        "9/8/8/8/8/8/8/8 w - - 0 1",  # too many squares
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNX w - - 0 1",  # bad piece
    ],
)
def test_invalid_fen_raises(fen: str) -> None:
    with pytest.raises(ParseError):
        Board.from_fen(fen)
