from __future__ import annotations

import pytest

from mailbox_chess.engine.errors import OutOfBounds, ParseError
from mailbox_chess.engine.mailbox import (
    BOUNDARY_BOARD,
    MOVE_OFFSETS,
    OFF_BOARD,
    UPSCALE_BOARD,
    destination,
    try_destination,
)
from mailbox_chess.engine.move import square_to_str, str_to_square, to_file, to_rank
from mailbox_chess.engine.pieces import PieceKind


def test_index_convention() -> None:
    assert str_to_square("a8") == 0
    assert str_to_square("h8") == 7
    assert str_to_square("a1") == 56
    assert str_to_square("h1") == 63
    assert str_to_square("e2") == 52
    assert str_to_square("e4") == 36


def test_coordinate_round_trip() -> None:
    for i in range(64):
        assert str_to_square(square_to_str(i)) == i


def test_file_and_rank_agree_with_coordinates() -> None:
    for i in range(64):
        name = square_to_str(i)
        assert to_file(i) == ord(name[0]) - ord("a")
        assert to_rank(i) == int(name[1]) - 1


@pytest.mark.parametrize("bad", ["", "e", "e9", "i1", "E2", "e0", "e22", "1e"])
def test_malformed_square_raises_parse_error(bad: str) -> None:
    with pytest.raises(ParseError):
        str_to_square(bad)


def test_square_to_str_rejects_out_of_range() -> None:
    with pytest.raises(ValueError):
        square_to_str(64)
    with pytest.raises(ValueError):
        square_to_str(-1)


def test_boundary_tables_are_inverse() -> None:
    assert len(BOUNDARY_BOARD) == 120
    assert sum(1 for v in BOUNDARY_BOARD if v == OFF_BOARD) == 56
    for sq in range(64):
        assert BOUNDARY_BOARD[UPSCALE_BOARD[sq]] == sq
    assert UPSCALE_BOARD[0] == 21 and UPSCALE_BOARD[63] == 98


def test_knight_offsets_from_d5() -> None:
    d5 = str_to_square("d5")
    expected = {
        -21: "c7",
        -19: "e7",
        -12: "b6",
        -8: "f6",
        8: "b4",
        12: "f4",
        19: "c3",
        21: "e3",
    }
    assert set(MOVE_OFFSETS[PieceKind.KNIGHT]) == set(expected)
    for offset, coord in expected.items():
        assert destination(d5, offset) == str_to_square(coord)


@pytest.mark.parametrize("kind", [PieceKind.KNIGHT, PieceKind.KING, PieceKind.QUEEN])
def test_single_steps_never_wrap_files(kind: PieceKind) -> None:
    max_file_delta = 2 if kind is PieceKind.KNIGHT else 1
    for sq in range(64):
        for offset in MOVE_OFFSETS[kind]:
            dest = try_destination(sq, offset)
            if dest is None:
                continue
            assert abs(to_file(dest) - to_file(sq)) <= max_file_delta
            assert abs(to_rank(dest) - to_rank(sq)) <= 2


def test_rook_on_h_file_cannot_step_to_a_file() -> None:
    h4 = str_to_square("h4")
    assert try_destination(h4, 1) is None
    with pytest.raises(OutOfBounds):
        destination(h4, 1)


def test_corner_knight_has_two_targets() -> None:
    a1 = str_to_square("a1")
    targets = {try_destination(a1, o) for o in MOVE_OFFSETS[PieceKind.KNIGHT]} - {None}
    assert targets == {str_to_square("b3"), str_to_square("c2")}
