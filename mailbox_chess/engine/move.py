from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import ParseError
from .pieces import CHAR_TO_KIND, KIND_TO_CHAR, PROMOTION_KINDS, PieceKind


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    A move is a self-describing value: replaying it never needs the board,
    except for the identity of a captured piece, which is kept in the history
    snapshot instead.

    Attributes:
        from_sq (int): Origin square index (0 = a8, 63 = h1).
        to_sq (int): Destination square index.
        promotion (Optional[PieceKind]): Piece a promoting pawn becomes.
        capturing (bool): Destination holds an enemy piece.
        castling (bool): King castling move (not executed by the engine).
        en_passant (bool): Pawn capture of the pawn behind the destination.
        pawn_pushing (bool): Pawn double step from its starting rank.
        pawn_move (bool): Any pawn move.
        promoting (bool): Pawn reaches the farthest rank.
    """

    from_sq: int
    to_sq: int
    promotion: Optional[PieceKind] = None
    capturing: bool = False
    castling: bool = False
    en_passant: bool = False
    pawn_pushing: bool = False
    pawn_move: bool = False
    promoting: bool = False

    def to_coordinate(self) -> str:
        """Serialize the move into coordinate form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = KIND_TO_CHAR[self.promotion] if self.promotion is not None else ""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + promo

    def same_request(self, other: "Move") -> bool:
        """True when both moves ask for the same from/to/promotion, ignoring flags."""
        return (
            self.from_sq == other.from_sq
            and self.to_sq == other.to_sq
            and self.promotion == other.promotion
        )


def parse_coordinate_move(text: str) -> Move:
    """Parse a coordinate move string.

    Only the squares (and an optional promotion letter) are extracted; the
    move is not checked against the position.

    Args:
        text (str): Move such as ``"e2e4"`` or ``"e7e8q"``.

    Returns:
        Move: Parsed move with no flags set.

    Raises:
        ParseError: If the string has an invalid length, squares, or promotion
            piece.
    """
    text = text.strip()
    if len(text) not in (4, 5):
        raise ParseError(f"invalid move length: {text!r}")
    from_sq = str_to_square(text[0:2])
    to_sq = str_to_square(text[2:4])
    promo: Optional[PieceKind] = None
    if len(text) == 5:
        promo = CHAR_TO_KIND.get(text[4].lower())
        if promo not in PROMOTION_KINDS:
            raise ParseError(f"invalid promotion piece: {text[4]!r}")
    return Move(from_sq, to_sq, promo)


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a square index.

    Index 0 is a8 and index 63 is h1, so ranks count down as the index grows.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: Square index.

    Raises:
        ParseError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ParseError(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    rank = int(s[1]) - 1
    return (7 - rank) * 8 + file


def square_to_str(idx: int) -> str:
    """Convert a square index into algebraic notation.

    Raises:
        ValueError: If ``idx`` is outside the valid square range.
    """
    if idx < 0 or idx > 63:
        raise ValueError(f"invalid square index: {idx}")
    return chr(ord("a") + to_file(idx)) + str(to_rank(idx) + 1)


def to_file(idx: int) -> int:
    """File 0..7 (a..h)."""
    return idx & 7


def to_rank(idx: int) -> int:
    """Rank 0..7, counted from White's first rank."""
    return (63 - idx) >> 3
