from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict


class PieceKind(IntEnum):
    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    @property
    def opponent(self) -> "Color":
        return Color(self ^ 1)

    @property
    def code(self) -> str:
        """Single-letter side code used by FEN and the HTTP API (``"w"``/``"b"``)."""
        return "w" if self is Color.WHITE else "b"

    @classmethod
    def from_code(cls, code: str) -> "Color":
        if code == "w":
            return cls.WHITE
        if code == "b":
            return cls.BLACK
        raise ValueError(f"side must be 'w' or 'b', got {code!r}")


PROMOTION_KINDS = (PieceKind.QUEEN, PieceKind.ROOK, PieceKind.BISHOP, PieceKind.KNIGHT)

KIND_TO_CHAR: Dict[PieceKind, str] = {
    PieceKind.PAWN: "p",
    PieceKind.KNIGHT: "n",
    PieceKind.BISHOP: "b",
    PieceKind.ROOK: "r",
    PieceKind.QUEEN: "q",
    PieceKind.KING: "k",
}
CHAR_TO_KIND = {v: k for k, v in KIND_TO_CHAR.items()}


@dataclass(frozen=True)
class Piece:
    """An occupied square's contents.

    Empty squares hold ``None`` rather than a Piece, so a square can never carry
    a kind without a color (or the reverse).
    """

    kind: PieceKind
    color: Color

    @property
    def symbol(self) -> str:
        """FEN letter: uppercase for White, lowercase for Black."""
        ch = KIND_TO_CHAR[self.kind]
        return ch.upper() if self.color is Color.WHITE else ch

    @classmethod
    def from_symbol(cls, ch: str) -> "Piece":
        kind = CHAR_TO_KIND.get(ch.lower())
        if kind is None:
            raise ValueError(f"invalid piece symbol: {ch!r}")
        return cls(kind, Color.WHITE if ch.isupper() else Color.BLACK)
