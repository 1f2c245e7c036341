from __future__ import annotations


class ChessError(Exception):
    """Base class for engine errors."""


class ParseError(ChessError, ValueError):
    """Malformed coordinate or FEN text. Nothing is mutated."""


class OutOfBounds(ChessError, ValueError):
    """A step from a square leaves the board."""


class IllegalMove(ChessError, ValueError):
    """The move breaks piece movement rules or leaves the mover in check."""


class UnsupportedMove(ChessError, NotImplementedError):
    """The move needs a rule the engine does not implement (castling)."""


class HistoryOverflow(ChessError, RuntimeError):
    """More plies were applied than the history can hold."""


class EmptyHistory(ChessError, ValueError):
    """Takeback requested with no applied move."""


class MissingKing(ChessError, ValueError):
    """A check test was requested for a side that has no king on the board."""
