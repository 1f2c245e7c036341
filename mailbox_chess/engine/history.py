from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional

from .errors import EmptyHistory, HistoryOverflow
from .move import Move
from .pieces import Piece


DEFAULT_HISTORY_CAPACITY = 400  # ply, i.e. 200 full moves


@dataclass(frozen=True)
class Snapshot:
    """Everything needed to reverse exactly one applied move.

    Attributes:
        move (Move): The applied move.
        moved (Piece): The piece that left ``move.from_sq`` (a pawn for promotions).
        captured (Optional[Piece]): Previous contents of ``move.to_sq``.
        en_passant_victim (Optional[Piece]): Pawn removed behind the destination.
    """

    move: Move
    moved: Piece
    captured: Optional[Piece] = None
    en_passant_victim: Optional[Piece] = None


class History:
    """Bounded stack of snapshots; ``len(history)`` is the ply cursor."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("history capacity must be >= 1")
        self.capacity = capacity
        self._items: List[Snapshot] = []

    def push(self, snap: Snapshot, trial: bool = False) -> None:
        """Push ``snap``; a ``trial`` push may use one slot past ``capacity``.

        Trial moves are make-then-takeback legality checks and never stay on the
        stack.
        """
        limit = self.capacity + 1 if trial else self.capacity
        if len(self._items) >= limit:
            raise HistoryOverflow(f"history is full ({self.capacity} ply)")
        self._items.append(snap)

    def pop(self) -> Snapshot:
        if not self._items:
            raise EmptyHistory("no move to take back")
        return self._items.pop()

    def peek(self) -> Optional[Snapshot]:
        return self._items[-1] if self._items else None

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self._items)
