from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .board import Board
from .errors import IllegalMove, UnsupportedMove
from .history import DEFAULT_HISTORY_CAPACITY
from .move import Move, str_to_square
from .pieces import Color, Piece, PieceKind


logger = logging.getLogger(__name__)

KING_HOME = {Color.WHITE: str_to_square("e1"), Color.BLACK: str_to_square("e8")}


@dataclass(frozen=True)
class MoveResult:
    """Outcome of ``Game.attempt_move``.

    ``move`` is the fully flagged move that was tried, when the request matched
    one of the generated moves.
    """

    accepted: bool
    error: Optional[IllegalMove] = None
    move: Optional[Move] = None


@dataclass(frozen=True)
class BoardView:
    """Read-only copy of the board for renderers."""

    squares: Tuple[Optional[Piece], ...]
    side_to_move: Color

    def symbols(self) -> List[str]:
        """FEN letter per square, ``"."`` for empty squares, a8 first."""
        return [p.symbol if p is not None else "." for p in self.squares]


@dataclass
class Game:
    """Game wrapper around a board with helper operations.

    Responsibility: own one board, expose generated moves, attempt and undo moves.
    """

    board: Board
    move_stack: List[Move] = field(default_factory=list)

    @classmethod
    def new(cls, history_capacity: int = DEFAULT_HISTORY_CAPACITY) -> "Game":
        return cls(board=Board.startpos(history_capacity))

    @classmethod
    def from_fen(cls, fen: str, history_capacity: int = DEFAULT_HISTORY_CAPACITY) -> "Game":
        return cls(board=Board.from_fen(fen, history_capacity))

    def to_fen(self) -> str:
        return self.board.to_fen()

    @property
    def side_to_move(self) -> Color:
        return self.board.side_to_move

    @property
    def history_full(self) -> bool:
        return self.board.history_idx >= self.board.history.capacity

    def generate_moves(self, side: Optional[Color] = None) -> List[Move]:
        return self.board.generate_moves(side)

    def legal_moves(self) -> List[Move]:
        """Pseudo-legal moves for the side to move that survive make/takeback."""
        legal: List[Move] = []
        for m in self.board.generate_moves():
            if self.board.make_move(m, trial=True):
                self.board.takeback()
                legal.append(m)
        return legal

    def attempt_move(self, move: Move) -> MoveResult:
        """Try ``move`` for the side to move.

        The request only needs from/to (and a promotion piece where one is
        due); flags are taken from the matching generated move.

        Raises:
            UnsupportedMove: For castling requests.
            HistoryOverflow: If the game has used up its history capacity.
        """
        if move.castling or self._is_castling_request(move):
            raise UnsupportedMove("castling is not implemented")
        candidates = [m for m in self.board.generate_moves() if m.same_request(move)]
        if not candidates:
            err = IllegalMove(f"{move.to_coordinate()} is not a legal move")
            logger.debug("rejected %s: no matching generated move", move.to_coordinate())
            return MoveResult(accepted=False, error=err)
        flagged = candidates[0]
        if not self.board.make_move(flagged):
            err = IllegalMove("this move would place you in check")
            return MoveResult(accepted=False, error=err, move=flagged)
        self.move_stack.append(flagged)
        logger.info("accepted %s (ply %d)", flagged.to_coordinate(), self.board.history_idx)
        return MoveResult(accepted=True, move=flagged)

    def _is_castling_request(self, move: Move) -> bool:
        # A king on its home square asked to go two files sideways.
        piece = self.board.piece_at(move.from_sq)
        if piece is None or piece.color is not self.side_to_move:
            return False
        if piece.kind is not PieceKind.KING:
            return False
        home = KING_HOME[piece.color]
        return move.from_sq == home and move.to_sq in (home - 2, home + 2)

    def undo_move(self) -> Move:
        """Take back the last accepted move.

        Raises:
            EmptyHistory: If no move has been played.
        """
        snap = self.board.takeback()
        self.move_stack.pop()
        return snap.move

    # --- State flags for collaborators ---
    def is_in_check(self, side: Optional[Color] = None) -> bool:
        return self.board.in_check(side)

    def checkmate(self) -> bool:
        return not self.legal_moves() and self.board.in_check()

    def stalemate(self) -> bool:
        return not self.legal_moves() and not self.board.in_check()

    def board_snapshot(self) -> BoardView:
        return BoardView(squares=self.board.view(), side_to_move=self.board.side_to_move)

    def move_history(self) -> List[str]:
        return [m.to_coordinate() for m in self.move_stack]

