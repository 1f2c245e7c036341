from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import IllegalMove, MissingKing, ParseError, UnsupportedMove
from .history import DEFAULT_HISTORY_CAPACITY, History, Snapshot
from .mailbox import CAN_SLIDE, MOVE_OFFSETS, step_offset, try_destination
from .move import Move, square_to_str, str_to_square, to_rank
from .pieces import PROMOTION_KINDS, Color, Piece, PieceKind


logger = logging.getLogger(__name__)


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w - - 0 1"

# Pawn geometry per side. White moves toward a8 (decreasing index), Black
# toward h1.
PAWN_PUSH_OFFSET = {Color.WHITE: step_offset(-1, 0), Color.BLACK: step_offset(1, 0)}
PAWN_CAPTURE_OFFSETS = {
    Color.WHITE: (step_offset(-1, -1), step_offset(-1, 1)),
    Color.BLACK: (step_offset(1, -1), step_offset(1, 1)),
}
PAWN_START_RANK = {Color.WHITE: 1, Color.BLACK: 6}
PROMOTION_RANK = {Color.WHITE: 7, Color.BLACK: 0}
# Compact-index distance from an en passant destination to the captured pawn.
EN_PASSANT_BEHIND = {Color.WHITE: 8, Color.BLACK: -8}


@dataclass
class Board:
    """Mailbox board state with make/takeback.

    Notes:
    - Squares are 0..63 (a8=0 .. h1=63), row-major from White's point of view.
    - Each square holds a ``Piece`` or ``None``.
    - ``side_to_move`` is the only stored side; ``xside`` is derived from it.
    - Every instance owns its squares and history; share nothing between games.
    """

    squares: List[Optional[Piece]]
    side_to_move: Color = Color.WHITE
    fullmove_number: int = 1
    history: History = field(default_factory=History, repr=False)

    @classmethod
    def empty(cls, history_capacity: int = DEFAULT_HISTORY_CAPACITY) -> "Board":
        return cls(squares=[None] * 64, history=History(history_capacity))

    @classmethod
    def startpos(cls, history_capacity: int = DEFAULT_HISTORY_CAPACITY) -> "Board":
        """Create a board initialized to the standard chess starting position."""
        return cls.from_fen(STARTPOS_FEN, history_capacity=history_capacity)

    @classmethod
    def from_fen(cls, fen: str, history_capacity: int = DEFAULT_HISTORY_CAPACITY) -> "Board":
        """Create a board from a Forsyth–Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.
            history_capacity (int): Maximum number of ply the board can hold.

        Returns:
            Board: Board with an empty history.

        Raises:
            ParseError: If ``fen`` is empty, has the wrong number of fields, or
                contains invalid piece placement, side, castling rights, en
                passant square, or move counters.

        Notes:
            Castling rights, the en passant target and the halfmove clock are
            validated but not kept: the engine executes neither castling nor
            en passant generation and does not track the fifty-move rule.
        """
        if not fen or not isinstance(fen, str):
            raise ParseError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ParseError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ParseError("FEN board must have 8 ranks")
        squares: List[Optional[Piece]] = [None] * 64
        # FEN lists rank 8 first, which is also where index 0 lives.
        for row, rank in enumerate(ranks):
            file_idx = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ParseError("invalid empty count in FEN rank")
                    file_idx += n
                else:
                    if file_idx >= 8:
                        raise ParseError("too many squares in FEN rank")
                    try:
                        squares[row * 8 + file_idx] = Piece.from_symbol(ch)
                    except ValueError as e:
                        raise ParseError(f"invalid piece in FEN: {ch!r}") from e
                    file_idx += 1
            if file_idx != 8:
                raise ParseError("rank does not sum to 8 squares in FEN")

        try:
            side = Color.from_code(stm)
        except ValueError as e:
            raise ParseError("side to move must be 'w' or 'b'") from e

        if castling != "-" and (not castling or any(ch not in "KQkq" for ch in castling)):
            raise ParseError("invalid castling rights")

        if ep != "-":
            ep_square = str_to_square(ep)
            if to_rank(ep_square) not in (2, 5):
                raise ParseError("invalid en passant square rank")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ParseError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise ParseError("invalid move counters in FEN")

        return cls(
            squares=squares,
            side_to_move=side,
            fullmove_number=fullmove_number,
            history=History(history_capacity),
        )

    def to_fen(self) -> str:
        """Serialize the position into FEN.

        Castling and en passant fields are always ``-`` and the halfmove clock
        is always ``0`` (none of them are tracked).
        """
        rows: List[str] = []
        for row in range(8):
            run = 0
            out = []
            for file_idx in range(8):
                piece = self.squares[row * 8 + file_idx]
                if piece is None:
                    run += 1
                    continue
                if run:
                    out.append(str(run))
                    run = 0
                out.append(piece.symbol)
            if run:
                out.append(str(run))
            rows.append("".join(out))
        return f"{'/'.join(rows)} {self.side_to_move.code} - - 0 {self.fullmove_number}"

    # --- Square access ---
    @property
    def xside(self) -> Color:
        return self.side_to_move.opponent

    @property
    def history_idx(self) -> int:
        """Number of ply currently applied."""
        return len(self.history)

    def piece_at(self, sq: int) -> Optional[Piece]:
        return self.squares[sq]

    def set_piece(self, sq: int, piece: Optional[Piece]) -> None:
        self.squares[sq] = piece

    def place(self, coord: str, kind: PieceKind, color: Color) -> None:
        """Put a piece on ``coord``; handy for building test positions."""
        self.squares[str_to_square(coord)] = Piece(kind, color)

    def view(self) -> Tuple[Optional[Piece], ...]:
        return tuple(self.squares)

    def king_square(self, side: Color) -> Optional[int]:
        for sq, piece in enumerate(self.squares):
            if piece is not None and piece.kind is PieceKind.KING and piece.color is side:
                return sq
        return None

    # --- Attack detection ---
    def under_attack(self, target: int, attacker: Color) -> bool:
        """Return True if any ``attacker`` piece reaches ``target`` this ply.

        Rays stop at the first occupied square of either color and at the
        board edge; knights and kings take a single step.
        """
        for sq, piece in enumerate(self.squares):
            if piece is None or piece.color is not attacker or sq == target:
                continue
            if piece.kind is PieceKind.PAWN:
                for offset in PAWN_CAPTURE_OFFSETS[attacker]:
                    if try_destination(sq, offset) == target:
                        return True
                continue
            slide = CAN_SLIDE[piece.kind]
            for offset in MOVE_OFFSETS[piece.kind]:
                dest = try_destination(sq, offset)
                while dest is not None:
                    if dest == target:
                        return True
                    if self.squares[dest] is not None or not slide:
                        break
                    dest = try_destination(dest, offset)
        return False

    def in_check(self, side: Optional[Color] = None) -> bool:
        """Return True if ``side`` (default: side to move) is in check.

        Raises:
            MissingKing: If ``side`` has no king on the board.
        """
        s = self.side_to_move if side is None else side
        ksq = self.king_square(s)
        if ksq is None:
            raise MissingKing(f"no {s.name.lower()} king on the board")
        return self.under_attack(ksq, s.opponent)

    # --- Move generation ---
    def generate_moves(self, side: Optional[Color] = None) -> List[Move]:
        """Return pseudo-legal moves for ``side`` (default: side to move).

        Moves follow piece movement rules but may leave the mover's king in
        check; ``make_move`` rejects those. Castling and en passant are never
        generated.
        """
        s = self.side_to_move if side is None else side
        moves: List[Move] = []
        for sq, piece in enumerate(self.squares):
            if piece is None or piece.color is not s:
                continue
            if piece.kind is PieceKind.PAWN:
                self._gen_pawn_moves(sq, s, moves)
                continue
            slide = CAN_SLIDE[piece.kind]
            for offset in MOVE_OFFSETS[piece.kind]:
                dest = try_destination(sq, offset)
                while dest is not None:
                    occupant = self.squares[dest]
                    if occupant is None:
                        moves.append(Move(sq, dest))
                    else:
                        if occupant.color is not s:
                            moves.append(Move(sq, dest, capturing=True))
                        break
                    if not slide:
                        break
                    dest = try_destination(dest, offset)
        return moves

    def _gen_pawn_moves(self, sq: int, side: Color, moves: List[Move]) -> None:
        push = PAWN_PUSH_OFFSET[side]
        one = try_destination(sq, push)
        if one is not None and self.squares[one] is None:
            self._add_pawn_move(moves, sq, one, side, capturing=False)
            if to_rank(sq) == PAWN_START_RANK[side]:
                two = try_destination(one, push)
                if two is not None and self.squares[two] is None:
                    moves.append(Move(sq, two, pawn_pushing=True, pawn_move=True))
        for offset in PAWN_CAPTURE_OFFSETS[side]:
            dest = try_destination(sq, offset)
            if dest is None:
                continue
            occupant = self.squares[dest]
            if occupant is not None and occupant.color is not side:
                self._add_pawn_move(moves, sq, dest, side, capturing=True)

    @staticmethod
    def _add_pawn_move(moves: List[Move], fr: int, to: int, side: Color, *, capturing: bool) -> None:
        if to_rank(to) == PROMOTION_RANK[side]:
            for kind in PROMOTION_KINDS:
                moves.append(
                    Move(fr, to, kind, capturing=capturing, pawn_move=True, promoting=True)
                )
        else:
            moves.append(Move(fr, to, capturing=capturing, pawn_move=True))

    # --- Make / takeback ---
    def make_move(self, move: Move, trial: bool = False) -> bool:
        """Apply ``move`` in place; revert it if it leaves the mover in check.

        Args:
            move (Move): Move to apply.
            trial (bool): The caller takes the move back straight away. Such a
                move may use the history slot reserved past capacity.

        Returns:
            bool: True if the move stands, False if it was taken back.

        Raises:
            UnsupportedMove: For castling moves. Nothing is mutated.
            IllegalMove: If there is no piece of the side to move on
                ``from_sq`` or a promotion lacks its piece. Nothing is mutated.
            HistoryOverflow: If the history is full (for trial moves, past the
                reserved slot). Nothing is mutated.
            MissingKing: If the mover has no king. The move is taken back first.
        """
        if move.castling:
            raise UnsupportedMove("castling is not implemented")
        mover = self.squares[move.from_sq]
        if mover is None or mover.color is not self.side_to_move:
            raise IllegalMove(
                f"no {self.side_to_move.name.lower()} piece on {square_to_str(move.from_sq)}"
            )
        if move.promoting and move.promotion not in PROMOTION_KINDS:
            raise IllegalMove("promotion requires a knight, bishop, rook or queen")

        behind: Optional[int] = None
        if move.en_passant:
            behind = move.to_sq + EN_PASSANT_BEHIND[self.side_to_move]
            if not 0 <= behind < 64:
                raise IllegalMove("en passant capture square is off the board")

        self.history.push(
            Snapshot(
                move=move,
                moved=mover,
                captured=self.squares[move.to_sq],
                en_passant_victim=self.squares[behind] if behind is not None else None,
            ),
            trial=trial,
        )

        # The piece leaves before it arrives, so from_sq == to_sq stays consistent.
        self.squares[move.from_sq] = None
        promo = move.promotion
        if move.promoting and promo is not None:
            self.squares[move.to_sq] = Piece(promo, mover.color)
        else:
            self.squares[move.to_sq] = mover
        if behind is not None:
            self.squares[behind] = None

        if self.side_to_move is Color.BLACK:
            self.fullmove_number += 1
        self.side_to_move = self.xside

        try:
            exposed = self.in_check(self.xside)
        except MissingKing:
            self.takeback()
            raise
        if exposed:
            self.takeback()
            logger.debug("rejected %s: leaves own king in check", move.to_coordinate())
            return False
        return True

    def takeback(self) -> Snapshot:
        """Undo the last applied move in place.

        Returns:
            Snapshot: The consumed history entry.

        Raises:
            EmptyHistory: If no move has been applied.
        """
        snap = self.history.pop()
        move = snap.move
        self.side_to_move = self.xside
        if self.side_to_move is Color.BLACK:
            self.fullmove_number -= 1

        self.squares[move.from_sq] = snap.moved
        self.squares[move.to_sq] = snap.captured
        if move.en_passant:
            behind = move.to_sq + EN_PASSANT_BEHIND[self.side_to_move]
            self.squares[behind] = snap.en_passant_victim
        return snap
