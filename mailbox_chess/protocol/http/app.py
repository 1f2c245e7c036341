from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    engine_exception_handler,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore
from ...engine.errors import ChessError, ParseError
from ...engine.game import Game
from ...engine.history import DEFAULT_HISTORY_CAPACITY
from ...engine.move import Move, parse_coordinate_move
from ...engine.perft import perft as perft_nodes
from ...engine.pieces import Color


logger = logging.getLogger(__name__)

MAX_PERFT_DEPTH = 3


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Coordinate move string, e.g., e2e4 or e7e8q")


class PerftRequest(BaseModel):
    fen: str = Field(..., min_length=1)
    depth: int = Field(default=1, ge=0, le=MAX_PERFT_DEPTH)


class MoveInfo(BaseModel):
    move: str
    capturing: bool
    pawn_pushing: bool
    promoting: bool


class GameState(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    board: List[str] = Field(..., description="64 squares from a8 to h1, '.' when empty")
    legal_moves: List[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    last_move: Optional[str]
    move_history: List[str]
    history_idx: int


class MoveResponse(BaseModel):
    accepted: bool
    error: Optional[str]
    state: GameState


def create_app(
    history_capacity: int = DEFAULT_HISTORY_CAPACITY,
    log_level: int | str = logging.INFO,
) -> FastAPI:
    app = FastAPI(title="Mailbox Chess API", version="0.1.0")

    logging.basicConfig(level=log_level)
    # basicConfig is a no-op once the root logger has handlers.
    logging.getLogger().setLevel(log_level)

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ChessError, engine_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore(factory=lambda: Game.new(history_capacity))

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    def create_game() -> CreateGameResponse:
        game_id = store.create()
        with store.locked(game_id) as game:
            game = _require(game)
            logger.info("created game %s", game_id)
            return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    def get_state(game_id: str) -> GameState:
        with store.locked(game_id) as game:
            return _state(game_id, _require(game))

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require(store.get(game_id))
        try:
            new_game = Game.from_fen(req.fen, history_capacity)
        except ParseError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        store.set(game_id, new_game)
        with store.locked(game_id) as game:
            return _state(game_id, _require(game))

    @app.get("/api/games/{game_id}/moves", response_model=List[MoveInfo])
    def pseudo_legal_moves(
        game_id: str, side: Optional[str] = Query(default=None, pattern="^[wb]$")
    ) -> List[MoveInfo]:
        with store.locked(game_id) as game:
            game = _require(game)
            color = Color.from_code(side) if side else None
            return [_move_info(m) for m in game.generate_moves(color)]

    @app.post("/api/games/{game_id}/move", response_model=MoveResponse)
    def make_move(game_id: str, req: MoveRequest) -> MoveResponse:
        # ParseError and UnsupportedMove are rendered by the engine error handler.
        move = parse_coordinate_move(req.move)
        with store.locked(game_id) as game:
            game = _require(game)
            result = game.attempt_move(move)
            return MoveResponse(
                accepted=result.accepted,
                error=str(result.error) if result.error is not None else None,
                state=_state(game_id, game),
            )

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    def undo(game_id: str) -> GameState:
        with store.locked(game_id) as game:
            game = _require(game)
            game.undo_move()
            return _state(game_id, game)

    @app.delete("/api/games/{game_id}")
    def delete_game(game_id: str) -> Dict[str, str]:
        _require(store.get(game_id))
        store.delete(game_id)
        return {"status": "deleted"}

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, int]:
        try:
            game = Game.from_fen(req.fen, max(history_capacity, req.depth))
        except ParseError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(game.board, req.depth), "depth": req.depth}

    return app


def _require(game: Optional[Game]) -> Game:
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _move_info(m: Move) -> MoveInfo:
    return MoveInfo(
        move=m.to_coordinate(),
        capturing=m.capturing,
        pawn_pushing=m.pawn_pushing,
        promoting=m.promoting,
    )


def _state(game_id: str, game: Game) -> GameState:
    history = game.move_history()
    in_check = _safe_in_check(game)
    if in_check is None:
        legal: List[Move] = []
        no_moves = False
    else:
        legal = game.legal_moves()
        no_moves = not legal
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=game.side_to_move.code,
        board=game.board_snapshot().symbols(),
        legal_moves=[m.to_coordinate() for m in legal],
        in_check=bool(in_check),
        checkmate=no_moves and bool(in_check),
        stalemate=no_moves and in_check is False,
        last_move=history[-1] if history else None,
        move_history=history,
        history_idx=game.board.history_idx,
    )


def _safe_in_check(game: Game) -> Optional[bool]:
    # Positions loaded from FEN may lack a king; report no status rather than fail.
    ks = game.board.king_square(game.side_to_move)
    if ks is None:
        return None
    return game.is_in_check()


# Default app for non-factory servers
app = create_app()
