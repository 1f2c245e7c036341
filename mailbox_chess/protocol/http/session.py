from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Optional

from ...engine.game import Game


@dataclass
class _Session:
    game: Game
    lock: threading.RLock = field(default_factory=threading.RLock)


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Hand out a session's game under that session's lock, so a board is never
      observed half-way through make/takeback
    - Replace or delete sessions
    """

    def __init__(self, factory: Optional[Callable[[], Game]] = None) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, _Session] = {}
        self._factory = factory or Game.new

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = self._factory()
        with self._lock:
            self._sessions[gid] = _Session(game)
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            session = self._sessions.get(game_id)
        return session.game if session is not None else None

    @contextmanager
    def locked(self, game_id: str) -> Iterator[Optional[Game]]:
        """Yield the session's game (or None) while holding its lock."""
        with self._lock:
            session = self._sessions.get(game_id)
        if session is None:
            yield None
            return
        with session.lock:
            yield session.game

    def set(self, game_id: str, game: Game) -> None:
        with self._lock:
            session = self._sessions.get(game_id)
            if session is None:
                raise KeyError(game_id)
        with session.lock:
            session.game = game

    def delete(self, game_id: str) -> None:
        with self._lock:
            self._sessions.pop(game_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
