from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from ...engine.game import GameState


@dataclass
class _Session:
    game: GameState
    lock: threading.RLock = field(default_factory=threading.RLock)


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique ``game_id``s
    - Hand out a game under its own lock for a whole read or commit
    - Replace and delete sessions

    The engine assumes a single writer; ``transaction`` is the boundary that
    makes attempt, validation and commit one critical section per game.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, _Session] = {}

    def create(self, game: Optional[GameState] = None) -> str:
        """Create a new game session and return its ``game_id``."""
        gid = str(uuid.uuid4())
        if game is None:
            game = GameState.new()
        with self._lock:
            self._sessions[gid] = _Session(game)
        return gid

    def get(self, game_id: str) -> Optional[GameState]:
        with self._lock:
            session = self._sessions.get(game_id)
        return session.game if session is not None else None

    @contextmanager
    def transaction(self, game_id: str) -> Iterator[GameState]:
        """Yield the session's game while holding its lock.

        Raises:
            KeyError: If ``game_id`` is unknown.
        """
        with self._lock:
            session = self._sessions[game_id]
        with session.lock:
            yield session.game

    def replace(self, game_id: str, game: GameState) -> None:
        with self._lock:
            session = self._sessions.get(game_id)
            if session is None:
                raise KeyError(game_id)
        with session.lock:
            session.game = game

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(game_id, None) is not None

    def __contains__(self, game_id: object) -> bool:
        with self._lock:
            return game_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
