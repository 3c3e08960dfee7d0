from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field, model_validator

from .error import (
    exception_handler,
    http_exception_handler,
    move_rejected_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore
from ...engine.errors import MoveRejected
from ...engine.game import GameState
from ...engine.move import parse_coordinate_move, parse_square, square_to_str
from ...engine.piece import parse_promotion_kind


logger = logging.getLogger(__name__)


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    """Either ``move`` (``"e2e4"``) or both ``from_square`` and ``to_square``."""

    move: Optional[str] = Field(default=None, description="Coordinate move, e.g. e2e4")
    from_square: Optional[str] = Field(default=None, description="Origin square, e.g. e2")
    to_square: Optional[str] = Field(default=None, description="Destination square, e.g. e4")

    @model_validator(mode="after")
    def _one_form(self) -> "MoveRequest":
        has_pair = self.from_square is not None and self.to_square is not None
        if (self.move is not None) != has_pair:
            return self
        raise ValueError("give either 'move' or both 'from_square' and 'to_square'")


class PromotionRequest(BaseModel):
    piece: str = Field(..., description="q, r, b or n (or the full piece name)")


class SquareView(BaseModel):
    square: str
    kind: str
    side: str


class GameStateResponse(BaseModel):
    game_id: str
    fen: str
    phase: str
    side_to_move: str
    legal_moves: List[str]
    in_check: bool
    ended: bool
    outcome: Optional[str]
    promotion_pending: Optional[str]
    last_move: Optional[str]
    board: List[SquareView]


def create_app(
    store: Optional[InMemorySessionStore] = None, log_level: Union[int, str] = logging.INFO
) -> FastAPI:
    app = FastAPI(title="Chess Rules API", version="0.1.0")

    logging.basicConfig(level=log_level)
    logging.getLogger().setLevel(log_level)

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(MoveRejected, move_rejected_handler)
    app.add_exception_handler(Exception, exception_handler)

    sessions = store if store is not None else InMemorySessionStore()
    app.state.sessions = sessions

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game() -> CreateGameResponse:
        game = GameState.new()
        game_id = sessions.create(game)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameStateResponse)
    async def get_state(game_id: str) -> GameStateResponse:
        with _locked_game(sessions, game_id) as game:
            return _state_response(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameStateResponse)
    async def make_move(game_id: str, req: MoveRequest) -> GameStateResponse:
        with _locked_game(sessions, game_id) as game:
            if req.move is not None:
                from_sq, to_sq = parse_coordinate_move(req.move)
            else:
                from_sq = parse_square(req.from_square or "")
                to_sq = parse_square(req.to_square or "")
            game.attempt_move(from_sq, to_sq)
            return _state_response(game_id, game)

    @app.post("/api/games/{game_id}/promotion", response_model=GameStateResponse)
    async def promote(game_id: str, req: PromotionRequest) -> GameStateResponse:
        with _locked_game(sessions, game_id) as game:
            game.resolve_promotion(parse_promotion_kind(req.piece))
            return _state_response(game_id, game)

    @app.post("/api/games/{game_id}/reset", response_model=GameStateResponse)
    async def reset(game_id: str) -> GameStateResponse:
        with _locked_game(sessions, game_id) as game:
            game.reset()
            return _state_response(game_id, game)

    @app.post("/api/games/{game_id}/position", response_model=GameStateResponse)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameStateResponse:
        try:
            game = GameState.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        try:
            sessions.replace(game_id, game)
        except KeyError:
            raise HTTPException(status_code=404, detail="game not found")
        with _locked_game(sessions, game_id) as current:
            return _state_response(game_id, current)

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not sessions.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted"}

    return app


@contextmanager
def _locked_game(store: InMemorySessionStore, game_id: str) -> Iterator[GameState]:
    if game_id not in store:
        raise HTTPException(status_code=404, detail="game not found")
    with store.transaction(game_id) as game:
        yield game


def _state_response(game_id: str, game: GameState) -> GameStateResponse:
    pending = game.promotion_pending
    return GameStateResponse(
        game_id=game_id,
        fen=game.to_fen(),
        phase=game.phase.value,
        side_to_move=game.side_to_move.name.lower(),
        legal_moves=[m.to_coordinates() for m in game.legal_move_list()],
        in_check=game.in_check(),
        ended=game.is_ended(),
        outcome=game.outcome.value if game.outcome is not None else None,
        promotion_pending=square_to_str(pending) if pending is not None else None,
        last_move=game.last_move.to_coordinates() if game.last_move is not None else None,
        board=[
            SquareView(square=square_to_str(sq), kind=p.kind.name.lower(), side=p.side.name.lower())
            for sq, p in enumerate(game.board.squares)
        ],
    )


# Default app for non-factory servers
app = create_app()
