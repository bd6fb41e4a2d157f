"""HTTP API entrypoint for driving arena matches from a client."""

from contextlib import asynccontextmanager
from typing import Optional, Tuple

import logfire
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from arena.core.actions import Action
from arena.world import BoardFullError
from infra.logfire_config import configure_logfire
from infra.logger import configure_from_settings
from runtime.registry import MatchRegistry

# Configure observability before the app is used.
configure_logfire()

registry = MatchRegistry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_from_settings(registry.settings, to_logfire=True)
    yield


app = FastAPI(title="Tank Arena", lifespan=lifespan)
logfire.instrument_fastapi(app)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class CreateMatchRequest(BaseModel):
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    seed: Optional[int] = None


class JoinRequest(BaseModel):
    owner_id: str = Field(min_length=1)
    name: str = ""
    picture: str = ""


class ActionRequest(BaseModel):
    owner_id: str = Field(min_length=1)
    kind: str
    destination: Optional[Tuple[int, int]] = None


class HeartRequest(BaseModel):
    destination: Optional[Tuple[int, int]] = None


def _match_or_404(match_id: str):
    try:
        return registry.get_match(match_id)
    except KeyError as exc:
        raise HTTPException(404, str(exc)) from exc


# Every handler is async so match state is only touched from the event loop.

@app.post("/matches")
async def create_match(request: CreateMatchRequest):
    match = await registry.create_match(request.width, request.height, request.seed)
    return {"id": match.id, "width": match.board.width, "height": match.board.height}


@app.get("/matches/{match_id}")
async def get_match(match_id: str):
    match = _match_or_404(match_id)
    return {
        "id": match.id,
        "board": match.board.to_dict(),
        "players": [tank.as_public_view() for tank in match.get_all_tanks()],
        "heart": match.heart_location,
    }


@app.post("/matches/{match_id}/tanks")
async def join(match_id: str, request: JoinRequest):
    _match_or_404(match_id)
    try:
        tank = await registry.join(match_id, request.owner_id, request.name, request.picture)
    except BoardFullError as exc:
        raise HTTPException(409, str(exc)) from exc
    return tank.to_dict()


@app.post("/matches/{match_id}/actions")
async def submit_action(match_id: str, request: ActionRequest):
    _match_or_404(match_id)
    try:
        action = Action.from_dict({"kind": request.kind, "destination": request.destination})
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc

    try:
        result = await registry.submit(match_id, request.owner_id, action)
    except KeyError as exc:
        raise HTTPException(404, str(exc)) from exc
    return result.to_dict()


@app.post("/matches/{match_id}/heart")
async def place_heart(match_id: str, request: HeartRequest):
    _match_or_404(match_id)
    try:
        pos = await registry.place_heart(match_id, request.destination)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    return {"heart": list(pos)}


@app.get("/matches/{match_id}/log")
async def action_log(match_id: str):
    match = _match_or_404(match_id)
    return [record.to_dict() for record in match.action_log]
