"""
Session API endpoints - Movement, choices and map views for a play session
"""

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from glyphworld.engine.protocols import TurnCollaborator
from glyphworld.engine.session import GameSession
from glyphworld.models.game import GameState
from glyphworld.models.movement import Direction, MoveOutcome, MoveOutcomeType
from glyphworld.models.scene import Scene
from glyphworld.models.world import Container, GameStatus, TurnPayload

logger = logging.getLogger(__name__)

router = APIRouter()

OPENING_CHOICE = "Wake up and take in your surroundings."

# In-memory sessions (a single process serves each session)
sessions: dict[str, GameSession] = {}


@lru_cache(maxsize=1)
def _default_collaborator() -> TurnCollaborator:
    from glyphworld.llm.turn_generator import LLMTurnGenerator

    return LLMTurnGenerator()


def get_turn_collaborator() -> TurnCollaborator:
    """Turn collaborator for new sessions; overridden in tests."""
    return _default_collaborator()


class NewSessionRequest(BaseModel):
    """Request to start a new session"""

    player_name: str = "Player"
    opening: TurnPayload | None = None  # Skip generation and start from this turn


class MoveRequest(BaseModel):
    direction: Direction


class ChoiceRequest(BaseModel):
    text: str


class TakeRequest(BaseModel):
    item: str | None = None  # None takes everything


class SessionResponse(BaseModel):
    """Session state snapshot"""

    session_id: str
    state: GameState
    active_container: Container | None = None
    recenter: bool = False  # Only set on responses to state-changing requests


class MoveResponse(SessionResponse):
    outcome: MoveOutcome


class CellResponse(BaseModel):
    x: int
    y: int
    description: str


def _get_session(session_id: str) -> GameSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Game session not found")
    return session


def _ensure_playable(session: GameSession) -> None:
    if session.busy:
        raise HTTPException(status_code=409, detail="A turn is already in progress")
    if session.get_state().status != GameStatus.ALIVE:
        raise HTTPException(status_code=409, detail="The game is over")


def _snapshot(session: GameSession, recenter: bool = False) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        state=session.get_state(),
        active_container=session.active_container,
        recenter=recenter,
    )


@router.post("/new", response_model=SessionResponse)
async def new_session(
    request: NewSessionRequest,
    collaborator: TurnCollaborator = Depends(get_turn_collaborator),
):
    """Start a new session from a supplied or generated opening turn"""
    session = GameSession(collaborator, player_name=request.player_name)

    opening = request.opening
    if opening is None:
        opening = await collaborator.generate_turn(session.get_state(), OPENING_CHOICE)

    session.start(opening)
    sessions[session.session_id] = session
    logger.info(f"Started session {session.session_id} at '{session.get_state().location}'")
    return _snapshot(session, recenter=session.should_recenter())


@router.post("/{session_id}/move", response_model=MoveResponse)
async def move(session_id: str, request: MoveRequest):
    """Take one step; steps that need a full turn play it before returning"""
    session = _get_session(session_id)
    _ensure_playable(session)

    outcome = await session.move(request.direction)
    if outcome.type == MoveOutcomeType.IGNORED and outcome.reason == "turn_in_flight":
        raise HTTPException(status_code=409, detail="A turn is already in progress")

    snapshot = _snapshot(session, recenter=session.should_recenter())
    return MoveResponse(**snapshot.model_dump(), outcome=outcome)


@router.post("/{session_id}/choice", response_model=SessionResponse)
async def choose(session_id: str, request: ChoiceRequest):
    """Play a full turn for an offered option or a custom action"""
    session = _get_session(session_id)
    _ensure_playable(session)

    text = request.text.strip()
    if not text:
        raise HTTPException(status_code=422, detail="Choice text must not be empty")

    await session.choose(text)
    return _snapshot(session, recenter=session.should_recenter())


@router.get("/{session_id}/state", response_model=SessionResponse)
async def get_state(session_id: str):
    """Get current session state"""
    return _snapshot(_get_session(session_id))


@router.get("/{session_id}/scene", response_model=Scene)
async def get_scene(session_id: str):
    """Get the 3D scene projected from the current map"""
    return _get_session(session_id).scene()


@router.get("/{session_id}/cell", response_model=CellResponse)
async def describe_cell(
    session_id: str,
    x: int = Query(..., ge=0),
    y: int = Query(..., ge=0),
):
    """Describe what a map cell represents"""
    session = _get_session(session_id)
    return CellResponse(x=x, y=y, description=session.describe(x, y))


@router.post("/{session_id}/container/take", response_model=SessionResponse)
async def take_from_container(session_id: str, request: TakeRequest):
    """Take one item, or everything, from the container opened by the last step"""
    session = _get_session(session_id)
    _ensure_playable(session)

    if session.active_container is None:
        raise HTTPException(status_code=409, detail="No container is open")

    if request.item is None:
        session.take_all()
    elif not session.take_item(request.item):
        raise HTTPException(status_code=404, detail=f"'{request.item}' is not in the container")
    return _snapshot(session)
