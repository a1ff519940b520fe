from __future__ import annotations

from uuid import UUID

import redis
from fastapi import APIRouter, Depends, HTTPException, status

from adventure.api.deps import get_description_provider, get_event_catalog, get_redis, get_settings
from adventure.api.models import (
    ChoiceRequest,
    EffectsRequest,
    EligibleEventsResponse,
    EventOutcome,
    FollowUpRequest,
    PlayerState,
    PlayerStateUpdate,
    PresentedEvent,
    SessionCreateRequest,
    SessionListResponse,
    SessionRecord,
)
from adventure.catalog.registry import EventCatalog
from adventure.narration.base import DescriptionProvider
from adventure.session_store import (
    SessionNotFoundError,
    apply_session_effects,
    create_session,
    get_session,
    list_session_eligible,
    list_sessions,
    present_event,
    resolve_choice,
    resolve_follow_up,
    update_session_player,
)
from adventure.settings import EngineSettings

router = APIRouter()


def _http_error(e: ValueError) -> HTTPException:
    if isinstance(e, SessionNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/session", response_model=SessionRecord, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    payload: SessionCreateRequest | None = None,
    r: redis.Redis = Depends(get_redis),
) -> SessionRecord:
    seed = payload.seed if payload is not None else None
    return create_session(r=r, seed=seed)


@router.get("/session", response_model=SessionListResponse)
async def list_sessions_route(r: redis.Redis = Depends(get_redis)) -> SessionListResponse:
    return SessionListResponse(sessions=list_sessions(r=r))


@router.get("/session/{session_id}", response_model=SessionRecord)
async def get_session_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> SessionRecord:
    session = get_session(r=r, session_id=session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


@router.get("/session/{session_id}/state", response_model=PlayerState)
async def get_player_state_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> PlayerState:
    session = get_session(r=r, session_id=session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session.player


@router.patch("/session/{session_id}/state", response_model=PlayerState)
async def update_player_state_route(
    session_id: UUID,
    payload: PlayerStateUpdate,
    r: redis.Redis = Depends(get_redis),
    catalog: EventCatalog = Depends(get_event_catalog),
) -> PlayerState:
    try:
        session = update_session_player(r=r, session_id=session_id, update=payload, catalog=catalog)
    except ValueError as e:
        raise _http_error(e) from e
    return session.player


@router.get("/session/{session_id}/events/eligible", response_model=EligibleEventsResponse)
async def eligible_events_route(
    session_id: UUID,
    r: redis.Redis = Depends(get_redis),
    catalog: EventCatalog = Depends(get_event_catalog),
) -> EligibleEventsResponse:
    try:
        events = list_session_eligible(r=r, session_id=session_id, catalog=catalog)
    except ValueError as e:
        raise _http_error(e) from e
    return EligibleEventsResponse(events=events)


@router.post("/session/{session_id}/event", response_model=PresentedEvent)
async def present_event_route(
    session_id: UUID,
    r: redis.Redis = Depends(get_redis),
    catalog: EventCatalog = Depends(get_event_catalog),
    provider: DescriptionProvider = Depends(get_description_provider),
    settings: EngineSettings = Depends(get_settings),
) -> PresentedEvent:
    """Draw the next event. `event` is null once everything reachable has been explored."""

    try:
        return await present_event(
            r=r,
            session_id=session_id,
            catalog=catalog,
            provider=provider,
            narration_timeout_s=settings.narration_timeout_s,
        )
    except ValueError as e:
        raise _http_error(e) from e


@router.post("/session/{session_id}/choice", response_model=EventOutcome)
async def choice_route(
    session_id: UUID,
    payload: ChoiceRequest,
    r: redis.Redis = Depends(get_redis),
    catalog: EventCatalog = Depends(get_event_catalog),
    provider: DescriptionProvider = Depends(get_description_provider),
    settings: EngineSettings = Depends(get_settings),
) -> EventOutcome:
    try:
        return await resolve_choice(
            r=r,
            session_id=session_id,
            choice_index=payload.choice_index,
            catalog=catalog,
            provider=provider,
            narration_timeout_s=settings.narration_timeout_s,
        )
    except ValueError as e:
        raise _http_error(e) from e


@router.post("/session/{session_id}/follow_up", response_model=PlayerState)
async def follow_up_route(
    session_id: UUID,
    payload: FollowUpRequest,
    r: redis.Redis = Depends(get_redis),
    catalog: EventCatalog = Depends(get_event_catalog),
) -> PlayerState:
    try:
        session = resolve_follow_up(r=r, session_id=session_id, choice=payload.choice, catalog=catalog)
    except ValueError as e:
        raise _http_error(e) from e
    return session.player


@router.post("/session/{session_id}/effects", response_model=PlayerState)
async def effects_route(
    session_id: UUID,
    payload: EffectsRequest,
    r: redis.Redis = Depends(get_redis),
    catalog: EventCatalog = Depends(get_event_catalog),
) -> PlayerState:
    try:
        session = apply_session_effects(r=r, session_id=session_id, effects=payload.effects, catalog=catalog)
    except ValueError as e:
        raise _http_error(e) from e
    return session.player
