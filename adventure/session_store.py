from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from datetime import UTC, datetime
from uuid import UUID, uuid4

import redis

from adventure.api.models import (
    AdventureEvent,
    Effect,
    EventChoice,
    EventOutcome,
    HistoryEntry,
    PlayerState,
    PlayerStateUpdate,
    PresentedEvent,
    SessionPhase,
    SessionRecord,
)
from adventure.catalog.registry import EventCatalog, EventNotFoundError
from adventure.engine import DEFAULT_NARRATION_TIMEOUT_S, AdventureEngine
from adventure.fsm import SessionFSM
from adventure.lock import lock_ttl_ms, session_lock
from adventure.narration.base import DescriptionProvider
from adventure.narration.template import TemplateDescriptionProvider

logger = logging.getLogger(__name__)

SESSIONS_SET_KEY = "adventure:sessions"
SESSION_KEY_PREFIX = "adventure:session:"  # + {uuid}


class SessionNotFoundError(ValueError):
    pass


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _session_key(session_id: UUID) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


def save_session(*, r: redis.Redis, session: SessionRecord) -> None:
    session.last_updated_at = _now()
    r.set(_session_key(session.session_id), session.model_dump_json())


def get_session(*, r: redis.Redis, session_id: UUID) -> SessionRecord | None:
    raw = r.get(_session_key(session_id))
    if not raw:
        return None
    return SessionRecord.model_validate_json(raw)


def require_session(*, r: redis.Redis, session_id: UUID) -> SessionRecord:
    session = get_session(r=r, session_id=session_id)
    if session is None:
        raise SessionNotFoundError("Session not found")
    return session


def create_session(*, r: redis.Redis, seed: int | None = None) -> SessionRecord:
    now = _now()
    session = SessionRecord(
        session_id=uuid4(),
        created_at=now,
        last_updated_at=now,
        seed=seed if seed is not None else random.SystemRandom().randint(1, 2**31 - 1),
        phase=SessionPhase.awaiting_event,
        player=PlayerState(),
    )

    r.set(_session_key(session.session_id), session.model_dump_json())
    r.sadd(SESSIONS_SET_KEY, str(session.session_id))
    logger.info("Created session %s (seed=%s)", session.session_id, session.seed)
    return session


def list_sessions(*, r: redis.Redis) -> list[SessionRecord]:
    ids = sorted(r.smembers(SESSIONS_SET_KEY))
    out: list[SessionRecord] = []
    for sid in ids:
        try:
            session_id = UUID(sid)
        except ValueError:
            continue
        session = get_session(r=r, session_id=session_id)
        if session is not None:
            out.append(session)
    out.sort(key=lambda s: s.created_at, reverse=True)
    return out


def _rng_for(session: SessionRecord) -> random.Random:
    # One draw per resolved event, so a session replays deterministically from its seed.
    return random.Random(f"{session.seed}:{len(session.history)}")


def engine_for(
    session: SessionRecord,
    *,
    catalog: EventCatalog,
    provider: DescriptionProvider | None = None,
    narration_timeout_s: float = DEFAULT_NARRATION_TIMEOUT_S,
) -> AdventureEngine:
    return AdventureEngine(
        catalog,
        provider or TemplateDescriptionProvider(),
        state=session.player,
        rng=_rng_for(session),
        narration_timeout_s=narration_timeout_s,
    )


def list_session_eligible(*, r: redis.Redis, session_id: UUID, catalog: EventCatalog) -> list[AdventureEvent]:
    session = require_session(r=r, session_id=session_id)
    return engine_for(session, catalog=catalog).list_eligible()


async def present_event(
    *,
    r: redis.Redis,
    session_id: UUID,
    catalog: EventCatalog,
    provider: DescriptionProvider,
    narration_timeout_s: float = DEFAULT_NARRATION_TIMEOUT_S,
) -> PresentedEvent:
    """Draw the next event for the session, or report that nothing is left."""

    with session_lock(r=r, session_id=str(session_id), ttl_ms=lock_ttl_ms(narration_timeout_s)):
        session = require_session(r=r, session_id=session_id)
        fsm = SessionFSM(session)

        if fsm.current_state == fsm.event_presented:
            raise ValueError("An event is already awaiting a choice")

        engine = engine_for(session, catalog=catalog, provider=provider, narration_timeout_s=narration_timeout_s)
        event = engine.pick_random()

        # Moving on forfeits any follow-up still open on the previous outcome.
        session.last_outcome = None

        if event is None:
            if fsm.current_state == fsm.awaiting_event:
                fsm.exhaust()
                fsm.sync_phase_to_model()
                save_session(r=r, session=session)
                logger.info("Session %s has no eligible events left", session_id)
            return PresentedEvent(event=None, description=None)

        description = await engine.describe(event)

        fsm.present()
        fsm.sync_phase_to_model()
        session.current_event_id = event.id
        save_session(r=r, session=session)
        logger.info("Session %s presented event %s", session_id, event.id)

        return PresentedEvent(event=event, description=description)


async def resolve_choice(
    *,
    r: redis.Redis,
    session_id: UUID,
    choice_index: int,
    catalog: EventCatalog,
    provider: DescriptionProvider,
    narration_timeout_s: float = DEFAULT_NARRATION_TIMEOUT_S,
) -> EventOutcome:
    with session_lock(r=r, session_id=str(session_id), ttl_ms=lock_ttl_ms(narration_timeout_s)):
        session = require_session(r=r, session_id=session_id)
        fsm = SessionFSM(session)

        if fsm.current_state != fsm.event_presented or session.current_event_id is None:
            raise ValueError("No event is awaiting a choice")

        try:
            event = catalog.require(session.current_event_id)
        except EventNotFoundError as e:
            raise ValueError(f"Presented event is no longer in the catalog: {session.current_event_id}") from e

        engine = engine_for(session, catalog=catalog, provider=provider, narration_timeout_s=narration_timeout_s)
        # InvalidChoiceIndex propagates from here before anything is saved.
        outcome = await engine.process(event, choice_index)

        session.player = engine.get_player_state()
        session.history.append(
            HistoryEntry(
                seq=len(session.history) + 1,
                event_id=event.id,
                choice_index=choice_index,
                choice_label=event.choices[choice_index],
                created_at=_now(),
            )
        )
        session.current_event_id = None
        session.last_outcome = outcome

        fsm.resolve()
        fsm.sync_phase_to_model()
        save_session(r=r, session=session)
        logger.info("Session %s resolved event %s with choice %d", session_id, event.id, choice_index)

        return outcome


def resolve_follow_up(
    *,
    r: redis.Redis,
    session_id: UUID,
    choice: EventChoice,
    catalog: EventCatalog,
) -> SessionRecord:
    """Apply one of the options offered by the last outcome."""

    with session_lock(r=r, session_id=str(session_id)):
        session = require_session(r=r, session_id=session_id)

        fsm = SessionFSM(session)
        if fsm.current_state != fsm.awaiting_event:
            raise ValueError("Follow-ups are only accepted between events")
        if session.last_outcome is None or choice not in session.last_outcome.choices:
            raise ValueError("Choice is not offered by the last outcome")

        engine = engine_for(session, catalog=catalog)
        engine.apply_follow_up(choice)

        session.player = engine.get_player_state()
        session.last_outcome = None
        save_session(r=r, session=session)
        return session


def apply_session_effects(
    *,
    r: redis.Redis,
    session_id: UUID,
    effects: Sequence[Effect],
    catalog: EventCatalog,
) -> SessionRecord:
    with session_lock(r=r, session_id=str(session_id)):
        session = require_session(r=r, session_id=session_id)

        engine = engine_for(session, catalog=catalog)
        engine.apply_effects(effects)

        session.player = engine.get_player_state()
        save_session(r=r, session=session)
        logger.debug("Session %s applied %d effect(s)", session_id, len(effects))
        return session


def update_session_player(
    *,
    r: redis.Redis,
    session_id: UUID,
    update: PlayerStateUpdate,
    catalog: EventCatalog,
) -> SessionRecord:
    with session_lock(r=r, session_id=str(session_id)):
        session = require_session(r=r, session_id=session_id)

        engine = engine_for(session, catalog=catalog)
        engine.update_player_state(update)

        session.player = engine.get_player_state()
        save_session(r=r, session=session)
        return session
