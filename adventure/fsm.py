from __future__ import annotations

from statemachine import State, StateMachine

from adventure.api.models import SessionPhase, SessionRecord


class SessionFSM(StateMachine):
    """FSM wrapper around SessionRecord.

    - phases: awaiting event -> event presented -> awaiting event ... -> exhausted (-> event presented once content unlocks)
    - the service layer mutates the record; the FSM only guards transitions.
    """

    awaiting_event = State(
        SessionPhase.awaiting_event.value,
        value=SessionPhase.awaiting_event.value,
        initial=True,
    )
    event_presented = State(
        SessionPhase.event_presented.value,
        value=SessionPhase.event_presented.value,
    )
    # Not final: new tags (effects, state edits) can unlock content again.
    exhausted = State(SessionPhase.exhausted.value, value=SessionPhase.exhausted.value)

    present = awaiting_event.to(event_presented) | exhausted.to(event_presented)
    resolve = event_presented.to(awaiting_event)
    exhaust = awaiting_event.to(exhausted)

    def __init__(self, session: SessionRecord):
        self.session = session
        super().__init__(start_value=session.phase.value)

    def sync_phase_to_model(self) -> None:
        self.session.phase = SessionPhase(str(self.current_state.value))
