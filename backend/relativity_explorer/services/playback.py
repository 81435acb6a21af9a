"""
Playback state machine for one viewer.

Every transition takes a SessionState and returns a new one; nothing here
mutates or keeps state of its own. The display-refresh driver calls tick()
with the real elapsed time since its previous call.
"""
from dataclasses import replace

from relativity_explorer.models.lesson import LAST_STEP_INDEX, STEPS
from relativity_explorer.models.session import Perspective, SessionState, TutorMode, TutorState

FRAME_INTERVAL = 1 / 60  # seconds per display refresh
TIME_PER_FRAME = 0.5     # time units per refresh at animation_speed 1
TIME_CEILING = 100


def tick(
    state: SessionState,
    elapsed: float | None = None,
    frame_interval: float = FRAME_INTERVAL,
) -> SessionState:
    """
    Advance the animation clock by ``elapsed`` seconds (one frame by default).

    Wrapping is a single compare-and-reset to zero, not a modulo: the
    per-frame increment is far below the ceiling.
    """
    if not state.playing:
        return state

    frames = 1.0 if elapsed is None else max(elapsed, 0.0) / frame_interval
    speed = STEPS[state.step_index].animation_speed
    time = state.time + speed * TIME_PER_FRAME * frames
    if time >= TIME_CEILING:
        time = 0.0
    return replace(state, time=time)


def toggle_playback(state: SessionState) -> SessionState:
    return replace(state, playing=not state.playing)


def go_to_step(state: SessionState, index: int) -> SessionState:
    """Jump to ``index`` (clamped), restart the clock and drop any tutor panel."""
    index = min(max(index, 0), LAST_STEP_INDEX)
    return replace(
        state,
        step_index=index,
        time=0.0,
        playing=True,
        tutor=_cleared_tutor(state.tutor),
    )


def previous_step(state: SessionState) -> SessionState:
    if state.step_index == 0:
        return state
    return go_to_step(state, state.step_index - 1)


def next_step(state: SessionState) -> SessionState:
    if state.step_index == LAST_STEP_INDEX:
        return state
    return go_to_step(state, state.step_index + 1)


def can_go_previous(state: SessionState) -> bool:
    return state.step_index > 0


def can_go_next(state: SessionState) -> bool:
    return state.step_index < LAST_STEP_INDEX


def set_perspective(state: SessionState, perspective: Perspective) -> SessionState:
    return replace(state, perspective=perspective)


# ── Tutor interaction ──────────────────────────────────────────────────


def _cleared_tutor(tutor: TutorState) -> TutorState:
    # Bumping the token orphans whatever request is still in flight
    return TutorState(token=tutor.token + 1)


def begin_tutor_request(state: SessionState, mode: TutorMode) -> tuple[SessionState, int | None]:
    """
    Start a tutor request: pause, clear the previous answer, mark loading.

    Returns the new state and the request token, or the unchanged state and
    None when a request is already pending.
    """
    if state.tutor.loading:
        return state, None
    if mode == TutorMode.NONE:
        raise ValueError("Tutor request needs a mode")

    token = state.tutor.token + 1
    tutor = TutorState(mode=mode, loading=True, response=None, token=token)
    return replace(state, playing=False, tutor=tutor), token


def complete_tutor_request(state: SessionState, token: int, text: str) -> SessionState:
    """Apply a finished request, unless a newer action has superseded it."""
    if token != state.tutor.token or not state.tutor.loading:
        return state
    return replace(state, tutor=replace(state.tutor, loading=False, response=text))


def dismiss_tutor(state: SessionState) -> SessionState:
    return replace(state, tutor=_cleared_tutor(state.tutor))
