"""
Playback session routes.

Each session is one viewer's presentation state. The front end calls
/tick once per display refresh and redraws from the returned snapshot.
"""
import logging
from typing import Literal

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from pydantic import BaseModel, Field

from relativity_explorer.api.deps import get_session_state, get_store
from relativity_explorer.api.routes.lessons import LessonResponse, lesson_response
from relativity_explorer.api.routes.scene import MEDIA_TYPES, SceneResponse, frame_response, scene_response
from relativity_explorer.config import get_settings
from relativity_explorer.models.lesson import STEPS
from relativity_explorer.models.session import TUTOR_LOADING_TEXT, Perspective, SessionState, TutorMode
from relativity_explorer.services import playback
from relativity_explorer.services.scene import evaluate_scene
from relativity_explorer.services.session_store import SessionStore

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


# Schemas
class TutorResponse(BaseModel):
    mode: str
    loading: bool
    response: str | None
    visible: bool
    title: str | None
    loading_text: str
    token: int


class SessionResponse(BaseModel):
    session_id: str
    step_index: int
    time: float
    playing: bool
    status_label: str
    perspective: str
    can_go_previous: bool
    can_go_next: bool
    step: LessonResponse
    scene: SceneResponse
    tutor: TutorResponse


class TickRequest(BaseModel):
    elapsed: float | None = Field(default=None, ge=0, description="Seconds since the previous tick")


class NavigateRequest(BaseModel):
    action: Literal["previous", "next", "jump"]
    index: int | None = None


class PerspectiveRequest(BaseModel):
    perspective: Perspective


class TutorRequest(BaseModel):
    mode: TutorMode


class TutorStartResponse(BaseModel):
    session_id: str
    mode: str
    token: int
    status: str


def session_response(session_id: str, state: SessionState) -> SessionResponse:
    step = STEPS[state.step_index]
    snapshot = evaluate_scene(state.time, step, state.perspective)
    tutor = state.tutor
    return SessionResponse(
        session_id=session_id,
        step_index=state.step_index,
        time=state.time,
        playing=state.playing,
        status_label=state.status_label,
        perspective=state.perspective.value,
        can_go_previous=playback.can_go_previous(state),
        can_go_next=playback.can_go_next(state),
        step=lesson_response(state.step_index, step),
        scene=scene_response(snapshot),
        tutor=TutorResponse(
            mode=tutor.mode.value,
            loading=tutor.loading,
            response=tutor.response,
            visible=tutor.visible,
            title=tutor.title,
            loading_text=TUTOR_LOADING_TEXT,
            token=tutor.token,
        ),
    )


# Routes
@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(store: SessionStore = Depends(get_store)):
    session_id, state = store.create()
    return session_response(session_id, state)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, state: SessionState = Depends(get_session_state)):
    return session_response(session_id, state)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    _state: SessionState = Depends(get_session_state),
    store: SessionStore = Depends(get_store),
):
    store.delete(session_id)


@router.post("/{session_id}/tick", response_model=SessionResponse)
async def tick_session(
    session_id: str,
    request: TickRequest | None = None,
    _state: SessionState = Depends(get_session_state),
    store: SessionStore = Depends(get_store),
):
    elapsed = request.elapsed if request else None
    state = store.apply(session_id, playback.tick, elapsed, settings.frame_interval_seconds)
    return session_response(session_id, state)


@router.post("/{session_id}/toggle", response_model=SessionResponse)
async def toggle_session(
    session_id: str,
    _state: SessionState = Depends(get_session_state),
    store: SessionStore = Depends(get_store),
):
    state = store.apply(session_id, playback.toggle_playback)
    return session_response(session_id, state)


@router.post("/{session_id}/navigate", response_model=SessionResponse)
async def navigate_session(
    session_id: str,
    request: NavigateRequest,
    _state: SessionState = Depends(get_session_state),
    store: SessionStore = Depends(get_store),
):
    if request.action == "previous":
        state = store.apply(session_id, playback.previous_step)
    elif request.action == "next":
        state = store.apply(session_id, playback.next_step)
    else:
        if request.index is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Jump requires an index",
            )
        state = store.apply(session_id, playback.go_to_step, request.index)
    return session_response(session_id, state)


@router.put("/{session_id}/perspective", response_model=SessionResponse)
async def set_perspective(
    session_id: str,
    request: PerspectiveRequest,
    _state: SessionState = Depends(get_session_state),
    store: SessionStore = Depends(get_store),
):
    state = store.apply(session_id, playback.set_perspective, request.perspective)
    return session_response(session_id, state)


@router.get("/{session_id}/frame.{fmt}")
def get_session_frame(
    session_id: str,
    fmt: str,
    state: SessionState = Depends(get_session_state),
):
    if fmt not in MEDIA_TYPES:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unsupported frame format: {fmt}",
        )
    snapshot = evaluate_scene(state.time, STEPS[state.step_index], state.perspective)
    return frame_response(snapshot, state.step_index, state.perspective, fmt)


# ── Tutor ──────────────────────────────────────────────────────────────


@router.post(
    "/{session_id}/tutor",
    response_model=TutorStartResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def start_tutor(
    session_id: str,
    request: TutorRequest,
    background_tasks: BackgroundTasks,
    state: SessionState = Depends(get_session_state),
    store: SessionStore = Depends(get_store),
):
    """Start an explain/quiz request; poll the session for the answer."""
    if request.mode == TutorMode.NONE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tutor mode must be explain or quiz",
        )

    token = store.start_tutor(session_id, request.mode)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A tutor request is already pending",
        )

    logger.info("Tutor %s requested for session %s (token %d)", request.mode.value, session_id, token)
    background_tasks.add_task(
        store.run_tutor_request,
        session_id,
        token,
        request.mode,
        state.step_index,
    )

    return TutorStartResponse(
        session_id=session_id,
        mode=request.mode.value,
        token=token,
        status="loading",
    )


@router.delete("/{session_id}/tutor", response_model=SessionResponse)
async def dismiss_tutor(
    session_id: str,
    _state: SessionState = Depends(get_session_state),
    store: SessionStore = Depends(get_store),
):
    state = store.apply(session_id, playback.dismiss_tutor)
    return session_response(session_id, state)
