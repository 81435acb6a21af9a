from fastapi import Depends, HTTPException, status

from relativity_explorer.models.lesson import LessonStep, get_step
from relativity_explorer.models.session import SessionState
from relativity_explorer.services.session_store import SessionNotFound, SessionStore, session_store


def get_store() -> SessionStore:
    return session_store


def get_session_state(
    session_id: str,
    store: SessionStore = Depends(get_store),
) -> SessionState:
    try:
        return store.get(session_id)
    except SessionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )


def get_lesson_step(index: int) -> LessonStep:
    try:
        return get_step(index)
    except IndexError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lesson step not found",
        )
