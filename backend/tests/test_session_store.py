import asyncio

import pytest

from conftest import FakeGeminiModel, ask_tutor
from relativity_explorer.models.session import TutorMode
from relativity_explorer.services import playback
from relativity_explorer.services.ai_tutor import FALLBACK_MESSAGE, AITutor
from relativity_explorer.services.session_store import SessionNotFound, SessionStore


def test_create_and_get(store):
    session_id, state = store.create()
    assert store.get(session_id) == state
    assert state.step_index == 0 and state.time == 0.0 and state.playing


def test_unknown_session(store):
    with pytest.raises(SessionNotFound):
        store.get("missing")
    with pytest.raises(SessionNotFound):
        store.delete("missing")


def test_apply_stores_result(store):
    session_id, _ = store.create()
    store.apply(session_id, playback.go_to_step, 4)
    state = store.apply(session_id, playback.tick)
    assert store.get(session_id) is state
    assert state.step_index == 4
    assert state.time == pytest.approx(0.25)


def test_oldest_session_evicted():
    store = SessionStore(max_sessions=2, tutor=AITutor(model=FakeGeminiModel()))
    first, _ = store.create()
    store.create()
    store.create()
    assert len(store) == 2
    with pytest.raises(SessionNotFound):
        store.get(first)


def test_tutor_success(store, fake_model):
    session_id, _ = store.create()
    assert asyncio.run(ask_tutor(store, session_id, TutorMode.EXPLAIN))

    state = store.get(session_id)
    assert state.tutor.response == "Hello"
    assert not state.tutor.loading
    assert not state.playing
    assert len(fake_model.prompts) == 1


def test_tutor_failure_clears_loading(failing_model):
    store = SessionStore(tutor=AITutor(model=failing_model))
    session_id, _ = store.create()
    asyncio.run(ask_tutor(store, session_id, TutorMode.QUIZ))

    state = store.get(session_id)
    assert state.tutor.response == FALLBACK_MESSAGE
    assert not state.tutor.loading


def test_second_request_while_pending_is_ignored(store, fake_model):
    session_id, _ = store.create()
    token = store.start_tutor(session_id, TutorMode.EXPLAIN)
    pending = store.get(session_id)

    assert not asyncio.run(ask_tutor(store, session_id, TutorMode.QUIZ))
    assert store.get(session_id) is pending
    assert pending.tutor.loading
    assert fake_model.prompts == []

    asyncio.run(store.run_tutor_request(session_id, token, TutorMode.EXPLAIN, 0))
    assert store.get(session_id).tutor.response == "Hello"


def test_stale_response_after_navigation_is_dropped(store):
    session_id, _ = store.create()
    token = store.start_tutor(session_id, TutorMode.EXPLAIN)
    store.apply(session_id, playback.next_step)

    asyncio.run(store.run_tutor_request(session_id, token, TutorMode.EXPLAIN, 0))
    state = store.get(session_id)
    assert state.tutor.response is None
    assert state.step_index == 1
    assert state.playing


def test_response_for_closed_session_is_dropped(store):
    session_id, _ = store.create()
    token = store.start_tutor(session_id, TutorMode.EXPLAIN)
    store.delete(session_id)
    asyncio.run(store.run_tutor_request(session_id, token, TutorMode.EXPLAIN, 0))
    assert len(store) == 0
