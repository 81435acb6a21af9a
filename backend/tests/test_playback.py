import pytest

from relativity_explorer.models.lesson import LAST_STEP_INDEX, STEPS
from relativity_explorer.models.session import Perspective, SessionState, TutorMode, TutorState
from relativity_explorer.services import playback
from relativity_explorer.services.playback import FRAME_INTERVAL


def busy_state(step_index: int) -> SessionState:
    """A paused, mid-loop state with the tutor panel open."""
    return SessionState(
        step_index=step_index,
        time=37.5,
        playing=False,
        perspective=Perspective.BOB,
        tutor=TutorState(mode=TutorMode.QUIZ, loading=False, response="**Question:** ...", token=3),
    )


class TestTick:
    def test_one_frame_by_default(self):
        state = playback.tick(SessionState(step_index=0))
        assert state.time == pytest.approx(STEPS[0].animation_speed * 0.5)

    def test_scales_with_elapsed_time(self):
        state = playback.tick(SessionState(step_index=3), elapsed=2 * FRAME_INTERVAL)
        assert state.time == pytest.approx(STEPS[3].animation_speed * 0.5 * 2)

    def test_zero_elapsed_keeps_time(self):
        state = playback.tick(SessionState(step_index=1, time=12.0), elapsed=0)
        assert state.time == 12.0

    def test_paused_clock_does_not_move(self):
        paused = SessionState(time=20.0, playing=False)
        assert playback.tick(paused) is paused

    def test_wraps_to_zero_at_ceiling(self):
        state = playback.tick(SessionState(step_index=1, time=99.8))
        assert state.time == 0.0

    def test_stays_below_ceiling_over_many_ticks(self):
        state = SessionState(step_index=3)
        for _ in range(1000):
            state = playback.tick(state)
            assert 0 <= state.time < 100


class TestNavigation:
    @pytest.mark.parametrize("source", range(len(STEPS)))
    @pytest.mark.parametrize("target", range(len(STEPS)))
    def test_jump_resets_clock_and_resumes(self, source, target):
        state = playback.go_to_step(busy_state(source), target)
        assert state.step_index == target
        assert state.time == 0.0
        assert state.playing is True
        assert state.tutor.mode == TutorMode.NONE
        assert state.tutor.response is None
        assert not state.tutor.loading

    def test_jump_keeps_perspective(self):
        state = playback.go_to_step(busy_state(2), 4)
        assert state.perspective == Perspective.BOB

    def test_jump_clamps_index(self):
        assert playback.go_to_step(SessionState(), 42).step_index == LAST_STEP_INDEX
        assert playback.go_to_step(SessionState(step_index=3), -5).step_index == 0

    def test_previous_at_first_step_is_noop(self):
        state = busy_state(0)
        assert playback.previous_step(state) is state

    def test_next_at_last_step_is_noop(self):
        state = busy_state(LAST_STEP_INDEX)
        assert playback.next_step(state) is state

    def test_next_and_previous(self):
        state = playback.next_step(busy_state(2))
        assert state.step_index == 3
        assert state.time == 0.0
        state = playback.previous_step(state)
        assert state.step_index == 2

    def test_bounds_affordances(self):
        assert not playback.can_go_previous(SessionState(step_index=0))
        assert playback.can_go_next(SessionState(step_index=0))
        assert not playback.can_go_next(SessionState(step_index=LAST_STEP_INDEX))


def test_toggle_only_flips_playing():
    state = busy_state(4)
    toggled = playback.toggle_playback(state)
    assert toggled.playing is True
    assert toggled.time == state.time
    assert toggled.step_index == state.step_index
    assert playback.toggle_playback(toggled) == state


def test_perspective_leaves_clock_alone():
    state = SessionState(step_index=5, time=40.0)
    switched = playback.set_perspective(state, Perspective.BOB)
    assert switched.perspective == Perspective.BOB
    assert switched.time == 40.0
    assert switched.playing


class TestTutorTransitions:
    def test_begin_pauses_and_marks_loading(self):
        state, token = playback.begin_tutor_request(SessionState(), TutorMode.EXPLAIN)
        assert token == 1
        assert not state.playing
        assert state.tutor.loading
        assert state.tutor.mode == TutorMode.EXPLAIN
        assert state.tutor.response is None

    def test_begin_clears_previous_answer(self):
        state, _ = playback.begin_tutor_request(busy_state(1), TutorMode.EXPLAIN)
        assert state.tutor.response is None

    def test_second_begin_is_ignored(self):
        pending, _ = playback.begin_tutor_request(SessionState(), TutorMode.QUIZ)
        again, token = playback.begin_tutor_request(pending, TutorMode.EXPLAIN)
        assert token is None
        assert again is pending

    def test_begin_needs_a_mode(self):
        with pytest.raises(ValueError):
            playback.begin_tutor_request(SessionState(), TutorMode.NONE)

    def test_complete_applies_current_token(self):
        state, token = playback.begin_tutor_request(SessionState(), TutorMode.QUIZ)
        done = playback.complete_tutor_request(state, token, "Hello")
        assert done.tutor.response == "Hello"
        assert not done.tutor.loading
        assert done.tutor.title == "Quick Quiz"

    def test_complete_after_navigation_is_discarded(self):
        state, token = playback.begin_tutor_request(SessionState(), TutorMode.EXPLAIN)
        moved = playback.next_step(state)
        assert playback.complete_tutor_request(moved, token, "late answer") is moved

    def test_complete_after_dismiss_and_new_request_is_discarded(self):
        state, first = playback.begin_tutor_request(SessionState(), TutorMode.EXPLAIN)
        state = playback.dismiss_tutor(state)
        state, second = playback.begin_tutor_request(state, TutorMode.QUIZ)
        assert second > first

        assert playback.complete_tutor_request(state, first, "stale") is state
        done = playback.complete_tutor_request(state, second, "fresh")
        assert done.tutor.response == "fresh"

    def test_dismiss_hides_panel(self):
        state = playback.dismiss_tutor(busy_state(2))
        assert not state.tutor.visible
        assert state.tutor.mode == TutorMode.NONE
