import asyncio
from types import SimpleNamespace

import pytest

from conftest import FakeGeminiModel
from relativity_explorer.models.lesson import STEPS
from relativity_explorer.models.session import TutorMode
from relativity_explorer.services.ai_tutor import (
    EMPTY_RESPONSE_MESSAGE,
    FALLBACK_MESSAGE,
    AITutor,
    build_prompt,
)


def test_successful_request_returns_text_verbatim(fake_model):
    tutor = AITutor(model=fake_model)
    assert asyncio.run(tutor.request(TutorMode.EXPLAIN, STEPS[0])) == "Hello"
    assert len(fake_model.prompts) == 1


def test_transport_failure_returns_fallback(failing_model):
    tutor = AITutor(model=failing_model)
    assert asyncio.run(tutor.request(TutorMode.EXPLAIN, STEPS[0])) == FALLBACK_MESSAGE


def test_service_error_returns_fallback():
    model = FakeGeminiModel(error=RuntimeError("API key not valid"))
    tutor = AITutor(model=model)
    assert asyncio.run(tutor.request(TutorMode.QUIZ, STEPS[3])) == FALLBACK_MESSAGE


def test_unconfigured_tutor_returns_fallback():
    tutor = AITutor()
    assert not tutor.is_configured
    assert asyncio.run(tutor.request(TutorMode.EXPLAIN, STEPS[0])) == FALLBACK_MESSAGE


@pytest.mark.parametrize("response", [
    SimpleNamespace(candidates=[]),
    SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[]))]),
    SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[SimpleNamespace(text="")]))]),
])
def test_empty_candidate_yields_placeholder(response):
    tutor = AITutor(model=FakeGeminiModel(response=response))
    assert asyncio.run(tutor.request(TutorMode.EXPLAIN, STEPS[0])) == EMPTY_RESPONSE_MESSAGE


def test_quiz_text_is_not_parsed():
    raw = "**Question:** Who is moving?\n\nA) Alice\nB) Bob\nC) Both\nD) Depends\n\n**Answer:** D - frames"
    tutor = AITutor(model=FakeGeminiModel(text=raw))
    assert asyncio.run(tutor.request(TutorMode.QUIZ, STEPS[0])) == raw


def test_explain_prompt_uses_step_text():
    step = STEPS[4]
    prompt = build_prompt(TutorMode.EXPLAIN, step)
    assert f'"{step.title}: {step.concept}"' in prompt
    assert step.description in prompt
    assert "12-year-old" in prompt


def test_quiz_prompt_asks_for_four_options():
    step = STEPS[6]
    prompt = build_prompt(TutorMode.QUIZ, step)
    assert step.concept in prompt
    for letter in "ABCD":
        assert f"{letter}) [Option" in prompt
    assert "**Answer:**" in prompt


def test_prompt_needs_a_mode():
    with pytest.raises(ValueError):
        build_prompt(TutorMode.NONE, STEPS[0])
