import os
import tempfile
from types import SimpleNamespace

import pytest

# Must run before relativity_explorer is imported: settings are cached on first use
os.environ.setdefault("OUTPUT_DIR", tempfile.mkdtemp(prefix="relativity-explorer-"))
os.environ["GEMINI_API_KEY"] = ""

from relativity_explorer.services.ai_tutor import AITutor  # noqa: E402
from relativity_explorer.services.session_store import SessionStore  # noqa: E402


def gemini_response(text: str):
    """Shape of a google.generativeai response with a single text candidate."""
    part = SimpleNamespace(text=text)
    candidate = SimpleNamespace(content=SimpleNamespace(parts=[part]))
    return SimpleNamespace(candidates=[candidate])


class FakeGeminiModel:
    """Stands in for genai.GenerativeModel; records every prompt it is sent."""

    def __init__(self, text: str = "Hello", error: Exception | None = None, response=None):
        self.text = text
        self.error = error
        self.response = response
        self.prompts: list[str] = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.response if self.response is not None else gemini_response(self.text)


async def ask_tutor(store: SessionStore, session_id: str, mode) -> bool:
    """Start a tutor request and run it to completion, the way the tutor route does."""
    step_index = store.get(session_id).step_index
    token = store.start_tutor(session_id, mode)
    if token is None:
        return False
    await store.run_tutor_request(session_id, token, mode, step_index)
    return True


@pytest.fixture
def fake_model():
    return FakeGeminiModel()


@pytest.fixture
def failing_model():
    return FakeGeminiModel(error=ConnectionError("network unreachable"))


@pytest.fixture
def store(fake_model):
    return SessionStore(max_sessions=10, tutor=AITutor(model=fake_model))
