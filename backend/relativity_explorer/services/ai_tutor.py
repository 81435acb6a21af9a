import logging

import google.generativeai as genai
from relativity_explorer.config import get_settings
from relativity_explorer.models.lesson import LessonStep
from relativity_explorer.models.session import TutorMode

logger = logging.getLogger(__name__)
settings = get_settings()


SYSTEM_INSTRUCTION = "You are a helpful, fun physics tutor specializing in Special Relativity."

FALLBACK_MESSAGE = "Oops! The AI Tutor is currently taking a nap (Network Error). Try again later!"
EMPTY_RESPONSE_MESSAGE = "No response generated."


EXPLAIN_PROMPT_TEMPLATE = """Explain the physics concept of "{title}: {concept}" to a 12-year-old.
Context from app: {description}.
Use a fun, simple analogy (maybe involving everyday objects or the train in the app).
Keep the response short (max 3 sentences)."""


QUIZ_PROMPT_TEMPLATE = """Generate one single multiple-choice question to test the user's understanding of "{concept}".
Context: {description}.

Format the output exactly like this (no intro text):
**Question:** [The Question]

A) [Option 1]
B) [Option 2]
C) [Option 3]
D) [Option 4]

**Answer:** [Correct Option Letter] - [Brief explanation why]"""


def build_prompt(mode: TutorMode, step: LessonStep) -> str:
    """Fill the template for ``mode`` from the step's text."""
    if mode == TutorMode.EXPLAIN:
        template = EXPLAIN_PROMPT_TEMPLATE
    elif mode == TutorMode.QUIZ:
        template = QUIZ_PROMPT_TEMPLATE
    else:
        raise ValueError(f"No prompt for tutor mode: {mode}")
    return template.format(
        title=step.title,
        concept=step.concept,
        description=step.description,
    )


class AITutor:
    """
    Answers "explain" and "quiz" requests about the current lesson step using Gemini.
    Never raises: any failure becomes FALLBACK_MESSAGE.
    """

    def __init__(self, model=None):
        self.model = model

        if self.model is None and settings.use_tutor:
            genai.configure(api_key=settings.gemini_api_key)
            self.model = genai.GenerativeModel(
                settings.gemini_model,
                system_instruction=SYSTEM_INSTRUCTION,
            )

    @property
    def is_configured(self) -> bool:
        return self.model is not None

    async def request(self, mode: TutorMode, step: LessonStep) -> str:
        """
        Send one prompt and return the tutor's text verbatim.

        Quiz answers are not parsed; the caller shows them as raw text.
        """
        prompt = build_prompt(mode, step)

        if not self.model:
            logger.warning("Gemini API key not configured, tutor unavailable")
            return FALLBACK_MESSAGE

        try:
            response = await self.model.generate_content_async(prompt)
            text = self._extract_text(response)
            logger.info("Tutor %s answered for step: %s", mode.value, step.title)
            return text
        except Exception as e:
            logger.error("Gemini API error: %s", e)
            return FALLBACK_MESSAGE

    @staticmethod
    def _extract_text(response) -> str:
        """Pull candidates[0].content.parts[0].text out of a response."""
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return EMPTY_RESPONSE_MESSAGE
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []
        if not parts:
            return EMPTY_RESPONSE_MESSAGE
        return getattr(parts[0], "text", "") or EMPTY_RESPONSE_MESSAGE


# Singleton instance
ai_tutor = AITutor()
