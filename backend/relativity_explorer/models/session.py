from dataclasses import dataclass, field
import enum


class Perspective(str, enum.Enum):
    ALICE = "alice"  # Stationary observer on the platform
    BOB = "bob"  # Moving observer on the train


class TutorMode(str, enum.Enum):
    NONE = "none"
    EXPLAIN = "explain"
    QUIZ = "quiz"


TUTOR_TITLES = {
    TutorMode.EXPLAIN: "Simply Explained",
    TutorMode.QUIZ: "Quick Quiz",
}
TUTOR_LOADING_TEXT = "Consulting Einstein..."


@dataclass(frozen=True)
class TutorState:
    """
    AI interaction state for one session.

    ``token`` is the generation counter of the most recently issued request.
    A completed request is only applied while its token is still current.
    """
    mode: TutorMode = TutorMode.NONE
    loading: bool = False
    response: str | None = None
    token: int = 0

    @property
    def visible(self) -> bool:
        return self.loading or self.response is not None

    @property
    def title(self) -> str | None:
        return TUTOR_TITLES.get(self.mode)


@dataclass(frozen=True)
class SessionState:
    """Everything one viewer's presentation owns, replaced wholesale on each transition."""
    step_index: int = 0
    time: float = 0.0
    playing: bool = True
    perspective: Perspective = Perspective.ALICE
    tutor: TutorState = field(default_factory=TutorState)

    @property
    def status_label(self) -> str:
        return "Simulating..." if self.playing else "Paused"
