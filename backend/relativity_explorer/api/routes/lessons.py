import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from relativity_explorer.api.deps import get_lesson_step
from relativity_explorer.models.lesson import STEPS, LessonStep
from relativity_explorer.models.session import Perspective
from relativity_explorer.services.animation_export import animation_exporter

logger = logging.getLogger(__name__)

router = APIRouter()


# Schemas
class LessonResponse(BaseModel):
    index: int
    number: int
    title: str
    concept: str
    description: str
    visuals: dict[str, bool]
    animation_speed: float
    concept_tags: list[str]


class AnimationRequest(BaseModel):
    perspective: Perspective = Perspective.ALICE
    fps: int = 30
    frame_stride: int = 2


class AnimationResponse(BaseModel):
    step_index: int
    perspective: str
    path: str
    url: str


def lesson_response(index: int, step: LessonStep) -> LessonResponse:
    return LessonResponse(
        index=index,
        number=index + 1,
        title=step.title,
        concept=step.concept,
        description=step.description,
        visuals=step.visuals.as_dict(),
        animation_speed=step.animation_speed,
        concept_tags=step.concept_tags,
    )


# Routes
@router.get("", response_model=list[LessonResponse])
async def list_lessons():
    return [lesson_response(i, step) for i, step in enumerate(STEPS)]


@router.get("/{index}", response_model=LessonResponse)
async def get_lesson(index: int, step: LessonStep = Depends(get_lesson_step)):
    return lesson_response(index, step)


@router.post("/{index}/animation", response_model=AnimationResponse)
def export_animation(
    index: int,
    request: AnimationRequest,
    step: LessonStep = Depends(get_lesson_step),
):
    """Render one loop of the step to a GIF under /output/animations."""
    if not 1 <= request.fps <= 60:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="fps must be between 1 and 60",
        )

    logger.info("Exporting animation for step %d (%s)", index, request.perspective.value)
    path = animation_exporter.export_gif(
        index,
        request.perspective,
        fps=request.fps,
        frame_stride=request.frame_stride,
    )
    filename = path.replace("\\", "/").rsplit("/", 1)[-1]
    return AnimationResponse(
        step_index=index,
        perspective=request.perspective.value,
        path=path,
        url=f"/output/animations/{filename}",
    )
