from fastapi import APIRouter, HTTPException, Query, Response, status
from pydantic import BaseModel

from relativity_explorer.models.lesson import LAST_STEP_INDEX, STEPS
from relativity_explorer.models.session import Perspective
from relativity_explorer.services.scene import TIME_CEILING, SceneSnapshot, evaluate_scene
from relativity_explorer.services.scene_renderer import render_frame

router = APIRouter()

MEDIA_TYPES = {"svg": "image/svg+xml", "png": "image/png"}


# Schemas
class SceneResponse(BaseModel):
    train_x: float
    platform_x: float
    train_width: float
    ball_x: float
    ball_y: float
    light_x: float
    light_y: float
    flash_x: float
    left_beam_x: float
    right_beam_x: float
    left_hit: bool
    right_hit: bool
    gamma: float


def scene_response(snapshot: SceneSnapshot) -> SceneResponse:
    return SceneResponse(**snapshot.as_dict())


def frame_response(snapshot: SceneSnapshot, step_index: int, perspective: Perspective, fmt: str) -> Response:
    body = render_frame(snapshot, STEPS[step_index], perspective, fmt)
    return Response(
        content=body,
        media_type=MEDIA_TYPES[fmt],
        headers={"Cache-Control": "no-store"},
    )


# Routes
@router.get("", response_model=SceneResponse)
async def get_scene(
    step: int = Query(0, ge=0, le=LAST_STEP_INDEX),
    time: float = Query(0.0, ge=0, lt=TIME_CEILING),
    perspective: Perspective = Perspective.ALICE,
):
    """Evaluate a single frame without any session."""
    return scene_response(evaluate_scene(time, STEPS[step], perspective))


@router.get("/frame.{fmt}")
def get_scene_frame(
    fmt: str,
    step: int = Query(0, ge=0, le=LAST_STEP_INDEX),
    time: float = Query(0.0, ge=0, lt=TIME_CEILING),
    perspective: Perspective = Perspective.ALICE,
):
    if fmt not in MEDIA_TYPES:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unsupported frame format: {fmt}",
        )
    snapshot = evaluate_scene(time, STEPS[step], perspective)
    return frame_response(snapshot, step, perspective, fmt)
