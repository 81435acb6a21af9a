"""
Scene Evaluator - derives every object position for one animation frame.

evaluate_scene() is a pure function of (time, step, perspective). Nothing is
cached between calls, so re-rendering without advancing time always yields
the same snapshot. Every field is finite for any time in [0, 100) whether or
not the matching element is visible; callers gate drawing on the step's
visual flags.
"""
from dataclasses import dataclass, asdict

from relativity_explorer.models.lesson import LessonStep
from relativity_explorer.models.session import Perspective

# ── Canvas (SVG user units) ─────────────────────────────────────────────
CANVAS_WIDTH = 800
CANVAS_HEIGHT = 400
GROUND_Y = 300

# ── Train ───────────────────────────────────────────────────────────────
TRAIN_WIDTH = 260           # proper length
TRAIN_HEIGHT = 140
TRAIN_SPEED = 3 * 1.5       # px per time unit across the platform
TRAIN_START_X = 50
TRAIN_WRAP_X = CANVAS_WIDTH + 200
TRAIN_RESTART_X = -200

# Exaggerated stand-in for the Lorentz factor, picked for legibility
CONTRACTION_GAMMA = 0.7

# ── Ball drop ───────────────────────────────────────────────────────────
BALL_CEILING_Y = 100
BALL_DROP_RANGE = 200

# ── Light clock ─────────────────────────────────────────────────────────
LIGHT_CLOCK_PERIOD = 100
LIGHT_CLOCK_LEG = LIGHT_CLOCK_PERIOD / 2
LIGHT_CLOCK_INSET = 20      # photon turns 20px inside floor and ceiling

# ── Simultaneity ────────────────────────────────────────────────────────
# Must exceed TRAIN_SPEED or the front wall would outrun the light in
# Alice's frame and never be hit within one loop.
LIGHT_SPEED = 6.0

TIME_CEILING = 100


@dataclass(frozen=True)
class SceneSnapshot:
    train_x: float
    platform_x: float
    train_width: float
    ball_x: float
    ball_y: float
    light_x: float
    light_y: float
    flash_x: float          # where the simultaneity flash was emitted
    left_beam_x: float
    right_beam_x: float
    left_hit: bool
    right_hit: bool
    gamma: float

    def as_dict(self) -> dict:
        return asdict(self)


def contraction_factor(step: LessonStep) -> float:
    return CONTRACTION_GAMMA if step.visuals.contraction else 1.0


def train_geometry(time: float, gamma: float, perspective: Perspective) -> tuple[float, float, float]:
    """
    Return (train_x, platform_x, train_width).

    Alice sees a contracted train sliding right over a still platform.
    Bob sees his train at proper length, centred, with the platform sliding left.
    """
    if perspective == Perspective.ALICE:
        width = TRAIN_WIDTH * gamma
        platform_x = 0.0
        train_x = time * TRAIN_SPEED + TRAIN_START_X
        if train_x > TRAIN_WRAP_X:
            train_x = float(TRAIN_RESTART_X)
    else:
        width = float(TRAIN_WIDTH)
        train_x = CANVAS_WIDTH / 2 - width / 2
        platform_x = -(time * TRAIN_SPEED)
    return train_x, platform_x, width


def ball_position(time: float, train_center: float) -> tuple[float, float]:
    """Quadratic drop from the carriage ceiling, carried along with the train."""
    progress = time / TIME_CEILING
    return train_center, BALL_CEILING_Y + BALL_DROP_RANGE * progress * progress


def light_clock_position(time: float, train_center: float) -> tuple[float, float]:
    leg_progress = (time % LIGHT_CLOCK_LEG) / LIGHT_CLOCK_LEG
    going_up = (time % LIGHT_CLOCK_PERIOD) > LIGHT_CLOCK_LEG
    travel = TRAIN_HEIGHT - 2 * LIGHT_CLOCK_INSET
    if going_up:
        y = (GROUND_Y - LIGHT_CLOCK_INSET) - leg_progress * travel
    else:
        y = (GROUND_Y - TRAIN_HEIGHT + LIGHT_CLOCK_INSET) + leg_progress * travel
    return train_center, y


def simultaneity_beams(
    time: float,
    train_x: float,
    train_width: float,
    perspective: Perspective,
) -> tuple[float, float, float, bool, bool]:
    """
    Return (flash_x, left_beam_x, right_beam_x, left_hit, right_hit).

    Both beams cover LIGHT_SPEED * time from the flash point in either frame.
    For Bob the flash point rides with the train, so both walls are reached
    together. For Alice the flash point stays where it happened on the platform
    while the walls move on: the back wall runs into its beam first and the
    front wall is caught later.
    """
    distance = time * LIGHT_SPEED

    if perspective == Perspective.BOB:
        flash_x = train_x + train_width / 2
        half = train_width / 2
        return (
            flash_x,
            flash_x - distance,
            flash_x + distance,
            distance > half,
            distance > half,
        )

    # Train centre at the moment of the flash (time zero)
    flash_x = TRAIN_START_X + train_width / 2
    left_beam_x = flash_x - distance
    right_beam_x = flash_x + distance
    back_wall_x = train_x
    front_wall_x = train_x + train_width
    return (
        flash_x,
        left_beam_x,
        right_beam_x,
        left_beam_x <= back_wall_x,
        right_beam_x >= front_wall_x,
    )


def evaluate_scene(time: float, step: LessonStep, perspective: Perspective) -> SceneSnapshot:
    """Compute the full snapshot for one frame."""
    gamma = contraction_factor(step)
    train_x, platform_x, train_width = train_geometry(time, gamma, perspective)
    train_center = train_x + train_width / 2

    ball_x, ball_y = ball_position(time, train_center)
    light_x, light_y = light_clock_position(time, train_center)
    flash_x, left_beam_x, right_beam_x, left_hit, right_hit = simultaneity_beams(
        time, train_x, train_width, perspective
    )

    return SceneSnapshot(
        train_x=train_x,
        platform_x=platform_x,
        train_width=train_width,
        ball_x=ball_x,
        ball_y=ball_y,
        light_x=light_x,
        light_y=light_y,
        flash_x=flash_x,
        left_beam_x=left_beam_x,
        right_beam_x=right_beam_x,
        left_hit=left_hit,
        right_hit=right_hit,
        gamma=gamma,
    )
