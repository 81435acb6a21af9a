"""
Lesson Model - the fixed, ordered table of relativity lesson steps.
Each step carries its text and the visual flags that switch optional
scene elements on or off.
"""
from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class VisualFlags:
    """Which optional scene elements render for a step."""
    train: bool = False
    ball: bool = False
    light: bool = False
    clocks: bool = False
    simultaneity: bool = False
    contraction: bool = False

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)


@dataclass(frozen=True)
class LessonStep:
    title: str
    concept: str
    description: str
    visuals: VisualFlags
    animation_speed: float  # multiplier on the per-tick time increment

    @property
    def concept_tags(self) -> list[str]:
        """Short labels shown under the step description."""
        tags = []
        if self.visuals.train:
            tags.append("Motion")
        if self.visuals.light:
            tags.append("Light Speed (c)")
        if self.visuals.clocks:
            tags.append("Time Dilation")
        return tags


STEPS: tuple[LessonStep, ...] = (
    LessonStep(
        title="Reference Frames",
        concept="Inertial Frames",
        description=(
            "Before we start, we need to understand 'frames of reference'. Alice is standing "
            "on the platform (The Stationary Frame). Bob is on a high-speed train (The Moving "
            "Frame). From Bob's perspective, he is still and the world moves. From Alice's "
            "perspective, she is still and the train moves."
        ),
        visuals=VisualFlags(train=True),
        animation_speed=0.5,
    ),
    LessonStep(
        title="Relative Motion (Classical)",
        concept="The Ball Drop",
        description=(
            "Bob drops a ball. To Bob (on the train), it falls straight down. To Alice (on the "
            "platform), the ball travels forward with the train while falling, tracing a curved "
            "path (parabola). Both agree on the physics, just not the path."
        ),
        visuals=VisualFlags(train=True, ball=True),
        animation_speed=1.0,
    ),
    LessonStep(
        title="Galilean Relativity",
        concept="Adding Velocities",
        description=(
            "In classical physics, velocities add up. If the train moves at 100 mph and Bob "
            "throws a ball forward at 10 mph, Alice sees it moving at 110 mph. This makes "
            "intuitive sense... until we talk about light."
        ),
        visuals=VisualFlags(train=True, ball=True),
        animation_speed=1.0,
    ),
    LessonStep(
        title="Speed of Light Constant",
        concept="The Universal Speed Limit",
        description=(
            "This is Einstein's great insight. Light travels at 'c' (approx 300,000 km/s). "
            "Unlike the ball, the speed of the train DOES NOT add to the speed of light. Both "
            "Alice and Bob measure the light beam traveling at exactly the same speed."
        ),
        visuals=VisualFlags(train=True, light=True),
        animation_speed=1.5,
    ),
    LessonStep(
        title="Time Dilation",
        concept="Time Slows Down",
        description=(
            "Imagine a 'light clock' where a photon bounces up and down. For Bob, it goes "
            "straight up and down. For Alice, the photon must travel a longer diagonal path. "
            "Since the speed of light is constant, it takes LONGER for the photon to make the "
            "trip in Alice's view. Time runs slower for the moving observer."
        ),
        visuals=VisualFlags(train=True, light=True, clocks=True),
        animation_speed=0.5,
    ),
    LessonStep(
        title="Length Contraction",
        concept="Space Shrinks",
        description=(
            "Because time slows down, space must adjust to keep the speed of light constant. "
            "Objects moving at relativistic speeds appear shorter in the direction of motion "
            "to a stationary observer. To Alice, Bob's train literally shrinks."
        ),
        visuals=VisualFlags(train=True, contraction=True),
        animation_speed=0.8,
    ),
    LessonStep(
        title="Relativity of Simultaneity",
        concept="Events Aren't Synchronized",
        description=(
            "A light flashes in the center of the train. Bob sees it hit the front and back "
            "walls simultaneously. Alice sees the back wall move toward the light and the front "
            "move away. She sees the light hit the back wall FIRST. Simultaneous events for one "
            "are not simultaneous for another!"
        ),
        visuals=VisualFlags(train=True, simultaneity=True),
        animation_speed=0.8,
    ),
)

LAST_STEP_INDEX = len(STEPS) - 1


def get_step(index: int) -> LessonStep:
    """Return the step at ``index``; negative indices are rejected."""
    if not 0 <= index <= LAST_STEP_INDEX:
        raise IndexError(f"Lesson step {index} out of range [0, {LAST_STEP_INDEX}]")
    return STEPS[index]
