import logging
import uuid
from pathlib import Path

from matplotlib.animation import FuncAnimation, PillowWriter

from relativity_explorer.config import get_settings
from relativity_explorer.models.lesson import get_step
from relativity_explorer.models.session import Perspective, SessionState
from relativity_explorer.services import playback
from relativity_explorer.services.scene import evaluate_scene
from relativity_explorer.services.scene_renderer import (
    build_frame,
    draw_primitives,
    new_canvas,
    reset_axes,
)

logger = logging.getLogger(__name__)
settings = get_settings()


class AnimationExporter:
    """
    Renders one full loop of a lesson step to an animated GIF.
    Frames come from the same tick/evaluate/render path the live view uses.
    """

    MAX_FRAMES = 1000

    def __init__(self, output_dir: str | Path | None = None):
        self.output_dir = Path(output_dir or settings.output_dir) / "animations"
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def loop_times(self, step_index: int) -> list[float]:
        """Clock values for one loop, from 0 up to the wrap back to 0."""
        state = playback.go_to_step(SessionState(), step_index)
        times = [state.time]
        while len(times) < self.MAX_FRAMES:
            state = playback.tick(state)
            if state.time == 0.0:
                break
            times.append(state.time)
        return times

    def export_gif(
        self,
        step_index: int,
        perspective: Perspective = Perspective.ALICE,
        fps: int = 30,
        frame_stride: int = 1,
    ) -> str:
        """
        Write the GIF and return its path.

        frame_stride keeps every n-th frame to shrink the file.
        """
        step = get_step(step_index)
        times = self.loop_times(step_index)[::max(frame_stride, 1)]
        output_path = self.output_dir / f"step{step_index + 1}_{perspective.value}_{uuid.uuid4().hex[:8]}.gif"

        fig, ax = new_canvas()

        def draw(i):
            reset_axes(ax)
            snapshot = evaluate_scene(times[i], step, perspective)
            draw_primitives(ax, build_frame(snapshot, step, perspective))
            return []

        animation = FuncAnimation(fig, draw, frames=len(times), blit=False)
        animation.save(str(output_path), writer=PillowWriter(fps=fps))

        logger.info("Exported %d frames of '%s' (%s) to %s",
                    len(times), step.title, perspective.value, output_path)
        return str(output_path)


# Singleton instance
animation_exporter = AnimationExporter()
