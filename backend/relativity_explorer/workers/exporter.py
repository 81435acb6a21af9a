"""
Batch exporter for lesson animations.

Run via: python -m relativity_explorer.workers.exporter [--step N] [--perspective alice|bob]
Renders one loop per step and perspective into <output_dir>/animations.
"""
import argparse
import logging
import sys

from relativity_explorer.config import get_settings
from relativity_explorer.models.lesson import STEPS
from relativity_explorer.models.session import Perspective
from relativity_explorer.services.animation_export import AnimationExporter

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger("exporter")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export relativity lesson animations as GIFs")
    parser.add_argument("--step", type=int, choices=range(1, len(STEPS) + 1),
                        help="1-based step number (default: all steps)")
    parser.add_argument("--perspective", choices=[p.value for p in Perspective],
                        help="observer to render from (default: both)")
    parser.add_argument("--fps", type=int, default=30)
    parser.add_argument("--stride", type=int, default=2, help="keep every n-th frame")
    parser.add_argument("--output-dir", default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    exporter = AnimationExporter(args.output_dir)

    steps = [args.step - 1] if args.step else range(len(STEPS))
    perspectives = [Perspective(args.perspective)] if args.perspective else list(Perspective)

    failures = 0
    for index in steps:
        for perspective in perspectives:
            try:
                path = exporter.export_gif(index, perspective, fps=args.fps, frame_stride=args.stride)
                logger.info("Step %d (%s): %s", index + 1, perspective.value, path)
            except Exception as e:
                failures += 1
                logger.error("Failed to export step %d (%s): %s", index + 1, perspective.value, e)

    logger.info("Done: %d exported, %d failed",
                len(steps) * len(perspectives) - failures, failures)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
