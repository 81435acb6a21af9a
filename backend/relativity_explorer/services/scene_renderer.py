"""
Scene renderer: turns a SceneSnapshot into drawable primitives, then draws
those with Matplotlib.

build_frame() is a stateless projection in canvas coordinates (800x400,
y pointing down, like SVG). render() is the only place that touches
Matplotlib, so frames can be inspected without a drawing surface.
"""
import io
import logging
from dataclasses import dataclass

import matplotlib.patches as patches
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.colors import to_rgb
import numpy as np

from relativity_explorer.models.lesson import LessonStep
from relativity_explorer.models.session import Perspective
from relativity_explorer.services.scene import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    GROUND_Y,
    TRAIN_HEIGHT,
    TRAIN_WIDTH,
    SceneSnapshot,
)

logger = logging.getLogger(__name__)

DPI = 100
PX_TO_PT = 72 / DPI

# Colors
COLOR_SKY_TOP = "#0f172a"
COLOR_SKY_BOTTOM = "#1e293b"
COLOR_GRID = "#334155"
COLOR_PLATFORM = "#334155"
COLOR_PLATFORM_EDGE = "#94a3b8"
COLOR_ALICE = "#60a5fa"
COLOR_BOB = "#a855f7"
COLOR_TRAIN = "#333333"
COLOR_TRAIN_EDGE = "#e2e8f0"
COLOR_WINDOW = "#1e293b"
COLOR_WINDOW_EDGE = "#475569"
COLOR_WHEEL = "#64748b"
COLOR_HIT = "#ef4444"
COLOR_LIGHT = "#facc15"
COLOR_PANEL = "#000000"
COLOR_PANEL_EDGE = "#475569"
COLOR_MUTED = "#cbd5e1"
COLOR_CONTRACTION = "#eab308"

GRID_SPACING = 100
WHEEL_RADIUS = 15


# ── Primitives ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Gradient:
    x: float
    y: float
    width: float
    height: float
    top: str
    bottom: str


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str = "none"
    stroke: str | None = None
    stroke_width: float = 1.0
    radius: float = 0.0
    opacity: float = 1.0


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    fill: str
    stroke: str | None = None
    stroke_width: float = 1.0
    glow: bool = False


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    stroke_width: float = 1.0
    dashed: bool = False
    glow: bool = False


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    color: str = "white"
    size: float = 14
    bold: bool = False
    anchor: str = "middle"  # start | middle | end


Primitive = Gradient | Rect | Circle | Line | Text


# ── Projection ─────────────────────────────────────────────────────────


def _background(platform_x: float) -> list[Primitive]:
    items: list[Primitive] = [
        Gradient(0, 0, CANVAS_WIDTH, CANVAS_HEIGHT, COLOR_SKY_TOP, COLOR_SKY_BOTTOM),
    ]
    # Parallax grid; Python's % keeps the offset in [0, 100) as the platform slides left
    offset = platform_x % GRID_SPACING
    for i in range(-1, 10):
        x = i * GRID_SPACING + offset
        items.append(Line(x, 0, x, CANVAS_HEIGHT, COLOR_GRID, 1, dashed=True))

    items.append(Rect(0, GROUND_Y, CANVAS_WIDTH, CANVAS_HEIGHT - GROUND_Y, fill=COLOR_PLATFORM))
    items.append(Line(0, GROUND_Y, CANVAS_WIDTH, GROUND_Y, COLOR_PLATFORM_EDGE, 2))
    return items


def _alice(platform_x: float) -> list[Primitive]:
    x, y = platform_x + 100, GROUND_Y - 60
    c = COLOR_ALICE
    return [
        Text(x, y - 70, "Alice", color=c, size=14, bold=True),
        Circle(x, y, 5, fill=c),
        Line(x, y + 5, x, y + 35, c, 3),           # body
        Line(x, y + 35, x - 10, y + 60, c, 3),     # legs
        Line(x, y + 35, x + 10, y + 60, c, 3),
        Line(x, y + 15, x - 10, y + 25, c, 3),     # arms
        Line(x, y + 15, x + 10, y + 25, c, 3),
    ]


def _train(snapshot: SceneSnapshot, step: LessonStep) -> list[Primitive]:
    left = snapshot.train_x
    top = GROUND_Y - TRAIN_HEIGHT - 5
    width = snapshot.train_width

    items: list[Primitive] = [
        Rect(left, top, width, TRAIN_HEIGHT, fill=COLOR_TRAIN, stroke=COLOR_TRAIN_EDGE,
             stroke_width=3, radius=10, opacity=0.8),
        Rect(left + 20, top + 20, max(width - 40, 0), TRAIN_HEIGHT - 40, fill=COLOR_WINDOW,
             stroke=COLOR_WINDOW_EDGE, radius=5),
        Circle(left + 30, top + TRAIN_HEIGHT + 5, WHEEL_RADIUS, fill=COLOR_WHEEL,
               stroke="#000000", stroke_width=2),
        Circle(left + width - 30, top + TRAIN_HEIGHT + 5, WHEEL_RADIUS, fill=COLOR_WHEEL,
               stroke="#000000", stroke_width=2),
    ]

    # Bob stands at the middle of the carriage
    bx, by = left + width / 2, top + TRAIN_HEIGHT - 20
    c = COLOR_BOB
    items += [
        Text(bx, by - 85, "Bob", color=c, size=14, bold=True),
        Circle(bx, by - 60, 5, fill=c),
        Line(bx, by - 55, bx, by - 25, c, 3),
        Line(bx, by - 25, bx - 10, by, c, 3),
        Line(bx, by - 25, bx + 10, by, c, 3),
    ]

    if step.visuals.simultaneity:
        items += [
            Rect(left + 5, top + 40, 10, 40, fill=COLOR_HIT if snapshot.left_hit else COLOR_WINDOW,
                 stroke="#ffffff"),
            Rect(left + width - 15, top + 40, 10, 40,
                 fill=COLOR_HIT if snapshot.right_hit else COLOR_WINDOW, stroke="#ffffff"),
        ]
    return items


def _dynamic(snapshot: SceneSnapshot, step: LessonStep) -> list[Primitive]:
    items: list[Primitive] = []
    visuals = step.visuals

    if visuals.ball:
        items.append(Circle(snapshot.ball_x, snapshot.ball_y, 8, fill=COLOR_HIT,
                            stroke="white", stroke_width=2))

    if visuals.light and visuals.clocks:
        items.append(Circle(snapshot.light_x, snapshot.light_y, 6, fill=COLOR_LIGHT, glow=True))

    if visuals.simultaneity:
        beam_y = GROUND_Y - TRAIN_HEIGHT / 2 - 5
        if not snapshot.left_hit:
            items.append(Line(snapshot.flash_x, beam_y, snapshot.left_beam_x, beam_y,
                              COLOR_LIGHT, 4, glow=True))
        if not snapshot.right_hit:
            items.append(Line(snapshot.flash_x, beam_y, snapshot.right_beam_x, beam_y,
                              COLOR_LIGHT, 4, glow=True))
    return items


def clock_readings(perspective: Perspective) -> dict[str, str]:
    """Illustrative clock readouts: the chosen observer's own clock runs at full rate."""
    return {
        "alice": "1.00s" if perspective == Perspective.ALICE else "0.85s",
        "bob": "1.00s" if perspective == Perspective.BOB else "0.85s",
    }


def contraction_caption(perspective: Perspective) -> str:
    if perspective == Perspective.ALICE:
        return "Alice sees the train contracted in the direction of motion."
    return "Bob sees the train at normal length (Proper Length)."


def _overlays(snapshot: SceneSnapshot, step: LessonStep, perspective: Perspective) -> list[Primitive]:
    items: list[Primitive] = []

    if step.visuals.clocks:
        readings = clock_readings(perspective)
        x, y = CANVAS_WIDTH - 196, 16
        items += [
            Rect(x, y, 180, 70, fill=COLOR_PANEL, stroke=COLOR_PANEL_EDGE, radius=4, opacity=0.6),
            Text(x + 10, y + 18, "Elapsed Time (Visual)", color=COLOR_MUTED, size=11, anchor="start"),
            Text(x + 50, y + 42, readings["alice"], color=COLOR_ALICE, size=17),
            Text(x + 50, y + 60, "Alice's Clock", size=9),
            Text(x + 130, y + 42, readings["bob"], color=COLOR_BOB, size=17),
            Text(x + 130, y + 60, "Bob's Clock", size=9),
        ]

    if step.visuals.contraction:
        x, y = 16, 16
        items += [
            Rect(x, y, 300, 76, fill=COLOR_PANEL, stroke=COLOR_PANEL_EDGE, radius=4, opacity=0.6),
            Text(x + 12, y + 22, "Lorentz Contraction", size=13, bold=True, anchor="start"),
            Text(x + 12, y + 44, contraction_caption(perspective), color=COLOR_MUTED, size=10,
                 anchor="start"),
            Rect(x + 12, y + 58, 276, 4, fill=COLOR_GRID, radius=2),
            Rect(x + 12, y + 58, 276 * snapshot.train_width / TRAIN_WIDTH, 4, fill=COLOR_CONTRACTION,
                 radius=2),
        ]
    return items


def build_frame(snapshot: SceneSnapshot, step: LessonStep, perspective: Perspective) -> list[Primitive]:
    """Project one snapshot into primitives, back to front."""
    return (
        _background(snapshot.platform_x)
        + _alice(snapshot.platform_x)
        + _train(snapshot, step)
        + _dynamic(snapshot, step)
        + _overlays(snapshot, step, perspective)
    )


# ── Drawing ────────────────────────────────────────────────────────────

_HALIGN = {"start": "left", "middle": "center", "end": "right"}


def _gradient_image(top: str, bottom: str, rows: int = 64) -> np.ndarray:
    start = np.array(to_rgb(top))
    end = np.array(to_rgb(bottom))
    mix = np.linspace(0.0, 1.0, rows)[:, None]
    return (start + (end - start) * mix)[:, None, :]


def draw_primitives(ax, primitives: list[Primitive]) -> None:
    """Draw primitives onto an axes already set up by new_canvas()."""
    for item in primitives:
        if isinstance(item, Gradient):
            ax.imshow(
                _gradient_image(item.top, item.bottom),
                extent=(item.x, item.x + item.width, item.y + item.height, item.y),
                aspect="auto", zorder=0,
            )
        elif isinstance(item, Rect):
            if item.radius:
                patch = patches.FancyBboxPatch(
                    (item.x, item.y), item.width, item.height,
                    boxstyle=f"round,pad=0,rounding_size={item.radius}",
                )
            else:
                patch = patches.Rectangle((item.x, item.y), item.width, item.height)
            patch.set_facecolor(item.fill)
            patch.set_edgecolor(item.stroke or "none")
            patch.set_linewidth(item.stroke_width * PX_TO_PT if item.stroke else 0)
            patch.set_alpha(item.opacity)
            ax.add_patch(patch)
        elif isinstance(item, Circle):
            if item.glow:
                ax.add_patch(patches.Circle((item.cx, item.cy), item.r * 2,
                                            facecolor=item.fill, edgecolor="none", alpha=0.25))
            ax.add_patch(patches.Circle(
                (item.cx, item.cy), item.r,
                facecolor=item.fill,
                edgecolor=item.stroke or "none",
                linewidth=item.stroke_width * PX_TO_PT if item.stroke else 0,
            ))
        elif isinstance(item, Line):
            if item.glow:
                ax.plot([item.x1, item.x2], [item.y1, item.y2], color=item.stroke,
                        linewidth=item.stroke_width * 3 * PX_TO_PT, alpha=0.25,
                        solid_capstyle="round")
            ax.plot(
                [item.x1, item.x2], [item.y1, item.y2],
                color=item.stroke,
                linewidth=item.stroke_width * PX_TO_PT,
                linestyle=(0, (5, 5)) if item.dashed else "-",
                solid_capstyle="round",
            )
        elif isinstance(item, Text):
            ax.text(
                item.x, item.y, item.text,
                ha=_HALIGN[item.anchor], va="baseline",
                fontsize=item.size * PX_TO_PT, color=item.color,
                fontweight="bold" if item.bold else "normal",
            )
        else:
            raise TypeError(f"Unknown primitive: {item!r}")


def new_canvas():
    """Create a figure whose single axes maps 1:1 onto the canvas, y down."""
    fig = Figure(figsize=(CANVAS_WIDTH / DPI, CANVAS_HEIGHT / DPI), dpi=DPI,
                 facecolor=COLOR_SKY_TOP)
    # Agg canvas owned by this figure alone, outside pyplot's figure registry
    FigureCanvasAgg(fig)
    ax = fig.add_axes((0, 0, 1, 1))
    reset_axes(ax)
    return fig, ax


def reset_axes(ax) -> None:
    ax.clear()
    ax.set_xlim(0, CANVAS_WIDTH)
    ax.set_ylim(CANVAS_HEIGHT, 0)
    ax.axis("off")


def render(primitives: list[Primitive], fmt: str = "svg") -> bytes:
    """Draw primitives and return the encoded image (``svg`` or ``png``)."""
    if fmt not in ("svg", "png"):
        raise ValueError(f"Unsupported frame format: {fmt}")

    fig, ax = new_canvas()
    draw_primitives(ax, primitives)
    buffer = io.BytesIO()
    fig.savefig(buffer, format=fmt, dpi=DPI, facecolor=fig.get_facecolor())

    logger.debug("Rendered %d primitives as %s", len(primitives), fmt)
    return buffer.getvalue()


def render_frame(
    snapshot: SceneSnapshot,
    step: LessonStep,
    perspective: Perspective,
    fmt: str = "svg",
) -> bytes:
    return render(build_frame(snapshot, step, perspective), fmt)
