# portrayal.py
"""Matplotlib drawing of the room, the live occupancy chart and the run history charts."""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import matplotlib.colors as mcolors
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from Seating.config import Defaults

if TYPE_CHECKING:
    from Seating.agents.attendee import AttendeeAgent
    from Seating.seating_model import ChartSample, SeatingModel
    from Seating.statistics.run_history import RunHistory

SEATED_LINE_COLOR = "#ff0000"
STANDING_LINE_COLOR = "#666666"
HISTORY_BAR_COLORS = ("#4caf50", "#2196f3", "#ff9800")


def cell_rgb_grid(grid: np.ndarray) -> np.ndarray:
    """``(rows, cols, 3)`` float RGB image of a cell-type grid."""
    image = np.ones(grid.shape + (3,), dtype=float)
    for cell_type, color in Defaults.CELL_COLORS.items():
        image[grid == cell_type] = mcolors.to_rgb(color)
    return image


def attendee_color(agent: "AttendeeAgent", color_by_block: bool) -> str:
    if agent.will_stand:
        return Defaults.WILL_STAND_COLOR
    if color_by_block and agent.block is not None:
        return Defaults.BLOCK_COLORS[agent.block % len(Defaults.BLOCK_COLORS)]
    return Defaults.AGENT_BASE_COLOR


def draw_room(ax: Axes, model: "SeatingModel") -> None:
    """Cell grid plus one dot per attendee still on the move."""
    ax.clear()
    if model.grid is None:
        ax.set_title("Room not built")
        ax.set_axis_off()
        return

    rows, cols = model.grid.shape
    ax.imshow(cell_rgb_grid(model.grid), origin="upper", interpolation="nearest",
              extent=(-0.5, cols - 0.5, rows - 0.5, -0.5))

    moving = [a for a in model.attendees if not a.settled]
    if moving:
        color_by_block = model.config_snapshot.get("FEATURE_COLOR_BY_BLOCK", True)
        ax.scatter(
            [a.pos[1] for a in moving],
            [a.pos[0] for a in moving],
            c=[attendee_color(a, color_by_block) for a in moving],
            s=18,
            edgecolors="none",
        )

    ax.set_aspect("equal")
    ax.set_xticks(np.arange(-0.5, cols, 1), minor=True)
    ax.set_yticks(np.arange(-0.5, rows, 1), minor=True)
    ax.grid(which="minor", color="lightgray", linewidth=0.3)
    ax.tick_params(which="both", bottom=False, left=False, labelbottom=False, labelleft=False)
    ax.set_title(f"t = {model.ticks}")


def draw_occupancy_chart(ax: Axes, chart_data: Sequence["ChartSample"]) -> None:
    ax.clear()
    ticks = [s.tick for s in chart_data]
    ax.plot(ticks, [s.seated for s in chart_data], color=SEATED_LINE_COLOR, label="Seated")
    ax.plot(ticks, [s.standing for s in chart_data], color=STANDING_LINE_COLOR, label="Standing")
    ax.set_xlabel("Tick")
    ax.set_ylabel("Attendees")
    ax.legend(loc="upper left")


def draw_history_charts(axes: Sequence[Axes], history: "RunHistory") -> None:
    """Seated count per run, seated-percentage distribution and seating speed per run."""
    seated_ax, percent_ax, speed_ax = axes
    for ax in axes:
        ax.clear()
    if not len(history):
        return

    # oldest run on the left
    labels = [f"R{i}" for i in range(1, len(history) + 1)]
    seated_ax.bar(labels, history.seated_counts()[::-1], color=HISTORY_BAR_COLORS[0])
    seated_ax.set_title("Seated per run")

    bins = history.seated_percent_bins()
    percent_ax.bar(np.arange(len(bins)) * 5 + 2.5, bins, width=4, color=HISTORY_BAR_COLORS[1])
    percent_ax.set_xticks(range(0, 101, 20))
    percent_ax.set_xticklabels([f"{p}%" for p in range(0, 101, 20)])
    percent_ax.set_title("Seated % distribution")

    speed_ax.bar(labels, history.seating_speeds()[::-1], color=HISTORY_BAR_COLORS[2])
    speed_ax.set_title("Seating speed (people/tick)")


def make_room_figure(model: "SeatingModel") -> Figure:
    fig = Figure(figsize=(10, 4))
    draw_room(fig.subplots(), model)
    return fig


def make_history_figure(history: "RunHistory") -> Figure:
    fig = Figure(figsize=(12, 3), layout="constrained")
    draw_history_charts(fig.subplots(1, 3), history)
    return fig
