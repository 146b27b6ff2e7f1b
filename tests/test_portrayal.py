from types import SimpleNamespace

import matplotlib

matplotlib.use("Agg")

import matplotlib.colors as mcolors  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from Seating.config import CellType, ConfigManager, Defaults  # noqa: E402
from Seating.seating_model import SeatingModel, TickResult  # noqa: E402
from Seating.statistics.run_history import RunHistory  # noqa: E402
from Seating.visualization.portrayal import (  # noqa: E402
    attendee_color,
    cell_rgb_grid,
    draw_occupancy_chart,
    make_history_figure,
    make_room_figure,
)


def test_cell_colours(layout):
    image = cell_rgb_grid(layout.grid)
    assert image.shape == (20, 68, 3)
    assert tuple(image[7, 2]) == mcolors.to_rgb(Defaults.CELL_COLORS[CellType.SEAT])
    assert tuple(image[19, 10]) == mcolors.to_rgb(Defaults.CELL_COLORS[CellType.GATE])


def test_attendee_colour():
    walking = SimpleNamespace(will_stand=False, block=2)
    leaving = SimpleNamespace(will_stand=True, block=2)
    assert attendee_color(walking, True) == Defaults.BLOCK_COLORS[2]
    assert attendee_color(walking, False) == Defaults.AGENT_BASE_COLOR
    assert attendee_color(leaving, True) == Defaults.WILL_STAND_COLOR


def test_room_figure(model):
    for _ in range(5):
        model.tick()
    fig = make_room_figure(model)
    ax = fig.axes[0]
    assert len(ax.images) == 1
    assert len(ax.collections) == 1
    assert ax.get_title() == "t = 5"


def test_room_figure_before_build():
    fig = make_room_figure(SeatingModel(ConfigManager(), seed=1))
    assert fig.axes[0].get_title() == "Room not built"


def test_occupancy_chart(model):
    for _ in range(10):
        model.tick()
    ax = Figure().subplots()
    draw_occupancy_chart(ax, model.chart_data)
    assert [line.get_label() for line in ax.lines] == ["Seated", "Standing"]
    assert len(ax.lines[0].get_xdata()) == 10


def test_history_figure():
    history = RunHistory()
    fake = SimpleNamespace(
        config_snapshot={"NUM_AGENTS": 50, "NUM_BLOCKS": 4, "SOCIAL_DISTANCE": 3, "BACK_PREF": 3, "SPEED": 20},
        spawned=50,
        ticks=60,
    )
    history.record(fake, TickResult(completed=True, seated=45, standing=5))
    history.record(fake, TickResult(completed=True, seated=50, standing=0))

    fig = make_history_figure(history)
    assert len(fig.axes) == 3
    assert [ax.get_title() for ax in fig.axes][0] == "Seated per run"
    assert len(fig.axes[0].patches) == 2
    assert len(fig.axes[1].patches) == 20
