# app.py
#
#   solara run app.py

import logging

import solara
from mesa.visualization import SolaraViz, make_plot_component
from mesa.visualization.utils import update_counter

from Seating.visualization.model_parameters import InteractiveSeatingModel, model_params
from Seating.visualization.portrayal import make_room_figure

logging.basicConfig(level=logging.INFO)


@solara.component
def RoomGrid(model):
    update_counter.get()
    solara.FigureMatplotlib(make_room_figure(model))


@solara.component
def RoomStats(model):
    update_counter.get()
    stats = model.get_stats()
    solara.Markdown(
        f"**Time:** {stats.time} | **Arrived:** {stats.spawned} | **Moving:** {stats.moving} | "
        f"**Seated:** {stats.seated} ({stats.seated_percent}%) | **Standing:** {stats.standing} | "
        f"**Speed:** {stats.seating_speed} people/tick"
    )


OccupancyPlot = make_plot_component({"Seated": "#ff0000", "Standing": "#666666"})

model = InteractiveSeatingModel()

Page = SolaraViz(
    model,
    components=[RoomGrid, RoomStats, OccupancyPlot],
    model_params=model_params,
    name="Conference Room Seating",
)
Page  # noqa
