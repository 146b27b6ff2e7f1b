from Seating.config import Defaults
from Seating.seating_model import EngineState
from Seating.visualization.model_parameters import InteractiveSeatingModel, model_params


def test_panel_sliders_follow_validation_ranges():
    slider = model_params["num_agents"]
    assert (slider["min"], slider["max"]) == Defaults.VALIDATION_RANGES["NUM_AGENTS"]
    assert slider["value"] == Defaults.PARAMETERS["NUM_AGENTS"]
    assert model_params["assigned_seats"]["type"] == "Checkbox"


def test_interactive_model_is_ready_to_step():
    model = InteractiveSeatingModel(seed="7", num_agents=60, num_blocks=3, assigned_seats=False)
    assert model.state is EngineState.RUNNING
    assert len(model.seat_blocks) == 3
    assert model.config_snapshot["NUM_AGENTS"] == 60
    assert model.config_snapshot["FEATURE_ASSIGNED_SEATS"] is False

    model.step()
    assert model.ticks == 1


def test_blank_seed_means_random():
    model = InteractiveSeatingModel(seed="")
    assert model.state is EngineState.RUNNING
