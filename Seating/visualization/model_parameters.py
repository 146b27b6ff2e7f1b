# model_parameters.py
# ---------------------------------------------------------------------------
#  Parameter panel for the SolaraViz page and the model class it rebuilds
# ---------------------------------------------------------------------------
from Seating.config import ConfigManager, Defaults
from Seating.seating_model import SeatingModel

# keyword argument -> (configuration key, label)
SLIDERS = {
    "num_agents": ("NUM_AGENTS", "Attendees"),
    "max_time": ("MAX_TIME", "Max ticks"),
    "num_blocks": ("NUM_BLOCKS", "Seat blocks"),
    "social_distance": ("SOCIAL_DISTANCE", "Social distance"),
    "back_pref": ("BACK_PREF", "Back-row preference"),
    "aisle_pref": ("AISLE_PREF", "Aisle preference"),
}

CHECKBOXES = {
    "assigned_seats": ("FEATURE_ASSIGNED_SEATS", "Reserve seats on arrival"),
    "color_by_block": ("FEATURE_COLOR_BY_BLOCK", "Colour attendees by block"),
}

PANEL_KEYS = {**SLIDERS, **CHECKBOXES}


def _slider(key: str, label: str) -> dict:
    low, high = Defaults.VALIDATION_RANGES[key]
    return {
        "type": "SliderInt",
        "value": Defaults.PARAMETERS[key],
        "min": low,
        "max": high,
        "step": 1,
        "label": label,
    }


model_params = {name: _slider(key, label) for name, (key, label) in SLIDERS.items()}
model_params.update({
    name: {"type": "Checkbox", "value": Defaults.PARAMETERS[key], "label": label}
    for name, (key, label) in CHECKBOXES.items()
})
model_params["seed"] = {
    "type": "InputText",
    "value": "",
    "label": "Random Seed (leave blank for random)",
}


class InteractiveSeatingModel(SeatingModel):
    """A :class:`SeatingModel` built and initialized from panel keyword arguments."""

    def __init__(self, seed=None, **kwargs):
        config = ConfigManager()
        for name, value in kwargs.items():
            key, _ = PANEL_KEYS[name]
            config.set(key, value)

        super().__init__(config, seed=_parse_seed(seed))
        self.initialize()


def _parse_seed(seed):
    if seed in (None, ""):
        return None
    try:
        return int(seed)
    except (TypeError, ValueError):
        return seed
