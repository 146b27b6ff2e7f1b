import random

import pytest

from Seating.config import ConfigManager
from Seating.seating_model import SeatingModel
from Seating.utilities.grid_builder import build_layout


class FixedRandom:
    """Stand-in rng whose ``random()`` always returns *value*."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value

    def choice(self, seq):
        return seq[0]

    def shuffle(self, seq):
        pass


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def config():
    return ConfigManager()


@pytest.fixture
def layout(config):
    return build_layout(config.snapshot())


@pytest.fixture
def model(config):
    m = SeatingModel(config, seed=42)
    assert m.initialize()
    return m


@pytest.fixture
def run_to_completion():
    def _run(model, limit=2000):
        result = None
        for _ in range(limit):
            result = model.tick()
            if result.completed:
                break
        return result
    return _run
