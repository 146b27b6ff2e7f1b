# config.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import IntEnum
from numbers import Real
from types import MappingProxyType
from typing import Any, Callable, ClassVar, Dict, FrozenSet, Mapping, Tuple

logger = logging.getLogger(__name__)


class CellType(IntEnum):
    EMPTY = 0
    SEAT = 1
    CORRIDOR = 2
    GATE = 3
    STANDING = 8
    SEATED_AGENT = 9


# cell types a settled attendee leaves behind
OCCUPIED_TYPES = frozenset({CellType.SEATED_AGENT, CellType.STANDING})


@dataclass(frozen=True)
class Defaults:
    # seat band, end exclusive
    SEAT_ROWS_START: int = 6
    SEAT_ROWS_END: int = 14

    # counted up from the bottom row
    BACK_ROW_COUNT: int = 6
    TURN_ROW_COUNT: int = 4

    GATE_POSITIONS: Tuple[int, ...] = (10, 34, 58)

    DEFAULT_ROW_THRESHOLD: int = 5

    CORRIDOR_WIDTH_MIN: int = 2
    CORRIDOR_WIDTH_MAX: int = 6

    # last resort when no standing spot is left anywhere: (rows up from the bottom edge, column)
    FALLBACK_STANDING_OFFSET: Tuple[int, int] = (2, 10)

    # arrival phases: (spawned fraction upper bound, BACK_PREF multiplier)
    ARRIVAL_PHASES: Tuple[Tuple[float, float], ...] = ((0.3, 1.5), (0.7, 1.0), (1.0, 0.5))

    HISTORY_MAX_RUNS: int = 10
    BLOCK_SUMMARY_INTERVAL: int = 50

    PARAMETERS: ClassVar[Mapping[str, Any]] = MappingProxyType({
        "ROWS": 20,
        "COLS": 68,
        "NUM_BLOCKS": 4,
        "FEATURE_ASSIGNED_SEATS": True,
        "FEATURE_COLOR_BY_BLOCK": True,
        "NUM_AGENTS": 384,
        "SPEED": 20,
        "MAX_TIME": 500,
        "SOCIAL_DISTANCE": 3,
        "BACK_PREF": 3,
        "AISLE_PREF": 2,
    })

    # inclusive ranges
    VALIDATION_RANGES: ClassVar[Mapping[str, Tuple[int, int]]] = MappingProxyType({
        "NUM_AGENTS": (50, 500),
        "SPEED": (10, 500),
        "MAX_TIME": (200, 1000),
        "NUM_BLOCKS": (2, 6),
        "SOCIAL_DISTANCE": (0, 5),
        "BACK_PREF": (0, 5),
        "AISLE_PREF": (0, 5),
        "ROWS": (20, 60),
        "COLS": (40, 200),
    })

    BOOLEAN_KEYS: FrozenSet[str] = frozenset({"FEATURE_ASSIGNED_SEATS", "FEATURE_COLOR_BY_BLOCK"})

    # changing one of these invalidates a built layout
    LAYOUT_KEYS: FrozenSet[str] = frozenset({"ROWS", "COLS", "NUM_BLOCKS", "CORRIDOR_WIDTH"})

    CELL_COLORS: ClassVar[Mapping[CellType, str]] = MappingProxyType({
        CellType.EMPTY: "#ffffff",
        CellType.SEAT: "#ffeb3b",
        CellType.CORRIDOR: "#add8e6",
        CellType.GATE: "#00ff00",
        CellType.STANDING: "#666666",
        CellType.SEATED_AGENT: "#ff0000",
    })

    BLOCK_COLORS: Tuple[str, ...] = ("#2196f3", "#ff9800", "#9c27b0", "#00bcd4", "#e91e63", "#8bc34a")
    WILL_STAND_COLOR: str = "#999999"
    AGENT_BASE_COLOR: str = "black"

    DESCRIPTION_MAP: ClassVar[Mapping[CellType, str]] = MappingProxyType({
        CellType.EMPTY: "Unused floor",
        CellType.SEAT: "Free seat",
        CellType.CORRIDOR: "Walkway between seat blocks",
        CellType.GATE: "Entrance gate",
        CellType.STANDING: "Standing attendee (or reserved standing spot)",
        CellType.SEATED_AGENT: "Seated attendee",
    })


Listener = Callable[[str, Any], None]


def calculate_corridor_width(cols: int, num_blocks: int) -> tuple[int, int]:
    """
    Pick the corridor width in ``[CORRIDOR_WIDTH_MIN, CORRIDOR_WIDTH_MAX]``
    that gives the most seats per block.

    Widths are tried in ascending order and a width that equals the best
    seat count so far replaces it, so ties go to the larger width.

    Returns:
        ``(corridor_width, seats_per_block)``
    """
    num_corridors = num_blocks + 1
    best_width = Defaults.CORRIDOR_WIDTH_MIN
    best_seats = 0

    for width in range(Defaults.CORRIDOR_WIDTH_MIN, Defaults.CORRIDOR_WIDTH_MAX + 1):
        remaining = cols - num_corridors * width
        if remaining < 0:
            continue
        seats_per_block = remaining // num_blocks
        if seats_per_block >= best_seats:
            best_width = width
            best_seats = seats_per_block

    return best_width, best_seats


class ConfigManager:
    """
    Named simulation parameters with per-key validation and change
    notification.

    Invalid values are dropped without raising; the previous value stays.
    Listeners are called synchronously as ``callback(key, value)`` and a
    failing listener never stops the others.
    """

    def __init__(self, **overrides: Any):
        self.config: Dict[str, Any] = dict(Defaults.PARAMETERS)
        self._listeners: list[Listener] = []
        for key, value in overrides.items():
            if self.validate(key, value):
                self.config[key] = value
            else:
                logger.warning("Ignoring invalid override %s=%r", key, value)
        self.calculate_corridor_width()

    # ———— access ————

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.config[key]

    def __contains__(self, key: str) -> bool:
        return key in self.config

    def snapshot(self) -> Dict[str, Any]:
        """Detached copy of the current parameters."""
        return dict(self.config)

    def set(self, key: str, value: Any) -> bool:
        if not self.validate(key, value):
            logger.debug("Rejected %s=%r", key, value)
            return False

        self.config[key] = value
        if key in ("NUM_BLOCKS", "COLS"):
            self.calculate_corridor_width()

        self._notify_listeners(key, value)
        return True

    def update(self, values: Mapping[str, Any]) -> Dict[str, bool]:
        return {key: self.set(key, value) for key, value in values.items()}

    @staticmethod
    def validate(key: str, value: Any) -> bool:
        if key in Defaults.BOOLEAN_KEYS:
            return isinstance(value, bool)

        bounds = Defaults.VALIDATION_RANGES.get(key)
        if bounds is None:
            return True
        if isinstance(value, bool) or not isinstance(value, Real):
            return False
        low, high = bounds
        return low <= value <= high

    def calculate_corridor_width(self) -> int:
        width, seats = calculate_corridor_width(self.config["COLS"], self.config["NUM_BLOCKS"])
        self.config["CORRIDOR_WIDTH"] = width
        logger.debug(
            "Calculated corridor width: %d for %d blocks (%d seats per block)",
            width, self.config["NUM_BLOCKS"], seats,
        )
        return width

    # ———— listeners ————

    def add_listener(self, callback: Listener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self, key: str, value: Any) -> None:
        for callback in list(self._listeners):
            try:
                callback(key, value)
            except Exception:
                logger.exception("Config listener error for %s", key)

    # ———— persistence & presets ————

    def save(self, filepath: str) -> None:
        """Save the parameters to a JSON file (derived keys included)."""
        with open(filepath, "w") as f:
            json.dump(self.config, f, indent=2, sort_keys=True)

    @classmethod
    def load(cls, filepath: str) -> "ConfigManager":
        with open(filepath, "r") as f:
            values = json.load(f)
        values.pop("CORRIDOR_WIDTH", None)
        return cls(**values)

    @classmethod
    def presets(cls) -> Dict[str, "ConfigManager"]:
        return {name: cls(**values) for name, values in PRESETS.items()}

    def __repr__(self):
        return f"ConfigManager({self.config!r})"


PRESETS: Dict[str, Dict[str, Any]] = {
    "default": {},
    # a quiet morning session, everyone gets a seat
    "small_event": {"NUM_AGENTS": 50, "SOCIAL_DISTANCE": 5},
    # more attendees than seats
    "sold_out": {"NUM_AGENTS": 500, "MAX_TIME": 1000, "SOCIAL_DISTANCE": 0},
    "front_fillers": {"BACK_PREF": 0, "AISLE_PREF": 0},
}
