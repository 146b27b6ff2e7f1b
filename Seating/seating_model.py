# seating_model.py ─ the conference seating engine
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Set, Tuple

import numpy as np
from mesa import DataCollector, Model

from Seating.agents.attendee import AttendeeAgent
from Seating.config import CellType, ConfigManager, Defaults
from Seating.utilities.grid_builder import build_layout

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


class EngineState(Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    COMPLETED = "completed"


class ChartSample(NamedTuple):
    tick: int
    seated: int
    standing: int


@dataclass(frozen=True)
class TickResult:
    completed: bool
    seated: int = 0
    standing: int = 0
    moving: int = 0
    error: bool = False


@dataclass(frozen=True)
class SimulationStats:
    time: int
    spawned: int
    seated: int
    standing: int
    moving: int
    seated_percent: float
    seating_speed: float
    overall_speed: float


def arrival_multiplier(spawned: int, total: int) -> float:
    """``BACK_PREF`` scale for the next arrival; early arrivals head further back."""
    ratio = spawned / total if total else 1.0
    for upper_bound, multiplier in Defaults.ARRIVAL_PHASES:
        if ratio < upper_bound:
            return multiplier
    return Defaults.ARRIVAL_PHASES[-1][1]


class SeatingModel(Model):
    """
    Tick-driven occupancy simulation of a conference room.

    Each tick runs, in this order: spawning at free gates, one step for
    every attendee still walking (including the ones spawned this tick),
    sampling, and the completion check. The model holds the only grid;
    attendees keep coordinates into it.

    The engine starts ``UNINITIALIZED``; :meth:`initialize` builds the
    room and moves it to ``RUNNING``; the run ends ``COMPLETED`` when
    everyone has settled, ``MAX_TIME`` is reached or a tick fails.
    """

    def __init__(self, config: Optional[ConfigManager] = None, seed=None):
        super().__init__(seed=seed)
        self.config = config if config is not None else ConfigManager()
        self.config_snapshot: Dict[str, Any] = self.config.snapshot()

        self.state = EngineState.UNINITIALIZED
        self.error = False
        self.running = False

        self.grid: Optional[np.ndarray] = None
        self.seat_blocks: Dict[int, Tuple[int, int]] = {}
        self.corridor_segments: List[List[int]] = []
        self.block_corridors: Dict[int, List[List[int]]] = {}
        self.gates: List[Cell] = []

        self.attendees: List[AttendeeAgent] = []
        self.assigned: Set[Cell] = set()
        self.spawned = 0
        self.ticks = 0
        self.chart_data: List[ChartSample] = []
        self.last_result: Optional[TickResult] = None

        self.datacollector = self._make_datacollector()

    @staticmethod
    def _make_datacollector() -> DataCollector:
        return DataCollector(
            model_reporters={
                "Seated": lambda m: m.seated_count,
                "Standing": lambda m: m.standing_count,
                "Moving": lambda m: m.moving_count,
                "Spawned": "spawned",
            }
        )

    # -------------------------------------------------------------------
    #  Lifecycle
    # -------------------------------------------------------------------
    def initialize(self, config: Optional[ConfigManager] = None) -> bool:
        """
        Build the room and reset every counter. Returns ``False`` if the
        layout cannot be built; the engine then stays ``UNINITIALIZED``.
        """
        if config is not None:
            self.config = config
        snapshot = self.config.snapshot()

        layout = build_layout(snapshot)
        if layout is None:
            logger.error("Simulation initialization failed: could not build the grid")
            self.state = EngineState.UNINITIALIZED
            self.running = False
            return False

        for attendee in self.attendees:
            attendee.remove()

        self.config_snapshot = snapshot
        self.grid = layout.grid
        self.seat_blocks = layout.seat_blocks
        self.corridor_segments = layout.corridor_segments
        self.block_corridors = layout.block_corridors
        self.gates = layout.gates

        self.attendees = []
        self.assigned = set()
        self.spawned = 0
        self.ticks = 0
        self.chart_data = []
        self.last_result = None
        self.error = False
        self.datacollector = self._make_datacollector()

        self.state = EngineState.RUNNING
        self.running = True

        logger.info(
            "Room built: %dx%d, %d blocks %s, corridor width %d, %d seats, gates %s",
            layout.rows, layout.cols, len(self.seat_blocks), self.seat_blocks,
            snapshot["CORRIDOR_WIDTH"], layout.seat_capacity(), self.gates,
        )
        return True

    @property
    def completed(self) -> bool:
        return self.state is EngineState.COMPLETED

    # -------------------------------------------------------------------
    #  Counts
    # -------------------------------------------------------------------
    @property
    def seated_count(self) -> int:
        return sum(1 for a in self.attendees if a.seated)

    @property
    def standing_count(self) -> int:
        return sum(1 for a in self.attendees if a.standing)

    @property
    def moving_count(self) -> int:
        return sum(1 for a in self.attendees if not a.settled)

    def per_block_seated(self) -> Dict[int, int]:
        counts = {block: 0 for block in self.seat_blocks}
        for attendee in self.attendees:
            if attendee.seated and attendee.block is not None:
                counts[attendee.block] = counts.get(attendee.block, 0) + 1
        return counts

    # -------------------------------------------------------------------
    #  Tick
    # -------------------------------------------------------------------
    def reserve_standing(self, cell: Optional[Cell]) -> None:
        if cell is not None:
            self.grid[cell[0], cell[1]] = CellType.STANDING

    def _spawn_at_free_gates(self) -> None:
        total = self.config_snapshot["NUM_AGENTS"]
        occupied = {a.pos for a in self.attendees if not a.settled}

        for gate in self.gates:
            if self.spawned >= total or gate in occupied:
                continue

            params = dict(self.config_snapshot)
            params["BACK_PREF"] = max(0, params["BACK_PREF"] * arrival_multiplier(self.spawned, total))

            attendee = AttendeeAgent(self, gate, params)
            self.attendees.append(attendee)
            self.spawned += 1
            occupied.add(gate)

            if attendee.will_stand:
                self.reserve_standing(attendee.target)

    def tick(self) -> TickResult:
        """Advance the simulation by one tick."""
        if self.state is EngineState.COMPLETED:
            return self.last_result or TickResult(completed=True, error=self.error)
        if self.state is EngineState.UNINITIALIZED:
            logger.error("tick() called before initialize()")
            return TickResult(completed=True, error=True)

        try:
            self._spawn_at_free_gates()

            for attendee in self.attendees:
                if not attendee.settled:
                    attendee.step()

            self.ticks += 1

            seated, standing = self.seated_count, self.standing_count
            self.chart_data.append(ChartSample(self.ticks, seated, standing))
            self.datacollector.collect(self)

            if self.ticks % Defaults.BLOCK_SUMMARY_INTERVAL == 0:
                logger.debug("Per-block seated counts @t=%d: %s", self.ticks, self.per_block_seated())

            moving = len(self.attendees) - seated - standing
            completed = (moving == 0 and self.spawned >= self.config_snapshot["NUM_AGENTS"]) \
                or self.ticks >= self.config_snapshot["MAX_TIME"]
            if completed:
                self.state = EngineState.COMPLETED
                self.running = False
            result = TickResult(completed=completed, seated=seated, standing=standing, moving=moving)
        except Exception:
            logger.exception("Simulation update error at tick %d", self.ticks)
            self.state = EngineState.COMPLETED
            self.running = False
            self.error = True
            result = TickResult(completed=True, error=True)

        self.last_result = result
        return result

    def step(self):
        """Mesa entry point, e.g. for ``SolaraViz``."""
        self.tick()

    # -------------------------------------------------------------------
    #  Read-only views
    # -------------------------------------------------------------------
    def get_stats(self) -> SimulationStats:
        seated, standing, moving = self.seated_count, self.standing_count, self.moving_count
        return SimulationStats(
            time=self.ticks,
            spawned=self.spawned,
            seated=seated,
            standing=standing,
            moving=moving,
            seated_percent=round(seated / self.spawned * 100, 1) if self.spawned else 0.0,
            seating_speed=round(seated / self.ticks, 2) if self.ticks else 0.0,
            overall_speed=round((seated + standing) / self.ticks, 2) if self.ticks else 0.0,
        )

    def terminal_positions(self) -> Dict[Cell, List[AttendeeAgent]]:
        positions: Dict[Cell, List[AttendeeAgent]] = {}
        for attendee in self.attendees:
            if attendee.settled:
                positions.setdefault(attendee.pos, []).append(attendee)
        return positions
