# attendee.py - one conference attendee walking from a gate to a seat
from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import TYPE_CHECKING, Any, Deque, Mapping, Optional, Tuple, cast

from mesa import Agent

from Seating.config import CellType, Defaults, OCCUPIED_TYPES
from Seating.utilities.grid_builder import turn_rows
from Seating.utilities.pathfinding import (
    compute_simple_path,
    pick_block_based_on_gate,
    pick_preferred_corridor_cell,
)
from Seating.utilities.seat_selection import (
    find_standing_position,
    pick_seat_any_block,
    pick_seat_in_block,
)

if TYPE_CHECKING:
    from Seating.seating_model import SeatingModel

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


class AgentState(Enum):
    SPAWNED = "spawned"
    MOVING = "moving"
    SEATED = "seated"
    STANDING = "standing"


TERMINAL_STATES = frozenset({AgentState.SEATED, AgentState.STANDING})


class AttendeeAgent(Agent):
    """
    An attendee that picks a target on arrival and then walks one cell per
    tick along a precomputed path.

    Target choice, in order:
      1. a seat in the block the spawn gate points at
      2. a seat in any block
      3. a standing spot in the back rows (``will_stand``)

    With ``FEATURE_ASSIGNED_SEATS`` the chosen seat is reserved at once, so
    attendees spawned later in the same tick cannot pick it.
    """

    def __init__(self, model: "SeatingModel", spawn: Cell, params: Mapping[str, Any]):
        super().__init__(model)
        self.seating_model = cast("SeatingModel", model)
        self.pos: Cell = spawn
        self.spawn: Cell = spawn
        self.state = AgentState.SPAWNED
        self.will_stand = False

        self.block: Optional[int] = None
        self.target: Optional[Cell] = None
        self.corridor: Optional[int] = None
        self.turn_row: Optional[int] = None
        self.path: Deque[Cell] = deque()

        self.ticks_travelled = 0
        self.settled_at: Optional[int] = None

        self._choose_target(params)

    # ------------------------------------------------------------
    #  Target & route
    # ------------------------------------------------------------
    def _choose_target(self, params: Mapping[str, Any]) -> None:
        model = self.seating_model
        grid = model.grid
        seat_blocks = model.seat_blocks
        rng = self.random

        num_blocks = len(seat_blocks)
        block = pick_block_based_on_gate(self.spawn[1], num_blocks, model.gates, rng)
        self.block = min(block, num_blocks - 1)

        seat = pick_seat_in_block(grid, self.block, model.assigned, seat_blocks, params, rng=rng)
        if seat is None:
            block, seat = pick_seat_any_block(grid, model.assigned, seat_blocks, params, rng=rng)
            if seat is None:
                self._head_for_standing(params["CORRIDOR_WIDTH"])
                return
            self.block = block

        if params.get("FEATURE_ASSIGNED_SEATS"):
            model.assigned.add(seat)

        self.target = seat
        self.corridor = pick_preferred_corridor_cell(self.block, seat[1], model.block_corridors, rng)
        self.turn_row = rng.choice(turn_rows(grid.shape[0]))
        self.path = deque(compute_simple_path(self.pos, self.corridor, seat, self.turn_row))

    def _head_for_standing(self, corridor: int) -> None:
        grid = self.seating_model.grid
        self.will_stand = True
        self.target = find_standing_position(grid, self.random)
        # overflow spots in front of the seats are reached up the outer left corridor
        self.corridor = corridor if self.target[0] >= Defaults.SEAT_ROWS_END else 0
        self.turn_row = grid.shape[0] - 1
        self.path = deque(compute_simple_path(self.pos, self.corridor, self.target, self.turn_row))

    # ------------------------------------------------------------
    #  State queries
    # ------------------------------------------------------------
    @property
    def seated(self) -> bool:
        return self.state is AgentState.SEATED

    @property
    def standing(self) -> bool:
        return self.state is AgentState.STANDING

    @property
    def settled(self) -> bool:
        return self.state in TERMINAL_STATES

    # ------------------------------------------------------------
    #  Tick
    # ------------------------------------------------------------
    def step(self) -> None:
        if self.settled:
            return

        if not self.path:
            self._settle()
            return

        self.pos = self.path.popleft()
        self.state = AgentState.MOVING
        self.ticks_travelled += 1

    def _settle(self) -> None:
        model = self.seating_model
        r, c = self.pos
        cell = model.grid[r, c]

        if self.will_stand:
            self._finish(AgentState.STANDING, CellType.STANDING)
        elif cell == CellType.SEAT:
            self._finish(AgentState.SEATED, CellType.SEATED_AGENT)
        elif cell in OCCUPIED_TYPES:
            # seat taken by someone who got here first
            logger.debug("Seat %s already taken, attendee %s heads to the back", self.pos, self.unique_id)
            self._head_for_standing(model.config_snapshot["CORRIDOR_WIDTH"])
            model.reserve_standing(self.target)
        else:
            logger.warning("Attendee %s ended on %s without a seat, standing there", self.unique_id, self.pos)
            self._finish(AgentState.STANDING, CellType.STANDING)

    def _finish(self, state: AgentState, cell_type: CellType) -> None:
        r, c = self.pos
        self.state = state
        self.seating_model.grid[r, c] = cell_type
        self.settled_at = self.seating_model.ticks

    def __repr__(self):
        return f"AttendeeAgent({self.unique_id}, pos={self.pos}, state={self.state.value}, block={self.block})"
