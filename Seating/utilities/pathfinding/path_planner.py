# path_planner.py  --------------------------------------------------------------
"""
Route templates for attendees.

Routes are not searched: every attendee walks the same four legs
(down/up to a turn row, across to a feeder corridor, up the corridor to
its row, along the row to its seat), which keeps paths deterministic once
the corridor column and turn row are drawn.
"""
import logging
import math
import random
from typing import Dict, List, Optional, Sequence, Tuple

from Seating.utilities.general import weighted_choice

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]

# used when a block has no corridor segments at all
FALLBACK_CORRIDOR_COLUMN = 4


def _span(start: int, stop: int) -> range:
    """Cells after *start* up to and including *stop*, in walking order."""
    step = 1 if stop > start else -1
    return range(start + step, stop + step, step)


def compute_simple_path(spawn: Cell, corridor: int, seat: Cell, turn_row: int) -> List[Cell]:
    """
    Cell-by-cell route from *spawn* to *seat* through column *corridor*.

    Legs, each skipped when it would not move:
      1. along the spawn column to *turn_row*
      2. along *turn_row* to *corridor*
      3. up *corridor* to the seat row (only when the seat is above the turn row)
      4. along the seat row to the seat column

    The spawn cell itself is not part of the path. Returns ``[]`` if the
    route cannot be built.
    """
    try:
        r, c = spawn
        seat_row, seat_col = seat
        path: List[Cell] = []

        if r != turn_row:
            path.extend((rr, c) for rr in _span(r, turn_row))

        if c != corridor:
            path.extend((turn_row, cc) for cc in _span(c, corridor))

        if turn_row > seat_row:
            path.extend((rr, corridor) for rr in range(turn_row - 1, seat_row - 1, -1))

        if corridor != seat_col:
            path.extend((seat_row, cc) for cc in _span(corridor, seat_col))

        return path
    except Exception:
        logger.exception("Path computation error for %s -> %s", spawn, seat)
        return []


def pick_block_based_on_gate(gate_col: int, num_blocks: int, gates: Sequence[Cell], rng=random) -> int:
    """
    Weighted block choice biased towards the blocks in front of a gate.

    For a known gate, blocks are split into spans of
    ``num_blocks / len(gates)``; the span's base block weighs 0.6, the
    next block 0.3 and, only when the base block is the last one, the
    previous block 0.1. A column that is not a gate uses its nearest gate
    with weights 0.6 for the base block and 0.2 for each neighbour.
    """
    if not gates or num_blocks <= 0:
        return 0

    gate_index = next((i for i, gate in enumerate(gates) if gate[1] == gate_col), -1)

    if gate_index == -1:
        closest = min(range(len(gates)), key=lambda i: (abs(gates[i][1] - gate_col), i))
        block_span = max(1, num_blocks // len(gates))
        base_block = min(closest * block_span, num_blocks - 1)

        blocks, weights = [base_block], [0.6]
        if base_block > 0:
            blocks.append(base_block - 1)
            weights.append(0.2)
        if base_block < num_blocks - 1:
            blocks.append(base_block + 1)
            weights.append(0.2)
        return weighted_choice(blocks, weights, rng)

    block_span = num_blocks / len(gates)
    base_block = math.floor(gate_index * block_span)

    blocks, weights = [], []
    if base_block < num_blocks:
        blocks.append(base_block)
        weights.append(0.6)
    if base_block + 1 < num_blocks:
        blocks.append(base_block + 1)
        weights.append(0.3)
    if base_block > 0 and len(blocks) < 2:
        blocks.append(base_block - 1)
        weights.append(0.1)

    if not blocks:
        return num_blocks - 1

    logger.debug("Gate %d -> blocks %s with weights %s", gate_col, blocks, weights)
    return weighted_choice(blocks, weights, rng)


def pick_preferred_corridor_cell(block: int, seat_col: int,
                                 block_to_corridor_cells: Dict[int, List[List[int]]],
                                 rng=random) -> int:
    """
    Corridor column an attendee walks up to reach *seat_col* in *block*.

    Segments are weighted ``1 / (distance + 1)`` by their nearest column;
    within the chosen segment the column closest to the seat wins (first
    one on ties).
    """
    segments = block_to_corridor_cells.get(block)
    if not segments:
        return FALLBACK_CORRIDOR_COLUMN

    try:
        weights = [1.0 / (min(abs(seat_col - c) for c in seg) + 1) for seg in segments]
        chosen: Optional[List[int]] = weighted_choice(segments, weights, rng)
        return min(chosen, key=lambda c: abs(seat_col - c))
    except Exception:
        logger.exception("Corridor cell selection error for block %d", block)
        return segments[0][0] if segments[0] else FALLBACK_CORRIDOR_COLUMN
