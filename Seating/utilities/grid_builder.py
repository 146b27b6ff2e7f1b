# grid_builder.py
"""
Turns a parameter mapping into the venue floor plan.

The floor plan is a ``(ROWS, COLS)`` int8 array of :class:`CellType`
values indexed ``grid[row, col]``; row 0 is the stage end and the gates
sit on the bottom row. Seat blocks span the fixed seat-row band and are
separated by corridors of ``CORRIDOR_WIDTH`` columns, one corridor before
the first block and one after every block.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np

from Seating.config import CellType, Defaults

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]
SeatBlocks = Dict[int, Tuple[int, int]]
CorridorSegment = List[int]


@dataclass
class SeatingLayout:
    """Grid plus the derived layout metadata the engine navigates by."""
    grid: np.ndarray
    seat_blocks: SeatBlocks
    corridor_segments: List[CorridorSegment]
    block_corridors: Dict[int, List[CorridorSegment]]
    gates: List[Cell] = field(default_factory=list)

    @property
    def rows(self) -> int:
        return self.grid.shape[0]

    @property
    def cols(self) -> int:
        return self.grid.shape[1]

    def seat_capacity(self) -> int:
        return int(np.count_nonzero(self.grid == CellType.SEAT))

    def block_of_column(self, col: int) -> Optional[int]:
        for block, (start, end) in self.seat_blocks.items():
            if start <= col <= end:
                return block
        return None


# ———— row bands ————

def seat_rows(rows: int) -> range:
    return range(Defaults.SEAT_ROWS_START, min(Defaults.SEAT_ROWS_END, rows))


def back_rows(rows: int) -> List[int]:
    """Standing rows, bottom-most first."""
    last = rows - 1
    return [r for r in range(last, last - Defaults.BACK_ROW_COUNT, -1) if r >= 0]


def overflow_rows(rows: int) -> List[int]:
    """Rows outside both the seat band and the back rows, nearest the back first."""
    taken = set(back_rows(rows)) | set(seat_rows(rows))
    return [r for r in range(rows - 1, -1, -1) if r not in taken]


def turn_rows(rows: int) -> range:
    """Rows an attendee may use for the horizontal walk to its corridor."""
    return range(max(rows - Defaults.TURN_ROW_COUNT, 0), rows)


def gate_columns(cols: int) -> List[int]:
    return [c for c in Defaults.GATE_POSITIONS if c < cols]


def gate_cells(rows: int, cols: int) -> List[Cell]:
    return [(rows - 1, c) for c in gate_columns(cols)]


# ———— layout ————

def generate_seat_blocks(cols: int, num_blocks: int, corridor_width: int) -> SeatBlocks:
    total_seat = cols - (num_blocks + 1) * corridor_width
    block_width = total_seat // num_blocks

    blocks: SeatBlocks = {}
    for i in range(num_blocks):
        start = corridor_width + i * (block_width + corridor_width)
        blocks[i] = (start, start + block_width - 1)

    logger.debug(
        "Seat blocks: %d cols - %d corridors * %d = %d seat columns, %d per block: %s",
        cols, num_blocks + 1, corridor_width, total_seat, block_width, blocks,
    )
    return blocks


def generate_corridor_segments(cols: int, seat_blocks: SeatBlocks, corridor_width: int) -> List[CorridorSegment]:
    segments: List[CorridorSegment] = [list(range(corridor_width))]

    for i in range(len(seat_blocks)):
        end = seat_blocks[i][1]
        segment = [c for c in range(end + 1, end + 1 + corridor_width) if c < cols]
        if segment and segment not in segments:
            segments.append(segment)

    logger.debug("Generated %d corridor segments: %s", len(segments), segments)
    return segments


def build_block_corridor_map(num_blocks: int, segments: List[CorridorSegment]) -> Dict[int, List[CorridorSegment]]:
    """
    Corridor segments each block may be entered from.

    Block ``i`` sees segment ``i`` (its left corridor) and ``i + 1`` (its
    right corridor). A rightmost block left with a single corridor also
    borrows segment ``i - 1``.
    """
    mapping: Dict[int, List[CorridorSegment]] = {}
    for i in range(num_blocks):
        available = []
        if i < len(segments):
            available.append(segments[i])
        if i + 1 < len(segments):
            available.append(segments[i + 1])

        if len(available) == 1 and i == num_blocks - 1 and 1 <= i <= len(segments):
            available.insert(0, segments[i - 1])

        mapping[i] = available
        logger.debug("Block %d: %d corridor(s) available", i, len(available))
    return mapping


def _build_parts(config: Mapping[str, Any]) -> Optional[Tuple[np.ndarray, SeatBlocks, List[CorridorSegment]]]:
    """Grid together with the seat blocks and corridor segments it was drawn from."""
    try:
        rows, cols = config["ROWS"], config["COLS"]
        corridor_width = config["CORRIDOR_WIDTH"]
        seat_blocks = generate_seat_blocks(cols, config["NUM_BLOCKS"], corridor_width)
        if any(end < start for start, end in seat_blocks.values()):
            logger.error("No room for %d seat blocks in %d columns", config["NUM_BLOCKS"], cols)
            return None

        segments = generate_corridor_segments(cols, seat_blocks, corridor_width)
        grid = np.full((rows, cols), CellType.EMPTY, dtype=np.int8)

        for r in seat_rows(rows):
            for start, end in seat_blocks.values():
                grid[r, start:min(end, cols - 1) + 1] = CellType.SEAT

        for segment in segments:
            column = grid[:, segment]
            column[column == CellType.EMPTY] = CellType.CORRIDOR
            grid[:, segment] = column

        for r, c in gate_cells(rows, cols):
            grid[r, c] = CellType.GATE

        return grid, seat_blocks, segments
    except Exception:
        logger.exception("Grid building error")
        return None


def build_grid(config: Mapping[str, Any]) -> Optional[np.ndarray]:
    """
    Build the cell-type grid for *config*.

    Returns ``None`` (after logging) when the layout cannot be built, e.g.
    too many blocks for the column budget.
    """
    parts = _build_parts(config)
    return None if parts is None else parts[0]


def build_layout(config: Mapping[str, Any]) -> Optional[SeatingLayout]:
    """Grid plus seat blocks, corridor segments, block corridors and gates."""
    parts = _build_parts(config)
    if parts is None:
        return None

    grid, seat_blocks, segments = parts
    try:
        rows, cols = grid.shape
        return SeatingLayout(
            grid=grid,
            seat_blocks=seat_blocks,
            corridor_segments=segments,
            block_corridors=build_block_corridor_map(config["NUM_BLOCKS"], segments),
            gates=gate_cells(rows, cols),
        )
    except Exception:
        logger.exception("Layout building error")
        return None
