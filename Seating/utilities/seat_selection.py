# seat_selection.py
"""
Seat choice for arriving attendees.

Choice happens in two stages: a row is drawn first (front rows avoided,
back rows favoured as ``BACK_PREF`` grows), then a seat within that row
(aisle seats favoured by ``AISLE_PREF``, seats with free neighbours by
``SOCIAL_DISTANCE``). Nothing here raises: a ``None`` seat means "try the
next fallback".
"""
from __future__ import annotations

import logging
import random
from typing import AbstractSet, Any, List, Mapping, Optional, Tuple

import numpy as np

from Seating.config import CellType, Defaults, OCCUPIED_TYPES
from Seating.utilities.general import clamp, is_valid_position, weighted_choice
from Seating.utilities.grid_builder import SeatBlocks, back_rows, overflow_rows, seat_rows

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]

NEIGHBOUR_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1), (-1, -1), (-1, 1), (1, -1), (1, 1))


def row_occupancy(grid: np.ndarray, row: int, c0: int, c1: int) -> int:
    """Seated plus standing attendees in ``grid[row, c0..c1]``."""
    segment = grid[row, c0:c1 + 1]
    return int(np.count_nonzero(np.isin(segment, list(OCCUPIED_TYPES))))


def count_adjacent_seated(grid: np.ndarray, seat: Cell) -> int:
    r, c = seat
    rows, cols = grid.shape
    return sum(
        1
        for dr, dc in NEIGHBOUR_OFFSETS
        if is_valid_position(r + dr, c + dc, rows, cols) and grid[r + dr, c + dc] == CellType.SEATED_AGENT
    )


def _free_seat_columns(grid: np.ndarray, row: int, c0: int, c1: int, assigned: AbstractSet[Cell]) -> List[int]:
    return [c for c in range(c0, c1 + 1) if grid[row, c] == CellType.SEAT and (row, c) not in assigned]


def front_rows_to_ban(back_pref: float) -> int:
    """0-1 -> 0, 2-3 -> 1, 4-5 -> 2 front rows skipped when possible."""
    if back_pref >= 4:
        return 2
    if back_pref >= 2:
        return 1
    return 0


def front_aversion_probabilities(back_pref: float) -> Tuple[float, float]:
    """Chance of skipping the frontmost and the second frontmost candidate row."""
    p_front = min(0.15 + 0.15 * back_pref, 0.85)
    if back_pref >= 4:
        p_second = 0.35
    elif back_pref >= 3:
        p_second = 0.2
    else:
        p_second = 0.0
    return p_front, p_second


def _filter_front_rows(available: List[int], back_pref: float, rng) -> List[int]:
    start_row = Defaults.SEAT_ROWS_START
    candidates = available

    ban = front_rows_to_ban(back_pref)
    if ban > 0:
        filtered = [r for r in available if r - start_row >= ban]
        if filtered:
            candidates = filtered
            logger.debug("Front rows banned=%d; candidates=%s from %s", ban, candidates, available)

    ordered = sorted(candidates)
    front_most = ordered[0]
    second_front = ordered[1] if len(ordered) > 1 else None
    p_front, p_second = front_aversion_probabilities(back_pref)

    kept = candidates
    if rng.random() < p_front:
        without_front = [r for r in kept if r != front_most]
        if without_front:
            kept = without_front
    if len(kept) > 1 and second_front is not None and rng.random() < p_second:
        without_second = [r for r in kept if r != second_front]
        if without_second:
            kept = without_second

    if len(kept) != len(candidates):
        logger.debug("Front aversion applied -> rows=%s (from %s)", kept, candidates)
    return kept


def _choose_row(candidates: List[int], back_pref: float, rng) -> int:
    if back_pref > 0:
        weights = [1 + back_pref * 2.0 ** (r - Defaults.SEAT_ROWS_START) for r in candidates]
        return weighted_choice(candidates, weights, rng)
    return rng.choice(candidates)


def seat_weight(grid: np.ndarray, seat: Cell, c0: int, c1: int, params: Mapping[str, Any]) -> float:
    row, col = seat
    weight = 1.0

    if min(col - c0, c1 - col) <= 1 and params["AISLE_PREF"] > 0:
        weight += params["AISLE_PREF"] * 3

    weight += (8 - count_adjacent_seated(grid, seat)) * params["SOCIAL_DISTANCE"]
    return max(weight, 0.01)


def pick_seat_in_block(grid: np.ndarray, block: int, assigned: AbstractSet[Cell], seat_blocks: SeatBlocks,
                       params: Mapping[str, Any], row_threshold: int = Defaults.DEFAULT_ROW_THRESHOLD,
                       rng=random) -> Optional[Cell]:
    """
    Choose a free, unassigned seat in *block*, or ``None`` if it has none.

    Rows whose seated + standing count reached *row_threshold* are skipped.
    """
    try:
        c0, c1 = seat_blocks[block]

        available = [
            r for r in seat_rows(grid.shape[0])
            if row_occupancy(grid, r, c0, c1) < row_threshold
            and _free_seat_columns(grid, r, c0, c1, assigned)
        ]
        if not available:
            return None

        back_pref = params["BACK_PREF"]
        candidates = _filter_front_rows(available, back_pref, rng) if back_pref > 0 else available
        chosen_row = _choose_row(candidates, back_pref, rng)

        seats = [(chosen_row, c) for c in _free_seat_columns(grid, chosen_row, c0, c1, assigned)]
        if not seats:
            return None

        weights = [seat_weight(grid, seat, c0, c1, params) for seat in seats]
        return weighted_choice(seats, weights, rng)
    except Exception:
        logger.exception("Seat selection error in block %s", block)
        return None


def pick_seat_any_block(grid: np.ndarray, assigned: AbstractSet[Cell], seat_blocks: SeatBlocks,
                        params: Mapping[str, Any], row_threshold: int = Defaults.DEFAULT_ROW_THRESHOLD,
                        rng=random) -> Tuple[Optional[int], Optional[Cell]]:
    """Try every block in random order; ``(None, None)`` when all are full."""
    blocks = list(seat_blocks)
    rng.shuffle(blocks)

    for block in blocks:
        seat = pick_seat_in_block(grid, block, assigned, seat_blocks, params, row_threshold, rng)
        if seat is not None:
            return block, seat
    return None, None


def fallback_standing_cell(grid: np.ndarray) -> Cell:
    rows, cols = grid.shape
    up, c = Defaults.FALLBACK_STANDING_OFFSET
    return clamp(rows - up, 0, rows - 1), clamp(c, 0, cols - 1)


def find_standing_position(grid: np.ndarray, rng=random) -> Cell:
    """
    Random free spot in the bottom-most back row that still has one.

    Seats, gates and occupied cells are never returned. Once every back
    row is full the remaining rows outside the seat band are scanned in
    order (nearest the back first, left to right) and the first free cell
    is taken. The fixed fallback cell is returned only when the whole room
    is full.
    """
    blocked = (CellType.SEAT, CellType.GATE, CellType.SEATED_AGENT, CellType.STANDING)
    try:
        for r in back_rows(grid.shape[0]):
            candidates = [(r, int(c)) for c in np.flatnonzero(~np.isin(grid[r], blocked))]
            if candidates:
                return rng.choice(candidates)

        for r in overflow_rows(grid.shape[0]):
            free = np.flatnonzero(~np.isin(grid[r], blocked))
            if free.size:
                logger.debug("Back rows full, standing at overflow cell (%d, %d)", r, int(free[0]))
                return r, int(free[0])
    except Exception:
        logger.exception("Standing position selection error")

    logger.warning("No free standing position left, using fallback cell")
    return fallback_standing_cell(grid)
