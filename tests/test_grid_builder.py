import numpy as np

from Seating.config import CellType
from Seating.utilities.grid_builder import (
    back_rows,
    build_block_corridor_map,
    build_grid,
    build_layout,
    gate_cells,
    generate_corridor_segments,
    generate_seat_blocks,
    overflow_rows,
    seat_rows,
    turn_rows,
)


def test_row_bands():
    assert list(seat_rows(20)) == list(range(6, 14))
    assert back_rows(20) == [19, 18, 17, 16, 15, 14]
    assert list(turn_rows(20)) == [16, 17, 18, 19]
    assert list(turn_rows(40)) == [36, 37, 38, 39]
    assert overflow_rows(20) == [5, 4, 3, 2, 1, 0]
    assert overflow_rows(24) == [17, 16, 15, 14, 5, 4, 3, 2, 1, 0]


def test_default_room(layout):
    assert layout.rows == 20
    assert layout.cols == 68
    assert layout.seat_blocks == {0: (2, 15), 1: (18, 31), 2: (34, 47), 3: (50, 63)}
    assert layout.corridor_segments == [[0, 1], [16, 17], [32, 33], [48, 49], [64, 65]]
    assert layout.gates == [(19, 10), (19, 34), (19, 58)]
    assert layout.seat_capacity() == 4 * 14 * 8


def test_blocks_are_ordered_equal_and_inside_the_room():
    for cols in (40, 68, 101, 200):
        for num_blocks in range(2, 7):
            blocks = generate_seat_blocks(cols, num_blocks, 2)
            assert len(blocks) == num_blocks
            widths = {end - start for start, end in blocks.values()}
            assert len(widths) == 1
            ranges = [blocks[i] for i in range(num_blocks)]
            assert ranges[0][0] >= 0 and ranges[-1][1] < cols
            for (_, prev_end), (next_start, _) in zip(ranges, ranges[1:]):
                assert prev_end < next_start


def test_grid_cells(layout):
    grid = layout.grid
    assert grid.dtype == np.int8
    assert grid[7, 2] == CellType.SEAT
    assert grid[13, 63] == CellType.SEAT
    assert grid[14, 2] == CellType.EMPTY
    assert grid[0, 2] == CellType.EMPTY
    assert grid[0, 0] == CellType.CORRIDOR
    assert grid[7, 16] == CellType.CORRIDOR
    assert grid[19, 65] == CellType.CORRIDOR
    assert grid[7, 66] == CellType.EMPTY
    for r, c in gate_cells(20, 68):
        assert grid[r, c] == CellType.GATE


def test_block_of_column(layout):
    assert layout.block_of_column(2) == 0
    assert layout.block_of_column(40) == 2
    assert layout.block_of_column(16) is None


def test_corridor_segments_skip_columns_outside_the_room():
    blocks = {0: (2, 5), 1: (8, 11)}
    assert generate_corridor_segments(13, blocks, 2) == [[0, 1], [6, 7], [12]]


def test_block_corridor_map():
    segments = [[0, 1], [16, 17], [32, 33]]
    mapping = build_block_corridor_map(2, segments)
    assert mapping == {0: [[0, 1], [16, 17]], 1: [[16, 17], [32, 33]]}


def test_rightmost_block_borrows_previous_corridor():
    mapping = build_block_corridor_map(2, [[0], [5]])
    assert mapping[1] == [[0], [5]]


def test_build_grid_fails_when_blocks_do_not_fit():
    config = {"ROWS": 20, "COLS": 10, "NUM_BLOCKS": 6, "CORRIDOR_WIDTH": 2}
    assert build_grid(config) is None
    assert build_layout(config) is None


def test_build_is_repeatable(config):
    first = build_grid(config.snapshot())
    second = build_grid(config.snapshot())
    assert np.array_equal(first, second)


def test_taller_room_keeps_gates_on_the_bottom_row(config):
    config.set("ROWS", 30)
    layout = build_layout(config.snapshot())
    assert layout.gates == [(29, 10), (29, 34), (29, 58)]
    assert layout.seat_capacity() == 4 * 14 * 8


def test_layout_is_derived_from_a_single_block_computation(config, monkeypatch):
    from Seating.utilities import grid_builder

    calls = []
    original = grid_builder.generate_seat_blocks

    def counting(*args):
        calls.append(args)
        return original(*args)

    monkeypatch.setattr(grid_builder, "generate_seat_blocks", counting)
    layout = build_layout(config.snapshot())

    assert len(calls) == 1
    assert layout.seat_blocks == original(*calls[0])
    assert np.array_equal(layout.grid, build_grid(config.snapshot()))
