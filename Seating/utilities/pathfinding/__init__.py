from .path_planner import (
    compute_simple_path,
    pick_block_based_on_gate,
    pick_preferred_corridor_cell,
)
