import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def weighted_choice(items: Sequence[T], weights: Sequence[float], rng=random) -> Optional[T]:
    """
    Pick one of *items* with probability proportional to *weights*.

    A zero total weight returns the first item. The draw walks the list in
    order, subtracting weights until the remainder drops to zero or below;
    if rounding leaves it positive the last item is returned.
    """
    if not items:
        return None

    total = sum(weights)
    if total == 0:
        return items[0]

    rnd = rng.random() * total
    for item, weight in zip(items, weights):
        rnd -= weight
        if rnd <= 0:
            return item
    return items[-1]


def clamp(value, low, high):
    return max(low, min(high, value))


def is_valid_position(row: int, col: int, max_row: int, max_col: int) -> bool:
    return 0 <= row < max_row and 0 <= col < max_col
