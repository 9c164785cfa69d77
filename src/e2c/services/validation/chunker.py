"""Batch splitting for judge submissions."""

from typing import List, Sequence, TypeVar

T = TypeVar("T")


def chunk(items: Sequence[T], max_size: int) -> List[List[T]]:
    """Split ``items`` into consecutive groups of at most ``max_size``.

    Order is preserved, so concatenating the groups yields ``items`` again.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be positive, got {max_size}")
    return [list(items[start : start + max_size]) for start in range(0, len(items), max_size)]
