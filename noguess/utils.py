"""Utility functions for the no-guess board generator."""

from typing import Dict, List, Tuple

# Module-level cache: size -> ((neighbor ids of cell 0), (neighbor ids of cell 1), ...)
_NEIGHBORHOODS_CACHE: Dict[int, Tuple[Tuple[int, ...], ...]] = {}


def get_neighborhoods(size: int) -> Tuple[Tuple[int, ...], ...]:
    """
    Precompute and cache 8-connected neighbor ids for every cell of a square grid.

    Cells are numbered row-major, so the cell at (row, col) has id
    ``row * size + col``. Positions outside the grid are dropped rather than
    wrapped, which leaves corner cells with 3 neighbors and edge cells with 5.

    Args:
        size: Number of cells along each side. Must be positive.

    Returns:
        A tuple indexed by cell id, each entry a tuple of neighbor ids in
        ascending order.

    Raises:
        ValueError: If size is non-positive.
    """
    if size <= 0:
        raise ValueError("size must be positive.")

    cached = _NEIGHBORHOODS_CACHE.get(size)
    if cached is not None:
        return cached

    neighborhoods: List[Tuple[int, ...]] = []
    for row in range(size):
        for col in range(size):
            nbrs: List[int] = []
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    if dr == 0 and dc == 0:
                        continue
                    nr, nc = row + dr, col + dc
                    if 0 <= nr < size and 0 <= nc < size:
                        nbrs.append(nr * size + nc)
            neighborhoods.append(tuple(nbrs))

    result = tuple(neighborhoods)
    _NEIGHBORHOODS_CACHE[size] = result
    return result
