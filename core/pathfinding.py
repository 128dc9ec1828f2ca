"""Breadth-first shortest path search over board cells."""

from __future__ import annotations

from collections import deque
from typing import Callable

from .hex_grid import HexCoord, board_neighbors

BlockedFn = Callable[[HexCoord], bool]
TraverseFn = Callable[[HexCoord, HexCoord], bool]


def find_path(
    start: HexCoord,
    end: HexCoord,
    is_blocked: BlockedFn,
    can_traverse: TraverseFn,
) -> list[HexCoord]:
    """Find a shortest path between two board cells.

    Args:
        start: Starting cell (never tested against is_blocked).
        end: Destination cell.
        is_blocked: Returns True for cells the path may not enter.
        can_traverse: Returns True if the edge from -> to may be crossed.

    Returns:
        The cells from start to end inclusive, or an empty list if end is
        blocked or unreachable. When start == end the result is [start].
    """
    if is_blocked(end):
        return []
    if start == end:
        return [start]

    came_from: dict[HexCoord, HexCoord] = {}
    visited = {start}
    queue = deque([start])

    while queue:
        current = queue.popleft()
        for nxt in board_neighbors(current):
            if nxt in visited:
                continue
            if is_blocked(nxt) or not can_traverse(current, nxt):
                continue
            visited.add(nxt)
            came_from[nxt] = current
            if nxt == end:
                return _reconstruct(came_from, start, end)
            queue.append(nxt)

    return []


def _reconstruct(
    came_from: dict[HexCoord, HexCoord],
    start: HexCoord,
    end: HexCoord,
) -> list[HexCoord]:
    path = [end]
    while path[-1] != start:
        path.append(came_from[path[-1]])
    path.reverse()
    return path


def reachable_cells(
    start: HexCoord,
    max_steps: int,
    can_traverse: TraverseFn,
) -> dict[HexCoord, int]:
    """Get every cell reachable from start within max_steps hops.

    Returns:
        Mapping of cell to its hop distance (start maps to 0).
    """
    dist = {start: 0}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        if dist[current] >= max_steps:
            continue
        for nxt in board_neighbors(current):
            if nxt in dist or not can_traverse(current, nxt):
                continue
            dist[nxt] = dist[current] + 1
            queue.append(nxt)
    return dist
