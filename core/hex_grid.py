"""Axial hex coordinate arithmetic for the 19-cell Notorious board.

Cells use axial coordinates (q, r) with the cube coordinate s derived as
-q - r, so q + r + s == 0 always holds. Directions are indexed 0-5:

    0: E  (+1,  0)
    1: NE (+1, -1)
    2: NW ( 0, -1)
    3: W  (-1,  0)
    4: SW (-1, +1)
    5: SE ( 0, +1)

Island impassable edges refer to these indices.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import BOARD_RADIUS

Direction = int


@dataclass(frozen=True, order=True)
class HexCoord:
    """An axial hex coordinate.

    Attributes:
        q: Column axis.
        r: Row axis.
    """

    q: int
    r: int

    @classmethod
    def from_cube(cls, q: int, r: int, s: int) -> HexCoord:
        """Build a coordinate from a cube triple.

        Raises:
            ValueError: If q + r + s != 0.
        """
        if q + r + s != 0:
            raise ValueError(f"Invalid cube coordinate ({q}, {r}, {s}): q + r + s must be 0")
        return cls(q, r)

    @property
    def s(self) -> int:
        return -self.q - self.r

    def __add__(self, other: HexCoord) -> HexCoord:
        return HexCoord(self.q + other.q, self.r + other.r)

    def __sub__(self, other: HexCoord) -> HexCoord:
        return HexCoord(self.q - other.q, self.r - other.r)

    def to_list(self) -> list[int]:
        return [self.q, self.r]

    def __str__(self) -> str:
        return f"({self.q}, {self.r})"


DIRECTIONS: tuple[HexCoord, ...] = (
    HexCoord(1, 0),   # 0: E
    HexCoord(1, -1),  # 1: NE
    HexCoord(0, -1),  # 2: NW
    HexCoord(-1, 0),  # 3: W
    HexCoord(-1, 1),  # 4: SW
    HexCoord(0, 1),   # 5: SE
)

ORIGIN = HexCoord(0, 0)


def opposite_direction(direction: Direction) -> Direction:
    """Return the direction pointing the other way."""
    return (direction + 3) % 6


def neighbor(coord: HexCoord, direction: Direction) -> HexCoord:
    """Return the cell adjacent to coord in the given direction."""
    return coord + DIRECTIONS[direction]


def neighbors(coord: HexCoord) -> list[HexCoord]:
    """Return all six adjacent coordinates (on or off the board), in direction order."""
    return [coord + d for d in DIRECTIONS]


def distance(a: HexCoord, b: HexCoord) -> int:
    """Hex distance between two coordinates."""
    diff = a - b
    return (abs(diff.q) + abs(diff.r) + abs(diff.s)) // 2


def is_adjacent(a: HexCoord, b: HexCoord) -> bool:
    return distance(a, b) == 1


def direction_between(a: HexCoord, b: HexCoord) -> Optional[Direction]:
    """Return the direction index from a to an adjacent b, or None if not adjacent."""
    diff = b - a
    for idx, vec in enumerate(DIRECTIONS):
        if vec == diff:
            return idx
    return None


def _ring(radius: int) -> list[HexCoord]:
    """Cells at exactly `radius` from the origin, starting north and going clockwise."""
    if radius == 0:
        return [ORIGIN]
    cells = []
    coord = HexCoord(0, -radius)
    # Walk each side of the ring: E, SE, SW, W, NW, NE
    for direction in (0, 5, 4, 3, 2, 1):
        for _ in range(radius):
            cells.append(coord)
            coord = neighbor(coord, direction)
    return cells


def _build_board_cells() -> tuple[HexCoord, ...]:
    # Ring 1 is listed in direction order; ring 2 starts at (0, -2) and goes clockwise
    cells = [ORIGIN]
    cells.extend(DIRECTIONS)
    for radius in range(2, BOARD_RADIUS + 1):
        cells.extend(_ring(radius))
    return tuple(cells)


BOARD_CELLS: tuple[HexCoord, ...] = _build_board_cells()
_BOARD_SET = frozenset(BOARD_CELLS)


def on_board(coord: HexCoord) -> bool:
    """Check whether a coordinate is one of the 19 board cells."""
    return coord in _BOARD_SET


def board_neighbors(coord: HexCoord) -> list[HexCoord]:
    """Adjacent coordinates that are on the board."""
    return [n for n in neighbors(coord) if n in _BOARD_SET]


def coord_key(coord: HexCoord) -> str:
    """Serialize a coordinate as a "q,r" string key."""
    return f"{coord.q},{coord.r}"


def parse_coord_key(key: str) -> HexCoord:
    """Parse a "q,r" key produced by coord_key.

    Raises:
        ValueError: If the key is malformed.
    """
    parts = key.split(",")
    if len(parts) != 2:
        raise ValueError(f"Invalid coordinate key: {key!r}")
    return HexCoord(int(parts[0]), int(parts[1]))
