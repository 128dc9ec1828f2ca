"""Random and fixed island placement.

Placement mirrors the physical setup: one treasure map exists per board
cell, the maps are shuffled, the first five drawn mark where islands go,
and the remaining fourteen become the treasure maps in the chart deck.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Sequence

from .board import BoardState
from .constants import ISLAND_COUNT
from .hex_grid import BOARD_CELLS, HexCoord
from .island import Island

logger = logging.getLogger(__name__)


@dataclass
class PlacementResult:
    """Outcome of placing islands.

    Attributes:
        islands: (coord, island) pairs in placement order.
        remaining_map_cells: Cells whose treasure maps go into the deck.
    """

    islands: list[tuple[HexCoord, Island]]
    remaining_map_cells: list[HexCoord]


class IslandPlacer:
    """Places a set of island definitions onto a board."""

    def __init__(self, definitions: Sequence[Island]):
        self.definitions = list(definitions)
        if len(self.definitions) != ISLAND_COUNT:
            raise ValueError(
                f"Expected {ISLAND_COUNT} island definitions, got {len(self.definitions)}"
            )

    def place_random(self, board: BoardState, rng: random.Random) -> PlacementResult:
        """Shuffle one map per cell and put islands on the first five drawn."""
        map_cells = list(BOARD_CELLS)
        rng.shuffle(map_cells)
        island_cells = map_cells[:ISLAND_COUNT]
        remaining = map_cells[ISLAND_COUNT:]

        definitions = list(self.definitions)
        rng.shuffle(definitions)

        placed = []
        for coord, island in zip(island_cells, definitions):
            board.place_island(coord, island)
            placed.append((coord, island))
            logger.debug("Placed island %s at %s", island.name, coord)

        logger.info("Placed %d islands", len(placed))
        return PlacementResult(islands=placed, remaining_map_cells=remaining)

    def place_fixed(self, board: BoardState, layout: dict[str, HexCoord]) -> PlacementResult:
        """Place islands at fixed cells.

        Args:
            board: The board to place islands on.
            layout: Mapping of island name to cell.

        Raises:
            ValueError: If the layout names an unknown island, misses one,
                or puts two islands on the same cell.
        """
        by_name = {island.name: island for island in self.definitions}
        unknown = set(layout) - set(by_name)
        if unknown:
            raise ValueError(f"Unknown islands in layout: {sorted(unknown)}")
        missing = set(by_name) - set(layout)
        if missing:
            raise ValueError(f"Layout is missing islands: {sorted(missing)}")

        placed = []
        for island in self.definitions:
            coord = layout[island.name]
            board.place_island(coord, island)
            placed.append((coord, island))

        island_cells = {coord for coord, _ in placed}
        remaining = [coord for coord in BOARD_CELLS if coord not in island_cells]
        return PlacementResult(islands=placed, remaining_map_cells=remaining)
