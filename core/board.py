"""Board model for the Notorious rules engine.

The board is a fixed set of 19 hex cells:
- Each cell holds an unordered collection of ships and optionally an island
- Islands block movement across specific sides of their cell
- Control of a cell goes to the unique owner with the most influence there
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .constants import ShipKind
from .errors import InvariantViolation
from .hex_grid import (
    BOARD_CELLS,
    HexCoord,
    coord_key,
    direction_between,
    on_board,
    opposite_direction,
)
from .island import Island
from .pathfinding import find_path
from .ship import Ship

logger = logging.getLogger(__name__)


@dataclass
class Cell:
    """State of a single board cell.

    Attributes:
        coord: Position of the cell.
        ships: Ships currently in the cell.
        island: Island bound to this cell, if any.
    """

    coord: HexCoord
    ships: list[Ship] = field(default_factory=list)
    island: Optional[Island] = None

    def ships_of(self, owner_id: int) -> list[Ship]:
        """Return the ships a given player has in this cell."""
        return [s for s in self.ships if s.owner_id == owner_id]

    def count(self, owner_id: int, kind: ShipKind) -> int:
        return sum(1 for s in self.ships if s.owner_id == owner_id and s.kind == kind)

    def has_ship_kind(self, owner_id: int, kind: ShipKind) -> bool:
        return self.count(owner_id, kind) > 0

    def owners(self) -> set[int]:
        return {s.owner_id for s in self.ships}

    def has_foreign_ships(self, owner_id: int) -> bool:
        """Check if any other player has a ship here."""
        return any(s.owner_id != owner_id for s in self.ships)

    def influence(self, owner_id: int) -> int:
        return sum(s.influence for s in self.ships if s.owner_id == owner_id)

    def influence_by_owner(self) -> dict[int, int]:
        totals: dict[int, int] = {}
        for ship in self.ships:
            totals[ship.owner_id] = totals.get(ship.owner_id, 0) + ship.influence
        return totals

    def controller(self) -> Optional[int]:
        """Return the owner with strictly the most influence, or None on a tie or empty cell."""
        totals = self.influence_by_owner()
        if not totals:
            return None
        best = max(totals.values())
        leaders = [owner for owner, total in totals.items() if total == best]
        if len(leaders) != 1:
            return None
        return leaders[0]

    def clone(self) -> Cell:
        return Cell(coord=self.coord, ships=list(self.ships), island=self.island)


@dataclass
class BoardState:
    """The 19-cell board.

    Cells are created once and never removed; only their ships change.
    Islands are bound during setup and are fixed afterwards.
    """

    cells: dict[HexCoord, Cell] = field(default_factory=dict)

    def __post_init__(self):
        if not self.cells:
            self.cells = {coord: Cell(coord=coord) for coord in BOARD_CELLS}

    # -------------------------------------------------------------------------
    # Cell access
    # -------------------------------------------------------------------------

    def get_cell(self, coord: HexCoord) -> Cell:
        """Get a cell by coordinate.

        Raises:
            KeyError: If the coordinate is not on the board.
        """
        return self.cells[coord]

    def has_cell(self, coord: HexCoord) -> bool:
        return coord in self.cells

    def all_cells(self) -> list[Cell]:
        """Return all cells in board order."""
        return [self.cells[coord] for coord in BOARD_CELLS]

    # -------------------------------------------------------------------------
    # Islands
    # -------------------------------------------------------------------------

    def place_island(self, coord: HexCoord, island: Island) -> None:
        """Bind an island to a cell.

        Raises:
            ValueError: If the cell is off the board, already has an island,
                or an island with the same name is already placed.
        """
        if coord not in self.cells:
            raise ValueError(f"Cannot place island {island.name} off the board at {coord}")
        if self.cells[coord].island is not None:
            raise ValueError(f"Cell {coord} already has island {self.cells[coord].island.name}")
        if self.island_cell(island.name) is not None:
            raise ValueError(f"Island {island.name} is already placed")
        self.cells[coord].island = island

    def islands(self) -> list[tuple[HexCoord, Island]]:
        """Return (coord, island) pairs in board order."""
        return [(cell.coord, cell.island) for cell in self.all_cells() if cell.island is not None]

    def island_cell(self, name: str) -> Optional[HexCoord]:
        """Return the coordinate of the named island, or None if not placed."""
        for cell in self.cells.values():
            if cell.island is not None and cell.island.name == name:
                return cell.coord
        return None

    def island_names(self) -> list[str]:
        return [island.name for _, island in self.islands()]

    # -------------------------------------------------------------------------
    # Movement rules
    # -------------------------------------------------------------------------

    def can_traverse_edge(
        self,
        from_coord: HexCoord,
        to_coord: HexCoord,
        ignore_islands: bool = False,
    ) -> bool:
        """Check whether a ship may cross the shared side of two adjacent cells.

        The crossing is blocked if the island on either side blocks the
        direction pointing at the other cell.
        """
        if from_coord not in self.cells or to_coord not in self.cells:
            return False
        direction = direction_between(from_coord, to_coord)
        if direction is None:
            return False
        if ignore_islands:
            return True

        from_island = self.cells[from_coord].island
        if from_island is not None and from_island.blocks(direction):
            return False
        to_island = self.cells[to_coord].island
        if to_island is not None and to_island.blocks(opposite_direction(direction)):
            return False
        return True

    def find_path(
        self,
        start: HexCoord,
        end: HexCoord,
        ignore_islands: bool = False,
    ) -> list[HexCoord]:
        """Shortest traversable path between two cells (inclusive), or [] if none."""
        return find_path(
            start,
            end,
            is_blocked=lambda coord: not on_board(coord),
            can_traverse=lambda a, b: self.can_traverse_edge(a, b, ignore_islands),
        )

    # -------------------------------------------------------------------------
    # Ship primitives
    # -------------------------------------------------------------------------

    def add_ship(self, coord: HexCoord, ship: Ship) -> None:
        """Place a ship in a cell.

        Raises:
            InvariantViolation: If the cell is not on the board.
        """
        if coord not in self.cells:
            raise InvariantViolation(f"Cannot add {ship.kind.value} off the board at {coord}")
        self.cells[coord].ships.append(ship)

    def remove_ship(self, coord: HexCoord, owner_id: int, kind: ShipKind) -> Ship:
        """Remove one ship of the given owner and kind from a cell.

        Raises:
            InvariantViolation: If no such ship is present.
        """
        cell = self.cells.get(coord)
        if cell is None:
            raise InvariantViolation(f"Cannot remove ship off the board at {coord}")
        for idx, ship in enumerate(cell.ships):
            if ship.owner_id == owner_id and ship.kind == kind:
                return cell.ships.pop(idx)
        raise InvariantViolation(
            f"Player {owner_id} has no {kind.value} at {coord} to remove"
        )

    def move_ship(
        self,
        from_coord: HexCoord,
        to_coord: HexCoord,
        owner_id: int,
        kind: ShipKind,
        ignore_islands: bool = False,
    ) -> bool:
        """Move one ship across a single edge.

        Returns:
            True if the ship moved; False if the cells are not adjacent,
            the edge is blocked or the ship is not there. Nothing changes
            on failure.
        """
        if not self.can_traverse_edge(from_coord, to_coord, ignore_islands):
            return False
        if kind == ShipKind.PORT or not self.cells[from_coord].has_ship_kind(owner_id, kind):
            return False
        ship = self.remove_ship(from_coord, owner_id, kind)
        self.cells[to_coord].ships.append(ship)
        return True

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def ships_of(self, coord: HexCoord, owner_id: int) -> list[Ship]:
        return self.cells[coord].ships_of(owner_id)

    def has_ship_kind(self, coord: HexCoord, owner_id: int, kind: ShipKind) -> bool:
        return self.cells[coord].has_ship_kind(owner_id, kind)

    def influence(self, coord: HexCoord, owner_id: int) -> int:
        return self.cells[coord].influence(owner_id)

    def controller(self, coord: HexCoord) -> Optional[int]:
        return self.cells[coord].controller()

    def controlled_cells(self, owner_id: int) -> list[HexCoord]:
        """Return every cell the player controls, in board order."""
        return [cell.coord for cell in self.all_cells() if cell.controller() == owner_id]

    def count_ships(self, owner_id: int, kind: ShipKind) -> int:
        """Count a player's ships of a kind across the whole board."""
        return sum(cell.count(owner_id, kind) for cell in self.cells.values())

    def cells_with_ships_of(self, owner_id: int) -> list[HexCoord]:
        return [cell.coord for cell in self.all_cells() if cell.ships_of(owner_id)]

    # -------------------------------------------------------------------------
    # Copy and serialization
    # -------------------------------------------------------------------------

    def clone(self) -> BoardState:
        """Create a copy of the board that can be mutated independently."""
        return BoardState(cells={coord: cell.clone() for coord, cell in self.cells.items()})

    def to_dict(self) -> dict[str, Any]:
        """Serialize cells keyed by "q,r" in board order."""
        return {
            coord_key(cell.coord): {
                "ships": [
                    ship.to_dict()
                    for ship in sorted(cell.ships, key=lambda s: (s.owner_id, s.kind.value))
                ],
                "island": cell.island.to_dict() if cell.island else None,
                "controller": cell.controller(),
            }
            for cell in self.all_cells()
        }
