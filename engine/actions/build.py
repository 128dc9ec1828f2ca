"""Build action.

Place 2 Sloops or 1 Galleon in a hex where you already have a ship, or at
your port. Each bribe places one extra Sloop in the same hex. Hexes with
another player's ships are off limits, except your own port.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from core.constants import (
    ActionKind,
    BRIBE_COST,
    BUILD_BASE_GALLEONS,
    BUILD_BASE_SLOOPS,
    ShipKind,
)
from core.hex_grid import HexCoord, on_board
from core.ship import Ship

from .base import ActionResult, BaseAction, ValidationResult

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player


class BuildAction(BaseAction):
    """Place new ships from the player's inventory."""

    kind = ActionKind.BUILD

    def __init__(self, player_id: int, cell: HexCoord, galleon: bool = False, bribes: int = 0):
        super().__init__(player_id)
        self.cell = cell
        self.galleon = galleon
        self.bribes = bribes

    def ships_to_place(self) -> dict[ShipKind, int]:
        if self.galleon:
            return {ShipKind.GALLEON: BUILD_BASE_GALLEONS, ShipKind.SLOOP: self.bribes}
        return {ShipKind.SLOOP: BUILD_BASE_SLOOPS + self.bribes, ShipKind.GALLEON: 0}

    def bribe_cost(self, state: GameState) -> int:
        return state.power_of(self.player_id).modify_build_cost(self.bribes * BRIBE_COST)

    def _validate_action(self, state: GameState, player: Player) -> ValidationResult:
        if self.bribes < 0:
            return ValidationResult.fail("Bribe count cannot be negative")
        if not on_board(self.cell):
            return ValidationResult.fail("Invalid hex coordinate")

        cell = state.board.get_cell(self.cell)
        is_own_port = player.port_cell == self.cell
        if not is_own_port and not cell.ships_of(self.player_id):
            return ValidationResult.fail("You need a ship in this hex or it must be your port")
        if not is_own_port and cell.has_foreign_ships(self.player_id):
            return ValidationResult.fail("Cannot build in a hex with other players' ships")

        for kind, count in self.ships_to_place().items():
            if player.inventory(kind) < count:
                return ValidationResult.fail(f"Not enough {kind.value}s in inventory")
        return ValidationResult.ok()

    def _apply(self, state: GameState, player: Player) -> ActionResult:
        placed = []
        for kind, count in self.ships_to_place().items():
            if count == 0:
                continue
            player.take_ships(kind, count)
            for _ in range(count):
                state.board.add_ship(self.cell, Ship(kind, self.player_id))
            placed.append(f"{count} {kind.value}(s)")
        self._consume_captain(player)
        return ActionResult(success=True, message=f"Built {' and '.join(placed)} at {self.cell}")

    def describe(self) -> str:
        what = "galleon" if self.galleon else "sloops"
        return f"build {what} at {self.cell} ({self.bribes} bribes)"


def enumerate_builds(state: GameState, player_id: int) -> list[dict[str, Any]]:
    """List bribe-free build options as dicts of BuildAction parameters."""
    player = state.get_player(player_id)
    candidates = set(state.board.cells_with_ships_of(player_id))
    if player.port_cell is not None:
        candidates.add(player.port_cell)

    options = []
    for coord in sorted(candidates):
        for galleon in (False, True):
            action = BuildAction(player_id, coord, galleon=galleon)
            if action._validate_action(state, player).valid:
                options.append({"cell": coord, "galleon": galleon, "bribes": 0})
    return options
