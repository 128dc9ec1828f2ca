"""Steal action.

In a hex where you have a ship, take an opponent's Sloop off the board
(it returns to their inventory). You may put one of your own Sloops in
its place. No bribes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from core.constants import ActionKind, ShipKind
from core.hex_grid import HexCoord, on_board
from core.ship import Ship

from .base import ActionResult, BaseAction, ValidationResult

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player


class StealAction(BaseAction):
    """Remove an opponent's sloop, optionally replacing it with your own."""

    kind = ActionKind.STEAL

    def __init__(
        self,
        player_id: int,
        cell: HexCoord,
        target_player_id: int,
        replace_with_sloop: bool = False,
    ):
        super().__init__(player_id)
        self.cell = cell
        self.target_player_id = target_player_id
        self.replace_with_sloop = replace_with_sloop

    def _validate_action(self, state: GameState, player: Player) -> ValidationResult:
        if not on_board(self.cell):
            return ValidationResult.fail("Invalid hex coordinate")
        if self.target_player_id == self.player_id:
            return ValidationResult.fail("Cannot steal from yourself")
        if not state.has_player(self.target_player_id):
            return ValidationResult.fail(f"Unknown player {self.target_player_id}")

        cell = state.board.get_cell(self.cell)
        if not cell.ships_of(self.player_id):
            return ValidationResult.fail("You have no pieces in this hex")
        if not cell.has_ship_kind(self.target_player_id, ShipKind.SLOOP):
            return ValidationResult.fail("No opposing sloop to steal in this hex")
        if self.replace_with_sloop and player.sloops < 1:
            return ValidationResult.fail("No sloop in inventory to replace with")
        return ValidationResult.ok()

    def _apply(self, state: GameState, player: Player) -> ActionResult:
        target = state.get_player(self.target_player_id)
        state.board.remove_ship(self.cell, self.target_player_id, ShipKind.SLOOP)
        target.return_ships(ShipKind.SLOOP)
        state.power_of(self.target_player_id).on_ship_stolen(target, ShipKind.SLOOP, player)

        message = f"Stole a sloop from {target.name} at {self.cell}"
        if self.replace_with_sloop:
            player.take_ships(ShipKind.SLOOP)
            state.board.add_ship(self.cell, Ship(ShipKind.SLOOP, self.player_id))
            message += " and replaced it"

        self._consume_captain(player)
        return ActionResult(success=True, message=message)

    def describe(self) -> str:
        return f"steal from player {self.target_player_id} at {self.cell}"


def enumerate_steals(state: GameState, player_id: int) -> list[dict[str, Any]]:
    """List steal targets as dicts of StealAction parameters."""
    player = state.get_player(player_id)
    options = []
    for coord in state.board.cells_with_ships_of(player_id):
        cell = state.board.get_cell(coord)
        for owner in sorted(cell.owners()):
            if owner == player_id or not cell.has_ship_kind(owner, ShipKind.SLOOP):
                continue
            options.append({"cell": coord, "target_player_id": owner, "replace_with_sloop": False})
            if player.sloops > 0:
                options.append({"cell": coord, "target_player_id": owner, "replace_with_sloop": True})
    return options
