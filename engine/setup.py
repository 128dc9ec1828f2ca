"""Initial game setup logic for the Notorious rules engine.

During the setup phase each player, in seat order, places their port on a
hex without an island or another player's port, together with 2 Sloops
taken from their inventory. Once every player has a port the game enters
its first place phase.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from core.constants import Phase, SETUP_SLOOPS, ShipKind
from core.hex_grid import HexCoord, on_board
from core.ship import Ship

from .actions.base import ValidationResult

if TYPE_CHECKING:
    from core.game_state import GameState

logger = logging.getLogger(__name__)


class SetupManager:
    """Validation and execution of port placement during setup."""

    def __init__(self, state: GameState):
        """Initialize the setup manager.

        Args:
            state: The game state to manage setup for.
        """
        self.state = state

    # -------------------------------------------------------------------------
    # Port placement
    # -------------------------------------------------------------------------

    def get_valid_port_cells(self) -> list[HexCoord]:
        """Hexes where a port may currently be placed, in board order."""
        taken = {p.port_cell for p in self.state.players if p.port_cell is not None}
        return [
            cell.coord for cell in self.state.board.all_cells()
            if cell.island is None and cell.coord not in taken
        ]

    def validate_port_placement(self, player_id: int, coord: HexCoord) -> ValidationResult:
        """Validate a port placement.

        Args:
            player_id: The player placing their port.
            coord: The hex to place the port on.
        """
        if self.state.phase != Phase.SETUP:
            return ValidationResult.fail(
                f"Not in setup phase (current: {self.state.phase.value})"
            )
        if not self.state.has_player(player_id):
            return ValidationResult.fail(f"Unknown player {player_id}")

        player = self.state.get_player(player_id)
        if player.port_cell is not None:
            return ValidationResult.fail(f"Player {player_id} already placed a port")
        if not on_board(coord):
            return ValidationResult.fail("Invalid hex coordinate")
        if self.state.board.get_cell(coord).island is not None:
            return ValidationResult.fail("Cannot place port on island hex")
        if any(p.port_cell == coord for p in self.state.players if p.player_id != player_id):
            return ValidationResult.fail("Hex already has another player's port")
        if player.sloops < SETUP_SLOOPS:
            return ValidationResult.fail("Not enough sloops for starting ships")
        return ValidationResult.ok()

    def place_port(self, player_id: int, coord: HexCoord) -> ValidationResult:
        """Place a player's port and starting sloops.

        Returns:
            The validation result; nothing changes if it is invalid.
        """
        validation = self.validate_port_placement(player_id, coord)
        if not validation.valid:
            logger.debug("Player %d port at %s rejected: %s", player_id, coord, validation.reason)
            return validation

        player = self.state.get_player(player_id)
        player.port_cell = coord
        self.state.board.add_ship(coord, Ship(ShipKind.PORT, player_id))
        player.take_ships(ShipKind.SLOOP, SETUP_SLOOPS)
        for _ in range(SETUP_SLOOPS):
            self.state.board.add_ship(coord, Ship(ShipKind.SLOOP, player_id))

        logger.info("Player %d placed port at %s with %d sloops", player_id, coord, SETUP_SLOOPS)
        return validation

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def is_player_setup_complete(self, player_id: int) -> bool:
        return self.state.get_player(player_id).port_cell is not None

    def is_setup_complete(self) -> bool:
        """Check whether every player has placed their port."""
        return all(p.port_cell is not None for p in self.state.players)

    def get_next_player(self) -> Optional[int]:
        """Next player in seat order who still needs a port, or None."""
        for player in self.state.players:
            if player.port_cell is None:
                return player.player_id
        return None

    def get_setup_summary(self) -> dict:
        return {
            "ports": {
                p.player_id: p.port_cell.to_list() if p.port_cell else None
                for p in self.state.players
            },
            "complete": self.is_setup_complete(),
        }
