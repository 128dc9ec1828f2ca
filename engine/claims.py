"""Chart claiming during the pirate phase.

Claim rules by chart kind:
- Treasure Map: have a Galleon at the target hex and control it.
  Reward: 1 doubloon per player in the game.
- Island Raid: have a Galleon on the island and control it, and the raid
  must hold at least 2 doubloons. Reward: 4 notoriety plus the raid's
  doubloons; the raid leaves the game.
- Smuggler Route: an open route must exist between the two islands and
  you need a ship on every hex of the shortest one. Reward: doubloons
  equal to the number of hexes on the route.

Claimed hidden charts go to the discard pile.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from core.charts import Chart, IslandRaid, SmugglerRoute, TreasureMap
from core.constants import ISLAND_RAID_MIN_DOUBLOONS, Phase, ShipKind
from core.hex_grid import HexCoord

from .actions.base import ValidationResult

if TYPE_CHECKING:
    from core.game_state import GameState

logger = logging.getLogger(__name__)


@dataclass
class ClaimResult:
    """Result of claiming a chart.

    Attributes:
        success: Whether the chart was claimed.
        message: What happened, or why the claim failed.
        chart_id: The chart that was claimed.
        notoriety_gained: Notoriety awarded.
        doubloons_gained: Doubloons awarded.
        captains_unlocked: Captain slots unlocked by the notoriety.
        route: Cells of the smuggler route that was checked.
    """

    success: bool
    message: str = ""
    chart_id: Optional[str] = None
    notoriety_gained: int = 0
    doubloons_gained: int = 0
    captains_unlocked: int = 0
    route: list[HexCoord] = field(default_factory=list)


class ChartClaimResolver:
    """Validates and applies chart claims for one game state."""

    def __init__(self, state: GameState):
        self.state = state

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def find_chart(self, player_id: int, chart_id: str) -> Optional[Chart]:
        """Find a chart in the player's hand or among the revealed raids."""
        chart = self.state.get_player(player_id).find_chart(chart_id)
        if chart is not None:
            return chart
        raid = self.state.chart_deck.find_raid(chart_id)
        if raid is not None and raid.revealed:
            return raid
        return None

    def get_claimable_charts(self, player_id: int) -> list[str]:
        """IDs of every chart the player could claim right now."""
        player = self.state.get_player(player_id)
        candidates = [c.chart_id for c in player.charts]
        candidates += [r.chart_id for r in self.state.chart_deck.active_raids()]
        return [cid for cid in candidates if self.validate_claim(player_id, cid).valid]

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate_claim(self, player_id: int, chart_id: str) -> ValidationResult:
        if self.state.is_game_over():
            return ValidationResult.fail("Game is over")
        if self.state.phase != Phase.PIRATE:
            return ValidationResult.fail("Charts can only be claimed in the pirate phase")
        if not self.state.has_player(player_id):
            return ValidationResult.fail(f"Unknown player {player_id}")

        chart = self.find_chart(player_id, chart_id)
        if chart is None:
            return ValidationResult.fail("Chart not found")

        if isinstance(chart, TreasureMap):
            return self._validate_galleon_control(player_id, chart.target_cell, "target hex")
        if isinstance(chart, IslandRaid):
            return self._validate_island_raid(player_id, chart)
        if isinstance(chart, SmugglerRoute):
            return self._validate_smuggler_route(player_id, chart)[0]
        return ValidationResult.fail("Unknown chart type")

    def _validate_galleon_control(
        self, player_id: int, coord: HexCoord, label: str
    ) -> ValidationResult:
        board = self.state.board
        if not board.has_ship_kind(coord, player_id, ShipKind.GALLEON):
            return ValidationResult.fail(f"Need a Galleon at the {label}")
        if board.controller(coord) != player_id:
            return ValidationResult.fail(f"Must control the {label}")
        return ValidationResult.ok()

    def _validate_island_raid(self, player_id: int, raid: IslandRaid) -> ValidationResult:
        coord = self.state.board.island_cell(raid.target_island)
        if coord is None:
            return ValidationResult.fail(f"Island {raid.target_island} not found")
        check = self._validate_galleon_control(player_id, coord, "island")
        if not check.valid:
            return check
        if raid.doubloons_on_chart < ISLAND_RAID_MIN_DOUBLOONS:
            return ValidationResult.fail(
                f"Island Raid needs at least {ISLAND_RAID_MIN_DOUBLOONS} doubloons"
            )
        return ValidationResult.ok()

    def _validate_smuggler_route(
        self, player_id: int, route: SmugglerRoute
    ) -> tuple[ValidationResult, list[HexCoord]]:
        board = self.state.board
        start = board.island_cell(route.island_a)
        end = board.island_cell(route.island_b)
        if start is None or end is None:
            return ValidationResult.fail("One or both islands not found"), []

        path = board.find_path(start, end)
        if not path:
            return ValidationResult.fail("No path exists between islands"), []
        for coord in path:
            if not board.ships_of(coord, player_id):
                return ValidationResult.fail(f"Need a ship at {coord}"), path
        return ValidationResult.ok(), path

    # -------------------------------------------------------------------------
    # Claiming
    # -------------------------------------------------------------------------

    def claim(self, player_id: int, chart_id: str) -> ClaimResult:
        """Claim a chart, applying its reward.

        Leaves the state untouched if the claim is invalid.
        """
        validation = self.validate_claim(player_id, chart_id)
        if not validation.valid:
            logger.debug("Player %d claim %s rejected: %s", player_id, chart_id, validation.reason)
            return ClaimResult(success=False, message=validation.reason or "Invalid claim")

        player = self.state.get_player(player_id)
        chart = self.find_chart(player_id, chart_id)
        result = ClaimResult(success=True, chart_id=chart_id)

        if isinstance(chart, TreasureMap):
            result.doubloons_gained = self.state.num_players()
            result.message = f"Claimed Treasure Map: +{result.doubloons_gained} doubloons"
        elif isinstance(chart, IslandRaid):
            result.notoriety_gained = chart.notoriety_reward
            result.doubloons_gained = chart.doubloons_on_chart
            result.message = (
                f"Claimed Island Raid on {chart.target_island}: "
                f"+{result.notoriety_gained} notoriety, +{result.doubloons_gained} doubloons"
            )
        else:
            _, path = self._validate_smuggler_route(player_id, chart)
            result.route = path
            result.doubloons_gained = len(path)
            result.message = (
                f"Claimed Smuggler Route {chart.island_a} - {chart.island_b}: "
                f"+{result.doubloons_gained} doubloons"
            )

        player.gain_doubloons(result.doubloons_gained)
        result.captains_unlocked = player.gain_notoriety(result.notoriety_gained)

        if isinstance(chart, IslandRaid):
            self.state.chart_deck.retire_raid(chart_id)
        else:
            self.state.chart_deck.discard([player.remove_chart(chart_id)])

        logger.info("Player %d %s", player_id, result.message)
        return result
