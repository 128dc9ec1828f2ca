"""Pirate phase upkeep, run once when the phase begins.

1. Each player gains 1 notoriety per controlled hex (powers may change this)
2. Every revealed island raid gains a doubloon
3. The second island raid is revealed once anyone has 12 notoriety
4. If anyone has reached the winning notoriety, this round becomes the final one
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from core.constants import (
    HEX_CONTROL_NOTORIETY,
    RAID_DOUBLOONS_PER_ROUND,
    SECOND_RAID_THRESHOLD,
)

if TYPE_CHECKING:
    from core.game_state import GameState

logger = logging.getLogger(__name__)


@dataclass
class PirateReport:
    """What happened at the start of a pirate phase.

    Attributes:
        controlled_cells: Number of hexes each player controlled.
        notoriety_awarded: Notoriety each player actually gained.
        captains_unlocked: Captain slots each player unlocked.
        raid_revealed: Whether the second island raid was revealed.
        final_round: Whether the winning threshold has been reached.
    """

    controlled_cells: dict[int, int] = field(default_factory=dict)
    notoriety_awarded: dict[int, int] = field(default_factory=dict)
    captains_unlocked: dict[int, int] = field(default_factory=dict)
    raid_revealed: bool = False
    final_round: bool = False


def begin_pirate_phase(state: GameState) -> PirateReport:
    """Apply the pirate phase upkeep to the state."""
    report = PirateReport()

    for player in state.players:
        controlled = len(state.board.controlled_cells(player.player_id))
        base = controlled * HEX_CONTROL_NOTORIETY
        awarded = state.power_of(player.player_id).modify_hex_control_notoriety(base)
        report.controlled_cells[player.player_id] = controlled
        report.notoriety_awarded[player.player_id] = awarded
        report.captains_unlocked[player.player_id] = player.gain_notoriety(awarded)
        if awarded > 0:
            logger.info("%s gained %d notoriety for controlling %d hex(es)", player.name, awarded, controlled)
        elif controlled > 0:
            logger.info("%s controls %d hex(es) but gains no notoriety", player.name, controlled)

    state.chart_deck.add_raid_doubloons(RAID_DOUBLOONS_PER_ROUND)

    if state.someone_reached(SECOND_RAID_THRESHOLD) and state.chart_deck.has_hidden_raid():
        report.raid_revealed = state.chart_deck.reveal_next_raid() is not None

    if state.winning_threshold_reached():
        state.round_state.final_round = True
        logger.info("Winning notoriety reached; this is the final round")
    report.final_round = state.round_state.final_round

    return report
