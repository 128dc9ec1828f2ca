"""Chart deck: draw pile, discard pile and the public island raids."""

from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from .board import BoardState
from .charts import (
    Chart,
    IslandRaid,
    chart_ids,
    create_island_raid,
    create_smuggler_routes,
    create_treasure_maps,
)
from .constants import ISLAND_RAID_COUNT, RAID_DOUBLOONS_PER_ROUND
from .hex_grid import HexCoord

logger = logging.getLogger(__name__)


@dataclass
class ChartDeck:
    """The shared chart supply.

    Attributes:
        draw_pile: Face-down cards; the last element is drawn next.
        discard_pile: Discarded hidden charts, reshuffled when the draw pile runs short.
        island_raids: Public raids still in play, revealed or not yet revealed.
    """

    draw_pile: list[Chart] = field(default_factory=list)
    discard_pile: list[Chart] = field(default_factory=list)
    island_raids: list[IslandRaid] = field(default_factory=list)

    # -------------------------------------------------------------------------
    # Drawing
    # -------------------------------------------------------------------------

    def available(self) -> int:
        """Number of cards a draw could reach, counting a reshuffle."""
        return len(self.draw_pile) + len(self.discard_pile)

    def reshuffle(self, rng: random.Random) -> None:
        """Shuffle the discard pile beneath the remaining draw pile."""
        reshuffled = list(self.discard_pile)
        rng.shuffle(reshuffled)
        self.draw_pile = reshuffled + self.draw_pile
        self.discard_pile = []
        logger.info("Reshuffled %d discarded charts into the draw pile", len(reshuffled))

    def draw(self, count: int, rng: random.Random) -> list[Chart]:
        """Draw up to count cards, reshuffling the discard pile first if needed.

        Returns fewer than count cards only when both piles run out.
        """
        if len(self.draw_pile) < count and self.discard_pile:
            self.reshuffle(rng)
        drawn = []
        while self.draw_pile and len(drawn) < count:
            drawn.append(self.draw_pile.pop())
        if len(drawn) < count:
            logger.warning("Chart deck exhausted: drew %d of %d", len(drawn), count)
        return drawn

    def discard(self, charts: Sequence[Chart]) -> None:
        self.discard_pile.extend(charts)

    # -------------------------------------------------------------------------
    # Island raids
    # -------------------------------------------------------------------------

    def active_raids(self) -> list[IslandRaid]:
        """Revealed raids that can be claimed."""
        return [raid for raid in self.island_raids if raid.revealed]

    def find_raid(self, chart_id: str) -> Optional[IslandRaid]:
        for raid in self.island_raids:
            if raid.chart_id == chart_id:
                return raid
        return None

    def reveal_next_raid(self) -> Optional[IslandRaid]:
        """Reveal the first hidden raid, if any remains."""
        for raid in self.island_raids:
            if not raid.revealed:
                raid.revealed = True
                logger.info("Island raid on %s revealed", raid.target_island)
                return raid
        return None

    def has_hidden_raid(self) -> bool:
        return any(not raid.revealed for raid in self.island_raids)

    def add_raid_doubloons(self, amount: int = RAID_DOUBLOONS_PER_ROUND) -> None:
        """Add doubloons to every revealed raid."""
        for raid in self.active_raids():
            raid.doubloons_on_chart += amount

    def retire_raid(self, chart_id: str) -> IslandRaid:
        """Remove a claimed raid from play.

        Raises:
            ValueError: If no raid has that ID.
        """
        for idx, raid in enumerate(self.island_raids):
            if raid.chart_id == chart_id:
                return self.island_raids.pop(idx)
        raise ValueError(f"No island raid with ID {chart_id}")

    # -------------------------------------------------------------------------
    # Copy and serialization
    # -------------------------------------------------------------------------

    def clone(self) -> ChartDeck:
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "draw_pile": [chart.to_dict() for chart in self.draw_pile],
            "discard_pile": [chart.to_dict() for chart in self.discard_pile],
            "island_raids": [raid.to_dict() for raid in self.island_raids],
        }


def build_chart_deck(
    board: BoardState,
    remaining_map_cells: Sequence[HexCoord],
    rng: random.Random,
) -> ChartDeck:
    """Create the starting deck once islands are on the board.

    The draw pile holds one treasure map per non-island cell plus one
    smuggler route per island pair. Two island raids target random
    islands; only the first starts revealed.
    """
    ids = chart_ids()
    island_names = board.island_names()
    if len(island_names) < ISLAND_RAID_COUNT:
        raise ValueError(
            f"Need at least {ISLAND_RAID_COUNT} islands on the board, found {len(island_names)}"
        )

    draw_pile: list[Chart] = []
    draw_pile.extend(create_treasure_maps(remaining_map_cells, ids))
    draw_pile.extend(create_smuggler_routes(island_names, ids))
    rng.shuffle(draw_pile)

    raid_targets = list(island_names)
    rng.shuffle(raid_targets)
    raids = [
        create_island_raid(name, ids, revealed=(idx == 0))
        for idx, name in enumerate(raid_targets[:ISLAND_RAID_COUNT])
    ]

    logger.info(
        "Built chart deck: %d cards, raids on %s",
        len(draw_pile),
        ", ".join(raid.target_island for raid in raids),
    )
    return ChartDeck(draw_pile=draw_pile, island_raids=raids)
