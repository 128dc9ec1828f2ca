"""Player model for the Notorious rules engine.

Each player has a ship inventory, notoriety (score), doubloons (currency),
captain slots and the captains committed to actions this round.
Ships in the inventory plus ships on the board always equal the starting pool.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .charts import Chart
from .constants import (
    ActionKind,
    CAPTAIN_UNLOCK_THRESHOLDS,
    PlayerColor,
    PowerId,
    ShipKind,
    STARTING_CAPTAINS,
    STARTING_DOUBLOONS,
    STARTING_GALLEONS,
    STARTING_SLOOPS,
)
from .hex_grid import HexCoord


@dataclass
class PendingDraw:
    """Charts drawn by a Chart action that are waiting for a keep selection.

    Attributes:
        cards: The drawn charts.
        keep_count: Exactly how many must be kept.
    """

    cards: list[Chart]
    keep_count: int

    def card_ids(self) -> list[str]:
        return [card.chart_id for card in self.cards]


@dataclass
class Player:
    """Represents a player in the game.

    Attributes:
        player_id: Unique identifier for this player (0-indexed).
        name: Display name.
        color: Seat color.
        power_id: The pirate power bound to this player.
        notoriety: Victory points.
        doubloons: Currency spent on bribes.
        captain_slots: Captains available each round.
        placed_captains: Action kinds with a committed, unconsumed captain.
        sloops: Sloops in inventory (not on the board).
        galleons: Galleons in inventory (not on the board).
        port_cell: Where the player's port is, once placed.
        charts: Hidden charts in hand.
        pending_draw: Charts drawn but not yet kept or discarded.
    """

    player_id: int
    name: str = ""
    color: Optional[PlayerColor] = None
    power_id: PowerId = PowerId.DEFAULT
    notoriety: int = 0
    doubloons: int = STARTING_DOUBLOONS
    captain_slots: int = STARTING_CAPTAINS
    placed_captains: list[ActionKind] = field(default_factory=list)
    sloops: int = STARTING_SLOOPS
    galleons: int = STARTING_GALLEONS
    port_cell: Optional[HexCoord] = None
    charts: list[Chart] = field(default_factory=list)
    pending_draw: Optional[PendingDraw] = None

    def __post_init__(self):
        if not self.name:
            self.name = f"Player {self.player_id + 1}"

    # -------------------------------------------------------------------------
    # Captains
    # -------------------------------------------------------------------------

    def can_place_captain(self) -> bool:
        return len(self.placed_captains) < self.captain_slots

    def place_captain(self, action: ActionKind) -> None:
        """Commit a captain to an action kind.

        Raises:
            ValueError: If all captain slots are already used.
        """
        if not self.can_place_captain():
            raise ValueError(
                f"Player {self.player_id} already placed "
                f"{len(self.placed_captains)}/{self.captain_slots} captains"
            )
        self.placed_captains.append(action)

    def has_captain(self, action: ActionKind) -> bool:
        return action in self.placed_captains

    def consume_captain(self, action: Optional[ActionKind] = None) -> ActionKind:
        """Remove one committed captain.

        Args:
            action: Kind to consume. If None, the most recently placed captain.

        Raises:
            ValueError: If no matching captain is committed.
        """
        if not self.placed_captains:
            raise ValueError(f"Player {self.player_id} has no captains left")
        if action is None:
            return self.placed_captains.pop()
        if action not in self.placed_captains:
            raise ValueError(f"Player {self.player_id} has no captain on {action.value}")
        self.placed_captains.remove(action)
        return action

    def captains_remaining(self) -> int:
        return len(self.placed_captains)

    # -------------------------------------------------------------------------
    # Notoriety and doubloons
    # -------------------------------------------------------------------------

    def gain_notoriety(self, amount: int) -> int:
        """Add notoriety and unlock captain slots for each threshold crossed.

        Returns:
            Number of captain slots unlocked by this gain.
        """
        if amount <= 0:
            return 0
        old = self.notoriety
        self.notoriety += amount
        unlocked = sum(
            1 for threshold in CAPTAIN_UNLOCK_THRESHOLDS
            if old < threshold <= self.notoriety
        )
        self.captain_slots += unlocked
        return unlocked

    def gain_doubloons(self, amount: int) -> None:
        self.doubloons += amount

    def can_afford(self, cost: int) -> bool:
        return self.doubloons >= cost

    def spend_doubloons(self, amount: int) -> None:
        """Spend doubloons.

        Raises:
            ValueError: If the player cannot afford it.
        """
        if not self.can_afford(amount):
            raise ValueError(
                f"Player {self.player_id} cannot spend {amount} doubloons (has {self.doubloons})"
            )
        self.doubloons -= amount

    # -------------------------------------------------------------------------
    # Ship inventory
    # -------------------------------------------------------------------------

    def inventory(self, kind: ShipKind) -> int:
        if kind == ShipKind.SLOOP:
            return self.sloops
        if kind == ShipKind.GALLEON:
            return self.galleons
        return 0 if self.port_cell is not None else 1

    def take_ships(self, kind: ShipKind, count: int = 1) -> None:
        """Take ships out of the inventory to put on the board.

        Raises:
            ValueError: If the inventory does not hold enough.
        """
        if kind == ShipKind.PORT:
            raise ValueError(f"Player {self.player_id} cannot take a port from inventory")
        if self.inventory(kind) < count:
            raise ValueError(
                f"Player {self.player_id} has only {self.inventory(kind)} {kind.value}s, needs {count}"
            )
        if kind == ShipKind.SLOOP:
            self.sloops -= count
        else:
            self.galleons -= count

    def return_ships(self, kind: ShipKind, count: int = 1) -> None:
        """Return ships removed from the board to the inventory."""
        if kind == ShipKind.SLOOP:
            self.sloops += count
        elif kind == ShipKind.GALLEON:
            self.galleons += count

    # -------------------------------------------------------------------------
    # Charts
    # -------------------------------------------------------------------------

    def find_chart(self, chart_id: str) -> Optional[Chart]:
        for chart in self.charts:
            if chart.chart_id == chart_id:
                return chart
        return None

    def remove_chart(self, chart_id: str) -> Chart:
        """Remove a chart from the hand.

        Raises:
            ValueError: If the chart is not held.
        """
        for idx, chart in enumerate(self.charts):
            if chart.chart_id == chart_id:
                return self.charts.pop(idx)
        raise ValueError(f"Player {self.player_id} does not hold chart {chart_id}")

    def reset_for_new_round(self) -> None:
        """Clear per-round captain placements."""
        self.placed_captains = []
