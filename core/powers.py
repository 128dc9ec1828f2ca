"""Pirate powers: per-player rule modifiers.

Each power is a PowerModifier record in POWER_TABLE. Variants are built
from DEFAULT_POWER with dataclasses.replace so they only state what differs.
The action engine reads these fields at fixed points:

- sail_range / ignores_island_edges: Sail movement and the sink pre-move
- forbidden_actions: captain placement and action validation
- modify_relocation_cost / modify_build_cost: bribe costs
- modify_hex_control_notoriety / modify_sink_notoriety: rewards
- on_ship_sunk / on_ship_stolen: fired for the owner of a lost ship
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Callable

from .constants import ActionKind, PowerId, SAIL_BASE_RANGE, ShipKind

if TYPE_CHECKING:
    from .player import Player


def _identity(value: int) -> int:
    return value


def _sink_reward_identity(value: int, kind: ShipKind) -> int:
    return value


def _no_reaction(player: Player, kind: ShipKind, attacker: Player) -> None:
    return None


@dataclass(frozen=True)
class PowerModifier:
    """A named bundle of rule overrides.

    Attributes:
        power_id: Identifier used for lookup and serialization.
        name: Display name.
        description: Rules text.
        bounty: Doubloon bounty printed on the pirate card.
        sail_range: Base Sail movement budget before bribes.
        ignores_island_edges: If True, island sides never block this player's moves.
        forbidden_actions: Action kinds this player may not take.
        modify_relocation_cost: Applied to the Sink pre-move sloop cost only.
        modify_build_cost: Applied to the Build bribe cost.
        modify_hex_control_notoriety: Applied to pirate phase control notoriety.
        modify_sink_notoriety: Applied to each sink reward, given the sunk kind.
        on_ship_sunk: Fired for the owner after one of their ships is sunk,
            given the owner, the sunk kind and the attacker.
        on_ship_stolen: Fired for the owner after one of their sloops is stolen,
            given the owner, the stolen kind and the thief.
    """

    power_id: PowerId
    name: str
    description: str = ""
    bounty: int = 0
    sail_range: int = SAIL_BASE_RANGE
    ignores_island_edges: bool = False
    forbidden_actions: frozenset[ActionKind] = field(default_factory=frozenset)
    modify_relocation_cost: Callable[[int], int] = _identity
    modify_build_cost: Callable[[int], int] = _identity
    modify_hex_control_notoriety: Callable[[int], int] = _identity
    modify_sink_notoriety: Callable[[int, ShipKind], int] = _sink_reward_identity
    on_ship_sunk: Callable[[Player, ShipKind, Player], None] = _no_reaction
    on_ship_stolen: Callable[[Player, ShipKind, Player], None] = _no_reaction

    def can_perform(self, action: ActionKind) -> bool:
        return action not in self.forbidden_actions


# -----------------------------------------------------------------------------
# Variant behavior
# -----------------------------------------------------------------------------

def _free_first_relocation(cost: int) -> int:
    return max(0, cost - 1)


def _no_control_notoriety(notoriety: int) -> int:
    return 0


def _compensate_one_doubloon(player: Player, kind: ShipKind, attacker: Player) -> None:
    player.gain_doubloons(1)


DEFAULT_POWER = PowerModifier(
    power_id=PowerId.DEFAULT,
    name="Generic Pirate",
    description="No special rules.",
)

POWER_TABLE: dict[PowerId, PowerModifier] = {
    PowerId.DEFAULT: DEFAULT_POWER,
    PowerId.THE_SAILOR: replace(
        DEFAULT_POWER,
        power_id=PowerId.THE_SAILOR,
        name="The Sailor",
        description="Can Sail 3 Hexes instead of 2.",
        bounty=500,
        sail_range=SAIL_BASE_RANGE + 1,
    ),
    PowerId.THE_PEACEFUL: replace(
        DEFAULT_POWER,
        power_id=PowerId.THE_PEACEFUL,
        name="The Peaceful",
        description="Cannot Sink. Gains a Doubloon whenever one of their Ships is sunk or stolen.",
        bounty=750,
        forbidden_actions=frozenset({ActionKind.SINK}),
        on_ship_sunk=_compensate_one_doubloon,
        on_ship_stolen=_compensate_one_doubloon,
    ),
    PowerId.THE_RELENTLESS: replace(
        DEFAULT_POWER,
        power_id=PowerId.THE_RELENTLESS,
        name="The Relentless",
        description="Moves a Sloop one Hex before Sinking for free. Gains no Notoriety for controlling Hexes.",
        bounty=400,
        modify_relocation_cost=_free_first_relocation,
        modify_hex_control_notoriety=_no_control_notoriety,
    ),
    PowerId.THE_ISLANDER: replace(
        DEFAULT_POWER,
        power_id=PowerId.THE_ISLANDER,
        name="The Islander",
        description="Ignores impassable island edges when Sailing.",
        ignores_island_edges=True,
    ),
}


def get_power(power_id: PowerId) -> PowerModifier:
    """Look up a power by ID.

    Raises:
        KeyError: If the power is not in the table.
    """
    return POWER_TABLE[power_id]
