"""Sink action.

Remove an opponent's ship in a hex where you have at least one piece.
Sinking a Galleon requires at least as much influence in the hex as the
Galleon's owner. If the opponent is at least as notorious as you, gain 1
Notoriety for a Sloop or 3 for a Galleon.

Bribe 1: move one of your Sloops one hex before sinking.
Bribe 2: sink another ship in the same hex.
The two bribe costs are computed separately; power discounts apply to the
Sloop move only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from core.board import BoardState
from core.constants import (
    ActionKind,
    BRIBE_COST,
    MOBILE_SHIP_KINDS,
    ShipKind,
    SINK_GALLEON_NOTORIETY,
    SINK_SLOOP_NOTORIETY,
)
from core.errors import InvariantViolation
from core.hex_grid import HexCoord, is_adjacent, on_board
from core.powers import PowerModifier

from .base import ActionResult, BaseAction, ValidationResult

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player


BASE_SINK_NOTORIETY = {
    ShipKind.SLOOP: SINK_SLOOP_NOTORIETY,
    ShipKind.GALLEON: SINK_GALLEON_NOTORIETY,
}


@dataclass(frozen=True)
class SinkTarget:
    """A ship to sink: its kind and owner."""

    ship_kind: ShipKind
    player_id: int


def relocation_cost(power: PowerModifier, moving_sloop: bool) -> int:
    """Doubloons for the pre-sink sloop move, after the power's discount."""
    base = BRIBE_COST if moving_sloop else 0
    return power.modify_relocation_cost(base)


def additional_sink_cost(additional: bool) -> int:
    return BRIBE_COST if additional else 0


def sink_cost(power: PowerModifier, moving_sloop: bool, additional: bool) -> int:
    """Total sink bribe cost: the two sub-costs are summed independently."""
    return relocation_cost(power, moving_sloop) + additional_sink_cost(additional)


def sink_reward(
    state: GameState,
    actor_id: int,
    target: SinkTarget,
) -> int:
    """Notoriety for sinking target, judged on the current notoriety values."""
    actor = state.get_player(actor_id)
    victim = state.get_player(target.player_id)
    base = BASE_SINK_NOTORIETY[target.ship_kind] if victim.notoriety >= actor.notoriety else 0
    return state.power_of(actor_id).modify_sink_notoriety(base, target.ship_kind)


def _check_target(
    state: GameState,
    board: BoardState,
    actor_id: int,
    cell: HexCoord,
    target: SinkTarget,
    influence_board: Optional[BoardState] = None,
) -> ValidationResult:
    """Check one sink target.

    The target must be present on board. Galleon influence is compared on
    influence_board, which defaults to board.
    """
    if influence_board is None:
        influence_board = board
    if target.ship_kind not in MOBILE_SHIP_KINDS:
        return ValidationResult.fail(f"A {target.ship_kind.value} cannot be sunk")
    if target.player_id == actor_id:
        return ValidationResult.fail("Cannot sink your own ship")
    if not state.has_player(target.player_id):
        return ValidationResult.fail(f"Unknown player {target.player_id}")
    if not board.has_ship_kind(cell, target.player_id, target.ship_kind):
        return ValidationResult.fail("Target ship not found in hex")
    if target.ship_kind == ShipKind.GALLEON:
        if influence_board.influence(cell, actor_id) < influence_board.influence(cell, target.player_id):
            return ValidationResult.fail("Not enough influence to sink Galleon")
    return ValidationResult.ok()


class SinkAction(BaseAction):
    """Sink one (or with a bribe, two) opposing ships in a hex."""

    kind = ActionKind.SINK

    def __init__(
        self,
        player_id: int,
        cell: HexCoord,
        target: SinkTarget,
        move_sloop_before: Optional[tuple[HexCoord, HexCoord]] = None,
        additional_sink: Optional[SinkTarget] = None,
    ):
        super().__init__(player_id)
        self.cell = cell
        self.target = target
        self.move_sloop_before = move_sloop_before
        self.additional_sink = additional_sink

    def bribe_cost(self, state: GameState) -> int:
        return sink_cost(
            state.power_of(self.player_id),
            moving_sloop=self.move_sloop_before is not None,
            additional=self.additional_sink is not None,
        )

    def _validate_action(self, state: GameState, player: Player) -> ValidationResult:
        if not on_board(self.cell):
            return ValidationResult.fail("Invalid hex coordinate")

        scratch = state.board.clone()

        if self.move_sloop_before is not None:
            src, dst = self.move_sloop_before
            if not on_board(src) or not on_board(dst):
                return ValidationResult.fail("Invalid sloop movement hexes")
            if not is_adjacent(src, dst):
                return ValidationResult.fail("Sloop can only move one hex before sinking")
            if not scratch.has_ship_kind(src, self.player_id, ShipKind.SLOOP):
                return ValidationResult.fail("No sloop to move")
            ignore = state.power_of(self.player_id).ignores_island_edges
            if not scratch.move_ship(src, dst, self.player_id, ShipKind.SLOOP, ignore):
                return ValidationResult.fail("Cannot move sloop along this path")

        if not scratch.ships_of(self.cell, self.player_id):
            return ValidationResult.fail("You have no pieces in this hex")

        check = _check_target(state, scratch, self.player_id, self.cell, self.target)
        if not check.valid:
            return check

        if self.additional_sink is not None:
            # Presence after the first sink, influence as it stood before it
            remaining = scratch.clone()
            remaining.remove_ship(self.cell, self.target.player_id, self.target.ship_kind)
            check = _check_target(
                state, remaining, self.player_id, self.cell, self.additional_sink, influence_board=scratch
            )
            if not check.valid:
                return ValidationResult.fail(f"Additional sink: {check.reason}")

        return ValidationResult.ok()

    def _apply(self, state: GameState, player: Player) -> ActionResult:
        board = state.board
        targets = [self.target]
        if self.additional_sink is not None:
            targets.append(self.additional_sink)

        # Rewards are judged against notoriety before anything is awarded
        rewards = [sink_reward(state, self.player_id, target) for target in targets]

        if self.move_sloop_before is not None:
            src, dst = self.move_sloop_before
            ignore = state.power_of(self.player_id).ignores_island_edges
            if not board.move_ship(src, dst, self.player_id, ShipKind.SLOOP, ignore):
                raise InvariantViolation(
                    f"Validated pre-sink move {src} -> {dst} for player {self.player_id} failed"
                )

        sunk = []
        for target in targets:
            board.remove_ship(self.cell, target.player_id, target.ship_kind)
            owner = state.get_player(target.player_id)
            owner.return_ships(target.ship_kind)
            state.power_of(target.player_id).on_ship_sunk(owner, target.ship_kind, player)
            sunk.append(f"{owner.name}'s {target.ship_kind.value}")

        notoriety = sum(rewards)
        unlocked = player.gain_notoriety(notoriety)
        self._consume_captain(player)

        message = f"Sunk {' and '.join(sunk)} at {self.cell}"
        if notoriety > 0:
            message += f" (+{notoriety} notoriety)"
        return ActionResult(
            success=True,
            message=message,
            notoriety_gained=notoriety,
            captains_unlocked=unlocked,
        )

    def describe(self) -> str:
        return f"sink player {self.target.player_id}'s {self.target.ship_kind.value} at {self.cell}"


def enumerate_sinks(state: GameState, player_id: int) -> list[dict[str, Any]]:
    """List bribe-free sink targets as dicts of SinkAction parameters."""
    options = []
    for coord in state.board.cells_with_ships_of(player_id):
        cell = state.board.get_cell(coord)
        for owner in sorted(cell.owners()):
            if owner == player_id:
                continue
            for kind in MOBILE_SHIP_KINDS:
                target = SinkTarget(kind, owner)
                if _check_target(state, state.board, player_id, coord, target).valid:
                    options.append({"cell": coord, "target": target})
    return options
