"""Sail action.

Move one or more of your ships a combined number of hexes up to your sail
range (2, or 3 for The Sailor). Each bribe adds one more hex of movement.
Every hop crosses one hex side, which must not be blocked by an island
unless the player's power ignores island edges.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Sequence

from core.board import BoardState
from core.constants import ActionKind, BRIBE_COST, MOBILE_SHIP_KINDS, ShipKind
from core.errors import InvariantViolation
from core.hex_grid import HexCoord, is_adjacent, on_board
from core.pathfinding import reachable_cells

from .base import ActionResult, BaseAction, ValidationResult

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player


@dataclass(frozen=True)
class SailMove:
    """One ship's movement as a sequence of cells.

    Attributes:
        ship_kind: Sloop or galleon.
        path: Cells visited, starting at the ship's current cell.
    """

    ship_kind: ShipKind
    path: tuple[HexCoord, ...]

    @property
    def origin(self) -> HexCoord:
        return self.path[0]

    @property
    def destination(self) -> HexCoord:
        return self.path[-1]

    @property
    def hops(self) -> int:
        return len(self.path) - 1

    def to_dict(self) -> dict[str, Any]:
        return {"ship_kind": self.ship_kind.value, "path": [c.to_list() for c in self.path]}


def plan_sail_move(
    board: BoardState,
    ship_kind: ShipKind,
    origin: HexCoord,
    destination: HexCoord,
    ignore_islands: bool = False,
) -> Optional[SailMove]:
    """Build a move along the shortest open route, or None if there is none."""
    path = board.find_path(origin, destination, ignore_islands)
    if len(path) < 2:
        return None
    return SailMove(ship_kind=ship_kind, path=tuple(path))


def check_moves(
    board: BoardState,
    player_id: int,
    moves: Sequence[SailMove],
    ignore_islands: bool,
) -> tuple[ValidationResult, int]:
    """Validate moves in order against a scratch copy of the board.

    Returns:
        The validation result and the total number of hops.
    """
    scratch = board.clone()
    total_hops = 0
    for move in moves:
        if move.ship_kind not in MOBILE_SHIP_KINDS:
            return ValidationResult.fail(f"A {move.ship_kind.value} cannot sail"), total_hops
        if len(move.path) < 2 or move.origin == move.destination:
            return ValidationResult.fail("Cannot sail to the same hex"), total_hops
        if not all(on_board(c) for c in move.path):
            return ValidationResult.fail("Invalid hex coordinate"), total_hops
        if not scratch.has_ship_kind(move.origin, player_id, move.ship_kind):
            return ValidationResult.fail(f"No {move.ship_kind.value} at {move.origin}"), total_hops

        for a, b in zip(move.path, move.path[1:]):
            if not is_adjacent(a, b):
                return ValidationResult.fail(f"{a} and {b} are not adjacent"), total_hops
            if not scratch.move_ship(a, b, player_id, move.ship_kind, ignore_islands):
                return ValidationResult.fail(f"Cannot sail from {a} to {b} (blocked by island edge)"), total_hops
        total_hops += move.hops
    return ValidationResult.ok(), total_hops


class SailAction(BaseAction):
    """Move ships across the board."""

    kind = ActionKind.SAIL

    def __init__(self, player_id: int, moves: Sequence[SailMove], bribes: int = 0):
        super().__init__(player_id)
        self.moves = list(moves)
        self.bribes = bribes

    def bribe_cost(self, state: GameState) -> int:
        return self.bribes * BRIBE_COST

    def movement_budget(self, state: GameState) -> int:
        return state.power_of(self.player_id).sail_range + self.bribes

    def _validate_action(self, state: GameState, player: Player) -> ValidationResult:
        if not self.moves:
            return ValidationResult.fail("No ships to move")

        power = state.power_of(self.player_id)
        result, total_hops = check_moves(
            state.board, self.player_id, self.moves, power.ignores_island_edges
        )
        if not result.valid:
            return result

        budget = self.movement_budget(state)
        if total_hops > budget:
            return ValidationResult.fail(f"Move distance too far ({total_hops} > {budget})")
        return ValidationResult.ok()

    def _apply(self, state: GameState, player: Player) -> ActionResult:
        ignore = state.power_of(self.player_id).ignores_island_edges
        for move in self.moves:
            for a, b in zip(move.path, move.path[1:]):
                if not state.board.move_ship(a, b, self.player_id, move.ship_kind, ignore):
                    raise InvariantViolation(
                        f"Validated sail hop {a} -> {b} for player {self.player_id} failed"
                    )
        self._consume_captain(player)
        hops = sum(move.hops for move in self.moves)
        return ActionResult(success=True, message=f"Sailed {len(self.moves)} ship(s) {hops} hex(es)")

    def describe(self) -> str:
        return f"sail ({len(self.moves)} moves, {self.bribes} bribes)"


def enumerate_sail_moves(state: GameState, player_id: int) -> list[dict[str, Any]]:
    """List single-ship moves reachable without bribes.

    Returns:
        Dicts with 'moves' (a one-element list of SailMove) and 'bribes'.
    """
    power = state.power_of(player_id)
    board = state.board

    def traversable(a: HexCoord, b: HexCoord) -> bool:
        return board.can_traverse_edge(a, b, power.ignores_island_edges)

    options = []
    for origin in board.cells_with_ships_of(player_id):
        reach = reachable_cells(origin, power.sail_range, traversable)
        for kind in MOBILE_SHIP_KINDS:
            if not board.has_ship_kind(origin, player_id, kind):
                continue
            for destination in sorted(reach):
                if destination == origin:
                    continue
                move = plan_sail_move(board, kind, origin, destination, power.ignores_island_edges)
                if move is not None:
                    options.append({"moves": [move], "bribes": 0})
    return options
