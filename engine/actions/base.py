"""Shared validate/execute protocol for play-phase actions.

Every action follows the same steps:
1. Turn checks: play phase, known player, committed captain, power allows it
2. Bribe cost check against the player's doubloons
3. Action-specific spatial and ownership checks
Only when all three pass does execute() change anything, and a successful
execute() consumes exactly one captain of the action's kind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from core.constants import ActionKind, Phase

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of validating an action.

    Attributes:
        valid: Whether the action may be executed.
        reason: Why the action is invalid (if it is).
    """

    valid: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(True)

    @classmethod
    def fail(cls, reason: str) -> ValidationResult:
        return cls(False, reason)


@dataclass
class ActionResult:
    """Result of executing an action.

    Attributes:
        success: Whether the action was applied.
        message: Description of what happened, or why nothing did.
        notoriety_gained: Notoriety earned by the acting player.
        doubloons_gained: Doubloons earned by the acting player.
        doubloons_spent: Doubloons paid for bribes.
        captains_unlocked: Captain slots unlocked by the notoriety gained.
    """

    success: bool
    message: str = ""
    notoriety_gained: int = 0
    doubloons_gained: int = 0
    doubloons_spent: int = 0
    captains_unlocked: int = 0

    @classmethod
    def failure(cls, reason: str) -> ActionResult:
        return cls(success=False, message=reason)


class BaseAction:
    """Base class for play-phase actions.

    Subclasses set `kind`, implement `_validate_action` and `_apply`, and
    override `bribe_cost` when the action has bribes.
    """

    kind: ActionKind
    # Whether the action may run while the player has an unfinished chart draw
    allowed_with_pending_draw = False

    def __init__(self, player_id: int):
        self.player_id = player_id

    # -------------------------------------------------------------------------
    # Protocol
    # -------------------------------------------------------------------------

    def captain_kind(self) -> Optional[ActionKind]:
        """Captain kind this action consumes; None accepts any committed captain."""
        return self.kind

    def bribe_cost(self, state: GameState) -> int:
        """Doubloons this action costs, after power modifiers."""
        return 0

    def validate(self, state: GameState) -> ValidationResult:
        """Check whether the action can be executed without changing anything."""
        check = self._validate_turn(state)
        if not check.valid:
            return check

        player = state.get_player(self.player_id)
        cost = self.bribe_cost(state)
        if cost < 0:
            return ValidationResult.fail("Bribe count cannot be negative")
        if not player.can_afford(cost):
            return ValidationResult.fail("Not enough doubloons for bribes")

        return self._validate_action(state, player)

    def execute(self, state: GameState) -> ActionResult:
        """Validate, then apply the action in full.

        Returns a failed result and leaves the state untouched when
        validation fails.
        """
        validation = self.validate(state)
        if not validation.valid:
            logger.debug(
                "Player %d %s rejected: %s", self.player_id, self.describe(), validation.reason
            )
            return ActionResult.failure(validation.reason or "Invalid action")

        player = state.get_player(self.player_id)
        cost = self.bribe_cost(state)
        if cost > 0:
            player.spend_doubloons(cost)

        result = self._apply(state, player)
        result.doubloons_spent += cost
        logger.info("Player %d %s: %s", self.player_id, self.describe(), result.message)
        return result

    def describe(self) -> str:
        return self.kind.value

    # -------------------------------------------------------------------------
    # Hooks for subclasses
    # -------------------------------------------------------------------------

    def _validate_action(self, state: GameState, player: Player) -> ValidationResult:
        raise NotImplementedError

    def _apply(self, state: GameState, player: Player) -> ActionResult:
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # Shared checks
    # -------------------------------------------------------------------------

    def _validate_turn(self, state: GameState) -> ValidationResult:
        if state.is_game_over():
            return ValidationResult.fail("Game is over")
        if state.phase != Phase.PLAY:
            return ValidationResult.fail(f"Actions can only be taken in the play phase, not {state.phase.value}")
        if not state.has_player(self.player_id):
            return ValidationResult.fail(f"Unknown player {self.player_id}")

        player = state.get_player(self.player_id)
        if player.pending_draw is not None and not self.allowed_with_pending_draw:
            return ValidationResult.fail("Finish choosing drawn charts first")

        kind = self.captain_kind()
        if kind is None:
            if not player.placed_captains:
                return ValidationResult.fail("No captains left")
            return ValidationResult.ok()

        if not self._power_allows(state, kind):
            return ValidationResult.fail(f"Your pirate cannot take {kind.value} actions")
        if not player.has_captain(kind):
            return ValidationResult.fail(f"No captain placed on {kind.value}")
        return ValidationResult.ok()

    def _consume_captain(self, player: Player) -> None:
        player.consume_captain(self.captain_kind())

    def _power_allows(self, state: GameState, kind: ActionKind) -> bool:
        return state.power_of(self.player_id).can_perform(kind)
