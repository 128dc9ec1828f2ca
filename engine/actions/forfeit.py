"""Forfeit: give up a committed captain without doing anything."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from core.constants import ActionKind

from .base import ActionResult, BaseAction, ValidationResult

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player


class ForfeitAction(BaseAction):
    """Consume one captain with no board effect.

    Any committed captain may be forfeited, including one on an action the
    player's power forbids.
    """

    def __init__(self, player_id: int, action_kind: Optional[ActionKind] = None):
        super().__init__(player_id)
        self.action_kind = action_kind

    def captain_kind(self) -> Optional[ActionKind]:
        return self.action_kind

    def _power_allows(self, state: GameState, kind: ActionKind) -> bool:
        return True

    def _validate_action(self, state: GameState, player: Player) -> ValidationResult:
        return ValidationResult.ok()

    def _apply(self, state: GameState, player: Player) -> ActionResult:
        consumed = player.consume_captain(self.action_kind)
        return ActionResult(success=True, message=f"Forfeited {consumed.value} captain")

    def describe(self) -> str:
        return f"forfeit {self.action_kind.value if self.action_kind else 'captain'}"
