"""Chart action, split into a draw step and a keep step.

Draw 2 charts (3 with a bribe) and keep 1 (2 with a bribe); the rest are
discarded. The drawn cards wait on the player as a pending draw until the
keep step names exactly which to keep. Finishing the action hands the
player the wind token.
"""

from __future__ import annotations

import random
from itertools import combinations
from typing import TYPE_CHECKING, Any, Sequence

from core.constants import ActionKind, BRIBE_COST, DRAW_COUNT, KEEP_COUNT
from core.player import PendingDraw

from .base import ActionResult, BaseAction, ValidationResult

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player


def _check_bribes_fundable(available: int, draw_extra: bool, keep_extra: bool) -> ValidationResult:
    """Bribes are only sold when the deck can deliver what they buy."""
    draw_count = DRAW_COUNT + int(draw_extra)
    if draw_extra and available < draw_count:
        return ValidationResult.fail(f"Only {available} chart(s) left, cannot bribe for an extra draw")
    if keep_extra and min(available, draw_count) < KEEP_COUNT + 1:
        return ValidationResult.fail(f"Only {available} chart(s) left, cannot bribe to keep an extra chart")
    return ValidationResult.ok()


class DrawChartsAction(BaseAction):
    """First step: draw charts into a pending selection."""

    kind = ActionKind.CHART

    def __init__(
        self,
        player_id: int,
        rng: random.Random,
        draw_extra: bool = False,
        keep_extra: bool = False,
    ):
        super().__init__(player_id)
        self.rng = rng
        self.draw_extra = draw_extra
        self.keep_extra = keep_extra

    def draw_count(self) -> int:
        return DRAW_COUNT + (1 if self.draw_extra else 0)

    def keep_count(self) -> int:
        return KEEP_COUNT + (1 if self.keep_extra else 0)

    def bribe_cost(self, state: GameState) -> int:
        return (int(self.draw_extra) + int(self.keep_extra)) * BRIBE_COST

    def _validate_action(self, state: GameState, player: Player) -> ValidationResult:
        available = state.chart_deck.available()
        if available == 0:
            return ValidationResult.fail("No charts left to draw")
        return _check_bribes_fundable(available, self.draw_extra, self.keep_extra)

    def _apply(self, state: GameState, player: Player) -> ActionResult:
        drawn = state.chart_deck.draw(self.draw_count(), self.rng)
        keep = min(self.keep_count(), len(drawn))
        player.pending_draw = PendingDraw(cards=drawn, keep_count=keep)
        return ActionResult(
            success=True,
            message=f"Drew {len(drawn)} chart(s), choose {keep} to keep",
        )

    def describe(self) -> str:
        return f"draw {self.draw_count()} charts"


class KeepChartsAction(BaseAction):
    """Second step: keep the selected charts and discard the rest."""

    kind = ActionKind.CHART
    allowed_with_pending_draw = True

    def __init__(self, player_id: int, selected_ids: Sequence[str]):
        super().__init__(player_id)
        self.selected_ids = list(selected_ids)

    def _validate_action(self, state: GameState, player: Player) -> ValidationResult:
        pending = player.pending_draw
        if pending is None:
            return ValidationResult.fail("No drawn charts waiting for selection")
        if len(set(self.selected_ids)) != len(self.selected_ids):
            return ValidationResult.fail("Cannot select the same chart twice")
        if len(self.selected_ids) != pending.keep_count:
            return ValidationResult.fail(
                f"Must keep exactly {pending.keep_count} chart(s), selected {len(self.selected_ids)}"
            )
        drawn_ids = set(pending.card_ids())
        unknown = [cid for cid in self.selected_ids if cid not in drawn_ids]
        if unknown:
            return ValidationResult.fail(f"Charts not in the draw: {unknown}")
        return ValidationResult.ok()

    def _apply(self, state: GameState, player: Player) -> ActionResult:
        pending = player.pending_draw
        kept = [card for card in pending.cards if card.chart_id in self.selected_ids]
        discarded = [card for card in pending.cards if card.chart_id not in self.selected_ids]

        player.charts.extend(kept)
        state.chart_deck.discard(discarded)
        player.pending_draw = None
        state.round_state.wind_token_holder = self.player_id
        self._consume_captain(player)
        return ActionResult(
            success=True,
            message=f"Kept {len(kept)} chart(s), discarded {len(discarded)}; took the wind token",
        )

    def describe(self) -> str:
        return f"keep charts {self.selected_ids}"


def enumerate_chart_draws(state: GameState, player_id: int) -> list[dict[str, Any]]:
    """List affordable draw variants as dicts of DrawChartsAction parameters."""
    player = state.get_player(player_id)
    available = state.chart_deck.available()
    if available == 0:
        return []
    options = []
    for draw_extra in (False, True):
        for keep_extra in (False, True):
            cost = (int(draw_extra) + int(keep_extra)) * BRIBE_COST
            if not _check_bribes_fundable(available, draw_extra, keep_extra).valid:
                continue
            if player.can_afford(cost):
                options.append({"draw_extra": draw_extra, "keep_extra": keep_extra})
    return options


def enumerate_chart_keeps(state: GameState, player_id: int) -> list[dict[str, Any]]:
    """List every valid selection for a pending draw."""
    pending = state.get_player(player_id).pending_draw
    if pending is None:
        return []
    return [
        {"selected_ids": list(ids)}
        for ids in combinations(pending.card_ids(), pending.keep_count)
    ]
