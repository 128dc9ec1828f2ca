"""Phase state machine for the Notorious rules engine.

Manages phase transitions including:
- The setup phase (executed once at game start)
- The place / play / pirate round cycle
- End game detection after the pirate phase

The phase machine enforces valid transitions and provides the guard
predicates for when transitions should occur. The host decides when to
ask; the machine never changes game state itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from core.constants import Phase

if TYPE_CHECKING:
    from core.game_state import GameState


# Valid phase transitions
PHASE_TRANSITIONS: dict[Phase, list[Phase]] = {
    Phase.SETUP: [Phase.PLACE],
    # Round cycle
    Phase.PLACE: [Phase.PLAY],
    Phase.PLAY: [Phase.PIRATE],
    Phase.PIRATE: [Phase.PLACE, Phase.GAME_OVER],
    # Terminal
    Phase.GAME_OVER: [],
}


@dataclass
class PhaseTransitionResult:
    """Result of a phase transition attempt.

    Attributes:
        success: Whether the transition was successful.
        new_phase: The new phase if successful, None otherwise.
        reason: Description of why the transition failed (if it did).
    """

    success: bool
    new_phase: Optional[Phase]
    reason: Optional[str] = None


class PhaseMachine:
    """State machine for managing game phase transitions.

    Phases:
        - SETUP: Each player places a port and 2 sloops (once)
        - PLACE: Players commit captains to action kinds
        - PLAY: Players spend their captains on actions
        - PIRATE: Hex control is scored and charts are claimed
        - GAME_OVER: Terminal state
    """

    def __init__(self, initial_phase: Phase = Phase.SETUP):
        """Initialize the phase machine.

        Args:
            initial_phase: The starting phase (default: SETUP).
        """
        self._phase = initial_phase

    @property
    def phase(self) -> Phase:
        """Get the current phase."""
        return self._phase

    def get_valid_transitions(self) -> list[Phase]:
        return PHASE_TRANSITIONS.get(self._phase, [])

    def can_transition_to(self, target_phase: Phase) -> bool:
        return target_phase in self.get_valid_transitions()

    def transition_to(self, target_phase: Phase) -> PhaseTransitionResult:
        """Attempt to transition to a new phase.

        Args:
            target_phase: The phase to transition to.

        Returns:
            PhaseTransitionResult indicating success or failure.
        """
        if not self.can_transition_to(target_phase):
            valid = self.get_valid_transitions()
            return PhaseTransitionResult(
                success=False,
                new_phase=None,
                reason=f"Cannot transition from {self._phase.value} to {target_phase.value}. "
                f"Valid transitions: {[p.value for p in valid]}",
            )

        self._phase = target_phase
        return PhaseTransitionResult(success=True, new_phase=target_phase)

    def is_game_over(self) -> bool:
        return self._phase == Phase.GAME_OVER

    # -------------------------------------------------------------------------
    # Guard predicates
    # -------------------------------------------------------------------------

    def should_end_setup_phase(self, state: GameState) -> bool:
        """Setup ends when every player has placed their port."""
        if self._phase != Phase.SETUP:
            return False
        return all(p.port_cell is not None for p in state.players)

    def should_end_place_phase(self, state: GameState) -> bool:
        """Place ends when every player has committed all their captains."""
        if self._phase != Phase.PLACE:
            return False
        return all(len(p.placed_captains) == p.captain_slots for p in state.players)

    def should_end_play_phase(self, state: GameState) -> bool:
        """Play ends when no player has a committed captain left."""
        if self._phase != Phase.PLAY:
            return False
        return all(
            not p.placed_captains and p.pending_draw is None for p in state.players
        )

    def should_end_pirate_phase(self, state: GameState) -> bool:
        """Pirate ends when every player has finished claiming."""
        if self._phase != Phase.PIRATE:
            return False
        done = set(state.round_state.players_done_claiming)
        return all(p.player_id in done for p in state.players)

    def should_game_end(self, state: GameState) -> tuple[bool, Optional[str]]:
        """Check whether the game ends once the current pirate phase is over.

        Returns:
            Tuple of (should_end, reason).
        """
        if state.round_state.final_round or state.winning_threshold_reached():
            leader = state.get_standings()[0]
            return True, f"{leader.name} wins with {leader.notoriety} notoriety"
        return False, None

    def compute_next_phase(self, state: GameState) -> PhaseTransitionResult:
        """Compute what the next phase should be based on game state.

        Args:
            state: The current game state.

        Returns:
            PhaseTransitionResult with the recommended next phase, or a
            failed result naming the unmet condition.
        """
        current = self._phase

        if current == Phase.SETUP:
            if self.should_end_setup_phase(state):
                return PhaseTransitionResult(success=True, new_phase=Phase.PLACE)
            return PhaseTransitionResult(
                success=False, new_phase=None, reason="Not all players have placed a port"
            )

        if current == Phase.PLACE:
            if self.should_end_place_phase(state):
                return PhaseTransitionResult(success=True, new_phase=Phase.PLAY)
            return PhaseTransitionResult(
                success=False, new_phase=None, reason="Not all captains have been placed"
            )

        if current == Phase.PLAY:
            if self.should_end_play_phase(state):
                return PhaseTransitionResult(success=True, new_phase=Phase.PIRATE)
            return PhaseTransitionResult(
                success=False, new_phase=None, reason="Players still have captains to use"
            )

        if current == Phase.PIRATE:
            if not self.should_end_pirate_phase(state):
                return PhaseTransitionResult(
                    success=False, new_phase=None, reason="Not all players have finished claiming"
                )
            should_end, reason = self.should_game_end(state)
            if should_end:
                return PhaseTransitionResult(success=True, new_phase=Phase.GAME_OVER, reason=reason)
            return PhaseTransitionResult(success=True, new_phase=Phase.PLACE)

        return PhaseTransitionResult(
            success=False,
            new_phase=None,
            reason="Game has ended - no further transitions",
        )

    # -------------------------------------------------------------------------
    # String representation
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        return f"PhaseMachine(phase={self._phase.value})"

    def __repr__(self) -> str:
        return f"PhaseMachine(phase={self._phase!r})"
