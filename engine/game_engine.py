"""Main game engine for the Notorious board game.

The GameEngine is the primary interface for playing the game. It provides:
- reset(): Initialize a new game
- step(): Execute an action and advance game state
- get_valid_actions(): Return legal actions for the current state

The engine enforces all game rules and manages phase transitions.
Action legality is enforced by the action classes; the engine adds the
turn order checks and drives the phase machine.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from core.config import GameConfig
from core.constants import ActionKind, Phase, PowerId, ShipKind, TurnDirection
from core.game_state import GameState
from core.hex_grid import HexCoord
from core.player import Player
from data.loader import IslandData, load_default_islands

from .actions import (
    ActionResult,
    BaseAction,
    BuildAction,
    DrawChartsAction,
    ForfeitAction,
    KeepChartsAction,
    SailAction,
    SailMove,
    SinkAction,
    SinkTarget,
    StealAction,
    enumerate_builds,
    enumerate_chart_draws,
    enumerate_chart_keeps,
    enumerate_sail_moves,
    enumerate_sinks,
    enumerate_steals,
    plan_sail_move,
)
from .claims import ChartClaimResolver
from .phase_machine import PhaseMachine
from .pirate import PirateReport, begin_pirate_phase
from .setup import SetupManager

logger = logging.getLogger(__name__)


class ActionType(Enum):
    """Types of actions a player can take."""

    # Setup phase
    PLACE_PORT = "place_port"

    # Place phase
    PLACE_CAPTAIN = "place_captain"
    SET_WIND = "set_wind"

    # Play phase
    SAIL = "sail"
    BUILD = "build"
    STEAL = "steal"
    SINK = "sink"
    DRAW_CHARTS = "draw_charts"
    KEEP_CHARTS = "keep_charts"
    FORFEIT = "forfeit"

    # Pirate phase
    CLAIM_CHART = "claim_chart"
    END_CLAIMS = "end_claims"


@dataclass
class Action:
    """Represents an action to be executed.

    Attributes:
        action_type: The type of action.
        player_id: The player taking the action.
        params: Additional parameters for the action (context-dependent).
            Coordinates may be given as HexCoord or [q, r] lists.
    """

    action_type: ActionType
    player_id: int
    params: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"Action({self.action_type.value}, player={self.player_id}, params={self.params})"


@dataclass
class StepResult:
    """Result of executing a step in the game.

    Attributes:
        success: Whether the action was executed successfully.
        state: The game state after the action.
        reward: Notoriety gained this step, per player.
        done: Whether the game has ended.
        info: Additional information about the step.
    """

    success: bool
    state: GameState
    reward: dict[int, float]
    done: bool
    info: dict[str, Any]


def _coord(value: Any) -> HexCoord:
    """Accept a HexCoord or a [q, r] pair."""
    if isinstance(value, HexCoord):
        return value
    q, r = value
    return HexCoord(int(q), int(r))


def _ship_kind(value: Any) -> ShipKind:
    return value if isinstance(value, ShipKind) else ShipKind(value)


def _action_kind(value: Any) -> ActionKind:
    return value if isinstance(value, ActionKind) else ActionKind(value)


class GameEngine:
    """Main engine for playing the Notorious board game.

    The engine owns the game state, the phase machine and the random source,
    and provides the interface for hosts, bots and tests.

    Usage:
        engine = GameEngine()
        engine.reset(num_players=2, seed=7)

        while not engine.is_game_over():
            actions = engine.get_valid_actions()
            action = select_action(actions)  # Player or bot selects
            result = engine.step(action)
    """

    def __init__(self):
        """Initialize the game engine."""
        self._state: Optional[GameState] = None
        self._phase_machine: Optional[PhaseMachine] = None
        self._setup_manager: Optional[SetupManager] = None
        self._rng: random.Random = random.Random()
        self._last_pirate_report: Optional[PirateReport] = None

    @property
    def state(self) -> GameState:
        """Get the current game state.

        Raises:
            RuntimeError: If the game has not been initialized.
        """
        if self._state is None:
            raise RuntimeError("Game not initialized. Call reset() first.")
        return self._state

    @property
    def phase(self) -> Phase:
        """Get the current game phase."""
        return self.state.phase

    @property
    def rng(self) -> random.Random:
        return self._rng

    @property
    def last_pirate_report(self) -> Optional[PirateReport]:
        """Upkeep results of the most recent pirate phase."""
        return self._last_pirate_report

    def is_game_over(self) -> bool:
        """Check if the game has ended."""
        return self._state is not None and self._state.is_game_over()

    # -------------------------------------------------------------------------
    # Game Initialization
    # -------------------------------------------------------------------------

    def reset(
        self,
        num_players: int = 2,
        seed: Optional[int] = None,
        powers: Optional[list[PowerId]] = None,
        island_layout: Optional[dict[str, HexCoord]] = None,
        player_names: Optional[list[str]] = None,
        islands: Optional[IslandData] = None,
        reference_layout: bool = False,
        rng: Optional[random.Random] = None,
    ) -> GameState:
        """Initialize a new game.

        Args:
            num_players: Number of players (2-4).
            seed: Seed for island placement and every shuffle. Ignored when
                rng is given.
            powers: Pirate power per seat; missing seats get the default power.
            island_layout: Fixed island placement (island name -> hex).
                If None, islands are placed at random.
            player_names: Display names per seat.
            islands: Island definitions to play with. If None, uses the
                default island file.
            reference_layout: If True and no island_layout is given, place
                islands at the layout stored with the island data.
            rng: Random source owned by the caller.

        Returns:
            The initial game state.

        Raises:
            ValueError: If the configuration is invalid.
        """
        config = GameConfig(
            num_players=num_players,
            seed=seed,
            powers=tuple(powers or ()),
            player_names=tuple(player_names or ()),
            island_layout=island_layout,
        )
        return self.reset_from_config(
            config, islands=islands, reference_layout=reference_layout, rng=rng
        )

    def reset_from_config(
        self,
        config: GameConfig,
        islands: Optional[IslandData] = None,
        reference_layout: bool = False,
        rng: Optional[random.Random] = None,
    ) -> GameState:
        """Initialize a new game from a GameConfig.

        Raises:
            ValueError: If reference_layout is set but the island data has no layout.
        """
        island_data = islands if islands is not None else load_default_islands()
        if reference_layout and config.island_layout is None:
            if island_data.layout is None:
                raise ValueError("Island data has no reference layout")
            config = replace(config, island_layout=dict(island_data.layout))

        self._rng = rng if rng is not None else random.Random(config.seed)
        self._state = GameState.create_initial_state(config, island_data.islands, self._rng)
        self._phase_machine = PhaseMachine(initial_phase=Phase.SETUP)
        self._setup_manager = SetupManager(self._state)
        self._last_pirate_report = None

        placed = {island.name: str(coord) for coord, island in self._state.board.islands()}
        logger.info("New game: %d players, islands at %s", config.num_players, placed)
        return self._state

    # -------------------------------------------------------------------------
    # Action Execution
    # -------------------------------------------------------------------------

    def step(self, action: Action) -> StepResult:
        """Execute an action and advance the game state.

        Args:
            action: The action to execute.

        Returns:
            StepResult with the outcome of the action. Invalid actions
            leave the state untouched and report the reason in info["error"].

        Raises:
            ValueError: If the game is already over.
        """
        if self.is_game_over():
            raise ValueError("Game is over; call reset() to start a new game")

        before = {p.player_id: p.notoriety for p in self.state.players}

        turn_error = self._check_turn(action)
        if turn_error is not None:
            return self._failed_step(turn_error)

        info: dict[str, Any] = {"action": str(action)}
        try:
            result = self._dispatch(action)
        except (KeyError, TypeError, ValueError) as e:
            # Malformed parameters; nothing has been applied yet
            logger.debug("Rejected %s: %s", action, e)
            return self._failed_step(f"Invalid parameters: {e}")

        if not result.success:
            return self._failed_step(result.message)

        info["message"] = result.message
        self._after_action(action)
        self._check_phase_transition()

        info["phase"] = self.state.phase.value
        info["round"] = self.state.round_state.round_number
        if self.is_game_over():
            winner = self.state.get_winner()
            info["winner"] = winner.player_id if winner else None

        reward = {
            p.player_id: float(p.notoriety - before[p.player_id]) for p in self.state.players
        }
        return StepResult(
            success=True,
            state=self.state,
            reward=reward,
            done=self.is_game_over(),
            info=info,
        )

    def _failed_step(self, reason: str) -> StepResult:
        return StepResult(
            success=False,
            state=self.state,
            reward={p.player_id: 0.0 for p in self.state.players},
            done=self.is_game_over(),
            info={"error": reason},
        )

    def _check_turn(self, action: Action) -> Optional[str]:
        """Return why the acting player may not act now, or None."""
        if not self.state.has_player(action.player_id):
            return f"Unknown player {action.player_id}"

        # The wind token holder acts out of turn
        if action.action_type == ActionType.SET_WIND:
            return None

        current = self.state.get_current_player()
        if action.player_id != current.player_id:
            return f"Not player {action.player_id}'s turn (current: {current.player_id})"
        return None

    def _dispatch(self, action: Action) -> ActionResult:
        handlers = {
            ActionType.PLACE_PORT: self._execute_place_port,
            ActionType.PLACE_CAPTAIN: self._execute_place_captain,
            ActionType.SET_WIND: self._execute_set_wind,
            ActionType.CLAIM_CHART: self._execute_claim_chart,
            ActionType.END_CLAIMS: self._execute_end_claims,
        }
        handler = handlers.get(action.action_type)
        if handler is not None:
            return handler(action)
        return self.build_play_action(action).execute(self.state)

    # -------------------------------------------------------------------------
    # Action Execution Helpers
    # -------------------------------------------------------------------------

    def _execute_place_port(self, action: Action) -> ActionResult:
        """Execute a port placement during setup."""
        validation = self._setup_manager.place_port(action.player_id, _coord(action.params["cell"]))
        if not validation.valid:
            return ActionResult.failure(validation.reason or "Invalid port placement")
        return ActionResult(success=True, message="Placed port")

    def _execute_place_captain(self, action: Action) -> ActionResult:
        """Commit one captain to an action kind."""
        if self.state.phase != Phase.PLACE:
            return ActionResult.failure("Captains can only be placed in the place phase")

        player = self.state.get_player(action.player_id)
        kind = _action_kind(action.params["action_kind"])
        if not player.can_place_captain():
            return ActionResult.failure("All captains already placed")
        if not self.state.power_of(player.player_id).can_perform(kind):
            return ActionResult.failure(f"Your pirate cannot take {kind.value} actions")

        player.place_captain(kind)
        self.state.round_state.captains_placed_this_round = True
        return ActionResult(success=True, message=f"Placed captain on {kind.value}")

    def _execute_set_wind(self, action: Action) -> ActionResult:
        """Spend the wind token to choose the turn direction for this round."""
        round_state = self.state.round_state
        if self.state.phase != Phase.PLACE:
            return ActionResult.failure("The wind can only be set in the place phase")
        if round_state.wind_token_holder != action.player_id:
            return ActionResult.failure("Only the wind token holder can set the wind")
        if round_state.captains_placed_this_round:
            return ActionResult.failure("The wind must be set before any captain is placed")

        direction = action.params["direction"]
        if not isinstance(direction, TurnDirection):
            direction = TurnDirection(direction)
        self.state.set_turn_direction(direction)
        round_state.wind_token_holder = None
        return ActionResult(success=True, message=f"Set the wind {direction.value}")

    def _execute_claim_chart(self, action: Action) -> ActionResult:
        claim = ChartClaimResolver(self.state).claim(action.player_id, action.params["chart_id"])
        return ActionResult(
            success=claim.success,
            message=claim.message,
            notoriety_gained=claim.notoriety_gained,
            doubloons_gained=claim.doubloons_gained,
            captains_unlocked=claim.captains_unlocked,
        )

    def _execute_end_claims(self, action: Action) -> ActionResult:
        if self.state.phase != Phase.PIRATE:
            return ActionResult.failure("Claims can only be ended in the pirate phase")
        done = self.state.round_state.players_done_claiming
        if action.player_id not in done:
            done.append(action.player_id)
        return ActionResult(success=True, message="Finished claiming")

    def build_play_action(self, action: Action) -> BaseAction:
        """Turn a play-phase Action into its validate/execute action object.

        Raises:
            ValueError: If the action type is not a play-phase action.
            KeyError: If a required parameter is missing.
        """
        params = action.params
        pid = action.player_id
        kind = action.action_type

        if kind == ActionType.SAIL:
            ignore = self.state.power_of(pid).ignores_island_edges
            moves = [self._parse_sail_move(m, ignore) for m in params["moves"]]
            return SailAction(pid, moves, bribes=int(params.get("bribes", 0)))
        if kind == ActionType.BUILD:
            return BuildAction(
                pid,
                _coord(params["cell"]),
                galleon=bool(params.get("galleon", False)),
                bribes=int(params.get("bribes", 0)),
            )
        if kind == ActionType.STEAL:
            return StealAction(
                pid,
                _coord(params["cell"]),
                int(params["target_player_id"]),
                replace_with_sloop=bool(params.get("replace_with_sloop", False)),
            )
        if kind == ActionType.SINK:
            before = params.get("move_sloop_before")
            return SinkAction(
                pid,
                _coord(params["cell"]),
                self._parse_sink_target(params["target"]),
                move_sloop_before=(
                    (_coord(before[0]), _coord(before[1])) if before is not None else None
                ),
                additional_sink=(
                    self._parse_sink_target(params["additional_sink"])
                    if params.get("additional_sink") is not None
                    else None
                ),
            )
        if kind == ActionType.DRAW_CHARTS:
            return DrawChartsAction(
                pid,
                self._rng,
                draw_extra=bool(params.get("draw_extra", False)),
                keep_extra=bool(params.get("keep_extra", False)),
            )
        if kind == ActionType.KEEP_CHARTS:
            return KeepChartsAction(pid, list(params["selected_ids"]))
        if kind == ActionType.FORFEIT:
            action_kind = params.get("action_kind")
            return ForfeitAction(pid, _action_kind(action_kind) if action_kind is not None else None)
        raise ValueError(f"{kind.value} is not a play phase action")

    def _parse_sail_move(self, value: Any, ignore_islands: bool) -> SailMove:
        """Accept a SailMove, a {'ship_kind', 'path'} dict or a {'ship_kind', 'from', 'to'} dict.

        From/to moves are expanded along the shortest open route.
        """
        if isinstance(value, SailMove):
            return value
        ship_kind = _ship_kind(value["ship_kind"])
        if "path" in value:
            return SailMove(ship_kind, tuple(_coord(c) for c in value["path"]))

        origin = _coord(value["from"])
        destination = _coord(value["to"])
        move = plan_sail_move(self.state.board, ship_kind, origin, destination, ignore_islands)
        if move is None:
            # Leave the rejection to SailAction validation
            return SailMove(ship_kind, (origin, destination))
        return move

    @staticmethod
    def _parse_sink_target(value: Any) -> SinkTarget:
        if isinstance(value, SinkTarget):
            return value
        return SinkTarget(_ship_kind(value["ship_kind"]), int(value["player_id"]))

    # -------------------------------------------------------------------------
    # Turn order
    # -------------------------------------------------------------------------

    def _after_action(self, action: Action) -> None:
        """Pass the turn on after a successful action."""
        phase = self.state.phase
        if phase == Phase.SETUP:
            next_player = self._setup_manager.get_next_player()
            if next_player is not None:
                self.state.round_state.active_player_idx = next_player
        elif phase == Phase.PLACE:
            if action.action_type == ActionType.PLACE_CAPTAIN:
                self._advance_to_next_active_player(lambda p: p.can_place_captain())
        elif phase == Phase.PLAY:
            player = self.state.get_player(action.player_id)
            # The keep step of a chart draw belongs to the same turn
            if player.pending_draw is None:
                self._advance_to_next_active_player(self._has_play_turn)
        elif phase == Phase.PIRATE:
            if action.action_type == ActionType.END_CLAIMS:
                done = self.state.round_state.players_done_claiming
                self._advance_to_next_active_player(lambda p: p.player_id not in done)

    @staticmethod
    def _has_play_turn(player: Player) -> bool:
        return bool(player.placed_captains) or player.pending_draw is not None

    def _advance_to_next_active_player(self, has_turn) -> None:
        """Advance to the next player in turn direction who still has something to do."""
        for _ in range(self.state.num_players()):
            self.state.advance_current_player()
            if has_turn(self.state.get_current_player()):
                return

        # Nobody has anything left - stay put (will trigger phase transition)

    def _first_active_player(self, has_turn) -> None:
        """Give the turn to the first player, from seat 0, with something to do."""
        self.state.round_state.active_player_idx = 0
        if not has_turn(self.state.get_current_player()):
            self._advance_to_next_active_player(has_turn)

    # -------------------------------------------------------------------------
    # Phase Transition Logic
    # -------------------------------------------------------------------------

    def _check_phase_transition(self) -> None:
        """Check and execute any necessary phase transitions."""
        if self._phase_machine is None:
            return

        result = self._phase_machine.compute_next_phase(self.state)
        if not result.success:
            return

        new_phase = result.new_phase
        if new_phase == Phase.PLACE:
            self._transition_to_phase(Phase.PLACE)
            self.state.start_new_round()
            logger.info("Round %d begins", self.state.round_state.round_number)
        elif new_phase == Phase.PLAY:
            self._transition_to_phase(Phase.PLAY)
            self._first_active_player(self._has_play_turn)
        elif new_phase == Phase.PIRATE:
            self._transition_to_phase(Phase.PIRATE)
            self._last_pirate_report = begin_pirate_phase(self.state)
            self.state.round_state.active_player_idx = 0
        elif new_phase == Phase.GAME_OVER:
            self._transition_to_phase(Phase.GAME_OVER)
            self.state.round_state.game_ended = True
            logger.info("Game over: %s", result.reason)

    def _transition_to_phase(self, new_phase: Phase) -> None:
        """Transition to a new phase."""
        self._phase_machine.transition_to(new_phase)
        self.state.set_phase(new_phase)
        logger.info("Phase -> %s", new_phase.value)

    # -------------------------------------------------------------------------
    # Valid Actions
    # -------------------------------------------------------------------------

    def get_valid_actions(self) -> list[Action]:
        """Get all valid actions for the current state.

        Play-phase options are listed without bribes; bribed variants
        are legal through step() but not enumerated.

        Returns:
            List of valid actions the current player can take.
        """
        if self.is_game_over():
            return []

        phase = self.state.phase
        if phase == Phase.SETUP:
            return self._get_valid_setup_actions()
        elif phase == Phase.PLACE:
            return self._get_valid_place_actions()
        elif phase == Phase.PLAY:
            return self._get_valid_play_actions()
        elif phase == Phase.PIRATE:
            return self._get_valid_pirate_actions()
        return []

    def _get_valid_setup_actions(self) -> list[Action]:
        player_id = self.state.get_current_player().player_id
        return [
            Action(ActionType.PLACE_PORT, player_id, {"cell": coord})
            for coord in self._setup_manager.get_valid_port_cells()
        ]

    def _get_valid_place_actions(self) -> list[Action]:
        actions: list[Action] = []
        round_state = self.state.round_state

        holder = round_state.wind_token_holder
        if holder is not None and not round_state.captains_placed_this_round:
            for direction in TurnDirection:
                actions.append(Action(ActionType.SET_WIND, holder, {"direction": direction}))

        player = self.state.get_current_player()
        if player.can_place_captain():
            power = self.state.power_of(player.player_id)
            for kind in ActionKind:
                if power.can_perform(kind):
                    actions.append(
                        Action(ActionType.PLACE_CAPTAIN, player.player_id, {"action_kind": kind})
                    )
        return actions

    def _get_valid_play_actions(self) -> list[Action]:
        player = self.state.get_current_player()
        pid = player.player_id

        if player.pending_draw is not None:
            return [
                Action(ActionType.KEEP_CHARTS, pid, params)
                for params in enumerate_chart_keeps(self.state, pid)
            ]

        enumerators = {
            ActionKind.SAIL: (ActionType.SAIL, enumerate_sail_moves),
            ActionKind.BUILD: (ActionType.BUILD, enumerate_builds),
            ActionKind.STEAL: (ActionType.STEAL, enumerate_steals),
            ActionKind.SINK: (ActionType.SINK, enumerate_sinks),
            ActionKind.CHART: (ActionType.DRAW_CHARTS, enumerate_chart_draws),
        }

        actions: list[Action] = []
        power = self.state.power_of(pid)
        for kind in dict.fromkeys(player.placed_captains):
            if power.can_perform(kind):
                action_type, enumerate_fn = enumerators[kind]
                actions.extend(
                    Action(action_type, pid, params) for params in enumerate_fn(self.state, pid)
                )
            actions.append(Action(ActionType.FORFEIT, pid, {"action_kind": kind}))
        return actions

    def _get_valid_pirate_actions(self) -> list[Action]:
        player = self.state.get_current_player()
        pid = player.player_id
        if pid in self.state.round_state.players_done_claiming:
            return []

        resolver = ChartClaimResolver(self.state)
        actions = [
            Action(ActionType.CLAIM_CHART, pid, {"chart_id": chart_id})
            for chart_id in resolver.get_claimable_charts(pid)
        ]
        actions.append(Action(ActionType.END_CLAIMS, pid, {}))
        return actions

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def get_current_player(self) -> Player:
        """Get the current player."""
        return self.state.get_current_player()

    def clone(self) -> GameEngine:
        """Create a deep copy of the engine for simulation.

        The clone's random source continues from the same point, so the
        same actions produce the same draws in both engines.

        Returns:
            A new GameEngine with cloned state.
        """
        new_engine = GameEngine()
        new_engine._state = self.state.clone()
        new_engine._phase_machine = PhaseMachine(initial_phase=self.state.phase)
        new_engine._setup_manager = SetupManager(new_engine._state)
        new_engine._rng = random.Random()
        new_engine._rng.setstate(self._rng.getstate())
        new_engine._last_pirate_report = self._last_pirate_report
        return new_engine

    def get_game_summary(self) -> dict[str, Any]:
        """Get a summary of the current game state.

        Returns:
            Dictionary with game summary information.
        """
        winner = self.state.get_winner()
        return {
            "phase": self.state.phase.value,
            "round": self.state.round_state.round_number,
            "current_player": self.state.round_state.active_player_idx,
            "turn_direction": self.state.round_state.turn_direction.value,
            "wind_token_holder": self.state.round_state.wind_token_holder,
            "final_round": self.state.round_state.final_round,
            "players": [
                {
                    "id": p.player_id,
                    "name": p.name,
                    "power": p.power_id.value,
                    "notoriety": p.notoriety,
                    "doubloons": p.doubloons,
                    "captain_slots": p.captain_slots,
                    "captains_placed": [k.value for k in p.placed_captains],
                    "charts_in_hand": len(p.charts),
                    "controlled_cells": len(self.state.board.controlled_cells(p.player_id)),
                }
                for p in self.state.players
            ],
            "charts_in_draw_pile": len(self.state.chart_deck.draw_pile),
            "active_raids": [r.target_island for r in self.state.chart_deck.active_raids()],
            "game_over": self.is_game_over(),
            "winner": winner.player_id if winner else None,
        }

    def __str__(self) -> str:
        """Return string representation of the engine."""
        if self._state is None:
            return "GameEngine(not initialized)"
        return f"GameEngine(phase={self.state.phase.value}, round={self.state.round_state.round_number})"
