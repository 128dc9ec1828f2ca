"""Game state for the Notorious rules engine.

GameState is the single source of truth for the entire game.
It combines all components and provides methods for cloning,
serialization, state hashing and invariant checks.
"""

from __future__ import annotations

import copy
import hashlib
import json
import random
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from .board import BoardState
from .chart_deck import ChartDeck, build_chart_deck
from .config import GameConfig
from .constants import (
    MAX_PLAYERS,
    MIN_PLAYERS,
    Phase,
    PlayerColor,
    ShipKind,
    STARTING_GALLEONS,
    STARTING_SLOOPS,
    TurnDirection,
    WINNING_NOTORIETY,
)
from .errors import InvariantViolation
from .hex_grid import coord_key
from .island import Island
from .island_placer import IslandPlacer
from .player import Player
from .powers import PowerModifier, get_power


@dataclass
class RoundState:
    """Round and turn tracking.

    Attributes:
        phase: Current game phase.
        round_number: Current round (1-indexed, counted from the first place phase).
        turn_direction: Direction turn order advances.
        active_player_idx: Index of the player whose turn it is.
        wind_token_holder: Player holding the wind token, if anyone.
        game_ended: Whether the game has ended.
        final_round: Set once a player reaches the winning notoriety; the
            current round finishes before the game ends.
        players_done_claiming: Players who finished claiming this pirate phase.
        captains_placed_this_round: Whether any captain was placed this place phase.
    """

    phase: Phase = Phase.SETUP
    round_number: int = 0
    turn_direction: TurnDirection = TurnDirection.FORWARD
    active_player_idx: int = 0
    wind_token_holder: Optional[int] = None
    game_ended: bool = False
    final_round: bool = False
    players_done_claiming: list[int] = field(default_factory=list)
    captains_placed_this_round: bool = False

    def reset_for_new_round(self) -> None:
        """Reset per-round tracking and advance the round counter."""
        self.round_number += 1
        self.players_done_claiming = []
        self.captains_placed_this_round = False


@dataclass
class GameState:
    """The complete game state - single source of truth.

    Attributes:
        board: The 19-cell board with islands and ships.
        players: List of all players in seat order.
        chart_deck: Draw pile, discard pile and island raids.
        round_state: Phase, round and turn tracking.
    """

    board: BoardState
    players: list[Player]
    chart_deck: ChartDeck
    round_state: RoundState

    @classmethod
    def create_initial_state(
        cls,
        config: GameConfig,
        islands: Sequence[Island],
        rng: random.Random,
    ) -> GameState:
        """Create a game ready for the setup phase.

        Islands are placed (randomly or per config.island_layout) and the
        chart deck is built from the treasure maps left over.

        Args:
            config: Player count, powers, names and island layout.
            islands: The island definitions to place.
            rng: Random source for island placement and deck shuffling.

        Returns:
            A new GameState in the SETUP phase.
        """
        board = BoardState()
        placer = IslandPlacer(islands)
        if config.island_layout is not None:
            placement = placer.place_fixed(board, config.island_layout)
        else:
            placement = placer.place_random(board, rng)

        chart_deck = build_chart_deck(board, placement.remaining_map_cells, rng)

        colors = list(PlayerColor)
        players = [
            Player(
                player_id=i,
                name=config.name_for(i),
                color=colors[i],
                power_id=config.power_for(i),
            )
            for i in range(config.num_players)
        ]

        return cls(
            board=board,
            players=players,
            chart_deck=chart_deck,
            round_state=RoundState(),
        )

    @property
    def phase(self) -> Phase:
        return self.round_state.phase

    # -------------------------------------------------------------------------
    # Player access methods
    # -------------------------------------------------------------------------

    def get_current_player(self) -> Player:
        """Get the player whose turn it is."""
        return self.players[self.round_state.active_player_idx]

    def get_player(self, player_id: int) -> Player:
        """Get a player by ID.

        Raises:
            ValueError: If player_id is invalid.
        """
        if not 0 <= player_id < len(self.players):
            raise ValueError(f"Invalid player ID: {player_id}")
        return self.players[player_id]

    def has_player(self, player_id: int) -> bool:
        return 0 <= player_id < len(self.players)

    def power_of(self, player_id: int) -> PowerModifier:
        """Get the power bound to a player."""
        return get_power(self.get_player(player_id).power_id)

    def num_players(self) -> int:
        return len(self.players)

    def next_player_idx(self, idx: int) -> int:
        """Index of the player after idx in the current turn direction."""
        step = 1 if self.round_state.turn_direction == TurnDirection.FORWARD else -1
        return (idx + step) % len(self.players)

    def advance_current_player(self) -> None:
        """Move to the next player in turn order."""
        self.round_state.active_player_idx = self.next_player_idx(
            self.round_state.active_player_idx
        )

    def set_turn_direction(self, direction: TurnDirection) -> None:
        self.round_state.turn_direction = direction

    # -------------------------------------------------------------------------
    # Phase management
    # -------------------------------------------------------------------------

    def set_phase(self, phase: Phase) -> None:
        self.round_state.phase = phase

    def is_game_over(self) -> bool:
        return self.round_state.phase == Phase.GAME_OVER or self.round_state.game_ended

    def start_new_round(self) -> None:
        """Reset captains, advance the round counter and enter the place phase."""
        for player in self.players:
            player.reset_for_new_round()
        self.round_state.reset_for_new_round()
        self.round_state.active_player_idx = 0
        self.round_state.phase = Phase.PLACE

    def someone_reached(self, notoriety: int) -> bool:
        return any(player.notoriety >= notoriety for player in self.players)

    def winning_threshold_reached(self) -> bool:
        return self.someone_reached(WINNING_NOTORIETY)

    def get_standings(self) -> list[Player]:
        """Players ranked by notoriety, then doubloons, then seat order."""
        return sorted(
            self.players,
            key=lambda p: (-p.notoriety, -p.doubloons, p.player_id),
        )

    def get_winner(self) -> Optional[Player]:
        """Return the leading player once the game is over, else None."""
        if not self.is_game_over():
            return None
        return self.get_standings()[0]

    # -------------------------------------------------------------------------
    # Cloning and serialization
    # -------------------------------------------------------------------------

    def clone(self) -> GameState:
        """Create a deep copy of the game state.

        Used for hypothetical exploration by hosts and bots.
        """
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the game state to plain nested data.

        Returns:
            Dictionary representation of the game state.
        """
        rs = self.round_state
        return {
            "round_state": {
                "phase": rs.phase.value,
                "round_number": rs.round_number,
                "turn_direction": rs.turn_direction.value,
                "active_player_idx": rs.active_player_idx,
                "wind_token_holder": rs.wind_token_holder,
                "game_ended": rs.game_ended,
                "final_round": rs.final_round,
                "players_done_claiming": list(rs.players_done_claiming),
                "captains_placed_this_round": rs.captains_placed_this_round,
            },
            "players": [
                {
                    "player_id": p.player_id,
                    "name": p.name,
                    "color": p.color.value if p.color else None,
                    "power_id": p.power_id.value,
                    "notoriety": p.notoriety,
                    "doubloons": p.doubloons,
                    "captain_slots": p.captain_slots,
                    "placed_captains": [a.value for a in p.placed_captains],
                    "sloops": p.sloops,
                    "galleons": p.galleons,
                    "port_cell": coord_key(p.port_cell) if p.port_cell else None,
                    "charts": [chart.to_dict() for chart in p.charts],
                    "pending_draw": (
                        {
                            "cards": [chart.to_dict() for chart in p.pending_draw.cards],
                            "keep_count": p.pending_draw.keep_count,
                        }
                        if p.pending_draw
                        else None
                    ),
                }
                for p in self.players
            ],
            "board": self.board.to_dict(),
            "chart_deck": self.chart_deck.to_dict(),
        }

    def state_hash(self) -> str:
        """Compute a hash of the game state.

        Returns:
            A hex string hash of the serialized state.
        """
        state_json = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(state_json.encode()).hexdigest()

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> list[str]:
        """Check the game state for consistency.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors: list[str] = []

        if not MIN_PLAYERS <= len(self.players) <= MAX_PLAYERS:
            errors.append(
                f"Invalid player count: {len(self.players)} "
                f"(must be {MIN_PLAYERS}-{MAX_PLAYERS})"
            )

        for i, player in enumerate(self.players):
            if player.player_id != i:
                errors.append(f"Player at index {i} has ID {player.player_id} (expected {i})")

        if not 0 <= self.round_state.active_player_idx < len(self.players):
            errors.append(f"Invalid active_player_idx: {self.round_state.active_player_idx}")

        for player in self.players:
            pid = player.player_id
            on_board_sloops = self.board.count_ships(pid, ShipKind.SLOOP)
            on_board_galleons = self.board.count_ships(pid, ShipKind.GALLEON)
            if on_board_sloops + player.sloops != STARTING_SLOOPS:
                errors.append(
                    f"Player {pid} sloop pool broken: {on_board_sloops} on board + "
                    f"{player.sloops} in inventory != {STARTING_SLOOPS}"
                )
            if on_board_galleons + player.galleons != STARTING_GALLEONS:
                errors.append(
                    f"Player {pid} galleon pool broken: {on_board_galleons} on board + "
                    f"{player.galleons} in inventory != {STARTING_GALLEONS}"
                )
            if player.sloops < 0 or player.galleons < 0:
                errors.append(f"Player {pid} has negative inventory")
            if player.doubloons < 0:
                errors.append(f"Player {pid} has negative doubloons: {player.doubloons}")
            if len(player.placed_captains) > player.captain_slots:
                errors.append(
                    f"Player {pid} placed {len(player.placed_captains)} captains "
                    f"with only {player.captain_slots} slots"
                )
            ports = self.board.count_ships(pid, ShipKind.PORT)
            expected_ports = 1 if player.port_cell is not None else 0
            if ports != expected_ports:
                errors.append(f"Player {pid} has {ports} ports on the board (expected {expected_ports})")

        for cell in self.board.all_cells():
            coord = cell.coord
            if coord.q + coord.r + coord.s != 0:
                errors.append(f"Cell {coord} breaks q + r + s == 0")
            for ship in cell.ships:
                if not self.has_player(ship.owner_id):
                    errors.append(f"Ship at {coord} owned by unknown player {ship.owner_id}")

        return errors

    def assert_invariants(self) -> None:
        """Raise if the state is inconsistent.

        Raises:
            InvariantViolation: Listing every broken invariant.
        """
        errors = self.validate()
        if errors:
            raise InvariantViolation("; ".join(errors))

    # -------------------------------------------------------------------------
    # String representation
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        """Return a human-readable string representation."""
        rs = self.round_state
        lines = [
            f"GameState(phase={rs.phase.value}, round={rs.round_number})",
            f"  Turn direction: {rs.turn_direction.value}",
            f"  Active player: {rs.active_player_idx}",
            f"  Wind token: {rs.wind_token_holder}",
            f"  Players ({len(self.players)}):",
        ]
        for p in self.players:
            captains = ",".join(a.value for a in p.placed_captains) or "-"
            lines.append(
                f"    P{p.player_id} {p.name} [{p.power_id.value}]: notoriety={p.notoriety}, "
                f"doubloons={p.doubloons}, sloops={p.sloops}, galleons={p.galleons}, "
                f"captains={len(p.placed_captains)}/{p.captain_slots} ({captains}), "
                f"charts={len(p.charts)}"
            )
        lines.append(
            f"  Chart deck: {len(self.chart_deck.draw_pile)} to draw, "
            f"{len(self.chart_deck.discard_pile)} discarded, "
            f"{len(self.chart_deck.active_raids())} raids active"
        )
        return "\n".join(lines)
