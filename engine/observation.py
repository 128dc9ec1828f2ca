"""Observation encoding for bots and external learners.

Encodes the complete GameState into a flat numpy array. Uses self-relative
player encoding where the observing player is always index 0, and only
reveals the observing player's own hidden charts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

import numpy as np

from core.board import Cell
from core.charts import TreasureMap
from core.constants import (
    ActionKind,
    CAPTAIN_UNLOCK_THRESHOLDS,
    ISLAND_RAID_COUNT,
    MAX_PLAYERS,
    Phase,
    ShipKind,
    STARTING_CAPTAINS,
    STARTING_GALLEONS,
    STARTING_SLOOPS,
    TurnDirection,
    WINNING_NOTORIETY,
)
from core.game_state import GameState
from core.hex_grid import BOARD_CELLS


@dataclass(frozen=True)
class ObservationConfig:
    """Dimensions of the observation tensor.

    All sizes are fixed by the board and the rules so that every state of
    every game encodes to the same shape.
    """

    NUM_CELLS: int = len(BOARD_CELLS)
    MAX_PLAYERS: int = MAX_PLAYERS
    RAIDS: int = ISLAND_RAID_COUNT

    # Normalizers for open-ended counts
    MAX_DOUBLOONS: float = 20.0
    MAX_ROUNDS: float = 20.0
    MAX_HAND: float = 10.0
    MAX_RAID_DOUBLOONS: float = 10.0

    # Feature dimensions per component
    # island (1) + blocked edges (6) + per player sloops/galleons/port (3 x 4)
    # + controller (4) + own treasure map target (1)
    CELL_FEATURE_DIM: ClassVar[int] = 24
    # active (1) + notoriety (1) + doubloons (1) + slots (1)
    # + captains per kind (5) + pending draw (1) + hand size (1)
    PLAYER_FEATURE_DIM: ClassVar[int] = 11
    # phase (5) + round (1) + reverse (1) + wind holder (4) + final round (1)
    # + draw pile (1) + raids (revealed, doubloons) x 2
    GLOBAL_FEATURE_DIM: ClassVar[int] = 17

    @property
    def cell_features_size(self) -> int:
        return self.NUM_CELLS * self.CELL_FEATURE_DIM

    @property
    def player_features_size(self) -> int:
        return self.MAX_PLAYERS * self.PLAYER_FEATURE_DIM

    @property
    def global_features_size(self) -> int:
        return self.GLOBAL_FEATURE_DIM

    @property
    def total_observation_dim(self) -> int:
        """Total dimension of the flat observation tensor."""
        return self.cell_features_size + self.player_features_size + self.global_features_size


DEFAULT_OBS_CONFIG = ObservationConfig()


class ObservationEncoder:
    """Encodes GameState into a flat observation tensor.

    The observation is structured as follows:
    1. Cell features [NUM_CELLS x CELL_FEATURE_DIM], in board order
    2. Player features [MAX_PLAYERS x PLAYER_FEATURE_DIM]
    3. Global state [GLOBAL_FEATURE_DIM]

    All features are normalized to the [0, 1] range.
    Players are reordered so the observing player is always index 0.
    """

    def __init__(self, config: ObservationConfig = DEFAULT_OBS_CONFIG):
        """Initialize the encoder with configuration.

        Args:
            config: Observation configuration defining tensor dimensions.
        """
        self.config = config
        self._cell_to_idx = {coord: idx for idx, coord in enumerate(BOARD_CELLS)}

    @property
    def observation_dim(self) -> int:
        return self.config.total_observation_dim

    def encode(self, state: GameState, current_player_id: Optional[int] = None) -> np.ndarray:
        """Encode complete game state into flat observation tensor.

        Args:
            state: The GameState to encode.
            current_player_id: The player whose perspective to use.
                If None, uses the active player.

        Returns:
            Flat numpy array of shape (total_observation_dim,) with dtype float32.
        """
        if current_player_id is None:
            current_player_id = state.get_current_player().player_id

        obs = np.zeros(self.config.total_observation_dim, dtype=np.float32)

        offset = 0
        offset = self._encode_cells(state, current_player_id, obs, offset)
        offset = self._encode_players(state, current_player_id, obs, offset)
        offset = self._encode_global(state, current_player_id, obs, offset)

        return obs

    def _encode_cells(
        self, state: GameState, current_player_id: int, obs: np.ndarray, offset: int
    ) -> int:
        feature_dim = self.config.CELL_FEATURE_DIM
        player_order = self._get_player_order(current_player_id, state.num_players())

        map_targets = {
            chart.target_cell
            for chart in state.get_player(current_player_id).charts
            if isinstance(chart, TreasureMap)
        }

        for cell in state.board.all_cells():
            idx = self._cell_to_idx[cell.coord]
            base = offset + idx * feature_dim
            i = 0

            # Island and its blocked edges
            obs[base + i] = 1.0 if cell.island is not None else 0.0
            i += 1
            for direction in range(6):
                obs[base + i] = 1.0 if cell.island is not None and cell.island.blocks(direction) else 0.0
                i += 1

            # Ships per player (self-relative order)
            for rel_idx in range(self.config.MAX_PLAYERS):
                if rel_idx < len(player_order):
                    self._encode_ships(cell, player_order[rel_idx], obs, base + i)
                i += 3

            # Controller (self-relative one-hot, all zero when uncontrolled)
            controller = cell.controller()
            for rel_idx in range(self.config.MAX_PLAYERS):
                if rel_idx < len(player_order) and player_order[rel_idx] == controller:
                    obs[base + i] = 1.0
                i += 1

            obs[base + i] = 1.0 if cell.coord in map_targets else 0.0
            i += 1

        return offset + self.config.cell_features_size

    @staticmethod
    def _encode_ships(cell: Cell, player_id: int, obs: np.ndarray, base: int) -> None:
        obs[base] = cell.count(player_id, ShipKind.SLOOP) / STARTING_SLOOPS
        obs[base + 1] = cell.count(player_id, ShipKind.GALLEON) / STARTING_GALLEONS
        obs[base + 2] = 1.0 if cell.has_ship_kind(player_id, ShipKind.PORT) else 0.0

    def _encode_players(
        self, state: GameState, current_player_id: int, obs: np.ndarray, offset: int
    ) -> int:
        """Encode player features into observation tensor.

        Player features (11 per player):
        - is_active_player (1): binary, whose turn it is
        - notoriety (1): normalized by the winning notoriety
        - doubloons (1): normalized
        - captain_slots (1): normalized by the maximum slots
        - placed captains per action kind (5): normalized
        - has_pending_draw (1): binary
        - hand size (1): normalized
        """
        feature_dim = self.config.PLAYER_FEATURE_DIM
        player_order = self._get_player_order(current_player_id, state.num_players())
        max_slots = float(STARTING_CAPTAINS + len(CAPTAIN_UNLOCK_THRESHOLDS))
        active_id = state.get_current_player().player_id

        for rel_idx, player_id in enumerate(player_order):
            if rel_idx >= self.config.MAX_PLAYERS:
                break

            player = state.players[player_id]
            base = offset + rel_idx * feature_dim
            i = 0

            obs[base + i] = 1.0 if player_id == active_id else 0.0
            i += 1
            obs[base + i] = min(player.notoriety / WINNING_NOTORIETY, 1.0)
            i += 1
            obs[base + i] = min(player.doubloons / self.config.MAX_DOUBLOONS, 1.0)
            i += 1
            obs[base + i] = player.captain_slots / max_slots
            i += 1

            for kind in ActionKind:
                obs[base + i] = player.placed_captains.count(kind) / max_slots
                i += 1

            obs[base + i] = 1.0 if player.pending_draw is not None else 0.0
            i += 1
            obs[base + i] = min(len(player.charts) / self.config.MAX_HAND, 1.0)
            i += 1

        return offset + self.config.player_features_size

    def _encode_global(
        self, state: GameState, current_player_id: int, obs: np.ndarray, offset: int
    ) -> int:
        base = offset
        i = 0
        round_state = state.round_state

        # Phase (one-hot)
        phase_idx = list(Phase).index(state.phase)
        for p_idx in range(len(Phase)):
            obs[base + i] = 1.0 if p_idx == phase_idx else 0.0
            i += 1

        obs[base + i] = min(round_state.round_number / self.config.MAX_ROUNDS, 1.0)
        i += 1
        obs[base + i] = 1.0 if round_state.turn_direction == TurnDirection.REVERSE else 0.0
        i += 1

        # Wind token holder (self-relative one-hot)
        player_order = self._get_player_order(current_player_id, state.num_players())
        for rel_idx in range(self.config.MAX_PLAYERS):
            if rel_idx < len(player_order) and player_order[rel_idx] == round_state.wind_token_holder:
                obs[base + i] = 1.0
            i += 1

        obs[base + i] = 1.0 if round_state.final_round else 0.0
        i += 1

        deck = state.chart_deck
        total_cards = len(deck.draw_pile) + len(deck.discard_pile)
        obs[base + i] = len(deck.draw_pile) / total_cards if total_cards else 0.0
        i += 1

        raids = deck.island_raids
        for r_idx in range(self.config.RAIDS):
            if r_idx < len(raids):
                obs[base + i] = 1.0 if raids[r_idx].revealed else 0.0
                obs[base + i + 1] = min(
                    raids[r_idx].doubloons_on_chart / self.config.MAX_RAID_DOUBLOONS, 1.0
                )
            i += 2

        return offset + self.config.global_features_size

    def _get_player_order(self, current_player_id: int, num_players: int) -> list[int]:
        """Get player IDs in self-relative order (observing player first, then by seat)."""
        return [(current_player_id + i) % num_players for i in range(num_players)]

    def get_observation_space_shape(self) -> tuple[int, ...]:
        return (self.config.total_observation_dim,)

    def get_observation_bounds(self) -> tuple[float, float]:
        return (0.0, 1.0)
