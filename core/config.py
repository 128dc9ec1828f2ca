"""Game configuration.

GameConfig gathers everything a host chooses before a game starts: player
count, seed, pirate powers, names and an optional fixed island layout.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .constants import MAX_PLAYERS, MIN_PLAYERS, PowerId
from .hex_grid import HexCoord, on_board


@dataclass(frozen=True)
class GameConfig:
    """Options for creating a new game.

    Attributes:
        num_players: Number of players (2-4).
        seed: Seed for the game's random source. None draws a fresh seed.
        powers: Pirate power per player; missing entries get the default power.
        player_names: Display names per player; missing entries are generated.
        island_layout: Island name -> cell. None places islands randomly.
    """

    num_players: int = 2
    seed: Optional[int] = None
    powers: tuple[PowerId, ...] = field(default_factory=tuple)
    player_names: tuple[str, ...] = field(default_factory=tuple)
    island_layout: Optional[dict[str, HexCoord]] = None

    def __post_init__(self):
        if not MIN_PLAYERS <= self.num_players <= MAX_PLAYERS:
            raise ValueError(
                f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}, "
                f"got {self.num_players}"
            )
        if len(self.powers) > self.num_players:
            raise ValueError(
                f"Got {len(self.powers)} powers for {self.num_players} players"
            )
        if len(self.player_names) > self.num_players:
            raise ValueError(
                f"Got {len(self.player_names)} names for {self.num_players} players"
            )
        if self.island_layout is not None:
            off_board = [name for name, coord in self.island_layout.items() if not on_board(coord)]
            if off_board:
                raise ValueError(f"Islands placed off the board: {sorted(off_board)}")

    def power_for(self, player_id: int) -> PowerId:
        if player_id < len(self.powers):
            return self.powers[player_id]
        return PowerId.DEFAULT

    def name_for(self, player_id: int) -> str:
        if player_id < len(self.player_names):
            return self.player_names[player_id]
        return f"Player {player_id + 1}"
