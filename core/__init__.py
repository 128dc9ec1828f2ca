"""Core data models for the Notorious rules engine."""

from .constants import (
    ShipKind,
    ActionKind,
    Phase,
    TurnDirection,
    ChartKind,
    PowerId,
    PlayerColor,
    MIN_PLAYERS,
    MAX_PLAYERS,
    STARTING_SLOOPS,
    STARTING_GALLEONS,
    STARTING_DOUBLOONS,
    STARTING_CAPTAINS,
    WINNING_NOTORIETY,
    CAPTAIN_UNLOCK_THRESHOLDS,
    SECOND_RAID_THRESHOLD,
    HEX_COUNT,
    ISLAND_COUNT,
    INFLUENCE,
    BRIBE_COST,
    MOBILE_SHIP_KINDS,
)

from .errors import InvariantViolation

from .hex_grid import (
    HexCoord,
    Direction,
    DIRECTIONS,
    BOARD_CELLS,
    distance,
    is_adjacent,
    direction_between,
    neighbor,
    neighbors,
    on_board,
    coord_key,
    parse_coord_key,
)

from .pathfinding import find_path, reachable_cells

from .ship import Ship

from .island import Island

from .board import Cell, BoardState

from .island_placer import IslandPlacer, PlacementResult

from .charts import Chart, TreasureMap, IslandRaid, SmugglerRoute

from .chart_deck import ChartDeck, build_chart_deck

from .powers import PowerModifier, POWER_TABLE, DEFAULT_POWER, get_power

from .player import Player, PendingDraw

from .config import GameConfig

from .game_state import RoundState, GameState

__all__ = [
    # Constants
    "ShipKind",
    "ActionKind",
    "Phase",
    "TurnDirection",
    "ChartKind",
    "PowerId",
    "PlayerColor",
    "MIN_PLAYERS",
    "MAX_PLAYERS",
    "STARTING_SLOOPS",
    "STARTING_GALLEONS",
    "STARTING_DOUBLOONS",
    "STARTING_CAPTAINS",
    "WINNING_NOTORIETY",
    "CAPTAIN_UNLOCK_THRESHOLDS",
    "SECOND_RAID_THRESHOLD",
    "HEX_COUNT",
    "ISLAND_COUNT",
    "INFLUENCE",
    "BRIBE_COST",
    "MOBILE_SHIP_KINDS",
    # Errors
    "InvariantViolation",
    # Hex grid
    "HexCoord",
    "Direction",
    "DIRECTIONS",
    "BOARD_CELLS",
    "distance",
    "is_adjacent",
    "direction_between",
    "neighbor",
    "neighbors",
    "on_board",
    "coord_key",
    "parse_coord_key",
    # Pathfinding
    "find_path",
    "reachable_cells",
    # Board
    "Ship",
    "Island",
    "Cell",
    "BoardState",
    "IslandPlacer",
    "PlacementResult",
    # Charts
    "Chart",
    "TreasureMap",
    "IslandRaid",
    "SmugglerRoute",
    "ChartDeck",
    "build_chart_deck",
    # Powers
    "PowerModifier",
    "POWER_TABLE",
    "DEFAULT_POWER",
    "get_power",
    # Player
    "Player",
    "PendingDraw",
    # Game State
    "GameConfig",
    "RoundState",
    "GameState",
]
