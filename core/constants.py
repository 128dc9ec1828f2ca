"""Constants and enums for the Notorious rules engine."""

from enum import Enum


class ShipKind(Enum):
    """Kinds of pieces a player can have on the board."""

    SLOOP = "sloop"
    GALLEON = "galleon"
    PORT = "port"


class ActionKind(Enum):
    """Actions a captain can be committed to during the place phase."""

    SAIL = "sail"
    BUILD = "build"
    STEAL = "steal"
    SINK = "sink"
    CHART = "chart"


class Phase(Enum):
    """Game phases including setup and main round cycle."""

    # Setup phase (executed once at game start)
    SETUP = "setup"

    # Main round cycle
    PLACE = "place"
    PLAY = "play"
    PIRATE = "pirate"
    GAME_OVER = "game_over"


class TurnDirection(Enum):
    """Direction in which turn order advances around the table."""

    FORWARD = "forward"  # Clockwise
    REVERSE = "reverse"  # Counter-clockwise


class ChartKind(Enum):
    """Kinds of objective charts."""

    TREASURE_MAP = "treasure_map"
    ISLAND_RAID = "island_raid"
    SMUGGLER_ROUTE = "smuggler_route"


class PowerId(Enum):
    """Pirate powers that can be bound to a player."""

    DEFAULT = "default"
    THE_SAILOR = "the_sailor"
    THE_PEACEFUL = "the_peaceful"
    THE_RELENTLESS = "the_relentless"
    THE_ISLANDER = "the_islander"


class PlayerColor(Enum):
    """Seat colors, assigned in player order."""

    BLUE = "blue"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"


# Player limits
MIN_PLAYERS = 2
MAX_PLAYERS = 4

# Starting resources per player
STARTING_SLOOPS = 4
STARTING_GALLEONS = 2
STARTING_DOUBLOONS = 0
STARTING_CAPTAINS = 2
SETUP_SLOOPS = 2  # Sloops placed alongside the port during setup

# Notoriety thresholds
WINNING_NOTORIETY = 24
CAPTAIN_UNLOCK_THRESHOLDS = (5, 12)  # Each crossing grants one captain slot
SECOND_RAID_THRESHOLD = 12

# Board
HEX_COUNT = 19
BOARD_RADIUS = 2
ISLAND_COUNT = 5

# Influence per ship kind
INFLUENCE = {
    ShipKind.SLOOP: 1,
    ShipKind.GALLEON: 2,
    ShipKind.PORT: 3,
}

# Action tuning
BRIBE_COST = 1  # Doubloons per bribe
SAIL_BASE_RANGE = 2
BUILD_BASE_SLOOPS = 2
BUILD_BASE_GALLEONS = 1
DRAW_COUNT = 2
KEEP_COUNT = 1
SINK_SLOOP_NOTORIETY = 1
SINK_GALLEON_NOTORIETY = 3

# Charts
ISLAND_RAID_NOTORIETY = 4
ISLAND_RAID_MIN_DOUBLOONS = 2
ISLAND_RAID_COUNT = 2
HEX_CONTROL_NOTORIETY = 1  # Per controlled cell during the pirate phase
RAID_DOUBLOONS_PER_ROUND = 1

# Ship kinds that can sail or be sunk/stolen
MOBILE_SHIP_KINDS = (ShipKind.SLOOP, ShipKind.GALLEON)
