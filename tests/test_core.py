"""Tests for the core data models.

Tests cover:
1. Hex coordinates, directions and the 19-cell board
2. Breadth-first pathfinding
3. Board cells, influence, control and island edges
4. Player captains, notoriety and inventory
5. Chart deck drawing and reshuffling
6. Pirate powers
7. GameState creation, serialization and invariants
"""

import random

import pytest

from core.board import BoardState
from core.chart_deck import ChartDeck
from core.charts import IslandRaid, SmugglerRoute, TreasureMap
from core.config import GameConfig
from core.constants import (
    ActionKind,
    CAPTAIN_UNLOCK_THRESHOLDS,
    HEX_COUNT,
    Phase,
    PowerId,
    ShipKind,
    STARTING_CAPTAINS,
    STARTING_GALLEONS,
    STARTING_SLOOPS,
    TurnDirection,
)
from core.errors import InvariantViolation
from core.game_state import GameState
from core.hex_grid import (
    BOARD_CELLS,
    DIRECTIONS,
    HexCoord,
    coord_key,
    direction_between,
    distance,
    is_adjacent,
    neighbor,
    on_board,
    opposite_direction,
    parse_coord_key,
)
from core.island import Island
from core.island_placer import IslandPlacer
from core.pathfinding import find_path, reachable_cells
from core.player import Player
from core.powers import DEFAULT_POWER, POWER_TABLE, get_power
from core.ship import Ship
from data.loader import load_default_islands


ISLANDS = load_default_islands().islands

# Reference layout used wherever geometry matters
LAYOUT = {
    "Havana": HexCoord(0, -2),
    "Nassau": HexCoord(2, -2),
    "Tortuga": HexCoord(2, 0),
    "Port Royal": HexCoord(-2, 2),
    "Hispaniola": HexCoord(-2, 0),
}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def board() -> BoardState:
    """Board with the reference island layout and no ships."""
    board = BoardState()
    IslandPlacer(ISLANDS).place_fixed(board, LAYOUT)
    return board


@pytest.fixture
def state() -> GameState:
    config = GameConfig(num_players=2, seed=3, island_layout=LAYOUT)
    return GameState.create_initial_state(config, ISLANDS, random.Random(3))


def _always(a, b) -> bool:
    return True


# =============================================================================
# Hex Grid Tests
# =============================================================================


class TestHexGrid:
    """Test axial coordinates and board geometry."""

    def test_s_is_derived(self):
        coord = HexCoord(2, -1)
        assert coord.s == -1
        assert coord.q + coord.r + coord.s == 0

    def test_from_cube_rejects_broken_sum(self):
        with pytest.raises(ValueError):
            HexCoord.from_cube(1, 1, 1)
        assert HexCoord.from_cube(1, -1, 0) == HexCoord(1, -1)

    def test_direction_order(self):
        assert DIRECTIONS[0] == HexCoord(1, 0)
        assert DIRECTIONS[1] == HexCoord(1, -1)
        assert DIRECTIONS[2] == HexCoord(0, -1)
        assert DIRECTIONS[3] == HexCoord(-1, 0)
        assert DIRECTIONS[4] == HexCoord(-1, 1)
        assert DIRECTIONS[5] == HexCoord(0, 1)

    def test_opposite_direction(self):
        for d in range(6):
            assert DIRECTIONS[d] + DIRECTIONS[opposite_direction(d)] == HexCoord(0, 0)

    def test_board_has_19_cells_in_fixed_order(self):
        assert len(BOARD_CELLS) == HEX_COUNT
        assert len(set(BOARD_CELLS)) == HEX_COUNT
        assert BOARD_CELLS[0] == HexCoord(0, 0)
        assert list(BOARD_CELLS[1:7]) == list(DIRECTIONS)
        assert BOARD_CELLS[7] == HexCoord(0, -2)
        assert BOARD_CELLS[8] == HexCoord(1, -2)
        assert BOARD_CELLS[-1] == HexCoord(-1, -1)

    def test_every_board_cell_is_within_radius(self):
        for coord in BOARD_CELLS:
            assert distance(coord, HexCoord(0, 0)) <= 2
        assert not on_board(HexCoord(3, 0))

    def test_distance_symmetry_and_adjacency(self):
        for a in BOARD_CELLS:
            for b in BOARD_CELLS:
                assert distance(a, b) == distance(b, a)
                assert is_adjacent(a, b) == (distance(a, b) == 1)

    def test_direction_between(self):
        origin = HexCoord(0, 0)
        for d in range(6):
            assert direction_between(origin, neighbor(origin, d)) == d
        assert direction_between(origin, HexCoord(2, 0)) is None

    def test_coord_key_round_trip(self):
        assert coord_key(HexCoord(-1, 2)) == "-1,2"
        assert parse_coord_key("-1,2") == HexCoord(-1, 2)
        with pytest.raises(ValueError):
            parse_coord_key("nonsense")


# =============================================================================
# Pathfinding Tests
# =============================================================================


class TestPathfinding:
    """Test BFS shortest paths."""

    def test_open_board_path_length_matches_distance(self):
        for a in BOARD_CELLS:
            for b in BOARD_CELLS:
                path = find_path(a, b, lambda c: False, _always)
                assert len(path) == distance(a, b) + 1
                assert path[0] == a and path[-1] == b
                for x, y in zip(path, path[1:]):
                    assert is_adjacent(x, y)

    def test_same_cell(self):
        origin = HexCoord(0, 0)
        assert find_path(origin, origin, lambda c: False, _always) == [origin]

    def test_blocked_end_returns_empty(self):
        target = HexCoord(1, 0)
        assert find_path(HexCoord(0, 0), target, lambda c: c == target, _always) == []

    def test_unreachable_returns_empty(self):
        assert find_path(HexCoord(0, 0), HexCoord(2, 0), lambda c: False, lambda a, b: False) == []

    def test_path_avoids_blocked_cells(self):
        blocked = HexCoord(1, 0)
        path = find_path(HexCoord(0, 0), HexCoord(2, 0), lambda c: c == blocked, _always)
        assert blocked not in path
        assert len(path) == 4

    def test_reachable_cells_respects_steps(self):
        reach = reachable_cells(HexCoord(0, 0), 1, _always)
        assert reach[HexCoord(0, 0)] == 0
        assert len(reach) == 7
        assert all(d <= 1 for d in reach.values())


# =============================================================================
# Board Tests
# =============================================================================


class TestBoard:
    """Test cells, control and island edges."""

    def test_islands_bound_to_layout(self, board):
        for name, coord in LAYOUT.items():
            assert board.island_cell(name) == coord
        assert len(board.islands()) == 5

    def test_cannot_place_two_islands_on_a_cell(self, board):
        with pytest.raises(ValueError):
            board.place_island(HexCoord(0, -2), Island("Extra", frozenset()))

    def test_island_edge_blocks_both_directions(self, board):
        # Hispaniola at (-2, 0) blocks its east side
        hispaniola = HexCoord(-2, 0)
        east = HexCoord(-1, 0)
        assert not board.can_traverse_edge(hispaniola, east)
        assert not board.can_traverse_edge(east, hispaniola)
        assert board.can_traverse_edge(hispaniola, east, ignore_islands=True)
        # Its north-east side is open
        assert board.can_traverse_edge(HexCoord(-1, -1), hispaniola)

    def test_traverse_requires_adjacency(self, board):
        assert not board.can_traverse_edge(HexCoord(0, 0), HexCoord(2, 0))
        assert not board.can_traverse_edge(HexCoord(0, 0), HexCoord(0, 3))

    def test_board_path_routes_around_island_edges(self, board):
        path = board.find_path(HexCoord(-1, 0), HexCoord(-2, 0))
        assert len(path) == 3
        assert board.find_path(HexCoord(-1, 0), HexCoord(-2, 0), ignore_islands=True) == [
            HexCoord(-1, 0),
            HexCoord(-2, 0),
        ]

    def test_port_royal_only_reachable_from_east(self, board):
        port_royal = HexCoord(-2, 2)
        for start in (HexCoord(-1, 1), HexCoord(-2, 1)):
            path = board.find_path(start, port_royal)
            assert path[-2] == HexCoord(-1, 2)

    def test_control_requires_strict_maximum(self, board):
        coord = HexCoord(0, 0)
        assert board.controller(coord) is None

        board.add_ship(coord, Ship(ShipKind.SLOOP, 0))
        board.add_ship(coord, Ship(ShipKind.SLOOP, 0))
        board.add_ship(coord, Ship(ShipKind.GALLEON, 1))
        assert board.influence(coord, 0) == 2
        assert board.influence(coord, 1) == 2
        assert board.controller(coord) is None

        board.add_ship(coord, Ship(ShipKind.SLOOP, 1))
        assert board.controller(coord) == 1
        assert board.controlled_cells(1) == [coord]

    def test_port_influence(self, board):
        coord = HexCoord(1, 0)
        board.add_ship(coord, Ship(ShipKind.PORT, 0))
        board.add_ship(coord, Ship(ShipKind.GALLEON, 1))
        assert board.controller(coord) == 0

    def test_move_ship_is_atomic(self, board):
        src, dst = HexCoord(-1, 0), HexCoord(-2, 0)
        board.add_ship(src, Ship(ShipKind.SLOOP, 0))
        assert not board.move_ship(src, dst, 0, ShipKind.SLOOP)
        assert board.has_ship_kind(src, 0, ShipKind.SLOOP)
        assert not board.ships_of(dst, 0)

        assert board.move_ship(src, HexCoord(0, 0), 0, ShipKind.SLOOP)
        assert board.has_ship_kind(HexCoord(0, 0), 0, ShipKind.SLOOP)

    def test_move_ship_refuses_ports(self, board):
        board.add_ship(HexCoord(0, 0), Ship(ShipKind.PORT, 0))
        assert not board.move_ship(HexCoord(0, 0), HexCoord(1, 0), 0, ShipKind.PORT)

    def test_remove_missing_ship_raises(self, board):
        with pytest.raises(InvariantViolation):
            board.remove_ship(HexCoord(0, 0), 0, ShipKind.SLOOP)

    def test_add_ship_off_board_raises(self, board):
        with pytest.raises(InvariantViolation):
            board.add_ship(HexCoord(5, 0), Ship(ShipKind.SLOOP, 0))

    def test_clone_is_independent(self, board):
        board.add_ship(HexCoord(0, 0), Ship(ShipKind.SLOOP, 0))
        copy = board.clone()
        copy.remove_ship(HexCoord(0, 0), 0, ShipKind.SLOOP)
        assert board.has_ship_kind(HexCoord(0, 0), 0, ShipKind.SLOOP)

    def test_to_dict_keys(self, board):
        data = board.to_dict()
        assert len(data) == HEX_COUNT
        assert data["-2,0"]["island"]["name"] == "Hispaniola"


class TestIslandPlacer:
    """Test random and fixed island placement."""

    def test_random_placement_is_seeded(self):
        first, second = BoardState(), BoardState()
        IslandPlacer(ISLANDS).place_random(first, random.Random(11))
        IslandPlacer(ISLANDS).place_random(second, random.Random(11))
        assert first.islands() == second.islands()

    def test_random_placement_leaves_fourteen_map_cells(self):
        board = BoardState()
        result = IslandPlacer(ISLANDS).place_random(board, random.Random(5))
        assert len(result.islands) == 5
        assert len(result.remaining_map_cells) == HEX_COUNT - 5
        island_cells = {coord for coord, _ in result.islands}
        assert island_cells.isdisjoint(result.remaining_map_cells)

    def test_fixed_layout_rejects_unknown_island(self):
        layout = dict(LAYOUT)
        layout["Atlantis"] = layout.pop("Havana")
        with pytest.raises(ValueError):
            IslandPlacer(ISLANDS).place_fixed(BoardState(), layout)

    def test_requires_five_definitions(self):
        with pytest.raises(ValueError):
            IslandPlacer(ISLANDS[:4])


# =============================================================================
# Player Tests
# =============================================================================


class TestPlayer:
    """Test captains, notoriety and inventory."""

    def test_initial_values(self):
        player = Player(player_id=0)
        assert player.name == "Player 1"
        assert player.captain_slots == STARTING_CAPTAINS
        assert player.sloops == STARTING_SLOOPS
        assert player.galleons == STARTING_GALLEONS
        assert player.doubloons == 0

    def test_captain_placement_limit(self):
        player = Player(player_id=0)
        player.place_captain(ActionKind.SAIL)
        player.place_captain(ActionKind.SAIL)
        assert not player.can_place_captain()
        with pytest.raises(ValueError):
            player.place_captain(ActionKind.BUILD)

    def test_consume_captain(self):
        player = Player(player_id=0, placed_captains=[ActionKind.SAIL, ActionKind.BUILD])
        assert player.consume_captain(ActionKind.SAIL) == ActionKind.SAIL
        with pytest.raises(ValueError):
            player.consume_captain(ActionKind.SAIL)
        assert player.consume_captain() == ActionKind.BUILD
        with pytest.raises(ValueError):
            player.consume_captain()

    def test_unlock_on_each_threshold_crossed(self):
        player = Player(player_id=0)
        assert player.gain_notoriety(4) == 0
        assert player.gain_notoriety(1) == 1
        assert player.captain_slots == STARTING_CAPTAINS + 1
        # Jumping across the second threshold unlocks exactly one more
        assert player.gain_notoriety(10) == 1
        assert player.captain_slots == STARTING_CAPTAINS + len(CAPTAIN_UNLOCK_THRESHOLDS)
        assert player.gain_notoriety(10) == 0

    def test_single_gain_across_both_thresholds(self):
        player = Player(player_id=0)
        assert player.gain_notoriety(12) == 2

    def test_spend_beyond_balance_raises(self):
        player = Player(player_id=0, doubloons=1)
        with pytest.raises(ValueError):
            player.spend_doubloons(2)
        player.spend_doubloons(1)
        assert player.doubloons == 0

    def test_take_and_return_ships(self):
        player = Player(player_id=0)
        player.take_ships(ShipKind.SLOOP, 3)
        assert player.sloops == 1
        with pytest.raises(ValueError):
            player.take_ships(ShipKind.SLOOP, 2)
        player.return_ships(ShipKind.SLOOP, 3)
        assert player.sloops == STARTING_SLOOPS


# =============================================================================
# Chart Deck Tests
# =============================================================================


class TestChartDeck:
    """Test drawing, discarding and reshuffling."""

    def _maps(self, n):
        return [TreasureMap(f"m{i}", BOARD_CELLS[i]) for i in range(n)]

    def test_draw_takes_from_back(self):
        deck = ChartDeck(draw_pile=self._maps(3))
        drawn = deck.draw(2, random.Random(0))
        assert [c.chart_id for c in drawn] == ["m2", "m1"]
        assert [c.chart_id for c in deck.draw_pile] == ["m0"]

    def test_reshuffle_when_short(self):
        maps = self._maps(4)
        deck = ChartDeck(draw_pile=maps[:1], discard_pile=maps[1:])
        drawn = deck.draw(2, random.Random(0))
        assert len(drawn) == 2
        # The card already in the draw pile stays on top
        assert drawn[0].chart_id == "m0"
        assert deck.discard_pile == []
        assert len(deck.draw_pile) == 2

    def test_draw_returns_fewer_when_exhausted(self):
        deck = ChartDeck(draw_pile=self._maps(1))
        assert len(deck.draw(3, random.Random(0))) == 1
        assert deck.available() == 0

    def test_raid_lifecycle(self):
        raids = [IslandRaid("r0", "Havana", revealed=True), IslandRaid("r1", "Nassau")]
        deck = ChartDeck(island_raids=raids)
        deck.add_raid_doubloons(1)
        assert raids[0].doubloons_on_chart == 1
        assert raids[1].doubloons_on_chart == 0
        assert deck.has_hidden_raid()
        assert deck.reveal_next_raid().chart_id == "r1"
        assert not deck.has_hidden_raid()
        deck.retire_raid("r0")
        assert deck.find_raid("r0") is None
        with pytest.raises(ValueError):
            deck.retire_raid("r0")

    def test_initial_deck_contents(self, state):
        deck = state.chart_deck
        maps = [c for c in deck.draw_pile if isinstance(c, TreasureMap)]
        routes = [c for c in deck.draw_pile if isinstance(c, SmugglerRoute)]
        assert len(maps) == HEX_COUNT - 5
        assert len(routes) == 10
        assert {m.target_cell for m in maps}.isdisjoint(LAYOUT.values())
        assert len(deck.island_raids) == 2
        assert [r.revealed for r in deck.island_raids] == [True, False]


# =============================================================================
# Power Tests
# =============================================================================


class TestPowers:
    """Test the pirate power table."""

    def test_default_passes_through(self):
        assert DEFAULT_POWER.sail_range == 2
        assert DEFAULT_POWER.modify_relocation_cost(1) == 1
        assert DEFAULT_POWER.modify_hex_control_notoriety(3) == 3
        assert DEFAULT_POWER.modify_sink_notoriety(3, ShipKind.GALLEON) == 3
        assert all(DEFAULT_POWER.can_perform(kind) for kind in ActionKind)

    def test_table_covers_every_power(self):
        assert set(POWER_TABLE) == set(PowerId)

    def test_sailor(self):
        sailor = get_power(PowerId.THE_SAILOR)
        assert sailor.sail_range == 3
        assert sailor.bounty == 500

    def test_peaceful(self):
        peaceful = get_power(PowerId.THE_PEACEFUL)
        assert not peaceful.can_perform(ActionKind.SINK)
        assert peaceful.can_perform(ActionKind.STEAL)
        player = Player(player_id=0)
        attacker = Player(player_id=1)
        peaceful.on_ship_sunk(player, ShipKind.GALLEON, attacker)
        peaceful.on_ship_stolen(player, ShipKind.SLOOP, attacker)
        assert player.doubloons == 2

    def test_relentless(self):
        relentless = get_power(PowerId.THE_RELENTLESS)
        assert relentless.modify_relocation_cost(1) == 0
        assert relentless.modify_relocation_cost(0) == 0
        assert relentless.modify_hex_control_notoriety(4) == 0

    def test_islander(self):
        islander = get_power(PowerId.THE_ISLANDER)
        assert islander.ignores_island_edges
        assert islander.bounty == 0


# =============================================================================
# Game State Tests
# =============================================================================


class TestGameConfig:
    """Test configuration validation."""

    @pytest.mark.parametrize("count", [1, 5])
    def test_player_count_bounds(self, count):
        with pytest.raises(ValueError):
            GameConfig(num_players=count)

    def test_too_many_powers(self):
        with pytest.raises(ValueError):
            GameConfig(num_players=2, powers=(PowerId.DEFAULT,) * 3)

    def test_layout_off_board(self):
        with pytest.raises(ValueError):
            GameConfig(island_layout={"Havana": HexCoord(4, 0)})


class TestGameState:
    """Test state creation, turn order and invariants."""

    def test_initial_state(self, state):
        assert state.phase == Phase.SETUP
        assert state.num_players() == 2
        assert [p.color.value for p in state.players] == ["blue", "red"]
        assert state.validate() == []

    def test_powers_from_config(self):
        config = GameConfig(num_players=3, powers=(PowerId.THE_SAILOR,), island_layout=LAYOUT)
        state = GameState.create_initial_state(config, ISLANDS, random.Random(0))
        assert state.power_of(0).sail_range == 3
        assert state.players[1].power_id == PowerId.DEFAULT

    def test_turn_direction(self):
        config = GameConfig(num_players=3, island_layout=LAYOUT)
        state = GameState.create_initial_state(config, ISLANDS, random.Random(0))
        assert state.next_player_idx(0) == 1
        state.set_turn_direction(TurnDirection.REVERSE)
        assert state.next_player_idx(0) == 2
        assert state.next_player_idx(2) == 1

    def test_get_unknown_player_raises(self, state):
        with pytest.raises(ValueError):
            state.get_player(7)

    def test_standings_break_ties_by_doubloons(self, state):
        state.players[0].notoriety = 10
        state.players[1].notoriety = 10
        state.players[1].doubloons = 2
        assert state.get_standings()[0].player_id == 1
        assert state.get_winner() is None
        state.round_state.game_ended = True
        assert state.get_winner().player_id == 1

    def test_clone_and_hash(self, state):
        clone = state.clone()
        assert clone.state_hash() == state.state_hash()
        clone.players[0].doubloons += 1
        assert clone.state_hash() != state.state_hash()

    def test_same_seed_same_state(self):
        config = GameConfig(num_players=2, seed=9)
        a = GameState.create_initial_state(config, ISLANDS, random.Random(9))
        b = GameState.create_initial_state(config, ISLANDS, random.Random(9))
        assert a.state_hash() == b.state_hash()

    def test_pool_invariant_detected(self, state):
        state.board.add_ship(HexCoord(0, 0), Ship(ShipKind.SLOOP, 0))
        assert any("sloop pool" in e for e in state.validate())
        with pytest.raises(InvariantViolation):
            state.assert_invariants()

    def test_captain_invariant_detected(self, state):
        state.players[0].placed_captains = [ActionKind.SAIL] * 3
        assert any("captains" in e for e in state.validate())
