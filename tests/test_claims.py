"""Tests for pirate phase upkeep and chart claiming."""

import random

import pytest

from core.charts import SmugglerRoute, TreasureMap
from core.config import GameConfig
from core.constants import Phase, PowerId, ShipKind
from core.game_state import GameState
from core.hex_grid import HexCoord
from core.ship import Ship
from engine.claims import ChartClaimResolver
from engine.pirate import begin_pirate_phase
from data.loader import load_default_islands


ISLANDS = load_default_islands().islands

LAYOUT = {
    "Havana": HexCoord(0, -2),
    "Nassau": HexCoord(2, -2),
    "Tortuga": HexCoord(2, 0),
    "Port Royal": HexCoord(-2, 2),
    "Hispaniola": HexCoord(-2, 0),
}

CENTER = HexCoord(0, 0)

# Shortest open route from Hispaniola to Port Royal
HISPANIOLA_TO_PORT_ROYAL = [
    HexCoord(-2, 0),
    HexCoord(-2, 1),
    HexCoord(-1, 1),
    HexCoord(-1, 2),
    HexCoord(-2, 2),
]


def make_state(powers=()) -> GameState:
    config = GameConfig(num_players=2, powers=tuple(powers), island_layout=LAYOUT)
    state = GameState.create_initial_state(config, ISLANDS, random.Random(0))
    state.set_phase(Phase.PIRATE)
    return state


def put(state: GameState, coord: HexCoord, player_id: int, kind: ShipKind, count: int = 1) -> None:
    state.get_player(player_id).take_ships(kind, count)
    for _ in range(count):
        state.board.add_ship(coord, Ship(kind, player_id))


@pytest.fixture
def state() -> GameState:
    return make_state()


@pytest.fixture
def resolver(state) -> ChartClaimResolver:
    return ChartClaimResolver(state)


# =============================================================================
# Treasure maps
# =============================================================================


class TestTreasureMap:
    def test_claim_pays_one_doubloon_per_player(self, state, resolver):
        state.players[0].charts.append(TreasureMap("map", CENTER))
        put(state, CENTER, 0, ShipKind.GALLEON)

        result = resolver.claim(0, "map")
        assert result.success
        assert result.doubloons_gained == 2
        assert state.players[0].doubloons == 2
        assert state.players[0].charts == []
        assert state.chart_deck.discard_pile[-1].chart_id == "map"

    def test_sloops_are_not_enough(self, state, resolver):
        state.players[0].charts.append(TreasureMap("map", CENTER))
        put(state, CENTER, 0, ShipKind.SLOOP, 3)
        result = resolver.validate_claim(0, "map")
        assert not result.valid
        assert "Galleon" in result.reason

    def test_needs_control(self, state, resolver):
        state.players[0].charts.append(TreasureMap("map", CENTER))
        put(state, CENTER, 0, ShipKind.GALLEON)
        put(state, CENTER, 1, ShipKind.SLOOP, 2)
        result = resolver.validate_claim(0, "map")
        assert not result.valid
        assert "control" in result.reason

    def test_cannot_claim_another_players_map(self, state, resolver):
        state.players[1].charts.append(TreasureMap("map", CENTER))
        put(state, CENTER, 0, ShipKind.GALLEON)
        assert not resolver.validate_claim(0, "map").valid

    def test_only_during_pirate_phase(self, state, resolver):
        state.players[0].charts.append(TreasureMap("map", CENTER))
        put(state, CENTER, 0, ShipKind.GALLEON)
        state.set_phase(Phase.PLAY)
        before = state.state_hash()
        assert not resolver.claim(0, "map").success
        assert state.state_hash() == before


# =============================================================================
# Island raids
# =============================================================================


class TestIslandRaid:
    def test_raid_needs_two_doubloons(self, state, resolver):
        raid = state.chart_deck.active_raids()[0]
        put(state, state.board.island_cell(raid.target_island), 0, ShipKind.GALLEON)

        raid.doubloons_on_chart = 1
        result = resolver.validate_claim(0, raid.chart_id)
        assert not result.valid
        assert "at least 2" in result.reason

        raid.doubloons_on_chart = 2
        result = resolver.claim(0, raid.chart_id)
        assert result.success
        assert result.notoriety_gained == 4
        assert result.doubloons_gained == 2
        assert state.chart_deck.find_raid(raid.chart_id) is None

    def test_hidden_raid_cannot_be_claimed(self, state, resolver):
        hidden = [r for r in state.chart_deck.island_raids if not r.revealed][0]
        hidden.doubloons_on_chart = 5
        put(state, state.board.island_cell(hidden.target_island), 0, ShipKind.GALLEON)
        assert not resolver.validate_claim(0, hidden.chart_id).valid

    def test_claimable_charts_lists_raid(self, state, resolver):
        raid = state.chart_deck.active_raids()[0]
        raid.doubloons_on_chart = 3
        put(state, state.board.island_cell(raid.target_island), 1, ShipKind.GALLEON)
        assert resolver.get_claimable_charts(1) == [raid.chart_id]
        assert resolver.get_claimable_charts(0) == []


# =============================================================================
# Smuggler routes
# =============================================================================


class TestSmugglerRoute:
    def test_route_pays_its_length(self, state, resolver):
        state.players[0].charts.append(SmugglerRoute("route", "Hispaniola", "Port Royal"))
        for coord in HISPANIOLA_TO_PORT_ROYAL:
            state.board.add_ship(coord, Ship(ShipKind.SLOOP, 0))

        result = resolver.claim(0, "route")
        assert result.success
        assert result.route == HISPANIOLA_TO_PORT_ROYAL
        assert result.doubloons_gained == 5

    def test_gap_in_route(self, state, resolver):
        state.players[0].charts.append(SmugglerRoute("route", "Hispaniola", "Port Royal"))
        for coord in HISPANIOLA_TO_PORT_ROYAL[:-1]:
            state.board.add_ship(coord, Ship(ShipKind.SLOOP, 0))
        result = resolver.validate_claim(0, "route")
        assert not result.valid
        assert "Need a ship" in result.reason

    def test_foreign_ships_do_not_break_route(self, state, resolver):
        state.players[0].charts.append(SmugglerRoute("route", "Hispaniola", "Port Royal"))
        for coord in HISPANIOLA_TO_PORT_ROYAL:
            state.board.add_ship(coord, Ship(ShipKind.SLOOP, 0))
            state.board.add_ship(coord, Ship(ShipKind.GALLEON, 1))
        assert resolver.validate_claim(0, "route").valid


# =============================================================================
# Pirate phase upkeep
# =============================================================================


class TestPirateUpkeep:
    def test_control_scores_notoriety(self, state):
        put(state, CENTER, 0, ShipKind.SLOOP)
        put(state, HexCoord(1, 0), 0, ShipKind.SLOOP)
        put(state, HexCoord(0, 1), 1, ShipKind.SLOOP)

        report = begin_pirate_phase(state)
        assert report.controlled_cells == {0: 2, 1: 1}
        assert state.players[0].notoriety == 2
        assert state.players[1].notoriety == 1

    def test_tied_cells_score_nothing(self, state):
        put(state, CENTER, 0, ShipKind.SLOOP)
        put(state, CENTER, 1, ShipKind.SLOOP)
        report = begin_pirate_phase(state)
        assert report.notoriety_awarded == {0: 0, 1: 0}

    def test_relentless_gains_no_control_notoriety(self):
        state = make_state(powers=(PowerId.THE_RELENTLESS,))
        put(state, CENTER, 0, ShipKind.SLOOP)
        report = begin_pirate_phase(state)
        assert report.controlled_cells[0] == 1
        assert report.notoriety_awarded[0] == 0
        assert state.players[0].notoriety == 0

    def test_revealed_raids_gain_doubloons(self, state):
        begin_pirate_phase(state)
        revealed, hidden = state.chart_deck.island_raids
        assert revealed.doubloons_on_chart == 1
        assert hidden.doubloons_on_chart == 0

    def test_second_raid_revealed_at_twelve(self, state):
        state.players[1].notoriety = 12
        report = begin_pirate_phase(state)
        assert report.raid_revealed
        assert len(state.chart_deck.active_raids()) == 2

    def test_final_round_at_winning_notoriety(self, state):
        state.players[0].notoriety = 23
        put(state, CENTER, 0, ShipKind.SLOOP)
        report = begin_pirate_phase(state)
        assert report.final_round
        assert state.round_state.final_round
        assert state.players[0].notoriety == 24
