"""Objective charts.

Three kinds of chart exist:
- TreasureMap: hidden, targets one cell
- IslandRaid: public, targets an island and accumulates doubloons each round
- SmugglerRoute: hidden, targets a pair of islands
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Any, Iterator, Sequence, Union

from .constants import ChartKind, ISLAND_RAID_NOTORIETY
from .hex_grid import HexCoord, coord_key


@dataclass
class TreasureMap:
    """Hidden chart claimed by controlling a cell with a galleon."""

    chart_id: str
    target_cell: HexCoord

    kind = ChartKind.TREASURE_MAP
    is_public = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "chart_id": self.chart_id,
            "kind": self.kind.value,
            "target_cell": coord_key(self.target_cell),
        }


@dataclass
class IslandRaid:
    """Public chart claimed by controlling an island with a galleon.

    Attributes:
        chart_id: Unique chart ID.
        target_island: Name of the targeted island.
        doubloons_on_chart: Doubloons accumulated during pirate phases.
        notoriety_reward: Fixed notoriety awarded on claim.
        revealed: Whether players may currently claim this raid.
    """

    chart_id: str
    target_island: str
    doubloons_on_chart: int = 0
    notoriety_reward: int = ISLAND_RAID_NOTORIETY
    revealed: bool = False

    kind = ChartKind.ISLAND_RAID
    is_public = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "chart_id": self.chart_id,
            "kind": self.kind.value,
            "target_island": self.target_island,
            "doubloons_on_chart": self.doubloons_on_chart,
            "notoriety_reward": self.notoriety_reward,
            "revealed": self.revealed,
        }


@dataclass
class SmugglerRoute:
    """Hidden chart claimed by holding ships along the route between two islands."""

    chart_id: str
    island_a: str
    island_b: str

    kind = ChartKind.SMUGGLER_ROUTE
    is_public = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "chart_id": self.chart_id,
            "kind": self.kind.value,
            "island_a": self.island_a,
            "island_b": self.island_b,
        }


Chart = Union[TreasureMap, IslandRaid, SmugglerRoute]


def chart_ids(prefix: str = "chart") -> Iterator[str]:
    """Yield sequential chart IDs: chart-0, chart-1, ..."""
    n = 0
    while True:
        yield f"{prefix}-{n}"
        n += 1


def create_treasure_maps(cells: Sequence[HexCoord], ids: Iterator[str]) -> list[TreasureMap]:
    return [TreasureMap(chart_id=next(ids), target_cell=cell) for cell in cells]


def create_smuggler_routes(island_names: Sequence[str], ids: Iterator[str]) -> list[SmugglerRoute]:
    """One route per unordered pair of islands (10 for five islands)."""
    return [
        SmugglerRoute(chart_id=next(ids), island_a=a, island_b=b)
        for a, b in combinations(island_names, 2)
    ]


def create_island_raid(island_name: str, ids: Iterator[str], revealed: bool = False) -> IslandRaid:
    return IslandRaid(chart_id=next(ids), target_island=island_name, revealed=revealed)
