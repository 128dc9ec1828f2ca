"""Island data loader for the Notorious rules engine.

Loads and validates island definitions (names and impassable edges) and
optional fixed island layouts from JSON files.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from core.constants import ISLAND_COUNT
from core.hex_grid import HexCoord, on_board
from core.island import Island


def resource_path(relative_path: str) -> Path:
    """Absolute path to a file shipped alongside this module."""
    return Path(__file__).parent / relative_path


class IslandLoadError(Exception):
    """Raised when island loading or validation fails."""
    pass


@dataclass
class IslandData:
    """Loaded island definitions.

    Attributes:
        islands: Island definitions in file order.
        layout: Fixed island name -> cell mapping, if the file has one.
    """

    islands: list[Island]
    layout: Optional[dict[str, HexCoord]] = None


class IslandLoader:
    """Loads and validates island data from JSON files."""

    def __init__(self, strict: bool = True):
        """Initialize the loader.

        Args:
            strict: If True, require exactly the standard number of islands.
        """
        self.strict = strict

    def load_from_file(self, file_path: str | Path) -> IslandData:
        """Load island data from a JSON file.

        Raises:
            IslandLoadError: If the file cannot be read, parsed or validated.
        """
        path = Path(file_path)

        if not path.exists():
            raise IslandLoadError(f"Island file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise IslandLoadError(f"Invalid JSON in island file: {e}")
        except IOError as e:
            raise IslandLoadError(f"Error reading island file: {e}")

        return self.load_from_dict(data)

    def load_from_dict(self, data: dict[str, Any]) -> IslandData:
        """Load island data from a dictionary.

        Args:
            data: Dictionary with an 'islands' list and an optional 'layout' mapping.

        Raises:
            IslandLoadError: If validation fails.
        """
        if not isinstance(data, dict):
            raise IslandLoadError("Island data must be a dictionary")
        if "islands" not in data:
            raise IslandLoadError("Island data missing 'islands' key")
        if not isinstance(data["islands"], list):
            raise IslandLoadError("'islands' must be a list")

        islands = [self._create_island(entry) for entry in data["islands"]]

        names = [island.name for island in islands]
        if len(set(names)) != len(names):
            raise IslandLoadError(f"Duplicate island names: {names}")
        if self.strict and len(islands) != ISLAND_COUNT:
            raise IslandLoadError(f"Expected {ISLAND_COUNT} islands, found {len(islands)}")

        layout = None
        if data.get("layout") is not None:
            layout = self._parse_layout(data["layout"], set(names))

        return IslandData(islands=islands, layout=layout)

    def _create_island(self, entry: dict[str, Any]) -> Island:
        for key in ("name", "impassable_edges"):
            if key not in entry:
                raise IslandLoadError(f"Island missing required field: {key}")

        edges = entry["impassable_edges"]
        if not isinstance(edges, list) or not all(isinstance(e, int) for e in edges):
            raise IslandLoadError(f"Invalid impassable_edges for island {entry['name']}: {edges}")

        try:
            return Island(name=entry["name"], impassable_edges=frozenset(edges))
        except ValueError as e:
            raise IslandLoadError(str(e))

    def _parse_layout(self, raw: dict[str, Any], names: set[str]) -> dict[str, HexCoord]:
        if not isinstance(raw, dict):
            raise IslandLoadError("'layout' must be a mapping of island name to [q, r]")

        layout: dict[str, HexCoord] = {}
        for name, position in raw.items():
            if name not in names:
                raise IslandLoadError(f"Layout references unknown island: {name}")
            if not isinstance(position, list) or len(position) != 2:
                raise IslandLoadError(f"Invalid position for island {name}: {position}")
            coord = HexCoord(position[0], position[1])
            if not on_board(coord):
                raise IslandLoadError(f"Island {name} placed off the board at {coord}")
            layout[name] = coord

        if set(layout) != names:
            raise IslandLoadError(f"Layout is missing islands: {sorted(names - set(layout))}")
        if len(set(layout.values())) != len(layout):
            raise IslandLoadError("Layout places two islands on the same cell")
        return layout


def load_islands(file_path: str | Path, strict: bool = True) -> IslandData:
    """Convenience function to load island data from a file."""
    loader = IslandLoader(strict=strict)
    return loader.load_from_file(file_path)


def load_default_islands() -> IslandData:
    """Load the standard island set and its reference layout.

    Raises:
        IslandLoadError: If the default file is missing or invalid.
    """
    return load_islands(resource_path("default_islands.json"), strict=True)
