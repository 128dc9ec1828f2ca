"""Islands and their impassable edges."""

from __future__ import annotations

from dataclasses import dataclass, field

from .hex_grid import Direction


@dataclass(frozen=True)
class Island:
    """An island bound to one board cell.

    Attributes:
        name: Unique island name.
        impassable_edges: Direction indices (0-5) of hex sides ships may not cross.
    """

    name: str
    impassable_edges: frozenset[Direction] = field(default_factory=frozenset)

    def __post_init__(self):
        bad = [d for d in self.impassable_edges if not 0 <= d <= 5]
        if bad:
            raise ValueError(f"Island {self.name} has invalid edge directions: {sorted(bad)}")

    def blocks(self, direction: Direction) -> bool:
        """Check whether travel across the given side of this island's cell is blocked."""
        return direction in self.impassable_edges

    def to_dict(self) -> dict:
        return {"name": self.name, "impassable_edges": sorted(self.impassable_edges)}

