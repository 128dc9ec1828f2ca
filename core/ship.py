"""Ship pieces and their influence values."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import ShipKind, INFLUENCE


@dataclass(frozen=True)
class Ship:
    """A single piece on the board.

    Ships are plain values: two sloops of the same owner are interchangeable.

    Attributes:
        kind: Sloop, galleon or port.
        owner_id: ID of the owning player.
    """

    kind: ShipKind
    owner_id: int

    @property
    def influence(self) -> int:
        return INFLUENCE[self.kind]

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "owner_id": self.owner_id}
