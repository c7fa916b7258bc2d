"""Board cells for the Battleships engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .ship import ShipName


class TileView(Enum):
    """What a renderer may draw for one cell."""

    SEA = "sea"
    SHIP = "ship"
    HIT = "hit"
    MISS = "miss"
    DESTROYED = "destroyed"


@dataclass
class Tile:
    """One cell of a sea grid.

    ``occupant`` is the kind of the ship lying on the tile, a key into the
    owning grid's ship collection rather than the ship itself.
    """

    row: int
    col: int
    occupant: ShipName = ShipName.NONE
    _shot: bool = False

    @property
    def shot(self) -> bool:
        return self._shot

    @property
    def occupied(self) -> bool:
        return self.occupant is not ShipName.NONE

    def shoot(self) -> None:
        self._shot = True

    def assign_occupant(self, name: ShipName | None) -> None:
        self.occupant = ShipName.NONE if name is None else name
