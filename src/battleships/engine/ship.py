"""Ship domain model for the Battleships engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Coordinate:
    """Immutable board coordinate."""

    row: int
    col: int


class Direction(Enum):
    """Allowed ship headings."""

    LEFT_RIGHT = "left_right"
    UP_DOWN = "up_down"

    @property
    def step(self) -> tuple[int, int]:
        """Return the (row, col) delta between consecutive ship cells."""
        if self is Direction.LEFT_RIGHT:
            return 0, 1
        return 1, 0


class ShipName(Enum):
    """Ship kinds and their lengths. NONE marks an empty tile."""

    NONE = "none"
    TUG = "tug"
    SUBMARINE = "submarine"
    DESTROYER = "destroyer"
    BATTLESHIP = "battleship"
    AIRCRAFT_CARRIER = "aircraft_carrier"

    @property
    def length(self) -> int:
        return _LENGTHS[self]

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").title()


_LENGTHS: dict[ShipName, int] = {
    ShipName.NONE: 0,
    ShipName.TUG: 2,
    ShipName.SUBMARINE: 3,
    ShipName.DESTROYER: 3,
    ShipName.BATTLESHIP: 4,
    ShipName.AIRCRAFT_CARRIER: 5,
}

# Deployable kinds, in deployment order.
FLEET: tuple[ShipName, ...] = (
    ShipName.TUG,
    ShipName.SUBMARINE,
    ShipName.DESTROYER,
    ShipName.BATTLESHIP,
    ShipName.AIRCRAFT_CARRIER,
)


def ship_cells(origin: Coordinate, direction: Direction, length: int) -> list[Coordinate]:
    """Return the contiguous run of cells a ship laid at ``origin`` would cover."""
    d_row, d_col = direction.step
    return [
        Coordinate(origin.row + d_row * offset, origin.col + d_col * offset)
        for offset in range(length)
    ]


@dataclass(eq=False)
class Ship:
    """A single vessel and its self-model of where it sits on its grid.

    The ship records its own cells and hits; writing the ship into board
    tiles is done by :class:`~battleships.engine.sea_grid.SeaGrid`.
    """

    name: ShipName
    direction: Direction = Direction.LEFT_RIGHT
    hits: int = field(default=0, init=False)
    deployed: bool = field(default=False, init=False)
    _tiles: list[Coordinate] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.name is ShipName.NONE:
            raise ValueError("The NONE marker is not a ship.")

    @property
    def length(self) -> int:
        return self.name.length

    @property
    def occupied_tiles(self) -> tuple[Coordinate, ...]:
        """Ordered cells covered by the ship; empty while undeployed."""
        return tuple(self._tiles)

    @property
    def is_deployed(self) -> bool:
        return len(self._tiles) == self.length

    @property
    def is_destroyed(self) -> bool:
        return self.hits >= self.length

    def register_hit(self) -> None:
        """Count one hit, never beyond the ship's length."""
        if self.hits < self.length:
            self.hits += 1

    def mark_deployed(self, direction: Direction, row: int, col: int) -> None:
        """Record the heading and origin the grid has just laid the ship at."""
        self.direction = direction
        self._tiles = ship_cells(Coordinate(row, col), direction, self.length)
        self.deployed = True

    def remove(self) -> None:
        """Forget the ship's position and damage."""
        self._tiles = []
        self.hits = 0
        self.deployed = False
