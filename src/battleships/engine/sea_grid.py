"""The sea grid: tiles, ship placement and shot resolution for one player."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Mapping

from battleships.telemetry import get_meter, get_tracer

from .attack import AttackResult, ResultOfAttack
from .ship import Coordinate, Direction, Ship, ShipName, ship_cells
from .tile import Tile, TileView

logger = logging.getLogger(__name__)
tracer = get_tracer("battleships.engine.sea_grid")
meter = get_meter("battleships.engine.sea_grid")

PLACEMENT_COUNTER = meter.create_counter(
    "battleships_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

SHOT_COUNTER = meter.create_counter(
    "battleships_engine_shots",
    unit="1",
    description="Shots received by a sea grid",
)

ChangeListener = Callable[["SeaGrid"], None]


class PlacementError(ValueError):
    """A ship could not be laid where it was asked to go."""

    def __init__(self, message: str, ship: ShipName, row: int, col: int, direction: Direction) -> None:
        super().__init__(message)
        self.ship = ship
        self.row = row
        self.col = col
        self.direction = direction


class OutOfBoundsPlacementError(PlacementError):
    """Part of the ship would lie outside the grid."""


class OverlapPlacementError(PlacementError):
    """Part of the ship would lie on a tile another ship already holds."""

    def __init__(
        self,
        message: str,
        ship: ShipName,
        row: int,
        col: int,
        direction: Direction,
        blocking: ShipName,
    ) -> None:
        super().__init__(message, ship, row, col, direction)
        self.blocking = blocking


class SeaGrid:
    """A 10x10 board of tiles together with the ships deployed on it.

    The ship mapping is shared with whoever built it (normally a
    :class:`~battleships.engine.player.Player`), so both see the same
    :class:`Ship` instances. Every call to :meth:`move_ship` or
    :meth:`hit_tile` notifies the change listeners exactly once, after the
    call's work is done and whether or not it succeeded.
    """

    WIDTH = 10
    HEIGHT = 10

    def __init__(
        self,
        ships: Mapping[ShipName, Ship],
        on_change: ChangeListener | None = None,
        owner: str = "unknown",
    ) -> None:
        self._tiles = [[Tile(row, col) for col in range(self.WIDTH)] for row in range(self.HEIGHT)]
        self._ships = ships
        self._ships_killed = 0
        self._listeners: list[ChangeListener] = []
        self._notifying = False
        self.owner = owner
        if on_change is not None:
            self._listeners.append(on_change)

    @property
    def width(self) -> int:
        return self.WIDTH

    @property
    def height(self) -> int:
        return self.HEIGHT

    @property
    def ships_killed(self) -> int:
        return self._ships_killed

    @property
    def all_deployed(self) -> bool:
        return all(ship.is_deployed for ship in self._ships.values())

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def is_valid_coordinate(self, row: int, col: int) -> bool:
        return 0 <= row < self.HEIGHT and 0 <= col < self.WIDTH

    def view(self, row: int, col: int) -> TileView:
        """Return the owner's view of a tile; un-hit ships are visible."""
        tile = self._tile(row, col)
        if not tile.occupied:
            return TileView.MISS if tile.shot else TileView.SEA
        if not tile.shot:
            return TileView.SHIP
        if self._ships[tile.occupant].is_destroyed:
            return TileView.DESTROYED
        return TileView.HIT

    def is_shot(self, row: int, col: int) -> bool:
        return self._tile(row, col).shot

    def ship_at(self, row: int, col: int) -> Ship | None:
        """Return the ship lying on a tile, if any."""
        tile = self._tile(row, col)
        if not tile.occupied:
            return None
        return self._ships[tile.occupant]

    def move_ship(self, row: int, col: int, name: ShipName, direction: Direction) -> Ship:
        """Lift ``name`` off the grid and lay it down at ``(row, col)``.

        On failure the ship is left undeployed and a :class:`PlacementError`
        is raised; no tile refers to it any more.
        """
        ship = self._ships[name]
        with tracer.start_as_current_span("sea_grid.move_ship") as span, self._mutation():
            span.set_attribute("ship.name", name.value)
            span.set_attribute("ship.length", ship.length)
            span.set_attribute("ship.direction", direction.value)
            span.set_attribute("ship.origin.row", row)
            span.set_attribute("ship.origin.col", col)
            span.set_attribute("grid.owner", self.owner)
            self._release(ship)
            try:
                cells = self._claim(ship, row, col, direction)
            except PlacementError as exc:
                span.set_attribute("placement.result", "failed")
                PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": self.owner})
                logger.warning(
                    "ship_placement_failed",
                    extra={
                        "owner": self.owner,
                        "ship_name": name.value,
                        "direction": direction.value,
                        "row": row,
                        "col": col,
                        "reason": type(exc).__name__,
                    },
                )
                raise
            for cell in cells:
                self._tiles[cell.row][cell.col].assign_occupant(name)
            ship.mark_deployed(direction, row, col)
            self._count_earlier_shots(ship)
            span.set_attribute("placement.result", "success")
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.info(
                "ship_placed",
                extra={
                    "owner": self.owner,
                    "ship_name": name.value,
                    "direction": direction.value,
                    "row": row,
                    "col": col,
                },
            )
            return ship

    def hit_tile(self, row: int, col: int) -> AttackResult:
        """Fire at a tile and classify the outcome."""
        if not self.is_valid_coordinate(row, col):
            logger.error("shot_out_of_bounds", extra={"row": row, "col": col, "owner": self.owner})
            raise ValueError(f"Shot ({row}, {col}) is outside the {self.HEIGHT}x{self.WIDTH} grid.")

        with tracer.start_as_current_span("sea_grid.hit_tile") as span, self._mutation():
            span.set_attribute("shot.row", row)
            span.set_attribute("shot.col", col)
            span.set_attribute("grid.owner", self.owner)
            result = self._resolve_shot(row, col)
            span.set_attribute("shot.outcome", result.value.value)
            SHOT_COUNTER.add(1, attributes={"outcome": result.value.value, "owner": self.owner})
            logger.info(
                "shot_resolved",
                extra={
                    "row": row,
                    "col": col,
                    "outcome": result.value.value,
                    "ships_killed": self._ships_killed,
                    "owner": self.owner,
                },
            )
            return result

    def _resolve_shot(self, row: int, col: int) -> AttackResult:
        tile = self._tiles[row][col]
        if tile.shot:
            return AttackResult(
                ResultOfAttack.SHOT_ALREADY, row, col, f"have already attacked [{col},{row}]!"
            )

        tile.shoot()
        if not tile.occupied:
            return AttackResult(ResultOfAttack.MISS, row, col, "missed")

        ship = self._ships[tile.occupant]
        ship.register_hit()
        if ship.is_destroyed:
            self._ships_killed += 1
            return AttackResult(
                ResultOfAttack.DESTROYED, row, col, "destroyed the enemy's", ship=ship
            )
        return AttackResult(ResultOfAttack.HIT, row, col, "hit something!")

    def _claim(self, ship: Ship, row: int, col: int, direction: Direction) -> list[Coordinate]:
        """Return the cells for a placement, checking them all before any is written."""
        cells = ship_cells(Coordinate(row, col), direction, ship.length)
        for cell in cells:
            if not self.is_valid_coordinate(cell.row, cell.col):
                raise OutOfBoundsPlacementError(
                    f"{ship.name.display_name} does not fit on the grid at ({row}, {col}).",
                    ship.name,
                    row,
                    col,
                    direction,
                )
            occupant = self._tiles[cell.row][cell.col].occupant
            if occupant is not ShipName.NONE:
                raise OverlapPlacementError(
                    f"{ship.name.display_name} would overlap the {occupant.display_name} "
                    f"at ({cell.row}, {cell.col}).",
                    ship.name,
                    row,
                    col,
                    direction,
                    blocking=occupant,
                )
        return cells

    def _count_earlier_shots(self, ship: Ship) -> None:
        """Damage a freshly laid ship for every tile under it that was already shot."""
        for cell in ship.occupied_tiles:
            if self._tiles[cell.row][cell.col].shot:
                ship.register_hit()
        if ship.is_destroyed:
            self._ships_killed += 1

    def _release(self, ship: Ship) -> None:
        if ship.is_destroyed:
            self._ships_killed -= 1
        for cell in ship.occupied_tiles:
            tile = self._tiles[cell.row][cell.col]
            if tile.occupant is ship.name:
                tile.assign_occupant(None)
        ship.remove()

    def _tile(self, row: int, col: int) -> Tile:
        if not self.is_valid_coordinate(row, col):
            raise ValueError(f"({row}, {col}) is outside the {self.HEIGHT}x{self.WIDTH} grid.")
        return self._tiles[row][col]

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        if self._notifying:
            raise RuntimeError("A sea grid cannot be changed from inside its change listener.")
        try:
            yield
        finally:
            self._notify()

    def _notify(self) -> None:
        self._notifying = True
        try:
            for listener in list(self._listeners):
                listener(self)
        finally:
            self._notifying = False


class EnemyGridView:
    """Read-restricted view of an opponent's grid.

    Allows shooting and drawing, but un-hit ships show as open sea and no
    ship identity or position is reachable through it.
    """

    __slots__ = ("_grid",)

    def __init__(self, grid: SeaGrid) -> None:
        self._grid = grid

    @property
    def width(self) -> int:
        return self._grid.width

    @property
    def height(self) -> int:
        return self._grid.height

    @property
    def ships_killed(self) -> int:
        return self._grid.ships_killed

    def view(self, row: int, col: int) -> TileView:
        tile_view = self._grid.view(row, col)
        if tile_view is TileView.SHIP:
            return TileView.SEA
        return tile_view

    def is_shot(self, row: int, col: int) -> bool:
        return self._grid.is_shot(row, col)

    def hit_tile(self, row: int, col: int) -> AttackResult:
        return self._grid.hit_tile(row, col)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        return self._grid.subscribe(listener)
