"""A participant: its own sea grid, a restricted view of the enemy's, and shot statistics."""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Iterator

from battleships.telemetry import get_tracer

from .attack import AttackResult, ResultOfAttack
from .sea_grid import EnemyGridView, PlacementError, SeaGrid
from .ship import FLEET, Direction, Ship, ShipName

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .game import BattleShipsGame

logger = logging.getLogger(__name__)
tracer = get_tracer("battleships.engine.player")

HIT_SCORE = 12
SHIP_LOST_PENALTY = 20


class Player:
    """One side of a match.

    A new player builds one ship of every deployable kind and immediately
    deploys them at random; :meth:`~SeaGrid.move_ship` on :attr:`board` can
    rearrange them afterwards.
    """

    def __init__(
        self,
        game: BattleShipsGame | None = None,
        rng: random.Random | None = None,
        name: str = "player",
    ) -> None:
        self.name = name
        self._game = game
        self._rng = rng or random.Random()
        self._ships: dict[ShipName, Ship] = {}
        self.board = SeaGrid(self._ships, owner=name)
        for kind in FLEET:
            self._ships[kind] = Ship(kind)
        self._enemy: EnemyGridView | None = None
        self._shots = 0
        self._hits = 0
        self._missed = 0

        self.randomize_deployment()

    @property
    def game(self) -> BattleShipsGame | None:
        return self._game

    @game.setter
    def game(self, value: BattleShipsGame | None) -> None:
        self._game = value

    @property
    def enemy(self) -> EnemyGridView | None:
        """The opponent's grid as this player is allowed to see it."""
        return self._enemy

    @enemy.setter
    def enemy(self, grid: SeaGrid | EnemyGridView | None) -> None:
        if isinstance(grid, SeaGrid):
            grid = EnemyGridView(grid)
        self._enemy = grid

    @property
    def shots(self) -> int:
        return self._shots

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def missed(self) -> int:
        return self._missed

    @property
    def ships_killed(self) -> int:
        """Number of this player's own ships that have been sunk."""
        return self.board.ships_killed

    @property
    def ready_to_deploy(self) -> bool:
        return self.board.all_deployed

    @property
    def is_destroyed(self) -> bool:
        return self.board.ships_killed == len(FLEET)

    @property
    def score(self) -> int:
        if self.is_destroyed:
            return 0
        return self._hits * HIT_SCORE - self._shots - self.board.ships_killed * SHIP_LOST_PENALTY

    def get_ship(self, name: ShipName) -> Ship | None:
        if name is ShipName.NONE:
            return None
        return self._ships[name]

    def __iter__(self) -> Iterator[Ship]:
        return iter(self._ships[kind] for kind in FLEET)

    def attack(self) -> AttackResult | None:
        """Choose and fire this turn's shot.

        Human players are driven from outside through :meth:`shoot`, so the
        base implementation does nothing. Automated players override it.
        """
        return None

    def shoot(self, row: int, col: int) -> AttackResult:
        """Fire at the enemy grid and update this player's statistics."""
        if self._enemy is None:
            raise RuntimeError(f"{self.name} has no enemy grid to shoot at.")

        result = self._enemy.hit_tile(row, col)
        self._shots += 1
        if result.value.is_hit:
            self._hits += 1
        elif result.value is ResultOfAttack.MISS:
            self._missed += 1
        return result

    def randomize_deployment(self) -> None:
        """Place every ship at a random legal position, retrying until it fits."""
        with tracer.start_as_current_span("player.randomize_deployment") as span:
            span.set_attribute("player", self.name)
            for kind in FLEET:
                attempts = 0
                while True:
                    attempts += 1
                    direction = self._rng.choice((Direction.UP_DOWN, Direction.LEFT_RIGHT))
                    row = self._rng.randint(0, self.board.height)
                    col = self._rng.randint(0, self.board.width)
                    try:
                        self.board.move_ship(row, col, kind, direction)
                    except PlacementError:
                        continue
                    break
                logger.debug(
                    "random_ship_placed",
                    extra={"ship_name": kind.value, "attempts": attempts, "owner": self.name},
                )
