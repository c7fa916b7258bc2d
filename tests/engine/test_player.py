"""Tests for player statistics, scoring and random deployment."""

import random

import pytest

from battleships.engine.attack import ResultOfAttack
from battleships.engine.player import Player
from battleships.engine.sea_grid import EnemyGridView
from battleships.engine.ship import FLEET, Coordinate, ShipName
from battleships.engine.tile import TileView


def _occupied(player: Player) -> list[Coordinate]:
    return [cell for ship in player for cell in ship.occupied_tiles]


def _empty_cell(player: Player) -> Coordinate:
    taken = set(_occupied(player))
    return next(
        Coordinate(row, col)
        for row in range(player.board.height)
        for col in range(player.board.width)
        if Coordinate(row, col) not in taken
    )


@pytest.fixture
def players() -> tuple[Player, Player]:
    attacker = Player(rng=random.Random(1), name="attacker")
    defender = Player(rng=random.Random(2), name="defender")
    attacker.enemy = defender.board
    defender.enemy = attacker.board
    return attacker, defender


@pytest.mark.parametrize("seed", range(50))
def test_random_deployment_places_whole_fleet(seed: int) -> None:
    player = Player(rng=random.Random(seed))

    assert player.ready_to_deploy
    cells = _occupied(player)
    assert len(cells) == sum(kind.length for kind in FLEET)
    assert len(cells) == len(set(cells)), "Ships should not overlap"
    for cell in cells:
        assert 0 <= cell.row < 10 and 0 <= cell.col < 10
    for ship in player:
        for cell in ship.occupied_tiles:
            assert player.board.ship_at(cell.row, cell.col) is ship


def test_redeployment_keeps_fleet_legal() -> None:
    player = Player(rng=random.Random(7))
    player.randomize_deployment()
    cells = _occupied(player)
    assert player.ready_to_deploy
    assert len(cells) == len(set(cells))


def test_new_player_starts_with_clean_stats() -> None:
    player = Player(rng=random.Random(3))
    assert (player.shots, player.hits, player.missed) == (0, 0, 0)
    assert player.ships_killed == 0
    assert not player.is_destroyed
    assert player.score == 0


def test_ship_enumeration_and_lookup() -> None:
    player = Player(rng=random.Random(4))
    assert [ship.name for ship in player] == list(FLEET)
    assert player.get_ship(ShipName.NONE) is None
    tug = player.get_ship(ShipName.TUG)
    assert tug is not None
    assert tug.length == 2
    assert tug.deployed


def test_shoot_updates_statistics(players: tuple[Player, Player]) -> None:
    attacker, defender = players
    empty = _empty_cell(defender)

    assert attacker.shoot(empty.row, empty.col).value is ResultOfAttack.MISS
    assert (attacker.shots, attacker.hits, attacker.missed) == (1, 0, 1)

    assert attacker.shoot(empty.row, empty.col).value is ResultOfAttack.SHOT_ALREADY
    assert (attacker.shots, attacker.hits, attacker.missed) == (2, 0, 1)

    target = defender.get_ship(ShipName.BATTLESHIP).occupied_tiles[0]
    assert attacker.shoot(target.row, target.col).value is ResultOfAttack.HIT
    assert (attacker.shots, attacker.hits, attacker.missed) == (3, 1, 1)


def test_destroying_a_ship_counts_as_hits(players: tuple[Player, Player]) -> None:
    attacker, defender = players
    tug = defender.get_ship(ShipName.TUG)

    results = [attacker.shoot(cell.row, cell.col) for cell in tug.occupied_tiles]

    assert [result.value for result in results] == [ResultOfAttack.HIT, ResultOfAttack.DESTROYED]
    assert results[-1].ship is tug
    assert attacker.hits == 2
    assert defender.ships_killed == 1
    assert defender.score == -20


def test_score_formula(players: tuple[Player, Player]) -> None:
    attacker, defender = players
    # 5 hits sinking the tug and submarine, 3 misses, and one of our own ships lost
    for ship_name in (ShipName.TUG, ShipName.SUBMARINE):
        for cell in defender.get_ship(ship_name).occupied_tiles:
            attacker.shoot(cell.row, cell.col)
    free = [
        Coordinate(row, col)
        for row in range(10)
        for col in range(10)
        if Coordinate(row, col) not in set(_occupied(defender))
    ]
    for cell in free[:3]:
        attacker.shoot(cell.row, cell.col)
    for cell in attacker.get_ship(ShipName.DESTROYER).occupied_tiles:
        defender.shoot(cell.row, cell.col)

    assert (attacker.hits, attacker.shots, attacker.ships_killed) == (5, 8, 1)
    assert attacker.score == 5 * 12 - 8 - 1 * 20


def test_destroyed_player_scores_zero(players: tuple[Player, Player]) -> None:
    attacker, defender = players
    for cell in _occupied(defender):
        attacker.shoot(cell.row, cell.col)

    assert defender.is_destroyed
    assert defender.ships_killed == len(FLEET)
    assert defender.score == 0
    assert attacker.hits == sum(kind.length for kind in FLEET)


def test_enemy_is_restricted_view(players: tuple[Player, Player]) -> None:
    attacker, defender = players
    assert isinstance(attacker.enemy, EnemyGridView)

    hidden = defender.get_ship(ShipName.AIRCRAFT_CARRIER).occupied_tiles[0]
    assert attacker.enemy.view(hidden.row, hidden.col) is TileView.SEA
    assert defender.board.view(hidden.row, hidden.col) is TileView.SHIP


def test_shoot_requires_enemy() -> None:
    player = Player(rng=random.Random(5))
    with pytest.raises(RuntimeError):
        player.shoot(0, 0)
    assert player.shots == 0


def test_base_attack_does_nothing() -> None:
    assert Player(rng=random.Random(6)).attack() is None


def test_off_board_shot_is_not_charged(players: tuple[Player, Player]) -> None:
    attacker, _ = players
    with pytest.raises(ValueError):
        attacker.shoot(10, 0)
    assert (attacker.shots, attacker.hits, attacker.missed) == (0, 0, 0)
    assert attacker.score == 0


def test_relocating_a_sunk_ship_keeps_player_alive(players: tuple[Player, Player]) -> None:
    attacker, defender = players
    for cell in defender.get_ship(ShipName.TUG).occupied_tiles:
        attacker.shoot(cell.row, cell.col)
    defender.randomize_deployment()
    assert defender.ships_killed == sum(ship.is_destroyed for ship in defender)

    for ship in defender:
        for cell in ship.occupied_tiles:
            attacker.shoot(cell.row, cell.col)
    assert defender.ships_killed == len(FLEET)
    assert defender.is_destroyed
