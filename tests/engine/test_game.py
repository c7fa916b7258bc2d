"""High-level gameplay tests."""

import random
from typing import Iterator

import pytest

from battleships.engine.attack import AttackResult, ResultOfAttack
from battleships.engine.game import BattleShipsGame, GamePhase
from battleships.engine.player import Player
from battleships.engine.sea_grid import EnemyGridView
from battleships.engine.ship import Coordinate, ShipName


def _all_cells() -> Iterator[tuple[int, int]]:
    return ((row, col) for row in range(10) for col in range(10))


def _empty_cell(player: Player) -> Coordinate:
    taken = {cell for ship in player for cell in ship.occupied_tiles}
    return next(Coordinate(row, col) for row, col in _all_cells() if Coordinate(row, col) not in taken)


@pytest.fixture
def game() -> BattleShipsGame:
    session = BattleShipsGame()
    session.add_deployed_player(Player(rng=random.Random(11), name="first"))
    session.add_deployed_player(Player(rng=random.Random(12), name="second"))
    return session


def test_two_players_start_the_game(game: BattleShipsGame) -> None:
    first, second = game.players
    assert game.phase is GamePhase.IN_PROGRESS
    assert game.player is first
    assert game.opponent is second
    assert first.game is game
    assert isinstance(first.enemy, EnemyGridView)
    assert isinstance(second.enemy, EnemyGridView)


def test_shoot_requires_game_in_progress() -> None:
    session = BattleShipsGame()
    session.add_deployed_player(Player(rng=random.Random(1)))
    with pytest.raises(RuntimeError):
        session.shoot(0, 0)


def test_third_player_is_rejected(game: BattleShipsGame) -> None:
    with pytest.raises(RuntimeError):
        game.add_deployed_player(Player(rng=random.Random(3)))


def test_undeployed_player_is_rejected() -> None:
    player = Player(rng=random.Random(4))
    player.get_ship(ShipName.TUG).remove()
    with pytest.raises(ValueError):
        BattleShipsGame().add_deployed_player(player)


def test_miss_passes_the_turn(game: BattleShipsGame) -> None:
    first, second = game.players
    empty = _empty_cell(second)
    assert game.shoot(empty.row, empty.col).value is ResultOfAttack.MISS
    assert game.player is second


def test_hit_keeps_the_turn(game: BattleShipsGame) -> None:
    first, second = game.players
    target = second.get_ship(ShipName.DESTROYER).occupied_tiles[0]
    assert game.shoot(target.row, target.col).value is ResultOfAttack.HIT
    assert game.player is first
    assert game.shoot(target.row, target.col).value is ResultOfAttack.SHOT_ALREADY
    assert game.player is first


def test_game_finishes_when_fleet_destroyed(game: BattleShipsGame) -> None:
    targets = {player.name: _all_cells() for player in game.players}
    while game.phase is GamePhase.IN_PROGRESS:
        row, col = next(targets[game.player.name])
        game.shoot(row, col)

    winner = game.winner
    assert winner is not None
    loser = next(player for player in game.players if player is not winner)
    assert loser.is_destroyed
    assert loser.score == 0
    assert not winner.is_destroyed
    with pytest.raises(RuntimeError):
        game.shoot(0, 0)


def test_attack_listener_and_metrics(monkeypatch: pytest.MonkeyPatch) -> None:
    metrics: list[str] = []
    monkeypatch.setattr(
        "battleships.engine.game.record_game_metric",
        lambda name, value, attrs=None: metrics.append(name),
    )
    attacks: list[tuple[Player, AttackResult]] = []
    session = BattleShipsGame(on_attack_completed=lambda player, result: attacks.append((player, result)))
    first = Player(rng=random.Random(21), name="first")
    second = Player(rng=random.Random(22), name="second")
    session.add_deployed_player(first)
    session.add_deployed_player(second)

    cells = [cell for ship in second for cell in ship.occupied_tiles]
    for cell in cells:
        session.shoot(cell.row, cell.col)

    assert len(attacks) == len(cells)
    assert all(player is first for player, _ in attacks)
    assert attacks[-1][1].value is ResultOfAttack.DESTROYED
    assert session.phase is GamePhase.FINISHED
    assert session.winner is first
    assert "battleships_game_completed_total" in metrics


def test_stats_summary(game: BattleShipsGame) -> None:
    first, second = game.players
    empty = _empty_cell(second)
    game.shoot(empty.row, empty.col)

    stats = {entry.name: entry for entry in game.stats()}
    assert stats["first"].shots == 1
    assert stats["first"].missed == 1
    assert stats["first"].score == -1
    assert stats["second"].shots == 0
