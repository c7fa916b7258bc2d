"""Command-line driver for playing Battleships against a random opponent."""

from __future__ import annotations

import argparse
import random
from typing import Protocol, Sequence

from battleships.engine.attack import AttackResult
from battleships.engine.game import BattleShipsGame, GamePhase
from battleships.engine.player import Player
from battleships.engine.sea_grid import PlacementError
from battleships.engine.ship import Direction, Ship
from battleships.engine.tile import TileView
from battleships.telemetry import init_telemetry

ROW_LABELS = "ABCDEFGHIJ"

SYMBOLS = {
    TileView.SEA: ".",
    TileView.SHIP: "S",
    TileView.HIT: "X",
    TileView.MISS: "o",
    TileView.DESTROYED: "#",
}


class GridView(Protocol):
    width: int
    height: int

    def view(self, row: int, col: int) -> TileView: ...


def parse_coordinate(text: str) -> tuple[int, int]:
    """Turn ``A5`` or ``"0 4"`` into a zero-based ``(row, col)`` pair."""
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError("Empty coordinate.")
    if cleaned[0].isalpha():
        if cleaned[0] not in ROW_LABELS:
            raise ValueError("Row must be between A and J.")
        row = ROW_LABELS.index(cleaned[0])
        try:
            col = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValueError("Column must be a number between 1 and 10.") from exc
    else:
        parts = cleaned.split()
        if len(parts) != 2:
            raise ValueError("Use formats like A5 or '3 7'.")
        row, col = map(int, parts)
    if row not in range(len(ROW_LABELS)) or col not in range(len(ROW_LABELS)):
        raise ValueError("Coordinates must be within the 10x10 board.")
    return row, col


def format_grid(grid: GridView) -> str:
    header = "    " + " ".join(f"{col + 1:>2}" for col in range(grid.width))
    rows = [header]
    for row in range(grid.height):
        symbols = [f"{SYMBOLS[grid.view(row, col)]:>2}" for col in range(grid.width)]
        rows.append(f"{ROW_LABELS[row]} |" + " ".join(symbols))
    return "\n".join(rows)


def describe_shot(player: Player, result: AttackResult) -> str:
    label = f"{ROW_LABELS[result.row]}{result.col + 1}"
    return f"{player.name} fired at {label}: {result}"


def _prompt_direction(ship: Ship) -> Direction:
    while True:
        raw = (
            input(f"Place your {ship.name.display_name} (length {ship.length}). Direction [H/V]: ")
            .strip()
            .upper()
        )
        if raw in {"H", "HOR", "HORIZONTAL"}:
            return Direction.LEFT_RIGHT
        if raw in {"V", "VER", "VERTICAL"}:
            return Direction.UP_DOWN
        print("Please enter H for horizontal or V for vertical.")


def _manual_ship_placement(player: Player) -> None:
    for ship in player:
        while True:
            print("\nCurrent layout:")
            print(format_grid(player.board))
            direction = _prompt_direction(ship)
            try:
                row, col = parse_coordinate(input("Enter starting coordinate (e.g., A1): "))
            except ValueError as exc:
                print(f"Invalid coordinate: {exc}")
                continue
            try:
                player.board.move_ship(row, col, ship.name, direction)
            except PlacementError as exc:
                print(f"{exc} Try again.")
                continue
            break


def _prompt_yes_no(question: str) -> bool:
    while True:
        raw = input(f"{question} [Y/n]: ").strip().lower()
        if raw in {"", "y", "yes"}:
            return True
        if raw in {"n", "no"}:
            return False
        print("Please answer with 'y' or 'n'.")


def _prompt_target(player: Player) -> tuple[int, int]:
    enemy = player.enemy
    if enemy is None:
        raise RuntimeError(f"{player.name} has no enemy grid to target.")
    while True:
        raw = input("Enter target coordinate (e.g., A5) or 'q' to quit: ").strip()
        if raw.lower() == "q":
            raise SystemExit("Goodbye!")
        try:
            row, col = parse_coordinate(raw)
        except ValueError as exc:
            print(f"Invalid input: {exc}")
            continue
        if enemy.is_shot(row, col):
            print("That cell has already been targeted. Choose another.")
            continue
        return row, col


def _random_target(player: Player, rng: random.Random) -> tuple[int, int]:
    enemy = player.enemy
    if enemy is None:
        raise RuntimeError(f"{player.name} has no enemy grid to target.")
    open_cells = [
        (row, col)
        for row in range(enemy.height)
        for col in range(enemy.width)
        if not enemy.is_shot(row, col)
    ]
    return rng.choice(open_cells)


def play_game(seed: int | None = None) -> None:
    print("Welcome to Battleships!\n")
    rng = random.Random(seed)
    human = Player(rng=rng, name="You")
    computer = Player(rng=rng, name="Computer")

    if _prompt_yes_no("Would you like to place your ships manually?"):
        _manual_ship_placement(human)
    else:
        print("\nYour ships have been positioned automatically.")

    game = BattleShipsGame()
    game.add_deployed_player(human)
    game.add_deployed_player(computer)

    while game.phase is GamePhase.IN_PROGRESS:
        player = game.player
        if player is human:
            print("\nYour Board:")
            print(format_grid(human.board))
            print("\nEnemy Waters:")
            print(format_grid(human.enemy))
            row, col = _prompt_target(human)
        else:
            row, col = _random_target(computer, rng)
        result = game.shoot(row, col)
        print(describe_shot(player, result))

    for stats in game.stats():
        print(f"{stats.name}: shots={stats.shots} hits={stats.hits} score={stats.score}")
    if game.winner is human:
        print("\nCongratulations, you won!")
    else:
        print("\nThe computer won this time. Better luck next battle!")


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play Battleships via the CLI.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    args = parser.parse_args(argv)
    init_telemetry()
    play_game(seed=args.seed)


if __name__ == "__main__":
    main()
