"""Two-player match session built on top of the player and sea grid model."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from battleships.telemetry import get_tracer, record_game_metric

from .attack import AttackResult, ResultOfAttack
from .player import Player

logger = logging.getLogger(__name__)
tracer = get_tracer("battleships.engine.game")

AttackListener = Callable[[Player, AttackResult], None]


class GamePhase(Enum):
    """High-level lifecycle of a match."""

    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass(frozen=True)
class PlayerStats:
    """Read-only summary of a player's statistics."""

    name: str
    shots: int
    hits: int
    missed: int
    ships_killed: int
    is_destroyed: bool
    score: int


class BattleShipsGame:
    """Coordinates turns between two deployed players.

    A miss passes the turn to the other player; a hit (or a repeated shot)
    lets the current player fire again.
    """

    def __init__(self, on_attack_completed: AttackListener | None = None) -> None:
        self.players: list[Player] = []
        self.phase: GamePhase = GamePhase.SETUP
        self.winner: Player | None = None
        self._current = 0
        self._turns = 0
        self._on_attack_completed = on_attack_completed

    @property
    def player(self) -> Player:
        """The player whose turn it is."""
        if not self.players:
            raise RuntimeError("No players have joined the game.")
        return self.players[self._current]

    @property
    def opponent(self) -> Player:
        if len(self.players) < 2:
            raise RuntimeError("The game needs two players.")
        return self.players[1 - self._current]

    def add_deployed_player(self, player: Player) -> None:
        """Add a player whose ships are already on its grid."""
        if self.phase is not GamePhase.SETUP or len(self.players) >= 2:
            raise RuntimeError("The game already has two players.")
        if not player.ready_to_deploy:
            raise ValueError(f"{player.name} has not deployed all ships.")

        player.game = self
        self.players.append(player)
        if len(self.players) == 2:
            first, second = self.players
            first.enemy = second.board
            second.enemy = first.board
            self.phase = GamePhase.IN_PROGRESS
            self._current = 0
            logger.info(
                "game_started",
                extra={"player1": first.name, "player2": second.name},
            )

    def shoot(self, row: int, col: int) -> AttackResult:
        """Fire for the current player and advance the match."""
        with tracer.start_as_current_span("game.shoot") as span:
            if self.phase is not GamePhase.IN_PROGRESS:
                logger.error("shot_rejected_game_not_in_progress", extra={"phase": self.phase.value})
                raise RuntimeError("Game is not in progress.")

            shooter = self.player
            target = self.opponent
            span.set_attribute("player", shooter.name)
            span.set_attribute("row", row)
            span.set_attribute("col", col)

            result = shooter.shoot(row, col)
            self._turns += 1
            span.set_attribute("shot.outcome", result.value.value)

            if result.value is ResultOfAttack.DESTROYED and target.is_destroyed:
                self._finish(shooter)
                span.set_attribute("game.winner", shooter.name)
            elif result.value is ResultOfAttack.MISS:
                self._current = 1 - self._current
                span.set_attribute("next_player", self.player.name)

            if self._on_attack_completed is not None:
                self._on_attack_completed(shooter, result)
            return result

    def stats(self) -> list[PlayerStats]:
        return [
            PlayerStats(
                name=player.name,
                shots=player.shots,
                hits=player.hits,
                missed=player.missed,
                ships_killed=player.ships_killed,
                is_destroyed=player.is_destroyed,
                score=player.score,
            )
            for player in self.players
        ]

    def _finish(self, winner: Player) -> None:
        self.winner = winner
        self.phase = GamePhase.FINISHED
        record_game_metric("battleships_game_completed_total", 1, {"winner": winner.name})
        record_game_metric("battleships_game_turns_total", self._turns, {"winner": winner.name})
        logger.info(
            "game_finished",
            extra={"winner": winner.name, "turns": self._turns, "score": winner.score},
        )
