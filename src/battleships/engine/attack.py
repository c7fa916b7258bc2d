"""Shot outcomes returned by a sea grid."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .ship import Ship


class ResultOfAttack(Enum):
    """Classification of a single shot."""

    HIT = "hit"
    MISS = "miss"
    DESTROYED = "destroyed"
    SHOT_ALREADY = "shot_already"

    @property
    def is_hit(self) -> bool:
        return self in (ResultOfAttack.HIT, ResultOfAttack.DESTROYED)


@dataclass(frozen=True)
class AttackResult:
    """Immutable record of one resolved shot."""

    value: ResultOfAttack
    row: int
    col: int
    text: str
    ship: Ship | None = None

    def __post_init__(self) -> None:
        if (self.ship is not None) != (self.value is ResultOfAttack.DESTROYED):
            raise ValueError("Only a DESTROYED result carries the destroyed ship.")

    def __str__(self) -> str:
        if self.ship is None:
            return self.text
        return f"{self.text} {self.ship.name.display_name}"
