from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID

Color = Literal["red", "green", "blue", "white", "yellow"]
HintKind = Literal["color", "number"]

COLORS: tuple[Color, ...] = ("red", "green", "blue", "white", "yellow")

# number -> copies per color
NUMBER_COUNTS: dict[int, int] = {1: 3, 2: 2, 3: 2, 4: 2, 5: 1}
MAX_NUMBER = 5
DECK_SIZE = len(COLORS) * sum(NUMBER_COUNTS.values())


@dataclass(frozen=True)
class Card:
    id: UUID
    color: Color
    number: int

    def label(self) -> str:
        return f"{self.color} {self.number}"


@dataclass(frozen=True)
class HintFact:
    """A single color or number fact revealed about some cards."""

    kind: HintKind
    value: str | int

    @staticmethod
    def color_fact(color: Color) -> "HintFact":
        return HintFact(kind="color", value=color)

    @staticmethod
    def number_fact(number: int) -> "HintFact":
        return HintFact(kind="number", value=number)

    def matches(self, card: Card) -> bool:
        if self.kind == "color":
            return card.color == self.value
        return card.number == self.value


@dataclass(frozen=True)
class RulesConfig:
    max_hints: int = 8
    max_fuses: int = 3
    min_players: int = 2
    max_players: int = 5
    small_table_hand: int = 5  # 2-3 players
    large_table_hand: int = 4  # 4-5 players

    def hand_size(self, num_players: int) -> int:
        if num_players <= 3:
            return self.small_table_hand
        return self.large_table_hand
