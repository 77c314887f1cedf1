"""Deck construction, shuffling and the opening deal."""

from __future__ import annotations

import random
from uuid import UUID

from .types import COLORS, NUMBER_COUNTS, Card, RulesConfig


def _card_id(rng: random.Random) -> UUID:
    # Random (version 4) UUID taken from the game RNG so seeded games reproduce exactly.
    return UUID(int=rng.getrandbits(128), version=4)


def build_deck(rng: random.Random) -> list[Card]:
    deck: list[Card] = []
    for color in COLORS:
        for number, copies in NUMBER_COUNTS.items():
            for _ in range(copies):
                deck.append(Card(id=_card_id(rng), color=color, number=number))
    return deck


def shuffle(rng: random.Random, cards: list[Card]) -> None:
    rng.shuffle(cards)


def deal(deck: list[Card], num_players: int, config: RulesConfig) -> list[list[Card]]:
    """Deal opening hands from the top (end) of `deck`, mutating it."""
    per_hand = config.hand_size(num_players)
    hands: list[list[Card]] = []
    for _ in range(num_players):
        hands.append([deck.pop() for _ in range(per_hand)])
    return hands
