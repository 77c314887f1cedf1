from __future__ import annotations

import random
from dataclasses import dataclass

from .actions import DiscardAction, HintAction, Move, PlayAction
from .match import GameState, legal_moves
from .types import Card, HintFact


@dataclass(frozen=True)
class BotSpec:
    """Simple bot tuning parameters.

    mistake_rate: chance (0..1) of ignoring the policy and picking a random
    legal move instead. 0 keeps the bot fully rule-driven.
    """

    mistake_rate: float = 0.0


def _playable(state: GameState, card: Card) -> bool:
    return card.number == state.played.get(card.color, 0) + 1


def _known(state: GameState, card: Card) -> tuple[bool, bool]:
    facts = state.given_hints.get(card.id, [])
    return any(f.kind == "color" for f in facts), any(f.kind == "number" for f in facts)


def _pick_play(state: GameState, player: int) -> PlayAction | None:
    # Only play what hints have fully identified
    for card in state.hands[player]:
        knows_color, knows_number = _known(state, card)
        if knows_color and knows_number and _playable(state, card):
            return PlayAction(player=player, card_id=card.id)
    return None


def _pick_hint(state: GameState, player: int) -> HintAction | None:
    if state.hints <= 0:
        return None
    # Look around the table starting with the next player
    for offset in range(1, state.num_players):
        target = (player + offset) % state.num_players
        for card in state.hands[target]:
            if not _playable(state, card):
                continue
            knows_color, knows_number = _known(state, card)
            if not knows_color:
                return HintAction(player=player, target=target, fact=HintFact.color_fact(card.color))
            if not knows_number:
                return HintAction(player=player, target=target, fact=HintFact.number_fact(card.number))
    return None


def _pick_discard(state: GameState, player: int) -> DiscardAction | None:
    hand = state.hands[player]
    if not hand:
        return None
    # oldest card nobody has hinted about, else simply the oldest
    for card in hand:
        if card.id not in state.given_hints:
            return DiscardAction(player=player, card_id=card.id)
    return DiscardAction(player=player, card_id=hand[0].id)


def choose_move(state: GameState, rng: random.Random, spec: BotSpec | None = None) -> Move | None:
    """Pick a move for whoever holds the turn, or None once the game is over."""
    spec = spec or BotSpec()
    options = legal_moves(state)
    if not options:
        return None
    if spec.mistake_rate > 0 and rng.random() < spec.mistake_rate:
        return rng.choice(options)

    player = state.turn
    move: Move | None = _pick_play(state, player)
    if move is None:
        move = _pick_hint(state, player)
    if move is None and state.hints < state.config.max_hints:
        move = _pick_discard(state, player)
    if move is None:
        move = rng.choice(options)
    return move
