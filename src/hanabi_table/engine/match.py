from __future__ import annotations

import copy
import random
import secrets
from dataclasses import dataclass, field
from typing import Iterable, Literal
from uuid import UUID

from .actions import DiscardAction, HintAction, Move, PlayAction
from .deck import build_deck, deal, shuffle
from .history import MoveRecord, record_discard, record_hint, record_play
from .types import MAX_NUMBER, Card, Color, HintFact, RulesConfig

RejectReason = Literal[
    "game_over",
    "invalid_player",
    "not_your_turn",
    "card_not_in_hand",
    "no_hints_left",
    "self_hint",
    "invalid_target",
    "hint_matches_nothing",
    "unknown_move",
]


@dataclass
class GameState:
    config: RulesConfig
    seed: int | None
    hands: list[list[Card]]
    deck: list[Card]
    hints: int
    fuses: int
    player_names: list[str] = field(default_factory=list)
    discard: list[Card] = field(default_factory=list)
    played: dict[Color, int] = field(default_factory=dict)
    given_hints: dict[UUID, list[HintFact]] = field(default_factory=dict)
    turn: int = 0
    endgame_turns: int = 0  # counts down once the deck is empty
    moves: list[MoveRecord] = field(default_factory=list)

    @property
    def num_players(self) -> int:
        return len(self.hands)

    def is_terminal(self) -> bool:
        if self.fuses <= 0:
            return True
        return not self.deck and self.endgame_turns <= 0

    def card_count(self) -> int:
        """Cards accounted for across deck, hands, discard and the played ladders."""
        in_hands = sum(len(h) for h in self.hands)
        return len(self.deck) + in_hands + len(self.discard) + sum(self.played.values())


@dataclass
class StepResult:
    ok: bool
    state: GameState
    reason: RejectReason | None = None
    error: str | None = None
    record: MoveRecord | None = None


def _reject(state: GameState, reason: RejectReason, msg: str) -> StepResult:
    return StepResult(ok=False, state=state, reason=reason, error=msg)


def _clone(state: GameState) -> GameState:
    return copy.deepcopy(state)


def _find_in_hand(hand: list[Card], card_id: UUID) -> int | None:
    for i, card in enumerate(hand):
        if card.id == card_id:
            return i
    return None


def _draw_one(state: GameState, player: int) -> None:
    if not state.deck:
        return
    state.hands[player].append(state.deck.pop())


def _accept(state: GameState, rec: MoveRecord) -> StepResult:
    state.turn = (state.turn + 1) % state.num_players
    if not state.deck:
        state.endgame_turns = max(0, state.endgame_turns - 1)
    return StepResult(ok=True, state=state, record=rec)


def _play(state: GameState, action: PlayAction) -> StepResult:
    idx = _find_in_hand(state.hands[action.player], action.card_id)
    if idx is None:
        return _reject(state, "card_not_in_hand", "That card is not in your hand.")

    nxt = _clone(state)
    card = nxt.hands[action.player].pop(idx)
    current = nxt.played.get(card.color, 0)
    success = card.number == current + 1
    if success:
        nxt.played[card.color] = card.number
        if card.number == MAX_NUMBER:
            nxt.hints = min(nxt.hints + 1, nxt.config.max_hints)
    else:
        nxt.discard.append(card)
        nxt.fuses -= 1
    _draw_one(nxt, action.player)
    rec = record_play(nxt, action.player, card, success)
    return _accept(nxt, rec)


def _hint(state: GameState, action: HintAction) -> StepResult:
    if state.hints <= 0:
        return _reject(state, "no_hints_left", "No hint tokens left.")
    if action.target == action.player:
        return _reject(state, "self_hint", "You cannot hint yourself.")
    if action.target < 0 or action.target >= state.num_players:
        return _reject(state, "invalid_target", "Invalid hint target.")

    matched = [c.id for c in state.hands[action.target] if action.fact.matches(c)]
    if not matched:
        return _reject(state, "hint_matches_nothing", "Hint does not match any card.")

    nxt = _clone(state)
    for card_id in matched:
        nxt.given_hints.setdefault(card_id, []).append(action.fact)
    nxt.hints = max(nxt.hints - 1, 0)
    rec = record_hint(nxt, action.player, action.target, action.fact, matched)
    return _accept(nxt, rec)


def _discard(state: GameState, action: DiscardAction) -> StepResult:
    idx = _find_in_hand(state.hands[action.player], action.card_id)
    if idx is None:
        return _reject(state, "card_not_in_hand", "That card is not in your hand.")

    nxt = _clone(state)
    card = nxt.hands[action.player].pop(idx)
    nxt.discard.append(card)
    _draw_one(nxt, action.player)
    nxt.hints = min(nxt.hints + 1, nxt.config.max_hints)
    rec = record_discard(nxt, action.player, card)
    return _accept(nxt, rec)


def apply(state: GameState, move: Move) -> StepResult:
    """Validate `move` against `state` and return the resulting state.

    `state` is never mutated: an accepted move yields a fresh GameState, a
    rejected one hands back the very same object with a reason code. Callers
    holding a per-game lock can therefore swap the stored state only when
    `ok` is true.
    """
    if state.is_terminal():
        return _reject(state, "game_over", "Game already ended.")
    if move.player < 0 or move.player >= state.num_players:
        return _reject(state, "invalid_player", "Invalid player index.")
    if move.player != state.turn:
        return _reject(state, "not_your_turn", "Not your turn.")

    if isinstance(move, PlayAction):
        return _play(state, move)
    if isinstance(move, HintAction):
        return _hint(state, move)
    if isinstance(move, DiscardAction):
        return _discard(state, move)
    return _reject(state, "unknown_move", "Unknown move.")


def new_game(num_players: int, seed: int | None = None, config: RulesConfig | None = None) -> GameState:
    cfg = config or RulesConfig()
    if not cfg.min_players <= num_players <= cfg.max_players:
        raise ValueError(
            f"Games need {cfg.min_players}-{cfg.max_players} players, got {num_players}."
        )
    if seed is None:
        seed = secrets.randbits(63)

    rng = random.Random(seed)
    deck = build_deck(rng)
    shuffle(rng, deck)
    hands = deal(deck, num_players, cfg)

    return GameState(
        config=cfg,
        seed=seed,
        hands=hands,
        deck=deck,
        hints=cfg.max_hints,
        fuses=cfg.max_fuses,
        turn=0,
        endgame_turns=num_players + 1,
    )


def join(state: GameState, name: str) -> GameState:
    """Seat `name` at the next free place; a repeat or a full table is a no-op."""
    if name in state.player_names or len(state.player_names) >= state.num_players:
        return state
    nxt = _clone(state)
    nxt.player_names.append(name)
    return nxt


def replay(
    num_players: int,
    seed: int,
    moves: Iterable[Move],
    config: RulesConfig | None = None,
) -> GameState:
    state = new_game(num_players, seed=seed, config=config)
    for m in moves:
        if state.is_terminal():
            break
        state = apply(state, m).state
    return state


def legal_moves(state: GameState) -> list[Move]:
    if state.is_terminal():
        return []
    p = state.turn
    out: list[Move] = []
    for card in state.hands[p]:
        out.append(PlayAction(player=p, card_id=card.id))
    for card in state.hands[p]:
        out.append(DiscardAction(player=p, card_id=card.id))
    if state.hints <= 0:
        return out

    for target in range(state.num_players):
        if target == p:
            continue
        facts: list[HintFact] = []
        for card in state.hands[target]:
            for fact in (HintFact.color_fact(card.color), HintFact.number_fact(card.number)):
                if fact not in facts:
                    facts.append(fact)
        for fact in facts:
            out.append(HintAction(player=p, target=target, fact=fact))
    return out
