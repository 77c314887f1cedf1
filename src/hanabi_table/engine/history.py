"""Move history: one outcome-annotated record per accepted move.

Records are frozen and only ever appended to ``GameState.moves``, so the log
can be replayed or rendered as commentary without diffing states.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence
from uuid import UUID

from .types import Card, HintFact

if TYPE_CHECKING:
    from .match import GameState


@dataclass(frozen=True)
class PlayRecord:
    player: int
    card: Card
    success: bool


@dataclass(frozen=True)
class HintRecord:
    player: int
    target: int
    fact: HintFact
    card_ids: tuple[UUID, ...]

    @property
    def matched(self) -> int:
        return len(self.card_ids)


@dataclass(frozen=True)
class DiscardRecord:
    player: int
    card: Card


MoveRecord = PlayRecord | HintRecord | DiscardRecord


def record_play(state: "GameState", player: int, card: Card, success: bool) -> PlayRecord:
    rec = PlayRecord(player=player, card=card, success=success)
    state.moves.append(rec)
    return rec


def record_hint(
    state: "GameState", player: int, target: int, fact: HintFact, card_ids: Sequence[UUID]
) -> HintRecord:
    rec = HintRecord(player=player, target=target, fact=fact, card_ids=tuple(card_ids))
    state.moves.append(rec)
    return rec


def record_discard(state: "GameState", player: int, card: Card) -> DiscardRecord:
    rec = DiscardRecord(player=player, card=card)
    state.moves.append(rec)
    return rec


def _name(player_names: Sequence[str], player: int) -> str:
    if 0 <= player < len(player_names):
        return player_names[player]
    return f"player {player}"


def describe(rec: MoveRecord, player_names: Sequence[str] = ()) -> str:
    """Render a record as one line of game commentary."""
    who = _name(player_names, rec.player)
    if isinstance(rec, PlayRecord):
        verb = "played" if rec.success else "misplayed"
        return f"{who} {verb} {rec.card.label()}"
    if isinstance(rec, HintRecord):
        plural = "card" if rec.matched == 1 else "cards"
        return f"{who} hinted {_name(player_names, rec.target)} {rec.fact.value} ({rec.matched} {plural})"
    return f"{who} discarded {rec.card.label()}"
