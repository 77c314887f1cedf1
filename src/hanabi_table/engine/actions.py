from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from .types import HintFact


@dataclass(frozen=True)
class PlayAction:
    player: int
    card_id: UUID


@dataclass(frozen=True)
class HintAction:
    player: int
    target: int
    fact: HintFact


@dataclass(frozen=True)
class DiscardAction:
    player: int
    card_id: UUID


Move = PlayAction | HintAction | DiscardAction
