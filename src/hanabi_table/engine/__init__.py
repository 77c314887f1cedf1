"""Headless rules engine for hanabi-table.

IMPORTANT: This package must stay free of I/O, locks and logging.
"""

from .actions import DiscardAction, HintAction, Move, PlayAction
from .history import DiscardRecord, HintRecord, MoveRecord, PlayRecord, describe
from .match import GameState, RejectReason, StepResult, apply, join, legal_moves, new_game, replay
from .types import COLORS, Card, Color, HintFact, RulesConfig

__all__ = [
    "COLORS",
    "Card",
    "Color",
    "DiscardAction",
    "DiscardRecord",
    "GameState",
    "HintAction",
    "HintFact",
    "HintRecord",
    "Move",
    "MoveRecord",
    "PlayAction",
    "PlayRecord",
    "RejectReason",
    "RulesConfig",
    "StepResult",
    "apply",
    "describe",
    "join",
    "legal_moves",
    "new_game",
    "replay",
]
