from __future__ import annotations

import dataclasses
from typing import Mapping
from uuid import UUID

from .actions import DiscardAction, HintAction, Move, PlayAction
from .history import DiscardRecord, HintRecord, MoveRecord, PlayRecord
from .match import GameState
from .types import COLORS, MAX_NUMBER, Card, Color, HintFact, RulesConfig


class MoveFormatError(ValueError):
    pass


def _card_to_dict(c: Card) -> dict[str, object]:
    return {"id": str(c.id), "color": c.color, "number": c.number}


def _fact_to_dict(f: HintFact) -> dict[str, object]:
    return {"kind": f.kind, "value": f.value}


def move_to_dict(m: Move) -> dict[str, object]:
    if isinstance(m, PlayAction):
        return {"type": "play", "player": m.player, "card_id": str(m.card_id)}
    if isinstance(m, HintAction):
        return {"type": "hint", "player": m.player, "target": m.target, "fact": _fact_to_dict(m.fact)}
    if isinstance(m, DiscardAction):
        return {"type": "discard", "player": m.player, "card_id": str(m.card_id)}
    # should be unreachable
    return {"type": "unknown"}


def record_to_dict(r: MoveRecord) -> dict[str, object]:
    if isinstance(r, PlayRecord):
        return {"type": "play", "player": r.player, "card": _card_to_dict(r.card), "success": r.success}
    if isinstance(r, HintRecord):
        return {
            "type": "hint",
            "player": r.player,
            "target": r.target,
            "fact": _fact_to_dict(r.fact),
            "card_ids": [str(cid) for cid in r.card_ids],
            "matched": r.matched,
        }
    return {"type": "discard", "player": r.player, "card": _card_to_dict(r.card)}


def snapshot(state: GameState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current game state."""
    return {
        "seed": state.seed,
        "player_names": list(state.player_names),
        "hands": [[_card_to_dict(c) for c in hand] for hand in state.hands],
        "deck": [_card_to_dict(c) for c in state.deck],
        "discard": [_card_to_dict(c) for c in state.discard],
        "played": {color: state.played[color] for color in COLORS if color in state.played},
        "given_hints": {
            str(cid): [_fact_to_dict(f) for f in facts] for cid, facts in state.given_hints.items()
        },
        "hints": state.hints,
        "fuses": state.fuses,
        "turn": state.turn,
        "endgame_turns": state.endgame_turns,
        "moves": [record_to_dict(r) for r in state.moves],
        "rules": dataclasses.asdict(state.config),
    }


# ---- parsing ---------------------------------------------------------------


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise MoveFormatError(f"Expected int for {key}")
    return v


def _parse_uuid(raw: object, what: str) -> UUID:
    if not isinstance(raw, str):
        raise MoveFormatError(f"Expected UUID string for {what}")
    try:
        return UUID(raw)
    except ValueError as e:
        raise MoveFormatError(f"Invalid UUID for {what}: {raw!r}") from e


def _require_uuid(obj: Mapping[str, object], key: str) -> UUID:
    return _parse_uuid(obj.get(key), key)


def _parse_fact(raw: object) -> HintFact:
    if not isinstance(raw, Mapping):
        raise MoveFormatError("fact must be an object")
    kind = raw.get("kind")
    value = raw.get("value")
    if kind == "color":
        if value not in COLORS:
            raise MoveFormatError(f"Unknown color: {value!r}")
        return HintFact.color_fact(value)  # type: ignore[arg-type]
    if kind == "number":
        if not isinstance(value, int) or isinstance(value, bool) or not 1 <= value <= 5:
            raise MoveFormatError(f"Hint number must be 1-5, got {value!r}")
        return HintFact.number_fact(value)
    raise MoveFormatError(f"Unknown hint kind: {kind!r}")


def _parse_card(raw: object) -> Card:
    if not isinstance(raw, Mapping):
        raise MoveFormatError("card must be an object")
    color = raw.get("color")
    if color not in COLORS:
        raise MoveFormatError(f"Unknown color: {color!r}")
    number = _require_int(raw, "number")
    if not 1 <= number <= MAX_NUMBER:
        raise MoveFormatError(f"Card number must be 1-5, got {number}")
    return Card(id=_require_uuid(raw, "id"), color=color, number=number)  # type: ignore[arg-type]


def move_from_dict(data: Mapping[str, object]) -> Move:
    t = data.get("type")
    if t == "play":
        return PlayAction(player=_require_int(data, "player"), card_id=_require_uuid(data, "card_id"))
    if t == "discard":
        return DiscardAction(player=_require_int(data, "player"), card_id=_require_uuid(data, "card_id"))
    if t == "hint":
        return HintAction(
            player=_require_int(data, "player"),
            target=_require_int(data, "target"),
            fact=_parse_fact(data.get("fact")),
        )
    raise MoveFormatError(f"Unknown move type: {t!r}")


def _require_list(obj: Mapping[str, object], key: str) -> list[object]:
    v = obj.get(key)
    if not isinstance(v, list):
        raise MoveFormatError(f"{key} must be a list")
    return v


def _require_mapping(obj: Mapping[str, object], key: str) -> Mapping[str, object]:
    v = obj.get(key)
    if not isinstance(v, Mapping):
        raise MoveFormatError(f"{key} must be an object")
    return v


def _as_mapping(raw: object) -> Mapping[str, object]:
    if not isinstance(raw, Mapping):
        raise MoveFormatError("each move record must be an object")
    return raw


def _record_from_dict(data: Mapping[str, object]) -> MoveRecord:
    t = data.get("type")
    player = _require_int(data, "player")
    if t == "play":
        success = data.get("success")
        if not isinstance(success, bool):
            raise MoveFormatError("Expected bool for success")
        return PlayRecord(player=player, card=_parse_card(data.get("card")), success=success)
    if t == "hint":
        return HintRecord(
            player=player,
            target=_require_int(data, "target"),
            fact=_parse_fact(data.get("fact")),
            card_ids=tuple(_parse_uuid(cid, "card_ids") for cid in _require_list(data, "card_ids")),
        )
    if t == "discard":
        return DiscardRecord(player=player, card=_parse_card(data.get("card")))
    raise MoveFormatError(f"Unknown record type: {t!r}")


def _parse_rules(raw: object) -> RulesConfig:
    if raw is None:
        return RulesConfig()
    if not isinstance(raw, Mapping):
        raise MoveFormatError("rules must be an object")
    known = {f.name for f in dataclasses.fields(RulesConfig)}
    values: dict[str, int] = {}
    for key in raw:
        if key not in known:
            raise MoveFormatError(f"Unknown rule: {key!r}")
        values[key] = _require_int(raw, key)
    return RulesConfig(**values)


def _parse_played(raw: Mapping[str, object]) -> dict[Color, int]:
    played: dict[Color, int] = {}
    for color in raw:
        if color not in COLORS:
            raise MoveFormatError(f"Unknown color: {color!r}")
        top = _require_int(raw, color)
        if not 0 <= top <= MAX_NUMBER:
            raise MoveFormatError(f"Ladder for {color} out of range: {top}")
        played[color] = top  # type: ignore[index]
    return played


def _parse_given_hints(raw: Mapping[str, object]) -> dict[UUID, list[HintFact]]:
    out: dict[UUID, list[HintFact]] = {}
    for cid in raw:
        facts = _require_list(raw, cid)
        out[_parse_uuid(cid, "given_hints")] = [_parse_fact(f) for f in facts]
    return out


def _parse_names(raw: object) -> list[str]:
    if not isinstance(raw, list) or not all(isinstance(n, str) for n in raw):
        raise MoveFormatError("player_names must be a list of strings")
    return list(raw)


def state_from_snapshot(data: Mapping[str, object], config: RulesConfig | None = None) -> GameState:
    """Rebuild a GameState from `snapshot` output.

    Rules come from the snapshot's "rules" block unless `config` overrides
    them; snapshots without one restore with the default rules.
    """
    hands: list[list[Card]] = []
    for hand in _require_list(data, "hands"):
        if not isinstance(hand, list):
            raise MoveFormatError("each hand must be a list")
        hands.append([_parse_card(c) for c in hand])

    seed = data.get("seed")
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise MoveFormatError("seed must be an int or null")

    return GameState(
        config=config or _parse_rules(data.get("rules")),
        seed=seed,
        hands=hands,
        deck=[_parse_card(c) for c in _require_list(data, "deck")],
        hints=_require_int(data, "hints"),
        fuses=_require_int(data, "fuses"),
        player_names=_parse_names(data.get("player_names", [])),
        discard=[_parse_card(c) for c in _require_list(data, "discard")],
        played=_parse_played(_require_mapping(data, "played")),
        given_hints=_parse_given_hints(_require_mapping(data, "given_hints")),
        turn=_require_int(data, "turn"),
        endgame_turns=_require_int(data, "endgame_turns"),
        moves=[_record_from_dict(_as_mapping(r)) for r in _require_list(data, "moves")],
    )