from __future__ import annotations

import threading
from pathlib import Path

import pytest

from hanabi_table.engine.actions import DiscardAction, HintAction
from hanabi_table.engine.types import HintFact
from hanabi_table.services.registry import GameExistsError, GameRegistry, UnknownGameError
from hanabi_table.services.telemetry import TelemetryService


def test_create_and_snapshot() -> None:
    reg = GameRegistry()
    gid = reg.create(2, game_id="table-1", seed=3)
    assert gid == "table-1"
    assert reg.game_ids() == ["table-1"]
    snap = reg.snapshot(gid)
    assert snap["hints"] == 8
    assert len(snap["deck"]) == 40  # type: ignore[arg-type]


def test_generated_ids_are_unique() -> None:
    reg = GameRegistry()
    ids = {reg.create(2) for _ in range(20)}
    assert len(ids) == 20


def test_duplicate_id_rejected() -> None:
    reg = GameRegistry()
    reg.create(2, game_id="dup")
    with pytest.raises(GameExistsError):
        reg.create(3, game_id="dup")
    assert reg.state("dup").num_players == 2


def test_bad_player_count_creates_nothing() -> None:
    reg = GameRegistry()
    with pytest.raises(ValueError):
        reg.create(7, game_id="big")
    assert reg.game_ids() == []


def test_unknown_game() -> None:
    reg = GameRegistry()
    with pytest.raises(UnknownGameError):
        reg.snapshot("nope")
    with pytest.raises(UnknownGameError):
        reg.remove("nope")


def test_join_fills_seats_in_order() -> None:
    reg = GameRegistry()
    gid = reg.create(2)
    assert reg.join(gid, "ann") == 0
    assert reg.join(gid, "bo") == 1
    assert reg.join(gid, "ann") == 0  # already seated
    assert reg.join(gid, "cy") is None
    assert reg.state(gid).player_names == ["ann", "bo"]


def test_submit_swaps_state_only_on_accept() -> None:
    reg = GameRegistry()
    gid = reg.create(2, seed=12)
    before = reg.state(gid)

    res = reg.submit(gid, DiscardAction(player=1, card_id=before.hands[1][0].id))
    assert not res.ok
    assert reg.state(gid) is before

    res = reg.submit(gid, DiscardAction(player=0, card_id=before.hands[0][0].id))
    assert res.ok
    assert reg.state(gid) is res.state
    assert reg.state(gid).turn == 1


def test_remove() -> None:
    reg = GameRegistry()
    gid = reg.create(2)
    reg.remove(gid)
    assert reg.game_ids() == []


def test_concurrent_submits_apply_once() -> None:
    reg = GameRegistry()
    gid = reg.create(2, seed=21)
    state = reg.state(gid)
    move = DiscardAction(player=0, card_id=state.hands[0][0].id)

    results = []
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        results.append(reg.submit(gid, move))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(1 for r in results if r.ok) == 1
    assert len(reg.state(gid).moves) == 1


def test_telemetry_events(tmp_path: Path) -> None:
    telemetry = TelemetryService(tmp_path / "events.jsonl")
    reg = GameRegistry(telemetry=telemetry)
    gid = reg.create(2, seed=5)
    reg.join(gid, "ann")
    state = reg.state(gid)
    reg.submit(gid, HintAction(player=0, target=0, fact=HintFact.number_fact(1)))
    reg.submit(gid, DiscardAction(player=0, card_id=state.hands[0][0].id))

    events = telemetry.read_events()
    assert [e["type"] for e in events] == ["game_created", "player_joined", "move_rejected", "move_applied"]
    assert events[2]["payload"]["reason"] == "self_hint"  # type: ignore[index]
    assert events[3]["payload"]["move"]["type"] == "discard"  # type: ignore[index]
    assert {e["game_id"] for e in events} == {gid}
    assert [e["seq"] for e in events] == [1, 2, 3, 4]


def test_telemetry_filters_by_game(tmp_path: Path) -> None:
    telemetry = TelemetryService(tmp_path / "events.jsonl")
    reg = GameRegistry(telemetry=telemetry)
    a = reg.create(2, game_id="a")
    reg.create(3, game_id="b")
    reg.join(a, "ann")
    assert [e["type"] for e in telemetry.read_events("a")] == ["game_created", "player_joined"]
    assert [e["type"] for e in telemetry.read_events("b")] == ["game_created"]


def test_concurrent_moves_logged_in_apply_order(tmp_path: Path) -> None:
    telemetry = TelemetryService(tmp_path / "events.jsonl")
    reg = GameRegistry(telemetry=telemetry)
    gid = reg.create(4, seed=33)
    barrier = threading.Barrier(4)

    def seat(player: int) -> None:
        barrier.wait()
        # each thread keeps trying its own seat's discard until the turn comes round
        for _ in range(10_000):
            state = reg.state(gid)
            if state.turn == player and len(state.moves) < 8:
                reg.submit(gid, DiscardAction(player=player, card_id=state.hands[player][0].id))
            if len(reg.state(gid).moves) >= 8:
                return

    threads = [threading.Thread(target=seat, args=(p,)) for p in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    final = reg.state(gid)
    assert final.moves
    applied = [e for e in telemetry.read_events(gid) if e["type"] == "move_applied"]
    assert [e["payload"]["move_number"] for e in applied] == list(range(1, len(final.moves) + 1))  # type: ignore[index]
    assert [e["payload"]["move"]["player"] for e in applied] == [r.player for r in final.moves]  # type: ignore[index]
