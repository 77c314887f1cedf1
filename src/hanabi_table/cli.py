from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from pathlib import Path

from hanabi_table.engine.ai import BotSpec, choose_move
from hanabi_table.engine.history import describe
from hanabi_table.paths import get_paths
from hanabi_table.services.registry import GameRegistry
from hanabi_table.services.schemas import SchemaService
from hanabi_table.services.telemetry import TelemetryService

logger = logging.getLogger("hanabi_table")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hanabi-table", description="Run a bot-played game.")
    parser.add_argument("--players", type=int, default=2, choices=range(2, 6))
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--max-moves", type=int, default=1000)
    parser.add_argument("--mistake-rate", type=float, default=0.0)
    parser.add_argument("--json", action="store_true", help="print the final snapshot as JSON")
    parser.add_argument("--telemetry", type=Path, default=None, help="JSON-lines event log path")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    paths = get_paths()
    telemetry = TelemetryService(args.telemetry) if args.telemetry else None
    registry = GameRegistry(telemetry=telemetry)
    game_id = registry.create(args.players, seed=args.seed)
    for seat in range(args.players):
        registry.join(game_id, f"bot{seat}")

    state = registry.state(game_id)
    rng = random.Random(state.seed)
    spec = BotSpec(mistake_rate=args.mistake_rate)
    for _ in range(args.max_moves):
        move = choose_move(registry.state(game_id), rng, spec)
        if move is None:
            break
        result = registry.submit(game_id, move)
        if not result.ok:
            logger.error("Bot move rejected: %s", result.error)
            return 1

    state = registry.state(game_id)
    if args.json:
        snap = registry.snapshot(game_id)
        SchemaService(paths.schema_dir).validate_snapshot(snap)
        json.dump(snap, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    for rec in state.moves:
        print(describe(rec, state.player_names))
    ladder = ", ".join(f"{c} {n}" for c, n in sorted(state.played.items()))
    status = "over" if state.is_terminal() else "unfinished"
    print(f"game {status}: fuses={state.fuses} hints={state.hints} played=[{ladder}]")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
