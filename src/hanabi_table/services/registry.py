"""In-memory registry of running games.

One lock guards the id -> entry map; each entry carries its own lock so moves
on different games never contend. Every mutation is clone-and-replace: the
engine returns a fresh GameState and the entry swaps it in under its lock.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field

from hanabi_table.engine.actions import Move
from hanabi_table.engine.match import GameState, StepResult, apply, join, new_game
from hanabi_table.engine.serialize import move_to_dict, snapshot
from hanabi_table.engine.types import RulesConfig

from .telemetry import TelemetryService

logger = logging.getLogger(__name__)


class RegistryError(RuntimeError):
    pass


class UnknownGameError(RegistryError):
    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        super().__init__(f"No such game: {game_id}")


class GameExistsError(RegistryError):
    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        super().__init__(f"Game already exists: {game_id}")


@dataclass
class _Entry:
    state: GameState
    lock: threading.Lock = field(default_factory=threading.Lock)


class GameRegistry:
    def __init__(
        self,
        config: RulesConfig | None = None,
        telemetry: TelemetryService | None = None,
    ) -> None:
        self._config = config or RulesConfig()
        self._telemetry = telemetry
        self._games: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def _emit(self, game_id: str, event_type: str, payload: dict[str, object]) -> None:
        # Callers hold the entry lock so events land in apply order.
        if self._telemetry is not None:
            self._telemetry.log(game_id, event_type, payload)

    def _entry(self, game_id: str) -> _Entry:
        with self._lock:
            entry = self._games.get(game_id)
        if entry is None:
            raise UnknownGameError(game_id)
        return entry

    def create(self, num_players: int, game_id: str | None = None, seed: int | None = None) -> str:
        # Build outside the map lock; a bad player count raises ValueError here.
        state = new_game(num_players, seed=seed, config=self._config)
        gid = game_id or uuid.uuid4().hex
        entry = _Entry(state=state)
        with entry.lock:
            with self._lock:
                if gid in self._games:
                    raise GameExistsError(gid)
                self._games[gid] = entry
            self._emit(gid, "game_created", {"players": num_players, "seed": state.seed})
        logger.info("Created game %s for %d players (seed=%s)", gid, num_players, state.seed)
        return gid

    def remove(self, game_id: str) -> None:
        with self._lock:
            if self._games.pop(game_id, None) is None:
                raise UnknownGameError(game_id)
        logger.info("Removed game %s", game_id)

    def game_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._games)

    def state(self, game_id: str) -> GameState:
        """Current state of `game_id`. Treat it as read-only."""
        entry = self._entry(game_id)
        with entry.lock:
            return entry.state

    def snapshot(self, game_id: str) -> dict[str, object]:
        entry = self._entry(game_id)
        with entry.lock:
            return snapshot(entry.state)

    def join(self, game_id: str, name: str) -> int | None:
        """Seat `name` in `game_id`; returns the seat index, or None if the table is full."""
        entry = self._entry(game_id)
        with entry.lock:
            entry.state = join(entry.state, name)
            names = entry.state.player_names
            seat = names.index(name) if name in names else None
            if seat is not None:
                self._emit(game_id, "player_joined", {"name": name, "seat": seat})
        if seat is None:
            logger.warning("Game %s is full; %r was not seated", game_id, name)
        return seat

    def submit(self, game_id: str, move: Move) -> StepResult:
        entry = self._entry(game_id)
        with entry.lock:
            result = apply(entry.state, move)
            if result.ok:
                entry.state = result.state
                self._emit(
                    game_id,
                    "move_applied",
                    {"move": move_to_dict(move), "move_number": len(result.state.moves)},
                )
            else:
                self._emit(
                    game_id, "move_rejected", {"move": move_to_dict(move), "reason": result.reason}
                )
        if result.ok:
            logger.debug("Game %s: applied %s", game_id, move)
        else:
            logger.info("Game %s: rejected %s (%s)", game_id, move, result.reason)
        return result
