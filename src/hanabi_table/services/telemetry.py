from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping


@dataclass
class TelemetryService:
    """Append-only JSON-lines audit trail of registry activity.

    Each line is ``{"ts", "seq", "game_id", "type", "payload"}``; ``seq``
    increases by one per event written through this instance.
    """

    path: Path
    _seq: int = field(default=0, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def log(self, game_id: str, event_type: str, payload: Mapping[str, object]) -> None:
        with self._lock:
            self._seq += 1
            rec = {
                "ts": datetime.now(tz=timezone.utc).isoformat(),
                "seq": self._seq,
                "game_id": game_id,
                "type": event_type,
                "payload": dict(payload),
            }
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def read_events(self, game_id: str | None = None) -> list[dict[str, object]]:
        if not self.path.exists():
            return []
        out: list[dict[str, object]] = []
        with self.path.open(encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                rec = json.loads(line)
                if game_id is None or rec.get("game_id") == game_id:
                    out.append(rec)
        return out
