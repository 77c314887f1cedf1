from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError as MetaschemaError

from hanabi_table.engine.actions import Move
from hanabi_table.engine.serialize import MoveFormatError, move_from_dict


class SchemaError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise SchemaError(f"Missing schema file: {path}") from e
    except json.JSONDecodeError as e:
        raise SchemaError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema, format_checker=Draft202012Validator.FORMAT_CHECKER)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise SchemaError("\n".join(lines))


class SchemaService:
    """Validates wire payloads against the bundled JSON schemas."""

    def __init__(self, schema_dir: Path) -> None:
        self._schema_dir = schema_dir
        self._cache: dict[str, object] = {}

    def schema(self, name: str) -> object:
        if name not in self._cache:
            path = self._schema_dir / f"{name}.schema.json"
            schema = _load_json(path)
            try:
                Draft202012Validator.check_schema(schema)
            except MetaschemaError as e:
                raise SchemaError(f"Invalid schema {path}: {e.message}") from e
            self._cache[name] = schema
        return self._cache[name]

    def parse_move(self, payload: Mapping[str, object]) -> Move:
        validate_json(payload, self.schema("move"), context="move request")
        try:
            return move_from_dict(payload)
        except MoveFormatError as e:
            raise SchemaError(f"Invalid move request: {e}") from e

    def validate_snapshot(self, data: Mapping[str, object]) -> None:
        validate_json(data, self.schema("game"), context="game snapshot")

    def validate_all(self) -> None:
        # Loading checks each schema against the metaschema
        _ = self.schema("move")
        _ = self.schema("game")
