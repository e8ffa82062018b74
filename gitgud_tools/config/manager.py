"""Configuration provider for GitGud.

Persisted values are merged over hard defaults, so a missing or partially
populated config file always yields a complete, valid Config. Updates go
through `ConfigManager.set`, which checks them against CONFIG_SCHEMA, a
Draft 7 JSON Schema.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any

from jsonschema import Draft7Validator, ValidationError

from gitgud_tools.state.store import StateKey, StateStore, read_json

DIFFICULTIES = ("easy", "medium", "hard", "adaptive")

CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "GitGud configuration",
    "type": "object",
    "properties": {
        "frequency": {
            "type": "integer",
            "minimum": 1,
            "maximum": 100,
            "description": "Requests between tasks",
        },
        "daily_skips": {
            "type": "integer",
            "minimum": 0,
            "maximum": 10,
            "description": "Max skips per day",
        },
        "difficulty": {
            "enum": list(DIFFICULTIES),
            "description": "Task difficulty",
        },
        "enabled": {
            "type": "boolean",
            "description": "Plugin active",
        },
    },
    "additionalProperties": False,
}

SETTINGS: dict[str, dict[str, Any]] = CONFIG_SCHEMA["properties"]

VALID_KEYS = list(SETTINGS)

_validator = Draft7Validator(CONFIG_SCHEMA)


@dataclass
class Config:
    """Validated settings read on every prompt."""

    frequency: int = 10
    daily_skips: int = 3
    difficulty: str = "adaptive"
    enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = Config()


@dataclass
class SetResult:
    """Outcome of a `set` call. On failure nothing was persisted."""

    success: bool
    key: str
    value: Any = None
    message: str = ""
    error: str = ""
    valid_keys: list[str] = field(default_factory=list)


def format_schema_error(error: ValidationError) -> list[str]:
    """Turn one jsonschema error into user-facing messages."""
    if error.validator == "additionalProperties":
        extra = sorted(k for k in error.instance if k not in SETTINGS)
        return [f"Unknown setting: {key}" for key in extra]

    key = error.absolute_path[0] if error.absolute_path else "config"

    if error.validator == "type":
        if error.validator_value == "boolean":
            return [f"{key} must be a boolean (true or false)"]
        if isinstance(error.instance, float):
            return [f"{key} must be a whole number"]
        if error.validator_value == "integer":
            return [f"{key} must be a number"]
        return [f"{key} must be of type {error.validator_value}"]
    if error.validator == "minimum":
        return [f"{key} must be at least {error.validator_value}"]
    if error.validator == "maximum":
        return [f"{key} must be at most {error.validator_value}"]
    if error.validator == "enum":
        return [f"{key} must be one of: {', '.join(error.validator_value)}"]
    return [f"{key}: {error.message}"]


def validate(config: dict[str, Any]) -> list[str]:
    """Validate a whole config mapping. Returns a list of error messages.

    Values must already be typed; strings are only converted on input by
    coerce_value.
    """
    errors: list[str] = []
    for error in sorted(_validator.iter_errors(config), key=lambda e: [str(p) for p in e.absolute_path]):
        errors.extend(format_schema_error(error))
    return errors


def _from_text(key: str, value: Any) -> Any:
    """Convert command-line text to the JSON type the schema expects."""
    if not isinstance(value, str):
        return value
    expected = SETTINGS[key].get("type")
    if expected == "integer":
        try:
            return int(value)
        except ValueError:
            return value
    if expected == "boolean" and value in ("true", "false"):
        return value == "true"
    return value


def coerce_value(key: str, value: Any) -> Any:
    """Convert a raw (possibly string) value for `key` and check it.

    Raises:
        KeyError: If `key` is not a known setting.
        ValueError: If the value is invalid for the setting.
    """
    if key not in SETTINGS:
        raise KeyError(key)

    converted = _from_text(key, value)
    errors = validate({key: converted})
    if errors:
        raise ValueError(errors[0])
    if isinstance(converted, float):
        converted = int(converted)
    return converted


class ConfigManager:
    """Read and update the persisted configuration."""

    def __init__(self, store: StateStore) -> None:
        self.store = store

    def _stored(self) -> dict[str, Any]:
        data = read_json(self.store, StateKey.CONFIG, {})
        return data if isinstance(data, dict) else {}

    def get(self) -> Config:
        """Return persisted values merged over defaults.

        A stored value that does not validate is ignored in favour of the
        default for that key.
        """
        merged = DEFAULT_CONFIG.to_dict()
        for key, value in self._stored().items():
            if key in SETTINGS and not validate({key: value}):
                merged[key] = int(value) if isinstance(value, float) else value
        return Config(**merged)

    def set(self, key: str, value: Any) -> SetResult:
        if key not in SETTINGS:
            return SetResult(
                success=False,
                key=key,
                error=f"Unknown setting '{key}'",
                valid_keys=list(VALID_KEYS),
            )

        try:
            coerced = coerce_value(key, value)
        except ValueError as e:
            return SetResult(success=False, key=key, error=str(e), valid_keys=list(VALID_KEYS))

        config = self.get().to_dict()
        config[key] = coerced
        self._save(config)
        return SetResult(success=True, key=key, value=coerced, message=f"{key} set to: {_display(coerced)}")

    def reset(self) -> Config:
        """Restore and persist defaults."""
        self._save(DEFAULT_CONFIG.to_dict())
        return Config()

    def _save(self, config: dict[str, Any]) -> None:
        self.store.write(StateKey.CONFIG, json.dumps(config, indent=2))


def _display(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
