"""Static configuration shared by every reconciliation call."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping

from .normalization import BUILTIN_CONVERTERS

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(RuntimeError):
    """Raised when a reconciliation configuration cannot be built."""


def _env_flag(name: str) -> bool | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class ReconciliationConfig:
    """Field mapping, converters and the debug switch.

    Built once and reused across calls; the tables are frozen copies of what
    the caller passed in.
    """

    field_mapping: Mapping[str, str] = field(default_factory=dict)
    type_converters: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)
    debug: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "field_mapping", MappingProxyType(dict(self.field_mapping)))
        object.__setattr__(self, "type_converters", MappingProxyType(dict(self.type_converters)))

    @classmethod
    def from_env(cls, **kwargs: Any) -> "ReconciliationConfig":
        debug = _env_flag("RECON_DEBUG")
        if debug is not None:
            kwargs["debug"] = debug
        return cls(**kwargs)

    @classmethod
    def from_json_path(cls, path: str | Path) -> "ReconciliationConfig":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a JSON object in {path}")

        field_mapping = data.get("field_mapping", {})
        if not isinstance(field_mapping, dict) or not all(
            isinstance(key, str) and isinstance(value, str) for key, value in field_mapping.items()
        ):
            raise ConfigError("field_mapping must map field names to field names")

        converter_names = data.get("type_converters", {})
        if not isinstance(converter_names, dict):
            raise ConfigError("type_converters must map field names to converter names")

        debug = data.get("debug", False)
        if not isinstance(debug, bool):
            raise ConfigError("debug must be true or false")

        converters = {}
        for field_name, converter_name in converter_names.items():
            try:
                converters[field_name] = BUILTIN_CONVERTERS[converter_name]
            except (KeyError, TypeError) as exc:
                raise ConfigError(f"Unknown converter {converter_name!r} for field {field_name}") from exc

        return cls.from_env(
            field_mapping=field_mapping,
            type_converters=converters,
            debug=debug,
        )
