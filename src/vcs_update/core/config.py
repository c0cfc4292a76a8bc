from __future__ import annotations

import enum
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .types import OperationKind, ScopeMode

# re-export for contract/tests
__all__ = [
    "ConfigError",
    "LoggingConfig",
    "UpdateConfig",
    "UpdateSettings",
    "load_config",
]

_E = TypeVar("_E", bound=enum.Enum)

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _expand_env_in_str(value: str, *, path: str) -> str:
    def repl(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in os.environ or os.environ[key] == "":
            raise ConfigError(f"environment variable {key!r} is not set", path=path)
        return os.environ[key]

    return _ENV_PATTERN.sub(repl, value)


def _expand_env(obj: Any, *, path: str) -> Any:
    if isinstance(obj, str):
        return _expand_env_in_str(obj, path=path)
    if isinstance(obj, list):
        return [_expand_env(v, path=f"{path}[{i}]") for i, v in enumerate(obj)]
    if isinstance(obj, dict):
        return {k: _expand_env(v, path=f"{path}.{k}" if path else str(k)) for k, v in obj.items()}
    return obj


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError("must be a mapping", path=key)
    return value


def _enum_value(enum_cls: type[_E], value: Any, *, path: str) -> _E:
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigError(f"unsupported value {value!r} (expected one of: {allowed})", path=path) from None


@dataclass(frozen=True)
class UpdateSettings:
    operation: OperationKind = OperationKind.UPDATE
    scope: ScopeMode = ScopeMode.ROOT_MEMBERSHIP
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.operation.display_name


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class UpdateConfig:
    update: UpdateSettings = field(default_factory=UpdateSettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | Path) -> UpdateConfig:
    """Load YAML config and expand ${ENV_VAR}."""

    # Local dev: allow injecting overrides from .env (do not commit it).
    load_dotenv(override=False)

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError("config file not found", path=str(config_path))

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse YAML: {e}", path=str(config_path)) from e

    if not isinstance(raw, dict):
        raise ConfigError("top level must be a YAML mapping", path=str(config_path))

    expanded = _expand_env(raw, path="")

    update_raw = _section(expanded, "update")
    name = update_raw.get("name")
    if name is not None and (not isinstance(name, str) or not name.strip()):
        raise ConfigError("must be a non-empty string", path="update.name")

    update = UpdateSettings(
        operation=_enum_value(OperationKind, update_raw.get("operation", UpdateSettings.operation.value), path="update.operation"),
        scope=_enum_value(ScopeMode, update_raw.get("scope", UpdateSettings.scope.value), path="update.scope"),
        name=name.strip() if isinstance(name, str) else None,
    )

    logging_raw = _section(expanded, "logging")
    level = str(logging_raw.get("level", LoggingConfig.level)).upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"unsupported log level {level!r}", path="logging.level")

    return UpdateConfig(update=update, logging=LoggingConfig(level=level))
