"""Launcher configuration: TOML parsing, validation and defaults."""

from __future__ import annotations

import enum
import logging
import os
import stat
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1

DEFAULT_MAX_SESSIONS = 5
DEFAULT_POLL_INTERVAL_SECONDS = 60


class ConfigError(ValueError):
    """Raised when a configuration document is malformed or invalid."""


class CapabilityMode(enum.Enum):
    ALLOWLIST = "allowlist"
    DENYLIST = "denylist"


class TelemetryDetail(enum.Enum):
    FULL = "full"
    SUMMARY = "summary"


@dataclass
class GlobalConfig:
    launcher_id: str
    data_dir: str = ""


@dataclass
class HomeserverConfig:
    url: str
    username: str
    password: str


@dataclass
class CapabilitiesConfig:
    mode: CapabilityMode = CapabilityMode.ALLOWLIST
    allowed_commands: list[str] = field(default_factory=list)
    allowed_cwd_prefixes: list[str] = field(default_factory=list)
    max_sessions: int = DEFAULT_MAX_SESSIONS


@dataclass
class TelemetryConfig:
    detail_level: TelemetryDetail = TelemetryDetail.FULL
    poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS


@dataclass
class LauncherConfig:
    global_: GlobalConfig
    homeservers: list[HomeserverConfig] = field(default_factory=list)
    capabilities: CapabilitiesConfig = field(default_factory=CapabilitiesConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)


def _table(data: Any, name: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigError(f"{name}: expected a table")
    return data


def _string(table: dict[str, Any], key: str, *, default: str | None = None) -> str:
    if key not in table:
        if default is None:
            raise ConfigError(f"missing field `{key}`")
        return default
    value = table[key]
    if not isinstance(value, str):
        raise ConfigError(f"{key}: expected a string")
    return value


def _string_list(table: dict[str, Any], key: str) -> list[str]:
    value = table.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key}: expected a list of strings")
    return list(value)


def _unsigned(table: dict[str, Any], key: str, default: int, maximum: int) -> int:
    value = table.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key}: expected an integer")
    if not 0 <= value <= maximum:
        raise ConfigError(f"{key}: value {value} out of range")
    return value


def _enum(table: dict[str, Any], key: str, kind: type[enum.Enum], default: enum.Enum):
    if key not in table:
        return default
    value = table[key]
    try:
        return kind(value)
    except ValueError:
        choices = ", ".join(member.value for member in kind)
        raise ConfigError(f"{key}: unknown variant {value!r}, expected one of {choices}") from None


def _global_from_dict(data: Any) -> GlobalConfig:
    table = _table(data, "global")
    launcher_id = _string(table, "launcher_id")
    if not launcher_id:
        raise ConfigError("launcher_id: value must not be empty")
    return GlobalConfig(launcher_id=launcher_id, data_dir=_string(table, "data_dir", default=""))


def _homeserver_from_dict(data: Any) -> HomeserverConfig:
    table = _table(data, "homeservers")
    return HomeserverConfig(
        url=_string(table, "url"),
        username=_string(table, "username"),
        password=_string(table, "password"),
    )


def _capabilities_from_dict(data: Any) -> CapabilitiesConfig:
    table = _table(data, "capabilities")
    return CapabilitiesConfig(
        mode=_enum(table, "mode", CapabilityMode, CapabilityMode.ALLOWLIST),
        allowed_commands=_string_list(table, "allowed_commands"),
        allowed_cwd_prefixes=_string_list(table, "allowed_cwd_prefixes"),
        max_sessions=_unsigned(table, "max_sessions", DEFAULT_MAX_SESSIONS, _U32_MAX),
    )


def _telemetry_from_dict(data: Any) -> TelemetryConfig:
    table = _table(data, "telemetry")
    return TelemetryConfig(
        detail_level=_enum(table, "detail_level", TelemetryDetail, TelemetryDetail.FULL),
        poll_interval_seconds=_unsigned(
            table, "poll_interval_seconds", DEFAULT_POLL_INTERVAL_SECONDS, _U64_MAX
        ),
    )


def config_from_dict(data: Any) -> LauncherConfig:
    """Build a validated LauncherConfig from a parsed document."""
    table = _table(data, "config")
    if "global" not in table:
        raise ConfigError("missing field `global`")
    homeservers = table.get("homeservers", [])
    if not isinstance(homeservers, list):
        raise ConfigError("homeservers: expected an array of tables")
    return LauncherConfig(
        global_=_global_from_dict(table["global"]),
        homeservers=[_homeserver_from_dict(hs) for hs in homeservers],
        capabilities=_capabilities_from_dict(table.get("capabilities", {})),
        telemetry=_telemetry_from_dict(table.get("telemetry", {})),
    )


def parse_config(text: str) -> LauncherConfig:
    """Parse TOML text into a LauncherConfig."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML: {exc}") from exc
    return config_from_dict(data)


def load_config(path: str | os.PathLike[str]) -> LauncherConfig:
    """Read and parse the TOML config file at ``path``."""
    return parse_config(Path(path).read_text(encoding="utf-8"))


def validate_config_permissions(path: str | os.PathLike[str]) -> None:
    """Warn if the config file is accessible by group or others (0600 recommended)."""
    mode = stat.S_IMODE(os.stat(path).st_mode)
    if mode & 0o077:
        logger.warning(
            "Config file %s (mode %04o) is readable by group or others. "
            "Recommended: chmod 0600",
            os.fspath(path),
            mode & 0o777,
        )