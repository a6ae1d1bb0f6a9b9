from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def default_home_dir() -> Path:
    return Path.home() / ".locatorheal"


@dataclass(frozen=True, slots=True)
class HealerSettings:
    find_timeout_ms: int = 5000
    strategy_timeout_ms: int = 2000
    probe_timeout_ms: int = 1000
    revalidate_cached: bool = False
    log_level: str = "INFO"
    log_dir: Path = field(default_factory=default_home_dir)

    def __post_init__(self) -> None:
        for name in ("find_timeout_ms", "strategy_timeout_ms", "probe_timeout_ms"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be a positive integer.")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(sorted(_LOG_LEVELS))}.")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> HealerSettings:
        env = os.environ if environ is None else environ
        defaults = cls()
        log_dir_raw = env.get("LOCATORHEAL_LOG_DIR", "").strip()
        return cls(
            find_timeout_ms=_read_positive_int(env, "LOCATORHEAL_FIND_TIMEOUT_MS", defaults.find_timeout_ms),
            strategy_timeout_ms=_read_positive_int(
                env, "LOCATORHEAL_STRATEGY_TIMEOUT_MS", defaults.strategy_timeout_ms
            ),
            probe_timeout_ms=_read_positive_int(env, "LOCATORHEAL_PROBE_TIMEOUT_MS", defaults.probe_timeout_ms),
            revalidate_cached=_read_bool(env, "LOCATORHEAL_REVALIDATE_CACHED", defaults.revalidate_cached),
            log_level=(env.get("LOG_LEVEL", "").strip() or defaults.log_level).upper(),
            log_dir=Path(log_dir_raw).expanduser() if log_dir_raw else defaults.log_dir,
        )


def _read_positive_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = str(env.get(key, "")).strip()
    if not raw:
        return default
    if not raw.isdigit() or int(raw) <= 0:
        raise ValueError(f"{key} must be a positive integer.")
    return int(raw)


def _read_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = str(env.get(key, "")).strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{key} must be a boolean (true/false).")
