from __future__ import annotations

from dataclasses import dataclass, fields, replace
import os
from pathlib import Path
from typing import Any, Mapping

from .timer import DEFAULT_BREAK_SECONDS, DEFAULT_WORK_SECONDS

ENV_PREFIX = "PHASETIMER_"

_TRUE_TEXT = {"1", "true", "yes", "on"}
_FALSE_TEXT = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class TimerSettings:
    work_seconds: int = DEFAULT_WORK_SECONDS
    break_seconds: int = DEFAULT_BREAK_SECONDS
    tick_seconds: float = 1.0
    sound: bool = True
    notify: bool = False
    auto_continue: bool = False

    def validate(self) -> TimerSettings:
        if self.work_seconds <= 0:
            raise ValueError(f"work_seconds must be > 0, got {self.work_seconds}")
        if self.break_seconds <= 0:
            raise ValueError(f"break_seconds must be > 0, got {self.break_seconds}")
        if self.tick_seconds < 0:
            raise ValueError(f"tick_seconds must be >= 0, got {self.tick_seconds}")
        return self


def minutes_to_seconds(minutes: float) -> int:
    if minutes <= 0:
        return 0
    seconds = int(round(minutes * 60))
    return max(1, seconds)


def parse_bool(text: str, field_name: str) -> bool:
    value = text.strip().lower()
    if value in _TRUE_TEXT:
        return True
    if value in _FALSE_TEXT:
        return False
    raise ValueError(f"{field_name} must be a boolean, got {text!r}")


def load_settings(env: Mapping[str, str] | None = None, **overrides: Any) -> TimerSettings:
    """
    Build settings from PHASETIMER_* environment variables, then apply
    explicit overrides. Overrides that are None are ignored so CLI and API
    callers can pass their optional arguments straight through.
    """
    source = os.environ if env is None else env
    values: dict[str, Any] = {}

    for item in fields(TimerSettings):
        raw = source.get(ENV_PREFIX + item.name.upper())
        if raw is None:
            continue
        values[item.name] = _coerce(item.name, item.type, raw)

    for key, value in overrides.items():
        if value is None:
            continue
        if key not in {item.name for item in fields(TimerSettings)}:
            raise ValueError(f"unknown setting: {key}")
        values[key] = value

    return replace(TimerSettings(), **values).validate()


def default_db_path(env: Mapping[str, str] | None = None) -> Path:
    source = os.environ if env is None else env
    configured = source.get(ENV_PREFIX + "DB", "").strip()
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parent / "data" / "phasetimer.sqlite"


def _coerce(name: str, type_name: Any, raw: str) -> Any:
    # Annotations are strings under postponed evaluation.
    kind = type_name if isinstance(type_name, str) else getattr(type_name, "__name__", "")
    try:
        if kind == "bool":
            return parse_bool(raw, ENV_PREFIX + name.upper())
        if kind == "int":
            return int(raw.strip())
        if kind == "float":
            return float(raw.strip())
    except ValueError as exc:
        raise ValueError(f"invalid {ENV_PREFIX}{name.upper()}: {raw!r}") from exc
    return raw
