from __future__ import annotations

"""Timer configuration: durations, limits and settings-table keys."""

import logging
from dataclasses import asdict, dataclass
from typing import Any

log = logging.getLogger(__name__)

CONFIG_SETTING_KEY = "timer_config"
SOUND_SETTING_KEY = "sound_enabled"

DEFAULT_FOCUS_MIN = 25
DEFAULT_SHORT_BREAK_MIN = 5
DEFAULT_LONG_BREAK_MIN = 15
DEFAULT_INTERVALS = 4

# Input bounds offered by the timer window.
FOCUS_MIN_RANGE = (1, 120)
BREAK_MIN_RANGE = (1, 60)
INTERVALS_RANGE = (1, 10)


class ConfigError(ValueError):
    """Raised when a timer configuration cannot be used."""


@dataclass(frozen=True)
class SessionConfig:
    focus_duration_sec: int = DEFAULT_FOCUS_MIN * 60
    short_break_duration_sec: int = DEFAULT_SHORT_BREAK_MIN * 60
    long_break_duration_sec: int = DEFAULT_LONG_BREAK_MIN * 60
    intervals_before_long_break: int = DEFAULT_INTERVALS

    @classmethod
    def from_minutes(cls, focus: int, short_break: int, long_break: int, intervals: int) -> SessionConfig:
        config = cls(
            focus_duration_sec=int(focus) * 60,
            short_break_duration_sec=int(short_break) * 60,
            long_break_duration_sec=int(long_break) * 60,
            intervals_before_long_break=int(intervals),
        )
        return config.validate()

    def validate(self) -> SessionConfig:
        for name in ("focus_duration_sec", "short_break_duration_sec", "long_break_duration_sec"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.intervals_before_long_break, int) or self.intervals_before_long_break < 1:
            raise ConfigError(
                f"intervals_before_long_break must be at least 1, got {self.intervals_before_long_break!r}"
            )
        return self

    def to_minutes(self) -> dict[str, int]:
        return {
            "focus": self.focus_duration_sec // 60,
            "short_break": self.short_break_duration_sec // 60,
            "long_break": self.long_break_duration_sec // 60,
            "intervals": self.intervals_before_long_break,
        }

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def config_from_setting(raw: Any) -> SessionConfig:
    """Builds a config from a stored `timer_config` value, falling back to defaults."""
    if raw is None:
        return SessionConfig()
    if not isinstance(raw, dict):
        log.warning("Stored timer config is not a mapping (%r), using defaults", raw)
        return SessionConfig()
    try:
        return SessionConfig.from_minutes(
            raw.get("focus", DEFAULT_FOCUS_MIN),
            raw.get("short_break", DEFAULT_SHORT_BREAK_MIN),
            raw.get("long_break", DEFAULT_LONG_BREAK_MIN),
            raw.get("intervals", DEFAULT_INTERVALS),
        )
    except (ConfigError, TypeError, ValueError):
        log.warning("Stored timer config %r is invalid, using defaults", raw, exc_info=True)
        return SessionConfig()
