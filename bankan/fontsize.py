"""Three-step font size setting, persisted in the application preferences."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Protocol

PREFERENCE_KEY = "fontSizeLevel"


class FontSizeLevel(IntEnum):
    """The available font size steps."""

    SMALL = 0
    MEDIUM = 1
    LARGE = 2


_SCALE = {
    FontSizeLevel.SMALL: 1.0,
    FontSizeLevel.MEDIUM: 1.2,
    FontSizeLevel.LARGE: 1.4,
}

_NAMES = {
    FontSizeLevel.SMALL: "小",
    FontSizeLevel.MEDIUM: "中",
    FontSizeLevel.LARGE: "大",
}


class PreferenceStore(Protocol):
    """Anything that can read and write named preference values."""

    def get(self, key: str, default: Any) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class _MemoryPreferences:
    """Preference store kept only in memory."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value


def _as_level(value: Any) -> FontSizeLevel | None:
    if isinstance(value, bool):
        return None
    try:
        return FontSizeLevel(value)
    except (ValueError, TypeError):
        return None


def font_size_level_name(level: Any) -> str:
    """Display name of a level; unknown levels are named like the smallest."""
    parsed = _as_level(level)
    return _NAMES[parsed if parsed is not None else FontSizeLevel.SMALL]


@dataclass
class FontSizeSettings:
    """The current font size level and where it is remembered."""

    preferences: PreferenceStore = field(default_factory=_MemoryPreferences)
    level: FontSizeLevel = FontSizeLevel.SMALL

    def set_level(self, level: Any) -> None:
        """Switch to a level and remember it; values out of range are ignored."""
        parsed = _as_level(level)
        if parsed is None:
            return
        self.level = parsed
        self.preferences.set(PREFERENCE_KEY, int(parsed))

    def restore(self) -> None:
        """Load the remembered level, keeping the current one if it is invalid."""
        parsed = _as_level(self.preferences.get(PREFERENCE_KEY, int(FontSizeLevel.SMALL)))
        if parsed is not None:
            self.level = parsed

    def scaled(self, base_size: float) -> float:
        """Scale a base text size by the factor of the current level."""
        return base_size * _SCALE[self.level]

    def level_name(self) -> str:
        """Display name of the current level."""
        return font_size_level_name(self.level)