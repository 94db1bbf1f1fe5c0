"""Basic geometry and colour values used by the board views."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """A point in view coordinates."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Size:
    """A width and height in view coordinates."""

    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class Rectangle:
    """An axis-aligned rectangle given by its top-left corner and size."""

    top_left: Position
    size: Size

    def contains(self, point: Position) -> bool:
        """True if the point lies inside; the right and bottom edges are excluded."""
        return (
            self.top_left.x <= point.x < self.top_left.x + self.size.width
            and self.top_left.y <= point.y < self.top_left.y + self.size.height
        )


@dataclass(frozen=True)
class RGBA:
    """An 8-bit-per-channel colour with alpha."""

    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= 255:
                raise ValueError(f"colour component {name}={value!r} is not in 0..255")

    @classmethod
    def from_wide(cls, r: int, g: int, b: int, a: int) -> "RGBA":
        """Build a colour from 16-bit channel values by keeping the high byte."""
        return cls(*(((v >> 8) & 0xFF) for v in (r, g, b, a)))

    def to_hex(self) -> str:
        """Return the colour as ``#rrggbbaa``."""
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}{self.a:02x}"

    @classmethod
    def from_hex(cls, text: str) -> "RGBA":
        """Parse ``#rrggbb`` or ``#rrggbbaa`` (the ``#`` is optional)."""
        digits = text.strip().removeprefix("#")
        if len(digits) not in (6, 8):
            raise ValueError(f"not a hex colour: {text!r}")
        try:
            channels = [int(digits[i : i + 2], 16) for i in range(0, len(digits), 2)]
        except ValueError:
            raise ValueError(f"not a hex colour: {text!r}") from None
        return cls(*channels)


def round_half_up(value: float) -> float:
    """Add one half and truncate toward zero."""
    return float(int(value + 0.5))