"""Line wrapping and block measurement for text labels with paddings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from bankan.geometry import Size

Measure = Callable[[str], Size]

DEFAULT_PADDING = 4.0


@dataclass(frozen=True)
class Paddings:
    """Space kept free on each side of a label."""

    top: float = 0.0
    bottom: float = 0.0
    left: float = 0.0
    right: float = 0.0

    @property
    def horizontal(self) -> float:
        return self.left + self.right

    @property
    def vertical(self) -> float:
        return self.top + self.bottom


def calculate_paddings(
    multipliers: Paddings,
    offsets: Paddings,
    padding: float = DEFAULT_PADDING,
) -> tuple[Paddings, Paddings]:
    """Return background paddings (multiples of the theme padding) and text paddings."""
    background = Paddings(
        padding * multipliers.top,
        padding * multipliers.bottom,
        padding * multipliers.left,
        padding * multipliers.right,
    )
    text = Paddings(
        background.top + offsets.top,
        background.bottom + offsets.bottom,
        background.left + offsets.left,
        background.right + offsets.right,
    )
    return background, text


def wrap_line(line: str, measure: Measure, max_width: float) -> list[str]:
    """Break one line into pieces no wider than ``max_width``, by words and then by characters."""
    if len(line) < 2:
        return [line]
    if measure(line).width <= max_width:
        return [line]
    if measure(line[0]).width > max_width:
        return [line]

    by_words = True
    while True:
        sep = " " if by_words else ""
        parts = line.split(sep) if by_words else list(line)
        if len(parts) < 2 and by_words:
            by_words = False
            continue

        # Binary search for the longest run of parts that still fits.
        index = (len(parts) + 1) // 2
        step = 1
        upper = len(parts) - 1
        lower = 0

        while True:
            candidate = sep.join(parts[:index])
            width = measure(candidate).width

            if step > 0 and width < max_width:
                lower = index
                step = (upper - lower) // 2
                index += step
            elif step > 0 and width > max_width:
                upper = index
                step = (upper - lower + 1) // 2
                index -= step
            elif index > 0 and width <= max_width:
                rest = sep.join(parts[index:])
                return [candidate, *wrap_line(rest, measure, max_width)]
            elif index < 2 and by_words:
                by_words = False
                break
            else:
                rest = sep.join(parts[index:])
                return [candidate, *wrap_line(rest, measure, max_width)]


def wrap_text(text: str, measure: Measure, max_width: float, wrapping: bool = True) -> list[str]:
    """Split text into lines and, if wrapping is on, wrap each to ``max_width``."""
    lines = text.split("\n")
    if not wrapping:
        return lines
    return [piece for line in lines for piece in wrap_line(line, measure, max_width)]


def text_block_size(lines: Iterable[str], measure: Measure, paddings: Paddings = Paddings()) -> Size:
    """Smallest size holding the lines stacked on top of each other, plus paddings."""
    sizes = [measure(line) for line in lines]
    width = max(0.0, max((size.width for size in sizes), default=0.0))
    height = sum(size.height for size in sizes)
    return Size(width + paddings.horizontal, height + paddings.vertical)