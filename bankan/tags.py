"""Tags that categorise items, either plain words or ``name=value`` expressions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

SEPARATOR = ";"


@dataclass(frozen=True)
class Tag:
    """A single tag attached to an item."""

    expression: str

    def display_string(self) -> str:
        """Return the tag as shown on screen: ``name: value`` or just the word."""
        name, found, value = self.expression.partition("=")
        return f"{name}: {value}" if found else name


def parse_tag_edit_string(text: str) -> list[Tag]:
    """Split a ``;``-separated edit string into tags, dropping empty entries."""
    if not text:
        return []
    return [Tag(part) for part in (p.strip() for p in text.split(SEPARATOR)) if part]


def compose_tag_edit_string(tags: Iterable[Tag]) -> str:
    """Join tags into the edit string form, each followed by ``"; "``."""
    return "".join(f"{tag.expression}{SEPARATOR} " for tag in tags)