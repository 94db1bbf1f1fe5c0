"""Saving and loading boards, application preferences and daily date refresh."""

from __future__ import annotations

import datetime
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from bankan.calendars import current_date_string, system_language
from bankan.model import DATA_TYPE_NORMAL, Board, Item
from bankan.tags import Tag

SAVE_FILE_KEY = "saveFileURI"
DEFAULT_FILE_NAME = "bankan_board.json"


class Preferences:
    """Named settings kept in memory and, when a path is given, in a JSON file."""

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self._values: dict[str, Any] = {}
        if self.path is not None and self.path.is_file():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                loaded = {}
            if isinstance(loaded, dict):
                self._values = loaded

    def get(self, key: str, default: Any = None) -> Any:
        """Value stored under a key, or the default."""
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a value and write the file if there is one."""
        self._values[key] = value
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        handle, temporary = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(handle, "w", encoding="utf-8") as stream:
                json.dump(self._values, stream, ensure_ascii=False, indent=2)
            os.replace(temporary, self.path)
        except BaseException:
            Path(temporary).unlink(missing_ok=True)
            raise


def load_board(board: Board, path: str | os.PathLike[str]) -> None:
    """Replace the board with the contents of a JSON file.

    The board is cleared once the file has been read, so a file that does not
    parse leaves it empty.
    """
    data = Path(path).read_bytes()
    board.clear()
    board.load(data)


def save_board(board: Board, path: str | os.PathLike[str]) -> None:
    """Write the board as JSON to a file."""
    Path(path).write_bytes(board.data())


def update_date_items(
    board: Board,
    today: datetime.date | None = None,
    lang: str | None = None,
) -> list[Item]:
    """Refresh the titles and date tags of calendar items; return the items touched."""
    today = datetime.date.today() if today is None else today
    lang = system_language() if lang is None else lang
    updated = []
    for stage in board.stages:
        for item in stage.items:
            if item.data_type in (DATA_TYPE_NORMAL, ""):
                continue
            date_string = current_date_string(item.data_type, today, lang)
            if date_string:
                item.title = date_string
            prefix = item.data_type + "="
            if any(tag.expression.startswith(prefix) for tag in item.tags):
                item.tags = [
                    Tag(prefix + date_string) if tag.expression.startswith(prefix) else tag
                    for tag in item.tags
                ]
            updated.append(item)
    return updated


def seconds_until_midnight(now: datetime.datetime) -> float:
    """Seconds from a moment to the start of the following day."""
    next_day = now.date() + datetime.timedelta(days=1)
    midnight = datetime.datetime.combine(next_day, datetime.time(0), tzinfo=now.tzinfo)
    return (midnight - now).total_seconds()