"""The BanKan application: a command shell over a board, with saving and daily date refresh."""

from __future__ import annotations

import argparse
import dataclasses
import datetime
import shlex
import sys
import threading
from pathlib import Path
from typing import Callable, TextIO
from urllib.parse import urlparse
from urllib.request import url2pathname

from bankan.calendars import current_date_string, data_type_labels, system_language
from bankan.fontsize import FontSizeLevel, FontSizeSettings
from bankan.geometry import RGBA
from bankan.model import DATA_TYPE_NORMAL, DEFAULT_ITEM_STYLE, Board, Item, ItemStyle, Stage
from bankan.storage import (
    SAVE_FILE_KEY,
    Preferences,
    load_board,
    save_board,
    seconds_until_midnight,
    update_date_items,
)
from bankan.tags import compose_tag_edit_string, parse_tag_edit_string

WINDOW_TITLE = "BanKan"
DEFAULT_BOARD_NAME = "New Board"
DATA_TYPES = (DATA_TYPE_NORMAL, "Gregorian", "Lunar", "Tibetan")
_CALENDAR_TYPES = ("Gregorian", "Lunar", "Tibetan")
_OPTION_KEYS = ("tags", "type", "desc", "fg", "bg")
_FONT_LEVELS = {"small": FontSizeLevel.SMALL, "medium": FontSizeLevel.MEDIUM, "large": FontSizeLevel.LARGE}
_DAY_SECONDS = 24 * 60 * 60

HELP_TEXT = """\
Commands (stage and item numbers start at 1):
  show                                  print the board
  new                                   start an empty board
  open PATH                             load a board file
  save [PATH]                           save to the current file, or to PATH
  name TEXT                             rename the board
  stage add TITLE                       add a stage
  stage rename N TITLE                  rename a stage
  stage remove N                        remove a stage and its items
  item add S TITLE [options]            add an item to stage S
  item edit S I [TITLE] [options]       change an item
  item remove S I                       remove an item
  item move S I TS [TI [before|after]]  move an item to stage TS
  item toggle S I                       show or hide an item's description
  tag S I K                             toggle the K-th tag of an item in the filter
  filter [TAGS]                         filter items by tags, or clear the filter
  font [small|medium|large]             show or set the font size
  quit                                  leave
Options: tags="a; b=c" type=Normal|Gregorian|Lunar|Tibetan desc=TEXT fg=#rrggbb bg=#rrggbb"""


class CommandError(Exception):
    """A command line that cannot be carried out."""


def finalize_item_entry(
    dialog_prefix: str,
    title: str,
    tag_string: str,
    selected_type: str,
    today: datetime.date | None = None,
    lang: str | None = None,
) -> tuple[str, str]:
    """Apply the calendar type chosen for an item to its title and tag string.

    When adding, the current date of the calendar is appended to the title; the
    calendar's name is added to the tags unless it already appears there.
    """
    lang = system_language() if lang is None else lang
    if selected_type == DATA_TYPE_NORMAL:
        return title, tag_string

    if dialog_prefix == "Add":
        date_string = current_date_string(selected_type, today, lang)
        if date_string:
            title = f"{title} {date_string}" if title else date_string

    label = dict(zip(_CALENDAR_TYPES, data_type_labels(lang))).get(selected_type, "")
    if label and label not in tag_string:
        if tag_string and not tag_string.endswith(";"):
            tag_string += "; "
        tag_string += label
    return title, tag_string


def _path_from_uri(value: str) -> Path | None:
    parsed = urlparse(value)
    if parsed.scheme == "file":
        return Path(url2pathname(parsed.path))
    if not parsed.scheme or len(parsed.scheme) == 1:
        return Path(value)
    return None


def _split_options(tokens: list[str]) -> tuple[list[str], dict[str, str]]:
    words: list[str] = []
    options: dict[str, str] = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        if sep and key in _OPTION_KEYS:
            options[key] = value
        else:
            words.append(token)
    return words, options


def _number(token: str, what: str) -> int:
    try:
        value = int(token)
    except ValueError:
        raise CommandError(f"{what} must be a number, not {token!r}") from None
    if value < 1:
        raise CommandError(f"{what} must be at least 1")
    return value


def _data_type(options: dict[str, str], default: str) -> str:
    data_type = options.get("type", default)
    if data_type not in DATA_TYPES:
        raise CommandError(f"unknown type {data_type!r}; choose one of {', '.join(DATA_TYPES)}")
    return data_type


def _style(options: dict[str, str], base: ItemStyle) -> ItemStyle:
    style = base
    if "fg" in options:
        style = dataclasses.replace(style, foreground=RGBA.from_hex(options["fg"]))
    if "bg" in options:
        style = dataclasses.replace(style, background=RGBA.from_hex(options["bg"]))
    return style


def _description(options: dict[str, str], default: str) -> str:
    return options["desc"].replace("\\n", "\n") if "desc" in options else default


class BanKanApp:
    """A board with its save file, preferences and a line-oriented command shell."""

    def __init__(
        self,
        preferences: Preferences | None = None,
        *,
        lang: str | None = None,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        clock: Callable[[], datetime.date] = datetime.date.today,
    ) -> None:
        self.preferences = preferences if preferences is not None else Preferences()
        self.lang = system_language() if lang is None else lang
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.clock = clock
        self.font_size = FontSizeSettings(self.preferences)
        self.board = Board(
            DEFAULT_BOARD_NAME,
            on_change=self.auto_save,
            on_filter_changed=self._filter_changed,
        )
        self.filter_text = ""
        self.save_path: Path | None = None
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._commands: dict[str, Callable[[list[str]], None]] = {
            "help": self._cmd_help,
            "show": self._cmd_show,
            "new": self._cmd_new,
            "open": self._cmd_open,
            "save": self._cmd_save,
            "name": self._cmd_name,
            "stage": self._cmd_stage,
            "item": self._cmd_item,
            "tag": self._cmd_tag,
            "filter": self._cmd_filter,
            "font": self._cmd_font,
        }

    @property
    def title(self) -> str:
        """Window title: the program name and the current save file."""
        return WINDOW_TITLE + (f" - {self.save_path}" if self.save_path is not None else "")

    def _filter_changed(self, text: str) -> None:
        self.filter_text = text

    def _print(self, text: str) -> None:
        self.stdout.write(text + "\n")
        self.stdout.flush()

    def set_save_path(self, path: str | Path | None) -> None:
        """Remember the file the board is saved to, also in the preferences."""
        self.save_path = Path(path) if path is not None else None
        uri = self.save_path.resolve().as_uri() if self.save_path is not None else ""
        self.preferences.set(SAVE_FILE_KEY, uri)

    def restore_preferences(self) -> None:
        """Read the save file and font size from the preferences."""
        self.save_path = None
        value = self.preferences.get(SAVE_FILE_KEY, "")
        if isinstance(value, str) and value:
            self.save_path = _path_from_uri(value)
        self.font_size.restore()

    def clear_board(self) -> None:
        """Discard the board and forget the save file."""
        with self._lock:
            self.board.clear()
            self.board.name = DEFAULT_BOARD_NAME
            self.set_save_path(None)

    def load(self, path: str | Path) -> None:
        """Replace the board with a file's contents and make it the save file."""
        with self._lock:
            load_board(self.board, path)
            self.set_save_path(path)

    def save(self) -> None:
        """Save to the current save file."""
        if self.save_path is None:
            raise ValueError("no save file chosen; save to a path first")
        self.save_as(self.save_path)

    def save_as(self, path: str | Path) -> None:
        """Save to a file and make it the save file."""
        with self._lock:
            save_board(self.board, path)
            self.set_save_path(path)

    def auto_save(self) -> None:
        """Save to the current save file, if there is one."""
        if self.save_path is not None:
            save_board(self.board, self.save_path)

    def update_dates(self) -> list[Item]:
        """Refresh calendar items for today and save; return the items touched."""
        with self._lock:
            touched = update_date_items(self.board, self.clock(), self.lang)
            self.auto_save()
            return touched

    def start_date_timer(self) -> threading.Thread:
        """Refresh calendar items in the background after each coming midnight."""

        def loop() -> None:
            while not self._stop.wait(seconds_until_midnight(datetime.datetime.now())):
                try:
                    self.update_dates()
                except OSError as error:
                    self._print(f"error: {error}")
                if self._stop.wait(_DAY_SECONDS):
                    break

        thread = threading.Thread(target=loop, name="bankan-date-timer", daemon=True)
        thread.start()
        return thread

    def render(self) -> str:
        """The board as text, showing only items that pass the filter."""
        lines = [self.title, f"== {self.board.name} =="]
        if self.filter_text:
            lines.append(f"filter: {self.filter_text}")
        for stage_number, stage in enumerate(self.board.stages, 1):
            lines.append(f"[{stage_number}] {stage.title}")
            for item_number, item in enumerate(stage.items, 1):
                if not item.visible:
                    continue
                marker = "-" if item.expanded else "+"
                line = f"  {item_number}. {marker} {item.title}"
                if item.tags:
                    line += "  {" + ", ".join(tag.display_string() for tag in item.tags) + "}"
                lines.append(line)
                if item.expanded and item.description:
                    lines.extend(f"       {part}" for part in item.description.split("\n"))
        return "\n".join(lines)

    def execute(self, line: str) -> bool:
        """Carry out one command line; False once the user asks to quit."""
        try:
            tokens = shlex.split(line)
        except ValueError as error:
            self._print(f"error: {error}")
            return True
        if not tokens:
            return True
        name, args = tokens[0].lower(), tokens[1:]
        if name in ("quit", "exit"):
            return False
        command = self._commands.get(name)
        if command is None:
            self._print(f"error: unknown command: {name} (try 'help')")
            return True
        try:
            with self._lock:
                command(args)
        except (CommandError, OSError, ValueError) as error:
            self._print(f"error: {error}")
        return True

    def run(self) -> None:
        """Open the remembered board, refresh dates and read commands until quit."""
        self.restore_preferences()
        if self.save_path is not None:
            try:
                self.load(self.save_path)
            except (OSError, ValueError) as error:
                self._print(f"error: {error}")
        try:
            self.update_dates()
        except OSError as error:
            self._print(f"error: {error}")
        self._stop.clear()
        self.start_date_timer()
        try:
            self._print(self.render())
            while True:
                self.stdout.write("> ")
                self.stdout.flush()
                line = self.stdin.readline()
                if not line or not self.execute(line):
                    break
        finally:
            self._stop.set()

    def _stage(self, token: str) -> Stage:
        number = _number(token, "stage number")
        if number > len(self.board.stages):
            raise CommandError(f"there is no stage {number}")
        return self.board.stages[number - 1]

    def _item(self, stage: Stage, token: str) -> Item:
        number = _number(token, "item number")
        if number > len(stage.items):
            raise CommandError(f"stage {stage.title!r} has no item {number}")
        return stage.items[number - 1]

    def _cmd_help(self, args: list[str]) -> None:
        self._print(HELP_TEXT)

    def _cmd_show(self, args: list[str]) -> None:
        self._print(self.render())

    def _cmd_new(self, args: list[str]) -> None:
        self.clear_board()
        self._print(self.render())

    def _cmd_open(self, args: list[str]) -> None:
        if len(args) != 1:
            raise CommandError("usage: open PATH")
        self.load(args[0])
        self._print(self.render())

    def _cmd_save(self, args: list[str]) -> None:
        if len(args) > 1:
            raise CommandError("usage: save [PATH]")
        if args:
            self.save_as(args[0])
        else:
            self.save()
        self._print(f"saved to {self.save_path}")

    def _cmd_name(self, args: list[str]) -> None:
        if not args:
            raise CommandError("usage: name TEXT")
        self.board.name = " ".join(args)
        self.auto_save()

    def _cmd_stage(self, args: list[str]) -> None:
        action = args[0].lower() if args else ""
        if action == "add" and len(args) >= 2:
            self.board.append_stage(" ".join(args[1:]))
        elif action == "rename" and len(args) >= 3:
            stage = self._stage(args[1])
            stage.title = " ".join(args[2:])
            self.auto_save()
        elif action == "remove" and len(args) == 2:
            self.board.remove_stage(self._stage(args[1]))
        else:
            raise CommandError("usage: stage add TITLE | stage rename N TITLE | stage remove N")

    def _cmd_item(self, args: list[str]) -> None:
        action = args[0].lower() if args else ""
        rest = args[1:]
        if action == "add" and len(rest) >= 1:
            self._item_add(rest)
        elif action == "edit" and len(rest) >= 2:
            self._item_edit(rest)
        elif action == "remove" and len(rest) == 2:
            item = self._item(self._stage(rest[0]), rest[1])
            self.board.remove_item(item)
            self.auto_save()
        elif action == "move" and 3 <= len(rest) <= 5:
            self._item_move(rest)
        elif action == "toggle" and len(rest) == 2:
            self._item(self._stage(rest[0]), rest[1]).toggle_expanded()
        else:
            raise CommandError(
                "usage: item add|edit|remove|move|toggle ... (see 'help')"
            )

    def _item_add(self, args: list[str]) -> None:
        stage = self._stage(args[0])
        words, options = _split_options(args[1:])
        data_type = _data_type(options, DATA_TYPE_NORMAL)
        title, tag_string = finalize_item_entry(
            "New", " ".join(words), options.get("tags", ""), data_type, self.clock(), self.lang
        )
        stage.append_item(
            title,
            parse_tag_edit_string(tag_string),
            _description(options, ""),
            _style(options, DEFAULT_ITEM_STYLE),
            data_type,
        )

    def _item_edit(self, args: list[str]) -> None:
        item = self._item(self._stage(args[0]), args[1])
        words, options = _split_options(args[2:])
        data_type = _data_type(options, item.data_type or DATA_TYPE_NORMAL)
        title = " ".join(words) if words else item.title
        tag_string = options.get("tags", compose_tag_edit_string(item.tags))
        title, tag_string = finalize_item_entry(
            "Edit", title, tag_string, data_type, self.clock(), self.lang
        )
        item.title = title
        item.tags = parse_tag_edit_string(tag_string)
        item.description = _description(options, item.description)
        item.style = _style(options, item.style)
        item.data_type = data_type
        self.auto_save()

    def _item_move(self, args: list[str]) -> None:
        item = self._item(self._stage(args[0]), args[1])
        target_stage = self._stage(args[2])
        reference = self._item(target_stage, args[3]) if len(args) >= 4 else None
        after = False
        if len(args) == 5:
            where = args[4].lower()
            if where not in ("before", "after"):
                raise CommandError("position must be 'before' or 'after'")
            after = where == "after"
        if reference is item:
            return
        if self.board.move_item(item, target_stage, reference, after) is None:
            raise CommandError("the item could not be moved")

    def _cmd_tag(self, args: list[str]) -> None:
        if len(args) != 3:
            raise CommandError("usage: tag S I K")
        item = self._item(self._stage(args[0]), args[1])
        number = _number(args[2], "tag number")
        if number > len(item.tags):
            raise CommandError(f"item {item.title!r} has no tag {number}")
        self.board.toggle_filter_tag(item.tags[number - 1])

    def _cmd_filter(self, args: list[str]) -> None:
        text = " ".join(args)
        self.board.set_tag_filter(text)
        self.filter_text = text

    def _cmd_font(self, args: list[str]) -> None:
        if len(args) > 1:
            raise CommandError("usage: font [small|medium|large]")
        if args:
            level = _FONT_LEVELS.get(args[0].lower())
            if level is None:
                raise CommandError(f"unknown font size {args[0]!r}")
            self.font_size.set_level(level)
        self._print(f"font size: {self.font_size.level_name()}")


def _default_preferences_path() -> Path:
    return Path.home() / ".config" / "bankan" / "preferences.json"


def main(argv: list[str] | None = None) -> int:
    """Start the application on the command line."""
    parser = argparse.ArgumentParser(prog="bankan", description="A kanban board in the terminal.")
    parser.add_argument("board", nargs="?", help="board file to open and save to")
    parser.add_argument(
        "--preferences",
        default=str(_default_preferences_path()),
        help="file that keeps the settings",
    )
    parser.add_argument("--lang", choices=("zh", "en"), help="language of calendar texts")
    args = parser.parse_args(argv)

    app = BanKanApp(Preferences(args.preferences), lang=args.lang)
    if args.board:
        app.preferences.set(SAVE_FILE_KEY, Path(args.board).resolve().as_uri())
    app.run()
    return 0