"""The board, its stages and their items, with JSON persistence."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from bankan.geometry import RGBA
from bankan.tags import Tag, compose_tag_edit_string, parse_tag_edit_string

DATA_TYPE_NORMAL = "Normal"

_MISSING = object()

_GO_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)

ChangeCallback = Callable[[], None]


def _lookup(data: dict, name: str) -> Any:
    """Find a key exactly, or else ignoring case."""
    if name in data:
        return data[name]
    lowered = name.lower()
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return _MISSING


def _typed(data: dict, name: str, kind: type | tuple[type, ...], default: Any) -> Any:
    value = _lookup(data, name)
    if value is _MISSING or value is None:
        return default
    if isinstance(value, bool) and kind is not bool:
        raise ValueError(f"field {name!r} has the wrong type: {value!r}")
    if not isinstance(value, kind):
        raise ValueError(f"field {name!r} has the wrong type: {value!r}")
    return value


def _require_object(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object, not {type(data).__name__}")
    return data


def _color_to_dict(color: RGBA) -> dict:
    return {"R": color.r, "G": color.g, "B": color.b, "A": color.a}


def _color_from_dict(data: Any) -> RGBA:
    data = _require_object(data, "colour")
    return RGBA(*(_typed(data, channel, int, 0) for channel in ("R", "G", "B", "A")))


@dataclass(frozen=True)
class ItemStyle:
    """Text and background colour of an item."""

    foreground: RGBA
    background: RGBA

    def to_dict(self) -> dict:
        return {
            "Foreground": _color_to_dict(self.foreground),
            "Background": _color_to_dict(self.background),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ItemStyle":
        data = _require_object(data, "style")
        transparent = RGBA(0, 0, 0, 0)
        foreground = _lookup(data, "Foreground")
        background = _lookup(data, "Background")
        return cls(
            transparent if foreground in (_MISSING, None) else _color_from_dict(foreground),
            transparent if background in (_MISSING, None) else _color_from_dict(background),
        )


DEFAULT_ITEM_STYLE = ItemStyle(RGBA(0, 0, 0, 255), RGBA(192, 192, 192, 255))
_ZERO_STYLE = ItemStyle(RGBA(0, 0, 0, 0), RGBA(0, 0, 0, 0))


@dataclass(eq=False)
class Item:
    """A task card inside a stage."""

    title: str
    tags: list[Tag] = field(default_factory=list)
    description: str = ""
    style: ItemStyle = DEFAULT_ITEM_STYLE
    data_type: str = DATA_TYPE_NORMAL
    expanded: bool = False
    visible: bool = True
    on_change: ChangeCallback | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.tags = list(self.tags or [])

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def matches_filter(self, filter_tags: Iterable[Tag]) -> bool:
        """True if no filter is set or one of the filter tags is on this item."""
        filters = list(filter_tags)
        return not filters or any(tag in self.tags for tag in filters)

    def set_filter_tags(self, filter_tags: Iterable[Tag]) -> None:
        """Show or hide the item according to a tag filter."""
        self.visible = self.matches_filter(filter_tags)

    def toggle_expanded(self) -> None:
        """Show or hide the description."""
        self.expanded = not self.expanded
        self._changed()

    def to_dict(self) -> dict:
        return {
            "Title": self.title,
            "Description": self.description,
            "Tags": [{"Expression": tag.expression} for tag in self.tags],
            "Style": self.style.to_dict(),
            "Expanded": self.expanded,
            "DataType": self.data_type,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Item":
        data = _require_object(data, "item")
        tags = []
        for entry in _typed(data, "Tags", list, []):
            entry = _require_object(entry, "tag")
            tags.append(Tag(_typed(entry, "Expression", str, "")))
        style = _lookup(data, "Style")
        return cls(
            title=_typed(data, "Title", str, ""),
            tags=tags,
            description=_typed(data, "Description", str, ""),
            style=_ZERO_STYLE if style in (_MISSING, None) else ItemStyle.from_dict(style),
            data_type=_typed(data, "DataType", str, ""),
            expanded=_typed(data, "Expanded", bool, False),
        )


@dataclass(eq=False)
class Stage:
    """A column of the board holding items in order."""

    title: str
    items: list[Item] = field(default_factory=list)
    on_change: ChangeCallback | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.items = list(self.items or [])
        for item in self.items:
            item.on_change = self._changed

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def _new_item(
        self,
        title: str,
        tags: Iterable[Tag] | None,
        description: str,
        style: ItemStyle,
        data_type: str,
    ) -> Item:
        return Item(
            title=title,
            tags=list(tags or []),
            description=description,
            style=style,
            data_type=data_type,
            on_change=self._changed,
        )

    def item_index(self, item: Item) -> int:
        """Position of the item in this stage, or -1."""
        return next((i for i, candidate in enumerate(self.items) if candidate is item), -1)

    def append_item(
        self,
        title: str,
        tags: Iterable[Tag] | None = None,
        description: str = "",
        style: ItemStyle = DEFAULT_ITEM_STYLE,
        data_type: str = DATA_TYPE_NORMAL,
    ) -> Item:
        """Add a new item at the end and return it."""
        item = self._new_item(title, tags, description, style, data_type)
        self.items.append(item)
        self._changed()
        return item

    def insert_item(
        self,
        after: bool,
        reference: Item,
        title: str,
        tags: Iterable[Tag] | None = None,
        description: str = "",
        style: ItemStyle = DEFAULT_ITEM_STYLE,
        data_type: str = DATA_TYPE_NORMAL,
    ) -> Item | None:
        """Add a new item before or after a reference item; None if it is not here."""
        index = self.item_index(reference)
        if index < 0:
            return None
        if after:
            index += 1
        item = self._new_item(title, tags, description, style, data_type)
        self.items.insert(index, item)
        self._changed()
        return item

    def remove_item(self, item: Item) -> bool:
        """Remove an item; False if it is not in this stage."""
        index = self.item_index(item)
        if index < 0:
            return False
        del self.items[index]
        self._changed()
        return True

    def set_filter_tags(self, filter_tags: Iterable[Tag]) -> None:
        """Apply a tag filter to every item."""
        filters = list(filter_tags)
        for item in self.items:
            item.set_filter_tags(filters)

    def to_dict(self) -> dict:
        return {"Title": self.title, "Items": [item.to_dict() for item in self.items]}

    @classmethod
    def from_dict(cls, data: Any) -> "Stage":
        data = _require_object(data, "stage")
        return cls(
            title=_typed(data, "Title", str, ""),
            items=[Item.from_dict(entry) for entry in _typed(data, "Items", list, [])],
        )


@dataclass(eq=False)
class Board:
    """A kanban board: a named list of stages and the active tag filter."""

    name: str = "New Board"
    stages: list[Stage] = field(default_factory=list)
    filter_tags: list[Tag] = field(default_factory=list)
    on_change: ChangeCallback | None = field(default=None, repr=False)
    on_filter_changed: Callable[[str], None] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.stages = list(self.stages or [])
        for stage in self.stages:
            stage.on_change = self._changed

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def clear(self) -> None:
        """Remove all stages."""
        self.stages.clear()

    def to_dict(self) -> dict:
        return {"Name": self.name, "Stages": [stage.to_dict() for stage in self.stages]}

    def data(self) -> bytes:
        """Serialise the board to compact JSON."""
        text = json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))
        for raw, escaped in _GO_ESCAPES:
            text = text.replace(raw, escaped)
        return text.encode("utf-8")

    def load(self, data: bytes | str) -> None:
        """Replace the board contents from JSON; fields absent from it are kept."""
        parsed = _require_object(json.loads(data), "board")
        name = _typed(parsed, "Name", str, self.name)
        stages_value = _lookup(parsed, "Stages")
        if stages_value is _MISSING:
            stages = self.stages
        elif stages_value is None:
            stages = []
        elif isinstance(stages_value, list):
            stages = [Stage.from_dict(entry) for entry in stages_value]
        else:
            raise ValueError(f"field 'Stages' has the wrong type: {stages_value!r}")
        self.name = name
        self.stages = list(stages)
        for stage in self.stages:
            stage.on_change = self._changed

    def stage_index(self, stage: Stage) -> int:
        """Position of a stage on the board, or -1."""
        return next((i for i, candidate in enumerate(self.stages) if candidate is stage), -1)

    def item_stage_index(self, item: Item) -> int:
        """Position of the stage holding an item, or -1."""
        return next((i for i, stage in enumerate(self.stages) if stage.item_index(item) >= 0), -1)

    def item_stage(self, item: Item) -> Stage | None:
        """The stage holding an item, or None."""
        index = self.item_stage_index(item)
        return self.stages[index] if index >= 0 else None

    def append_stage(self, title: str) -> Stage:
        """Add a new empty stage at the end and return it."""
        stage = Stage(title, on_change=self._changed)
        self.stages.append(stage)
        self._changed()
        return stage

    def remove_stage(self, stage: Stage) -> bool:
        """Remove a stage with all its items; False if it is not on the board."""
        index = self.stage_index(stage)
        if index < 0:
            return False
        del self.stages[index]
        self._changed()
        return True

    def remove_item(self, item: Item) -> bool:
        """Remove an item from whichever stage holds it."""
        return any(stage.remove_item(item) for stage in self.stages)

    def move_item(
        self,
        item: Item,
        target_stage: Stage,
        target_item: Item | None = None,
        after: bool = False,
    ) -> Item | None:
        """Move an item next to a target item, or to the end of the target stage.

        The moved item is recreated, so it comes back collapsed. Returns the new
        item, or None if nothing was moved.
        """
        source = self.item_stage(item)
        if source is None:
            return None
        fields = (item.title, item.tags, item.description, item.style, item.data_type)
        if target_item is not None:
            moved = target_stage.insert_item(after, target_item, *fields)
            if moved is None:
                return None
        else:
            moved = target_stage.append_item(*fields)
        source.remove_item(item)
        return moved

    def apply_tag_filter(self) -> None:
        """Apply the board's tag filter to every stage."""
        for stage in self.stages:
            stage.set_filter_tags(self.filter_tags)

    def set_tag_filter(self, text: str) -> None:
        """Set the filter from a tag edit string and apply it."""
        self.filter_tags = parse_tag_edit_string(text)
        self.apply_tag_filter()

    def filter_tag_index(self, tag: Tag) -> int:
        """Position of a tag in the filter, matched by expression, or -1."""
        return next(
            (i for i, candidate in enumerate(self.filter_tags) if candidate.expression == tag.expression),
            -1,
        )

    def toggle_filter_tag(self, tag: Tag) -> None:
        """Add a tag to the filter or take it out, then report the new filter text."""
        index = self.filter_tag_index(tag)
        if index < 0:
            self.filter_tags.append(tag)
        else:
            del self.filter_tags[index]
        self.apply_tag_filter()
        if self.on_filter_changed is not None:
            self.on_filter_changed(compose_tag_edit_string(self.filter_tags))