"""Headless views of the board: layout of stages, items and tags, and drag-and-drop targets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

from bankan.geometry import RGBA, Position, Rectangle, Size, round_half_up
from bankan.model import Board, Item, Stage
from bankan.tags import Tag
from bankan.wrapping import DEFAULT_PADDING, Paddings, calculate_paddings, text_block_size, wrap_text

TextMeasure = Callable[[str, float], Size]

DEFAULT_TEXT_SIZE = 14.0
DEFAULT_CAPTION_TEXT_SIZE = 11.0
DEFAULT_SUBHEADING_TEXT_SIZE = 18.0
ITEM_TOOLBAR_SIZE = Size(36.0, 36.0)
STAGE_TOOLBAR_SIZE = Size(72.0, 36.0)
MIN_TITLE_WIDTH = 200.0


def _approximate_measure(text: str, text_size: float) -> Size:
    """Rough text extent for a proportional font of the given size."""
    return Size(len(text) * text_size * 0.6, text_size * 1.3)


@dataclass(frozen=True)
class TagPlacement:
    """Where one tag label goes inside the tag block of an item."""

    position: Position
    size: Size

    @property
    def rect(self) -> Rectangle:
        return Rectangle(self.position, self.size)


def flow_tags(tag_sizes: Iterable[Size], max_width: float) -> tuple[list[TagPlacement], Size]:
    """Lay tags out left to right, starting a new line when one would overflow.

    Returns the placements, relative to the top of the block, and the block size
    (widest line, total height).
    """
    placements: list[TagPlacement] = []
    line_width = 0.0
    line_height = 0.0
    block_height = 0.0
    widest = 0.0
    for size in tag_sizes:
        if line_width > 0 and line_width + size.width > max_width:
            block_height += line_height
            line_width = 0.0
            line_height = 0.0
        placements.append(TagPlacement(Position(line_width, block_height), size))
        line_width += size.width
        widest = max(widest, line_width)
        line_height = max(line_height, size.height)
    return placements, Size(widest, block_height + line_height)


def drop_target(
    board: Board,
    stage_rects: Mapping[Stage, Rectangle],
    item_rects: Mapping[Item, Rectangle],
    item: Item,
    start: Position,
    end: Position,
) -> tuple[Stage, Item | None, bool] | None:
    """Work out where a dragged item lands.

    ``start`` and ``end`` are relative to the item, stage rectangles are in board
    coordinates and item rectangles in their stage's item area. Returns
    ``(stage, reference item or None, insert after)``, or None when the drag
    does not move the item.
    """
    own = item_rects.get(item)
    if own is None:
        return None
    item_rect = Rectangle(Position(own.top_left.x, 0.0), own.size)
    if not item_rect.contains(start) or item_rect.contains(end):
        return None

    source = board.item_stage(item)
    if source is None or source not in stage_rects:
        return None
    source_origin = stage_rects[source].top_left

    board_end = Position(
        source_origin.x + own.top_left.x + end.x,
        source_origin.y + own.top_left.y + end.y,
    )
    target_stage = next(
        (
            stage
            for stage in board.stages
            if stage in stage_rects and stage_rects[stage].contains(board_end)
        ),
        None,
    )
    if target_stage is None:
        return None

    stage_origin = stage_rects[target_stage].top_left
    stage_end = Position(board_end.x - stage_origin.x, board_end.y - stage_origin.y)
    target_item = next(
        (
            candidate
            for candidate in target_stage.items
            if candidate in item_rects and item_rects[candidate].contains(stage_end)
        ),
        None,
    )
    if target_item is None:
        return target_stage, None, False

    target_rect = item_rects[target_item]
    relative_y = stage_end.y - target_rect.top_left.y
    return target_stage, target_item, not relative_y < target_rect.size.height / 2


class ItemView:
    """Presentation state and layout of one item card."""

    def __init__(
        self,
        item: Item,
        on_tag_tapped: Callable[[Tag], None] | None = None,
        *,
        measure: TextMeasure = _approximate_measure,
        text_size: float = DEFAULT_TEXT_SIZE,
        caption_text_size: float = DEFAULT_CAPTION_TEXT_SIZE,
        padding: float = DEFAULT_PADDING,
        toolbar_size: Size = ITEM_TOOLBAR_SIZE,
    ) -> None:
        self.item = item
        self.on_tag_tapped = on_tag_tapped
        self.measure = measure
        self.text_size = text_size
        self.caption_text_size = caption_text_size
        self.padding = padding
        self.toolbar_size = toolbar_size
        _, self._title_paddings = calculate_paddings(Paddings(0.0, 0.25, 1.0, 0.0), Paddings(), padding)
        _, self._tag_paddings = calculate_paddings(
            Paddings(0.0, 1.0, 1.0, 0.5), Paddings(0.0, 0.0, 2.0, 2.0), padding
        )
        _, self._description_paddings = calculate_paddings(Paddings(0.0, 1.0, 1.0, 0.5), Paddings(), padding)
        self.size = Size()
        self.title_rect = Rectangle(Position(), Size())
        self.toolbar_rect = Rectangle(Position(), Size())
        self.tag_rects: list[Rectangle] = []
        self.description_rect = Rectangle(Position(), Size())
        self.refresh()

    def refresh(self) -> None:
        """Copy the item's current state into the view."""
        self.title = self.item.title
        self.tag_texts = [tag.display_string() for tag in self.item.tags]
        self.description = self.item.description
        self.description_visible = self.item.expanded
        self.visible = self.item.visible
        self.foreground: RGBA = self.item.style.foreground
        self.background: RGBA = self.item.style.background

    def tap_title(self) -> None:
        """Expand or collapse the description."""
        self.item.toggle_expanded()
        self.refresh()

    def tap_tag(self, index: int) -> None:
        """Report a tapped tag to the owner of the view."""
        tag = self.item.tags[index]
        if self.on_tag_tapped is not None:
            self.on_tag_tapped(tag)

    def _label_size(self, text: str, text_size: float, paddings: Paddings, wrapping: bool, width: float) -> Size:
        def measure(line: str) -> Size:
            return self.measure(line, text_size)

        lines = wrap_text(text, measure, width - paddings.horizontal, wrapping)
        return text_block_size(lines, measure, paddings)

    def _title_size(self, width: float) -> Size:
        return self._label_size(
            self.title, self.text_size, self._title_paddings, True, width - self.toolbar_size.width
        )

    def _tag_sizes(self) -> list[Size]:
        return [
            self._label_size(text, self.caption_text_size, self._tag_paddings, False, 0.0)
            for text in self.tag_texts
        ]

    def _description_size(self, width: float) -> Size:
        return self._label_size(self.description, self.text_size, self._description_paddings, True, width)

    def min_size(self, width: float | None = None) -> Size:
        """Smallest size of the card when it is ``width`` wide (default: its current width)."""
        width = self.size.width if width is None else width
        header_height = round_half_up(self._title_size(width).height)
        _, tags_block = flow_tags(self._tag_sizes(), width)
        description_height = self._description_size(width).height if self.description_visible else 0.0
        min_width = max(tags_block.width, MIN_TITLE_WIDTH + self.toolbar_size.width)
        return Size(min_width, round_half_up(header_height + tags_block.height + description_height))

    def layout(self, size: Size) -> None:
        """Place title, toolbar, tags and description inside the given size."""
        self.size = size
        header_height = round_half_up(self._title_size(size.width).height)
        toolbar_height = self.measure(self.title, self.text_size).height
        toolbar_width = self.toolbar_size.width

        self.title_rect = Rectangle(Position(), Size(size.width - toolbar_width, header_height))
        self.toolbar_rect = Rectangle(
            Position(size.width - toolbar_width, (header_height - toolbar_height) / 2),
            Size(toolbar_width, toolbar_height),
        )
        placements, block = flow_tags(self._tag_sizes(), size.width)
        self.tag_rects = [
            Rectangle(Position(p.position.x, header_height + p.position.y), p.size) for p in placements
        ]
        self.description_rect = Rectangle(
            Position(0.0, header_height + block.height),
            Size(size.width, size.height - header_height - block.height),
        )


class StageView:
    """Presentation state and layout of one stage column."""

    def __init__(
        self,
        stage: Stage,
        on_tag_tapped: Callable[[Tag], None] | None = None,
        *,
        measure: TextMeasure = _approximate_measure,
        text_size: float = DEFAULT_TEXT_SIZE,
        caption_text_size: float = DEFAULT_CAPTION_TEXT_SIZE,
        subheading_text_size: float = DEFAULT_SUBHEADING_TEXT_SIZE,
        padding: float = DEFAULT_PADDING,
        toolbar_size: Size = STAGE_TOOLBAR_SIZE,
    ) -> None:
        self.stage = stage
        self.on_tag_tapped = on_tag_tapped
        self.measure = measure
        self.text_size = text_size
        self.caption_text_size = caption_text_size
        self.subheading_text_size = subheading_text_size
        self.padding = padding
        self.toolbar_size = toolbar_size
        _, self._title_paddings = calculate_paddings(Paddings(1.0, 1.0, 1.0, 1.0), Paddings(), padding)
        self.item_views: list[ItemView] = []
        self.item_rects: dict[Item, Rectangle] = {}
        self.title_rect = Rectangle(Position(), Size())
        self.toolbar_rect = Rectangle(Position(), Size())
        self.scroll_rect = Rectangle(Position(), Size())
        self.refresh()

    def refresh(self) -> None:
        """Sync the title and item views with the stage, reusing existing views."""
        self.title = self.stage.title
        existing = {id(view.item): view for view in self.item_views}
        self.item_views = [
            existing.get(id(item))
            or ItemView(
                item,
                self.on_tag_tapped,
                measure=self.measure,
                text_size=self.text_size,
                caption_text_size=self.caption_text_size,
                padding=self.padding,
            )
            for item in self.stage.items
        ]
        for view in self.item_views:
            view.refresh()
        shown = {view.item for view in self.item_views}
        self.item_rects = {item: rect for item, rect in self.item_rects.items() if item in shown}

    def _title_size(self) -> Size:
        def measure(line: str) -> Size:
            return self.measure(line, self.subheading_text_size)

        return text_block_size(wrap_text(self.title, measure, 0.0, False), measure, self._title_paddings)

    def _visible_views(self) -> list[ItemView]:
        return [view for view in self.item_views if view.visible]

    def min_size(self) -> Size:
        """Smallest size showing the header and every visible item."""
        title = self._title_size()
        sizes = [view.min_size() for view in self._visible_views()]
        content_width = max((size.width for size in sizes), default=0.0)
        content_height = sum(size.height for size in sizes) + self.padding * max(len(sizes) - 1, 0)
        return Size(
            max(title.width + self.toolbar_size.width, content_width),
            content_height + max(title.height, self.toolbar_size.height),
        )

    def layout(self, size: Size) -> None:
        """Place header, item area and the visible items inside the given size."""
        title = self._title_size()
        toolbar = self.toolbar_size
        header_height = max(title.height, toolbar.height)
        self.title_rect = Rectangle(Position(), Size(size.width - toolbar.width - self.padding, header_height))
        self.toolbar_rect = Rectangle(
            Position(size.width - toolbar.width - self.padding, 0.0), Size(toolbar.width, header_height)
        )
        self.scroll_rect = Rectangle(
            Position(0.0, header_height + self.padding),
            Size(size.width - self.padding, size.height - header_height - 2 * self.padding),
        )

        width = self.scroll_rect.size.width
        self.item_rects = {}
        y = 0.0
        for view in self._visible_views():
            item_size = Size(width, view.min_size(width).height)
            view.layout(item_size)
            self.item_rects[view.item] = Rectangle(Position(0.0, y), item_size)
            y += item_size.height + self.padding


class BoardView:
    """Presentation state and layout of the whole board."""

    def __init__(
        self,
        board: Board,
        *,
        measure: TextMeasure = _approximate_measure,
        text_size: float = DEFAULT_TEXT_SIZE,
        caption_text_size: float = DEFAULT_CAPTION_TEXT_SIZE,
        subheading_text_size: float = DEFAULT_SUBHEADING_TEXT_SIZE,
        padding: float = DEFAULT_PADDING,
    ) -> None:
        self.board = board
        self.measure = measure
        self.text_size = text_size
        self.caption_text_size = caption_text_size
        self.subheading_text_size = subheading_text_size
        self.padding = padding
        self.size = Size()
        self.stage_views: list[StageView] = []
        self.stage_rects: dict[Stage, Rectangle] = {}
        self.refresh()

    def refresh(self) -> None:
        """Sync stage views with the board, reusing existing views."""
        existing = {id(view.stage): view for view in self.stage_views}
        self.stage_views = [
            existing.get(id(stage))
            or StageView(
                stage,
                self.board.toggle_filter_tag,
                measure=self.measure,
                text_size=self.text_size,
                caption_text_size=self.caption_text_size,
                subheading_text_size=self.subheading_text_size,
                padding=self.padding,
            )
            for stage in self.board.stages
        ]
        for view in self.stage_views:
            view.refresh()
        shown = {view.stage for view in self.stage_views}
        self.stage_rects = {stage: rect for stage, rect in self.stage_rects.items() if stage in shown}

    def min_size(self) -> Size:
        """Smallest size of the grid of equally wide stage columns."""
        count = len(self.stage_views)
        if not count:
            return Size()
        sizes = [view.min_size() for view in self.stage_views]
        cell_width = max(size.width for size in sizes)
        return Size(cell_width * count + self.padding * (count - 1), max(size.height for size in sizes))

    def layout(self, size: Size) -> None:
        """Split the width into one equal column per stage and lay each out."""
        self.size = size
        self.stage_rects = {}
        count = len(self.stage_views)
        if not count:
            return
        cell_width = (size.width - self.padding * (count - 1)) / count
        for index, view in enumerate(self.stage_views):
            rect = Rectangle(Position(index * (cell_width + self.padding), 0.0), Size(cell_width, size.height))
            self.stage_rects[view.stage] = rect
            view.layout(rect.size)

    def item_rects(self) -> dict[Item, Rectangle]:
        """Rectangles of all laid-out items, each relative to its stage's item area."""
        return {item: rect for view in self.stage_views for item, rect in view.item_rects.items()}

    def drop(self, item: Item, start: Position, end: Position) -> Item | None:
        """Finish a drag of an item; return the moved item, or None if nothing moved."""
        target = drop_target(self.board, self.stage_rects, self.item_rects(), item, start, end)
        if target is None:
            return None
        stage, reference, after = target
        moved = self.board.move_item(item, stage, reference, after)
        self.refresh()
        if self.size.width > 0:
            self.layout(self.size)
        return moved