import pytest

from bankan.geometry import Position, Rectangle, Size
from bankan.model import Board
from bankan.tags import Tag
from bankan.widgets import (
    MIN_TITLE_WIDTH,
    BoardView,
    ItemView,
    StageView,
    TagPlacement,
    drop_target,
    flow_tags,
)


def measure(text, text_size):
    return Size(8.0 * len(text), text_size)


def test_flow_tags_single_line():
    sizes = [Size(10.0, 5.0), Size(20.0, 7.0)]
    placements, block = flow_tags(sizes, 100.0)
    assert placements[0].position == Position()
    assert placements[1].position == Position(sizes[0].width, 0.0)
    assert block.height == sizes[1].height
    assert block.width == sizes[0].width + sizes[1].width


def test_flow_tags_wraps_to_new_line():
    sizes = [Size(10.0, 5.0), Size(20.0, 7.0)]
    placements, block = flow_tags(sizes, 25.0)
    assert placements[1].position == Position(0.0, sizes[0].height)
    assert block.height == sizes[0].height + sizes[1].height
    assert block.width == sizes[1].width


def test_flow_tags_empty():
    placements, block = flow_tags([], 50.0)
    assert placements == []
    assert block == Size()


def test_oversized_tag_stays_on_first_line():
    placements, _ = flow_tags([Size(50.0, 5.0)], 10.0)
    assert placements == [TagPlacement(Position(), Size(50.0, 5.0))]
    assert placements[0].rect == Rectangle(Position(), Size(50.0, 5.0))


@pytest.fixture
def two_stage_setup():
    board = Board("Board")
    first = board.append_stage("First")
    second = board.append_stage("Second")
    a = first.append_item("a")
    b = first.append_item("b")
    c = second.append_item("c")
    stage_rects = {
        first: Rectangle(Position(0.0, 0.0), Size(100.0, 400.0)),
        second: Rectangle(Position(100.0, 0.0), Size(100.0, 400.0)),
    }
    item_rects = {
        a: Rectangle(Position(0.0, 0.0), Size(100.0, 50.0)),
        b: Rectangle(Position(0.0, 60.0), Size(100.0, 50.0)),
        c: Rectangle(Position(0.0, 0.0), Size(100.0, 50.0)),
    }
    return board, first, second, a, b, c, stage_rects, item_rects


def test_drop_before_target_item(two_stage_setup):
    board, _, second, a, _, c, stage_rects, item_rects = two_stage_setup
    target = drop_target(board, stage_rects, item_rects, a, Position(10.0, 10.0), Position(150.0, 10.0))
    assert target == (second, c, False)


def test_drop_after_target_item(two_stage_setup):
    board, _, second, a, _, c, stage_rects, item_rects = two_stage_setup
    target = drop_target(board, stage_rects, item_rects, a, Position(10.0, 10.0), Position(150.0, 40.0))
    assert target == (second, c, True)


def test_drop_on_empty_area_appends(two_stage_setup):
    board, _, second, a, _, _, stage_rects, item_rects = two_stage_setup
    target = drop_target(board, stage_rects, item_rects, a, Position(10.0, 10.0), Position(150.0, 300.0))
    assert target == (second, None, False)


@pytest.mark.parametrize(
    "start, end",
    [
        (Position(10.0, 10.0), Position(50.0, 20.0)),
        (Position(10.0, 80.0), Position(150.0, 10.0)),
        (Position(10.0, 10.0), Position(500.0, 10.0)),
    ],
)
def test_drop_without_target(two_stage_setup, start, end):
    board, _, _, a, _, _, stage_rects, item_rects = two_stage_setup
    assert drop_target(board, stage_rects, item_rects, a, start, end) is None


def test_drop_result_moves_item(two_stage_setup):
    board, first, second, a, _, c, stage_rects, item_rects = two_stage_setup
    stage, reference, after = drop_target(
        board, stage_rects, item_rects, a, Position(10.0, 10.0), Position(150.0, 10.0)
    )
    board.move_item(a, stage, reference, after)
    assert [item.title for item in second.items] == ["a", "c"]
    assert [item.title for item in first.items] == ["b"]


def test_board_view_reuses_stage_views():
    board = Board("Board")
    board.append_stage("One")
    view = BoardView(board, measure=measure)
    first_view = view.stage_views[0]
    board.append_stage("Two")
    view.refresh()
    assert len(view.stage_views) == len(board.stages)
    assert view.stage_views[0] is first_view
    assert [v.title for v in view.stage_views] == ["One", "Two"]


def test_board_layout_equal_columns():
    board = Board("Board")
    for title in ("One", "Two", "Three"):
        board.append_stage(title)
    view = BoardView(board, measure=measure)
    view.layout(Size(600.0, 300.0))
    rects = [view.stage_rects[stage] for stage in board.stages]
    assert len({rect.size.width for rect in rects}) == 1
    assert rects[1].top_left.x - rects[0].top_left.x - rects[0].size.width == view.padding
    assert rects[-1].top_left.x + rects[-1].size.width == pytest.approx(600.0)


def test_item_view_tag_texts_follow_item():
    board = Board()
    stage = board.append_stage("S")
    item = stage.append_item("task", [Tag("prio=high"), Tag("bug")])
    view = ItemView(item, measure=measure)
    assert view.tag_texts == ["prio: high", "bug"]
    item.tags = [Tag("done")]
    view.refresh()
    assert view.tag_texts == ["done"]


def test_tap_title_toggles_description():
    board = Board()
    item = board.append_stage("S").append_item("task", description="details")
    view = ItemView(item, measure=measure)
    assert view.description_visible is False
    view.tap_title()
    assert view.description_visible is True
    assert item.expanded is True


def test_item_min_width_without_tags():
    item = Board().append_stage("S").append_item("x")
    view = ItemView(item, measure=measure)
    assert view.min_size(300.0).width == MIN_TITLE_WIDTH + view.toolbar_size.width


def test_expanded_item_is_taller():
    item = Board().append_stage("S").append_item("x", description="line one\nline two")
    view = ItemView(item, measure=measure)
    collapsed = view.min_size(300.0).height
    view.tap_title()
    assert view.min_size(300.0).height > collapsed


def test_item_layout_fills_size():
    item = Board().append_stage("S").append_item("x", [Tag("a")], description="d")
    view = ItemView(item, measure=measure)
    size = Size(300.0, 120.0)
    view.layout(size)
    assert view.title_rect.size.width + view.toolbar_rect.size.width == size.width
    bottom = view.description_rect.top_left.y + view.description_rect.size.height
    assert bottom == size.height
    assert len(view.tag_rects) == 1
    assert view.tag_rects[0].top_left.y == view.title_rect.size.height


def test_hidden_items_not_laid_out():
    board = Board()
    stage = board.append_stage("S")
    shown = stage.append_item("shown", [Tag("x")])
    hidden = stage.append_item("hidden", [Tag("y")])
    board.set_tag_filter("x")
    view = StageView(stage, measure=measure)
    view.layout(Size(300.0, 500.0))
    assert shown in view.item_rects
    assert hidden not in view.item_rects


def test_tag_tap_toggles_board_filter():
    board = Board()
    stage = board.append_stage("S")
    tagged = stage.append_item("one", [Tag("x")])
    other = stage.append_item("two", [Tag("y")])
    view = BoardView(board, measure=measure)
    item_view = view.stage_views[0].item_views[0]
    item_view.tap_tag(0)
    assert board.filter_tags == [Tag("x")]
    assert tagged.visible is True
    assert other.visible is False


def test_board_view_drop_appends_to_other_stage():
    board = Board()
    first = board.append_stage("First")
    second = board.append_stage("Second")
    item = first.append_item("moving")
    view = BoardView(board, measure=measure)
    view.layout(Size(800.0, 400.0))
    end = Position(view.stage_rects[second].top_left.x + 10.0, 10.0)
    moved = view.drop(item, Position(1.0, 1.0), end)
    assert moved is second.items[0]
    assert moved.title == "moving"
    assert first.items == []
    assert moved in view.item_rects()