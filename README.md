# bankan

A kanban board kept in a JSON file. A board holds stages, which are its
columns. Each stage holds items. An item has a title, a description, tags
and colours, and it can be expanded to show the description.

Items can also be calendar items of type `Gregorian`, `Lunar` or
`Tibetan`. Each day their titles are updated to show the current date in
that calendar. The date comes with extra notes: the weekday marker for
Gregorian, solar terms and fasting days for the lunar calendar, and
observance days and hair-cutting omens for the Tibetan calendar.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running

```
bankan
```

This starts the board application. It reopens the board file used last
time, if there is one. Changes are saved back to that file automatically.

## Tags

Tags are entered as one string separated by semicolons. An entry such as
`Priority=High` is an expression tag and is displayed as `Priority: High`.

```python
from bankan.tags import parse_tag_edit_string, compose_tag_edit_string

tags = parse_tag_edit_string("Priority=High; urgent")
[t.display_string() for t in tags]   # ['Priority: High', 'urgent']
compose_tag_edit_string(tags)        # 'Priority=High; urgent; '
```

Setting a tag filter on a board hides every item that carries none of the
filter tags. An empty filter shows all items.

## Working with boards in code

```python
from bankan.model import Board
from bankan.storage import load_board, save_board

board = Board()
board.append_stage("To do")
board.append_stage("Done")
board.set_tag_filter("urgent")

save_board(board, "board.json")
load_board(board, "board.json")
```

## Calendars

```python
from bankan.tibetan import solar_to_tibetan, is_leap_year
from bankan.calendars import current_date_string

solar_to_tibetan(2024, 3, 1)    # (tibetan year, month, day)
```

Tibetan dates come from a year table for 2020–2030. Other years use an
approximation.