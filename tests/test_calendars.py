import datetime

import pytest

from bankan.calendars import (
    LunarDate,
    current_date_string,
    data_type_labels,
    lunar_fasting_day_info,
    lunar_info,
    solar_term,
    solar_term_english_name,
    solar_to_lunar,
    system_language,
    weekday_color,
    weekday_name,
)
from bankan.tibetan import tibetan_info

SOLAR_TERM_NAMES = {
    "立春", "雨水", "惊蛰", "春分", "清明", "谷雨",
    "立夏", "小满", "芒种", "夏至", "小暑", "大暑",
    "立秋", "处暑", "白露", "秋分", "寒露", "霜降",
    "立冬", "小雪", "大雪", "冬至", "小寒", "大寒",
}


def _days(year):
    day = datetime.date(year, 1, 1)
    while day.year == year:
        yield day
        day += datetime.timedelta(days=1)


@pytest.mark.parametrize(
    "environ, expected",
    [
        ({}, "zh"),
        ({"LANG": "en_US.UTF-8"}, "en"),
        ({"LANG": "zh_CN.UTF-8"}, "zh"),
        ({"LC_ALL": "de_CN"}, "zh"),
        ({"LANG": "en_US", "LC_ALL": "zh_CN"}, "en"),
        ({"LANG": "", "LC_MESSAGES": "fr_FR"}, "en"),
        ({"MUI_LANGUAGE": "Chinese"}, "zh"),
    ],
)
def test_system_language(environ, expected):
    assert system_language(environ) == expected


def test_data_type_labels():
    assert data_type_labels("zh") == ("公历", "农历", "藏历")
    assert data_type_labels("en") == ("Gregorian", "Lunar", "Tibetan")


def test_weekday_color():
    assert weekday_color(0) == "🟢"
    assert weekday_color(4) == "🔴"
    assert weekday_color(6) == "🟣"
    assert weekday_color(9) == "⚫"


def test_weekday_name():
    assert weekday_name(0, "zh") == "周一"
    assert weekday_name(6, "zh") == "周日"
    assert weekday_name(6, "en") == "Sun"
    with pytest.raises(ValueError):
        weekday_name(7, "en")


def test_solar_to_lunar_epoch():
    assert solar_to_lunar(datetime.date(1900, 1, 31)) == LunarDate(1900, 1, 1, False)


def test_solar_to_lunar_new_year_2024():
    assert solar_to_lunar(datetime.date(2024, 2, 10)) == LunarDate(2024, 1, 1, False)


def test_solar_to_lunar_leap_month():
    lunar = solar_to_lunar(datetime.datetime(2023, 3, 22, 12, 0))
    assert lunar == LunarDate(2023, 2, 1, True)
    assert lunar.leap_str == "闰"


def test_solar_to_lunar_before_range():
    with pytest.raises(ValueError):
        solar_to_lunar(datetime.date(1900, 1, 30))


def test_lunar_days_advance_consistently():
    previous = None
    for day in _days(2023):
        lunar = solar_to_lunar(day)
        assert 1 <= lunar.day <= 30
        assert 1 <= lunar.month <= 12
        if previous is not None:
            if lunar.day == 1:
                assert previous.day in (29, 30)
            else:
                assert (lunar.year, lunar.month, lunar.is_leap) == (
                    previous.year,
                    previous.month,
                    previous.is_leap,
                )
                assert lunar.day == previous.day + 1
        previous = lunar


def test_day_names_are_distinct():
    names = {LunarDate(2024, 1, d).day_name for d in range(1, 31)}
    assert len(names) == 30


def test_solar_term_winter_solstice():
    assert solar_term(datetime.date(2024, 12, 21)) == "冬至"


def test_each_solar_term_once_a_year():
    terms = [solar_term(day) for day in _days(2024)]
    found = [term for term in terms if term]
    assert len(found) == 24
    assert set(found) == SOLAR_TERM_NAMES


def test_solar_term_english_name():
    assert solar_term_english_name("立春") == "Beginning of Spring"
    assert solar_term_english_name("霜降") == "Frost's Descent"
    assert solar_term_english_name("unknown") == "unknown"


@pytest.mark.parametrize(
    "day, zh, en",
    [
        (1, "十斋日", "Ten Fasting Days"),
        (8, "六斋日/十斋日", "Six/Ten Fasting Days"),
        (24, "十斋日", "Ten Fasting Days"),
        (30, "六斋日/十斋日", "Six/Ten Fasting Days"),
        (2, "", ""),
    ],
)
def test_lunar_fasting_day_info(day, zh, en):
    assert lunar_fasting_day_info(day, "zh") == zh
    assert lunar_fasting_day_info(day, "en") == en


def test_lunar_info_out_of_range_falls_back():
    assert lunar_info(datetime.date(1899, 12, 1), "en") == "1899/12/1"
    assert lunar_info(datetime.date(1899, 12, 1), "zh") == "1899年12月1日"


def test_lunar_info_english_matches_conversion():
    for day in _days(2024):
        lunar = solar_to_lunar(day)
        text = lunar_info(day, "en")
        if lunar.is_leap:
            assert text.startswith(f"{lunar.year}/Leap{lunar.month}/{lunar.day}")
        else:
            assert text.startswith(f"{lunar.year}/{lunar.month}/{lunar.day}")


def test_lunar_info_includes_fasting_note():
    text = lunar_info(datetime.date(2024, 2, 10), "zh")
    assert text.startswith("2024年")
    assert text.endswith("十斋日)")


def test_lunar_info_includes_solar_term_in_english():
    text = lunar_info(datetime.date(2024, 12, 21), "en")
    assert "(Winter Solstice" in text


def test_current_date_string_gregorian():
    monday = datetime.date(2024, 1, 1)
    assert current_date_string("Gregorian", monday, "en") == "2024-01-01 🟢 Mon"
    assert current_date_string("Gregorian", monday, "zh") == "2024年01月01日 🟢 周一"


def test_current_date_string_other_calendars():
    day = datetime.date(2025, 6, 15)
    assert current_date_string("Lunar", day, "en") == lunar_info(day, "en")
    assert current_date_string("Tibetan", day, "zh") == tibetan_info(day, "zh")
    assert current_date_string("Normal", day, "en") == ""