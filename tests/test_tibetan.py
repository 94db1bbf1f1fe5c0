import calendar
import datetime

import pytest

from bankan.tibetan import (
    day_of_year,
    is_leap_year,
    solar_to_tibetan,
    solar_to_tibetan_approximate,
    tibetan_hair_cut_info,
    tibetan_info,
    tibetan_special_day_info,
    tibetan_special_days,
    tibetan_year_data,
)

TABLE_YEARS = range(2020, 2031)


def _days(start, end):
    current = start
    while current <= end:
        yield current
        current += datetime.timedelta(days=1)


def _new_year_date(year):
    data = tibetan_year_data(year)
    return datetime.date(year, 1, 1) + datetime.timedelta(days=data.new_year_day - 1)


def _find_day_with_tibetan_day(target):
    for d in _days(datetime.date(2024, 3, 1), datetime.date(2024, 6, 30)):
        if solar_to_tibetan(d.year, d.month, d.day)[2] == target:
            return d
    raise AssertionError("no such day found")


@pytest.mark.parametrize("year", [1900, 2000, 2023, 2024, 2100])
def test_is_leap_year_matches_calendar(year):
    assert is_leap_year(year) == calendar.isleap(year)


@pytest.mark.parametrize(
    "d", [datetime.date(2024, 1, 1), datetime.date(2024, 3, 1), datetime.date(2023, 12, 31)]
)
def test_day_of_year_matches_stdlib(d):
    assert day_of_year(d.year, d.month, d.day) == d.timetuple().tm_yday


def test_year_data_known_and_unknown():
    assert tibetan_year_data(2025).leap_month == 6
    assert tibetan_year_data(2019) is None


@pytest.mark.parametrize("year", TABLE_YEARS)
def test_new_year_day_is_first_of_first_month(year):
    d = _new_year_date(year)
    assert solar_to_tibetan(d.year, d.month, d.day) == (year, 1, 1)


@pytest.mark.parametrize("year", range(2021, 2031))
def test_day_before_new_year_belongs_to_previous_year(year):
    d = _new_year_date(year) - datetime.timedelta(days=1)
    assert solar_to_tibetan(d.year, d.month, d.day)[0] == year - 1


def test_unknown_year_uses_approximation():
    assert solar_to_tibetan(2040, 7, 4) == solar_to_tibetan_approximate(2040, 7, 4)


def test_first_table_year_before_new_year_uses_approximation():
    assert solar_to_tibetan(2020, 1, 15) == solar_to_tibetan_approximate(2020, 1, 15)


def test_leap_year_2025_months_never_decrease():
    start = _new_year_date(2025)
    months = [
        solar_to_tibetan(d.year, d.month, d.day)[1]
        for d in _days(start, datetime.date(2025, 12, 31))
    ]
    assert months == sorted(months)
    assert months.count(6) > months.count(5)


@pytest.mark.parametrize("year", [1000, 1990, 2040, 2100])
def test_approximation_stays_in_range(year):
    for d in _days(datetime.date(year, 1, 1), datetime.date(year, 12, 31)):
        ty, tm, td = solar_to_tibetan_approximate(d.year, d.month, d.day)
        assert ty in (year, year - 1)
        assert 1 <= tm <= 12
        assert 1 <= td <= 30


def test_hair_cut_info_languages():
    assert tibetan_hair_cut_info(8, "en") == "Hair Cut: Longevity"
    assert tibetan_hair_cut_info(8, "zh") == "理发吉: 得长寿"
    assert tibetan_hair_cut_info(31, "en") == ""


def test_special_day_info():
    assert tibetan_special_day_info(10, "en") == "Guru Rinpoche Day"
    assert tibetan_special_day_info(25, "zh") == "空行母节日"
    assert tibetan_special_day_info(4, "en") == ""
    assert tibetan_special_day_info(4, "zh") == ""


def test_special_days_orders_festival_before_hair_cut():
    d = _find_day_with_tibetan_day(15)
    assert (
        tibetan_special_days(d, "en")
        == "Amitabha Buddha Day/Auspicious Day, Hair Cut: Increase Merit"
    )


def test_special_days_hair_cut_only():
    d = _find_day_with_tibetan_day(3)
    assert tibetan_special_days(d, "en") == "Hair Cut: Sweet"


def test_info_english_format():
    d = _find_day_with_tibetan_day(8)
    year, month, day = solar_to_tibetan(d.year, d.month, d.day)
    assert tibetan_info(d, "en") == (
        f"{year}/{month}/{day} (Medicine Buddha Day/Auspicious Day, Hair Cut: Longevity)"
    )


def test_info_chinese_format():
    d = _find_day_with_tibetan_day(3)
    year, month, day = solar_to_tibetan(d.year, d.month, d.day)
    assert tibetan_info(d, "zh") == f"{year}年{month}月{day}日 (理发吉: 财富增上)"