"""Date strings for the Gregorian, Chinese lunar and Tibetan calendars."""

from __future__ import annotations

import datetime
import math
import os
from dataclasses import dataclass
from typing import Mapping

from bankan.tibetan import tibetan_info

_LANGUAGE_VARIABLES = ("LANG", "LC_ALL", "LC_MESSAGES", "LANGUAGE", "WINLANG", "MUI_LANGUAGE")
_CHINESE_MARKERS = ("Chinese", "chinese", "CN", "cn")

_WEEKDAY_COLORS = ("🟢", "🔵", "🟡", "🟠", "🔴", "⚪", "🟣")
_WEEKDAY_NAMES_ZH = ("周一", "周二", "周三", "周四", "周五", "周六", "周日")
_WEEKDAY_NAMES_EN = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# Bits 0-3: leap month (0 for none); bits 4-15: months 12..1 long (30 days);
# bit 16: the leap month is long.
_LUNAR_INFO = (
    0x04BD8, 0x04AE0, 0x0A570, 0x054D5, 0x0D260, 0x0D950, 0x16554, 0x056A0, 0x09AD0, 0x055D2,
    0x04AE0, 0x0A5B6, 0x0A4D0, 0x0D250, 0x1D255, 0x0B540, 0x0D6A0, 0x0ADA2, 0x095B0, 0x14977,
    0x04970, 0x0A4B0, 0x0B4B5, 0x06A50, 0x06D40, 0x1AB54, 0x02B60, 0x09570, 0x052F2, 0x04970,
    0x06566, 0x0D4A0, 0x0EA50, 0x16A95, 0x05AD0, 0x02B60, 0x186E3, 0x092E0, 0x1C8D7, 0x0C950,
    0x0D4A0, 0x1D8A6, 0x0B550, 0x056A0, 0x1A5B4, 0x025D0, 0x092D0, 0x0D2B2, 0x0A950, 0x0B557,
    0x06CA0, 0x0B550, 0x15355, 0x04DA0, 0x0A5B0, 0x14573, 0x052B0, 0x0A9A8, 0x0E950, 0x06AA0,
    0x0AEA6, 0x0AB50, 0x04B60, 0x0AAE4, 0x0A570, 0x05260, 0x0F263, 0x0D950, 0x05B57, 0x056A0,
    0x096D0, 0x04DD5, 0x04AD0, 0x0A4D0, 0x0D4D4, 0x0D250, 0x0D558, 0x0B540, 0x0B6A0, 0x195A6,
    0x095B0, 0x049B0, 0x0A974, 0x0A4B0, 0x0B27A, 0x06A50, 0x06D40, 0x0AF46, 0x0AB60, 0x09570,
    0x04AF5, 0x04970, 0x064B0, 0x074A3, 0x0EA50, 0x06B58, 0x05AC0, 0x0AB60, 0x096D5, 0x092E0,
    0x0C960, 0x0D954, 0x0D4A0, 0x0DA50, 0x07552, 0x056A0, 0x0ABB7, 0x025D0, 0x092D0, 0x0CAB5,
    0x0A950, 0x0B4A0, 0x0BAA4, 0x0AD50, 0x055D9, 0x04BA0, 0x0A5B0, 0x15176, 0x052B0, 0x0A930,
    0x07954, 0x06AA0, 0x0AD50, 0x05B52, 0x04B60, 0x0A6E6, 0x0A4E0, 0x0D260, 0x0EA65, 0x0D530,
    0x05AA0, 0x076A3, 0x096D0, 0x04AFB, 0x04AD0, 0x0A4D0, 0x1D0B6, 0x0D250, 0x0D520, 0x0DD45,
    0x0B5A0, 0x056D0, 0x055B2, 0x049B0, 0x0A577, 0x0A4B0, 0x0AA50, 0x1B255, 0x06D20, 0x0ADA0,
)
_LUNAR_FIRST_YEAR = 1900
_LUNAR_EPOCH = datetime.date(1900, 1, 31)

_MONTH_NAMES = ("正", "二", "三", "四", "五", "六", "七", "八", "九", "十", "冬", "腊")
_DIGITS = ("一", "二", "三", "四", "五", "六", "七", "八", "九", "十")
_DAY_PREFIXES = ("初", "十", "廿", "三")

# Solar terms in order of the sun's apparent longitude, starting at 0 degrees.
_SOLAR_TERMS = (
    "春分", "清明", "谷雨", "立夏", "小满", "芒种",
    "夏至", "小暑", "大暑", "立秋", "处暑", "白露",
    "秋分", "寒露", "霜降", "立冬", "小雪", "大雪",
    "冬至", "小寒", "大寒", "立春", "雨水", "惊蛰",
)

_SOLAR_TERM_ENGLISH = {
    "立春": "Beginning of Spring",
    "雨水": "Rain Water",
    "惊蛰": "Awakening of Insects",
    "春分": "Spring Equinox",
    "清明": "Clear and Bright",
    "谷雨": "Grain Rain",
    "立夏": "Beginning of Summer",
    "小满": "Grain Buds",
    "芒种": "Grain in Ear",
    "夏至": "Summer Solstice",
    "小暑": "Slight Heat",
    "大暑": "Great Heat",
    "立秋": "Beginning of Autumn",
    "处暑": "Stopping the Heat",
    "白露": "White Dew",
    "秋分": "Autumn Equinox",
    "寒露": "Cold Dew",
    "霜降": "Frost's Descent",
    "立冬": "Beginning of Winter",
    "小雪": "Slight Snow",
    "大雪": "Great Snow",
    "冬至": "Winter Solstice",
    "小寒": "Slight Cold",
    "大寒": "Great Cold",
}

_TEN_FASTING = ("十斋日", "Ten Fasting Days")
_SIX_TEN_FASTING = ("六斋日/十斋日", "Six/Ten Fasting Days")
_FASTING_DAYS = {
    1: _TEN_FASTING,
    8: _SIX_TEN_FASTING,
    14: _SIX_TEN_FASTING,
    15: _SIX_TEN_FASTING,
    18: _TEN_FASTING,
    23: _SIX_TEN_FASTING,
    24: _TEN_FASTING,
    28: _TEN_FASTING,
    29: _SIX_TEN_FASTING,
    30: _SIX_TEN_FASTING,
}

_BEIJING_OFFSET_DAYS = 8 / 24
_JULIAN_DAY_OF_ORDINAL_ZERO = 1721424.5


@dataclass(frozen=True)
class LunarDate:
    """A date in the Chinese lunar calendar."""

    year: int
    month: int
    day: int
    is_leap: bool = False

    @property
    def month_name(self) -> str:
        return _MONTH_NAMES[self.month - 1]

    @property
    def day_name(self) -> str:
        if self.day == 20:
            return "二十"
        if self.day == 30:
            return "三十"
        return _DAY_PREFIXES[(self.day - 1) // 10] + _DIGITS[(self.day - 1) % 10]

    @property
    def leap_str(self) -> str:
        return "闰" if self.is_leap else ""


def _as_date(value: datetime.date) -> datetime.date:
    return value.date() if isinstance(value, datetime.datetime) else value


def system_language(environ: Mapping[str, str] | None = None) -> str:
    """Guess the UI language from locale variables: ``"zh"`` or ``"en"``."""
    env = os.environ if environ is None else environ
    lang = next((env.get(name, "") for name in _LANGUAGE_VARIABLES if env.get(name, "")), "")
    if not lang:
        return "zh"
    if lang.startswith("zh") or any(marker in lang for marker in _CHINESE_MARKERS):
        return "zh"
    return "en"


def data_type_labels(lang: str) -> tuple[str, str, str]:
    """Names of the Gregorian, lunar and Tibetan calendars in a language."""
    if lang == "zh":
        return "公历", "农历", "藏历"
    return "Gregorian", "Lunar", "Tibetan"


def weekday_color(weekday: int) -> str:
    """Coloured dot for a weekday, Monday being 0."""
    if 0 <= weekday < len(_WEEKDAY_COLORS):
        return _WEEKDAY_COLORS[weekday]
    return "⚫"


def weekday_name(weekday: int, lang: str) -> str:
    """Short weekday name, Monday being 0."""
    if not 0 <= weekday < 7:
        raise ValueError(f"weekday {weekday} is not in 0..6")
    return (_WEEKDAY_NAMES_ZH if lang == "zh" else _WEEKDAY_NAMES_EN)[weekday]


def _leap_month(year: int) -> int:
    return _LUNAR_INFO[year - _LUNAR_FIRST_YEAR] & 0xF


def _leap_month_days(year: int) -> int:
    if not _leap_month(year):
        return 0
    return 30 if _LUNAR_INFO[year - _LUNAR_FIRST_YEAR] & 0x10000 else 29


def _month_days(year: int, month: int) -> int:
    return 30 if _LUNAR_INFO[year - _LUNAR_FIRST_YEAR] & (0x10000 >> month) else 29


def _year_days(year: int) -> int:
    return sum(_month_days(year, month) for month in range(1, 13)) + _leap_month_days(year)


def solar_to_lunar(date: datetime.date) -> LunarDate:
    """Convert a Gregorian date to the Chinese lunar calendar."""
    date = _as_date(date)
    offset = (date - _LUNAR_EPOCH).days
    if offset < 0:
        raise ValueError(f"{date} is before the supported lunar range")

    last_year = _LUNAR_FIRST_YEAR + len(_LUNAR_INFO) - 1
    for year in range(_LUNAR_FIRST_YEAR, last_year + 1):
        length = _year_days(year)
        if offset < length:
            break
        offset -= length
    else:
        raise ValueError(f"{date} is after the supported lunar range")

    leap = _leap_month(year)
    for month in range(1, 13):
        length = _month_days(year, month)
        if offset < length:
            return LunarDate(year, month, offset + 1, False)
        offset -= length
        if month == leap:
            length = _leap_month_days(year)
            if offset < length:
                return LunarDate(year, month, offset + 1, True)
            offset -= length
    raise ValueError(f"{date} could not be placed in lunar year {year}")


def _sun_longitude(julian_day: float) -> float:
    """Apparent ecliptic longitude of the sun in degrees, 0 <= L < 360."""
    t = (julian_day - 2451545.0) / 36525.0
    mean_longitude = 280.46646 + 36000.76983 * t + 0.0003032 * t * t
    anomaly = math.radians(357.52911 + 35999.05029 * t - 0.0001537 * t * t)
    centre = (
        (1.914602 - 0.004817 * t - 0.000014 * t * t) * math.sin(anomaly)
        + (0.019993 - 0.000101 * t) * math.sin(2 * anomaly)
        + 0.000289 * math.sin(3 * anomaly)
    )
    omega = math.radians(125.04 - 1934.136 * t)
    apparent = mean_longitude + centre - 0.00569 - 0.00478 * math.sin(omega)
    return apparent % 360.0


def solar_term(date: datetime.date) -> str:
    """Name of the solar term beginning on a date (Beijing time), or ``""``."""
    date = _as_date(date)
    start = date.toordinal() + _JULIAN_DAY_OF_ORDINAL_ZERO - _BEIJING_OFFSET_DAYS
    before = int(_sun_longitude(start) // 15)
    after = int(_sun_longitude(start + 1) // 15)
    if before == after:
        return ""
    return _SOLAR_TERMS[after % 24]


def lunar_fasting_day_info(lunar_day: int, lang: str) -> str:
    """Fasting-day note for a lunar day of the month, or ``""``."""
    entry = _FASTING_DAYS.get(lunar_day)
    if entry is None:
        return ""
    return entry[0] if lang == "zh" else entry[1]


def solar_term_english_name(name: str) -> str:
    """English name of a solar term; unknown names are returned unchanged."""
    return _SOLAR_TERM_ENGLISH.get(name, name)


def lunar_info(date: datetime.date, lang: str) -> str:
    """Lunar date string with solar term and fasting-day notes."""
    date = _as_date(date)
    try:
        lunar = solar_to_lunar(date)
    except ValueError:
        if lang == "zh":
            return f"{date.year}年{date.month}月{date.day}日"
        return f"{date.year}/{date.month}/{date.day}"

    notes = []
    term = solar_term(date)
    if term:
        notes.append(term if lang == "zh" else solar_term_english_name(term))
    fasting = lunar_fasting_day_info(lunar.day, lang)
    if fasting:
        notes.append(fasting)
    suffix = f" ({', '.join(notes)})" if notes else ""

    if lang == "zh":
        month = f"{lunar.leap_str}{lunar.month_name}月"
        return f"{lunar.year}年{month}{lunar.day_name}{suffix}"
    if lunar.is_leap:
        return f"{lunar.year}/Leap{lunar.month}/{lunar.day}{suffix}"
    return f"{lunar.year}/{lunar.month}/{lunar.day}{suffix}"


def current_date_string(
    data_type: str,
    today: datetime.date | None = None,
    lang: str | None = None,
) -> str:
    """Date string of a calendar type for a day; ``""`` for other types."""
    today = _as_date(today) if today is not None else datetime.date.today()
    lang = system_language() if lang is None else lang

    if data_type == "Gregorian":
        weekday = today.weekday()
        dot = weekday_color(weekday)
        name = weekday_name(weekday, lang)
        if lang == "zh":
            stamp = f"{today.year:04d}年{today.month:02d}月{today.day:02d}日"
        else:
            stamp = f"{today.year:04d}-{today.month:02d}-{today.day:02d}"
        return f"{stamp} {dot} {name}"
    if data_type == "Lunar":
        return lunar_info(today, lang)
    if data_type == "Tibetan":
        return tibetan_info(today, lang)
    return ""