"""Approximate conversion of Gregorian dates to the Tibetan calendar and its special days."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TibetanYearData:
    """Known layout of one Tibetan year."""

    year: int
    new_year_day: int
    month_days: tuple[int, ...]
    leap_month: int = 0
    skipped_days: tuple[int, ...] = field(default=())
    leap_days: tuple[int, ...] = field(default=())


_YEAR_DATA: dict[int, TibetanYearData] = {
    data.year: data
    for data in (
        TibetanYearData(2020, 55, (30, 30, 29, 30, 29, 30, 29, 30, 29, 30, 29, 30)),
        TibetanYearData(2021, 43, (30, 29, 30, 29, 30, 29, 30, 29, 30, 30, 29, 30)),
        TibetanYearData(2022, 32, (29, 30, 29, 30, 29, 30, 29, 30, 29, 30, 30, 29)),
        TibetanYearData(2023, 52, (30, 29, 30, 29, 30, 29, 30, 29, 30, 29, 30, 30)),
        TibetanYearData(2024, 40, (29, 30, 29, 30, 29, 30, 29, 30, 29, 30, 29, 30)),
        TibetanYearData(2025, 59, (30, 29, 30, 29, 30, 29, 30, 29, 30, 29, 30, 29, 30), 6),
        TibetanYearData(2026, 47, (29, 30, 29, 30, 29, 30, 29, 30, 29, 30, 30, 29)),
        TibetanYearData(2027, 36, (30, 29, 30, 29, 30, 29, 30, 29, 30, 29, 30, 30)),
        TibetanYearData(2028, 56, (29, 30, 29, 30, 29, 30, 29, 30, 29, 30, 29, 30), 5),
        TibetanYearData(2029, 43, (30, 29, 30, 29, 30, 29, 30, 29, 30, 29, 30, 29)),
        TibetanYearData(2030, 33, (30, 30, 29, 30, 29, 30, 29, 30, 29, 30, 29, 30)),
    )
}

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

_HAIR_CUT_INFO: dict[int, tuple[str, str]] = {
    1: ("理发凶🔴: 短命减寿", "Hair Cut: Auspicious"),
    2: ("理发凶🔴: 遇传染病", "Hair Cut: Risk of Contagious Disease"),
    3: ("理发吉: 财富增上", "Hair Cut: Sweet"),
    4: ("理发凶🔴: 低贱, 豆腐店主", "Hair Cut: Lowly, Tofu Shop Owner"),
    5: ("理发凶🔴: 易患疾病", "Hair Cut: Prone to Illness, Inauspicious"),
    6: ("理发吉: 面色红润", "Hair Cut: Rosy Complexion"),
    7: ("理发凶🔴: 易争吵", "Hair Cut: Prone to Arguments"),
    8: ("理发吉: 得长寿", "Hair Cut: Longevity"),
    9: ("理发吉: 姻缘", "Hair Cut: Meet Monks, Sharing"),
    10: ("理发凶🔴: 遇传染病", "Hair Cut: Contagious Disease"),
    11: ("理发吉: 增长智慧", "Hair Cut: Increase Wisdom"),
    12: ("理发凶🔴: 招致疾病", "Hair Cut: Attract Disease, Inauspicious"),
    13: ("理发吉: 佛慧增长", "Hair Cut: Skill Improvement"),
    14: ("理发吉: 增长财富", "Hair Cut: Growth of Things"),
    15: ("理发吉: 增长福报", "Hair Cut: Increase Merit"),
    16: ("理发凶🔴: 患病", "Hair Cut: Illness"),
    17: ("理发凶🔴: 易失明, 眼疾 han", "Hair Cut: Risk of Blindness, Eye Disease"),
    18: ("理发凶🔴: 丢失财物", "Hair Cut: Loss of Property"),
    19: ("理发吉: 增长寿命", "Hair Cut: Increase Lifespan"),
    20: ("理发凶🔴: 易挨饿", "Hair Cut: Prone to Hunger"),
    21: ("理发凶🔴: 易患眼疾, 失明", "Hair Cut: Eye Disease, Blindness"),
    22: ("理发吉: 增长财物", "Hair Cut: Increase Wealth"),
    23: ("理发凶🔴: 患麻风病等", "Hair Cut: Leprosy etc."),
    24: ("理发凶🔴: 遇口舌, 凶", "Hair Cut: Disputes, Inauspicious"),
    25: ("理发凶🔴: 得白内障", "Hair Cut: Get Cataract"),
    26: ("理发吉: 得快乐", "Hair Cut: Get Happiness"),
    27: ("理发凶🔴: 吐血, 凶", "Hair Cut: Vomit Blood, Inauspicious"),
    28: ("理发凶🔴: 易患疯癫", "Hair Cut: Prone to Madness"),
    29: ("理发凶🔴: 易患白癜风", "Hair Cut: Prone to Vitiligo"),
    30: ("理发凶🔴: 死于争斗中", "Hair Cut: Die in Conflict"),
}

_SPECIAL_DAY_INFO: dict[int, tuple[str, str]] = {
    8: ("药师佛节日/殊胜日", "Medicine Buddha Day/Auspicious Day"),
    10: ("莲师节日", "Guru Rinpoche Day"),
    15: ("阿弥陀佛节日/殊胜日", "Amitabha Buddha Day/Auspicious Day"),
    25: ("空行母节日", "Dakini Day"),
    30: ("殊胜日", "Auspicious Day"),
}


def _pick(entry: tuple[str, str] | None, lang: str) -> str:
    if entry is None:
        return ""
    return entry[0] if lang == "zh" else entry[1]


def _trunc_mod(a: int, b: int) -> int:
    """Remainder with the sign of the dividend."""
    r = abs(a) % abs(b)
    return -r if a < 0 else r


def tibetan_year_data(year: int) -> TibetanYearData | None:
    """Return the tabulated layout of a year, or None if it is not known."""
    return _YEAR_DATA.get(year)


def is_leap_year(year: int) -> bool:
    """Gregorian leap year rule."""
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def day_of_year(year: int, month: int, day: int) -> int:
    """One-based ordinal of the day within its Gregorian year."""
    lengths = list(_DAYS_IN_MONTH)
    if is_leap_year(year):
        lengths[1] = 29
    return day + sum(lengths[: month - 1])


def _year_length(year: int) -> int:
    return 366 if is_leap_year(year) else 365


def solar_to_tibetan(year: int, month: int, day: int) -> tuple[int, int, int]:
    """Convert a Gregorian date to (year, month, day) in the Tibetan calendar."""
    data = tibetan_year_data(year)
    if data is None:
        return solar_to_tibetan_approximate(year, month, day)

    ordinal = day_of_year(year, month, day)
    if ordinal >= data.new_year_day:
        tibetan_year = year
        offset = ordinal - data.new_year_day
    else:
        previous = tibetan_year_data(year - 1)
        if previous is None:
            return solar_to_tibetan_approximate(year, month, day)
        tibetan_year = year - 1
        offset = (_year_length(year - 1) - previous.new_year_day) + ordinal
        data = previous

    for index, length in enumerate(data.month_days):
        if offset < length:
            tibetan_month = index + 1
            if data.leap_month > 0 and index >= data.leap_month:
                tibetan_month = data.leap_month if index == data.leap_month else index
            return tibetan_year, tibetan_month, offset + 1
        offset -= length

    return tibetan_year, 12, 30


def _approximate_new_year_day(year: int) -> int:
    in_cycle = _trunc_mod(year - 1027, 60)
    new_year = 32 + _trunc_mod(in_cycle * 11, 30)
    if new_year > 60:
        new_year -= 30
    return new_year


def _month_and_day(offset: int) -> tuple[int, int]:
    month = offset // 30 + 1
    day = offset % 30 + 1
    if day > 30:
        month += 1
        day = 1
    if month > 12:
        month, day = 12, 30
    return month, day


def solar_to_tibetan_approximate(year: int, month: int, day: int) -> tuple[int, int, int]:
    """Rough conversion used for years without tabulated data."""
    ordinal = day_of_year(year, month, day)
    new_year = _approximate_new_year_day(year)
    if ordinal >= new_year:
        return (year, *_month_and_day(ordinal - new_year))
    previous_new_year = _approximate_new_year_day(year - 1)
    offset = (_year_length(year - 1) - previous_new_year) + ordinal
    return (year - 1, *_month_and_day(offset))


def tibetan_hair_cut_info(tibetan_day: int, lang: str) -> str:
    """Omen for cutting hair on the given Tibetan day, or ``""``."""
    return _pick(_HAIR_CUT_INFO.get(tibetan_day), lang)


def tibetan_special_day_info(tibetan_day: int, lang: str) -> str:
    """Name of the festival falling on the given Tibetan day, or ``""``."""
    return _pick(_SPECIAL_DAY_INFO.get(tibetan_day), lang)


def tibetan_special_days(date: datetime.date, lang: str) -> str:
    """Festival and hair-cut notes for a Gregorian date, joined by ``", "``."""
    _, _, tibetan_day = solar_to_tibetan(date.year, date.month, date.day)
    parts = [
        tibetan_special_day_info(tibetan_day, lang),
        tibetan_hair_cut_info(tibetan_day, lang),
    ]
    return ", ".join(part for part in parts if part)


def tibetan_info(date: datetime.date, lang: str) -> str:
    """Tibetan date string for a Gregorian date, with its special-day notes."""
    year, month, day = solar_to_tibetan(date.year, date.month, date.day)
    special = tibetan_special_days(date, lang)
    suffix = f" ({special})" if special else ""
    if lang == "zh":
        return f"{year}年{month}月{day}日{suffix}"
    return f"{year}/{month}/{day}{suffix}"