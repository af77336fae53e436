# command_center/core/schedule.py
"""
Calendar date classifier.

Landing and FAT dates are free text ("Dec. 2025", "Mar-26", "12/16/2025",
"TBD" ...). resolve_date() tries an explicit ordered list of matchers; the
first one that produces a valid date wins. Month-name formats land on the
15th. Sentinels and garbage resolve to None, never to an exception.
"""
import calendar
import re
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

from command_center.schemas.project import Project

MONTHS = {
    "jan": 0, "feb": 1, "mar": 2, "apr": 3, "may": 4, "jun": 5,
    "jul": 6, "aug": 7, "sep": 8, "oct": 9, "nov": 10, "dec": 11,
}
SENTINELS = {"", "N/A", "TBD"}
MID_MONTH = 15

_MONTH_NAME_YEAR = re.compile(r"^([A-Za-z]{3})\.?\s*(\d{4})$")
_MONTH_NAME_SHORT_YEAR = re.compile(r"^([A-Za-z]{3})-(\d{2})$")
_NUMERIC = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2,4})$")
_FALLBACK_YEAR = re.compile(r"(?<!\d)(202[3-9])(?!\d)")
_FALLBACK_SHORT_YEAR = re.compile(r"(?<!\d)(2[3-9])(?!\d)")
_FALLBACK_MONTH_DAY = re.compile(r"(?<!\d)(\d{1,2})/(\d{1,2})(?!\d)")


class DateBucket(NamedTuple):
    month: int  # 0-11
    year: int


def _build(year: int, month0: Optional[int], day: int) -> Optional[date]:
    if month0 is None:
        return None
    try:
        return date(year, month0 + 1, day)
    except ValueError:
        return None


def match_month_name_year(text: str) -> Optional[date]:
    """'Dec. 2025' / 'Dec 2025'"""
    m = _MONTH_NAME_YEAR.match(text)
    if not m:
        return None
    return _build(int(m.group(2)), MONTHS.get(m.group(1).lower()), MID_MONTH)


def match_month_name_short_year(text: str) -> Optional[date]:
    """'Mar-26' -> 2026"""
    m = _MONTH_NAME_SHORT_YEAR.match(text)
    if not m:
        return None
    return _build(2000 + int(m.group(2)), MONTHS.get(m.group(1).lower()), MID_MONTH)


def match_numeric(text: str) -> Optional[date]:
    """'12/16/2025' / '09/26/24'"""
    m = _NUMERIC.match(text)
    if not m:
        return None
    year = int(m.group(3))
    if year < 100:
        year += 2000
    return _build(year, int(m.group(1)) - 1, int(m.group(2)))


def match_fallback(text: str) -> Optional[date]:
    '''
    Any 2023-2029 year (or 23-29) plus either a M/D pair or a month-name
    abbreviation somewhere in the text.
    '''
    m = _FALLBACK_YEAR.search(text)
    if m:
        year = int(m.group(1))
    else:
        m = _FALLBACK_SHORT_YEAR.search(text)
        if not m:
            return None
        year = 2000 + int(m.group(1))

    md = _FALLBACK_MONTH_DAY.search(text)
    if md:
        return _build(year, int(md.group(1)) - 1, int(md.group(2)))

    lowered = text.lower()
    for abbr, month0 in MONTHS.items():
        if abbr in lowered:
            return _build(year, month0, MID_MONTH)
    return None


# 优先级即列表顺序，第一个成功的匹配器生效
DATE_PATTERNS: Tuple[Tuple[str, Callable[[str], Optional[date]]], ...] = (
    ("month-name year", match_month_name_year),
    ("month-name short year", match_month_name_short_year),
    ("numeric", match_numeric),
    ("fallback", match_fallback),
)


def resolve_date(value: Any) -> Optional[date]:
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.upper() in SENTINELS:
        return None
    for _, matcher in DATE_PATTERNS:
        resolved = matcher(text)
        if resolved is not None:
            return resolved
    return None


def classify_date(value: Any) -> Optional[DateBucket]:
    '''
    Month/year bucket for a loosely formatted date string.

    :param value: the raw date text
    :return: DateBucket(month 0-11, year), or None when unparseable
    '''
    resolved = resolve_date(value)
    if resolved is None:
        return None
    return DateBucket(month=resolved.month - 1, year=resolved.year)


def calendar_days(year: int, month0: int) -> List[Optional[date]]:
    """Sunday-first month grid: leading None slots, then every day of the month."""
    first_weekday, days_in_month = calendar.monthrange(year, month0 + 1)
    leading = (first_weekday + 1) % 7  # monthrange 以周一为 0
    days: List[Optional[date]] = [None] * leading
    days.extend(date(year, month0 + 1, day) for day in range(1, days_in_month + 1))
    return days


ResolvedDates = List[Tuple[Project, Optional[date], Optional[date]]]


def resolve_project_dates(projects: Iterable[Project]) -> ResolvedDates:
    """(project, landing date, FAT date) with each date parsed once."""
    return [
        (project, resolve_date(project.landing), resolve_date(project.fat_date))
        for project in projects
    ]


def _place(resolved: ResolvedDates, day: date) -> List[Dict[str, Any]]:
    placed = []
    for project, landing, fat in resolved:
        has_landing = landing == day
        has_fat = fat == day
        if has_landing or has_fat:
            placed.append({"project": project, "landing": has_landing, "fat": has_fat})
    return placed


def projects_for_day(projects: Iterable[Project], day: date) -> List[Dict[str, Any]]:
    return _place(resolve_project_dates(projects), day)


def month_view(projects: List[Project], year: int, month0: int) -> List[Dict[str, Any]]:
    resolved = resolve_project_dates(projects)
    view = []
    for day in calendar_days(year, month0):
        if day is None:
            view.append({"date": None, "projects": []})
            continue
        view.append({"date": day, "projects": _place(resolved, day)})
    return view


def year_view(projects: Iterable[Project], year: int) -> Dict[str, Any]:
    """
    Projects bucketed by landing month for one year. Unparseable landing dates
    go to 'other'; parseable dates in other years are left out.
    """
    months: List[List[Project]] = [[] for _ in range(12)]
    other: List[Project] = []
    for project in projects:
        bucket = classify_date(project.landing)
        if bucket is None:
            other.append(project)
        elif bucket.year == year:
            months[bucket.month].append(project)
    return {"year": year, "months": months, "other": other}
