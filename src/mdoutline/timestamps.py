"""Timestamps recognised at the start of heading text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class DateFormat:
    """A supported timestamp layout.

    Attributes:
        name: Display name, also used to group compatible formats.
        display: Human readable layout shown when choosing a format.
        pattern: Regex locating the timestamp inside a heading text.
        strptime_format: Layout of the timestamp without the weekday prefix.
        weekday: Timestamp is prefixed with the ISO weekday number and a space.
        utc_offset: Timestamp carries a UTC offset or ``Z``.
    """

    name: str
    display: str
    pattern: re.Pattern[str]
    strptime_format: str
    weekday: bool = False
    utc_offset: bool = False

    @property
    def is_date_only(self) -> bool:
        return re.search(r"\bdate\b", self.name) is not None


DATE_FORMATS: tuple[DateFormat, ...] = (
    DateFormat(
        name="1. Standard datetime",
        display="YYYY-MM-DDTHH:mm:ss",
        pattern=re.compile(r"(?<!\b[1-7] )\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?![-+]\d{2}:?\d{2}|Z)"),
        strptime_format="%Y-%m-%dT%H:%M:%S",
    ),
    DateFormat(
        name="2. Standard date",
        display="YYYY-MM-DD",
        pattern=re.compile(r"(?<!\b[1-7] )\d{4}-\d{2}-\d{2}(?![ T]\d{2}:?\d{2}(?::?\d{2})?)"),
        strptime_format="%Y-%m-%d",
    ),
    DateFormat(
        name="3. Weekday & datetime",
        display="E YYYY-MM-DD HH:mm:ss",
        pattern=re.compile(r"[1-7] \d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}"),
        strptime_format="%Y-%m-%d %H:%M:%S",
        weekday=True,
    ),
    DateFormat(
        name="4. Weekday & date",
        display="E YYYY-MM-DD",
        pattern=re.compile(r"[1-7] \d{4}-\d{2}-\d{2}(?![ T]\d{2}:?\d{2}(?::?\d{2})?)"),
        strptime_format="%Y-%m-%d",
        weekday=True,
    ),
    DateFormat(
        name="5. Standard datetime & timezone",
        display="YYYY-MM-DDTHH:mm:ssZ",
        pattern=re.compile(r"(?<!\b[1-7] )\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}([-+]\d{2}:?\d{2}|Z)"),
        strptime_format="%Y-%m-%dT%H:%M:%S%z",
        utc_offset=True,
    ),
)

_FORMATS_BY_NAME = {fmt.name: fmt for fmt in DATE_FORMATS}


def get_date_format(name: str) -> DateFormat:
    return _FORMATS_BY_NAME[name]


def match_leading_timestamp(text: str) -> tuple[str, DateFormat] | None:
    """Find a timestamp at the very start of ``text``.

    Returns:
        The matched timestamp and its format, or None.
    """
    for fmt in DATE_FORMATS:
        match = fmt.pattern.match(text)
        if match:
            return match.group(0), fmt
    return None


def parse_timestamp(value: str, fmt: DateFormat) -> datetime:
    """Parse a timestamp written in ``fmt``.

    Raises:
        ValueError: If the value does not follow the format.
    """
    if fmt.weekday:
        value = value.split(" ", 1)[1]
    return datetime.strptime(value, fmt.strptime_format)


def format_timestamp(moment: datetime, fmt: DateFormat) -> str:
    if fmt.utc_offset:
        if moment.tzinfo is None:
            moment = moment.astimezone()
        return moment.isoformat(timespec="seconds")
    rendered = moment.strftime(fmt.strptime_format)
    if fmt.weekday:
        rendered = f"{moment.isoweekday()} {rendered}"
    return rendered


def convert_timestamp(value: str, source: DateFormat, target: DateFormat) -> str:
    """Rewrite a timestamp from one format into another, keeping wall-clock time."""
    return format_timestamp(parse_timestamp(value, source), target)


def comparable_timestamp(value: str, fmt: DateFormat) -> datetime:
    """Naive datetime usable to order timestamps of mixed formats."""
    moment = parse_timestamp(value, fmt)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def compatible_formats(reference: DateFormat, *, exclude_utc_offset: bool = False) -> list[DateFormat]:
    """Formats a timestamp in ``reference`` can be transformed into.

    Dates only convert to dates and datetimes only to datetimes; the
    reference format itself is never offered.
    """
    candidates = []
    for fmt in DATE_FORMATS:
        if fmt.name == reference.name:
            continue
        if fmt.is_date_only != reference.is_date_only:
            continue
        if exclude_utc_offset and fmt.utc_offset:
            continue
        candidates.append(fmt)
    return candidates
