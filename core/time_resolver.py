"""Resolve English/Hindi time phrases into absolute datetimes.

``resolve`` is a pure function of ``(phrase, now)``. Phrases are matched
against an ordered table of pattern classes and the first class that yields a
value wins, even when a later class would also match:

1. relative minutes  ("in 5 min", "5 मिनट में", "10 min baad")
2. relative hours    ("after 2 hours", "2 घंटे में", "3 ghante mein")
3. today             ("today", "आज", "aaj")
4. tomorrow          ("tomorrow", "कल", "kal")
5. 24-hour clock     ("18:30")
6. hour + meridiem   ("6 pm", "6 बजे", "7:15 am")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Match, Optional, Pattern, Tuple

from core.parser_utils.text import WORD_CHARS

_START = rf"(?<![{WORD_CHARS}])"
_END = rf"(?![{WORD_CHARS}])"

_MINUTE_UNITS = r"(?:minutes|minute|mins|min|मिनट|मिन)"
_HOUR_UNITS = r"(?:hours|hour|hrs|hr|ghante|ghanta|ghanton|घंटे|घंटा|घंटों)"
_LEADING_MARKERS = r"(?:within|in|after)"
_TRAILING_MARKERS = r"(?:mein|me|baad|में|मे|बाद)"
_MERIDIEM = r"(?:a\.m\.|p\.m\.|am|pm|baje|बजे)"

# Quantities such as "4 kg" near a meridiem match mean the number is not an hour.
GUARD_WINDOW = 6
_GUARD_UNITS = re.compile(r"kg|kilo|किलो|liter|litre|लीटर")
_MORNING = re.compile(rf"{_START}(?:subah|savere|morning|सुबह|सवेरे){_END}")


def _relative(units: str) -> Pattern[str]:
    return re.compile(
        rf"{_START}{_LEADING_MARKERS}\s*(?P<lead>\d{{1,3}})\s*{units}{_END}"
        rf"|(?<!\d)(?P<trail>\d{{1,3}})\s*{units}\s*{_TRAILING_MARKERS}{_END}"
    )


_MINUTES = _relative(_MINUTE_UNITS)
_HOURS = _relative(_HOUR_UNITS)
_TODAY = re.compile(rf"{_START}(?:today|aaj|आज){_END}")
_TOMORROW = re.compile(rf"{_START}(?:tomorrow|kal|कल){_END}")
_CLOCK = re.compile(r"(?<![\d:])(?P<hour>\d{1,2}):(?P<minute>\d{2})(?![\d:])(?!\s*(?:a\.m\.|p\.m\.|am|pm))")
_HOUR_MERIDIEM = re.compile(
    rf"(?<![\d:.])(?P<hour>\d{{1,2}})(?::(?P<minute>\d{{2}}))?\s*(?P<meridiem>{_MERIDIEM}){_END}"
)


@dataclass(frozen=True)
class TimePattern:
    """One entry of the ordered pattern table."""

    name: str
    pattern: Pattern[str]
    handler: Callable[[str, Match[str], datetime], Optional[datetime]]


def _amount(match: Match[str]) -> int:
    return int(match.group("lead") or match.group("trail"))


def _at(now: datetime, hour: int, minute: int) -> datetime:
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate < now:
        candidate += timedelta(days=1)
    return candidate


def _relative_minutes(_: str, match: Match[str], now: datetime) -> Optional[datetime]:
    return now + timedelta(minutes=_amount(match))


def _relative_hours(_: str, match: Match[str], now: datetime) -> Optional[datetime]:
    return now + timedelta(hours=_amount(match))


def _today(_: str, __: Match[str], now: datetime) -> Optional[datetime]:
    return now


def _tomorrow(_: str, __: Match[str], now: datetime) -> Optional[datetime]:
    return now + timedelta(days=1)


def _clock(_: str, match: Match[str], now: datetime) -> Optional[datetime]:
    hour = int(match.group("hour"))
    minute = int(match.group("minute"))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return _at(now, hour, minute)


def _meridiem_hour(hour: int, meridiem: str, morning: bool) -> Optional[int]:
    if meridiem in {"baje", "बजे"}:
        if morning:
            meridiem = "am"
        elif 1 <= hour <= 11:
            return hour + 12
        elif 0 <= hour <= 23:
            return hour
        else:
            return None
    if not 1 <= hour <= 12:
        return None
    if meridiem.startswith("p"):
        return hour if hour == 12 else hour + 12
    return 0 if hour == 12 else hour


def is_guarded(text: str, start: int) -> bool:
    """True when a quantity unit sits within ``GUARD_WINDOW`` chars of ``start``."""

    window = text[max(0, start - GUARD_WINDOW): start + GUARD_WINDOW]
    return _GUARD_UNITS.search(window) is not None


def _hour_with_meridiem(text: str, _: Match[str], now: datetime) -> Optional[datetime]:
    morning = _MORNING.search(text) is not None
    for match in _HOUR_MERIDIEM.finditer(text):
        if is_guarded(text, match.start()):
            continue
        hour = _meridiem_hour(int(match.group("hour")), match.group("meridiem"), morning)
        minute = int(match.group("minute") or 0)
        if hour is None or minute > 59:
            continue
        return _at(now, hour, minute)
    return None


PATTERNS: Tuple[TimePattern, ...] = (
    TimePattern("relative_minutes", _MINUTES, _relative_minutes),
    TimePattern("relative_hours", _HOURS, _relative_hours),
    TimePattern("today", _TODAY, _today),
    TimePattern("tomorrow", _TOMORROW, _tomorrow),
    TimePattern("clock_24h", _CLOCK, _clock),
    TimePattern("hour_meridiem", _HOUR_MERIDIEM, _hour_with_meridiem),
)


def resolve_with_class(phrase: str, now: datetime) -> Optional[Tuple[str, datetime]]:
    """Return ``(pattern class, instant)`` for the first class that resolves."""

    text = (phrase or "").lower()
    if not text.strip():
        return None
    for entry in PATTERNS:
        match = entry.pattern.search(text)
        if not match:
            continue
        resolved = entry.handler(text, match, now)
        if resolved is not None:
            return entry.name, resolved
    return None


def resolve(phrase: str, now: datetime) -> Optional[datetime]:
    """Return the absolute instant described by ``phrase`` or ``None``."""

    outcome = resolve_with_class(phrase, now)
    return outcome[1] if outcome else None


def pattern_names() -> List[str]:
    return [entry.name for entry in PATTERNS]


__all__ = ["GUARD_WINDOW", "PATTERNS", "TimePattern", "is_guarded", "pattern_names", "resolve", "resolve_with_class"]
