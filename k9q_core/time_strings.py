"""Masked time strings <-> integer milliseconds.

Area times are entered through a ``##:##.##`` mask (minutes, seconds,
hundredths) and countdown limits through a ``##:##`` mask. Parsing works by
fixed character position, never by scanning separators, so a string is either
fully resolved or rejected:

- ``MM:SS``        -> 5 characters
- ``MM:SS.HH``     -> 8 characters
- ``HH:MM:SS``     -> 8 characters (separator at index 5 is ``:``)
- ``HH:MM:SS.HH``  -> 11 characters

Partially typed input is rejected with ``FormatError``; run it through
``normalize_time_input`` first when it comes straight from a text field.
"""
from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

# 99:59.99
MAX_DURATION_MS = 5_999_999

_STOPWATCH_MASK = re.compile(r"[0-9]{2}:[0-9]{2}\.[0-9]{2}")
_COUNTDOWN_MASK = re.compile(r"[0-9]{2}:[0-9]{2}")

_FULL_FORMAT = re.compile(r"^(\d{1,2}):(\d{2})\.(\d{2})$", re.ASCII)
_MMSS_FORMAT = re.compile(r"^(\d{1,2}):(\d{2})$", re.ASCII)
_DECIMAL_FORMAT = re.compile(r"^(\d{1,3})\.(\d{1,2})$", re.ASCII)


class FormatError(ValueError):
    """A time string could not be split into minute/second/hundredths digits."""

    def __init__(self, text: object, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"invalid time string {text!r}: {reason}")


def _split_segments(text: str) -> tuple[str | None, str, str, str | None]:
    """Return (hours, minutes, seconds, hundredths) slices for a masked string."""
    length = len(text)
    if length == 5 and text[2] == ":":
        return None, text[0:2], text[3:5], None
    if length == 8 and text[2] == ":" and text[5] == ".":
        return None, text[0:2], text[3:5], text[6:8]
    if length == 8 and text[2] == ":" and text[5] == ":":
        return text[0:2], text[3:5], text[6:8], None
    if length == 11 and text[2] == ":" and text[5] == ":" and text[8] == ".":
        return text[0:2], text[3:5], text[6:8], text[9:11]
    raise FormatError(text, "does not match the ##:##.## or ##:## mask")


def _digits(text: str, segment: str, name: str) -> int:
    if not (segment.isascii() and segment.isdigit()):
        raise FormatError(text, f"{name} segment {segment!r} is not two digits")
    return int(segment)


def parse_time_ms(text: str | None) -> int:
    """Convert a masked time string to milliseconds.

    Examples:
        - "02:15.50" -> 135500
        - "03:00"    -> 180000
        - "01:39:59.99" -> 5999990

    Raises:
        FormatError: wrong length, misplaced separators, non-digit segments,
            seconds above 59, or a total above ``MAX_DURATION_MS``.
    """
    if text is None:
        raise FormatError(text, "no time string supplied")
    if not isinstance(text, str):
        raise FormatError(text, "time string must be str")

    stripped = text.strip()
    hours_seg, minutes_seg, seconds_seg, hundredths_seg = _split_segments(stripped)

    hours = _digits(stripped, hours_seg, "hours") if hours_seg is not None else 0
    minutes = _digits(stripped, minutes_seg, "minutes")
    seconds = _digits(stripped, seconds_seg, "seconds")
    hundredths = (
        _digits(stripped, hundredths_seg, "hundredths") if hundredths_seg is not None else 0
    )

    if seconds > 59:
        raise FormatError(stripped, "seconds must be 00-59")
    if hours_seg is not None and minutes > 59:
        raise FormatError(stripped, "minutes must be 00-59 when hours are shown")

    total = hours * 3_600_000 + minutes * 60_000 + seconds * 1000 + hundredths * 10
    if total > MAX_DURATION_MS:
        raise FormatError(stripped, "exceeds 99:59.99")
    return total


def format_time_ms(
    ms: int, include_hours: bool = False, include_hundredths: bool = True
) -> str:
    """Render milliseconds with the same masks the scoresheets use.

    Without hours the minutes segment holds total minutes (00-99); with hours
    it wraps at 60. Anything below one hundredth is truncated.
    """
    if isinstance(ms, bool) or not isinstance(ms, int):
        raise FormatError(ms, "duration must be an int number of milliseconds")
    if ms < 0 or ms > MAX_DURATION_MS:
        raise FormatError(ms, f"duration must be between 0 and {MAX_DURATION_MS} ms")

    hundredths = (ms % 1000) // 10
    total_seconds = ms // 1000
    seconds = total_seconds % 60
    total_minutes = total_seconds // 60

    if include_hours:
        text = f"{total_minutes // 60:02d}:{total_minutes % 60:02d}:{seconds:02d}"
    else:
        text = f"{total_minutes:02d}:{seconds:02d}"

    if include_hundredths:
        text = f"{text}.{hundredths:02d}"
    return text


def is_time_string(text: str | None, with_hundredths: bool = True) -> bool:
    """Strict mask check (``##:##.##`` or ``##:##``) that never raises."""
    if not isinstance(text, str):
        return False
    mask = _STOPWATCH_MASK if with_hundredths else _COUNTDOWN_MASK
    return mask.fullmatch(text) is not None


def is_area_valid(value: str | None, is_visible: bool, is_stopwatch: bool) -> bool:
    """Hidden areas are always valid; visible ones must fill their mask."""
    if not is_visible:
        return True
    return is_time_string(value, with_hundredths=is_stopwatch)


def is_stopwatch_area_valid(value: str | None, is_visible: bool, result: str | None) -> bool:
    """Only a Qualified run needs a recorded area time."""
    if result != "Qualified":
        return True
    return is_area_valid(value, is_visible, True)


def normalize_time_input(raw: str | None) -> str:
    """Turn loosely typed stopwatch input into ``MM:SS.HH``.

    Accepted shapes:
        - "1:23.45" -> "01:23.45"
        - "1:23"    -> "01:23.00"
        - "123.45"  -> "02:03.45" (total seconds)
        - "012345"  -> "01:23.45"
        - "12345"   -> "01:23.45"
        - "2345"    -> "00:23.45"
        - "345"     -> "00:03.45"
        - "45"      -> "00:00.45"
        - "5"       -> "05:00.00"

    Blank input gives "". Anything else comes back stripped so the user can
    keep typing; it will still fail ``parse_time_ms``.
    """
    if not raw or not raw.strip():
        return ""

    cleaned = raw.strip()

    match = _FULL_FORMAT.match(cleaned)
    if match:
        minutes, seconds, hundredths = (int(part) for part in match.groups())
        if minutes <= 59 and seconds <= 59:
            return f"{minutes:02d}:{seconds:02d}.{hundredths:02d}"

    match = _MMSS_FORMAT.match(cleaned)
    if match:
        minutes, seconds = (int(part) for part in match.groups())
        if minutes <= 59 and seconds <= 59:
            return f"{minutes:02d}:{seconds:02d}.00"

    match = _DECIMAL_FORMAT.match(cleaned)
    if match:
        total_seconds = int(match.group(1))
        hundredths = match.group(2).ljust(2, "0")[:2]
        if total_seconds <= 3599:
            return f"{total_seconds // 60:02d}:{total_seconds % 60:02d}.{hundredths}"

    digits = re.sub(r"\D", "", cleaned, flags=re.ASCII)[:6]
    if not digits:
        return ""

    if len(digits) == 6:
        if int(digits[0:2]) <= 59 and int(digits[2:4]) <= 59:
            return f"{digits[0:2]}:{digits[2:4]}.{digits[4:6]}"
    elif len(digits) == 5:
        if int(digits[1:3]) <= 59:
            return f"0{digits[0]}:{digits[1:3]}.{digits[3:5]}"
    elif len(digits) == 4:
        if int(digits[0:2]) <= 59:
            return f"00:{digits[0:2]}.{digits[2:4]}"
    elif len(digits) == 3:
        return f"00:0{digits[0]}.{digits[1:3]}"
    elif len(digits) == 2:
        return f"00:00.{digits}"
    else:
        return f"0{digits}:00.00"

    logger.debug(f"Leaving unrecognised time input as typed: {cleaned!r}")
    return cleaned


def _int_or_zero(part: str) -> int:
    return int(part) if part else 0


def normalize_limit_input(raw: str | None, max_minutes: int | None = None) -> str:
    """Turn loosely typed max-time input into ``MM:SS``.

    - "1"    -> "01:00"
    - "130"  -> "01:30"
    - "1:30" -> "01:30"
    - "0:90" -> "01:30" (seconds overflow)
    - "615"  -> "06:15"
    - "1000" -> "05:00" (capped at max_minutes, default 5 for 4+ digits and colon input)

    One or two digits are minutes and are only capped when ``max_minutes`` is
    given.
    """
    cleaned = re.sub(r"[^0-9:]", "", raw or "")
    if not cleaned:
        return ""

    effective_max = max_minutes if max_minutes is not None else 5

    if ":" in cleaned:
        parts = cleaned.split(":")
        minutes = _int_or_zero(parts[0])
        seconds = _int_or_zero(parts[1])
        if seconds >= 60:
            minutes += seconds // 60
            seconds %= 60
        if minutes > effective_max:
            minutes, seconds = effective_max, 0
        elif minutes == effective_max and seconds > 0:
            seconds = 0
        return f"{minutes:02d}:{seconds:02d}"

    value = int(cleaned)
    if len(cleaned) <= 2:
        minutes = min(value, max_minutes) if max_minutes is not None else value
        return f"{minutes:02d}:00"

    minutes, seconds = divmod(value, 100)
    if len(cleaned) == 3:
        return f"{minutes:02d}:{seconds if seconds < 60 else 0:02d}"

    if minutes > effective_max:
        return f"{effective_max:02d}:00"
    return f"{minutes:02d}:{seconds if seconds < 60 else 0:02d}"


def total_search_time_ms(*area_times: str | None) -> int:
    """Sum the recorded area times, skipping blank areas."""
    return sum(parse_time_ms(text) for text in area_times if text and text.strip())
