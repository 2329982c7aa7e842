"""Countdown presets, max-time rules and countdown warnings.

Areas are timed one after another; the first area without a recorded time is
the one being timed, and the countdown is armed with that area's limit.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Sequence

from .areas import (
    AreaConfig,
    ConfigurationError,
    active_area_count,
    is_area_active,
    validate_area_count,
)
from .time_strings import FormatError, is_area_valid, parse_time_ms
from .validation import TimerConfig

logger = logging.getLogger(__name__)

CountdownWarning = Literal["time_expired", "thirty_second"]

# (min minutes, max minutes) allowed for a judge-entered max time.
MAX_TIME_BOUNDS: dict[tuple[str, str | None], tuple[int, int]] = {
    ("Interior", None): (1, 3),
    ("Exterior", "Novice"): (2, 4),
    ("Exterior", "Advanced"): (2, 4),
    ("Exterior", None): (3, 5),
    ("Handler Discrimination", "Advanced"): (2, 5),
    ("Handler Discrimination", "Excellent"): (3, 6),
    ("Handler Discrimination", None): (2, 3),
    ("Detective", None): (7, 15),
}
DEFAULT_MAX_TIME_BOUNDS = (7, 15)


def _is_blank(text: str | None) -> bool:
    return text is None or not text.strip()


def resolve_preset_ms(
    configured_area_count: int,
    area1_text: str | None,
    area2_text: str | None,
    area3_text: str | None,
    limit1: str | None,
    limit2: str | None,
    limit3: str | None,
) -> int:
    """Preset (ms) for the countdown, taken from the first area with no time yet.

    - 1 area: always ``limit1``.
    - 2 areas: ``limit1`` until area 1 is recorded, then ``limit2``; once both
      are recorded it falls back to ``limit1``.
    - 3 areas: ``limit1``/``limit2``/``limit3`` by first empty area, ``limit1``
      once all three are recorded.

    Raises:
        ConfigurationError: area count outside 1..3.
        FormatError: the chosen limit is not a valid time string.
    """
    validate_area_count(configured_area_count)

    if configured_area_count == 1:
        chosen, which = limit1, 1
    elif configured_area_count == 2:
        if _is_blank(area1_text):
            chosen, which = limit1, 1
        elif _is_blank(area2_text):
            chosen, which = limit2, 2
        else:
            chosen, which = limit1, 1
    else:
        if _is_blank(area1_text):
            chosen, which = limit1, 1
        elif _is_blank(area2_text):
            chosen, which = limit2, 2
        elif _is_blank(area3_text):
            chosen, which = limit3, 3
        else:
            chosen, which = limit1, 1

    logger.debug(f"Countdown preset from limit{which} ({chosen!r}), {configured_area_count} area(s)")
    return parse_time_ms(chosen)


def _padded(values: Sequence[str | None]) -> list[str | None]:
    padded = list(values)[: TimerConfig.MAX_AREAS]
    return padded + [None] * (TimerConfig.MAX_AREAS - len(padded))


def resolve_entry_preset_ms(
    config: AreaConfig,
    area_values: Sequence[str | None],
    limits: Sequence[str | None],
) -> int:
    """``resolve_preset_ms`` driven by an entry's area config.

    Uses the number of *active* areas, so single-area classes keep arming
    with ``limit1`` even when the class record says otherwise.
    """
    a1, a2, a3 = _padded(area_values)
    l1, l2, l3 = _padded(limits)
    return resolve_preset_ms(active_area_count(config), a1, a2, a3, l1, l2, l3)


def is_time_limit_set(
    area_count: int | str | None,
    limit1: str | None,
    limit2: str | None,
    limit3: str | None,
) -> bool:
    """Every limit the class uses must be present and non-zero."""
    if area_count is None:
        return False
    try:
        count = min(int(area_count), TimerConfig.MAX_AREAS)
    except (TypeError, ValueError):
        return False
    if count < 1:
        return False

    for limit in (limit1, limit2, limit3)[:count]:
        if _is_blank(limit) or limit.strip() == ":":
            return False
        digits = limit.replace(":", "").replace(".", "").strip()
        if not (digits.isascii() and digits.isdigit()) or int(digits) == 0:
            return False
    return True


def max_time_bounds(element: str | None, level: str | None) -> tuple[int, int]:
    """Allowed (min, max) minutes for a judge-entered max time."""
    bounds = MAX_TIME_BOUNDS.get((element, level))
    if bounds is None:
        bounds = MAX_TIME_BOUNDS.get((element, None), DEFAULT_MAX_TIME_BOUNDS)
    return bounds


def is_max_time_editable(element: str | None, level: str | None, role: str | None = None) -> bool:
    if role and role.lower() in TimerConfig.NO_EDIT_ROLES:
        return False
    if element in ("Interior", "Exterior", "Detective"):
        return True
    if element == "Handler Discrimination":
        return level != "Novice"
    return False


def is_max_time_valid(
    element: str | None,
    level: str | None,
    max_time: str | None,
    which_area: int,
    configured_area_count: int = TimerConfig.MAX_AREAS,
    role: str | None = None,
) -> bool:
    """Check a max-time field (``MM:SS``) against the class's allowed range.

    Fields the user cannot edit, and areas the class does not use, always pass.
    """
    if not is_max_time_editable(element, level, role):
        return True
    if not is_area_active(which_area, element, level, configured_area_count):
        return True
    if not is_area_valid(max_time, True, False):
        return False

    try:
        limit_ms = parse_time_ms(max_time)
    except FormatError:
        return False

    min_minutes, max_minutes = max_time_bounds(element, level)
    return min_minutes * 60_000 <= limit_ms <= max_minutes * 60_000


def max_time_progress(area_ms: int, timer_ms: int) -> float:
    """Share of the area's max time used, clamped to 0.0-1.0."""
    if area_ms <= 0:
        return 0.0
    return min(max(timer_ms / area_ms, 0.0), 1.0)


@dataclass(frozen=True)
class CountdownReading:
    preset_ms: int
    elapsed_ms: int
    remaining_ms: int
    progress: float
    expired: bool
    warning: CountdownWarning | None


def evaluate_countdown(
    preset_ms: int | None,
    elapsed_ms: int,
    level: str | None = None,
    running: bool = True,
    warning_threshold_ms: int = TimerConfig.WARNING_THRESHOLD_MS,
) -> CountdownReading:
    """Remaining time, progress and warning state for one stopwatch tick.

    No preset means no max time: nothing expires and nothing warns. The
    thirty-second warning only shows while running and never for Master.
    """
    if elapsed_ms < 0:
        raise ValueError(f"elapsed_ms must be >= 0, got {elapsed_ms}")

    if not preset_ms or preset_ms <= 0:
        return CountdownReading(
            preset_ms=0,
            elapsed_ms=elapsed_ms,
            remaining_ms=0,
            progress=0.0,
            expired=False,
            warning=None,
        )

    remaining = max(0, preset_ms - elapsed_ms)
    expired = elapsed_ms > 0 and elapsed_ms >= preset_ms
    warns = (level or "").strip().lower() not in TimerConfig.NO_WARNING_LEVELS
    near_end = running and warns and 0 < remaining <= warning_threshold_ms

    warning: CountdownWarning | None = None
    if expired:
        warning = "time_expired"
    elif near_end:
        warning = "thirty_second"

    return CountdownReading(
        preset_ms=preset_ms,
        elapsed_ms=elapsed_ms,
        remaining_ms=remaining,
        progress=max_time_progress(preset_ms, elapsed_ms),
        expired=expired,
        warning=warning,
    )


__all__ = [
    "ConfigurationError",
    "CountdownReading",
    "CountdownWarning",
    "MAX_TIME_BOUNDS",
    "evaluate_countdown",
    "is_max_time_editable",
    "is_max_time_valid",
    "is_time_limit_set",
    "max_time_bounds",
    "max_time_progress",
    "resolve_entry_preset_ms",
    "resolve_preset_ms",
]
