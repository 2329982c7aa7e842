"""Search-area activation rules for a class (element + level)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

logger = logging.getLogger(__name__)

MAX_AREAS = 3

# Element/level pairs that are always searched as a single area,
# whatever area count the class record carries.
SINGLE_AREA_CLASSES = frozenset(
    {
        ("Interior", "Excellent"),
        ("Interior", "Master"),
        ("Handler Discrimination", "Master"),
    }
)


class ConfigurationError(ValueError):
    """Class/entry data the timing core cannot work with."""


def validate_area_count(count: Any, name: str = "configured_area_count") -> int:
    if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= MAX_AREAS:
        logger.error(f"Rejecting {name}={count!r}: must be 1, 2 or 3")
        raise ConfigurationError(f"{name} must be 1, 2 or 3, got {count!r}")
    return count


def _check_area_index(area_index: Any) -> int:
    if (
        isinstance(area_index, bool)
        or not isinstance(area_index, int)
        or not 1 <= area_index <= MAX_AREAS
    ):
        raise ConfigurationError(f"area_index must be 1, 2 or 3, got {area_index!r}")
    return area_index


def _clean(value: str | None) -> str:
    return value.strip() if isinstance(value, str) else ""


@dataclass(frozen=True)
class ElementLevel:
    element: str
    level: str

    @property
    def is_single_area(self) -> bool:
        return (self.element, self.level) in SINGLE_AREA_CLASSES


@dataclass(frozen=True)
class AreaConfig:
    """Area setup for one scoring session, built once from the entry's class record."""

    configured_area_count: int
    element_level: ElementLevel

    def __post_init__(self) -> None:
        validate_area_count(self.configured_area_count)

    @classmethod
    def from_entry(cls, entry: Mapping[str, Any]) -> AreaConfig:
        """Build from an entry row (``element``, ``level``, ``areaCount``).

        ``areaCount`` may arrive as a numeric string; a missing count means 1.
        """
        element = _clean(entry.get("element"))
        level = _clean(entry.get("level"))
        if not element and not level:
            logger.error("Entry record has neither element nor level")
            raise ConfigurationError("entry is missing both element and level")

        raw_count = entry.get("areaCount")
        if raw_count in (None, ""):
            count = 1
        elif isinstance(raw_count, str):
            try:
                count = int(raw_count.strip(), 10)
            except ValueError:
                raise ConfigurationError(f"areaCount must be numeric, got {raw_count!r}")
        else:
            count = raw_count

        return cls(configured_area_count=count, element_level=ElementLevel(element, level))


def is_area_active(
    area_index: int,
    element: str | None,
    level: str | None,
    configured_area_count: int = MAX_AREAS,
) -> bool:
    """Whether the input/timer for ``area_index`` should be shown.

    Area 1 is always active. Areas 2 and 3 are suppressed for the pairs in
    ``SINGLE_AREA_CLASSES``; every other pair, unknown ones included, uses
    the class's configured area count.
    """
    _check_area_index(area_index)
    validate_area_count(configured_area_count)

    if area_index == 1:
        return True

    element = _clean(element)
    level = _clean(level)
    if not element and not level:
        logger.error(f"Cannot decide area {area_index}: element and level are both missing")
        raise ConfigurationError("element and level are both missing")

    if (element, level) in SINGLE_AREA_CLASSES:
        return False
    return configured_area_count >= area_index


def active_areas(config: AreaConfig) -> tuple[int, ...]:
    el = config.element_level
    return tuple(
        index
        for index in range(1, MAX_AREAS + 1)
        if is_area_active(index, el.element, el.level, config.configured_area_count)
    )


def active_area_count(config: AreaConfig) -> int:
    return len(active_areas(config))


def next_active_area(
    current_completed_count: int,
    just_completed_area_index: int,
    max_area_count: int = MAX_AREAS,
) -> int:
    """Area to highlight next after ``just_completed_area_index`` was timed.

    Saturates at ``max_area_count`` and never moves backwards: the larger of
    the two progress values wins, negatives count as zero.
    """
    validate_area_count(max_area_count, "max_area_count")
    completed = max(current_completed_count, just_completed_area_index, 0)
    return min(completed + 1, max_area_count)


def cycle_area(area_count: int | None, current_area: int | None) -> int:
    """Stopwatch area toggle: step to the next area, wrapping back to 1."""
    if area_count is None or not 1 <= area_count <= MAX_AREAS:
        return 1
    if current_area is None or not 1 <= current_area <= MAX_AREAS:
        return 1
    following = current_area + 1
    return 1 if following > area_count else following
