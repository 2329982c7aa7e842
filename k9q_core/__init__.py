from .areas import (
    MAX_AREAS,
    SINGLE_AREA_CLASSES,
    AreaConfig,
    ConfigurationError,
    ElementLevel,
    active_area_count,
    active_areas,
    cycle_area,
    is_area_active,
    next_active_area,
)
from .session import (
    CommandOutcome,
    ScoreResult,
    ValidationError,
    apply_command,
    default_session_state,
    validate_session_and_version,
)
from .time_limits import (
    CountdownReading,
    evaluate_countdown,
    is_max_time_editable,
    is_max_time_valid,
    is_time_limit_set,
    max_time_bounds,
    max_time_progress,
    resolve_entry_preset_ms,
    resolve_preset_ms,
)
from .time_strings import (
    MAX_DURATION_MS,
    FormatError,
    format_time_ms,
    is_area_valid,
    is_stopwatch_area_valid,
    is_time_string,
    normalize_limit_input,
    normalize_time_input,
    parse_time_ms,
    total_search_time_ms,
)
from .types import EntryRecord, SessionCommand, SessionState
from .validation import InputSanitizer, TimerConfig, ValidatedEntry, ValidatedSessionCmd

__all__ = [
    "MAX_AREAS",
    "SINGLE_AREA_CLASSES",
    "AreaConfig",
    "ConfigurationError",
    "ElementLevel",
    "active_area_count",
    "active_areas",
    "cycle_area",
    "is_area_active",
    "next_active_area",
    "CommandOutcome",
    "ScoreResult",
    "ValidationError",
    "apply_command",
    "default_session_state",
    "validate_session_and_version",
    "CountdownReading",
    "evaluate_countdown",
    "is_max_time_editable",
    "is_max_time_valid",
    "is_time_limit_set",
    "max_time_bounds",
    "max_time_progress",
    "resolve_entry_preset_ms",
    "resolve_preset_ms",
    "MAX_DURATION_MS",
    "FormatError",
    "format_time_ms",
    "is_area_valid",
    "is_stopwatch_area_valid",
    "is_time_string",
    "normalize_limit_input",
    "normalize_time_input",
    "parse_time_ms",
    "total_search_time_ms",
    "EntryRecord",
    "SessionCommand",
    "SessionState",
    "InputSanitizer",
    "TimerConfig",
    "ValidatedEntry",
    "ValidatedSessionCmd",
]
