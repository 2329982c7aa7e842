"""Scoring-session state transitions for one entry (pure, no UI/DB).

This module drives the stopwatch/countdown flow of a scent-work scoresheet.
All functions are deterministic and side-effect free (no I/O, no database).

Architecture:
- State is a plain dict (see types.SessionState) owned by the calling screen
- Commands are plain dicts with a 'type' field (INIT_ENTRY, START_TIMER, STOP_TIMER, ...)
- apply_command() takes (state, cmd) and returns CommandOutcome with updated state
- Mutations are performed on a deepcopy; the caller persists/broadcasts as needed

Session lifecycle:
    idle -> running -> stopped (area N recorded) -> running -> ... -> all_recorded -> submitted

The countdown preset is re-resolved (time_limits.resolve_entry_preset_ms) on
every transition into running, on reset, on stop and on manual area entry, so
it always shows the limit of the first area without a recorded time.

State transitions:
- INIT_ENTRY: Load an entry record, reset area times, arm the first preset
- START_TIMER: idle/stopped -> running with a freshly resolved preset
- STOP_TIMER: Record elapsed time into the active area and advance
- TIMER_SYNC: Stopwatch tick; updates remaining time and warning
- SET_AREA_TIME: Manual area time entry (normalised, mask-checked)
- RESET_TIMER: Back to idle with the current preset, keeps recorded areas
- SUBMIT_SCORE: Store the tagged result and total search time
- RESET_ENTRY: Clear area times and result, keep the loaded entry
"""
from __future__ import annotations

import logging
import uuid
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, List, Literal

from .areas import (
    AreaConfig,
    ConfigurationError,
    ElementLevel,
    active_areas,
    next_active_area,
)
from .time_limits import evaluate_countdown, is_time_limit_set, resolve_entry_preset_ms
from .time_strings import (
    FormatError,
    format_time_ms,
    is_stopwatch_area_valid,
    is_time_string,
    normalize_time_input,
    parse_time_ms,
    total_search_time_ms,
)
from .types import SessionCommand, SessionState
from .validation import RESULT_KINDS, RESULTS_REQUIRING_REASON, InputSanitizer

logger = logging.getLogger(__name__)

ResultKind = Literal["Qualified", "NQ", "Absent", "Excused", "Withdrawn", "DQ"]

_LOCKED_STATES = {"all_recorded", "submitted"}


@dataclass
class CommandOutcome:
    """Result of applying a session command."""

    state: Dict[str, Any]
    cmd_payload: Dict[str, Any]
    snapshot_required: bool


@dataclass
class ValidationError:
    """Represents a non-transport validation failure (pure core)."""

    kind: str
    message: str | None = None
    status_code: int | None = None


@dataclass(frozen=True)
class ScoreResult:
    """Scoring outcome; NQ, Excused, Withdrawn and DQ carry a reason."""

    kind: ResultKind
    reason: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in RESULT_KINDS:
            raise ValueError(f"unknown result {self.kind!r}")
        if self.kind in RESULTS_REQUIRING_REASON and not self.reason:
            raise ValueError(f"result {self.kind} requires a reason")
        if self.kind not in RESULTS_REQUIRING_REASON and self.reason is not None:
            raise ValueError(f"result {self.kind} does not take a reason")

    @property
    def is_qualified(self) -> bool:
        return self.kind == "Qualified"

    @classmethod
    def from_command(cls, cmd: Dict[str, Any]) -> ScoreResult:
        kind = cmd.get("result")
        reason = None
        if kind in RESULTS_REQUIRING_REASON:
            raw_reason = cmd.get("reason")
            if isinstance(raw_reason, str):
                reason = InputSanitizer.sanitize_reason(raw_reason) or None
        return cls(kind=kind, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "reason": self.reason}


def default_session_state(session_id: str | None = None) -> SessionState:
    """Create a fresh, uninitiated session state.

    Every key of types.SessionState is present; list fields are sized for
    three areas so indexes can be used without bounds checks.
    """
    return {
        "initiated": False,
        "element": "",
        "level": "",
        "armband": None,
        "callName": None,
        "areaCount": 1,
        "activeAreas": [1],
        "timeLimits": [None, None, None],
        "timeLimitSet": False,
        "areaTimes": ["", "", ""],
        "completedAreas": 0,
        "activeArea": 1,
        "timerState": "idle",
        "presetMs": None,
        "elapsedMs": 0,
        "remainingMs": None,
        "warning": None,
        "result": None,
        "totalTimeMs": None,
        "totalTime": None,
        "sessionId": session_id or str(uuid.uuid4()),
        "version": 0,
    }


def _area_config(state: Dict[str, Any]) -> AreaConfig:
    return AreaConfig(
        configured_area_count=state.get("areaCount") or 1,
        element_level=ElementLevel(state.get("element") or "", state.get("level") or ""),
    )


def _resolve_preset(state: Dict[str, Any]) -> int:
    return resolve_entry_preset_ms(
        _area_config(state), state.get("areaTimes") or [], state.get("timeLimits") or []
    )


def _refresh_preset(state: Dict[str, Any]) -> None:
    """Re-arm the idle countdown; a class without limits has no preset."""
    if state.get("timeLimitSet"):
        state["presetMs"] = _resolve_preset(state)
    else:
        state["presetMs"] = None
    state["remainingMs"] = state["presetMs"]
    state["warning"] = None


def _all_areas_recorded(state: Dict[str, Any]) -> bool:
    area_times = state.get("areaTimes") or []
    return all(
        area_times[index - 1].strip() for index in state.get("activeAreas") or [1]
    )


def _first_empty_area(state: Dict[str, Any]) -> int | None:
    area_times = state.get("areaTimes") or []
    for index in state.get("activeAreas") or [1]:
        if not area_times[index - 1].strip():
            return index
    return None


def _coerce_ms(value: Any, name: str) -> int:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{name} must be an int number of milliseconds")
    if isinstance(value, float):
        value = int(value)
    if isinstance(value, str):
        stripped = value.strip()
        try:
            value = int(stripped, 10)
        except ValueError:
            raise ValueError(f"{name} must be an int number of milliseconds")
    if not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative int")
    return value


def _require_initiated(state: Dict[str, Any], ctype: str) -> None:
    if not state.get("initiated"):
        raise ValueError(f"{ctype} requires INIT_ENTRY first")


def _reset_progress(state: Dict[str, Any]) -> None:
    state["areaTimes"] = ["", "", ""]
    state["completedAreas"] = 0
    state["activeArea"] = 1
    state["timerState"] = "idle"
    state["elapsedMs"] = 0
    state["result"] = None
    state["totalTimeMs"] = None
    state["totalTime"] = None


def _apply_transition(state: Dict[str, Any], cmd: Dict[str, Any]) -> CommandOutcome:
    """Apply pure state transition without side effects.

    Works on a deepcopy of the provided state and returns new state + payload.

    Raises:
        ValueError: command not allowed in the current timer state, or bad fields
        ConfigurationError: entry record cannot drive a session
        FormatError: a time limit or area time does not fit its mask
    """
    new_state: Dict[str, Any] = deepcopy(state)
    ctype = cmd.get("type")
    snapshot_required = False
    payload = dict(cmd)

    if ctype == "INIT_ENTRY":
        entry = InputSanitizer.validate_entry(cmd.get("entry") or {})
        config = AreaConfig(entry.areaCount, ElementLevel(entry.element, entry.level))
        areas = list(active_areas(config))

        new_state["initiated"] = True
        new_state["version"] = new_state.get("version", 0) + 1
        new_state["element"] = entry.element
        new_state["level"] = entry.level
        new_state["armband"] = entry.armband
        new_state["callName"] = entry.callName
        new_state["areaCount"] = entry.areaCount
        new_state["activeAreas"] = areas
        new_state["timeLimits"] = [entry.timeLimit, entry.timeLimit2, entry.timeLimit3]
        new_state["timeLimitSet"] = is_time_limit_set(len(areas), *new_state["timeLimits"])
        _reset_progress(new_state)
        _refresh_preset(new_state)

        if not new_state["timeLimitSet"]:
            logger.info(
                f"Entry {entry.armband} ({entry.element} {entry.level}) has no usable time limit"
            )
        payload["sessionId"] = new_state["sessionId"]
        payload["activeAreas"] = areas
        snapshot_required = True

    elif ctype == "START_TIMER":
        _require_initiated(new_state, ctype)
        timer_state = new_state.get("timerState") or "idle"
        if timer_state in _LOCKED_STATES:
            raise ValueError(f"START_TIMER not allowed while {timer_state}")
        if timer_state != "running":
            if not new_state.get("timeLimitSet"):
                raise ConfigurationError(
                    f"START_TIMER needs a non-zero time limit for every area of "
                    f"{new_state.get('element')} {new_state.get('level')}"
                )
            new_state["presetMs"] = _resolve_preset(new_state)
            new_state["remainingMs"] = new_state["presetMs"]
            new_state["elapsedMs"] = 0
            new_state["warning"] = None
            new_state["timerState"] = "running"
            snapshot_required = True
        payload["presetMs"] = new_state["presetMs"]
        payload["areaIndex"] = new_state.get("activeArea")

    elif ctype == "STOP_TIMER":
        _require_initiated(new_state, ctype)
        if new_state.get("timerState") != "running":
            raise ValueError("STOP_TIMER requires a running timer")
        elapsed = _coerce_ms(cmd.get("elapsedMs"), "elapsedMs")
        preset = new_state.get("presetMs")
        # auto-stop at max time records the max time itself
        recorded = min(elapsed, preset) if preset else elapsed
        area = new_state.get("activeArea") or 1
        area_text = format_time_ms(recorded)

        new_state["areaTimes"][area - 1] = area_text
        completed = new_state.get("completedAreas") or 0
        max_areas = len(new_state.get("activeAreas") or [1])
        new_state["completedAreas"] = max(completed, area)
        following = next_active_area(completed, area, max_areas)
        first_empty = _first_empty_area(new_state)
        # areas filled by hand are skipped; the next timed area is the first empty one
        new_state["activeArea"] = following if first_empty is None else first_empty
        new_state["elapsedMs"] = recorded
        new_state["timerState"] = "stopped" if first_empty else "all_recorded"
        _refresh_preset(new_state)

        payload["areaIndex"] = area
        payload["areaTime"] = area_text
        payload["elapsedMs"] = recorded
        snapshot_required = True

    elif ctype == "TIMER_SYNC":
        elapsed = _coerce_ms(cmd.get("elapsedMs"), "elapsedMs")
        if new_state.get("timerState") == "running":
            reading = evaluate_countdown(
                new_state.get("presetMs"), elapsed, new_state.get("level")
            )
            new_state["elapsedMs"] = elapsed
            new_state["remainingMs"] = reading.remaining_ms
            new_state["warning"] = reading.warning
            payload["warning"] = reading.warning
            payload["expired"] = reading.expired
            payload["progress"] = reading.progress
        else:
            # late tick after STOP/RESET
            payload["warning"] = None
            payload["expired"] = False

    elif ctype == "SET_AREA_TIME":
        _require_initiated(new_state, ctype)
        timer_state = new_state.get("timerState")
        if timer_state in ("running", "submitted"):
            raise ValueError(f"SET_AREA_TIME not allowed while {timer_state}")
        area = cmd.get("areaIndex")
        if area not in (new_state.get("activeAreas") or [1]):
            raise ValueError(f"area {area!r} is not used by this class")

        raw = cmd.get("areaTime") or ""
        area_text = normalize_time_input(raw)
        if area_text:
            if not is_time_string(area_text, with_hundredths=True):
                raise FormatError(raw, "area time must fill ##:##.##")
            parse_time_ms(area_text)
            logger.debug(f"Normalized area {area} time: {raw!r} → {area_text!r}")

        new_state["areaTimes"][area - 1] = area_text
        recorded = [
            index
            for index in new_state.get("activeAreas") or [1]
            if new_state["areaTimes"][index - 1]
        ]
        new_state["completedAreas"] = len(recorded)
        if _all_areas_recorded(new_state):
            new_state["timerState"] = "all_recorded"
        else:
            new_state["activeArea"] = _first_empty_area(new_state)
            if new_state["timerState"] == "all_recorded" or recorded:
                new_state["timerState"] = "stopped"
        _refresh_preset(new_state)

        payload["areaTime"] = area_text
        snapshot_required = True

    elif ctype == "RESET_TIMER":
        _require_initiated(new_state, ctype)
        if new_state.get("timerState") == "submitted":
            raise ValueError("RESET_TIMER not allowed after SUBMIT_SCORE")
        if new_state.get("timerState") != "all_recorded":
            new_state["timerState"] = "idle"
        new_state["elapsedMs"] = 0
        _refresh_preset(new_state)
        snapshot_required = True

    elif ctype == "SUBMIT_SCORE":
        _require_initiated(new_state, ctype)
        timer_state = new_state.get("timerState")
        if timer_state in ("running", "submitted"):
            raise ValueError(f"SUBMIT_SCORE not allowed while {timer_state}")
        result = ScoreResult.from_command(cmd)

        used_areas: List[int] = new_state.get("activeAreas") or [1]
        area_times = new_state["areaTimes"]
        if result.is_qualified:
            for index in used_areas:
                if not is_stopwatch_area_valid(area_times[index - 1], True, result.kind):
                    raise ValueError(f"area {index} time is required for a Qualified result")

        total_ms = total_search_time_ms(*(area_times[index - 1] for index in used_areas))
        new_state["result"] = result.to_dict()
        new_state["totalTimeMs"] = total_ms
        new_state["totalTime"] = format_time_ms(total_ms)
        new_state["timerState"] = "submitted"
        new_state["warning"] = None
        new_state["version"] = new_state.get("version", 0) + 1

        payload["result"] = result.kind
        payload["reason"] = result.reason
        payload["totalTime"] = new_state["totalTime"]
        snapshot_required = True

    elif ctype == "RESET_ENTRY":
        _require_initiated(new_state, ctype)
        _reset_progress(new_state)
        _refresh_preset(new_state)
        new_state["version"] = new_state.get("version", 0) + 1
        snapshot_required = True

    else:
        logger.debug(f"Ignoring unknown session command {ctype!r}")

    return CommandOutcome(
        state=new_state, cmd_payload=payload, snapshot_required=snapshot_required
    )


def apply_command(state: Dict[str, Any], cmd: SessionCommand | Dict[str, Any]) -> CommandOutcome:
    """Apply a command to a session state.

    Args:
        state: Current session state dict (mutated in place with the new values)
        cmd: Command dict with 'type' field and command-specific params

    Returns:
        CommandOutcome with updated state, enriched command payload, and snapshot flag

    The transition itself runs on a deepcopy; ``state`` is only updated once
    the transition succeeded, so a raised error leaves it untouched.
    """
    outcome = _apply_transition(state, cmd)

    state.clear()
    state.update(outcome.state)

    return outcome


def validate_session_and_version(
    state: Dict[str, Any],
    cmd: Dict[str, Any],
    *,
    require_session: bool = True,
) -> ValidationError | None:
    """Validate command against current state to prevent stale updates.

    Validation rules:
        1. Missing sessionId when required (except INIT_ENTRY) → missing_session
        2. sessionId mismatch → stale_session (command for another entry)
        3. version < current → stale_version (command based on outdated state)
    """
    current_session = state.get("sessionId")
    incoming_session = cmd.get("sessionId")

    if require_session and not incoming_session and cmd.get("type") != "INIT_ENTRY":
        return ValidationError(
            kind="missing_session",
            message="sessionId required for all commands except INIT_ENTRY",
            status_code=400,
        )

    if incoming_session and current_session and incoming_session != current_session:
        return ValidationError(kind="stale_session", status_code=409)

    incoming_version = cmd.get("version")
    current_version = state.get("version", 0)
    if incoming_version is not None and incoming_version < current_version:
        return ValidationError(kind="stale_version", status_code=409)

    return None
