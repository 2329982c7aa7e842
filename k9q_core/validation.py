"""
Input validation schemas using Pydantic v2
Validates entry records and scoring-session commands
"""

import logging
import re
from typing import Dict, Optional, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .areas import ConfigurationError
from .time_strings import MAX_DURATION_MS, is_time_string, parse_time_ms

logger = logging.getLogger(__name__)

RESULT_KINDS = frozenset({"Qualified", "NQ", "Absent", "Excused", "Withdrawn", "DQ"})
RESULTS_REQUIRING_REASON = frozenset({"NQ", "Excused", "Withdrawn", "DQ"})

COMMAND_TYPES = frozenset(
    {
        "INIT_ENTRY",
        "START_TIMER",
        "STOP_TIMER",
        "TIMER_SYNC",
        "SET_AREA_TIME",
        "RESET_TIMER",
        "SUBMIT_SCORE",
        "RESET_ENTRY",
    }
)


class TimerConfig:
    """Timing constants shared by the countdown, area and limit checks"""

    # Warning shows at 32s remaining so the display reads ~30s
    WARNING_THRESHOLD_MS = 32_000
    NO_WARNING_LEVELS = frozenset({"master", "masters"})
    MAX_AREAS = 3
    AREA_MASK = "##:##.##"
    LIMIT_MASK = "##:##"
    NO_EDIT_ROLES = frozenset({"exhibitor", "steward"})


# ==================== VALIDATOR FUNCTIONS ====================


def _normalize_limit(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not (is_time_string(value, True) or is_time_string(value, False)):
        raise ValueError(f"time limit must be {TimerConfig.LIMIT_MASK} or {TimerConfig.AREA_MASK}")
    # range check (seconds <= 59, <= 99:59.99)
    parse_time_ms(value)
    return value


class ValidatedEntry(BaseModel):
    """Entry/class row as delivered by the data layer"""

    element: str = Field(..., max_length=100, description="Element, e.g. 'Interior'")
    level: str = Field(..., max_length=100, description="Level, e.g. 'Master'")
    areaCount: int = Field(1, ge=1, le=3, description="Configured area count (1-3)")

    timeLimit: Optional[str] = Field(None, max_length=11, description="Area 1 max time")
    timeLimit2: Optional[str] = Field(None, max_length=11, description="Area 2 max time")
    timeLimit3: Optional[str] = Field(None, max_length=11, description="Area 3 max time")

    armband: Optional[int] = Field(None, ge=0, le=99999)
    callName: Optional[str] = Field(None, max_length=255)

    @field_validator("element", "level")
    @classmethod
    def validate_class_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) == 0:
            raise ValueError("element and level cannot be empty")
        return v

    @field_validator("timeLimit", "timeLimit2", "timeLimit3")
    @classmethod
    def validate_time_limit(cls, v: Optional[str]) -> Optional[str]:
        """Blank limits become None; others must fill a time mask"""
        normalized = _normalize_limit(v)
        if normalized != v:
            logger.debug(f"Normalized time limit: {v!r} → {normalized!r}")
        return normalized

    @field_validator("callName")
    @classmethod
    def validate_call_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return InputSanitizer.sanitize_string(v, 255)

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ValidatedSessionCmd(BaseModel):
    """Scoring-session command with per-type field requirements"""

    type: str = Field(..., min_length=1, max_length=50, description="Command type")

    # Session token and version for stale command detection
    sessionId: Optional[str] = Field(None, min_length=1, max_length=64)
    version: Optional[int] = Field(None, ge=0, le=99999)

    # INIT_ENTRY
    entry: Optional[Dict] = Field(None, description="Entry record")

    # STOP_TIMER / TIMER_SYNC
    elapsedMs: Optional[int] = Field(
        None, ge=0, le=MAX_DURATION_MS, description="Stopwatch elapsed milliseconds"
    )

    # SET_AREA_TIME
    areaIndex: Optional[int] = Field(None, ge=1, le=3, description="Area (1-3)")
    areaTime: Optional[str] = Field(None, max_length=20, description="Area time as typed")

    # SUBMIT_SCORE
    result: Optional[str] = Field(None, description="Qualified, NQ, Absent, Excused, Withdrawn, DQ")
    reason: Optional[str] = Field(None, max_length=255, description="Fault/excusal reason")

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Validate command type is one of allowed types"""
        if v not in COMMAND_TYPES:
            raise ValueError(f"type must be one of {sorted(COMMAND_TYPES)}, got {v}")
        return v

    @field_validator("result")
    @classmethod
    def validate_result(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if v not in RESULT_KINDS:
            raise ValueError(f"result must be one of {sorted(RESULT_KINDS)}, got {v}")
        return v

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = InputSanitizer.sanitize_reason(v)
        return v or None

    @model_validator(mode="after")
    def validate_command_fields(self) -> Self:
        """Validate required fields based on command type"""
        cmd_type = self.type

        if cmd_type == "INIT_ENTRY":
            if self.entry is None:
                raise ValueError("INIT_ENTRY requires entry")

        elif cmd_type in ("STOP_TIMER", "TIMER_SYNC"):
            if self.elapsedMs is None:
                raise ValueError(f"{cmd_type} requires elapsedMs")

        elif cmd_type == "SET_AREA_TIME":
            if self.areaIndex is None:
                raise ValueError("SET_AREA_TIME requires areaIndex")
            if self.areaTime is None:
                raise ValueError("SET_AREA_TIME requires areaTime")

        elif cmd_type == "SUBMIT_SCORE":
            if self.result is None:
                raise ValueError("SUBMIT_SCORE requires result")
            if self.result in RESULTS_REQUIRING_REASON and not self.reason:
                raise ValueError(f"SUBMIT_SCORE result {self.result} requires reason")

        return self

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class InputSanitizer:
    """Utility class for input sanitization"""

    @staticmethod
    def sanitize_string(value: str, max_length: int = 255) -> str:
        """Sanitize string input"""
        if not isinstance(value, str):
            return str(value)[:max_length]

        value = value.strip()
        value = value[:max_length]
        value = value.replace("\0", "")

        return value

    @staticmethod
    def sanitize_reason(reason: str) -> str:
        """Sanitize a fault/excusal reason for display"""
        reason = InputSanitizer.sanitize_string(reason, 255)
        dangerous_chars = r'[<>{}[\]\\|;&$`"\*\x00-\x1f\x7f]'
        reason = re.sub(dangerous_chars, "", reason)
        return reason.strip()

    @staticmethod
    def validate_entry(entry_dict: dict) -> ValidatedEntry:
        """
        Validate an entry record

        Raises:
            ConfigurationError: If the record cannot drive a scoring session
        """
        try:
            return ValidatedEntry(**entry_dict)
        except PydanticValidationError as e:
            logger.warning(f"Entry validation failed: {e}")
            raise ConfigurationError(f"Invalid entry: {str(e)}")

    @staticmethod
    def validate_and_sanitize_cmd(cmd_dict: dict) -> ValidatedSessionCmd:
        """
        Validate and sanitize command dictionary

        Returns:
            ValidatedSessionCmd: Validated command object

        Raises:
            ValueError: If validation fails
        """
        try:
            return ValidatedSessionCmd(**cmd_dict)
        except PydanticValidationError as e:
            logger.warning(f"Command validation failed: {e}")
            raise ValueError(f"Invalid command: {str(e)}")


# ==================== EXPORT ====================

__all__ = [
    "COMMAND_TYPES",
    "RESULT_KINDS",
    "RESULTS_REQUIRING_REASON",
    "TimerConfig",
    "ValidatedEntry",
    "ValidatedSessionCmd",
    "InputSanitizer",
]
