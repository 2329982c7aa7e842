"""Type definitions for entry records, session state and commands."""
from __future__ import annotations

from typing import List, Optional, TypedDict


class EntryRecord(TypedDict, total=False):
    """An entry row joined with its class, as the data layer delivers it."""
    element: str  # e.g. "Interior", "Handler Discrimination"
    level: str  # e.g. "Novice", "Master"
    areaCount: int | str  # configured areas (1-3); may arrive as a string
    timeLimit: Optional[str]  # area 1 max time, "MM:SS"
    timeLimit2: Optional[str]
    timeLimit3: Optional[str]
    armband: Optional[int]
    callName: Optional[str]


class ScoreResultDict(TypedDict):
    kind: str  # Qualified | NQ | Absent | Excused | Withdrawn | DQ
    reason: Optional[str]


class SessionState(TypedDict, total=False):
    """
    TypedDict representing one entry's scoring session.

    All fields are optional (total=False), but every key is present after
    default_session_state().
    """
    # Session management
    sessionId: str
    version: int
    initiated: bool

    # Entry / class
    element: str
    level: str
    armband: Optional[int]
    callName: Optional[str]
    areaCount: int  # configured count from the class record
    activeAreas: List[int]  # areas actually timed (see SINGLE_AREA_CLASSES)
    timeLimits: List[Optional[str]]  # limit per area, "MM:SS"
    timeLimitSet: bool

    # Area progress
    areaTimes: List[str]  # "MM:SS.HH" or "" per area
    completedAreas: int
    activeArea: int

    # Timer
    timerState: str  # 'idle' | 'running' | 'stopped' | 'all_recorded' | 'submitted'
    presetMs: Optional[int]
    elapsedMs: int
    remainingMs: Optional[int]
    warning: Optional[str]  # 'time_expired' | 'thirty_second'

    # Outcome
    result: Optional[ScoreResultDict]
    totalTimeMs: Optional[int]
    totalTime: Optional[str]


class SessionCommand(TypedDict, total=False):
    """
    TypedDict for command payloads sent to apply_command().

    Fields vary by command type.
    """
    # Common
    type: str
    sessionId: Optional[str]
    version: Optional[int]

    # INIT_ENTRY
    entry: EntryRecord

    # STOP_TIMER / TIMER_SYNC
    elapsedMs: int

    # SET_AREA_TIME
    areaIndex: int
    areaTime: str

    # SUBMIT_SCORE
    result: str
    reason: Optional[str]
