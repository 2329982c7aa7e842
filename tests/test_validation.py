import pytest

from k9q_core import ConfigurationError, InputSanitizer, ValidatedEntry, ValidatedSessionCmd


def test_validated_entry_normalises_fields():
    entry = ValidatedEntry(
        element=" Interior ",
        level="Novice",
        areaCount="2",
        timeLimit=" 03:00 ",
        timeLimit2="",
        callName="  Rex\0 ",
    )
    assert entry.element == "Interior"
    assert entry.areaCount == 2
    assert entry.timeLimit == "03:00"
    assert entry.timeLimit2 is None
    assert entry.timeLimit3 is None
    assert entry.callName == "Rex"


def test_validated_entry_accepts_stopwatch_mask_limit():
    assert ValidatedEntry(element="Exterior", level="Master", timeLimit="04:30.00").timeLimit == "04:30.00"


@pytest.mark.parametrize(
    "entry",
    [
        {"element": "", "level": "Novice"},
        {"element": "Interior", "level": "Novice", "areaCount": 0},
        {"element": "Interior", "level": "Novice", "timeLimit": "3:00"},
        {"element": "Interior", "level": "Novice", "timeLimit": "03:75"},
        {"level": "Novice"},
    ],
)
def test_validate_entry_raises_configuration_error(entry):
    with pytest.raises(ConfigurationError):
        InputSanitizer.validate_entry(entry)


def test_validate_cmd_accepts_known_types():
    cmd = InputSanitizer.validate_and_sanitize_cmd(
        {"type": "STOP_TIMER", "sessionId": "sid", "elapsedMs": 41230}
    )
    assert isinstance(cmd, ValidatedSessionCmd)
    assert cmd.elapsedMs == 41230


@pytest.mark.parametrize(
    "cmd",
    [
        {"type": "JUMP"},
        {"type": "INIT_ENTRY"},
        {"type": "STOP_TIMER"},
        {"type": "TIMER_SYNC", "elapsedMs": -1},
        {"type": "SET_AREA_TIME", "areaIndex": 4, "areaTime": "00:10.00"},
        {"type": "SET_AREA_TIME", "areaIndex": 1},
        {"type": "SUBMIT_SCORE"},
        {"type": "SUBMIT_SCORE", "result": "Maybe"},
        {"type": "SUBMIT_SCORE", "result": "Excused", "reason": "  "},
    ],
)
def test_validate_cmd_rejects_invalid(cmd):
    with pytest.raises(ValueError):
        InputSanitizer.validate_and_sanitize_cmd(cmd)


def test_validate_cmd_sanitises_reason():
    cmd = InputSanitizer.validate_and_sanitize_cmd(
        {"type": "SUBMIT_SCORE", "result": "DQ", "reason": " <b>Aggression</b> "}
    )
    assert cmd.reason == "bAggression/b"


def test_sanitize_string_limits_length():
    assert InputSanitizer.sanitize_string("  abcdef  ", 3) == "abc"
    assert InputSanitizer.sanitize_string(12345, 3) == "123"
