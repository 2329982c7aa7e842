import pytest

from k9q_core import (
    AreaConfig,
    ConfigurationError,
    ElementLevel,
    FormatError,
    TimerConfig,
    evaluate_countdown,
    is_max_time_editable,
    is_max_time_valid,
    is_time_limit_set,
    max_time_bounds,
    max_time_progress,
    parse_time_ms,
    resolve_entry_preset_ms,
    resolve_preset_ms,
)


def test_single_area_always_uses_first_limit():
    for a1 in ("", "00:10.00"):
        assert resolve_preset_ms(1, a1, "00:20.00", "", "01:30.00", "", "") == parse_time_ms(
            "01:30.00"
        )


def test_two_areas_fallback_chain():
    assert resolve_preset_ms(2, "", "", "", "01:00.00", "02:00.00", "") == 60000
    assert resolve_preset_ms(2, "00:45.00", "", "", "01:00.00", "02:00.00", "") == 120000
    # both recorded: back to limit1
    assert resolve_preset_ms(2, "00:45.00", "01:10.00", "", "01:00.00", "02:00.00", "") == 60000


def test_three_areas_fallback_chain():
    limits = ("01:00.00", "00:45.00", "00:30.00")
    assert resolve_preset_ms(3, "", "", "", *limits) == 60000
    assert resolve_preset_ms(3, "00:50.00", "", "", *limits) == 45000
    assert resolve_preset_ms(3, "00:50.00", "00:40.00", None, *limits) == 30000
    assert resolve_preset_ms(3, "00:50.00", "00:40.00", "00:20.00", *limits) == 60000


def test_whitespace_area_counts_as_empty():
    assert resolve_preset_ms(2, "   ", "", "", "01:00", "02:00", "") == 60000


def test_resolve_preset_accepts_countdown_mask_limits():
    assert resolve_preset_ms(2, "00:45.00", "", "", "03:00", "02:00", None) == 120000


def test_resolve_preset_errors():
    with pytest.raises(ConfigurationError):
        resolve_preset_ms(0, "", "", "", "01:00", "", "")
    with pytest.raises(FormatError):
        resolve_preset_ms(2, "00:45.00", "", "", "01:00", "2:00", "")
    with pytest.raises(FormatError):
        resolve_preset_ms(2, "00:45.00", "", "", "01:00", None, None)


def test_entry_preset_uses_active_area_count():
    master = AreaConfig(3, ElementLevel("Interior", "Master"))
    # Interior Master is a single-area class, so area 1 being filled does not move on
    assert resolve_entry_preset_ms(master, ["00:50.00"], ["02:00", "01:00", "01:00"]) == 120000

    containers = AreaConfig(3, ElementLevel("Containers", "Master"))
    assert resolve_entry_preset_ms(containers, ["00:50.00"], ["02:00", "01:00", "00:30"]) == 60000


def test_is_time_limit_set():
    assert is_time_limit_set(1, "03:00", None, None)
    assert is_time_limit_set("2", "03:00", "02:00", None)
    assert not is_time_limit_set(2, "03:00", None, None)
    assert not is_time_limit_set(1, ":", None, None)
    assert not is_time_limit_set(1, "00:00", None, None)
    assert not is_time_limit_set(None, "03:00", None, None)
    assert not is_time_limit_set("x", "03:00", None, None)
    assert not is_time_limit_set(0, "03:00", None, None)
    assert not is_time_limit_set(-1, "03:00", "02:00", "01:00")


def test_max_time_bounds_by_class():
    assert max_time_bounds("Interior", "Novice") == (1, 3)
    assert max_time_bounds("Exterior", "Advanced") == (2, 4)
    assert max_time_bounds("Exterior", "Master") == (3, 5)
    assert max_time_bounds("Handler Discrimination", "Excellent") == (3, 6)
    assert max_time_bounds("Handler Discrimination", "Master") == (2, 3)
    assert max_time_bounds("Detective", "Detective") == (7, 15)
    assert max_time_bounds("Unknown", None) == (7, 15)


def test_max_time_editable_rules():
    assert is_max_time_editable("Interior", "Novice")
    assert not is_max_time_editable("Handler Discrimination", "Novice")
    assert is_max_time_editable("Handler Discrimination", "Master")
    assert not is_max_time_editable("Containers", "Novice")
    assert not is_max_time_editable("Interior", "Novice", role="Steward")


def test_max_time_valid():
    assert is_max_time_valid("Interior", "Novice", "02:00", 1)
    assert not is_max_time_valid("Interior", "Novice", "04:00", 1)
    assert not is_max_time_valid("Interior", "Novice", "2:00", 1)
    assert not is_max_time_valid("Exterior", "Master", "03:75", 1)
    # not editable or not used by the class: always passes
    assert is_max_time_valid("Containers", "Novice", "99:00", 1)
    assert is_max_time_valid("Interior", "Master", "", 2)


def test_max_time_progress_clamps():
    assert max_time_progress(60000, 30000) == 0.5
    assert max_time_progress(60000, 90000) == 1.0
    assert max_time_progress(60000, -5) == 0.0
    assert max_time_progress(0, 500) == 0.0


def test_countdown_thirty_second_warning():
    reading = evaluate_countdown(180000, 150000, "Novice")
    assert reading.remaining_ms == 30000
    assert reading.warning == "thirty_second"
    assert not reading.expired

    early = evaluate_countdown(180000, 180000 - TimerConfig.WARNING_THRESHOLD_MS - 1, "Novice")
    assert early.warning is None


def test_countdown_no_warning_for_master_or_when_stopped():
    assert evaluate_countdown(180000, 160000, "Master").warning is None
    assert evaluate_countdown(180000, 160000, "masters").warning is None
    assert evaluate_countdown(180000, 160000, "Novice", running=False).warning is None


def test_countdown_expired():
    reading = evaluate_countdown(180000, 185000, "Master")
    assert reading.expired
    assert reading.warning == "time_expired"
    assert reading.remaining_ms == 0
    assert reading.progress == 1.0


def test_countdown_without_preset():
    reading = evaluate_countdown(None, 5000)
    assert reading.warning is None
    assert not reading.expired
    assert reading.remaining_ms == 0
