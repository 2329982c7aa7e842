import pytest

from k9q_core import (
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


def test_parse_time_ms_handles_both_masks():
    assert parse_time_ms("02:15.50") == 135500
    assert parse_time_ms("01:30.00") == 90000
    assert parse_time_ms("03:00") == 180000
    assert parse_time_ms("00:00.00") == 0
    assert parse_time_ms(" 00:45.00 ") == 45000


def test_parse_time_ms_accepts_hours_layout():
    assert parse_time_ms("01:39:59.99") == 5_999_990
    assert parse_time_ms("00:02:15") == 135000


def test_parse_time_ms_mask_ceiling():
    assert parse_time_ms("99:59.99") == 5_999_990
    with pytest.raises(FormatError):
        parse_time_ms("02:00:00.00")


@pytest.mark.parametrize(
    "text",
    ["", "1:30", "01:3", "01:30.5", "0130.00", "01-30.00", "ab:cd.ef", "01:60.00", "00:60:00.00"],
)
def test_parse_time_ms_rejects_partial_or_malformed(text):
    with pytest.raises(FormatError):
        parse_time_ms(text)


def test_parse_time_ms_rejects_missing_value():
    with pytest.raises(FormatError) as excinfo:
        parse_time_ms(None)
    assert excinfo.value.text is None
    assert isinstance(excinfo.value, ValueError)


def test_format_time_ms_component_switches():
    assert format_time_ms(135500) == "02:15.50"
    assert format_time_ms(135500, include_hours=False, include_hundredths=False) == "02:15"
    assert format_time_ms(135500, include_hours=True, include_hundredths=True) == "00:02:15.50"
    assert format_time_ms(MAX_DURATION_MS, include_hours=True) == "01:39:59.99"
    assert format_time_ms(MAX_DURATION_MS) == "99:59.99"


def test_format_time_ms_truncates_below_hundredths():
    assert format_time_ms(1239) == "00:01.23"


@pytest.mark.parametrize("bad", [-1, MAX_DURATION_MS + 1, 1.5, True, "100"])
def test_format_time_ms_rejects_out_of_range(bad):
    with pytest.raises(FormatError):
        format_time_ms(bad)


@pytest.mark.parametrize("text", ["02:15.50", "00:00.00", "59:59.99", "99:59.99"])
def test_format_inverts_parse(text):
    assert format_time_ms(parse_time_ms(text)) == text


@pytest.mark.parametrize("ms", [0, 10, 45000, 135500, 3_600_000, 4_321_870, 5_999_990])
def test_parse_inverts_format_with_all_components(ms):
    assert parse_time_ms(format_time_ms(ms, True, True)) == ms


def test_is_time_string_masks():
    assert is_time_string("01:23.45")
    assert not is_time_string("1:23.45")
    assert is_time_string("03:00", with_hundredths=False)
    assert not is_time_string("03:00")
    assert not is_time_string(None)


def test_is_area_valid_hidden_and_visible():
    assert is_area_valid(None, False, True)
    assert is_area_valid("01:23.45", True, True)
    assert not is_area_valid("01:23", True, True)
    assert is_area_valid("01:23", True, False)
    assert not is_area_valid("", True, False)


def test_stopwatch_area_only_required_for_qualified():
    assert is_stopwatch_area_valid("", True, "NQ")
    assert not is_stopwatch_area_valid("", True, "Qualified")
    assert is_stopwatch_area_valid("00:45.10", True, "Qualified")


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("01:23.45", "01:23.45"),
        ("1:23.45", "01:23.45"),
        ("1:23", "01:23.00"),
        ("123.45", "02:03.45"),
        ("89.5", "01:29.50"),
        ("012345", "01:23.45"),
        ("12345", "01:23.45"),
        ("2345", "00:23.45"),
        ("345", "00:03.45"),
        ("45", "00:00.45"),
        ("5", "05:00.00"),
        ("", ""),
        ("   ", ""),
        ("99:99.99", "99:99.99"),
    ],
)
def test_normalize_time_input(raw, expected):
    assert normalize_time_input(raw) == expected


@pytest.mark.parametrize(
    "raw,max_minutes,expected",
    [
        ("1", None, "01:00"),
        ("130", None, "01:30"),
        ("1:30", None, "01:30"),
        ("0:90", None, "01:30"),
        ("215", None, "02:15"),
        ("1000", None, "05:00"),
        ("5:30", None, "05:00"),
        ("12", 3, "03:00"),
        ("abc", None, ""),
    ],
)
def test_normalize_limit_input(raw, max_minutes, expected):
    assert normalize_limit_input(raw, max_minutes) == expected


def test_total_search_time_skips_blank_areas():
    assert total_search_time_ms("01:00.50", "", None) == 60500
    assert total_search_time_ms("01:00.50", "00:30.25", "00:10.00") == 100750
    assert total_search_time_ms() == 0
