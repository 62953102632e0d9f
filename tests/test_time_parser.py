import pytest
from clocksync.time_parser import correct_confusions, format_clock_time, parse_clock_time


def test_parse_full_format():
    assert parse_clock_time("00:05:30.250") == pytest.approx(330.25)


def test_parse_with_hours():
    assert parse_clock_time("01:02:03.004") == pytest.approx(3723.004)


def test_parse_round_trip_formatted_times():
    for hours, minutes, seconds, millis in [(0, 0, 0, 0), (0, 59, 59, 999), (12, 30, 1, 500), (99, 0, 45, 7)]:
        text = f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"
        expected = hours * 3600 + minutes * 60 + seconds + millis / 1000
        assert parse_clock_time(text) == pytest.approx(expected)


def test_parse_rejects_out_of_range_fields():
    assert parse_clock_time("61:61:61.999") is None
    assert parse_clock_time("00:60:00.000") is None
    assert parse_clock_time("00:00:60.000") is None


def test_parse_no_parse_is_none_not_zero():
    assert parse_clock_time("") is None
    assert parse_clock_time(None) is None
    assert parse_clock_time("garbage") is None
    assert parse_clock_time("00:05:30") is None  # milliseconds missing


def test_parse_strips_whitespace():
    assert parse_clock_time(" 00 : 05 : 30 . 250 \n") == pytest.approx(330.25)


def test_parse_corrects_ocr_confusions():
    # O->0, l->1, S->5, B->8, Z->2
    assert parse_clock_time("OO:lS:2B.ZOO") == pytest.approx(15 * 60 + 28 + 0.2)


def test_parse_loose_grammar_single_digit_fields():
    assert parse_clock_time("1:2:3.456") == pytest.approx(3723.456)


def test_parse_minutes_seconds_only():
    assert parse_clock_time("05:30.250") == pytest.approx(330.25)
    assert parse_clock_time("x12:34.567") == pytest.approx(754.567)


def test_parse_rejects_when_every_grammar_is_out_of_range():
    assert parse_clock_time("00:75:10.000") is None
    assert parse_clock_time("99:99:10.500") is None


def test_parse_falls_through_to_looser_grammar():
    # Strict grammar only finds 00:99:00.000 (invalid), the loose one finds 1:23:45.678
    assert parse_clock_time("1:23:45.678 00:99:00.000") == pytest.approx(5025.678)


def test_parse_finds_time_inside_noise():
    assert parse_clock_time("..00:00:12.345::") == pytest.approx(12.345)


def test_correct_confusions_is_idempotent():
    for text in ["OO:lS:2B.ZOO", "I l o O S B z Z", "00:00:01.000", "abc SOS"]:
        once = correct_confusions(text)
        assert correct_confusions(once) == once


def test_correct_confusions_replaces_all_occurrences():
    assert correct_confusions("OoIlSBZz") == "00115822"


def test_format_clock_time():
    assert format_clock_time(330.25) == "00:05:30.250"
    assert format_clock_time(0) == "00:00:00.000"
    assert format_clock_time(3723.004) == "01:02:03.004"


def test_format_rejects_negative():
    with pytest.raises(ValueError):
        format_clock_time(-1.0)


def test_format_then_parse():
    for value in [0.0, 12.345, 599.999, 3600.5]:
        assert parse_clock_time(format_clock_time(value)) == pytest.approx(value)


def test_non_ascii_digits_do_not_parse():
    # Arabic-Indic and fullwidth digits
    assert parse_clock_time("٠٠:٠٥:٣٠.٢٥٠") is None
    assert parse_clock_time("００:０５:３０.２５０") is None
    assert parse_clock_time("٠٥:٣٠.٢٥٠") is None
