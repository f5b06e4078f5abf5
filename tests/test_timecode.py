"""Tests for speakerscribe.export.timecode module."""

from __future__ import annotations

from speakerscribe.export.timecode import format_srt_time, parse_timestamp


class TestParseTimestamp:
    def test_minutes_seconds(self) -> None:
        assert parse_timestamp("00:02") == 2
        assert parse_timestamp("01:30") == 90
        assert parse_timestamp("12:05") == 725

    def test_hours_minutes_seconds(self) -> None:
        assert parse_timestamp("00:00:02") == 2
        assert parse_timestamp("01:02:05") == 3725
        assert parse_timestamp("02:00:00") == 7200

    def test_minutes_above_sixty(self) -> None:
        assert parse_timestamp("75:00") == 4500

    def test_single_part_is_zero(self) -> None:
        assert parse_timestamp("42") == 0

    def test_four_parts_is_zero(self) -> None:
        assert parse_timestamp("00:01:02:03") == 0

    def test_non_numeric_is_zero(self) -> None:
        assert parse_timestamp("ab:cd") == 0
        assert parse_timestamp("01:xx") == 0
        assert parse_timestamp("01:02:zz") == 0

    def test_empty_is_zero(self) -> None:
        assert parse_timestamp("") == 0
        assert parse_timestamp(":") == 0

    def test_fractional_seconds(self) -> None:
        assert parse_timestamp("00:02.5") == 2.5

    def test_float_syntax_not_accepted(self) -> None:
        assert parse_timestamp("1_0:00") == 0
        assert parse_timestamp("1e1:00") == 0
        assert parse_timestamp("inf:00") == 0
        assert parse_timestamp("00:nan") == 0

    def test_surrounding_whitespace_allowed(self) -> None:
        assert parse_timestamp(" 01 : 30 ") == 90


class TestFormatSrtTime:
    def test_zero(self) -> None:
        assert format_srt_time(0) == "00:00:00,000"

    def test_seconds(self) -> None:
        assert format_srt_time(17) == "00:00:17,000"

    def test_minutes_and_hours(self) -> None:
        assert format_srt_time(3725) == "01:02:05,000"

    def test_milliseconds(self) -> None:
        assert format_srt_time(2.5) == "00:00:02,500"
        assert format_srt_time(61.042) == "00:01:01,042"

    def test_millisecond_rounding_carries(self) -> None:
        assert format_srt_time(59.9996) == "00:01:00,000"

    def test_negative_clamps_to_zero(self) -> None:
        assert format_srt_time(-3) == "00:00:00,000"
