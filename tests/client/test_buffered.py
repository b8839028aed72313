"""Tests for BufferedResult and PostgreSQL-style text rendering."""

import datetime
import decimal
import uuid

import pytest

from pgtext.client.backend import ExecStatus, ResultHandle
from pgtext.client.buffered import BufferedResult, render_text


class TestRenderText:
    def test_none_stays_none(self):
        assert render_text(None) is None

    def test_booleans(self):
        assert render_text(True) == "t"
        assert render_text(False) == "f"

    def test_numbers(self):
        assert render_text(42) == "42"
        assert render_text(decimal.Decimal("1.50")) == "1.50"

    def test_bytes_as_hex(self):
        assert render_text(b"\xde\xad") == "\\xdead"
        assert render_text(memoryview(b"\x00")) == "\\x00"

    def test_datetime_uses_space_separator(self):
        value = datetime.datetime(2024, 1, 2, 3, 4, 5)
        assert render_text(value) == "2024-01-02 03:04:05"

    def test_date(self):
        assert render_text(datetime.date(2024, 1, 2)) == "2024-01-02"

    def test_array(self):
        assert render_text([1, None, 3]) == "{1,NULL,3}"
        assert render_text([True, False]) == "{t,f}"

    def test_uuid(self):
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")
        assert render_text(value) == "12345678-1234-5678-1234-567812345678"


class TestBufferedResult:
    def test_satisfies_protocol(self):
        assert isinstance(BufferedResult(ExecStatus.COMMAND_OK), ResultHandle)

    def test_cells(self):
        result = BufferedResult(ExecStatus.TUPLES_OK, [(1, None)], nfields=2)
        assert result.ntuples() == 1
        assert result.nfields() == 2
        assert result.get_value(0, 0) == "1"
        assert not result.get_is_null(0, 0)
        assert result.get_value(0, 1) == ""
        assert result.get_is_null(0, 1)

    def test_error_factory(self):
        result = BufferedResult.error(ExecStatus.FATAL_ERROR, "boom\n")
        assert result.status.is_error
        assert result.error_message == "boom\n"
        assert result.ntuples() == 0

    def test_clear(self):
        result = BufferedResult(ExecStatus.TUPLES_OK, [("a",)], nfields=1)
        result.clear()
        assert result.cleared
        with pytest.raises(RuntimeError):
            result.get_value(0, 0)


class TestExecStatus:
    @pytest.mark.parametrize(
        "status",
        [ExecStatus.BAD_RESPONSE, ExecStatus.NONFATAL_ERROR, ExecStatus.FATAL_ERROR],
    )
    def test_error_statuses(self, status):
        assert status.is_error

    @pytest.mark.parametrize(
        "status", [ExecStatus.EMPTY_QUERY, ExecStatus.COMMAND_OK, ExecStatus.TUPLES_OK]
    )
    def test_ok_statuses(self, status):
        assert not status.is_error


class TestRenderServerForms:
    """Values the binary codecs decode, rendered as the server prints them."""

    def test_interval_whole_day(self):
        assert render_text(datetime.timedelta(days=1)) == "1 day"

    def test_interval_days_and_time(self):
        assert render_text(datetime.timedelta(days=2, hours=3)) == "2 days 03:00:00"

    def test_interval_fraction(self):
        assert render_text(datetime.timedelta(seconds=1, microseconds=500000)) == "00:00:01.5"

    def test_interval_zero(self):
        assert render_text(datetime.timedelta(0)) == "00:00:00"

    def test_interval_negative(self):
        assert render_text(datetime.timedelta(seconds=-1)) == "-00:00:01"
        assert render_text(datetime.timedelta(days=-1)) == "-1 days"

    def test_timestamptz_utc(self):
        value = datetime.datetime(2024, 1, 1, tzinfo=datetime.UTC)
        assert render_text(value) == "2024-01-01 00:00:00+00"

    def test_timestamptz_half_hour_offset(self):
        tz = datetime.timezone(datetime.timedelta(hours=5, minutes=30))
        value = datetime.datetime(2024, 1, 1, 12, 0, tzinfo=tz)
        assert render_text(value) == "2024-01-01 12:00:00+05:30"

    def test_timestamptz_negative_offset(self):
        tz = datetime.timezone(datetime.timedelta(hours=-8))
        value = datetime.datetime(2024, 1, 1, 12, 0, tzinfo=tz)
        assert render_text(value) == "2024-01-01 12:00:00-08"

    def test_timestamp_fraction_trimmed(self):
        value = datetime.datetime(2024, 1, 1, 0, 0, 0, 250000)
        assert render_text(value) == "2024-01-01 00:00:00.25"

    def test_timetz(self):
        value = datetime.time(9, 30, tzinfo=datetime.UTC)
        assert render_text(value) == "09:30:00+00"

    def test_text_array_quoting(self):
        assert render_text(["a,b", ""]) == '{"a,b",""}'

    def test_array_quotes_specials(self):
        assert render_text(['say "hi"', "back\\slash", "two words", "null"]) == (
            '{"say \\"hi\\"","back\\\\slash","two words","null"}'
        )

    def test_nested_array(self):
        assert render_text([[1, 2], [3, None]]) == "{{1,2},{3,NULL}}"

    def test_float_forms(self):
        assert render_text(1.0) == "1"
        assert render_text(0.1) == "0.1"
        assert render_text(float("inf")) == "Infinity"
        assert render_text(float("-inf")) == "-Infinity"
        assert render_text(float("nan")) == "NaN"
