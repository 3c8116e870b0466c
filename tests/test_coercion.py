"""Tests for scalar coercion."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from typed_records.coercion import (
    coerce_key,
    coerce_scalar,
    duration_to_nanoseconds,
    encode_key,
    encode_scalar,
    nanoseconds_to_duration,
    seconds_to_time,
    time_to_seconds,
    to_float32,
    to_int8,
    to_int16,
    to_int32,
    to_int64,
    to_uint8,
    to_uint16,
    to_uint32,
    to_uint64,
)
from typed_records.errors import ConversionError, UnsupportedKindError
from typed_records.types import PrimitiveType, TypeRegistry


class TestIntegerWidths:
    """Tests for the per-width integer conversions."""

    def test_in_range_unchanged(self):
        """Values inside the target range pass through."""
        assert to_int8(-128) == -128
        assert to_int8(127) == 127
        assert to_uint16(65535) == 65535
        assert to_int32(-5) == -5
        assert to_uint32(7) == 7

    def test_signed_wraparound(self):
        """Signed conversions wrap with two's complement."""
        assert to_int8(128) == -128
        assert to_int8(300) == 44
        assert to_int16(32768) == -32768
        assert to_int32(2**31) == -(2**31)
        assert to_int64(2**64 - 1) == -1
        assert to_int64(2**63) == -(2**63)

    def test_unsigned_wraparound(self):
        """Unsigned conversions keep the low bits."""
        assert to_uint8(-1) == 255
        assert to_uint8(256) == 0
        assert to_uint16(-1) == 65535
        assert to_uint32(2**32 + 3) == 3
        assert to_uint64(-1) == 2**64 - 1


class TestFloatWidths:
    """Tests for float narrowing."""

    def test_float32_rounds(self):
        """Float32 narrowing rounds to single precision."""
        assert to_float32(0.1) != 0.1
        assert to_float32(0.1) == pytest.approx(0.1, rel=1e-7)
        assert to_float32(1.5) == 1.5

    def test_float32_overflow_is_infinite(self):
        """Values past the float32 range become infinities."""
        assert math.isinf(to_float32(1e40))
        assert to_float32(-1e40) < 0


class TestScalarCoercion:
    """Tests for coerce_scalar and encode_scalar."""

    def test_integer_targets_require_int(self):
        """Non-integers are rejected for integer kinds."""
        with pytest.raises(ConversionError):
            coerce_scalar("1", PrimitiveType.INT32)
        with pytest.raises(ConversionError):
            coerce_scalar(1.0, PrimitiveType.INT64)
        with pytest.raises(ConversionError):
            coerce_scalar(True, PrimitiveType.INT)

    def test_float_targets(self):
        """Float kinds accept floats and ints."""
        assert coerce_scalar(3, PrimitiveType.FLOAT32) == 3.0
        assert coerce_scalar(8.9, PrimitiveType.FLOAT64) == 8.9
        with pytest.raises(ConversionError):
            coerce_scalar("8.9", PrimitiveType.FLOAT64)

    def test_string_and_bool_pass_through(self):
        """Strings and booleans are not validated."""
        assert coerce_scalar("text", PrimitiveType.STRING) == "text"
        assert coerce_scalar(True, PrimitiveType.BOOL) is True
        assert coerce_scalar(1, PrimitiveType.STRING) == 1

    def test_encode_widens_to_int64(self):
        """Encoding reinterprets every integer width as int64."""
        assert encode_scalar(200, PrimitiveType.UINT8) == 200
        assert encode_scalar(2**64 - 1, PrimitiveType.UINT64) == -1
        assert encode_scalar(2**64 - 1, PrimitiveType.UINT) == -1

    def test_encode_float(self):
        """Encoded floats are Python floats."""
        assert encode_scalar(2, PrimitiveType.FLOAT64) == 2.0
        assert isinstance(encode_scalar(2, PrimitiveType.FLOAT32), float)


class TestKeyCoercion:
    """Tests for map key coercion."""

    def test_integer_and_string_keys(self):
        """Integer and string keys are supported."""
        registry = TypeRegistry()
        assert encode_key(2**64 - 1, registry.get_or_raise("uint64")) == -1
        assert coerce_key(-1, registry.get_or_raise("uint64")) == 2**64 - 1
        assert coerce_key("k", registry.get_or_raise("string")) == "k"

    def test_unsigned_keys_stored_as_int64(self):
        """Unsigned keys keep their value up to int64 max and wrap above it."""
        registry = TypeRegistry()
        assert encode_key(2**32 - 1, registry.get_or_raise("uint32")) == 2**32 - 1
        assert encode_key(2**63 - 1, registry.get_or_raise("uint64")) == 2**63 - 1
        assert encode_key(2**63, registry.get_or_raise("uint64")) == -(2**63)

    @pytest.mark.parametrize("name", ["float64", "bool", "time"])
    def test_other_keys_rejected(self, name):
        """Any other key kind is unsupported."""
        registry = TypeRegistry()
        with pytest.raises(UnsupportedKindError):
            coerce_key(1, registry.get_or_raise(name))


class TestTimeConversions:
    """Tests for time and duration conversions."""

    def test_time_to_seconds(self):
        """Times become whole epoch seconds."""
        assert time_to_seconds(datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc)) == 60
        assert time_to_seconds(datetime(1969, 12, 31, 23, 59, 59, tzinfo=timezone.utc)) == -1

    def test_time_offset_normalized(self):
        """Aware times in other zones are converted to UTC."""
        plus_two = timezone(timedelta(hours=2))
        assert time_to_seconds(datetime(1970, 1, 1, 2, 0, tzinfo=plus_two)) == 0

    def test_seconds_to_time(self):
        """Epoch seconds become aware UTC datetimes."""
        assert seconds_to_time(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert seconds_to_time(-1) == datetime(1969, 12, 31, 23, 59, 59, tzinfo=timezone.utc)

    def test_seconds_to_time_requires_int(self):
        """Non-integer time bins are rejected."""
        with pytest.raises(ConversionError):
            seconds_to_time(1.5)
        with pytest.raises(ConversionError):
            seconds_to_time("0")

    def test_time_before_year_one_in_utc(self):
        """Aware times whose UTC instant precedes year 1 still convert."""
        plus_one = timezone(timedelta(hours=1))
        start = time_to_seconds(datetime(1, 1, 1, tzinfo=timezone.utc))
        assert start == -62135596800
        assert time_to_seconds(datetime(1, 1, 1, 0, 30, tzinfo=plus_one)) == start - 1800

    def test_naive_times_taken_as_utc(self):
        """Naive times convert as if they were UTC."""
        assert time_to_seconds(datetime(1970, 1, 1, 0, 0, 5)) == 5
        assert time_to_seconds(datetime(9999, 12, 31, 23, 59, 59)) == 253402300799

    @pytest.mark.parametrize("seconds", [2**40, -(2**40), 253402300800, -62135596801, 2**63 - 1])
    def test_seconds_out_of_range(self, seconds):
        """Seconds outside years 1 to 9999 raise ConversionError."""
        with pytest.raises(ConversionError) as exc_info:
            seconds_to_time(seconds)
        assert exc_info.value.kind == "time"

    def test_seconds_at_range_limits(self):
        """The first and last representable seconds convert."""
        assert seconds_to_time(-62135596800) == datetime(1, 1, 1, tzinfo=timezone.utc)
        assert seconds_to_time(253402300799) == datetime(
            9999, 12, 31, 23, 59, 59, tzinfo=timezone.utc
        )

    def test_durations(self):
        """Durations convert to and from nanoseconds."""
        assert duration_to_nanoseconds(timedelta(minutes=1)) == 60_000_000_000
        assert duration_to_nanoseconds(timedelta(microseconds=-1)) == -1000
        assert nanoseconds_to_duration(1500) == timedelta(microseconds=1)
        assert nanoseconds_to_duration(3_600_000_000_000) == timedelta(hours=1)
