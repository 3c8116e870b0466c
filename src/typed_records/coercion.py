"""Scalar coercion shared by the encoder and decoder.

Integer conversions reinterpret the value's low bits in the target width
(two's complement) and never check for overflow: decoding ``300`` into an
``int8`` field yields ``44``, and a ``uint64`` above ``2**63 - 1`` encodes
to a negative ``int64``. Float conversions narrow with IEEE rounding.
"""

from __future__ import annotations

import struct
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from typed_records.errors import ConversionError, UnsupportedKindError
from typed_records.types import (
    DurationTypeDefinition,
    PrimitiveType,
    ScalarTypeDefinition,
    TypeDefinition,
)

NANOS_PER_SECOND = 1_000_000_000
NANOS_PER_MICROSECOND = 1_000

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _wrap_signed(value: int, bits: int) -> int:
    mask = (1 << bits) - 1
    value &= mask
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _wrap_unsigned(value: int, bits: int) -> int:
    return value & ((1 << bits) - 1)


def to_int8(value: int) -> int:
    return _wrap_signed(value, 8)


def to_int16(value: int) -> int:
    return _wrap_signed(value, 16)


def to_int32(value: int) -> int:
    return _wrap_signed(value, 32)


def to_int64(value: int) -> int:
    return _wrap_signed(value, 64)


def to_uint8(value: int) -> int:
    return _wrap_unsigned(value, 8)


def to_uint16(value: int) -> int:
    return _wrap_unsigned(value, 16)


def to_uint32(value: int) -> int:
    return _wrap_unsigned(value, 32)


def to_uint64(value: int) -> int:
    return _wrap_unsigned(value, 64)


def to_float32(value: float) -> float:
    """Round a float to the nearest single-precision value.

    Values beyond the float32 range become infinities.
    """
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return float("inf") if value > 0 else float("-inf")


def to_float64(value: float) -> float:
    return float(value)


# Conversion function for each numeric kind
NUMERIC_CONVERTERS: dict[PrimitiveType, Callable[[Any], Any]] = {
    PrimitiveType.INT8: to_int8,
    PrimitiveType.INT16: to_int16,
    PrimitiveType.INT32: to_int32,
    PrimitiveType.INT64: to_int64,
    PrimitiveType.INT: to_int64,
    PrimitiveType.UINT8: to_uint8,
    PrimitiveType.UINT16: to_uint16,
    PrimitiveType.UINT32: to_uint32,
    PrimitiveType.UINT64: to_uint64,
    PrimitiveType.UINT: to_uint64,
    PrimitiveType.FLOAT32: to_float32,
    PrimitiveType.FLOAT64: to_float64,
}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def encode_scalar(value: Any, primitive: PrimitiveType) -> Any:
    """Convert a typed scalar into its flat record form.

    Integers of every width collapse to a signed 64-bit value and floats
    to a Python float. Strings and booleans pass through.
    """
    if primitive.is_integer:
        if not _is_int(value):
            raise ConversionError(
                f"expected an integer for {primitive.value}, got {type(value).__name__}",
                kind=primitive.value,
            )
        return to_int64(NUMERIC_CONVERTERS[primitive](value))
    if primitive.is_float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ConversionError(
                f"expected a number for {primitive.value}, got {type(value).__name__}",
                kind=primitive.value,
            )
        return float(NUMERIC_CONVERTERS[primitive](value))
    return value


def coerce_scalar(value: Any, primitive: PrimitiveType) -> Any:
    """Convert a flat record scalar into the declared kind and width."""
    if primitive.is_integer:
        if not _is_int(value):
            raise ConversionError(
                f"cannot convert {type(value).__name__} {value!r} to {primitive.value}",
                kind=primitive.value,
            )
        return NUMERIC_CONVERTERS[primitive](value)
    if primitive.is_float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ConversionError(
                f"cannot convert {type(value).__name__} {value!r} to {primitive.value}",
                kind=primitive.value,
            )
        return NUMERIC_CONVERTERS[primitive](float(value))
    # Strings and booleans are not validated here
    return value


def _key_primitive(type_def: TypeDefinition) -> PrimitiveType:
    base = type_def.resolve_base_type()
    if isinstance(base, ScalarTypeDefinition) and (
        base.primitive.is_integer or base.primitive is PrimitiveType.STRING
    ):
        return base.primitive
    raise UnsupportedKindError(
        f"map key type {type_def.name} is not supported", kind=type_def.name
    )


def encode_key(value: Any, type_def: TypeDefinition) -> Any:
    """Convert a map key into its flat record form (int64 or str)."""
    # Unsigned keys are reinterpreted as int64, like unsigned field values
    return encode_scalar(value, _key_primitive(type_def))


def coerce_key(value: Any, type_def: TypeDefinition) -> Any:
    """Convert a stored map key into the declared key kind."""
    return coerce_scalar(value, _key_primitive(type_def))


def time_to_seconds(value: datetime) -> int:
    """Return whole seconds since the epoch; naive values are taken as UTC."""
    if value.utcoffset() is None:
        value = value.replace(tzinfo=timezone.utc)
    # Aware subtraction stays in range even when the UTC instant falls before year 1
    return (value - EPOCH) // timedelta(seconds=1)


def seconds_to_time(value: Any) -> datetime:
    """Rebuild a UTC time point from a stored seconds count.

    Raises:
        ConversionError: If ``value`` is not an int or lies outside years 1 to 9999.
    """
    if not _is_int(value):
        raise ConversionError(f"time must be an int, got {type(value).__name__}", kind="time")
    try:
        return EPOCH + timedelta(seconds=value)
    except OverflowError:
        raise ConversionError(f"time {value} is out of range", kind="time") from None


def duration_to_nanoseconds(value: timedelta) -> int:
    seconds = value.days * 86400 + value.seconds
    return to_int64(seconds * NANOS_PER_SECOND + value.microseconds * NANOS_PER_MICROSECOND)


def nanoseconds_to_duration(value: Any) -> timedelta:
    if not _is_int(value):
        raise ConversionError(
            f"duration must be an int, got {type(value).__name__}", kind="duration"
        )
    return timedelta(microseconds=value // NANOS_PER_MICROSECOND)


def map_value_type(type_def: TypeDefinition) -> TypeDefinition:
    """Return the resolved map value type, which must be scalar or a duration."""
    base = type_def.resolve_base_type()
    if isinstance(base, (ScalarTypeDefinition, DurationTypeDefinition)):
        return base
    raise UnsupportedKindError(
        f"map value type {type_def.name} is not supported", kind=type_def.name
    )
