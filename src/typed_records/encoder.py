"""Encoder: typed records to flat records."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from typed_records.coercion import (
    duration_to_nanoseconds,
    encode_key,
    encode_scalar,
    map_value_type,
    time_to_seconds,
)
from typed_records.errors import ConversionError, InputTypeError, RecordError, UnsupportedKindError
from typed_records.schema import is_record
from typed_records.types import (
    DurationTypeDefinition,
    MappingTypeDefinition,
    OptionalTypeDefinition,
    ScalarTypeDefinition,
    SequenceTypeDefinition,
    StructTypeDefinition,
    TimeTypeDefinition,
    TypeDefinition,
    UnsupportedTypeDefinition,
)

if TYPE_CHECKING:
    from typed_records.schema import Schema

logger = logging.getLogger(__name__)


class Encoder:
    """Walks a dataclass instance and emits a sparse flat record.

    Fields holding their type's zero value are left out. The input is
    never modified, and any failure aborts the whole encode.
    """

    def __init__(self, schema: Schema) -> None:
        self.schema = schema

    def encode(self, value: Any) -> dict[str, Any]:
        """Encode a dataclass instance.

        Args:
            value: The record to encode, or None.

        Returns:
            The flat record. None encodes to an empty record.
        """
        if value is None:
            return {}
        if not is_record(value):
            raise InputTypeError(
                f"the provided value must be a dataclass instance, got {type(value).__name__}"
            )

        struct_def = self.schema.describe(type(value))
        out = self._encode_struct(value, struct_def)
        logger.debug("Encoded %s into %d bins", struct_def.name, len(out))
        return out

    def _encode_struct(self, value: Any, struct_def: StructTypeDefinition) -> dict[str, Any]:
        """Encode each tagged field that does not hold its zero value."""
        out: dict[str, Any] = {}
        for field_def in struct_def.fields:
            field_value = getattr(value, field_def.name)
            if field_def.type_def.is_default(field_value):
                continue
            try:
                out[field_def.tag] = self._convert(field_value, field_def.type_def)
            except RecordError as exc:
                raise exc.at(field_def.name) from exc
        return out

    def _convert(self, value: Any, type_def: TypeDefinition) -> Any:
        """Convert one value according to its declared type."""
        base = type_def.resolve_base_type()

        if isinstance(base, OptionalTypeDefinition):
            if value is None:
                raise ConversionError(f"cannot store None for {base.name}", kind=base.name)
            return self._convert(value, base.inner_type)

        if isinstance(base, ScalarTypeDefinition):
            return encode_scalar(value, base.primitive)

        if isinstance(base, TimeTypeDefinition):
            if not isinstance(value, datetime):
                raise ConversionError(
                    f"expected a datetime, got {type(value).__name__}", kind="time"
                )
            return time_to_seconds(value)

        if isinstance(base, DurationTypeDefinition):
            if not isinstance(value, timedelta):
                raise ConversionError(
                    f"expected a timedelta, got {type(value).__name__}", kind="duration"
                )
            return duration_to_nanoseconds(value)

        if isinstance(base, StructTypeDefinition):
            if not isinstance(value, base.record_type):
                raise ConversionError(
                    f"expected {base.name}, got {type(value).__name__}", kind=base.name
                )
            return self._encode_struct(value, base)

        if isinstance(base, SequenceTypeDefinition):
            return self._encode_sequence(value, base)

        if isinstance(base, MappingTypeDefinition):
            return self._encode_mapping(value, base)

        kind = base.kind if isinstance(base, UnsupportedTypeDefinition) else base.name
        raise UnsupportedKindError(f"type {kind} is not supported", kind=kind)

    def _encode_sequence(self, value: Any, seq_def: SequenceTypeDefinition) -> list[Any]:
        out = []
        for i, element in enumerate(value):
            try:
                out.append(self._convert(element, seq_def.element_type))
            except RecordError as exc:
                raise exc.at(str(i)) from exc
        return out

    def _encode_mapping(self, value: Any, map_def: MappingTypeDefinition) -> dict[Any, Any]:
        """Encode a mapping; keys must be integers or strings, values scalars."""
        value_type = map_value_type(map_def.value_type)
        out: dict[Any, Any] = {}
        for key, item in value.items():
            try:
                stored_key = encode_key(key, map_def.key_type)
            except RecordError as exc:
                raise exc.at(repr(key)) from exc
            try:
                if isinstance(value_type, DurationTypeDefinition):
                    out[stored_key] = duration_to_nanoseconds(item)
                else:
                    out[stored_key] = encode_scalar(item, value_type.primitive)  # type: ignore[attr-defined]
            except RecordError as exc:
                raise exc.at(repr(key)) from exc
        return out
