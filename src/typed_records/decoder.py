"""Decoder: flat records to typed records."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from typed_records.coercion import (
    coerce_key,
    coerce_scalar,
    map_value_type,
    nanoseconds_to_duration,
    seconds_to_time,
)
from typed_records.errors import InputTypeError, RecordError, ShapeMismatchError, UnsupportedKindError
from typed_records.schema import is_record
from typed_records.types import (
    ZERO_TIME,
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


def zero_value(type_def: TypeDefinition) -> Any:
    """Return a fresh zero value for a declared type."""
    base = type_def.resolve_base_type()
    if isinstance(base, ScalarTypeDefinition):
        return base.primitive.zero
    if isinstance(base, TimeTypeDefinition):
        return ZERO_TIME
    if isinstance(base, DurationTypeDefinition):
        return timedelta(0)
    if isinstance(base, SequenceTypeDefinition):
        return []
    if isinstance(base, MappingTypeDefinition):
        return {}
    if isinstance(base, StructTypeDefinition):
        return new_record(base)
    return None


def new_record(struct_def: StructTypeDefinition) -> Any:
    """Allocate a record whose fields without defaults hold zero values."""
    record_type = struct_def.record_type
    if record_type is None:
        raise TypeError(f"Type '{struct_def.name}' has no record class")
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(record_type):
        if not f.init:
            continue
        if f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
            continue
        field_def = struct_def.get_field(f.name)
        kwargs[f.name] = zero_value(field_def.type_def) if field_def is not None else None
    return record_type(**kwargs)


def _type_name(value: Any) -> str:
    return type(value).__name__


class Decoder:
    """Walks a flat record and populates a dataclass instance in place.

    Decoding is a merge: fields whose tag is absent from the record keep
    their current value. A failure leaves fields decoded before it set.
    """

    def __init__(self, schema: Schema) -> None:
        self.schema = schema

    def decode(self, record: Mapping[str, Any] | None, target: Any) -> None:
        """Decode ``record`` into ``target``.

        Args:
            record: The flat record, or None for a no-op.
            target: Dataclass instance to populate.
        """
        if record is None:
            return
        if not is_record(target):
            raise InputTypeError(
                f"the target must be a dataclass instance, got {_type_name(target)}"
            )

        struct_def = self.schema.describe(type(target))
        self._decode_struct(record, target, struct_def)

    def _decode_struct(self, record: Any, target: Any, struct_def: StructTypeDefinition) -> None:
        if not isinstance(record, Mapping):
            raise ShapeMismatchError(
                f"expected a nested record for {struct_def.name}, got {_type_name(record)}"
            )

        for field_def in struct_def.fields:
            stored = record.get(field_def.tag)
            if stored is None:
                logger.debug("Bin %r absent, leaving %s.%s untouched",
                             field_def.tag, struct_def.name, field_def.name)
                continue
            try:
                current = getattr(target, field_def.name)
                setattr(target, field_def.name, self._convert(stored, field_def.type_def, current))
            except RecordError as exc:
                raise exc.at(field_def.name) from exc

    def _convert(self, stored: Any, type_def: TypeDefinition, current: Any = None) -> Any:
        """Convert a stored value into the declared type.

        ``current`` is the value the field holds now; nested records are
        decoded into it in place when it is already a record of the right type.
        """
        base = type_def.resolve_base_type()

        if isinstance(base, OptionalTypeDefinition):
            # Optional values are always freshly allocated
            return self._convert(stored, base.inner_type)

        if isinstance(base, TimeTypeDefinition):
            return seconds_to_time(stored)

        if isinstance(base, DurationTypeDefinition):
            return nanoseconds_to_duration(stored)

        if isinstance(base, StructTypeDefinition):
            if not isinstance(stored, Mapping):
                raise ShapeMismatchError(
                    f"expected a nested record for {base.name}, got {_type_name(stored)}"
                )
            if isinstance(current, base.record_type):  # type: ignore[arg-type]
                instance = current
            else:
                instance = new_record(base)
            self._decode_struct(stored, instance, base)
            return instance

        if isinstance(base, SequenceTypeDefinition):
            return self._decode_sequence(stored, base)

        if isinstance(base, MappingTypeDefinition):
            return self._decode_mapping(stored, base)

        if isinstance(base, ScalarTypeDefinition):
            return coerce_scalar(stored, base.primitive)

        kind = base.kind if isinstance(base, UnsupportedTypeDefinition) else base.name
        raise UnsupportedKindError(f"type {kind} is not supported", kind=kind)

    def _decode_sequence(self, stored: Any, seq_def: SequenceTypeDefinition) -> list[Any]:
        """Build a new list of the stored length, converting every element."""
        if not isinstance(stored, (list, tuple)):
            raise ShapeMismatchError(
                f"expected a sequence for {seq_def.name}, got {_type_name(stored)}"
            )
        out = []
        for i, element in enumerate(stored):
            try:
                out.append(self._convert(element, seq_def.element_type))
            except RecordError as exc:
                raise exc.at(str(i)) from exc
        return out

    def _decode_mapping(self, stored: Any, map_def: MappingTypeDefinition) -> dict[Any, Any]:
        """Build a new dict with keys and values coerced to the declared kinds."""
        if not isinstance(stored, Mapping):
            raise ShapeMismatchError(
                f"expected a mapping for {map_def.name}, got {_type_name(stored)}"
            )
        value_type = map_value_type(map_def.value_type)
        out: dict[Any, Any] = {}
        for key, item in stored.items():
            try:
                if isinstance(value_type, DurationTypeDefinition):
                    value = nanoseconds_to_duration(item)
                else:
                    value = coerce_scalar(item, value_type.primitive)  # type: ignore[attr-defined]
                out[coerce_key(key, map_def.key_type)] = value
            except RecordError as exc:
                raise exc.at(repr(key)) from exc
        return out
