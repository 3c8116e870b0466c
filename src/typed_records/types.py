"""Type descriptors for the typed_records library."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any


class PrimitiveType(Enum):
    """Built-in scalar kinds supported by the converter."""

    BOOL = "bool"
    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    INT = "int"
    UINT = "uint"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"

    @property
    def size_bytes(self) -> int:
        """Return the size in bytes of this kind's native representation.

        Strings have no fixed width and report 0.
        """
        sizes = {
            PrimitiveType.BOOL: 1,
            PrimitiveType.INT8: 1,
            PrimitiveType.UINT8: 1,
            PrimitiveType.INT16: 2,
            PrimitiveType.UINT16: 2,
            PrimitiveType.INT32: 4,
            PrimitiveType.UINT32: 4,
            PrimitiveType.INT64: 8,
            PrimitiveType.UINT64: 8,
            PrimitiveType.INT: 8,  # platform word, 64-bit
            PrimitiveType.UINT: 8,
            PrimitiveType.FLOAT32: 4,
            PrimitiveType.FLOAT64: 8,
            PrimitiveType.STRING: 0,
        }
        return sizes[self]

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_KINDS

    @property
    def is_signed(self) -> bool:
        return self in _SIGNED_KINDS

    @property
    def is_float(self) -> bool:
        return self in (PrimitiveType.FLOAT32, PrimitiveType.FLOAT64)

    @property
    def zero(self) -> Any:
        """Return the zero value for this kind."""
        if self is PrimitiveType.BOOL:
            return False
        if self is PrimitiveType.STRING:
            return ""
        if self.is_float:
            return 0.0
        return 0


_SIGNED_KINDS = frozenset({
    PrimitiveType.INT8,
    PrimitiveType.INT16,
    PrimitiveType.INT32,
    PrimitiveType.INT64,
    PrimitiveType.INT,
})

_INTEGER_KINDS = _SIGNED_KINDS | {
    PrimitiveType.UINT8,
    PrimitiveType.UINT16,
    PrimitiveType.UINT32,
    PrimitiveType.UINT64,
    PrimitiveType.UINT,
}

# Mapping from type name strings to PrimitiveType enum values
PRIMITIVE_TYPE_NAMES: dict[str, PrimitiveType] = {pt.value: pt for pt in PrimitiveType}

# Zero point of time values, matching the start of the proleptic calendar
ZERO_TIME = datetime.min


@dataclass
class TypeDefinition:
    """Base class for all type descriptors."""

    name: str

    @property
    def is_scalar(self) -> bool:
        """Return whether this type is a scalar kind."""
        return False

    @property
    def is_struct(self) -> bool:
        """Return whether this type is a record (dataclass) type."""
        return False

    @property
    def is_sequence(self) -> bool:
        """Return whether this type is an ordered sequence."""
        return False

    @property
    def is_mapping(self) -> bool:
        """Return whether this type is a mapping."""
        return False

    @property
    def is_optional(self) -> bool:
        """Return whether this type may hold None."""
        return False

    def is_default(self, value: Any) -> bool:
        """Return whether ``value`` is this type's zero value."""
        return value is None

    def resolve_base_type(self) -> TypeDefinition:
        """Resolve through aliases to get the underlying type."""
        return self


@dataclass
class ScalarTypeDefinition(TypeDefinition):
    """Type descriptor wrapping a primitive kind."""

    primitive: PrimitiveType

    @property
    def is_scalar(self) -> bool:
        return True

    def is_default(self, value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, float) and value == 0.0:
            # -0.0 differs from the zero value bitwise
            return math.copysign(1.0, value) > 0
        return value == self.primitive.zero


@dataclass
class TimeTypeDefinition(TypeDefinition):
    """A point in time, stored as whole seconds since the epoch."""

    def is_default(self, value: Any) -> bool:
        if value is None:
            return True
        offset = value.utcoffset()
        if offset:
            return False
        return value.replace(tzinfo=None) == ZERO_TIME


@dataclass
class DurationTypeDefinition(TypeDefinition):
    """A span of time, stored as a nanosecond count."""

    def is_default(self, value: Any) -> bool:
        return value is None or value == timedelta(0)


@dataclass
class AliasTypeDefinition(TypeDefinition):
    """Type descriptor for named aliases (NewType or a record registered under another name)."""

    base_type: TypeDefinition

    @property
    def is_scalar(self) -> bool:
        return self.base_type.is_scalar

    def is_default(self, value: Any) -> bool:
        return self.base_type.is_default(value)

    def resolve_base_type(self) -> TypeDefinition:
        """Resolve through aliases to get the underlying type."""
        return self.base_type.resolve_base_type()


@dataclass
class SequenceTypeDefinition(TypeDefinition):
    """Type descriptor for ordered sequences (e.g., list[int])."""

    element_type: TypeDefinition

    @property
    def is_sequence(self) -> bool:
        return True

    def is_default(self, value: Any) -> bool:
        return value is None or len(value) == 0


@dataclass
class MappingTypeDefinition(TypeDefinition):
    """Type descriptor for mappings (e.g., dict[str, int])."""

    key_type: TypeDefinition
    value_type: TypeDefinition

    @property
    def is_mapping(self) -> bool:
        return True

    def is_default(self, value: Any) -> bool:
        return value is None or len(value) == 0


@dataclass
class OptionalTypeDefinition(TypeDefinition):
    """Type descriptor for fields that may be None (Optional[T])."""

    inner_type: TypeDefinition

    @property
    def is_optional(self) -> bool:
        return True


@dataclass
class UnsupportedTypeDefinition(TypeDefinition):
    """Placeholder for declared types the converter cannot handle.

    Describing such a field is not an error by itself; only converting a
    non-None value of it is.
    """

    kind: str = "unknown"


@dataclass
class FieldDefinition:
    """Definition of a tagged field within a record type."""

    name: str
    type_def: TypeDefinition
    tag: str


@dataclass
class StructTypeDefinition(TypeDefinition):
    """Type descriptor for record types (dataclasses).

    Only tagged fields are listed, in declaration order.
    """

    record_type: type | None = None
    fields: list[FieldDefinition] = field(default_factory=list)

    @property
    def is_struct(self) -> bool:
        return True

    def is_default(self, value: Any) -> bool:
        if value is None:
            return True
        return all(f.type_def.is_default(getattr(value, f.name)) for f in self.fields)

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get a field by attribute name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_field_by_tag(self, tag: str) -> FieldDefinition | None:
        """Get a field by its tag."""
        for f in self.fields:
            if f.tag == tag:
                return f
        return None


class TypeRegistry:
    """Registry of named types and cached record descriptors."""

    def __init__(self) -> None:
        self._types: dict[str, TypeDefinition] = {}
        self._records: dict[type, StructTypeDefinition] = {}
        self._register_primitives()

    def _register_primitives(self) -> None:
        """Register all primitive types plus time and duration."""
        for pt in PrimitiveType:
            self._types[pt.value] = ScalarTypeDefinition(name=pt.value, primitive=pt)
        self._types["time"] = TimeTypeDefinition(name="time")
        self._types["duration"] = DurationTypeDefinition(name="duration")

    def register(self, type_def: TypeDefinition) -> None:
        """Register a type definition under its name."""
        if type_def.name in self._types:
            raise ValueError(f"Type '{type_def.name}' is already defined")
        self._types[type_def.name] = type_def

    def get(self, name: str) -> TypeDefinition | None:
        """Get a type by name."""
        return self._types.get(name)

    def get_or_raise(self, name: str) -> TypeDefinition:
        """Get a type by name, raising if not found."""
        type_def = self._types.get(name)
        if type_def is None:
            raise KeyError(f"Type '{name}' not found")
        return type_def

    def scalar(self, primitive: PrimitiveType) -> ScalarTypeDefinition:
        """Get the shared descriptor for a primitive kind."""
        type_def = self.get_or_raise(primitive.value)
        if not isinstance(type_def, ScalarTypeDefinition):
            raise TypeError(f"Type '{primitive.value}' is not a scalar type")
        return type_def

    def get_sequence_type(self, element_type: TypeDefinition) -> SequenceTypeDefinition:
        """Get or create a sequence type for the given element type."""
        seq_name = f"{element_type.name}[]"
        existing = self._types.get(seq_name)
        if isinstance(existing, SequenceTypeDefinition) and existing.element_type is element_type:
            return existing

        seq_type = SequenceTypeDefinition(name=seq_name, element_type=element_type)
        if existing is None:
            self._types[seq_name] = seq_type
        return seq_type

    def register_stub(self, record_type: type) -> StructTypeDefinition:
        """Pre-register an empty record descriptor for self-references.

        Idempotent: returns the existing descriptor if one is cached.
        """
        existing = self._records.get(record_type)
        if existing is not None:
            return existing
        stub = StructTypeDefinition(name=record_type.__qualname__, record_type=record_type)
        self._records[record_type] = stub
        return stub

    def get_record(self, record_type: type) -> StructTypeDefinition | None:
        """Get the cached descriptor for a record type."""
        return self._records.get(record_type)

    def discard_record(self, record_type: type) -> None:
        """Forget a record descriptor, e.g. one whose derivation failed."""
        self._records.pop(record_type, None)

    def list_types(self) -> list[str]:
        """List all registered type names."""
        return list(self._types.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._types
