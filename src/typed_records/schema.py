"""Schema class deriving type descriptors from dataclasses."""

from __future__ import annotations

import collections.abc
import dataclasses
import logging
import threading
import types
import typing
from datetime import datetime, timedelta
from typing import Annotated, Any, Union

from typed_records.errors import InputTypeError
from typed_records.fields import TAG_KEY, TYPE_KEY
from typed_records.parsing import TypeParser
from typed_records.types import (
    AliasTypeDefinition,
    FieldDefinition,
    MappingTypeDefinition,
    OptionalTypeDefinition,
    PrimitiveType,
    StructTypeDefinition,
    TypeDefinition,
    TypeRegistry,
    UnsupportedTypeDefinition,
)

logger = logging.getLogger(__name__)

_UNION_TYPES: tuple[Any, ...] = (Union,)
if hasattr(types, "UnionType"):
    _UNION_TYPES += (types.UnionType,)

_SEQUENCE_ORIGINS = (list, collections.abc.Sequence, collections.abc.MutableSequence)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)

_BUILTIN_SCALARS: dict[Any, PrimitiveType] = {
    bool: PrimitiveType.BOOL,
    int: PrimitiveType.INT,
    float: PrimitiveType.FLOAT64,
    str: PrimitiveType.STRING,
}


def is_record(value: Any) -> bool:
    """Return whether ``value`` is a dataclass instance (not a class)."""
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _kind_name(annotation: Any) -> str:
    """Return a short name for an unsupported annotation."""
    origin = typing.get_origin(annotation)
    if origin is collections.abc.Callable or annotation is collections.abc.Callable:
        return "function"
    if annotation is Any:
        return "any"
    if origin is not None:
        annotation = origin
    return getattr(annotation, "__name__", None) or repr(annotation)


class Schema:
    """Derives record descriptors and converts records to and from flat records."""

    def __init__(self, tag_key: str = TAG_KEY, registry: TypeRegistry | None = None) -> None:
        """Initialize a schema.

        Args:
            tag_key: Dataclass field metadata key holding each field's tag.
            registry: Type registry to use; a fresh one is created if omitted.
        """
        self.tag_key = tag_key
        self.registry = registry if registry is not None else TypeRegistry()
        self.parser = TypeParser(self.registry)
        self._lock = threading.RLock()

    def describe(self, record_type: type) -> StructTypeDefinition:
        """Return the descriptor for a dataclass type, deriving it on first use.

        Raises:
            InputTypeError: If ``record_type`` is not a dataclass type.
        """
        if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
            raise InputTypeError(f"{record_type!r} is not a dataclass type")

        # Held for the whole derivation so other threads never see a stub
        with self._lock:
            cached = self.registry.get_record(record_type)
            if cached is not None:
                return cached

            # Pre-register so self-referencing records resolve to the same descriptor
            stub = self.registry.register_stub(record_type)
            try:
                hints = typing.get_type_hints(record_type, include_extras=True)
                fields: list[FieldDefinition] = []
                for f in dataclasses.fields(record_type):
                    tag = f.metadata.get(self.tag_key)
                    if not tag:
                        continue
                    expr = f.metadata.get(TYPE_KEY)
                    if expr:
                        type_def = self.parser.parse_type(expr)
                    else:
                        type_def = self.describe_annotation(hints[f.name])
                    fields.append(FieldDefinition(name=f.name, type_def=type_def, tag=tag))
            except Exception:
                self.registry.discard_record(record_type)
                raise
            stub.fields = fields

        logger.debug("Described record %s with %d tagged fields", stub.name, len(fields))
        return stub

    def describe_annotation(self, annotation: Any) -> TypeDefinition:
        """Map a resolved type annotation to a type descriptor.

        Annotations the converter cannot handle map to an
        UnsupportedTypeDefinition; the error surfaces only when a value
        of that type is converted.
        """
        origin = typing.get_origin(annotation)
        args = typing.get_args(annotation)

        if origin is Annotated:
            for extra in args[1:]:
                if isinstance(extra, PrimitiveType):
                    return self.registry.scalar(extra)
            return self.describe_annotation(args[0])

        # typing.NewType
        supertype = getattr(annotation, "__supertype__", None)
        if supertype is not None:
            return AliasTypeDefinition(
                name=annotation.__name__, base_type=self.describe_annotation(supertype)
            )

        if origin in _UNION_TYPES:
            members = [a for a in args if a is not type(None)]
            if len(members) == 1 and len(args) == 2:
                inner = self.describe_annotation(members[0])
                return OptionalTypeDefinition(name=f"{inner.name}?", inner_type=inner)
            return UnsupportedTypeDefinition(name="union", kind="union")

        if origin in _SEQUENCE_ORIGINS or annotation is list:
            if args:
                element = self.describe_annotation(args[0])
            else:
                element = UnsupportedTypeDefinition(name="any", kind="any")
            return self.registry.get_sequence_type(element)

        if origin in _MAPPING_ORIGINS or annotation is dict:
            if len(args) == 2:
                key_type = self.describe_annotation(args[0])
                value_type = self.describe_annotation(args[1])
            else:
                key_type = value_type = UnsupportedTypeDefinition(name="any", kind="any")
            return MappingTypeDefinition(
                name=f"{{{key_type.name}: {value_type.name}}}",
                key_type=key_type,
                value_type=value_type,
            )

        if annotation in _BUILTIN_SCALARS:
            return self.registry.scalar(_BUILTIN_SCALARS[annotation])
        if annotation is datetime:
            return self.registry.get_or_raise("time")
        if annotation is timedelta:
            return self.registry.get_or_raise("duration")
        if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
            return self.describe(annotation)

        kind = _kind_name(annotation)
        return UnsupportedTypeDefinition(name=kind, kind=kind)

    def register(self, record_type: type, name: str | None = None) -> StructTypeDefinition:
        """Describe a dataclass and make it available to type expressions.

        Args:
            record_type: The dataclass type.
            name: Name to register under; defaults to the class's qualified name.

        Returns:
            The record's descriptor.
        """
        struct_def = self.describe(record_type)
        name = name or struct_def.name
        if name == struct_def.name:
            self.registry.register(struct_def)
        else:
            self.registry.register(AliasTypeDefinition(name=name, base_type=struct_def))
        return struct_def

    def parse_type(self, expr: str) -> TypeDefinition:
        """Resolve a type expression such as ``{string: uint8[]}``."""
        with self._lock:
            return self.parser.parse_type(expr)

    def encode(self, value: Any) -> dict[str, Any]:
        """Convert a dataclass instance into a flat record."""
        from typed_records.encoder import Encoder

        return Encoder(self).encode(value)

    def decode(self, record: collections.abc.Mapping[str, Any] | None, target: Any) -> None:
        """Populate a dataclass instance in place from a flat record."""
        from typed_records.decoder import Decoder

        Decoder(self).decode(record, target)


default_schema = Schema()


def encode(value: Any) -> dict[str, Any]:
    """Convert a dataclass instance into a flat record using the default schema.

    Args:
        value: A dataclass instance, or None.

    Returns:
        A sparse flat record keyed by field tags. None yields an empty record.

    Raises:
        InputTypeError: If ``value`` is not a dataclass instance.
        UnsupportedKindError: If a populated field has an unsupported kind.
    """
    return default_schema.encode(value)


def decode(record: collections.abc.Mapping[str, Any] | None, target: Any) -> None:
    """Merge a flat record into a dataclass instance using the default schema.

    Args:
        record: Flat record to read from. None is a no-op.
        target: Dataclass instance to populate in place.

    Raises:
        InputTypeError: If ``target`` is not a dataclass instance.
        ShapeMismatchError: If a stored value's shape disagrees with its field.
        ConversionError: If a stored value cannot be converted.
    """
    default_schema.decode(record, target)
