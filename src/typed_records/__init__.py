"""Typed Records - convert dataclasses to and from flat key/value records."""

from typed_records.decoder import Decoder
from typed_records.encoder import Encoder
from typed_records.errors import (
    ConversionError,
    InputTypeError,
    RecordError,
    ShapeMismatchError,
    UnsupportedKindError,
)
from typed_records.fields import (
    TAG_KEY,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    UInt,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    tag,
)
from typed_records.schema import Schema, decode, encode
from typed_records.types import (
    FieldDefinition,
    PrimitiveType,
    StructTypeDefinition,
    TypeDefinition,
    TypeRegistry,
)

__all__ = [
    # Main API
    "encode",
    "decode",
    "tag",
    "Schema",
    "Encoder",
    "Decoder",
    "TAG_KEY",
    # Width aliases
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Float32",
    "Float64",
    # Errors
    "RecordError",
    "InputTypeError",
    "UnsupportedKindError",
    "ShapeMismatchError",
    "ConversionError",
    # Type definitions
    "TypeDefinition",
    "PrimitiveType",
    "StructTypeDefinition",
    "FieldDefinition",
    "TypeRegistry",
]

__version__ = "0.1.0"
