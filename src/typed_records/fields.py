"""Field tagging helpers and width-annotated scalar aliases.

A dataclass field takes part in conversion only when it is declared with
:func:`tag`::

    @dataclass
    class User:
        name: str = tag("name")
        age: UInt8 = tag("age")
        scores: list[int] = tag("scores", default_factory=list)
        note: str = ""  # untagged, never stored
"""

from __future__ import annotations

import dataclasses
from typing import Annotated, Any

from typed_records.types import PrimitiveType

# Default metadata key holding a field's tag (bin name)
TAG_KEY = "as"

# Metadata key holding an optional type expression overriding the annotation
TYPE_KEY = "as_type"

# Width-annotated scalars
Int8 = Annotated[int, PrimitiveType.INT8]
Int16 = Annotated[int, PrimitiveType.INT16]
Int32 = Annotated[int, PrimitiveType.INT32]
Int64 = Annotated[int, PrimitiveType.INT64]
UInt = Annotated[int, PrimitiveType.UINT]
UInt8 = Annotated[int, PrimitiveType.UINT8]
UInt16 = Annotated[int, PrimitiveType.UINT16]
UInt32 = Annotated[int, PrimitiveType.UINT32]
UInt64 = Annotated[int, PrimitiveType.UINT64]
Float32 = Annotated[float, PrimitiveType.FLOAT32]
Float64 = Annotated[float, PrimitiveType.FLOAT64]


def tag(
    name: str,
    *,
    type: str | None = None,
    tag_key: str = TAG_KEY,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    **kwargs: Any,
) -> Any:
    """Declare a tagged dataclass field.

    Args:
        name: Key the field is stored under in the flat record.
        type: Optional type expression (e.g. ``"uint8[]"``) used instead of
            the field's annotation.
        tag_key: Metadata key, for schemas configured with a custom one.
        default: Field default. When neither ``default`` nor
            ``default_factory`` is given, the field defaults to None.
        default_factory: Field default factory.
        **kwargs: Passed through to :func:`dataclasses.field`.

    Returns:
        A :func:`dataclasses.field` carrying the tag in its metadata.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[tag_key] = name
    if type is not None:
        metadata[TYPE_KEY] = type

    if default is dataclasses.MISSING and default_factory is dataclasses.MISSING:
        default = None
    return dataclasses.field(
        default=default, default_factory=default_factory, metadata=metadata, **kwargs
    )
