"""Errors raised while converting between typed records and flat records."""

from __future__ import annotations


class RecordError(Exception):
    """Base class for all conversion errors.

    ``field`` is the dotted path of the field that failed, when known.
    """

    def __init__(self, message: str, field: str | None = None, kind: str | None = None) -> None:
        self.message = message
        self.field = field
        self.kind = kind
        super().__init__(self._format())

    def _format(self) -> str:
        if self.field:
            return f"field '{self.field}': {self.message}"
        return self.message

    def at(self, name: str) -> RecordError:
        """Return a copy of this error with ``name`` prepended to the field path."""
        path = f"{name}.{self.field}" if self.field else name
        return type(self)(self.message, field=path, kind=self.kind)


class InputTypeError(RecordError, TypeError):
    """The value handed to encode/decode is not a dataclass instance."""


class UnsupportedKindError(RecordError, TypeError):
    """A field or map key has a kind the converter cannot handle."""


class ShapeMismatchError(RecordError, ValueError):
    """A stored value's shape disagrees with the declared field type."""


class ConversionError(RecordError, ValueError):
    """A stored value cannot be converted to the declared kind."""
