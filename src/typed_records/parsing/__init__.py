"""Parsing module for type expressions."""

from typed_records.parsing.type_parser import TypeParser

__all__ = [
    "TypeParser",
]
