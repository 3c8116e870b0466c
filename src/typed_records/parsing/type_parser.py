"""Parser for type expressions used in field tags.

Type expressions::

    uint8           primitive, time, duration or registered record
    int32[]         sequence
    {string: int64} mapping
    Inner?          optional
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import ply.yacc as yacc

from typed_records.parsing.type_lexer import TypeLexer
from typed_records.types import (
    MappingTypeDefinition,
    OptionalTypeDefinition,
    TypeDefinition,
    TypeRegistry,
)


@dataclass
class TypeRef:
    """Reference to a named type."""

    name: str


@dataclass
class SequenceRef:
    """Reference to a sequence of another type."""

    element: TypeExpr


@dataclass
class MappingRef:
    """Reference to a mapping type."""

    key: TypeExpr
    value: TypeExpr


@dataclass
class OptionalRef:
    """Reference to an optional type."""

    inner: TypeExpr


TypeExpr = Union[TypeRef, SequenceRef, MappingRef, OptionalRef]


class TypeParser:
    """Parser for type expressions, resolving names against a registry."""

    tokens = TypeLexer.tokens

    def __init__(self, registry: TypeRegistry | None = None) -> None:
        self.lexer = TypeLexer()
        self.lexer.build()
        self.registry = registry if registry is not None else TypeRegistry()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_type_expr_named(self, p: yacc.YaccProduction) -> None:
        """type_expr : IDENTIFIER"""
        p[0] = TypeRef(name=p[1])

    def p_type_expr_sequence(self, p: yacc.YaccProduction) -> None:
        """type_expr : type_expr LBRACKET RBRACKET"""
        p[0] = SequenceRef(element=p[1])

    def p_type_expr_optional(self, p: yacc.YaccProduction) -> None:
        """type_expr : type_expr QUESTION"""
        p[0] = OptionalRef(inner=p[1])

    def p_type_expr_mapping(self, p: yacc.YaccProduction) -> None:
        """type_expr : LBRACE type_expr COLON type_expr RBRACE"""
        p[0] = MappingRef(key=p[2], value=p[4])

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (line {p.lineno})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse_expression(self, data: str) -> TypeExpr:
        """Parse a type expression without resolving it."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)
        return self.parser.parse(data, lexer=self.lexer.lexer)

    def parse_type(self, data: str) -> TypeDefinition:
        """Parse a type expression and resolve it to a type definition.

        Raises:
            SyntaxError: If the expression is malformed.
            KeyError: If a name is not registered.
        """
        return self._resolve(self.parse_expression(data))

    def _resolve(self, ref: TypeExpr) -> TypeDefinition:
        """Resolve a type reference to a type definition."""
        if isinstance(ref, SequenceRef):
            return self.registry.get_sequence_type(self._resolve(ref.element))
        if isinstance(ref, MappingRef):
            key_type = self._resolve(ref.key)
            value_type = self._resolve(ref.value)
            return MappingTypeDefinition(
                name=f"{{{key_type.name}: {value_type.name}}}",
                key_type=key_type,
                value_type=value_type,
            )
        if isinstance(ref, OptionalRef):
            inner = self._resolve(ref.inner)
            return OptionalTypeDefinition(name=f"{inner.name}?", inner_type=inner)
        return self.registry.get_or_raise(ref.name)
