"""AST value serializer.

Turns an expression node into a wire Value. Only a fixed set of shapes is
resolved statically:

  - string / number / boolean / null literals pass through
  - an identifier becomes a PropRef iff it names one of the component's props
  - wrappers (``{}`` containers, parentheses, type assertions) recurse
  - object and array literals recurse member by member

Every other shape (calls, member access, operators, templates, ...) resolves
to None. The serializer never raises.
"""

from __future__ import annotations

from collections.abc import Iterable

from .ir import Value, prop_ref
from .syntax.nodes import (
    ArrayExpression,
    BooleanLiteral,
    Identifier,
    JSXExpressionContainer,
    NullLiteral,
    NumericLiteral,
    ObjectExpression,
    ParenthesizedExpression,
    Property,
    SpreadElement,
    StringLiteral,
    TypeAssertion,
)
from .visitors.base import NodeVisitor

# Key used for empty identifier / string-literal keys.
UNKNOWN_KEY = "unknown"

# String coercion of a non-identifier, non-string key node as seen by existing runtimes.
GENERIC_KEY = "[object Object]"


class ValueSerializer(NodeVisitor[Value]):
    """Serializes expression nodes against a set of component prop names."""

    def __init__(self, component_props: Iterable[str] | None = None):
        self.component_props: frozenset[str] = frozenset(component_props or ())

    def visit_default(self, node) -> Value:
        return None

    def visit_StringLiteral(self, node: StringLiteral) -> Value:
        return node.value

    def visit_NumericLiteral(self, node: NumericLiteral) -> Value:
        return node.value

    def visit_BooleanLiteral(self, node: BooleanLiteral) -> Value:
        return node.value

    def visit_NullLiteral(self, node: NullLiteral) -> Value:
        return None

    def visit_Identifier(self, node: Identifier) -> Value:
        if node.name and node.name in self.component_props:
            return prop_ref(node.name)
        return None

    def visit_JSXExpressionContainer(self, node: JSXExpressionContainer) -> Value:
        return self.visit(node.expression)

    def visit_ParenthesizedExpression(self, node: ParenthesizedExpression) -> Value:
        return self.visit(node.expression)

    def visit_TypeAssertion(self, node: TypeAssertion) -> Value:
        return self.visit(node.expression)

    def visit_ObjectExpression(self, node: ObjectExpression) -> Value:
        result: dict[str, Value] = {}
        for member in node.properties or ():
            if isinstance(member, Property):
                result[property_key(member)] = self.visit(member.value)
        return result

    def visit_ArrayExpression(self, node: ArrayExpression) -> Value:
        return [None if isinstance(e, SpreadElement) else self.visit(e) for e in node.elements or ()]


def property_key(prop: Property) -> str:
    """Wire key for an object-literal property."""
    key = prop.key
    if isinstance(key, Identifier):
        return key.name or UNKNOWN_KEY
    if isinstance(key, StringLiteral):
        return key.value or UNKNOWN_KEY
    return GENERIC_KEY


def serialize(node, component_props: Iterable[str] | None = None) -> Value:
    """Serialize an expression node to a Value.

    Args:
        node: Any syntax node, or None
        component_props: Names that resolve to PropRefs

    Returns:
        The serialized Value; None when the shape is not statically resolvable
    """
    return ValueSerializer(component_props).visit(node)
