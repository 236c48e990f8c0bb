"""Condition descriptors for ``if`` statements in event handlers."""

from __future__ import annotations

from collections.abc import Callable

from ..errors import UnsupportedExpressionError
from ..ir import StoreDescriptor, Value
from ..serializer import ValueSerializer
from ..syntax.nodes import (
    ArrayExpression,
    BinaryExpression,
    BooleanLiteral,
    CallExpression,
    Expression,
    Identifier,
    NullLiteral,
    NumericLiteral,
    ObjectExpression,
    SpreadElement,
    StringLiteral,
    TemplateLiteral,
    UnaryExpression,
    static_string,
    unwrap,
)
from .dsl import STORE_READ_METHODS, method_call

COMPARISONS = {
    "===": "equals",
    "==": "equals",
    "!==": "notEquals",
    "!=": "notEquals",
    ">": "greaterThan",
    "<": "lessThan",
    ">=": "greaterThanOrEqual",
    "<=": "lessThanOrEqual",
}

LOGICAL = {"&&": "and", "||": "or"}

# name.includes('x') -> {type: contains, left: name, right: 'x'}
MEMBERSHIP = {"includes": "contains", "startsWith": "startsWith", "endsWith": "endsWith"}

_STATIC_KINDS = (StringLiteral, NumericLiteral, BooleanLiteral, NullLiteral, ObjectExpression, ArrayExpression)


class ConditionBuilder:
    """Builds condition descriptors.

    Args:
        serializer: Serializer bound to the enclosing component's props
        resolve_store: Maps a receiver expression to its store, or None
        line: Line reported on failures
    """

    def __init__(
        self,
        serializer: ValueSerializer,
        resolve_store: Callable[[Expression], StoreDescriptor | None],
        line: int | None = None,
    ):
        self.serializer = serializer
        self.resolve_store = resolve_store
        self.line = line

    def build(self, node: Expression) -> dict[str, Value]:
        node = unwrap(node)

        if isinstance(node, BinaryExpression) and node.operator in COMPARISONS:
            return {
                "type": COMPARISONS[node.operator],
                "left": self.operand(node.left),
                "right": self.operand(node.right),
            }

        if isinstance(node, BinaryExpression) and node.operator in LOGICAL:
            kind = LOGICAL[node.operator]
            conditions = []
            for side in (node.left, node.right):
                condition = self.build(side)
                # a && b && c -> and[a, b, c]
                if condition["type"] == kind:
                    conditions.extend(condition["conditions"])
                else:
                    conditions.append(condition)
            return {"type": kind, "conditions": conditions}

        if isinstance(node, UnaryExpression) and node.operator == "!":
            return {"type": "not", "condition": self.build(node.argument)}

        if isinstance(node, CallExpression):
            split = method_call(node)
            if split is not None and split[1] in MEMBERSHIP:
                receiver, method = split
                if len(node.arguments) != 1 or isinstance(node.arguments[0], SpreadElement):
                    raise UnsupportedExpressionError(f"{method}() in a condition takes exactly one argument", node.line)
                return {
                    "type": MEMBERSHIP[method],
                    "left": self.operand(receiver),
                    "right": self.operand(node.arguments[0]),
                }

        return {"type": "truthy", "value": self.operand(node)}

    def operand(self, node: Expression) -> Value:
        """Value of a comparison operand.

        Raises:
            UnsupportedExpressionError: If the operand is not statically resolvable
        """
        node = unwrap(node)

        if isinstance(node, CallExpression):
            read = self._store_read(node)
            if read is not None:
                return read

        if isinstance(node, _STATIC_KINDS):
            return self.serializer.visit(node)
        if isinstance(node, TemplateLiteral) and node.static_value is not None:
            return node.static_value
        if isinstance(node, Identifier):
            if node.name == "undefined":
                return None
            if node.name in self.serializer.component_props:
                return self.serializer.visit(node)

        raise UnsupportedExpressionError(
            "Condition operands must be literals, props or store reads", self.line
        )

    def _store_read(self, call: CallExpression) -> dict[str, Value] | None:
        split = method_call(call)
        if split is None:
            return None
        receiver, method = split
        if method not in STORE_READ_METHODS:
            return None
        store = self.resolve_store(receiver)
        if store is None:
            return None
        if len(call.arguments) != 1 or isinstance(call.arguments[0], SpreadElement):
            raise UnsupportedExpressionError("store.get() takes exactly one keyPath argument", call.line)
        key_path = static_string(call.arguments[0])
        if key_path is None:
            raise UnsupportedExpressionError("store.get(): keyPath must be a string literal", call.line)
        return {
            "type": "store",
            "scope": store.scope.value,
            "storage": store.storage.value,
            "keyPath": key_path,
        }
