"""Base visitor class for typed syntax tree traversal."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from ..syntax.nodes import iter_child_nodes

T = TypeVar("T")


class NodeVisitor(ABC, Generic[T]):
    """Abstract visitor for syntax nodes.

    Dispatches on the node's class name. Node kinds without a dedicated
    visit method go to ``visit_default``, so every kind outside the handled
    set is handled in one place.

    Type parameter T is the return type of visit methods.

    Usage:
        class LiteralCounter(NodeVisitor[int]):
            def visit_default(self, node):
                return sum(self.visit(c) for c in self.children(node))

            def visit_StringLiteral(self, node):
                return 1
    """

    def visit(self, node: Any) -> T:
        """Dispatch to the appropriate visit method.

        Looks for visit_{ClassName} method, falls back to visit_default.
        """
        method_name = f"visit_{type(node).__name__}"
        visitor = getattr(self, method_name, self.visit_default)
        return visitor(node)

    @abstractmethod
    def visit_default(self, node: Any) -> T:
        """Default handler for node kinds without specific visit methods."""
        ...

    @staticmethod
    def children(node: Any) -> list:
        """Direct child nodes, empty for anything that is not a node."""
        try:
            return list(iter_child_nodes(node))
        except TypeError:
            return []
