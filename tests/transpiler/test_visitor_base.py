"""Tests for NodeVisitor base class."""

from src.transpiler.syntax.nodes import JSXElement, StringLiteral
from src.transpiler.visitors import NodeVisitor
from tests.conftest import first_expression


class LiteralCounter(NodeVisitor[int]):
    """Test visitor that counts string literals."""

    def visit_default(self, node) -> int:
        return sum(self.visit(c) for c in self.children(node))

    def visit_StringLiteral(self, node) -> int:
        return 1


class TagCollector(NodeVisitor[list]):
    """Test visitor that lists JSX tag names depth first."""

    def visit_default(self, node) -> list:
        names = []
        for child in self.children(node):
            names.extend(self.visit(child))
        return names

    def visit_JSXElement(self, node: JSXElement) -> list:
        return [node.name, *self.visit_default(node)]


def test_dispatch_by_class_name():
    """visit_StringLiteral handles string literal nodes."""
    assert LiteralCounter().visit(StringLiteral(value="x")) == 1


def test_default_recurses_through_children():
    """Nodes without a visit method fall back to visit_default."""
    node = first_expression("({ a: 'x', b: ['y', 1, { c: 'z' }] })")
    assert LiteralCounter().visit(node) == 3


def test_non_nodes_have_no_children():
    """Foreign values are leaves."""
    assert NodeVisitor.children("text") == []
    assert NodeVisitor.children(None) == []
    assert LiteralCounter().visit(42) == 0


def test_jsx_tags_depth_first():
    """Element children are visited in source order."""
    node = first_expression("<View><Row><Text /></Row><Image /></View>")
    assert TagCollector().visit(node) == ["View", "Row", "Text", "Image"]
