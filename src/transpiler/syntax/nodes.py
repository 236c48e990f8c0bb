"""Typed syntax tree for scenario source files.

A closed set of frozen dataclasses, one per modelled node kind. The parser
converts every concrete tree-sitter node into exactly one of these; kinds
that have no model become ``Unsupported`` and keep their convertible
children so later passes can still see nested calls.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from typing import Iterator, Union

# =============================================================================
# Literals and identifiers
# =============================================================================


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class NumericLiteral:
    value: int | float


@dataclass(frozen=True)
class BooleanLiteral:
    value: bool


@dataclass(frozen=True)
class NullLiteral:
    pass


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class TemplateLiteral:
    """Template string. ``quasis`` are cooked text chunks around ``expressions``."""

    quasis: tuple[str, ...]
    expressions: tuple[Expression, ...] = ()

    @property
    def static_value(self) -> str | None:
        """Text of a template without substitutions, else None."""
        if self.expressions:
            return None
        return "".join(self.quasis)


# =============================================================================
# Composite expressions
# =============================================================================


@dataclass(frozen=True)
class Property:
    key: Expression
    value: Expression


@dataclass(frozen=True)
class SpreadElement:
    argument: Expression


@dataclass(frozen=True)
class ObjectExpression:
    properties: tuple[Property | SpreadElement | Unsupported, ...] | None = ()


@dataclass(frozen=True)
class ArrayExpression:
    elements: tuple[Expression | SpreadElement | None, ...] = ()


@dataclass(frozen=True)
class ParenthesizedExpression:
    expression: Expression


@dataclass(frozen=True)
class TypeAssertion:
    """``x as T``, ``x satisfies T``, ``x!`` and ``<T>x``."""

    expression: Expression


@dataclass(frozen=True)
class MemberExpression:
    object: Expression
    property: Expression
    computed: bool = False

    @property
    def property_name(self) -> str | None:
        if not self.computed and isinstance(self.property, Identifier):
            return self.property.name
        return None


@dataclass(frozen=True)
class CallExpression:
    callee: Expression
    arguments: tuple[Expression | SpreadElement, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class UnaryExpression:
    operator: str
    argument: Expression


@dataclass(frozen=True)
class BinaryExpression:
    """Binary and logical operators (``===``, ``&&``, ``+`` ...)."""

    operator: str
    left: Expression
    right: Expression


@dataclass(frozen=True)
class AwaitExpression:
    argument: Expression


@dataclass(frozen=True)
class ObjectPattern:
    """Destructuring pattern; only the source-side property keys are kept."""

    keys: tuple[str, ...] = ()


@dataclass(frozen=True)
class ArrowFunction:
    params: tuple[Pattern, ...]
    body: Expression | BlockStatement
    line: int = 0


@dataclass(frozen=True)
class FunctionExpression:
    name: str | None
    params: tuple[Pattern, ...]
    body: BlockStatement
    line: int = 0


# =============================================================================
# JSX
# =============================================================================


@dataclass(frozen=True)
class JSXAttribute:
    name: str
    value: Expression | None = None


@dataclass(frozen=True)
class JSXSpreadAttribute:
    argument: Expression


@dataclass(frozen=True)
class JSXExpressionContainer:
    """``{expr}``. ``expression`` is None for ``{}`` and ``{/* comment */}``."""

    expression: Expression | None = None


@dataclass(frozen=True)
class JSXText:
    value: str


@dataclass(frozen=True)
class JSXElement:
    name: str
    attributes: tuple[JSXAttribute | JSXSpreadAttribute, ...] = ()
    children: tuple[JSXChild, ...] = ()
    line: int = 0

    def attribute(self, name: str) -> JSXAttribute | None:
        """Last attribute with the given name (later attributes win)."""
        found = None
        for attr in self.attributes:
            if isinstance(attr, JSXAttribute) and attr.name == name:
                found = attr
        return found


@dataclass(frozen=True)
class JSXFragment:
    children: tuple[JSXChild, ...] = ()
    line: int = 0


# =============================================================================
# Statements
# =============================================================================


@dataclass(frozen=True)
class BlockStatement:
    body: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class ExpressionStatement:
    expression: Expression


@dataclass(frozen=True)
class ReturnStatement:
    argument: Expression | None = None


@dataclass(frozen=True)
class IfStatement:
    test: Expression
    consequent: Statement
    alternate: Statement | None = None


@dataclass(frozen=True)
class SwitchCase:
    """``case test:``; ``test`` is None for ``default:``."""

    test: Expression | None
    body: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class SwitchStatement:
    discriminant: Expression
    cases: tuple[SwitchCase, ...] = ()


@dataclass(frozen=True)
class BreakStatement:
    pass


@dataclass(frozen=True)
class VariableDeclarator:
    target: Pattern
    init: Expression | None = None


@dataclass(frozen=True)
class VariableDeclaration:
    kind: str
    declarations: tuple[VariableDeclarator, ...] = ()


@dataclass(frozen=True)
class FunctionDeclaration:
    name: str
    params: tuple[Pattern, ...]
    body: BlockStatement
    line: int = 0


@dataclass(frozen=True)
class ExportSpecifier:
    local: str
    exported: str


@dataclass(frozen=True)
class ExportNamedDeclaration:
    declaration: FunctionDeclaration | VariableDeclaration | Unsupported | None = None
    specifiers: tuple[ExportSpecifier, ...] = ()


@dataclass(frozen=True)
class ExportDefaultDeclaration:
    declaration: FunctionDeclaration | Expression


@dataclass(frozen=True)
class ImportDeclaration:
    source: str


@dataclass(frozen=True)
class Unsupported:
    """Any node kind without a dedicated model."""

    kind: str
    children: tuple[Node, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class Program:
    body: tuple[Statement, ...] = ()


# =============================================================================
# Unions
# =============================================================================

Expression = Union[
    StringLiteral,
    NumericLiteral,
    BooleanLiteral,
    NullLiteral,
    Identifier,
    TemplateLiteral,
    ObjectExpression,
    ArrayExpression,
    ParenthesizedExpression,
    TypeAssertion,
    MemberExpression,
    CallExpression,
    UnaryExpression,
    BinaryExpression,
    AwaitExpression,
    ArrowFunction,
    FunctionExpression,
    JSXElement,
    JSXFragment,
    JSXExpressionContainer,
    Unsupported,
]

Pattern = Union[Identifier, ObjectPattern, Unsupported]

JSXChild = Union[JSXElement, JSXFragment, JSXExpressionContainer, JSXText]

Statement = Union[
    BlockStatement,
    ExpressionStatement,
    ReturnStatement,
    IfStatement,
    SwitchStatement,
    BreakStatement,
    VariableDeclaration,
    FunctionDeclaration,
    ExportNamedDeclaration,
    ExportDefaultDeclaration,
    ImportDeclaration,
    Unsupported,
]

Node = Union[Expression, Statement, Property, SpreadElement, ObjectPattern, JSXAttribute,
             JSXSpreadAttribute, JSXText, SwitchCase, VariableDeclarator, ExportSpecifier, Program]

FunctionNode = Union[ArrowFunction, FunctionExpression, FunctionDeclaration]


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct child nodes of ``node`` in source order."""
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, tuple):
            for item in value:
                if is_dataclass(item):
                    yield item
        elif is_dataclass(value):
            yield value


def unwrap(node: Expression | None) -> Expression | None:
    """Strip parentheses, type assertions and ``{}`` containers."""
    while isinstance(node, (ParenthesizedExpression, TypeAssertion, JSXExpressionContainer)):
        node = node.expression
    return node


def pattern_names(params: tuple[Pattern, ...]) -> list[str]:
    """Names a parameter list introduces: identifiers and destructured keys."""
    names: list[str] = []
    for param in params:
        if isinstance(param, Identifier):
            names.append(param.name)
        elif isinstance(param, ObjectPattern):
            names.extend(param.keys)
    return names


def static_string(node: Expression | None) -> str | None:
    """String value of a string literal or substitution-free template."""
    node = unwrap(node)
    if isinstance(node, StringLiteral):
        return node.value
    if isinstance(node, TemplateLiteral):
        return node.static_value
    return None
