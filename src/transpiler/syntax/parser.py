"""TSX source parser.

Parses source text with the tree-sitter TSX grammar and converts the
concrete syntax tree into the typed nodes of ``syntax.nodes``. Conversion is
the only place that looks at tree-sitter node kinds; everything downstream
matches on the closed dataclass union instead.
"""

from __future__ import annotations

import html
import logging

import tree_sitter_typescript as tsts
from tree_sitter import Language, Node as TSNode, Parser

from ..errors import ParseError
from .literals import decode_string_body, decode_string_literal, parse_number
from .nodes import (
    ArrayExpression,
    ArrowFunction,
    AwaitExpression,
    BinaryExpression,
    BlockStatement,
    BooleanLiteral,
    BreakStatement,
    CallExpression,
    ExportDefaultDeclaration,
    ExportNamedDeclaration,
    ExportSpecifier,
    Expression,
    ExpressionStatement,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    IfStatement,
    ImportDeclaration,
    JSXAttribute,
    JSXElement,
    JSXExpressionContainer,
    JSXFragment,
    JSXSpreadAttribute,
    JSXText,
    MemberExpression,
    Node,
    NullLiteral,
    NumericLiteral,
    ObjectExpression,
    ObjectPattern,
    ParenthesizedExpression,
    Pattern,
    Program,
    Property,
    ReturnStatement,
    SpreadElement,
    Statement,
    StringLiteral,
    SwitchCase,
    SwitchStatement,
    TemplateLiteral,
    TypeAssertion,
    UnaryExpression,
    Unsupported,
    VariableDeclaration,
    VariableDeclarator,
)

logger = logging.getLogger(__name__)

TSX_LANGUAGE = Language(tsts.language_tsx())

_SKIPPED_KINDS = frozenset({"comment", "hash_bang_line"})

# Type-level constructs carry no runtime meaning; their subtrees are not converted.
_OPAQUE_KINDS = frozenset(
    {
        "type_alias_declaration",
        "interface_declaration",
        "type_annotation",
        "type_arguments",
        "type_parameters",
        "ambient_declaration",
        "abstract_class_declaration",
        "enum_declaration",
        "regex",
    }
)

_STATEMENT_KINDS = frozenset(
    {
        "expression_statement",
        "statement_block",
        "return_statement",
        "if_statement",
        "switch_statement",
        "break_statement",
        "lexical_declaration",
        "variable_declaration",
        "function_declaration",
        "generator_function_declaration",
        "export_statement",
        "import_statement",
        "for_statement",
        "for_in_statement",
        "while_statement",
        "do_statement",
        "try_statement",
        "throw_statement",
        "labeled_statement",
        "empty_statement",
        "continue_statement",
        "class_declaration",
    }
)

_TYPE_ASSERTION_KINDS = frozenset({"as_expression", "satisfies_expression", "non_null_expression"})

_FUNCTION_EXPRESSION_KINDS = frozenset({"function_expression", "function", "generator_function"})


def _named(node: TSNode) -> list[TSNode]:
    """Named children without comments."""
    return [c for c in node.named_children if c.type not in _SKIPPED_KINDS]


def _line(node: TSNode) -> int:
    return node.start_point[0] + 1


def _find_error_node(node: TSNode) -> TSNode | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _find_error_node(child)
            if found is not None:
                return found
    return None


class SourceParser:
    """Parses TSX source into a ``Program``.

    Each instance owns its tree-sitter parser; create one per thread.
    """

    def __init__(self):
        self._parser = Parser(TSX_LANGUAGE)

    def parse(self, source: str) -> Program:
        """Parse source text.

        Args:
            source: TSX source text

        Returns:
            Program node

        Raises:
            ParseError: If the source contains syntax errors
        """
        data = source.encode("utf-8")
        tree = self._parser.parse(data)
        root = tree.root_node

        if root.has_error:
            error_node = _find_error_node(root) or root
            line, column = error_node.start_point[0] + 1, error_node.start_point[1] + 1
            if error_node.is_missing:
                message = f"Missing '{error_node.type}'"
            else:
                snippet = data[error_node.start_byte : error_node.end_byte].decode("utf-8", "replace")
                snippet = " ".join(snippet.split())[:40]
                message = f"Unexpected syntax near '{snippet}'" if snippet else "Unexpected syntax"
            raise ParseError(f"{message} at line {line}, column {column}", line=line, column=column)

        return _Converter(data).program(root)


def parse_source(source: str) -> Program:
    """Parse source text with a fresh parser."""
    return SourceParser().parse(source)


class _Converter:
    """Converts tree-sitter nodes to typed syntax nodes."""

    def __init__(self, source: bytes):
        self._source = source

    def text(self, node: TSNode) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8", "replace")

    def unsupported(self, node: TSNode) -> Unsupported:
        if node.type in _OPAQUE_KINDS:
            return Unsupported(kind=node.type, line=_line(node))
        children = tuple(self.any(c) for c in _named(node))
        return Unsupported(kind=node.type, children=children, line=_line(node))

    def any(self, node: TSNode) -> Node:
        if node.type in _STATEMENT_KINDS:
            return self.statement(node)
        return self.expression(node)

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def program(self, node: TSNode) -> Program:
        return Program(body=tuple(self.statement(c) for c in _named(node)))

    def block(self, node: TSNode) -> BlockStatement:
        return BlockStatement(body=tuple(self.statement(c) for c in _named(node)))

    def statement(self, node: TSNode) -> Statement:
        kind = node.type

        if kind == "expression_statement":
            inner = _named(node)
            if not inner:
                return self.unsupported(node)
            return ExpressionStatement(expression=self.expression(inner[0]))

        if kind == "statement_block":
            return self.block(node)

        if kind == "return_statement":
            inner = _named(node)
            return ReturnStatement(argument=self.expression(inner[0]) if inner else None)

        if kind == "if_statement":
            return self.if_statement(node)

        if kind == "switch_statement":
            return self.switch_statement(node)

        if kind == "break_statement":
            return BreakStatement()

        if kind in ("lexical_declaration", "variable_declaration"):
            return self.variable_declaration(node)

        if kind in ("function_declaration", "generator_function_declaration"):
            return self.function_declaration(node)

        if kind == "export_statement":
            return self.export_statement(node)

        if kind == "import_statement":
            source = node.child_by_field_name("source")
            return ImportDeclaration(source=decode_string_literal(self.text(source)) if source else "")

        return self.unsupported(node)

    def if_statement(self, node: TSNode) -> IfStatement | Unsupported:
        condition = node.child_by_field_name("condition")
        consequence = node.child_by_field_name("consequence")
        if condition is None or consequence is None:
            return self.unsupported(node)

        alternate = None
        alternative = node.child_by_field_name("alternative")
        if alternative is not None:
            inner = _named(alternative) if alternative.type == "else_clause" else [alternative]
            if inner:
                alternate = self.statement(inner[0])

        return IfStatement(
            test=self.expression(condition),
            consequent=self.statement(consequence),
            alternate=alternate,
        )

    def switch_statement(self, node: TSNode) -> SwitchStatement | Unsupported:
        value = node.child_by_field_name("value")
        body = node.child_by_field_name("body")
        if value is None or body is None:
            return self.unsupported(node)

        cases = []
        for case in _named(body):
            members = _named(case)
            if case.type == "switch_case" and members:
                test = self.expression(members[0])
                statements = members[1:]
            elif case.type == "switch_default":
                test = None
                statements = members
            else:
                continue
            cases.append(SwitchCase(test=test, body=tuple(self.statement(s) for s in statements)))

        return SwitchStatement(discriminant=self.expression(value), cases=tuple(cases))

    def variable_declaration(self, node: TSNode) -> VariableDeclaration:
        kind = node.children[0].type if node.children else "var"
        declarators = []
        for child in _named(node):
            if child.type != "variable_declarator":
                continue
            name = child.child_by_field_name("name")
            value = child.child_by_field_name("value")
            declarators.append(
                VariableDeclarator(
                    target=self.pattern(name) if name is not None else Unsupported(kind="missing"),
                    init=self.expression(value) if value is not None else None,
                )
            )
        return VariableDeclaration(kind=kind, declarations=tuple(declarators))

    def function_declaration(self, node: TSNode) -> FunctionDeclaration | Unsupported:
        name = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        if name is None or body is None:
            return self.unsupported(node)
        return FunctionDeclaration(
            name=self.text(name),
            params=self.params(node.child_by_field_name("parameters")),
            body=self.block(body),
            line=_line(node),
        )

    def export_statement(self, node: TSNode) -> Statement:
        is_default = any(c.type == "default" for c in node.children)
        declaration = node.child_by_field_name("declaration")
        value = node.child_by_field_name("value")

        if is_default:
            if declaration is not None:
                return ExportDefaultDeclaration(declaration=self.statement(declaration))
            if value is not None:
                return ExportDefaultDeclaration(declaration=self.expression(value))
            return self.unsupported(node)

        if declaration is not None:
            return ExportNamedDeclaration(declaration=self.statement(declaration))

        # Re-exports from another module declare nothing locally.
        if node.child_by_field_name("source") is not None:
            return ExportNamedDeclaration()

        specifiers = []
        for clause in _named(node):
            if clause.type != "export_clause":
                continue
            for spec in _named(clause):
                if spec.type != "export_specifier":
                    continue
                name = spec.child_by_field_name("name")
                alias = spec.child_by_field_name("alias")
                if name is None:
                    continue
                local = self.text(name)
                specifiers.append(ExportSpecifier(local=local, exported=self.text(alias) if alias else local))
        return ExportNamedDeclaration(specifiers=tuple(specifiers))

    # -------------------------------------------------------------------------
    # Patterns and parameters
    # -------------------------------------------------------------------------

    def params(self, node: TSNode | None) -> tuple[Pattern, ...]:
        if node is None:
            return ()
        if node.type == "identifier":
            return (Identifier(name=self.text(node)),)
        return tuple(self.pattern(p) for p in _named(node))

    def pattern(self, node: TSNode) -> Pattern:
        kind = node.type
        if kind in ("required_parameter", "optional_parameter"):
            inner = node.child_by_field_name("pattern")
            return self.pattern(inner) if inner is not None else self.unsupported(node)
        if kind == "identifier":
            return Identifier(name=self.text(node))
        if kind == "object_pattern":
            return ObjectPattern(keys=tuple(self.pattern_keys(node)))
        if kind == "assignment_pattern":
            left = node.child_by_field_name("left")
            return self.pattern(left) if left is not None else self.unsupported(node)
        return Unsupported(kind=kind, line=_line(node))

    def pattern_keys(self, node: TSNode) -> list[str]:
        keys = []
        for child in _named(node):
            if child.type == "shorthand_property_identifier_pattern":
                keys.append(self.text(child))
            elif child.type == "pair_pattern":
                key = child.child_by_field_name("key")
                if key is not None and key.type == "property_identifier":
                    keys.append(self.text(key))
                elif key is not None and key.type == "string":
                    keys.append(decode_string_literal(self.text(key)))
            elif child.type == "object_assignment_pattern":
                left = child.child_by_field_name("left")
                if left is not None and left.type == "shorthand_property_identifier_pattern":
                    keys.append(self.text(left))
        return keys

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def expression(self, node: TSNode) -> Expression:
        kind = node.type

        if kind == "string":
            return StringLiteral(value=decode_string_literal(self.text(node)))
        if kind == "template_string":
            return self.template(node)
        if kind == "number":
            try:
                return NumericLiteral(value=parse_number(self.text(node)))
            except ValueError:
                logger.debug(f"Unparseable number literal: {self.text(node)}")
                return self.unsupported(node)
        if kind in ("true", "false"):
            return BooleanLiteral(value=kind == "true")
        if kind == "null":
            return NullLiteral()
        if kind in ("identifier", "property_identifier", "shorthand_property_identifier", "undefined"):
            return Identifier(name=self.text(node))

        if kind == "object":
            return ObjectExpression(properties=tuple(self.object_member(c) for c in _named(node)))
        if kind == "array":
            return ArrayExpression(elements=tuple(self.argument(c) for c in _named(node)))

        if kind == "parenthesized_expression":
            inner = _named(node)
            if not inner:
                return self.unsupported(node)
            return ParenthesizedExpression(expression=self.expression(inner[0]))
        if kind in _TYPE_ASSERTION_KINDS:
            inner = _named(node)
            return TypeAssertion(expression=self.expression(inner[0])) if inner else self.unsupported(node)
        if kind == "type_assertion":
            inner = _named(node)
            return TypeAssertion(expression=self.expression(inner[-1])) if inner else self.unsupported(node)

        if kind == "member_expression":
            obj = node.child_by_field_name("object")
            prop = node.child_by_field_name("property")
            if obj is None or prop is None:
                return self.unsupported(node)
            return MemberExpression(object=self.expression(obj), property=Identifier(name=self.text(prop)))
        if kind == "subscript_expression":
            obj = node.child_by_field_name("object")
            index = node.child_by_field_name("index")
            if obj is None or index is None:
                return self.unsupported(node)
            return MemberExpression(object=self.expression(obj), property=self.expression(index), computed=True)

        if kind == "call_expression":
            return self.call(node)
        if kind == "arrow_function":
            return self.arrow(node)
        if kind in _FUNCTION_EXPRESSION_KINDS:
            return self.function_expression(node)

        if kind == "unary_expression":
            return self.unary(node)
        if kind == "binary_expression":
            left = node.child_by_field_name("left")
            right = node.child_by_field_name("right")
            operator = node.child_by_field_name("operator")
            if left is None or right is None or operator is None:
                return self.unsupported(node)
            return BinaryExpression(
                operator=self.text(operator),
                left=self.expression(left),
                right=self.expression(right),
            )
        if kind == "await_expression":
            inner = _named(node)
            return AwaitExpression(argument=self.expression(inner[0])) if inner else self.unsupported(node)

        if kind in ("jsx_element", "jsx_self_closing_element"):
            return self.jsx(node)
        if kind == "jsx_expression":
            return self.jsx_expression(node)

        return self.unsupported(node)

    def template(self, node: TSNode) -> TemplateLiteral:
        substitutions = [c for c in node.named_children if c.type == "template_substitution"]
        start = node.start_byte + 1
        end = node.end_byte - 1
        quasis = []
        expressions = []
        cursor = start
        for sub in substitutions:
            raw = self._source[cursor : sub.start_byte].decode("utf-8", "replace")
            quasis.append(decode_string_body(raw))
            inner = _named(sub)
            expressions.append(self.expression(inner[0]) if inner else Unsupported(kind="template_substitution"))
            cursor = sub.end_byte
        raw = self._source[cursor:end].decode("utf-8", "replace")
        quasis.append(decode_string_body(raw))
        return TemplateLiteral(quasis=tuple(quasis), expressions=tuple(expressions))

    def object_member(self, node: TSNode) -> Property | SpreadElement | Unsupported:
        kind = node.type
        if kind == "pair":
            key = node.child_by_field_name("key")
            value = node.child_by_field_name("value")
            if key is None or value is None:
                return self.unsupported(node)
            return Property(key=self.property_key(key), value=self.expression(value))
        if kind == "shorthand_property_identifier":
            name = Identifier(name=self.text(node))
            return Property(key=name, value=name)
        if kind == "spread_element":
            inner = _named(node)
            return SpreadElement(argument=self.expression(inner[0])) if inner else self.unsupported(node)
        if kind == "method_definition":
            name = node.child_by_field_name("name")
            body = node.child_by_field_name("body")
            if name is None or body is None:
                return self.unsupported(node)
            function = FunctionExpression(
                name=self.text(name),
                params=self.params(node.child_by_field_name("parameters")),
                body=self.block(body),
                line=_line(node),
            )
            return Property(key=self.property_key(name), value=function)
        return self.unsupported(node)

    def property_key(self, node: TSNode) -> Expression:
        if node.type in ("property_identifier", "private_property_identifier"):
            return Identifier(name=self.text(node))
        if node.type == "computed_property_name":
            inner = _named(node)
            return self.expression(inner[0]) if inner else self.unsupported(node)
        return self.expression(node)

    def argument(self, node: TSNode) -> Expression | SpreadElement:
        if node.type == "spread_element":
            inner = _named(node)
            return SpreadElement(argument=self.expression(inner[0]) if inner else self.unsupported(node))
        return self.expression(node)

    def call(self, node: TSNode) -> CallExpression | Unsupported:
        function = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if function is None or arguments is None or arguments.type != "arguments":
            # Tagged templates and malformed calls
            return self.unsupported(node)
        return CallExpression(
            callee=self.expression(function),
            arguments=tuple(self.argument(a) for a in _named(arguments)),
            line=_line(node),
        )

    def arrow(self, node: TSNode) -> ArrowFunction | Unsupported:
        body = node.child_by_field_name("body")
        if body is None:
            return self.unsupported(node)
        params_node = node.child_by_field_name("parameter") or node.child_by_field_name("parameters")
        converted_body = self.block(body) if body.type == "statement_block" else self.expression(body)
        return ArrowFunction(params=self.params(params_node), body=converted_body, line=_line(node))

    def function_expression(self, node: TSNode) -> FunctionExpression | Unsupported:
        body = node.child_by_field_name("body")
        if body is None:
            return self.unsupported(node)
        name = node.child_by_field_name("name")
        return FunctionExpression(
            name=self.text(name) if name is not None else None,
            params=self.params(node.child_by_field_name("parameters")),
            body=self.block(body),
            line=_line(node),
        )

    def unary(self, node: TSNode) -> Expression:
        operator = node.child_by_field_name("operator")
        argument = node.child_by_field_name("argument")
        if operator is None or argument is None:
            return self.unsupported(node)
        op = self.text(operator)
        converted = self.expression(argument)
        # Signed numeric literals fold into a single literal.
        if op in ("-", "+") and isinstance(converted, NumericLiteral):
            return NumericLiteral(value=-converted.value if op == "-" else converted.value)
        return UnaryExpression(operator=op, argument=converted)

    # -------------------------------------------------------------------------
    # JSX
    # -------------------------------------------------------------------------

    def jsx_tag_name(self, node: TSNode | None) -> str | None:
        if node is None:
            return None
        return "".join(self.text(node).split())

    def jsx(self, node: TSNode) -> JSXElement | JSXFragment:
        if node.type == "jsx_self_closing_element":
            name = self.jsx_tag_name(node.child_by_field_name("name")) or ""
            return JSXElement(name=name, attributes=self.jsx_attributes(node), line=_line(node))

        opening = node.child_by_field_name("open_tag")
        children = tuple(
            converted
            for child in node.named_children
            if child.type not in ("jsx_opening_element", "jsx_closing_element")
            for converted in [self.jsx_child(child)]
            if converted is not None
        )
        name = self.jsx_tag_name(opening.child_by_field_name("name")) if opening is not None else None
        if name is None:
            return JSXFragment(children=children, line=_line(node))
        return JSXElement(name=name, attributes=self.jsx_attributes(opening), children=children, line=_line(node))

    def jsx_attributes(self, node: TSNode) -> tuple[JSXAttribute | JSXSpreadAttribute, ...]:
        attributes = []
        for child in _named(node):
            if child.type == "jsx_attribute":
                attributes.append(self.jsx_attribute(child))
            elif child.type == "jsx_expression":
                inner = _named(child)
                if inner and inner[0].type == "spread_element":
                    spread = _named(inner[0])
                    if spread:
                        attributes.append(JSXSpreadAttribute(argument=self.expression(spread[0])))
        return tuple(attributes)

    def jsx_attribute(self, node: TSNode) -> JSXAttribute:
        parts = _named(node)
        name = self.text(parts[0]) if parts else ""
        if len(parts) < 2:
            return JSXAttribute(name=name)

        value = parts[1]
        if value.type == "string":
            # JSX attribute strings have no escape sequences, only entities.
            return JSXAttribute(name=name, value=StringLiteral(value=html.unescape(self.text(value)[1:-1])))
        return JSXAttribute(name=name, value=self.expression(value))

    def jsx_expression(self, node: TSNode) -> JSXExpressionContainer:
        inner = _named(node)
        if not inner:
            return JSXExpressionContainer(expression=None)
        if inner[0].type == "spread_element":
            return JSXExpressionContainer(expression=self.unsupported(inner[0]))
        return JSXExpressionContainer(expression=self.expression(inner[0]))

    def jsx_child(self, node: TSNode):
        kind = node.type
        if kind == "jsx_text":
            return JSXText(value=self.text(node))
        if kind == "html_character_reference":
            return JSXText(value=html.unescape(self.text(node)))
        if kind in ("jsx_element", "jsx_self_closing_element"):
            return self.jsx(node)
        if kind == "jsx_expression":
            return self.jsx_expression(node)
        return None
