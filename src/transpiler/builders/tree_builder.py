"""Component tree builder.

Walks JSX elements into ComponentNode trees. Only ``style`` and
``properties`` attributes are part of the wire contract; text children are
kept for types that accept text, under the ``text`` property.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from ..context import CompilationContext
from ..errors import DiagnosticCode, Severity
from ..ir import ComponentNode, Value, is_prop_ref
from ..registries.components import ComponentDefinition
from ..serializer import ValueSerializer
from ..syntax.nodes import (
    CallExpression,
    JSXChild,
    JSXElement,
    JSXExpressionContainer,
    JSXFragment,
    JSXText,
    MemberExpression,
    unwrap,
)

logger = logging.getLogger(__name__)

TEXT_PROPERTY = "text"
STYLE_ATTRIBUTE = "style"
PROPERTIES_ATTRIBUTE = "properties"

_LINE_BREAK = re.compile(r"\r\n|\n|\r")


def clean_jsx_text(raw: str) -> str:
    """Collapse JSX text the way JSX compilers do.

    Lines are trimmed where they meet a line break, blank lines are dropped,
    and the remaining lines are joined with single spaces.
    """
    lines = _LINE_BREAK.split(raw)
    last_non_empty = max((i for i, line in enumerate(lines) if line.strip()), default=-1)
    pieces = []
    for i, line in enumerate(lines):
        trimmed = line.replace("\t", " ")
        if i != 0:
            trimmed = trimmed.lstrip(" ")
        if i != len(lines) - 1:
            trimmed = trimmed.rstrip(" ")
        if trimmed:
            if i != last_non_empty:
                trimmed += " "
            pieces.append(trimmed)
    return "".join(pieces)


def _is_list_rendering(node) -> bool:
    return (
        isinstance(node, CallExpression)
        and isinstance(node.callee, MemberExpression)
        and node.callee.property_name in ("map", "flatMap")
    )


def _text_piece(value: Value) -> Value:
    """Text form of a static child value, or None when it renders nothing."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) or is_prop_ref(value):
        return value
    return None


class ComponentTreeBuilder:
    """Builds ComponentNode trees against the configured registry."""

    def __init__(self, ctx: CompilationContext):
        self.ctx = ctx
        self.registry = ctx.config.component_registry

    def build(
        self,
        element: JSXElement | JSXFragment,
        component_props: Iterable[str] | None = None,
    ) -> ComponentNode:
        """Build the tree rooted at ``element``.

        Args:
            element: Root JSX element (a root fragment yields an untyped node)
            component_props: Prop names of the enclosing component

        Returns:
            ComponentNode tree
        """
        serializer = ValueSerializer(component_props)
        if isinstance(element, JSXFragment):
            children, _ = self._build_children(element.children, serializer)
            return ComponentNode(type="", children=children)
        return self._build_element(element, serializer)

    def _build_element(self, element: JSXElement, serializer: ValueSerializer) -> ComponentNode:
        definition = self._resolve(element)

        style = self._style(element, definition, serializer)
        properties = self._object_attribute(element, PROPERTIES_ATTRIBUTE, serializer)
        children, texts = self._build_children(element.children, serializer)

        if children and definition is not None and not definition.children_allowed:
            logger.warning(f"<{element.name}> does not accept children; dropping {len(children)} (line {element.line})")
            children = []

        if texts:
            if definition is not None and definition.text_children_allowed:
                text = self._combine_text(texts, element)
                if text is not None:
                    properties[TEXT_PROPERTY] = text
            else:
                logger.debug(f"Dropping text children of <{element.name}> (line {element.line})")

        return ComponentNode(type=element.name, style=style, properties=properties, children=children)

    def _resolve(self, element: JSXElement) -> ComponentDefinition | None:
        definition = self.registry.find(element.name)
        if self.ctx.is_known_component(element.name):
            return definition

        config = self.ctx.config
        if config.allow_unknown_components:
            logger.debug(f"Passing through unknown component <{element.name}>")
        else:
            severity = Severity.ERROR if config.strict_mode else Severity.WARNING
            self.ctx.report(
                DiagnosticCode.UNKNOWN_COMPONENT,
                f"Unknown component <{element.name}>",
                severity=severity,
                line=element.line,
            )
        return None

    def _style(
        self,
        element: JSXElement,
        definition: ComponentDefinition | None,
        serializer: ValueSerializer,
    ) -> dict[str, Value]:
        style: dict[str, Value] = {}
        if self.ctx.config.emit_default_styles and definition is not None:
            style.update(definition.default_styles)
        style.update(self._object_attribute(element, STYLE_ATTRIBUTE, serializer))
        return style

    def _object_attribute(self, element: JSXElement, name: str, serializer: ValueSerializer) -> dict[str, Value]:
        attribute = element.attribute(name)
        if attribute is None or attribute.value is None:
            return {}
        value = serializer.visit(attribute.value)
        if not isinstance(value, dict) or is_prop_ref(value):
            logger.debug(f"Ignoring non-literal {name} on <{element.name}> (line {element.line})")
            return {}
        return value

    def _build_children(
        self,
        children: Iterable[JSXChild],
        serializer: ValueSerializer,
    ) -> tuple[list[ComponentNode], list[Value]]:
        """Child nodes and text pieces, both in source order."""
        nodes: list[ComponentNode] = []
        texts: list[Value] = []

        for child in children:
            if isinstance(child, JSXText):
                text = clean_jsx_text(child.value)
                if text:
                    texts.append(text)
                continue

            inner = unwrap(child) if isinstance(child, JSXExpressionContainer) else child
            if inner is None:
                # {} and {/* comment */}
                continue
            if isinstance(inner, JSXElement):
                nodes.append(self._build_element(inner, serializer))
            elif isinstance(inner, JSXFragment):
                sub_nodes, sub_texts = self._build_children(inner.children, serializer)
                nodes.extend(sub_nodes)
                texts.extend(sub_texts)
            elif _is_list_rendering(inner):
                logger.debug("Skipping inline list rendering; bind lists through a list component's properties")
            else:
                piece = _text_piece(serializer.visit(inner))
                if piece is not None:
                    texts.append(piece)

        return nodes, texts

    def _combine_text(self, texts: list[Value], element: JSXElement) -> Value:
        if len(texts) == 1:
            piece = texts[0]
            return piece.strip() if isinstance(piece, str) else piece
        if all(isinstance(t, str) for t in texts):
            return "".join(texts).strip()
        static = "".join(t for t in texts if isinstance(t, str)).strip()
        # A Value cannot interpolate props into a string; the static text is kept.
        self.ctx.report(
            DiagnosticCode.MIXED_TEXT_CHILDREN,
            f"Prop text in <{element.name}> cannot be combined with static text; keeping {static!r}",
            severity=Severity.WARNING,
            line=element.line,
        )
        return static or None
