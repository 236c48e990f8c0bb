"""Action collector.

Finds every DSL call site in a program and turns it into a descriptor.
Runs in two passes over the syntax tree:

  1. every ``store(...)`` call becomes a StoreDescriptor, in source order
  2. a scoped walk resolves DSL receivers through lexical bindings and
     emits one top-level action per call site, or per event handler

A call that looks like DSL but has no static shape is reported as
UNSUPPORTED_ACTION_EXPRESSION at the call (or handler) where it occurs.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from ..builders.action_builder import ActionBuilder
from ..context import CompilationContext
from ..errors import DiagnosticCode, UnsupportedExpressionError
from ..ir import ActionDescriptor, ActionType, StoreDescriptor
from ..serializer import ValueSerializer
from ..syntax.nodes import (
    ArrowFunction,
    AwaitExpression,
    BlockStatement,
    CallExpression,
    Expression,
    ExpressionStatement,
    ExportNamedDeclaration,
    FunctionDeclaration,
    FunctionExpression,
    FunctionNode,
    Identifier,
    JSXAttribute,
    JSXElement,
    Program,
    Statement,
    VariableDeclaration,
    iter_child_nodes,
    pattern_names,
    unwrap,
)
from .dsl import (
    API_METHODS,
    API_NAMESPACE,
    DSL_NAMESPACES,
    EFFECT_METHODS,
    STORE_METHODS,
    STORE_READ_METHODS,
    api_request_config,
    direct_call,
    effect_payload,
    is_store_factory_call,
    literal_key_path,
    method_call,
    parse_store_declaration,
    plain_arguments,
)
from .handlers import HandlerAnalyzer

logger = logging.getLogger(__name__)

HANDLER_ATTRIBUTE = re.compile(r"^on[A-Z]")

# Kinds returned by ActionCollector.dsl_kind
DECLARATION = "declaration"
READ = "read"
STORE = "store"

_ACTION_KINDS = frozenset({STORE, *DSL_NAMESPACES})

_FUNCTION_TYPES = (FunctionDeclaration, ArrowFunction, FunctionExpression)


@dataclass
class Scope:
    """Lexical bindings visible at a point of the walk.

    A name bound to None shadows any outer store binding.
    """

    bindings: dict[str, StoreDescriptor | None] = field(default_factory=dict)
    parent: Scope | None = None
    props: frozenset[str] = frozenset()

    def resolve(self, name: str) -> StoreDescriptor | None:
        scope: Scope | None = self
        while scope is not None:
            if name in scope.bindings:
                return scope.bindings[name]
            scope = scope.parent
        return None

    def is_bound(self, name: str) -> bool:
        scope: Scope | None = self
        while scope is not None:
            if name in scope.bindings:
                return True
            scope = scope.parent
        return False

    def child(self, props=None) -> Scope:
        return Scope(parent=self, props=self.props if props is None else frozenset(props))


class ActionCollector:
    """Collects stores and actions from a parsed program."""

    def __init__(self, ctx: CompilationContext):
        self.ctx = ctx
        self.builder = ActionBuilder(ctx)
        self.handlers = HandlerAnalyzer(self)
        self._declarations: dict[int, StoreDescriptor] = {}

    def collect(self, program: Program) -> list[ActionDescriptor]:
        """Collect top-level actions in source order.

        Store declarations are added to the context as a side effect.
        """
        self._declare_stores(program)

        module = Scope()
        self.hoist(program.body, module)
        actions: list[ActionDescriptor] = []
        for statement in program.body:
            self.walk(statement, module, actions)

        logger.debug(f"Collected {len(self.ctx.stores)} store(s) and {len(actions)} top-level action(s)")
        return actions

    def report(self, error: UnsupportedExpressionError) -> None:
        self.ctx.report(DiagnosticCode.UNSUPPORTED_ACTION_EXPRESSION, str(error), line=error.line)

    # -------------------------------------------------------------------------
    # Pass 1: store declarations
    # -------------------------------------------------------------------------

    def _declare_stores(self, node) -> None:
        if isinstance(node, CallExpression) and is_store_factory_call(node):
            try:
                descriptor = parse_store_declaration(node, ValueSerializer())
            except UnsupportedExpressionError as e:
                self.report(e)
                return
            self._declarations[id(node)] = descriptor
            self.ctx.add_store(descriptor)
            return
        for child in iter_child_nodes(node):
            self._declare_stores(child)

    # -------------------------------------------------------------------------
    # Scopes
    # -------------------------------------------------------------------------

    def hoist(self, statements: tuple[Statement, ...], scope: Scope) -> None:
        """Bind the names a statement list declares."""
        for statement in statements:
            if isinstance(statement, ExportNamedDeclaration):
                statement = statement.declaration
            if isinstance(statement, FunctionDeclaration):
                scope.bindings[statement.name] = None
            elif isinstance(statement, VariableDeclaration):
                for declarator in statement.declarations:
                    if isinstance(declarator.target, Identifier):
                        store = self.resolve_store(declarator.init, scope) if declarator.init else None
                        scope.bindings[declarator.target.name] = store
                    else:
                        for name in pattern_names((declarator.target,)):
                            scope.bindings[name] = None

    def function_scope(self, function: FunctionNode, scope: Scope) -> Scope:
        """Scope of a function body; module-level functions define component props."""
        names = pattern_names(function.params)
        inner = scope.child(props=names if scope.parent is None else None)
        for name in names:
            inner.bindings[name] = None
        return inner

    def resolve_store(self, node: Expression | None, scope: Scope) -> StoreDescriptor | None:
        """The store an expression refers to, or None."""
        node = unwrap(node)
        if isinstance(node, Identifier):
            return scope.resolve(node.name)
        if isinstance(node, CallExpression):
            return self._declarations.get(id(node))
        return None

    # -------------------------------------------------------------------------
    # Pass 2: scoped walk
    # -------------------------------------------------------------------------

    def walk(self, node, scope: Scope, sink: list[ActionDescriptor]) -> None:
        """Append the actions found under ``node`` to ``sink`` in source order."""
        if isinstance(node, _FUNCTION_TYPES):
            inner = self.function_scope(node, scope)
            if isinstance(node.body, BlockStatement):
                self.hoist(node.body.body, inner)
                for statement in node.body.body:
                    self.walk(statement, inner, sink)
            else:
                self.walk(node.body, inner, sink)
            return

        if isinstance(node, BlockStatement):
            inner = scope.child()
            self.hoist(node.body, inner)
            for statement in node.body:
                self.walk(statement, inner, sink)
            return

        if isinstance(node, JSXElement):
            self._walk_element(node, scope, sink)
            return

        if isinstance(node, CallExpression) and self.dsl_kind(node, scope) is not None:
            try:
                action = self.analyze_call(node, scope)
            except UnsupportedExpressionError as e:
                self.report(e)
                return
            if action is not None:
                sink.append(action)
            return

        for child in iter_child_nodes(node):
            self.walk(child, scope, sink)

    def _walk_element(self, element: JSXElement, scope: Scope, sink: list[ActionDescriptor]) -> None:
        for attribute in element.attributes:
            if isinstance(attribute, JSXAttribute) and HANDLER_ATTRIBUTE.match(attribute.name):
                handler = unwrap(attribute.value)
                if isinstance(handler, (ArrowFunction, FunctionExpression)):
                    try:
                        action = self.handlers.analyze(handler, scope)
                    except UnsupportedExpressionError as e:
                        self.report(e)
                        continue
                    if action is not None:
                        sink.append(action)
                    continue
            self.walk(attribute, scope, sink)
        for child in element.children:
            self.walk(child, scope, sink)

    # -------------------------------------------------------------------------
    # Call classification
    # -------------------------------------------------------------------------

    def dsl_kind(self, call: CallExpression, scope: Scope) -> str | None:
        """Which part of the DSL a call belongs to, or None for ordinary calls."""
        if is_store_factory_call(call):
            return DECLARATION
        direct = direct_call(call)
        if direct is not None:
            name = unwrap(call.callee).name
            return None if scope.is_bound(name) else direct[0]
        split = method_call(call)
        if split is None:
            return None
        receiver, method = split
        if self.resolve_store(receiver, scope) is not None:
            return READ if method in STORE_READ_METHODS else STORE
        if isinstance(receiver, Identifier) and receiver.name in DSL_NAMESPACES and not scope.is_bound(receiver.name):
            return receiver.name
        return None

    def is_action_call(self, node, scope: Scope) -> bool:
        return isinstance(node, CallExpression) and self.dsl_kind(node, scope) in _ACTION_KINDS

    def mentions_dsl(self, node, scope: Scope) -> bool:
        """Whether an action-producing DSL call occurs anywhere under ``node``."""
        if self.is_action_call(node, scope):
            return True
        return any(self.mentions_dsl(child, scope) for child in iter_child_nodes(node))

    def analyze_call(self, call: CallExpression, scope: Scope) -> ActionDescriptor | None:
        """Descriptor for one DSL call; None for declarations and reads.

        Raises:
            UnsupportedExpressionError: If the call has no static shape
        """
        kind = self.dsl_kind(call, scope)
        if kind not in _ACTION_KINDS:
            return None

        serializer = ValueSerializer(scope.props)

        if kind == STORE:
            receiver, method = method_call(call)
            return self.store_action(call, self.resolve_store(receiver, scope), method, scope)

        direct = direct_call(call)
        method = direct[1] if direct is not None else method_call(call)[1]

        if kind == API_NAMESPACE:
            if method not in API_METHODS:
                raise UnsupportedExpressionError(f"Unknown api method: {method or '<computed>'}", call.line)
            request, callbacks = api_request_config(call, serializer)
            on_success = self.handlers.callback(callbacks.get("onSuccess"), "onSuccess", scope)
            on_error = self.handlers.callback(callbacks.get("onError"), "onError", scope)
            return self.builder.api_request(request, on_success, on_error)

        signature = EFFECT_METHODS[kind].get(method) if method else None
        if signature is None:
            raise UnsupportedExpressionError(f"Unknown {kind} method: {method or '<computed>'}", call.line)
        payload = effect_payload(signature, call, serializer, f"{kind}.{method}()")
        return self.builder.effect(signature.action_type, payload)

    # -------------------------------------------------------------------------
    # Store actions
    # -------------------------------------------------------------------------

    def store_action(
        self,
        call: CallExpression,
        store: StoreDescriptor,
        method: str | None,
        scope: Scope,
    ) -> ActionDescriptor:
        if method is None:
            raise UnsupportedExpressionError("Computed store method names are not supported", call.line)
        action_type = STORE_METHODS.get(method)
        if action_type is None:
            raise UnsupportedExpressionError(f"Unknown store method: {method}", call.line)

        what = f"store.{method}()"
        args = plain_arguments(call, what)

        if action_type == ActionType.STORE_TRANSACTION:
            return self.transaction(call, store, args, scope)

        key_path = literal_key_path(args[0] if args else None, what, call.line)

        if action_type == ActionType.STORE_REMOVE:
            if len(args) != 1:
                raise UnsupportedExpressionError(f"{what} takes exactly one keyPath argument", call.line)
            return self.builder.store_mutation(action_type, store, key_path, has_value=False)

        if len(args) != 2:
            raise UnsupportedExpressionError(f"{what} requires keyPath and value arguments", call.line)
        value = ValueSerializer(scope.props).visit(args[1])
        return self.builder.store_mutation(action_type, store, key_path, value)

    def transaction(
        self,
        call: CallExpression,
        store: StoreDescriptor,
        args: tuple[Expression, ...],
        scope: Scope,
    ) -> ActionDescriptor:
        """Two-pass analysis of ``store.transaction(tx => {...})``.

        The callback body's statements are collected first, then each one is
        matched against the mutation shapes on the proxy parameter ``tx``.
        """
        if len(args) != 1:
            raise UnsupportedExpressionError("store.transaction() takes a single callback", call.line)
        callback = unwrap(args[0])
        if not isinstance(callback, (ArrowFunction, FunctionExpression)):
            raise UnsupportedExpressionError("store.transaction() requires a function callback", call.line)
        if not callback.params or not isinstance(callback.params[0], Identifier):
            raise UnsupportedExpressionError(
                "store.transaction() callback must take the store as its first parameter", call.line
            )

        proxy = callback.params[0].name
        inner = self.function_scope(callback, scope)
        inner.bindings[proxy] = store

        statements = _flatten(callback.body)

        actions: list[ActionDescriptor] = []
        for statement in statements:
            mutation = _proxy_call(statement, proxy)
            if mutation is not None:
                _, method = method_call(mutation)
                actions.append(self.store_action(mutation, store, method, inner))
            elif self.mentions_dsl(statement, inner):
                raise UnsupportedExpressionError(
                    f"Transaction statements must be mutations on '{proxy}'", call.line
                )
            else:
                logger.debug(f"Ignoring non-mutation statement in transaction (line {call.line})")

        if not actions:
            raise UnsupportedExpressionError("store.transaction() callback contains no mutations", call.line)
        return self.builder.transaction(store, actions)


def _flatten(body) -> list:
    """Statements of a callback body with nested blocks spliced in."""
    if not isinstance(body, BlockStatement):
        return [ExpressionStatement(expression=body)]
    statements = []
    for statement in body.body:
        if isinstance(statement, BlockStatement):
            statements.extend(_flatten(statement))
        else:
            statements.append(statement)
    return statements


def _proxy_call(statement, proxy: str) -> CallExpression | None:
    """The call of ``proxy.<method>(...)`` a statement consists of, if any."""
    if not isinstance(statement, ExpressionStatement):
        return None
    expression = unwrap(statement.expression)
    if isinstance(expression, AwaitExpression):
        expression = unwrap(expression.argument)
    if not isinstance(expression, CallExpression):
        return None
    split = method_call(expression)
    if split is None:
        return None
    receiver, method = split
    if isinstance(receiver, Identifier) and receiver.name == proxy and method in STORE_METHODS:
        return expression
    return None
