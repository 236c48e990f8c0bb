"""Event handler analysis.

Turns the body of an ``on[A-Z]...`` handler (or an api.request callback)
into action descriptors, statement by statement:

  - expression / return / variable statements yield the DSL calls they contain
  - ``if`` becomes ``conditional``, ``switch`` becomes ``switch``
  - ``cond && action()``, ``cond || action()`` and ternaries become ``conditional``
  - blocks are flattened, ``await`` is unwrapped
  - statements without DSL calls are ignored

Any other statement that contains a DSL call fails the handler, as does a
DSL call inside a function nested in the handler (``items.forEach(...)``),
since it may run any number of times or never.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import UnsupportedExpressionError
from ..ir import ActionDescriptor, Value
from ..serializer import ValueSerializer
from ..syntax.nodes import (
    ArrowFunction,
    AwaitExpression,
    BinaryExpression,
    BlockStatement,
    BreakStatement,
    Expression,
    ExpressionStatement,
    FunctionExpression,
    IfStatement,
    ReturnStatement,
    Statement,
    SwitchStatement,
    Unsupported,
    VariableDeclaration,
    iter_child_nodes,
    unwrap,
)
from .conditions import ConditionBuilder

if TYPE_CHECKING:
    from .collector import ActionCollector, Scope

_TERNARY = "ternary_expression"


class HandlerAnalyzer:
    """Analyzes handler function bodies for a collector."""

    def __init__(self, collector: ActionCollector):
        self.collector = collector
        self.builder = collector.builder

    def analyze(self, function: ArrowFunction | FunctionExpression, scope: Scope) -> ActionDescriptor | None:
        """One action for the handler: the single action, or a sequence of several.

        Returns None when the handler contains no DSL calls.
        """
        actions = self.function_actions(function, scope)
        if not actions:
            return None
        return self.builder.single(actions)

    def callback(self, node: Expression | None, name: str, scope: Scope) -> ActionDescriptor:
        """api.request callbacks always compile to a sequence, empty when absent."""
        if node is None:
            return self.builder.sequence([])
        function = unwrap(node)
        if not isinstance(function, (ArrowFunction, FunctionExpression)):
            raise UnsupportedExpressionError(f"api.request(): {name} must be a function")
        return self.builder.sequence(self.function_actions(function, scope))

    def function_actions(self, function: ArrowFunction | FunctionExpression, scope: Scope) -> list[ActionDescriptor]:
        inner = self.collector.function_scope(function, scope)
        body = function.body
        if isinstance(body, BlockStatement):
            self.collector.hoist(body.body, inner)
            return self.statements(body.body, inner)
        return self.expression(body, inner)

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def statements(self, statements: tuple[Statement, ...], scope: Scope) -> list[ActionDescriptor]:
        actions: list[ActionDescriptor] = []
        for statement in statements:
            actions.extend(self.statement(statement, scope))
        return actions

    def statement(self, statement: Statement, scope: Scope) -> list[ActionDescriptor]:
        if isinstance(statement, ExpressionStatement):
            return self.expression(statement.expression, scope)

        if isinstance(statement, ReturnStatement):
            return self.expression(statement.argument, scope) if statement.argument is not None else []

        if isinstance(statement, VariableDeclaration):
            self.collector.hoist((statement,), scope)
            actions = []
            for declarator in statement.declarations:
                if declarator.init is not None:
                    actions.extend(self.expression(declarator.init, scope))
            return actions

        if isinstance(statement, BlockStatement):
            inner = scope.child()
            self.collector.hoist(statement.body, inner)
            return self.statements(statement.body, inner)

        if isinstance(statement, IfStatement):
            return self.if_statement(statement, scope)

        if isinstance(statement, SwitchStatement):
            return self.switch_statement(statement, scope)

        if isinstance(statement, BreakStatement):
            return []

        if self.collector.mentions_dsl(statement, scope):
            kind = statement.kind if isinstance(statement, Unsupported) else type(statement).__name__
            line = statement.line if isinstance(statement, Unsupported) else None
            raise UnsupportedExpressionError(f"Actions inside '{kind}' cannot be compiled statically", line)
        return []

    def if_statement(self, statement: IfStatement, scope: Scope) -> list[ActionDescriptor]:
        then_actions = self.statement(statement.consequent, scope)
        else_actions = self.statement(statement.alternate, scope) if statement.alternate is not None else None
        if not then_actions and not else_actions:
            return []
        return [self._conditional(statement.test, then_actions, else_actions, scope)]

    def switch_statement(self, statement: SwitchStatement, scope: Scope) -> list[ActionDescriptor]:
        """Each case runs its own body and falls through until a break or return."""
        if not self.collector.mentions_dsl(statement, scope):
            return []

        flows = [_case_flow(case.body) for case in statement.cases]
        branches = []
        for index in range(len(flows)):
            statements: list[Statement] = []
            for body, leaves in flows[index:]:
                statements.extend(body)
                if leaves:
                    break
            inner = scope.child()
            self.collector.hoist(tuple(statements), inner)
            branches.append(self.statements(tuple(statements), inner))

        conditions = self._conditions(scope)
        discriminant = conditions.operand(statement.discriminant)
        cases: list[Value] = [
            None if case.test is None else conditions.operand(case.test) for case in statement.cases
        ]
        return [self.builder.switch(discriminant, cases, [self.builder.single(b) for b in branches])]

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def expression(self, node: Expression, scope: Scope) -> list[ActionDescriptor]:
        node = unwrap(node)
        if isinstance(node, AwaitExpression):
            return self.expression(node.argument, scope)

        if isinstance(node, BinaryExpression) and node.operator in ("&&", "||"):
            if not self.collector.mentions_dsl(node.left, scope):
                actions = self.expression(node.right, scope)
                if not actions:
                    return []
                test = node.left
                if node.operator == "||":
                    return [self._conditional(test, [], actions, scope)]
                return [self._conditional(test, actions, None, scope)]

        if isinstance(node, Unsupported) and node.kind == _TERNARY and len(node.children) == 3:
            test, consequent, alternate = node.children
            if not self.collector.mentions_dsl(test, scope):
                then_actions = self.expression(consequent, scope)
                else_actions = self.expression(alternate, scope)
                if not then_actions and not else_actions:
                    return []
                return [self._conditional(test, then_actions, else_actions, scope)]

        nested = self._nested_function(node, scope)
        if nested is not None:
            raise UnsupportedExpressionError(
                "Actions inside a function nested in a handler cannot be compiled statically", nested.line or None
            )

        actions: list[ActionDescriptor] = []
        self.collector.walk(node, scope, actions)
        return actions

    def _nested_function(self, node, scope: Scope) -> ArrowFunction | FunctionExpression | None:
        """First function under ``node`` that contains actions.

        Callbacks passed to DSL calls (transactions, api.request) are analyzed
        with their call and do not count.
        """
        if self.collector.is_action_call(node, scope):
            return None
        if isinstance(node, (ArrowFunction, FunctionExpression)):
            inner = self.collector.function_scope(node, scope)
            return node if self.collector.mentions_dsl(node.body, inner) else None
        for child in iter_child_nodes(node):
            found = self._nested_function(child, scope)
            if found is not None:
                return found
        return None

    def _conditions(self, scope: Scope, line: int | None = None) -> ConditionBuilder:
        return ConditionBuilder(
            ValueSerializer(scope.props),
            lambda receiver: self.collector.resolve_store(receiver, scope),
            line,
        )

    def _conditional(
        self,
        test: Expression,
        then_actions: list[ActionDescriptor],
        else_actions: list[ActionDescriptor] | None,
        scope: Scope,
    ) -> ActionDescriptor:
        condition = self._conditions(scope).build(test)
        then_action = self.builder.single(then_actions)
        else_action = self.builder.single(else_actions) if else_actions else None
        return self.builder.conditional(condition, then_action, else_action)


def _case_flow(body: tuple[Statement, ...]) -> tuple[list[Statement], bool]:
    """Statements a case body runs, and whether it leaves the switch.

    Raises:
        UnsupportedExpressionError: If the body leaves the switch conditionally
    """
    statements: list[Statement] = []
    for statement in body:
        if isinstance(statement, BreakStatement):
            return statements, True
        statements.append(statement)
        if isinstance(statement, ReturnStatement):
            return statements, True
        if isinstance(statement, BlockStatement):
            if _case_flow(statement.body)[1]:
                return statements, True
        elif isinstance(statement, IfStatement) and _exits(statement):
            raise UnsupportedExpressionError("Conditional break or return in a switch case cannot be compiled statically")
    return statements, False


def _exits(statement: Statement | None) -> bool:
    """Whether a break or return occurs in ``statement`` outside loops, switches and functions."""
    if isinstance(statement, (BreakStatement, ReturnStatement)):
        return True
    if isinstance(statement, BlockStatement):
        return any(_exits(s) for s in statement.body)
    if isinstance(statement, IfStatement):
        return _exits(statement.consequent) or _exits(statement.alternate)
    return False
