"""Component and store extractor.

File-level pass over a parsed program. Finds the scenario key and metadata,
the default-exported main component, named and helper components with their
prop sets, and hands the program to the action collector for stores and
actions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .actions.collector import ActionCollector
from .builders.tree_builder import ComponentTreeBuilder
from .context import CompilationContext
from .errors import DiagnosticCode
from .ir import ActionDescriptor, ComponentNode, StoreDescriptor
from .serializer import property_key
from .syntax.nodes import (
    ArrowFunction,
    BlockStatement,
    ExportDefaultDeclaration,
    ExportNamedDeclaration,
    Expression,
    FunctionDeclaration,
    FunctionExpression,
    FunctionNode,
    Identifier,
    JSXElement,
    JSXFragment,
    NumericLiteral,
    ObjectExpression,
    Program,
    Property,
    ReturnStatement,
    VariableDeclaration,
    pattern_names,
    static_string,
    unwrap,
)

logger = logging.getLogger(__name__)

SCENARIO_KEY_EXPORT = "SCENARIO_KEY"
SCENARIO_METADATA_EXPORT = "SCENARIO"

DEFAULT_VERSION = "1.0.0"
DEFAULT_BUILD_NUMBER = 1


@dataclass
class ExtractedScenario:
    """Everything the extractor found, before validation."""

    key: str | None = None
    version: str = DEFAULT_VERSION
    build_number: int = DEFAULT_BUILD_NUMBER
    main: ComponentNode | None = None
    # (name, node) pairs in source order; duplicates are kept for the assembler
    components: list[tuple[str, ComponentNode]] = field(default_factory=list)
    stores: list[StoreDescriptor] = field(default_factory=list)
    actions: list[ActionDescriptor] = field(default_factory=list)


@dataclass
class _Candidate:
    """A top-level function that may be a component."""

    name: str
    function: FunctionNode
    exported: bool
    jsx: JSXElement | JSXFragment | None


def component_jsx(function: FunctionNode) -> JSXElement | JSXFragment | None:
    """The JSX a component renders.

    Either the arrow expression body or the first top-level ``return <JSX>``.
    """
    body = function.body
    if not isinstance(body, BlockStatement):
        node = unwrap(body)
        return node if isinstance(node, (JSXElement, JSXFragment)) else None
    for statement in body.body:
        if isinstance(statement, ReturnStatement):
            node = unwrap(statement.argument)
            if isinstance(node, (JSXElement, JSXFragment)):
                return node
    return None


def _function_init(node: Expression | None) -> ArrowFunction | FunctionExpression | None:
    node = unwrap(node)
    return node if isinstance(node, (ArrowFunction, FunctionExpression)) else None


class ScenarioExtractor:
    """Extracts scenario parts from a program."""

    def __init__(self, ctx: CompilationContext):
        self.ctx = ctx
        self.tree_builder = ComponentTreeBuilder(ctx)

    def extract(self, program: Program) -> ExtractedScenario:
        result = ExtractedScenario()

        candidates = self._find_candidates(program)
        self.ctx.local_components.update(c.name for c in candidates if c.jsx is not None)

        self._extract_metadata(program, result)
        self._extract_components(program, candidates, result)

        result.actions = ActionCollector(self.ctx).collect(program)
        result.stores = list(self.ctx.stores)
        return result

    # -------------------------------------------------------------------------
    # Key and metadata
    # -------------------------------------------------------------------------

    def _exported_constants(self, program: Program):
        for statement in program.body:
            if isinstance(statement, ExportNamedDeclaration) and isinstance(
                statement.declaration, VariableDeclaration
            ):
                for declarator in statement.declaration.declarations:
                    if isinstance(declarator.target, Identifier):
                        yield declarator.target.name, declarator.init

    def _extract_metadata(self, program: Program, result: ExtractedScenario) -> None:
        key_from_export = None
        key_from_metadata = None

        for name, init in self._exported_constants(program):
            if name == SCENARIO_KEY_EXPORT:
                key_from_export = static_string(init)
                if key_from_export is None:
                    self.ctx.report(DiagnosticCode.INVALID_KEY, f"{SCENARIO_KEY_EXPORT} must be a string literal")
            elif name == SCENARIO_METADATA_EXPORT:
                key_from_metadata = self._read_metadata(init, result)

        result.key = key_from_export if key_from_export is not None else key_from_metadata
        if result.key is not None:
            logger.debug(f"Scenario key: {result.key}")

    def _read_metadata(self, init: Expression | None, result: ExtractedScenario) -> str | None:
        """Apply SCENARIO metadata to ``result``. Returns SCENARIO.key, if any."""
        node = unwrap(init)
        if not isinstance(node, ObjectExpression):
            self.ctx.report(DiagnosticCode.INVALID_METADATA, f"{SCENARIO_METADATA_EXPORT} must be an object literal")
            return None

        members = {property_key(m): m.value for m in node.properties or () if isinstance(m, Property)}

        key = None
        if "key" in members:
            key = static_string(members["key"])
            if key is None:
                self.ctx.report(DiagnosticCode.INVALID_KEY, f"{SCENARIO_METADATA_EXPORT}.key must be a string literal")

        if "version" in members:
            version = static_string(members["version"])
            if version is None:
                self.ctx.report(
                    DiagnosticCode.INVALID_METADATA, f"{SCENARIO_METADATA_EXPORT}.version must be a string"
                )
            else:
                result.version = version

        if "buildNumber" in members:
            build = unwrap(members["buildNumber"])
            if isinstance(build, NumericLiteral) and isinstance(build.value, int) and build.value >= 0:
                result.build_number = build.value
            else:
                self.ctx.report(
                    DiagnosticCode.INVALID_METADATA,
                    f"{SCENARIO_METADATA_EXPORT}.buildNumber must be a non-negative integer",
                )

        return key

    # -------------------------------------------------------------------------
    # Components
    # -------------------------------------------------------------------------

    def _find_candidates(self, program: Program) -> list[_Candidate]:
        candidates = []
        for statement in program.body:
            exported = isinstance(statement, ExportNamedDeclaration)
            declaration = statement.declaration if exported else statement

            if isinstance(declaration, FunctionDeclaration):
                candidates.append(
                    _Candidate(declaration.name, declaration, exported, component_jsx(declaration))
                )
            elif isinstance(declaration, VariableDeclaration):
                for declarator in declaration.declarations:
                    function = _function_init(declarator.init)
                    if function is not None and isinstance(declarator.target, Identifier):
                        candidates.append(
                            _Candidate(declarator.target.name, function, exported, component_jsx(function))
                        )
        return candidates

    def _extract_components(
        self,
        program: Program,
        candidates: list[_Candidate],
        result: ExtractedScenario,
    ) -> None:
        by_name = {c.name: c for c in candidates}
        re_exported = {
            spec.local
            for statement in program.body
            if isinstance(statement, ExportNamedDeclaration)
            for spec in statement.specifiers
        }

        main_name = None
        for statement in program.body:
            if isinstance(statement, ExportDefaultDeclaration):
                main_name = self._extract_main(statement, by_name, result)

        for statement in program.body:
            if isinstance(statement, ExportNamedDeclaration) and statement.specifiers:
                for spec in statement.specifiers:
                    candidate = by_name.get(spec.local)
                    if candidate is not None and candidate.jsx is not None:
                        result.components.append((spec.exported, self._build(candidate)))
                continue

            for candidate in self._declared_in(statement, candidates):
                if candidate.jsx is None:
                    logger.debug(f"Skipping {candidate.name}: returns no JSX")
                    continue
                if not candidate.exported and candidate.name in (main_name, *re_exported):
                    continue
                result.components.append((candidate.name, self._build(candidate)))

        logger.debug(f"Extracted {len(result.components)} component(s)")

    @staticmethod
    def _declared_in(statement, candidates: list[_Candidate]) -> list[_Candidate]:
        declaration = statement.declaration if isinstance(statement, ExportNamedDeclaration) else statement
        if isinstance(declaration, VariableDeclaration):
            functions = {id(_function_init(d.init)) for d in declaration.declarations}
        elif isinstance(declaration, FunctionDeclaration):
            functions = {id(declaration)}
        else:
            return []
        return [c for c in candidates if id(c.function) in functions]

    def _extract_main(
        self,
        statement: ExportDefaultDeclaration,
        by_name: dict[str, _Candidate],
        result: ExtractedScenario,
    ) -> str | None:
        """Build ``main`` from the default export. Returns the local name it refers to."""
        declaration = statement.declaration
        name = None

        if isinstance(declaration, FunctionDeclaration):
            function = declaration
            self.ctx.local_components.add(declaration.name)
        else:
            node = unwrap(declaration)
            if isinstance(node, Identifier) and node.name in by_name:
                name = node.name
                function = by_name[name].function
            else:
                function = _function_init(node)

        if function is None:
            self.ctx.report(DiagnosticCode.MISSING_MAIN, "Default export must be a component function")
            return name

        jsx = component_jsx(function)
        if jsx is None:
            self.ctx.report(DiagnosticCode.MISSING_MAIN, "Default export does not return JSX")
            return name

        result.main = self.tree_builder.build(jsx, pattern_names(function.params))
        return name

    def _build(self, candidate: _Candidate) -> ComponentNode:
        return self.tree_builder.build(candidate.jsx, pattern_names(candidate.function.params))
