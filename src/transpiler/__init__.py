"""TSX scenario to JSON compiler.

Compiles declarative UI scenarios written in TSX into a portable JSON
document that native rendering engines consume. Source is never executed;
the compiler only pattern-matches the syntax tree.

The compile pipeline:
  1. TSX source -> SourceParser -> typed syntax tree (syntax.nodes)
  2. ScenarioExtractor -> component trees, stores, actions, key and metadata
  3. ScenarioAssembler -> TranspiledScenario | CompilationError
  4. TranspiledScenario.to_json() -> wire document
"""

from .config import TranspilerConfig
from .errors import (
    CompilationError,
    ComponentNotFoundError,
    Diagnostic,
    DiagnosticCode,
    ParseError,
    RegistrationError,
    Severity,
    TranspilerError,
    UnsupportedExpressionError,
)
from .ir import (
    ActionDescriptor,
    ActionType,
    ComponentNode,
    StoreDescriptor,
    StoreScope,
    StoreStorage,
    TranspiledScenario,
)
from .pipeline import ScenarioCompiler, compile_scenario
from .registries import ComponentDefinition, ComponentRegistry, create_default_registry
from .serializer import serialize

__all__ = [
    "compile_scenario",
    "ScenarioCompiler",
    "TranspilerConfig",
    "TranspiledScenario",
    "ComponentNode",
    "StoreDescriptor",
    "StoreScope",
    "StoreStorage",
    "ActionDescriptor",
    "ActionType",
    "ComponentDefinition",
    "ComponentRegistry",
    "create_default_registry",
    "serialize",
    "CompilationError",
    "Diagnostic",
    "DiagnosticCode",
    "Severity",
    "TranspilerError",
    "ParseError",
    "RegistrationError",
    "ComponentNotFoundError",
    "UnsupportedExpressionError",
]
