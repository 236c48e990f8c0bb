"""Shared test fixtures and helpers."""

import pytest

from src.transpiler import (
    CompilationError,
    TranspiledScenario,
    TranspilerConfig,
    compile_scenario,
)
from src.transpiler.context import CompilationContext
from src.transpiler.syntax import parse_source


def scenario_source(body: str, key: str = "test-scenario") -> str:
    """Prefix a source body with a SCENARIO_KEY export."""
    return f"export const SCENARIO_KEY = '{key}'\n\n{body}\n"


def compile_ok(source: str, **options) -> TranspiledScenario:
    """Compile and assert success.

    Args:
        source: TSX source
        **options: TranspilerConfig fields

    Returns:
        The compiled scenario
    """
    result = compile_scenario(source, TranspilerConfig(**options))
    if isinstance(result, CompilationError):
        pytest.fail(f"Expected success, got: {[d.format() for d in result.diagnostics]}")
    return result


def compile_err(source: str, **options) -> CompilationError:
    """Compile and assert failure."""
    result = compile_scenario(source, TranspilerConfig(**options))
    if not isinstance(result, CompilationError):
        pytest.fail(f"Expected CompilationError, got scenario {result.to_dict()}")
    return result


def first_expression(source: str):
    """The expression of the first statement of a source."""
    program = parse_source(source)
    return program.body[0].expression


def main_of(body: str, **options) -> dict:
    """Compile a body and return the wire form of ``main``."""
    return compile_ok(scenario_source(body), **options).to_dict()["main"]


def actions_of(body: str, **options) -> list[dict]:
    """Compile a body and return the wire form of the top-level actions."""
    return compile_ok(scenario_source(body), **options).to_dict().get("actions", [])


@pytest.fixture
def ctx() -> CompilationContext:
    """Fresh compilation context with default options."""
    return CompilationContext()
