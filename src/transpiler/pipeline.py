"""Scenario compile pipeline."""

from __future__ import annotations

import logging
import time

from .assembler import ScenarioAssembler
from .config import TranspilerConfig
from .context import CompilationContext
from .errors import CompilationError, Diagnostic, DiagnosticCode, ParseError, Severity
from .extractor import ScenarioExtractor
from .ir import TranspiledScenario
from .syntax.parser import SourceParser

logger = logging.getLogger(__name__)


class ScenarioCompiler:
    """Compiles TSX scenario sources to TranspiledScenario documents.

    Pipeline order:
    1. Parse source text into the typed syntax tree
    2. Extract key, components, stores and actions
    3. Assemble and validate the final document

    Each call builds its own context and parser, so one compiler instance
    can be shared between threads.
    """

    def __init__(self, config: TranspilerConfig | None = None):
        self.config = config or TranspilerConfig()
        self.sink = self.config.logger or logger

    def compile(self, source: str) -> TranspiledScenario | CompilationError:
        """Compile a scenario source.

        Never raises: every failure is returned as a CompilationError.

        Args:
            source: TSX source text

        Returns:
            The compiled scenario, or a CompilationError with its diagnostics
        """
        started = time.perf_counter()
        ctx = CompilationContext(config=self.config)

        try:
            result = self._run(source, ctx)
        except Exception as e:
            logger.exception("Unexpected error during scenario compilation")
            ctx.report(DiagnosticCode.INTERNAL_ERROR, f"Internal compiler error: {e}")
            result = CompilationError(ctx.diagnostics)

        for diagnostic in ctx.diagnostics:
            self._forward(diagnostic)

        elapsed_ms = (time.perf_counter() - started) * 1000
        if isinstance(result, TranspiledScenario):
            logger.info(f"Compiled scenario '{result.key}' in {elapsed_ms:.1f}ms")
        else:
            logger.info(f"Compilation failed with {len(result.errors)} error(s) in {elapsed_ms:.1f}ms")
        return result

    def _run(self, source: str, ctx: CompilationContext) -> TranspiledScenario | CompilationError:
        if source is None or not source.strip():
            ctx.report(DiagnosticCode.EMPTY_SOURCE, "Source is empty")
            return CompilationError(ctx.diagnostics)

        # Phase 1: Parse
        with _phase("parse"):
            try:
                program = SourceParser().parse(source)
            except ParseError as e:
                ctx.report(DiagnosticCode.SYNTAX_ERROR, str(e), line=e.line, column=e.column)
                return CompilationError(ctx.diagnostics)

        # Phase 2: Extract key, components, stores and actions
        with _phase("extract"):
            parts = ScenarioExtractor(ctx).extract(program)

        # Phase 3: Validate and assemble
        with _phase("assemble"):
            return ScenarioAssembler(ctx).assemble(parts)

    def _forward(self, diagnostic: Diagnostic) -> None:
        level = logging.ERROR if diagnostic.severity == Severity.ERROR else logging.WARNING
        self.sink.log(level, diagnostic.format())


class _phase:
    """Logs the duration of a pipeline phase at debug level."""

    def __init__(self, name: str):
        self.name = name

    def __enter__(self):
        self.started = time.perf_counter()
        return self

    def __exit__(self, *exc_info):
        elapsed_ms = (time.perf_counter() - self.started) * 1000
        logger.debug(f"Phase {self.name}: {elapsed_ms:.2f}ms")
        return False


def compile_scenario(source: str, config: TranspilerConfig | None = None) -> TranspiledScenario | CompilationError:
    """Compile a scenario source with the given options.

    Args:
        source: TSX source text
        config: Compile options (defaults to TranspilerConfig())

    Returns:
        TranspiledScenario on success, CompilationError otherwise
    """
    return ScenarioCompiler(config).compile(source)
