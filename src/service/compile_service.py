"""Compile service - runs the scenario compiler for the HTTP layer.

This service:
1. Builds compile options from the environment and per-request overrides
2. Runs the compile pipeline
3. Returns the scenario document or the CompilationError
"""

import logging
from dataclasses import dataclass, field

from src.transpiler import (
    CompilationError,
    ComponentRegistry,
    TranspiledScenario,
    TranspilerConfig,
    compile_scenario,
    create_default_registry,
)

logger = logging.getLogger(__name__)


@dataclass
class CompileService:
    """Compiles scenario sources with environment-derived defaults."""

    registry: ComponentRegistry = field(default_factory=create_default_registry)

    def config_for(
        self,
        strict_mode: bool | None = None,
        allow_unknown_components: bool | None = None,
        emit_default_styles: bool | None = None,
    ) -> TranspilerConfig:
        """Environment defaults with request overrides applied (None keeps the default)."""
        return TranspilerConfig.from_env(
            component_registry=self.registry,
            strict_mode=strict_mode,
            allow_unknown_components=allow_unknown_components,
            emit_default_styles=emit_default_styles,
        )

    def compile(self, source: str, **options) -> TranspiledScenario | CompilationError:
        """Compile a source.

        Args:
            source: TSX source text
            **options: strict_mode / allow_unknown_components / emit_default_styles overrides

        Returns:
            TranspiledScenario or CompilationError
        """
        result = compile_scenario(source, self.config_for(**options))
        if isinstance(result, CompilationError):
            logger.info(f"Compile rejected: {result.summary}")
        return result
