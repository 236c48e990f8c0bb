"""Scenario assembler.

Validates the extracted parts and combines them into the final document.
All structural problems are collected before failing, so a single
CompilationError reports every error found in the file.
"""

from __future__ import annotations

import logging
import re

from .context import CompilationContext
from .errors import CompilationError, DiagnosticCode
from .extractor import ExtractedScenario
from .ir import TranspiledScenario

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
MAX_KEY_LENGTH = 100


def validate_key(key: str) -> str | None:
    """Problem with a scenario key, or None when it is valid."""
    if not 1 <= len(key) <= MAX_KEY_LENGTH:
        return f"Scenario key must be 1-{MAX_KEY_LENGTH} characters, got {len(key)}"
    if not KEY_PATTERN.match(key):
        return f"Scenario key '{key}' may only contain letters, digits, '_' and '-'"
    return None


class ScenarioAssembler:
    """Builds a TranspiledScenario, or the CompilationError explaining why not."""

    def __init__(self, ctx: CompilationContext):
        self.ctx = ctx

    def assemble(self, parts: ExtractedScenario) -> TranspiledScenario | CompilationError:
        ctx = self.ctx

        if parts.main is None:
            if not ctx.has_code(DiagnosticCode.MISSING_MAIN):
                ctx.report(DiagnosticCode.MISSING_MAIN, "No default-exported component found")
        elif not parts.main.type:
            ctx.report(DiagnosticCode.EMPTY_MAIN, "Main component must render a single root element, not a fragment")

        if parts.key is None:
            if not ctx.has_code(DiagnosticCode.INVALID_KEY):
                ctx.report(DiagnosticCode.MISSING_KEY, "Scenario must export SCENARIO_KEY or SCENARIO.key")
        else:
            problem = validate_key(parts.key)
            if problem is not None:
                ctx.report(DiagnosticCode.INVALID_KEY, problem)

        components = {}
        for name, node in parts.components:
            if name in components:
                ctx.report(
                    DiagnosticCode.DUPLICATE_COMPONENT_NAME,
                    f"Duplicate component name: {name} (exported and helper components share one namespace)",
                )
                continue
            if not node.type:
                ctx.report(DiagnosticCode.MISSING_COMPONENT_TYPE, f"Component '{name}' has no root element type")
            components[name] = node

        if ctx.has_errors:
            return CompilationError(ctx.diagnostics)

        scenario = TranspiledScenario(
            key=parts.key,
            version=parts.version,
            build_number=parts.build_number,
            main=parts.main,
            components=components,
            stores=parts.stores,
            actions=parts.actions,
            warnings=tuple(ctx.warnings),
        )
        logger.debug(
            f"Assembled '{scenario.key}': {len(components)} component(s), "
            f"{len(parts.stores)} store(s), {len(parts.actions)} action(s)"
        )
        return scenario
