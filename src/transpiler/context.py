"""Compilation context for scenario compilation.

Accumulates diagnostics, stores, and action-id ordinals while the
extraction phases run. One context per compile call; nothing is shared
between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import TranspilerConfig
from .errors import Diagnostic, DiagnosticCode, Severity
from .ir import StoreDescriptor


@dataclass
class CompilationContext:
    """Accumulation context for all compilation artifacts."""

    config: TranspilerConfig = field(default_factory=TranspilerConfig)
    local_components: set[str] = field(default_factory=set)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    stores: list[StoreDescriptor] = field(default_factory=list)
    action_ordinals: dict[tuple[str, ...], int] = field(default_factory=dict)

    def report(
        self,
        code: DiagnosticCode,
        message: str,
        severity: Severity = Severity.ERROR,
        line: int | None = None,
        column: int | None = None,
    ) -> Diagnostic:
        """Record a diagnostic. Returns the recorded diagnostic."""
        diagnostic = Diagnostic(
            code=code,
            message=message,
            severity=severity,
            line=line or None,
            column=column or None,
        )
        self.diagnostics.append(diagnostic)
        return diagnostic

    def add_store(self, store: StoreDescriptor) -> None:
        """Add a store declaration. One entry per call site, no deduplication."""
        self.stores.append(store)

    def next_ordinal(self, signature: tuple[str, ...]) -> int:
        """Number of earlier actions with the same signature in this compile."""
        ordinal = self.action_ordinals.get(signature, 0)
        self.action_ordinals[signature] = ordinal + 1
        return ordinal

    def is_known_component(self, name: str) -> bool:
        return name in self.local_components or self.config.component_registry.is_registered(name)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)

    def has_code(self, code: DiagnosticCode) -> bool:
        return any(d.code == code for d in self.diagnostics)
