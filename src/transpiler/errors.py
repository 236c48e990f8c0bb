"""Errors and diagnostics for scenario compilation.

Internal failures are raised as TranspilerError subclasses and converted to
structured Diagnostic records before they leave the compile pipeline.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class DiagnosticCode(str, Enum):
    """Machine-readable diagnostic codes."""

    SYNTAX_ERROR = "SYNTAX_ERROR"
    EMPTY_SOURCE = "EMPTY_SOURCE"
    MISSING_KEY = "MISSING_KEY"
    INVALID_KEY = "INVALID_KEY"
    INVALID_METADATA = "INVALID_METADATA"
    MISSING_MAIN = "MISSING_MAIN"
    EMPTY_MAIN = "EMPTY_MAIN"
    MISSING_COMPONENT_TYPE = "MISSING_COMPONENT_TYPE"
    DUPLICATE_COMPONENT_NAME = "DUPLICATE_COMPONENT_NAME"
    UNKNOWN_COMPONENT = "UNKNOWN_COMPONENT"
    MIXED_TEXT_CHILDREN = "MIXED_TEXT_CHILDREN"
    UNSUPPORTED_ACTION_EXPRESSION = "UNSUPPORTED_ACTION_EXPRESSION"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class Severity(str, Enum):
    """Diagnostic severity. Only errors abort a compile."""

    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """A single compile diagnostic."""

    model_config = ConfigDict(frozen=True)

    code: DiagnosticCode
    message: str
    severity: Severity = Severity.ERROR
    line: int | None = None
    column: int | None = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def format(self) -> str:
        """Render as a single human-readable line."""
        location = ""
        if self.line is not None:
            location = f" (line {self.line}"
            if self.column is not None:
                location += f", column {self.column}"
            location += ")"
        return f"{self.severity.value.upper()} {self.code.value}: {self.message}{location}"

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class TranspilerError(Exception):
    """Base class for all compiler errors."""


class ParseError(TranspilerError):
    """Source text could not be parsed as TSX."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        self.line = line
        self.column = column
        super().__init__(message)


class RegistrationError(TranspilerError):
    """A component definition could not be registered."""


class ComponentNotFoundError(TranspilerError):
    """Lookup of a component name that is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Component not found: {name}")


class UnsupportedExpressionError(TranspilerError):
    """A DSL call does not match any recognized static shape."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        super().__init__(message)


class CompilationError(TranspilerError):
    """Aggregated compile failure carrying an ordered list of diagnostics.

    Returned (not raised) by compile_scenario(). Always holds at least one
    error-severity diagnostic.
    """

    def __init__(self, diagnostics: list[Diagnostic]):
        if not diagnostics:
            raise ValueError("CompilationError requires at least one diagnostic")
        self.diagnostics: tuple[Diagnostic, ...] = tuple(diagnostics)
        super().__init__(self.summary)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def codes(self) -> list[DiagnosticCode]:
        return [d.code for d in self.diagnostics]

    @property
    def summary(self) -> str:
        errors = self.errors or list(self.diagnostics)
        if len(errors) == 1:
            return f"Compilation failed: {errors[0].message}"
        return f"Compilation failed with {len(errors)} errors: {errors[0].message}"

    def to_dict(self) -> dict:
        return {
            "error": self.summary,
            "errors": [d.to_dict() for d in self.diagnostics],
        }
