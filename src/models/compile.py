"""Compile request and response models.

These models define the HTTP interface of the compile endpoint. Field names
are camelCase on the wire to match the editor clients.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CompileRequest(BaseModel):
    """Request to compile a TSX scenario."""

    model_config = ConfigDict(populate_by_name=True)

    jsx_code: str = Field(..., alias="jsxCode", description="TSX scenario source")
    strict_mode: bool | None = Field(
        default=None, alias="strictMode", description="Treat unknown components as errors"
    )
    allow_unknown_components: bool | None = Field(
        default=None, alias="allowUnknownComponents", description="Pass unknown components through silently"
    )
    emit_default_styles: bool | None = Field(
        default=None, alias="emitDefaultStyles", description="Materialise registry default styles"
    )


class DiagnosticModel(BaseModel):
    """A single compile diagnostic."""

    code: str
    message: str
    severity: str
    line: int | None = None
    column: int | None = None


class CompileResponse(BaseModel):
    """Successful compile: the scenario document plus non-fatal warnings."""

    scenario: dict[str, Any]
    warnings: list[DiagnosticModel] = Field(default_factory=list)


class ComponentListResponse(BaseModel):
    """Registered component definitions."""

    components: list[dict[str, Any]]
    total: int
