"""Compile routes for scenario sources."""

import logging

from fastapi import APIRouter, HTTPException

from src.models.compile import CompileRequest, CompileResponse, ComponentListResponse
from src.service.compile_service import CompileService
from src.transpiler import CompilationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/compile", tags=["compile"])

_service = CompileService()


def get_service() -> CompileService:
    return _service


@router.post("", response_model=CompileResponse)
def compile_source(request: CompileRequest) -> CompileResponse:
    """Compile a TSX scenario to its JSON document.

    Returns 400 for blank sources and compilation errors (with the
    diagnostics in ``detail``), 500 for unexpected failures.
    """
    if not request.jsx_code.strip():
        raise HTTPException(status_code=400, detail="Validation failed")

    try:
        result = get_service().compile(
            request.jsx_code,
            strict_mode=request.strict_mode,
            allow_unknown_components=request.allow_unknown_components,
            emit_default_styles=request.emit_default_styles,
        )
    except Exception as e:
        logger.error(f"Compile failed unexpectedly - {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error during compilation")

    if isinstance(result, CompilationError):
        raise HTTPException(status_code=400, detail=result.to_dict())

    logger.info(f"Compiled scenario {result.key} with {len(result.warnings)} warning(s)")
    return CompileResponse(
        scenario=result.to_dict(),
        warnings=[w.to_dict() for w in result.warnings],
    )


@router.get("/components", response_model=ComponentListResponse)
def list_components() -> ComponentListResponse:
    """List the component definitions the compiler knows."""
    definitions = get_service().registry.to_list()
    return ComponentListResponse(components=definitions, total=len(definitions))
