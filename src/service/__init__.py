"""Compile service API."""

from src.service.compile_service import CompileService

__all__ = ["CompileService"]
