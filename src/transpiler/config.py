"""Compile options."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from .registries.components import ComponentRegistry, create_default_registry

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class TranspilerConfig:
    """Options recognized by the compiler.

    strict_mode: unknown components are errors rather than warnings.
    allow_unknown_components: unknown components pass through silently.
    emit_default_styles: materialise registry default styles into ``style``.
    logger: sink for diagnostics; defaults to the pipeline module logger.
    """

    component_registry: ComponentRegistry = field(default_factory=create_default_registry)
    strict_mode: bool = False
    allow_unknown_components: bool = False
    emit_default_styles: bool = False
    logger: logging.Logger | None = None

    @classmethod
    def from_env(cls, **overrides) -> TranspilerConfig:
        """Build a config from SCENARIO_* environment variables."""
        options = {
            "strict_mode": _env_flag("SCENARIO_STRICT_MODE"),
            "allow_unknown_components": _env_flag("SCENARIO_ALLOW_UNKNOWN_COMPONENTS"),
            "emit_default_styles": _env_flag("SCENARIO_EMIT_DEFAULT_STYLES"),
        }
        options.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**options)
