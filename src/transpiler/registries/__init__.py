"""Registry modules for declarative mappings."""

from .components import (
    DEFAULT_COMPONENTS,
    ComponentDefinition,
    ComponentRegistry,
    create_default_registry,
)

__all__ = [
    "DEFAULT_COMPONENTS",
    "ComponentDefinition",
    "ComponentRegistry",
    "create_default_registry",
]
