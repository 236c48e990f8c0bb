"""Builders for component trees and action descriptors."""

from .action_builder import ActionBuilder, generate_action_id
from .tree_builder import ComponentTreeBuilder, clean_jsx_text

__all__ = [
    "ActionBuilder",
    "ComponentTreeBuilder",
    "clean_jsx_text",
    "generate_action_id",
]
